"""CLI entry point for adolens.

Commands:
  review   run an AI review over a saved Azure DevOps pull request page
  stats    latest review statistics from the configured store
  history  past review records from the configured store
  clear    strip AI comments from a page snapshot and reset stored stats
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from adolens_cli.commands.clear import clear_cmd
from adolens_cli.commands.history import history_cmd
from adolens_cli.commands.review import review_cmd
from adolens_cli.commands.stats import stats_cmd

console = Console()


def _build_store(config: dict):
    """Instantiate the configured store from .adolens.yml settings.

    Store selection:
      store: sqlite → SQLiteStore   (store_path or .adolens.db)
      store: json   → JsonFileStore (store_path or .adolens_history.json)
      (default)     → NoOpStore     (no persistence)
    """
    from adolens_store.noop import NoOpStore

    store_type = config.get("store", "noop")

    if store_type == "sqlite":
        from adolens_store.sqlite import SQLiteStore

        return SQLiteStore(db_path=config.get("store_path") or ".adolens.db")

    if store_type == "json":
        from adolens_store.jsonfile import JsonFileStore

        return JsonFileStore(path=config.get("store_path") or ".adolens_history.json")

    if store_type not in (None, "noop"):
        console.print(f"[yellow]Unknown store {store_type!r}. Falling back to no store.[/yellow]")
    return NoOpStore()


@click.group()
@click.version_option(
    version=importlib.metadata.version("adolens"),
    prog_name="adolens",
)
@click.option(
    "--config",
    "config_path",
    default=".adolens.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="ADOLENS_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """AI code reviewer for Azure DevOps pull requests."""
    from adolens_core.config import load_config

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, rich_tracebacks=True)],
        )

    ctx.ensure_object(dict)

    config = load_config(config_path)
    store = _build_store(config)
    ctx.obj["store"] = store
    ctx.obj["config"] = config
    ctx.obj["config_path"] = config_path
    ctx.call_on_close(store.close)


main.add_command(review_cmd)
main.add_command(stats_cmd)
main.add_command(history_cmd)
main.add_command(clear_cmd)
