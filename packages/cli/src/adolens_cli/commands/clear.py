"""clear command: remove AI comments from a page snapshot and reset stored stats."""

from __future__ import annotations

import click
from rich.console import Console

from adolens_core.page.soup import SoupPage
from adolens_core.presentation import Presenter

console = Console()


@click.command("clear")
@click.option(
    "--html",
    "html_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Annotated page to strip AI comments from.",
)
@click.option(
    "--output",
    "output_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Where to write the cleaned page. Defaults to overwriting --html.",
)
@click.option("--keep-history", is_flag=True, help="Do not reset the stored review history.")
@click.pass_context
def clear_cmd(ctx, html_path: str | None, output_path: str | None, keep_history: bool):
    """Clear AI comments and reset review statistics."""
    page = SoupPage.from_file(html_path) if html_path else None
    removed = Presenter(console=console).clear(page)

    if page is not None:
        target = output_path or html_path
        with open(target, "w", encoding="utf-8") as f:
            f.write(page.render())
        console.print(f"Removed {removed} inline comment(s); wrote [bold]{target}[/bold]")

    store = ctx.obj.get("store") if ctx.obj else None
    if store is not None and not keep_history:
        deleted = store.clear()
        console.print(f"Deleted {deleted} stored review(s).")
