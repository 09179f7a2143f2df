"""history command: display past review records from the store."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

console = Console()


@click.command("history")
@click.option("--repo", default=None, help="Azure DevOps repository (org/project/repo).")
@click.option("--pr", "pr_number", type=int, default=None, help="Filter by pull request id.")
@click.option("--limit", default=20, show_default=True, help="Maximum number of records to show.")
@click.pass_context
def history_cmd(ctx, repo: str | None, pr_number: int | None, limit: int):
    """Show past AI review records, most recent first."""
    from adolens_store.noop import NoOpStore

    store = ctx.obj.get("store") if ctx.obj else None
    if store is None or isinstance(store, NoOpStore):
        raise click.UsageError("No store configured. Add 'store: sqlite' or 'store: json' to .adolens.yml.")

    records = store.list_reviews(repo, pr_number=pr_number)
    if not records:
        console.print("[yellow]No review records found.[/yellow]")
        return

    records = list(reversed(records))[:limit]

    table = Table(title=f"Review History{f' - {repo}' if repo else ''}", show_header=True, header_style="bold cyan")
    table.add_column("PR", style="bold", width=8)
    table.add_column("Repository", max_width=40)
    table.add_column("Scope", width=9)
    table.add_column("Files", justify="right", width=6)
    table.add_column("Critical", justify="right", style="red", width=9)
    table.add_column("Warnings", justify="right", style="yellow", width=9)
    table.add_column("Suggestions", justify="right", style="blue", width=12)
    table.add_column("Reviewed At", width=20)

    for r in records:
        table.add_row(
            f"#{r.pr_number}" if r.pr_number is not None else "-",
            r.repo or r.page_url[:40],
            r.scope,
            str(r.files),
            str(r.critical),
            str(r.warnings),
            str(r.suggestions),
            r.reviewed_at[:19].replace("T", " "),
        )

    console.print(table)
