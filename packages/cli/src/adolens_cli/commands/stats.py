"""stats command: latest review statistics plus severity totals."""

from __future__ import annotations

from collections import Counter

import click
from rich.console import Console
from rich.table import Table

console = Console()

_SEV_STYLE = {"critical": "red", "warning": "yellow", "suggestion": "blue"}


@click.command("stats")
@click.option("--repo", default=None, help="Azure DevOps repository (org/project/repo).")
@click.option("--top", default=10, show_default=True, help="Number of most flagged files to show.")
@click.pass_context
def stats_cmd(ctx, repo: str | None, top: int):
    """Show the statistics of the last review and totals across the stored history."""
    from adolens_store.noop import NoOpStore

    store = ctx.obj.get("store") if ctx.obj else None
    if store is None or isinstance(store, NoOpStore):
        raise click.UsageError("No store configured. Add 'store: sqlite' or 'store: json' to .adolens.yml.")

    records = store.list_reviews(repo)
    if not records:
        console.print("[yellow]No review records found.[/yellow]")
        return

    latest = records[-1]
    title = f" for [cyan]{repo}[/cyan]" if repo else ""
    console.print(f"\n[bold]Last review{title}[/bold]  ({latest.reviewed_at[:19].replace('T', ' ')})")
    console.print(f"  Files reviewed: {latest.files}")
    console.print(f"  [red]Critical:[/red]     {latest.critical}")
    console.print(f"  [yellow]Warnings:[/yellow]     {latest.warnings}")
    console.print(f"  [blue]Suggestions:[/blue]  {latest.suggestions}")

    totals = {
        "critical": sum(r.critical for r in records),
        "warning": sum(r.warnings for r in records),
        "suggestion": sum(r.suggestions for r in records),
    }
    total_issues = sum(totals.values())

    sev_table = Table(title=f"Severity Breakdown ({len(records)} reviews)", show_header=True)
    sev_table.add_column("Severity", style="bold")
    sev_table.add_column("Count", justify="right")
    sev_table.add_column("% of total", justify="right")
    for sev, count in totals.items():
        pct = f"{count / total_issues * 100:.1f}%" if total_issues else "0%"
        style = _SEV_STYLE[sev]
        sev_table.add_row(f"[{style}]{sev}[/{style}]", str(count), pct)
    console.print(sev_table)

    file_counter: Counter[str] = Counter(issue.file for r in records for issue in r.issues)
    if file_counter:
        file_table = Table(title=f"Top {top} Most Flagged Files", show_header=True)
        file_table.add_column("File")
        file_table.add_column("Issues", justify="right")
        for file_path, count in file_counter.most_common(top):
            file_table.add_row(file_path, str(count))
        console.print(file_table)
