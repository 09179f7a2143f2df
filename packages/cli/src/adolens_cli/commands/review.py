"""review command: run an AI review over a saved pull request page."""

from __future__ import annotations

import click
from rich.console import Console

from adolens_core.ado.client import AdoClient
from adolens_core.ado.context import repo_slug, resolve_context
from adolens_core.config import PROVIDERS, api_key_env_var, build_settings
from adolens_core.extraction.chain import ExtractionChain
from adolens_core.models import DEPTHS, SCOPES, ReviewStats
from adolens_core.page.soup import SoupPage
from adolens_core.presentation import Presenter, format_issue_comment
from adolens_core.reviewer import ReviewOrchestrator, default_model, get_reviewer
from adolens_store.models import IssueRecord, ReviewRecord

console = Console()


def _stats_to_record(stats: ReviewStats, presenter: Presenter, page: SoupPage, scope: str, model: str) -> ReviewRecord:
    """Map the stats of a finished pass and the panel's issues to a ReviewRecord for the store."""
    context = resolve_context(page.url)
    return ReviewRecord(
        page_url=page.url,
        repo=repo_slug(context) if context else "",
        pr_number=context.change_request_id if context else None,
        reviewer_model=model,
        scope=scope,
        files=stats.files,
        critical=stats.critical,
        warnings=stats.warnings,
        suggestions=stats.suggestions,
        issues=[
            IssueRecord(
                file=e.filename,
                line=str(e.issue.line or ""),
                severity=e.issue.severity,
                category=e.issue.category,
                title=e.issue.title,
            )
            for e in presenter.panel.entries
            if e.issue is not None
        ],
    )


def _build_client(config: dict) -> AdoClient:
    from adolens_cli.auth import resolve_ado_token

    resolved = resolve_ado_token()
    if resolved is None:
        console.print("[yellow]No Azure DevOps credentials found; trying anonymous access.[/yellow]")
        return AdoClient(timeout=config["request_timeout"])
    token, kind = resolved
    return AdoClient(token=token, token_kind=kind, timeout=config["request_timeout"])


@click.command("review")
@click.option(
    "--html",
    "html_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Saved HTML of the pull request page.",
)
@click.option("--url", default="", help="Address of the page, used to fetch full file content from Azure DevOps.")
@click.option("--scope", type=click.Choice(SCOPES), default="current", show_default=True, help="What to review.")
@click.option("--selection", default="", help="Selected text, reviewed when --scope selected.")
@click.option("--provider", type=click.Choice(PROVIDERS), default=None, help="Model provider. Overrides config file.")
@click.option("--model", default=None, help="Model id. Overrides config file.")
@click.option("--depth", type=click.Choice(DEPTHS), default=None, help="Review depth. Overrides config file.")
@click.option(
    "--output",
    "output_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write the page with inline AI comments to this file.",
)
@click.option(
    "--comments-out",
    "comments_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write issues as Markdown PR comments to this file.",
)
@click.option("--no-remote", is_flag=True, help="Never call the Azure DevOps API; scrape the page only.")
@click.pass_context
def review_cmd(
    ctx,
    html_path: str,
    url: str,
    scope: str,
    selection: str,
    provider: str | None,
    model: str | None,
    depth: str | None,
    output_path: str | None,
    comments_path: str | None,
    no_remote: bool,
):
    """Review the code changes on a saved Azure DevOps pull request page.

    \b
    Environment variables:
      GEMINI_API_KEY       Required for --provider gemini (default)
      OPENAI_API_KEY       Required for --provider openai
      ANTHROPIC_API_KEY    Required for --provider anthropic
      AZURE_DEVOPS_PAT     Personal access token (or use `az login`)
    """
    from adolens_core.config import load_config

    obj = ctx.obj or {}
    config = load_config(
        obj.get("config_path", ".adolens.yml"),
        cli_overrides={"provider": provider, "model": model, "review_depth": depth},
    )
    try:
        settings = build_settings(config)
    except ValueError as e:
        raise click.UsageError(str(e))
    if not settings.api_key:
        raise click.UsageError(f"{api_key_env_var(settings.provider)} environment variable is not set.")

    page = SoupPage.from_file(html_path, url=url, selection=selection)
    client = None
    if not no_remote and resolve_context(url) is not None:
        client = _build_client(config)

    presenter = Presenter(console=console)
    store = obj.get("store")
    model_name = settings.model_id or default_model(settings.provider)

    def persist(stats: ReviewStats) -> None:
        if store is not None:
            store.save(_stats_to_record(stats, presenter, page, scope, model_name))

    orchestrator = ReviewOrchestrator(
        chain=ExtractionChain.default(client),
        presenter=presenter,
        reviewer_factory=lambda s: get_reviewer(s, config),
        stats_sink=persist,
        wait_timeout=config["wait_timeout"],
    )
    outcome = orchestrator.start_review(scope, settings, page)

    if output_path:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(page.render())
        console.print(f"Annotated page written to [bold]{output_path}[/bold]")

    if comments_path and presenter.has_panel:
        comments = [format_issue_comment(e.filename, e.issue) for e in presenter.panel.entries if e.issue is not None]
        with open(comments_path, "w", encoding="utf-8") as f:
            f.write("\n\n".join(comments) + ("\n" if comments else ""))
        console.print(f"{len(comments)} comment(s) written to [bold]{comments_path}[/bold]")

    if not outcome.success:
        raise click.ClickException(outcome.error or "Review failed")
