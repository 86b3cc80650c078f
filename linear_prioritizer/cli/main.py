"""Main CLI entry point."""

import logging

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ..config import PrioritizerConfig, get_api_key, load_config
from ..diff import compare_scoring
from ..exceptions import CacheWriteError, ConfigurationError, PrioritizerError
from ..linear_client.client import LinearClient
from ..linear_client.fetcher import IssueFetcher
from ..linear_client.updater import LinearUpdater, sort_order_for_rank
from ..scoring.models import ScoredIssue
from ..scoring.scorer import IssueScorer
from ..storage.manager import CacheManager
from .display import (
    display_cache_metadata,
    display_details,
    display_ranking,
    display_ranking_changes,
    display_statistics,
    truncate,
)
from .options import (
    DETAILS_OPTION,
    DRY_RUN_OPTION,
    FORCE_REFRESH_OPTION,
    LIMIT_OPTION,
    NO_CACHE_OPTION,
    STATS_OPTION,
    VERBOSE_OPTION,
)

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="linear-prioritizer",
    help="Score and reorder a Linear team's backlog",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)
console = Console()

ENV_VARS = [
    ("LINEAR_API_KEY", "Required", "Your Linear personal API key"),
    ("LINEAR_TEAM_ID", "Required", "ID of the team whose backlog is prioritized"),
    ("LINEAR_BACKLOG_STATE_ID", "Required", "ID of the backlog workflow state"),
    ("LINEAR_TARGET_PROJECT", "Optional", "Project whose issues are fully relevant"),
    ("LINEAR_RELEVANCE_KEYWORDS", "Optional", "Comma-separated relevance keywords"),
    ("LINEAR_EMPLOYEE_ALIASES", "Optional", "Comma-separated internal emails/names"),
    ("LINEAR_CACHE_TTL_HOURS", "Optional", "Hours a cache stays valid (default: 24)"),
    ("LINEAR_CACHE_DIR", "Optional", "Cache directory (default: .cache)"),
    ("LINEAR_WEIGHT_RELEVANCE", "Optional", "Final score weight (default: 0.5)"),
    ("LINEAR_WEIGHT_VALUE", "Optional", "Final score weight (default: 0.2)"),
    ("LINEAR_WEIGHT_COMPLEXITY", "Optional", "Final score weight (default: 0.3)"),
    ("LINEAR_WEIGHT_PRIORITY", "Optional", "Value score weight (default: 0.5)"),
    ("LINEAR_WEIGHT_RECENCY", "Optional", "Value score weight (default: 0.3)"),
    ("LINEAR_WEIGHT_INTERACTIONS", "Optional", "Value score weight (default: 0.2)"),
]


@app.callback()
def main(verbose: bool = VERBOSE_OPTION) -> None:
    """Score and reorder a Linear team's backlog."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_config() -> PrioritizerConfig:
    try:
        config = load_config()
    except ConfigurationError as e:
        console.print(f"❌ [red]Configuration error: {e}[/red]")
        console.print("Run 'linear-prioritizer env-help' for more information.")
        raise typer.Exit(1)
    if not config.relevance_keywords:
        console.print(
            "⚠️  [yellow]No relevance keywords configured. "
            "Relevance scores will be 0 outside the target project.[/yellow]"
        )
    return config


def _create_client() -> LinearClient:
    try:
        return LinearClient(api_key=get_api_key())
    except ConfigurationError as e:
        console.print(f"❌ [red]Configuration error: {e}[/red]")
        raise typer.Exit(1)


def _cache_for(config: PrioritizerConfig) -> CacheManager:
    return CacheManager(cache_dir=config.cache_dir, ttl_hours=config.cache_ttl_hours)


def _run_scoring(
    config: PrioritizerConfig,
    cache: CacheManager,
    client: LinearClient,
    no_cache: bool,
    force_refresh: bool,
    rescore: bool = False,
) -> list[ScoredIssue]:
    """Fetch and score issues, reporting progress on the console."""
    fetcher = IssueFetcher(
        client, config, cache, use_cache=not no_cache, force_refresh=force_refresh
    )
    with console.status("[blue]Fetching backlog issues...[/blue]"):
        try:
            issues = fetcher.fetch_issues()
        except CacheWriteError as e:
            console.print(f"⚠️  [yellow]Could not cache issues: {e}[/yellow]")
            issues = e.result or []

    if not issues:
        console.print("[yellow]No backlog issues found.[/yellow]")
        return []
    console.print(f"✅ Found {len(issues)} backlog issues")

    scorer = IssueScorer(
        config,
        cache=cache,
        use_cache=not no_cache,
        force_refresh=force_refresh or rescore,
    )
    with console.status("[blue]Scoring issues...[/blue]") as status:

        def progress(index: int, total: int, issue: object) -> None:
            identifier = getattr(issue, "identifier", "")
            status.update(f"[blue]Scoring issue {index}/{total}: {identifier}[/blue]")

        try:
            scored = scorer.score_issues(issues, progress=progress)
        except CacheWriteError as e:
            console.print(f"⚠️  [yellow]Could not cache scores: {e}[/yellow]")
            scored = e.result or []

    console.print(f"✅ Scored {len(scored)} issues")
    return scored


@app.command(context_settings={"help_option_names": ["-h", "--help"]})
def score(
    no_cache: bool = NO_CACHE_OPTION,
    force_refresh: bool = FORCE_REFRESH_OPTION,
    details: bool = DETAILS_OPTION,
    stats: bool = STATS_OPTION,
    limit: int | None = LIMIT_OPTION,
) -> None:
    """Fetch issues if needed, compute scores and display the ranking.

    Examples:
        linear-prioritizer score
        linear-prioritizer score --force-refresh --stats
        linear-prioritizer score --details --limit 10
    """
    config = _load_config()
    cache = _cache_for(config)

    with _create_client() as client:
        try:
            scored = _run_scoring(config, cache, client, no_cache, force_refresh)
        except PrioritizerError as e:
            console.print(f"❌ [red]Error: {e}[/red]")
            raise typer.Exit(1)

    if not scored:
        return

    display_ranking(console, scored, limit=limit)
    if details:
        display_details(console, scored, limit=limit)
    if stats:
        display_statistics(console, scored)

    console.print(
        "\n[yellow]Issues scored but not updated in Linear.[/yellow] "
        "Run 'linear-prioritizer update-linear' to apply this order."
    )


@app.command(context_settings={"help_option_names": ["-h", "--help"]})
def compare(
    no_cache: bool = NO_CACHE_OPTION,
    force_refresh: bool = FORCE_REFRESH_OPTION,
    limit: int | None = LIMIT_OPTION,
) -> None:
    """Rescore issues and compare the ranking with the previous run."""
    config = _load_config()
    cache = _cache_for(config)

    previous = cache.load_scored_issues(ignore_expiry=True)
    if previous:
        console.print(
            f"Loaded previous scoring results ({len(previous)} issues) for comparison."
        )
    else:
        console.print("[yellow]No previous scoring results to compare with.[/yellow]")

    with _create_client() as client:
        try:
            scored = _run_scoring(
                config, cache, client, no_cache, force_refresh, rescore=True
            )
        except PrioritizerError as e:
            console.print(f"❌ [red]Error: {e}[/red]")
            raise typer.Exit(1)

    if not scored:
        return

    changes = compare_scoring(previous, scored) if previous else []
    if previous:
        display_ranking_changes(console, changes)
    display_ranking(console, scored, changes=changes, limit=limit)


@app.command(
    name="update-linear", context_settings={"help_option_names": ["-h", "--help"]}
)
def update_linear(
    no_cache: bool = NO_CACHE_OPTION,
    force_refresh: bool = FORCE_REFRESH_OPTION,
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Score issues and write the resulting order to Linear."""
    config = _load_config()
    cache = _cache_for(config)

    with _create_client() as client:
        try:
            scored = _run_scoring(config, cache, client, no_cache, force_refresh)
        except PrioritizerError as e:
            console.print(f"❌ [red]Error: {e}[/red]")
            raise typer.Exit(1)

        if not scored:
            return

        if dry_run:
            _print_planned_order(scored)
            return

        updated = _apply_order(client, scored)

    console.print(f"✅ [green]Updated sort order of {updated} issues[/green]")


def _print_planned_order(scored: list[ScoredIssue]) -> None:
    table = Table(title="Planned Sort Orders (dry run)")
    table.add_column("Issue", style="cyan")
    table.add_column("Title")
    table.add_column("Sort Order", justify="right")
    for rank, item in enumerate(scored, start=1):
        table.add_row(
            item.issue.identifier,
            escape(truncate(item.issue.title)),
            f"{sort_order_for_rank(rank):g}",
        )
    console.print(table)


def _apply_order(client: LinearClient, scored: list[ScoredIssue]) -> int:
    updater = LinearUpdater(client)
    try:
        with console.status("[blue]Updating issue order in Linear...[/blue]") as st:

            def progress(rank: int, total: int, item: ScoredIssue) -> None:
                st.update(
                    f"[blue]Updating issues ({rank}/{total}): "
                    f"{item.issue.identifier}[/blue]"
                )

            return updater.update_issue_order(scored, progress=progress)
    except PrioritizerError as e:
        console.print(f"❌ [red]Error updating issue order: {e}[/red]")
        raise typer.Exit(1)


@app.command(context_settings={"help_option_names": ["-h", "--help"]})
def reset(
    issues_only: bool = typer.Option(
        False, "--issues-only", help="Clear only the fetched issues cache"
    ),
    scoring_only: bool = typer.Option(
        False, "--scoring-only", help="Clear only the scoring cache"
    ),
) -> None:
    """Clear cached issues and scores."""
    if issues_only and scoring_only:
        console.print(
            "❌ [red]Error: --issues-only and --scoring-only are exclusive[/red]"
        )
        raise typer.Exit(1)

    config = _load_config()
    cache = _cache_for(config)

    if issues_only:
        cache.clear_issues_cache()
        console.print("✅ Issues cache cleared")
    elif scoring_only:
        cache.clear_scoring_cache()
        console.print("✅ Scoring cache cleared")
    else:
        cache.clear_all()
        console.print("✅ All caches cleared")


@app.command(
    name="cache-details", context_settings={"help_option_names": ["-h", "--help"]}
)
def cache_details() -> None:
    """Show metadata and validity of both caches."""
    config = _load_config()
    cache = _cache_for(config)

    issues_valid = cache.is_issues_cache_valid(config.team_id, config.backlog_state_id)
    display_cache_metadata(
        console,
        "Issues Cache",
        cache.get_issues_metadata(),
        config.cache_ttl_hours,
        issues_valid,
    )

    scoring_valid = cache.is_scoring_cache_valid(
        config.team_id, config.backlog_state_id, config.relevance_keywords
    )
    display_cache_metadata(
        console,
        "Scoring Cache",
        cache.get_scoring_metadata(),
        config.cache_ttl_hours,
        scoring_valid,
    )


@app.command(
    name="score-details", context_settings={"help_option_names": ["-h", "--help"]}
)
def score_details(limit: int | None = LIMIT_OPTION) -> None:
    """Show the scoring breakdown stored in the scoring cache."""
    config = _load_config()
    cache = _cache_for(config)

    scored = cache.load_scored_issues()
    if not scored:
        console.print("❌ [red]No scored issues found in cache.[/red]")
        console.print("Run 'linear-prioritizer score' to compute scores first.")
        raise typer.Exit(1)

    display_details(console, scored, limit=limit)
    display_statistics(console, scored)


@app.command(name="find-ids", context_settings={"help_option_names": ["-h", "--help"]})
def find_ids() -> None:
    """List teams, workflow states and projects with their IDs."""
    try:
        with _create_client() as client, console.status(
            "[blue]Fetching teams from Linear...[/blue]"
        ):
            teams = client.list_teams()
    except PrioritizerError as e:
        console.print(f"❌ [red]Error fetching Linear information: {e}[/red]")
        raise typer.Exit(1)

    if not teams:
        console.print("[yellow]No teams found.[/yellow]")
        return

    for team in teams:
        table = Table(title=f"Team: {team.name} ({team.id})")
        table.add_column("Kind", style="cyan")
        table.add_column("Name")
        table.add_column("ID", style="green")
        for state in team.states:
            table.add_row("Workflow State", state.name, state.id)
        for project in team.projects:
            table.add_row("Project", project.name, project.id)
        console.print(table)


@app.command(name="env-help", context_settings={"help_option_names": ["-h", "--help"]})
def env_help() -> None:
    """Describe the environment variables used for configuration."""
    table = Table(title="Environment Variables")
    table.add_column("Variable", style="cyan")
    table.add_column("Required")
    table.add_column("Description")
    for name, required, description in ENV_VARS:
        table.add_row(name, required, description)
    console.print(table)
    console.print("Variables can also be placed in a .env file.")


@app.command(context_settings={"help_option_names": ["-h", "--help"]})
def version() -> None:
    """Show version information."""
    from linear_prioritizer import __version__

    console.print(f"Linear Backlog Prioritizer v{__version__}")


if __name__ == "__main__":
    app()
