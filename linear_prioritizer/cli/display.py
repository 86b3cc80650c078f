"""Console rendering of rankings, details and statistics."""

from collections import Counter
from collections.abc import Sequence
from datetime import datetime, timezone

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..diff import create_change_map
from ..scoring.models import RankingChange, ScoredIssue
from ..storage.models import CacheMetadata, ScoringCacheMetadata

TITLE_WIDTH = 50


def truncate(text: str, width: int = TITLE_WIDTH) -> str:
    return text if len(text) <= width else f"{text[:width]}..."


def change_indicator(change: RankingChange | None) -> str:
    if change is None:
        return ""
    if change.change > 0:
        return f"[green]↑{change.change}[/green]"
    return f"[red]↓{abs(change.change)}[/red]"


def display_ranking(
    console: Console,
    scored_issues: Sequence[ScoredIssue],
    changes: Sequence[RankingChange] = (),
    limit: int | None = None,
) -> None:
    """Print the ranked issues, with rank movement when changes are given."""
    shown = list(scored_issues[:limit] if limit else scored_issues)
    change_map = create_change_map(changes)

    table = Table(
        title=f"Sorted Issues (showing {len(shown)} of {len(scored_issues)})"
    )
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Issue", style="bold")
    table.add_column("Title")
    table.add_column("Score", style="green", justify="right")
    if change_map:
        table.add_column("Change", justify="right")

    for rank, item in enumerate(shown, start=1):
        row = [
            str(rank),
            item.issue.identifier,
            escape(truncate(item.issue.title)),
            f"{item.final_score:.1f}",
        ]
        if change_map:
            row.append(change_indicator(change_map.get(item.issue.id)))
        table.add_row(*row)

    console.print(table)


def display_ranking_changes(
    console: Console, changes: Sequence[RankingChange], max_changes: int = 10
) -> None:
    """Print the largest rank movements."""
    if not changes:
        console.print("\n[yellow]No ranking changes detected.[/yellow]")
        return

    console.print(
        f"\n[yellow]Most Significant Ranking Changes "
        f"({min(len(changes), max_changes)} of {len(changes)}):[/yellow]"
    )
    for change in changes[:max_changes]:
        if change.change > 0:
            movement = f"[green]↑ Moved up {change.change} positions[/green]"
        else:
            movement = f"[red]↓ Moved down {abs(change.change)} positions[/red]"
        title = escape(truncate(change.title))
        console.print(f"[cyan]{change.identifier}[/cyan] {title}")
        console.print(
            f"  {movement} (from #{change.old_rank} to #{change.new_rank})"
        )


def display_details(
    console: Console, scored_issues: Sequence[ScoredIssue], limit: int | None = None
) -> None:
    """Print the scoring breakdown of each issue."""
    shown = scored_issues[:limit] if limit else scored_issues
    for rank, item in enumerate(shown, start=1):
        details = item.analysis_details
        body = "\n".join(
            [
                f"Final Score: {item.final_score:.1f}",
                f"Project Relevance: {item.project_relevance:.1f}",
                f"Value Score: {item.value_score:.1f}",
                f"Complexity Score: {item.complexity_score:.1f}",
                f"  Relevance Keywords: {details.relevance_keywords}",
                f"  Priority: {details.priority} "
                f"(native: {details.native_priority}, "
                f"used: {details.priority_source.value}, "
                f"score: {details.priority_score:.0f})",
                f"  Recency: {details.recency:.1f}",
                f"  Interactions: {details.interactions:.1f}",
                f"  Complexity: {details.complexity.value} "
                f"(from {details.complexity_basis})",
            ]
        )
        console.print(
            Panel(
                body,
                title=escape(
                    f"{rank}. [{item.issue.identifier}] {truncate(item.issue.title)}"
                ),
                title_align="left",
            )
        )


def display_statistics(console: Console, scored_issues: Sequence[ScoredIssue]) -> None:
    """Print averages, distributions and the score range."""
    if not scored_issues:
        console.print("[yellow]No scored issues to summarize.[/yellow]")
        return

    count = len(scored_issues)

    def average(values: list[float]) -> float:
        return sum(values) / count

    table = Table(title="Scoring Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Total Issues", str(count))
    table.add_row(
        "Average Final Score",
        f"{average([s.final_score for s in scored_issues]):.1f}",
    )
    table.add_row(
        "Average Relevance",
        f"{average([s.project_relevance for s in scored_issues]):.1f}",
    )
    table.add_row(
        "Average Value Score",
        f"{average([s.value_score for s in scored_issues]):.1f}",
    )
    table.add_row(
        "Average Complexity Score",
        f"{average([s.complexity_score for s in scored_issues]):.1f}",
    )

    priorities = Counter(s.analysis_details.priority for s in scored_issues)
    for priority, n in sorted(priorities.items()):
        table.add_row(f"Priority {priority}", f"{n} ({n / count * 100:.1f}%)")

    complexities = Counter(
        s.analysis_details.complexity.value for s in scored_issues
    )
    for complexity, n in sorted(complexities.items()):
        table.add_row(f"Complexity {complexity}", f"{n} ({n / count * 100:.1f}%)")

    scores = [s.final_score for s in scored_issues]
    table.add_row("Score Range", f"{min(scores):.1f} - {max(scores):.1f}")
    console.print(table)


def display_cache_metadata(
    console: Console,
    name: str,
    metadata: CacheMetadata | None,
    ttl_hours: float,
    valid: bool,
) -> None:
    """Print metadata, age and validity of one cache."""
    if metadata is None:
        console.print(f"\n[yellow]No {name.lower()} information available.[/yellow]")
        return

    age = metadata.age_hours(datetime.now(timezone.utc))
    table = Table(title=name)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Last Updated", metadata.last_updated.isoformat())
    table.add_row("Team ID", metadata.team_id)
    table.add_row("Backlog State ID", metadata.backlog_state_id)
    table.add_row("Issue Count", str(metadata.issue_count))
    if isinstance(metadata, ScoringCacheMetadata):
        table.add_row("Relevance Keywords", ", ".join(metadata.relevance_keywords))
    table.add_row("Cache Age", f"{age:.1f} hours")
    table.add_row("Cache TTL", f"{ttl_hours:g} hours")
    status = "[green]Valid[/green]" if valid else "[red]Invalid[/red]"
    table.add_row("Cache Status", status)
    console.print(table)
