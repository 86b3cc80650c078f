"""Combine sub-scores into a final weighted score."""

from collections.abc import Iterable, Sequence
from datetime import datetime, timezone

from ..config import ScoringWeights
from ..linear_client.models import LinearComment, LinearIssue
from .components import (
    calculate_priority_score,
    calculate_project_relevance,
    calculate_recency_score,
    clamp,
    estimate_complexity,
    estimate_interactions,
)
from .models import AnalysisDetails, ScoredIssue


def calculate_issue_score(
    issue: LinearIssue,
    relevance_keywords: Sequence[str],
    weights: ScoringWeights,
    comments: Sequence[LinearComment] | None = None,
    target_project: str | None = None,
    employee_aliases: Iterable[str] = (),
    now: datetime | None = None,
) -> ScoredIssue:
    """Score a single issue.

    Args:
        issue: Issue to score
        relevance_keywords: Keywords used for topical relevance
        weights: Validated weight configuration
        comments: Resolved comments; defaults to ``issue.comments``
        target_project: Project name that makes an issue fully relevant
        employee_aliases: Emails/names of internal commenters
        now: Reference time for recency; defaults to the current UTC time

    Returns:
        ScoredIssue with all sub-scores in [0, 100]
    """
    if now is None:
        now = datetime.now(timezone.utc)
    if comments is None:
        comments = issue.comments

    priority = calculate_priority_score(issue)
    relevance = calculate_project_relevance(issue, relevance_keywords, target_project)
    recency = calculate_recency_score(issue.updated_at, now)
    interactions = estimate_interactions(comments, employee_aliases)
    complexity = estimate_complexity(issue)

    value = clamp(
        priority.score * weights.priority
        + recency * weights.recency
        + interactions * weights.interactions
    )
    final = clamp(
        relevance * weights.relevance
        + value * weights.value
        + complexity.score * weights.complexity
    )

    return ScoredIssue(
        issue=issue,
        project_relevance=relevance,
        value_score=value,
        complexity_score=complexity.score,
        final_score=final,
        analysis_details=AnalysisDetails(
            relevance_keywords=round(relevance / 10),
            priority=priority.label_priority,
            native_priority=priority.native_priority,
            priority_source=priority.source,
            priority_score=priority.score,
            recency=recency,
            interactions=interactions,
            complexity=complexity.level,
            complexity_basis=complexity.basis,
        ),
    )


def sort_issues_by_score(scored_issues: Iterable[ScoredIssue]) -> list[ScoredIssue]:
    """Sort by final score, highest first. Ties keep their input order."""
    return sorted(scored_issues, key=lambda s: s.final_score, reverse=True)
