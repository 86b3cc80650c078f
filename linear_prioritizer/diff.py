"""Rank deltas between two scoring runs."""

from collections.abc import Sequence

from .scoring.models import RankingChange, ScoredIssue


def _rank_map(scored_issues: Sequence[ScoredIssue]) -> dict[str, tuple[int, str, str]]:
    return {
        item.issue.id: (rank, item.issue.identifier, item.issue.title)
        for rank, item in enumerate(scored_issues, start=1)
    }


def compare_scoring(
    previous: Sequence[ScoredIssue], current: Sequence[ScoredIssue]
) -> list[RankingChange]:
    """List issues whose rank changed between two runs.

    Only issues present in both runs are reported. ``change`` is
    ``old_rank - new_rank``, so positive means the issue moved up. Results
    are ordered by the size of the move, largest first.
    """
    previous_ranks = _rank_map(previous)
    changes = []

    for issue_id, (new_rank, identifier, title) in _rank_map(current).items():
        if issue_id not in previous_ranks:
            continue
        old_rank = previous_ranks[issue_id][0]
        delta = old_rank - new_rank
        if delta != 0:
            changes.append(
                RankingChange(
                    issue_id=issue_id,
                    identifier=identifier,
                    title=title,
                    old_rank=old_rank,
                    new_rank=new_rank,
                    change=delta,
                )
            )

    changes.sort(key=lambda c: abs(c.change), reverse=True)
    return changes


def create_change_map(changes: Sequence[RankingChange]) -> dict[str, RankingChange]:
    """Index ranking changes by issue id."""
    return {change.issue_id: change for change in changes}
