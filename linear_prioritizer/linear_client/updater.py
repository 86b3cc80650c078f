"""Persist a computed ranking back to Linear."""

import logging
from collections.abc import Callable, Sequence

from ..scoring.models import ScoredIssue
from .client import LinearClient

logger = logging.getLogger(__name__)

SORT_ORDER_STEP = 100


def sort_order_for_rank(rank: int) -> float:
    """Sort order for a 1-based rank, spaced to leave room for insertions."""
    return float(rank * SORT_ORDER_STEP)


class LinearUpdater:
    """Writes issue sort orders so Linear shows the ranked order."""

    def __init__(self, client: LinearClient):
        self.client = client

    def update_issue_order(
        self,
        sorted_issues: Sequence[ScoredIssue],
        progress: Callable[[int, int, ScoredIssue], None] | None = None,
    ) -> int:
        """Assign increasing sort orders in rank order.

        Lower sort orders appear higher in Linear. Errors propagate and leave
        the remaining issues untouched.

        Returns:
            Number of issues updated
        """
        total = len(sorted_issues)
        for rank, scored in enumerate(sorted_issues, start=1):
            sort_order = sort_order_for_rank(rank)
            logger.debug(
                "Setting %s sort order to %s", scored.issue.identifier, sort_order
            )
            self.client.update_issue_sort_order(scored.issue.id, sort_order)
            if progress is not None:
                progress(rank, total, scored)
        return total
