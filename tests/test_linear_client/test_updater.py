"""Tests for LinearUpdater."""

from collections.abc import Callable
from datetime import datetime
from unittest.mock import Mock, call

import pytest

from linear_prioritizer.config import ScoringWeights
from linear_prioritizer.exceptions import LinearAPIError
from linear_prioritizer.linear_client.models import LinearIssue
from linear_prioritizer.linear_client.updater import LinearUpdater, sort_order_for_rank
from linear_prioritizer.scoring.calculator import calculate_issue_score
from linear_prioritizer.scoring.models import ScoredIssue

IssueFactory = Callable[..., LinearIssue]


@pytest.fixture
def ranked(
    issue_factory: IssueFactory, weights: ScoringWeights, now: datetime
) -> list[ScoredIssue]:
    return [
        calculate_issue_score(
            issue_factory(f"id-{i}", f"ENG-{i}"), [], weights, now=now
        )
        for i in range(1, 4)
    ]


def test_sort_order_for_rank() -> None:
    """Test sort orders are spaced by rank."""
    assert sort_order_for_rank(1) == 100.0
    assert sort_order_for_rank(3) == 300.0


def test_update_issue_order(ranked: list[ScoredIssue]) -> None:
    """Test each issue gets an increasing sort order in rank order."""
    client = Mock()
    progress = Mock()

    updated = LinearUpdater(client).update_issue_order(ranked, progress=progress)

    assert updated == 3
    client.update_issue_sort_order.assert_has_calls(
        [call("id-1", 100.0), call("id-2", 200.0), call("id-3", 300.0)]
    )
    assert progress.call_count == 3


def test_update_stops_on_error(ranked: list[ScoredIssue]) -> None:
    """Test a failed update propagates and stops later updates."""
    client = Mock()
    client.update_issue_sort_order.side_effect = [None, LinearAPIError("rejected")]

    with pytest.raises(LinearAPIError, match="rejected"):
        LinearUpdater(client).update_issue_order(ranked)

    assert client.update_issue_sort_order.call_count == 2


def test_update_empty() -> None:
    """Test nothing is sent for an empty ranking."""
    client = Mock()
    assert LinearUpdater(client).update_issue_order([]) == 0
    client.update_issue_sort_order.assert_not_called()
