"""Test configuration and fixtures."""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from linear_prioritizer.config import PrioritizerConfig, ScoringWeights
from linear_prioritizer.linear_client.models import (
    LinearComment,
    LinearIssue,
    LinearLabel,
    LinearProject,
    LinearUser,
)

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_issue(
    issue_id: str = "issue-1",
    identifier: str = "ENG-1",
    title: str = "Test issue",
    description: str | None = None,
    priority: int | None = None,
    estimate: float | None = None,
    labels: list[str] | None = None,
    project: str | None = None,
    comments: list[LinearComment] | None = None,
    updated_at: datetime | None = None,
) -> LinearIssue:
    """Build a LinearIssue with sensible defaults."""
    return LinearIssue(
        id=issue_id,
        identifier=identifier,
        title=title,
        description=description,
        priority=priority,
        estimate=estimate,
        created_at=NOW - timedelta(days=100),
        updated_at=updated_at or NOW - timedelta(days=2),
        project=LinearProject(id=f"proj-{project}", name=project) if project else None,
        labels=[
            LinearLabel(id=f"label-{i}", name=name)
            for i, name in enumerate(labels or [])
        ],
        comments=comments or [],
    )


def make_comment(
    comment_id: str = "comment-1",
    body: str = "Looks important",
    name: str | None = "Jane Customer",
    email: str | None = "jane@customer.com",
    no_user: bool = False,
) -> LinearComment:
    """Build a LinearComment; ``no_user`` yields an integration comment."""
    user = None
    if not no_user:
        user = LinearUser(id=f"user-{comment_id}", name=name, email=email)
    return LinearComment(id=comment_id, body=body, created_at=NOW, user=user)


@pytest.fixture
def now() -> datetime:
    """Fixed reference time for time-dependent scoring."""
    return NOW


@pytest.fixture
def issue_factory() -> Callable[..., LinearIssue]:
    return make_issue


@pytest.fixture
def comment_factory() -> Callable[..., LinearComment]:
    return make_comment


@pytest.fixture
def weights() -> ScoringWeights:
    return ScoringWeights()


@pytest.fixture
def config(tmp_path: Path) -> PrioritizerConfig:
    """Config pointing its cache at a temporary directory."""
    return PrioritizerConfig(
        team_id="team-1",
        backlog_state_id="state-1",
        relevance_keywords=["sync", "metadata"],
        employee_aliases=["@example.com"],
        cache_ttl_hours=24,
        cache_dir=str(tmp_path / "cache"),
    )
