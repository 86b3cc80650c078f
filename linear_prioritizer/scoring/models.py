"""Pydantic models for scored issues."""

from enum import Enum

from pydantic import Field

from ..linear_client.models import LinearIssue, LinearModel


class ComplexityLevel(str, Enum):
    """Estimated implementation effort."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class PrioritySource(str, Enum):
    """Which signal decided the priority score."""

    NATIVE = "native"
    LABEL = "label"


class PriorityScore(LinearModel):
    """Result of priority scoring."""

    score: float
    label_priority: str = Field(description="Label-derived level: P1, P2 or P3")
    native_priority: str = Field(
        description="Native level name: None, Urgent, High, Medium or Low"
    )
    source: PrioritySource


class ComplexityEstimate(LinearModel):
    """Result of complexity scoring. Lower effort scores higher."""

    level: ComplexityLevel
    score: float
    basis: str = Field(
        description="Signal used: estimate, label, description_length, "
        "keywords or default"
    )


class AnalysisDetails(LinearModel):
    """Human readable classification behind each sub-score."""

    relevance_keywords: int = Field(
        description="Approximate keyword weight (relevance / 10)"
    )
    priority: str
    native_priority: str
    priority_source: PrioritySource
    priority_score: float
    recency: float
    interactions: float
    complexity: ComplexityLevel
    complexity_basis: str


class ScoredIssue(LinearModel):
    """An issue with its sub-scores and composite final score.

    All scores lie in [0, 100].
    """

    issue: LinearIssue
    project_relevance: float = Field(ge=0.0, le=100.0)
    value_score: float = Field(ge=0.0, le=100.0)
    complexity_score: float = Field(ge=0.0, le=100.0)
    final_score: float = Field(ge=0.0, le=100.0)
    analysis_details: AnalysisDetails


class RankingChange(LinearModel):
    """Movement of one issue between two rankings.

    ``change`` is positive when the issue moved toward the top.
    """

    issue_id: str
    identifier: str
    title: str
    old_rank: int
    new_rank: int
    change: int
