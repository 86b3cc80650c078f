"""Issue scoring: sub-score components and the weighted calculator."""

from .calculator import calculate_issue_score, sort_issues_by_score
from .models import (
    AnalysisDetails,
    ComplexityLevel,
    PrioritySource,
    RankingChange,
    ScoredIssue,
)

__all__ = [
    "AnalysisDetails",
    "ComplexityLevel",
    "PrioritySource",
    "RankingChange",
    "ScoredIssue",
    "calculate_issue_score",
    "sort_issues_by_score",
]
