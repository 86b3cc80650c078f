"""Linear client package for API interaction."""

from .client import LinearClient
from .models import (
    LinearComment,
    LinearIssue,
    LinearLabel,
    LinearProject,
    LinearTeam,
    LinearUser,
    LinearWorkflowState,
)

__all__ = [
    "LinearClient",
    "LinearComment",
    "LinearIssue",
    "LinearLabel",
    "LinearProject",
    "LinearTeam",
    "LinearUser",
    "LinearWorkflowState",
]
