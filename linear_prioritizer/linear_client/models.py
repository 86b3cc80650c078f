"""Pydantic models for Linear data structures.

These models mirror the shape of Linear's GraphQL issue nodes, with
connection fields (``labels { nodes }``, ``comments { nodes }``) flattened
into plain lists. The same shape is used for the on-disk issues cache.
API Reference: https://developers.linear.app/docs/graphql/working-with-the-graphql-api
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class LinearModel(BaseModel):
    """Base model serializing to Linear's camelCase field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class LinearUser(LinearModel):
    """Linear user who authored a comment."""

    id: str = Field(..., description="Unique user identifier")
    name: str | None = Field(None, description="Full name of the user")
    display_name: str | None = Field(None, description="Display name / handle")
    email: str | None = Field(None, description="Email address of the user")


class LinearLabel(LinearModel):
    """Linear issue label."""

    id: str = Field(..., description="Unique label identifier")
    name: str = Field(..., description="Name of the label")
    color: str | None = Field(None, description="Hex color code of the label")


class LinearProject(LinearModel):
    """Project an issue belongs to."""

    id: str = Field(..., description="Unique project identifier")
    name: str = Field(..., description="Name of the project")


class LinearComment(LinearModel):
    """Comment on a Linear issue.

    ``user`` is None for comments created by integrations.
    """

    id: str = Field(..., description="Unique comment identifier")
    body: str = Field("", description="Markdown body of the comment")
    created_at: datetime | None = Field(None, description="Creation timestamp")
    user: LinearUser | None = Field(None, description="Comment author")

    @field_validator("body", mode="before")
    @classmethod
    def coerce_null_body(cls, v: Any) -> Any:
        return "" if v is None else v


class LinearIssue(LinearModel):
    """Linear issue with its labels, project and comments resolved."""

    id: str = Field(..., description="Unique issue identifier (UUID)")
    identifier: str = Field(..., description="Human readable key, e.g. ENG-123")
    title: str = Field(..., description="Title of the issue")
    description: str | None = Field(None, description="Markdown description")
    priority: int | None = Field(
        None, description="Native priority: 0=None, 1=Urgent, 2=High, 3=Medium, 4=Low"
    )
    estimate: float | None = Field(None, description="Effort estimate in points")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")
    project: LinearProject | None = Field(None, description="Associated project")
    labels: list[LinearLabel] = Field(
        default_factory=list, description="Labels attached to the issue"
    )
    comments: list[LinearComment] = Field(
        default_factory=list, description="Comments on the issue, oldest first"
    )

    @field_validator("labels", "comments", mode="before")
    @classmethod
    def unwrap_connection(cls, v: Any) -> Any:
        """Accept GraphQL connection objects (``{"nodes": [...]}``)."""
        if v is None:
            return []
        if isinstance(v, dict) and "nodes" in v:
            return v["nodes"] or []
        return v


class LinearWorkflowState(LinearModel):
    """Workflow state of a team."""

    id: str
    name: str
    type: str | None = None


class LinearTeam(LinearModel):
    """Team with the workflow states and projects needed for configuration."""

    id: str
    name: str
    key: str | None = None
    states: list[LinearWorkflowState] = Field(default_factory=list)
    projects: list[LinearProject] = Field(default_factory=list)

    @field_validator("states", "projects", mode="before")
    @classmethod
    def unwrap_connection(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, dict) and "nodes" in v:
            return v["nodes"] or []
        return v
