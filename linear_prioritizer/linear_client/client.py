"""Linear API client using the GraphQL endpoint over httpx."""

import logging
import os
import time
from typing import Any

import httpx

from ..exceptions import LinearAPIError
from .models import LinearIssue, LinearTeam

logger = logging.getLogger(__name__)

LINEAR_API_URL = "https://api.linear.app/graphql"
PAGE_SIZE = 100
RATE_LIMIT_RETRIES = 2
DEFAULT_RETRY_AFTER = 60.0

BACKLOG_ISSUES_QUERY = """
query BacklogIssues($teamId: ID!, $stateId: ID!, $first: Int!, $after: String) {
  issues(
    first: $first,
    after: $after,
    filter: {
      team: { id: { eq: $teamId } },
      state: { id: { eq: $stateId } }
    }
  ) {
    nodes {
      id
      identifier
      title
      description
      priority
      estimate
      createdAt
      updatedAt
      project { id name }
      labels { nodes { id name color } }
      comments {
        nodes {
          id
          body
          createdAt
          user { id name displayName email }
        }
      }
    }
    pageInfo { hasNextPage endCursor }
  }
}
"""

UPDATE_SORT_ORDER_MUTATION = """
mutation UpdateSortOrder($id: String!, $sortOrder: Float!) {
  issueUpdate(id: $id, input: { sortOrder: $sortOrder }) {
    success
  }
}
"""

TEAMS_QUERY = """
query Teams {
  teams {
    nodes {
      id
      name
      key
      states { nodes { id name type } }
      projects { nodes { id name } }
    }
  }
}
"""


class LinearClient:
    """Linear GraphQL client with authentication and rate-limit handling."""

    def __init__(
        self,
        api_key: str | None = None,
        http_client: httpx.Client | None = None,
        api_url: str = LINEAR_API_URL,
    ):
        """Initialize Linear client.

        Args:
            api_key: Linear personal API key. If None, reads from
                LINEAR_API_KEY env var.
            http_client: Pre-configured httpx client (mainly for tests)
            api_url: GraphQL endpoint
        """
        self.api_key = api_key or os.getenv("LINEAR_API_KEY")
        if not self.api_key:
            raise ValueError(
                "Linear API key is required. Set LINEAR_API_KEY environment variable."
            )

        self.api_url = api_url
        self.http = http_client or httpx.Client(timeout=30.0)
        self.headers = {
            "Authorization": self.api_key,
            "Content-Type": "application/json",
            "User-Agent": "linear-prioritizer/0.1.0",
        }

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "LinearClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def execute(
        self, query: str, variables: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Run a GraphQL operation and return its ``data`` payload.

        Raises:
            LinearAPIError: On HTTP failures or GraphQL errors
        """
        payload = {"query": query, "variables": variables or {}}

        for attempt in range(RATE_LIMIT_RETRIES + 1):
            try:
                response = self.http.post(
                    self.api_url, json=payload, headers=self.headers
                )
            except httpx.HTTPError as e:
                raise LinearAPIError(f"Request to Linear failed: {e}") from e

            if response.status_code == 429 and attempt < RATE_LIMIT_RETRIES:
                wait = _retry_after(response)
                logger.warning("Linear rate limit hit, sleeping %.0f seconds", wait)
                time.sleep(wait)
                continue
            break

        if response.status_code >= 400:
            raise LinearAPIError(
                f"Linear API returned HTTP {response.status_code}: "
                f"{_error_messages(response)}"
            )

        try:
            body = response.json()
        except ValueError as e:
            raise LinearAPIError(f"Invalid JSON from Linear API: {e}") from e

        if body.get("errors"):
            messages = "; ".join(
                err.get("message", str(err)) for err in body["errors"]
            )
            raise LinearAPIError(f"Linear API error: {messages}")

        data = body.get("data")
        if data is None:
            raise LinearAPIError("No data returned from Linear API")
        return data

    def fetch_backlog_issues(
        self, team_id: str, backlog_state_id: str
    ) -> list[LinearIssue]:
        """Fetch every issue in a team's backlog state.

        Args:
            team_id: Linear team ID
            backlog_state_id: Workflow state ID of the backlog

        Returns:
            Issues with labels, project and comments resolved
        """
        issues: list[LinearIssue] = []
        cursor: str | None = None

        while True:
            data = self.execute(
                BACKLOG_ISSUES_QUERY,
                {
                    "teamId": team_id,
                    "stateId": backlog_state_id,
                    "first": PAGE_SIZE,
                    "after": cursor,
                },
            )
            connection = data.get("issues")
            if not connection or connection.get("nodes") is None:
                raise LinearAPIError("No issues returned from Linear API")

            issues.extend(LinearIssue.model_validate(n) for n in connection["nodes"])
            logger.debug("Fetched %d backlog issues so far", len(issues))

            page_info = connection.get("pageInfo") or {}
            if not page_info.get("hasNextPage"):
                break
            cursor = page_info.get("endCursor")

        return issues

    def update_issue_sort_order(self, issue_id: str, sort_order: float) -> None:
        """Set the manual sort order of an issue.

        Raises:
            LinearAPIError: If Linear rejects the update
        """
        data = self.execute(
            UPDATE_SORT_ORDER_MUTATION, {"id": issue_id, "sortOrder": sort_order}
        )
        result = data.get("issueUpdate") or {}
        if not result.get("success"):
            raise LinearAPIError(f"Linear did not update sort order of {issue_id}")

    def list_teams(self) -> list[LinearTeam]:
        """List teams with their workflow states and projects."""
        data = self.execute(TEAMS_QUERY)
        nodes = (data.get("teams") or {}).get("nodes") or []
        return [LinearTeam.model_validate(node) for node in nodes]


def _retry_after(response: httpx.Response) -> float:
    try:
        return float(response.headers.get("Retry-After", DEFAULT_RETRY_AFTER))
    except ValueError:
        return DEFAULT_RETRY_AFTER


def _error_messages(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    errors = body.get("errors") if isinstance(body, dict) else None
    if errors:
        return "; ".join(err.get("message", str(err)) for err in errors)
    return response.text[:200]
