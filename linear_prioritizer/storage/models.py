"""Models for cache metadata files."""

from collections import Counter
from collections.abc import Sequence
from datetime import datetime, timezone
from enum import Enum

from pydantic import Field

from ..linear_client.models import LinearModel


class CacheStatus(str, Enum):
    """Outcome of a cache validity check."""

    VALID = "valid"
    MISSING = "missing"
    MALFORMED = "malformed"
    KEY_MISMATCH = "key_mismatch"
    KEYWORDS_CHANGED = "keywords_changed"
    EXPIRED = "expired"

    @property
    def is_valid(self) -> bool:
        return self is CacheStatus.VALID


class CacheMetadata(LinearModel):
    """Metadata stamped next to the issues snapshot."""

    last_updated: datetime = Field(..., description="When the snapshot was written")
    team_id: str
    backlog_state_id: str
    issue_count: int = Field(..., ge=0)

    def age_hours(self, now: datetime) -> float:
        last_updated = self.last_updated
        if last_updated.tzinfo is None:
            last_updated = last_updated.replace(tzinfo=timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return (now - last_updated).total_seconds() / 3600


class ScoringCacheMetadata(CacheMetadata):
    """Metadata for the scored-issues snapshot."""

    relevance_keywords: list[str] = Field(default_factory=list)


def evaluate_metadata(
    metadata: CacheMetadata,
    team_id: str,
    backlog_state_id: str,
    ttl_hours: float,
    now: datetime,
    relevance_keywords: Sequence[str] | None = None,
) -> CacheStatus:
    """Decide whether a snapshot described by ``metadata`` is still usable.

    Keywords are compared as a multiset when given, so reordering them does
    not invalidate the snapshot.
    """
    if metadata.team_id != team_id or metadata.backlog_state_id != backlog_state_id:
        return CacheStatus.KEY_MISMATCH

    if relevance_keywords is not None:
        stored = getattr(metadata, "relevance_keywords", None)
        if stored is None or Counter(stored) != Counter(relevance_keywords):
            return CacheStatus.KEYWORDS_CHANGED

    if metadata.age_hours(now) >= ttl_hours:
        return CacheStatus.EXPIRED

    return CacheStatus.VALID
