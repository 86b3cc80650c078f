"""Cache manager for fetched and scored Linear issues.

Two independent caches live in one directory, each as a pair of JSON files
(snapshot + metadata):

- issues cache: ``issues.json`` / ``metadata.json``
- scoring cache: ``scoring.json`` / ``scoring-metadata.json``

The directory is owned by a single run at a time; there is no file locking.
"""

import json
import logging
import os
import tempfile
from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from ..exceptions import CacheWriteError
from ..linear_client.models import LinearIssue
from ..scoring.models import ScoredIssue
from .models import CacheMetadata, CacheStatus, ScoringCacheMetadata, evaluate_metadata

logger = logging.getLogger(__name__)

ISSUES_FILE = "issues.json"
ISSUES_METADATA_FILE = "metadata.json"
SCORING_FILE = "scoring.json"
SCORING_METADATA_FILE = "scoring-metadata.json"

_issues_adapter = TypeAdapter(list[LinearIssue])
_scored_adapter = TypeAdapter(list[ScoredIssue])

MetadataT = TypeVar("MetadataT", bound=CacheMetadata)


class CacheManager:
    """Manages the on-disk issues and scoring caches."""

    def __init__(self, cache_dir: str | Path = ".cache", ttl_hours: float = 24):
        """Initialize cache manager.

        Args:
            cache_dir: Directory holding the cache files
            ttl_hours: Maximum snapshot age before it is considered stale
        """
        self.cache_dir = Path(cache_dir)
        self.ttl_hours = ttl_hours
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    @property
    def issues_path(self) -> Path:
        return self.cache_dir / ISSUES_FILE

    @property
    def issues_metadata_path(self) -> Path:
        return self.cache_dir / ISSUES_METADATA_FILE

    @property
    def scoring_path(self) -> Path:
        return self.cache_dir / SCORING_FILE

    @property
    def scoring_metadata_path(self) -> Path:
        return self.cache_dir / SCORING_METADATA_FILE

    # Issues cache

    def save_issues(
        self,
        issues: Sequence[LinearIssue],
        team_id: str,
        backlog_state_id: str,
        now: datetime | None = None,
    ) -> Path:
        """Persist fetched issues and their metadata.

        Returns:
            Path to the issues snapshot

        Raises:
            CacheWriteError: If either file could not be written
        """
        metadata = CacheMetadata(
            last_updated=now or datetime.now(timezone.utc),
            team_id=team_id,
            backlog_state_id=backlog_state_id,
            issue_count=len(issues),
        )
        self._write_pair(
            self.issues_path,
            _issues_adapter.dump_python(list(issues), mode="json", by_alias=True),
            self.issues_metadata_path,
            metadata,
        )
        logger.info("Cached %d issues in %s", len(issues), self.issues_path)
        return self.issues_path

    def get_issues_metadata(self) -> CacheMetadata | None:
        """Return issues cache metadata, or None if missing or unreadable."""
        return self._read_metadata(self.issues_metadata_path, CacheMetadata)

    def issues_cache_status(
        self, team_id: str, backlog_state_id: str, now: datetime | None = None
    ) -> CacheStatus:
        """Check the issues cache against the current team and backlog state."""
        status = self._status(
            self.issues_path,
            self.issues_metadata_path,
            CacheMetadata,
            team_id,
            backlog_state_id,
            now,
        )
        self._log_status("Issues", status)
        return status

    def is_issues_cache_valid(
        self, team_id: str, backlog_state_id: str, now: datetime | None = None
    ) -> bool:
        return self.issues_cache_status(team_id, backlog_state_id, now).is_valid

    def load_issues(self) -> list[LinearIssue] | None:
        """Load cached issues, or None if missing or malformed."""
        data = self._read_json(self.issues_path)
        if data is None:
            return None
        try:
            return _issues_adapter.validate_python(data)
        except ValidationError as e:
            logger.warning("Malformed issues cache %s: %s", self.issues_path, e)
            return None

    def clear_issues_cache(self) -> None:
        """Delete the issues snapshot and metadata. The scoring cache is kept."""
        self._remove(self.issues_path, self.issues_metadata_path)
        logger.info("Issues cache cleared")

    # Scoring cache

    def save_scored_issues(
        self,
        scored_issues: Sequence[ScoredIssue],
        team_id: str,
        backlog_state_id: str,
        relevance_keywords: Sequence[str],
        now: datetime | None = None,
    ) -> Path:
        """Persist scored issues with the keyword set used to score them.

        Raises:
            CacheWriteError: If either file could not be written
        """
        metadata = ScoringCacheMetadata(
            last_updated=now or datetime.now(timezone.utc),
            team_id=team_id,
            backlog_state_id=backlog_state_id,
            issue_count=len(scored_issues),
            relevance_keywords=list(relevance_keywords),
        )
        self._write_pair(
            self.scoring_path,
            _scored_adapter.dump_python(
                list(scored_issues), mode="json", by_alias=True
            ),
            self.scoring_metadata_path,
            metadata,
        )
        logger.info(
            "Cached %d scored issues in %s", len(scored_issues), self.scoring_path
        )
        return self.scoring_path

    def get_scoring_metadata(self) -> ScoringCacheMetadata | None:
        """Return scoring cache metadata, or None if missing or unreadable."""
        return self._read_metadata(self.scoring_metadata_path, ScoringCacheMetadata)

    def scoring_cache_status(
        self,
        team_id: str,
        backlog_state_id: str,
        relevance_keywords: Sequence[str],
        now: datetime | None = None,
    ) -> CacheStatus:
        """Check the scoring cache, including the relevance keyword set."""
        status = self._status(
            self.scoring_path,
            self.scoring_metadata_path,
            ScoringCacheMetadata,
            team_id,
            backlog_state_id,
            now,
            relevance_keywords=relevance_keywords,
        )
        self._log_status("Scoring", status)
        return status

    def is_scoring_cache_valid(
        self,
        team_id: str,
        backlog_state_id: str,
        relevance_keywords: Sequence[str],
        now: datetime | None = None,
    ) -> bool:
        return self.scoring_cache_status(
            team_id, backlog_state_id, relevance_keywords, now
        ).is_valid

    def load_scored_issues(
        self, ignore_expiry: bool = False, now: datetime | None = None
    ) -> list[ScoredIssue] | None:
        """Load cached scored issues.

        Args:
            ignore_expiry: Return the snapshot even when it is stale or its
                metadata is gone (used to compare against a previous run)
            now: Reference time for the expiry check

        Returns:
            Scored issues in cached rank order, or None
        """
        data = self._read_json(self.scoring_path)
        if data is None:
            return None

        if not ignore_expiry:
            metadata = self.get_scoring_metadata()
            if metadata is None:
                logger.info("Scoring cache has no metadata")
                return None
            age = metadata.age_hours(now or datetime.now(timezone.utc))
            if age >= self.ttl_hours:
                logger.info(
                    "Scoring cache expired (%.1f hours old, TTL: %s hours)",
                    age,
                    self.ttl_hours,
                )
                return None

        try:
            return _scored_adapter.validate_python(data)
        except ValidationError as e:
            logger.warning("Malformed scoring cache %s: %s", self.scoring_path, e)
            return None

    def clear_scoring_cache(self) -> None:
        """Delete the scoring snapshot and metadata."""
        self._remove(self.scoring_path, self.scoring_metadata_path)
        logger.info("Scoring cache cleared")

    def clear_all(self) -> None:
        """Delete both caches."""
        self.clear_issues_cache()
        self.clear_scoring_cache()

    # Helpers

    def _status(
        self,
        data_path: Path,
        metadata_path: Path,
        metadata_type: type[CacheMetadata],
        team_id: str,
        backlog_state_id: str,
        now: datetime | None,
        relevance_keywords: Sequence[str] | None = None,
    ) -> CacheStatus:
        try:
            if not data_path.exists() or not metadata_path.exists():
                return CacheStatus.MISSING
        except OSError as e:
            logger.warning("Could not stat cache files: %s", e)
            return CacheStatus.MALFORMED

        metadata = self._read_metadata(metadata_path, metadata_type)
        if metadata is None:
            return CacheStatus.MALFORMED

        return evaluate_metadata(
            metadata,
            team_id=team_id,
            backlog_state_id=backlog_state_id,
            ttl_hours=self.ttl_hours,
            now=now or datetime.now(timezone.utc),
            relevance_keywords=relevance_keywords,
        )

    def _log_status(self, name: str, status: CacheStatus) -> None:
        if status.is_valid:
            logger.debug("%s cache is valid", name)
        elif status is CacheStatus.MISSING:
            logger.info("%s cache miss: no cached snapshot", name)
        elif status is CacheStatus.MALFORMED:
            logger.info("%s cache miss: metadata unreadable", name)
        elif status is CacheStatus.KEY_MISMATCH:
            logger.info("%s cache invalid: team or backlog state changed", name)
        elif status is CacheStatus.KEYWORDS_CHANGED:
            logger.info("%s cache invalid: relevance keywords changed", name)
        elif status is CacheStatus.EXPIRED:
            logger.info(
                "%s cache invalid: older than %s hours", name, self.ttl_hours
            )

    def _read_json(self, path: Path) -> Any:
        if not path.exists():
            return None
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Error reading cache file %s: %s", path, e)
            return None

    def _read_metadata(
        self, path: Path, metadata_type: type[MetadataT]
    ) -> MetadataT | None:
        data = self._read_json(path)
        if data is None:
            return None
        try:
            return metadata_type.model_validate(data)
        except ValidationError as e:
            logger.warning("Malformed cache metadata %s: %s", path, e)
            return None

    def _write_pair(
        self,
        data_path: Path,
        data: Any,
        metadata_path: Path,
        metadata: BaseModel,
    ) -> None:
        """Write snapshot and metadata so readers never see a partial pair.

        Both files are staged first. The old metadata is removed before the
        snapshot is swapped in, so an interruption leaves the pair invalid
        rather than mismatched.
        """
        staged: list[Path] = []
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            staged_data = self._stage(data_path, data)
            staged.append(staged_data)
            staged_metadata = self._stage(
                metadata_path, metadata.model_dump(mode="json", by_alias=True)
            )
            staged.append(staged_metadata)

            metadata_path.unlink(missing_ok=True)
            os.replace(staged_data, data_path)
            os.replace(staged_metadata, metadata_path)
        except (OSError, TypeError, ValueError) as e:
            logger.error("Failed to write cache %s: %s", data_path, e)
            raise CacheWriteError(f"Failed to write cache {data_path}: {e}") from e
        finally:
            for path in staged:
                if path.exists():
                    path.unlink()

    def _stage(self, target: Path, data: Any) -> Path:
        fd, tmp_name = tempfile.mkstemp(
            dir=self.cache_dir, prefix=f".{target.name}.", suffix=".tmp"
        )
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise
        return tmp_path

    def _remove(self, *paths: Path) -> None:
        for path in paths:
            path.unlink(missing_ok=True)
