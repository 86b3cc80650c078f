"""Score a batch of issues, reusing the scoring cache when it is valid."""

import logging
from collections.abc import Callable, Sequence
from datetime import datetime, timezone

from ..config import PrioritizerConfig
from ..exceptions import CacheWriteError, ScoringError
from ..linear_client.models import LinearIssue
from ..storage.manager import CacheManager
from .calculator import calculate_issue_score, sort_issues_by_score
from .models import ScoredIssue

logger = logging.getLogger(__name__)


class IssueScorer:
    """Coordinates scoring-cache reads, scoring and scoring-cache writes.

    Scoring itself stays pure; this class owns the cache side effects.
    """

    def __init__(
        self,
        config: PrioritizerConfig,
        cache: CacheManager | None = None,
        use_cache: bool = True,
        force_refresh: bool = False,
    ):
        self.config = config
        self.cache = cache
        self.use_cache = use_cache and cache is not None
        self.force_refresh = force_refresh

    def score_issues(
        self,
        issues: Sequence[LinearIssue],
        now: datetime | None = None,
        progress: Callable[[int, int, LinearIssue], None] | None = None,
    ) -> list[ScoredIssue]:
        """Score and sort issues.

        Returns:
            Scored issues, highest final score first

        Raises:
            ScoringError: If any issue fails to score
            CacheWriteError: If the result could not be cached; the sorted
                result is available as ``error.result``
        """
        if now is None:
            now = datetime.now(timezone.utc)

        cached = self._load_from_cache(now)
        if cached:
            logger.info("Loaded %d scored issues from cache", len(cached))
            return cached

        scored: list[ScoredIssue] = []
        total = len(issues)
        for index, issue in enumerate(issues, start=1):
            if progress is not None:
                progress(index, total, issue)
            try:
                scored.append(
                    calculate_issue_score(
                        issue,
                        self.config.relevance_keywords,
                        self.config.weights,
                        comments=issue.comments,
                        target_project=self.config.target_project,
                        employee_aliases=self.config.employee_aliases,
                        now=now,
                    )
                )
            except Exception as e:
                identifier = getattr(issue, "identifier", "<unknown>")
                raise ScoringError(f"Failed to score issue {identifier}: {e}") from e

        sorted_issues = sort_issues_by_score(scored)
        logger.info("Scored %d issues", len(sorted_issues))

        if self.use_cache and self.cache is not None:
            try:
                self.cache.save_scored_issues(
                    sorted_issues,
                    self.config.team_id,
                    self.config.backlog_state_id,
                    self.config.relevance_keywords,
                    now=now,
                )
            except CacheWriteError as e:
                raise CacheWriteError(str(e), result=sorted_issues) from e

        return sorted_issues

    def _load_from_cache(self, now: datetime) -> list[ScoredIssue] | None:
        if not self.use_cache or self.force_refresh or self.cache is None:
            return None
        if not self.cache.is_scoring_cache_valid(
            self.config.team_id,
            self.config.backlog_state_id,
            self.config.relevance_keywords,
            now=now,
        ):
            return None
        return self.cache.load_scored_issues(now=now)
