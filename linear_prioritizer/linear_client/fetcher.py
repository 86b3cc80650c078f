"""Fetch backlog issues, going through the issues cache when allowed."""

import logging

from ..config import PrioritizerConfig
from ..exceptions import CacheWriteError
from ..storage.manager import CacheManager
from .client import LinearClient
from .models import LinearIssue

logger = logging.getLogger(__name__)


class IssueFetcher:
    """Loads backlog issues from the issues cache or the Linear API."""

    def __init__(
        self,
        client: LinearClient,
        config: PrioritizerConfig,
        cache: CacheManager,
        use_cache: bool = True,
        force_refresh: bool = False,
    ):
        self.client = client
        self.config = config
        self.cache = cache
        self.use_cache = use_cache
        self.force_refresh = force_refresh

    def fetch_issues(self) -> list[LinearIssue]:
        """Return backlog issues.

        A valid issues cache is used unless caching is disabled or a refresh
        is forced. Freshly fetched, non-empty results are written back to the
        cache when caching is enabled.

        Raises:
            CacheWriteError: If the issues could not be cached; the fetched
                issues are available as ``error.result``
        """
        if self.use_cache and not self.force_refresh:
            if self.cache.is_issues_cache_valid(
                self.config.team_id, self.config.backlog_state_id
            ):
                cached = self.cache.load_issues()
                if cached is not None:
                    logger.info("Loaded %d issues from cache", len(cached))
                    return cached

        issues = self.client.fetch_backlog_issues(
            self.config.team_id, self.config.backlog_state_id
        )
        logger.info("Fetched %d backlog issues from Linear", len(issues))

        if issues and self.use_cache:
            try:
                self.cache.save_issues(
                    issues, self.config.team_id, self.config.backlog_state_id
                )
            except CacheWriteError as e:
                raise CacheWriteError(str(e), result=issues) from e

        return issues
