"""On-disk caches for fetched and scored issues."""

from .manager import CacheManager
from .models import CacheMetadata, CacheStatus, ScoringCacheMetadata, evaluate_metadata

__all__ = [
    "CacheManager",
    "CacheMetadata",
    "CacheStatus",
    "ScoringCacheMetadata",
    "evaluate_metadata",
]
