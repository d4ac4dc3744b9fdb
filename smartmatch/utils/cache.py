"""
Recommendation Caching

Short-lived cache of computed rankings using diskcache. The cache never holds
domain state; losing it only costs recomputation.
"""

import hashlib
import json
import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Optional

import diskcache
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class CacheEntry(BaseModel):
    """A cached ranking payload."""
    key: str
    user_id: str
    content: str
    created_at: datetime
    expires_at: datetime


class RecommendationCache:
    """Cache of serialized rankings keyed by user, limit and time bucket.

    Uses SHA-256 of (user_id, limit, bucketed now) as cache key, so every
    request inside the same bucket shares one ranking.
    """

    def __init__(
        self,
        cache_path: str = ".cache/recommendations.db",
        ttl_seconds: int = 3600,
        bucket_minutes: int = 60,
        max_size_mb: int = 100,
        enabled: bool = True,
    ):
        """Initialize cache.

        Args:
            cache_path: Path to cache directory
            ttl_seconds: Time-to-live for cache entries
            bucket_minutes: Width of the time bucket requests are grouped into
            max_size_mb: Maximum cache size in MB (0 = diskcache default)
            enabled: Whether caching is enabled
        """
        self.enabled = enabled
        self.ttl_seconds = ttl_seconds
        self.bucket_minutes = max(bucket_minutes, 1)
        self.cache_path = Path(cache_path)
        self.max_size_bytes = max_size_mb * 1024 * 1024 if max_size_mb > 0 else None

        self._cache: Optional[diskcache.Cache] = None

        if self.enabled:
            self._init_cache()

    def _init_cache(self) -> None:
        """Initialize the diskcache backend."""
        self.cache_path.parent.mkdir(parents=True, exist_ok=True)

        settings = {}
        if self.max_size_bytes:
            settings["size_limit"] = self.max_size_bytes

        self._cache = diskcache.Cache(str(self.cache_path), **settings)

        logger.debug(f"Recommendation cache initialized at {self.cache_path}")

    def _bucket(self, now: datetime) -> str:
        minutes = now.hour * 60 + now.minute
        start = minutes - minutes % self.bucket_minutes
        return f"{now.date().isoformat()}T{start // 60:02d}:{start % 60:02d}"

    def _generate_key(self, user_id: str, now: datetime, limit: Optional[int]) -> str:
        """Generate content-addressed cache key."""
        key_data = {
            "user_id": user_id,
            "bucket": self._bucket(now),
            "limit": limit,
        }
        key_string = json.dumps(key_data, sort_keys=True)
        return hashlib.sha256(key_string.encode()).hexdigest()

    def get(self, user_id: str, now: datetime, limit: Optional[int] = None) -> Optional[str]:
        """Retrieve a cached ranking payload.

        Returns:
            Cached content or None if not found/expired
        """
        if not self.enabled or self._cache is None:
            return None

        key = self._generate_key(user_id, now, limit)

        try:
            entry_data = self._cache.get(key)
            if entry_data is None:
                return None

            entry = CacheEntry.model_validate_json(entry_data)

            if datetime.now() > entry.expires_at:
                self._cache.delete(key)
                return None

            logger.debug(f"Cache hit for {user_id} ({key[:16]}...)")
            return entry.content

        except Exception as e:
            logger.warning(f"Cache read error: {e}")
            return None

    def set(
        self,
        user_id: str,
        now: datetime,
        content: str,
        limit: Optional[int] = None,
    ) -> None:
        """Store a ranking payload."""
        if not self.enabled or self._cache is None:
            return

        key = self._generate_key(user_id, now, limit)
        created_at = datetime.now()

        entry = CacheEntry(
            key=key,
            user_id=user_id,
            content=content,
            created_at=created_at,
            expires_at=created_at + timedelta(seconds=self.ttl_seconds),
        )

        try:
            self._cache.set(key, entry.model_dump_json(), expire=self.ttl_seconds)
            logger.debug(f"Cached ranking for {user_id} ({key[:16]}...)")

        except Exception as e:
            logger.warning(f"Cache write error: {e}")

    def invalidate(self, user_id: str, now: datetime, limit: Optional[int] = None) -> bool:
        """Remove a specific entry from cache.

        Returns:
            True if entry was removed, False if not found
        """
        if not self.enabled or self._cache is None:
            return False

        key = self._generate_key(user_id, now, limit)

        try:
            return self._cache.delete(key)
        except Exception as e:
            logger.warning(f"Cache invalidation error: {e}")
            return False

    def clear(self) -> None:
        """Clear all cache entries."""
        if not self.enabled or self._cache is None:
            return

        try:
            self._cache.clear()
            logger.info("Cache cleared")
        except Exception as e:
            logger.warning(f"Cache clear error: {e}")

    def stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        if not self.enabled or self._cache is None:
            return {"enabled": False}

        try:
            return {
                "enabled": True,
                "path": str(self.cache_path),
                "size_bytes": self._cache.volume(),
                "count": len(self._cache),
                "ttl_seconds": self.ttl_seconds,
            }
        except Exception as e:
            logger.warning(f"Cache stats error: {e}")
            return {"enabled": True, "error": str(e)}

    def close(self) -> None:
        """Close the cache."""
        if self._cache is not None:
            try:
                self._cache.close()
            except Exception as e:
                logger.warning(f"Cache close error: {e}")
