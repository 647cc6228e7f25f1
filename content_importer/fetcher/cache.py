"""Disk cache for fetched remote documents."""

import hashlib
import json
import re
from datetime import datetime, timedelta, timezone
from pathlib import Path


class ResponseCache:
    """Caches fetched text bodies on disk, keyed by SHA-256 of the URL."""

    # SHA-256 produces 64 hex characters
    _HASH_PATTERN = re.compile(r"^[a-f0-9]{64}$")

    def __init__(self, cache_path: Path, duration: timedelta | None) -> None:
        """Initialize response cache.

        Args:
            cache_path: Base directory for cached responses
            duration: Maximum age of a usable entry, None never expires
        """
        self.cache_path = cache_path
        self.duration = duration

    def hash_url(self, url: str) -> str:
        """Generate SHA-256 hash of a URL.

        Args:
            url: URL to hash

        Returns:
            Hex string of SHA-256 hash
        """
        return hashlib.sha256(url.encode()).hexdigest()

    def get(self, url: str) -> str | None:
        """Return the cached body for ``url`` if present and fresh."""
        cached_path = self._get_cached_path(self.hash_url(url))
        if not cached_path.exists():
            return None

        try:
            data = json.loads(cached_path.read_text(encoding="utf-8"))
            fetched_at = datetime.fromisoformat(data["fetched_at"])
        except (ValueError, KeyError):
            # Corrupt entry, refetch
            return None

        if self.duration is not None:
            if datetime.now(timezone.utc) - fetched_at > self.duration:
                return None

        return data["body"]

    def set(self, url: str, body: str) -> None:
        """Store ``body`` as the cached response for ``url``."""
        cached_path = self._get_cached_path(self.hash_url(url))
        cached_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "url": url,
            "body": body,
            "fetched_at": datetime.now(timezone.utc).isoformat(),
        }
        temp_path = cached_path.with_suffix(".tmp")
        temp_path.write_text(json.dumps(data), encoding="utf-8")
        temp_path.replace(cached_path)

    def _validate_hash(self, url_hash: str) -> None:
        """Validate hash format.

        Raises:
            ValueError: If hash format is invalid
        """
        if not self._HASH_PATTERN.match(url_hash):
            raise ValueError(
                f"Invalid hash format: expected 64 hex characters, got: {url_hash}"
            )

    def _get_cached_path(self, url_hash: str) -> Path:
        """Get path for a cached response.

        Args:
            url_hash: SHA-256 hash of the URL

        Returns:
            Path to the cache file
        """
        self._validate_hash(url_hash)
        prefix = url_hash[:2]
        return self.cache_path / prefix / f"{url_hash}.json"
