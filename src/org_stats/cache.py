"""File-based caching layer for API responses."""

from __future__ import annotations

import hashlib
import json
import logging
import os
import time
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DIR = Path(
    os.environ.get("ORG_STATS_CACHE_DIR", Path.home() / ".cache" / "org-stats")
)
DEFAULT_TTL = 3600  # 1 hour


class FileCache:
    """JSON file per request, keyed by URL and params, expired after ``ttl`` seconds."""

    def __init__(
        self, cache_dir: Path = DEFAULT_CACHE_DIR, ttl: int = DEFAULT_TTL
    ) -> None:
        self._cache_dir = Path(cache_dir)
        self._ttl = ttl
        self._cache_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _make_key(url: str, params: dict[str, Any] | None = None) -> str:
        raw = url + json.dumps(params or {}, sort_keys=True)
        return hashlib.sha256(raw.encode()).hexdigest()

    def _path_for(self, key: str) -> Path:
        return self._cache_dir / f"{key}.json"

    def get(self, url: str, params: dict[str, Any] | None = None) -> Any | None:
        path = self._path_for(self._make_key(url, params))
        if not path.exists():
            return None
        try:
            entry = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            logger.debug("Ignoring unreadable cache entry %s", path)
            return None
        if time.time() - entry.get("ts", 0) > self._ttl:
            path.unlink(missing_ok=True)
            return None
        logger.debug("Cache hit for %s", url)
        return entry.get("value")

    def set(self, url: str, params: dict[str, Any] | None, value: Any) -> None:
        path = self._path_for(self._make_key(url, params))
        entry = {"ts": time.time(), "url": url, "value": value}
        try:
            path.write_text(json.dumps(entry, ensure_ascii=False), encoding="utf-8")
        except OSError as exc:
            logger.debug("Could not write cache entry %s: %s", path, exc)
