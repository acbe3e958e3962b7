"""
Caching layer for downloaded price data.

A small disk-based cache keyed by a hash of the request parameters, so that
repeated page refreshes inside the freshness window do not hit the network.
"""

import hashlib
import json
import logging
import os
import pickle
import tempfile
import time
from pathlib import Path
from typing import Any, Optional
from stockcorr.errors import CacheError

logger = logging.getLogger(__name__)


class DataCache:
    """
    A disk-based cache for downloaded data.

    Entries are pickled to ``<cache_dir>/<md5 of params>.pkl``; an entry's
    age is the modification time of its file.

    Representation Invariants:
        - cache_dir exists and is a directory
        - cache files are named by their hash
    """

    def __init__(self, cache_dir: str = ".cache"):
        """
        Initialize the cache.

        Postconditions:
            - cache_dir exists as a directory
        """
        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def _compute_hash(self, query_params: dict) -> str:
        # Sort keys for consistent hashing
        sorted_params = json.dumps(query_params, sort_keys=True)
        return hashlib.md5(sorted_params.encode()).hexdigest()

    def _path_for(self, query_params: dict) -> Path:
        return self.cache_dir / f"{self._compute_hash(query_params)}.pkl"

    def get(self, query_params: dict, max_age: Optional[float] = None) -> Optional[Any]:
        """
        Retrieve cached data if it exists and is fresh enough.

        Postconditions:
            - Returns cached data if found and not older than max_age
            - Does not modify cache

        Args:
            query_params: Query parameters used to generate cache key
            max_age: Maximum entry age in seconds (None means no limit)

        Returns:
            Cached data or None on a miss or stale entry

        Raises:
            CacheError: If the cache file cannot be read
        """
        cache_file = self._path_for(query_params)
        if not cache_file.exists():
            return None

        if max_age is not None:
            age = time.time() - cache_file.stat().st_mtime
            if age > max_age:
                logger.debug("Cache entry %s is stale (%.1fs old)", cache_file.name, age)
                return None

        try:
            with open(cache_file, "rb") as f:
                return pickle.load(f)
        except Exception as e:
            raise CacheError(f"Failed to read cache file: {e}") from e

    def set(self, query_params: dict, data: Any) -> None:
        """
        Store data in cache.

        Args:
            query_params: Query parameters used to generate cache key
            data: Picklable data to cache

        Raises:
            CacheError: If the cache file cannot be written
        """
        cache_file = self._path_for(query_params)
        tmp_path = None
        try:
            # Readers in other threads must never see a half-written entry
            with tempfile.NamedTemporaryFile(
                "wb", dir=self.cache_dir, suffix=".tmp", delete=False
            ) as f:
                tmp_path = f.name
                pickle.dump(data, f)
            os.replace(tmp_path, cache_file)
        except Exception as e:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise CacheError(f"Failed to write cache file: {e}") from e

    def clear(self) -> None:
        """Remove all cached files."""
        for cache_file in self.cache_dir.glob("*.pkl"):
            cache_file.unlink()

    def exists(self, query_params: dict) -> bool:
        return self._path_for(query_params).exists()
