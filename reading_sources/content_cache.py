"""
File-based cache of chapter content.

Extraction is a pure function of the page text and the identifier, so once a
chapter has been read it can be served again without a request:
- Speed: chapters are read repeatedly while paging back and forth
- Politeness: fewer requests against the origin site
- Debugging: the cached JSON shows exactly what the adapter extracted
"""

import hashlib
import json
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from .schemas import ChapterContent
from .logger import get_module_logger

logger = get_module_logger("content_cache")


class ContentCache:
    """
    File-based cache for ChapterContent.

    One JSON file per (source, parent book, chapter identifier) in the cache
    directory.
    """

    def __init__(self, cache_dir: Optional[Union[str, Path]] = None):
        """
        Initialize content cache.

        Args:
            cache_dir: Directory to store cache files.
                      Defaults to ./content_cache/
        """
        if cache_dir is None:
            cache_dir = Path.cwd() / "content_cache"

        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)

        logger.info(f"Content cache initialized at: {self.cache_dir}")

    def _generate_cache_key(self, source_id: str, identifier: str, parent: Optional[str] = None) -> str:
        """
        Build a filesystem-safe key for a chapter.

        The readable part keeps the cache directory easy to browse; the hash
        suffix keeps identifiers that sanitize alike ("a/b" vs "a_b") apart,
        and chapters that share an identifier under different parent books.
        """
        safe_name = "".join(c if c.isalnum() or c in "-_." else "_" for c in identifier.strip("/"))
        digest = hashlib.md5(f"{source_id}\n{parent or ''}\n{identifier}".encode("utf-8")).hexdigest()[:12]
        return f"{source_id}__{safe_name[:80]}__{digest}"

    def _path(self, source_id: str, identifier: str, parent: Optional[str] = None) -> Path:
        return self.cache_dir / f"{self._generate_cache_key(source_id, identifier, parent)}.json"

    def get(self, source_id: str, identifier: str, parent: Optional[str] = None) -> Optional[ChapterContent]:
        """
        Retrieve cached content for a chapter.

        Args:
            source_id: Source the chapter was read from
            identifier: Chapter identifier
            parent: Parent book identifier, when the chapter was fetched with one

        Returns:
            ChapterContent if cached and readable, None otherwise
        """
        cache_file = self._path(source_id, identifier, parent)

        if not cache_file.exists():
            logger.debug(f"Cache miss for {source_id}:{parent or ''}:{identifier}")
            return None

        try:
            data = json.loads(cache_file.read_text(encoding="utf-8"))
            content = ChapterContent(**data["content"])
        except (OSError, ValueError, KeyError, TypeError, ValidationError) as e:
            # A corrupt entry is treated as a miss; the next put() overwrites it
            logger.warning(f"Failed to load cached content {cache_file.name}: {e}")
            return None

        logger.debug(f"Cache hit for {source_id}:{parent or ''}:{identifier}")
        return content

    def put(self, source_id: str, content: ChapterContent, parent: Optional[str] = None) -> str:
        """
        Store chapter content.

        Returns:
            Cache key used
        """
        cache_key = self._generate_cache_key(source_id, content.identifier, parent)
        cache_file = self.cache_dir / f"{cache_key}.json"

        cache_data = {
            "cache_key": cache_key,
            "source_id": source_id,
            "parent": parent,
            "identifier": content.identifier,
            "created_at": datetime.now().isoformat(),
            "content": content.model_dump(),
        }

        cache_file.write_text(json.dumps(cache_data, indent=2, ensure_ascii=False), encoding="utf-8")
        logger.debug(f"Cached content with key: {cache_key}")

        return cache_key

    def exists(self, source_id: str, identifier: str, parent: Optional[str] = None) -> bool:
        """Check if content is cached."""
        return self._path(source_id, identifier, parent).exists()

    def delete(self, source_id: str, identifier: str, parent: Optional[str] = None) -> bool:
        """Delete cached content."""
        cache_file = self._path(source_id, identifier, parent)

        if cache_file.exists():
            cache_file.unlink()
            logger.info(f"Deleted cache for {source_id}:{identifier}")
            return True
        return False

    def clear(self) -> int:
        """Clear all cached content. Returns count of deleted files."""
        count = 0
        for cache_file in self.cache_dir.glob("*.json"):
            cache_file.unlink()
            count += 1
        logger.info(f"Cleared {count} cached chapters")
        return count

    def list_cached(self) -> list[dict]:
        """List all cache entries."""
        entries = []
        for cache_file in sorted(self.cache_dir.glob("*.json")):
            try:
                data = json.loads(cache_file.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                logger.warning(f"Skipping unreadable cache file {cache_file.name}: {e}")
                continue
            entries.append({
                "cache_key": data.get("cache_key"),
                "source_id": data.get("source_id"),
                "parent": data.get("parent"),
                "identifier": data.get("identifier"),
                "created_at": data.get("created_at"),
                "file": str(cache_file)
            })
        return entries
