"""
Built-in source adapters and the registry hosts pick them from.
"""

from typing import Optional

from ..adapter import SourceAdapter
from ..content_cache import ContentCache
from ..orchestrator import FailureSink, SourceOrchestrator
from ..schemas import SourceInfo
from ..transport import Fetch
from .mangapill import MANGAPILL
from .readnovelfull import READNOVELFULL

SOURCES: dict[str, SourceAdapter] = {
    adapter.id: adapter for adapter in (READNOVELFULL, MANGAPILL)
}


def get_source(source_id: str) -> SourceAdapter:
    """Look up a built-in adapter by id."""
    try:
        return SOURCES[source_id]
    except KeyError:
        known = ", ".join(sorted(SOURCES))
        raise ValueError(f"Unknown source '{source_id}' (available: {known})") from None


def available_sources() -> list[SourceInfo]:
    """Metadata of every enabled built-in source."""
    return [adapter.info for adapter in SOURCES.values() if adapter.info.enabled]


def open_source(
    source_id: str,
    fetch: Fetch,
    cache: Optional[ContentCache] = None,
    sink: Optional[FailureSink] = None
) -> SourceOrchestrator:
    """Convenience function to build an orchestrator for a built-in source."""
    return SourceOrchestrator(get_source(source_id), fetch, cache=cache, sink=sink)


__all__ = [
    "SOURCES",
    "READNOVELFULL",
    "MANGAPILL",
    "get_source",
    "available_sources",
    "open_source",
]
