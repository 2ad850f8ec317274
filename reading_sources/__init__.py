"""
Reading Sources

Pattern-based extraction of search results, book details, chapter lists and
chapter content from reading sites.
- EntityDecoder / TextCleaner: HTML fragment → plain text
- CapturePattern + resolvers: structural fields through ordered fallback chains
- SourceAdapter: declarative per-site configuration
- SourceOrchestrator: search / get_details / get_content over an injected fetch

Public API surface:
  Engine          : SourceOrchestrator, SourceAdapter, PatternResolver, SelectorResolver
  Text            : TextCleaner, EntityDecoder, clean_text, decode_entities
  Data models     : SearchResult, BookDetails, ChapterRef, ChapterContent, SourceInfo
  Error types     : TransportFailure, StructuralMismatch, EmptyResult
  Built-ins       : get_source, available_sources, open_source
"""

# --- Text pipeline ---
from .entities import EntityDecoder, decode_entities
from .cleaner import TextCleaner, clean_text

# --- Structural extraction ---
from .patterns import CapturePattern, match_all, match_first
from .resolvers import (
    FieldResolver, PatternResolver, SelectorResolver, SelectorPattern, FieldSelector,
    FallbackResolver
)

# --- Site configuration and orchestration ---
from .adapter import SourceAdapter
from .orchestrator import SourceOrchestrator
from .transport import HttpResponse, HttpxTransport
from .content_cache import ContentCache

# --- Data models ---
from .schemas import SearchResult, BookDetails, ChapterRef, ChapterContent, SourceInfo

# --- Exceptions (callers of get_details/get_content should catch these) ---
from .exceptions import ReadingSourceError, TransportFailure, StructuralMismatch, EmptyResult

# --- Built-in sources ---
from .sources import get_source, available_sources, open_source

__version__ = "0.3.0"
__all__ = [
    "EntityDecoder",
    "decode_entities",
    "TextCleaner",
    "clean_text",
    "CapturePattern",
    "match_all",
    "match_first",
    "FieldResolver",
    "PatternResolver",
    "SelectorResolver",
    "SelectorPattern",
    "FieldSelector",
    "FallbackResolver",
    "SourceAdapter",
    "SourceOrchestrator",
    "HttpResponse",
    "HttpxTransport",
    "ContentCache",
    "SearchResult",
    "BookDetails",
    "ChapterRef",
    "ChapterContent",
    "SourceInfo",
    "ReadingSourceError",
    "TransportFailure",
    "StructuralMismatch",
    "EmptyResult",
    "get_source",
    "available_sources",
    "open_source",
]
