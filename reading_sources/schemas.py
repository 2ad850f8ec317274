"""
Pydantic schemas for the records the orchestrator returns.

Data flow:
  transport → RawDocument → resolvers/cleaner → SearchResult / BookDetails /
  ChapterContent → caller

Identifiers are opaque to callers but must always be enough (alone, or with
the parent book's identifier) to request the same entity again.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


class RawDocument(BaseModel):
    """One fetched page: its body and the final URL after redirects."""
    model_config = ConfigDict(frozen=True)

    url: str
    text: str


class SourceInfo(BaseModel):
    """Descriptive metadata of a source module (what a host lists in its UI)."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    version: str = "1.0.0"
    author: str = ""                      # Who maintains the adapter
    description: str = ""
    languages: tuple[str, ...] = ("en",)
    enabled: bool = True
    base_url: str


# --- Records returned to callers ---

class SearchResult(BaseModel):
    """One hit from a source's search page."""
    identifier: str
    title: str
    author: Optional[str] = None
    cover_url: str
    description: Optional[str] = None


class ChapterRef(BaseModel):
    """
    A chapter as listed on a book page.

    `path` is only set for sources where the chapter identifier alone cannot
    rebuild the fetch URL (it then carries the resolved locator).
    """
    identifier: str
    title: str
    path: Optional[str] = None


class BookDetails(BaseModel):
    """Full record for one book, chapters in reading order (oldest first)."""
    identifier: str
    title: str
    author: str
    cover_url: str
    description: str
    genres: list[str] = Field(default_factory=list)   # Ordered, no duplicates
    status: str
    chapters: list[ChapterRef] = Field(default_factory=list)
    extra: dict[str, str] = Field(default_factory=dict)  # Site-specific fields (e.g. "type")


class ChapterContent(BaseModel):
    """
    The readable payload of one chapter.

    Novel sources fill `text`; image sources fill `pages` with page image URLs
    in reading order. Exactly one of the two is set.
    """
    identifier: str
    text: Optional[str] = None
    pages: Optional[list[str]] = None

    @model_validator(mode="after")
    def _text_or_pages(self) -> "ChapterContent":
        if (self.text is None) == (self.pages is None):
            raise ValueError("ChapterContent needs exactly one of text or pages")
        return self

    @property
    def is_text(self) -> bool:
        return self.text is not None
