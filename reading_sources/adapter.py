"""
Declarative per-site configuration.

A SourceAdapter says everything the orchestrator needs to know about one
origin site: how to build URLs from identifiers, which headers to send, and
which FieldResolver chain reads each field. It contains no behaviour beyond
URL building, so sites that should act alike cannot drift apart, and a
mirror-domain move is a configuration change.
"""

from typing import Literal, Optional
from urllib.parse import quote, urljoin

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .resolvers import FieldResolver
from .schemas import SourceInfo

PLACEHOLDER_COVER = "https://via.placeholder.com/150x200?text=No+Cover"


class SourceAdapter(BaseModel):
    """
    Immutable configuration for one origin site.

    URL templates are str.format templates. Every template can use
    {base_url}. Detail and content templates also get {id}; content
    templates get {book_id} as well, empty unless the caller passes the
    parent book. The search template gets {query} (already URL-quoted), the
    chapter listing template and headers {source_id} and {book_url}, and the
    chapter path template {book_id} and {id}.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    info: SourceInfo

    # --- Adapter-scoped constants ---
    placeholder_cover: str = PLACEHOLDER_COVER
    default_author: str = "Unknown Author"
    default_description: str = "No description available."
    default_status: str = "Unknown"
    headers: dict[str, str] = Field(default_factory=dict)   # Sent with every request

    # --- Search ---
    search_url: str
    search_items: FieldResolver                   # One record per result
    # Resolvers run inside a record's "block" capture for fields the item
    # pattern does not capture itself
    search_fields: dict[str, FieldResolver] = Field(default_factory=dict)

    # --- Details ---
    detail_url: str = "{base_url}/{id}"
    detail_fallback_url: Optional[str] = None     # Tried once if detail_url fails
    title: FieldResolver
    author: Optional[FieldResolver] = None
    cover: Optional[FieldResolver] = None
    description: Optional[FieldResolver] = None
    status: Optional[FieldResolver] = None
    genre_list: Optional[FieldResolver] = None    # Container narrowing where genres are read
    genres: Optional[FieldResolver] = None
    extra: dict[str, FieldResolver] = Field(default_factory=dict)

    # --- Chapters ---
    # Dependent fetch: an id read from the detail page keys a listing endpoint
    chapter_source_id: Optional[FieldResolver] = None
    chapter_listing_url: Optional[str] = None
    chapter_listing_headers: dict[str, str] = Field(default_factory=dict)
    chapter_list: Optional[FieldResolver] = None  # Container of chapters embedded in the detail page
    chapters: Optional[FieldResolver] = None      # Items: fields "id" and "title"
    chapters_newest_first: bool = False           # Per-site fact, the list is reversed when True
    chapter_path: Optional[str] = None

    # --- Content ---
    content_url: str = "{base_url}/{id}"
    content_fallback_url: Optional[str] = None
    content_kind: Literal["text", "images"] = "text"
    content: Optional[FieldResolver] = None       # Text container (content_kind="text")
    pages: Optional[FieldResolver] = None         # Page image URLs (content_kind="images")

    @model_validator(mode="after")
    def _consistent(self) -> "SourceAdapter":
        if self.content_kind == "text" and self.content is None:
            raise ValueError(f"{self.info.id}: text sources need a content resolver")
        if self.content_kind == "images" and self.pages is None:
            raise ValueError(f"{self.info.id}: image sources need a pages resolver")
        if self.chapter_listing_url and self.chapter_source_id is None:
            raise ValueError(f"{self.info.id}: chapter_listing_url needs chapter_source_id")
        return self

    @property
    def id(self) -> str:
        return self.info.id

    @property
    def base_url(self) -> str:
        return self.info.base_url.rstrip("/")

    def build_url(self, template: str, **values: str) -> str:
        return template.format(base_url=self.base_url, **values)

    def search_url_for(self, query: str) -> str:
        # Same escaping as encodeURIComponent, which the sites expect
        return self.build_url(self.search_url, query=quote(query, safe="-_.!~*'()"))

    def detail_urls(self, identifier: str) -> list[str]:
        """Primary detail URL, then the alternate construction if any."""
        return self._with_fallback(self.detail_url, self.detail_fallback_url, id=identifier)

    def content_urls(self, identifier: str, book_id: Optional[str] = None) -> list[str]:
        return self._with_fallback(
            self.content_url, self.content_fallback_url, id=identifier, book_id=book_id or ""
        )

    def _with_fallback(self, primary: str, fallback: Optional[str], **values: str) -> list[str]:
        urls = [self.build_url(primary, **values)]
        if fallback:
            alternate = self.build_url(fallback, **values)
            if alternate not in urls:
                urls.append(alternate)
        return urls

    def absolute(self, url: str) -> str:
        """Resolve a relative or protocol-relative media URL against the origin."""
        if not url:
            return url
        return urljoin(self.base_url + "/", url)

    def request_headers(self, extra: Optional[dict[str, str]] = None) -> dict[str, str]:
        merged = dict(self.headers)
        if extra:
            merged.update(extra)
        return merged
