"""
Orchestrator: runs a SourceAdapter against a site.

Exposes the three operations hosts call (search, get_details, get_content)
and is the only component that performs network I/O, through the injected
fetch. Each operation issues its requests one after the other; nothing here
runs concurrently and nothing is shared between calls, so one orchestrator
can serve any number of callers.

Failure contract:
  search()      → never raises; failures become [] and are reported to the sink
  get_details() → TransportFailure after the alternate-URL retry,
                  StructuralMismatch/EmptyResult when the title is missing
  get_content() → TransportFailure, StructuralMismatch when no content layout
                  matched, EmptyResult when the matched payload is empty
"""

import inspect
from typing import Callable, Optional, TypeVar

from .adapter import SourceAdapter
from .cleaner import TextCleaner
from .content_cache import ContentCache
from .entities import decode_entities
from .exceptions import EmptyResult, StructuralMismatch, TransportFailure
from .resolvers import FieldResolver
from .schemas import (
    BookDetails, ChapterContent, ChapterRef, RawDocument, SearchResult, SourceInfo
)
from .transport import Fetch
from .logger import get_module_logger

FailureSink = Callable[[str, Exception], None]

T = TypeVar("T")


def reading_order(items: list[T], newest_first: bool) -> list[T]:
    """Return a listing in reading order (oldest first)."""
    return list(reversed(items)) if newest_first else list(items)


def _first_value(record: dict[str, str]) -> str:
    for value in record.values():
        if value.strip():
            return value
    return ""


class SourceOrchestrator:
    """Runs search / details / content for one SourceAdapter."""

    def __init__(
        self,
        adapter: SourceAdapter,
        fetch: Fetch,
        cache: Optional[ContentCache] = None,
        sink: Optional[FailureSink] = None,
        cleaner: Optional[TextCleaner] = None
    ):
        """
        Args:
            adapter: Site configuration
            fetch: Awaitable fetch(url, headers) supplied by the host
            cache: Optional chapter content cache
            sink: Optional callback receiving (operation, error) for failures
                  search() recovers from; they are always logged as well
            cleaner: Text cleaner for prose fields
        """
        self.adapter = adapter
        self.fetch = fetch
        self.cache = cache
        self.sink = sink
        self.cleaner = cleaner or TextCleaner()
        self.logger = get_module_logger(f"sources.{adapter.id}")

    @property
    def info(self) -> SourceInfo:
        return self.adapter.info

    # --- Network ---

    async def _get(self, url: str, headers: Optional[dict[str, str]] = None) -> RawDocument:
        self.logger.debug(f"Fetching {url}")
        try:
            response = await self.fetch(url, self.adapter.request_headers(headers))
        except TransportFailure:
            raise
        except Exception as e:
            # Host transports raise their own error types; normalize them
            raise TransportFailure(f"Request to {url} failed: {e}", url=url) from e

        if not response.ok:
            raise TransportFailure(f"{url} answered {response.status}", url=url, status=response.status)

        body = response.text()
        if inspect.isawaitable(body):
            body = await body
        return RawDocument(url=str(getattr(response, "url", None) or url), text=body or "")

    async def _get_with_fallback(self, urls: list[str], what: str) -> RawDocument:
        """Fetch the primary URL, then the alternate construction once."""
        failure = None
        for attempt, url in enumerate(urls):
            if attempt:
                self.logger.info(f"Retrying {what} with alternate URL: {url}")
            try:
                return await self._get(url)
            except TransportFailure as e:
                self.logger.warning(f"Fetching {what} failed: {e.message}")
                failure = e

        raise TransportFailure(
            f"Failed to fetch {what} (tried {len(urls)} URL(s))",
            url=urls[-1],
            status=failure.status if failure else None,
            details={"urls": urls}
        )

    def _report(self, operation: str, error: Exception) -> None:
        self.logger.error(f"{operation} failed: {error}")
        if self.sink is not None:
            self.sink(operation, error)

    # --- Field helpers ---

    def _inline(self, resolver: Optional[FieldResolver], text: str) -> str:
        if resolver is None:
            return ""
        return self.cleaner.clean_inline(resolver.resolve_value(text))

    def _prose(self, resolver: Optional[FieldResolver], text: str) -> str:
        if resolver is None:
            return ""
        return self.cleaner.clean(resolver.resolve_value(text))

    def _url(self, raw: Optional[str]) -> str:
        url = decode_entities(raw).strip()
        return self.adapter.absolute(url) if url else ""

    # --- Search ---

    async def search(self, query: str) -> list[SearchResult]:
        """
        Search the source.

        Never raises for recoverable failures (network error, unexpected
        markup): the failure is reported and an empty list returned. Result
        blocks missing an identifier or a title are skipped.
        """
        url = self.adapter.search_url_for(query)
        self.logger.info(f"Searching: {url}")

        try:
            document = await self._get(url)
            results = self._parse_search(document)
        except Exception as e:
            self._report("search", e)
            return []

        self.logger.info(f"Parsed {len(results)} results for '{query}'")
        return results

    def _parse_search(self, document: RawDocument) -> list[SearchResult]:
        adapter = self.adapter
        records = adapter.search_items.resolve_all(document.text)
        self.logger.debug(f"Found {len(records)} potential search results")

        results = []
        for record in records:
            fields = dict(record)
            block = fields.get("block", "")
            for name, resolver in adapter.search_fields.items():
                if block and not fields.get(name, "").strip():
                    fields[name] = resolver.resolve_value(block) or ""

            identifier = decode_entities(fields.get("id", "")).strip()
            title = self.cleaner.clean_inline(fields.get("title"))
            if not identifier or not title:
                self.logger.debug(f"Skipping malformed search result (id={identifier!r}, title={title!r})")
                continue

            cover_url = self._url(fields.get("cover"))
            results.append(SearchResult(
                identifier=identifier,
                title=title,
                author=self.cleaner.clean_inline(fields.get("author")) or None,
                cover_url=cover_url or adapter.placeholder_cover,
                description=self.cleaner.clean(fields.get("description")) or None,
            ))
        return results

    # --- Details ---

    async def get_details(self, identifier: str) -> BookDetails:
        """
        Fetch the full record of a book, chapters in reading order.

        Raises:
            TransportFailure: both URL constructions failed
            StructuralMismatch: no title layout matched
            EmptyResult: the title matched but is blank
        """
        adapter = self.adapter
        document = await self._get_with_fallback(adapter.detail_urls(identifier), f"details for {identifier}")
        text = document.text

        raw_title = adapter.title.resolve_value(text)
        if raw_title is None:
            self.logger.error(f"No title layout matched {document.url}; the site markup may have changed")
            raise StructuralMismatch("title", document.url)
        title = self.cleaner.clean_inline(raw_title)
        if not title:
            raise EmptyResult("title", document.url)

        cover_url = self._url(adapter.cover.resolve_value(text)) if adapter.cover else ""

        extra = {}
        for name, resolver in adapter.extra.items():
            value = self._inline(resolver, text)
            if value:
                extra[name] = value

        chapters = await self._chapters(identifier, document)

        return BookDetails(
            identifier=identifier,
            title=title,
            author=self._inline(adapter.author, text) or adapter.default_author,
            cover_url=cover_url or adapter.placeholder_cover,
            description=self._prose(adapter.description, text) or adapter.default_description,
            genres=self._genres(text),
            status=self._inline(adapter.status, text) or adapter.default_status,
            chapters=chapters,
            extra=extra,
        )

    def _genres(self, text: str) -> list[str]:
        adapter = self.adapter
        if adapter.genres is None:
            return []

        scope = text
        if adapter.genre_list is not None:
            scope = adapter.genre_list.resolve_value(text) or ""

        genres = []
        for record in adapter.genres.resolve_all(scope):
            name = self.cleaner.clean_inline(_first_value(record))
            if name and name not in genres:
                genres.append(name)
        return genres

    async def _chapters(self, identifier: str, document: RawDocument) -> list[ChapterRef]:
        """
        Chapter list for a book page.

        Sources with a listing endpoint need a dependent request: the id
        that keys the endpoint is only known once the book page is parsed.
        A failed listing degrades to the chapters embedded in the page.
        """
        adapter = self.adapter
        if adapter.chapters is None:
            return []

        records = []
        listing_attempted = False

        if adapter.chapter_listing_url:
            listing_attempted = True
            source_id = adapter.chapter_source_id.resolve_value(document.text)
            if source_id:
                values = {"source_id": source_id, "book_url": document.url}
                listing_url = adapter.build_url(adapter.chapter_listing_url, **values)
                headers = {
                    name: adapter.build_url(value, **values)
                    for name, value in adapter.chapter_listing_headers.items()
                }
                self.logger.info(f"Fetching chapter list from {listing_url}")
                try:
                    listing = await self._get(listing_url, headers)
                    records = adapter.chapters.resolve_all(listing.text)
                except TransportFailure as e:
                    self.logger.warning(f"Chapter listing failed for {identifier}: {e.message}")
            else:
                self.logger.warning(f"Could not find the chapter listing id for {identifier}")

        if not records:
            if adapter.chapter_list is not None:
                scope = adapter.chapter_list.resolve_value(document.text) or ""
                if listing_attempted and scope:
                    self.logger.info(f"Using chapters embedded in the page for {identifier}")
            else:
                scope = "" if listing_attempted else document.text
            records = adapter.chapters.resolve_all(scope)

        chapters = []
        for record in records:
            chapter_id = decode_entities(record.get("id", "")).strip()
            chapter_title = self.cleaner.clean_inline(record.get("title"))
            if not chapter_id or not chapter_title:
                continue
            path = None
            if adapter.chapter_path:
                path = adapter.build_url(adapter.chapter_path, book_id=identifier, id=chapter_id)
            chapters.append(ChapterRef(identifier=chapter_id, title=chapter_title, path=path))

        self.logger.debug(f"Parsed {len(chapters)} chapters for {identifier}")
        return reading_order(chapters, adapter.chapters_newest_first)

    async def get_chapter_list(self, identifier: str) -> list[ChapterRef]:
        """Chapters of a book in reading order (fetches the book page)."""
        details = await self.get_details(identifier)
        return details.chapters

    # --- Content ---

    async def get_content(self, identifier: str, parent: Optional[str] = None) -> ChapterContent:
        """
        Fetch one chapter: cleaned text for novel sources, page image URLs for
        image sources.

        Args:
            identifier: Chapter identifier as returned in BookDetails.chapters
            parent: Identifier of the book, for sources whose chapter URLs
                    need it

        Raises:
            TransportFailure: both URL constructions failed
            StructuralMismatch: no content layout matched
            EmptyResult: the content matched but is empty
        """
        adapter = self.adapter
        if self.cache is not None:
            cached = self.cache.get(adapter.id, identifier, parent=parent)
            if cached is not None:
                return cached

        urls = adapter.content_urls(identifier, book_id=parent)
        document = await self._get_with_fallback(urls, f"content for {identifier}")

        if adapter.content_kind == "text":
            content = self._text_content(identifier, document)
        else:
            content = self._page_content(identifier, document)

        if self.cache is not None:
            try:
                self.cache.put(adapter.id, content, parent=parent)
            except OSError as e:
                # The chapter was read fine; only storing it failed
                self.logger.warning(f"Could not cache content for {identifier}: {e}")
        return content

    def _text_content(self, identifier: str, document: RawDocument) -> ChapterContent:
        raw = self.adapter.content.resolve_value(document.text)
        if raw is None:
            self.logger.error(f"No content layout matched {document.url}; the site markup may have changed")
            raise StructuralMismatch("content", document.url)

        text = self.cleaner.clean(raw)
        if not text:
            raise EmptyResult("content", document.url)
        return ChapterContent(identifier=identifier, text=text)

    def _page_content(self, identifier: str, document: RawDocument) -> ChapterContent:
        pages = []
        for record in self.adapter.pages.resolve_all(document.text):
            url = self._url(_first_value(record))
            if url and url not in pages:
                pages.append(url)

        if not pages:
            self.logger.error(f"No page images found at {document.url}")
            raise EmptyResult("pages", document.url)

        self.logger.info(f"Extracted {len(pages)} pages for chapter {identifier}")
        return ChapterContent(identifier=identifier, pages=pages)
