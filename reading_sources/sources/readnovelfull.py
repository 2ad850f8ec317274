"""
ReadNovelFull (readnovelfull.com): web novels.

Search results are read through the tree-based resolver; a result row is a
small self-contained block, which CSS addresses far better than a regex
spanning several sibling divs. Chapter bodies are too (ad slots nest divs
inside them), with the older regexes kept as the last resort.
Everything else is regex.

Identifiers are URL slugs without the ".html" suffix: "martial-peak" for a
book, "martial-peak/chapter-1" for a chapter. Pages usually live at
"<slug>.html" but some only answer without the suffix, hence the fallback.

Chapters are not embedded in the book page any more; they come from
/ajax/chapter-archive keyed by the numeric novel id found on the book page,
and that listing is already in reading order.
"""

import re

from ..adapter import SourceAdapter
from ..resolvers import (
    FallbackResolver, FieldSelector, SelectorPattern, SelectorResolver, regex_chain
)
from ..schemas import SourceInfo

INFO = SourceInfo(
    id="readnovelfull",
    name="ReadNovelFull",
    version="1.0.1",
    author="vizor (Adapted for Rida)",
    description="ReadNovelFull source for web novels",
    languages=("en",),
    base_url="https://readnovelfull.com",
)

# Slug from "/martial-peak.html" or an absolute link to it
SLUG = r"^(?:https?://[^/]+)?/*([^?#]+?)(?:\.html)?$"

SEARCH_ROW_FIELDS = {
    "id": FieldSelector(css="h3.novel-title a", attr="href", extract=SLUG),
    "title": FieldSelector(css="h3.novel-title a", content="text"),
    "author": FieldSelector(css=".author", content="text"),
    "cover": FieldSelector(css="img", attr="src"),
    "description": FieldSelector(css=".novel-desc"),
}

# Inner HTML of a chapter body, ad slots removed
CHAPTER_BODY = FieldSelector(exclude=(".ads", "ins", "iframe"))

# Chapter links: captures the slug (suffix dropped) and the link text
CHAPTER_LINK = r'<li[^>]*>\s*<a href="/([^"]+?)(?:\.html)?"[^>]*title="[^"]+">\s*([^<]+?)\s*</a>\s*</li>'

READNOVELFULL = SourceAdapter(
    info=INFO,

    search_url="{base_url}/novel-list/search?keyword={query}",
    search_items=SelectorResolver(
        SelectorPattern(css="#list-page .list-novel .row", fields=SEARCH_ROW_FIELDS),
        SelectorPattern(css=".list-novel .row", fields=SEARCH_ROW_FIELDS),
    ),

    detail_url="{base_url}/{id}.html",
    detail_fallback_url="{base_url}/{id}",
    title=regex_chain(
        r'<h3 class="title"[^>]*>([^<]+)</h3>',
        r'<h1 class="title"[^>]*>([^<]+)</h1>',
    ),
    author=regex_chain(
        r">\s*Author\(s\):\s*</label>\s*<ul[^>]*>\s*<li[^>]*><a[^>]*>([^<]+)</a></li>\s*</ul>",
        r"<h3>\s*Author:\s*</h3>\s*<a[^>]*>([^<]+)</a>",
    ),
    cover=regex_chain(
        r'<div class="book">\s*<img[^>]*src="([^"]+)"',
    ),
    description=regex_chain(
        r'<div class="desc-text"[^>]*>(.*?)</div>',
        flags=re.IGNORECASE | re.DOTALL,
    ),
    status=regex_chain(
        r">\s*Status:\s*</label>\s*<a[^>]*>([^<]+)</a>",
        r"<h3>\s*Status:\s*</h3>\s*<a[^>]*>([^<]+)</a>",
    ),
    genre_list=regex_chain(
        r">\s*Genre:\s*</label>\s*<ul[^>]*>(.*?)</ul>",
        r"<h3>\s*Genre:\s*</h3>(.*?)</li>",
        flags=re.IGNORECASE | re.DOTALL,
    ),
    genres=regex_chain(r"<a[^>]*>([^<]+)</a>", fields=("name",)),

    chapter_source_id=regex_chain(
        r'data-novel-id="(\d+)"',
        r"\$\('#rate'\)\.raty\(\{.*?novelId:\s*(\d+)",
        flags=re.IGNORECASE | re.DOTALL,
    ),
    chapter_listing_url="{base_url}/ajax/chapter-archive?novelId={source_id}",
    chapter_listing_headers={
        "Referer": "{book_url}",
        "X-Requested-With": "XMLHttpRequest",
    },
    chapter_list=regex_chain(
        r'<div id="list-chapter"[^>]*>(.*?)</div>',
        flags=re.IGNORECASE | re.DOTALL,
    ),
    chapters=regex_chain(CHAPTER_LINK, fields=("id", "title")),
    chapters_newest_first=False,

    content_url="{base_url}/{id}.html",
    content_fallback_url="{base_url}/{id}",
    content_kind="text",
    content=FallbackResolver(
        # Chapter bodies carry nested ad divs, which a lazy regex stops at
        SelectorResolver(
            SelectorPattern(css="#chr-content", fields={"text": CHAPTER_BODY}),
            SelectorPattern(css="#chapter-content", fields={"text": CHAPTER_BODY}),
        ),
        regex_chain(
            r'<div id="chr-content"[^>]*>(.*?)</div>',
            r'<div id="chapter-content"[^>]*>(.*?)</div>',
            flags=re.IGNORECASE | re.DOTALL,
        ),
    ),
)
