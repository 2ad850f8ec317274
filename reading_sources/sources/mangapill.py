"""
MangaPill (mangapill.com): manga, chapters served as page images.

Identifiers are site paths: "/manga/1/one-piece" for a book,
"/chapters/1-10001000/one-piece-chapter-1" for a chapter. The book page
lists chapters newest first.
"""

import re

from ..adapter import SourceAdapter
from ..resolvers import regex_chain
from ..schemas import SourceInfo

INFO = SourceInfo(
    id="mangapill",
    name="MangaPill",
    version="1.0.1",
    author="AI Assistant (Adapted for Rida)",
    description="Search and read manga from MangaPill.com.",
    languages=("en",),
    base_url="https://mangapill.com",
)


def _info_row(label: str) -> str:
    # <div>Status</div><div class="...">publishing</div>
    return rf"<div>{label}</div>\s*<div[^>]*>([^<]+)</div>"


MANGAPILL = SourceAdapter(
    info=INFO,
    default_author="N/A",
    default_status="N/A",
    headers={"Referer": f"{INFO.base_url}/"},

    search_url="{base_url}/search?q={query}",
    search_items=regex_chain(
        # Card with the title in the div under the cover
        r'<a href="(/manga/[^"]+)"[^>]*>\s*<img[^>]+data-src="([^"]+)"[^>]*alt="[^"]+"[^>]*>\s*</a>'
        r'\s*<div class="mt-3 font-bold[^"]*">([^<]+)</div>',
        # Bare cover link; the alt text is the title
        r'<a href="(/manga/[^"]+)"[^>]*>\s*<img[^>]+data-src="([^"]+)"[^>]*alt="([^"]+)"',
        fields=("id", "cover", "title"),
    ),

    detail_url="{base_url}{id}",
    title=regex_chain(r"<h1[^>]*>([^<]+)</h1>"),
    cover=regex_chain(
        r'<img[^>]+class="[^"]*mb-3[^"]*"[^>]*data-src="([^"]+)"',
        r'<div class="flex flex-col sm:flex-row my-3">\s*<div>\s*<img[^>]+data-src="([^"]+)"',
    ),
    description=regex_chain(r'<p class="text-sm[^"]*">\s*([^<]+)\s*</p>'),
    author=regex_chain(_info_row(r"Author\(s\)"), _info_row("Author")),
    status=regex_chain(_info_row("Status")),
    genres=regex_chain(r'<a[^>]+href="/search\?genre=[^"]+"[^>]*>([^<]+)</a>', fields=("name",)),
    extra={"type": regex_chain(_info_row("Type"))},

    chapter_list=regex_chain(
        r'<div id="chapters"[^>]*>(.*?)</div>',
        flags=re.IGNORECASE | re.DOTALL,
    ),
    chapters=regex_chain(r'<a href="(/chapters/[^"]+)"[^>]*>\s*([^<]+?)\s*</a>', fields=("id", "title")),
    chapters_newest_first=True,

    content_url="{base_url}{id}",
    content_kind="images",
    pages=regex_chain(
        r'<chapter-page[^>]*>\s*<picture>\s*<source[^>]*>\s*<img[^>]+data-src="([^"]*mangapill[^"]*)"',
        # Any lazy image on the page, as long as it is a chapter page from the CDN
        r'<img[^>]+data-src="((?=[^"]*mangapill)[^"]*/chapters/[^"]*)"',
    ),
)
