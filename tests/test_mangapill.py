from __future__ import annotations

import asyncio

import pytest

from reading_sources.exceptions import EmptyResult
from reading_sources.sources import open_source

BASE = "https://mangapill.com"
CDN = "https://cdn.readdetectiveconan.com/file/mangapill"

SEARCH_PAGE = f"""
<div class="grid gap-3 lg:grid-cols-5">
  <div>
    <a href="/manga/2/one-piece" class="relative block">
      <img class="lazy" data-src="{CDN}/i/2.jpeg" alt="One Piece">
    </a>
    <div class="mt-3 font-bold text-base">One Piece</div>
  </div>
  <div>
    <a href="/manga/3050/one-piece-party" class="relative block">
      <img class="lazy" data-src="{CDN}/i/3050.jpeg" alt="One Piece Party">
    </a>
    <div class="mt-3 font-bold text-base">One Piece Party</div>
  </div>
</div>
"""

BOOK_PAGE = f"""
<div class="flex flex-col sm:flex-row my-3">
  <div class="text-transparent">
    <img class="lazy mb-3 rounded" data-src="{CDN}/i/2.jpeg" alt="One Piece">
  </div>
  <div class="flex flex-col">
    <div class="mb-3"><h1 class="font-bold text-lg md:text-2xl">One Piece</h1></div>
    <div class="mb-3"><p class="text-sm text--secondary">Gol D. Roger was known as the Pirate King.</p></div>
    <div class="grid grid-cols-1 md:grid-cols-3 gap-3 mb-3">
      <div><div>Type</div><div class="text-sm">manga</div></div>
      <div><div>Status</div><div class="text-sm">publishing</div></div>
    </div>
    <div class="mb-3">
      <a class="text-sm mr-1 text-brand" href="/search?genre=Action">Action</a>
      <a class="text-sm mr-1 text-brand" href="/search?genre=Adventure">Adventure</a>
      <a class="text-sm mr-1 text-brand" href="/search?genre=Action">Action</a>
    </div>
  </div>
</div>
<div id="chapters" data-filter-list>
  <a href="/chapters/2-11002000/one-piece-chapter-1002" class="border">Chapter 1002</a>
  <a href="/chapters/2-11001000/one-piece-chapter-1001" class="border">Chapter 1001</a>
  <a href="/chapters/2-11000000/one-piece-chapter-1000" class="border">Chapter 1000</a>
</div>
"""

CHAPTER = "/chapters/2-11000000/one-piece-chapter-1000"

PAGES_PRIMARY = f"""
<chapter-page>
  <picture>
    <source srcset="{CDN}/chapters/2/1000/1.webp" type="image/webp">
    <img class="js-page" data-src="{CDN}/chapters/2/1000/1.jpeg" alt="page 1">
  </picture>
</chapter-page>
<chapter-page>
  <picture>
    <source srcset="{CDN}/chapters/2/1000/2.webp" type="image/webp">
    <img class="js-page" data-src="{CDN}/chapters/2/1000/2.jpeg" alt="page 2">
  </picture>
</chapter-page>
"""

PAGES_FALLBACK = f"""
<img class="lazy" data-src="{CDN}/chapters/2/1000/1.jpeg">
<img class="lazy" data-src="https://ads.example.com/banner.jpg">
<img class="lazy" data-src="{CDN}/i/2.jpeg">
<img class="lazy" data-src="{CDN}/chapters/2/1000/2.jpeg">
<img data-src="{CDN}/chapters/2/1000/1.jpeg">
"""


def test_search_reads_cards(fake_fetch) -> None:
    fetch = fake_fetch({f"{BASE}/search?q=one%20piece": SEARCH_PAGE})

    results = asyncio.run(open_source("mangapill", fetch).search("one piece"))

    assert [(r.identifier, r.title) for r in results] == [
        ("/manga/2/one-piece", "One Piece"),
        ("/manga/3050/one-piece-party", "One Piece Party"),
    ]
    assert results[0].cover_url == f"{CDN}/i/2.jpeg"
    assert fetch.calls[0][1] == {"Referer": f"{BASE}/"}


def test_details(fake_fetch) -> None:
    fetch = fake_fetch({f"{BASE}/manga/2/one-piece": BOOK_PAGE})

    details = asyncio.run(open_source("mangapill", fetch).get_details("/manga/2/one-piece"))

    assert details.title == "One Piece"
    assert details.cover_url == f"{CDN}/i/2.jpeg"
    assert details.description == "Gol D. Roger was known as the Pirate King."
    assert details.author == "N/A"
    assert details.status == "publishing"
    assert details.genres == ["Action", "Adventure"]
    assert details.extra == {"type": "manga"}
    # Listed newest first on the page
    assert [c.title for c in details.chapters] == ["Chapter 1000", "Chapter 1001", "Chapter 1002"]
    assert details.chapters[0].identifier == CHAPTER


@pytest.mark.parametrize("body", [PAGES_PRIMARY, PAGES_FALLBACK])
def test_content_pages(fake_fetch, body: str) -> None:
    fetch = fake_fetch({f"{BASE}{CHAPTER}": body})

    content = asyncio.run(open_source("mangapill", fetch).get_content(CHAPTER))

    assert content.text is None
    assert not content.is_text
    assert content.pages == [f"{CDN}/chapters/2/1000/1.jpeg", f"{CDN}/chapters/2/1000/2.jpeg"]


def test_chapter_without_pages_is_an_empty_result(fake_fetch) -> None:
    fetch = fake_fetch({f"{BASE}{CHAPTER}": '<p>Chapter removed</p><img data-src="https://ads.example.com/x.jpg">'})

    with pytest.raises(EmptyResult) as excinfo:
        asyncio.run(open_source("mangapill", fetch).get_content(CHAPTER))

    assert excinfo.value.field == "pages"


def test_identifiers_round_trip_from_search_to_pages(fake_fetch) -> None:
    fetch = fake_fetch({
        f"{BASE}/search?q=one%20piece": SEARCH_PAGE,
        f"{BASE}/manga/2/one-piece": BOOK_PAGE,
        f"{BASE}{CHAPTER}": PAGES_PRIMARY,
    })
    source = open_source("mangapill", fetch)

    async def read_first_chapter():
        results = await source.search("one piece")
        details = await source.get_details(results[0].identifier)
        assert details.identifier == results[0].identifier
        return await source.get_content(details.chapters[0].identifier)

    content = asyncio.run(read_first_chapter())

    assert content.identifier == CHAPTER
    assert len(content.pages) == 2
