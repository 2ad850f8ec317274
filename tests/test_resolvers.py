from __future__ import annotations

import re

import pytest
from pydantic import ValidationError

from reading_sources.patterns import CapturePattern
from reading_sources.resolvers import (
    FallbackResolver,
    FieldSelector,
    ParsedDocument,
    PatternResolver,
    SelectorPattern,
    SelectorResolver,
    regex_chain,
)

PAGE = """
<html><body>
  <h2 class="headline">Old layout title</h2>
  <div class="info">
    <span class="label">Status:</span> <a href="/status/ongoing">Ongoing</a>
  </div>
  <ul id="toc">
    <li class="chapter"><a href="/novel/c-1.html" title="c1">Chapter 1</a></li>
    <li class="chapter"><a href="/novel/c-2.html" title="c2">Chapter 2 &amp; Co</a></li>
    <li class="chapter"><span>no link</span></li>
  </ul>
</body></html>
"""


# --- PatternResolver ---

def test_falls_back_to_second_pattern_when_first_fails() -> None:
    resolver = regex_chain(
        r'<h1 class="title">([^<]+)</h1>',
        r'<h2 class="headline">([^<]+)</h2>',
    )

    assert resolver.resolve(PAGE) == ("Old layout title",)
    assert resolver.resolve_value(PAGE) == "Old layout title"


def test_returns_none_when_every_pattern_fails() -> None:
    resolver = regex_chain(r"<h1>([^<]+)</h1>", r"<h4>([^<]+)</h4>")

    assert resolver.resolve(PAGE) is None
    assert resolver.resolve_record(PAGE) is None
    assert resolver.resolve_value(PAGE) is None
    assert resolver.resolve_all(PAGE) == []


def test_first_matching_pattern_wins_even_if_a_later_one_also_matches() -> None:
    resolver = regex_chain(r'<h2 class="headline">([^<]+)</h2>', r"<a[^>]*>([^<]+)</a>")

    assert resolver.resolve_value(PAGE) == "Old layout title"


def test_blank_match_does_not_count() -> None:
    resolver = regex_chain(r'<p class="empty">(\s*)</p>', r'<h2 class="headline">([^<]+)</h2>')

    assert resolver.resolve_value('<p class="empty">   </p>' + PAGE) == "Old layout title"


def test_captures_are_never_merged_across_patterns() -> None:
    resolver = PatternResolver(
        CapturePattern(r'<h2 class="headline">([^<]+)</h2>(?:<i>([^<]+)</i>)?', fields=("title", "subtitle")),
        CapturePattern(r'<span class="label">([^<]+)</span> <a[^>]*>([^<]+)</a>', fields=("title", "subtitle")),
    )

    assert resolver.resolve_record(PAGE) == {"title": "Old layout title", "subtitle": ""}


def test_resolve_all_uses_first_pattern_with_any_match() -> None:
    resolver = regex_chain(
        r'<li class="volume"><a href="/novel/([^"]+)\.html"[^>]*>([^<]+)</a>',
        r'<li class="chapter"><a href="/novel/([^"]+)\.html"[^>]*>([^<]+)</a>',
        r'<a href="([^"]+)"[^>]*>([^<]+)</a>',
        fields=("id", "title"),
    )

    assert resolver.resolve_all(PAGE) == [
        {"id": "c-1", "title": "Chapter 1"},
        {"id": "c-2", "title": "Chapter 2 &amp; Co"},
    ]


def test_pattern_resolver_needs_a_pattern() -> None:
    with pytest.raises(ValueError):
        PatternResolver()


def test_regex_chain_passes_flags() -> None:
    resolver = regex_chain(r'<ul id="toc">(.*?)</ul>', flags=re.IGNORECASE | re.DOTALL)

    assert "Chapter 2" in resolver.resolve_value(PAGE)


# --- SelectorResolver ---

CHAPTER_FIELDS = {
    "id": FieldSelector(css="a", attr="href", extract=r"/novel/([^.]+)\.html"),
    "title": FieldSelector(css="a", content="text"),
}


def test_selector_resolver_reads_fields_from_each_element() -> None:
    resolver = SelectorResolver(SelectorPattern(css="#toc li.chapter", fields=CHAPTER_FIELDS))

    assert resolver.resolve_all(PAGE) == [
        {"id": "c-1", "title": "Chapter 1"},
        {"id": "c-2", "title": "Chapter 2 & Co"},
    ]


def test_selector_resolver_falls_back_in_order() -> None:
    resolver = SelectorResolver(
        SelectorPattern(css="h1.title"),
        SelectorPattern(css="h2.headline", fields={"title": FieldSelector(content="text")}),
    )

    assert resolver.resolve_record(PAGE) == {"title": "Old layout title"}
    assert resolver.resolve(PAGE) == ("Old layout title",)


def test_selector_resolver_html_content_keeps_markup_for_the_cleaner() -> None:
    resolver = SelectorResolver(SelectorPattern(css="li.chapter:nth-of-type(2)"))

    value = resolver.resolve_value(PAGE)

    assert value.startswith("<a ")
    assert "Chapter 2 &amp; Co" in value


def test_selector_resolver_supports_xpath() -> None:
    resolver = SelectorResolver(
        SelectorPattern(xpath="//ul[@id='toc']/li[@class='chapter']", fields=CHAPTER_FIELDS)
    )

    assert [record["id"] for record in resolver.resolve_all(PAGE)] == ["c-1", "c-2"]


def test_selector_resolver_returns_none_without_matches() -> None:
    resolver = SelectorResolver(SelectorPattern(css="table.missing"))

    assert resolver.resolve(PAGE) is None
    assert resolver.resolve_all(PAGE) == []
    assert resolver.resolve_all("") == []


def test_invalid_selectors_are_treated_as_no_match() -> None:
    resolver = SelectorResolver(
        SelectorPattern(css="li[[["),
        SelectorPattern(xpath="//li[@class="),
        SelectorPattern(css="h2.headline"),
    )

    assert resolver.resolve_value(PAGE) == "Old layout title"


def test_selector_pattern_needs_exactly_one_locator() -> None:
    with pytest.raises(ValidationError):
        SelectorPattern()
    with pytest.raises(ValidationError):
        SelectorPattern(css="a", xpath="//a")


def test_excluded_elements_are_dropped_from_the_value() -> None:
    page = '<div id="body"><p>One</p><div class="ads"><p>Buy</p></div><p>Two</p></div>'
    resolver = SelectorResolver(
        SelectorPattern(css="#body", fields={
            "text": FieldSelector(exclude=(".ads",)),
            # Exclusion works on a copy, later fields still see the ad
            "ad": FieldSelector(css=".ads", content="text"),
        }),
    )

    assert resolver.resolve_record(page) == {"text": "<p>One</p><p>Two</p>", "ad": "Buy"}
    assert resolver.resolve_value(page) == "<p>One</p><p>Two</p>"


def test_parsed_document_builds_trees_on_first_use() -> None:
    document = ParsedDocument("<p>x</p>")

    assert document._soup is None and document._tree is None
    assert document.soup is document.soup
    assert document._tree is None
    assert document.tree is not None


# --- FallbackResolver ---

def test_fallback_resolver_tries_selectors_then_regexes() -> None:
    resolver = FallbackResolver(
        SelectorResolver(SelectorPattern(css="h1.title")),
        regex_chain(r'<h2 class="headline">([^<]+)</h2>'),
    )

    assert resolver.resolve_value(PAGE) == "Old layout title"
    assert resolver.resolve_record(PAGE) == {"group1": "Old layout title"}
    assert resolver.resolve_all("<p>none</p>") == []
    assert resolver.resolve("<p>none</p>") is None


def test_fallback_resolver_prefers_the_first_resolver() -> None:
    resolver = FallbackResolver(
        SelectorResolver(SelectorPattern(css="#toc li.chapter", fields=CHAPTER_FIELDS)),
        regex_chain(r'<a href="([^"]+)"[^>]*>([^<]+)</a>', fields=("id", "title")),
    )

    assert [record["id"] for record in resolver.resolve_all(PAGE)] == ["c-1", "c-2"]


def test_fallback_resolver_needs_a_resolver() -> None:
    with pytest.raises(ValueError):
        FallbackResolver()
