"""
Field resolvers: ordered fallback chains for one logical field.

Site markup drifts a little at a time (a redesign, a mirror domain), so each
field is declared as a list of known layouts, most likely-current first. A
resolver tries them strictly in order and returns the first non-empty match;
captures are never merged across layouts.

Two interchangeable variants:
  PatternResolver : regular expressions over the raw text (cheap, no parse)
  SelectorResolver: CSS/XPath selectors over a parsed tree (BeautifulSoup +
                    lxml), for sites whose markup regexes handle badly
FallbackResolver chains the two when a field needs both.
The orchestrator only sees the FieldResolver interface, so an adapter can pick
either per field.
"""

import copy
import re
from abc import ABC, abstractmethod
from typing import Literal, Optional

from bs4 import BeautifulSoup
from lxml import etree
from soupsieve import SelectorSyntaxError
from pydantic import BaseModel, ConfigDict, Field, model_validator

from .patterns import CapturePattern, Groups, is_blank, iter_matches
from .logger import get_module_logger

logger = get_module_logger("resolvers")


class FieldResolver(ABC):
    """One logical field, resolved through an ordered list of layouts."""

    kind: str = "abstract"

    @abstractmethod
    def resolve(self, document: str) -> Optional[Groups]:
        """Capture tuple of the first non-empty match, or None."""

    @abstractmethod
    def resolve_record(self, document: str) -> Optional[dict[str, str]]:
        """Like resolve(), with captures keyed by field name."""

    @abstractmethod
    def resolve_all(self, document: str) -> list[dict[str, str]]:
        """
        Every non-empty match of the first layout that yields any, in
        document order.
        """

    def resolve_value(self, document: str) -> Optional[str]:
        """First captured value of the first non-empty match, stripped."""
        groups = self.resolve(document)
        if is_blank(groups):
            return None
        for value in groups:
            if value.strip():
                return value.strip()
        return None


class PatternResolver(FieldResolver):
    """Fallback chain of regular-expression CapturePatterns."""

    kind = "pattern"

    def __init__(self, *patterns: CapturePattern):
        if not patterns:
            raise ValueError("PatternResolver needs at least one pattern")
        self.patterns = tuple(patterns)

    def _first(self, document: str) -> Optional[tuple[CapturePattern, Groups]]:
        for position, pattern in enumerate(self.patterns):
            for groups in iter_matches(document, pattern):
                if not is_blank(groups):
                    if position:
                        logger.debug(f"Primary layout missed, matched fallback #{position}: {pattern!r}")
                    return pattern, groups
        return None

    def resolve(self, document: str) -> Optional[Groups]:
        found = self._first(document)
        return found[1] if found else None

    def resolve_record(self, document: str) -> Optional[dict[str, str]]:
        found = self._first(document)
        if not found:
            return None
        pattern, groups = found
        return pattern.record(groups)

    def resolve_all(self, document: str) -> list[dict[str, str]]:
        for pattern in self.patterns:
            records = [
                pattern.record(groups)
                for groups in iter_matches(document, pattern)
                if not is_blank(groups)
            ]
            if records:
                return records
        return []

    def __repr__(self) -> str:
        return f"PatternResolver({len(self.patterns)} patterns)"


# --- Tree-based variant ---

class FieldSelector(BaseModel):
    """How one field is read from an element matched by a SelectorPattern."""
    model_config = ConfigDict(frozen=True)

    css: Optional[str] = None                 # Relative to the matched element; None = the element itself
    attr: Optional[str] = None                # Read this attribute instead of the content
    content: Literal["html", "text"] = "html"  # Inner HTML (cleaned later) or bare text
    extract: Optional[str] = None             # Regex applied to the value; group 1 is kept
    exclude: tuple[str, ...] = ()             # CSS for nested elements dropped before reading (ad slots)


class SelectorPattern(BaseModel):
    """
    One layout for the tree-based resolver.

    Exactly one of `css` or `xpath` locates the elements; `fields` maps field
    names to FieldSelectors evaluated inside each located element.
    """
    model_config = ConfigDict(frozen=True)

    css: Optional[str] = None
    xpath: Optional[str] = None
    fields: dict[str, FieldSelector] = Field(default_factory=lambda: {"value": FieldSelector()})

    @model_validator(mode="after")
    def _one_locator(self) -> "SelectorPattern":
        if bool(self.css) == bool(self.xpath):
            raise ValueError("SelectorPattern needs exactly one of css or xpath")
        return self


class ParsedDocument:
    """
    The trees of one document, built on first use.

    Lives for a single resolve call, so the fallback layouts of a chain share
    one parse and nothing outlives the call.
    """

    def __init__(self, text: str):
        self.text = text
        self._soup = None
        self._tree = None

    @property
    def soup(self) -> BeautifulSoup:
        if self._soup is None:
            # html5lib builds the same tree a browser would from broken markup
            self._soup = BeautifulSoup(self.text, "html5lib")
        return self._soup

    @property
    def tree(self):
        if self._tree is None:
            self._tree = etree.HTML(self.text)
        return self._tree


class SelectorResolver(FieldResolver):
    """Fallback chain of SelectorPatterns over a parsed document tree."""

    kind = "selector"

    def __init__(self, *patterns: SelectorPattern):
        if not patterns:
            raise ValueError("SelectorResolver needs at least one pattern")
        self.patterns = tuple(patterns)
        self._extractors = {}
        for pattern in self.patterns:
            for selector in pattern.fields.values():
                if selector.extract and selector.extract not in self._extractors:
                    self._extractors[selector.extract] = re.compile(selector.extract)

    def _elements(self, document: ParsedDocument, pattern: SelectorPattern) -> list:
        if not document.text:
            return []
        soup = document.soup

        if pattern.css:
            try:
                return soup.select(pattern.css)
            except (SelectorSyntaxError, ValueError) as e:
                logger.warning(f"Invalid CSS '{pattern.css}': {e}")
                return []

        # BeautifulSoup has no XPath, so evaluate it with lxml and map each hit
        # back onto the BeautifulSoup tree.
        tree = document.tree
        if tree is None:
            return []
        try:
            hits = tree.xpath(pattern.xpath)
        except etree.XPathError as e:
            logger.warning(f"Invalid XPath '{pattern.xpath}': {e}")
            return []

        elements = []
        seen = set()
        for hit in hits:
            if not isinstance(hit, etree._Element):
                continue
            soup_elem = self._find_matching_soup_element(hit, tree, soup)
            if soup_elem is not None and id(soup_elem) not in seen:
                elements.append(soup_elem)
                seen.add(id(soup_elem))
        return elements

    @staticmethod
    def _find_matching_soup_element(lxml_elem, tree, soup: BeautifulSoup):
        """
        Find the BeautifulSoup element that corresponds to an lxml element.

        Matching strategy (most specific → least specific):
        1. Match by id attribute (unique per page)
        2. Match by tag + class, at the same position among such elements
        3. Match by position among elements with the same tag name
        The two parsers can disagree on broken markup, so 2 and 3 are
        heuristics.
        """
        tag = lxml_elem.tag
        attribs = dict(lxml_elem.attrib)

        if "id" in attribs:
            found = soup.find(id=attribs["id"])
            if found is not None:
                return found

        if "class" in attribs:
            lxml_peers = [e for e in tree.iter(tag) if e.get("class") == attribs["class"]]
            soup_peers = soup.find_all(tag, attrs={"class": attribs["class"]})
            position = lxml_peers.index(lxml_elem)
            if position < len(soup_peers):
                return soup_peers[position]

        lxml_peers = list(tree.iter(tag))
        soup_peers = soup.find_all(tag)
        position = lxml_peers.index(lxml_elem)
        return soup_peers[position] if position < len(soup_peers) else None

    def _read(self, element, selector: FieldSelector) -> str:
        target = element if selector.css is None else element.select_one(selector.css)
        if target is None:
            return ""

        if selector.exclude:
            # Work on a copy; the parsed tree is shared by the other fields
            target = copy.copy(target)
            for css in selector.exclude:
                for unwanted in target.select(css):
                    unwanted.decompose()

        if selector.attr:
            value = target.get(selector.attr, "")
            if isinstance(value, list):  # multi-valued attributes such as class
                value = " ".join(value)
        elif selector.content == "text":
            value = target.get_text(" ", strip=True)
        else:
            value = target.decode_contents()

        if selector.extract and value:
            match = self._extractors[selector.extract].search(value)
            value = match.group(1) if match else ""
        return value or ""

    def _records(self, document: ParsedDocument, pattern: SelectorPattern) -> list[Groups]:
        rows = []
        for element in self._elements(document, pattern):
            groups = tuple(self._read(element, selector) for selector in pattern.fields.values())
            if not is_blank(groups):
                rows.append(groups)
        return rows

    def resolve(self, document: str) -> Optional[Groups]:
        record = self.resolve_record(document)
        return tuple(record.values()) if record else None

    def resolve_record(self, document: str) -> Optional[dict[str, str]]:
        parsed = ParsedDocument(document)
        for position, pattern in enumerate(self.patterns):
            rows = self._records(parsed, pattern)
            if rows:
                if position:
                    logger.debug(f"Primary selector missed, matched fallback #{position}")
                return dict(zip(pattern.fields, rows[0]))
        return None

    def resolve_all(self, document: str) -> list[dict[str, str]]:
        parsed = ParsedDocument(document)
        for pattern in self.patterns:
            rows = self._records(parsed, pattern)
            if rows:
                return [dict(zip(pattern.fields, groups)) for groups in rows]
        return []

    def __repr__(self) -> str:
        return f"SelectorResolver({len(self.patterns)} patterns)"


class FallbackResolver(FieldResolver):
    """
    Chains whole resolvers, so one field can try selector layouts first and
    regex layouts after them. Same first-non-empty rule as the layouts inside
    each resolver.
    """

    kind = "fallback"

    def __init__(self, *resolvers: FieldResolver):
        if not resolvers:
            raise ValueError("FallbackResolver needs at least one resolver")
        self.resolvers = tuple(resolvers)

    def resolve(self, document: str) -> Optional[Groups]:
        for resolver in self.resolvers:
            groups = resolver.resolve(document)
            if not is_blank(groups):
                return groups
        return None

    def resolve_record(self, document: str) -> Optional[dict[str, str]]:
        for resolver in self.resolvers:
            record = resolver.resolve_record(document)
            if record and not is_blank(tuple(record.values())):
                return record
        return None

    def resolve_all(self, document: str) -> list[dict[str, str]]:
        for resolver in self.resolvers:
            records = resolver.resolve_all(document)
            if records:
                return records
        return []

    def __repr__(self) -> str:
        return f"FallbackResolver({', '.join(repr(r) for r in self.resolvers)})"


def regex_chain(*patterns: str, fields=None, flags: int = re.IGNORECASE) -> PatternResolver:
    """Shorthand for a PatternResolver whose layouts share fields and flags."""
    return PatternResolver(*(CapturePattern(p, fields=fields, flags=flags) for p in patterns))
