"""
Capture patterns and the two extraction primitives built on them.

A CapturePattern is a regular expression over raw page text plus the names of
the fields its groups feed. Patterns encode assumptions about a site's markup
(tag names, attribute order, class names), so they live in adapter
configuration and are compiled once, when the adapter module is imported.
"""

import re
from typing import Iterator, Optional, Sequence, Union

# Most site markup varies in tag/attribute case; containers additionally pass
# re.DOTALL so ".*?" can span lines.
DEFAULT_FLAGS = re.IGNORECASE

Groups = tuple[str, ...]


class CapturePattern:
    """
    A compiled structural matcher tagged with the fields its groups feed.

    Field names come from `fields` when given, otherwise from the named groups
    of the expression in group order. Unnamed patterns without `fields` get
    positional names ("group1", "group2", ...).
    """

    def __init__(
        self,
        pattern: Union[str, re.Pattern],
        fields: Optional[Sequence[str]] = None,
        flags: int = DEFAULT_FLAGS
    ):
        if isinstance(pattern, re.Pattern):
            self.regex = pattern
        else:
            self.regex = re.compile(pattern, flags)

        if fields is None:
            if self.regex.groupindex:
                by_index = sorted(self.regex.groupindex.items(), key=lambda item: item[1])
                fields = [name for name, _ in by_index]
            else:
                fields = [f"group{i}" for i in range(1, self.regex.groups + 1)]

        fields = tuple(fields)
        if len(fields) != self.regex.groups:
            raise ValueError(
                f"Pattern has {self.regex.groups} groups but {len(fields)} field names: "
                f"{self.regex.pattern!r}"
            )
        self.fields = fields

    def record(self, groups: Groups) -> dict[str, str]:
        """Name a capture tuple by this pattern's fields."""
        return dict(zip(self.fields, groups))

    def __repr__(self) -> str:
        return f"CapturePattern({self.regex.pattern!r}, fields={self.fields!r})"


def iter_matches(document: str, pattern: CapturePattern) -> Iterator[Groups]:
    """
    Lazily yield the capture groups of every match, in document order.

    Groups that did not participate in a match come back as "". A pattern that
    can match the empty string never yields twice for the same position.
    """
    if not document:
        return

    last_empty_at = -1
    for match in pattern.regex.finditer(document):
        start, end = match.span()
        if start == end:
            if start == last_empty_at:
                continue
            last_empty_at = start
        yield tuple(group or "" for group in match.groups())


def match_all(document: str, pattern: CapturePattern) -> list[Groups]:
    """Capture groups of every match, in document order."""
    return list(iter_matches(document, pattern))


def match_first(document: str, pattern: CapturePattern) -> Optional[Groups]:
    """Capture groups of the first match, or None."""
    if not document:
        return None
    match = pattern.regex.search(document)
    if match is None:
        return None
    return tuple(group or "" for group in match.groups())


def is_blank(groups: Optional[Groups]) -> bool:
    """True when there is no match or every captured value is whitespace."""
    return not groups or not any(value.strip() for value in groups)
