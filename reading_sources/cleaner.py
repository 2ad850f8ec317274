"""
Text cleaner: turns an HTML fragment into plain readable text.

Used for every prose field an adapter extracts (descriptions, chapter
bodies, titles). It works on the string level only; fragments captured by
patterns are frequently unbalanced, so no parser is involved.

Pipeline (order matters):
  1. drop <script>/<style> blocks, contents included
  2. paragraph tags → blank line
  3. <br> → line break
  4. strip remaining tags
  5. decode character references
  6. normalize whitespace
"""

import re
from typing import Optional

from .entities import EntityDecoder


class TextCleaner:
    """Rule-based HTML-to-text cleaner."""

    # Blocks whose content is never readable text
    SCRIPT_STYLE = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)

    # <p>, <p class="x">, </p>; the \b keeps <pre> and <param> out
    PARAGRAPH_TAG = re.compile(r"</?p\b[^>]*>", re.IGNORECASE)

    LINE_BREAK_TAG = re.compile(r"<br\b[^>]*>", re.IGNORECASE)

    # Tags, comments and declarations only; "a < b and c > d" is prose
    ANY_TAG = re.compile(r"<(?:/?[A-Za-z][^>]*|!--.*?--|![^>]*)>", re.DOTALL)

    HORIZONTAL_SPACE = re.compile(r"[^\S\n]+")
    SPACE_AROUND_NEWLINE = re.compile(r" *\n *")
    EXCESS_NEWLINES = re.compile(r"\n{3,}")

    def __init__(self, decoder: Optional[EntityDecoder] = None):
        self.decoder = decoder or EntityDecoder()

    def clean(self, fragment: Optional[str]) -> str:
        """
        Convert an HTML fragment to plain text.

        Paragraphs are separated by one blank line, <br> gives a single line
        break, and the result never contains more than two consecutive line
        breaks or leading/trailing whitespace.

        Args:
            fragment: HTML fragment (may be None or unbalanced)

        Returns:
            Cleaned text, "" for empty input
        """
        if not fragment:
            return ""

        text = self.SCRIPT_STYLE.sub("", fragment)
        text = self.PARAGRAPH_TAG.sub("\n\n", text)
        text = self.LINE_BREAK_TAG.sub("\n", text)
        text = self.ANY_TAG.sub("", text)
        text = self.decoder.decode(text)
        return self._normalize_whitespace(text)

    def clean_inline(self, fragment: Optional[str]) -> str:
        """Clean a fragment and fold it onto a single line (titles, names)."""
        return " ".join(self.clean(fragment).split())

    def _normalize_whitespace(self, text: str) -> str:
        text = text.replace("\r\n", "\n").replace("\r", "\n")
        # Covers tabs and the no-break spaces numeric references decode to
        text = self.HORIZONTAL_SPACE.sub(" ", text)
        text = self.SPACE_AROUND_NEWLINE.sub("\n", text)
        text = self.EXCESS_NEWLINES.sub("\n\n", text)
        return text.strip()


_default_cleaner = TextCleaner()


def clean_text(fragment: Optional[str]) -> str:
    """Convenience function to clean an HTML fragment."""
    return _default_cleaner.clean(fragment)


def clean_inline(fragment: Optional[str]) -> str:
    """Convenience function to clean a fragment onto one line."""
    return _default_cleaner.clean_inline(fragment)
