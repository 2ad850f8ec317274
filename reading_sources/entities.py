"""
HTML character reference decoding.

Only the references reading sites actually emit are handled: a handful of
named entities plus decimal and hexadecimal numeric references. This is not
a full HTML5 entity table; unknown references pass through untouched.
"""

import re
from typing import Optional

NAMED_ENTITIES = {
    "nbsp": " ",
    "amp": "&",
    "quot": '"',
    "lt": "<",
    "gt": ">",
    "apos": "'",
}

# One alternation per reference class. A single scan means a reference is
# decoded exactly once: "&amp;lt;" becomes "&lt;", never "<".
ENTITY_PATTERN = re.compile(
    r"&(?:(?P<named>nbsp|amp|quot|lt|gt|apos)"
    r"|#(?P<dec>[0-9]+)"
    r"|#[xX](?P<hex>[0-9A-Fa-f]+));"
)

MAX_CODE_POINT = 0x10FFFF


def _replace(match: re.Match) -> str:
    named = match.group("named")
    if named:
        return NAMED_ENTITIES[named]

    if match.group("dec") is not None:
        code_point = int(match.group("dec"), 10)
    else:
        code_point = int(match.group("hex"), 16)

    # NUL and anything outside Unicode stay as written
    if code_point == 0 or code_point > MAX_CODE_POINT:
        return match.group(0)
    return chr(code_point)


class EntityDecoder:
    """Decodes named, decimal and hex character references."""

    pattern = ENTITY_PATTERN

    def decode(self, text: Optional[str]) -> str:
        if not text:
            return ""
        if "&" not in text:
            return text
        return self.pattern.sub(_replace, text)


_default_decoder = EntityDecoder()


def decode_entities(text: Optional[str]) -> str:
    """Convenience function to decode character references."""
    return _default_decoder.decode(text)
