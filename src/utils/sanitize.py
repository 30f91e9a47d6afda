"""Input sanitization for countdown timer query parameters.

Every function here is total: untrusted query-string input is either
normalized or replaced by the supplied fallback, never rejected with an error.
"""

import re
from typing import Any

MAX_LABEL_LENGTH = 60

_HEX_COLOR = re.compile(r'^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$')
_FONT_DISALLOWED = re.compile(r'[^a-zA-Z0-9,\-\s]')
_LEADING_INT = re.compile(r'^\s*([+-]?\d+)')
# Control characters XML 1.0 does not allow in text content
_XML_ILLEGAL_CHARS = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]')


def sanitize_color(value: Any, fallback: str) -> str:
    """Return a #RGB / #RRGGBB color, adding the leading '#' when missing."""
    if not isinstance(value, str):
        return fallback
    color = value.strip()
    if not color:
        return fallback
    if not color.startswith('#'):
        color = f'#{color}'
    if _HEX_COLOR.match(color):
        return color
    return fallback


def sanitize_font(value: Any, fallback: str) -> str:
    """Strip anything that could break out of an SVG font-family attribute."""
    if not isinstance(value, str):
        return fallback
    cleaned = _FONT_DISALLOWED.sub('', _XML_ILLEGAL_CHARS.sub('', value)).strip()
    return cleaned or fallback


def sanitize_label(value: Any, fallback: str) -> str:
    """Trim and truncate a header label.

    An explicitly supplied empty string is kept as "" so callers can tell
    "no label wanted" apart from "no label given" (None -> fallback).
    """
    if not isinstance(value, str):
        return fallback
    return _XML_ILLEGAL_CHARS.sub('', value).strip()[:MAX_LABEL_LENGTH]


def sanitize_int(value: Any, fallback: int, minimum: int, maximum: int) -> int:
    """Parse the leading integer of a string ("12px" -> 12) and range-check it."""
    if isinstance(value, bool):
        return fallback
    if isinstance(value, int):
        number = value
    elif isinstance(value, str):
        match = _LEADING_INT.match(value)
        if not match:
            return fallback
        number = int(match.group(1))
    else:
        return fallback
    if minimum <= number <= maximum:
        return number
    return fallback
