"""Markup escaping helpers shared by the SVG layouts and the builder page."""

from typing import Any

_BLOCKED_URL_SCHEMES = ('javascript:', 'data:', 'vbscript:')

SNIPPET_WIDTH = 600


def escape_html(value: Any) -> str:
    """Escape &, <, >, double and single quotes for text or attribute content."""
    text = '' if value is None else str(value)
    return (
        text.replace('&', '&amp;')
        .replace('<', '&lt;')
        .replace('>', '&gt;')
        .replace('"', '&quot;')
        .replace("'", '&#039;')
    )


def escape_url(url: Any) -> str:
    """Escape a URL for an HTML attribute, blanking script-capable schemes."""
    if not isinstance(url, str):
        return ''
    trimmed = url.strip()
    if trimmed.lower().startswith(_BLOCKED_URL_SCHEMES):
        return ''
    return escape_html(trimmed)


def build_snippet(image_url: str, label: str) -> str:
    """Build the <img> tag users paste into their email template."""
    return (
        f'<img src="{escape_url(image_url)}" alt="{escape_html(label)}" width="{SNIPPET_WIDTH}" '
        'style="display:block;max-width:100%;height:auto;border:0;">'
    )
