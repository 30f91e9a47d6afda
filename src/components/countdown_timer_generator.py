"""Countdown Timer Generator Component - SVG layouts rasterized to PNG.

Renders a static countdown snapshot (days / hours / minutes / seconds) as SVG
markup in one of three layouts, and rasterizes that markup to a palette PNG
for email clients that do not display SVG.

Dependencies:
    - cairosvg (SVG rasterization, needs the native cairo library)
    - Pillow (PIL) for palette quantization and PNG encoding
"""

import logging
from dataclasses import dataclass
from enum import Enum
from io import BytesIO
from typing import List, Optional, Sequence, Union

from PIL import Image

from src.utils.html_utils import escape_html

logger = logging.getLogger(__name__)

# Time calculations
SECONDS_PER_DAY = 86400
SECONDS_PER_HOUR = 3600
SECONDS_PER_MINUTE = 60

LONG_LABELS = ("Days", "Hours", "Minutes", "Seconds")
SHORT_LABELS = ("D", "H", "M", "S")

# Shared layout defaults
DEFAULT_FONT_WEIGHT = 700

# Boxed layout geometry
BOXED_DEFAULT_RADIUS = 16
BOXED_DEFAULT_PADDING = 20
BOXED_MAX_OUTER_RADIUS = 28
BOXED_OUTER_RADIUS_FACTOR = 1.75
BOX_WIDTH = 150
BOX_HEIGHT = 110
BOX_GAP = 18
BOXED_HEIGHT_WITH_LABEL = 220
BOXED_HEIGHT_WITHOUT_LABEL = 160
BOXED_TOP_WITH_LABEL = 75
BOXED_TOP_WITHOUT_LABEL = 20
BOXED_DIGIT_FONT_SIZE = 42
BOXED_UNIT_FONT_SIZE = 16
BOXED_HEADER_FONT_SIZE = 26
BOXED_RULE_HALF_WIDTH = 80

# Minimal layout geometry
MINIMAL_DEFAULT_RADIUS = 24
MINIMAL_DEFAULT_PADDING = 30
MINIMAL_SEGMENT_WIDTH = 110
MINIMAL_SEPARATOR_WIDTH = 30
NARROW_DEFAULT_PADDING = 20
NARROW_SEGMENT_WIDTH = 75
NARROW_SEPARATOR_WIDTH = 20
MINIMAL_HEIGHT_WITH_LABEL = 180
MINIMAL_HEIGHT_WITHOUT_LABEL = 140
MINIMAL_TOP_WITH_LABEL = 60
MINIMAL_TOP_WITHOUT_LABEL = 30
MINIMAL_DIGIT_FONT_SIZE = 52
MINIMAL_UNIT_FONT_SIZE = 14
MINIMAL_SEPARATOR_FONT_SIZE = 36
MINIMAL_HEADER_FONT_SIZE = 22

# Rasterization
DEFAULT_DENSITY = 150
SVG_BASE_DENSITY = 72
PNG_COMPRESSION_LEVEL = 6
PNG_PALETTE_COLORS = 256


class TimerImageError(Exception):
    """Raised when an SVG countdown cannot be rasterized."""
    pass


@dataclass(frozen=True)
class CountdownSegment:
    label: str
    value: str


@dataclass(frozen=True)
class TimerColors:
    background: str
    box: str
    digits: str
    labels_color: str
    accent: str


@dataclass(frozen=True)
class LayoutOptions:
    """Geometry overrides; None means the layout's own default."""
    radius: Optional[int] = None
    font_weight: Optional[int] = None
    padding: Optional[int] = None


class TimerTemplate(str, Enum):
    BOXED = "boxed"
    MINIMAL = "minimal"
    MINIMAL_NARROW = "minimal-narrow"

    @classmethod
    def from_name(cls, name) -> "TimerTemplate":
        """Look up a template by identifier, falling back to boxed."""
        if isinstance(name, cls):
            return name
        for template in cls:
            if template.value == name:
                return template
        return cls.BOXED


def build_countdown_segments(diff_seconds: int, label_style: str = "long") -> List[CountdownSegment]:
    """Split a remaining-seconds count into days, hours, minutes, seconds.

    Args:
        diff_seconds: Seconds until the deadline (negative values count as zero)
        label_style: 'short' for D/H/M/S, anything else for Days/Hours/...

    Returns:
        Exactly four segments in days, hours, minutes, seconds order. Values are
        zero-padded to two digits; days may run wider.
    """
    total = max(0, int(diff_seconds))
    days = total // SECONDS_PER_DAY
    hours = (total % SECONDS_PER_DAY) // SECONDS_PER_HOUR
    minutes = (total % SECONDS_PER_HOUR) // SECONDS_PER_MINUTE
    seconds = total % SECONDS_PER_MINUTE

    labels = SHORT_LABELS if label_style == "short" else LONG_LABELS
    return [
        CountdownSegment(label=label, value=f"{value:02d}")
        for label, value in zip(labels, (days, hours, minutes, seconds))
    ]


def _num(value) -> str:
    """Format a coordinate without a trailing .0 for whole numbers."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def _has_label(label: Optional[str]) -> bool:
    return bool(label and label.strip())


def _svg_document(width, height, body: str) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<svg width="{_num(width)}" height="{_num(height)}" viewBox="0 0 {_num(width)} {_num(height)}" '
        'xmlns="http://www.w3.org/2000/svg">\n'
        f'{body}\n'
        '</svg>'
    )


def render_boxed_template(segments: Sequence[CountdownSegment], label: str, colors: TimerColors,
                          font: str, options: Optional[LayoutOptions] = None) -> str:
    """One rounded box per segment with a drop shadow and an optional underlined header."""
    options = options or LayoutOptions()
    radius = options.radius if options.radius is not None else BOXED_DEFAULT_RADIUS
    font_weight = options.font_weight if options.font_weight is not None else DEFAULT_FONT_WEIGHT
    padding = options.padding if options.padding is not None else BOXED_DEFAULT_PADDING
    outer_radius = min(radius * BOXED_OUTER_RADIUS_FACTOR, BOXED_MAX_OUTER_RADIUS)

    # padding on both ends, a gap after every box (including the last)
    svg_width = padding * 2 + len(segments) * (BOX_WIDTH + BOX_GAP)
    has_label = _has_label(label)
    svg_height = BOXED_HEIGHT_WITH_LABEL if has_label else BOXED_HEIGHT_WITHOUT_LABEL
    boxes_y = BOXED_TOP_WITH_LABEL if has_label else BOXED_TOP_WITHOUT_LABEL
    center_x = svg_width / 2

    boxes = []
    cursor_x = padding
    for segment in segments:
        boxes.append(
            f'<g transform="translate({_num(cursor_x)},{boxes_y})">'
            f'<rect rx="{_num(radius)}" ry="{_num(radius)}" width="{BOX_WIDTH}" height="{BOX_HEIGHT}" '
            f'fill="{colors.box}"></rect>'
            f'<text x="{_num(BOX_WIDTH / 2)}" y="60" text-anchor="middle" font-size="{BOXED_DIGIT_FONT_SIZE}" '
            f'font-weight="{font_weight}" fill="{colors.digits}" font-family="{font}">{segment.value}</text>'
            f'<text x="{_num(BOX_WIDTH / 2)}" y="95" text-anchor="middle" font-size="{BOXED_UNIT_FONT_SIZE}" '
            f'letter-spacing="0.2em" fill="{colors.labels_color}" font-family="{font}" opacity="0.9">'
            f'{escape_html(segment.label.upper())}</text>'
            '</g>'
        )
        cursor_x += BOX_WIDTH + BOX_GAP

    header = ''
    if has_label:
        header = (
            f'  <text x="{_num(center_x)}" y="48" text-anchor="middle" font-size="{BOXED_HEADER_FONT_SIZE}" '
            f'font-weight="600" fill="{colors.accent}" font-family="{font}">{escape_html(label)}</text>\n'
            f'  <line x1="{_num(center_x - BOXED_RULE_HALF_WIDTH)}" x2="{_num(center_x + BOXED_RULE_HALF_WIDTH)}" '
            f'y1="60" y2="60" stroke="{colors.accent}" stroke-width="2" stroke-linecap="round" opacity="0.4" />\n'
        )

    body = (
        '  <defs>\n'
        '    <filter id="shadow" x="-20%" y="-20%" width="140%" height="140%">\n'
        f'      <feDropShadow dx="0" dy="12" stdDeviation="12" flood-color="{colors.box}" flood-opacity="0.25" />\n'
        '    </filter>\n'
        '  </defs>\n'
        f'  <rect width="100%" height="100%" fill="{colors.background}" '
        f'rx="{_num(outer_radius)}" ry="{_num(outer_radius)}" />\n'
        f'{header}'
        f'  <g filter="url(#shadow)">{"".join(boxes)}</g>'
    )
    return _svg_document(svg_width, svg_height, body)


def _render_minimal_layout(segments: Sequence[CountdownSegment], label: str, colors: TimerColors, font: str,
                           options: Optional[LayoutOptions], segment_width: int, separator_width: int,
                           default_padding: int) -> str:
    """Stacked digits and unit labels separated by accent colons, no boxes."""
    options = options or LayoutOptions()
    radius = options.radius if options.radius is not None else MINIMAL_DEFAULT_RADIUS
    font_weight = options.font_weight if options.font_weight is not None else DEFAULT_FONT_WEIGHT
    padding = options.padding if options.padding is not None else default_padding

    count = len(segments)
    svg_width = padding * 2 + count * segment_width + max(count - 1, 0) * separator_width
    has_label = _has_label(label)
    svg_height = MINIMAL_HEIGHT_WITH_LABEL if has_label else MINIMAL_HEIGHT_WITHOUT_LABEL
    items_y = MINIMAL_TOP_WITH_LABEL if has_label else MINIMAL_TOP_WITHOUT_LABEL

    items = []
    cursor_x = padding
    for index, segment in enumerate(segments):
        items.append(
            f'<g transform="translate({_num(cursor_x)},{items_y})">\n'
            f'      <text x="{_num(segment_width / 2)}" y="50" text-anchor="middle" '
            f'font-size="{MINIMAL_DIGIT_FONT_SIZE}" font-weight="{font_weight}" fill="{colors.digits}" '
            f'font-family="{font}">{segment.value}</text>\n'
            f'      <text x="{_num(segment_width / 2)}" y="85" text-anchor="middle" '
            f'font-size="{MINIMAL_UNIT_FONT_SIZE}" letter-spacing="0.1em" fill="{colors.labels_color}" '
            f'font-family="{font}" opacity="0.8">{escape_html(segment.label.upper())}</text>\n'
            '    </g>'
        )
        cursor_x += segment_width
        if index < count - 1:
            items.append(
                f'<text x="{_num(cursor_x + separator_width / 2)}" y="{items_y + 50}" text-anchor="middle" '
                f'font-size="{MINIMAL_SEPARATOR_FONT_SIZE}" font-weight="300" fill="{colors.accent}" '
                f'font-family="{font}" opacity="0.5">:</text>'
            )
            cursor_x += separator_width

    header = ''
    if has_label:
        header = (
            f'  <text x="{_num(svg_width / 2)}" y="35" text-anchor="middle" font-size="{MINIMAL_HEADER_FONT_SIZE}" '
            f'font-weight="600" fill="{colors.accent}" font-family="{font}">{escape_html(label)}</text>\n'
        )

    body = (
        f'  <rect width="100%" height="100%" fill="{colors.background}" rx="{_num(radius)}" ry="{_num(radius)}" />\n'
        f'{header}'
        '  ' + '\n  '.join(items)
    )
    return _svg_document(svg_width, svg_height, body)


def render_minimal_template(segments: Sequence[CountdownSegment], label: str, colors: TimerColors,
                            font: str, options: Optional[LayoutOptions] = None) -> str:
    return _render_minimal_layout(segments, label, colors, font, options,
                                  MINIMAL_SEGMENT_WIDTH, MINIMAL_SEPARATOR_WIDTH, MINIMAL_DEFAULT_PADDING)


def render_minimal_narrow_template(segments: Sequence[CountdownSegment], label: str, colors: TimerColors,
                                   font: str, options: Optional[LayoutOptions] = None) -> str:
    """Compact minimal variant for narrow email columns."""
    return _render_minimal_layout(segments, label, colors, font, options,
                                  NARROW_SEGMENT_WIDTH, NARROW_SEPARATOR_WIDTH, NARROW_DEFAULT_PADDING)


def render_template(template: Union[TimerTemplate, str], segments: Sequence[CountdownSegment], label: str,
                    colors: TimerColors, font: str, options: Optional[LayoutOptions] = None) -> str:
    """Render countdown segments with the requested layout.

    Args:
        template: TimerTemplate member or its identifier; unknown names use boxed
        segments: Output of build_countdown_segments
        label: Header text; empty or whitespace-only suppresses the header
        colors: Palette for background, boxes, digits, unit labels and accent
        font: Sanitized font-family stack
        options: Optional radius / font weight / padding overrides

    Returns:
        str: Complete SVG document
    """
    resolved = TimerTemplate.from_name(template)
    if resolved is TimerTemplate.MINIMAL:
        return render_minimal_template(segments, label, colors, font, options)
    elif resolved is TimerTemplate.MINIMAL_NARROW:
        return render_minimal_narrow_template(segments, label, colors, font, options)
    return render_boxed_template(segments, label, colors, font, options)


def render_png(svg: str, density: int = DEFAULT_DENSITY) -> bytes:
    """Rasterize countdown SVG markup into a palette PNG.

    Args:
        svg: SVG document text
        density: Output density in dpi; 72 keeps one pixel per SVG user unit

    Returns:
        bytes: PNG image data

    Raises:
        TimerImageError: If the SVG cannot be rendered or encoded
    """
    scale = density / SVG_BASE_DENSITY
    try:
        import cairosvg

        raw_png = cairosvg.svg2png(bytestring=svg.encode('utf-8'), scale=scale)
        with Image.open(BytesIO(raw_png)) as rendered:
            palette_image = rendered.convert('RGBA').quantize(
                colors=PNG_PALETTE_COLORS, method=Image.Quantize.FASTOCTREE
            )
        img_buffer = BytesIO()
        palette_image.save(img_buffer, format='PNG', compress_level=PNG_COMPRESSION_LEVEL)
    except Exception as exc:
        logger.error(f"Failed to rasterize countdown SVG ({len(svg)} chars): {exc}")
        raise TimerImageError(f"Unable to rasterize countdown SVG: {exc}") from exc

    png_bytes = img_buffer.getvalue()
    logger.debug(f"Rasterized countdown SVG at {density} dpi: {len(png_bytes)} bytes")
    return png_bytes
