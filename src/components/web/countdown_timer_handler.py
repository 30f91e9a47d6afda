"""Countdown Timer Handler for the image endpoints.

Turns raw query parameters into a fully-resolved TimerStyle, renders the SVG,
and serves PNGs through the short-lived PngCache.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Mapping, Optional, Tuple

from src.components import countdown_timer_generator as generator
from src.components.countdown_timer_generator import LayoutOptions, TimerColors, TimerTemplate
from src.components.png_cache import PngCache, build_cache_key
from src.utils import date_utils
from src.utils.sanitize import sanitize_color, sanitize_font, sanitize_int, sanitize_label

logger = logging.getLogger(__name__)

DEFAULT_STYLE = {
    'label': 'Offer Ends In',
    'timezone': 'UTC',
    'background': '#1c1917',
    'box': '#292524',
    'digits': '#facc15',
    'labels': '#a8a29e',
    'accent': '#facc15',
    'font': "TikTok Sans, 'Outfit', sans-serif",
}

VALID_TEMPLATES = [template.value for template in TimerTemplate]
DEFAULT_TEMPLATE = TimerTemplate.BOXED.value

DEFAULT_RADIUS = 16
DEFAULT_FONT_WEIGHT = 700
DEFAULT_PADDING = 20
RADIUS_RANGE = (0, 50)
FONT_WEIGHT_RANGE = (100, 900)
PADDING_RANGE = (0, 150)

CACHE_HIT = 'HIT'
CACHE_MISS = 'MISS'


@dataclass(frozen=True)
class TimerStyle:
    label: str
    background: str
    box: str
    digits: str
    labels_color: str
    accent: str
    font: str
    template: str
    radius: int
    font_weight: int
    padding: int
    label_style: str

    @property
    def colors(self) -> TimerColors:
        return TimerColors(
            background=self.background,
            box=self.box,
            digits=self.digits,
            labels_color=self.labels_color,
            accent=self.accent,
        )

    @property
    def layout_options(self) -> LayoutOptions:
        return LayoutOptions(radius=self.radius, font_weight=self.font_weight, padding=self.padding)


def resolve_template_name(value: Any) -> str:
    if isinstance(value, str) and value in VALID_TEMPLATES:
        return value
    return DEFAULT_TEMPLATE


def resolve_label_style(value: Any) -> str:
    return 'short' if value == 'short' else 'long'


def parse_style(args: Mapping[str, Any], label: str) -> TimerStyle:
    """Resolve every style parameter except the label, which callers decide."""
    return TimerStyle(
        label=label,
        background=sanitize_color(args.get('bg'), DEFAULT_STYLE['background']),
        box=sanitize_color(args.get('box'), DEFAULT_STYLE['box']),
        digits=sanitize_color(args.get('digits'), DEFAULT_STYLE['digits']),
        labels_color=sanitize_color(args.get('labels'), DEFAULT_STYLE['labels']),
        accent=sanitize_color(args.get('accent'), DEFAULT_STYLE['accent']),
        font=sanitize_font(args.get('font'), DEFAULT_STYLE['font']),
        template=resolve_template_name(args.get('template')),
        radius=sanitize_int(args.get('radius'), DEFAULT_RADIUS, *RADIUS_RANGE),
        font_weight=sanitize_int(args.get('fontWeight'), DEFAULT_FONT_WEIGHT, *FONT_WEIGHT_RANGE),
        padding=sanitize_int(args.get('padding'), DEFAULT_PADDING, *PADDING_RANGE),
        label_style=resolve_label_style(args.get('labelStyle')),
    )


def parse_timer_params(args: Mapping[str, Any]) -> Tuple[TimerStyle, Optional[str]]:
    """Parse image query parameters.

    An absent ``label`` uses the default header; a present-but-empty one means
    "no header".

    Returns:
        (TimerStyle, raw target string or None)
    """
    label_param = args.get('label')
    label = sanitize_label(label_param, '') if label_param is not None else DEFAULT_STYLE['label']
    target = args.get('target')
    return parse_style(args, label), target if isinstance(target, str) else None


def calculate_segments(target: Optional[str], label_style: str = 'long',
                       now: Optional[datetime] = None) -> List[generator.CountdownSegment]:
    target_instant = date_utils.parse_target_instant(target)
    diff_seconds = date_utils.seconds_remaining(target_instant, now)
    return generator.build_countdown_segments(diff_seconds, label_style)


def generate_timer_svg(args: Mapping[str, Any], now: Optional[datetime] = None) -> str:
    """Render the countdown SVG for a set of query parameters."""
    style, target = parse_timer_params(args)
    segments = calculate_segments(target, style.label_style, now)
    logger.debug(f"Rendering {style.template} countdown: {' '.join(s.value for s in segments)}")
    return generator.render_template(style.template, segments, style.label, style.colors, style.font,
                                     style.layout_options)


def query_pairs(args: Any) -> List[Tuple[str, str]]:
    """All (name, value) pairs, including repeated names when args is a MultiDict."""
    try:
        return list(args.items(multi=True))
    except TypeError:
        return list(args.items())


def generate_timer_png(args: Mapping[str, Any], cache: Optional[PngCache], now: Optional[datetime] = None,
                       density: int = generator.DEFAULT_DENSITY) -> Tuple[bytes, str]:
    """Return PNG bytes for the query, served from cache when fresh.

    Args:
        args: Query parameters (dict or werkzeug MultiDict)
        cache: PngCache instance, or None to always render
        now: Clock override for the countdown computation
        density: Rasterization density in dpi

    Returns:
        (png_bytes, 'HIT' | 'MISS')

    Raises:
        TimerImageError: If rasterization fails (nothing is cached)
    """
    cache_key = build_cache_key(query_pairs(args))

    if cache is not None:
        try:
            cached = cache.get(cache_key)
        except Exception as exc:
            logger.warning(f"PNG cache lookup failed, regenerating: {exc}", exc_info=True)
            cached = None
        if cached is not None:
            return cached, CACHE_HIT

    svg = generate_timer_svg(args, now)
    png_bytes = generator.render_png(svg, density=density)

    if cache is not None:
        try:
            cache.put(cache_key, png_bytes)
        except Exception as exc:
            logger.warning(f"PNG cache insert failed: {exc}", exc_info=True)

    return png_bytes, CACHE_MISS
