"""Countdown Builder Handler for the configuration page."""

import logging
import time
from datetime import datetime
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlencode

from src.components.web.countdown_timer_handler import DEFAULT_STYLE, VALID_TEMPLATES, parse_style
from src.utils import date_utils
from src.utils.html_utils import build_snippet
from src.utils.sanitize import sanitize_label

logger = logging.getLogger(__name__)


def build_builder_context(args: Mapping[str, Any], base_url: str,
                          now: Optional[datetime] = None) -> Dict[str, Any]:
    """Resolve form parameters into everything the builder page displays.

    Args:
        args: Query parameters submitted by the builder form
        base_url: Scheme, host and optional base path the image URLs hang off
        now: Clock override for the default target date

    Returns:
        Dictionary of template variables (selected values, image URLs, snippet)
    """
    zone = date_utils.resolve_timezone(args.get('timezone'))
    label = sanitize_label(args.get('label'), DEFAULT_STYLE['label'])
    style = parse_style(args, label)
    target_moment = date_utils.resolve_target_moment(args.get('date'), zone, now)

    query = urlencode({
        'target': date_utils.to_iso_utc(target_moment.instant),
        'label': style.label,
        'template': style.template,
        'bg': style.background,
        'box': style.box,
        'digits': style.digits,
        'labels': style.labels_color,
        'accent': style.accent,
        'font': style.font,
        'radius': style.radius,
        'labelStyle': style.label_style,
        'fontWeight': style.font_weight,
        'padding': style.padding,
    })
    base_url = base_url.rstrip('/')
    image_url_png = f"{base_url}/timer.png?{query}"
    image_url_svg = f"{base_url}/timer.svg?{query}"
    preview_url = f"{image_url_svg}&_={int(time.time() * 1000)}"

    logger.debug(f"Builder context for {target_moment.timezone}: target {target_moment.instant.isoformat()}")

    return {
        'timezones': date_utils.TIMEZONES,
        'templates': VALID_TEMPLATES,
        'timezone': target_moment.timezone,
        'style': style,
        'form_date': date_utils.format_datetime_local(target_moment.instant, target_moment.timezone),
        'image_url_png': image_url_png,
        'image_url_svg': image_url_svg,
        'preview_url': preview_url,
        'snippet': build_snippet(image_url_png, style.label),
    }
