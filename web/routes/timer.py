"""Timer image routes (SVG and PNG)."""

from flask import Blueprint, Response, current_app, request

from src.components.countdown_timer_generator import TimerImageError
from src.components.web import countdown_timer_handler
from web.config import CORS_HEADERS, PNG_CACHE_CONTROL, PNG_DENSITY, SVG_CACHE_CONTROL

timer_bp = Blueprint('timer', __name__)


def _preflight_response():
    return Response(status=200, headers=CORS_HEADERS)


@timer_bp.route('/timer.svg', methods=['GET', 'OPTIONS'])
def timer_svg():
    """Render the countdown as SVG; never cached so every fetch is current."""
    if request.method == 'OPTIONS':
        return _preflight_response()

    svg = countdown_timer_handler.generate_timer_svg(request.args)
    headers = dict(CORS_HEADERS)
    headers['Cache-Control'] = SVG_CACHE_CONTROL
    return Response(svg, mimetype='image/svg+xml', headers=headers)


@timer_bp.route('/timer.png', methods=['GET', 'OPTIONS'])
def timer_png():
    """Render the countdown as PNG, reusing identical renders for a few seconds."""
    if request.method == 'OPTIONS':
        return _preflight_response()

    try:
        png_bytes, cache_status = countdown_timer_handler.generate_timer_png(
            request.args,
            current_app.config.get('PNG_CACHE'),
            density=current_app.config.get('PNG_DENSITY', PNG_DENSITY),
        )
    except TimerImageError as exc:
        current_app.logger.error(f"Error generating PNG: {exc}", exc_info=True)
        return Response('Error generating countdown image', status=500, mimetype='text/plain')

    headers = dict(CORS_HEADERS)
    headers['Cache-Control'] = PNG_CACHE_CONTROL
    headers['X-Cache'] = cache_status
    return Response(png_bytes, mimetype='image/png', headers=headers)
