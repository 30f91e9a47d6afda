"""Utility routes: health probe and favicon."""

from datetime import datetime

import pytz
from flask import Blueprint, Response, current_app, jsonify, request

from src.components.web import health_handler
from web.config import WEB_SERVER_PORT

utilities_bp = Blueprint('utilities', __name__)

FAVICON_SVG = """<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 100">
  <rect width="100" height="100" rx="20" fill="#1c1917"/>
  <text x="50" y="65" font-size="50" text-anchor="middle" fill="#facc15">&#x23F1;</text>
</svg>"""


@utilities_bp.route('/favicon.svg')
def favicon():
    """Serve the favicon icon."""
    return Response(FAVICON_SVG, mimetype='image/svg+xml', headers={'Cache-Control': 'public, max-age=86400'})


@utilities_bp.route("/health")
def health():
    """Lightweight health probe endpoint for load balancers / monitoring."""
    server_start_time = current_app.config.get('SERVER_START_TIME', datetime.now(pytz.utc))
    health_info = health_handler.get_server_health(
        server_start_time,
        current_app.config.get('PNG_CACHE'),
        WEB_SERVER_PORT,
        request.environ
    )
    status_code = 200 if health_info.get('status') == 'ok' else 500
    return jsonify(health_info), status_code
