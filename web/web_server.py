#!/usr/bin/python3

# Standard library imports
import atexit
import logging
import os
import signal
import sys
from datetime import datetime

_CURRENT_DIR = os.path.dirname(__file__)
_PROJECT_ROOT = os.path.abspath(os.path.join(_CURRENT_DIR, '..'))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

# Third-party imports
import pytz
from flask import Flask

from src.components.png_cache import PngCache
from src.utils.logging_utils import register_request_logging, setup_logging
from web.config import (
    LOG_DIR,
    PNG_CACHE_MAX_ENTRIES,
    PNG_CACHE_TTL_SECONDS,
    PNG_DENSITY,
    USE_DEBUG_MODE,
    WEB_SERVER_PORT,
    WEB_SERVER_THREADS,
)
from web.routes import register_all_blueprints

logger = logging.getLogger(__name__)

_cache_sweeper = None
_shutdown_done = False


def create_app(png_cache: PngCache = None) -> Flask:
    """Build the Flask app.

    Args:
        png_cache: Cache for rasterized PNGs; a fresh one from config when omitted

    Returns:
        Configured Flask application (the cache sweeper is started by main())
    """
    app = Flask(__name__, static_folder=None, template_folder='templates')
    app.config['SERVER_START_TIME'] = datetime.now(pytz.utc)
    app.config['PNG_CACHE'] = png_cache if png_cache is not None else PngCache(
        ttl_seconds=PNG_CACHE_TTL_SECONDS,
        max_entries=PNG_CACHE_MAX_ENTRIES,
    )
    app.config['PNG_DENSITY'] = PNG_DENSITY

    register_request_logging(app)
    register_all_blueprints(app)
    return app


def _shutdown_handler(signum=None, frame=None):
    """Stop the cache sweeper and log a shutdown marker"""
    global _cache_sweeper, _shutdown_done
    if _shutdown_done:
        return
    _shutdown_done = True

    if _cache_sweeper is not None:
        _cache_sweeper.stop()
        _cache_sweeper = None

    logger.warning("=" * 100)
    logger.warning(f"🛑 WEB SERVER STOPPED - {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    logger.warning("=" * 100)

    if signum is not None:
        sys.exit(0)


def main():
    """Entry point for launching the web server."""
    global _cache_sweeper

    setup_logging(
        app_name='web_server',
        log_level=logging.INFO,
        log_dir=LOG_DIR,
        info_modules=['__main__', 'web.requests'],
    )
    logging.getLogger('werkzeug').setLevel(logging.WARNING)
    logging.getLogger('waitress').setLevel(logging.WARNING)

    logger.warning("=" * 100)
    logger.warning(f"🚀 WEB SERVER STARTED - {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    logger.warning("=" * 100)

    app = create_app()

    # Flask's reloader runs main() in a parent and a child; only the serving child sweeps
    if not USE_DEBUG_MODE or os.environ.get('WERKZEUG_RUN_MAIN') == 'true':
        _cache_sweeper = app.config['PNG_CACHE'].start_sweeper()

    atexit.register(_shutdown_handler)
    signal.signal(signal.SIGTERM, _shutdown_handler)
    signal.signal(signal.SIGINT, _shutdown_handler)

    host = '0.0.0.0'
    port = WEB_SERVER_PORT

    logger.info(f"Countdown builder ready on http://localhost:{port}")
    logger.info(f"Health check available at http://localhost:{port}/health")

    if USE_DEBUG_MODE:
        print("Using Flask dev server with auto-reload (debug mode)")
        try:
            app.run(debug=True, host=host, port=port, threaded=True, use_reloader=True)
        except OSError as exc:
            _handle_port_error(exc, port)
    else:
        from waitress import serve
        print("Using Waitress WSGI server for production deployment")
        try:
            serve(app, host=host, port=port, threads=WEB_SERVER_THREADS, channel_timeout=120)
        except OSError as exc:
            _handle_port_error(exc, port)


def _handle_port_error(exc, port):
    """Log port-related errors with a helpful message, then re-raise."""
    if port < 1024 and exc.errno == 13:
        logger.error(f"❌ Unable to start countdown builder: port {port} requires elevated privileges. "
                     f"Use a different port in .env: WEB_SERVER_PORT=3000")
    elif exc.errno in (48, 98):
        logger.error(f"❌ Unable to start countdown builder: port {port} is already in use. "
                     f"Find the process with: sudo lsof -i :{port}")
    else:
        logger.error(f"❌ Unable to start countdown builder: {exc}")
    raise exc


if __name__ == "__main__":
    main()
