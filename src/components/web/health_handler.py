"""Health Check Handler for the countdown web server."""

import logging
import os
from datetime import datetime
from typing import Dict, Any, Optional

import pytz

from src.components.png_cache import PngCache

logger = logging.getLogger(__name__)

SERVICE_NAME = 'email_countdown_builder'


def get_server_health(
    server_start_time: datetime,
    cache: Optional[PngCache],
    web_server_port: int,
    request_environ: Dict[str, Any] = None
) -> Dict[str, Any]:
    """Lightweight health probe for load balancers / monitoring.

    Args:
        server_start_time: When the server started (timezone-aware)
        cache: The PNG cache, reported as size / capacity / TTL
        web_server_port: Web server port
        request_environ: Optional WSGI request environment

    Returns:
        Dictionary with health status information
    """
    logger.debug("Performing health check")

    try:
        current_time = datetime.now(pytz.utc)
        uptime_seconds = int((current_time - server_start_time).total_seconds())
        environ = request_environ or {}
        server_software = environ.get('SERVER_SOFTWARE', 'unknown')
        server_port = environ.get('SERVER_PORT') or web_server_port

        return {
            "status": "ok",
            "timestamp": current_time.isoformat(),
            "service": SERVICE_NAME,
            "uptime_seconds": uptime_seconds,
            "cache": cache.stats() if cache is not None else None,
            "server": {
                'server_type': _detect_server_type(server_software),
                'server_software': server_software,
                'port': int(server_port),
                'start_time': server_start_time.isoformat(),
                'pid': os.getpid(),
            },
        }

    except Exception as exc:
        logger.error(f"Health check failed: {exc}", exc_info=True)
        return {
            "status": "error",
            "error": str(exc)
        }


def _detect_server_type(server_software: str) -> str:
    """Detect server type from SERVER_SOFTWARE string."""
    server_software_lower = (server_software or '').lower()
    if 'waitress' in server_software_lower:
        return 'waitress'
    if 'gunicorn' in server_software_lower:
        return 'gunicorn'
    if 'werkzeug' in server_software_lower:
        return 'flask-dev'
    return 'unknown'
