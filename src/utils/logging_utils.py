import logging
import os
import re
import time
from logging.handlers import RotatingFileHandler

from flask import Flask, g, request

# Setup logger for this module
logger = logging.getLogger(__name__)

request_logger = logging.getLogger('web.requests')


class ColoredFormatter(logging.Formatter):
    """Custom formatter to add colors to console output"""

    def format(self, record):
        log_message = super().format(record)

        # Only colorize WARNING and above, leave INFO as default
        if record.levelname == 'WARNING':
            return f"\033[33m{log_message}\033[0m"  # Yellow
        elif record.levelname == 'ERROR':
            return f"\033[31m{log_message}\033[0m"  # Red
        elif record.levelname == 'CRITICAL':
            return f"\033[35m{log_message}\033[0m"  # Magenta
        else:
            return log_message


def setup_logging(
        app_name: str,
        log_level=logging.INFO,
        log_dir: str = 'logs',
        info_modules: list[str] = None
):
    """
    Configure standardized logging with rotation.

    Sets up both file and console handlers with:
    - Rotating file handler (10MB max per file, 5 backups)
    - Console handler with colored WARNING/ERROR output
    - Local timezone formatting

    Args:
        app_name: Name used for the log file (e.g., 'web_server')
        log_level: Logging level for root logger (default: logging.INFO)
        log_dir: Directory for log files (default: 'logs')
        info_modules: List of module names to set to INFO level (useful when root is WARNING)

    Returns:
        logging.Logger: Root logger instance (configured)
    """
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, f'{app_name}.log')

    # 10MB max, 5 backups = ~50MB total
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,
        backupCount=5
    )
    file_handler.setLevel(log_level if log_level != logging.WARNING else logging.INFO)
    file_formatter = logging.Formatter('%(asctime)s - %(filename)s:%(lineno)d - %(levelname)s - %(message)s')
    file_formatter.converter = time.localtime
    file_handler.setFormatter(file_formatter)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(ColoredFormatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear any existing handlers (force=True equivalent)
    root_logger.handlers.clear()
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    if info_modules:
        for module_name in info_modules:
            logging.getLogger(module_name).setLevel(logging.INFO)

    return logging.getLogger()


# Define patterns for known security scanners to filter from logs
SCANNER_PATTERNS = [
    r'/administrator/components/com_.*\.xml',
    r'/wp-content/plugins/.*/timthumb\.php',
    r'/.git/',
    r'/admin/',
    r'/wp-login',
    r'/wp-admin',
    r'\.php$'
]

COMPILED_SCANNER_PATTERNS = [re.compile(pattern, re.IGNORECASE) for pattern in SCANNER_PATTERNS]


def is_scanner_request():
    """Return True if the current request path matches a known scanner probe."""
    for pattern in COMPILED_SCANNER_PATTERNS:
        if pattern.search(request.path):
            return True
    return False


def register_request_logging(app: Flask):
    """
    Log every request as 'METHOD path status duration'.

    Responses with status >= 400 are logged at WARNING, everything else at INFO.
    Known scanner probes are skipped to prevent log pollution.
    """

    @app.before_request
    def _start_timer():
        g.request_started_at = time.perf_counter()

    @app.after_request
    def _log_request(response):
        if is_scanner_request():
            return response

        started_at = g.get('request_started_at')
        duration_ms = int((time.perf_counter() - started_at) * 1000) if started_at is not None else 0
        message = f"{request.method} {request.path} {response.status_code} {duration_ms}ms"
        if response.status_code >= 400:
            request_logger.warning(message)
        else:
            request_logger.info(message)
        return response
