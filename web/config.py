"""Web server configuration and shared constants."""

from my_config import get_config

CONFIG = get_config()

# Server configuration constants
USE_DEBUG_MODE = CONFIG.web_server_debug_mode_on
WEB_SERVER_PORT = CONFIG.web_server_port
WEB_SERVER_THREADS = CONFIG.web_server_threads
LOG_DIR = CONFIG.log_dir

# PNG cache / rasterization
PNG_CACHE_TTL_SECONDS = CONFIG.png_cache_ttl_seconds
PNG_CACHE_MAX_ENTRIES = CONFIG.png_cache_max_entries
PNG_DENSITY = CONFIG.png_density

# Response headers for the image endpoints; images are embedded from arbitrary email clients
CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'GET, OPTIONS',
    'Access-Control-Allow-Headers': 'Content-Type',
}
SVG_CACHE_CONTROL = 'public, max-age=0, must-revalidate'
PNG_CACHE_CONTROL = 'public, max-age=5, must-revalidate'
