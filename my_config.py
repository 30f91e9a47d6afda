import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load non-sensitive runtime settings (port, cache sizing, etc.) from .env at the project root
ROOT_DIR = Path(__file__).parent

env_file = ROOT_DIR / '.env'
if env_file.exists():
    load_dotenv(env_file)


def get_config():
    return Config(
        web_server_debug_mode_on=str(os.environ.get("WEB_SERVER_DEBUG_MODE_ON", "False")).lower() == "true",
        web_server_port=int(os.environ.get("WEB_SERVER_PORT", "3000")),
        web_server_threads=int(os.environ.get("WEB_SERVER_THREADS", "8")),
        png_cache_ttl_seconds=float(os.environ.get("PNG_CACHE_TTL_SECONDS", "5")),
        png_cache_max_entries=int(os.environ.get("PNG_CACHE_MAX_ENTRIES", "1000")),
        png_density=int(os.environ.get("PNG_DENSITY", "150")),
        log_dir=os.environ.get("LOG_DIR", "logs"),
    )


@dataclass
class Config:
    """Configuration settings for the application."""
    web_server_debug_mode_on: bool = False
    web_server_port: int = 3000
    web_server_threads: int = 8
    png_cache_ttl_seconds: float = 5.0
    png_cache_max_entries: int = 1000
    png_density: int = 150
    log_dir: str = 'logs'
