"""Configuration management for symbol-sentinel."""

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv
import structlog

# Walker limits
DEFAULT_MAX_DEPTH = 8
DEFAULT_MAX_FILES = 2000
# Markup files are allowed to be much larger since only embedded script is read
DEFAULT_MAX_FILE_BYTES = 500 * 1024
DEFAULT_MAX_MARKUP_BYTES = 5 * 1024 * 1024

REGISTRY_FILENAME = "symbols.json"
INDEX_FILENAME = "index.json"

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    max_depth: int
    max_files: int
    max_file_bytes: int
    max_markup_bytes: int
    ignore_file: str
    api_prefix: str
    registry_dir: str
    log_level: str


def _int_env(name: str, default: int, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(
            f"{name} must be a valid integer. Check your .env file."
        ) from exc
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}.")
    return value


def load_settings() -> Settings:
    """
    Load settings from environment variables.

    Returns:
        Settings instance with all configuration values

    Raises:
        ValueError: If a numeric variable is not a valid integer or a value
            is out of range
    """
    load_dotenv()

    max_depth = _int_env("SENTINEL_MAX_DEPTH", DEFAULT_MAX_DEPTH)
    max_files = _int_env("SENTINEL_MAX_FILES", DEFAULT_MAX_FILES, minimum=1)
    max_file_bytes = _int_env("SENTINEL_MAX_FILE_BYTES", DEFAULT_MAX_FILE_BYTES, minimum=1)
    max_markup_bytes = _int_env(
        "SENTINEL_MAX_MARKUP_BYTES", DEFAULT_MAX_MARKUP_BYTES, minimum=1
    )

    api_prefix = os.getenv("SENTINEL_API_PREFIX", "/api").strip() or "/api"
    if not api_prefix.startswith("/"):
        raise ValueError("SENTINEL_API_PREFIX must start with '/'.")

    log_level = os.getenv("SENTINEL_LOG_LEVEL", "warning").strip().lower()
    if log_level not in LOG_LEVELS:
        logger.warning("invalid_log_level", value=log_level, fallback="warning")
        log_level = "warning"

    return Settings(
        max_depth=max_depth,
        max_files=max_files,
        max_file_bytes=max_file_bytes,
        max_markup_bytes=max_markup_bytes,
        ignore_file=os.getenv("SENTINEL_IGNORE_FILE", ".gitignore").strip() or ".gitignore",
        api_prefix=api_prefix.rstrip("/") or "/",
        registry_dir=os.getenv("SENTINEL_REGISTRY_DIR", ".wisdom").strip() or ".wisdom",
        log_level=log_level,
    )


def default_settings() -> Settings:
    """Settings with every value at its built-in default."""
    return Settings(
        max_depth=DEFAULT_MAX_DEPTH,
        max_files=DEFAULT_MAX_FILES,
        max_file_bytes=DEFAULT_MAX_FILE_BYTES,
        max_markup_bytes=DEFAULT_MAX_MARKUP_BYTES,
        ignore_file=".gitignore",
        api_prefix="/api",
        registry_dir=".wisdom",
        log_level="warning",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once
    from environment variables.

    Returns:
        Cached Settings instance
    """
    return load_settings()
