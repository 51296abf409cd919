"""Core utilities for symbol-sentinel."""

from .errors import (
    AppError,
    ErrorCode,
    InvalidRegistryError,
    ParseError,
    RegistryNotFoundError,
    StorageError,
)

__all__ = [
    "AppError",
    "ErrorCode",
    "InvalidRegistryError",
    "ParseError",
    "RegistryNotFoundError",
    "StorageError",
]
