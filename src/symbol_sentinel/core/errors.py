"""Structured errors for symbol-sentinel.

Scans degrade silently and never raise; these errors cover precondition
failures (no registry yet, a registry that cannot be loaded), storage
failures, and per-file parse failures that the indexer catches and turns
into file reports.
"""

from enum import Enum
from typing import Any, Optional


class ErrorCode(str, Enum):
    """Machine-readable error codes."""

    REGISTRY_NOT_FOUND = "registry_not_found"
    INVALID_REGISTRY = "invalid_registry"
    PARSE_FAILED = "parse_failed"
    STORAGE_ERROR = "storage_error"


class AppError(Exception):
    """
    Base error carrying a code and context.

    Attributes:
        code: Error code from ErrorCode enum
        message: One-line message suitable for a terminal
        details: Extra context such as the path involved
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Render the error for JSON output.

        Returns:
            Dictionary with code, title, detail and, when present, context
        """
        data: dict[str, Any] = {
            "code": self.code.value,
            "title": self.code.value.replace("_", " ").title(),
            "detail": self.message,
        }
        if self.details:
            data["context"] = self.details
        return data


class RegistryNotFoundError(AppError):
    """No registry has been written for the project yet."""

    def __init__(self, registry_path: str) -> None:
        super().__init__(
            ErrorCode.REGISTRY_NOT_FOUND,
            "No symbol registry found. Run a scan first.",
            {"registry_path": registry_path},
        )


class InvalidRegistryError(AppError):
    """A registry document exists but cannot be read back."""

    def __init__(self, registry_path: str, reason: str) -> None:
        super().__init__(
            ErrorCode.INVALID_REGISTRY,
            f"Symbol registry is unreadable: {reason}. Run a scan to rebuild it.",
            {"registry_path": registry_path},
        )


class ParseError(AppError):
    """A source file or embedded script produced no usable syntax tree."""

    def __init__(self, file_path: str, reason: str) -> None:
        super().__init__(
            ErrorCode.PARSE_FAILED,
            f"Cannot parse {file_path}: {reason}",
            {"file_path": file_path},
        )


class StorageError(AppError):
    """Writing a registry or index document failed."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(
            ErrorCode.STORAGE_ERROR,
            f"{operation} failed: {reason}",
            {"operation": operation},
        )
