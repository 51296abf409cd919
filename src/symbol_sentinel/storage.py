"""Reading and writing the persisted registry and file index.

The registry document keeps the scan metadata under ``_meta`` at the same
level as the category maps; documents are validated with pydantic on load.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

import structlog
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .config import INDEX_FILENAME, REGISTRY_FILENAME
from .core.errors import InvalidRegistryError, RegistryNotFoundError, StorageError
from .registry import META_KEY, SymbolRegistry
from .types import ScannedFile

logger = structlog.get_logger(__name__)

PathLike = Union[str, Path]


class SymbolRecord(BaseModel):
    file: str
    line: int = Field(ge=1)
    occurrences: int = Field(default=1, ge=1)


class RouteRecord(BaseModel):
    method: str
    path: str
    file: str
    line: int = Field(ge=1)
    occurrences: int = Field(default=1, ge=1)


class PageRecord(BaseModel):
    file: str
    title: str
    scripts: list[str] = Field(default_factory=list)
    occurrences: int = Field(default=1, ge=1)


class MetaRecord(BaseModel):
    project: str
    scanned: str
    elapsed_ms: int = Field(ge=0)
    file_count: int = Field(ge=0)


class RegistryDocument(BaseModel):
    """Schema of ``symbols.json``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    meta: Optional[MetaRecord] = Field(default=None, alias=META_KEY)
    functions: dict[str, SymbolRecord] = Field(default_factory=dict)
    types: dict[str, SymbolRecord] = Field(default_factory=dict)
    variables: dict[str, SymbolRecord] = Field(default_factory=dict)
    exports: dict[str, SymbolRecord] = Field(default_factory=dict)
    routes: dict[str, RouteRecord] = Field(default_factory=dict)
    pages: dict[str, PageRecord] = Field(default_factory=dict)


def registry_path(project_root: PathLike, registry_dir: str) -> Path:
    return Path(project_root) / registry_dir / REGISTRY_FILENAME


def index_path(project_root: PathLike, registry_dir: str) -> Path:
    return Path(project_root) / registry_dir / INDEX_FILENAME


def _write_json(path: Path, data: dict, operation: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError as e:
        raise StorageError(operation, str(e)) from e


def write_registry(path: PathLike, registry: SymbolRegistry) -> Path:
    """Write the registry document to ``path``.

    Raises:
        StorageError: If the file cannot be written
    """
    target = Path(path)
    _write_json(target, registry.to_dict(), "write_registry")
    logger.info(
        "registry_written",
        path=str(target),
        symbol_count=registry.symbol_count(),
    )
    return target


def read_registry(path: PathLike) -> SymbolRegistry:
    """Load and validate a registry document.

    Raises:
        RegistryNotFoundError: If no document exists at ``path``
        InvalidRegistryError: If the document is not valid JSON or does
            not match the registry schema
    """
    source = Path(path)
    if not source.is_file():
        raise RegistryNotFoundError(str(source))

    try:
        raw = json.loads(source.read_text(encoding="utf-8"))
        document = RegistryDocument.model_validate(raw)
    except OSError as e:
        raise InvalidRegistryError(str(source), str(e)) from e
    except UnicodeDecodeError as e:
        raise InvalidRegistryError(str(source), "not UTF-8 text") from e
    except json.JSONDecodeError as e:
        raise InvalidRegistryError(str(source), f"invalid JSON ({e.msg})") from e
    except PydanticValidationError as e:
        raise InvalidRegistryError(str(source), f"{e.error_count()} schema error(s)") from e

    registry = SymbolRegistry.from_dict(document.model_dump(by_alias=True, exclude_none=True))
    logger.debug("registry_loaded", path=str(source), symbol_count=registry.symbol_count())
    return registry


def load_registry_or_none(path: PathLike) -> Optional[SymbolRegistry]:
    """Like ``read_registry`` but returns None when no usable registry exists."""
    try:
        return read_registry(path)
    except (RegistryNotFoundError, InvalidRegistryError) as e:
        logger.debug("registry_unavailable", path=str(path), reason=e.message)
        return None


def write_file_index(path: PathLike, files: list[ScannedFile]) -> Path:
    """Merge the scanned file list into the index document at ``path``.

    Other keys already present in the index are preserved.

    Raises:
        StorageError: If the file cannot be written
    """
    target = Path(path)
    index: dict = {}
    if target.is_file():
        try:
            loaded = json.loads(target.read_text(encoding="utf-8"))
            if isinstance(loaded, dict):
                index = loaded
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("index_unreadable", path=str(target), error=str(e))

    index["files"] = [
        {"path": f.path, "lang": f.language, "lines": f.line_count, "modified": f.modified}
        for f in files
    ]
    index["lastIndexed"] = datetime.now(timezone.utc).isoformat()
    _write_json(target, index, "write_file_index")
    return target
