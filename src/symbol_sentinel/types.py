"""Core type definitions for the project symbol registry.

This module defines the data types shared by the directory walker, the
per-language extractors, the registry and the validators, plus the
extension-based language dispatch table.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class SymbolCategory(str, Enum):
    """Fixed symbol categories, in lookup order.

    The value doubles as the key of the category map in the persisted
    registry document.
    """

    FUNCTIONS = "functions"
    TYPES = "types"
    VARIABLES = "variables"
    EXPORTS = "exports"
    ROUTES = "routes"
    PAGES = "pages"


# Categories filled through add_symbol(); routes and pages carry extra fields
NAME_CATEGORIES: tuple[SymbolCategory, ...] = (
    SymbolCategory.FUNCTIONS,
    SymbolCategory.TYPES,
    SymbolCategory.VARIABLES,
    SymbolCategory.EXPORTS,
)

MOUNT_METHOD = "MOUNT"
ROUTE_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH")


class Language(str, Enum):
    """Languages recognised by the dispatcher."""

    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    TSX = "tsx"
    PYTHON = "python"
    GO = "go"
    RUST = "rust"
    HTML = "html"


class ExtractionStrategy(str, Enum):
    """How symbols are pulled out of a file of a given language."""

    SYNTAX_TREE = "syntax_tree"
    HEURISTIC = "heuristic"
    MARKUP = "markup"
    NONE = "none"


class FileStatus(str, Enum):
    """Outcome of processing a single file during a scan."""

    OK = "ok"
    FAILED = "failed"
    SKIPPED = "skipped"


# Language file extension mapping
LANGUAGE_EXTENSIONS: dict[str, Language] = {
    ".js": Language.JAVASCRIPT,
    ".mjs": Language.JAVASCRIPT,
    ".cjs": Language.JAVASCRIPT,
    ".jsx": Language.JAVASCRIPT,
    ".ts": Language.TYPESCRIPT,
    ".tsx": Language.TSX,
    ".py": Language.PYTHON,
    ".go": Language.GO,
    ".rs": Language.RUST,
    ".html": Language.HTML,
    ".htm": Language.HTML,
}

LANGUAGE_STRATEGIES: dict[Language, ExtractionStrategy] = {
    Language.JAVASCRIPT: ExtractionStrategy.SYNTAX_TREE,
    Language.TYPESCRIPT: ExtractionStrategy.SYNTAX_TREE,
    Language.TSX: ExtractionStrategy.SYNTAX_TREE,
    Language.PYTHON: ExtractionStrategy.HEURISTIC,
    Language.GO: ExtractionStrategy.HEURISTIC,
    Language.RUST: ExtractionStrategy.HEURISTIC,
    Language.HTML: ExtractionStrategy.MARKUP,
}


def get_language_for_file(file_path: str) -> Optional[Language]:
    """Determine the language from a file path.

    Args:
        file_path: Path or name of the source file

    Returns:
        Language enum value if recognized, None otherwise
    """
    _, ext = os.path.splitext(file_path)
    return LANGUAGE_EXTENSIONS.get(ext.lower())


def get_strategy_for_file(file_path: str) -> ExtractionStrategy:
    """Map a file path to its extraction strategy (NONE when unknown)."""
    language = get_language_for_file(file_path)
    if language is None:
        return ExtractionStrategy.NONE
    return LANGUAGE_STRATEGIES[language]


@dataclass(frozen=True)
class ScannedFile:
    """A source file recorded by a scan.

    Attributes:
        path: POSIX path relative to the project root
        language: Detected language tag
        line_count: Number of lines in the file
        size: Size in bytes
        modified: Last-modified date as ISO ``YYYY-MM-DD`` (UTC)
    """

    path: str
    language: str
    line_count: int
    size: int
    modified: str

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "lang": self.language,
            "lines": self.line_count,
            "size": self.size,
            "modified": self.modified,
        }


@dataclass
class SymbolEntry:
    """A named entity in one category of the registry.

    ``file`` and ``line`` point at the first occurrence seen during the scan
    and are never rewritten; ``occurrences`` counts every sighting across
    the whole project.
    """

    name: str
    category: SymbolCategory
    file: str
    line: int
    occurrences: int = 1


@dataclass
class RouteEntry:
    """A literal route declaration, or a MOUNT prefix declaration."""

    method: str
    path: str
    file: str
    line: int
    occurrences: int = 1

    @property
    def key(self) -> str:
        return f"{self.method} {self.path}"

    @property
    def is_mount(self) -> bool:
        return self.method == MOUNT_METHOD


@dataclass
class PageEntry:
    """A markup page, keyed by the file's base name."""

    name: str
    file: str
    title: str
    scripts: list[str] = field(default_factory=list)
    occurrences: int = 1

    @property
    def line(self) -> int:
        return 1


@dataclass(frozen=True)
class SymbolOccurrence:
    """A single sighting of a name emitted by an extractor."""

    category: SymbolCategory
    name: str
    line: int


@dataclass
class ExtractionResult:
    """Everything one extractor pass saw in one file, in sighting order.

    Extractors only emit sightings; folding them into a registry is the
    indexer's job.
    """

    symbols: list[SymbolOccurrence] = field(default_factory=list)
    routes: list[RouteEntry] = field(default_factory=list)
    pages: list[PageEntry] = field(default_factory=list)

    def add(self, category: SymbolCategory, name: str, line: int) -> None:
        self.symbols.append(SymbolOccurrence(category=category, name=name, line=line))

    def add_route(self, method: str, path: str, file: str, line: int) -> None:
        self.routes.append(RouteEntry(method=method, path=path, file=file, line=line))

    def extend(self, other: "ExtractionResult") -> None:
        self.symbols.extend(other.symbols)
        self.routes.extend(other.routes)
        self.pages.extend(other.pages)

    def names(self, category: SymbolCategory) -> list[str]:
        """Names sighted in ``category``, in order (handy in tests)."""
        return [s.name for s in self.symbols if s.category == category]


@dataclass(frozen=True)
class KnownSymbol:
    """A queried name confirmed in the registry."""

    name: str
    category: SymbolCategory
    file: str
    line: int
    occurrences: int


@dataclass(frozen=True)
class FuzzyMatchResult:
    """A queried name that is absent but close to a known one.

    Attributes:
        queried: The name that was looked up
        suggestion: The closest known name
        distance: Edit distance between the two
        category: First category holding the suggestion
        file: Defining file of the suggestion
        line: First-seen line of the suggestion
        occurrences: How often the suggestion occurs in the project
    """

    queried: str
    suggestion: str
    distance: int
    category: SymbolCategory
    file: str
    line: int
    occurrences: int


@dataclass
class CheckResult:
    """Classification of queried names against the registry."""

    known: list[KnownSymbol] = field(default_factory=list)
    fuzzy: list[FuzzyMatchResult] = field(default_factory=list)
    unknown: list[str] = field(default_factory=list)

    @property
    def has_issues(self) -> bool:
        return bool(self.fuzzy or self.unknown)


@dataclass(frozen=True)
class FileReport:
    """Per-file outcome collected while scanning."""

    path: str
    status: FileStatus
    reason: Optional[str] = None
