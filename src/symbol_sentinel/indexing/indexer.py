"""Project scan orchestration: walk, dispatch, extract, fold into a registry."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

import structlog

from ..config import Settings, default_settings, get_settings
from ..core.errors import ParseError
from ..extractor import SymbolExtractor
from ..heuristics import extract_heuristic
from ..markup import MarkupExtractor
from ..parser import ASTParser, SyntaxTreeService
from ..registry import RegistryMeta, SymbolRegistry
from ..types import (
    LANGUAGE_STRATEGIES,
    ExtractionResult,
    ExtractionStrategy,
    FileReport,
    FileStatus,
    Language,
    ScannedFile,
)
from .scanner import DirectoryWalker, WalkedFile

logger = structlog.get_logger(__name__)


@dataclass
class ScanResult:
    """Result of one project scan.

    Attributes:
        files: Every recorded file, in traversal order
        registry: Symbols folded from all files
        reports: One entry per file that failed or was skipped
    """

    files: list[ScannedFile]
    registry: SymbolRegistry
    reports: list[FileReport] = field(default_factory=list)

    @property
    def symbols(self) -> SymbolRegistry:
        return self.registry

    def failed(self) -> list[FileReport]:
        return [r for r in self.reports if r.status == FileStatus.FAILED]


def apply_extraction(registry: SymbolRegistry, result: ExtractionResult, file_path: str) -> None:
    """Fold one file's sightings into the registry, in sighting order."""
    for occurrence in result.symbols:
        registry.add_symbol(occurrence.category, occurrence.name, file_path, occurrence.line)
    for route in result.routes:
        registry.add_route(route.method, route.path, route.file, route.line)
    for page in result.pages:
        registry.add_page(page.name, page.file, page.title, page.scripts)


class ProjectIndexer:
    """Scan a project tree into a fresh ``SymbolRegistry``."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        parser: Optional[SyntaxTreeService] = None,
    ) -> None:
        if settings is None:
            try:
                settings = get_settings()
            except ValueError as e:
                # a scan never fails on configuration
                logger.warning("invalid_settings_using_defaults", error=str(e))
                settings = default_settings()
        self.settings = settings
        self.symbol_extractor = SymbolExtractor(
            parser or ASTParser(), api_prefix=self.settings.api_prefix
        )
        self.markup_extractor = MarkupExtractor(self.symbol_extractor)

    def extract(self, content: str, rel_path: str, language: Language) -> ExtractionResult:
        """Dispatch a file's content to the extractor for its language.

        Raises:
            ParseError: If the syntax-tree path cannot produce a tree
        """
        strategy = LANGUAGE_STRATEGIES.get(language, ExtractionStrategy.NONE)
        if strategy == ExtractionStrategy.SYNTAX_TREE:
            return self.symbol_extractor.extract_from_string(content, rel_path, language)
        if strategy == ExtractionStrategy.HEURISTIC:
            return extract_heuristic(content, language)
        if strategy == ExtractionStrategy.MARKUP:
            return self.markup_extractor.extract_from_string(content, rel_path)
        return ExtractionResult()

    def scan(
        self,
        project_root: Union[str, Path],
        max_depth: Optional[int] = None,
        max_files: Optional[int] = None,
    ) -> ScanResult:
        """Scan ``project_root`` and build a registry from scratch.

        Never raises: unreadable, oversized or unparseable files are left
        out and listed in ``ScanResult.reports``.

        Args:
            project_root: Directory to scan
            max_depth: Maximum recursion depth (settings default when None)
            max_files: Maximum number of files recorded (settings default)

        Returns:
            ScanResult with files, registry and per-file reports
        """
        start_time = time.perf_counter()
        root = Path(project_root).expanduser().resolve()

        walker = DirectoryWalker(
            root,
            max_depth=self.settings.max_depth if max_depth is None else max_depth,
            max_files=self.settings.max_files if max_files is None else max_files,
            ignore_file=self.settings.ignore_file,
            max_file_bytes=self.settings.max_file_bytes,
            max_markup_bytes=self.settings.max_markup_bytes,
        )

        registry = SymbolRegistry()
        files: list[ScannedFile] = []
        reports: list[FileReport] = []

        walked_files = walker.walk()
        reports.extend(walker.reports)

        for walked in walked_files:
            scanned, report = self._index_file(walked, registry)
            if scanned is not None:
                files.append(scanned)
            if report is not None:
                reports.append(report)

        elapsed_ms = int((time.perf_counter() - start_time) * 1000)
        registry.meta = RegistryMeta(
            project=str(root),
            scanned=datetime.now(timezone.utc).isoformat(),
            elapsed_ms=elapsed_ms,
            file_count=len(files),
        )

        logger.info(
            "scan_completed",
            project=str(root),
            file_count=len(files),
            symbol_count=registry.symbol_count(),
            failed=sum(1 for r in reports if r.status == FileStatus.FAILED),
            skipped=sum(1 for r in reports if r.status == FileStatus.SKIPPED),
            elapsed_ms=elapsed_ms,
        )
        return ScanResult(files=files, registry=registry, reports=reports)

    def _index_file(
        self,
        walked: WalkedFile,
        registry: SymbolRegistry,
    ) -> tuple[Optional[ScannedFile], Optional[FileReport]]:
        try:
            content = walked.path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning("file_read_failed", file=walked.rel_path, error=str(e))
            return None, FileReport(walked.rel_path, FileStatus.FAILED, f"read failed: {e}")

        scanned = ScannedFile(
            path=walked.rel_path,
            language=walked.language.value,
            line_count=len(content.splitlines()),
            size=walked.size,
            modified=datetime.fromtimestamp(walked.mtime, tz=timezone.utc).date().isoformat(),
        )

        try:
            result = self.extract(content, walked.rel_path, walked.language)
        except ParseError as e:
            logger.warning("file_extraction_failed", file=walked.rel_path, error=e.message)
            return scanned, FileReport(walked.rel_path, FileStatus.FAILED, e.message)
        except Exception as e:
            logger.warning("file_extraction_failed", file=walked.rel_path, error=str(e))
            return scanned, FileReport(walked.rel_path, FileStatus.FAILED, str(e))

        # Only complete results are folded, so a failure never half-applies
        apply_extraction(registry, result, walked.rel_path)
        return scanned, None


def scan_project(
    project_root: Union[str, Path],
    max_depth: Optional[int] = None,
    max_files: Optional[int] = None,
    settings: Optional[Settings] = None,
) -> ScanResult:
    """Scan a project and return its files and symbol registry.

    Convenience wrapper around ``ProjectIndexer(settings).scan(...)``.
    """
    return ProjectIndexer(settings).scan(project_root, max_depth=max_depth, max_files=max_files)
