"""Directory walking for project scans."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import structlog

from ..config import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_FILE_BYTES,
    DEFAULT_MAX_FILES,
    DEFAULT_MAX_MARKUP_BYTES,
)
from ..types import FileReport, FileStatus, Language, get_language_for_file

logger = structlog.get_logger(__name__)

# Names skipped wherever they appear (directories or files)
SKIP_NAMES = frozenset(
    {
        # Package managers / tooling
        "node_modules", ".git", ".wisdom", ".claude", "dist", "build",
        "coverage", ".next", "__pycache__", ".tox", ".venv", "venv",
        "vendor", "target", ".cache", ".turbo", ".github",
        # Backups / archive / generated
        "archive", "backups", "backup", "logs", "tmp",
        "uploads", "media", "data", "migrations",
        # Non-code / static content
        "content", "Website", "public", "static", "assets",
    }
)

# The one dotfile that is not skipped
HIDDEN_ALLOWLIST = frozenset({".env.example"})

_IGNORE_DIR_LINE = re.compile(r"^([A-Za-z0-9_-]+)/?$")
_BACKUP_NAME = re.compile(r"backup", re.IGNORECASE)


@dataclass(frozen=True)
class WalkedFile:
    """A candidate source file that passed every walker filter."""

    path: Path
    rel_path: str
    language: Language
    size: int
    mtime: float


def read_ignore_dirs(root: Path, ignore_file: str = ".gitignore") -> set[str]:
    """Plain directory names listed in the project's ignore file.

    Only bare names (``dist``, ``Website/``) are honoured; globs, paths,
    negations and comments are ignored.
    """
    dirs: set[str] = set()
    try:
        content = (root / ignore_file).read_text(encoding="utf-8", errors="replace")
    except OSError:
        return dirs

    for line in content.splitlines():
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("#"):
            continue
        match = _IGNORE_DIR_LINE.match(trimmed)
        if match:
            dirs.add(match.group(1))
    return dirs


class DirectoryWalker:
    """Enumerate indexable files under a project root.

    Entries are visited in sorted order so repeated scans of an unchanged
    tree see files in the same order. Depth and file-count limits are hard
    cutoffs: anything past them is left out without a report.
    """

    def __init__(
        self,
        root: Path,
        max_depth: int = DEFAULT_MAX_DEPTH,
        max_files: int = DEFAULT_MAX_FILES,
        ignore_file: str = ".gitignore",
        max_file_bytes: int = DEFAULT_MAX_FILE_BYTES,
        max_markup_bytes: int = DEFAULT_MAX_MARKUP_BYTES,
    ) -> None:
        self.root = root
        self.max_depth = max_depth
        self.max_files = max_files
        self.max_file_bytes = max_file_bytes
        self.max_markup_bytes = max_markup_bytes
        self.extra_skip = read_ignore_dirs(root, ignore_file)
        self.reports: list[FileReport] = []

    def walk(self) -> list[WalkedFile]:
        """Return the candidate files, in traversal order."""
        self.reports = []
        files: list[WalkedFile] = []
        self._walk_dir(self.root, 0, files)
        logger.debug(
            "walk_complete",
            root=str(self.root),
            file_count=len(files),
            skipped=len(self.reports),
        )
        return files

    def size_limit(self, language: Language) -> int:
        if language == Language.HTML:
            return self.max_markup_bytes
        return self.max_file_bytes

    def is_excluded(self, name: str, is_dir: bool) -> bool:
        if name.startswith(".") and name not in HIDDEN_ALLOWLIST:
            return True
        if name in SKIP_NAMES or name in self.extra_skip:
            return True
        # Copies like "src old" or "Backup_2023" are not the live tree
        if is_dir and (" " in name or _BACKUP_NAME.search(name)):
            return True
        return False

    def _walk_dir(self, directory: Path, depth: int, files: list[WalkedFile]) -> None:
        if depth > self.max_depth or len(files) >= self.max_files:
            return

        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            logger.debug("directory_scan_failed", path=str(directory), error=str(e))
            return

        for entry in entries:
            if len(files) >= self.max_files:
                break

            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError:
                continue

            if self.is_excluded(entry.name, is_dir):
                continue

            entry_path = Path(entry.path)
            if is_dir:
                self._walk_dir(entry_path, depth + 1, files)
                continue

            walked = self._check_file(entry_path)
            if walked is not None:
                files.append(walked)

    def _check_file(self, path: Path) -> Optional[WalkedFile]:
        language = get_language_for_file(path.name)
        if language is None:
            return None

        rel_path = path.relative_to(self.root).as_posix()
        try:
            stat = path.stat()
        except OSError as e:
            self.reports.append(FileReport(rel_path, FileStatus.FAILED, f"stat failed: {e}"))
            return None

        limit = self.size_limit(language)
        if stat.st_size > limit:
            self.reports.append(
                FileReport(rel_path, FileStatus.SKIPPED, f"{stat.st_size} bytes exceeds {limit}")
            )
            return None

        return WalkedFile(
            path=path,
            rel_path=rel_path,
            language=language,
            size=stat.st_size,
            mtime=stat.st_mtime,
        )
