"""Project scanning modules."""

from .scanner import DirectoryWalker, WalkedFile, read_ignore_dirs
from .indexer import ProjectIndexer, ScanResult, apply_extraction, scan_project

__all__ = [
    "DirectoryWalker",
    "WalkedFile",
    "read_ignore_dirs",
    "ProjectIndexer",
    "ScanResult",
    "apply_extraction",
    "scan_project",
]
