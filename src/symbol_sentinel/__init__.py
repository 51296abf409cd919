"""Codebase symbol registry for catching hallucinated references.

Scans a project tree into a flat per-category registry of functions,
types, variables, exports, routes and pages, then checks queried names and
request paths against it.

Key components:
- types: Core data types (SymbolCategory, Language, ExtractionResult, etc.)
- registry: SymbolRegistry with first-seen locations and occurrence counts
- parser: Tree-sitter parsing wrapper
- extractor / heuristics / markup: Per-language symbol extraction
- indexing: Directory walking and project scans
- validators: Name and route validation
- detector: Reference checks for freshly written code
"""

from .types import (
    CheckResult,
    ExtractionResult,
    FileReport,
    FileStatus,
    FuzzyMatchResult,
    KnownSymbol,
    Language,
    ScannedFile,
    SymbolCategory,
)
from .registry import RegistryMeta, SymbolRegistry
from .parser import ASTParser
from .extractor import SymbolExtractor
from .indexing import ScanResult, scan_project
from .validators import check_names, validate_routes
from .storage import read_registry, write_file_index, write_registry
from .detector import DetectionReport, HallucinationDetector
from .overview import generate_overview

__all__ = [
    # Types
    "CheckResult",
    "ExtractionResult",
    "FileReport",
    "FileStatus",
    "FuzzyMatchResult",
    "KnownSymbol",
    "Language",
    "ScannedFile",
    "SymbolCategory",
    # Core classes
    "RegistryMeta",
    "SymbolRegistry",
    "ASTParser",
    "SymbolExtractor",
    "ScanResult",
    "DetectionReport",
    "HallucinationDetector",
    # Operations
    "scan_project",
    "check_names",
    "validate_routes",
    "read_registry",
    "write_registry",
    "write_file_index",
    "generate_overview",
]
