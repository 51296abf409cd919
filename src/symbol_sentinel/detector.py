"""Hallucination detector for freshly written code.

Pulls the references a snippet makes (locally imported names, standalone
calls, ``/api/...`` string literals, relative import paths) and checks them
against a scanned registry and the filesystem. Meant to run on the diff of
an edit rather than the whole file so pre-existing code is not flagged.
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import structlog

from .registry import SymbolRegistry
from .types import CheckResult
from .validators.route_validator import RouteValidator
from .validators.symbol_validator import SymbolValidator

logger = structlog.get_logger(__name__)

# Patterns for extracting references from code
_PATTERNS = {
    # import { foo, bar as baz } from './local'
    "named_import": re.compile(r"import\s*\{([^}]+)\}\s*from\s*['\"](\.[^'\"]+)['\"]"),
    # import Foo from './local'
    "default_import": re.compile(r"import\s+([A-Z]\w+)\s+from\s*['\"](\.[^'\"]+)['\"]"),
    # const { foo } = require('./local')
    "require_destructure": re.compile(
        r"(?:const|let|var)\s*\{([^}]+)\}\s*=\s*require\s*\(\s*['\"](\.[^'\"]+)['\"]\s*\)"
    ),
    "import_path": re.compile(r"(?:import|export)\s+.*?from\s*['\"](\.[^'\"]+)['\"]"),
    "require_path": re.compile(r"require\s*\(\s*['\"](\.[^'\"]+)['\"]\s*\)"),
    # foo( but not obj.foo( or foo_bar.baz(
    "call": re.compile(r"(?<![.\w$])([A-Za-z_]\w*)\s*\("),
}

_IDENTIFIER = re.compile(r"^[A-Za-z_]\w*$")
_PROJECT_STYLE = re.compile(r"^(?:[a-z][a-zA-Z0-9]+|[A-Z][a-z][a-zA-Z0-9]+)$")
_CONSTANT = re.compile(r"^[A-Z_]+$")

_BLOCK_COMMENT = re.compile(r"/\*[\s\S]*?\*/")
_LINE_COMMENT = re.compile(r"//.*$", re.MULTILINE)
_TEMPLATE = re.compile(r"`(?:[^`\\]|\\.)*`")
_DOUBLE_QUOTED = re.compile(r'"(?:[^"\\\n]|\\.)*"')
_SINGLE_QUOTED = re.compile(r"'(?:[^'\\\n]|\\.)*'")

IMPORT_SUFFIXES = (".js", ".mjs", ".ts", ".tsx", ".jsx", ".cjs", "/index.js", "/index.ts")

# Keywords, runtime globals and very common library calls
SKIP_NAMES = frozenset(
    """
    if for while switch catch require import return throw function async class
    const let var try else new typeof instanceof delete void yield await of in from
    console Math JSON Object Array String Number Boolean Date RegExp Error Promise
    Set Map WeakMap WeakSet Symbol Proxy Reflect BigInt Intl ArrayBuffer DataView
    setTimeout setInterval clearTimeout clearInterval requestAnimationFrame
    cancelAnimationFrame parseInt parseFloat isNaN isFinite isInteger
    encodeURIComponent decodeURIComponent encodeURI decodeURI atob btoa
    Buffer process module exports global globalThis __dirname __filename
    null undefined true false NaN Infinity this super arguments
    fetch XMLHttpRequest WebSocket EventSource Headers Request Response
    URL URLSearchParams FormData AbortController
    describe it test expect beforeEach afterEach beforeAll afterAll jest vi assert should
    log warn info error debug trace dir table time timeEnd alert confirm prompt
    resolve reject then finally bind call apply
    constructor assign keys values entries freeze seal create define is parse
    stringify toString valueOf hasOwnProperty getPrototypeOf setPrototypeOf
    defineProperty getOwnPropertyNames
    includes indexOf lastIndexOf push pop shift unshift slice splice join split
    trim trimStart trimEnd replace replaceAll match matchAll search
    filter map reduce reduceRight forEach find findIndex findLast some every sort
    reverse concat flat flatMap fill copyWithin at with toSorted toReversed toSpliced
    has get set add clear next done value
    querySelector querySelectorAll getElementById getElementsByClassName
    createElement createTextNode appendChild removeChild insertBefore
    addEventListener removeEventListener dispatchEvent getAttribute setAttribute
    removeAttribute classList preventDefault stopPropagation getComputedStyle
    getBoundingClientRect
    readFileSync writeFileSync existsSync mkdirSync readdirSync readFile writeFile
    mkdir readdir stat access unlink statSync unlinkSync renameSync copyFileSync
    dirname basename extname relative normalize
    emit on once off removeListener removeAllListeners
    randomUUID createHash createHmac randomBytes exec execSync spawn fork
    promisify inspect format inherits
    rgba rgb hsl hsla calc url linear radial translateX translateY rotate scale skew
    """.split()
)


def strip_comments_and_strings(code: str) -> str:
    """Blank out comments and string literals so prose is not read as code."""
    code = _BLOCK_COMMENT.sub("", code)
    code = _LINE_COMMENT.sub("", code)
    code = _TEMPLATE.sub('""', code)
    code = _DOUBLE_QUOTED.sub('""', code)
    return _SINGLE_QUOTED.sub("''", code)


def _split_names(clause: str, separator: str) -> list[str]:
    names = []
    for part in clause.split(","):
        name = re.split(separator, part.strip())[0].strip()
        if _IDENTIFIER.match(name):
            names.append(name)
    return names


@dataclass
class DetectionReport:
    """References found in a snippet and how they checked out.

    Attributes:
        file_path: File the snippet was written to
        referenced: Candidate names after local filtering, in order
        check: Registry classification of ``referenced``
        unknown_routes: ``/api`` string literals matching no declared route
        missing_imports: Relative import paths that resolve to no file
        diff_only: Whether only the changed content was inspected
    """

    file_path: str
    referenced: list[str] = field(default_factory=list)
    check: CheckResult = field(default_factory=CheckResult)
    unknown_routes: list[str] = field(default_factory=list)
    missing_imports: list[str] = field(default_factory=list)
    diff_only: bool = False

    @property
    def has_issues(self) -> bool:
        return bool(
            self.check.fuzzy or self.check.unknown or self.unknown_routes or self.missing_imports
        )

    def warnings(self, limit: int = 10) -> list[str]:
        """Human-readable warning lines, empty when there is nothing to say."""
        file_name = os.path.basename(self.file_path)
        mode = " (in new code)" if self.diff_only else ""
        lines: list[str] = []

        if self.unknown_routes:
            lines.append(
                f"API route check: {len(self.unknown_routes)} route(s) not found in "
                f"project index for {file_name}{mode}:"
            )
            lines.extend(f"  - {r}" for r in self.unknown_routes[:limit])
            if len(self.unknown_routes) > limit:
                lines.append(f"  ... and {len(self.unknown_routes) - limit} more")

        if self.missing_imports:
            lines.append(
                f"Import path check: {len(self.missing_imports)} import(s) point to files "
                f"that don't exist in {file_name}{mode}:"
            )
            lines.extend(f"  - {p}" for p in self.missing_imports)

        if self.check.fuzzy:
            lines.append(f"Possible typos in {file_name}{mode}:")
            for f in self.check.fuzzy[:limit]:
                lines.append(
                    f"  - {f.queried} -> did you mean {f.suggestion}? "
                    f"({f.category.value}, {f.file}:{f.line})"
                )

        if self.check.unknown:
            lines.append(
                f"Symbol check: {len(self.check.unknown)} symbol(s) not found in project "
                f"registry for {file_name}{mode}:"
            )
            for name in self.check.unknown[:limit]:
                lines.append(f"  - {name} (could be hallucinated, new, or from a dependency)")
            if len(self.check.unknown) > limit:
                lines.append(f"  ... and {len(self.check.unknown) - limit} more")
            lines.append("Rescan the project to update the registry if these are intentional.")

        return lines


class HallucinationDetector:
    """Check a snippet of written code against the project registry.

    Attributes:
        registry: Registry of the project the snippet belongs to
        api_prefix: Prefix that marks string literals as route references
    """

    def __init__(self, registry: SymbolRegistry, api_prefix: str = "/api") -> None:
        self.registry = registry
        self.api_prefix = api_prefix.rstrip("/")
        self._symbol_validator = SymbolValidator(registry)
        self._route_validator = RouteValidator(registry)
        self._route_literal = re.compile(
            r"['\"`](" + re.escape(self.api_prefix) + r"/[A-Za-z0-9/_-]+)['\"`]"
        )

    def check_content(
        self,
        file_path: str,
        content: str,
        diff: Optional[str] = None,
    ) -> DetectionReport:
        """Inspect ``diff`` (or the whole ``content``) of a written file.

        Local definitions and parameters are always looked up in the full
        ``content`` so a diff using names defined elsewhere in the file is
        not flagged.

        Args:
            file_path: Path of the written file, used to resolve imports
            content: Full content of the file after the write
            diff: Only the changed text, when available

        Returns:
            DetectionReport with every finding
        """
        scan_content = diff if diff is not None else content
        report = DetectionReport(file_path=file_path, diff_only=diff is not None)

        if not self.registry.is_empty():
            report.referenced = self.referenced_names(scan_content, content)
            check = self._symbol_validator.check(report.referenced)
            check.unknown = [n for n in check.unknown if _PROJECT_STYLE.match(n)]
            report.check = check

        report.unknown_routes = self._route_validator.validate(self.route_literals(scan_content))
        report.missing_imports = self.missing_import_paths(file_path, scan_content)

        if report.has_issues:
            logger.info(
                "references_flagged",
                file=file_path,
                fuzzy=len(report.check.fuzzy),
                unknown=len(report.check.unknown),
                unknown_routes=len(report.unknown_routes),
                missing_imports=len(report.missing_imports),
            )
        return report

    def route_literals(self, code: str) -> list[str]:
        """``/api/...`` string literals, trailing slash removed, deduplicated."""
        seen: dict[str, None] = {}
        for match in self._route_literal.finditer(code):
            seen.setdefault(match.group(1).rstrip("/"), None)
        return list(seen)

    def referenced_names(self, code: str, full_content: str) -> list[str]:
        """Names the code refers to that could be project symbols."""
        referenced: dict[str, None] = {}

        for match in _PATTERNS["named_import"].finditer(code):
            for name in _split_names(match.group(1), r"\s+as\s+"):
                referenced.setdefault(name, None)

        for match in _PATTERNS["default_import"].finditer(code):
            referenced.setdefault(match.group(1), None)

        for match in _PATTERNS["require_destructure"].finditer(code):
            for name in _split_names(match.group(1), r"\s*:\s*"):
                referenced.setdefault(name, None)

        for match in _PATTERNS["call"].finditer(strip_comments_and_strings(code)):
            name = match.group(1)
            # Capitalised calls are mostly constructors from dependencies
            if name in SKIP_NAMES or len(name) <= 2 or name[0].isupper():
                continue
            referenced.setdefault(name, None)

        stripped_full = strip_comments_and_strings(full_content)
        return [
            name
            for name in referenced
            if len(name) > 2
            and not _CONSTANT.match(name)
            and not self._defined_locally(name, full_content, stripped_full)
        ]

    @staticmethod
    def _defined_locally(name: str, content: str, stripped: str) -> bool:
        escaped = re.escape(name)
        if re.search(rf"(?:function|const|let|var|class)\s+{escaped}\b", content):
            return True
        param_patterns = (
            rf"function\s*\w*\s*\([^)]*\b{escaped}\b[^)]*\)",
            rf"\([^)]*\b{escaped}\b[^)]*\)\s*=>",
            rf"\b{escaped}\s*=>",
        )
        return any(re.search(p, stripped) for p in param_patterns)

    @staticmethod
    def missing_import_paths(file_path: str, code: str) -> list[str]:
        """Relative import/require paths that resolve to no file on disk."""
        paths: dict[str, None] = {}
        for key in ("import_path", "require_path"):
            for match in _PATTERNS[key].finditer(code):
                paths.setdefault(match.group(1), None)

        base_dir = Path(file_path).parent
        missing = []
        for import_path in paths:
            resolved = os.path.normpath(os.path.join(base_dir, import_path))
            candidates = [resolved]
            if not os.path.splitext(resolved)[1]:
                candidates.extend(resolved + suffix for suffix in IMPORT_SUFFIXES)
            if not any(os.path.exists(c) for c in candidates):
                missing.append(import_path)
        return missing
