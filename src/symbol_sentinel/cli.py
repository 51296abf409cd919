"""Command line entry point: scan a project and validate names against it."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

import structlog

from .config import Settings, get_settings
from .core.errors import AppError
from .detector import HallucinationDetector
from .indexing import scan_project
from .overview import generate_overview
from .registry import SymbolRegistry
from .storage import (
    index_path,
    load_registry_or_none,
    read_registry,
    registry_path,
    write_file_index,
    write_registry,
)
from .types import CheckResult
from .validators import check_names, validate_routes

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_FINDINGS = 2


def configure_logging(level: str) -> None:
    """Send structlog output to stderr, filtered at ``level``."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level.upper())),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="symbol-sentinel",
        description="Index a codebase and check names and routes against it.",
    )
    parser.add_argument(
        "--root",
        default=".",
        help="Project root directory (default: current directory)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan = subparsers.add_parser("scan", help="Scan the project and write the registry")
    scan.add_argument("--max-depth", type=int, default=None, help="Maximum directory depth")
    scan.add_argument("--max-files", type=int, default=None, help="Maximum number of files")

    check = subparsers.add_parser("check", help="Check symbol names against the registry")
    check.add_argument("names", nargs="+", help="Symbol names to check")
    check.add_argument("--verbose", action="store_true", help="Also list confirmed symbols")

    routes = subparsers.add_parser("routes", help="Check API paths against declared routes")
    routes.add_argument("paths", nargs="+", help="Request paths, e.g. /api/users/42")

    subparsers.add_parser("overview", help="Scan the project and print a markdown overview")

    content = subparsers.add_parser(
        "check-content",
        help="Check references made by a written file",
    )
    content.add_argument("file", help="File that was written")
    content.add_argument(
        "--diff-only",
        action="store_true",
        help="Only inspect the changed text, read from stdin",
    )
    return parser.parse_args(argv)


def _usage_note(occurrences: int) -> str:
    if occurrences > 5:
        return " (well-established)"
    if occurrences == 1:
        return " (rarely used)"
    return ""


def format_check_result(result: CheckResult, verbose: bool = False) -> list[str]:
    lines: list[str] = []

    if result.fuzzy:
        lines.append(f"### Possible Typos ({len(result.fuzzy)})")
        for f in result.fuzzy:
            lines.append(
                f"- **{f.queried}** -> did you mean **{f.suggestion}**? "
                f"({f.category.value}, {f.file}:{f.line}){_usage_note(f.occurrences)}"
            )
        lines.append("")

    if result.unknown:
        lines.append(f"### Unknown Symbols ({len(result.unknown)})")
        lines.append("These are not in the registry; they could be new, renamed, or hallucinated:")
        lines.extend(f"- **{name}**" for name in result.unknown)
        lines.append("")

    if not result.has_issues:
        lines.append(f"All {len(result.known)} symbols confirmed in registry.")
    else:
        lines.append(
            f"Summary: {len(result.known)} known, {len(result.fuzzy)} fuzzy, "
            f"{len(result.unknown)} unknown"
        )

    if verbose and result.known:
        lines.append("")
        lines.append(f"### Known Symbols ({len(result.known)})")
        for k in result.known:
            lines.append(f"- {k.name} ({k.category.value}, {k.file}:{k.line})")
    return lines


def _load(root: Path, settings: Settings) -> SymbolRegistry:
    return read_registry(registry_path(root, settings.registry_dir))


def run_scan(root: Path, settings: Settings, args: argparse.Namespace) -> int:
    result = scan_project(root, max_depth=args.max_depth, max_files=args.max_files, settings=settings)
    write_registry(registry_path(root, settings.registry_dir), result.registry)
    write_file_index(index_path(root, settings.registry_dir), result.files)

    registry = result.registry
    elapsed = registry.meta.elapsed_ms if registry.meta else 0
    print(
        f"Indexed {len(result.files)} files, {registry.symbol_count()} symbols "
        f"({len(registry.leaf_routes())} routes, {len(registry.pages)} pages) in {elapsed}ms"
    )
    for report in result.failed():
        print(f"  failed: {report.path}: {report.reason}")
    return EXIT_OK


def run_check(root: Path, settings: Settings, args: argparse.Namespace) -> int:
    result = check_names(args.names, _load(root, settings))
    print("\n".join(format_check_result(result, verbose=args.verbose)))
    return EXIT_FINDINGS if result.has_issues else EXIT_OK


def run_routes(root: Path, settings: Settings, args: argparse.Namespace) -> int:
    unknown = validate_routes(args.paths, _load(root, settings))
    if not unknown:
        print(f"All {len(args.paths)} paths match declared routes.")
        return EXIT_OK
    print(f"### Unknown Routes ({len(unknown)})")
    for path in unknown:
        print(f"- {path}")
    return EXIT_FINDINGS


def run_overview(root: Path, settings: Settings, args: argparse.Namespace) -> int:
    print(generate_overview(scan_project(root, settings=settings)))
    return EXIT_OK


def run_check_content(root: Path, settings: Settings, args: argparse.Namespace) -> int:
    file_path = Path(args.file)
    if not file_path.is_absolute():
        file_path = root / file_path
    try:
        content = file_path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        print(f"Cannot read {file_path}: {e}", file=sys.stderr)
        return EXIT_ERROR

    diff = sys.stdin.read() if args.diff_only else None
    # A project that was never scanned still gets the import path check
    registry = load_registry_or_none(registry_path(root, settings.registry_dir)) or SymbolRegistry()
    detector = HallucinationDetector(registry, api_prefix=settings.api_prefix)
    report = detector.check_content(str(file_path), content, diff=diff)

    if not report.has_issues:
        return EXIT_OK
    print("\n".join(report.warnings()), file=sys.stderr)
    return EXIT_FINDINGS


COMMANDS = {
    "scan": run_scan,
    "check": run_check,
    "routes": run_routes,
    "overview": run_overview,
    "check-content": run_check_content,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    try:
        settings = get_settings()
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return EXIT_ERROR
    configure_logging(settings.log_level)

    root = Path(args.root).expanduser().resolve()
    if not root.is_dir():
        print(f"Project root not found: {root}", file=sys.stderr)
        return EXIT_ERROR

    try:
        return COMMANDS[args.command](root, settings, args)
    except AppError as e:
        print(e.message, file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
