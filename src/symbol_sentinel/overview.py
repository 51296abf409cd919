"""Compact markdown overview of a scanned project."""

import posixpath
from collections import defaultdict

from .indexing.indexer import ScanResult
from .types import SymbolCategory

# Listings longer than this are summarised by their count only
MAX_LISTED_TYPES = 50
MAX_LISTED_EXPORTS = 80


def _matching_mount(file: str, mount_paths: list[str]) -> str:
    """Best-effort guess of the mount prefix serving a route file."""
    stem = posixpath.splitext(posixpath.basename(file))[0].replace("-", "").replace("_", "")
    if not stem:
        return ""
    for mount in mount_paths:
        if stem in mount.replace("/", "").replace("-", ""):
            return mount
    return ""


def generate_overview(result: ScanResult) -> str:
    """Render files per directory, symbol counts, routes and pages.

    Args:
        result: Output of ``scan_project``

    Returns:
        Markdown text
    """
    registry = result.registry
    lines = ["# Project Overview", ""]

    by_dir: dict[str, list] = defaultdict(list)
    for f in result.files:
        by_dir[posixpath.dirname(f.path) or "."].append(f)

    total_lines = sum(f.line_count for f in result.files)
    lines.append(f"## Files ({len(result.files)})")
    lines.append(f"Total: {total_lines:,} lines")
    lines.append("")
    for directory in sorted(by_dir):
        listing = ", ".join(
            f"{posixpath.basename(f.path)} ({f.line_count}L)" for f in by_dir[directory]
        )
        lines.append(f"- **{directory}**/: {listing}")
    lines.append("")

    functions = registry.category(SymbolCategory.FUNCTIONS)
    types = registry.category(SymbolCategory.TYPES)
    variables = registry.category(SymbolCategory.VARIABLES)
    exports = registry.category(SymbolCategory.EXPORTS)

    lines.append("## Symbols")
    lines.append(
        f"Functions: {len(functions)}, Types: {len(types)}, "
        f"Variables: {len(variables)}, Exports: {len(exports)}"
    )
    lines.append("")

    if 0 < len(types) <= MAX_LISTED_TYPES:
        lines.append("### Types")
        for name in sorted(types):
            entry = types[name]
            lines.append(f"- **{name}** ({entry.file}:{entry.line})")
        lines.append("")

    if 0 < len(exports) <= MAX_LISTED_EXPORTS:
        lines.append("### Exports")
        for name in sorted(exports):
            entry = exports[name]
            lines.append(f"- {name} ({entry.file}:{entry.line})")
        lines.append("")

    leaf_routes = registry.leaf_routes()
    if leaf_routes:
        mount_paths = [m.path for m in registry.mounts()]
        by_file: dict[str, list] = defaultdict(list)
        for route in leaf_routes:
            by_file[route.file].append(route)

        lines.append(f"## API Routes ({len(leaf_routes)} endpoints)")
        lines.append("")
        for file in sorted(by_file):
            file_routes = by_file[file]
            methods = ", ".join(sorted({r.method for r in file_routes}))
            mount = _matching_mount(file, mount_paths)
            suffix = f" -> {mount}" if mount else ""
            lines.append(f"- **{file}**: {methods} ({len(file_routes)}){suffix}")
        lines.append("")

    if registry.pages:
        lines.append(f"## Pages ({len(registry.pages)})")
        lines.append("")
        for name in sorted(registry.pages):
            page = registry.pages[name]
            scripts = f" ({len(page.scripts)} scripts)" if page.scripts else ""
            lines.append(f"- **{name}**: {page.title}{scripts}")
        lines.append("")

    return "\n".join(lines)
