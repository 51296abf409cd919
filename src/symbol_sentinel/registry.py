"""Symbol registry for a scanned project.

Holds one flat namespace per category across the whole project:
category -> name -> first-seen location and occurrence count, plus the
route table and the page table. The registry is rebuilt from empty on
every scan.
"""

from dataclasses import dataclass
from typing import Iterator, Optional, Union

import structlog

from .types import (
    MOUNT_METHOD,
    NAME_CATEGORIES,
    PageEntry,
    RouteEntry,
    SymbolCategory,
    SymbolEntry,
)

logger = structlog.get_logger(__name__)

META_KEY = "_meta"

RegistryEntry = Union[SymbolEntry, RouteEntry, PageEntry]


@dataclass
class RegistryMeta:
    """Scan metadata stored next to the category maps."""

    project: str
    scanned: str
    elapsed_ms: int
    file_count: int

    def to_dict(self) -> dict:
        return {
            "project": self.project,
            "scanned": self.scanned,
            "elapsed_ms": self.elapsed_ms,
            "file_count": self.file_count,
        }


class SymbolRegistry:
    """Accumulated symbols of one scan.

    Identity of an entry is ``(category, name)``. The first sighting fixes
    the location; later sightings, even from other files, only increase the
    occurrence count.

    Attributes:
        meta: Scan metadata, never treated as a category
    """

    def __init__(self, meta: Optional[RegistryMeta] = None) -> None:
        self.meta = meta
        self._symbols: dict[SymbolCategory, dict[str, SymbolEntry]] = {
            category: {} for category in NAME_CATEGORIES
        }
        self._routes: dict[str, RouteEntry] = {}
        self._pages: dict[str, PageEntry] = {}

    def add_symbol(
        self,
        category: SymbolCategory,
        name: str,
        file: str,
        line: int,
    ) -> SymbolEntry:
        """Record one sighting of ``name`` in ``category``.

        Args:
            category: One of the name categories
            name: Identifier that was seen
            file: Relative path of the file it was seen in
            line: 1-based line number of the sighting

        Returns:
            The (possibly pre-existing) registry entry
        """
        if category not in self._symbols:
            raise ValueError(f"{category.value} is not a name category")

        names = self._symbols[category]
        entry = names.get(name)
        if entry is None:
            entry = SymbolEntry(name=name, category=category, file=file, line=line)
            names[name] = entry
        else:
            entry.occurrences += 1
        return entry

    def add_route(self, method: str, path: str, file: str, line: int) -> RouteEntry:
        """Record a route (or MOUNT) declaration; the first one wins."""
        key = f"{method} {path}"
        entry = self._routes.get(key)
        if entry is None:
            entry = RouteEntry(method=method, path=path, file=file, line=line)
            self._routes[key] = entry
        else:
            entry.occurrences += 1
        return entry

    def add_page(
        self,
        name: str,
        file: str,
        title: str,
        scripts: list[str],
    ) -> PageEntry:
        """Record a markup page keyed by base name; the first file wins."""
        entry = self._pages.get(name)
        if entry is None:
            entry = PageEntry(name=name, file=file, title=title, scripts=list(scripts))
            self._pages[name] = entry
        else:
            entry.occurrences += 1
            logger.debug(
                "page_name_collision",
                name=name,
                kept=entry.file,
                ignored=file,
            )
        return entry

    def category(self, category: SymbolCategory) -> dict[str, RegistryEntry]:
        """Return the live map for a category."""
        if category == SymbolCategory.ROUTES:
            return self._routes  # type: ignore[return-value]
        if category == SymbolCategory.PAGES:
            return self._pages  # type: ignore[return-value]
        return self._symbols[category]  # type: ignore[return-value]

    def categories(self) -> Iterator[tuple[SymbolCategory, dict[str, RegistryEntry]]]:
        """Iterate category maps in the fixed enumeration order."""
        for category in SymbolCategory:
            yield category, self.category(category)

    @property
    def routes(self) -> dict[str, RouteEntry]:
        return self._routes

    @property
    def pages(self) -> dict[str, PageEntry]:
        return self._pages

    def leaf_routes(self) -> list[RouteEntry]:
        return [r for r in self._routes.values() if r.method != MOUNT_METHOD]

    def mounts(self) -> list[RouteEntry]:
        return [r for r in self._routes.values() if r.method == MOUNT_METHOD]

    def get(self, category: SymbolCategory, name: str) -> Optional[RegistryEntry]:
        return self.category(category).get(name)

    def lookup(self, name: str) -> Optional[tuple[SymbolCategory, RegistryEntry]]:
        """Find the first category (in enumeration order) holding ``name``."""
        for category, entries in self.categories():
            entry = entries.get(name)
            if entry is not None:
                return category, entry
        return None

    def contains(self, name: str) -> bool:
        return self.lookup(name) is not None

    def all_names(self) -> dict[str, None]:
        """Ordered union of names across every category.

        Categories are visited in enumeration order and names in insertion
        order, so iteration is first-scanned-first. A dict is used as an
        insertion-ordered set.
        """
        names: dict[str, None] = {}
        for _, entries in self.categories():
            for name in entries:
                names.setdefault(name, None)
        return names

    def count(self, category: SymbolCategory) -> int:
        return len(self.category(category))

    def symbol_count(self) -> int:
        """Total number of distinct entries over all categories."""
        return sum(len(entries) for _, entries in self.categories())

    def is_empty(self) -> bool:
        return self.symbol_count() == 0

    def to_dict(self) -> dict:
        """Serialize to the persisted document layout.

        The metadata block sits at the same level as the category maps under
        the ``_meta`` key.
        """
        data: dict = {}
        if self.meta is not None:
            data[META_KEY] = self.meta.to_dict()
        for category in NAME_CATEGORIES:
            data[category.value] = {
                name: {"file": e.file, "line": e.line, "occurrences": e.occurrences}
                for name, e in self._symbols[category].items()
            }
        data[SymbolCategory.ROUTES.value] = {
            key: {
                "method": r.method,
                "path": r.path,
                "file": r.file,
                "line": r.line,
                "occurrences": r.occurrences,
            }
            for key, r in self._routes.items()
        }
        data[SymbolCategory.PAGES.value] = {
            name: {
                "file": p.file,
                "title": p.title,
                "scripts": list(p.scripts),
                "occurrences": p.occurrences,
            }
            for name, p in self._pages.items()
        }
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "SymbolRegistry":
        """Rebuild a registry from ``to_dict()`` output.

        Entries are restored verbatim (locations and counts), not replayed
        through ``add_symbol``.
        """
        meta_data = data.get(META_KEY)
        meta = RegistryMeta(**meta_data) if meta_data else None
        registry = cls(meta=meta)

        for category in NAME_CATEGORIES:
            for name, item in (data.get(category.value) or {}).items():
                registry._symbols[category][name] = SymbolEntry(
                    name=name,
                    category=category,
                    file=item["file"],
                    line=item["line"],
                    occurrences=item.get("occurrences", 1),
                )

        for key, item in (data.get(SymbolCategory.ROUTES.value) or {}).items():
            method = item.get("method") or key.split(" ", 1)[0]
            path = item.get("path") or key.split(" ", 1)[-1]
            registry._routes[key] = RouteEntry(
                method=method,
                path=path,
                file=item["file"],
                line=item["line"],
                occurrences=item.get("occurrences", 1),
            )

        for name, item in (data.get(SymbolCategory.PAGES.value) or {}).items():
            registry._pages[name] = PageEntry(
                name=name,
                file=item["file"],
                title=item.get("title") or name,
                scripts=list(item.get("scripts") or []),
                occurrences=item.get("occurrences", 1),
            )

        return registry
