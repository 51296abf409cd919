"""Route validator: check literal path strings against the route table.

A path is accepted when it matches a declared route exactly, matches one
after parameter wildcarding, is a leading part of a declared route, or
lives under a mount whose internals were never indexed.
"""

import re
from typing import Iterable, Optional

import structlog

from ..extractor import is_under_prefix
from ..registry import SymbolRegistry

logger = structlog.get_logger(__name__)

WILDCARD = "*"

_NUMERIC = re.compile(r"^\d+$")
_PARAM = re.compile(r"^:[A-Za-z_]\w*$")


def clean_path(path: str) -> str:
    """Drop surrounding whitespace, any query string and a trailing slash."""
    cleaned = path.strip().split("?", 1)[0].split("#", 1)[0]
    if len(cleaned) > 1:
        cleaned = cleaned.rstrip("/") or "/"
    return cleaned


def normalize_segments(path: str, declared: bool = False) -> list[str]:
    """Split a path into segments, wildcarding the variable ones.

    Numeric segments become ``*`` on both sides; ``:name`` parameters only
    count as wildcards in declared routes.
    """
    segments = []
    for segment in path.split("/"):
        if _NUMERIC.match(segment) or (declared and _PARAM.match(segment)):
            segments.append(WILDCARD)
        else:
            segments.append(segment)
    return segments


def _segments_agree(query: list[str], declared: list[str]) -> bool:
    return all(d == WILDCARD or d == q for q, d in zip(query, declared))


class RouteValidator:
    """Validator for literal route paths.

    Attributes:
        registry: The SymbolRegistry whose route table is consulted
    """

    def __init__(self, registry: SymbolRegistry) -> None:
        self.registry = registry
        leaves = registry.leaf_routes()
        self._known_paths = {route.path for route in leaves}
        self._known_segments = [
            normalize_segments(path, declared=True) for path in sorted(self._known_paths)
        ]
        self._mounts = [route.path for route in registry.mounts()]
        self._resolved_mounts = {
            mount
            for mount in self._mounts
            if any(is_under_prefix(path, mount) for path in self._known_paths)
        }

    @property
    def validator_type(self) -> str:
        """Return the validator type identifier."""
        return "route"

    @property
    def has_routes(self) -> bool:
        return bool(self._known_paths or self._mounts)

    def opaque_mounts(self) -> list[str]:
        """Mounts with no indexed sub-route."""
        return [m for m in self._mounts if m not in self._resolved_mounts]

    def is_known(self, path: str) -> bool:
        """Whether ``path`` is an acceptable reference to a declared route."""
        cleaned = clean_path(path)
        if not cleaned:
            return False
        if cleaned in self._known_paths:
            return True

        query = normalize_segments(cleaned)
        for declared in self._known_segments:
            if len(declared) == len(query) and _segments_agree(query, declared):
                return True

        # A leading part of a declared route, e.g. a resource collection
        for declared in self._known_segments:
            if len(declared) > len(query) and _segments_agree(query, declared):
                return True

        # Nothing is known about what an opaque mount serves
        for mount in self.opaque_mounts():
            if is_under_prefix(cleaned, mount):
                return True

        return False

    def validate(self, paths: Iterable[str]) -> list[str]:
        """Return the paths that match no declared route, in input order.

        An empty route table means nothing can be verified, so no path is
        reported.
        """
        if not self.has_routes:
            return []

        unknown = [path for path in paths if not self.is_known(path)]
        if unknown:
            logger.debug("unknown_routes", count=len(unknown), paths=unknown[:10])
        return unknown


def validate_routes(
    paths: Optional[Iterable[str]],
    registry: Optional[SymbolRegistry],
) -> list[str]:
    """List the paths in ``paths`` that are not valid route references.

    A missing registry or no paths yields an empty list.
    """
    if registry is None or not paths:
        return []
    return RouteValidator(registry).validate(paths)
