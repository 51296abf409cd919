"""Symbol validator: classify queried names against the registry.

Each queried name ends up in exactly one bucket: known (present in some
category), fuzzy (absent, but within the edit-distance gate of a known
name) or unknown.
"""

from typing import Iterable, Optional

import structlog

from ..registry import SymbolRegistry
from ..types import CheckResult, FuzzyMatchResult, KnownSymbol
from .fuzzy import find_fuzzy_match

logger = structlog.get_logger(__name__)


class SymbolValidator:
    """Validator for symbol name references.

    Attributes:
        registry: The SymbolRegistry to validate against
    """

    def __init__(self, registry: SymbolRegistry) -> None:
        """Initialize the symbol validator.

        Args:
            registry: Registry built by a project scan
        """
        self.registry = registry
        self._names = registry.all_names()

    @property
    def validator_type(self) -> str:
        """Return the validator type identifier."""
        return "symbol"

    def check(self, names: Iterable[str]) -> CheckResult:
        """Classify every queried name.

        Args:
            names: Names to look up, processed in order

        Returns:
            CheckResult with known, fuzzy and unknown buckets
        """
        result = CheckResult()

        for name in names:
            found = self.registry.lookup(name)
            if found is not None:
                category, entry = found
                result.known.append(
                    KnownSymbol(
                        name=name,
                        category=category,
                        file=entry.file,
                        line=entry.line,
                        occurrences=entry.occurrences,
                    )
                )
                continue

            suggestion = self.suggest(name)
            if suggestion is not None:
                result.fuzzy.append(suggestion)
            else:
                result.unknown.append(name)

        logger.debug(
            "names_checked",
            known=len(result.known),
            fuzzy=len(result.fuzzy),
            unknown=len(result.unknown),
        )
        return result

    def suggest(self, name: str) -> Optional[FuzzyMatchResult]:
        """Closest known name to ``name``, or None outside the gate."""
        match = find_fuzzy_match(name, self._names)
        if match is None:
            return None

        suggestion, distance = match
        found = self.registry.lookup(suggestion)
        if found is None:
            return None
        category, entry = found
        return FuzzyMatchResult(
            queried=name,
            suggestion=suggestion,
            distance=distance,
            category=category,
            file=entry.file,
            line=entry.line,
            occurrences=entry.occurrences,
        )


def check_names(names: Optional[Iterable[str]], registry: Optional[SymbolRegistry]) -> CheckResult:
    """Classify ``names`` as known, fuzzy or unknown.

    A missing registry or an empty name list means there is nothing to
    check, and an empty result is returned.
    """
    if registry is None or not names:
        return CheckResult()
    return SymbolValidator(registry).check(names)
