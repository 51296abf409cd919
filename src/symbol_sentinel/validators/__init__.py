"""Validators for symbol and route references.

This module provides validation logic for:
- SymbolValidator: name lookup with fuzzy typo suggestions
- RouteValidator: literal route paths against the declared route table
"""

from .fuzzy import edit_distance, find_fuzzy_match, max_distance_for
from .route_validator import RouteValidator, validate_routes
from .symbol_validator import SymbolValidator, check_names

__all__ = [
    "find_fuzzy_match",
    "edit_distance",
    "max_distance_for",
    "RouteValidator",
    "validate_routes",
    "SymbolValidator",
    "check_names",
]
