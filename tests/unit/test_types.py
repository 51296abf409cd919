"""Tests for types module."""

from symbol_sentinel.types import (
    NAME_CATEGORIES,
    CheckResult,
    ExtractionResult,
    ExtractionStrategy,
    Language,
    RouteEntry,
    ScannedFile,
    SymbolCategory,
    get_language_for_file,
    get_strategy_for_file,
)


class TestLanguageDispatch:
    """Tests for extension-based language detection."""

    def test_javascript_extensions(self):
        """Test that every JavaScript extension maps to JavaScript."""
        for name in ("a.js", "a.mjs", "a.cjs", "a.jsx"):
            assert get_language_for_file(name) == Language.JAVASCRIPT

    def test_typescript_and_tsx(self):
        """Test that .ts and .tsx use distinct grammars."""
        assert get_language_for_file("src/app.ts") == Language.TYPESCRIPT
        assert get_language_for_file("src/App.tsx") == Language.TSX

    def test_extension_is_case_insensitive(self):
        """Test that upper-case extensions are recognised."""
        assert get_language_for_file("INDEX.HTML") == Language.HTML

    def test_unknown_extension(self):
        """Test that unknown extensions yield no language."""
        assert get_language_for_file("README.md") is None
        assert get_strategy_for_file("README.md") == ExtractionStrategy.NONE

    def test_strategies(self):
        """Test the strategy chosen for each language family."""
        assert get_strategy_for_file("a.ts") == ExtractionStrategy.SYNTAX_TREE
        assert get_strategy_for_file("a.py") == ExtractionStrategy.HEURISTIC
        assert get_strategy_for_file("a.go") == ExtractionStrategy.HEURISTIC
        assert get_strategy_for_file("a.rs") == ExtractionStrategy.HEURISTIC
        assert get_strategy_for_file("a.htm") == ExtractionStrategy.MARKUP


class TestCategories:
    """Tests for the category enumeration."""

    def test_enumeration_order(self):
        """Test the fixed lookup order of categories."""
        assert [c.value for c in SymbolCategory] == [
            "functions",
            "types",
            "variables",
            "exports",
            "routes",
            "pages",
        ]

    def test_name_categories_exclude_routes_and_pages(self):
        """Test that routes and pages are not plain name categories."""
        assert SymbolCategory.ROUTES not in NAME_CATEGORIES
        assert SymbolCategory.PAGES not in NAME_CATEGORIES


class TestDataTypes:
    """Tests for small value types."""

    def test_route_key_and_mount(self):
        """Test the composite route key."""
        route = RouteEntry(method="MOUNT", path="/api/legacy", file="server.js", line=4)
        assert route.key == "MOUNT /api/legacy"
        assert route.is_mount is True

    def test_scanned_file_to_dict(self):
        """Test the index document layout of a scanned file."""
        scanned = ScannedFile(
            path="src/a.js", language="javascript", line_count=12, size=240, modified="2024-01-02"
        )
        assert scanned.to_dict() == {
            "path": "src/a.js",
            "lang": "javascript",
            "lines": 12,
            "size": 240,
            "modified": "2024-01-02",
        }

    def test_extraction_result_collects_in_order(self):
        """Test that sightings keep their emission order."""
        result = ExtractionResult()
        result.add(SymbolCategory.FUNCTIONS, "b", 2)
        result.add(SymbolCategory.FUNCTIONS, "a", 1)
        result.add_route("GET", "/api/x", "r.js", 3)

        assert result.names(SymbolCategory.FUNCTIONS) == ["b", "a"]
        assert [r.path for r in result.routes] == ["/api/x"]

    def test_empty_check_result_has_no_issues(self):
        """Test that an empty check result reports nothing."""
        assert CheckResult().has_issues is False
