"""Tests for registry module."""

import pytest

from symbol_sentinel.registry import META_KEY, RegistryMeta, SymbolRegistry
from symbol_sentinel.types import SymbolCategory


@pytest.fixture
def empty_registry():
    """Create an empty registry."""
    return SymbolRegistry()


@pytest.fixture
def populated_registry():
    """Create a registry with a few entries in every category."""
    registry = SymbolRegistry()
    registry.add_symbol(SymbolCategory.FUNCTIONS, "greet", "a.js", 3)
    registry.add_symbol(SymbolCategory.TYPES, "User", "models.ts", 1)
    registry.add_symbol(SymbolCategory.VARIABLES, "config", "a.js", 1)
    registry.add_symbol(SymbolCategory.EXPORTS, "greet", "a.js", 3)
    registry.add_route("GET", "/api/users/:id", "routes/users.js", 5)
    registry.add_route("MOUNT", "/api/legacy", "server.js", 10)
    registry.add_page("index.html", "public_html/index.html", "Home", ["app.js"])
    return registry


class TestAddSymbol:
    """Tests for the first-seen location contract."""

    def test_first_sighting_creates_entry(self, empty_registry):
        """Test that a new name records its location with one occurrence."""
        entry = empty_registry.add_symbol(SymbolCategory.FUNCTIONS, "greet", "a.js", 3)

        assert entry.file == "a.js"
        assert entry.line == 3
        assert entry.occurrences == 1

    def test_later_sightings_only_count(self, empty_registry):
        """Test that repeated sightings keep the first location."""
        empty_registry.add_symbol(SymbolCategory.FUNCTIONS, "greet", "a.js", 3)
        empty_registry.add_symbol(SymbolCategory.FUNCTIONS, "greet", "b.js", 9)
        entry = empty_registry.add_symbol(SymbolCategory.FUNCTIONS, "greet", "c.js", 1)

        assert (entry.file, entry.line, entry.occurrences) == ("a.js", 3, 3)

    def test_same_name_in_different_categories(self, empty_registry):
        """Test that categories are independent namespaces."""
        empty_registry.add_symbol(SymbolCategory.FUNCTIONS, "greet", "a.js", 3)
        empty_registry.add_symbol(SymbolCategory.EXPORTS, "greet", "a.js", 7)

        assert empty_registry.get(SymbolCategory.FUNCTIONS, "greet").line == 3
        assert empty_registry.get(SymbolCategory.EXPORTS, "greet").line == 7

    def test_rejects_non_name_category(self, empty_registry):
        """Test that routes and pages go through their own methods."""
        with pytest.raises(ValueError):
            empty_registry.add_symbol(SymbolCategory.ROUTES, "x", "a.js", 1)


class TestRoutesAndPages:
    """Tests for route and page tables."""

    def test_duplicate_route_counts(self, empty_registry):
        """Test that a re-declared route keeps its first location."""
        empty_registry.add_route("GET", "/api/x", "a.js", 1)
        entry = empty_registry.add_route("GET", "/api/x", "b.js", 2)

        assert entry.file == "a.js"
        assert entry.occurrences == 2
        assert list(empty_registry.routes) == ["GET /api/x"]

    def test_leaf_routes_and_mounts(self, populated_registry):
        """Test the split between leaf routes and mounts."""
        assert [r.path for r in populated_registry.leaf_routes()] == ["/api/users/:id"]
        assert [r.path for r in populated_registry.mounts()] == ["/api/legacy"]

    def test_page_collision_keeps_first(self, empty_registry):
        """Test that pages with the same base name keep the first file."""
        empty_registry.add_page("index.html", "a/index.html", "A", [])
        entry = empty_registry.add_page("index.html", "b/index.html", "B", [])

        assert entry.file == "a/index.html"
        assert entry.title == "A"
        assert entry.occurrences == 2


class TestLookup:
    """Tests for cross-category lookup."""

    def test_lookup_uses_enumeration_order(self, populated_registry):
        """Test that the first category holding the name wins."""
        category, entry = populated_registry.lookup("greet")
        assert category == SymbolCategory.FUNCTIONS
        assert entry.file == "a.js"

    def test_lookup_covers_routes_and_pages(self, populated_registry):
        """Test that route keys and page names are looked up too."""
        assert populated_registry.lookup("GET /api/users/:id")[0] == SymbolCategory.ROUTES
        assert populated_registry.lookup("index.html")[0] == SymbolCategory.PAGES

    def test_lookup_missing(self, populated_registry):
        """Test that unknown names return None."""
        assert populated_registry.lookup("missing") is None
        assert populated_registry.contains("missing") is False

    def test_all_names_is_ordered_union(self, populated_registry):
        """Test that names appear once, categories in enumeration order."""
        assert list(populated_registry.all_names()) == [
            "greet",
            "User",
            "config",
            "GET /api/users/:id",
            "MOUNT /api/legacy",
            "index.html",
        ]

    def test_meta_is_not_a_name(self, populated_registry):
        """Test that scan metadata never shows up in lookups."""
        populated_registry.meta = RegistryMeta("/p", "2024-01-01T00:00:00", 5, 2)
        assert META_KEY not in populated_registry.all_names()
        assert populated_registry.lookup(META_KEY) is None

    def test_counts(self, populated_registry, empty_registry):
        """Test entry counting."""
        assert populated_registry.count(SymbolCategory.ROUTES) == 2
        assert populated_registry.symbol_count() == 7
        assert empty_registry.is_empty() is True


class TestSerialization:
    """Tests for the persisted document layout."""

    def test_to_dict_layout(self, populated_registry):
        """Test the keys and entry shapes of the document."""
        populated_registry.meta = RegistryMeta("/p", "2024-01-01T00:00:00", 5, 2)
        data = populated_registry.to_dict()

        assert list(data) == [
            META_KEY,
            "functions",
            "types",
            "variables",
            "exports",
            "routes",
            "pages",
        ]
        assert data["functions"]["greet"] == {"file": "a.js", "line": 3, "occurrences": 1}
        assert data["routes"]["GET /api/users/:id"]["method"] == "GET"
        assert data["pages"]["index.html"]["scripts"] == ["app.js"]

    def test_from_dict_restores_entries(self, populated_registry):
        """Test that a serialized registry rebuilds identically."""
        populated_registry.add_symbol(SymbolCategory.FUNCTIONS, "greet", "b.js", 9)
        restored = SymbolRegistry.from_dict(populated_registry.to_dict())

        assert restored.to_dict() == populated_registry.to_dict()
        assert restored.get(SymbolCategory.FUNCTIONS, "greet").occurrences == 2
