"""Tests for project scans."""

import pytest

from symbol_sentinel.indexing.indexer import ProjectIndexer, apply_extraction, scan_project
from symbol_sentinel.registry import META_KEY, SymbolRegistry
from symbol_sentinel.types import ExtractionResult, FileStatus, Language, SymbolCategory


@pytest.fixture
def indexer(settings, ast_parser):
    """Create an indexer with default settings."""
    return ProjectIndexer(settings, parser=ast_parser)


class TestScanScenarios:
    """End-to-end scans of small project trees."""

    def test_first_occurrence_wins(self, indexer, greet_project):
        """Test the location and count of a name declared in two files."""
        result = indexer.scan(greet_project)
        greet = result.registry.get(SymbolCategory.FUNCTIONS, "greet")

        assert (greet.file, greet.line, greet.occurrences) == ("a.js", 3, 2)

    def test_scan_is_deterministic(self, indexer, make_tree):
        """Test that two scans of an unchanged tree agree."""
        root = make_tree(
            {
                "server.js": "const app = express();\napp.get('/api/items', list);\n",
                "lib/util.ts": "export function clamp(n: number) { return n }\n",
                "tools/build.py": "def main():\n    pass\n",
                "index.html": "<title>Home</title>\n<script>function go() {}</script>\n",
            }
        )

        first = indexer.scan(root).registry.to_dict()
        second = indexer.scan(root).registry.to_dict()
        first.pop(META_KEY)
        second.pop(META_KEY)

        assert first == second

    def test_excluded_directories_contribute_nothing(self, indexer, make_tree):
        """Test that skipped trees add neither files nor symbols."""
        root = make_tree(
            {
                "src/app.js": "function live() {}\n",
                "node_modules/pkg/index.js": "function vendored() {}\n",
                "backup/app.js": "function stale() {}\n",
            }
        )

        result = indexer.scan(root)

        assert [f.path for f in result.files] == ["src/app.js"]
        assert list(result.registry.all_names()) == ["live"]

    def test_files_are_recorded_with_metadata(self, indexer, make_tree):
        """Test the per-file record."""
        root = make_tree({"src/main.go": "package main\n\nfunc main() {\n}\n"})

        scanned = indexer.scan(root).files[0]

        assert scanned.path == "src/main.go"
        assert scanned.language == "go"
        assert scanned.line_count == 4
        assert len(scanned.modified) == 10

    def test_meta(self, indexer, greet_project):
        """Test the scan metadata."""
        registry = indexer.scan(greet_project).registry

        assert registry.meta.project == str(greet_project.resolve())
        assert registry.meta.file_count == 2
        assert registry.meta.elapsed_ms >= 0

    def test_routes_pages_and_heuristics_are_folded(self, indexer, make_tree):
        """Test that every strategy ends up in the registry."""
        root = make_tree(
            {
                "routes/users.js": "router.get('/api/users/:id', show);\n",
                "index.html": "<title>Home</title>\n",
                "svc/worker.py": "class Worker:\n    def run(self):\n        pass\n",
            }
        )

        registry = indexer.scan(root).registry

        assert "GET /api/users/:id" in registry.routes
        assert registry.pages["index.html"].title == "Home"
        assert registry.get(SymbolCategory.TYPES, "Worker").file == "svc/worker.py"
        assert registry.get(SymbolCategory.FUNCTIONS, "run").line == 2

    def test_scan_limits_override_settings(self, indexer, make_tree):
        """Test per-call depth and file limits."""
        root = make_tree({"a.js": "", "b.js": "", "deep/c.js": ""})

        assert len(indexer.scan(root, max_files=1).files) == 1
        assert [f.path for f in indexer.scan(root, max_depth=0).files] == ["a.js", "b.js"]


class TestFailures:
    """Tests for per-file failure handling."""

    def test_extraction_failure_is_reported(self, settings, make_tree):
        """Test that a failing file is reported and contributes nothing."""

        class BrokenIndexer(ProjectIndexer):
            def extract(self, content, rel_path, language):
                if rel_path == "bad.js":
                    raise RuntimeError("boom")
                return super().extract(content, rel_path, language)

        root = make_tree({"bad.js": "function lost() {}\n", "good.js": "function kept() {}\n"})

        result = BrokenIndexer(settings).scan(root)

        assert [f.path for f in result.files] == ["bad.js", "good.js"]
        assert [(r.path, r.status) for r in result.failed()] == [("bad.js", FileStatus.FAILED)]
        assert list(result.registry.all_names()) == ["kept"]

    def test_missing_root_yields_empty_scan(self, indexer, tmp_path):
        """Test that scanning a missing directory does not raise."""
        result = indexer.scan(tmp_path / "missing")

        assert result.files == []
        assert result.registry.is_empty()


def test_apply_extraction_preserves_sighting_order():
    registry = SymbolRegistry()
    result = ExtractionResult()
    result.add(SymbolCategory.FUNCTIONS, "f", 9)
    result.add(SymbolCategory.FUNCTIONS, "f", 2)

    apply_extraction(registry, result, "x.js")
    entry = registry.get(SymbolCategory.FUNCTIONS, "f")

    assert (entry.line, entry.occurrences) == (9, 2)


def test_scan_project_uses_given_settings(settings, greet_project):
    result = scan_project(greet_project, settings=settings)
    assert result.registry.get(SymbolCategory.FUNCTIONS, "greet").occurrences == 2



def test_scan_project_falls_back_on_bad_environment(monkeypatch, greet_project):
    monkeypatch.setenv("SENTINEL_MAX_DEPTH", "nope")

    result = scan_project(greet_project)

    assert result.registry.get(SymbolCategory.FUNCTIONS, "greet").occurrences == 2

def test_markup_dispatch_yields_page(indexer):
    assert len(indexer.extract("whatever", "x.html", Language.HTML).pages) == 1
