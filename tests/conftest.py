"""pytest fixtures for symbol-sentinel tests."""

import os
from pathlib import Path

import pytest
import structlog

from symbol_sentinel.config import default_settings, get_settings
from symbol_sentinel.parser import ASTParser


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Drop SENTINEL_* variables, cached settings and logging config around every test."""
    for key in list(os.environ):
        if key.startswith("SENTINEL_"):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    # The CLI binds structlog to the (captured) stderr of the test that ran it
    structlog.reset_defaults()


@pytest.fixture
def settings():
    """Provide default settings without touching the environment."""
    return default_settings()


@pytest.fixture(scope="session")
def ast_parser():
    """Share one parser; grammar loading is the slow part."""
    return ASTParser()


@pytest.fixture
def make_tree(tmp_path: Path):
    """Write a ``{relative_path: content}`` mapping under ``tmp_path``."""

    def _make(files: dict[str, str]) -> Path:
        for rel_path, content in files.items():
            target = tmp_path / rel_path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        return tmp_path

    return _make


@pytest.fixture
def greet_project(make_tree):
    """Two files declaring ``greet``: line 3 of the first, line 9 of the second."""
    return make_tree(
        {
            "a.js": "// first\n\nfunction greet(name) { return name }\n",
            "b.js": "\n" * 8 + "function greet(x) { return x }\n",
        }
    )
