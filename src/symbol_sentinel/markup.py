"""Markup (HTML) extraction.

A page contributes one entry to the pages category (title plus local
script references). Inline script blocks are handed to the JavaScript
syntax-tree extractor with the block's line offset, falling back to the
JavaScript line heuristics when the block does not parse.
"""

import posixpath
import re
from typing import Optional

import structlog

from .core.errors import ParseError
from .extractor import SymbolExtractor
from .heuristics import extract_heuristic
from .types import ExtractionResult, Language, PageEntry

logger = structlog.get_logger(__name__)

_TITLE = re.compile(r"<title[^>]*>([^<]+)</title>", re.IGNORECASE)
_SCRIPT_SRC = re.compile(r"""<script[^>]+src\s*=\s*["']([^"']+)["'][^>]*>""", re.IGNORECASE)
_INLINE_SCRIPT = re.compile(
    r"<script(?![^>]*\bsrc\b)[^>]*>([\s\S]*?)</script>", re.IGNORECASE
)
# scheme-qualified ("https:", "data:") or protocol-relative ("//cdn...")
_EXTERNAL_URL = re.compile(r"^(?:[A-Za-z][A-Za-z0-9+.-]*:|//)")


def extract_title(content: str) -> Optional[str]:
    match = _TITLE.search(content)
    if not match:
        return None
    return match.group(1).strip() or None


def extract_script_sources(content: str) -> list[str]:
    """Local script references, in document order."""
    return [
        src
        for src in (m.group(1).strip() for m in _SCRIPT_SRC.finditer(content))
        if src and not _EXTERNAL_URL.match(src)
    ]


class MarkupExtractor:
    """Extract page info and embedded-script symbols from HTML files."""

    def __init__(self, symbol_extractor: Optional[SymbolExtractor] = None) -> None:
        self._symbol_extractor = symbol_extractor or SymbolExtractor()

    def extract_from_string(self, content: str, file_path: str) -> ExtractionResult:
        """Extract the page entry and inline-script symbols.

        Args:
            content: The markup document
            file_path: Relative path of the document

        Returns:
            ExtractionResult with one page entry plus script symbols
        """
        result = ExtractionResult()

        for match in _INLINE_SCRIPT.finditer(content):
            script = match.group(1)
            if not script.strip():
                continue
            # Lines before the script body; row 0 of the body is on line offset + 1
            line_offset = content.count("\n", 0, match.start(1))
            result.extend(self._extract_script(script, file_path, line_offset))

        name = posixpath.basename(file_path)
        result.pages.append(
            PageEntry(
                name=name,
                file=file_path,
                title=extract_title(content) or name,
                scripts=extract_script_sources(content),
            )
        )
        return result

    def _extract_script(
        self,
        script: str,
        file_path: str,
        line_offset: int,
    ) -> ExtractionResult:
        try:
            return self._symbol_extractor.extract_from_string(
                script,
                file_path,
                Language.JAVASCRIPT,
                line_offset=line_offset,
                strict=True,
            )
        except ParseError as e:
            logger.debug(
                "inline_script_fallback",
                file_path=file_path,
                line_offset=line_offset,
                reason=e.message,
            )
            return extract_heuristic(script, Language.JAVASCRIPT, line_offset)
