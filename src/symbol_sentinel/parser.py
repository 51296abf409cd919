"""Tree-sitter binding for the syntax-tree extractor.

Only the narrow surface the extractor needs lives here: parse a source
string, enumerate descendants of a given kind, and read a node's text and
line. JavaScript, TypeScript and TSX grammars are bound.
"""

from typing import Callable, Iterator, Optional, Protocol

import structlog
import tree_sitter
import tree_sitter_javascript
import tree_sitter_typescript

from .types import Language

logger = structlog.get_logger(__name__)

GRAMMAR_LOADERS: dict[Language, Callable[[], object]] = {
    Language.JAVASCRIPT: tree_sitter_javascript.language,
    Language.TYPESCRIPT: tree_sitter_typescript.language_typescript,
    Language.TSX: tree_sitter_typescript.language_tsx,
}

DEFAULT_LANGUAGES = ("javascript", "typescript", "tsx")


class SyntaxTreeService(Protocol):
    """Parsing capability consumed by ``SymbolExtractor``."""

    def parse_string(
        self, source_code: str, language: Language
    ) -> Optional[tree_sitter.Tree]: ...

    def supports_language(self, language: Language) -> bool: ...

    def find_nodes_by_type(
        self, node: tree_sitter.Node, node_type: str
    ) -> list[tree_sitter.Node]: ...


def load_parser(language: Language) -> Optional[tree_sitter.Parser]:
    """Build a parser for ``language``, or None when its grammar is unavailable."""
    loader = GRAMMAR_LOADERS.get(language)
    if loader is None:
        logger.warning("no_grammar_for_language", language=language.value)
        return None

    try:
        return tree_sitter.Parser(tree_sitter.Language(loader()))
    except Exception as e:
        logger.warning("grammar_load_failed", language=language.value, error=str(e))
        return None


class ASTParser:
    """Holds one tree-sitter parser per bound language.

    Grammars that fail to load are logged and left out, so files in those
    languages yield no syntax tree.
    """

    def __init__(self, languages: Optional[list[str]] = None) -> None:
        self._parsers: dict[Language, tree_sitter.Parser] = {}

        for name in languages or DEFAULT_LANGUAGES:
            try:
                language = Language(name.lower())
            except ValueError:
                logger.warning("unsupported_language", language=name)
                continue
            parser = load_parser(language)
            if parser is not None:
                self._parsers[language] = parser

        logger.debug(
            "parsers_ready", languages=sorted(lang.value for lang in self._parsers)
        )

    @property
    def languages(self) -> set[Language]:
        """Languages with a loaded grammar."""
        return set(self._parsers)

    def supports_language(self, language: Language) -> bool:
        return language in self._parsers

    def parse_string(
        self,
        source_code: str,
        language: Language,
    ) -> Optional[tree_sitter.Tree]:
        """Parse ``source_code`` with the grammar bound to ``language``.

        Returns:
            The syntax tree, or None when the language has no parser or
            tree-sitter raised. Trees containing error nodes are returned
            as-is; callers decide how strict to be.
        """
        parser = self._parsers.get(language)
        if parser is None:
            logger.debug("parser_not_found", language=language.value)
            return None

        try:
            return parser.parse(source_code.encode("utf-8"))
        except Exception as e:
            logger.warning("parse_failed", language=language.value, error=str(e))
            return None

    def walk_tree(self, node: tree_sitter.Node) -> Iterator[tree_sitter.Node]:
        """Yield ``node`` and every descendant, depth-first in source order.

        Iterative, so deeply nested sources do not hit the recursion limit.
        """
        stack = [node]
        while stack:
            current = stack.pop()
            yield current
            # reversed so the leftmost child is visited first
            stack.extend(reversed(current.children))

    def find_nodes_by_type(
        self,
        node: tree_sitter.Node,
        node_type: str,
    ) -> list[tree_sitter.Node]:
        """All nodes of kind ``node_type`` under ``node``, including ``node`` itself."""
        return [n for n in self.walk_tree(node) if n.type == node_type]


def node_text(node: tree_sitter.Node, source_bytes: bytes) -> str:
    """Source text covered by ``node``."""
    return source_bytes[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def node_line(node: tree_sitter.Node) -> int:
    """1-based line of the node's first character."""
    return node.start_point[0] + 1
