"""Symbol extraction from syntax trees for JavaScript and TypeScript.

Walks a tree-sitter AST to collect declarations (functions, classes,
variables, methods, TypeScript types, exports), then scans raw source lines
for the idioms the tree does not tell apart: CommonJS exports and literal
route declarations.
"""

import re
from typing import Optional

import structlog
import tree_sitter

from .core.errors import ParseError
from .parser import ASTParser, SyntaxTreeService, node_line, node_text
from .types import (
    MOUNT_METHOD,
    ExtractionResult,
    Language,
    SymbolCategory,
)

logger = structlog.get_logger(__name__)

SYNTAX_TREE_LANGUAGES = (Language.JAVASCRIPT, Language.TYPESCRIPT, Language.TSX)
TYPED_LANGUAGES = (Language.TYPESCRIPT, Language.TSX)

FUNCTION_DECLARATION_KINDS = ("function_declaration", "generator_function_declaration")
DECLARATION_KINDS = ("lexical_declaration", "variable_declaration")
FUNCTION_VALUE_KINDS = frozenset(
    {"arrow_function", "function_expression", "function", "generator_function"}
)
CLASS_KINDS = ("class_declaration", "abstract_class_declaration")
TYPE_ONLY_KINDS = ("interface_declaration", "type_alias_declaration", "enum_declaration")

_IDENTIFIER = re.compile(r"^#?[A-Za-z_$][\w$]*$")

# exports.foo = ... / module.exports.foo = ...
_MEMBER_EXPORT = re.compile(r"^(?:module\.)?exports\.([A-Za-z_$][\w$]*)\s*=(?!=)")
# module.exports = { foo, bar: baz } on a single line
_BULK_EXPORT = re.compile(r"^module\.exports\s*=\s*\{(.*)\}")
_BULK_KEY = re.compile(r"^([A-Za-z_$][\w$]*)\s*(?::|\(|$)")
_ROUTER = r"\b(?:app|\w*[Rr]outer)"
_ROUTE = re.compile(
    _ROUTER + r"\.(get|post|put|delete|patch)\s*\(\s*['\"`]([^'\"`]+)['\"`]"
)
_MOUNT = re.compile(_ROUTER + r"\.use\s*\(\s*['\"`]([^'\"`]+)['\"`]")


def split_top_level(text: str, separator: str = ",") -> list[str]:
    """Split ``text`` on ``separator`` outside brackets and string literals."""
    parts: list[str] = []
    depth = 0
    quote: Optional[str] = None
    current: list[str] = []
    for ch in text:
        if quote:
            current.append(ch)
            if ch == quote:
                quote = None
            continue
        if ch in "'\"`":
            quote = ch
        elif ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth -= 1
        elif ch == separator and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(ch)
    parts.append("".join(current))
    return parts


def is_under_prefix(path: str, prefix: str) -> bool:
    """True when ``path`` is ``prefix`` itself or one of its sub-paths."""
    prefix = prefix.rstrip("/")
    if not prefix:
        return path.startswith("/")
    return path == prefix or path.startswith(prefix + "/")


def extract_line_patterns(
    source_code: str,
    file_path: str,
    result: ExtractionResult,
    line_offset: int = 0,
    api_prefix: str = "/api",
) -> None:
    """Scan raw lines for CommonJS exports and route declarations.

    Both idioms are generic assignments/calls in the syntax tree, so they
    are matched per line instead.
    """
    for index, line in enumerate(source_code.split("\n")):
        line_num = index + 1 + line_offset

        member = _MEMBER_EXPORT.match(line)
        if member:
            result.add(SymbolCategory.EXPORTS, member.group(1), line_num)
            continue

        bulk = _BULK_EXPORT.match(line)
        if bulk:
            for part in split_top_level(bulk.group(1)):
                key = _BULK_KEY.match(part.strip())
                if key:
                    result.add(SymbolCategory.EXPORTS, key.group(1), line_num)

        route = _ROUTE.search(line)
        if route:
            result.add_route(route.group(1).upper(), route.group(2), file_path, line_num)
            continue

        mount = _MOUNT.search(line)
        if mount and is_under_prefix(mount.group(1), api_prefix):
            result.add_route(MOUNT_METHOD, mount.group(1), file_path, line_num)


class SymbolExtractor:
    """Extract declarations from JavaScript/TypeScript syntax trees.

    The parser is injected; any object implementing ``SyntaxTreeService``
    works, ``ASTParser`` (tree-sitter) is the default.
    """

    def __init__(
        self,
        parser: Optional[SyntaxTreeService] = None,
        api_prefix: str = "/api",
    ) -> None:
        """Initialize the symbol extractor.

        Args:
            parser: Syntax-tree service (creates an ASTParser if not provided)
            api_prefix: Prefix a mount path must start with to be recorded
        """
        self._parser = parser or ASTParser()
        self._api_prefix = api_prefix

    def supports_language(self, language: Language) -> bool:
        return language in SYNTAX_TREE_LANGUAGES and self._parser.supports_language(language)

    def extract_from_string(
        self,
        source_code: str,
        file_path: str,
        language: Language,
        line_offset: int = 0,
        strict: bool = False,
    ) -> ExtractionResult:
        """Extract all symbols from a source string.

        Args:
            source_code: The source code to extract from
            file_path: Relative path recorded on route entries
            language: JAVASCRIPT, TYPESCRIPT or TSX
            line_offset: Added to every reported line (embedded scripts)
            strict: Treat a tree containing syntax errors as a failure

        Returns:
            ExtractionResult with every sighting in rule order

        Raises:
            ParseError: If no tree could be produced, the tree has errors
                while ``strict`` is set, or walking the tree failed
        """
        if language not in SYNTAX_TREE_LANGUAGES:
            raise ParseError(file_path, f"no syntax-tree support for {language.value}")

        tree = self._parser.parse_string(source_code, language)
        if tree is None:
            raise ParseError(file_path, f"no syntax tree for {language.value}")
        if strict and tree.root_node.has_error:
            raise ParseError(file_path, "syntax errors in source")

        result = ExtractionResult()
        source_bytes = source_code.encode("utf-8")
        try:
            self._extract_tree(
                tree.root_node,
                source_bytes,
                language in TYPED_LANGUAGES,
                result,
                line_offset,
            )
        except Exception as e:
            raise ParseError(file_path, str(e)) from e

        extract_line_patterns(source_code, file_path, result, line_offset, self._api_prefix)

        logger.debug(
            "syntax_tree_extraction_complete",
            file_path=file_path,
            language=language.value,
            symbol_count=len(result.symbols),
            route_count=len(result.routes),
        )
        return result

    def _extract_tree(
        self,
        root: tree_sitter.Node,
        source_bytes: bytes,
        typed: bool,
        result: ExtractionResult,
        line_offset: int,
    ) -> None:
        find = self._parser.find_nodes_by_type

        def record(category: SymbolCategory, name_node: Optional[tree_sitter.Node]) -> None:
            if name_node is None:
                return
            name = node_text(name_node, source_bytes)
            if _IDENTIFIER.match(name):
                result.add(category, name, node_line(name_node) + line_offset)

        def declarators(declaration: tree_sitter.Node) -> list[tree_sitter.Node]:
            return [c for c in declaration.named_children if c.type == "variable_declarator"]

        for kind in FUNCTION_DECLARATION_KINDS:
            for node in find(root, kind):
                record(SymbolCategory.FUNCTIONS, node.child_by_field_name("name"))

        # const/let first, then var, each declarator classified by initializer
        for kind in DECLARATION_KINDS:
            for node in find(root, kind):
                for declarator in declarators(node):
                    name_node = declarator.child_by_field_name("name")
                    if name_node is None or name_node.type != "identifier":
                        continue
                    value = declarator.child_by_field_name("value")
                    if value is not None and value.type in FUNCTION_VALUE_KINDS:
                        record(SymbolCategory.FUNCTIONS, name_node)
                    else:
                        record(SymbolCategory.VARIABLES, name_node)

        for kind in CLASS_KINDS:
            for node in find(root, kind):
                record(SymbolCategory.TYPES, node.child_by_field_name("name"))

        for node in find(root, "method_definition"):
            # object literal shorthand methods are not class members
            if node.parent is None or node.parent.type != "class_body":
                continue
            name_node = node.child_by_field_name("name")
            if name_node is not None and node_text(name_node, source_bytes) != "constructor":
                record(SymbolCategory.FUNCTIONS, name_node)

        if typed:
            for kind in TYPE_ONLY_KINDS:
                for node in find(root, kind):
                    record(SymbolCategory.TYPES, node.child_by_field_name("name"))

        for node in find(root, "export_statement"):
            declaration = node.child_by_field_name("declaration")
            if declaration is not None:
                name_node = declaration.child_by_field_name("name")
                if name_node is not None:
                    record(SymbolCategory.EXPORTS, name_node)
                elif declaration.type in DECLARATION_KINDS:
                    for declarator in declarators(declaration):
                        record(SymbolCategory.EXPORTS, declarator.child_by_field_name("name"))

            for specifier in find(node, "export_specifier"):
                record(SymbolCategory.EXPORTS, specifier.child_by_field_name("name"))

            value = node.child_by_field_name("value")
            if value is not None and value.type == "identifier":
                record(SymbolCategory.EXPORTS, value)
