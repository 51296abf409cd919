"""Line-pattern symbol extraction for languages without a bound grammar.

Each language gets one function that looks at single lines only (no brace
or indent tracking across lines). These extractors under-extract by nature;
they exist to give Python, Go and Rust files a rough presence in the
registry, and to back up the JavaScript syntax-tree path for embedded
scripts that do not parse.
"""

import re
from typing import Callable

import structlog

from .types import ExtractionResult, Language, SymbolCategory

logger = structlog.get_logger(__name__)

HeuristicExtractor = Callable[[list[str], ExtractionResult, int], None]

_PY_FUNCTION = re.compile(r"^(?:async\s+)?def\s+(\w+)\s*\(")
_PY_CLASS = re.compile(r"^class\s+(\w+)[\s(:]")
_PY_METHOD = re.compile(r"^\s+(?:async\s+)?def\s+(\w+)\s*\(")
_PY_ASSIGN = re.compile(r"^(\w+)\s*(?::\s*[\w\[\], .|]+\s*)?=(?!=)")

_GO_FUNCTION = re.compile(r"^func\s+(?:\(\s*\w+\s+\*?[\w.\[\]]+\s*\)\s+)?(\w+)\s*[\[(]")
_GO_TYPE = re.compile(r"^type\s+(\w+)\s+(?:struct|interface)\s*\{")
_GO_VALUE = re.compile(r"^(?:const|var)\s+(\w+)\s")

_RS_VIS = r"^(?:pub(?:\([^)]*\))?\s+)?"
_RS_FUNCTION = re.compile(_RS_VIS + r"(?:const\s+)?(?:async\s+)?(?:unsafe\s+)?fn\s+(\w+)")
_RS_TYPE = re.compile(_RS_VIS + r"(?:struct|enum|trait)\s+(\w+)")
_RS_VALUE = re.compile(_RS_VIS + r"(?:const|static)\s+(?:mut\s+)?(\w+)")

_JS_FUNCTION = re.compile(r"(?:async\s+)?function\s*\*?\s+([A-Za-z_$][\w$]*)\s*\(")
_JS_ARROW = re.compile(
    r"(?:const|let|var)\s+([A-Za-z_$][\w$]*)\s*=\s*(?:async\s+)?"
    r"(?:\([^)]*\)|[A-Za-z_$][\w$]*)\s*=>"
)
_JS_CLASS = re.compile(r"class\s+([A-Z][\w$]*)")


def extract_python(lines: list[str], result: ExtractionResult, line_offset: int = 0) -> None:
    """Python: defs, classes, indented methods and ALL-CAPS module constants.

    Names with a leading underscore are private and never indexed as
    functions.
    """
    for index, line in enumerate(lines):
        line_num = index + 1 + line_offset

        func = _PY_FUNCTION.match(line)
        if func:
            if not func.group(1).startswith("_"):
                result.add(SymbolCategory.FUNCTIONS, func.group(1), line_num)
            continue

        cls = _PY_CLASS.match(line)
        if cls:
            result.add(SymbolCategory.TYPES, cls.group(1), line_num)
            continue

        method = _PY_METHOD.match(line)
        if method:
            if not method.group(1).startswith("_"):
                result.add(SymbolCategory.FUNCTIONS, method.group(1), line_num)
            continue

        assign = _PY_ASSIGN.match(line)
        if assign and assign.group(1).isupper():
            result.add(SymbolCategory.VARIABLES, assign.group(1), line_num)


def extract_go(lines: list[str], result: ExtractionResult, line_offset: int = 0) -> None:
    for index, line in enumerate(lines):
        line_num = index + 1 + line_offset

        func = _GO_FUNCTION.match(line)
        if func:
            result.add(SymbolCategory.FUNCTIONS, func.group(1), line_num)
            continue

        type_decl = _GO_TYPE.match(line)
        if type_decl:
            result.add(SymbolCategory.TYPES, type_decl.group(1), line_num)
            continue

        value = _GO_VALUE.match(line)
        if value:
            result.add(SymbolCategory.VARIABLES, value.group(1), line_num)


def extract_rust(lines: list[str], result: ExtractionResult, line_offset: int = 0) -> None:
    for index, line in enumerate(lines):
        line_num = index + 1 + line_offset

        func = _RS_FUNCTION.match(line)
        if func:
            result.add(SymbolCategory.FUNCTIONS, func.group(1), line_num)
            continue

        type_decl = _RS_TYPE.match(line)
        if type_decl:
            result.add(SymbolCategory.TYPES, type_decl.group(1), line_num)
            continue

        value = _RS_VALUE.match(line)
        if value:
            result.add(SymbolCategory.VARIABLES, value.group(1), line_num)


def extract_javascript(
    lines: list[str], result: ExtractionResult, line_offset: int = 0
) -> None:
    """Fallback for script blocks the JavaScript grammar rejects."""
    for index, line in enumerate(lines):
        line_num = index + 1 + line_offset

        func = _JS_FUNCTION.search(line)
        if func:
            result.add(SymbolCategory.FUNCTIONS, func.group(1), line_num)
            continue

        arrow = _JS_ARROW.search(line)
        if arrow:
            result.add(SymbolCategory.FUNCTIONS, arrow.group(1), line_num)
            continue

        cls = _JS_CLASS.search(line)
        if cls:
            result.add(SymbolCategory.TYPES, cls.group(1), line_num)


HEURISTIC_EXTRACTORS: dict[Language, HeuristicExtractor] = {
    Language.PYTHON: extract_python,
    Language.GO: extract_go,
    Language.RUST: extract_rust,
    Language.JAVASCRIPT: extract_javascript,
    Language.TYPESCRIPT: extract_javascript,
    Language.TSX: extract_javascript,
}


def extract_heuristic(
    source_code: str,
    language: Language,
    line_offset: int = 0,
) -> ExtractionResult:
    """Run the line-pattern extractor registered for ``language``.

    Languages without a registered extractor yield an empty result.
    """
    result = ExtractionResult()
    extractor = HEURISTIC_EXTRACTORS.get(language)
    if extractor is None:
        logger.debug("no_heuristic_extractor", language=language.value)
        return result
    extractor(source_code.split("\n"), result, line_offset)
    return result
