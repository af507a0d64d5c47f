"""Pattern-based structure extraction for JavaScript and TypeScript sources.

This is a best-effort structural extractor, not a compiler front end. It
scans raw text with independent regular-expression passes, so it can
over-match (an import inside a string or comment is still an import) and
under-match (syntax it has no pattern for is invisible). Ranking scores and
comment validation depend on exactly these matching semantics.

Nothing in this module raises on malformed input: unrecognised text simply
produces no matches.
"""

from __future__ import annotations

import logging
import re

from dataclasses import dataclass

from lookout.domain.context.value_objects import (
    Definitions,
    ExportKind,
    ExportSymbol,
    FileStructure,
    FileTypeFlags,
    ImportEdge,
)
from lookout.shared.types import FilePath

logger = logging.getLogger(__name__)

# =============================================================================
# PATTERNS
# =============================================================================

# import foo from './m' | import { a, b } from './m' | import * as ns from './m'
# | import './m'
_STATIC_IMPORT_RE = re.compile(
    r"""import\s+(?:(?:(\w+)|{([^}]+)}|\*\s+as\s+(\w+))\s+from\s+)?['"]([^'"]+)['"]"""
)
_REQUIRE_RE = re.compile(r"""require\s*\(['"]([^'"]+)['"]\)""")
_DYNAMIC_IMPORT_RE = re.compile(r"""import\s*\(\s*['"]([^'"]+)['"]\s*\)""")

_DEFAULT_EXPORT_RE = re.compile(
    r"export\s+default\s+(function|class|const|let|var)?\s*(\w+)?"
)
_NAMED_EXPORT_RE = re.compile(
    r"export\s+(function|class|const|let|var|interface|type)\s+(\w+)"
)
_EXPORT_LIST_RE = re.compile(r"export\s*{([^}]+)}")
_ALIAS_SPLIT_RE = re.compile(r"\s+as\s+")

_FUNCTION_DEF_RE = re.compile(
    r"(?:function|const|let|var)\s+(\w+)\s*(?:=\s*)?(?:async\s*)?\("
)
_ARROW_DEF_RE = re.compile(r"(?:const|let|var)\s+(\w+)\s*=\s*(?:async\s*)?\(")
_CLASS_DEF_RE = re.compile(r"class\s+(\w+)")
_TYPE_DEF_RE = re.compile(r"(?:type|interface)\s+(\w+)")

_TEST_FILE_RE = re.compile(r"\.(test|spec)\.(ts|tsx|js|jsx)$")
_TESTS_DIR_RE = re.compile(r"/__tests__/")

_KNOWN_EXTENSION_RE = re.compile(r"\.(ts|tsx|js|jsx)$")

RESOLUTION_SUFFIXES: tuple[str, ...] = (
    ".ts",
    ".tsx",
    ".js",
    ".jsx",
    "/index.ts",
    "/index.tsx",
    "/index.js",
)

_KIND_BY_KEYWORD: dict[str, ExportKind] = {
    "function": ExportKind.FUNCTION,
    "class": ExportKind.CLASS,
    "const": ExportKind.CONST,
    "let": ExportKind.CONST,
    "var": ExportKind.CONST,
    "interface": ExportKind.INTERFACE,
    "type": ExportKind.TYPE,
}

# =============================================================================
# IMPORTS
# =============================================================================


def parse_imports(text: str) -> list[ImportEdge]:
    """Extract static, require and dynamic imports.

    The three forms are matched by independent passes, so one statement can
    produce more than one edge. Edges are returned pass by pass, each pass in
    source order.
    """
    imports: list[ImportEdge] = []

    for match in _STATIC_IMPORT_RE.finditer(text):
        default_name, named, namespace, source = match.groups()
        specifiers: tuple[str, ...] = ()
        is_default = False

        if default_name:
            specifiers = (default_name,)
            is_default = True
        elif named:
            specifiers = tuple(s.strip() for s in named.split(",") if s.strip())
        elif namespace:
            specifiers = (namespace,)

        imports.append(
            ImportEdge(source=source, specifiers=specifiers, is_default=is_default)
        )

    for match in _REQUIRE_RE.finditer(text):
        imports.append(ImportEdge(source=match.group(1), is_default=True))

    for match in _DYNAMIC_IMPORT_RE.finditer(text):
        imports.append(ImportEdge(source=match.group(1), is_dynamic=True))

    return imports


# =============================================================================
# EXPORTS
# =============================================================================


def parse_exports(text: str) -> list[ExportSymbol]:
    """Extract default exports, named declarations and export lists."""
    exports: list[ExportSymbol] = []

    for match in _DEFAULT_EXPORT_RE.finditer(text):
        keyword, name = match.groups()
        kind = _KIND_BY_KEYWORD.get(keyword or "", ExportKind.UNKNOWN)
        exports.append(
            ExportSymbol(name=name or "default", is_default=True, kind=kind)
        )

    for match in _NAMED_EXPORT_RE.finditer(text):
        keyword, name = match.groups()
        exports.append(ExportSymbol(name=name, kind=_KIND_BY_KEYWORD[keyword]))

    for match in _EXPORT_LIST_RE.finditer(text):
        for entry in match.group(1).split(","):
            name = _ALIAS_SPLIT_RE.split(entry.strip())[0]
            if name:
                exports.append(ExportSymbol(name=name))

    return exports


# =============================================================================
# RESOLUTION
# =============================================================================


def _is_internal(specifier: str) -> bool:
    return specifier.startswith(".") or specifier.startswith("/")


def _join_relative(specifier: str, current_path: str) -> str:
    """Walk ``.`` and ``..`` segments of a specifier from the file's directory."""
    parts = [p for p in current_path.split("/")[:-1] if p]
    for segment in specifier.split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if parts:
                parts.pop()
        else:
            parts.append(segment)
    return "/".join(parts)


def import_candidates(specifier: str, current_path: str) -> list[FilePath]:
    """All paths an internal import specifier could refer to, in lookup order.

    External package specifiers (not starting with ``.`` or ``/``) have no
    candidates. Root-anchored specifiers resolve from the repository root.
    """
    if not _is_internal(specifier):
        return []

    if specifier.startswith("/"):
        resolved = _join_relative(specifier, "")
    else:
        resolved = _join_relative(specifier, current_path)

    if _KNOWN_EXTENSION_RE.search(resolved):
        return [FilePath(resolved)]
    return [FilePath(resolved + suffix) for suffix in RESOLUTION_SUFFIXES]


def resolve_import_path(
    specifier: str,
    current_path: str,
    known_paths: frozenset[FilePath] | None = None,
) -> FilePath | None:
    """Resolve an import specifier to a repository path.

    Without ``known_paths`` the first candidate is returned unconfirmed, so
    ``./utils`` becomes ``utils.ts`` even if only ``utils/index.ts`` exists.
    With ``known_paths`` every candidate is tried in order and the first
    existing one wins; if none exists the import is unresolved.

    Args:
        specifier: The raw import source string.
        current_path: Path of the importing file.
        known_paths: Files known to exist in the repository snapshot.

    Returns:
        The resolved path, or None for external or unresolvable imports.
    """
    candidates = import_candidates(specifier, current_path)
    if not candidates:
        return None
    if known_paths is None:
        return candidates[0]
    return next((c for c in candidates if c in known_paths), None)


# =============================================================================
# COMPOSITION
# =============================================================================


def analyze_file_structure(
    path: FilePath,
    text: str,
    known_paths: frozenset[FilePath] | None = None,
) -> FileStructure:
    """Parse imports, exports, definitions and role hints of one file.

    Relative imports are resolved to internal dependencies.
    """
    imports = parse_imports(text)
    exports = parse_exports(text)

    dependencies: set[FilePath] = set()
    for edge in imports:
        resolved = resolve_import_path(edge.source, path, known_paths)
        if resolved is not None:
            dependencies.add(resolved)

    return FileStructure(
        path=path,
        imports=tuple(imports),
        exports=tuple(exports),
        dependencies=frozenset(dependencies),
        file_type=detect_file_type(path, text),
        definitions=extract_definitions(text),
    )


@dataclass
class PatternStructureParser:
    """Implements StructureParser with the regex passes above."""

    def parse(
        self,
        path: FilePath,
        content: str,
        known_paths: frozenset[FilePath] | None = None,
    ) -> FileStructure:
        if not isinstance(content, str):
            logger.debug("Non-text content for %s, using empty structure", path)
            return FileStructure(path=path)
        return analyze_file_structure(path, content, known_paths)

    def import_candidates(
        self, specifier: str, current_path: FilePath
    ) -> list[FilePath]:
        return import_candidates(specifier, current_path)


# =============================================================================
# FILE ROLE HINTS
# =============================================================================


def extract_definitions(text: str) -> Definitions:
    """List function, class and type names declared in a file."""
    functions = [m.group(1) for m in _FUNCTION_DEF_RE.finditer(text)]
    for match in _ARROW_DEF_RE.finditer(text):
        if match.group(1) not in functions:
            functions.append(match.group(1))

    return Definitions(
        functions=functions,
        classes=[m.group(1) for m in _CLASS_DEF_RE.finditer(text)],
        types=[m.group(1) for m in _TYPE_DEF_RE.finditer(text)],
    )


def is_test_file(path: str) -> bool:
    return bool(_TEST_FILE_RE.search(path) or _TESTS_DIR_RE.search(path))


def detect_file_type(path: str, text: str) -> FileTypeFlags:
    """Guess a file's role from its path and a few content markers."""
    is_component = path.endswith(".tsx") and bool(
        re.search(r"export\s+default\s+function", text)
        or re.search(r"export\s+function", text)
    )
    return FileTypeFlags(
        is_component=is_component,
        is_hook=bool(re.search(r"use[A-Z]\w+", text))
        and bool(re.search(r"\.tsx?$", path)),
        is_util=bool(re.search(r"/utils?/|/helpers?/", path)),
        is_config=bool(re.search(r"\.config\.(ts|js)$", path)),
        is_test=is_test_file(path),
        is_api=bool(re.search(r"/api/|/routes?/", path)),
    )
