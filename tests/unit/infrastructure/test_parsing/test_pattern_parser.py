"""Tests for the pattern-based structure parser."""

from __future__ import annotations

import pytest

from lookout.domain.context.value_objects import ExportKind
from lookout.infrastructure.parsing.pattern_parser import (
    PatternStructureParser,
    analyze_file_structure,
    detect_file_type,
    extract_definitions,
    import_candidates,
    is_test_file,
    parse_exports,
    parse_imports,
    resolve_import_path,
)
from lookout.shared.types import FilePath

# =============================================================================
# Imports
# =============================================================================


def test_parse_default_import() -> None:
    (edge,) = parse_imports("import React from 'react';")
    assert edge.source == "react"
    assert edge.specifiers == ("React",)
    assert edge.is_default


def test_parse_named_import() -> None:
    (edge,) = parse_imports('import { a, b as c } from "./utils";')
    assert edge.source == "./utils"
    assert edge.specifiers == ("a", "b as c")
    assert not edge.is_default


def test_parse_namespace_import() -> None:
    (edge,) = parse_imports("import * as path from 'path';")
    assert edge.specifiers == ("path",)


def test_parse_side_effect_import() -> None:
    (edge,) = parse_imports("import './polyfills';")
    assert edge.source == "./polyfills"
    assert edge.specifiers == ()


def test_parse_require_and_dynamic_import() -> None:
    text = "const fs = require('fs');\nconst m = await import('./lazy');"

    edges = parse_imports(text)

    assert [(e.source, e.is_default, e.is_dynamic) for e in edges] == [
        ("fs", True, False),
        ("./lazy", False, True),
    ]


def test_static_imports_precede_require_matches() -> None:
    text = "const a = require('./a');\nimport b from './b';"

    assert [e.source for e in parse_imports(text)] == ["./b", "./a"]


def test_import_inside_string_still_matches() -> None:
    text = "const doc = \"import x from './fake'\";"
    assert [e.source for e in parse_imports(text)] == ["./fake"]


def test_parse_imports_of_plain_text_is_empty() -> None:
    assert parse_imports("just some words\nwith no code") == []


# =============================================================================
# Exports
# =============================================================================


def test_parse_default_export_function() -> None:
    (symbol,) = parse_exports("export default function Page() {}")
    assert symbol.name == "Page"
    assert symbol.is_default
    assert symbol.kind is ExportKind.FUNCTION


def test_parse_anonymous_default_export() -> None:
    (symbol,) = parse_exports("export default {\n  a: 1 };")
    assert symbol.name == "default"
    assert symbol.kind is ExportKind.UNKNOWN


def test_parse_named_exports() -> None:
    text = "\n".join(
        [
            "export const LIMIT = 3;",
            "export interface Props {}",
            "export type Id = string;",
            "export class Store {}",
        ]
    )

    exports = parse_exports(text)

    assert [(s.name, s.kind) for s in exports] == [
        ("LIMIT", ExportKind.CONST),
        ("Props", ExportKind.INTERFACE),
        ("Id", ExportKind.TYPE),
        ("Store", ExportKind.CLASS),
    ]


def test_parse_export_list_strips_aliases() -> None:
    exports = parse_exports("export { a, b as c, };")
    assert [s.name for s in exports] == ["a", "b"]


# =============================================================================
# Resolution
# =============================================================================


def test_candidates_for_relative_import() -> None:
    assert import_candidates("./utils", "src/app.ts") == [
        "src/utils.ts",
        "src/utils.tsx",
        "src/utils.js",
        "src/utils.jsx",
        "src/utils/index.ts",
        "src/utils/index.tsx",
        "src/utils/index.js",
    ]


def test_candidates_walk_parent_segments() -> None:
    assert import_candidates("../lib/db.ts", "src/api/users.ts") == ["src/lib/db.ts"]


def test_candidates_for_root_anchored_import() -> None:
    assert import_candidates("/shared/types", "src/deep/file.ts")[0] == (
        "shared/types.ts"
    )


def test_candidates_for_package_import_are_empty() -> None:
    assert import_candidates("react", "src/app.ts") == []
    assert import_candidates("@scope/pkg", "src/app.ts") == []


def test_resolve_without_known_paths_takes_first_candidate() -> None:
    assert resolve_import_path("./utils", "src/app.ts") == "src/utils.ts"


def test_resolve_with_known_paths_tries_candidates_in_order() -> None:
    known = frozenset({FilePath("src/utils/index.ts")})
    assert resolve_import_path("./utils", "src/app.ts", known) == "src/utils/index.ts"


def test_resolve_with_known_paths_returns_none_when_missing() -> None:
    assert resolve_import_path("./gone", "src/app.ts", frozenset()) is None


def test_resolve_package_import_is_none() -> None:
    assert resolve_import_path("lodash", "src/app.ts") is None


# =============================================================================
# Composition
# =============================================================================


def test_analyze_file_structure_collects_internal_dependencies() -> None:
    text = "\n".join(
        [
            "import React from 'react';",
            "import { fmt } from './format';",
            "import db from '../db';",
            "export function App() {}",
        ]
    )

    structure = analyze_file_structure(FilePath("src/ui/App.tsx"), text)

    assert structure.dependencies == frozenset({"src/ui/format.ts", "src/db.ts"})
    assert structure.import_sources == ["react", "./format", "../db"]
    assert structure.export_names == ["App"]
    assert structure.file_type.roles == ["component"]
    assert structure.definitions.functions == ["App"]


def test_parser_handles_garbage_without_raising() -> None:
    parser = PatternStructureParser()

    structure = parser.parse(FilePath("src/x.ts"), "\x00\x01}{ import from '")

    assert structure.dependencies == frozenset()


def test_parser_exposes_import_candidates() -> None:
    parser = PatternStructureParser()
    assert parser.import_candidates("./a", FilePath("b.ts"))[0] == "a.ts"


# =============================================================================
# Role hints
# =============================================================================


def test_extract_definitions() -> None:
    text = "\n".join(
        [
            "function load() {}",
            "const save = async (x) => x;",
            "class Repo {}",
            "interface Row {}",
        ]
    )

    defs = extract_definitions(text)

    assert defs.functions == ["load", "save"]
    assert defs.classes == ["Repo"]
    assert defs.types == ["Row"]


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("src/a.test.ts", True),
        ("src/a.spec.tsx", True),
        ("src/__tests__/a.ts", True),
        ("src/a.ts", False),
    ],
)
def test_is_test_file(path: str, expected: bool) -> None:
    assert is_test_file(path) is expected


def test_detect_file_type_component_and_hook() -> None:
    flags = detect_file_type(
        "src/components/useThing.tsx",
        "export default function Thing() { useState(); }",
    )
    assert flags.is_component
    assert flags.is_hook
    assert not flags.is_test


def test_detect_file_type_util_and_api() -> None:
    assert detect_file_type("src/utils/date.ts", "").is_util
    assert detect_file_type("src/api/users.ts", "").is_api
    assert detect_file_type("vite.config.ts", "").is_config
