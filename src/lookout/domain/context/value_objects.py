"""Value objects for the Context bounded context."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from lookout.shared.types import FilePath

# =============================================================================
# ENUMS
# =============================================================================


class ExportKind(StrEnum):
    """Kind of declaration behind an exported name."""

    FUNCTION = "function"
    CLASS = "class"
    CONST = "const"
    TYPE = "type"
    INTERFACE = "interface"
    UNKNOWN = "unknown"


# =============================================================================
# VALUE OBJECTS
# =============================================================================


@dataclass(frozen=True)
class ImportEdge:
    """One import statement as written in a source file."""

    source: str
    specifiers: tuple[str, ...] = ()
    is_default: bool = False
    is_dynamic: bool = False


@dataclass(frozen=True)
class ExportSymbol:
    """A name a source file makes available to others."""

    name: str
    is_default: bool = False
    kind: ExportKind = ExportKind.UNKNOWN


@dataclass(frozen=True)
class Definitions:
    """Top-level definition names found in a file."""

    functions: list[str] = field(default_factory=list[str])
    classes: list[str] = field(default_factory=list[str])
    types: list[str] = field(default_factory=list[str])

    @property
    def names(self) -> list[str]:
        return [*self.functions, *self.classes, *self.types]


@dataclass(frozen=True)
class FileTypeFlags:
    """Role hints for a file, derived from its path and content."""

    is_component: bool = False
    is_hook: bool = False
    is_util: bool = False
    is_config: bool = False
    is_test: bool = False
    is_api: bool = False

    @property
    def roles(self) -> list[str]:
        """Names of the set flags, e.g. ``["component", "hook"]``."""
        flags = {
            "component": self.is_component,
            "hook": self.is_hook,
            "util": self.is_util,
            "config": self.is_config,
            "test": self.is_test,
            "api": self.is_api,
        }
        return [role for role, is_set in flags.items() if is_set]


@dataclass(frozen=True)
class FileStructure:
    """Imports, exports and resolved internal dependencies of one file.

    ``file_type`` and ``definitions`` are descriptive only; ranking reads
    the dependency edges.
    """

    path: FilePath
    imports: tuple[ImportEdge, ...] = ()
    exports: tuple[ExportSymbol, ...] = ()
    dependencies: frozenset[FilePath] = field(default_factory=frozenset[FilePath])
    file_type: FileTypeFlags = field(default_factory=FileTypeFlags)
    definitions: Definitions = field(default_factory=Definitions, hash=False)

    @property
    def import_sources(self) -> list[str]:
        return [edge.source for edge in self.imports]

    @property
    def export_names(self) -> list[str]:
        return [symbol.name for symbol in self.exports]

    def depends_on(self, path: FilePath) -> bool:
        return path in self.dependencies
