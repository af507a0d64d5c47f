"""Repository protocols for the Context bounded context."""

from __future__ import annotations

from typing import Protocol

from lookout.domain.context.value_objects import FileStructure
from lookout.shared.types import FilePath

# =============================================================================
# PROTOCOLS
# =============================================================================


class StructureParser(Protocol):
    """Interface for extracting import/export structure from source text."""

    def parse(
        self,
        path: FilePath,
        content: str,
        known_paths: frozenset[FilePath] | None = None,
    ) -> FileStructure:
        """Extract the structure of one file.

        Args:
            path: Repository-relative path of the file.
            content: Raw source text.
            known_paths: Files known to exist, used to confirm import
                resolution. When None, resolution is unconfirmed.

        Returns:
            The file's structure. Malformed input yields an empty structure,
            never an exception.
        """
        ...

    def import_candidates(
        self, specifier: str, current_path: FilePath
    ) -> list[FilePath]:
        """Paths an import specifier could refer to, in lookup order.

        Returns an empty list for external package imports.
        """
        ...
