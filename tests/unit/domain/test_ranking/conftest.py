"""Shared fixtures for Ranking domain tests."""

from __future__ import annotations

import pytest

from lookout.domain.context.value_objects import FileStructure
from lookout.domain.diff.value_objects import ChangedFile
from lookout.shared.types import FilePath


def _structure(path: str, *deps: str) -> FileStructure:
    return FileStructure(
        path=FilePath(path), dependencies=frozenset(FilePath(d) for d in deps)
    )


@pytest.fixture
def chain_structures() -> dict[FilePath, FileStructure]:
    """app -> format -> core -> deep -> deeper, plus home importing app."""
    structures = [
        _structure("src/app.ts", "src/utils/format.ts"),
        _structure("src/utils/format.ts", "src/lib/core.ts"),
        _structure("src/lib/core.ts", "src/lib/deep.ts"),
        _structure("src/lib/deep.ts", "src/lib/deeper.ts"),
        _structure("src/lib/deeper.ts"),
        _structure("src/pages/home.ts", "src/app.ts"),
    ]
    return {s.path: s for s in structures}


@pytest.fixture
def changed_app() -> list[ChangedFile]:
    return [ChangedFile(path=FilePath("src/app.ts"), additions=5, deletions=1)]
