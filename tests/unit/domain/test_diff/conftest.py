"""Fixtures for Diff domain tests."""

from __future__ import annotations

import pytest

from lookout.domain.diff.value_objects import ChangedFile
from lookout.shared.types import ChangeStatus, FilePath


def _make_file(path: str, additions: int = 1, deletions: int = 0) -> ChangedFile:
    return ChangedFile(path=FilePath(path), additions=additions, deletions=deletions)


@pytest.fixture
def mixed_files() -> list[ChangedFile]:
    return [
        _make_file("src/app.ts", additions=10, deletions=2),
        _make_file("package-lock.json", additions=400, deletions=300),
        _make_file("package.json", additions=1, deletions=1),
        _make_file("dist/bundle.js", additions=50),
        _make_file("src/components/Button.tsx", additions=5),
        _make_file("styles/main.css", additions=3),
        ChangedFile(
            path=FilePath("src/old.ts"),
            deletions=20,
            status=ChangeStatus.REMOVED,
        ),
    ]
