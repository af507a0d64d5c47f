"""Tests for Diff value objects."""

from __future__ import annotations

import pytest

from lookout.domain.diff.value_objects import ChangedFile, DiffStats
from lookout.shared.types import ChangeStatus, FilePath


def test_changed_file_defaults() -> None:
    file = ChangedFile(path=FilePath("src/a.ts"))
    assert file.patch == ""
    assert file.status is ChangeStatus.MODIFIED
    assert file.total_changes == 0


def test_changed_file_total_changes() -> None:
    file = ChangedFile(path=FilePath("src/a.ts"), additions=3, deletions=4)
    assert file.total_changes == 7


def test_changed_file_rejects_negative_counts() -> None:
    with pytest.raises(ValueError, match="non-negative"):
        ChangedFile(path=FilePath("src/a.ts"), additions=-1)


def test_changed_file_is_frozen() -> None:
    file = ChangedFile(path=FilePath("src/a.ts"))
    with pytest.raises(AttributeError):
        file.additions = 2  # type: ignore[misc]


def test_diff_stats_total_changes() -> None:
    stats = DiffStats(
        total_files=2,
        reviewable_files=2,
        context_only_files=0,
        ignored_files=0,
        total_additions=5,
        total_deletions=6,
    )
    assert stats.total_changes == 11
