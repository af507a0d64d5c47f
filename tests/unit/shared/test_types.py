"""Tests for shared type definitions."""

from __future__ import annotations

import pytest

from lookout.shared.types import (
    ChangeStatus,
    CommitSHA,
    Complexity,
    FilePath,
    LineRange,
    ReviewCategory,
    Severity,
    TokenCount,
)

# =============================================================================
# FilePath / CommitSHA
# =============================================================================


def test_file_path_preserves_value(file_path: FilePath) -> None:
    assert str(file_path) == "src/auth/login.ts"


def test_file_path_hashable_deduplicates() -> None:
    paths = {FilePath("a.ts"), FilePath("b.ts"), FilePath("a.ts")}
    assert len(paths) == 2


def test_commit_sha_preserves_value(commit_sha: CommitSHA) -> None:
    assert str(commit_sha) == "a1b2c3d4e5f6"


# =============================================================================
# TokenCount
# =============================================================================


def test_token_count_preserves_value(token_count: TokenCount) -> None:
    assert int(token_count) == 1000


def test_token_count_addition_stays_token_count() -> None:
    total = TokenCount(500) + 500
    assert total == 1000
    assert isinstance(total, TokenCount)


def test_token_count_subtraction() -> None:
    assert TokenCount(1000) - 300 == 700


# =============================================================================
# LineRange
# =============================================================================


def test_line_range_length(line_range: LineRange) -> None:
    assert len(line_range) == 11


def test_line_range_contains(line_range: LineRange) -> None:
    assert 10 in line_range
    assert 20 in line_range
    assert 21 not in line_range


def test_line_range_rejects_inverted() -> None:
    with pytest.raises(ValueError, match="must not exceed"):
        LineRange(start=5, end=4)


# =============================================================================
# Enums
# =============================================================================


def test_severity_values() -> None:
    assert [s.value for s in Severity] == ["info", "warning", "critical"]


def test_review_categories_in_fan_out_order() -> None:
    assert list(ReviewCategory) == [
        ReviewCategory.ARCHITECTURE,
        ReviewCategory.SECURITY,
        ReviewCategory.MAINTAINABILITY,
    ]


def test_enums_compare_to_strings() -> None:
    assert Complexity.LOW == "low"
    assert ChangeStatus("renamed") is ChangeStatus.RENAMED
