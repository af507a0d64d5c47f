"""Tests for Ranking value objects."""

from __future__ import annotations

import pytest

from lookout.domain.ranking.value_objects import ScoredFile, SelectionResult
from lookout.shared.types import FilePath


def _make_scored(path: str, score: float = 1.0, distance: int = 0) -> ScoredFile:
    return ScoredFile(path=FilePath(path), score=score, distance=distance, reason="r")


def test_negative_score_rejected() -> None:
    with pytest.raises(ValueError, match="score"):
        _make_scored("a.ts", score=-0.1)


def test_negative_distance_rejected() -> None:
    with pytest.raises(ValueError, match="distance"):
        _make_scored("a.ts", distance=-1)


def test_is_changed_only_at_distance_zero() -> None:
    assert _make_scored("a.ts").is_changed
    assert not _make_scored("b.ts", distance=1).is_changed


def test_selection_paths_and_lookup() -> None:
    selection = SelectionResult(
        files=[_make_scored("a.ts", 1.0), _make_scored("b.ts", 0.5, 1)]
    )

    assert selection.paths == ["a.ts", "b.ts"]
    found = selection.get("b.ts")
    assert found is not None
    assert found.distance == 1
    assert selection.get("c.ts") is None


def test_empty_selection_defaults() -> None:
    selection = SelectionResult()
    assert selection.files == []
    assert selection.estimated_tokens == 0
