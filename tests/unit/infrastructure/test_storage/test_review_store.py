"""Tests for the in-memory and file-backed review stores."""

from __future__ import annotations

import json

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from lookout.domain.review.entities import (
    CompletedUpdate,
    FailedUpdate,
    ReviewStatus,
    StartedUpdate,
)
from lookout.domain.review.value_objects import CategoryComment, ReviewResult
from lookout.infrastructure.storage.review_store import (
    FileReviewStore,
    InMemoryReviewStore,
)
from lookout.shared.exceptions import InvalidTransitionError, StoreError
from lookout.shared.types import FilePath, ReviewCategory, Severity

_T0 = datetime(2026, 3, 1, tzinfo=UTC)


def _make_clock() -> Callable[[], datetime]:
    ticks = iter(range(1000))
    return lambda: _T0 + timedelta(seconds=next(ticks))


def _make_comment(line: int = 10) -> CategoryComment:
    return CategoryComment(
        file_path=FilePath("src/a.ts"),
        line_start=line,
        line_end=line,
        severity=Severity.WARNING,
        message="Add a null check before reading the session",
        category=ReviewCategory.SECURITY,
    )


def _completed() -> CompletedUpdate:
    return CompletedUpdate(
        payload=ReviewResult(categories={}, summary="Analyzed 1 files, found 1 issues"),
        comment_id=555,
        token_count=300,
        files_analyzed=1,
    )


@pytest.fixture(params=["memory", "file"])
def store(
    request: pytest.FixtureRequest, tmp_path: Path
) -> InMemoryReviewStore | FileReviewStore:
    if request.param == "memory":
        return InMemoryReviewStore(clock=_make_clock())
    return FileReviewStore(storage_dir=tmp_path / "store", clock=_make_clock())


# =============================================================================
# Shared behaviour
# =============================================================================


def test_create_and_get(store: InMemoryReviewStore | FileReviewStore) -> None:
    record = store.create("acme/web#7")

    fetched = store.get(record.id)

    assert fetched == record
    assert fetched is not None
    assert fetched.status is ReviewStatus.PENDING
    assert store.get("nope") is None


def test_latest_for_returns_newest(
    store: InMemoryReviewStore | FileReviewStore,
) -> None:
    store.create("acme/web#7")
    newest = store.create("acme/web#7")
    store.create("acme/web#8")

    latest = store.latest_for("acme/web#7")

    assert latest is not None
    assert latest.id == newest.id
    assert store.latest_for("acme/web#9") is None


def test_full_lifecycle(store: InMemoryReviewStore | FileReviewStore) -> None:
    record = store.create("acme/web#7")

    running = store.update_status(record.id, StartedUpdate())
    completed = store.update_status(record.id, _completed())

    assert running.status is ReviewStatus.RUNNING
    assert completed.status is ReviewStatus.COMPLETED
    assert completed.started_at is not None
    assert completed.completed_at is not None
    assert completed.started_at < completed.completed_at
    assert store.get(record.id) == completed


def test_invalid_transition_leaves_record_unchanged(
    store: InMemoryReviewStore | FileReviewStore,
) -> None:
    record = store.create("acme/web#7")

    with pytest.raises(InvalidTransitionError):
        store.update_status(record.id, _completed())

    assert store.get(record.id) == record


def test_failed_record_can_be_retried(
    store: InMemoryReviewStore | FileReviewStore,
) -> None:
    record = store.create("acme/web#7")
    store.update_status(record.id, StartedUpdate())
    store.update_status(record.id, FailedUpdate("timeout"))

    retried = store.update_status(record.id, StartedUpdate())

    assert retried.status is ReviewStatus.RUNNING
    assert retried.error_message is None


def test_update_missing_record(store: InMemoryReviewStore | FileReviewStore) -> None:
    with pytest.raises(StoreError, match="does not exist"):
        store.update_status("missing", StartedUpdate())


def test_save_comments_replaces_earlier_attempt(
    store: InMemoryReviewStore | FileReviewStore,
) -> None:
    record = store.create("acme/web#7")
    other = store.create("acme/web#8")
    store.save_comments(other.id, [_make_comment(1)])

    store.save_comments(record.id, [_make_comment(10)])
    store.save_comments(record.id, [_make_comment(20), _make_comment(30)])

    assert [c.line_start for c in store.comments_for(record.id)] == [20, 30]
    assert [c.line_start for c in store.comments_for(other.id)] == [1]
    assert store.comments_for("missing") == []


def test_save_comments_for_missing_record(
    store: InMemoryReviewStore | FileReviewStore,
) -> None:
    with pytest.raises(StoreError, match="does not exist"):
        store.save_comments("missing", [_make_comment()])


# =============================================================================
# File store
# =============================================================================


def test_file_store_persists_across_instances(tmp_path: Path) -> None:
    first = FileReviewStore(storage_dir=tmp_path)
    record = first.create("acme/web#7")
    first.save_comments(record.id, [_make_comment()])

    second = FileReviewStore(storage_dir=tmp_path)

    assert second.get(record.id) == record
    assert len(second.comments_for(record.id)) == 1


def test_file_store_layout(tmp_path: Path) -> None:
    store = FileReviewStore(storage_dir=tmp_path)
    record = store.create("acme/web#7")
    store.save_comments(record.id, [_make_comment()])

    data = json.loads(store.path.read_text())

    assert store.path == tmp_path / "reviews.json"
    assert [r["id"] for r in data["reviews"]] == [record.id]
    assert list(data["review_comments"]) == [record.id]


def test_file_store_reads_nothing_before_first_write(tmp_path: Path) -> None:
    store = FileReviewStore(storage_dir=tmp_path / "never")

    assert store.get("x") is None
    assert store.latest_for("acme/web#7") is None
    assert not store.path.exists()


def test_file_store_rejects_corrupt_file(tmp_path: Path) -> None:
    (tmp_path / "reviews.json").write_text("{not json")
    store = FileReviewStore(storage_dir=tmp_path)

    with pytest.raises(StoreError, match="Corrupt"):
        store.get("x")
    with pytest.raises(StoreError, match="Corrupt"):
        store.create("acme/web#7")


def test_failed_mutation_writes_nothing(tmp_path: Path) -> None:
    store = FileReviewStore(storage_dir=tmp_path)
    store.create("acme/web#7")
    before = store.path.read_text()

    with pytest.raises(StoreError):
        store.save_comments("missing", [_make_comment()])

    assert store.path.read_text() == before
