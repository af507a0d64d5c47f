"""ReviewStore implementations: in-process and JSON file backed."""

from __future__ import annotations

import fcntl
import json
import logging
import uuid

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import cast

from lookout.domain.review.entities import ReviewRecord, StatusUpdate
from lookout.domain.review.value_objects import CategoryComment
from lookout.infrastructure.constants import SerializerField as F
from lookout.infrastructure.storage.serializer import (
    deserialize_comment,
    deserialize_record,
    serialize_comment,
    serialize_record,
)
from lookout.shared.exceptions import StoreError

logger = logging.getLogger(__name__)

_STORE_FILENAME = "reviews.json"


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _new_id() -> str:
    return uuid.uuid4().hex


# =============================================================================
# IN-MEMORY
# =============================================================================


@dataclass
class InMemoryReviewStore:
    """Implements ReviewStore with plain dicts. Records live for the process."""

    clock: Callable[[], datetime] = _utcnow
    _records: dict[str, ReviewRecord] = field(
        default_factory=dict[str, ReviewRecord], init=False
    )
    _comments: dict[str, list[CategoryComment]] = field(
        default_factory=dict[str, list[CategoryComment]], init=False
    )

    def create(self, pull_request_id: str) -> ReviewRecord:
        record = ReviewRecord(
            id=_new_id(), pull_request_id=pull_request_id, created_at=self.clock()
        )
        self._records[record.id] = record
        logger.debug("Created review %s for %s", record.id, pull_request_id)
        return record

    def get(self, review_id: str) -> ReviewRecord | None:
        return self._records.get(review_id)

    def latest_for(self, pull_request_id: str) -> ReviewRecord | None:
        matches = [
            r for r in self._records.values() if r.pull_request_id == pull_request_id
        ]
        return matches[-1] if matches else None

    def update_status(self, review_id: str, update: StatusUpdate) -> ReviewRecord:
        record = self._records.get(review_id)
        if record is None:
            msg = f"Review {review_id} does not exist"
            raise StoreError(msg)
        updated = record.apply(update, self.clock())
        self._records[review_id] = updated
        return updated

    def save_comments(self, review_id: str, comments: list[CategoryComment]) -> None:
        if review_id not in self._records:
            msg = f"Review {review_id} does not exist"
            raise StoreError(msg)
        self._comments[review_id] = list(comments)

    def comments_for(self, review_id: str) -> list[CategoryComment]:
        return list(self._comments.get(review_id, []))


# =============================================================================
# FILE
# =============================================================================


@dataclass
class FileReviewStore:
    """Implements ReviewStore via a single JSON file with file locking.

    Every write is a locked read-modify-write of the whole file, so several
    worker processes can share one storage directory.
    """

    storage_dir: Path
    clock: Callable[[], datetime] = _utcnow

    def create(self, pull_request_id: str) -> ReviewRecord:
        record = ReviewRecord(
            id=_new_id(), pull_request_id=pull_request_id, created_at=self.clock()
        )
        with self._locked() as data:
            _reviews(data).append(serialize_record(record))
        logger.debug("Created review %s for %s", record.id, pull_request_id)
        return record

    def get(self, review_id: str) -> ReviewRecord | None:
        data = self._read()
        for raw in _reviews(data):
            if _record_id(raw) == review_id:
                return _load_record(raw)
        return None

    def latest_for(self, pull_request_id: str) -> ReviewRecord | None:
        data = self._read()
        matches = [
            raw
            for raw in _reviews(data)
            if raw.get(F.PULL_REQUEST_ID) == pull_request_id
        ]
        return _load_record(matches[-1]) if matches else None

    def update_status(self, review_id: str, update: StatusUpdate) -> ReviewRecord:
        with self._locked() as data:
            reviews = _reviews(data)
            for index, raw in enumerate(reviews):
                if _record_id(raw) == review_id:
                    updated = _load_record(raw).apply(update, self.clock())
                    reviews[index] = serialize_record(updated)
                    return updated
        msg = f"Review {review_id} does not exist"
        raise StoreError(msg)

    def save_comments(self, review_id: str, comments: list[CategoryComment]) -> None:
        with self._locked() as data:
            if not any(_record_id(raw) == review_id for raw in _reviews(data)):
                msg = f"Review {review_id} does not exist"
                raise StoreError(msg)
            _comment_map(data)[review_id] = [serialize_comment(c) for c in comments]

    def comments_for(self, review_id: str) -> list[CategoryComment]:
        raw_comments = _comment_map(self._read()).get(review_id, [])
        try:
            return [deserialize_comment(c) for c in raw_comments]
        except ValueError as e:
            raise StoreError(f"Corrupt comments for review {review_id}: {e}") from e

    # =================================================================
    # File access
    # =================================================================

    @property
    def path(self) -> Path:
        return self.storage_dir / _STORE_FILENAME

    def _read(self) -> dict[str, object]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r") as f:
                fcntl.flock(f, fcntl.LOCK_SH)
                try:
                    return _parse(f.read())
                finally:
                    fcntl.flock(f, fcntl.LOCK_UN)
        except OSError as e:
            raise StoreError(f"Cannot read {self.path}: {e}") from e

    @contextmanager
    def _locked(self) -> Iterator[dict[str, object]]:
        """Yield the parsed store for mutation and write it back on exit.

        Nothing is written if the block raises.
        """
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        try:
            f = self.path.open("a+")
        except OSError as e:
            raise StoreError(f"Cannot open {self.path}: {e}") from e

        with f:
            fcntl.flock(f, fcntl.LOCK_EX)
            try:
                f.seek(0)
                data = _parse(f.read())
                yield data
                f.seek(0)
                f.truncate()
                json.dump(data, f, indent=2)
            finally:
                fcntl.flock(f, fcntl.LOCK_UN)


# =============================================================================
# DOCUMENT HELPERS
# =============================================================================


def _parse(text: str) -> dict[str, object]:
    if not text.strip():
        return {}
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise StoreError(f"Corrupt review store: {e}") from e
    if not isinstance(data, dict):
        msg = "Corrupt review store: top level is not an object"
        raise StoreError(msg)
    return cast(dict[str, object], data)


def _reviews(data: dict[str, object]) -> list[dict[str, object]]:
    reviews = data.setdefault(F.REVIEWS, [])
    return cast(list[dict[str, object]], reviews)


def _comment_map(data: dict[str, object]) -> dict[str, list[dict[str, object]]]:
    comments = data.setdefault(F.REVIEW_COMMENTS, {})
    return cast(dict[str, list[dict[str, object]]], comments)


def _record_id(raw: dict[str, object]) -> object:
    return raw.get(F.ID)


def _load_record(raw: dict[str, object]) -> ReviewRecord:
    try:
        return deserialize_record(raw)
    except ValueError as e:
        raise StoreError(f"Corrupt review record: {e}") from e
