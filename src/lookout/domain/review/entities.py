"""Entities for the Review bounded context."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import StrEnum

from lookout.domain.review.value_objects import ReviewResult
from lookout.shared.exceptions import InvalidTransitionError

# =============================================================================
# REVIEW JOB
# =============================================================================


@dataclass(frozen=True)
class ReviewJob:
    """A queued request to review one pull request."""

    pull_request_id: str
    repository_full_name: str
    pr_number: int
    installation_id: int

    @property
    def dedupe_key(self) -> str:
        """Repeated webhooks for the same pull request share this key."""
        return f"{self.repository_full_name}:{self.pr_number}"

    @property
    def owner(self) -> str:
        return self.repository_full_name.split("/", 1)[0]

    @property
    def repo(self) -> str:
        return self.repository_full_name.split("/", 1)[-1]


# =============================================================================
# STATUS UPDATES
# =============================================================================


class ReviewStatus(StrEnum):
    """Lifecycle of a review record."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ReviewStatus.COMPLETED, ReviewStatus.FAILED)


@dataclass(frozen=True)
class StartedUpdate:
    """The job picked up the review."""

    status = ReviewStatus.RUNNING


@dataclass(frozen=True)
class CompletedUpdate:
    """The review was validated, stored and published."""

    payload: ReviewResult
    comment_id: int
    token_count: int
    files_analyzed: int

    status = ReviewStatus.COMPLETED


@dataclass(frozen=True)
class FailedUpdate:
    """The job attempt failed; the message is kept verbatim."""

    error_message: str

    status = ReviewStatus.FAILED


StatusUpdate = StartedUpdate | CompletedUpdate | FailedUpdate

# A failed review re-enters running when the queue retries the job.
_ALLOWED_TRANSITIONS: dict[ReviewStatus, frozenset[ReviewStatus]] = {
    ReviewStatus.PENDING: frozenset({ReviewStatus.RUNNING, ReviewStatus.FAILED}),
    ReviewStatus.RUNNING: frozenset({ReviewStatus.COMPLETED, ReviewStatus.FAILED}),
    ReviewStatus.FAILED: frozenset({ReviewStatus.RUNNING}),
    ReviewStatus.COMPLETED: frozenset(),
}

# =============================================================================
# REVIEW RECORD
# =============================================================================


@dataclass(frozen=True)
class ReviewRecord:
    """Aggregate root: one review attempt series for a pull request."""

    id: str
    pull_request_id: str
    created_at: datetime
    status: ReviewStatus = ReviewStatus.PENDING
    updated_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    error_message: str | None = None
    review_payload: ReviewResult | None = None
    github_comment_id: int | None = None
    token_count: int | None = None
    files_analyzed: int | None = None

    def can_transition_to(self, status: ReviewStatus) -> bool:
        return status in _ALLOWED_TRANSITIONS[self.status]

    def apply(self, update: StatusUpdate, now: datetime) -> ReviewRecord:
        """Return a copy of this record with the update merged in.

        Raises:
            InvalidTransitionError: If the update is not allowed from the
                current status.
        """
        if not self.can_transition_to(update.status):
            raise InvalidTransitionError(self.id, self.status, update.status)

        match update:
            case StartedUpdate():
                return replace(
                    self,
                    status=ReviewStatus.RUNNING,
                    updated_at=now,
                    started_at=now,
                    completed_at=None,
                    error_message=None,
                )
            case CompletedUpdate():
                return replace(
                    self,
                    status=ReviewStatus.COMPLETED,
                    updated_at=now,
                    completed_at=now,
                    review_payload=update.payload,
                    github_comment_id=update.comment_id,
                    token_count=update.token_count,
                    files_analyzed=update.files_analyzed,
                )
            case FailedUpdate():
                return replace(
                    self,
                    status=ReviewStatus.FAILED,
                    updated_at=now,
                    completed_at=now,
                    error_message=update.error_message,
                )
