"""Repository protocols for the Review bounded context."""

from __future__ import annotations

from typing import Protocol

from lookout.domain.diff.value_objects import ChangedFile
from lookout.domain.review.entities import ReviewJob, ReviewRecord, StatusUpdate
from lookout.domain.review.value_objects import (
    CategoryComment,
    CategoryReviewResult,
    ReviewPayload,
    ReviewResult,
)
from lookout.shared.types import CommitSHA, FilePath, ReviewCategory

# =============================================================================
# CODE HOST
# =============================================================================


class CodeHost(Protocol):
    """Interface to the repository hosting service for one installation."""

    def list_pull_request_files(
        self, repository: str, pr_number: int
    ) -> list[ChangedFile]:
        """List every file changed by a pull request, with patches."""
        ...

    def get_head_sha(self, repository: str, pr_number: int) -> CommitSHA:
        """Commit SHA at the head of the pull request branch."""
        ...

    def get_file_content(
        self, repository: str, path: FilePath, ref: str
    ) -> str | None:
        """Raw file text at a ref, or None if the file does not exist there."""
        ...

    def post_issue_comment(self, repository: str, pr_number: int, body: str) -> int:
        """Post a top-level comment and return its id."""
        ...


class CodeHostProvider(Protocol):
    """Hands out an authenticated code host for an app installation."""

    def for_installation(self, installation_id: int) -> CodeHost: ...


# =============================================================================
# REASONING
# =============================================================================


class CategoryReviewer(Protocol):
    """Interface to the external reasoning service."""

    def review(
        self, category: ReviewCategory, payload: ReviewPayload
    ) -> CategoryReviewResult:
        """Run one category review over the payload.

        Raises:
            ReviewGenerationError: If the service call fails.
        """
        ...


# =============================================================================
# PERSISTENCE
# =============================================================================


class ReviewStore(Protocol):
    """Interface for review records and their accepted comments."""

    def create(self, pull_request_id: str) -> ReviewRecord:
        """Create a pending review record."""
        ...

    def latest_for(self, pull_request_id: str) -> ReviewRecord | None:
        """Most recently created record for a pull request, if any."""
        ...

    def update_status(self, review_id: str, update: StatusUpdate) -> ReviewRecord:
        """Merge a status update into a record.

        Raises:
            StoreError: If the record is missing or the write fails.
            InvalidTransitionError: If the update is not allowed.
        """
        ...

    def save_comments(self, review_id: str, comments: list[CategoryComment]) -> None:
        """Persist accepted comments for a review.

        Replaces whatever an earlier attempt stored for the same review.
        """
        ...

    def comments_for(self, review_id: str) -> list[CategoryComment]: ...


# =============================================================================
# PUBLISHING
# =============================================================================


class ReviewPublisher(Protocol):
    """Interface for publishing a finished review to the pull request."""

    def publish(
        self,
        host: CodeHost,
        job: ReviewJob,
        result: ReviewResult,
        review_seconds: float,
    ) -> int:
        """Post the review and return the created comment id.

        Raises:
            PublishError: If posting fails.
        """
        ...
