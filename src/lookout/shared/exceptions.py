"""Typed exception hierarchy for Lookout."""

from __future__ import annotations

from typing import TYPE_CHECKING

from lookout.shared.types import FilePath

if TYPE_CHECKING:
    from lookout.domain.review.value_objects import ValidationOutcome

# =============================================================================
# BASE
# =============================================================================


class LookoutError(Exception):
    """Base exception for all Lookout errors."""


# =============================================================================
# CODE HOST
# =============================================================================


class CodeHostError(LookoutError):
    """A code-host API call failed."""


class FileFetchError(CodeHostError):
    """Failed to fetch a file's content at a ref."""

    def __init__(self, path: FilePath, reason: str) -> None:
        self.path = path
        super().__init__(f"Failed to fetch {path}: {reason}")


class PublishError(CodeHostError):
    """Failed to post the review to the pull request."""


class SignatureError(LookoutError):
    """Webhook payload signature is missing or does not match."""


# =============================================================================
# REVIEW
# =============================================================================


class ReviewGenerationError(LookoutError):
    """A category review failed or produced unusable output."""

    def __init__(self, category: str, reason: str) -> None:
        self.category = category
        super().__init__(f"{category} review failed: {reason}")


class ValidationGateError(LookoutError):
    """The validated comment batch did not pass the acceptance gate."""

    def __init__(self, outcome: ValidationOutcome) -> None:
        self.outcome = outcome
        super().__init__(
            f"Review quality too low: {outcome.final_count}/{outcome.total} "
            "valid comments"
        )


# =============================================================================
# PERSISTENCE
# =============================================================================


class StoreError(LookoutError):
    """Review store read or write failed."""


class ReviewNotFoundError(StoreError):
    """No review record exists for a pull request."""

    def __init__(self, pull_request_id: str) -> None:
        self.pull_request_id = pull_request_id
        super().__init__(f"Review record not found for pull request {pull_request_id}")


class InvalidTransitionError(StoreError):
    """A status update would move a review backwards or out of a terminal state."""

    def __init__(self, review_id: str, current: str, requested: str) -> None:
        self.review_id = review_id
        self.current = current
        self.requested = requested
        super().__init__(
            f"Review {review_id} cannot move from '{current}' to '{requested}'"
        )


# =============================================================================
# CONFIGURATION
# =============================================================================


class ConfigurationError(LookoutError):
    """Invalid or missing configuration."""
