"""Tests for the exception hierarchy."""

from __future__ import annotations

from lookout.domain.review.value_objects import ValidationOutcome
from lookout.shared.exceptions import (
    CodeHostError,
    ConfigurationError,
    FileFetchError,
    InvalidTransitionError,
    LookoutError,
    PublishError,
    ReviewGenerationError,
    ReviewNotFoundError,
    SignatureError,
    StoreError,
    ValidationGateError,
)
from lookout.shared.types import FilePath


def test_all_errors_share_base() -> None:
    for cls in (
        CodeHostError,
        ConfigurationError,
        FileFetchError,
        InvalidTransitionError,
        PublishError,
        ReviewGenerationError,
        ReviewNotFoundError,
        SignatureError,
        StoreError,
        ValidationGateError,
    ):
        assert issubclass(cls, LookoutError)


def test_code_host_family() -> None:
    assert issubclass(FileFetchError, CodeHostError)
    assert issubclass(PublishError, CodeHostError)


def test_store_family() -> None:
    assert issubclass(ReviewNotFoundError, StoreError)
    assert issubclass(InvalidTransitionError, StoreError)


def test_file_fetch_error_carries_path() -> None:
    err = FileFetchError(FilePath("src/a.ts"), "HTTP 500")
    assert err.path == "src/a.ts"
    assert str(err) == "Failed to fetch src/a.ts: HTTP 500"


def test_review_generation_error_carries_category() -> None:
    err = ReviewGenerationError("security", "timeout")
    assert err.category == "security"
    assert "security review failed: timeout" in str(err)


def test_validation_gate_error_message() -> None:
    outcome = ValidationOutcome(accepted=[], rejected=[])
    err = ValidationGateError(outcome)
    assert err.outcome is outcome
    assert str(err) == "Review quality too low: 0/0 valid comments"


def test_invalid_transition_error_message() -> None:
    err = InvalidTransitionError("r1", "completed", "running")
    assert err.current == "completed"
    assert str(err) == "Review r1 cannot move from 'completed' to 'running'"


def test_review_not_found_error_message() -> None:
    err = ReviewNotFoundError("org/repo#1")
    assert err.pull_request_id == "org/repo#1"
    assert "org/repo#1" in str(err)
