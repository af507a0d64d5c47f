"""ReviewRecord JSON serialization."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from lookout.domain.review.entities import ReviewRecord, ReviewStatus
from lookout.domain.review.value_objects import (
    CategoryComment,
    CategorySummary,
    ReviewResult,
)
from lookout.infrastructure.constants import SerializerField as F
from lookout.shared.types import FilePath, ReviewCategory, Severity

# =============================================================================
# SERIALIZE
# =============================================================================


def serialize_comment(comment: CategoryComment) -> dict[str, object]:
    return {
        F.FILE_PATH: str(comment.file_path),
        F.LINE_START: comment.line_start,
        F.LINE_END: comment.line_end,
        F.SEVERITY: comment.severity.value,
        F.MESSAGE: comment.message,
        F.REASONING: comment.reasoning,
        F.CATEGORY: comment.category.value,
    }


def serialize_result(result: ReviewResult) -> dict[str, object]:
    return {
        F.CATEGORIES: {
            category.value: {
                F.COMMENTS: [serialize_comment(c) for c in summary.comments],
                F.OVERALL_ASSESSMENT: summary.overall_assessment,
            }
            for category, summary in result.categories.items()
        },
        F.SUMMARY: result.summary,
        F.FILES_ANALYZED: [str(p) for p in result.files_analyzed],
        F.CONTEXT_FILES: [str(p) for p in result.context_files],
        F.TOKEN_USAGE: result.token_usage,
    }


def serialize_record(record: ReviewRecord) -> dict[str, object]:
    """Convert a record to a JSON-compatible dict. Unset fields are null."""
    return {
        F.ID: record.id,
        F.PULL_REQUEST_ID: record.pull_request_id,
        F.STATUS: record.status.value,
        F.CREATED_AT: record.created_at.isoformat(),
        F.UPDATED_AT: _iso(record.updated_at),
        F.STARTED_AT: _iso(record.started_at),
        F.COMPLETED_AT: _iso(record.completed_at),
        F.ERROR_MESSAGE: record.error_message,
        F.REVIEW_PAYLOAD: (
            serialize_result(record.review_payload)
            if record.review_payload is not None
            else None
        ),
        F.GITHUB_COMMENT_ID: record.github_comment_id,
        F.TOKEN_COUNT: record.token_count,
        F.FILES_ANALYZED: record.files_analyzed,
    }


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


# =============================================================================
# DESERIALIZE
# =============================================================================


def deserialize_comment(data: dict[str, object]) -> CategoryComment:
    """Build a comment from its dict form.

    Raises:
        ValueError: If a field is missing or has the wrong type.
    """
    try:
        return CategoryComment(
            file_path=FilePath(str(data[F.FILE_PATH])),
            line_start=_int(data[F.LINE_START]),
            line_end=_int(data[F.LINE_END]),
            severity=Severity(str(data[F.SEVERITY])),
            message=str(data[F.MESSAGE]),
            reasoning=str(data.get(F.REASONING, "")),
            category=ReviewCategory(str(data[F.CATEGORY])),
        )
    except KeyError as e:
        msg = f"Comment is missing field {e}"
        raise ValueError(msg) from e


def deserialize_result(data: dict[str, object]) -> ReviewResult:
    raw_categories = _dict(data.get(F.CATEGORIES, {}))
    categories: dict[ReviewCategory, CategorySummary] = {}
    for name, raw_summary in raw_categories.items():
        summary = _dict(raw_summary)
        categories[ReviewCategory(name)] = CategorySummary(
            comments=[
                deserialize_comment(_dict(c)) for c in _list(summary.get(F.COMMENTS))
            ],
            overall_assessment=str(summary.get(F.OVERALL_ASSESSMENT, "")),
        )

    return ReviewResult(
        categories=categories,
        summary=str(data.get(F.SUMMARY, "")),
        files_analyzed=[FilePath(str(p)) for p in _list(data.get(F.FILES_ANALYZED))],
        context_files=[FilePath(str(p)) for p in _list(data.get(F.CONTEXT_FILES))],
        token_usage=_int(data.get(F.TOKEN_USAGE, 0)),
    )


def deserialize_record(data: dict[str, object]) -> ReviewRecord:
    """Build a record from its dict form.

    Raises:
        ValueError: If the data is malformed or missing fields.
    """
    try:
        raw_payload = data.get(F.REVIEW_PAYLOAD)
        return ReviewRecord(
            id=str(data[F.ID]),
            pull_request_id=str(data[F.PULL_REQUEST_ID]),
            created_at=datetime.fromisoformat(str(data[F.CREATED_AT])),
            status=ReviewStatus(str(data[F.STATUS])),
            updated_at=_datetime(data.get(F.UPDATED_AT)),
            started_at=_datetime(data.get(F.STARTED_AT)),
            completed_at=_datetime(data.get(F.COMPLETED_AT)),
            error_message=_optional_str(data.get(F.ERROR_MESSAGE)),
            review_payload=(
                deserialize_result(_dict(raw_payload))
                if raw_payload is not None
                else None
            ),
            github_comment_id=_optional_int(data.get(F.GITHUB_COMMENT_ID)),
            token_count=_optional_int(data.get(F.TOKEN_COUNT)),
            files_analyzed=_optional_int(data.get(F.FILES_ANALYZED)),
        )
    except KeyError as e:
        msg = f"Review record is missing field {e}"
        raise ValueError(msg) from e


# =============================================================================
# FIELD HELPERS
# =============================================================================


def _dict(raw: object) -> dict[str, object]:
    if not isinstance(raw, dict):
        msg = f"Expected an object, got {type(raw).__name__}"
        raise ValueError(msg)
    return cast(dict[str, object], raw)


def _list(raw: object) -> list[object]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        msg = f"Expected a list, got {type(raw).__name__}"
        raise ValueError(msg)
    return cast(list[object], raw)


def _int(raw: object) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int):
        msg = f"Expected an integer, got {raw!r}"
        raise ValueError(msg)
    return raw


def _optional_int(raw: object) -> int | None:
    return None if raw is None else _int(raw)


def _optional_str(raw: object) -> str | None:
    return None if raw is None else str(raw)


def _datetime(raw: object) -> datetime | None:
    return None if raw is None else datetime.fromisoformat(str(raw))
