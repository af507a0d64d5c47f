"""Domain services for the Review bounded context.

The comment validator is the anti-hallucination stage: the reasoning service
only ever saw the files in the review payload, so any comment citing another
file, or lines outside the cited file, is fabricated.
"""

from __future__ import annotations

import logging
import re

from dataclasses import dataclass

from lookout.domain.review.value_objects import (
    CategoryComment,
    RejectedComment,
    ReviewPayload,
    ValidationOutcome,
    ValidationStage,
)
from lookout.shared.constants import (
    DEDUPE_LINE_BUCKET,
    DEDUPE_PREFIX_LENGTH,
    GENERIC_MESSAGE_LIMIT,
    MAX_LINE_SPAN,
    MIN_MESSAGE_LENGTH,
    PASS_RATE_THRESHOLD,
)

logger = logging.getLogger(__name__)

# =============================================================================
# QUALITY PATTERNS
# =============================================================================

GENERIC_PHRASES: tuple[str, ...] = (
    "consider refactoring",
    "could be improved",
    "might want to",
    "you may want to",
    "looks good",
    "no issues",
)

_DUPLICATE_REASON = "Duplicate of an earlier comment"

_ACTIONABLE_RE = re.compile(
    r"\b(should|must|need to|add|remove|change|update|fix|implement)\b",
    re.IGNORECASE,
)

# =============================================================================
# VALIDATOR
# =============================================================================


@dataclass
class CommentValidator:
    """Rejects fabricated references and low-signal text, then dedupes."""

    max_line_span: int = MAX_LINE_SPAN
    min_message_length: int = MIN_MESSAGE_LENGTH
    generic_message_limit: int = GENERIC_MESSAGE_LIMIT
    pass_rate_threshold: float = PASS_RATE_THRESHOLD

    def check_reference(
        self, comment: CategoryComment, file_lines: dict[str, list[str]]
    ) -> str | None:
        """Check that a comment cites real lines of a payload file.

        Args:
            comment: The comment to check.
            file_lines: Payload files split into lines. Files with empty
                content are absent from this map.

        Returns:
            A rejection reason, or None if the reference is valid.
        """
        lines = file_lines.get(comment.file_path)
        if lines is None:
            return f"File not in review context: {comment.file_path}"

        total = len(lines)
        if comment.line_start < 1 or comment.line_start > total:
            return (
                f"line_start {comment.line_start} is out of range "
                f"(file has {total} lines)"
            )

        if comment.line_end < comment.line_start or comment.line_end > total:
            return (
                f"line_end {comment.line_end} is invalid "
                f"(start: {comment.line_start}, total: {total})"
            )

        span = comment.line_span
        if span > self.max_line_span:
            return f"Line range too large ({span} lines). Comments should be specific."

        cited = lines[comment.line_start - 1 : comment.line_end]
        if not any(line.strip() for line in cited):
            return "Commented lines are all empty"

        return None

    def check_quality(self, comment: CategoryComment) -> str | None:
        """Return a rejection reason for vague or non-actionable text."""
        message = comment.message
        if len(message) < self.min_message_length:
            return f"Comment too short (less than {self.min_message_length} chars)"

        lowered = message.lower()
        is_generic = any(phrase in lowered for phrase in GENERIC_PHRASES)
        if is_generic and len(message) < self.generic_message_limit:
            return "Comment is too generic"

        if not _ACTIONABLE_RE.search(message):
            return "Comment lacks actionable advice"

        return None

    def deduplicate(
        self, comments: list[CategoryComment]
    ) -> tuple[list[CategoryComment], list[CategoryComment]]:
        """Split comments into first occurrences and later duplicates.

        Two comments collide when they cite the same file, start in the same
        ten-line bucket and share a lowercased message prefix.
        """
        unique: list[CategoryComment] = []
        duplicates: list[CategoryComment] = []
        seen: set[tuple[str, int, str]] = set()

        for comment in comments:
            key = (
                str(comment.file_path),
                (comment.line_start // DEDUPE_LINE_BUCKET) * DEDUPE_LINE_BUCKET,
                comment.message[:DEDUPE_PREFIX_LENGTH].lower(),
            )
            if key in seen:
                duplicates.append(comment)
            else:
                seen.add(key)
                unique.append(comment)

        return unique, duplicates

    def validate(
        self, comments: list[CategoryComment], payload: ReviewPayload
    ) -> ValidationOutcome:
        """Run reference, quality and duplicate checks in that order."""
        file_lines = {
            path: content.split("\n")
            for path, content in payload.file_contents().items()
            if content
        }

        rejected: list[RejectedComment] = []
        referenced: list[CategoryComment] = []
        for comment in comments:
            reason = self.check_reference(comment, file_lines)
            if reason is None:
                referenced.append(comment)
            else:
                rejected.append(
                    RejectedComment(comment, ValidationStage.REFERENCE, reason)
                )

        logger.info(
            "Validation: %d/%d comments have valid file/line references",
            len(referenced),
            len(comments),
        )

        high_quality: list[CategoryComment] = []
        for comment in referenced:
            reason = self.check_quality(comment)
            if reason is None:
                high_quality.append(comment)
            else:
                rejected.append(
                    RejectedComment(comment, ValidationStage.QUALITY, reason)
                )

        unique, duplicates = self.deduplicate(high_quality)
        for comment in duplicates:
            rejected.append(
                RejectedComment(comment, ValidationStage.DUPLICATE, _DUPLICATE_REASON)
            )

        if duplicates:
            logger.info("Removed %d duplicate comments", len(duplicates))

        return ValidationOutcome(
            accepted=unique,
            rejected=rejected,
            pass_rate_threshold=self.pass_rate_threshold,
        )
