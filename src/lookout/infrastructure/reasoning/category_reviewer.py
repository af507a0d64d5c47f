"""CategoryReviewer implementation using pydantic-ai."""

from __future__ import annotations

import logging
import re

from dataclasses import dataclass

from lookout.domain.llm.value_objects import ModelConfig
from lookout.domain.review.value_objects import (
    CategoryComment,
    CategoryReviewResult,
    ReviewPayload,
)
from lookout.infrastructure.llm_providers.factory import create_review_agent
from lookout.infrastructure.reasoning.prompts import (
    CATEGORY_TEMPERATURES,
    SYSTEM_PROMPTS,
    build_user_prompt,
)
from lookout.shared.exceptions import ReviewGenerationError
from lookout.shared.types import FilePath, ReviewCategory, Severity

logger = logging.getLogger(__name__)

# =============================================================================
# RESPONSE PARSING
# =============================================================================

# path/to/file.ts:10-20 | warning | Message here
_COMMENT_LINE_RE = re.compile(
    r"^(.+?):(\d+)-(\d+)\s*\|\s*(info|warning|critical)\s*\|\s*(.+)$"
)
_SUMMARY_MARKERS = ("summary", "overall")
_SUMMARY_LINES = 5
_FALLBACK_LINES = 3


def parse_review_response(
    text: str, category: ReviewCategory
) -> list[CategoryComment]:
    """Extract comments from a free-text reply.

    Lines that do not match ``FILE:LINE_START-LINE_END | SEVERITY | MESSAGE``
    are dropped without error.
    """
    comments: list[CategoryComment] = []
    for line in text.split("\n"):
        match = _COMMENT_LINE_RE.match(line)
        if not match:
            continue
        path, start, end, severity, message = match.groups()
        comments.append(
            CategoryComment(
                file_path=FilePath(path.strip()),
                line_start=int(start),
                line_end=int(end),
                severity=Severity(severity),
                message=message.strip(),
                reasoning=f"AI {category} review",
                category=category,
            )
        )
    return comments


def extract_overall_assessment(text: str) -> str:
    """Take the summary paragraph of a reply, or its opening lines."""
    lines = text.split("\n")
    for index, line in enumerate(lines):
        lowered = line.lower()
        if any(marker in lowered for marker in _SUMMARY_MARKERS):
            return "\n".join(lines[index : index + _SUMMARY_LINES])

    return "\n".join(line for line in lines[:_FALLBACK_LINES] if line.strip())


# =============================================================================
# REVIEWER
# =============================================================================


@dataclass
class LLMCategoryReviewer:
    """Bridges CategoryReviewer to pydantic-ai.

    Each category runs with its own system prompt and temperature; the
    reply is free text parsed line by line.
    """

    config: ModelConfig

    def review(
        self, category: ReviewCategory, payload: ReviewPayload
    ) -> CategoryReviewResult:
        """Run one category review.

        Raises:
            ReviewGenerationError: If the model call fails.
        """
        agent = create_review_agent(
            config=self.config.with_temperature(CATEGORY_TEMPERATURES[category]),
            system_prompt=SYSTEM_PROMPTS[category],
        )
        prompt = build_user_prompt(category, payload)

        try:
            result = agent.run_sync(prompt)
        except Exception as e:
            raise ReviewGenerationError(category, str(e)) from e

        text = result.output
        usage = result.usage()
        tokens = (usage.input_tokens or 0) + (usage.output_tokens or 0)

        comments = parse_review_response(text, category)
        logger.debug(
            "%s reply parsed into %d comments (%d tokens)",
            category,
            len(comments),
            tokens,
        )
        return CategoryReviewResult(
            category=category,
            comments=comments,
            overall_assessment=extract_overall_assessment(text),
            tokens_used=tokens,
        )
