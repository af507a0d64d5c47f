"""Infrastructure-layer constants and enums.

Eliminates magic strings across all infrastructure modules.
"""

from __future__ import annotations

from enum import StrEnum

# =============================================================================
# PROVIDER CONSTANTS
# =============================================================================


class GitHubAPI(StrEnum):
    """GitHub REST API constants."""

    BASE_URL = "https://api.github.com"
    ACCEPT_JSON = "application/vnd.github.v3+json"
    ACCEPT_RAW = "application/vnd.github.v3.raw"
    PROVIDER_NAME = "github"


class WebhookHeader(StrEnum):
    """HTTP headers GitHub sets on webhook deliveries."""

    EVENT = "x-github-event"
    SIGNATURE = "x-hub-signature-256"
    DELIVERY = "x-github-delivery"


class PullRequestAction(StrEnum):
    """``pull_request`` webhook actions that trigger a review."""

    OPENED = "opened"
    SYNCHRONIZE = "synchronize"
    REOPENED = "reopened"


PULL_REQUEST_EVENT = "pull_request"
SIGNATURE_PREFIX = "sha256="

# =============================================================================
# REVIEW SEVERITY LABELS
# =============================================================================


class SeverityLabel(StrEnum):
    """Text prefixes for review comment severity levels."""

    CRITICAL = "[CRITICAL]"
    WARNING = "[WARNING]"
    INFO = "[INFO]"


# =============================================================================
# SERIALIZER FIELD NAMES
# =============================================================================


class SerializerField(StrEnum):
    """JSON field names for review record serialization."""

    ID = "id"
    PULL_REQUEST_ID = "pull_request_id"
    STATUS = "status"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"
    STARTED_AT = "started_at"
    COMPLETED_AT = "completed_at"
    ERROR_MESSAGE = "error_message"
    REVIEW_PAYLOAD = "review_payload"
    GITHUB_COMMENT_ID = "github_comment_id"
    TOKEN_COUNT = "token_count"
    FILES_ANALYZED = "files_analyzed"
    CATEGORIES = "categories"
    COMMENTS = "comments"
    OVERALL_ASSESSMENT = "overall_assessment"
    SUMMARY = "summary"
    CONTEXT_FILES = "context_files"
    TOKEN_USAGE = "token_usage"
    FILE_PATH = "file_path"
    LINE_START = "line_start"
    LINE_END = "line_end"
    SEVERITY = "severity"
    MESSAGE = "message"
    REASONING = "reasoning"
    CATEGORY = "category"
    REVIEWS = "reviews"
    REVIEW_COMMENTS = "review_comments"
