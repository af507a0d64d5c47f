"""Centralized defaults for Lookout. Overridable via configuration."""

from __future__ import annotations

# =============================================================================
# CONTEXT SELECTION
# =============================================================================

DEFAULT_MAX_DISTANCE = 3
DEFAULT_MAX_CONTEXT_FILES = 15
DEFAULT_MAX_TOKENS = 8_000
PER_FILE_TOKEN_ESTIMATE = 500
DEFAULT_MAX_FETCHED_FILES = 50

# =============================================================================
# SCORING
# =============================================================================

CRITICAL_MULTIPLIER = 1.5
REVERSE_DEPENDENCY_BOOST = 1.2

# =============================================================================
# VALIDATION
# =============================================================================

MAX_LINE_SPAN = 100
MIN_MESSAGE_LENGTH = 20
GENERIC_MESSAGE_LIMIT = 100
PASS_RATE_THRESHOLD = 0.5
DEDUPE_LINE_BUCKET = 10
DEDUPE_PREFIX_LENGTH = 50

# =============================================================================
# JOB QUEUE
# =============================================================================

DEFAULT_CONCURRENCY = 5
DEFAULT_RATE_LIMIT_MAX = 10
DEFAULT_RATE_LIMIT_WINDOW_SECONDS = 60.0
DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_BACKOFF_SECONDS = 2.0
COMPLETED_RETENTION_SECONDS = 3_600
COMPLETED_RETENTION_COUNT = 100
FAILED_RETENTION_SECONDS = 86_400

# =============================================================================
# REASONING SERVICE
# =============================================================================

DEFAULT_REVIEW_MODEL = "openai:gpt-4o"
DEFAULT_REVIEW_MAX_TOKENS = 2_000
PROMPT_MAX_FILE_LINES = 100

# =============================================================================
# TIMEOUTS
# =============================================================================

DEFAULT_TIMEOUT_SECONDS = 120
