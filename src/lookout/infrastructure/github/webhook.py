"""GitHub webhook helpers: signature checks and pull request event parsing."""

from __future__ import annotations

import hashlib
import hmac
import logging

from dataclasses import dataclass
from typing import cast

from lookout.domain.review.entities import ReviewJob
from lookout.infrastructure.constants import (
    PULL_REQUEST_EVENT,
    SIGNATURE_PREFIX,
    PullRequestAction,
)
from lookout.shared.exceptions import SignatureError
from lookout.shared.types import CommitSHA

logger = logging.getLogger(__name__)

# =============================================================================
# SIGNATURES
# =============================================================================


def _expected_signature(payload: bytes, secret: str) -> str:
    digest = hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()
    return SIGNATURE_PREFIX + digest


def verify_signature(payload: bytes, signature: str | None, secret: str) -> bool:
    """Check an ``X-Hub-Signature-256`` header against the raw request body."""
    if not signature:
        return False
    expected = _expected_signature(payload, secret)
    return hmac.compare_digest(expected.encode(), signature.encode())


def require_valid_signature(
    payload: bytes, signature: str | None, secret: str
) -> None:
    """Like verify_signature, but raises.

    A missing header is checked first only so it gets its own message.

    Raises:
        SignatureError: If the signature is missing or does not match.
    """
    if not signature:
        raise SignatureError("Webhook signature header is missing")
    if not verify_signature(payload, signature, secret):
        raise SignatureError("Webhook signature does not match payload")


# =============================================================================
# EVENTS
# =============================================================================


@dataclass(frozen=True)
class ReviewTrigger:
    """A pull request event that should produce a review."""

    repository_full_name: str
    pr_number: int
    installation_id: int
    head_sha: CommitSHA
    action: PullRequestAction
    title: str = ""
    author: str = ""

    @property
    def pull_request_id(self) -> str:
        return f"{self.repository_full_name}#{self.pr_number}"

    def to_job(self) -> ReviewJob:
        return ReviewJob(
            pull_request_id=self.pull_request_id,
            repository_full_name=self.repository_full_name,
            pr_number=self.pr_number,
            installation_id=self.installation_id,
        )


def _section(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key)
    if isinstance(value, dict):
        return cast(dict[str, object], value)
    return {}


def parse_pull_request_event(
    event: str | None, payload: dict[str, object]
) -> ReviewTrigger | None:
    """Turn a webhook delivery into a review trigger.

    Returns:
        The trigger, or None for other events, other actions, or payloads
        missing the fields a review needs.
    """
    if event != PULL_REQUEST_EVENT:
        logger.debug("Ignoring %s event", event)
        return None

    try:
        action = PullRequestAction(str(payload.get("action")))
    except ValueError:
        logger.debug("Ignoring pull_request action %r", payload.get("action"))
        return None

    pull_request = _section(payload, "pull_request")
    repository = _section(payload, "repository")
    installation = _section(payload, "installation")
    head = _section(pull_request, "head")
    user = _section(pull_request, "user")

    number = pull_request.get("number")
    full_name = repository.get("full_name")
    # Workflow events carry no installation; the static token ignores it.
    installation_id = installation.get("id", 0)
    sha = head.get("sha")
    if not (
        isinstance(number, int)
        and isinstance(full_name, str)
        and isinstance(installation_id, int)
        and isinstance(sha, str)
    ):
        logger.warning("pull_request event is missing required fields")
        return None

    trigger = ReviewTrigger(
        repository_full_name=full_name,
        pr_number=number,
        installation_id=installation_id,
        head_sha=CommitSHA(sha),
        action=action,
        title=str(pull_request.get("title") or ""),
        author=str(user.get("login") or ""),
    )
    logger.info("Received PR %s: %s#%d", action, full_name, number)
    return trigger
