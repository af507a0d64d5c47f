"""Tests for webhook signature checks and event parsing."""

from __future__ import annotations

import hashlib
import hmac

import pytest

from lookout.infrastructure.constants import PullRequestAction
from lookout.infrastructure.github.webhook import (
    parse_pull_request_event,
    require_valid_signature,
    verify_signature,
)
from lookout.shared.exceptions import SignatureError

_SECRET = "s3cret"
_BODY = b'{"action": "opened"}'


def _sign(body: bytes, secret: str = _SECRET) -> str:
    return "sha256=" + hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


def _make_payload(action: str = "opened", **overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "action": action,
        "pull_request": {
            "number": 7,
            "title": "Add login",
            "head": {"sha": "abc123"},
            "user": {"login": "dev"},
        },
        "repository": {"full_name": "acme/web"},
        "installation": {"id": 99},
    }
    payload.update(overrides)
    return payload


# =============================================================================
# Signatures
# =============================================================================


def test_valid_signature() -> None:
    assert verify_signature(_BODY, _sign(_BODY), _SECRET)


def test_signature_with_wrong_secret() -> None:
    assert not verify_signature(_BODY, _sign(_BODY, "other"), _SECRET)


def test_missing_signature() -> None:
    assert not verify_signature(_BODY, None, _SECRET)
    assert not verify_signature(_BODY, "", _SECRET)


def test_non_ascii_signature_is_rejected() -> None:
    assert not verify_signature(_BODY, "sha256=\u00e9t\u00e9", _SECRET)
    with pytest.raises(SignatureError, match="does not match"):
        require_valid_signature(_BODY, "sha256=\u00e9t\u00e9", _SECRET)


def test_require_valid_signature_raises() -> None:
    with pytest.raises(SignatureError, match="missing"):
        require_valid_signature(_BODY, None, _SECRET)
    with pytest.raises(SignatureError, match="does not match"):
        require_valid_signature(_BODY, "sha256=deadbeef", _SECRET)
    require_valid_signature(_BODY, _sign(_BODY), _SECRET)


# =============================================================================
# Events
# =============================================================================


@pytest.mark.parametrize("action", ["opened", "synchronize", "reopened"])
def test_reviewable_actions_produce_trigger(action: str) -> None:
    trigger = parse_pull_request_event("pull_request", _make_payload(action))

    assert trigger is not None
    assert trigger.action is PullRequestAction(action)
    assert trigger.pull_request_id == "acme/web#7"
    assert trigger.head_sha == "abc123"
    assert trigger.installation_id == 99
    assert trigger.title == "Add login"
    assert trigger.author == "dev"


def test_trigger_to_job() -> None:
    trigger = parse_pull_request_event("pull_request", _make_payload())
    assert trigger is not None

    job = trigger.to_job()

    assert job.dedupe_key == "acme/web:7"
    assert job.installation_id == 99


def test_other_events_are_ignored() -> None:
    assert parse_pull_request_event("push", _make_payload()) is None
    assert parse_pull_request_event(None, _make_payload()) is None


@pytest.mark.parametrize("action", ["closed", "labeled", "edited"])
def test_other_actions_are_ignored(action: str) -> None:
    assert parse_pull_request_event("pull_request", _make_payload(action)) is None


def test_missing_installation_defaults_to_zero() -> None:
    payload = _make_payload()
    del payload["installation"]

    trigger = parse_pull_request_event("pull_request", payload)

    assert trigger is not None
    assert trigger.installation_id == 0


def test_missing_fields_are_ignored() -> None:
    payload = _make_payload(pull_request={"number": 7})
    assert parse_pull_request_event("pull_request", payload) is None
