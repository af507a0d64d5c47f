"""Environment variable readers shared by the review and worker entry points."""

from __future__ import annotations

import os

from collections.abc import Collection

from lookout.shared.exceptions import ConfigurationError


def require_env(name: str) -> str:
    """Read a required environment variable or raise.

    Raises:
        ConfigurationError: If the variable is missing or empty.
    """
    value = os.environ.get(name)
    if not value:
        msg = f"Missing required environment variable: {name}"
        raise ConfigurationError(msg)
    return value


def optional_env(name: str) -> str | None:
    """Read an environment variable, treating empty as unset."""
    return os.environ.get(name) or None


def choice_env(name: str, choices: Collection[str], default: str) -> str:
    """Read a case-insensitive keyword such as ``INPUT_MODE``.

    Surrounding whitespace is ignored and an unset or blank variable yields
    ``default``.

    Raises:
        ConfigurationError: If the value is not one of ``choices``.
    """
    value = (os.environ.get(name) or "").strip().lower() or default
    if value not in choices:
        valid = ", ".join(sorted(choices))
        msg = f"Invalid {name}: {value!r} (valid: {valid})"
        raise ConfigurationError(msg)
    return value
