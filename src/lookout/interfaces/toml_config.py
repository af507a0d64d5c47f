"""TOML-based configuration loader.

Reads ``[tool.lookout]`` from ``pyproject.toml`` and produces a typed
``LookoutConfig`` dataclass.  Missing file or missing section → all defaults
apply (supports non-Python repos).
"""

from __future__ import annotations

import logging
import tomllib

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from lookout.application.review_pipeline import FanInPolicy
from lookout.shared.constants import (
    DEFAULT_CONCURRENCY,
    DEFAULT_MAX_CONTEXT_FILES,
    DEFAULT_MAX_DISTANCE,
    DEFAULT_MAX_FETCHED_FILES,
    DEFAULT_MAX_TOKENS,
    DEFAULT_RATE_LIMIT_MAX,
    DEFAULT_RATE_LIMIT_WINDOW_SECONDS,
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_RETRY_BACKOFF_SECONDS,
    DEFAULT_REVIEW_MAX_TOKENS,
    DEFAULT_REVIEW_MODEL,
    PASS_RATE_THRESHOLD,
)
from lookout.shared.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# ── defaults ────────────────────────────────────────────────────────────
_DEFAULTS: dict[str, Any] = {
    "model": DEFAULT_REVIEW_MODEL,
    "review_max_tokens": DEFAULT_REVIEW_MAX_TOKENS,
    "max_distance": DEFAULT_MAX_DISTANCE,
    "max_context_files": DEFAULT_MAX_CONTEXT_FILES,
    "max_tokens": DEFAULT_MAX_TOKENS,
    "max_fetched_files": DEFAULT_MAX_FETCHED_FILES,
    "concurrency": DEFAULT_CONCURRENCY,
    "rate_limit_max": DEFAULT_RATE_LIMIT_MAX,
    "rate_limit_window": DEFAULT_RATE_LIMIT_WINDOW_SECONDS,
    "retry_attempts": DEFAULT_RETRY_ATTEMPTS,
    "retry_backoff_seconds": DEFAULT_RETRY_BACKOFF_SECONDS,
    "pass_rate_threshold": PASS_RATE_THRESHOLD,
    "fan_in": FanInPolicy.WAIT_ALL.value,
    "storage_dir": ".lookout",
}

_INT_KEYS = {
    "review_max_tokens",
    "max_distance",
    "max_context_files",
    "max_tokens",
    "max_fetched_files",
    "concurrency",
    "rate_limit_max",
    "retry_attempts",
}
_FLOAT_KEYS = {"rate_limit_window", "retry_backoff_seconds", "pass_rate_threshold"}
_STR_KEYS = {"model", "fan_in", "storage_dir"}

# max_distance may be zero: only the changed files are selected.
_POSITIVE_KEYS = _INT_KEYS - {"max_distance"}


@dataclass(frozen=True)
class LookoutConfig:
    """Typed configuration produced by the TOML loader."""

    model: str = DEFAULT_REVIEW_MODEL
    review_max_tokens: int = DEFAULT_REVIEW_MAX_TOKENS
    max_distance: int = DEFAULT_MAX_DISTANCE
    max_context_files: int = DEFAULT_MAX_CONTEXT_FILES
    max_tokens: int = DEFAULT_MAX_TOKENS
    max_fetched_files: int = DEFAULT_MAX_FETCHED_FILES
    concurrency: int = DEFAULT_CONCURRENCY
    rate_limit_max: int = DEFAULT_RATE_LIMIT_MAX
    rate_limit_window: float = DEFAULT_RATE_LIMIT_WINDOW_SECONDS
    retry_attempts: int = DEFAULT_RETRY_ATTEMPTS
    retry_backoff_seconds: float = DEFAULT_RETRY_BACKOFF_SECONDS
    pass_rate_threshold: float = PASS_RATE_THRESHOLD
    fan_in: FanInPolicy = FanInPolicy.WAIT_ALL
    storage_dir: str = ".lookout"


def load_lookout_config(project_root: Path | None = None) -> LookoutConfig:
    """Load Lookout configuration from ``pyproject.toml``.

    Merge order (later wins): built-in defaults → ``[tool.lookout]``.

    Args:
        project_root: Directory containing ``pyproject.toml``.
            Defaults to ``Path.cwd()``.

    Returns:
        A frozen ``LookoutConfig`` dataclass.

    Raises:
        ConfigurationError: On TOML parse errors, unknown keys or invalid
            values.
    """
    if project_root is None:
        project_root = Path.cwd()

    toml_path = project_root / "pyproject.toml"
    merged: dict[str, Any] = dict(_DEFAULTS)

    tool_section = _read_tool_section(toml_path)
    if tool_section is not None:
        _reject_unknown_keys(tool_section)
        merged.update(tool_section)
        logger.debug("Loaded [tool.lookout] from %s", toml_path)

    _validate_types(merged)
    _validate_ranges(merged)

    return LookoutConfig(
        model=str(merged["model"]),
        review_max_tokens=int(merged["review_max_tokens"]),
        max_distance=int(merged["max_distance"]),
        max_context_files=int(merged["max_context_files"]),
        max_tokens=int(merged["max_tokens"]),
        max_fetched_files=int(merged["max_fetched_files"]),
        concurrency=int(merged["concurrency"]),
        rate_limit_max=int(merged["rate_limit_max"]),
        rate_limit_window=float(merged["rate_limit_window"]),
        retry_attempts=int(merged["retry_attempts"]),
        retry_backoff_seconds=float(merged["retry_backoff_seconds"]),
        pass_rate_threshold=float(merged["pass_rate_threshold"]),
        fan_in=_validate_fan_in(merged["fan_in"]),
        storage_dir=str(merged["storage_dir"]),
    )


# ── internal helpers ────────────────────────────────────────────────────


def _read_tool_section(toml_path: Path) -> dict[str, Any] | None:
    """Read ``[tool.lookout]`` from *toml_path*, or ``None`` if absent."""
    if not toml_path.is_file():
        return None
    try:
        with toml_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        msg = f"Failed to parse {toml_path}: {exc}"
        raise ConfigurationError(msg) from exc
    tool: dict[str, Any] | None = data.get("tool")
    if not isinstance(tool, dict):
        return None
    lookout: dict[str, Any] | None = tool.get("lookout")
    if not isinstance(lookout, dict):
        return None
    return lookout


def _reject_unknown_keys(section: dict[str, Any]) -> None:
    unknown = sorted(key for key in section if key not in _DEFAULTS)
    if unknown:
        msg = f"Unknown key(s) in [tool.lookout]: {', '.join(unknown)}"
        raise ConfigurationError(msg)


def _validate_types(merged: dict[str, Any]) -> None:
    """Check value types. Booleans are not accepted as numbers."""
    for key, value in merged.items():
        if key in _INT_KEYS:
            ok = isinstance(value, int) and not isinstance(value, bool)
            expected = "an integer"
        elif key in _FLOAT_KEYS:
            ok = isinstance(value, (int, float)) and not isinstance(value, bool)
            expected = "a number"
        elif key in _STR_KEYS:
            ok = isinstance(value, str)
            expected = "a string"
        else:
            continue
        if not ok:
            msg = f"{key} must be {expected}, got {value!r}"
            raise ConfigurationError(msg)


def _validate_ranges(merged: dict[str, Any]) -> None:
    """Validate numeric ranges."""
    for key in sorted(_POSITIVE_KEYS):
        if merged[key] < 1:
            msg = f"{key} must be at least 1, got {merged[key]}"
            raise ConfigurationError(msg)

    if merged["max_distance"] < 0:
        msg = f"max_distance must not be negative, got {merged['max_distance']}"
        raise ConfigurationError(msg)

    if merged["rate_limit_window"] <= 0:
        msg = f"rate_limit_window must be positive, got {merged['rate_limit_window']}"
        raise ConfigurationError(msg)

    if merged["retry_backoff_seconds"] < 0:
        msg = (
            "retry_backoff_seconds must not be negative, "
            f"got {merged['retry_backoff_seconds']}"
        )
        raise ConfigurationError(msg)

    threshold = float(merged["pass_rate_threshold"])
    if not 0.0 <= threshold <= 1.0:
        msg = f"pass_rate_threshold must be between 0.0 and 1.0, got {threshold}"
        raise ConfigurationError(msg)


def _validate_fan_in(raw: Any) -> FanInPolicy:
    """Convert a string to ``FanInPolicy`` or raise."""
    try:
        return FanInPolicy(str(raw))
    except ValueError:
        valid = ", ".join(p.value for p in FanInPolicy)
        msg = f"Invalid fan_in {raw!r} (valid: {valid})"
        raise ConfigurationError(msg) from None
