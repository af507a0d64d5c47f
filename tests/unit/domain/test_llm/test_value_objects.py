"""Tests for LLM value objects."""

from __future__ import annotations

from lookout.domain.llm.value_objects import ModelConfig
from lookout.shared.types import TokenCount


def test_model_config_defaults() -> None:
    config = ModelConfig(model="openai:gpt-4o", max_tokens=TokenCount(2000))
    assert config.temperature == 0.0
    assert config.retries == 1


def test_with_temperature_returns_copy() -> None:
    config = ModelConfig(model="openai:gpt-4o", max_tokens=TokenCount(2000))

    warmer = config.with_temperature(0.3)

    assert warmer.temperature == 0.3
    assert warmer.model == config.model
    assert config.temperature == 0.0
