"""Tests for the review agent factory."""

from __future__ import annotations

from pydantic_ai import Agent

from lookout.domain.llm.value_objects import ModelConfig
from lookout.infrastructure.llm_providers.factory import (
    create_review_agent,
    model_settings_for,
)
from lookout.shared.types import TokenCount


def _make_config(temperature: float = 0.0, retries: int = 1) -> ModelConfig:
    return ModelConfig(
        model="test",
        max_tokens=TokenCount(2000),
        temperature=temperature,
        retries=retries,
    )


def test_model_settings_carry_token_cap_and_temperature() -> None:
    settings = model_settings_for(_make_config(temperature=0.3))
    assert settings == {"max_tokens": 2000, "temperature": 0.3}


def test_review_agent_produces_text() -> None:
    agent = create_review_agent(_make_config(), system_prompt="Review code.")
    assert isinstance(agent, Agent)
    assert agent.output_type is str


def test_review_agent_sets_system_prompt() -> None:
    prompt = "You are a security reviewer."
    agent = create_review_agent(_make_config(), system_prompt=prompt)
    assert any(prompt in str(p) for p in agent._system_prompts)


def test_review_agent_applies_category_temperature() -> None:
    config = _make_config().with_temperature(0.4)
    agent = create_review_agent(config, system_prompt="x")
    assert agent.model_settings == {"max_tokens": 2000, "temperature": 0.4}
