"""Settings tests: environment parsing, validation and derived objects."""
from __future__ import annotations

import pytest

from pii_blocker.config import load_settings
from pii_blocker.guardrails.evaluator import EvaluatorConfig


def test_defaults() -> None:
    """An empty environment yields baseline behavior and no telemetry export."""
    s = load_settings({})
    assert s.SERVICE_NAME == "pii-blocker"
    assert s.LOG_LEVEL == "INFO"
    assert s.OTEL_ENDPOINT is None
    assert s.PII_CATEGORIES is None
    assert s.PII_MAX_INPUT_CHARS is None
    assert s.evaluator_config() == EvaluatorConfig()
    policy = s.policy()
    assert (policy.flag_threshold, policy.block_threshold) == (0.25, 1.0)


def test_overrides() -> None:
    s = load_settings(
        {
            "PII_CATEGORIES": " email, ssn ,",
            "PII_MAX_INPUT_CHARS": "4096",
            "PII_FLAG_THRESHOLD": "0.5",
            "PII_BLOCK_THRESHOLD": "0.75",
            "LOG_LEVEL": "debug",
            "OTEL_EXPORTER_OTLP_ENDPOINT": "",
        }
    )
    assert s.PII_CATEGORIES == ("email", "ssn")
    assert s.OTEL_ENDPOINT is None
    config = s.evaluator_config()
    assert config.categories == ("email", "ssn")
    assert config.max_input_chars == 4096
    assert s.policy().block_threshold == 0.75


@pytest.mark.parametrize(
    "env",
    [
        {"LOG_LEVEL": "TRACE"},
        {"PII_CATEGORIES": "email,passport"},
        {"PII_MAX_INPUT_CHARS": "0"},
        {"PII_MAX_INPUT_CHARS": "lots"},
        {"PII_FLAG_THRESHOLD": "0.9", "PII_BLOCK_THRESHOLD": "0.5"},
        {"PII_BLOCK_THRESHOLD": "2"},
    ],
)
def test_invalid_settings(env: dict) -> None:
    """Misconfiguration fails fast with ValueError."""
    with pytest.raises(ValueError):
        load_settings(env)
