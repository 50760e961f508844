"""Centralized runtime configuration.

Environment-backed settings for the PII guardrail service, with a thin
validation layer. Misconfiguration (bad thresholds, unknown categories,
non-numeric limits) fails at import time instead of on the first request.

Notes:
  - Optional keys do not hard-fail; unset means "baseline behavior".
  - Keep this module import-safe (no heavy imports, no I/O).

Example:
  from pii_blocker.config import settings
  evaluator = PIIEvaluator(settings.evaluator_config())
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from pii_blocker.guardrails.detectors import DEFAULT_CATEGORIES
from pii_blocker.guardrails.evaluator import EvaluatorConfig
from pii_blocker.guardrails.policy import PolicyEngine


@dataclass(frozen=True)
class Settings:
    """Immutable application settings.

    Attributes:
      SERVICE_NAME: Logical service name used in traces/metrics.
      LOG_LEVEL: Application log level (DEBUG, INFO, WARN, or ERROR).
      OTEL_ENDPOINT: OTLP gRPC endpoint; `None` disables exporting.

      PII_CATEGORIES: Enabled detector categories; `None` enables all.
      PII_MAX_INPUT_CHARS: Optional bound on scan-text length.
      PII_FLAG_THRESHOLD: Risk at/above which content is flagged.
      PII_BLOCK_THRESHOLD: Risk at/above which content is blocked.
    """

    # Observability
    SERVICE_NAME: str
    LOG_LEVEL: str
    OTEL_ENDPOINT: Optional[str]

    # Guardrail
    PII_CATEGORIES: Optional[Tuple[str, ...]]
    PII_MAX_INPUT_CHARS: Optional[int]
    PII_FLAG_THRESHOLD: float
    PII_BLOCK_THRESHOLD: float

    def validate(self) -> "Settings":
        """Perform lightweight validation to catch common misconfigurations.

        Returns:
          Settings: The same settings instance if validation succeeds.

        Raises:
          ValueError: If `LOG_LEVEL` is not one of {"DEBUG","INFO","WARN","ERROR"}.
          ValueError: If `PII_CATEGORIES` names an unknown category.
          ValueError: If `PII_MAX_INPUT_CHARS` is not positive.
          ValueError: If the thresholds are not ordered within [0, 1].
        """
        lvl = self.LOG_LEVEL.upper()
        if lvl not in {"DEBUG", "INFO", "WARN", "ERROR"}:
            raise ValueError(f"Invalid LOG_LEVEL: {self.LOG_LEVEL}")
        if self.PII_CATEGORIES is not None:
            unknown = sorted(set(self.PII_CATEGORIES) - set(DEFAULT_CATEGORIES))
            if unknown:
                raise ValueError(f"Unknown PII_CATEGORIES: {', '.join(unknown)}")
        if self.PII_MAX_INPUT_CHARS is not None and self.PII_MAX_INPUT_CHARS <= 0:
            raise ValueError("PII_MAX_INPUT_CHARS must be a positive integer")
        if not (0.0 <= self.PII_FLAG_THRESHOLD <= self.PII_BLOCK_THRESHOLD <= 1.0):
            raise ValueError("PII thresholds must satisfy 0 <= flag <= block <= 1")
        return self

    def evaluator_config(self) -> EvaluatorConfig:
        """Build the evaluator configuration described by these settings."""
        return EvaluatorConfig(
            categories=self.PII_CATEGORIES,
            max_input_chars=self.PII_MAX_INPUT_CHARS,
        )

    def policy(self) -> PolicyEngine:
        """Build the policy engine described by these settings."""
        return PolicyEngine(
            flag_threshold=self.PII_FLAG_THRESHOLD,
            block_threshold=self.PII_BLOCK_THRESHOLD,
        )


def _split_csv(raw: Optional[str]) -> Optional[Tuple[str, ...]]:
    if raw is None or not raw.strip():
        return None
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def _optional_int(raw: Optional[str]) -> Optional[int]:
    if raw is None or not raw.strip():
        return None
    return int(raw)


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Load settings from environment variables and validate them.

    Args:
      environ: Mapping to read from; defaults to `os.environ`.

    Returns:
      Settings: A validated `Settings` instance.

    Raises:
      ValueError: On malformed numbers or failed validation.
    """
    env = os.environ if environ is None else environ
    return Settings(
        SERVICE_NAME=env.get("SERVICE_NAME", "pii-blocker"),
        LOG_LEVEL=env.get("LOG_LEVEL", "INFO"),
        OTEL_ENDPOINT=env.get("OTEL_EXPORTER_OTLP_ENDPOINT") or None,
        PII_CATEGORIES=_split_csv(env.get("PII_CATEGORIES")),
        PII_MAX_INPUT_CHARS=_optional_int(env.get("PII_MAX_INPUT_CHARS")),
        PII_FLAG_THRESHOLD=float(env.get("PII_FLAG_THRESHOLD", "0.25")),
        PII_BLOCK_THRESHOLD=float(env.get("PII_BLOCK_THRESHOLD", "1.0")),
    ).validate()


# Singleton-like instance used across modules
settings = load_settings()
