"""PII evaluator: scan one input value and score its PII exposure.

The evaluator is a pure function of (input, config). It resolves the input to
a single scan string, counts matches per detector category and folds the
counts into a saturating risk score:

  pii_risk = min(1.0, total_pii_count * 0.25)

Structured inputs are scanned through their compact JSON serialization, so PII
anywhere in the value (keys included) is counted. The evaluator never logs,
never mutates its input and keeps no state between calls.

Example:
  from pii_blocker.guardrails.evaluator import evaluate

  evaluate("Contact: john@example.com")
  # -> {"pii_risk": 0.25, "total_pii_count": 1, "ssn_count": 0,
  #     "email_count": 1, ...}
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Collection, Dict, Mapping, Optional, Union

from pii_blocker.guardrails.detectors import build_registry

RISK_PER_MATCH = 0.25

Result = Dict[str, Union[int, float]]


class InputTooLargeError(ValueError):
    """Raised when the scan text exceeds the configured `max_input_chars`."""

    def __init__(self, length: int, limit: int) -> None:
        super().__init__(f"Input of {length} chars exceeds limit of {limit}")
        self.length = length
        self.limit = limit


@dataclass(frozen=True)
class EvaluatorConfig:
    """Tuning knobs for the evaluator. Defaults reproduce baseline behavior.

    Attributes:
      categories: Default categories to enable; `None` enables all of them.
      extra_detectors: Additional ``name -> pattern`` detectors, appended
        after the defaults.
      max_input_chars: Optional bound on scan-text length.
    """

    categories: Optional[Collection[str]] = None
    extra_detectors: Mapping[str, str] = field(default_factory=dict)
    max_input_chars: Optional[int] = None


@dataclass(frozen=True)
class TextInput:
    """Free text, scanned verbatim."""

    text: str

    def scan_text(self) -> str:
        return self.text


@dataclass(frozen=True)
class StructuredInput:
    """Any JSON-serializable value, scanned through its canonical JSON."""

    value: Any

    def scan_text(self) -> str:
        return canonical_text(self.value)


ScanInput = Union[TextInput, StructuredInput]


def canonical_text(value: Any) -> str:
    """Serialize a structured value to compact JSON.

    Serialization errors (cycles, non-JSON types) propagate unchanged.
    """
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def as_scan_input(value: Any) -> ScanInput:
    """Wrap a raw value in the matching input variant."""
    if isinstance(value, (TextInput, StructuredInput)):
        return value
    if isinstance(value, str):
        return TextInput(value)
    return StructuredInput(value)


def risk_score(total: int) -> float:
    """Linear risk that saturates at 1.0 from four matches on."""
    if total <= 0:
        return 0.0
    return min(1.0, total * RISK_PER_MATCH)


class PIIEvaluator:
    """Evaluator bound to a detector registry built once from a config.

    Instances are immutable after construction and safe to share across
    threads.
    """

    def __init__(self, config: EvaluatorConfig | None = None) -> None:
        self.config = config or EvaluatorConfig()
        self.detectors = build_registry(config)

    @property
    def categories(self) -> list[str]:
        return [d.name for d in self.detectors]

    def evaluate(self, value: Any) -> Result:
        """Count PII per category in `value` and compute its risk score.

        Args:
          value: Text, any JSON-serializable value, or a `TextInput` /
            `StructuredInput`.

        Returns:
          A fresh mapping with ``pii_risk``, ``total_pii_count`` and one
          ``"<category>_count"`` entry per active detector.

        Raises:
          InputTooLargeError: If `max_input_chars` is set and exceeded.
          ValueError, TypeError: From JSON serialization of structured input.
        """
        text = as_scan_input(value).scan_text()

        limit = self.config.max_input_chars
        if limit is not None and len(text) > limit:
            raise InputTooLargeError(len(text), limit)

        counts = {f"{d.name}_count": d.count(text) for d in self.detectors}
        total = sum(counts.values())

        result: Result = {"pii_risk": risk_score(total), "total_pii_count": total}
        result.update(counts)
        return result


_DEFAULT_EVALUATOR = PIIEvaluator()


def evaluate(value: Any, config: EvaluatorConfig | None = None) -> Result:
    """Evaluate `value` with the default detectors, or those built from `config`."""
    evaluator = _DEFAULT_EVALUATOR if config is None else PIIEvaluator(config)
    return evaluator.evaluate(value)
