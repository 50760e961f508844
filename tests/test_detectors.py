"""Detector-level tests: pattern shapes, boundaries and registry building.

These tests exercise:
  - Each default category against matching and near-miss shapes.
  - Non-overlapping match counting.
  - `build_registry` filtering, extension and configuration errors.

Run:
  pytest -q
"""
from __future__ import annotations

import dataclasses

import pytest

from pii_blocker.guardrails.detectors import (
    DEFAULT_CATEGORIES,
    DEFAULT_DETECTORS,
    build_registry,
    compile_detector,
)
from pii_blocker.guardrails.evaluator import EvaluatorConfig

BY_NAME = {d.name: d for d in DEFAULT_DETECTORS}


def test_default_categories_order() -> None:
    """Default categories come in the documented result order."""
    assert DEFAULT_CATEGORIES == ("ssn", "email", "phone", "credit_card", "dob", "ip_address")


@pytest.mark.parametrize(
    "category, text, expected",
    [
        ("ssn", "123-45-6789", 1),
        ("ssn", "123456789", 0),
        ("ssn", "123 45 6789", 0),
        ("ssn", "1234-56-7890", 0),
        ("email", "john@example.com", 1),
        ("email", "JOHN@EXAMPLE.COM", 1),
        ("email", "first.last+tag@sub.example.org", 1),
        ("email", "user@localhost", 0),
        ("email", "a@b.c", 0),
        ("phone", "555-123-4567", 1),
        ("phone", "555.123.4567", 1),
        ("phone", "(555) 123-4567", 1),
        ("phone", "5551234567", 1),
        ("phone", "555\v123\v4567", 1),
        ("phone", "555\u00a0123\u00a04567", 1),
        ("phone", "555\u2009123\u20094567", 1),
        ("phone", "555\u3000123\u30004567", 1),
        ("phone", "555_123_4567", 0),
        ("phone", "555-1234", 0),
        ("credit_card", "4111-1111-1111-1111", 1),
        ("credit_card", "4111 1111 1111 1111", 1),
        ("credit_card", "4111111111111111", 1),
        ("credit_card", "4111 1111-1111 1111", 1),
        ("credit_card", "4111 1111 1111", 0),
        ("dob", "04/12/1990", 1),
        ("dob", "02/30/2020", 1),
        ("dob", "12/31/2099", 1),
        ("dob", "13/01/2000", 0),
        ("dob", "12/32/2000", 0),
        ("dob", "12/31/1899", 0),
        ("dob", "1/5/2000", 0),
        ("ip_address", "10.0.0.1", 1),
        ("ip_address", "999.999.999.999", 1),
        ("ip_address", "1.2.3", 0),
    ],
)
def test_detector_shapes(category: str, text: str, expected: int) -> None:
    """Each detector matches its documented shape and rejects near misses."""
    assert BY_NAME[category].count(text) == expected


def test_counts_are_non_overlapping_and_global() -> None:
    """All matches in the text are counted, not just the first."""
    assert BY_NAME["email"].count("a@b.co, c@d.io and e@f.org") == 3
    assert BY_NAME["ssn"].count("123-45-6789 123-45-6789") == 2


def test_digit_class_is_ascii_only() -> None:
    """Non-ASCII digits never satisfy the digit class."""
    assert BY_NAME["ssn"].count("١٢٣-٤٥-٦٧٨٩") == 0


def test_detectors_are_immutable() -> None:
    """Detectors are frozen value objects."""
    with pytest.raises(dataclasses.FrozenInstanceError):
        BY_NAME["ssn"].name = "other"  # type: ignore[misc]


def test_detector_source_exposes_pattern() -> None:
    """The pattern source is available for introspection."""
    assert BY_NAME["ssn"].source == r"\b\d{3}-\d{2}-\d{4}\b"


def test_build_registry_defaults() -> None:
    """No config (or an empty one) yields the default detector set."""
    assert build_registry(None) is DEFAULT_DETECTORS
    assert [d.name for d in build_registry(EvaluatorConfig())] == list(DEFAULT_CATEGORIES)


def test_build_registry_filters_in_default_order() -> None:
    """Enabled categories keep the default ordering regardless of input order."""
    registry = build_registry(EvaluatorConfig(categories=["email", "ssn"]))
    assert [d.name for d in registry] == ["ssn", "email"]


def test_build_registry_appends_extra_detectors() -> None:
    """Extra detectors follow the defaults and are compiled."""
    registry = build_registry(EvaluatorConfig(extra_detectors={"zip_code": r"\b\d{5}\b"}))
    assert [d.name for d in registry][-1] == "zip_code"
    assert registry[-1].count("zip 94103") == 1


@pytest.mark.parametrize(
    "config, message",
    [
        (EvaluatorConfig(categories=["email", "passport"]), "Unknown PII categories"),
        (EvaluatorConfig(extra_detectors={"ssn": r"\d+"}), "already in use"),
        (EvaluatorConfig(extra_detectors={"total_pii": r"xyz"}), "reserved"),
        (EvaluatorConfig(extra_detectors={"bad-name": r"\d+"}), "Invalid detector name"),
        (EvaluatorConfig(extra_detectors={"": r"\d+"}), "Invalid detector name"),
        (EvaluatorConfig(extra_detectors={"echo": r"(a)\1"}), "Invalid pattern"),
    ],
)
def test_build_registry_rejects_bad_config(config: EvaluatorConfig, message: str) -> None:
    """Configuration errors surface as ValueError at construction time."""
    with pytest.raises(ValueError, match=message):
        build_registry(config)


def test_compile_detector_rejects_lookaround() -> None:
    """Constructs outside the linear-time engine's syntax are rejected."""
    with pytest.raises(ValueError):
        compile_detector("lookahead", r"\d(?=x)")
