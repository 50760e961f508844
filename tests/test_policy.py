"""Policy tests: thresholding evaluator results into actions."""
from __future__ import annotations

import pytest

from pii_blocker.guardrails.evaluator import evaluate
from pii_blocker.guardrails.policy import Decision, PolicyEngine, matched_categories


def test_default_policy_actions() -> None:
    """Defaults: any PII flags, saturated risk blocks."""
    engine = PolicyEngine()
    assert engine.decide(evaluate("no sensitive data here")) == Decision("allow", 0.0, [])
    assert engine.decide(evaluate("Contact: john@example.com")) == Decision("flag", 0.25, ["email"])
    blocked = engine.decide(evaluate("a@b.co c@d.io e@f.org 123-45-6789"))
    assert blocked.action == "block"
    assert blocked.categories == ["ssn", "email"]


@pytest.mark.parametrize(
    "risk, action",
    [(0.0, "allow"), (0.25, "allow"), (0.5, "flag"), (0.75, "block"), (1.0, "block")],
)
def test_custom_thresholds(risk: float, action: str) -> None:
    """Thresholds are inclusive lower bounds."""
    engine = PolicyEngine(flag_threshold=0.5, block_threshold=0.75)
    assert engine.decide({"pii_risk": risk, "total_pii_count": int(risk * 4)}).action == action


def test_zero_risk_is_always_allowed() -> None:
    engine = PolicyEngine(flag_threshold=0.0, block_threshold=0.0)
    assert engine.decide({"pii_risk": 0.0, "total_pii_count": 0}).action == "allow"
    assert engine.decide({"pii_risk": 0.25, "total_pii_count": 1}).action == "block"


@pytest.mark.parametrize("flag, block", [(0.8, 0.5), (-0.1, 1.0), (0.2, 1.5)])
def test_invalid_thresholds(flag: float, block: float) -> None:
    with pytest.raises(ValueError):
        PolicyEngine(flag_threshold=flag, block_threshold=block)


def test_matched_categories_keeps_result_order() -> None:
    result = evaluate("SSN 123-45-6789, DOB 04/12/1990")
    assert matched_categories(result) == ["ssn", "dob"]
    assert matched_categories({"pii_risk": 0.0, "total_pii_count": 0}) == []
