"""Guardrail policy: interpret an evaluator result for the calling pipeline.

The evaluator only reports; it never gates content. This module holds the
caller-side decision that thresholds `pii_risk` into an action, keeping the
scoring and enforcement concerns separate and independently testable.

Actions:
  - "allow": risk below the flag threshold.
  - "flag":  risk at/above the flag threshold but below the block threshold.
  - "block": risk at/above the block threshold.

Example:
  from pii_blocker.guardrails.evaluator import evaluate
  from pii_blocker.guardrails.policy import PolicyEngine

  engine = PolicyEngine()
  engine.decide(evaluate("Email me at alice@example.com")).action
  # -> "flag"
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Literal, Mapping, Union

Action = Literal["allow", "flag", "block"]


@dataclass(frozen=True)
class Decision:
    """Outcome of applying the policy to one result.

    Attributes:
      action: "allow", "flag" or "block".
      pii_risk: The risk score the decision was based on.
      categories: Categories with a non-zero count, in result order.
    """

    action: Action
    pii_risk: float
    categories: List[str]


def matched_categories(result: Mapping[str, Union[int, float]]) -> List[str]:
    """List categories with at least one match.

    Args:
      result: An evaluator result mapping.

    Returns:
      Category names (without the ``_count`` suffix), in result order.
    """
    return [
        key[: -len("_count")]
        for key, value in result.items()
        if key.endswith("_count") and key != "total_pii_count" and value > 0
    ]


class PolicyEngine:
    """Threshold policy over `pii_risk`.

    Attributes:
      flag_threshold: Minimum risk that flags content.
      block_threshold: Minimum risk that blocks content.

    Raises:
      ValueError: Unless ``0 <= flag_threshold <= block_threshold <= 1``.
    """

    def __init__(self, flag_threshold: float = 0.25, block_threshold: float = 1.0) -> None:
        if not (0.0 <= flag_threshold <= block_threshold <= 1.0):
            raise ValueError(
                "Thresholds must satisfy 0 <= flag <= block <= 1 "
                f"(got flag={flag_threshold}, block={block_threshold})"
            )
        self.flag_threshold = flag_threshold
        self.block_threshold = block_threshold

    def decide(self, result: Mapping[str, Union[int, float]]) -> Decision:
        """Map an evaluator result to an action.

        Args:
          result: Output of `evaluate`.

        Returns:
          A `Decision`. A zero-risk result is always allowed, even when the
          flag threshold is 0.

        Examples:
          >>> PolicyEngine().decide({"pii_risk": 1.0, "total_pii_count": 4}).action
          'block'
          >>> PolicyEngine().decide({"pii_risk": 0.0, "total_pii_count": 0}).action
          'allow'
        """
        risk = float(result["pii_risk"])
        if risk > 0.0 and risk >= self.block_threshold:
            action: Action = "block"
        elif risk > 0.0 and risk >= self.flag_threshold:
            action = "flag"
        else:
            action = "allow"
        return Decision(action=action, pii_risk=risk, categories=matched_categories(result))
