"""Request-inspection pipeline wrapping the PII evaluator.

Overview:
  The evaluator is pure; this stage is where the guardrail meets the outside
  world. It runs the evaluator, applies the policy decision and reports
  observability signals, without ever logging or exporting the scanned text.

Strategy:
  - Evaluate the payload (text or structured) with a shared `PIIEvaluator`.
  - Threshold the result with a `PolicyEngine`.
  - Observability: one OTel span per inspection, request/match counters and
    a latency histogram.

Example:
  pipeline = InspectionPipeline()
  out = pipeline.run({"note": "call 555-123-4567"})
  out["decision"].action
  # -> "flag"
"""
from __future__ import annotations

import logging
import time
from typing import Any, Dict

from pii_blocker.guardrails.evaluator import PIIEvaluator
from pii_blocker.guardrails.policy import PolicyEngine
from pii_blocker.obs.otel import (
    pii_inspect_latency_ms,
    pii_inspections_total,
    pii_matches_total,
    tracer,
)

logger = logging.getLogger(__name__)


class InspectionPipeline:
    """Evaluate-then-decide runner with observability.

    Args:
      evaluator: Configured evaluator; defaults to `PIIEvaluator()`.
      policy: Optional policy engine; defaults to `PolicyEngine()`.
    """

    def __init__(
        self, evaluator: PIIEvaluator | None = None, policy: PolicyEngine | None = None
    ) -> None:
        self.evaluator = evaluator or PIIEvaluator()
        self.policy = policy or PolicyEngine()

    def run(self, payload: Any) -> Dict[str, Any]:
        """Inspect a single payload.

        Args:
          payload: Text or any JSON-serializable value.

        Returns:
          Dict with keys:
            - result (dict): The evaluator result mapping.
            - decision (Decision): Policy outcome for the result.
            - latency_ms (float): Inspection latency in milliseconds.

        Raises:
          InputTooLargeError: If the evaluator's input bound is exceeded.
        """
        with tracer.start_as_current_span("pii_inspect") as span:
            pii_inspections_total.add(1)
            t0 = time.perf_counter()

            result = self.evaluator.evaluate(payload)
            decision = self.policy.decide(result)

            for category in self.evaluator.categories:
                count = result[f"{category}_count"]
                if count:
                    pii_matches_total.add(count, {"category": category})

            latency = (time.perf_counter() - t0) * 1000.0
            pii_inspect_latency_ms.record(latency)
            span.set_attribute("total_pii_count", result["total_pii_count"])
            span.set_attribute("pii_risk", result["pii_risk"])
            span.set_attribute("action", decision.action)
            span.set_attribute("latency_ms", round(latency, 3))

            logger.debug(
                "pii inspection: action=%s total=%d categories=%s",
                decision.action,
                result["total_pii_count"],
                decision.categories,
            )
            return {"result": result, "decision": decision, "latency_ms": round(latency, 3)}
