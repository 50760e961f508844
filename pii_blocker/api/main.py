"""FastAPI application entrypoint.

Overview:
  Small, production-lean API exposing the PII guardrail as a synchronous
  request-inspection stage.

Endpoints:
  - GET /health
      Liveness probe used by the Docker healthcheck.
  - GET /detectors
      Active detector registry (name and pattern per category).
  - POST /evaluate
      Scan one payload and return per-category counts, risk and decision.

Usage:
  curl -s -X POST 'http://localhost:8000/evaluate' \
    -H 'Content-Type: application/json' \
    -d '{"input": {"note": "call 555-123-4567 or email a@b.co"}}'
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Union

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from pii_blocker.config import settings
from pii_blocker.guardrails.evaluator import InputTooLargeError, PIIEvaluator
from pii_blocker.pipelines.inspection import InspectionPipeline

# -----------------------------------------------------------------------------
# Logging
# -----------------------------------------------------------------------------
# Minimal logging setup (for richer logs, wire a JSON formatter).
logging.basicConfig(level=settings.LOG_LEVEL.upper())
logger = logging.getLogger("pii-blocker")

# Build pipeline singletons
evaluator = PIIEvaluator(settings.evaluator_config())
pipeline = InspectionPipeline(evaluator, settings.policy())
logger.info("PII detectors enabled: %s", ", ".join(evaluator.categories))

# -----------------------------------------------------------------------------
# FastAPI app
# -----------------------------------------------------------------------------
app = FastAPI(
    title="PII-Blocker",
    version="0.1.0",
    summary="Regex-based PII guardrail API",
    description=(
        "A minimal API exposing a pattern-matching PII evaluator that reports "
        "per-category counts, an aggregate risk score and a policy decision."
    ),
)


# -----------------------------------------------------------------------------
# Schemas
# -----------------------------------------------------------------------------
class EvaluateIn(BaseModel):
    """Input payload for /evaluate."""

    input: Any = Field(
        ...,
        description="Text to scan verbatim, or any JSON value scanned via its compact JSON form.",
    )


class EvaluateOut(BaseModel):
    """Structured response of /evaluate."""

    result: Dict[str, Union[int, float]] = Field(
        ..., description="pii_risk, total_pii_count and one <category>_count per detector."
    )
    action: str = Field(..., description='Policy decision: "allow", "flag" or "block".')
    categories: List[str] = Field(..., description="Categories with at least one match.")
    latency_ms: float = Field(..., description="Inspection latency in milliseconds.")


class DetectorOut(BaseModel):
    """One active detector."""

    name: str = Field(..., description="Category name.")
    pattern: str = Field(..., description="Pattern source (RE2 syntax).")


class DetectorsOut(BaseModel):
    """Active detector registry, in result order."""

    detectors: List[DetectorOut]


# -----------------------------------------------------------------------------
# Error handling
# -----------------------------------------------------------------------------
@app.exception_handler(InputTooLargeError)
async def input_too_large(request: Request, exc: InputTooLargeError) -> JSONResponse:
    """Translate the evaluator's size bound into HTTP 413."""
    logger.warning("Rejected oversized input: %d chars (limit %d)", exc.length, exc.limit)
    return JSONResponse(status_code=413, content={"detail": str(exc)})


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------
@app.get("/health")
def health() -> dict:
    """Liveness endpoint.

    Returns:
      dict: A simple status payload used by Docker's HEALTHCHECK.
    """
    return {"status": "ok"}


@app.get("/detectors", response_model=DetectorsOut)
def detectors() -> DetectorsOut:
    """List the detectors this instance was configured with."""
    return DetectorsOut(
        detectors=[DetectorOut(name=d.name, pattern=d.source) for d in evaluator.detectors]
    )


@app.post("/evaluate", response_model=EvaluateOut)
def evaluate(body: EvaluateIn) -> EvaluateOut:
    """Scan a payload for PII and report counts, risk and the policy action.

    A JSON string is scanned verbatim; any other JSON value (object, array,
    number, boolean, null) is scanned through its compact JSON serialization.

    Args:
      body: Input payload wrapping the value to scan.

    Returns:
      EvaluateOut: Result mapping plus the policy decision.
    """
    out = pipeline.run(body.input)
    decision = out["decision"]
    return EvaluateOut(
        result=out["result"],
        action=decision.action,
        categories=decision.categories,
        latency_ms=out["latency_ms"],
    )
