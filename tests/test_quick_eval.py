"""Quick-eval script helpers: percentile and summary math (no network)."""
from __future__ import annotations

import importlib.util
import sys
from pathlib import Path

import pytest

_SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "quick_eval.py"
_spec = importlib.util.spec_from_file_location("quick_eval", _SCRIPT)
quick_eval = importlib.util.module_from_spec(_spec)
sys.modules[_spec.name] = quick_eval
_spec.loader.exec_module(quick_eval)


def _result(correct: bool, server_ms=None, client_ms: float = 5.0, ok: bool = True):
    return quick_eval.CaseResult(
        ts_iso="2024-01-01T00:00:00+00:00",
        case_index=0,
        status_code=200 if ok else 500,
        ok=ok,
        correct=correct,
        expected_total=1,
        actual_total=1 if correct else 0,
        action="flag",
        client_latency_ms=client_ms,
        server_latency_ms=server_ms,
        error=None if ok else "http_500",
        raw_response=None,
    )


def test_p95_single_point() -> None:
    assert quick_eval.p95([3.5]) == 3.5


def test_p95_interpolates_inclusive() -> None:
    # 0..20: the 95th inclusive percentile lands exactly on 19
    assert quick_eval.p95([float(i) for i in range(21)]) == pytest.approx(19.0)


def test_summarize_empty() -> None:
    assert quick_eval.summarize([]) == {"n": 0, "ok_rate": 0.0, "accuracy": 0.0}


def test_summarize_prefers_server_latency() -> None:
    results = [
        _result(True, server_ms=2.0),
        _result(False, server_ms=None, client_ms=4.0),
        _result(False, ok=False, client_ms=100.0),
    ]
    summary = quick_eval.summarize(results)
    assert summary["n"] == 3
    assert summary["ok_rate"] == round(2 / 3, 4)
    assert summary["accuracy"] == round(1 / 3, 4)
    assert summary["latency_mean_ms"] == 3.0
    assert summary["latency_p50_ms"] == 3.0
