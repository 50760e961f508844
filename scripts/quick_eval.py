#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Lightweight accuracy and latency check for the PII-Blocker API.

Replays a set of labelled payloads against `/evaluate` and writes verifiable
artifacts:
  - <out_dir>/<stamp>_quick_eval_summary.csv
  - <out_dir>/<stamp>_quick_eval_responses.jsonl

Each case carries the expected `total_pii_count`; a case passes when the
server agrees. Latency prefers the server-reported `latency_ms` and falls back
to client timing.

Usage:
  python scripts/quick_eval.py \
    --base-url http://localhost:8000 \
    --repeat 3 \
    --out-dir docs/artifacts

Cases file format (JSON Lines, optional):
  {"input": "SSN 123-45-6789", "expected_total": 1}

Requirements:
  - requests>=2.31
"""

from __future__ import annotations

import argparse
import csv
import dataclasses
import json
import logging
import statistics as stats
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import requests

# --------------------------- Data models -------------------------------------


@dataclasses.dataclass(frozen=True)
class Case:
    """A labelled payload."""

    input: Any
    expected_total: int


@dataclasses.dataclass(frozen=True)
class CaseResult:
    """Container for a single request outcome."""

    ts_iso: str
    case_index: int
    status_code: int
    ok: bool
    correct: bool
    expected_total: int
    actual_total: Optional[int]
    action: Optional[str]
    client_latency_ms: float
    server_latency_ms: Optional[float]
    error: Optional[str]
    raw_response: Optional[Mapping[str, Any]]


DEFAULT_CASES: List[Case] = [
    Case("Contact: john@example.com", 1),
    Case("SSN 123-45-6789, DOB 04/12/1990", 2),
    Case("no sensitive data here", 0),
    Case({"note": "call 555-123-4567 or email a@b.co"}, 2),
    Case("card 4111 1111 1111 1111 from 10.0.0.1", 2),
    Case(["a@b.co", "c@d.io", "123-45-6789", "01/01/2000", "(555) 123-4567"], 5),
]

# --------------------------- Helpers -----------------------------------------


def p95(values: Sequence[float]) -> float:
    """95th percentile of a non-empty sample (the value itself for one point)."""
    if len(values) == 1:
        return float(values[0])
    return stats.quantiles(values, n=20, method="inclusive")[-1]


def load_cases(path: Optional[Path]) -> List[Case]:
    """Loads cases from a JSON Lines file or returns the built-in set."""
    if path is None:
        return DEFAULT_CASES
    cases: List[Case] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        if not line.strip():
            continue
        rec = json.loads(line)
        cases.append(Case(input=rec["input"], expected_total=int(rec["expected_total"])))
    return cases or DEFAULT_CASES


def post_with_retry(
    session: requests.Session,
    url: str,
    json_body: Mapping[str, Any],
    *,
    timeout: float = 10.0,
    max_retries: int = 2,
    backoff_sec: float = 0.5,
) -> requests.Response:
    """POSTs with simple retries and exponential backoff on network errors."""
    for attempt in range(max_retries + 1):
        try:
            return session.post(url, json=json_body, timeout=timeout)
        except requests.RequestException as exc:
            if attempt == max_retries:
                raise
            sleep_for = backoff_sec * (2**attempt)
            logging.warning("Request failed (%s). Retrying in %.2fs...", exc.__class__.__name__, sleep_for)
            time.sleep(sleep_for)
    raise RuntimeError("post_with_retry: reached unexpected control path")


def run_case(session: requests.Session, base_url: str, index: int, case: Case, timeout: float) -> CaseResult:
    """Runs one /evaluate call and compares the total against the label."""
    url = f"{base_url.rstrip('/')}/evaluate"
    t0 = time.perf_counter()
    try:
        resp = post_with_retry(session, url, {"input": case.input}, timeout=timeout, max_retries=1)
    except requests.RequestException as exc:
        return CaseResult(
            ts_iso=datetime.now(timezone.utc).isoformat(timespec="seconds"),
            case_index=index,
            status_code=-1,
            ok=False,
            correct=False,
            expected_total=case.expected_total,
            actual_total=None,
            action=None,
            client_latency_ms=(time.perf_counter() - t0) * 1000.0,
            server_latency_ms=None,
            error=f"exception:{exc.__class__.__name__}",
            raw_response=None,
        )

    client_latency_ms = (time.perf_counter() - t0) * 1000.0
    ok = 200 <= resp.status_code < 300
    raw: Optional[Dict[str, Any]] = None
    actual: Optional[int] = None
    action: Optional[str] = None
    server_latency_ms: Optional[float] = None
    err: Optional[str] = None

    if ok:
        try:
            raw = resp.json()
            actual = int(raw["result"]["total_pii_count"])
            action = raw.get("action")
            server_latency_ms = float(raw["latency_ms"])
        except (ValueError, KeyError, TypeError) as parse_exc:
            ok = False
            err = f"response_parse_error: {parse_exc}"
    else:
        err = f"http_{resp.status_code}"

    return CaseResult(
        ts_iso=datetime.now(timezone.utc).isoformat(timespec="seconds"),
        case_index=index,
        status_code=resp.status_code,
        ok=ok,
        correct=ok and actual == case.expected_total,
        expected_total=case.expected_total,
        actual_total=actual,
        action=action,
        client_latency_ms=client_latency_ms,
        server_latency_ms=server_latency_ms,
        error=err,
        raw_response=raw,
    )


def summarize(results: Sequence[CaseResult]) -> Dict[str, Any]:
    """Builds accuracy and latency summary across all results."""
    n = len(results)
    if not n:
        return {"n": 0, "ok_rate": 0.0, "accuracy": 0.0}
    latencies = [
        r.server_latency_ms if r.server_latency_ms is not None else r.client_latency_ms
        for r in results
        if r.ok
    ]
    summary: Dict[str, Any] = {
        "n": n,
        "ok_rate": round(sum(r.ok for r in results) / n, 4),
        "accuracy": round(sum(r.correct for r in results) / n, 4),
    }
    if latencies:
        summary.update(
            latency_mean_ms=round(stats.fmean(latencies), 3),
            latency_p50_ms=round(stats.median(latencies), 3),
            latency_p95_ms=round(p95(latencies), 3),
        )
    return summary


def write_artifacts(out_dir: Path, stamp: str, results: Sequence[CaseResult], base_url: str) -> Tuple[Path, Path]:
    """Writes the summary CSV and JSONL responses.

    Returns:
      Tuple of (summary_csv_path, responses_jsonl_path).
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    summary_path = out_dir / f"{stamp}_quick_eval_summary.csv"
    jsonl_path = out_dir / f"{stamp}_quick_eval_responses.jsonl"

    row = {**summarize(results), "base_url": base_url, "stamp": stamp}
    with summary_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=list(row))
        writer.writeheader()
        writer.writerow(row)

    with jsonl_path.open("w", encoding="utf-8") as f:
        for r in results:
            f.write(json.dumps(dataclasses.asdict(r), ensure_ascii=False) + "\n")

    return summary_path, jsonl_path


# --------------------------- CLI / Main --------------------------------------


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parses command-line arguments."""
    p = argparse.ArgumentParser(description="Quick accuracy/latency check for PII-Blocker.")
    p.add_argument("--base-url", default="http://localhost:8000", help="API base URL (default: %(default)s)")
    p.add_argument("--repeat", type=int, default=3, help="Repeat each case N times (default: %(default)s)")
    p.add_argument("--cases-file", type=Path, default=None, help="Optional JSON Lines file of labelled cases.")
    p.add_argument("--timeout", type=float, default=10.0, help="Per-request timeout in seconds (default: %(default)s)")
    p.add_argument("--out-dir", type=Path, default=Path("docs/artifacts"), help="Directory for artifacts (default: %(default)s)")
    p.add_argument("--verbose", action="store_true", help="Enable info-level logging.")
    return p.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point. Exits non-zero when any case is answered incorrectly."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)s | %(message)s",
    )

    cases = load_cases(args.cases_file)
    stamp = time.strftime("%Y%m%d-%H%M%S", time.gmtime())
    session = requests.Session()
    results: List[CaseResult] = []

    logging.info("Starting quick eval | base_url=%s cases=%d repeat=%d", args.base_url, len(cases), args.repeat)
    try:
        for i, case in enumerate(cases):
            for _ in range(args.repeat):
                r = run_case(session, args.base_url, i, case, args.timeout)
                results.append(r)
                sys.stdout.write("." if r.correct else "x")
                sys.stdout.flush()
        sys.stdout.write("\n")
    except KeyboardInterrupt:
        print("\nInterrupted by user; writing partial results...")

    summary_path, jsonl_path = write_artifacts(args.out_dir, stamp, results, args.base_url)

    summary = summarize(results)
    print("\n=== Quick Eval Summary ===")
    print(" ".join(f"{k}={v}" for k, v in summary.items()))
    print(f"\nArtifacts:\n- {summary_path}\n- {jsonl_path}\n")

    return 0 if results and all(r.correct for r in results) else 1


if __name__ == "__main__":
    raise SystemExit(main())
