"""OpenTelemetry wiring for traces and metrics.

Design:
- Emit a trace span per inspection (evaluate + policy decision).
- Emit Prometheus-scrapeable metrics via the Collector
  (pii_inspections_total, pii_matches_total, pii_inspect_latency_ms).
- Fail OPEN: with no endpoint configured, or if exporter setup fails, keep the
  service running with no-op providers.
"""
from __future__ import annotations

import logging

from opentelemetry import metrics, trace
from opentelemetry.sdk.resources import Resource

from pii_blocker.config import settings

logger = logging.getLogger(__name__)

# Resource describing this service
resource = Resource.create({"service.name": settings.SERVICE_NAME})

if settings.OTEL_ENDPOINT:
    try:
        from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
        from opentelemetry.sdk.metrics import MeterProvider
        from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor

        # Traces
        _tracer_provider = TracerProvider(resource=resource)
        _tracer_provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.OTEL_ENDPOINT))
        )
        trace.set_tracer_provider(_tracer_provider)

        # Metrics, pushed over OTLP only when an endpoint is configured
        _metric_reader = PeriodicExportingMetricReader(
            OTLPMetricExporter(endpoint=settings.OTEL_ENDPOINT)
        )
        metrics.set_meter_provider(
            MeterProvider(resource=resource, metric_readers=[_metric_reader])
        )
    except Exception:
        logger.warning("OpenTelemetry exporter setup failed; using no-op providers", exc_info=True)

tracer = trace.get_tracer(__name__)
meter = metrics.get_meter(__name__)

# Business metrics (names are stable to ease dashboarding)
pii_inspections_total = meter.create_counter("pii_inspections_total")
pii_matches_total = meter.create_counter("pii_matches_total")
pii_inspect_latency_ms = meter.create_histogram("pii_inspect_latency_ms")
