"""OpenTelemetry configuration for Drama Hub."""

import os
import sys
from typing import Final

from fastapi import FastAPI
from opentelemetry import metrics, trace
from opentelemetry.exporter.prometheus import PrometheusMetricReader
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from prometheus_client import start_http_server

from .infrastructure.database.database import get_main_engine
from .logging_config import get_logger

logger: Final = get_logger(__name__)

METRICS_PORT: Final = int(os.getenv("METRICS_PORT", "8080"))


def telemetry_enabled() -> bool:
    """Opt-in with ENABLE_TELEMETRY=1; never under pytest."""
    if not os.getenv("ENABLE_TELEMETRY"):
        return False
    if "pytest" in sys.modules or os.getenv("TESTING"):
        logger.info("Skipping OpenTelemetry setup during tests")
        return False
    return True


def setup_telemetry(app: FastAPI) -> None:
    """Configure OpenTelemetry tracing and metrics for the FastAPI application."""
    if not telemetry_enabled():
        return

    try:
        prometheus_reader = PrometheusMetricReader()
        metrics.set_meter_provider(MeterProvider(metric_readers=[prometheus_reader]))
        start_http_server(METRICS_PORT)
        logger.info("Prometheus metrics server started", port=METRICS_PORT)
    except OSError as e:
        # Port taken; keep tracing even without the scrape endpoint
        logger.warning(
            "Prometheus metrics server not started", port=METRICS_PORT, error=str(e)
        )

    tracer_provider = TracerProvider()
    # Console exporter until an OTLP collector is deployed
    tracer_provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
    trace.set_tracer_provider(tracer_provider)

    FastAPIInstrumentor.instrument_app(app)
    SQLAlchemyInstrumentor().instrument(engine=get_main_engine())
    logger.info("OpenTelemetry tracing and metrics setup completed")
