"""
Observability setup:
  - OpenTelemetry distributed tracing → Jaeger (via OTLP gRPC), opt-in
  - Prometheus metrics: post creation, post mutations, write retries,
    authentication failures

Metrics are module-level collectors; tracing is configured by ``create_app``
when ``Settings.otel_enabled`` is set.
"""
import logging

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from prometheus_client import Counter

from devlink.config import Settings

logger = logging.getLogger(__name__)

# ─────────────────────────── Prometheus Metrics ───────────────────────────
POSTS_CREATED_TOTAL = Counter(
    "devlink_posts_created_total",
    "Total number of posts created",
)

POST_MUTATIONS_TOTAL = Counter(
    "devlink_post_mutations_total",
    "Like / unlike / comment / uncomment / delete attempts on posts",
    ["operation", "outcome"],  # outcome: 'ok' or the refusing error kind
)

WRITE_RETRIES_TOTAL = Counter(
    "devlink_write_retries_total",
    "Aggregate writes retried after an optimistic-concurrency conflict",
    ["aggregate"],  # 'post' or 'profile'
)

AUTH_FAILURES_TOTAL = Counter(
    "devlink_auth_failures_total",
    "Requests rejected by the token gate",
    ["reason"],  # 'missing' or 'invalid'
)


# ─────────────────────────── OpenTelemetry Setup ──────────────────────────
def setup_tracing(settings: Settings, engine=None) -> None:  # noqa: ANN001
    """Configure the global OTel TracerProvider with OTLP/Jaeger export."""
    resource = Resource.create(
        {
            "service.name": settings.service_name,
            "deployment.environment": settings.environment,
        }
    )

    provider = TracerProvider(resource=resource)

    try:
        otlp_exporter = OTLPSpanExporter(
            endpoint=settings.otel_exporter_otlp_endpoint,
            insecure=True,
        )
        provider.add_span_processor(BatchSpanProcessor(otlp_exporter))
        logger.info(
            "OTel tracing configured → %s", settings.otel_exporter_otlp_endpoint
        )
    except Exception as exc:
        logger.warning("Could not connect to OTLP exporter: %s — traces disabled", exc)

    trace.set_tracer_provider(provider)

    # Auto-instrument the HTTP client and the database driver
    HTTPXClientInstrumentor().instrument()
    if engine is not None:
        SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)


def instrument_app(app) -> None:  # noqa: ANN001
    """Call after app is created to add FastAPI request spans."""
    FastAPIInstrumentor.instrument_app(app)
