"""
Telemetry configuration (Metrics & Tracing).
Exposes HTTP metrics next to the domain counters in core.metrics and traces
each recommendation through its parse, discover and rerank stages.
"""
from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from prometheus_fastapi_instrumentator import Instrumentator

from cinemood.config import get_settings

PIPELINE_TRACER = "cinemood.pipeline"

# Probes and the metrics scrape itself stay out of the HTTP histograms
EXCLUDED_HANDLERS = ["/metrics", "/health", "/health/ready", "/docs", "/redoc", "/openapi.json"]


def get_tracer() -> trace.Tracer:
    """Tracer for pipeline stage spans. No-op until a provider is installed."""
    return trace.get_tracer(PIPELINE_TRACER)


def setup_telemetry(app: FastAPI) -> None:
    """
    Wire observability into the app.

    1. Prometheus via /metrics: request instrumentation plus the parser-stage
       and catalog-failure counters, which share the default registry
    2. OpenTelemetry via OTLP: FastAPI request spans with the pipeline stage
       spans nested under them
    """
    settings = get_settings()

    if settings.ENABLE_PROMETHEUS:
        instrumentator = Instrumentator(
            should_group_status_codes=False,
            should_ignore_untemplated=True,
            should_respect_env_var=True,
            should_instrument_requests_inprogress=True,
            excluded_handlers=EXCLUDED_HANDLERS,
            env_var_name="ENABLE_METRICS",
            inprogress_name="cinemood_requests_inprogress",
            inprogress_labels=True,
        )
        instrumentator.instrument(app).expose(app, include_in_schema=False)

    if settings.ENABLE_OTEL:
        resource = Resource.create(attributes={
            "service.name": settings.APP_NAME,
            "service.version": settings.APP_VERSION,
            "deployment.environment": "development" if settings.DEBUG else "production",
            "llm.model": settings.LLM_MODEL,
        })

        provider = TracerProvider(resource=resource)
        # OTLP endpoint comes from OTEL_EXPORTER_OTLP_ENDPOINT (default localhost:4317)
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter()))
        trace.set_tracer_provider(provider)

        FastAPIInstrumentor.instrument_app(
            app,
            tracer_provider=provider,
            excluded_urls=",".join(EXCLUDED_HANDLERS),
        )
