import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from prometheus_client import make_asgi_app

from chatrelay.api.chat import router as chat_router
from chatrelay.api.health import router as health_router
from chatrelay.config import settings
from chatrelay.providers import ChatCompletionAdapter, ModelDowngradePolicy

# ---------------------------------------------------------------------------
# Structured logging
# ---------------------------------------------------------------------------
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        structlog.stdlib.NAME_TO_LEVEL.get(settings.log_level.lower(), 20)
    ),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)

log = structlog.get_logger()

# ---------------------------------------------------------------------------
# OpenTelemetry
# ---------------------------------------------------------------------------
resource = Resource.create({"service.name": settings.otel_service_name})
tracer_provider = TracerProvider(resource=resource)
otlp_exporter = OTLPSpanExporter(
    endpoint=f"{settings.otel_exporter_otlp_endpoint}/v1/traces",
)
tracer_provider.add_span_processor(BatchSpanProcessor(otlp_exporter))
trace.set_tracer_provider(tracer_provider)

# ---------------------------------------------------------------------------
# FastAPI application
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Chat Relay",
    version=settings.app_version,
    description=(
        "Relays chat-completion requests to an OpenAI-compatible API and "
        "streams the reply back as plain text."
    ),
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Prometheus metrics endpoint mounted as a sub-application
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)

# Routers
app.include_router(health_router)
app.include_router(chat_router)

# Instrument *after* routes are registered
FastAPIInstrumentor.instrument_app(app, tracer_provider=tracer_provider)


def build_adapter() -> ChatCompletionAdapter:
    """Create the adapter with the server credential injected into its policy."""
    default_api_key = (
        settings.openai_api_key.get_secret_value() if settings.openai_api_key is not None else None
    )
    policy = ModelDowngradePolicy(
        default_api_key=default_api_key,
        premium_prefix=settings.downgrade_premium_prefix,
        fallback_model=settings.downgrade_fallback_model,
        message_threshold=settings.downgrade_message_threshold,
    )
    return ChatCompletionAdapter(policy=policy, timeout=settings.llm_timeout)


# ---------------------------------------------------------------------------
# Lifecycle events
# ---------------------------------------------------------------------------
@app.on_event("startup")
async def _startup() -> None:
    # Shared adapter for every request; get_adapter() reads it from app.state.
    app.state.adapter = build_adapter()

    log.info(
        "Chat relay ready",
        host=settings.host,
        port=settings.port,
        llm_timeout=settings.llm_timeout,
        openai_base_url=settings.openai_base_url,
        shared_key_configured=settings.openai_api_key is not None,
        otel_endpoint=settings.otel_exporter_otlp_endpoint,
    )


@app.on_event("shutdown")
async def _shutdown() -> None:
    log.info("Chat relay shutting down")
    tracer_provider.shutdown()
