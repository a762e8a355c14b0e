"""OpenTelemetry tracing helpers for llm-bridge.

Provides a thin wrapper around the OpenTelemetry API so translation, pricing
and observability code can call ``get_tracer()`` without caring whether the
SDK is installed.  When the SDK is *not* configured the API returns no-op
implementations, so library users pay nothing unless they opt in.

Usage::

    from llm_bridge.utils.telemetry import get_tracer

    _tracer = get_tracer(__name__)

    with _tracer.start_as_current_span("bridge.translate") as span:
        span.set_attribute(ATTR_SOURCE_PROVIDER, "openai")

To activate real tracing, call :func:`configure_telemetry` with enabled
:class:`~llm_bridge.config.TelemetrySettings` once at startup (requires the
``otel`` extra: ``pip install llm-bridge[otel]``).
"""

from __future__ import annotations

from typing import Any

from opentelemetry import trace

from llm_bridge.config import TelemetrySettings

# ---------------------------------------------------------------------------
# Semantic attribute keys used throughout llm-bridge instrumentation
# ---------------------------------------------------------------------------

ATTR_SOURCE_PROVIDER = "bridge.provider.source"
ATTR_TARGET_PROVIDER = "bridge.provider.target"
ATTR_DIALECT = "bridge.dialect"
ATTR_MODEL = "bridge.model"
ATTR_MESSAGE_COUNT = "bridge.messages.count"
ATTR_TOKENS_ORIGINAL = "bridge.tokens.original"
ATTR_TOKENS_FINAL = "bridge.tokens.final"
ATTR_TOKENS_SAVED = "bridge.tokens.saved"
ATTR_COST_SAVED = "bridge.cost.saved"
ATTR_PRICING_SOURCE = "bridge.pricing.source"
ATTR_PRICING_HIT = "bridge.pricing.hit"

_INSTRUMENTATION_NAME = "llm_bridge"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return a :class:`~opentelemetry.trace.Tracer` for *name*.

    If the OpenTelemetry SDK has not been configured the returned tracer
    is a no-op and all spans become no-ops with negligible overhead.
    """
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def configure_telemetry(settings: TelemetrySettings | None = None) -> bool:
    """Install an SDK tracer provider described by *settings*.

    Returns ``False`` (and leaves the no-op provider in place) when
    telemetry is disabled. Requires the ``otel`` extra when enabled.

    Raises
    ------
    ImportError
        If the ``opentelemetry-sdk`` package (or, for OTLP export,
        ``opentelemetry-exporter-otlp``) is not installed.
    """
    settings = settings or TelemetrySettings()
    if not settings.enabled:
        return False

    # The SDK is an optional dependency; suppress type errors from unresolved imports.
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
        from opentelemetry.sdk.trace.export import (  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
            BatchSpanProcessor,
            ConsoleSpanExporter,
            SimpleSpanProcessor,
        )
    except ImportError as exc:
        msg = "opentelemetry-sdk is required for tracing. Install it with: pip install llm-bridge[otel]"
        raise ImportError(msg) from exc

    provider = TracerProvider(resource=Resource.create({"service.name": settings.service_name}))  # pyright: ignore[reportUnknownVariableType,reportUnknownMemberType]
    if settings.export_to_console:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
    if settings.otlp_endpoint:
        provider.add_span_processor(BatchSpanProcessor(_otlp_exporter(settings.otlp_endpoint)))

    trace.set_tracer_provider(provider)  # pyright: ignore[reportUnknownArgumentType]
    return True


def _otlp_exporter(endpoint: str) -> Any:
    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
    except ImportError as exc:
        msg = "opentelemetry-exporter-otlp is required for OTLP export. Install it with: pip install llm-bridge[otel]"
        raise ImportError(msg) from exc
    return OTLPSpanExporter(endpoint=endpoint)
