"""OpenTelemetry tracing bootstrap for the application wizard."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter
from opentelemetry.sdk.trace.sampling import (
    ALWAYS_OFF,
    ALWAYS_ON,
    ParentBased,
    Sampler,
    TraceIdRatioBased,
)

LOGGER = logging.getLogger("bloom_applications.telemetry")

DEFAULT_SERVICE_NAME = "bloom-applications"
_PROVIDER_MARKER = "_bloom_applications_configured"
_INITIALISED = False


@dataclass(frozen=True)
class OtlpConfig:
    """Exporter settings read from the ``OTEL_EXPORTER_OTLP_*`` variables."""

    endpoint: str
    headers: Mapping[str, str] | None = None
    timeout: int | None = None
    certificate_file: str | None = None


def _parse_headers(raw: str | None) -> Dict[str, str]:
    """Parse ``key=value`` pairs separated by commas."""

    headers: Dict[str, str] = {}
    for fragment in (raw or "").split(","):
        key, sep, value = fragment.partition("=")
        if not sep or not key.strip():
            continue
        headers[key.strip()] = value.strip()
    return headers


def _coerce_ratio(raw: str, *, default: float) -> float:
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        LOGGER.warning("Invalid OTEL_TRACES_SAMPLER_ARG '%s'; using default %.2f", raw, default)
        return default
    return max(0.0, min(1.0, value))


def _build_sampler() -> Sampler:
    """Map ``OTEL_TRACES_SAMPLER`` onto an SDK sampler."""

    name = os.getenv("OTEL_TRACES_SAMPLER", "").strip().lower()
    ratio = _coerce_ratio(os.getenv("OTEL_TRACES_SAMPLER_ARG", "").strip(), default=1.0)
    if name in {"", "parentbased_traceidratio"}:
        return ParentBased(TraceIdRatioBased(ratio))
    if name == "traceidratio":
        return TraceIdRatioBased(ratio)
    if name == "always_on":
        return ALWAYS_ON
    if name == "always_off":
        return ALWAYS_OFF
    LOGGER.warning("Unknown OTEL_TRACES_SAMPLER '%s'; defaulting to parentbased_traceidratio", name)
    return ParentBased(TraceIdRatioBased(ratio))


def _build_otlp_config() -> OtlpConfig | None:
    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "").strip()
    if not endpoint:
        LOGGER.info("OTLP endpoint not configured; spans will not be exported")
        return None
    protocol = os.getenv("OTEL_EXPORTER_OTLP_PROTOCOL", "http/protobuf").strip().lower()
    if protocol not in {"http", "http/protobuf"}:
        LOGGER.warning("Unsupported OTEL_EXPORTER_OTLP_PROTOCOL '%s'; using http/protobuf", protocol)

    timeout: Optional[int] = None
    timeout_raw = os.getenv("OTEL_EXPORTER_OTLP_TIMEOUT", "").strip()
    if timeout_raw:
        try:
            timeout = int(float(timeout_raw))
        except ValueError:
            LOGGER.warning("Invalid OTEL_EXPORTER_OTLP_TIMEOUT '%s'; ignoring", timeout_raw)

    return OtlpConfig(
        endpoint=endpoint,
        headers=_parse_headers(os.getenv("OTEL_EXPORTER_OTLP_HEADERS")) or None,
        timeout=timeout,
        certificate_file=os.getenv("OTEL_EXPORTER_OTLP_CERTIFICATE", "").strip() or None,
    )


def _create_exporter() -> Optional[SpanExporter]:
    config = _build_otlp_config()
    if config is None:
        return None

    from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

    return OTLPSpanExporter(
        endpoint=config.endpoint,
        headers=dict(config.headers) if config.headers else None,
        timeout=config.timeout,
        certificate_file=config.certificate_file,
    )


def setup_tracing(*, force: bool = False) -> bool:
    """Install a global tracer provider when an OTLP endpoint is configured.

    Returns ``True`` when a provider was installed by this call.
    """

    global _INITIALISED
    if _INITIALISED and not force:
        return False

    if os.getenv("OTEL_TRACES_ENABLED", "1").strip().lower() in {"0", "false", "off"}:
        LOGGER.info("Telemetry disabled via OTEL_TRACES_ENABLED")
        return False

    exporter = _create_exporter()
    if exporter is None:
        return False

    if not force and getattr(trace.get_tracer_provider(), _PROVIDER_MARKER, False):
        LOGGER.debug("Tracer provider already configured; skipping setup")
        return False

    service_name = os.getenv("OTEL_SERVICE_NAME", DEFAULT_SERVICE_NAME)
    provider = TracerProvider(
        resource=Resource.create({"service.name": service_name}),
        sampler=_build_sampler(),
    )
    provider.add_span_processor(BatchSpanProcessor(exporter))
    setattr(provider, _PROVIDER_MARKER, True)
    trace.set_tracer_provider(provider)

    _INITIALISED = True
    LOGGER.info("OpenTelemetry tracing initialised for service '%s'", service_name)
    return True


__all__ = ["DEFAULT_SERVICE_NAME", "OtlpConfig", "setup_tracing"]
