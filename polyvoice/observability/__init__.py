"""Observability module for metrics."""

from polyvoice.observability.metrics import (
    FALLBACK_TOTAL,
    PROVIDER_ERRORS,
    STAGE_LATENCY,
    TURN_DURATION,
    TURN_TOTAL,
    record_fallback,
    record_provider_error,
    record_stage_latency,
    record_turn,
)

__all__ = [
    "TURN_TOTAL",
    "TURN_DURATION",
    "FALLBACK_TOTAL",
    "PROVIDER_ERRORS",
    "STAGE_LATENCY",
    "record_turn",
    "record_stage_latency",
    "record_fallback",
    "record_provider_error",
]
