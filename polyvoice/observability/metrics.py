"""Prometheus metrics for polyvoice conversation turns.

Counts turn outcomes and absorbed fallbacks and times each stage.
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram, generate_latest

# =============================================================================
# Counters
# =============================================================================

TURN_TOTAL = Counter(
    "polyvoice_turn_total",
    "Conversation turns by outcome",
    ["outcome"],
)

FALLBACK_TOTAL = Counter(
    "polyvoice_fallback_total",
    "Stage failures absorbed by a local fallback or canned reply",
    ["stage", "provider"],
)

PROVIDER_ERRORS = Counter(
    "polyvoice_provider_errors_total",
    "Provider calls that raised",
    ["stage", "provider"],
)

# =============================================================================
# Histograms
# =============================================================================

STAGE_LATENCY = Histogram(
    "polyvoice_stage_latency_seconds",
    "Wall time spent in each pipeline stage",
    ["stage"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.0, 3.0, 5.0, 10.0, 30.0, 60.0],
)

TURN_DURATION = Histogram(
    "polyvoice_turn_duration_seconds",
    "Processing time of a full turn (transcribe to playback)",
    buckets=[0.5, 1.0, 2.0, 3.0, 5.0, 10.0, 20.0, 60.0, 120.0],
)

# =============================================================================
# Helper Functions
# =============================================================================


def record_turn(outcome: str, duration_seconds: float) -> None:
    """Record a finished turn.

    Args:
        outcome: completed, errored or cancelled
        duration_seconds: Processing time of the turn
    """
    TURN_TOTAL.labels(outcome=outcome).inc()
    TURN_DURATION.observe(duration_seconds)


def record_stage_latency(stage: str, seconds: float) -> None:
    STAGE_LATENCY.labels(stage=stage).observe(seconds)


def record_fallback(stage: str, provider: str) -> None:
    FALLBACK_TOTAL.labels(stage=stage, provider=provider).inc()


def record_provider_error(stage: str, provider: str) -> None:
    PROVIDER_ERRORS.labels(stage=stage, provider=provider).inc()


def get_metrics() -> bytes:
    """Generate Prometheus metrics output in text exposition format."""
    return generate_latest()
