"""
Defines the Prometheus metrics for the fetch and extraction path.
"""

from __future__ import annotations

from typing import Any, Dict

from prometheus_client import REGISTRY as _PROM_REGISTRY
from prometheus_client import Counter as _OrigCounter
from prometheus_client import Histogram as _OrigHistogram

# ---------------------------------------------------------------------------
# Duplicate-safe Prometheus metric wrappers
# ---------------------------------------------------------------------------
# Re-importing this module (test reloads, uvicorn reloader) must not raise
# "Duplicated timeseries" errors, so an existing collector is reused.


def _duplicate_safe_factory(metric_cls):
    """Return a factory that reuses an existing collector if already present."""

    def _factory(name: str, documentation: str, *args, **kwargs):  # type: ignore[override]
        # Counters register under their name without the _total suffix.
        for key in (name, name.removesuffix("_total")):
            existing = _PROM_REGISTRY._names_to_collectors.get(key)
            if existing is not None:
                return existing  # type: ignore[return-value]
        try:
            return metric_cls(name, documentation, *args, **kwargs)  # type: ignore[call-arg]
        except ValueError:
            return _PROM_REGISTRY._names_to_collectors[name]  # type: ignore[return-value]

    return _factory


Counter = _duplicate_safe_factory(_OrigCounter)  # type: ignore[assignment]
Histogram = _duplicate_safe_factory(_OrigHistogram)  # type: ignore[assignment]


def _create_metrics() -> Dict[str, Any]:
    return {
        "fetch_responses_total": Counter(
            "playshelf_fetch_responses_total",
            "Detail-page responses by HTTP status class",
            ["status_class"],
        ),
        "fetch_failures_total": Counter(
            "playshelf_fetch_failures_total",
            "Failed detail-page fetches by failure kind",
            ["kind"],
        ),
        "fetch_latency_seconds": Histogram(
            "playshelf_fetch_latency_seconds",
            "Time spent fetching a detail page",
        ),
        "extraction_misses_total": Counter(
            "playshelf_extraction_misses_total",
            "Fields for which no matcher produced a value",
            ["field"],
        ),
        "metadata_requests_total": Counter(
            "playshelf_metadata_requests_total",
            "Metadata requests by outcome",
            ["outcome"],
        ),
    }


METRICS: Dict[str, Any] = _create_metrics()


def increment(name: str, value: float = 1.0, **labels: str) -> None:
    """Increment a counter metric if it is registered."""
    metric = METRICS.get(name)
    if metric is None:
        return
    if labels:
        metric.labels(**labels).inc(value)
    else:
        metric.inc(value)


def observe(name: str, value: float) -> None:
    """Observe a histogram metric if it is registered."""
    metric = METRICS.get(name)
    if metric is not None:
        metric.observe(value)
