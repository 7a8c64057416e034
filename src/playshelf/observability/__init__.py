"""Logging and metrics."""

from __future__ import annotations

from prometheus_client import generate_latest

from .logging import configure_logging
from .metrics import METRICS, increment, observe

__all__ = ["configure_logging", "METRICS", "increment", "observe", "export_prometheus"]


def export_prometheus() -> bytes:
    """Export metrics in Prometheus text format."""
    return generate_latest()
