"""Test helpers shared across the PlayShelf test suite."""

from .fakes import StubFetcher, page
from .metric_delta import metric_delta, sample_value

__all__ = ["StubFetcher", "page", "metric_delta", "sample_value"]
