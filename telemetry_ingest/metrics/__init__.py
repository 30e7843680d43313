"""Metrics module for per-request ingestion latency."""

from .models import IngestionMetrics
from .stopwatch import Stopwatch

__all__ = [
    "IngestionMetrics",
    "Stopwatch",
]
