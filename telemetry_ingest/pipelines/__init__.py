"""Pipeline de ingesta de telemetría."""

from .telemetry_ingestor import (
    IngestionOutcome,
    TelemetryIngestor,
    TelemetryStore,
    parse_rfc3339,
)

__all__ = [
    "IngestionOutcome",
    "TelemetryIngestor",
    "TelemetryStore",
    "parse_rfc3339",
]
