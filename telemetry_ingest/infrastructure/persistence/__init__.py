"""Persistencia de la ingesta de telemetría (PostgreSQL)."""

from .schema_setup import ensure_schema
from .telemetry_repository import TelemetryRepository

__all__ = [
    "TelemetryRepository",
    "ensure_schema",
]
