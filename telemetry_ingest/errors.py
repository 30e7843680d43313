"""Errores del pipeline de ingesta.

Las señales en cuarentena NO son errores: son un resultado normal que se
persiste en filtered_raw. Estas excepciones cortan la request completa.
"""

from __future__ import annotations

from typing import Optional


class TelemetryIngestError(Exception):
    """Base de los errores que abortan una request de ingesta."""


class InvalidTimestampError(TelemetryIngestError):
    """timestampUTC no es un instante RFC-3339 válido."""

    def __init__(self, raw: str) -> None:
        super().__init__(f"Invalid timestampUTC: {raw!r}")
        self.raw = raw


class UnknownVesselError(TelemetryIngestError):
    """El buque no existe o no está activo."""

    def __init__(self, vessel_id: str) -> None:
        super().__init__(f"Unknown or inactive vessel: {vessel_id!r}")
        self.vessel_id = vessel_id


class StorageError(TelemetryIngestError):
    """Falla de la base de datos durante una operación del pipeline."""

    def __init__(self, operation: str, vessel_id: Optional[str] = None) -> None:
        detail = f"Storage failure during {operation}"
        if vessel_id is not None:
            detail = f"{detail} vessel_id={vessel_id}"
        super().__init__(detail)
        self.operation = operation
        self.vessel_id = vessel_id
