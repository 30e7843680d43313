"""Modelo de la fila de métricas por request (server_metrics)."""

from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class IngestionMetrics:
    """Tiempos transcurridos de una request de ingesta, en milisegundos.

    - validation_ms: chequeo de buque + clasificación + escrituras en cuarentena
    - ingestion_ms: escrituras de señales aceptadas
    - total_ms: request completa hasta antes de escribir esta fila
    """

    vessel_id: str
    validation_ms: int
    ingestion_ms: int
    total_ms: int

    def to_dict(self) -> dict:
        return asdict(self)
