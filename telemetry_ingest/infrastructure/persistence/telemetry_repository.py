"""Telemetry storage - sinks de la ingesta en PostgreSQL.

- main_raw: señales aceptadas
- filtered_raw: señales en cuarentena (con reason)
- server_metrics: una fila de tiempos por request
- vessel_register_table: consulta de buques activos

IMPORTANTE: cada escritura se confirma por separado (engine.begin() por
fila). No hay transacción que abarque la request: si una escritura falla,
las anteriores ya quedaron persistidas.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from ...classification.models import QuarantineReason
from ...errors import StorageError
from ...metrics.models import IngestionMetrics

logger = logging.getLogger(__name__)


_VESSEL_EXISTS_SQL = text(
    """
    SELECT EXISTS(
        SELECT 1 FROM vessel_register_table
        WHERE vessel_id = :vessel_id AND is_active = TRUE
    ) AS vessel_exists
    """
)

_INSERT_RAW_SQL = text(
    """
    INSERT INTO main_raw (vessel_id, timestamp_utc, signal_name, signal_value)
    VALUES (:vessel_id, :timestamp_utc, :signal_name, :signal_value)
    """
)

_INSERT_FILTERED_SQL = text(
    """
    INSERT INTO filtered_raw (vessel_id, timestamp_utc, signal_name, signal_value, reason)
    VALUES (:vessel_id, :timestamp_utc, :signal_name, :signal_value, :reason)
    """
)

_INSERT_METRICS_SQL = text(
    """
    INSERT INTO server_metrics (vessel_id, validation_ms, ingestion_ms, total_ms)
    VALUES (:vessel_id, :validation_ms, :ingestion_ms, :total_ms)
    """
)


class TelemetryRepository:
    """Acceso a datos del pipeline de telemetría.

    Toda falla de SQLAlchemy (incluido el timeout del pool) se traduce a
    StorageError; no se reintenta.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def vessel_exists(self, vessel_id: str) -> bool:
        """True si el buque está registrado y activo."""
        try:
            with self._engine.connect() as conn:
                exists = conn.execute(_VESSEL_EXISTS_SQL, {"vessel_id": vessel_id}).scalar_one()
        except SQLAlchemyError as exc:
            logger.exception("[Telemetry] vessel lookup failed vessel_id=%s", vessel_id)
            raise StorageError("vessel_lookup", vessel_id) from exc
        return bool(exists)

    def write_accepted(
        self,
        vessel_id: str,
        timestamp: datetime,
        name: str,
        value: float,
    ) -> None:
        self._execute(
            _INSERT_RAW_SQL,
            {
                "vessel_id": vessel_id,
                "timestamp_utc": timestamp,
                "signal_name": name,
                "signal_value": float(value),
            },
            operation="write_accepted",
            vessel_id=vessel_id,
            signal_name=name,
        )

    def write_quarantined(
        self,
        vessel_id: str,
        timestamp: datetime,
        name: str,
        value: float,
        reason: QuarantineReason,
    ) -> None:
        self._execute(
            _INSERT_FILTERED_SQL,
            {
                "vessel_id": vessel_id,
                "timestamp_utc": timestamp,
                "signal_name": name,
                "signal_value": float(value),
                "reason": QuarantineReason(reason).value,
            },
            operation="write_quarantined",
            vessel_id=vessel_id,
            signal_name=name,
        )

    def write_metrics(self, metrics: IngestionMetrics) -> None:
        self._execute(
            _INSERT_METRICS_SQL,
            metrics.to_dict(),
            operation="write_metrics",
            vessel_id=metrics.vessel_id,
        )

    def _execute(
        self,
        statement: Any,
        params: Dict[str, Any],
        *,
        operation: str,
        vessel_id: str,
        signal_name: str | None = None,
    ) -> None:
        # Una transacción por fila: commit inmediato.
        try:
            with self._engine.begin() as conn:
                conn.execute(statement, params)
        except SQLAlchemyError as exc:
            logger.exception(
                "[Telemetry] %s failed vessel_id=%s signal=%s",
                operation,
                vessel_id,
                signal_name,
            )
            raise StorageError(operation, vessel_id) from exc
