"""Endpoint de ingesta de telemetría de buques."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ..errors import InvalidTimestampError, StorageError, UnknownVesselError
from ..pipelines import TelemetryIngestor
from ..schemas import TelemetryIn, TelemetryResult
from .dependencies import get_telemetry_ingestor

router = APIRouter(tags=["telemetry"])
logger = logging.getLogger(__name__)


@router.post("/api/v1/telemetry", response_model=TelemetryResult)
def ingest_telemetry(
    payload: TelemetryIn,
    ingestor: TelemetryIngestor = Depends(get_telemetry_ingestor),
) -> TelemetryResult:
    """Ingesta un batch de señales de un buque.

    Cada señal se clasifica contra el registro y termina en main_raw
    (aceptada) o filtered_raw (cuarentena). Las señales en cuarentena no
    hacen fallar la request.
    """
    try:
        outcome = ingestor.ingest(
            vessel_id=payload.vessel_id,
            timestamp_utc=payload.timestamp_utc,
            signals=payload.signals,
        )
    except InvalidTimestampError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid timestampUTC")
    except UnknownVesselError:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unknown or inactive vessel")
    except StorageError as e:
        # El detalle ya quedó logueado en el repositorio; no se expone al cliente.
        logger.error("[Telemetry] Internal error in /api/v1/telemetry err=%s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error",
        )

    metrics = outcome.metrics
    return TelemetryResult(
        ok=True,
        vessel_id=outcome.vessel_id,
        valid_signals=outcome.valid_signals,
        validation_ms=metrics.validation_ms,
        ingestion_ms=metrics.ingestion_ms,
        total_ms=metrics.total_ms,
    )
