from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class TelemetryIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    vessel_id: str = Field(..., alias="vesselId")
    # Se parsea en el pipeline: un formato inválido es 400, no 422.
    timestamp_utc: str = Field(..., alias="timestampUTC")
    epoch_utc: Optional[int] = Field(default=None, alias="epochUTC")
    # Any conserva int vs float tal como vienen en el JSON.
    signals: Dict[str, Any] = Field(...)


class TelemetryResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    vessel_id: str = Field(..., alias="vesselId")
    valid_signals: int = Field(..., alias="validSignals")
    validation_ms: int = Field(..., alias="validationMs")
    ingestion_ms: int = Field(..., alias="ingestionMs")
    total_ms: int = Field(..., alias="totalMs")
