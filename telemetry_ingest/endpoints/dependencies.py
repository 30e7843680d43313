"""Dependencias FastAPI compartidas por los endpoints.

El engine y el registro de señales viven en app.state (se crean en el
lifespan de main.create_app); aquí solo se exponen por request.
"""

from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.engine import Engine

from ..infrastructure.persistence import TelemetryRepository
from ..pipelines import TelemetryIngestor
from ..registry import SignalRegistry


def get_db_engine(request: Request) -> Engine:
    return request.app.state.engine


def get_signal_registry(request: Request) -> SignalRegistry:
    return request.app.state.registry


def get_telemetry_ingestor(
    engine: Engine = Depends(get_db_engine),
    registry: SignalRegistry = Depends(get_signal_registry),
) -> TelemetryIngestor:
    return TelemetryIngestor(TelemetryRepository(engine), registry)
