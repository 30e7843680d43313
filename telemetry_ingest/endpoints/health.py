"""Health endpoint, independiente del pipeline de ingesta."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from common.db import check_connection

from .dependencies import get_db_engine

router = APIRouter(tags=["health"])


@router.get("/healthz")
def healthz(engine: Engine = Depends(get_db_engine)):
    """Liveness + DB probe: 200 si SELECT 1 responde, 503 si no."""
    if check_connection(engine):
        return {"status": "ok", "db": "up"}
    return JSONResponse(status_code=503, content={"status": "degraded", "db": "down"})
