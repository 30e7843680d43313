from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from sqlalchemy.engine import Engine

from common.config import Settings, get_settings
from common.db import create_db_engine
from common.logging_config import setup_logging

from .auth import BearerTokenMiddleware
from .endpoints import health_router, telemetry_router
from .infrastructure.persistence import ensure_schema
from .registry import SignalRegistry, load_signal_registry

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[Engine] = None,
    registry: Optional[SignalRegistry] = None,
) -> FastAPI:
    """Construye la app.

    engine / registry se pueden inyectar (tests); si no, se crean en el
    arranque. El registro de señales se carga una sola vez por proceso.
    """
    settings = settings or get_settings()
    owns_engine = engine is None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.engine is None:
            app.state.engine = create_db_engine(settings)

        if settings.db_auto_migrate:
            ensure_schema(app.state.engine)

        if app.state.registry is None:
            app.state.registry = load_signal_registry(app.state.engine)
        logger.info("[Telemetry] Signal registry ready size=%d", len(app.state.registry))

        try:
            yield
        finally:
            if owns_engine and app.state.engine is not None:
                app.state.engine.dispose()
                logger.info("[DB] Engine disposed")

    app = FastAPI(title="Vessel Telemetry Ingest Service", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.registry = registry

    app.add_middleware(BearerTokenMiddleware, api_token=settings.api_token)
    app.include_router(health_router)
    app.include_router(telemetry_router)
    return app


def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info("[Telemetry] Starting telemetry ingestor port=%s", settings.port)

    import uvicorn

    # uvicorn maneja SIGINT/SIGTERM con shutdown ordenado.
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)
    logger.info("[Telemetry] Shutdown complete")


if __name__ == "__main__":
    main()
