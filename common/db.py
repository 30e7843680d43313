from __future__ import annotations

from urllib.parse import urlsplit
import logging

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from .config import Settings


logger = logging.getLogger(__name__)


def _safe_target(database_url: str) -> str:
    # host:port/db sin credenciales, solo para logs.
    parts = urlsplit(database_url)
    host = parts.hostname or "?"
    port = f":{parts.port}" if parts.port else ""
    return f"{host}{port}{parts.path}"


def create_db_engine(settings: Settings) -> Engine:
    logger.info(
        "[DB] Crear engine target=%s pool_size=%s max_overflow=%s pool_timeout=%s",
        _safe_target(settings.database_url),
        settings.db_pool_size,
        settings.db_max_overflow,
        settings.db_pool_timeout,
    )

    # pool_timeout acotado: con el pool agotado la request falla en vez de quedar colgada.
    return create_engine(
        settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_pre_ping=True,
        pool_recycle=300,
        future=True,
    )


def check_connection(engine: Engine) -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        logger.exception("[DB] Test de conexión FALLÓ")
        return False
