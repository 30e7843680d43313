"""PostgreSQL schema setup.

Executes the bundled SQL migrations statement by statement. Safe to call
multiple times (CREATE ... IF NOT EXISTS / ON CONFLICT DO NOTHING).
"""

from __future__ import annotations

import logging
import pathlib
from typing import List

from sqlalchemy import text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = pathlib.Path(__file__).parent / "migrations"


def split_statements(sql_content: str) -> List[str]:
    """Split a migration file into statements, dropping `--` comment lines."""
    lines = [
        line for line in sql_content.splitlines()
        if not line.strip().startswith("--")
    ]
    return [s.strip() for s in "\n".join(lines).split(";") if s.strip()]


def ensure_schema(engine: Engine) -> int:
    """Ensure the telemetry schema exists.

    Returns:
        Number of statements executed
    """
    sql_files = sorted(MIGRATIONS_DIR.glob("*.sql"))
    if not sql_files:
        logger.warning("[DB] No migration files found in %s - skipping schema creation", MIGRATIONS_DIR)
        return 0

    executed = 0
    try:
        with engine.begin() as conn:
            for sql_file in sql_files:
                logger.info("[DB] Applying migration %s", sql_file.name)
                for statement in split_statements(sql_file.read_text()):
                    conn.execute(text(statement))
                    executed += 1
    except Exception:
        logger.exception("[DB] Schema creation failed")
        raise

    logger.info("[DB] Schema ready statements=%d", executed)
    return executed
