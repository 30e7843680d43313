"""Fixtures compartidas: engine SQLite en memoria, store falso y cliente HTTP."""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from common.config import Settings
from common.db import create_db_engine
from telemetry_ingest.classification import QuarantineReason
from telemetry_ingest.errors import StorageError
from telemetry_ingest.main import create_app
from telemetry_ingest.metrics import IngestionMetrics
from telemetry_ingest.registry import SignalKind, SignalRegistry


API_TOKEN = "test-telemetry-token"
AUTH_HEADERS = {"Authorization": f"Bearer {API_TOKEN}"}

# Mismo layout que migrations/001_telemetry.sql, en dialecto SQLite.
SQLITE_SCHEMA = [
    """
    CREATE TABLE vessel_register_table (
        vessel_id TEXT PRIMARY KEY,
        name TEXT,
        is_active BOOLEAN DEFAULT 1
    )
    """,
    """
    CREATE TABLE signal_register_table (
        signal_name TEXT PRIMARY KEY,
        signal_type TEXT
    )
    """,
    """
    CREATE TABLE main_raw (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        vessel_id TEXT,
        timestamp_utc TIMESTAMP,
        signal_name TEXT,
        signal_value REAL,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE filtered_raw (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        vessel_id TEXT,
        timestamp_utc TIMESTAMP,
        signal_name TEXT,
        signal_value REAL,
        reason TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE server_metrics (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        vessel_id TEXT,
        validation_ms INTEGER,
        ingestion_ms INTEGER,
        total_ms INTEGER,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
]

SEED_SIGNALS = [
    ("engineTemp", "analog"),
    ("fuelLevel", "analog"),
    ("bilgeAlarm", "digital"),
    ("doorOpen", "digital"),
]

SEED_VESSELS = [
    ("V100", "Vessel 100", True),
    ("V200", "Vessel 200 (retired)", False),
]


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def sqlite_engine():
    """Engine SQLite en memoria con el schema y seeds de prueba."""
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        future=True,
    )
    with engine.begin() as conn:
        for ddl in SQLITE_SCHEMA:
            conn.execute(text(ddl))
        for name, kind in SEED_SIGNALS:
            conn.execute(
                text("INSERT INTO signal_register_table (signal_name, signal_type) VALUES (:n, :k)"),
                {"n": name, "k": kind},
            )
        for vessel_id, name, active in SEED_VESSELS:
            conn.execute(
                text(
                    "INSERT INTO vessel_register_table (vessel_id, name, is_active) "
                    "VALUES (:v, :n, :a)"
                ),
                {"v": vessel_id, "n": name, "a": active},
            )
    yield engine
    engine.dispose()


@pytest.fixture
def registry() -> SignalRegistry:
    """Registro equivalente a SEED_SIGNALS."""
    return SignalRegistry.from_mapping({name: SignalKind(kind) for name, kind in SEED_SIGNALS})


@pytest.fixture
def settings() -> Settings:
    return Settings(database_url="sqlite://", api_token=API_TOKEN)


@pytest.fixture
def client(settings, sqlite_engine, registry):
    """Cliente HTTP contra la app real con SQLite en memoria."""
    app = create_app(settings=settings, engine=sqlite_engine, registry=registry)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def exhausted_engine(tmp_path):
    """Engine con un pool de una sola conexión, ya tomada.

    SQLite en archivo usa QueuePool, así que pool_size/pool_timeout aplican
    igual que en PostgreSQL.
    """
    engine = create_db_engine(
        Settings(
            database_url=f"sqlite:///{tmp_path / 'pool.db'}",
            api_token=API_TOKEN,
            db_pool_size=1,
            db_max_overflow=0,
            db_pool_timeout=0.1,
        )
    )
    held = engine.connect()
    yield engine
    held.close()
    engine.dispose()


def count_rows(engine: Engine, table: str) -> int:
    with engine.connect() as conn:
        return conn.execute(text(f"SELECT COUNT(*) FROM {table}")).scalar_one()


class RecordingStore:
    """Store en memoria que registra cada llamada en orden.

    fail_on: nombre de operación ("vessel_exists", "write_quarantined",
    "write_accepted", "write_metrics") que debe fallar; fail_after indica
    cuántas llamadas exitosas de esa operación se permiten antes de fallar.
    """

    def __init__(
        self,
        vessels: Tuple[str, ...] = ("V100",),
        fail_on: Optional[str] = None,
        fail_after: int = 0,
    ) -> None:
        self.vessels = set(vessels)
        self.fail_on = fail_on
        self.fail_after = fail_after
        self.calls: List[Tuple[str, Any]] = []
        self.accepted: List[Tuple[str, datetime, str, float]] = []
        self.quarantined: List[Tuple[str, datetime, str, float, QuarantineReason]] = []
        self.metrics: List[IngestionMetrics] = []
        self._counts: dict = {}

    def _maybe_fail(self, operation: str, vessel_id: str) -> None:
        if operation != self.fail_on:
            return
        done = self._counts.get(operation, 0)
        if done >= self.fail_after:
            raise StorageError(operation, vessel_id)
        self._counts[operation] = done + 1

    def vessel_exists(self, vessel_id: str) -> bool:
        self.calls.append(("vessel_exists", vessel_id))
        self._maybe_fail("vessel_exists", vessel_id)
        return vessel_id in self.vessels

    def write_accepted(self, vessel_id, timestamp, name, value) -> None:
        self.calls.append(("write_accepted", name))
        self._maybe_fail("write_accepted", vessel_id)
        self.accepted.append((vessel_id, timestamp, name, value))

    def write_quarantined(self, vessel_id, timestamp, name, value, reason) -> None:
        self.calls.append(("write_quarantined", name))
        self._maybe_fail("write_quarantined", vessel_id)
        self.quarantined.append((vessel_id, timestamp, name, value, reason))

    def write_metrics(self, metrics: IngestionMetrics) -> None:
        self.calls.append(("write_metrics", metrics.vessel_id))
        self._maybe_fail("write_metrics", metrics.vessel_id)
        self.metrics.append(metrics)

    @property
    def writes(self) -> List[Tuple[str, Any]]:
        return [c for c in self.calls if c[0] != "vessel_exists"]
