"""Tests del repositorio de telemetría contra SQLite en memoria."""

from datetime import datetime, timezone

import pytest
from sqlalchemy import text

from telemetry_ingest.classification import QuarantineReason
from telemetry_ingest.errors import StorageError
from telemetry_ingest.infrastructure.persistence import TelemetryRepository
from telemetry_ingest.metrics import IngestionMetrics

from conftest import count_rows


TS = datetime(2025, 12, 23, 12, 34, 56, tzinfo=timezone.utc)


@pytest.fixture
def repo(sqlite_engine) -> TelemetryRepository:
    return TelemetryRepository(sqlite_engine)


class TestVesselExists:

    def test_active_vessel(self, repo):
        assert repo.vessel_exists("V100") is True

    def test_inactive_vessel(self, repo):
        assert repo.vessel_exists("V200") is False

    def test_missing_vessel(self, repo):
        assert repo.vessel_exists("V999") is False

    def test_storage_failure(self, repo, sqlite_engine):
        with sqlite_engine.begin() as conn:
            conn.execute(text("DROP TABLE vessel_register_table"))

        with pytest.raises(StorageError) as exc_info:
            repo.vessel_exists("V100")
        assert exc_info.value.operation == "vessel_lookup"


class TestPoolExhaustion:
    """Con el pool agotado la consulta falla rápido en vez de bloquear."""

    def test_checkout_timeout_raises_storage_error(self, exhausted_engine):
        repo = TelemetryRepository(exhausted_engine)

        with pytest.raises(StorageError) as exc_info:
            repo.vessel_exists("V100")
        assert exc_info.value.operation == "vessel_lookup"

    def test_write_timeout_raises_storage_error(self, exhausted_engine):
        repo = TelemetryRepository(exhausted_engine)

        with pytest.raises(StorageError) as exc_info:
            repo.write_accepted("V100", TS, "engineTemp", 42.5)
        assert exc_info.value.operation == "write_accepted"


class TestWrites:

    def test_write_accepted(self, repo, sqlite_engine):
        repo.write_accepted("V100", TS, "engineTemp", 42.5)

        with sqlite_engine.connect() as conn:
            row = conn.execute(
                text("SELECT vessel_id, signal_name, signal_value FROM main_raw")
            ).mappings().one()
        assert dict(row) == {"vessel_id": "V100", "signal_name": "engineTemp", "signal_value": 42.5}

    def test_write_quarantined_stores_reason(self, repo, sqlite_engine):
        repo.write_quarantined("V100", TS, "bilgeAlarm", 2.0, QuarantineReason.OUT_OF_RANGE)

        with sqlite_engine.connect() as conn:
            row = conn.execute(
                text("SELECT signal_name, signal_value, reason FROM filtered_raw")
            ).mappings().one()
        assert row["signal_name"] == "bilgeAlarm"
        assert row["signal_value"] == 2.0
        assert row["reason"] == "out_of_range"

    def test_write_quarantined_nan_placeholder(self, repo, sqlite_engine):
        repo.write_quarantined("V100", TS, "unknownSig", float("nan"), QuarantineReason.UNKNOWN_SIGNAL)

        assert count_rows(sqlite_engine, "filtered_raw") == 1

    def test_write_metrics(self, repo, sqlite_engine):
        repo.write_metrics(IngestionMetrics("V100", validation_ms=3, ingestion_ms=2, total_ms=7))

        with sqlite_engine.connect() as conn:
            row = conn.execute(
                text("SELECT vessel_id, validation_ms, ingestion_ms, total_ms FROM server_metrics")
            ).mappings().one()
        assert dict(row) == {"vessel_id": "V100", "validation_ms": 3, "ingestion_ms": 2, "total_ms": 7}

    def test_each_write_commits_on_its_own(self, repo, sqlite_engine):
        """Una falla posterior no revierte filas ya escritas."""
        repo.write_quarantined("V100", TS, "a", 5.0, QuarantineReason.OUT_OF_RANGE)
        with sqlite_engine.begin() as conn:
            conn.execute(text("DROP TABLE main_raw"))

        with pytest.raises(StorageError) as exc_info:
            repo.write_accepted("V100", TS, "engineTemp", 42.5)

        assert exc_info.value.operation == "write_accepted"
        assert exc_info.value.vessel_id == "V100"
        assert count_rows(sqlite_engine, "filtered_raw") == 1
