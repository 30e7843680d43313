"""Orquestador de la ingesta de telemetría.

Procesa una request completa:

1. Parsea timestampUTC (RFC-3339)            -> InvalidTimestampError
2. Valida que el buque exista y esté activo   -> UnknownVesselError
3. Clasifica TODAS las señales (sin corte temprano)
4. Persiste cuarentena y luego aceptadas, una fila por señal
5. Registra la fila de métricas
6. Devuelve conteos y tiempos

Cualquier falla de storage en 2, 4 o 5 aborta con StorageError. Las filas
ya escritas en 4 NO se revierten.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Mapping, Protocol

from ..classification import (
    AcceptedSignal,
    QuarantinedSignal,
    QuarantineReason,
    classify_all,
)
from ..errors import InvalidTimestampError, UnknownVesselError
from ..metrics import IngestionMetrics, Stopwatch
from ..registry import SignalRegistry

logger = logging.getLogger(__name__)


_RFC3339_RE = re.compile(
    r"(?P<date>\d{4}-\d{2}-\d{2})[Tt ]"
    r"(?P<hm>\d{2}:\d{2}):(?P<second>\d{2})"
    r"(?:\.(?P<fraction>\d+))?"
    r"(?P<offset>[Zz]|[+-]\d{2}:\d{2})\Z"
)


def parse_rfc3339(raw: str) -> datetime:
    """Parsea un instante RFC-3339 y lo normaliza a UTC.

    Exige offset explícito (``Z`` o ``±HH:MM``) y no admite espacios al
    inicio o al final. La fracción de segundo se trunca a microsegundos.
    Un segundo intercalar (``:60``) se fija a ``:59.999999``; datetime no
    lo representa.
    """
    match = _RFC3339_RE.match(raw) if isinstance(raw, str) else None
    if match is None:
        raise InvalidTimestampError(raw)

    second = match.group("second")
    fraction = (match.group("fraction") or "")[:6]
    if second == "60":
        second, fraction = "59", "999999"

    offset = match.group("offset")
    if offset in ("Z", "z"):
        offset = "+00:00"

    iso = f"{match.group('date')}T{match.group('hm')}:{second}"
    if fraction:
        iso = f"{iso}.{fraction.ljust(6, '0')}"

    try:
        parsed = datetime.fromisoformat(f"{iso}{offset}")
    except ValueError as exc:
        raise InvalidTimestampError(raw) from exc
    return parsed.astimezone(timezone.utc)


class TelemetryStore(Protocol):
    """Sinks que consume el orquestador (ver TelemetryRepository)."""

    def vessel_exists(self, vessel_id: str) -> bool: ...

    def write_accepted(self, vessel_id: str, timestamp: datetime, name: str, value: float) -> None: ...

    def write_quarantined(
        self,
        vessel_id: str,
        timestamp: datetime,
        name: str,
        value: float,
        reason: QuarantineReason,
    ) -> None: ...

    def write_metrics(self, metrics: IngestionMetrics) -> None: ...


@dataclass
class IngestionOutcome:
    """Resultado de una request de ingesta exitosa."""

    vessel_id: str
    timestamp: datetime
    metrics: IngestionMetrics
    accepted: List[AcceptedSignal] = field(default_factory=list)
    quarantined: List[QuarantinedSignal] = field(default_factory=list)

    @property
    def valid_signals(self) -> int:
        return len(self.accepted)


class TelemetryIngestor:
    """Coordina validación, clasificación y persistencia de un batch."""

    def __init__(self, store: TelemetryStore, registry: SignalRegistry) -> None:
        self._store = store
        self._registry = registry

    def ingest(
        self,
        vessel_id: str,
        timestamp_utc: str,
        signals: Mapping[str, Any],
    ) -> IngestionOutcome:
        total = Stopwatch()

        timestamp = parse_rfc3339(timestamp_utc)

        # Ventana "validation": chequeo de buque + clasificación + cuarentena.
        validation = Stopwatch()
        if not self._store.vessel_exists(vessel_id):
            logger.warning("[Telemetry] Unknown or inactive vessel vessel_id=%s", vessel_id)
            raise UnknownVesselError(vessel_id)

        accepted, quarantined = classify_all(self._registry, signals)

        for signal in quarantined:
            self._store.write_quarantined(
                vessel_id,
                timestamp,
                signal.name,
                signal.value,
                signal.reason,
            )
        validation_ms = validation.elapsed_ms()

        ingestion = Stopwatch()
        for signal in accepted:
            self._store.write_accepted(vessel_id, timestamp, signal.name, signal.value)
        ingestion_ms = ingestion.elapsed_ms()

        metrics = IngestionMetrics(
            vessel_id=vessel_id,
            validation_ms=validation_ms,
            ingestion_ms=ingestion_ms,
            total_ms=total.elapsed_ms(),
        )
        self._store.write_metrics(metrics)

        logger.info(
            "[Telemetry] Telemetry ingested vessel_id=%s valid=%d quarantined=%d "
            "validation_ms=%d ingestion_ms=%d total_ms=%d",
            vessel_id,
            len(accepted),
            len(quarantined),
            metrics.validation_ms,
            metrics.ingestion_ms,
            metrics.total_ms,
        )
        if quarantined:
            logger.debug(
                "[Telemetry] Quarantined vessel_id=%s signals=%s",
                vessel_id,
                {s.name: s.reason.value for s in quarantined},
            )

        return IngestionOutcome(
            vessel_id=vessel_id,
            timestamp=timestamp,
            metrics=metrics,
            accepted=accepted,
            quarantined=quarantined,
        )
