"""Registro de señales conocidas.

Se carga UNA vez al arrancar el proceso desde signal_register_table y se
comparte en solo lectura entre todas las requests. No hay invalidación:
para ver cambios en la tabla hay que reiniciar el servicio.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)


class SignalKind(str, Enum):
    """Codificación declarada de una señal."""

    DIGITAL = "digital"  # entero 0 / 1
    ANALOG = "analog"  # float en [1.0, 65535.0]


@dataclass(frozen=True)
class SignalDefinition:
    name: str
    kind: SignalKind


class SignalRegistry:
    """Mapeo inmutable nombre de señal -> SignalKind."""

    def __init__(self, definitions: Iterable[SignalDefinition] = ()) -> None:
        kinds = {d.name: d.kind for d in definitions}
        self._kinds: Mapping[str, SignalKind] = MappingProxyType(kinds)

    @classmethod
    def from_mapping(cls, kinds: Mapping[str, SignalKind]) -> SignalRegistry:
        return cls(SignalDefinition(name, kind) for name, kind in kinds.items())

    def lookup(self, name: str) -> Optional[SignalKind]:
        """Tipo declarado de la señal, o None si no está registrada."""
        return self._kinds.get(name)

    def definitions(self) -> Iterator[SignalDefinition]:
        for name, kind in self._kinds.items():
            yield SignalDefinition(name, kind)

    def __contains__(self, name: object) -> bool:
        return name in self._kinds

    def __len__(self) -> int:
        return len(self._kinds)

    def __repr__(self) -> str:
        return f"SignalRegistry(size={len(self)})"


def parse_signal_kind(raw: Optional[str], *, signal_name: str = "") -> SignalKind:
    """Traduce signal_type de la tabla a SignalKind.

    Valores desconocidos se cargan como analog (con warning).
    """
    value = (raw or "").strip().lower()
    try:
        return SignalKind(value)
    except ValueError:
        logger.warning(
            "[Registry] signal_type desconocido signal=%s type=%r -> analog",
            signal_name,
            raw,
        )
        return SignalKind.ANALOG


def load_signal_registry(engine: Engine) -> SignalRegistry:
    """Lee signal_register_table completa y construye el registro."""
    with engine.connect() as conn:
        rows = (
            conn.execute(
                text(
                    """
                    SELECT signal_name, signal_type
                    FROM signal_register_table
                    """
                )
            )
            .mappings()
            .all()
        )

    definitions = [
        SignalDefinition(
            name=row["signal_name"],
            kind=parse_signal_kind(row["signal_type"], signal_name=row["signal_name"]),
        )
        for row in rows
    ]
    registry = SignalRegistry(definitions)
    logger.info("[Registry] Loaded signal registry count=%d", len(registry))
    return registry
