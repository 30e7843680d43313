"""Modelos de datos para clasificación de señales.

Cada lectura termina en exactamente uno de dos resultados:
AcceptedSignal (va a main_raw) o QuarantinedSignal (va a filtered_raw).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class QuarantineReason(str, Enum):
    """Motivo por el que una señal va a cuarentena."""

    TYPE_MISMATCH = "type_mismatch"  # codificación JSON incorrecta para el tipo
    OUT_OF_RANGE = "out_of_range"
    UNKNOWN_SIGNAL = "unknown_signal"  # nombre fuera del registro


class ValueShape(str, Enum):
    """Forma JSON del valor crudo, independiente del tipo declarado."""

    INTEGER = "integer"
    FLOAT = "float"
    BOOL = "bool"
    STRING = "string"
    NULL = "null"
    OTHER = "other"  # arrays / objetos

    @property
    def is_numeric(self) -> bool:
        return self in (ValueShape.INTEGER, ValueShape.FLOAT)


@dataclass(frozen=True)
class AcceptedSignal:
    name: str
    value: float


@dataclass(frozen=True)
class QuarantinedSignal:
    """Señal rechazada; value es NaN cuando el valor no era representable."""

    name: str
    value: float
    reason: QuarantineReason


ClassifiedSignal = Union[AcceptedSignal, QuarantinedSignal]
