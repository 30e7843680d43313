"""Clasificador de señales por tipo declarado.

Función pura: (tipo declarado, valor JSON crudo) -> Accepted | Quarantined.

Digital y analog son codificaciones de wire mutuamente excluyentes, no solo
rangos: un analog enviado como entero JSON (``42``) es type_mismatch aunque
esté en rango, y un digital enviado como ``1.0`` también. La idea es detectar
bugs de encoding en los productores, no solo valores fuera de rango.

Tabla de decisión:

    digital + entero 0/1           -> Accepted(0.0 | 1.0)
    digital + otro entero          -> Quarantined(valor, out_of_range)
    digital + no entero            -> Quarantined(NaN, type_mismatch)
    analog  + float en [1, 65535]  -> Accepted(valor)
    analog  + float fuera de rango -> Quarantined(valor, out_of_range)
    analog  + no float             -> Quarantined(NaN, type_mismatch)
    sin registro + numérico        -> Quarantined(valor, unknown_signal)
    sin registro + no numérico     -> Quarantined(NaN, unknown_signal)
"""

from __future__ import annotations

import math
from typing import Any, List, Mapping, Optional, Tuple

from ..registry import SignalKind, SignalRegistry
from .models import (
    AcceptedSignal,
    ClassifiedSignal,
    QuarantinedSignal,
    QuarantineReason,
    ValueShape,
)

ANALOG_MIN = 1.0
ANALOG_MAX = 65535.0

DIGITAL_VALUES = (0, 1)

# Rango de enteros que un parser JSON de 64 bits conserva como entero; fuera
# de él el número llega como double.
JSON_INT_MIN = -(2**63)
JSON_INT_MAX = 2**64 - 1


def value_shape(value: Any) -> ValueShape:
    """Forma JSON de un valor ya decodificado con json.loads."""
    # bool hereda de int en Python; en JSON true/false no son enteros.
    if isinstance(value, bool):
        return ValueShape.BOOL
    if isinstance(value, int):
        if JSON_INT_MIN <= value <= JSON_INT_MAX:
            return ValueShape.INTEGER
        return ValueShape.FLOAT
    if isinstance(value, float):
        return ValueShape.FLOAT
    if isinstance(value, str):
        return ValueShape.STRING
    if value is None:
        return ValueShape.NULL
    return ValueShape.OTHER


def _as_float(value: Any) -> float:
    # Enteros JSON demasiado grandes para un double se guardan como NaN.
    try:
        return float(value)
    except OverflowError:
        return math.nan


def classify(kind: Optional[SignalKind], name: str, value: Any) -> ClassifiedSignal:
    """Clasifica una lectura. Total y sin efectos secundarios."""
    shape = value_shape(value)

    if kind is None:
        stored = _as_float(value) if shape.is_numeric else math.nan
        return QuarantinedSignal(name, stored, QuarantineReason.UNKNOWN_SIGNAL)

    if kind is SignalKind.DIGITAL:
        if shape is not ValueShape.INTEGER:
            return QuarantinedSignal(name, math.nan, QuarantineReason.TYPE_MISMATCH)
        if value in DIGITAL_VALUES:
            return AcceptedSignal(name, 1.0 if value == 1 else 0.0)
        return QuarantinedSignal(name, _as_float(value), QuarantineReason.OUT_OF_RANGE)

    # SignalKind.ANALOG
    if shape is not ValueShape.FLOAT:
        return QuarantinedSignal(name, math.nan, QuarantineReason.TYPE_MISMATCH)
    # NaN/Infinity (literales que json.loads acepta) no cumplen la comparación.
    if ANALOG_MIN <= value <= ANALOG_MAX:
        return AcceptedSignal(name, float(value))
    return QuarantinedSignal(name, _as_float(value), QuarantineReason.OUT_OF_RANGE)


def classify_all(
    registry: SignalRegistry,
    signals: Mapping[str, Any],
) -> Tuple[List[AcceptedSignal], List[QuarantinedSignal]]:
    """Clasifica todas las lecturas del batch, sin cortar en la primera.

    len(accepted) + len(quarantined) == len(signals) siempre.
    """
    accepted: List[AcceptedSignal] = []
    quarantined: List[QuarantinedSignal] = []

    for name, raw in signals.items():
        result = classify(registry.lookup(name), name, raw)
        if isinstance(result, AcceptedSignal):
            accepted.append(result)
        else:
            quarantined.append(result)

    return accepted, quarantined
