"""Clasificación de señales (aceptada / cuarentena)."""

from .models import (
    AcceptedSignal,
    ClassifiedSignal,
    QuarantinedSignal,
    QuarantineReason,
    ValueShape,
)
from .signal_classifier import (
    ANALOG_MAX,
    ANALOG_MIN,
    classify,
    classify_all,
    value_shape,
)

__all__ = [
    "AcceptedSignal",
    "ClassifiedSignal",
    "QuarantinedSignal",
    "QuarantineReason",
    "ValueShape",
    "ANALOG_MAX",
    "ANALOG_MIN",
    "classify",
    "classify_all",
    "value_shape",
]
