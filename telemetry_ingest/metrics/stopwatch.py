"""Medición de latencias con reloj monotónico."""

from __future__ import annotations

import time


class Stopwatch:
    """Cronómetro simple en milisegundos enteros (nunca negativos)."""

    def __init__(self) -> None:
        self._start = time.perf_counter()

    def elapsed_ms(self) -> int:
        return max(0, int((time.perf_counter() - self._start) * 1000))
