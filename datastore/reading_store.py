from __future__ import annotations

import math
from functools import lru_cache
from threading import Lock
from typing import Optional


class ReadingStore:
    """Lock-guarded slot holding the latest temperature, or ``None`` when unknown."""

    def __init__(self, initial: Optional[float] = None) -> None:
        self._lock = Lock()
        self._temperature: Optional[float] = None
        self.write(initial)

    def read(self) -> Optional[float]:
        with self._lock:
            return self._temperature

    def write(self, temperature: Optional[float]) -> None:
        if temperature is not None:
            temperature = float(temperature)
            if not math.isfinite(temperature):
                raise ValueError(f"Temperature must be finite, got {temperature!r}.")
        with self._lock:
            self._temperature = temperature


@lru_cache
def build_default_store() -> ReadingStore:
    return ReadingStore()
