"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True, frozen=True)
class Sample:
    """Outcome of a single poll: the published value and where it came from."""

    temperature: Optional[float]
    simulated: bool = False

    @property
    def source(self) -> str:
        if self.temperature is None:
            return "unknown"
        return "simulated" if self.simulated else "sensor"
