"""One-wire temperature sensor access and the simulated fallback."""

from __future__ import annotations

import math
import random
from pathlib import Path
from typing import Optional, Sequence

VALIDITY_MARKER = "YES"
TEMPERATURE_MARKER = "t="

SIMULATED_MIN = 15.0
SIMULATED_MAX = 30.0
DEFAULT_SUCCESS_RATE = 0.8


class SensorError(Exception):
    """Base class for failures that leave a poll without a real reading."""


class SensorUnavailableError(SensorError):
    """The device file could not be opened or read."""


class SensorDataError(SensorError):
    """The device file was read but its contents are not a usable reading."""


def parse_w1_lines(lines: Sequence[str]) -> float:
    """Parse ``w1_slave`` output into degrees Celsius.

    The first line must end with the ``YES`` self-test marker and the second
    line must carry ``t=<milli-degrees>``.
    """
    if len(lines) < 2:
        raise SensorDataError(f"expected at least 2 lines, got {len(lines)}")

    status_line = lines[0].rstrip("\r\n")
    if not status_line.endswith(VALIDITY_MARKER):
        raise SensorDataError("sensor self-test marker missing")

    _, marker, remainder = lines[1].partition(TEMPERATURE_MARKER)
    if not marker:
        raise SensorDataError("temperature marker missing")

    candidate = remainder.partition(TEMPERATURE_MARKER)[0].strip()
    try:
        milli_degrees = float(candidate)
    except ValueError as exc:
        raise SensorDataError(f"invalid temperature value {candidate!r}") from exc
    if not math.isfinite(milli_degrees):
        raise SensorDataError(f"non-finite temperature value {candidate!r}")

    return milli_degrees / 1000.0


def read_device(path: str | Path) -> float:
    """Read and parse the sensor device file at ``path``."""
    try:
        with Path(path).open("r", encoding="utf-8", errors="replace") as handle:
            lines = handle.read().splitlines()
    except OSError as exc:
        raise SensorUnavailableError(f"cannot read {path}: {exc.strerror or exc}") from exc
    return parse_w1_lines(lines)


def simulate_reading(
    rng: Optional[random.Random] = None,
    success_rate: float = DEFAULT_SUCCESS_RATE,
) -> Optional[float]:
    """Stand-in value used when the sensor gave nothing usable.

    Returns a uniform value in ``[15.0, 30.0)`` with probability
    ``success_rate`` and ``None`` otherwise.
    """
    generator = rng or random
    if generator.random() >= success_rate:
        return None
    value = generator.uniform(SIMULATED_MIN, SIMULATED_MAX)
    # uniform() may return the upper bound through rounding
    return value if value < SIMULATED_MAX else SIMULATED_MIN
