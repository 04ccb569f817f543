from __future__ import annotations

import math
import os
from dataclasses import dataclass
from functools import lru_cache


_DEVICE_PATH_ENV = "TEMP_SERVER_DEVICE_PATH"
_POLL_INTERVAL_ENV = "TEMP_SERVER_POLL_INTERVAL"
_HOST_ENV = "TEMP_SERVER_HOST"
_PORT_ENV = "TEMP_SERVER_PORT"
_SIMULATE_ENV = "TEMP_SERVER_SIMULATE"
_SIMULATION_RATE_ENV = "TEMP_SERVER_SIMULATION_RATE"
_SITE_NAME_ENV = "TEMP_SERVER_SITE_NAME"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_DEVICE_PATH = "/sys/bus/w1/devices/28-000001cda180/w1_slave"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    device_path: str
    poll_interval: float
    host: str
    port: int
    simulate_on_failure: bool
    simulation_success_rate: float
    site_name: str
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_interval(default: float) -> float:
    value = os.getenv(_POLL_INTERVAL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if math.isfinite(parsed) and parsed > 0 else default


def _read_port(default: int) -> int:
    value = os.getenv(_PORT_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if 0 < parsed < 65536 else default


def _read_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip().lower()
    if candidate in _TRUE_VALUES:
        return True
    if candidate in _FALSE_VALUES:
        return False
    return default


def _read_rate(default: float) -> float:
    value = os.getenv(_SIMULATION_RATE_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if 0.0 <= parsed <= 1.0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        device_path=_read_str_env(_DEVICE_PATH_ENV, DEFAULT_DEVICE_PATH),
        poll_interval=_read_interval(3.0),
        host=_read_str_env(_HOST_ENV, "0.0.0.0"),
        port=_read_port(3000),
        simulate_on_failure=_read_bool(_SIMULATE_ENV, True),
        simulation_success_rate=_read_rate(0.8),
        site_name=_read_str_env(_SITE_NAME_ENV, "FrambOS"),
        log_level=_read_log_level("INFO"),
    )
