from __future__ import annotations

import random
import threading
import time
from pathlib import Path

import pytest

from datastore.reading_store import ReadingStore
from services.poller import SensorPoller
from settings import get_settings

VALID_CONTENT = (
    "72 01 4b 46 7f ff 0e 10 57 : crc=57 YES\n"
    "72 01 4b 46 7f ff 0e 10 57 t=23562\n"
)


@pytest.fixture()
def device(tmp_path: Path) -> Path:
    path = tmp_path / "w1_slave"
    path.write_text(VALID_CONTENT)
    return path


def test_poll_once_publishes_sensor_value(device: Path) -> None:
    store = ReadingStore()
    poller = SensorPoller(store=store, device_path=device)

    sample = poller.poll_once()

    assert sample.simulated is False
    assert sample.source == "sensor"
    assert store.read() == pytest.approx(23.562, abs=0.001)


def test_poll_once_falls_back_to_simulation(tmp_path: Path) -> None:
    store = ReadingStore()
    poller = SensorPoller(
        store=store,
        device_path=tmp_path / "missing",
        success_rate=1.0,
        rng=random.Random(3),
    )

    sample = poller.poll_once()

    assert sample.simulated is True
    assert sample.source == "simulated"
    assert store.read() is not None
    assert 15.0 <= store.read() < 30.0


def test_invalid_marker_is_not_published_as_real(device: Path) -> None:
    device.write_text(VALID_CONTENT.replace("YES", "NO"))
    store = ReadingStore(initial=10.0)
    poller = SensorPoller(store=store, device_path=device, simulate=False)

    sample = poller.poll_once()

    assert sample.temperature is None
    assert sample.source == "unknown"
    assert store.read() is None


def test_poll_once_unknown_when_simulation_declines(tmp_path: Path) -> None:
    store = ReadingStore(initial=22.0)
    poller = SensorPoller(
        store=store,
        device_path=tmp_path / "missing",
        success_rate=0.0,
        rng=random.Random(3),
    )

    poller.poll_once()

    assert store.read() is None


def test_each_tick_starts_fresh(device: Path) -> None:
    store = ReadingStore()
    poller = SensorPoller(store=store, device_path=device, simulate=False)

    device.write_text("garbage\n")
    poller.poll_once()
    assert store.read() is None

    device.write_text(VALID_CONTENT)
    poller.poll_once()
    assert store.read() == pytest.approx(23.562, abs=0.001)


def test_start_and_stop_background_thread(device: Path) -> None:
    store = ReadingStore()
    poller = SensorPoller(store=store, device_path=device, interval=0.05)

    poller.start()
    try:
        deadline = time.monotonic() + 2.0
        while store.read() is None and time.monotonic() < deadline:
            time.sleep(0.01)
        assert poller.running
    finally:
        poller.stop(timeout=1.0)

    assert store.read() == pytest.approx(23.562, abs=0.001)
    assert poller.running is False


def test_rejects_non_positive_interval(device: Path) -> None:
    with pytest.raises(ValueError):
        SensorPoller(store=ReadingStore(), device_path=device, interval=0)


def test_from_settings_uses_configuration(monkeypatch, device: Path) -> None:
    monkeypatch.setenv("TEMP_SERVER_DEVICE_PATH", str(device))
    monkeypatch.setenv("TEMP_SERVER_POLL_INTERVAL", "1.5")
    monkeypatch.setenv("TEMP_SERVER_SIMULATE", "off")
    get_settings.cache_clear()
    try:
        poller = SensorPoller.from_settings(get_settings(), ReadingStore())
    finally:
        get_settings.cache_clear()

    assert poller.device_path == device
    assert poller.interval == 1.5
    assert poller.simulate is False


@pytest.mark.parametrize("interval", [float("inf"), float("nan"), -1.0])
def test_rejects_non_finite_interval(device: Path, interval: float) -> None:
    with pytest.raises(ValueError):
        SensorPoller(store=ReadingStore(), device_path=device, interval=interval)


def test_unexpected_error_does_not_end_polling(device: Path) -> None:
    store = ReadingStore()
    poller = SensorPoller(store=store, device_path=device, interval=0.02)
    original_poll = poller.poll_once
    calls: list[int] = []

    def flaky_poll():
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("boom")
        return original_poll()

    poller.poll_once = flaky_poll  # type: ignore[method-assign]

    poller.start()
    try:
        deadline = time.monotonic() + 2.0
        while store.read() is None and time.monotonic() < deadline:
            time.sleep(0.01)
        assert poller.running
    finally:
        poller.stop(timeout=1.0)

    assert len(calls) >= 2
    assert store.read() == pytest.approx(23.562, abs=0.001)


def test_stop_keeps_thread_that_did_not_finish(device: Path, monkeypatch) -> None:
    poller = SensorPoller(store=ReadingStore(), device_path=device, interval=0.02)
    release = threading.Event()
    entered = threading.Event()

    def blocking_poll():
        entered.set()
        release.wait(2.0)

    monkeypatch.setattr(poller, "poll_once", blocking_poll)

    poller.start()
    try:
        assert entered.wait(1.0)
        poller.stop(timeout=0.05)
        assert poller.running
        poller.start()
        assert [t.name for t in threading.enumerate()].count("sensor-poller") == 1
    finally:
        release.set()
        poller.stop(timeout=1.0)

    assert poller.running is False
