"""Background polling of the temperature sensor."""

from __future__ import annotations

import logging
import math
import random
from pathlib import Path
from threading import Event, Thread
from typing import Optional

from datastore.reading_store import ReadingStore
from models.records import Sample
from services.sensor import DEFAULT_SUCCESS_RATE, SensorError, read_device, simulate_reading
from settings import Settings

logger = logging.getLogger(__name__)


class SensorPoller:
    """Samples the sensor on a fixed interval and publishes into a store."""

    def __init__(
        self,
        store: ReadingStore,
        device_path: str | Path,
        interval: float = 3.0,
        simulate: bool = True,
        success_rate: float = DEFAULT_SUCCESS_RATE,
        rng: Optional[random.Random] = None,
    ) -> None:
        if not math.isfinite(interval) or interval <= 0:
            raise ValueError(f"Poll interval must be a positive finite number, got {interval!r}.")
        self.store = store
        self.device_path = Path(device_path)
        self.interval = interval
        self.simulate = simulate
        self.success_rate = success_rate
        self._rng = rng or random.Random()
        self._stop_event = Event()
        self._thread: Optional[Thread] = None

    @classmethod
    def from_settings(cls, settings: Settings, store: ReadingStore) -> SensorPoller:
        return cls(
            store=store,
            device_path=settings.device_path,
            interval=settings.poll_interval,
            simulate=settings.simulate_on_failure,
            success_rate=settings.simulation_success_rate,
        )

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def poll_once(self) -> Sample:
        """Take one reading, fall back to simulation if needed, and publish it."""
        sample = Sample(temperature=None)
        try:
            sample = Sample(temperature=read_device(self.device_path))
        except SensorError as exc:
            logger.debug(
                "No sensor reading this tick",
                extra={"device_path": str(self.device_path), "reason": str(exc)},
            )
            if self.simulate:
                sample = Sample(
                    temperature=simulate_reading(self._rng, self.success_rate),
                    simulated=True,
                )

        self.store.write(sample.temperature)
        logger.debug(
            "Published reading",
            extra={"temperature": sample.temperature, "simulated": sample.simulated},
        )
        return sample

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = Thread(target=self._run, name="sensor-poller", daemon=True)
        self._thread.start()
        logger.info(
            "Sensor poller started",
            extra={"device_path": str(self.device_path), "interval": self.interval},
        )

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        thread = self._thread
        if thread is None:
            return
        thread.join(timeout)
        if thread.is_alive():
            logger.warning("Sensor poller did not stop in time", extra={"interval": self.interval})
            return
        self._thread = None
        logger.info("Sensor poller stopped")

    def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.poll_once()
            except Exception:
                logger.exception(
                    "Unexpected error during sensor poll",
                    extra={"device_path": str(self.device_path)},
                )
            self._stop_event.wait(self.interval)
