"""Process entry point: meter engine thread plus the HTTP control API.

uvicorn owns the main thread. The engine advances its simpy clock on a
daemon thread and picks up the commands that request handlers queue on
its coordinator.
"""

import logging
import signal
import sys
import threading
from types import FrameType

import uvicorn

from api.app import create_app
from engine import MeterEngine
from meter_logging import setup_logging
from settings import Settings, get_settings

logger = logging.getLogger(__name__)


class MeterRunner:
    """Calls ``engine.step`` in a loop on a background thread until stopped."""

    def __init__(self, engine: MeterEngine, step_seconds: float = 0.1) -> None:
        self._engine = engine
        self._step_seconds = step_seconds
        self._halt = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._halt.clear()
        self._thread = threading.Thread(target=self._loop, name="meter-engine", daemon=True)
        self._thread.start()
        logger.info("Engine loop running, %.2fs per step", self._step_seconds)

    def stop(self, timeout: float = 5.0) -> None:
        self._halt.set()
        thread, self._thread = self._thread, None
        if thread is not None:
            thread.join(timeout=timeout)
            if thread.is_alive():
                logger.warning("Engine loop did not exit within %.1fs", timeout)
        logger.info("Engine loop stopped")

    def _loop(self) -> None:
        while not self._halt.is_set():
            self._engine.step(self._step_seconds)


def configure_logging(settings: Settings) -> None:
    meter = settings.meter
    setup_logging(
        level=meter.log_level,
        json_output=meter.log_format == "json",
        environment=meter.environment,
    )


def main() -> None:
    settings = get_settings()
    configure_logging(settings)

    engine = MeterEngine.from_settings(settings)
    runner = MeterRunner(engine, step_seconds=settings.meter.step_seconds)
    app = create_app(coordinator=engine.coordinator, settings=settings)

    def handle_signal(signum: int, frame: FrameType | None) -> None:
        logger.info("Signal %s received, stopping meter", signal.Signals(signum).name)
        runner.stop()
        engine.shutdown()
        sys.exit(0)

    for signum in (signal.SIGTERM, signal.SIGINT):
        signal.signal(signum, handle_signal)

    runner.start()
    logger.info("Control API on %s:%d", settings.api.host, settings.api.port)
    uvicorn.run(app, host=settings.api.host, port=settings.api.port, log_config=None)


if __name__ == "__main__":
    main()
