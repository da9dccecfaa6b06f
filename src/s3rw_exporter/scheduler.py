"""Background loop driving probe cycles on a fixed interval."""

from __future__ import annotations

import logging
import threading

from .probe import ProbeCycle, ProbeResult

logger = logging.getLogger(__name__)


class Scheduler:
    """Runs a probe cycle, sleeps for the interval, and repeats until stopped.

    Cycles never overlap: a cycle that overruns the interval is followed
    immediately by the next one, without catch-up. The stop event is
    observed between cycles, so an in-flight cycle always completes.
    """

    def __init__(
        self,
        cycle: ProbeCycle,
        interval_seconds: float,
        stop_event: threading.Event | None = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.cycle = cycle
        self.interval_seconds = interval_seconds
        self.stop_event = stop_event or threading.Event()
        self.first_cycle_done = threading.Event()
        self.cycles_completed = 0
        self.last_results: list[ProbeResult] = []
        self._thread: threading.Thread | None = None

    @property
    def is_ready(self) -> bool:
        return self.first_cycle_done.is_set()

    def run_once(self) -> list[ProbeResult]:
        """Run a single cycle and record its results."""
        results = self.cycle.run()
        self.last_results = results
        self.cycles_completed += 1
        self.first_cycle_done.set()
        return results

    def run_forever(self) -> None:
        """Loop until the stop event is set."""
        logger.info(f"Probing every {self.interval_seconds}s")
        while not self.stop_event.is_set():
            try:
                self.run_once()
            except Exception:
                # Step failures never reach here; this guards sink or logging faults
                logger.exception("Probe cycle aborted")
            if self.stop_event.wait(self.interval_seconds):
                break
        logger.info("Probe loop stopped")

    def start(self) -> threading.Thread:
        """Start the loop in a background thread."""
        if self._thread is not None and self._thread.is_alive():
            raise RuntimeError("scheduler already running")
        self._thread = threading.Thread(target=self.run_forever, name="probe-loop", daemon=True)
        self._thread.start()
        return self._thread

    def stop(self, timeout: float | None = None) -> bool:
        """Signal the loop to stop and wait for the in-flight cycle.

        Returns:
            True if the loop thread has exited
        """
        self.stop_event.set()
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()
