"""Simulated closure actuator.

Keeps a position between 0 (fully closed) and 100 (fully open) and a
driving mode. A background thread ticks at a fixed period and moves
the position one unit toward the commanded end, so the simulation
behaves like a slow motor that callers can poll.
"""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime
from typing import Callable

from hydractl.actuator.base import Actuator
from hydractl.domain.models import (
    ActuatorStatus,
    DrivingMode,
    PositionState,
    StatusSnapshot,
)

logger = logging.getLogger(__name__)

FULLY_CLOSED = 0
FULLY_OPEN = 100

DEFAULT_TICK_INTERVAL = 0.5
DEFAULT_HOLD_TIMEOUT = 1.5
DEFAULT_ERROR_MESSAGE = "Oh nein, ein Fehler!"


class SimulatedActuator(Actuator):
    """Actuator whose physical response is simulated in a worker thread.

    All state lives behind a single lock which is taken by every command
    and by every tick, so commands and ticks never interleave.

    Args:
        tick_interval: Seconds between two simulation ticks.
        hold_timeout: Seconds after which a hold command that was not
            repeated reverts to idle.
        error_message: Message reported while the error state is active.
        clock: Monotonic clock in seconds (for testing).
    """

    def __init__(
        self,
        tick_interval: float = DEFAULT_TICK_INTERVAL,
        hold_timeout: float = DEFAULT_HOLD_TIMEOUT,
        error_message: str = DEFAULT_ERROR_MESSAGE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._tick_interval = tick_interval
        self._hold_timeout = hold_timeout
        self._error_message = error_message
        self._clock = clock

        self._position = FULLY_CLOSED
        self._mode = DrivingMode.NONE
        self._last_command_time = clock()
        self._simulated_error = ""

        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # -------------------------------------------------------------------
    # Worker lifecycle
    # -------------------------------------------------------------------

    def start(self) -> None:
        """Start the tick worker in a background thread."""
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._tick_loop, daemon=True, name="actuator-sim"
        )
        self._thread.start()
        logger.info("Simulated actuator started (tick=%.3fs)", self._tick_interval)

    def stop_worker(self) -> None:
        """Signal the tick worker to exit and wait for it."""
        if self._thread is None:
            return
        self._stop_event.set()
        self._thread.join(timeout=max(3.0, self._tick_interval * 2))
        if self._thread.is_alive():
            logger.warning("Simulated actuator worker did not exit in time")
            return
        self._thread = None
        logger.info("Simulated actuator stopped")

    def _tick_loop(self) -> None:
        while not self._stop_event.wait(self._tick_interval):
            self.tick()

    def tick(self) -> None:
        """Advance the simulation by one step."""
        with self._lock:
            mode = self._mode
            if mode.is_hold and self._clock() - self._last_command_time > self._hold_timeout:
                # Hold command was not refreshed in time
                self._mode = DrivingMode.NONE
                logger.debug("Hold command expired at position %d", self._position)
                return

            if mode.is_opening:
                if self._position == FULLY_OPEN:
                    self._mode = DrivingMode.NONE
                    return
                self._position += 1
            elif mode.is_closing:
                if self._position == FULLY_CLOSED:
                    self._mode = DrivingMode.NONE
                    return
                self._position -= 1

    # -------------------------------------------------------------------
    # Command interface
    # -------------------------------------------------------------------

    def status(self) -> StatusSnapshot:
        with self._lock:
            return self._snapshot()

    def open(self, client_time: datetime) -> StatusSnapshot:
        return self._drive(DrivingMode.OPEN_HOLD, client_time)

    def close(self, client_time: datetime) -> StatusSnapshot:
        return self._drive(DrivingMode.CLOSE_HOLD, client_time)

    def open_to_end(self, client_time: datetime) -> StatusSnapshot:
        return self._drive(DrivingMode.OPEN_TO_END, client_time)

    def close_to_end(self, client_time: datetime) -> StatusSnapshot:
        return self._drive(DrivingMode.CLOSE_TO_END, client_time)

    def stop(self, client_time: datetime) -> StatusSnapshot:
        with self._lock:
            logger.debug("stop (client time %s)", client_time.isoformat())
            self._last_command_time = self._clock()
            self._mode = DrivingMode.NONE
            return self._snapshot()

    def set_simulated_error(self, active: bool) -> None:
        with self._lock:
            if active:
                self._mode = DrivingMode.NONE
                self._simulated_error = self._error_message
            else:
                self._simulated_error = ""
        logger.info("Simulated error %s", "enabled" if active else "cleared")

    def _drive(self, mode: DrivingMode, client_time: datetime) -> StatusSnapshot:
        with self._lock:
            logger.debug("%s (client time %s)", mode.value, client_time.isoformat())
            end = FULLY_OPEN if mode.is_opening else FULLY_CLOSED
            if self._position == end:
                # Already there, nothing to do
                return self._snapshot()
            self._last_command_time = self._clock()
            self._mode = mode
            return self._snapshot()

    def _snapshot(self) -> StatusSnapshot:
        """Build a snapshot; the caller must hold the lock."""
        if self._position == FULLY_CLOSED:
            position = PositionState.CLOSED
        elif self._position == FULLY_OPEN:
            position = PositionState.OPEN
        else:
            position = PositionState.INBETWEEN

        if self._simulated_error:
            status = ActuatorStatus.ERROR
        elif self._mode is DrivingMode.NONE:
            status = ActuatorStatus.IDLE
        else:
            status = ActuatorStatus.DRIVING

        return StatusSnapshot(
            status=status,
            position=position,
            error=self._simulated_error or None,
        )
