"""
Simulation lifecycle for EV powertrain simulation.

A small state machine (Stopped, Running, Paused) deciding whether ticks reach the
physics engine. Every entry into Running opens a new run epoch; the tick scheduler
watches the epoch so that time spent stopped or paused is never applied as a step.
"""

import time
import logging
from typing import Callable, Optional

from ..exceptions import LifecycleError
from ..utils.constants import LifecycleState

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger("Lifecycle")


class SimulationLifecycle:
    """Stopped / Running / Paused state machine gating the simulation ticks."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        """
        Initialize the lifecycle in the Stopped state.

        Args:
            clock: Monotonic clock used to timestamp entries into Running
        """
        self._clock = clock
        self._state = LifecycleState.STOPPED
        self.run_epoch = 0
        self.reference_time: Optional[float] = None

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is LifecycleState.RUNNING

    @property
    def is_paused(self) -> bool:
        return self._state is LifecycleState.PAUSED

    @property
    def is_stopped(self) -> bool:
        return self._state is LifecycleState.STOPPED

    def start(self) -> None:
        """Stopped -> Running."""
        self._require(LifecycleState.STOPPED, action='start')
        self._enter_running()
        logger.info("Simulation started")

    def pause(self) -> None:
        """Running -> Paused."""
        self._require(LifecycleState.RUNNING, action='pause')
        self._state = LifecycleState.PAUSED
        logger.info("Simulation paused")

    def resume(self) -> None:
        """Paused -> Running."""
        self._require(LifecycleState.PAUSED, action='resume')
        self._enter_running()
        logger.info("Simulation resumed")

    def toggle_pause(self) -> LifecycleState:
        """Pause when running, resume when paused. Returns the new state."""
        if self._state is LifecycleState.RUNNING:
            self.pause()
        elif self._state is LifecycleState.PAUSED:
            self.resume()
        else:
            raise LifecycleError("Cannot pause or resume a stopped simulation")
        return self._state

    def stop(self) -> None:
        """Running or Paused -> Stopped. The engine state is kept."""
        if self._state is LifecycleState.STOPPED:
            raise LifecycleError("Cannot stop: simulation is already stopped")
        self._state = LifecycleState.STOPPED
        self.reference_time = None
        logger.info("Simulation stopped")

    def reset(self) -> None:
        """Any state -> Stopped."""
        self._state = LifecycleState.STOPPED
        self.reference_time = None
        logger.info("Simulation lifecycle reset")

    def _enter_running(self) -> None:
        self._state = LifecycleState.RUNNING
        self.run_epoch += 1
        self.reference_time = self._clock()

    def _require(self, expected: LifecycleState, action: str) -> None:
        if self._state is not expected:
            raise LifecycleError(
                f"Cannot {action}: simulation is {self._state.name.lower()}, "
                f"expected {expected.name.lower()}")
