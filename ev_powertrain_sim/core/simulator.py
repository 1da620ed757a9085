"""
Simulator module for EV powertrain simulation.

This module provides the engine-facing API used by user interfaces, renderers and
exporters. The simulator owns the parameter set, the engine state, the commanded
acceleration, the lifecycle and the history buffers. `Simulator.tick` is the only
operation that mutates the engine state and the history; it runs under the same
lock as every lifecycle command, so a stop or reset is never interleaved with a
half-applied tick.
"""

import math
import time
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Any

from ..exceptions import ParameterError
from ..utils.constants import LifecycleState, DEFAULT_HISTORY_CAPACITY
from ..utils.validation import is_real_number
from .parameters import SimulationParameters
from .state import EngineState
from .physics import PhysicsEngine
from .history import HistoryBuffers, HistoryView
from .lifecycle import SimulationLifecycle

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger("Simulator")


@dataclass(frozen=True)
class SimulationSnapshot:
    """Read-only view of the simulation at one instant."""
    state: EngineState
    parameters: SimulationParameters
    lifecycle: LifecycleState
    command: float
    history: HistoryView
    tick_count: int
    elapsed_time: float  # simulated seconds since the last reset


class Simulator:
    """
    Core simulation engine for EV powertrain simulation.

    Ticks are applied only while the lifecycle is Running. After every applied tick
    the new state is recorded in the history buffers and the registered listeners
    receive a snapshot.
    """

    def __init__(self, parameters: Optional[SimulationParameters] = None,
                 engine: Optional[PhysicsEngine] = None,
                 history_capacity: int = DEFAULT_HISTORY_CAPACITY,
                 clock: Callable[[], float] = time.monotonic):
        """
        Initialize simulator with default or supplied parameters.

        Args:
            parameters: Initial parameter set
            engine: Physics engine (defaults to PhysicsEngine())
            history_capacity: Samples kept per history channel
            clock: Monotonic clock used by the lifecycle
        """
        self.engine = engine if engine is not None else PhysicsEngine()
        self._parameters = parameters if parameters is not None else SimulationParameters()
        self._state = EngineState.initial(self._parameters)
        self._command = 0.0
        self.lifecycle = SimulationLifecycle(clock)
        self.history = HistoryBuffers(self._state, history_capacity)

        self.tick_count = 0
        self.elapsed_time = 0.0

        self._listeners: List[Callable[[SimulationSnapshot], None]] = []
        self._lock = threading.RLock()

        logger.info(f"Simulator initialized (drive mode: {self._parameters.drive_mode}, "
                    f"history capacity: {history_capacity})")

    @classmethod
    def from_config(cls, config) -> 'Simulator':
        """
        Create a simulator from a SimulationConfig.

        Args:
            config: SimulationConfig instance

        Returns:
            Configured Simulator
        """
        return cls(parameters=config.parameters,
                   engine=PhysicsEngine(config.engine),
                   history_capacity=config.history_capacity)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def parameters(self) -> SimulationParameters:
        return self._parameters

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def command(self) -> float:
        return self._command

    @property
    def lifecycle_state(self) -> LifecycleState:
        return self.lifecycle.state

    def snapshot(self) -> SimulationSnapshot:
        """
        Current state, parameters and chronological history.

        The history in the snapshot is a live view of the buffers; use
        `detached_snapshot` when the snapshot leaves the ticking thread.
        """
        with self._lock:
            return self._build_snapshot(self.history.snapshot())

    def detached_snapshot(self) -> SimulationSnapshot:
        """Snapshot whose history is a private copy of the buffers."""
        with self._lock:
            return self._build_snapshot(self.history.copy().snapshot())

    def _build_snapshot(self, history: HistoryView) -> SimulationSnapshot:
        return SimulationSnapshot(
            state=self._state,
            parameters=self._parameters,
            lifecycle=self.lifecycle.state,
            command=self._command,
            history=history,
            tick_count=self.tick_count,
            elapsed_time=self.elapsed_time,
        )

    # ------------------------------------------------------------------
    # Parameters and command
    # ------------------------------------------------------------------

    def set_parameter(self, name: str, value: Any) -> None:
        """
        Set one parameter.

        Args:
            name: Parameter name
            value: New value, validated against the parameter's declared range

        Raises:
            ParameterError: If the value is rejected; the previous value is kept
        """
        self.set_parameters(**{name: value})

    def set_parameters(self, **values) -> None:
        """
        Set several parameters at once; either all are applied or none.

        Raises:
            ParameterError: If any value is rejected; the previous values are kept
        """
        with self._lock:
            try:
                self._parameters = self._parameters.with_values(**values)
            except ParameterError as e:
                logger.warning(f"Rejected parameter {e.name}={e.value!r}: {e}")
                raise

        logger.info(f"Parameters updated: {values}")

    def set_drive_mode(self, mode: str) -> None:
        """
        Select a drive mode.

        Raises:
            UnknownDriveModeError: If the mode is not in the drive mode table
        """
        self.set_parameter('drive_mode', mode)

    def set_command(self, acceleration: float) -> None:
        """
        Set the commanded acceleration in m/s². Clamping to the drive mode limit
        happens when the command is applied.

        Raises:
            ParameterError: If the command is not a finite number
        """
        if not is_real_number(acceleration):
            raise ParameterError('command', acceleration,
                                 f"Commanded acceleration must be a finite number, got {acceleration!r}")
        self._command = float(acceleration)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        with self._lock:
            self.lifecycle.start()

    def pause(self) -> None:
        with self._lock:
            self.lifecycle.pause()

    def resume(self) -> None:
        with self._lock:
            self.lifecycle.resume()

    def toggle_pause(self) -> LifecycleState:
        with self._lock:
            return self.lifecycle.toggle_pause()

    def stop(self) -> None:
        """Stop the simulation, keeping the engine state and history."""
        with self._lock:
            self.lifecycle.stop()

    def reset(self) -> None:
        """Stop the simulation and restore the default engine state and history."""
        with self._lock:
            self.lifecycle.reset()
            self._state = EngineState.initial(self._parameters)
            self.history.reset(self._state)
            self.tick_count = 0
            self.elapsed_time = 0.0
            snapshot = self._build_snapshot(self.history.snapshot())

        logger.info("Simulation reset to initial state")
        self._notify(snapshot)

    # ------------------------------------------------------------------
    # Ticking
    # ------------------------------------------------------------------

    def tick(self, dt: float) -> bool:
        """
        Advance the simulation by dt seconds.

        Args:
            dt: Time step in seconds, clamped to the engine's maximum step

        Returns:
            True if the tick was applied, False if it was discarded (not running,
            or dt not positive)
        """
        with self._lock:
            if not self.lifecycle.is_running:
                return False
            if not math.isfinite(dt) or dt <= 0:
                return False

            dt = self.engine.clamp_step(dt)
            parameters = self._parameters
            command = self._command

            self._state = self.engine.advance(self._state, parameters, command, dt)
            self.history.record(self._state)
            self.tick_count += 1
            self.elapsed_time += dt
            snapshot = self._build_snapshot(self.history.snapshot())

        self._notify(snapshot)
        return True

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: Callable[[SimulationSnapshot], None]) -> None:
        """Register a callback invoked with a snapshot whenever the state changes."""
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def remove_listener(self, listener: Callable[[SimulationSnapshot], None]) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _notify(self, snapshot: SimulationSnapshot) -> None:
        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"State listener {listener!r} failed: {str(e)}")

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export(self, directory: Optional[str] = None) -> str:
        """
        Export the history to a timestamped CSV file.

        Args:
            directory: Output directory (current directory if None)

        Returns:
            Path of the written file

        Raises:
            ExportError: If the file cannot be written
        """
        from ..utils.export import export_history

        return export_history(self.detached_snapshot(), directory)

    def status(self) -> Dict[str, float]:
        """Current engine state as a dictionary."""
        return self._state.to_dict()
