"""
Tick scheduling for EV powertrain simulation.

`TickScheduler` turns clock readings into time steps and drives one simulator tick
per call. `SimulationRunner` is the single driving loop: a dedicated thread that
calls the scheduler at the nominal period and hands immutable snapshots to
consumers on other threads.
"""

import math
import queue
import time
import logging
import threading
from typing import Callable, Optional, Union

from ..utils.constants import TimingMode, DEFAULT_NOMINAL_STEP
from .simulator import Simulator, SimulationSnapshot

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger("Scheduler")


class TickScheduler:
    """
    Supplies the time step for each tick and drives the simulator.

    In WALL_CLOCK mode dt is the clock delta since the previous tick, except for the
    first tick of every run epoch (after start or resume), which uses the nominal
    step. In FIXED mode every tick uses the nominal step.
    """

    def __init__(self, simulator: Simulator,
                 timing_mode: Union[TimingMode, str] = TimingMode.WALL_CLOCK,
                 nominal_step: float = DEFAULT_NOMINAL_STEP,
                 clock: Callable[[], float] = time.monotonic):
        """
        Initialize the scheduler.

        Args:
            simulator: Simulator to drive
            timing_mode: TimingMode or its name ('wall_clock', 'fixed')
            nominal_step: Nominal frame period in seconds
            clock: Monotonic clock in seconds
        """
        if isinstance(timing_mode, str):
            try:
                timing_mode = TimingMode[timing_mode.upper()]
            except KeyError:
                raise ValueError(f"Unknown timing mode: {timing_mode}") from None
        if not nominal_step > 0 or not math.isfinite(nominal_step):
            raise ValueError(f"Nominal step must be positive, got {nominal_step!r}")

        self.simulator = simulator
        self.timing_mode = timing_mode
        self.nominal_step = nominal_step
        self._clock = clock
        self._last_time: Optional[float] = None
        self._epoch = None

        logger.info(f"Tick scheduler initialized ({timing_mode.name}, nominal step {nominal_step:.5f}s)")

    def next_step(self, now: Optional[float] = None) -> float:
        """
        Compute the time step for a tick happening now.

        Args:
            now: Clock reading (read from the clock if None)

        Returns:
            Time step in seconds, clamped to the engine's maximum step
        """
        if self.timing_mode is TimingMode.FIXED:
            return self.simulator.engine.clamp_step(self.nominal_step)

        if now is None:
            now = self._clock()

        epoch = self.simulator.lifecycle.run_epoch
        if self._last_time is None or epoch != self._epoch:
            dt = self.nominal_step
        else:
            dt = now - self._last_time

        self._last_time = now
        self._epoch = epoch
        return self.simulator.engine.clamp_step(dt)

    def tick(self, now: Optional[float] = None) -> bool:
        """
        Run one tick if the simulation is running.

        Returns:
            True if the simulator applied the tick
        """
        if not self.simulator.lifecycle.is_running:
            self._last_time = None
            return False

        return self.simulator.tick(self.next_step(now))


class SimulationRunner:
    """
    Dedicated thread that owns all ticks of a simulator.

    After every tick the runner publishes a detached snapshot, both as the
    `latest` attribute (replaced in a single assignment) and through a one-slot
    queue where a newer snapshot displaces an unread older one.
    """

    def __init__(self, scheduler: TickScheduler, period: Optional[float] = None):
        """
        Initialize the runner.

        Args:
            scheduler: Tick scheduler to call
            period: Loop period in seconds (defaults to the scheduler's nominal step)
        """
        self.scheduler = scheduler
        self.period = period if period is not None else scheduler.nominal_step
        self.latest: Optional[SimulationSnapshot] = None
        self.snapshots: 'queue.Queue[SimulationSnapshot]' = queue.Queue(maxsize=1)

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the driving thread."""
        if self.is_alive:
            raise RuntimeError("Simulation runner is already running")

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="SimulationRunner", daemon=True)
        self._thread.start()
        logger.info(f"Simulation runner started (period {self.period:.4f}s)")

    def stop(self, timeout: Optional[float] = None) -> bool:
        """
        Stop the driving thread and wait for it to finish.

        Args:
            timeout: Seconds to wait for the thread (forever if None)

        Returns:
            True if the thread has exited; False if it is still finishing a tick,
            in which case the runner cannot be started again yet
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("Simulation runner did not stop within the timeout")
                return False
            self._thread = None
        logger.info("Simulation runner stopped")
        return True

    def poll(self) -> Optional[SimulationSnapshot]:
        """Newest unread snapshot, or None if nothing was published since the last poll."""
        try:
            return self.snapshots.get_nowait()
        except queue.Empty:
            return None

    def run_once(self) -> bool:
        """Drive a single tick and publish the resulting snapshot."""
        applied = self.scheduler.tick()
        if applied:
            self._publish(self.scheduler.simulator.detached_snapshot())
        return applied

    def _run(self) -> None:
        while not self._stop_event.wait(self.period):
            try:
                self.run_once()
            except Exception as e:
                logger.error(f"Simulation tick failed, stopping runner: {str(e)}")
                self._stop_event.set()

    def _publish(self, snapshot: SimulationSnapshot) -> None:
        self.latest = snapshot
        try:
            self.snapshots.get_nowait()
        except queue.Empty:
            pass
        try:
            self.snapshots.put_nowait(snapshot)
        except queue.Full:
            pass
