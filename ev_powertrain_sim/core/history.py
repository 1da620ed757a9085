"""
History buffers for EV powertrain simulation.

Seven fixed-capacity circular buffers, one per recorded channel, share a single
write cursor. The buffers always hold exactly `capacity` samples: they are filled
with a default state on creation and on reset, and every tick overwrites the
oldest sample. Readers see the samples in chronological order regardless of where
the cursor sits.
"""

from typing import NamedTuple, Iterator, Tuple

import numpy as np
import pandas as pd

from ..utils.constants import DEFAULT_HISTORY_CAPACITY


class HistoryChannel(NamedTuple):
    """A recorded channel: its name, the EngineState field it samples, and its column label."""
    name: str
    attribute: str
    label: str


HISTORY_CHANNELS = (
    HistoryChannel('voltage', 'pack_voltage', 'Voltage (V)'),
    HistoryChannel('current', 'pack_current', 'Current (A)'),
    HistoryChannel('speed', 'speed', 'Speed (km/h)'),
    HistoryChannel('temperature', 'battery_temp', 'Temperature (°C)'),
    HistoryChannel('soc', 'soc', 'SoC (%)'),
    HistoryChannel('torque', 'motor_torque', 'Torque (Nm)'),
    HistoryChannel('efficiency', 'energy_efficiency', 'Efficiency (Wh/km)'),
)

CHANNEL_NAMES = tuple(channel.name for channel in HISTORY_CHANNELS)
_CHANNEL_INDEX = {channel.name: i for i, channel in enumerate(HISTORY_CHANNELS)}


class HistorySample(NamedTuple):
    """One tick of recorded channels."""
    voltage: float
    current: float
    speed: float
    temperature: float
    soc: float
    torque: float
    efficiency: float


class HistoryBuffers:
    """Circular buffers recording the engine outputs of the last `capacity` ticks."""

    def __init__(self, initial_state=None, capacity: int = DEFAULT_HISTORY_CAPACITY):
        """
        Allocate the buffers.

        Args:
            initial_state: EngineState used to fill every slot (zeros if None)
            capacity: Number of samples kept per channel
        """
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise ValueError(f"History capacity must be a positive integer, got {capacity!r}")

        self._capacity = capacity
        self._data = np.zeros((len(HISTORY_CHANNELS), capacity), dtype=float)
        self._cursor = 0
        self._view = HistoryView(self)

        if initial_state is not None:
            self.reset(initial_state)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def cursor(self) -> int:
        """Slot the next sample will be written to (also the oldest sample)."""
        return self._cursor

    def __len__(self) -> int:
        return self._capacity

    def record(self, state) -> None:
        """Write the state's channel values at the cursor and advance the cursor."""
        column = self._cursor
        for row, channel in enumerate(HISTORY_CHANNELS):
            self._data[row, column] = getattr(state, channel.attribute)
        self._cursor = (column + 1) % self._capacity

    def reset(self, state) -> None:
        """Fill every slot with the state's channel values and rewind the cursor."""
        for row, channel in enumerate(HISTORY_CHANNELS):
            self._data[row, :] = getattr(state, channel.attribute)
        self._cursor = 0

    def snapshot(self) -> 'HistoryView':
        """
        Chronological, read-only view of the buffers.

        The view reads the live buffers and is not a copy: use `copy()` before
        handing the history to another thread.
        """
        return self._view

    def sample(self, index: int) -> HistorySample:
        """Sample at a chronological index (0 is the oldest, -1 the newest)."""
        if not -self._capacity <= index < self._capacity:
            raise IndexError(f"History index {index} out of range for capacity {self._capacity}")
        slot = (self._cursor + index) % self._capacity
        return HistorySample(*self._data[:, slot].tolist())

    def channel(self, name: str) -> np.ndarray:
        """One channel in chronological order, as a new array."""
        try:
            row = _CHANNEL_INDEX[name]
        except KeyError:
            raise KeyError(f"Unknown history channel: {name!r}") from None
        return np.roll(self._data[row], -self._cursor)

    def copy(self) -> 'HistoryBuffers':
        """Detached copy of the buffers, safe to read from another thread."""
        duplicate = HistoryBuffers(capacity=self._capacity)
        duplicate._data[:] = self._data
        duplicate._cursor = self._cursor
        return duplicate


class HistoryView:
    """
    Lazy, restartable sequence of the history samples, oldest first.

    Iterating never copies the underlying arrays, and each iteration starts again
    from the oldest sample.
    """

    def __init__(self, buffers: HistoryBuffers):
        self._buffers = buffers

    @property
    def channels(self) -> Tuple[str, ...]:
        return CHANNEL_NAMES

    def __len__(self) -> int:
        return self._buffers.capacity

    def __iter__(self) -> Iterator[HistorySample]:
        for index in range(self._buffers.capacity):
            yield self._buffers.sample(index)

    def __getitem__(self, index: int) -> HistorySample:
        return self._buffers.sample(index)

    def channel(self, name: str) -> np.ndarray:
        return self._buffers.channel(name)

    def to_frame(self) -> pd.DataFrame:
        """History as a DataFrame with one column per channel, indexed 0..capacity-1."""
        frame = pd.DataFrame({name: self._buffers.channel(name) for name in CHANNEL_NAMES})
        frame.index.name = 'index'
        return frame
