# flight_telemetry/windowed_series.py
from collections import deque
from typing import Deque, Optional, Tuple

from .model import Quantity, Sample


class WindowedSeries:
    """
    Sliding window over the most recent samples of one quantity.

    Samples are appended in time order; once the window holds ``capacity``
    samples every append evicts the oldest one.

    The engine is the only writer. Readers take ``snapshot()``, an immutable
    tuple, so a redraw never sees a half-applied update.
    """

    def __init__(self, quantity: Quantity, capacity: Optional[int] = None):
        self.quantity = quantity
        self.capacity = capacity if capacity is not None else quantity.capacity
        if self.capacity <= 0:
            raise ValueError(f"capacity must be positive, got {self.capacity}")
        self._samples: Deque[Sample] = deque(maxlen=self.capacity)

    def append(self, sample: Sample) -> None:
        """Add one sample, dropping the oldest when full."""
        self._samples.append(sample)

    def reset(self) -> None:
        """Empty the window (mode transitions only)."""
        self._samples.clear()

    def snapshot(self) -> Tuple[Sample, ...]:
        return tuple(self._samples)

    def latest(self) -> Optional[Sample]:
        return self._samples[-1] if self._samples else None

    def __len__(self) -> int:
        return len(self._samples)

    def __repr__(self) -> str:
        return f"WindowedSeries({self.quantity.value}, {len(self)}/{self.capacity})"
