"""
Reading History Store

Fixed-capacity, per-pump rolling buffers of prior readings.

Each pump owns one bounded deque (oldest evicted first) and one lock. An
evaluation cycle holds its pump's lock for append-then-evaluate so statistics
never see a history that another evaluation of the same pump is mutating.
Different pumps never share state.
"""

from collections import deque
from contextlib import contextmanager
from threading import Lock, RLock
from typing import Dict, Iterator, List, Optional

import numpy as np
import pandas as pd

from .config import CONFIG, PARAMETER_NAMES
from .records import Parameter, Reading


class HistoryStore:
    """
    Bounded chronological reading buffers keyed by pump id.
    """

    def __init__(self, capacity: Optional[int] = None, cfg=CONFIG):
        capacity = cfg['history']['capacity'] if capacity is None else capacity
        if capacity < 1:
            raise ValueError(f"History capacity must be positive, got {capacity}")
        self.capacity = int(capacity)
        self._buffers: Dict[str, deque] = {}
        self._locks: Dict[str, RLock] = {}
        self._registry_lock = Lock()

    def _ensure(self, pump_id: str) -> deque:
        with self._registry_lock:
            buf = self._buffers.get(pump_id)
            if buf is None:
                buf = deque(maxlen=self.capacity)
                self._buffers[pump_id] = buf
                self._locks[pump_id] = RLock()
            return buf

    def lock(self, pump_id: str) -> RLock:
        """Return the lock guarding one pump's history."""
        self._ensure(pump_id)
        return self._locks[pump_id]

    @contextmanager
    def locked(self, pump_id: str) -> Iterator[deque]:
        """Hold a pump's lock and yield its live buffer."""
        buf = self._ensure(pump_id)
        with self._locks[pump_id]:
            yield buf

    def append(self, reading: Reading) -> int:
        """
        Append a reading at the tail, evicting from the head when full.

        Returns:
            History length after the append
        """
        with self.locked(reading.pump_id) as buf:
            buf.append(reading)
            return len(buf)

    def get(self, pump_id: str) -> List[Reading]:
        """Snapshot of a pump's history, oldest first."""
        with self._registry_lock:
            buf = self._buffers.get(pump_id)
            lock = self._locks.get(pump_id)
        if buf is None:
            return []
        with lock:
            return list(buf)

    def length(self, pump_id: str) -> int:
        with self._registry_lock:
            buf = self._buffers.get(pump_id)
        return 0 if buf is None else len(buf)

    def pump_ids(self) -> List[str]:
        with self._registry_lock:
            return list(self._buffers)

    def clear(self, pump_id: Optional[str] = None) -> None:
        """Drop one pump's history, or every pump's when no id is given."""
        targets = [pump_id] if pump_id is not None else self.pump_ids()
        for pid in targets:
            with self._registry_lock:
                buf = self._buffers.get(pid)
                lock = self._locks.get(pid)
            if buf is not None:
                with lock:
                    buf.clear()

    def __contains__(self, pump_id: str) -> bool:
        return self.length(pump_id) > 0

    def __len__(self) -> int:
        return len(self.pump_ids())


def history_matrix(readings) -> np.ndarray:
    """
    Stack readings into an (n, 6) array in Parameter order.

    Args:
        readings: Sequence of Reading, oldest first

    Returns:
        ndarray of float64
    """
    if len(readings) == 0:
        return np.empty((0, len(Parameter)), dtype=float)
    return np.array(
        [[getattr(r, p.value) for p in Parameter] for r in readings],
        dtype=float,
    )


def history_frame(readings) -> pd.DataFrame:
    """
    Convert readings to a DataFrame with timestamp, pump_id and parameter columns.

    Args:
        readings: Sequence of Reading, oldest first

    Returns:
        DataFrame in chronological order
    """
    columns = ['timestamp', 'pump_id', *PARAMETER_NAMES]
    if len(readings) == 0:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame(
        [[r.timestamp, r.pump_id, *(getattr(r, name) for name in PARAMETER_NAMES)] for r in readings],
        columns=columns,
    )
