"""Tests for the bounded per-pump history and windowed statistics."""

from __future__ import annotations

import math
import threading

import numpy as np
import pytest

from pump_anomaly_detection.features import (
    parameter_diagnostics,
    relative_trend,
    round_half_up,
    split_windows,
    window_stats,
    z_score,
)
from pump_anomaly_detection.history import HistoryStore, history_frame, history_matrix
from pump_anomaly_detection.records import Reading


def _reading(timestamp: int, pump_id: str = "PUMP-001", vibration: float = 2.0) -> Reading:
    return Reading(
        timestamp=timestamp,
        pump_id=pump_id,
        vibration=vibration,
        temperature=45.0,
        pressure=3.0,
        flow_rate=200.0,
        current=10.0,
        voltage=460.0,
    )


def test_history_evicts_oldest_first() -> None:
    store = HistoryStore(capacity=3)

    lengths = [store.append(_reading(ts)) for ts in range(5)]

    assert lengths == [1, 2, 3, 3, 3]
    assert [r.timestamp for r in store.get("PUMP-001")] == [2, 3, 4]


def test_history_is_per_pump() -> None:
    store = HistoryStore(capacity=3)
    store.append(_reading(0, "PUMP-001"))
    store.append(_reading(0, "PUMP-002"))
    store.append(_reading(1, "PUMP-002"))

    assert store.length("PUMP-001") == 1
    assert store.length("PUMP-002") == 2
    assert "PUMP-003" not in store
    assert store.get("PUMP-003") == []
    assert len(store) == 2


def test_clear_one_or_all_pumps() -> None:
    store = HistoryStore(capacity=3)
    store.append(_reading(0, "PUMP-001"))
    store.append(_reading(0, "PUMP-002"))

    store.clear("PUMP-001")
    assert store.length("PUMP-001") == 0
    assert store.length("PUMP-002") == 1

    store.clear()
    assert store.length("PUMP-002") == 0


def test_non_positive_capacity_is_rejected() -> None:
    with pytest.raises(ValueError):
        HistoryStore(capacity=0)


def test_concurrent_appends_never_exceed_capacity() -> None:
    store = HistoryStore(capacity=20)

    def worker(offset: int) -> None:
        for i in range(250):
            store.append(_reading(offset * 1000 + i))

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert store.length("PUMP-001") == 20


def test_history_matrix_and_frame() -> None:
    readings = [_reading(0, vibration=1.0), _reading(1, vibration=3.0)]

    matrix = history_matrix(readings)
    frame = history_frame(readings)

    assert matrix.shape == (2, 6)
    assert matrix[:, 0].tolist() == [1.0, 3.0]
    assert list(frame["vibration"]) == [1.0, 3.0]
    assert history_matrix([]).shape == (0, 6)
    assert history_frame([]).empty


def test_window_stats_use_population_std() -> None:
    mean, std = window_stats([2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0])

    assert mean == pytest.approx(5.0)
    assert std == pytest.approx(2.0)
    assert window_stats([]) == (None, None)


def test_z_score_guards_zero_variance() -> None:
    assert z_score(3.0, 2.0, 0.0) is None
    assert z_score(3.0, 2.0, float("nan")) is None
    assert z_score(3.0, 2.0, 1e-18) is None
    assert z_score(1.0, 2.0, 0.5) == pytest.approx(2.0)


def test_relative_trend_guards_zero_baseline() -> None:
    assert relative_trend(1.0, 0.0) is None
    assert relative_trend(None, 1.0) is None
    assert relative_trend(1.1, 1.0) == pytest.approx(0.1)
    assert relative_trend(0.9, 1.0) == pytest.approx(-0.1)


@pytest.mark.parametrize("value,expected", [(7.4, 7), (7.6, 8), (8.0, 8), (0.2, 0), (12.0, 12)])
def test_round_half_up(value: float, expected: int) -> None:
    assert round_half_up(value) == expected


def test_split_windows_takes_most_recent_rows() -> None:
    frame = history_frame([_reading(ts, vibration=float(ts)) for ts in range(25)])

    older, recent = split_windows(frame, 10)

    assert list(older["timestamp"]) == list(range(5, 15))
    assert list(recent["timestamp"]) == list(range(15, 25))


def test_parameter_diagnostics() -> None:
    diag = parameter_diagnostics(np.arange(20, dtype=float))

    assert diag["length"] == 20
    assert diag["mean"] == pytest.approx(9.5)
    assert diag["early_mean"] == pytest.approx(0.5)
    assert diag["late_mean"] == pytest.approx(18.5)
    assert diag["skew"] == pytest.approx(0.0, abs=1e-9)

    flat = parameter_diagnostics([3.0] * 5)
    assert math.isnan(flat["skew"])
    assert parameter_diagnostics([])["length"] == 0
