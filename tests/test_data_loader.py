"""Tests for reading, threshold and pump catalogue loading."""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pandas as pd
import pytest

from pump_anomaly_detection.core.validators import ConfigurationError
from pump_anomaly_detection.data_loader import (
    load_pump_profiles,
    load_readings,
    load_threshold_table,
    readings_from_frame,
)
from pump_anomaly_detection.records import Parameter, ThresholdRange


def _write_readings(path: Path) -> Path:
    path.write_text(
        "timestamp,pumpId,vibration,temperature,pressure,flowRate,current,voltage\n"
        "2000,PUMP-002,1.8,42.0,2.7,170.0,8.0,465.0\n"
        "1000,PUMP-001,2.1,45.0,3.0,200.0,10.0,460.0\n"
        "1500,PUMP-001,,45.0,3.0,200.0,10.0,460.0\n"
        "1000,PUMP-002,1.9,41.0,2.6,171.0,8.1,466.0\n",
        encoding="utf-8",
    )
    return path


def test_load_readings_normalizes_columns_and_drops_incomplete_rows(tmp_path: Path) -> None:
    readings = load_readings(_write_readings(tmp_path / "readings.csv"))

    assert [(r.timestamp, r.pump_id) for r in readings] == [
        (1000, "PUMP-001"),
        (1000, "PUMP-002"),
        (2000, "PUMP-002"),
    ]
    assert readings[0].flow_rate == 200.0
    assert isinstance(readings[0].timestamp, int)


def test_readings_from_frame_rejects_missing_columns() -> None:
    frame = pd.DataFrame({"timestamp": [0], "pump_id": ["PUMP-001"], "vibration": [2.0]})

    with pytest.raises(ValueError, match="Missing required columns"):
        readings_from_frame(frame)


def test_non_numeric_values_are_dropped() -> None:
    frame = pd.DataFrame({
        "timestamp": [0, 1000],
        "pump_id": ["PUMP-001", "PUMP-001"],
        "vibration": ["n/a", 2.0],
        "temperature": [45.0, 45.0],
        "pressure": [3.0, 3.0],
        "flow_rate": [200.0, 200.0],
        "current": [10.0, 10.0],
        "voltage": [460.0, 460.0],
    })

    readings = readings_from_frame(frame)

    assert [r.timestamp for r in readings] == [1000]


def test_default_threshold_table() -> None:
    table = load_threshold_table()

    assert sorted(table) == ["PUMP-001", "PUMP-002", "PUMP-003", "PUMP-004"]
    assert table["PUMP-001"][Parameter.VIBRATION] == ThresholdRange(min=0.0, max=4.5)
    assert table["PUMP-002"][Parameter.FLOW_RATE] == ThresholdRange(min=150.0, max=190.0)


def test_threshold_table_from_csv(tmp_path: Path) -> None:
    rows = [
        ("PUMP-010", "vibration", 0.0, 4.0),
        ("PUMP-010", "temperature", 20.0, 70.0),
        ("PUMP-010", "pressure", 2.5, 2.9),
        ("PUMP-010", "flowRate", 150.0, 190.0),
        ("PUMP-010", "current", 6.0, 10.0),
        ("PUMP-010", "voltage", 440.0, 480.0),
    ]
    path = tmp_path / "thresholds.csv"
    pd.DataFrame(rows, columns=["pumpId", "parameter", "min", "max"]).to_csv(path, index=False)

    table = load_threshold_table(str(path))

    assert list(table) == ["PUMP-010"]
    assert table["PUMP-010"][Parameter.FLOW_RATE] == ThresholdRange(min=150.0, max=190.0)


def test_degenerate_threshold_is_rejected_at_load() -> None:
    source = {"PUMP-001": {name: {"min": 0.0, "max": 1.0} for name in ["vibration", "temperature", "pressure",
                                                                       "flow_rate", "current", "voltage"]}}
    source["PUMP-001"]["pressure"] = {"min": 3.0, "max": 3.0}

    with pytest.raises(ConfigurationError, match="PUMP-001.pressure"):
        load_threshold_table(source)


def test_unknown_threshold_parameter_is_rejected() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        load_threshold_table({"PUMP-001": {"humidity": {"min": 0.0, "max": 1.0}}})

    assert excinfo.value.pump_id == "PUMP-001"


def test_incomplete_pump_is_rejected() -> None:
    with pytest.raises(ConfigurationError, match="missing ranges"):
        load_threshold_table({"PUMP-001": {"vibration": {"min": 0.0, "max": 4.5}}})


def test_pump_profiles_parse_maintenance_dates() -> None:
    profiles = load_pump_profiles()

    pump = profiles["PUMP-004"]
    assert pump.name == "Ballast Water Pump"
    assert pump.last_maintenance == date(2023, 9, 10)
    assert pump.days_since_maintenance(date(2023, 9, 20)) == 10
