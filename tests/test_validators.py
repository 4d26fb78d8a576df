"""Tests for load-time and per-reading validation."""

from __future__ import annotations

import pytest

from pump_anomaly_detection.config import make_config
from pump_anomaly_detection.core.validators import (
    ConfigValidator,
    ConfigurationError,
    ReadingValidator,
    ThresholdValidator,
    validate_engine_inputs,
)
from pump_anomaly_detection.data_loader import load_threshold_table
from pump_anomaly_detection.records import Parameter, Reading, ThresholdRange


def _reading(**overrides) -> Reading:
    values = dict(vibration=2.1, temperature=45.0, pressure=3.0, flow_rate=200.0, current=10.0, voltage=460.0)
    values.update(overrides)
    return Reading(timestamp=0, pump_id="PUMP-001", **values)


def test_reference_table_is_valid() -> None:
    is_valid, errors = ThresholdValidator.validate_table(load_threshold_table())

    assert is_valid
    assert errors == []


@pytest.mark.parametrize("rng", [ThresholdRange(3.0, 3.0), ThresholdRange(3.2, 2.8), ThresholdRange(0.0, float("inf"))])
def test_degenerate_ranges_are_reported(rng: ThresholdRange) -> None:
    errors = ThresholdValidator.validate_range("PUMP-001", Parameter.PRESSURE, rng)

    assert len(errors) == 1
    assert "PUMP-001.pressure" in errors[0]


def test_missing_parameter_ranges_are_reported() -> None:
    ranges = {Parameter.VIBRATION: ThresholdRange(0.0, 4.5)}

    is_valid, errors = ThresholdValidator.validate_pump("PUMP-001", ranges)

    assert not is_valid
    assert "missing ranges" in errors[0]
    assert "flow_rate" in errors[0]


def test_empty_table_is_invalid() -> None:
    is_valid, errors = ThresholdValidator.validate_table({})

    assert not is_valid
    assert errors == ["Threshold table is empty"]


def test_reading_with_non_finite_value_is_invalid() -> None:
    is_valid, errors = ReadingValidator.validate_reading(_reading(current=float("inf")))

    assert not is_valid
    assert errors == ["PUMP-001.current: non-finite value inf"]


def test_non_reading_is_invalid() -> None:
    is_valid, errors = ReadingValidator.validate_reading({"pump_id": "PUMP-001"})

    assert not is_valid
    assert "Expected Reading" in errors[0]


def test_default_config_is_valid() -> None:
    assert ConfigValidator.validate_config(make_config()) == (True, [])


def test_trend_windows_must_fit_history() -> None:
    cfg = make_config(history={"capacity": 15})

    is_valid, errors = ConfigValidator.validate_config(cfg)

    assert not is_valid
    assert "Trend min_samples exceeds history capacity" in errors


def test_pattern_with_unknown_parameter_is_rejected() -> None:
    cfg = make_config()
    cfg["patterns"].append({
        "name": "seal_leak",
        "conditions": [("humidity", ">", 80.0)],
        "confidence": 0.7,
    })

    with pytest.raises(ConfigurationError) as excinfo:
        validate_engine_inputs(cfg)

    assert "seal_leak" in str(excinfo.value)
