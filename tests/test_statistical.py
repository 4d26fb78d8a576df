"""Unit tests for the rolling z-score detector and pattern rules."""

from __future__ import annotations

import pytest

from pump_anomaly_detection.config import make_config
from pump_anomaly_detection.detectors.patterns import detect_patterns
from pump_anomaly_detection.detectors.statistical import StatisticalDetector
from pump_anomaly_detection.history import HistoryStore
from pump_anomaly_detection.records import Parameter, Reading, Severity


def _reading(pump_id: str = "PUMP-001", timestamp: int = 0, **overrides) -> Reading:
    values = dict(vibration=2.1, temperature=45.0, pressure=3.0, flow_rate=200.0, current=10.0, voltage=460.0)
    values.update(overrides)
    return Reading(timestamp=timestamp, pump_id=pump_id, **values)


def _feed(detector: StatisticalDetector, readings) -> list:
    findings = []
    for reading in readings:
        findings = detector.on_reading(reading)
    return findings


def test_no_statistical_findings_below_minimum_history() -> None:
    detector = StatisticalDetector()

    for i in range(9):
        extreme = 1e6 if i % 2 else -1e6
        findings = detector.on_reading(_reading(timestamp=i, pressure=extreme))
        assert findings == []

    assert detector.history.length("PUMP-001") == 9


def test_tenth_reading_is_scored() -> None:
    detector = StatisticalDetector()
    _feed(detector, [_reading(timestamp=i, vibration=2.0 if i % 2 else 2.2) for i in range(9)])

    findings = detector.on_reading(_reading(timestamp=9, vibration=4.0))

    # window of 10: mean 2.3, population std ~0.574 -> z ~= 2.96
    assert [(f.kind, f.severity) for f in findings] == [("statistical_anomaly_vibration", Severity.LOW)]
    assert findings[0].confidence == pytest.approx(0.74, abs=1e-3)
    assert type(findings[0].confidence) is float


def test_identical_history_does_not_divide_by_zero() -> None:
    detector = StatisticalDetector()

    findings = _feed(detector, [_reading(timestamp=i) for i in range(11)])

    assert findings == []
    assert detector.history.length("PUMP-001") == 11


def test_outlier_produces_statistical_finding() -> None:
    detector = StatisticalDetector()
    baseline = [_reading(timestamp=i, vibration=2.0 if i % 2 else 2.2) for i in range(20)]
    _feed(detector, baseline)

    findings = detector.on_reading(_reading(timestamp=20, vibration=4.0))

    assert len(findings) == 1
    finding = findings[0]
    # window of 21: ten 2.0, ten 2.2 and the new 4.0 -> z ~= 4.35
    assert finding.kind == "statistical_anomaly_vibration"
    assert finding.severity is Severity.CRITICAL
    assert finding.confidence == pytest.approx(0.99)
    assert finding.affected_parameters == (Parameter.VIBRATION,)
    assert "z-score: 4.35" in finding.description
    assert "7 days" in finding.recommendation
    assert "Immediate action required" in finding.recommendation


def test_z_score_severity_breakpoints() -> None:
    detector = StatisticalDetector()

    assert detector.get_severity(2.6) is Severity.LOW
    assert detector.get_severity(3.0) is Severity.LOW
    assert detector.get_severity(3.2) is Severity.MEDIUM
    assert detector.get_severity(3.6) is Severity.HIGH
    assert detector.get_severity(4.01) is Severity.CRITICAL


def test_confidence_and_days_to_failure() -> None:
    detector = StatisticalDetector()

    assert detector.confidence_for(3.0) == pytest.approx(0.75)
    assert detector.confidence_for(10.0) == pytest.approx(0.99)
    assert detector.days_to_failure(3.0) == 10
    assert detector.days_to_failure(4.0) == 8  # 7.5 rounds half up
    assert detector.days_to_failure(100.0) == 1

    text = detector.recommendation_for(Parameter.CURRENT, Severity.MEDIUM, 3.2)
    assert "Schedule maintenance accordingly" in text
    assert "9 days" in text


def test_electrical_fault_pattern() -> None:
    findings = StatisticalDetector().on_reading(_reading(pump_id="PUMP-003", current=13.0, voltage=440.0))

    assert len(findings) == 1
    finding = findings[0]
    assert finding.kind == "electrical_fault"
    assert finding.severity is Severity.CRITICAL
    assert finding.confidence == 0.91
    assert set(finding.affected_parameters) == {Parameter.CURRENT, Parameter.VOLTAGE}


def test_pattern_rules_match_their_conditions() -> None:
    bearing = detect_patterns(_reading(vibration=4.2, temperature=72.0))
    impeller = detect_patterns(_reading(pressure=2.4, flow_rate=150.0))
    none = detect_patterns(_reading(vibration=4.0, temperature=72.0))

    assert [(f.kind, f.severity, f.confidence) for f in bearing] == [("bearing_degradation", Severity.HIGH, 0.87)]
    assert [(f.kind, f.severity, f.confidence) for f in impeller] == [("impeller_wear", Severity.MEDIUM, 0.82)]
    assert impeller[0].affected_parameters == (Parameter.PRESSURE, Parameter.FLOW_RATE)
    assert none == []


def test_all_patterns_can_fire_together() -> None:
    reading = _reading(vibration=5.0, temperature=80.0, pressure=2.0, flow_rate=100.0, current=15.0, voltage=400.0)

    kinds = [f.kind for f in detect_patterns(reading)]

    assert kinds == ["bearing_degradation", "impeller_wear", "electrical_fault"]


def test_history_evicts_oldest_at_capacity() -> None:
    cfg = make_config(history={"capacity": 5, "min_samples": 3})
    store = HistoryStore(cfg=cfg)
    detector = StatisticalDetector(history=store, config=cfg)

    for i in range(6):
        detector.on_reading(_reading(timestamp=i))

    timestamps = [r.timestamp for r in store.get("PUMP-001")]
    assert timestamps == [1, 2, 3, 4, 5]


def test_pumps_keep_separate_histories() -> None:
    detector = StatisticalDetector()

    for i in range(3):
        detector.on_reading(_reading(pump_id="PUMP-001", timestamp=i))
    detector.on_reading(_reading(pump_id="PUMP-002", timestamp=0))

    assert detector.history.length("PUMP-001") == 3
    assert detector.history.length("PUMP-002") == 1
