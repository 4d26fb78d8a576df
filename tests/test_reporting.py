"""Tests for event logs, summaries and operator reports."""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pandas as pd

from pump_anomaly_detection.config import CONFIG
from pump_anomaly_detection.data_loader import load_pump_profiles
from pump_anomaly_detection.records import FailurePrediction, Finding, Parameter, Reading, Severity
from pump_anomaly_detection.reporting import (
    ReportGenerator,
    findings_to_frame,
    generate_anomaly_report,
    generate_summary,
    maintenance_recommendation,
    save_outputs,
    severity_breakdown,
)

PUMPS = load_pump_profiles()


def _reading(**overrides) -> Reading:
    values = dict(vibration=2.1, temperature=45.0, pressure=3.0, flow_rate=200.0, current=10.0, voltage=460.0)
    values.update(overrides)
    return Reading(timestamp=1_700_000_000_000, pump_id="PUMP-001", **values)


def _finding(severity: str, timestamp: int = 0, pump_id: str = "PUMP-001", kind: str = "vibration_threshold",
             params: tuple = ("vibration",), confidence: float = 0.95) -> Finding:
    return Finding(
        id=f"{kind}-{severity}-{timestamp}",
        pump_id=pump_id,
        timestamp=timestamp,
        kind=kind,
        severity=severity,
        confidence=confidence,
        description=f"{kind} {severity}",
        recommendation=f"Handle {kind}",
        affected_parameters=params,
    )


def test_findings_to_frame_uses_event_log_columns() -> None:
    frame = findings_to_frame([
        _finding("high", params=("current", "voltage"), kind="electrical_fault"),
    ])

    assert list(frame.columns) == CONFIG["logging"]["event_log_columns"]
    assert frame.loc[0, "affected_parameters"] == "current,voltage"
    assert frame.loc[0, "severity"] == "high"


def test_empty_findings_give_empty_frames() -> None:
    assert findings_to_frame([]).empty
    assert generate_anomaly_report([]).empty
    assert severity_breakdown([]).empty


def test_anomaly_report_ranks_and_truncates() -> None:
    findings = [_finding("low", 3), _finding("critical", 1), _finding("high", 2), _finding("critical", 5)]

    report = generate_anomaly_report(findings, top_n=3)

    assert list(report["rank"]) == [1, 2, 3]
    assert list(report["severity"]) == ["critical", "critical", "high"]
    assert list(report["timestamp"]) == [5, 1, 2]


def test_severity_breakdown_counts_per_pump() -> None:
    breakdown = severity_breakdown([
        _finding("critical"),
        _finding("low", 1),
        _finding("low", 2, pump_id="PUMP-002"),
    ])

    assert breakdown.loc["PUMP-001", "critical"] == 1
    assert breakdown.loc["PUMP-002", "low"] == 1
    assert breakdown.loc["PUMP-002", "high"] == 0


def test_generate_summary() -> None:
    assert generate_summary([]) == "All pumps operating normally. No anomalies detected."

    summary = generate_summary([_finding("critical"), _finding("medium"), _finding("medium")])

    assert summary.startswith("System Status: CRITICAL\n")
    assert "1 critical alerts require immediate attention." in summary
    assert "2 medium priority items for review." in summary
    assert generate_summary([_finding("low")]).startswith("System Status: MONITORING")


def test_save_outputs_writes_csv_files(tmp_path: Path) -> None:
    findings = [_finding("critical"), _finding("low", 1)]
    predictions = {"PUMP-001": FailurePrediction(probability=0.2, time_to_failure_days=292)}

    paths = save_outputs(findings, tmp_path / "out", predictions=predictions)

    assert set(paths) == {"event_log", "anomaly_report", "severity_breakdown", "predictions"}
    events = pd.read_csv(paths["event_log"])
    assert len(events) == 2
    assert pd.read_csv(paths["predictions"]).loc[0, "time_to_failure_days"] == 292


def test_maintenance_recommendation_wording() -> None:
    assert maintenance_recommendation(FailurePrediction()).startswith("No degradation trend")
    assert "within 18 days" in maintenance_recommendation(FailurePrediction(0.95, 18))
    assert "next 292 days" in maintenance_recommendation(FailurePrediction(0.2, 292))


def test_normal_report_includes_maintenance_reminder() -> None:
    generator = ReportGenerator(today=date(2024, 6, 1))

    report = generator.generate([], _reading(), PUMPS["PUMP-001"])

    assert report.startswith("NORMAL OPERATION - Primary Seawater Pump")
    assert "• Vibration: 2.10 mm/s ✓" in report
    assert "Last maintenance was 138 days ago." in report


def test_anomaly_report_sections_and_insights() -> None:
    findings = [
        _finding("critical", kind="electrical_fault", params=("current", "voltage"), confidence=0.91),
        _finding("high", kind="current_threshold", params=("current",), confidence=0.95),
        _finding("low", kind="vibration_threshold", confidence=0.95),
    ]
    generator = ReportGenerator(today=date(2024, 6, 1))

    report = generator.generate(findings, _reading(current=13.0, voltage=445.0), PUMPS["PUMP-004"],
                                prediction=FailurePrediction(0.95, 18))

    assert report.startswith("ANOMALY REPORT - Ballast Water Pump")
    assert "CRITICAL ALERTS (1):" in report
    assert "HIGH PRIORITY (1):" in report
    assert "LOW PRIORITY (1):" in report
    assert "MEDIUM PRIORITY" not in report
    assert "• Primary concern: current (2 anomalies)" in report
    assert "Complex failure patterns detected" in report
    assert "• Average detection confidence: 93.7%" in report
    assert "• Low efficiency (78.3%)" in report
    assert "schedule maintenance within 18 days" in report


def test_failing_backend_falls_back_to_template() -> None:
    def backend(findings, reading, pump, context):
        raise ConnectionError("service unavailable")

    generator = ReportGenerator(backend=backend, today=date(2024, 6, 1))

    report = generator.generate([], _reading(), PUMPS["PUMP-001"])

    assert report.startswith("NORMAL OPERATION")


def test_backend_receives_historical_context() -> None:
    seen = {}

    def backend(findings, reading, pump, context):
        seen["context"] = context
        return f"{pump.id}: {len(findings)} findings"

    generator = ReportGenerator(backend=backend)

    report = generator.generate([_finding("low")], _reading(), PUMPS["PUMP-001"], historical_context="none")

    assert report == "PUMP-001: 1 findings"
    assert seen["context"] == "none"
