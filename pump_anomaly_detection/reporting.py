"""
Event Logging and Reporting Module

Generates finding event logs, ranked anomaly reports and operator-facing text
reports.

Text synthesis through an external generative service is not part of this
package: ReportGenerator accepts any callable backend at construction and
falls back to the deterministic template report when none is given or the
backend fails.
"""

import os
from datetime import datetime, timezone

import pandas as pd

from .config import CONFIG
from .core.logger import get_logger
from .fusion import rank_findings, severity_counts, summarize_findings
from .records import Parameter, Severity

logger = get_logger(f"{CONFIG['logging']['logger_name']}.reporting", log_to_console=False)

_READING_LINES = [
    (Parameter.VIBRATION, 'Vibration', '{:.2f} mm/s'),
    (Parameter.TEMPERATURE, 'Temperature', '{:.1f}°C'),
    (Parameter.PRESSURE, 'Pressure', '{:.2f} bar'),
    (Parameter.FLOW_RATE, 'Flow Rate', '{:.1f} L/min'),
    (Parameter.CURRENT, 'Current', '{:.1f} A'),
    (Parameter.VOLTAGE, 'Voltage', '{:.1f} V'),
]


def findings_to_frame(findings, cfg=CONFIG):
    """
    Generate an event log DataFrame with one row per finding.

    Args:
        findings: Iterable of Finding
        cfg: Configuration dictionary

    Returns:
        DataFrame: Event log with the configured columns
    """
    columns = cfg['logging']['event_log_columns']
    rows = []
    for f in findings:
        row = f.to_dict()
        row['datetime'] = pd.to_datetime(f.timestamp, unit='ms', utc=True)
        row['affected_parameters'] = ','.join(row['affected_parameters'])
        rows.append(row)

    if not rows:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame(rows)[columns]


def generate_anomaly_report(findings, top_n=None, cfg=CONFIG):
    """
    Ranked anomaly report with the top N findings.

    Args:
        findings: Iterable of Finding
        top_n: Number of findings to include
        cfg: Configuration dictionary

    Returns:
        DataFrame: Findings ranked by severity then recency, with a rank column
    """
    top_n = cfg['report']['top_n'] if top_n is None else top_n
    ranked = rank_findings(list(findings))[:top_n]
    report = findings_to_frame(ranked, cfg).reset_index(drop=True)
    report.insert(0, 'rank', range(1, len(report) + 1))
    return report


def severity_breakdown(findings):
    """
    Per-pump severity counts.

    Returns:
        DataFrame: pump_id index, one column per severity
    """
    frame = findings_to_frame(findings)
    levels = [sev.value for sev in Severity]
    if frame.empty:
        return pd.DataFrame(columns=levels)
    table = pd.crosstab(frame['pump_id'], frame['severity'])
    return table.reindex(columns=levels, fill_value=0)


def save_outputs(findings, output_dir='outputs', predictions=None, cfg=CONFIG):
    """
    Save event log, anomaly report and severity breakdown to CSV files.

    Args:
        findings: Iterable of Finding
        output_dir: Output directory
        predictions: Optional {pump_id: FailurePrediction}
        cfg: Configuration dictionary

    Returns:
        dict: Paths of the written files
    """
    os.makedirs(output_dir, exist_ok=True)
    findings = list(findings)
    paths = {}

    events = findings_to_frame(findings, cfg)
    paths['event_log'] = os.path.join(output_dir, 'event_log.csv')
    events.to_csv(paths['event_log'], index=False)
    logger.info(f"Saved event log: {paths['event_log']} ({len(events)} events)")

    report = generate_anomaly_report(findings, cfg=cfg)
    paths['anomaly_report'] = os.path.join(output_dir, 'anomaly_report.csv')
    report.to_csv(paths['anomaly_report'], index=False)
    logger.info(f"Saved anomaly report: {paths['anomaly_report']} ({len(report)} findings)")

    breakdown = severity_breakdown(findings)
    paths['severity_breakdown'] = os.path.join(output_dir, 'severity_breakdown.csv')
    breakdown.to_csv(paths['severity_breakdown'])

    if predictions:
        pred = pd.DataFrame([
            {'pump_id': pid, 'probability': p.probability, 'time_to_failure_days': p.time_to_failure_days}
            for pid, p in predictions.items()
        ])
        paths['predictions'] = os.path.join(output_dir, 'predictions.csv')
        pred.to_csv(paths['predictions'], index=False)

    return paths


def generate_summary(findings):
    """
    One-paragraph fleet summary.

    Args:
        findings: Findings across all pumps

    Returns:
        str: Status line followed by per-severity counts
    """
    findings = list(findings)
    if not findings:
        return 'All pumps operating normally. No anomalies detected.'

    counts = severity_counts(findings)
    critical = counts[Severity.CRITICAL]
    high = counts[Severity.HIGH]
    medium = counts[Severity.MEDIUM]
    low = counts[Severity.LOW]

    if critical:
        status = 'CRITICAL'
    elif high:
        status = 'HIGH ALERT'
    elif medium:
        status = 'CAUTION'
    else:
        status = 'MONITORING'

    parts = []
    if critical:
        parts.append(f"{critical} critical alerts require immediate attention.")
    if high:
        parts.append(f"{high} high priority issues detected.")
    if medium:
        parts.append(f"{medium} medium priority items for review.")
    if low:
        parts.append(f"{low} low priority observations noted.")

    return f"System Status: {status}\n" + ' '.join(parts)


def maintenance_recommendation(prediction):
    """Phrase a trend prediction as a maintenance-scheduling recommendation."""
    if prediction is None or not prediction.has_signal:
        return 'No degradation trend detected; continue routine maintenance schedule.'
    pct = prediction.probability * 100
    days = prediction.time_to_failure_days
    if days <= 30:
        return f"Failure probability {pct:.1f}% - schedule maintenance within {days} days."
    return f"Failure probability {pct:.1f}% - plan maintenance in the next {days} days."


class ReportGenerator:
    """
    Operator-facing text reports for one pump's evaluation cycle.

    Args:
        backend: Optional callable (findings, reading, pump, historical_context) -> str.
            Any exception it raises is logged and the template report is used.
        cfg: Configuration dictionary
        today: Date used for maintenance-age calculations (defaults to today)
    """

    def __init__(self, backend=None, cfg=CONFIG, today=None):
        self.backend = backend
        self.cfg = cfg
        self.today = today

    def generate(self, findings, reading, pump, prediction=None, historical_context=''):
        """
        Report for one reading of one pump.

        Args:
            findings: Findings of the evaluation cycle
            reading: The evaluated reading
            pump: PumpProfile of the pump
            prediction: Optional FailurePrediction
            historical_context: Text from fusion.historical_context

        Returns:
            str: Report text
        """
        findings = list(findings)
        if self.backend is not None:
            try:
                return self.backend(findings, reading, pump, historical_context)
            except Exception:
                logger.exception(f"Report backend failed for {pump.id}; using template report")
        return self.template_report(findings, reading, pump, prediction)

    def template_report(self, findings, reading, pump, prediction=None):
        if not findings:
            return self._normal_report(reading, pump, prediction)
        return self._anomaly_report(findings, reading, pump, prediction)

    def _header(self, title, reading, pump):
        ts = datetime.fromtimestamp(reading.timestamp / 1000.0, tz=timezone.utc)
        return (
            f"{title} - {pump.name}\n"
            f"Location: {pump.location}\n"
            f"Timestamp: {ts.strftime('%Y-%m-%d %H:%M:%S')} UTC\n\n"
        )

    def _readings_block(self, reading, check=False):
        lines = ['CURRENT READINGS:']
        suffix = ' ✓' if check else ''
        for param, label, fmt in _READING_LINES:
            lines.append(f"• {label}: {fmt.format(reading.value(param))}{suffix}")
        return '\n'.join(lines) + '\n\n'

    def _normal_report(self, reading, pump, prediction):
        report = self._header('NORMAL OPERATION', reading, pump)
        report += 'All parameters within normal operating ranges.\n'
        if pump.efficiency is not None:
            report += f"Pump efficiency: {pump.efficiency}%\n"
        if pump.operating_hours is not None:
            report += f"Operating hours: {pump.operating_hours:,}\n"
        report += '\n'
        report += self._readings_block(reading, check=True)

        days = pump.days_since_maintenance(self.today)
        if days is not None and days > self.cfg['report']['maintenance_reminder_days']:
            report += 'MAINTENANCE REMINDER:\n'
            report += f"Last maintenance was {days} days ago. Consider scheduling routine maintenance.\n"

        if prediction is not None and prediction.has_signal:
            report += f"\nTREND: {maintenance_recommendation(prediction)}\n"
        return report

    def _anomaly_report(self, findings, reading, pump, prediction):
        summary = summarize_findings(findings)
        report = self._header('ANOMALY REPORT', reading, pump)

        sections = [
            (Severity.CRITICAL, 'CRITICAL ALERTS', 'Action'),
            (Severity.HIGH, 'HIGH PRIORITY', 'Recommendation'),
            (Severity.MEDIUM, 'MEDIUM PRIORITY', None),
            (Severity.LOW, 'LOW PRIORITY', None),
        ]
        for severity, title, label in sections:
            group = [f for f in summary.ranked if f.severity == severity]
            if not group:
                continue
            report += f"{title} ({len(group)}):\n"
            for f in group:
                report += f"• {f.description}\n"
                if label:
                    report += f"  {label}: {f.recommendation}\n\n"
            if not label:
                report += '\n'

        report += self._readings_block(reading)
        report += self._insights(summary, pump, prediction)
        return report

    def _insights(self, summary, pump, prediction):
        insights = 'MAINTENANCE INSIGHTS:\n'

        if summary.dominant_parameter is not None:
            insights += (
                f"• Primary concern: {summary.dominant_parameter.value} "
                f"({summary.dominant_count} anomalies)\n"
            )
        if summary.has_pattern:
            insights += '• Complex failure patterns detected - multi-parameter analysis recommended\n'

        insights += f"• Average detection confidence: {summary.average_confidence * 100:.1f}%\n"

        days = pump.days_since_maintenance(self.today)
        if days is not None:
            insights += f"• Days since last maintenance: {days}\n"

        if pump.efficiency is not None and pump.efficiency < self.cfg['report']['low_efficiency_pct']:
            insights += f"• Low efficiency ({pump.efficiency}%) may indicate wear or fouling\n"

        insights += f"• Maintenance outlook: {maintenance_recommendation(prediction)}\n"
        return insights
