"""
Statistical Detector - Strategy Pattern Implementation
"""

from typing import Any, Dict, List, Optional, Sequence

from ..config import CONFIG
from ..core.base import BaseDetector
from ..core.factory import DetectorFactory
from ..core.logger import get_logger
from ..features import column_stats, round_half_up, z_score
from ..history import HistoryStore, history_matrix
from ..records import Finding, Parameter, Reading, Severity
from .patterns import detect_patterns, load_rules

logger = get_logger(f"{CONFIG['logging']['logger_name']}.statistical", log_to_console=False)


class StatisticalDetector(BaseDetector):
    """
    Rolling z-score anomaly detector.

    Appends each reading to its pump's history, then scores every parameter
    against the whole window (including the new reading) using the
    population standard deviation. Also runs the fixed pattern rules on the
    current reading, independent of history length.
    """

    def __init__(self, history: Optional[HistoryStore] = None, config: Optional[Dict[str, Any]] = None):
        """
        Initialize statistical detector.

        Args:
            history: Shared history store (a private one is created if omitted)
            config: Full engine configuration (defaults to CONFIG)
        """
        cfg = config or CONFIG
        super().__init__('statistical', cfg)
        self.history = history if history is not None else HistoryStore(cfg=cfg)
        self.min_samples = cfg['history']['min_samples']

        stat_cfg = cfg['statistical']
        self.z_threshold = stat_cfg['z_threshold']
        self.breakpoints = stat_cfg['severity_breakpoints']
        self.confidence_divisor = stat_cfg['confidence_divisor']
        self.max_confidence = stat_cfg['max_confidence']
        self.days_numerator = stat_cfg['days_numerator']

        self.rules = load_rules(cfg)

    def get_severity(self, score: float) -> Severity:
        """Map a z-score to severity (strict breakpoints)."""
        if score > self.breakpoints['critical']:
            return Severity.CRITICAL
        if score > self.breakpoints['high']:
            return Severity.HIGH
        if score > self.breakpoints['medium']:
            return Severity.MEDIUM
        return Severity.LOW

    def confidence_for(self, z: float) -> float:
        return min(self.max_confidence, z / self.confidence_divisor)

    def days_to_failure(self, z: float) -> int:
        return max(1, round_half_up(self.days_numerator / z))

    def recommendation_for(self, parameter: Parameter, severity: Severity, z: float) -> str:
        days = self.days_to_failure(z)
        action = 'Immediate action required.' if severity == Severity.CRITICAL else 'Schedule maintenance accordingly.'
        return (
            f"Statistical prediction: {parameter.value} anomaly detected. "
            f"Estimated time to potential failure: {days} days. {action}"
        )

    def score_window(self, reading: Reading, window: Sequence[Reading]) -> List[Finding]:
        """
        Z-score findings for a reading against an explicit window.

        Args:
            reading: Reading being evaluated (expected to be the window's last entry)
            window: History snapshot, oldest first

        Returns:
            List of statistical findings; empty below the minimum sample count
        """
        if len(window) < self.min_samples:
            return []

        means, stds = column_stats(history_matrix(window))
        findings = []

        for idx, parameter in enumerate(Parameter):
            z = z_score(reading.value(parameter), means[idx], stds[idx])
            if z is None:
                logger.debug(f"Zero variance for {reading.pump_id}.{parameter.value}; skipped")
                continue
            if z <= self.z_threshold:
                continue

            severity = self.get_severity(z)
            findings.append(Finding(
                id=self.make_finding_id(reading.pump_id, parameter.value),
                pump_id=reading.pump_id,
                timestamp=reading.timestamp,
                kind=f"statistical_anomaly_{parameter.value}",
                severity=severity,
                confidence=self.confidence_for(z),
                description=(
                    f"Statistical model detected anomalous {parameter.value} pattern "
                    f"(z-score: {z:.2f})"
                ),
                recommendation=self.recommendation_for(parameter, severity, z),
                affected_parameters=(parameter,),
            ))

        return findings

    def on_reading(self, reading: Reading) -> List[Finding]:
        """
        Append a reading to history and evaluate it.

        The engine holds the pump's history lock across the whole cycle, so
        the appended reading and the scored window always agree.

        Returns:
            Statistical findings followed by pattern-rule findings
        """
        self.validate(reading)

        with self.history.locked(reading.pump_id) as buf:
            buf.append(reading)
            window = list(buf)

        findings = self.score_window(reading, window)
        findings.extend(detect_patterns(reading, rules=self.rules))
        return findings

    def detect(self, reading: Reading) -> List[Finding]:
        return self.on_reading(reading)


DetectorFactory.register('statistical', StatisticalDetector)
