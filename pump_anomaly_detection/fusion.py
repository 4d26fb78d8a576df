"""
Finding Fusion Module

Merges findings from the physics and statistical tiers into a ranked,
summarized view:
- Severity-first ranking (newest first within a severity)
- Dominant affected parameter and average confidence
- Fleet status roll-up over a recent time window
- Historical context over a bounded list of past findings
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .config import CONFIG
from .records import Finding, Parameter, Severity, SystemStatus


@dataclass(frozen=True)
class FindingSummary:
    """Cross-cutting statistics for one evaluation cycle's findings."""

    ranked: List[Finding] = field(default_factory=list)
    dominant_parameter: Optional[Parameter] = None
    dominant_count: int = 0
    average_confidence: Optional[float] = None
    severity_counts: Dict[Severity, int] = field(default_factory=dict)
    highest_severity: Optional[Severity] = None

    @property
    def count(self) -> int:
        return len(self.ranked)

    @property
    def has_pattern(self) -> bool:
        return any(not f.kind.startswith('statistical_anomaly_') and not f.kind.endswith('_threshold')
                   for f in self.ranked)


def rank_findings(findings):
    """
    Order findings by severity descending, then timestamp descending.

    The sort is stable, so findings equal on both keys keep their input order.
    """
    return sorted(findings, key=lambda f: (f.severity.rank, f.timestamp), reverse=True)


def parameter_counts(findings):
    """Count affected parameters across findings, in first-encountered order."""
    counts = {}
    for finding in findings:
        for param in finding.affected_parameters:
            counts[param] = counts.get(param, 0) + 1
    return counts


def dominant_parameter(findings):
    """
    Most frequently affected parameter.

    Ties go to the parameter encountered first while iterating the findings.

    Returns:
        tuple: (parameter, count), or (None, 0) when there are no findings
    """
    best, best_count = None, 0
    for param, count in parameter_counts(findings).items():
        if count > best_count:
            best, best_count = param, count
    return best, best_count


def average_confidence(findings):
    """Mean confidence across findings, or None when empty."""
    findings = list(findings)
    if not findings:
        return None
    return sum(f.confidence for f in findings) / len(findings)


def severity_counts(findings):
    """Number of findings at each severity, every level present."""
    counts = {sev: 0 for sev in Severity}
    for finding in findings:
        counts[finding.severity] += 1
    return counts


def summarize_findings(findings):
    """
    Rank and summarize one evaluation cycle's findings.

    Args:
        findings: Iterable of Finding from all detectors

    Returns:
        FindingSummary
    """
    findings = list(findings)
    ranked = rank_findings(findings)
    param, count = dominant_parameter(findings)
    return FindingSummary(
        ranked=ranked,
        dominant_parameter=param,
        dominant_count=count,
        average_confidence=average_confidence(findings),
        severity_counts=severity_counts(findings),
        highest_severity=ranked[0].severity if ranked else None,
    )


def system_status(findings: Iterable[Finding], now_ms: int, cfg=CONFIG, window_ms: Optional[int] = None) -> SystemStatus:
    """
    Fleet status from findings within the recent window.

    critical if any recent critical finding, warning if any recent high
    finding, otherwise normal.

    Args:
        findings: Findings across all pumps
        now_ms: Reference time in epoch milliseconds
        cfg: Configuration dictionary
        window_ms: Override for the recent window length

    Returns:
        SystemStatus
    """
    window_ms = cfg['status']['window_ms'] if window_ms is None else window_ms
    recent = [f for f in findings if now_ms - f.timestamp < window_ms]

    if any(f.severity == Severity.CRITICAL for f in recent):
        return SystemStatus.CRITICAL
    if any(f.severity == Severity.HIGH for f in recent):
        return SystemStatus.WARNING
    return SystemStatus.NORMAL


def historical_context(findings, limit=None, cfg=CONFIG):
    """
    Summarize a bounded list of past findings (newest first).

    Args:
        findings: Past findings, newest first
        limit: Maximum findings considered (defaults to report.historical_limit)
        cfg: Configuration dictionary

    Returns:
        str: Severity counts and the most recent kind/severity pairs
    """
    limit = cfg['report']['historical_limit'] if limit is None else limit
    findings = list(findings)[:limit]
    if not findings:
        return 'No significant historical anomalies recorded.'

    counts = severity_counts(findings)
    recent = ', '.join(f"{f.kind}: {f.severity.value}" for f in findings[:cfg['report']['recent_trends']])

    return (
        f"Historical Analysis (Last {len(findings)} anomalies):\n"
        f"- Critical: {counts[Severity.CRITICAL]}\n"
        f"- High: {counts[Severity.HIGH]}\n"
        f"- Medium: {counts[Severity.MEDIUM]}\n"
        f"- Low: {counts[Severity.LOW]}\n"
        f"\n"
        f"Recent Trends: {recent}"
    )
