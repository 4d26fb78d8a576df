"""
Physics Threshold Checker - Strategy Pattern Implementation
"""

from typing import Any, Dict, List, Mapping, Optional

from ..config import CONFIG
from ..core.base import BaseDetector
from ..core.factory import DetectorFactory
from ..core.logger import get_logger
from ..core.validators import ConfigurationError, ThresholdValidator
from ..records import Finding, Parameter, Reading, Severity, ThresholdRange

logger = get_logger(f"{CONFIG['logging']['logger_name']}.physics", log_to_console=False)

FALLBACK_RECOMMENDATION = 'Investigate anomaly'

RECOMMENDATIONS: Dict[Parameter, Dict[Severity, str]] = {
    Parameter.VIBRATION: {
        Severity.LOW: 'Monitor vibration levels closely',
        Severity.MEDIUM: 'Check bearing alignment and lubrication',
        Severity.HIGH: 'Inspect bearings and coupling immediately',
        Severity.CRITICAL: 'Stop pump and perform emergency maintenance',
    },
    Parameter.TEMPERATURE: {
        Severity.LOW: 'Verify cooling system operation',
        Severity.MEDIUM: 'Check coolant flow and heat exchanger',
        Severity.HIGH: 'Reduce load and inspect cooling system',
        Severity.CRITICAL: 'Emergency shutdown - overheating detected',
    },
    Parameter.PRESSURE: {
        Severity.LOW: 'Check for leaks and blockages',
        Severity.MEDIUM: 'Inspect impeller and suction line',
        Severity.HIGH: 'Verify system pressure requirements',
        Severity.CRITICAL: 'Immediate inspection required - pressure critical',
    },
    Parameter.FLOW_RATE: {
        Severity.LOW: 'Check for blockages or cavitation',
        Severity.MEDIUM: 'Inspect impeller wear and clearances',
        Severity.HIGH: 'Verify pump sizing and system requirements',
        Severity.CRITICAL: 'Flow rate critical - check for major blockage',
    },
    Parameter.CURRENT: {
        Severity.LOW: 'Monitor electrical connections',
        Severity.MEDIUM: 'Check motor load and efficiency',
        Severity.HIGH: 'Inspect motor and electrical system',
        Severity.CRITICAL: 'Electrical fault detected - immediate attention required',
    },
    Parameter.VOLTAGE: {
        Severity.LOW: 'Check power supply stability',
        Severity.MEDIUM: 'Verify electrical connections',
        Severity.HIGH: 'Inspect power distribution system',
        Severity.CRITICAL: 'Power supply fault - emergency electrical check',
    },
}


def get_recommendation(parameter: Parameter, severity: Severity) -> str:
    """
    Look up maintenance advice for a parameter at a severity.

    The table covers every parameter and severity; reaching the fallback is a
    defect and is logged as such.
    """
    advice = RECOMMENDATIONS.get(parameter, {}).get(severity)
    if advice is None:
        logger.error(f"No recommendation mapped for {parameter} at {severity}")
        return FALLBACK_RECOMMENDATION
    return advice


def compute_deviation(value: float, rng: ThresholdRange) -> float:
    """
    Deviation of a value relative to its range width.

    deviation = max(|value - max|, |value - min|) / (max - min)

    Raises:
        ConfigurationError: If the range is degenerate (max <= min)
    """
    span = rng.span
    if span <= 0:
        raise ConfigurationError(f"Degenerate threshold range min={rng.min} max={rng.max}")
    return max(abs(value - rng.max), abs(value - rng.min)) / span


def deviation_severity(deviation: float, cfg=CONFIG) -> Severity:
    """Map a range deviation onto a severity using the configured breakpoints."""
    bp = cfg['physics']['severity_breakpoints']
    if deviation > bp['critical']:
        return Severity.CRITICAL
    if deviation > bp['high']:
        return Severity.HIGH
    if deviation > bp['medium']:
        return Severity.MEDIUM
    return Severity.LOW


class PhysicsChecker(BaseDetector):
    """
    Static threshold detector.

    Compares every parameter of a reading against the pump's configured
    operating range. Stateless: the same reading and table always give the
    same findings.
    """

    def __init__(
        self,
        thresholds: Optional[Mapping[str, Mapping[Parameter, ThresholdRange]]] = None,
        config: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize physics checker.

        Args:
            thresholds: Per-pump threshold table (see data_loader.load_threshold_table)
            config: Full engine configuration (defaults to CONFIG)
        """
        cfg = config or CONFIG
        super().__init__('physics', cfg)
        self.thresholds = thresholds if thresholds is not None else {}
        self.confidence = cfg['physics']['confidence']
        self.units = cfg['physics']['units']

    def ranges_for(self, pump_id: str) -> Mapping[Parameter, ThresholdRange]:
        """
        Threshold ranges configured for a pump.

        Raises:
            ConfigurationError: If the pump has no complete, valid range set
        """
        ranges = self.thresholds.get(pump_id)
        if ranges is None:
            raise ConfigurationError(f"No thresholds configured for pump {pump_id}", pump_id=pump_id)

        is_valid, errors = ThresholdValidator.validate_pump(pump_id, ranges)
        if not is_valid:
            raise ConfigurationError("; ".join(errors), pump_id=pump_id)
        return ranges

    def get_severity(self, score: float) -> Severity:
        return deviation_severity(score, self.config)

    def check(self, reading: Reading, ranges: Mapping[Parameter, ThresholdRange]) -> List[Finding]:
        """
        Check a reading against an explicit range set.

        Args:
            reading: Reading to evaluate
            ranges: Range per parameter

        Returns:
            One finding per out-of-range parameter

        Raises:
            ConfigurationError: If a parameter has no range
        """
        findings = []

        for parameter in Parameter:
            rng = ranges.get(parameter)
            if rng is None:
                raise ConfigurationError(
                    f"No {parameter.value} range configured for pump {reading.pump_id}",
                    pump_id=reading.pump_id,
                    parameter=parameter.value,
                )
            value = reading.value(parameter)
            if rng.contains(value):
                continue

            try:
                deviation = compute_deviation(value, rng)
            except ConfigurationError as e:
                raise ConfigurationError(str(e), pump_id=reading.pump_id, parameter=parameter.value) from e

            severity = self.get_severity(deviation)
            unit = self.units.get(parameter.value, '')
            direction = 'above' if value > rng.max else 'below'

            findings.append(Finding(
                id=self.make_finding_id(reading.pump_id, parameter.value),
                pump_id=reading.pump_id,
                timestamp=reading.timestamp,
                kind=f"{parameter.value}_threshold",
                severity=severity,
                confidence=self.confidence,
                description=(
                    f"{parameter.value} reading of {value:.2f} {unit} is {direction} "
                    f"safe operating range ({rng.min:g}-{rng.max:g} {unit})"
                ),
                recommendation=get_recommendation(parameter, severity),
                affected_parameters=(parameter,),
            ))

        return findings

    def detect(self, reading: Reading) -> List[Finding]:
        """
        Check a reading against its pump's configured thresholds.

        Raises:
            ConfigurationError: If the pump's thresholds are missing or degenerate
        """
        self.validate(reading)
        return self.check(reading, self.ranges_for(reading.pump_id))


def check(reading: Reading, thresholds: Mapping[Parameter, ThresholdRange], cfg=CONFIG) -> List[Finding]:
    """Pure function form of the physics check for one reading and range set."""
    return PhysicsChecker(config=cfg).check(reading, thresholds)


DetectorFactory.register('physics', PhysicsChecker)
