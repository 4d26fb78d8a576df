"""
Comprehensive Validation and Error Handling

Load-time validation of threshold tables and configuration, and per-reading
validation before a reading touches history.
"""

import math
import numbers
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .base import BaseValidator
from ..records import Parameter, Reading, ThresholdRange


class ConfigurationError(ValueError):
    """
    Missing or degenerate threshold configuration for a pump.

    Raised at load time where possible; raised at evaluation time only when an
    unvalidated table reaches the engine.
    """

    def __init__(self, message: str, pump_id: Optional[str] = None, parameter: Optional[str] = None):
        super().__init__(message)
        self.pump_id = pump_id
        self.parameter = parameter


class ThresholdValidator(BaseValidator):
    """
    Threshold table validation.
    """

    @staticmethod
    def validate_range(pump_id: str, parameter: Any, rng: Any) -> List[str]:
        """
        Validate a single parameter range.

        Args:
            pump_id: Pump identifier
            parameter: Parameter name or enum
            rng: ThresholdRange instance

        Returns:
            List of error messages (empty when valid)
        """
        errors = []
        name = getattr(parameter, 'value', parameter)

        if not isinstance(rng, ThresholdRange):
            errors.append(f"{pump_id}.{name}: expected ThresholdRange, got {type(rng).__name__}")
            return errors

        if not (math.isfinite(rng.min) and math.isfinite(rng.max)):
            errors.append(f"{pump_id}.{name}: bounds must be finite, got ({rng.min}, {rng.max})")
        elif rng.max <= rng.min:
            errors.append(f"{pump_id}.{name}: max must exceed min, got min={rng.min} max={rng.max}")

        return errors

    @classmethod
    def validate_pump(cls, pump_id: str, ranges: Mapping[Parameter, ThresholdRange]) -> Tuple[bool, List[str]]:
        """
        Validate the complete range set of one pump.

        Returns:
            Tuple of (is_valid, list_of_errors)
        """
        errors = []

        missing = [p.value for p in Parameter if p not in ranges]
        if missing:
            errors.append(f"{pump_id}: missing ranges for {missing}")

        for parameter, rng in ranges.items():
            errors.extend(cls.validate_range(pump_id, parameter, rng))

        return len(errors) == 0, errors

    @classmethod
    def validate_table(cls, table: Mapping[str, Mapping[Parameter, ThresholdRange]]) -> Tuple[bool, List[str]]:
        """
        Validate every pump of a threshold table.

        Returns:
            Tuple of (is_valid, list_of_errors)
        """
        errors = []

        if not table:
            errors.append("Threshold table is empty")

        for pump_id, ranges in table.items():
            _, pump_errors = cls.validate_pump(pump_id, ranges)
            errors.extend(pump_errors)

        return len(errors) == 0, errors


class ReadingValidator(BaseValidator):
    """
    Reading validation utilities.
    """

    @staticmethod
    def validate_reading(reading: Reading) -> Tuple[bool, List[str]]:
        """
        Check a reading carries a pump id, an integer timestamp and finite values.

        Returns:
            Tuple of (is_valid, list_of_errors)
        """
        errors = []

        if not isinstance(reading, Reading):
            errors.append(f"Expected Reading, got {type(reading).__name__}")
            return False, errors

        if not reading.pump_id:
            errors.append("Reading has empty pump_id")

        ts = reading.timestamp
        if isinstance(ts, bool) or not isinstance(ts, numbers.Integral):
            errors.append(f"{reading.pump_id}: timestamp must be integer epoch milliseconds, got {ts!r}")

        for parameter, value in reading.values().items():
            if not isinstance(value, (int, float)) or not math.isfinite(value):
                errors.append(f"{reading.pump_id}.{parameter.value}: non-finite value {value!r}")

        return len(errors) == 0, errors


class ConfigValidator(BaseValidator):
    """
    Engine configuration validation.
    """

    @staticmethod
    def validate_config(config: Dict[str, Any]) -> Tuple[bool, List[str]]:
        """
        Validate configuration dictionary.

        Args:
            config: Configuration to validate

        Returns:
            Tuple of (is_valid, list_of_errors)
        """
        errors = []

        required_keys = ['history', 'physics', 'statistical', 'patterns', 'trend', 'status']
        missing = ConfigValidator.missing_keys(config, required_keys)
        if missing:
            errors.append(f"Missing required config keys: {missing}")
            return False, errors

        history = config['history']
        if history.get('capacity', 0) < 1:
            errors.append(f"History capacity must be positive: {history.get('capacity')}")
        if history.get('min_samples', 0) > history.get('capacity', 0):
            errors.append("History min_samples exceeds capacity")

        conf = config['physics'].get('confidence', 0)
        if not (0 <= conf <= 1):
            errors.append(f"Physics confidence out of range: {conf}")

        z_thr = config['statistical'].get('z_threshold', 0)
        if z_thr <= 0:
            errors.append(f"Statistical z_threshold must be positive: {z_thr}")

        for rule in config['patterns']:
            if not (0 <= rule.get('confidence', -1) <= 1):
                errors.append(f"Pattern {rule.get('name')} confidence out of range")
            try:
                for param, _, _ in rule.get('conditions', []):
                    Parameter.parse(param)
            except ValueError as e:
                errors.append(f"Pattern {rule.get('name')} names unknown parameter: {e}")

        trend = config['trend']
        if trend.get('min_samples', 0) < 2 * trend.get('window', 0):
            errors.append("Trend min_samples must cover two windows")
        if trend.get('min_samples', 0) > history.get('capacity', 0):
            errors.append("Trend min_samples exceeds history capacity")

        return len(errors) == 0, errors


# Convenience function
def validate_engine_inputs(config: Dict[str, Any], table: Optional[Mapping] = None) -> None:
    """
    Validate configuration and threshold table, raising on errors.

    Args:
        config: Configuration
        table: Threshold table (optional)

    Raises:
        ConfigurationError: If validation fails
    """
    all_errors = []

    _, config_errors = ConfigValidator.validate_config(config)
    all_errors.extend(config_errors)

    if table is not None:
        _, table_errors = ThresholdValidator.validate_table(table)
        all_errors.extend(table_errors)

    if all_errors:
        error_msg = "Validation errors:\n" + "\n".join(f"  - {e}" for e in all_errors)
        raise ConfigurationError(error_msg)
