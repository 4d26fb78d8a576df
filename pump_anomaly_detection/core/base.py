"""
Base Classes and Abstract Interfaces

Provides abstraction layer for detectors and for the collaborators that
consume findings (reporters, persistence, presentation).
"""

import math
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from uuid import uuid4

from ..records import Finding, Parameter, Reading, Severity


class BaseDetector(ABC):
    """
    Abstract base class for anomaly detectors.

    Strategy Pattern: Allows interchangeable detection algorithms.
    """

    def __init__(self, name: str, config: Dict[str, Any]):
        """
        Initialize detector.

        Args:
            name: Detector identifier
            config: Configuration parameters
        """
        self.name = name
        self.config = config

    @abstractmethod
    def detect(self, reading: Reading) -> List[Finding]:
        """
        Detect anomalies in a single reading.

        Args:
            reading: Reading to evaluate

        Returns:
            List of findings (empty when nothing is abnormal)
        """
        pass

    @abstractmethod
    def get_severity(self, score: float) -> Severity:
        """
        Map a detector score to a severity.

        Args:
            score: Detector-specific score (deviation, z-score, ...)

        Returns:
            Severity level
        """
        pass

    def validate(self, reading: Reading) -> None:
        """
        Validate input reading.

        Args:
            reading: Input reading

        Raises:
            ValueError: If the reading is unusable
        """
        BaseValidator.validate_reading_values(reading, self.get_required_parameters())

    def get_required_parameters(self) -> List[Parameter]:
        """
        Get list of parameters the detector reads.

        Returns:
            List of parameters
        """
        return list(Parameter)

    def make_finding_id(self, pump_id: str, tag: str) -> str:
        """Unique finding identifier scoped by detector, pump and tag."""
        return f"{self.name}-{pump_id}-{tag}-{uuid4().hex[:12]}"


class BaseValidator:
    """
    Validation utilities shared by validators and detectors.
    """

    @staticmethod
    def validate_reading_values(reading: Reading, parameters: List[Parameter]) -> None:
        """Validate that the given parameters of a reading are finite numbers."""
        if not isinstance(reading, Reading):
            raise TypeError(f"Expected Reading, got {type(reading)}")

        bad = [p.value for p in parameters if not math.isfinite(reading.value(p))]
        if bad:
            raise ValueError(f"Non-finite values for {bad} on pump {reading.pump_id}")

    @staticmethod
    def missing_keys(mapping: Dict[str, Any], required_keys: List[str]) -> List[str]:
        """Keys of required_keys absent from mapping, in order."""
        if not isinstance(mapping, dict):
            raise TypeError(f"Expected dict, got {type(mapping)}")
        return [key for key in required_keys if key not in mapping]


class Observable:
    """
    Observer pattern for event notifications.
    """

    def __init__(self):
        """Initialize with empty observers list."""
        self._observers: List['Observer'] = []

    def attach(self, observer: 'Observer') -> None:
        """Attach observer."""
        if observer not in self._observers:
            self._observers.append(observer)

    def detach(self, observer: 'Observer') -> None:
        """Detach observer."""
        self._observers.remove(observer)

    def notify(self, event: str, data: Any) -> None:
        """Notify all observers."""
        for observer in list(self._observers):
            observer.update(event, data)


class Observer(ABC):
    """
    Observer interface for event handling.

    Consumers of findings (report formatting, persistence, presentation)
    implement this to receive each evaluation cycle's results.
    """

    @abstractmethod
    def update(self, event: str, data: Any) -> None:
        """Handle event notification."""
        pass


class LoggingObserver(Observer):
    """
    Observer that writes one log line per evaluation cycle and per error.
    """

    def __init__(self, logger):
        """Initialize with logger."""
        self.logger = logger

    def update(self, event: str, data: Any) -> None:
        if event == 'error':
            self.logger.warning(f"Error | {data.pump_id} | {data.stage} ({data.kind}): {data.message}")
            return
        if event == 'evaluation' and data.findings:
            top = data.summary.highest_severity
            self.logger.info(f"Evaluation | {data.pump_id} | {len(data.findings)} findings | highest={top.value}")


class CollectingObserver(Observer):
    """
    Observer that keeps every event in memory, optionally filtered by name.
    """

    def __init__(self, events: Optional[List[str]] = None):
        self.events = events
        self.received: List[tuple] = []

    def update(self, event: str, data: Any) -> None:
        if self.events is None or event in self.events:
            self.received.append((event, data))
