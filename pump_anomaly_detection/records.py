"""
Data Model

Readings, threshold ranges, findings and predictions shared by every
component of the engine. All records are immutable once created.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Dict, Optional, Tuple


class Parameter(str, Enum):
    """The six measured quantities carried by every reading."""

    VIBRATION = 'vibration'
    TEMPERATURE = 'temperature'
    PRESSURE = 'pressure'
    FLOW_RATE = 'flow_rate'
    CURRENT = 'current'
    VOLTAGE = 'voltage'

    @classmethod
    def parse(cls, name: str) -> 'Parameter':
        """Resolve a parameter from its name, accepting the camelCase ``flowRate``."""
        if isinstance(name, cls):
            return name
        key = str(name).strip()
        if key == 'flowRate':
            key = 'flow_rate'
        return cls(key)


_SEVERITY_RANK = {'low': 0, 'medium': 1, 'high': 2, 'critical': 3}


class Severity(str, Enum):
    """Ordered severity: low < medium < high < critical."""

    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'
    CRITICAL = 'critical'

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self.value]

    # str comparisons are lexical; order by rank instead
    def __lt__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank


class SystemStatus(str, Enum):
    """Coarse fleet status derived from recent findings."""

    NORMAL = 'normal'
    WARNING = 'warning'
    CRITICAL = 'critical'


@dataclass(frozen=True)
class ThresholdRange:
    """Static operating range for one parameter of one pump."""

    min: float
    max: float

    @property
    def span(self) -> float:
        return self.max - self.min

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


@dataclass(frozen=True)
class Reading:
    """A single multi-parameter sensor reading for one pump."""

    timestamp: int
    pump_id: str
    vibration: float
    temperature: float
    pressure: float
    flow_rate: float
    current: float
    voltage: float

    def value(self, parameter: Parameter) -> float:
        return getattr(self, Parameter.parse(parameter).value)

    def values(self) -> Dict[Parameter, float]:
        return {p: getattr(self, p.value) for p in Parameter}

    @property
    def datetime(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp / 1000.0, tz=timezone.utc)

    @classmethod
    def from_dict(cls, data: Dict) -> 'Reading':
        """Build a reading from a mapping using either snake_case or camelCase keys."""
        pump_id = data.get('pump_id', data.get('pumpId'))
        flow_rate = data.get('flow_rate', data.get('flowRate'))
        return cls(
            timestamp=int(data['timestamp']),
            pump_id=str(pump_id),
            vibration=float(data['vibration']),
            temperature=float(data['temperature']),
            pressure=float(data['pressure']),
            flow_rate=float(flow_rate),
            current=float(data['current']),
            voltage=float(data['voltage']),
        )


@dataclass(frozen=True)
class Finding:
    """One detected anomaly with severity, confidence and explanation."""

    id: str
    pump_id: str
    timestamp: int
    kind: str
    severity: Severity
    confidence: float
    description: str
    recommendation: str
    affected_parameters: Tuple[Parameter, ...]

    def __post_init__(self):
        if not isinstance(self.severity, Severity):
            object.__setattr__(self, 'severity', Severity(self.severity))
        params = tuple(Parameter.parse(p) for p in self.affected_parameters)
        if not params:
            raise ValueError(f"Finding {self.id} has no affected parameters")
        object.__setattr__(self, 'affected_parameters', params)
        if not math.isfinite(self.confidence) or not (0.0 <= self.confidence <= 1.0):
            raise ValueError(f"Finding {self.id} confidence out of range: {self.confidence}")

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'pump_id': self.pump_id,
            'timestamp': self.timestamp,
            'kind': self.kind,
            'severity': self.severity.value,
            'confidence': self.confidence,
            'description': self.description,
            'recommendation': self.recommendation,
            'affected_parameters': [p.value for p in self.affected_parameters],
        }


@dataclass(frozen=True)
class FailurePrediction:
    """Trend-based failure estimate for one pump."""

    probability: float = 0.0
    time_to_failure_days: int = 365

    @property
    def has_signal(self) -> bool:
        return self.probability > 0.0


@dataclass(frozen=True)
class PumpProfile:
    """Descriptive pump metadata used when phrasing reports."""

    id: str
    name: str
    location: str = ''
    efficiency: Optional[float] = None
    operating_hours: Optional[int] = None
    last_maintenance: Optional[date] = None
    extra: Dict = field(default_factory=dict, compare=False)

    def days_since_maintenance(self, today: Optional[date] = None) -> Optional[int]:
        if self.last_maintenance is None:
            return None
        today = today or date.today()
        return (today - self.last_maintenance).days
