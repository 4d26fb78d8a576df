"""
Multi-Parameter Pattern Rules

Fixed, hand-authored conditions indicating known pump failure modes:
- Bearing degradation (high vibration + high temperature)
- Impeller wear (low pressure + low flow rate)
- Electrical fault (high current + low voltage)

Rules look at the current reading only and do not depend on history.
"""

import operator
from dataclasses import dataclass
from typing import List, Tuple
from uuid import uuid4

from ..config import CONFIG
from ..records import Finding, Parameter, Reading, Severity

_OPERATORS = {
    '>': operator.gt,
    '>=': operator.ge,
    '<': operator.lt,
    '<=': operator.le,
}


@dataclass(frozen=True)
class PatternRule:
    """A conjunction of parameter conditions mapped to a fixed finding."""

    name: str
    conditions: Tuple[Tuple[Parameter, str, float], ...]
    severity: Severity
    confidence: float
    description: str
    recommendation: str

    @classmethod
    def from_config(cls, rule):
        conditions = tuple(
            (Parameter.parse(param), op, float(limit)) for param, op, limit in rule['conditions']
        )
        for _, op, _ in conditions:
            if op not in _OPERATORS:
                raise ValueError(f"Pattern {rule['name']} uses unknown operator {op!r}")
        return cls(
            name=rule['name'],
            conditions=conditions,
            severity=Severity(rule['severity']),
            confidence=float(rule['confidence']),
            description=rule['description'],
            recommendation=rule['recommendation'],
        )

    @property
    def parameters(self) -> Tuple[Parameter, ...]:
        return tuple(param for param, _, _ in self.conditions)

    def matches(self, reading: Reading) -> bool:
        return all(_OPERATORS[op](reading.value(param), limit) for param, op, limit in self.conditions)

    def to_finding(self, reading: Reading) -> Finding:
        return Finding(
            id=f"pattern-{self.name}-{reading.pump_id}-{uuid4().hex[:12]}",
            pump_id=reading.pump_id,
            timestamp=reading.timestamp,
            kind=self.name,
            severity=self.severity,
            confidence=self.confidence,
            description=self.description,
            recommendation=self.recommendation,
            affected_parameters=self.parameters,
        )


def load_rules(cfg=CONFIG) -> List[PatternRule]:
    """Build the pattern rules from configuration."""
    return [PatternRule.from_config(rule) for rule in cfg['patterns']]


def detect_patterns(reading, rules=None, cfg=CONFIG):
    """
    Evaluate every pattern rule against the current reading.

    Args:
        reading: Reading to evaluate
        rules: Pre-built rules (defaults to those in cfg)
        cfg: Configuration dictionary

    Returns:
        list: One finding per matching rule, in rule order
    """
    rules = load_rules(cfg) if rules is None else rules
    return [rule.to_finding(reading) for rule in rules if rule.matches(reading)]
