"""
Detector strategies. Importing this package registers them with DetectorFactory.
"""

from .physics import PhysicsChecker, RECOMMENDATIONS, compute_deviation, deviation_severity, get_recommendation
from .patterns import PatternRule, detect_patterns, load_rules
from .statistical import StatisticalDetector
from .trend import TrendPredictor

__all__ = [
    'PhysicsChecker',
    'RECOMMENDATIONS',
    'compute_deviation',
    'deviation_severity',
    'get_recommendation',
    'PatternRule',
    'detect_patterns',
    'load_rules',
    'StatisticalDetector',
    'TrendPredictor',
]
