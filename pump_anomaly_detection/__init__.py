"""
Pump Anomaly Classification Engine

Two-tier anomaly detection for multi-parameter industrial pump readings.

Tiers:
- Physics: static per-pump operating-range checks
- Statistical: rolling z-scores over a bounded per-pump history, plus fixed
  multi-parameter pattern rules
- Trend: recent-vs-older sub-window failure prediction
- Fusion: severity ranking, dominant parameter, confidence, fleet status
"""

__version__ = "0.1.0"

from .config import CONFIG, PARAMETER_NAMES, make_config
from .records import (
    FailurePrediction,
    Finding,
    Parameter,
    PumpProfile,
    Reading,
    Severity,
    SystemStatus,
    ThresholdRange
)
from .core import (
    AnomalyDetectionPipeline,
    ConfigurationError,
    EvaluationError,
    EvaluationResult,
    Observer,
    PipelineBuilder,
    build_default_pipeline
)
from .history import HistoryStore
from .data_loader import load_readings, load_threshold_table, load_pump_profiles
from .detectors import PhysicsChecker, StatisticalDetector, TrendPredictor, detect_patterns
from .fusion import (
    FindingSummary,
    rank_findings,
    dominant_parameter,
    average_confidence,
    summarize_findings,
    system_status,
    historical_context
)
from .reporting import (
    ReportGenerator,
    findings_to_frame,
    generate_anomaly_report,
    generate_summary,
    save_outputs
)
from .pipeline import run_pipeline, inspect_pump, summarize_pumps

__all__ = [
    'CONFIG',
    'PARAMETER_NAMES',
    'make_config',
    'FailurePrediction',
    'Finding',
    'Parameter',
    'PumpProfile',
    'Reading',
    'Severity',
    'SystemStatus',
    'ThresholdRange',
    'AnomalyDetectionPipeline',
    'ConfigurationError',
    'EvaluationError',
    'EvaluationResult',
    'Observer',
    'PipelineBuilder',
    'build_default_pipeline',
    'HistoryStore',
    'load_readings',
    'load_threshold_table',
    'load_pump_profiles',
    'PhysicsChecker',
    'StatisticalDetector',
    'TrendPredictor',
    'detect_patterns',
    'FindingSummary',
    'rank_findings',
    'dominant_parameter',
    'average_confidence',
    'summarize_findings',
    'system_status',
    'historical_context',
    'ReportGenerator',
    'findings_to_frame',
    'generate_anomaly_report',
    'generate_summary',
    'save_outputs',
    'run_pipeline',
    'inspect_pump',
    'summarize_pumps'
]
