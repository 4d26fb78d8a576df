"""
Core module with base classes and design patterns.
"""

from .base import (
    BaseDetector,
    BaseValidator,
    Observable,
    Observer,
    LoggingObserver,
    CollectingObserver
)

from .factory import DetectorFactory

from .builder import (
    PipelineBuilder,
    AnomalyDetectionPipeline,
    EvaluationError,
    EvaluationResult,
    build_default_pipeline
)

from .logger import (
    LoggerManager,
    get_logger,
    setup_logging,
    get_detection_logger,
    get_performance_logger,
    PerformanceLogger,
    AnomalyDetectionLogger
)

from .validators import (
    ConfigurationError,
    ThresholdValidator,
    ReadingValidator,
    ConfigValidator,
    validate_engine_inputs
)

__all__ = [
    # Base classes
    'BaseDetector',
    'BaseValidator',
    'Observable',
    'Observer',
    'LoggingObserver',
    'CollectingObserver',
    # Factories
    'DetectorFactory',
    # Builders
    'PipelineBuilder',
    'AnomalyDetectionPipeline',
    'EvaluationError',
    'EvaluationResult',
    'build_default_pipeline',
    # Logging
    'LoggerManager',
    'get_logger',
    'setup_logging',
    'get_detection_logger',
    'get_performance_logger',
    'PerformanceLogger',
    'AnomalyDetectionLogger',
    # Validators
    'ConfigurationError',
    'ThresholdValidator',
    'ReadingValidator',
    'ConfigValidator',
    'validate_engine_inputs'
]
