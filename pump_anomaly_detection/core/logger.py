"""
Comprehensive Logging Infrastructure

Production-grade logging for the anomaly classification engine.
"""

import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional, Union

from ..config import CONFIG


DETAILED_FORMAT = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s', datefmt='%Y-%m-%d %H:%M:%S')
SIMPLE_FORMAT = logging.Formatter('%(levelname)s - %(message)s')


class LoggerManager:
    """
    Centralized logging management.

    Singleton Pattern: one registry of configured loggers per process. The
    engine logs from worker threads, so logger creation is serialized.
    """

    _instance: Optional['LoggerManager'] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self.loggers: Dict[str, logging.Logger] = {}
        self.log_dir = Path(CONFIG['logging']['log_dir'])
        self._lock = Lock()
        self._initialized = True

    def get_logger(
        self,
        name: str,
        level: Union[int, str] = CONFIG['logging']['level'],
        log_to_file: bool = CONFIG['logging']['log_to_file'],
        log_to_console: bool = True
    ) -> logging.Logger:
        """
        Get or create logger.

        The first call for a name decides its handlers; later calls return
        the same logger unchanged.

        Args:
            name: Logger name (dotted under the package logger name)
            level: Logging level
            log_to_file: Also write a dated file under log_dir
            log_to_console: Write to stdout

        Returns:
            Configured logger
        """
        with self._lock:
            if name in self.loggers:
                return self.loggers[name]

            logger = logging.getLogger(name)
            logger.setLevel(level)
            logger.handlers.clear()

            if log_to_console:
                logger.addHandler(self._console_handler(level))
            if log_to_file:
                logger.addHandler(self._file_handler(name))

            self.loggers[name] = logger
            return logger

    def _console_handler(self, level: Union[int, str]) -> logging.Handler:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(SIMPLE_FORMAT)
        return handler

    def _file_handler(self, name: str) -> logging.Handler:
        # Directory only exists once something actually logs to file
        self.log_dir.mkdir(parents=True, exist_ok=True)
        log_file = self.log_dir / f"{name}_{datetime.now().strftime('%Y%m%d')}.log"
        handler = logging.FileHandler(log_file, encoding='utf-8')
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(DETAILED_FORMAT)
        return handler


def get_logger(name: str, **kwargs) -> logging.Logger:
    """Convenience function to get logger."""
    return LoggerManager().get_logger(name, **kwargs)


class PerformanceLogger:
    """
    Evaluation-cycle timing logger.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """Initialize with logger."""
        self.logger = logger or get_logger(f"{CONFIG['logging']['logger_name']}.performance")
        self.timings: Dict[str, float] = {}
        self._lock = Lock()

    def start_timer(self, operation: str) -> None:
        """Start timing an operation."""
        with self._lock:
            self.timings[operation] = time.perf_counter()

    def stop_timer(self, operation: str) -> float:
        """
        Stop timer and log duration.

        Args:
            operation: Operation name

        Returns:
            Duration in milliseconds
        """
        with self._lock:
            started = self.timings.pop(operation, None)

        if started is None:
            self.logger.warning(f"No timer found for {operation}")
            return 0.0

        duration_ms = (time.perf_counter() - started) * 1000.0
        self.logger.debug(f"{operation} took {duration_ms:.3f} ms")
        return duration_ms


class AnomalyDetectionLogger:
    """
    Specialized logger for anomaly detection events.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """Initialize with logger."""
        self.logger = logger or get_logger(f"{CONFIG['logging']['logger_name']}.findings")
        self._lock = Lock()
        self.reset_stats()

    def log_detector_event(
        self,
        detector_name: str,
        pump_id: Any,
        severity: str,
        details: Dict[str, Any]
    ) -> None:
        """
        Log detector event.

        Args:
            detector_name: Detector identifier or finding kind
            pump_id: Pump identifier
            severity: Severity level
            details: Additional details
        """
        with self._lock:
            self.stats['total_anomalies'] += 1
            by_type = self.stats['by_type']
            by_type[detector_name] = by_type.get(detector_name, 0) + 1
            by_severity = self.stats['by_severity']
            by_severity[severity] = by_severity.get(severity, 0) + 1

        self.logger.warning(
            f"Anomaly detected - Detector: {detector_name}, "
            f"Pump: {pump_id}, Severity: {severity}, Details: {details}"
        )

    def log_evaluation(self, pump_id: Any) -> None:
        """Count one completed evaluation cycle."""
        with self._lock:
            self.stats['total_evaluations'] += 1
            self.stats['pumps'].add(pump_id)

    def log_error(self, pump_id: Any, stage: str, error: Exception) -> None:
        """Count and log an evaluation failure."""
        with self._lock:
            self.stats['total_errors'] += 1

        self.logger.error(f"Evaluation failed - Pump: {pump_id}, Stage: {stage}, Error: {error}")

    def log_pipeline_summary(self) -> None:
        """Log pipeline execution summary."""
        self.logger.info("=" * 60)
        self.logger.info("PIPELINE SUMMARY")
        self.logger.info("=" * 60)
        self.logger.info(f"Pumps: {len(self.stats['pumps'])}")
        self.logger.info(f"Total evaluations: {self.stats['total_evaluations']}")
        self.logger.info(f"Total anomalies: {self.stats['total_anomalies']}")
        self.logger.info(f"Total errors: {self.stats['total_errors']}")
        self.logger.info(f"By type: {self.stats['by_type']}")
        self.logger.info(f"By severity: {self.stats['by_severity']}")
        self.logger.info("=" * 60)

    def reset_stats(self) -> None:
        """Reset statistics."""
        with self._lock:
            self.stats = {
                'total_evaluations': 0,
                'total_anomalies': 0,
                'total_errors': 0,
                'pumps': set(),
                'by_type': {},
                'by_severity': {}
            }


# Convenience functions
def setup_logging(log_dir: Path = Path(CONFIG['logging']['log_dir'])) -> None:
    """Set up logging infrastructure."""
    LoggerManager._instance = None  # Reset singleton
    LoggerManager().log_dir = Path(log_dir)


def get_detection_logger() -> AnomalyDetectionLogger:
    """Get specialized detection logger."""
    return AnomalyDetectionLogger()


def get_performance_logger() -> PerformanceLogger:
    """Get performance logger."""
    return PerformanceLogger()
