"""
Builder Pattern for Engine Configuration

Fluent interface for building the per-reading anomaly classification engine,
and the engine itself.
"""

import time
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..config import CONFIG, make_config
from ..detectors.trend import TrendPredictor
from ..fusion import FindingSummary, summarize_findings, system_status
from ..history import HistoryStore
from ..records import FailurePrediction, Finding, Parameter, Reading, SystemStatus, ThresholdRange
from .base import BaseDetector, Observable, Observer
from .factory import DetectorFactory
from .logger import AnomalyDetectionLogger, PerformanceLogger, get_logger
from .validators import ConfigurationError, ReadingValidator, validate_engine_inputs

DEFAULT_DETECTORS = ('physics', 'statistical')


@dataclass(frozen=True)
class EvaluationError:
    """A failure of one stage of one pump's evaluation, kept apart from findings."""

    pump_id: str
    stage: str
    kind: str              # 'configuration', 'validation' or 'internal'
    message: str


@dataclass(frozen=True)
class EvaluationResult:
    """Everything one evaluation cycle produced for one reading."""

    pump_id: str
    reading: Reading
    findings: List[Finding] = field(default_factory=list)
    summary: FindingSummary = field(default_factory=FindingSummary)
    prediction: FailurePrediction = field(default_factory=FailurePrediction)
    errors: Tuple[EvaluationError, ...] = ()
    duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.errors


class PipelineBuilder:
    """
    Builder for constructing anomaly classification engines.

    Builder Pattern: Step-by-step construction with fluent interface.
    """

    def __init__(self):
        """Initialize builder with empty configuration."""
        self.reset()

    def with_config(self, config: Dict[str, Any]) -> 'PipelineBuilder':
        """
        Add configuration.

        Sections given here are merged over CONFIG one level deep.

        Args:
            config: Configuration dictionary

        Returns:
            self (for fluent interface)
        """
        self._config.update(config)
        return self

    def with_thresholds(self, thresholds: Mapping[str, Mapping[Parameter, ThresholdRange]]) -> 'PipelineBuilder':
        """
        Set the per-pump threshold table.

        Args:
            thresholds: Table as returned by data_loader.load_threshold_table

        Returns:
            self (for fluent interface)
        """
        self._thresholds = thresholds
        return self

    def with_history(self, history: HistoryStore) -> 'PipelineBuilder':
        """Share an existing history store."""
        self._history = history
        return self

    def with_detector(self, detector_type: str) -> 'PipelineBuilder':
        """
        Add detector to the engine.

        Args:
            detector_type: Detector identifier registered with DetectorFactory

        Returns:
            self (for fluent interface)
        """
        if detector_type not in DetectorFactory.get_available():
            raise ValueError(f"Unknown detector type: {detector_type}. Available: {DetectorFactory.get_available()}")
        self._detector_types.append(detector_type)
        return self

    def with_observer(self, observer: Observer) -> 'PipelineBuilder':
        """
        Add observer for events.

        Args:
            observer: Observer instance

        Returns:
            self (for fluent interface)
        """
        self._observers.append(observer)
        return self

    def build(self) -> 'AnomalyDetectionPipeline':
        """
        Build and return engine instance.

        Raises:
            ConfigurationError: If the configuration or threshold table is invalid

        Returns:
            Configured engine
        """
        cfg = make_config(**self._config) if self._config else CONFIG
        thresholds = self._thresholds if self._thresholds is not None else {}
        validate_engine_inputs(cfg, thresholds if self._thresholds is not None else None)

        history = self._history if self._history is not None else HistoryStore(cfg=cfg)
        detectors = [
            DetectorFactory.create(detector_type, cfg, thresholds=thresholds, history=history)
            for detector_type in self._detector_types or DEFAULT_DETECTORS
        ]

        return AnomalyDetectionPipeline(
            detectors=detectors,
            history=history,
            predictor=TrendPredictor(history=history, config=cfg),
            observers=self._observers,
            config=cfg,
        )

    def reset(self) -> 'PipelineBuilder':
        """Reset builder to initial state."""
        self._detector_types: List[str] = []
        self._observers: List[Observer] = []
        self._config: Dict[str, Any] = {}
        self._thresholds: Optional[Mapping] = None
        self._history: Optional[HistoryStore] = None
        return self


class AnomalyDetectionPipeline:
    """
    Composed anomaly classification engine.

    Orchestrates detectors, the trend predictor, finding fusion and observers.
    One pump's evaluation holds that pump's history lock for the whole
    append-then-evaluate cycle; observers are notified after the lock is
    released.
    """

    def __init__(
        self,
        detectors: List[BaseDetector],
        history: HistoryStore,
        predictor: TrendPredictor,
        observers: Optional[List[Observer]] = None,
        config: Dict[str, Any] = CONFIG
    ):
        """
        Initialize engine.

        Args:
            detectors: List of detector instances
            history: History store shared with the stateful detectors
            predictor: Trend predictor reading the same history
            observers: List of observer instances
            config: Configuration dictionary
        """
        self.detectors = detectors
        self.history = history
        self.predictor = predictor
        self.config = config

        name = config['logging']['logger_name']
        self.logger = get_logger(f"{name}.engine", log_to_console=False)
        self.detection_logger = AnomalyDetectionLogger(get_logger(f"{name}.findings", log_to_console=False))
        self.performance_logger = PerformanceLogger(get_logger(f"{name}.performance", log_to_console=False))

        # Make engine observable
        self.events = Observable()
        for observer in observers or []:
            self.events.attach(observer)

        # Soft cap: findings still inside the status window are never evicted
        self._recent: deque = deque()
        self._recent_capacity = config['status']['recent_capacity']
        self._status_window_ms = config['status']['window_ms']
        self._recent_lock = Lock()
        self._latest_timestamp: Optional[int] = None

    @property
    def thresholds(self) -> Mapping:
        for detector in self.detectors:
            if hasattr(detector, 'thresholds'):
                return detector.thresholds
        return {}

    def evaluate(self, reading: Reading) -> EvaluationResult:
        """
        Run one evaluation cycle for a reading.

        No exception escapes: detector failures are recorded on the result as
        EvaluationError entries, tagged 'configuration' for threshold problems.

        Args:
            reading: Reading to evaluate

        Returns:
            EvaluationResult with ranked findings, summary and prediction
        """
        pump_id = getattr(reading, 'pump_id', None)
        is_valid, problems = ReadingValidator.validate_reading(reading)
        if not is_valid:
            error = EvaluationError(str(pump_id), 'validation', 'validation', '; '.join(problems))
            self._report_errors([error])
            return EvaluationResult(pump_id=str(pump_id), reading=reading, errors=(error,))

        timer = f"evaluate:{pump_id}:{reading.timestamp}:{id(reading)}"
        self.performance_logger.start_timer(timer)

        findings: List[Finding] = []
        errors: List[EvaluationError] = []

        with self.history.lock(pump_id):
            for detector in self.detectors:
                try:
                    findings.extend(detector.detect(reading))
                except ConfigurationError as e:
                    errors.append(EvaluationError(pump_id, detector.name, 'configuration', str(e)))
                except Exception as e:
                    self.logger.exception(f"Detector '{detector.name}' failed for {pump_id}")
                    errors.append(EvaluationError(pump_id, detector.name, 'internal', str(e)))

            try:
                prediction = self.predictor.predict(pump_id)
            except Exception as e:
                self.logger.exception(f"Trend prediction failed for {pump_id}")
                errors.append(EvaluationError(pump_id, 'trend', 'internal', str(e)))
                prediction = self.predictor.no_signal

        summary = summarize_findings(findings)
        duration_ms = self.performance_logger.stop_timer(timer)

        result = EvaluationResult(
            pump_id=pump_id,
            reading=reading,
            findings=summary.ranked,
            summary=summary,
            prediction=prediction,
            errors=tuple(errors),
            duration_ms=duration_ms,
        )

        self._record(result)
        self._report_errors(errors)
        self._notify('evaluation', result)
        return result

    def evaluate_batch(self, readings: Sequence[Reading], max_workers: Optional[int] = None) -> List[EvaluationResult]:
        """
        Evaluate many readings, pumps in parallel.

        Each pump's readings are evaluated in input order on one worker;
        different pumps run concurrently.

        Args:
            readings: Readings in arrival order
            max_workers: Thread pool size (defaults to number of pumps)

        Returns:
            Results in the same order as the input readings
        """
        readings = list(readings)
        by_pump: Dict[str, List[int]] = {}
        for idx, reading in enumerate(readings):
            by_pump.setdefault(str(getattr(reading, 'pump_id', None)), []).append(idx)

        results: List[Optional[EvaluationResult]] = [None] * len(readings)

        def run_pump(indices):
            for idx in indices:
                results[idx] = self.evaluate(readings[idx])

        if len(by_pump) <= 1 or max_workers == 1:
            for indices in by_pump.values():
                run_pump(indices)
        else:
            workers = max_workers or len(by_pump)
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = [executor.submit(run_pump, indices) for indices in by_pump.values()]
                for future in futures:
                    future.result()

        return results

    def predict(self, pump_id: str) -> FailurePrediction:
        """Current trend-based failure prediction for a pump."""
        with self.history.lock(pump_id):
            return self.predictor.predict(pump_id)

    def history_for(self, pump_id: str) -> List[Reading]:
        return self.history.get(pump_id)

    def recent_findings(self, pump_id: Optional[str] = None, limit: Optional[int] = None) -> List[Finding]:
        """Recently recorded findings, newest first, optionally for one pump."""
        with self._recent_lock:
            items = list(self._recent)
        items.reverse()
        if pump_id is not None:
            items = [f for f in items if f.pump_id == pump_id]
        return items[:limit] if limit is not None else items

    def system_status(self, now_ms: Optional[int] = None) -> SystemStatus:
        """
        Fleet status over the recent window.

        Args:
            now_ms: Reference time; defaults to the newest evaluated reading's
                timestamp, or the wall clock before any evaluation

        Returns:
            SystemStatus
        """
        if now_ms is None:
            now_ms = self._latest_timestamp if self._latest_timestamp is not None else int(time.time() * 1000)
        return system_status(self.recent_findings(), now_ms, self.config)

    def _record(self, result: EvaluationResult) -> None:
        with self._recent_lock:
            self._recent.extend(reversed(result.findings))
            ts = result.reading.timestamp
            if self._latest_timestamp is None or ts > self._latest_timestamp:
                self._latest_timestamp = ts
            self._prune_recent()

        self.detection_logger.log_evaluation(result.pump_id)
        for finding in result.findings:
            self.detection_logger.log_detector_event(
                finding.kind,
                finding.pump_id,
                finding.severity.value,
                {'confidence': round(finding.confidence, 3), 'parameters': [p.value for p in finding.affected_parameters]},
            )

    def _prune_recent(self) -> None:
        """Drop the oldest findings beyond capacity once they leave the status window."""
        while (len(self._recent) > self._recent_capacity
               and self._latest_timestamp - self._recent[0].timestamp >= self._status_window_ms):
            self._recent.popleft()

    def _report_errors(self, errors: List[EvaluationError]) -> None:
        for error in errors:
            self.detection_logger.log_error(error.pump_id, error.stage, error.message)
            self._notify('error', error)

    def _notify(self, event: str, data: Any) -> None:
        try:
            self.events.notify(event, data)
        except Exception:
            self.logger.exception(f"Observer failed handling '{event}'")


def build_default_pipeline(cfg: Dict[str, Any] = CONFIG, thresholds: Optional[Mapping] = None,
                           observers: Optional[List[Observer]] = None) -> AnomalyDetectionPipeline:
    """
    Engine wired with the physics and statistical detectors.

    Args:
        cfg: Configuration dictionary
        thresholds: Threshold table; defaults to cfg['thresholds']
        observers: Observers to attach

    Returns:
        AnomalyDetectionPipeline
    """
    from ..data_loader import load_threshold_table

    table = thresholds if thresholds is not None else load_threshold_table(cfg['thresholds'])
    builder = PipelineBuilder().with_thresholds(table)
    if cfg is not CONFIG:
        builder.with_config(cfg)
    for detector_type in DEFAULT_DETECTORS:
        builder.with_detector(detector_type)
    for observer in observers or []:
        builder.with_observer(observer)
    return builder.build()
