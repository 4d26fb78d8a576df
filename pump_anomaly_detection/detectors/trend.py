"""
Trend Predictor

Compares the most recent sub-window of a pump's history with the one before
it to estimate a coarse failure probability and time to failure.
"""

from typing import Any, Dict, Optional, Sequence

from ..config import CONFIG
from ..core.logger import get_logger
from ..features import relative_trend, round_half_up, split_windows
from ..history import HistoryStore, history_frame
from ..records import FailurePrediction, Parameter, Reading

logger = get_logger(f"{CONFIG['logging']['logger_name']}.trend", log_to_console=False)


class TrendPredictor:
    """
    Recent-vs-older sub-window failure estimator.

    probability = clamp(0, max_probability, gain * sum(relative trends))
    time_to_failure = max(1, round(horizon * (1 - probability)))
    """

    def __init__(self, history: Optional[HistoryStore] = None, config: Optional[Dict[str, Any]] = None):
        cfg = config or CONFIG
        self.config = cfg
        self.history = history if history is not None else HistoryStore(cfg=cfg)

        trend_cfg = cfg['trend']
        self.min_samples = trend_cfg['min_samples']
        self.window = trend_cfg['window']
        self.parameters = [Parameter.parse(p) for p in trend_cfg['parameters']]
        self.gain = trend_cfg['gain']
        self.max_probability = trend_cfg['max_probability']
        self.horizon_days = trend_cfg['horizon_days']

    @property
    def no_signal(self) -> FailurePrediction:
        return FailurePrediction(probability=0.0, time_to_failure_days=self.horizon_days)

    def predict_window(self, window: Sequence[Reading]) -> FailurePrediction:
        """
        Predict from an explicit history snapshot (oldest first).

        Returns the no-signal default when the window is too short or a
        baseline mean is zero.
        """
        if len(window) < self.min_samples:
            return self.no_signal

        frame = history_frame(window)
        older, recent = split_windows(frame, self.window)
        columns = [p.value for p in self.parameters]
        older_means = older[columns].mean()
        recent_means = recent[columns].mean()

        total = 0.0
        for column in columns:
            trend = relative_trend(float(recent_means[column]), float(older_means[column]))
            if trend is None:
                logger.debug(f"Zero baseline for {column}; no trend signal")
                return self.no_signal
            total += trend

        probability = min(self.max_probability, max(0.0, total * self.gain))
        days = max(1, round_half_up(self.horizon_days * (1 - probability)))
        return FailurePrediction(probability=probability, time_to_failure_days=days)

    def predict(self, pump_id: str) -> FailurePrediction:
        """Predict failure for a pump from its current history."""
        return self.predict_window(self.history.get(pump_id))
