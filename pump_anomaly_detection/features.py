"""
Windowed Statistics Module

Implements:
- Population mean / standard deviation over a rolling window
- Z-score with explicit zero-variance guard
- Relative trend between sub-windows with zero-baseline guard
- Per-parameter history diagnostics (spread, shape, early vs late drift)

Degenerate inputs return None instead of propagating NaN or Infinity.
"""

import math

import numpy as np
import pandas as pd
from scipy.stats import kurtosis, skew

_ZERO_STD_TOLERANCE = 1e-12


def round_half_up(x):
    """Round to the nearest integer, halves away from zero for positive x."""
    return int(math.floor(x + 0.5))


def window_stats(values):
    """
    Population mean and standard deviation (divide by N).

    Args:
        values: 1-D array-like of floats

    Returns:
        tuple: (mean, std), or (None, None) when empty
    """
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return None, None
    return float(arr.mean()), float(arr.std(ddof=0))


def column_stats(matrix):
    """
    Column-wise population mean and standard deviation.

    Args:
        matrix: 2-D array, rows are readings

    Returns:
        tuple: (means, stds) arrays
    """
    arr = np.asarray(matrix, dtype=float)
    return arr.mean(axis=0), arr.std(axis=0, ddof=0)


def z_score(value, mean, std):
    """
    Absolute z-score of value against a window.

    Returns None when std is zero (or not finite): zero variance carries no
    statistical basis for an anomaly.
    """
    if std is None or not math.isfinite(std):
        return None
    # float summation of identical values can leave a residual std of ~1e-17
    if std <= _ZERO_STD_TOLERANCE * max(1.0, abs(mean)):
        return None
    z = float(abs(value - mean) / std)
    if not math.isfinite(z):
        return None
    return z


def relative_trend(recent, older):
    """
    Relative change (recent - older) / older.

    Returns None when the older baseline is zero or not finite.
    """
    if older is None or recent is None:
        return None
    if not (math.isfinite(older) and math.isfinite(recent)) or older == 0:
        return None
    return (recent - older) / older


def split_windows(frame, window):
    """
    Split the most recent 2*window rows into (older, recent) sub-windows.

    Args:
        frame: DataFrame in chronological order
        window: rows per sub-window

    Returns:
        tuple: (older, recent) DataFrames
    """
    tail = frame.iloc[-2 * window:]
    return tail.iloc[:window], tail.iloc[window:]


def parameter_diagnostics(trace):
    """
    Quick diagnostics for manual inspection of one parameter's history.

    Args:
        trace: Series or array of values, oldest first

    Returns:
        dict: Diagnostic statistics
    """
    trace = pd.Series(trace, dtype=float)
    if len(trace) == 0:
        return {
            'length': 0, 'mean': np.nan, 'std': np.nan, 'min': np.nan, 'max': np.nan,
            'skew': np.nan, 'kurtosis': np.nan, 'early_mean': np.nan, 'late_mean': np.nan
        }

    n = len(trace)
    w10 = max(1, int(0.10 * n))

    # Early vs late means (coarse drift proxy)
    early_mean = trace.iloc[:w10].mean()
    late_mean = trace.iloc[-w10:].mean()

    values = trace.to_numpy()
    if n >= 3 and values.std() > _ZERO_STD_TOLERANCE * max(1.0, abs(values.mean())):
        sk = float(skew(values))
        ku = float(kurtosis(values))
    else:
        sk = np.nan
        ku = np.nan

    return {
        'length': n,
        'mean': float(values.mean()),
        'std': float(values.std(ddof=0)),
        'min': float(values.min()),
        'max': float(values.max()),
        'skew': sk,
        'kurtosis': ku,
        'early_mean': float(early_mean),
        'late_mean': float(late_mean)
    }
