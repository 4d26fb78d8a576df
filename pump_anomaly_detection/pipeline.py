"""
Main Anomaly Detection Pipeline

Replays a stream of readings through a fresh engine and collects findings,
reports and predictions.
"""

import numpy as np
import pandas as pd

from .config import CONFIG
from .core.base import LoggingObserver
from .core.builder import build_default_pipeline
from .core.logger import get_logger
from .data_loader import load_readings, load_threshold_table
from .features import parameter_diagnostics
from .history import history_frame
from .records import Parameter
from .reporting import findings_to_frame, generate_anomaly_report, generate_summary, save_outputs


def run_pipeline(readings, thresholds=None, cfg=CONFIG, output_dir=None, max_workers=None, verbose=False):
    """
    Run the complete anomaly classification pipeline over a reading stream.

    Pipeline steps:
    1. Load readings and threshold table
    2. Evaluate every reading (physics + statistical tiers, pumps in parallel)
    3. Fuse findings and compute fleet status
    4. Trend prediction per pump
    5. Event log, ranked report, summary (optionally saved as CSV)

    Args:
        readings: Sequence of Reading, or a path to a readings CSV
        thresholds: Threshold table, mapping, CSV path or None for cfg['thresholds']
        cfg: Configuration dictionary
        output_dir: Directory for CSV outputs (nothing is written when None)
        max_workers: Thread pool size for per-pump parallelism
        verbose: Log progress banners to the console

    Returns:
        dict: Results dictionary with evaluation results and DataFrames
    """
    log = get_logger(f"{cfg['logging']['logger_name']}.pipeline", log_to_console=verbose)
    results = {}

    # === Phase 1: Data Loading ===
    if isinstance(readings, (str, bytes)) or hasattr(readings, '__fspath__'):
        readings = load_readings(readings, cfg)
    readings = list(readings)
    table = load_threshold_table(thresholds, cfg)
    log.info(f"Loaded {len(readings)} readings for {len({r.pump_id for r in readings})} pumps")

    # === Phase 2: Evaluation ===
    observers = [LoggingObserver(log)] if verbose else None
    engine = build_default_pipeline(cfg, thresholds=table, observers=observers)
    evaluations = engine.evaluate_batch(readings, max_workers=max_workers)
    results['engine'] = engine
    results['results'] = evaluations

    findings = [f for r in evaluations for f in r.findings]
    errors = [e for r in evaluations for e in r.errors]
    results['findings'] = findings
    results['errors'] = errors
    log.info(f"Findings: {len(findings)}, errors: {len(errors)}")

    # === Phase 3: Fleet Status ===
    results['status'] = engine.system_status()
    log.info(f"System status: {results['status'].value}")

    # === Phase 4: Trend Prediction ===
    pump_ids = sorted({r.pump_id for r in readings})
    results['predictions'] = {pid: engine.predict(pid) for pid in pump_ids}

    # === Phase 5: Event Logging & Reporting ===
    results['events'] = findings_to_frame(findings, cfg)
    results['report'] = generate_anomaly_report(findings, cfg=cfg)
    results['summary'] = generate_summary(findings)

    if output_dir is not None:
        results['paths'] = save_outputs(findings, output_dir, predictions=results['predictions'], cfg=cfg)

    engine.detection_logger.log_pipeline_summary()
    return results


def inspect_pump(engine, pump_id, verbose=False):
    """
    Inspect one pump's history with full diagnostics.

    Args:
        engine: AnomalyDetectionPipeline
        pump_id: Pump identifier
        verbose: Print diagnostics

    Returns:
        dict: {'parameters': {name: diagnostics}, 'prediction': FailurePrediction}
    """
    frame = history_frame(engine.history_for(pump_id))
    diag = {p.value: parameter_diagnostics(frame[p.value]) for p in Parameter}
    prediction = engine.predict(pump_id)

    if verbose:
        print(f"\nPump {pump_id} Diagnostics ({len(frame)} readings):")
        for name, stats in diag.items():
            shown = ', '.join(
                f"{k}={'None' if pd.isna(v) else (f'{v:.3f}' if isinstance(v, (float, np.floating)) else v)}"
                for k, v in stats.items()
            )
            print(f"  {name}: {shown}")
        print(f"  prediction: p={prediction.probability:.3f}, ttf={prediction.time_to_failure_days} days")

    return {'parameters': diag, 'prediction': prediction}


def summarize_pumps(engine, pump_ids, parameter=Parameter.VIBRATION):
    """
    Summarize several pumps for comparison.

    Args:
        engine: AnomalyDetectionPipeline
        pump_ids: Pumps to compare
        parameter: Parameter to summarize

    Returns:
        DataFrame: One row per pump
    """
    parameter = Parameter.parse(parameter)
    summaries = []
    for pid in pump_ids:
        frame = history_frame(engine.history_for(pid))
        stats = parameter_diagnostics(frame[parameter.value])
        prediction = engine.predict(pid)
        summaries.append({
            'pump_id': pid,
            'parameter': parameter.value,
            'length': stats['length'],
            'mean': stats['mean'],
            'std': stats['std'],
            'min': stats['min'],
            'max': stats['max'],
            'failure_probability': prediction.probability,
            'time_to_failure_days': prediction.time_to_failure_days,
        })
    return pd.DataFrame(summaries)
