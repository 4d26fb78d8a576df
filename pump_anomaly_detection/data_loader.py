"""
Data Loading Module

Handles:
- CSV loading of recorded readings with column normalization
- Missing value handling
- Threshold table loading from mappings or CSV, with load-time validation
- Pump catalogue loading
"""

from datetime import date

import numpy as np
import pandas as pd

from .config import CONFIG, PARAMETER_NAMES
from .core.logger import get_logger
from .core.validators import ConfigurationError, ThresholdValidator
from .records import Parameter, PumpProfile, Reading, ThresholdRange

logger = get_logger(f"{CONFIG['logging']['logger_name']}.data_loader", log_to_console=False)

_COLUMN_ALIASES = {
    'pumpid': 'pump_id',
    'pump_id': 'pump_id',
    'flowrate': 'flow_rate',
    'flow_rate': 'flow_rate',
}


def _normalize_columns(df):
    renamed = {}
    for col in df.columns:
        key = str(col).strip()
        renamed[col] = _COLUMN_ALIASES.get(key.lower(), key.lower())
    return df.rename(columns=renamed)


def readings_from_frame(df, cfg=CONFIG):
    """
    Convert a DataFrame of readings into Reading records.

    Rows with missing or non-numeric values are logged and dropped; rows are
    returned in timestamp order (stable for equal timestamps).

    Args:
        df: DataFrame with timestamp, pump_id and the six parameter columns
        cfg: Configuration dictionary

    Returns:
        list: Reading records
    """
    df = _normalize_columns(df)

    missing = [col for col in cfg['reading_schema'] if col not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")

    df = df[cfg['reading_schema']].copy()
    for col in ['timestamp', *PARAMETER_NAMES]:
        df[col] = pd.to_numeric(df[col], errors='coerce')
    df.loc[~np.isfinite(df[list(PARAMETER_NAMES)]).all(axis=1), list(PARAMETER_NAMES)] = np.nan

    bad = df.isna().any(axis=1)
    if bad.any():
        logger.warning(f"Dropping {int(bad.sum())} incomplete readings")
        df = df[~bad]

    df = df.sort_values('timestamp', kind='stable')

    return [
        Reading(
            timestamp=int(row.timestamp),
            pump_id=str(row.pump_id),
            vibration=float(row.vibration),
            temperature=float(row.temperature),
            pressure=float(row.pressure),
            flow_rate=float(row.flow_rate),
            current=float(row.current),
            voltage=float(row.voltage),
        )
        for row in df.itertuples(index=False)
    ]


def load_readings(filepath, cfg=CONFIG):
    """
    Load recorded readings from a CSV file.

    Args:
        filepath: Path to CSV file
        cfg: Configuration dictionary

    Returns:
        list: Reading records in timestamp order
    """
    df = pd.read_csv(filepath)
    readings = readings_from_frame(df, cfg)
    logger.info(f"Loaded {len(readings)} readings from {filepath}")
    return readings


def _table_from_frame(df):
    df = _normalize_columns(df)
    missing = [col for col in ['pump_id', 'parameter', 'min', 'max'] if col not in df.columns]
    if missing:
        raise ConfigurationError(f"Threshold file missing columns: {missing}")

    table = {}
    for row in df.itertuples(index=False):
        try:
            parameter = Parameter.parse(row.parameter)
        except ValueError as e:
            raise ConfigurationError(f"Unknown parameter {row.parameter!r} for pump {row.pump_id}",
                                     pump_id=str(row.pump_id)) from e
        table.setdefault(str(row.pump_id), {})[parameter] = ThresholdRange(min=float(row.min), max=float(row.max))
    return table


def _table_from_mapping(source):
    table = {}
    for pump_id, ranges in source.items():
        pump_ranges = {}
        for name, bounds in ranges.items():
            try:
                parameter = Parameter.parse(name)
            except ValueError as e:
                raise ConfigurationError(f"Unknown parameter {name!r} for pump {pump_id}",
                                         pump_id=str(pump_id)) from e
            if isinstance(bounds, ThresholdRange):
                pump_ranges[parameter] = bounds
            else:
                pump_ranges[parameter] = ThresholdRange(min=float(bounds['min']), max=float(bounds['max']))
        table[str(pump_id)] = pump_ranges
    return table


def load_threshold_table(source=None, cfg=CONFIG):
    """
    Load and validate the per-pump threshold table.

    Args:
        source: Nested mapping {pump_id: {parameter: {'min', 'max'}}}, a CSV
            path with columns pump_id, parameter, min, max, or None for
            cfg['thresholds']
        cfg: Configuration dictionary

    Returns:
        dict: {pump_id: {Parameter: ThresholdRange}}

    Raises:
        ConfigurationError: If any range is missing or degenerate
    """
    if source is None:
        source = cfg['thresholds']

    if isinstance(source, pd.DataFrame):
        table = _table_from_frame(source)
    elif isinstance(source, dict):
        table = _table_from_mapping(source)
    else:
        table = _table_from_frame(pd.read_csv(source))

    is_valid, errors = ThresholdValidator.validate_table(table)
    if not is_valid:
        for error in errors:
            logger.error(error)
        raise ConfigurationError("Invalid threshold table:\n" + "\n".join(f"  - {e}" for e in errors))

    return table


def load_pump_profiles(source=None, cfg=CONFIG):
    """
    Build pump profiles from a catalogue mapping.

    Args:
        source: Mapping {pump_id: {name, location, efficiency, operating_hours,
            last_maintenance}}; defaults to cfg['pumps']
        cfg: Configuration dictionary

    Returns:
        dict: {pump_id: PumpProfile}
    """
    source = cfg['pumps'] if source is None else source
    profiles = {}
    for pump_id, info in source.items():
        last = info.get('last_maintenance')
        if isinstance(last, str):
            last = date.fromisoformat(last)
        profiles[pump_id] = PumpProfile(
            id=pump_id,
            name=info.get('name', pump_id),
            location=info.get('location', ''),
            efficiency=info.get('efficiency'),
            operating_hours=info.get('operating_hours'),
            last_maintenance=last,
        )
    return profiles
