"""
Pump Anomaly Detection - Configuration Module

Central configuration dictionary consolidating all thresholds, parameters, and policies
for the anomaly classification engine.

Detector constants (z threshold, pattern rules, trend windows) are fixed for the
whole fleet; only the physics thresholds are configured per pump.
"""

import copy

PARAMETER_NAMES = ('vibration', 'temperature', 'pressure', 'flow_rate', 'current', 'voltage')

CONFIG = {
    # Context
    'reading_schema': ['timestamp', 'pump_id', *PARAMETER_NAMES],
    'notes': {
        'timestamp': 'Integer milliseconds since epoch',
        'cadence': 'Readings arrive at a fixed poll interval per pump; cadence is imposed by the caller',
        'flow_rate': 'Sources may spell it flowRate; loaders normalize to flow_rate',
    },

    # Rolling history
    'history': {
        'capacity': 100,                 # oldest evicted first
        'min_samples': 10,               # statistical detector guard
    },

    # Physics threshold checks (per-pump ranges live under 'thresholds')
    'physics': {
        'confidence': 0.95,              # deterministic violations
        'severity_breakpoints': {        # deviation as fraction of range
            'critical': 0.5,
            'high': 0.3,
            'medium': 0.1,
        },
        'units': {
            'vibration': 'mm/s',
            'temperature': '°C',
            'pressure': 'bar',
            'flow_rate': 'L/min',
            'current': 'A',
            'voltage': 'V',
        },
    },

    # Rolling z-score detector
    'statistical': {
        'z_threshold': 2.5,
        'severity_breakpoints': {        # strictly greater than
            'critical': 4.0,
            'high': 3.5,
            'medium': 3.0,
        },
        'confidence_divisor': 4.0,       # confidence = min(max_confidence, z / divisor)
        'max_confidence': 0.99,
        'days_numerator': 30.0,          # days to failure = max(1, round(30 / z))
    },

    # Multi-parameter pattern rules (fixed constants, not per pump)
    'patterns': [
        {
            'name': 'bearing_degradation',
            'conditions': [('vibration', '>', 4.0), ('temperature', '>', 70.0)],
            'severity': 'high',
            'confidence': 0.87,
            'description': 'Pattern analysis indicates potential bearing degradation',
            'recommendation': 'Schedule bearing inspection and replacement within 48 hours',
        },
        {
            'name': 'impeller_wear',
            'conditions': [('pressure', '<', 2.5), ('flow_rate', '<', 160.0)],
            'severity': 'medium',
            'confidence': 0.82,
            'description': 'Pattern analysis suggests impeller wear or blockage',
            'recommendation': 'Inspect impeller condition and clear any blockages',
        },
        {
            'name': 'electrical_fault',
            'conditions': [('current', '>', 12.0), ('voltage', '<', 450.0)],
            'severity': 'critical',
            'confidence': 0.91,
            'description': 'Pattern analysis detects electrical system anomaly',
            'recommendation': 'Immediate electrical system inspection required',
        },
    ],

    # Recent-vs-older trend prediction
    'trend': {
        'min_samples': 20,
        'window': 10,                    # recent = last 10, older = the 10 before
        'parameters': ['vibration', 'temperature'],
        'gain': 10.0,
        'max_probability': 0.95,
        'horizon_days': 365,
    },

    # Fleet status roll-up
    'status': {
        'window_ms': 60_000,
        'recent_capacity': 500,
    },

    # Reporting
    'report': {
        'top_n': 20,
        'historical_limit': 20,
        'recent_trends': 5,
        'maintenance_reminder_days': 90,
        'low_efficiency_pct': 85.0,
    },

    # Logging schema
    'logging': {
        'logger_name': 'pump_anomaly_detection',
        'level': 'INFO',
        'log_to_file': False,
        'log_dir': 'logs',
        'event_log_columns': [
            'id', 'pump_id', 'timestamp', 'datetime', 'kind', 'severity',
            'confidence', 'affected_parameters', 'description', 'recommendation'
        ],
    },

    # Reference fleet thresholds
    'thresholds': {
        'PUMP-001': {
            'vibration': {'min': 0.0, 'max': 4.5},
            'temperature': {'min': 20.0, 'max': 75.0},
            'pressure': {'min': 2.8, 'max': 3.2},
            'flow_rate': {'min': 180.0, 'max': 220.0},
            'current': {'min': 8.0, 'max': 12.0},
            'voltage': {'min': 440.0, 'max': 480.0},
        },
        'PUMP-002': {
            'vibration': {'min': 0.0, 'max': 4.0},
            'temperature': {'min': 20.0, 'max': 70.0},
            'pressure': {'min': 2.5, 'max': 2.9},
            'flow_rate': {'min': 150.0, 'max': 190.0},
            'current': {'min': 6.0, 'max': 10.0},
            'voltage': {'min': 440.0, 'max': 480.0},
        },
        'PUMP-003': {
            'vibration': {'min': 0.0, 'max': 5.0},
            'temperature': {'min': 20.0, 'max': 80.0},
            'pressure': {'min': 3.0, 'max': 3.5},
            'flow_rate': {'min': 200.0, 'max': 250.0},
            'current': {'min': 10.0, 'max': 15.0},
            'voltage': {'min': 440.0, 'max': 480.0},
        },
        'PUMP-004': {
            'vibration': {'min': 0.0, 'max': 4.2},
            'temperature': {'min': 20.0, 'max': 72.0},
            'pressure': {'min': 2.2, 'max': 2.8},
            'flow_rate': {'min': 160.0, 'max': 200.0},
            'current': {'min': 7.0, 'max': 11.0},
            'voltage': {'min': 440.0, 'max': 480.0},
        },
    },

    # Reference pump catalogue (used by the template reporter)
    'pumps': {
        'PUMP-001': {
            'name': 'Primary Seawater Pump',
            'location': 'Platform A - Deck 2',
            'efficiency': 94.2,
            'operating_hours': 8760,
            'last_maintenance': '2024-01-15',
        },
        'PUMP-002': {
            'name': 'Cooling Water Pump',
            'location': 'Platform A - Engine Room',
            'efficiency': 91.8,
            'operating_hours': 7320,
            'last_maintenance': '2024-02-01',
        },
        'PUMP-003': {
            'name': 'Fire Water Pump',
            'location': 'Platform B - Safety Deck',
            'efficiency': 87.5,
            'operating_hours': 12450,
            'last_maintenance': '2023-11-20',
        },
        'PUMP-004': {
            'name': 'Ballast Water Pump',
            'location': 'Platform B - Lower Deck',
            'efficiency': 78.3,
            'operating_hours': 15680,
            'last_maintenance': '2023-09-10',
        },
    },
}


def make_config(**overrides):
    """
    Return a deep copy of CONFIG with top-level sections updated.

    Nested dictionaries are merged one level deep so a caller can override a
    single key, e.g. ``make_config(history={'capacity': 50})``.
    """
    cfg = copy.deepcopy(CONFIG)
    for section, value in overrides.items():
        if isinstance(value, dict) and isinstance(cfg.get(section), dict):
            cfg[section].update(copy.deepcopy(value))
        else:
            cfg[section] = copy.deepcopy(value)
    return cfg
