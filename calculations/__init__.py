"""
Calculation utilities for the HF Propagation Dashboard.

This module contains calculation utilities for:
- Synthetic historical trend series
- Chart projections of a propagation analysis
- Geomagnetic classification helpers
"""

from .historical_series import generate_historical_series, deterministic_random
from .chart_projection import build_chart_projection, ChartTables
from .helpers import classify_kp, classify_geomagnetic_status

__all__ = [
    'generate_historical_series',
    'deterministic_random',
    'build_chart_projection',
    'ChartTables',
    'classify_kp',
    'classify_geomagnetic_status'
]
