"""
Data sources module for the HF Propagation Dashboard.

This module contains classes for acquiring telemetry and analyses:
- Analysis oracle client (solar, ionosphere, path analysis, forecast)
- Snapshot cache with last-known-good and default fallbacks
"""

from .oracle_client import OracleClient
from .snapshot_store import SnapshotStore, default_solar_snapshot, default_ionosphere_snapshot

__all__ = [
    'OracleClient',
    'SnapshotStore',
    'default_solar_snapshot',
    'default_ionosphere_snapshot'
]
