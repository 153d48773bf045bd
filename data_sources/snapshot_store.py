"""
Snapshot cache and fallback store for solar and ionospheric telemetry.

Keeps the current snapshot of each kind, persists the last known good
(authoritative) snapshot, and records bounded histories. When the oracle
fails, the last known good snapshot is served with ``fallback=True``; when
none exists, fixed built-in defaults are served instead.
"""

import threading
from datetime import datetime
from typing import Dict, List, Optional, Type, TypeVar
import logging

from pydantic import BaseModel, ValidationError as SchemaValidationError

from database import (
    StateStore,
    LAST_SOLAR_DATA,
    LAST_IONOSPHERE_DATA,
    SOLAR_DATA_HISTORY,
    IONOSPHERE_HISTORY,
)
from .oracle_client import OracleClient
from exceptions import OracleCancelledError, OracleError
from models import IonosphereSnapshot, SolarSnapshot
from utils.notifications import NotificationCenter

logger = logging.getLogger(__name__)

SnapshotT = TypeVar('SnapshotT', bound=BaseModel)

MAX_TELEMETRY_HISTORY = 100


def default_solar_snapshot() -> SolarSnapshot:
    """Built-in solar data used when nothing has been cached yet."""
    return SolarSnapshot(
        sfi=145,
        kp=2.1,
        aIndex=12,
        sunspots=67,
        geomagneticStatus="Quiet",
        solarFlares="None",
        forecast24h="Stable conditions expected",
        timestamp=datetime.now().isoformat(),
        propagationConditions="Good",
        xrayFlux="B2.1",
        solarWind=385,
        density=7.2,
        protonFlux=0.4,
        electronFlux=2.1e3,
        dstIndex=-15,
        fallback=True,
    )


def default_ionosphere_snapshot() -> IonosphereSnapshot:
    """Built-in ionospheric data used when nothing has been cached yet."""
    return IonosphereSnapshot(
        tec=28.5,
        foF2=5.2,
        hmF2=295,
        foE=3.1,
        dLayerAbsorption=2.8,
        muf160m=2.0,
        luf160m=1.6,
        timestamp=datetime.now().isoformat(),
        layerConditions="Normal",
        criticalFrequency=1.85,
        virtualHeight=85,
        noiseFloor=-115,
        electronDensity=1.2e6,
        scintillationIndex=0.3,
        fadingDepth=12,
        fallback=True,
    )


class SnapshotStore:
    """Current, last known good and historical telemetry snapshots."""

    def __init__(self, state_store: StateStore, oracle: OracleClient,
                 notifications: Optional[NotificationCenter] = None,
                 max_history: int = MAX_TELEMETRY_HISTORY):
        self.state_store = state_store
        self.oracle = oracle
        self.notifications = notifications or NotificationCenter()
        self.max_history = max_history
        self.current_solar: Optional[SolarSnapshot] = None
        self.current_ionosphere: Optional[IonosphereSnapshot] = None
        self._lock = threading.Lock()

    def fetch_solar_snapshot(self, band: str = '160m',
                             cancel_event: Optional[threading.Event] = None) -> SolarSnapshot:
        """Get solar conditions from the oracle, falling back to cache or defaults.

        OracleCancelledError propagates without touching the cache.
        """
        try:
            snapshot = self.oracle.query_solar(band, cancel_event=cancel_event)
        except OracleCancelledError:
            raise
        except OracleError as e:
            logger.error(f"Error fetching solar data: {e}")
            snapshot = self._fallback(LAST_SOLAR_DATA, SolarSnapshot, default_solar_snapshot, 'solar')
        return self.record_solar_snapshot(snapshot)

    def fetch_ionosphere_snapshot(self, band: str = '160m',
                                  cancel_event: Optional[threading.Event] = None) -> IonosphereSnapshot:
        """Get ionospheric conditions from the oracle, falling back to cache or defaults.

        OracleCancelledError propagates without touching the cache.
        """
        try:
            snapshot = self.oracle.query_ionosphere(band, cancel_event=cancel_event)
        except OracleCancelledError:
            raise
        except OracleError as e:
            logger.error(f"Error fetching ionospheric data: {e}")
            snapshot = self._fallback(LAST_IONOSPHERE_DATA, IonosphereSnapshot,
                                      default_ionosphere_snapshot, 'ionospheric')
        return self.record_ionosphere_snapshot(snapshot)

    def record_solar_snapshot(self, snapshot: SolarSnapshot) -> SolarSnapshot:
        """Make a snapshot current; authoritative ones are persisted and logged."""
        with self._lock:
            self.current_solar = snapshot
        if not snapshot.fallback:
            self._persist(LAST_SOLAR_DATA, SOLAR_DATA_HISTORY, snapshot)
        return snapshot

    def record_ionosphere_snapshot(self, snapshot: IonosphereSnapshot) -> IonosphereSnapshot:
        """Make a snapshot current; authoritative ones are persisted and logged."""
        with self._lock:
            self.current_ionosphere = snapshot
        if not snapshot.fallback:
            self._persist(LAST_IONOSPHERE_DATA, IONOSPHERE_HISTORY, snapshot)
        return snapshot

    def get_last_solar(self) -> Optional[SolarSnapshot]:
        return self._load(LAST_SOLAR_DATA, SolarSnapshot)

    def get_last_ionosphere(self) -> Optional[IonosphereSnapshot]:
        return self._load(LAST_IONOSPHERE_DATA, IonosphereSnapshot)

    def get_solar_history(self) -> List[Dict]:
        return self.state_store.get(SOLAR_DATA_HISTORY, [])

    def get_ionosphere_history(self) -> List[Dict]:
        return self.state_store.get(IONOSPHERE_HISTORY, [])

    def _persist(self, last_key: str, history_key: str, snapshot: BaseModel):
        data = snapshot.model_dump(mode='json')
        self.state_store.set(last_key, data)
        self.state_store.append(history_key, data, max_entries=self.max_history)

    def _load(self, key: str, model: Type[SnapshotT]) -> Optional[SnapshotT]:
        data = self.state_store.get(key)
        if data is None:
            return None
        try:
            return model.model_validate(data)
        except SchemaValidationError as e:
            logger.warning(f"Ignoring unreadable cached snapshot {key}: {e}")
            return None

    def _fallback(self, key: str, model: Type[SnapshotT], default_factory, label: str) -> SnapshotT:
        cached = self._load(key, model)
        if cached is not None:
            self.notifications.warning(f"Using cached {label} data due to network issues")
            return cached.model_copy(update={'fallback': True})

        self.notifications.warning(f"Using default {label} data due to network issues")
        return default_factory()
