"""
Tests for the telemetry snapshot cache and its fallbacks.
"""

import threading
from unittest.mock import Mock

import pytest
import requests

from data_sources.oracle_client import OracleClient
from data_sources.snapshot_store import SnapshotStore, default_ionosphere_snapshot, default_solar_snapshot
from database import LAST_SOLAR_DATA, SOLAR_DATA_HISTORY, IONOSPHERE_HISTORY
from exceptions import OracleCancelledError, OracleError


@pytest.fixture
def snapshots(state_store, fake_oracle, notifications):
    return SnapshotStore(state_store, fake_oracle, notifications)


def test_authoritative_snapshot_is_persisted(snapshots, state_store, solar_snapshot):
    result = snapshots.fetch_solar_snapshot('160m')

    assert result == solar_snapshot
    assert snapshots.current_solar == solar_snapshot
    assert snapshots.get_last_solar() == solar_snapshot
    assert len(state_store.get(SOLAR_DATA_HISTORY)) == 1


def test_cached_snapshot_served_on_failure(snapshots, fake_oracle, state_store, notifications):
    good = snapshots.fetch_solar_snapshot()
    fake_oracle.query_solar.side_effect = OracleError('API request failed: 500')

    result = snapshots.fetch_solar_snapshot()

    assert result.fallback is True
    assert result.sfi == good.sfi
    assert result.timestamp == good.timestamp
    # Fallbacks never overwrite the last known good value
    assert snapshots.get_last_solar().fallback is False
    assert len(state_store.get(SOLAR_DATA_HISTORY)) == 1
    assert notifications.current['type'] == 'warning'
    assert 'cached solar data' in notifications.current['message']


def test_defaults_served_without_cache(snapshots, fake_oracle, state_store, notifications):
    fake_oracle.query_solar.side_effect = OracleError('timeout')

    result = snapshots.fetch_solar_snapshot()

    assert result.fallback is True
    assert result.sfi == 145
    assert result.kp == 2.1
    assert result.forecast24h == 'Stable conditions expected'
    assert state_store.get(LAST_SOLAR_DATA) is None
    assert 'default solar data' in notifications.current['message']


def test_ionosphere_fallback(snapshots, fake_oracle, state_store):
    fake_oracle.query_ionosphere.side_effect = OracleError('bad answer')

    result = snapshots.fetch_ionosphere_snapshot()

    assert result.fallback is True
    assert result.foF2 == 5.2
    assert state_store.get(IONOSPHERE_HISTORY) is None


def test_cancellation_propagates_without_touching_cache(snapshots, fake_oracle, state_store):
    fake_oracle.query_solar.side_effect = OracleCancelledError('cancelled')

    with pytest.raises(OracleCancelledError):
        snapshots.fetch_solar_snapshot(cancel_event=threading.Event())

    assert snapshots.current_solar is None
    assert state_store.get(LAST_SOLAR_DATA) is None


def test_history_is_bounded(state_store, fake_oracle):
    snapshots = SnapshotStore(state_store, fake_oracle, max_history=3)

    for _ in range(5):
        snapshots.fetch_ionosphere_snapshot()

    assert len(snapshots.get_ionosphere_history()) == 3


def test_unreadable_cache_is_ignored(snapshots, fake_oracle, state_store):
    state_store.set(LAST_SOLAR_DATA, {'sfi': 'lots'})
    fake_oracle.query_solar.side_effect = OracleError('down')

    result = snapshots.fetch_solar_snapshot()

    assert result.sfi == 145


def test_defaults_are_marked_as_fallback():
    assert default_solar_snapshot().fallback is True
    assert default_ionosphere_snapshot().fallback is True


def test_live_answer_flagged_fallback_is_still_cached(state_store, envelope, solar_payload, notifications):
    solar_payload['fallback'] = True
    session = Mock(spec=requests.Session)
    session.post.return_value = envelope(solar_payload)
    snapshots = SnapshotStore(state_store, OracleClient(api_key='secret', session=session), notifications)

    result = snapshots.fetch_solar_snapshot()

    assert result.fallback is False
    assert snapshots.get_last_solar() == result
    assert len(snapshots.get_solar_history()) == 1
    assert notifications.current is None


def test_solar_history_keeps_newest_hundred(state_store, fake_oracle, solar_snapshot):
    snapshots = SnapshotStore(state_store, fake_oracle)

    for i in range(105):
        snapshots.record_solar_snapshot(solar_snapshot.model_copy(update={'timestamp': f't{i:03d}'}))

    history = snapshots.get_solar_history()
    assert len(history) == 100
    assert [entry['timestamp'] for entry in history] == [f't{i:03d}' for i in range(5, 105)]
    assert snapshots.get_last_solar().timestamp == 't104'


def test_default_snapshots_match_documented_values():
    solar = default_solar_snapshot().model_dump(exclude={'timestamp'})
    ionosphere = default_ionosphere_snapshot().model_dump(exclude={'timestamp'})

    assert solar == {
        'sfi': 145, 'kp': 2.1, 'aIndex': 12, 'sunspots': 67,
        'geomagneticStatus': 'Quiet', 'solarFlares': 'None',
        'forecast24h': 'Stable conditions expected', 'propagationConditions': 'Good',
        'xrayFlux': 'B2.1', 'solarWind': 385, 'density': 7.2, 'protonFlux': 0.4,
        'electronFlux': 2100, 'dstIndex': -15, 'fallback': True,
    }
    assert ionosphere == {
        'tec': 28.5, 'foF2': 5.2, 'hmF2': 295, 'foE': 3.1, 'dLayerAbsorption': 2.8,
        'muf160m': 2.0, 'luf160m': 1.6, 'layerConditions': 'Normal',
        'criticalFrequency': 1.85, 'virtualHeight': 85, 'noiseFloor': -115,
        'electronDensity': 1.2e6, 'scintillationIndex': 0.3, 'fadingDepth': 12,
        'fallback': True,
    }
    assert default_solar_snapshot().timestamp
    assert default_ionosphere_snapshot().timestamp


def test_last_known_good_ionosphere(snapshots, fake_oracle, ionosphere_snapshot):
    assert snapshots.get_last_ionosphere() is None

    snapshots.fetch_ionosphere_snapshot()
    fake_oracle.query_ionosphere.side_effect = OracleError('down')
    snapshots.fetch_ionosphere_snapshot()

    assert snapshots.get_last_ionosphere() == ionosphere_snapshot
    assert len(snapshots.get_ionosphere_history()) == 1
