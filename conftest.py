"""
Shared pytest fixtures for the HF Propagation Dashboard tests.
"""

import copy
import json
from unittest.mock import Mock

import pytest

from config import TestingConfig
from data_sources.oracle_client import OracleClient
from database import StateStore
from models import AnalysisResult, ForecastResult, IonosphereSnapshot, SolarSnapshot
from utils.background_tasks import TaskManager
from utils.notifications import NotificationCenter

SOLAR_PAYLOAD = {
    'sfi': 152,
    'kp': 2.3,
    'aIndex': 9,
    'sunspots': 74,
    'geomagneticStatus': 'Quiet',
    'solarFlares': 'None',
    'forecast24h': 'Quiet to unsettled',
    'timestamp': '2026-10-17T12:00:00Z',
    'propagationConditions': 'Good',
    'xrayFlux': 'B3.2',
    'solarWind': 410,
    'density': 5.1,
    'protonFlux': 0.3,
    'electronFlux': 1800,
    'dstIndex': -8,
}

IONOSPHERE_PAYLOAD = {
    'tec': 24.1,
    'foF2': 5.8,
    'hmF2': 280,
    'foE': 2.9,
    'dLayerAbsorption': 3.4,
    'muf160m': 2.1,
    'luf160m': 1.7,
    'timestamp': '2026-10-17T12:00:00Z',
    'layerConditions': 'Normal',
    'criticalFrequency': 1.9,
    'virtualHeight': 90,
    'noiseFloor': -112,
    'electronDensity': 1.1e6,
    'scintillationIndex': 0.2,
    'fadingDepth': 10,
}

ANALYSIS_PAYLOAD = {
    'distance': 5570,
    'azimuth': 51,
    'reverseAzimuth': 288,
    'bestTimes': ['00:00-04:00 UTC', '22:00-24:00 UTC'],
    'signalQuality': 'Good',
    'propagationMode': 'Sky Wave',
    'powerRecommendation': '500W or more',
    'antennaRecommendation': 'Inverted L with radials',
    'limitingFactors': ['D-layer absorption', 'Atmospheric noise'],
    'hourlyForecast': [
        {'hour': '00:00', 'quality': 'Excellent', 'snr': 18, 'probability': 85, 'mode': 'Sky Wave'},
        {'hour': '06:00', 'quality': 'Good', 'snr': 12, 'probability': 60, 'mode': 'Sky Wave'},
        {'hour': '12:00', 'quality': 'Poor', 'snr': 2, 'probability': 5, 'mode': 'None'},
        {'hour': '18:00', 'quality': 'fair', 'snr': 8, 'probability': 35, 'mode': 'Sky Wave'},
    ],
    'overallRecommendation': 'Try after local sunset',
    'confidence': 82,
    'noiseLevel': -105,
    'expectedRST': '559',
    'pathLoss': 138,
    'skipDistance': 0,
    'takeoffAngle': 18,
    'multiHop': True,
    'grayLineEnhancement': True,
    'seasonalFactor': 'Autumn improving',
}

FORECAST_PAYLOAD = {
    'periods': [
        {
            'timeRange': 'Tonight 19:00-06:00',
            'conditions': 'Low absorption, quiet geomagnetic field',
            'quality': 'Good',
            'recommendation': 'Work DX after sunset',
            'probability': 70,
            'keyFactors': ['Low Kp'],
            'grayLineWindows': ['06:45 UTC'],
        }
    ],
    'trends': 'Stable',
    'alerts': [],
    'solarActivity': 'Low',
    'geomagnetic': 'Quiet',
    'confidence': 70,
    'specialEvents': ['Orionids'],
}


@pytest.fixture
def solar_payload():
    return copy.deepcopy(SOLAR_PAYLOAD)


@pytest.fixture
def ionosphere_payload():
    return copy.deepcopy(IONOSPHERE_PAYLOAD)


@pytest.fixture
def analysis_payload():
    return copy.deepcopy(ANALYSIS_PAYLOAD)


@pytest.fixture
def forecast_payload():
    return copy.deepcopy(FORECAST_PAYLOAD)


@pytest.fixture
def solar_snapshot():
    return SolarSnapshot.model_validate(SOLAR_PAYLOAD)


@pytest.fixture
def ionosphere_snapshot():
    return IonosphereSnapshot.model_validate(IONOSPHERE_PAYLOAD)


@pytest.fixture
def analysis_result():
    return AnalysisResult.model_validate(ANALYSIS_PAYLOAD)


@pytest.fixture
def forecast_result():
    return ForecastResult.model_validate(FORECAST_PAYLOAD)


@pytest.fixture
def state_store():
    store = StateStore(':memory:')
    yield store
    store.close()


@pytest.fixture
def notifications():
    return NotificationCenter()


@pytest.fixture
def fake_oracle(solar_snapshot, ionosphere_snapshot, analysis_result, forecast_result):
    """Oracle double answering every query successfully."""
    oracle = Mock(spec=OracleClient)
    oracle.query_solar.return_value = solar_snapshot
    oracle.query_ionosphere.return_value = ionosphere_snapshot
    oracle.query_analysis.return_value = analysis_result
    oracle.query_forecast.return_value = forecast_result
    return oracle


@pytest.fixture
def analyzer(state_store, fake_oracle, notifications):
    """Dashboard session wired to in-memory state and the oracle double."""
    from hf_propagation import HFPropagationAnalyzer

    session = HFPropagationAnalyzer(
        config=TestingConfig,
        state_store=state_store,
        oracle=fake_oracle,
        notifications=notifications,
        task_manager=TaskManager(tick_seconds=0.05),
    )
    yield session
    if not session.disposed:
        session.dispose()


def make_envelope(answer) -> Mock:
    """HTTP response double carrying ``answer`` as the oracle's text."""
    text = answer if isinstance(answer, str) else json.dumps(answer)
    response = Mock()
    response.ok = True
    response.status_code = 200
    response.json.return_value = {'content': [{'type': 'text', 'text': text}]}
    return response


@pytest.fixture
def envelope():
    return make_envelope
