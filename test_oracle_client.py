"""
Tests for the analysis oracle client.
"""

import threading
from unittest.mock import Mock

import pytest
import requests

from data_sources.oracle_client import OracleClient, strip_code_fences
from exceptions import ForecastError, OracleCancelledError, OracleError
from models import AnalysisResult, SolarSnapshot


def make_client(*responses):
    session = Mock(spec=requests.Session)
    session.post.side_effect = list(responses)
    return OracleClient(api_url='https://oracle.test/v1/messages', api_key='secret',
                        model='test-model', timeout=5, session=session)


def test_strip_code_fences():
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('{"a": 1}') == '{"a": 1}'


def test_query_solar_decodes_answer(envelope, solar_payload):
    client = make_client(envelope(solar_payload))

    snapshot = client.query_solar('160m')

    assert isinstance(snapshot, SolarSnapshot)
    assert snapshot.sfi == 152
    assert snapshot.fallback is False


def test_request_shape(envelope, solar_payload):
    client = make_client(envelope(solar_payload))
    client.query_solar('80m')

    args, kwargs = client.session.post.call_args
    assert args[0] == 'https://oracle.test/v1/messages'
    assert kwargs['headers']['x-api-key'] == 'secret'
    assert kwargs['headers']['anthropic-version'] == '2023-06-01'
    assert kwargs['json']['model'] == 'test-model'
    assert kwargs['json']['max_tokens'] == 1000
    assert '80m' in kwargs['json']['messages'][0]['content']
    assert kwargs['timeout'] == 5


def test_fenced_answer_is_accepted(envelope, analysis_payload):
    import json
    client = make_client(envelope('```json\n' + json.dumps(analysis_payload) + '\n```'))

    result = client.query_analysis('160m', 'FN30', 'JO22', None, None)

    assert isinstance(result, AnalysisResult)
    assert result.distance == 5570


@pytest.mark.parametrize('sfi', [59, 301])
def test_solar_sfi_out_of_range_rejected(envelope, solar_payload, sfi):
    solar_payload['sfi'] = sfi
    client = make_client(envelope(solar_payload))

    with pytest.raises(OracleError, match='Invalid solar data structure'):
        client.query_solar()


@pytest.mark.parametrize('kp', [-0.1, 9.5])
def test_solar_kp_out_of_range_rejected(envelope, solar_payload, kp):
    solar_payload['kp'] = kp
    client = make_client(envelope(solar_payload))

    with pytest.raises(OracleError):
        client.query_solar()


def test_solar_numeric_string_rejected(envelope, solar_payload):
    solar_payload['sfi'] = '150'
    client = make_client(envelope(solar_payload))

    with pytest.raises(OracleError):
        client.query_solar()


def test_solar_missing_timestamp_rejected(envelope, solar_payload):
    del solar_payload['timestamp']
    client = make_client(envelope(solar_payload))

    with pytest.raises(OracleError):
        client.query_solar()


def test_analysis_missing_optional_fields_accepted(envelope, analysis_payload):
    for key in ('confidence', 'noiseLevel', 'expectedRST'):
        del analysis_payload[key]
    client = make_client(envelope(analysis_payload))

    result = client.query_analysis('160m', 'FN30', 'JO22', None, None)

    assert result.confidence is None


def test_analysis_missing_required_field_rejected(envelope, analysis_payload):
    del analysis_payload['hourlyForecast']
    client = make_client(envelope(analysis_payload))

    with pytest.raises(OracleError, match='Invalid analysis data structure'):
        client.query_analysis('160m', 'FN30', 'JO22', None, None)


def test_non_json_answer_rejected(envelope):
    client = make_client(envelope('Conditions look good tonight'))

    with pytest.raises(OracleError, match='not valid JSON'):
        client.query_ionosphere()


def test_non_object_answer_rejected(envelope):
    client = make_client(envelope('[1, 2, 3]'))

    with pytest.raises(OracleError, match='JSON object'):
        client.query_ionosphere()


def test_http_error_status():
    response = Mock(ok=False, status_code=529)
    client = make_client(response)

    with pytest.raises(OracleError, match='529'):
        client.query_solar()


def test_transport_error():
    client = make_client(requests.ConnectionError('connection refused'))

    with pytest.raises(OracleError, match='API request failed'):
        client.query_solar()


def test_malformed_envelope():
    response = Mock(ok=True, status_code=200)
    response.json.return_value = {'content': []}
    client = make_client(response)

    with pytest.raises(OracleError, match='Malformed API response'):
        client.query_solar()


def test_forecast_failure_is_forecast_error():
    client = make_client(Mock(ok=False, status_code=500))

    with pytest.raises(ForecastError):
        client.query_forecast('160m', None, None)


def test_forecast_decodes(envelope, forecast_payload, solar_snapshot, ionosphere_snapshot):
    client = make_client(envelope(forecast_payload))

    forecast = client.query_forecast('160m', solar_snapshot, ionosphere_snapshot)

    assert forecast.periods[0].quality == 'Good'
    prompt = client.session.post.call_args[1]['json']['messages'][0]['content']
    assert '"sfi": 152' in prompt


def test_cancelled_before_sending_skips_request():
    client = make_client()
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(OracleCancelledError):
        client.query_solar(cancel_event=cancel)

    client.session.post.assert_not_called()


def test_cancelled_while_in_flight(envelope, solar_payload):
    cancel = threading.Event()
    session = Mock(spec=requests.Session)

    def post(*args, **kwargs):
        cancel.set()
        return envelope(solar_payload)

    session.post.side_effect = post
    client = OracleClient(api_key='secret', session=session)

    with pytest.raises(OracleCancelledError):
        client.query_solar(cancel_event=cancel)


@pytest.mark.parametrize('query', ['query_solar', 'query_ionosphere'])
def test_answer_cannot_mark_itself_as_fallback(envelope, solar_payload, ionosphere_payload, query):
    payload = solar_payload if query == 'query_solar' else ionosphere_payload
    payload['fallback'] = True
    client = make_client(envelope(payload))

    snapshot = getattr(client, query)('160m')

    assert snapshot.fallback is False
