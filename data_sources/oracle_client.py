"""
Analysis oracle client for HF propagation data.

The oracle is a hosted messages API that answers natural-language requests
with free-form text. Every request asks for a bare JSON object; the reply is
stripped of markdown code fences, parsed, and decoded into the pydantic model
for its request kind:
- Solar conditions (range checked)
- Ionospheric conditions
- Point-to-point path analysis
- Extended forecast
"""

import json
import re
import threading
from typing import Any, Dict, Optional, Type, TypeVar

import requests
from pydantic import BaseModel, ValidationError as SchemaValidationError
import logging

from config import Config
from exceptions import ForecastError, OracleCancelledError, OracleError
from models import AnalysisResult, ForecastResult, IonosphereSnapshot, SolarSnapshot

logger = logging.getLogger(__name__)

ModelT = TypeVar('ModelT', bound=BaseModel)

CODE_FENCE_PATTERN = re.compile(r'```json|```')

SOLAR_PROMPT = """Provide current REALISTIC solar data for HF propagation analysis on {band} band:

IMPORTANT: Use typical real data values:
- SFI: between 120-180 (normal conditions)
- Kp: between 0-4 (quiet to moderately active)
- A-index: between 5-30
- Sunspots: between 20-100
- Geomagnetic status consistent with Kp values

Respond ONLY with valid JSON:
{{
  "sfi": number,
  "kp": number,
  "aIndex": number,
  "sunspots": number,
  "geomagneticStatus": "string",
  "solarFlares": "string",
  "forecast24h": "string",
  "timestamp": "ISO date string",
  "propagationConditions": "string",
  "xrayFlux": "string",
  "solarWind": number,
  "density": number,
  "protonFlux": number,
  "electronFlux": number,
  "dstIndex": number
}}"""

IONOSPHERE_PROMPT = """Provide REALISTIC ionospheric data for {band} propagation analysis:

IMPORTANT: Use typical real values:
- TEC: between 15-40 TECU (normal conditions)
- foF2: between 3-8 MHz (F2 critical frequency)
- hmF2: between 250-350 km (F2 height)
- foE: between 2-4 MHz (E critical frequency)
- D-layer absorption: between 1-6 dB for 160m
- MUF 160m: between 1.6-2.5 MHz
- LUF 160m: between 1.6-1.8 MHz

Respond ONLY with valid JSON:
{{
  "tec": number,
  "foF2": number,
  "hmF2": number,
  "foE": number,
  "dLayerAbsorption": number,
  "muf160m": number,
  "luf160m": number,
  "timestamp": "ISO date string",
  "layerConditions": "string",
  "criticalFrequency": number,
  "virtualHeight": number,
  "noiseFloor": number,
  "electronDensity": number,
  "scintillationIndex": number,
  "fadingDepth": number
}}"""

ANALYSIS_PROMPT = """Analyze HF propagation on {band} between "{from_location}" and "{to_location}" using PRECISE TECHNICAL DATA:

Solar Data: {solar}
Ionospheric Data: {ionosphere}

IMPORTANT: Calculate REALISTICALLY considering:
- Day/night behaviour of the {band} band
- D-layer absorption during daytime
- Ground wave up to ~500km, sky wave for longer distances
- Atmospheric noise on the low bands
- Seasonality (winter better in northern hemisphere)
- Gray line enhancement periods

Respond ONLY with valid JSON:
{{
  "distance": number,
  "azimuth": number,
  "reverseAzimuth": number,
  "bestTimes": ["UTC windows"],
  "signalQuality": "string based on conditions",
  "propagationMode": "Ground Wave" or "Sky Wave" or "Hybrid",
  "powerRecommendation": "specific string",
  "antennaRecommendation": "specific string for {band}",
  "limitingFactors": ["array of real factors"],
  "hourlyForecast": [
    {{"hour": "00:00", "quality": "Excellent/Good/Fair/Poor", "snr": number, "probability": number, "mode": "string"}}
  ],
  "overallRecommendation": "detailed string",
  "confidence": number,
  "noiseLevel": number,
  "expectedRST": "string",
  "pathLoss": number,
  "skipDistance": number,
  "takeoffAngle": number,
  "multiHop": boolean,
  "grayLineEnhancement": boolean,
  "seasonalFactor": "string"
}}"""

FORECAST_PROMPT = """Generate SCIENTIFIC propagation forecast for {band} for next 48 hours:

Current data:
Solar: {solar}
Ionosphere: {ionosphere}

CONSIDER REAL FACTORS:
- Current solar cycle phase
- Seasonality and geographic factors
- Geomagnetic patterns
- D-layer absorption cycles
- Atmospheric noise variations
- Gray line periods

Respond ONLY with valid JSON:
{{
  "periods": [
    {{
      "timeRange": "Tonight 19:00-06:00",
      "conditions": "technical description",
      "quality": "Excellent/Good/Fair/Poor",
      "recommendation": "specific actions",
      "probability": number,
      "keyFactors": ["array of factors"],
      "grayLineWindows": ["array of UTC times"]
    }}
  ],
  "trends": "trend analysis based on data",
  "alerts": ["specific alerts based on conditions"],
  "solarActivity": "solar activity forecast",
  "geomagnetic": "geomagnetic forecast",
  "confidence": number,
  "specialEvents": ["meteor showers", "contests", "etc"]
}}"""


def strip_code_fences(text: str) -> str:
    """Remove markdown code-fence markers around a JSON answer."""
    return CODE_FENCE_PATTERN.sub('', text).strip()


def _to_json(snapshot: Optional[BaseModel]) -> str:
    if snapshot is None:
        return 'null'
    return json.dumps(snapshot.model_dump(mode='json'))


class OracleClient:
    """Client for the external analysis oracle. No retries; callers decide."""

    def __init__(self, api_url: Optional[str] = None, api_key: Optional[str] = None,
                 model: Optional[str] = None, timeout: Optional[int] = None,
                 api_version: Optional[str] = None, session: Optional[requests.Session] = None):
        self.api_url = api_url or Config.ORACLE_API_URL
        self.api_key = api_key if api_key is not None else Config.ORACLE_API_KEY
        self.model = model or Config.ORACLE_MODEL
        self.timeout = timeout or Config.ORACLE_TIMEOUT
        self.api_version = api_version or Config.ORACLE_API_VERSION
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config: Type[Config]) -> 'OracleClient':
        return cls(
            api_url=config.ORACLE_API_URL,
            api_key=config.ORACLE_API_KEY,
            model=config.ORACLE_MODEL,
            timeout=config.ORACLE_TIMEOUT,
            api_version=config.ORACLE_API_VERSION,
        )

    def query_solar(self, band: str = '160m',
                    cancel_event: Optional[threading.Event] = None) -> SolarSnapshot:
        """Ask for current solar conditions; SFI and Kp are range checked."""
        prompt = SOLAR_PROMPT.format(band=band)
        payload = self._request(prompt, max_tokens=1000, cancel_event=cancel_event)
        return self._decode(payload, SolarSnapshot, 'solar')

    def query_ionosphere(self, band: str = '160m',
                         cancel_event: Optional[threading.Event] = None) -> IonosphereSnapshot:
        """Ask for current ionospheric conditions."""
        prompt = IONOSPHERE_PROMPT.format(band=band)
        payload = self._request(prompt, max_tokens=1000, cancel_event=cancel_event)
        return self._decode(payload, IonosphereSnapshot, 'ionosphere')

    def query_analysis(self, band: str, from_location: str, to_location: str,
                       solar: Optional[SolarSnapshot], ionosphere: Optional[IonosphereSnapshot],
                       cancel_event: Optional[threading.Event] = None) -> AnalysisResult:
        """Ask for a point-to-point propagation analysis."""
        prompt = ANALYSIS_PROMPT.format(
            band=band,
            from_location=from_location,
            to_location=to_location,
            solar=_to_json(solar),
            ionosphere=_to_json(ionosphere),
        )
        payload = self._request(prompt, max_tokens=2500, cancel_event=cancel_event)
        return self._decode(payload, AnalysisResult, 'analysis')

    def query_forecast(self, band: str, solar: Optional[SolarSnapshot],
                       ionosphere: Optional[IonosphereSnapshot],
                       cancel_event: Optional[threading.Event] = None) -> ForecastResult:
        """Ask for a 48 hour forecast. Failures surface as ForecastError."""
        prompt = FORECAST_PROMPT.format(
            band=band,
            solar=_to_json(solar),
            ionosphere=_to_json(ionosphere),
        )
        try:
            payload = self._request(prompt, max_tokens=1500, cancel_event=cancel_event)
            return self._decode(payload, ForecastResult, 'forecast')
        except ForecastError:
            raise
        except OracleError as e:
            raise ForecastError(str(e)) from e

    def _request(self, prompt: str, max_tokens: int,
                 cancel_event: Optional[threading.Event] = None) -> Dict[str, Any]:
        """Send one request and return the decoded JSON object of the answer."""
        if cancel_event is not None and cancel_event.is_set():
            raise OracleCancelledError("Request cancelled before sending")

        headers = {
            'Content-Type': 'application/json',
            'anthropic-version': self.api_version,
        }
        if self.api_key:
            headers['x-api-key'] = self.api_key

        body = {
            'model': self.model,
            'max_tokens': max_tokens,
            'messages': [{'role': 'user', 'content': prompt}],
        }

        try:
            response = self.session.post(self.api_url, json=body, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise OracleError(f"API request failed: {e}") from e

        if cancel_event is not None and cancel_event.is_set():
            raise OracleCancelledError("Request cancelled while in flight")

        if not response.ok:
            raise OracleError(f"API request failed: {response.status_code}")

        try:
            envelope = response.json()
            text = envelope['content'][0]['text']
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise OracleError(f"Malformed API response: {e}") from e

        try:
            payload = json.loads(strip_code_fences(str(text)))
        except ValueError as e:
            raise OracleError(f"Answer is not valid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise OracleError(f"Answer must be a JSON object, got {type(payload).__name__}")

        return payload

    def _decode(self, payload: Dict[str, Any], model: Type[ModelT], kind: str) -> ModelT:
        # Live answers are always authoritative; only the snapshot store marks fallbacks
        if 'fallback' in model.model_fields:
            payload = {**payload, 'fallback': False}
        try:
            return model.model_validate(payload)
        except SchemaValidationError as e:
            logger.warning(f"{kind.capitalize()} data validation errors: {e.errors()}")
            raise OracleError(f"Invalid {kind} data structure") from e
