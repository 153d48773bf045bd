"""Pydantic models for telemetry, oracle answers and dashboard records.

Field names follow the camelCase keys the oracle answers with and the
persisted/exported documents use, so a model can be validated straight from a
decoded payload and dumped back with ``model_dump(mode='json')``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class QualityLevel(str, Enum):
    """Closed signal-quality scale, ordered Poor < Fair < Good < Excellent."""

    POOR = 'Poor'
    FAIR = 'Fair'
    GOOD = 'Good'
    EXCELLENT = 'Excellent'

    @property
    def score(self) -> int:
        return QUALITY_SCORES[self.value]

    @classmethod
    def parse(cls, label: Any) -> Optional['QualityLevel']:
        """Case-insensitive lookup; returns None for labels outside the scale."""
        text = str(label or '').strip().lower()
        for level in cls:
            if level.value.lower() == text:
                return level
        return None

    @classmethod
    def from_signal(cls, signal: float) -> 'QualityLevel':
        if signal > 60:
            return cls.EXCELLENT
        if signal > 40:
            return cls.GOOD
        if signal > 25:
            return cls.FAIR
        return cls.POOR

    def __lt__(self, other):
        if isinstance(other, QualityLevel):
            return self.score < other.score
        return NotImplemented

    def __le__(self, other):
        if isinstance(other, QualityLevel):
            return self.score <= other.score
        return NotImplemented

    def __gt__(self, other):
        if isinstance(other, QualityLevel):
            return self.score > other.score
        return NotImplemented

    def __ge__(self, other):
        if isinstance(other, QualityLevel):
            return self.score >= other.score
        return NotImplemented


QUALITY_SCORES = {'Excellent': 4, 'Good': 3, 'Fair': 2, 'Poor': 1}


class LocationType(str, Enum):
    GRID = 'grid'
    CITY = 'city'


class ValidatedLocation(BaseModel):
    """A location string that passed validation."""

    model_config = ConfigDict(frozen=True)

    value: str
    type: LocationType


class SolarSnapshot(BaseModel):
    """Solar and geomagnetic conditions."""

    sfi: float = Field(ge=60, le=300, strict=True)  # Solar Flux Index
    kp: float = Field(ge=0, le=9, strict=True)  # Planetary K-index
    aIndex: float
    sunspots: float
    geomagneticStatus: str
    solarFlares: str
    forecast24h: str
    timestamp: str = Field(min_length=1)
    propagationConditions: str
    xrayFlux: str
    solarWind: float  # km/s
    density: float  # p/cm3
    protonFlux: float
    electronFlux: float
    dstIndex: float  # nT
    fallback: bool = False


class IonosphereSnapshot(BaseModel):
    """Ionospheric layer conditions. No range checks are applied."""

    tec: float  # TECU
    foF2: float  # MHz
    hmF2: float  # km
    foE: float  # MHz
    dLayerAbsorption: float  # dB
    muf160m: float
    luf160m: float
    timestamp: str
    layerConditions: str
    criticalFrequency: float
    virtualHeight: float
    noiseFloor: float  # dBm
    electronDensity: float
    scintillationIndex: float
    fadingDepth: float
    fallback: bool = False


class HourlyForecast(BaseModel):
    hour: Optional[str] = None
    quality: str
    snr: float
    probability: float
    mode: str


class AnalysisResult(BaseModel):
    """Point-to-point propagation analysis as answered by the oracle."""

    distance: float  # km
    azimuth: float
    reverseAzimuth: float
    bestTimes: List[str]
    signalQuality: str
    propagationMode: str
    powerRecommendation: str
    antennaRecommendation: str
    limitingFactors: List[str]
    hourlyForecast: List[HourlyForecast]
    overallRecommendation: str
    confidence: Optional[float] = None
    noiseLevel: Optional[float] = None
    expectedRST: Optional[str] = None
    pathLoss: float
    skipDistance: float
    takeoffAngle: float
    multiHop: bool
    grayLineEnhancement: bool
    seasonalFactor: str


class ForecastPeriod(BaseModel):
    timeRange: str
    conditions: str
    quality: str
    recommendation: str
    probability: float
    keyFactors: List[str]
    grayLineWindows: List[str]


class ForecastResult(BaseModel):
    """Extended (48 hour) propagation forecast."""

    periods: List[ForecastPeriod]
    trends: str
    alerts: List[str]
    solarActivity: str
    geomagnetic: str
    confidence: float
    specialEvents: List[str]


class HistoricalSample(BaseModel):
    """One synthetic hour of the trend series."""

    time: str
    fullTime: str
    signal: int = Field(ge=10, le=90)
    muf: float = Field(ge=1.5, le=3.0)
    absorption: float = Field(ge=1, le=6)
    kp: float = Field(ge=0, le=9)
    sfi: int = Field(ge=60, le=300)
    quality: QualityLevel
    snr: int = Field(ge=0)


class AnalysisRecord(BaseModel):
    """Entry of the bounded analysis history."""

    id: str
    timestamp: str
    band: str
    fromLocation: str
    toLocation: str
    analysis: AnalysisResult


class FeedbackRecord(BaseModel):
    analysisId: Optional[str] = None
    isCorrect: bool
    timestamp: str
    analysisSnapshot: Optional[Dict[str, Any]] = None
    conditionsSnapshot: Optional[Dict[str, Any]] = None


class Preset(BaseModel):
    id: str
    name: str
    fromLocation: str
    toLocation: str
    band: str
    timestamp: str


class HourlyChartPoint(HourlyForecast):
    qualityScore: int


class BandComparison(BaseModel):
    band: str
    day: int
    night: int
    avg: int
    noise: str
    selected: bool = False


class ModeShare(BaseModel):
    name: str
    value: int


class RadialMetric(BaseModel):
    metric: str
    value: float


class ChartProjection(BaseModel):
    """Chart-ready series derived from one analysis."""

    hourly: List[HourlyChartPoint]
    bands: List[BandComparison]
    modes: List[ModeShare]
    radial: List[RadialMetric]
