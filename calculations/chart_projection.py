"""
Chart projections for a propagation analysis.

Pure derivation of the four chart series from an AnalysisResult plus static
reference tables. Nothing here touches the network or persisted state, so a
projection can be memoized on (analysis, selected band).
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from models import (
    AnalysisResult,
    BandComparison,
    ChartProjection,
    HourlyChartPoint,
    ModeShare,
    QualityLevel,
    RadialMetric,
)
from .constants import (
    BAND_COMPARISON_TABLE,
    GROUND_WAVE_RANGE_KM,
    SKY_WAVE_MIN_KM,
    SCATTER_SHARE,
    DEFAULT_CONFIDENCE,
    SNR_PLACEHOLDER,
    STABILITY_PLACEHOLDER,
)


@dataclass(frozen=True)
class ChartTables:
    """Static reference data for the projections."""

    band_comparison: Sequence[dict] = BAND_COMPARISON_TABLE


DEFAULT_TABLES = ChartTables()


def quality_score(quality: str) -> int:
    """Excellent=4, Good=3, Fair=2, anything else 1."""
    level = QualityLevel.parse(quality)
    return level.score if level else QualityLevel.POOR.score


def build_hourly_series(result: AnalysisResult) -> list:
    return [
        HourlyChartPoint(**item.model_dump(), qualityScore=quality_score(item.quality))
        for item in result.hourlyForecast
    ]


def build_band_comparison(tables: ChartTables, band: Optional[str] = None) -> list:
    return [BandComparison(**row, selected=row['band'] == band) for row in tables.band_comparison]


def build_mode_distribution(result: AnalysisResult) -> list:
    return [
        ModeShare(name='Ground Wave', value=70 if result.distance < GROUND_WAVE_RANGE_KM else 20),
        ModeShare(name='Sky Wave', value=80 if result.distance > SKY_WAVE_MIN_KM else 30),
        ModeShare(name='Scatter', value=SCATTER_SHARE),
        ModeShare(name='Gray Line', value=25 if result.grayLineEnhancement else 5),
    ]


def build_signal_radial(result: AnalysisResult) -> list:
    confidence = result.confidence if result.confidence is not None else DEFAULT_CONFIDENCE
    return [
        RadialMetric(metric='Signal', value=confidence),
        RadialMetric(metric='SNR', value=SNR_PLACEHOLDER),
        RadialMetric(metric='Stability', value=STABILITY_PLACEHOLDER),
    ]


def build_chart_projection(result: AnalysisResult, band: Optional[str] = None,
                           tables: Optional[ChartTables] = None) -> ChartProjection:
    """Derive hourly, band-comparison, mode and radial series from an analysis."""
    tables = tables or DEFAULT_TABLES
    return ChartProjection(
        hourly=build_hourly_series(result),
        bands=build_band_comparison(tables, band),
        modes=build_mode_distribution(result),
        radial=build_signal_radial(result),
    )
