"""
Analysis orchestrator for point-to-point propagation analyses.

Runs one analysis at a time through
IDLE -> VALIDATING -> ANALYZING_PRIMARY -> ANALYZING_FORECAST -> IDLE.
The primary analysis is a hard dependency: its failure aborts the run and
leaves no partial result. The forecast is best effort: its failure is logged
and the forecast is left empty.
"""

import threading
import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional
import logging

from pydantic import ValidationError as SchemaValidationError

from calculations.constants import MAX_ANALYSIS_HISTORY
from data_sources.oracle_client import OracleClient
from database import StateStore, ANALYSIS_HISTORY
from exceptions import AnalysisInProgressError, OracleError, ValidationError
from models import (
    AnalysisRecord,
    AnalysisResult,
    ForecastResult,
    IonosphereSnapshot,
    SolarSnapshot,
)
from utils.notifications import NotificationCenter
from validation import validate_location

logger = logging.getLogger(__name__)


class AnalysisState(str, Enum):
    IDLE = 'idle'
    VALIDATING = 'validating'
    ANALYZING_PRIMARY = 'analyzing_primary'
    ANALYZING_FORECAST = 'analyzing_forecast'


@dataclass
class AnalysisOutcome:
    """Result of one successful run."""

    record: AnalysisRecord
    forecast: Optional[ForecastResult] = None

    @property
    def analysis(self) -> AnalysisResult:
        return self.record.analysis


class AnalysisOrchestrator:
    """Sequences location validation, primary analysis and forecast."""

    def __init__(self, oracle: OracleClient, state_store: StateStore,
                 notifications: Optional[NotificationCenter] = None,
                 max_history: int = MAX_ANALYSIS_HISTORY):
        self.oracle = oracle
        self.state_store = state_store
        self.notifications = notifications or NotificationCenter()
        self.max_history = max_history
        self.state = AnalysisState.IDLE
        self.last_error: Optional[str] = None
        self._run_lock = threading.Lock()

    @property
    def loading(self) -> bool:
        return self.state != AnalysisState.IDLE

    def run(self, from_location: str, to_location: str, band: str,
            solar: Optional[SolarSnapshot], ionosphere: Optional[IonosphereSnapshot],
            cancel_event: Optional[threading.Event] = None) -> AnalysisOutcome:
        """
        Run a full analysis for one path.

        Raises:
            AnalysisInProgressError: Another analysis is running
            ValidationError: A location is malformed; no request was made
            OracleError: The primary analysis failed; history is unchanged
        """
        if not self._run_lock.acquire(blocking=False):
            raise AnalysisInProgressError("An analysis is already in progress")

        try:
            self.last_error = None

            self.state = AnalysisState.VALIDATING
            try:
                origin = validate_location(from_location)
                destination = validate_location(to_location)
            except ValidationError as e:
                self.last_error = str(e)
                self.notifications.error(str(e))
                raise

            self.state = AnalysisState.ANALYZING_PRIMARY
            try:
                analysis = self.oracle.query_analysis(
                    band, origin.value, destination.value, solar, ionosphere,
                    cancel_event=cancel_event,
                )
            except OracleError as e:
                logger.error(f"Analysis error: {e}")
                self.last_error = str(e)
                self.notifications.error('Analysis failed. Please check your inputs and try again.')
                raise

            record = AnalysisRecord(
                id=f"analysis_{datetime.now().strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:8]}",
                timestamp=datetime.now().isoformat(),
                band=band,
                fromLocation=origin.value,
                toLocation=destination.value,
                analysis=analysis,
            )
            self.state_store.append(ANALYSIS_HISTORY, record.model_dump(mode='json'),
                                    max_entries=self.max_history)
            logger.info(f"Recorded {record.id}: {origin.value} -> {destination.value} on {band}")

            self.state = AnalysisState.ANALYZING_FORECAST
            forecast = None
            try:
                forecast = self.oracle.query_forecast(band, solar, ionosphere, cancel_event=cancel_event)
            except OracleError as e:
                logger.error(f"Error generating forecast: {e}")

            self.notifications.success('Analysis completed successfully!')
            return AnalysisOutcome(record=record, forecast=forecast)

        finally:
            self.state = AnalysisState.IDLE
            self._run_lock.release()

    def get_history(self) -> List[AnalysisRecord]:
        """Stored analyses, oldest first."""
        records = []
        for entry in self.state_store.get(ANALYSIS_HISTORY, []):
            try:
                records.append(AnalysisRecord.model_validate(entry))
            except SchemaValidationError as e:
                logger.warning(f"Skipping unreadable analysis history entry: {e}")
        return records

    def get_record(self, analysis_id: str) -> Optional[AnalysisRecord]:
        for record in self.get_history():
            if record.id == analysis_id:
                return record
        return None
