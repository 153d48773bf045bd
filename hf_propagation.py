"""
HF propagation dashboard session.

Owns one dashboard session: current telemetry, the historical trend series,
the latest analysis with its forecast and charts, auto-refresh scheduling,
feedback, presets and export. Everything it depends on is injected or built
from the configuration, and ``init``/``dispose`` bracket its lifetime.
"""

import atexit
import json
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Type
import logging

from analysis_orchestrator import AnalysisOrchestrator, AnalysisOutcome
from calculations import (
    build_chart_projection,
    classify_geomagnetic_status,
    classify_kp,
    generate_historical_series,
)
from calculations.constants import EXPORT_FEEDBACK_LIMIT, HISTORY_HOURS, SUPPORTED_BANDS
from config import Config
from data_sources import OracleClient, SnapshotStore
from database import StateStore
from exceptions import ExportError, OracleCancelledError, ValidationError
from feedback_store import FeedbackStore
from models import AnalysisRecord, ChartProjection, FeedbackRecord, ForecastResult, HistoricalSample, Preset
from utils.background_tasks import TaskManager
from utils.notifications import NotificationCenter

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.0"


class HFPropagationAnalyzer:
    """Dashboard session facade."""

    REFRESH_TASK = 'telemetry_refresh'

    def __init__(self, config: Type[Config] = Config,
                 state_store: Optional[StateStore] = None,
                 oracle: Optional[OracleClient] = None,
                 notifications: Optional[NotificationCenter] = None,
                 task_manager: Optional[TaskManager] = None):
        self.config = config
        self.state_store = state_store or StateStore(config.DATABASE_PATH)
        self.oracle = oracle or OracleClient.from_config(config)
        self.notifications = notifications or NotificationCenter()
        self.task_manager = task_manager or TaskManager()

        self.snapshots = SnapshotStore(self.state_store, self.oracle, self.notifications)
        self.orchestrator = AnalysisOrchestrator(self.oracle, self.state_store, self.notifications)
        self.feedback = FeedbackStore(self.state_store)

        self.timezone = config.TIMEZONE
        self.selected_band = config.DEFAULT_BAND
        self.auto_refresh = config.AUTO_REFRESH
        self.from_location = ''
        self.to_location = ''

        self.analysis_record: Optional[AnalysisRecord] = None
        self.forecast: Optional[ForecastResult] = None
        self.chart_data: Optional[ChartProjection] = None
        self.historical: List[HistoricalSample] = []
        self.presets: List[Preset] = []
        self.last_update: Optional[datetime] = None

        self._cancel_event = threading.Event()
        self._refresh_lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=2)

    # Lifecycle

    def init(self, initial_refresh: bool = True):
        """Load persisted presets, fetch initial data and start auto-refresh."""
        self.presets = self.feedback.load_presets()

        if initial_refresh:
            self.refresh(source='startup')
        else:
            self.update_historical_data()

        if self.auto_refresh:
            self._schedule_refresh()
        self.task_manager.start_all()
        logger.info("Dashboard session initialized")

    def dispose(self):
        """Cancel the refresh timer and in-flight oracle requests, release resources."""
        if self.disposed:
            return
        self._cancel_event.set()
        self.task_manager.stop_all()
        self._executor.shutdown(wait=False)
        self.state_store.close()
        atexit.unregister(self.dispose)
        logger.info("Dashboard session disposed")

    @property
    def disposed(self) -> bool:
        return self._cancel_event.is_set()

    # Telemetry

    def refresh(self, source: str = 'manual') -> bool:
        """
        Refresh solar and ionospheric data concurrently and regenerate the
        historical series.

        A refresh requested while another one is running is dropped.

        Returns:
            True if this call performed the refresh
        """
        if self.disposed:
            return False

        if not self._refresh_lock.acquire(blocking=False):
            logger.info(f"Skipping {source} refresh: another refresh is in progress")
            return False

        try:
            if self.disposed:
                return False
            band = self.selected_band
            try:
                solar_future = self._executor.submit(self.snapshots.fetch_solar_snapshot, band, self._cancel_event)
                ionosphere_future = self._executor.submit(self.snapshots.fetch_ionosphere_snapshot, band,
                                                          self._cancel_event)
            except RuntimeError:
                # Executor already shut down by dispose
                logger.info(f"Skipping {source} refresh: session disposed")
                return False

            solar_future.result()
            ionosphere_future.result()

            self.update_historical_data()
            self.last_update = datetime.now()
            logger.info(f"Telemetry refreshed ({source})")
            return True

        except OracleCancelledError:
            logger.info(f"{source.capitalize()} refresh cancelled")
            return False

        finally:
            self._refresh_lock.release()

    def update_historical_data(self, seed: Optional[int] = None) -> List[HistoricalSample]:
        self.historical = generate_historical_series(seed=seed, tz=self.timezone)
        return self.historical

    def set_auto_refresh(self, enabled: bool) -> bool:
        """Turn the periodic refresh on or off."""
        self.auto_refresh = bool(enabled)
        if self.auto_refresh:
            if not self.task_manager.has_task(self.REFRESH_TASK):
                self._schedule_refresh()
        else:
            self.task_manager.remove_task(self.REFRESH_TASK)
        return self.auto_refresh

    def _schedule_refresh(self):
        self.task_manager.add_task(
            self.REFRESH_TASK,
            lambda: self.refresh(source='timer'),
            interval_seconds=self.config.REFRESH_INTERVAL
        )

    def select_band(self, band: str) -> str:
        if band not in SUPPORTED_BANDS:
            raise ValidationError(f"Unsupported band: {band}")
        self.selected_band = band
        return band

    # Analysis

    def analyze(self, from_location: str, to_location: str, band: Optional[str] = None) -> AnalysisOutcome:
        """Run a path analysis against the current telemetry and build its charts."""
        band = band or self.selected_band
        if band not in SUPPORTED_BANDS:
            raise ValidationError(f"Unsupported band: {band}")

        self.from_location = from_location or ''
        self.to_location = to_location or ''

        outcome = self.orchestrator.run(
            from_location,
            to_location,
            band,
            self.snapshots.current_solar,
            self.snapshots.current_ionosphere,
            cancel_event=self._cancel_event,
        )

        self.selected_band = band
        self.analysis_record = outcome.record
        self.forecast = outcome.forecast
        self.chart_data = build_chart_projection(outcome.analysis, band)
        return outcome

    @property
    def loading(self) -> bool:
        return self.orchestrator.loading

    # Feedback and presets

    def record_feedback(self, is_correct: bool, analysis_id: Optional[str] = None) -> FeedbackRecord:
        """Record whether an analysis (the latest one by default) matched reality."""
        if analysis_id is None:
            record = self.analysis_record
            if record is None:
                raise ValidationError("No analysis available for feedback")
        else:
            record = self.orchestrator.get_record(analysis_id)
            if record is None:
                raise ValidationError(f"Unknown analysis: {analysis_id}")

        return self.feedback.record_feedback(
            record.id,
            is_correct,
            analysis_snapshot=record.analysis.model_dump(mode='json'),
            conditions_snapshot=self._conditions_snapshot(),
        )

    def save_preset(self, from_location: Optional[str] = None, to_location: Optional[str] = None,
                    band: Optional[str] = None, name: Optional[str] = None) -> Preset:
        """Save a path preset, defaulting to the current inputs."""
        preset = self.feedback.save_preset(
            from_location if from_location is not None else self.from_location,
            to_location if to_location is not None else self.to_location,
            band or self.selected_band,
            name=name,
        )
        self.presets = self.feedback.load_presets()
        return preset

    def apply_preset(self, preset_id: str) -> Preset:
        preset = self.feedback.get_preset(preset_id)
        if preset is None:
            raise ValidationError(f"Preset not found: {preset_id}")
        self.from_location = preset.fromLocation
        self.to_location = preset.toLocation
        if preset.band in SUPPORTED_BANDS:
            self.selected_band = preset.band
        return preset

    def delete_preset(self, preset_id: str) -> bool:
        deleted = self.feedback.delete_preset(preset_id)
        self.presets = self.feedback.load_presets()
        return deleted

    # Export

    def build_export_document(self) -> Dict[str, Any]:
        solar = self.snapshots.current_solar
        ionosphere = self.snapshots.current_ionosphere
        if self.analysis_record is None and solar is None and ionosphere is None:
            raise ExportError("No data available to export. Please run an analysis first.")

        return {
            'version': EXPORT_VERSION,
            'exportDate': datetime.now().isoformat(),
            'metadata': {
                'band': self.selected_band,
                'fromLocation': self.from_location,
                'toLocation': self.to_location,
                'autoRefresh': self.auto_refresh,
            },
            'analysis': self.analysis_record.analysis.model_dump(mode='json') if self.analysis_record else None,
            'solar': solar.model_dump(mode='json') if solar else None,
            'ionosphere': ionosphere.model_dump(mode='json') if ionosphere else None,
            'forecast': self.forecast.model_dump(mode='json') if self.forecast else None,
            'historical': [s.model_dump(mode='json') for s in self.historical[-HISTORY_HOURS:]],
            'feedbackHistory': [
                f.model_dump(mode='json') for f in self.feedback.get_feedback(limit=EXPORT_FEEDBACK_LIMIT)
            ],
        }

    def export_data(self) -> Tuple[str, str]:
        """
        Serialize the session into the export document.

        Returns:
            (file name, JSON text)

        Raises:
            ExportError: Nothing to export or serialization failed
        """
        try:
            document = self.build_export_document()
            content = json.dumps(document, indent=2)
        except ExportError as e:
            self.notifications.error(str(e))
            raise
        except (TypeError, ValueError) as e:
            logger.error(f"Error exporting data: {e}")
            self.notifications.error('Error exporting data. Please try again.')
            raise ExportError(f"Error exporting data: {e}") from e

        filename = f"hf_analysis_{self.selected_band}_{datetime.now().date().isoformat()}.json"
        return filename, content

    def write_export(self, directory: str) -> str:
        """Write the export document into ``directory`` and return its path."""
        filename, content = self.export_data()
        path = os.path.join(directory, filename)
        try:
            os.makedirs(directory, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                f.write(content)
        except OSError as e:
            logger.error(f"Error writing export file {path}: {e}")
            self.notifications.error('Error exporting data. Please try again.')
            raise ExportError(f"Could not write {path}: {e}") from e

        self.notifications.success(f"Exported {filename}")
        return path

    # State

    def _conditions_snapshot(self) -> Dict[str, Any]:
        solar = self.snapshots.current_solar
        ionosphere = self.snapshots.current_ionosphere
        return {
            'solar': solar.model_dump(mode='json') if solar else None,
            'ionosphere': ionosphere.model_dump(mode='json') if ionosphere else None,
        }

    def get_conditions(self) -> Dict[str, Any]:
        """Current telemetry with status classifications."""
        conditions = self._conditions_snapshot()
        solar = self.snapshots.current_solar
        conditions.update({
            'kpLevel': classify_kp(solar.kp if solar else None),
            'geomagneticLevel': classify_geomagnetic_status(solar.geomagneticStatus if solar else None),
            'lastUpdate': self.last_update.isoformat() if self.last_update else None,
        })
        return conditions

    def get_state(self) -> Dict[str, Any]:
        return {
            'band': self.selected_band,
            'fromLocation': self.from_location,
            'toLocation': self.to_location,
            'autoRefresh': self.auto_refresh,
            'loading': self.loading,
            'analysisState': self.orchestrator.state.value,
            'lastError': self.orchestrator.last_error,
            'lastUpdate': self.last_update.isoformat() if self.last_update else None,
            'analysisId': self.analysis_record.id if self.analysis_record else None,
            'notification': self.notifications.current,
        }
