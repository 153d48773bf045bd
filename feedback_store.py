"""
Feedback and preset storage for the HF Propagation Dashboard.

Feedback is an append-only log that is never trimmed in storage (exports only
take the latest entries). Presets are a short list of saved paths, oldest
evicted first once the limit is reached.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from pydantic import ValidationError as SchemaValidationError

from calculations.constants import MAX_PRESETS
from database import StateStore, USER_FEEDBACK, SAVED_PRESETS
from exceptions import ValidationError
from models import FeedbackRecord, Preset

logger = logging.getLogger(__name__)


class FeedbackStore:
    """Durable user feedback log and saved path presets."""

    def __init__(self, state_store: StateStore, max_presets: int = MAX_PRESETS):
        self.state_store = state_store
        self.max_presets = max_presets

    def record_feedback(self, analysis_id: Optional[str], is_correct: bool,
                        analysis_snapshot: Optional[Dict[str, Any]] = None,
                        conditions_snapshot: Optional[Dict[str, Any]] = None) -> FeedbackRecord:
        """Append one feedback entry about an analysis."""
        record = FeedbackRecord(
            analysisId=analysis_id,
            isCorrect=bool(is_correct),
            timestamp=datetime.now().isoformat(),
            analysisSnapshot=analysis_snapshot,
            conditionsSnapshot=conditions_snapshot,
        )
        self.state_store.append(USER_FEEDBACK, record.model_dump(mode='json'))
        logger.info(f"Recorded feedback for {analysis_id}: {'correct' if is_correct else 'incorrect'}")
        return record

    def get_feedback(self, limit: Optional[int] = None) -> List[FeedbackRecord]:
        """Stored feedback, oldest first; ``limit`` keeps only the latest entries."""
        entries = self.state_store.get(USER_FEEDBACK, [])
        if limit is not None:
            entries = entries[-limit:] if limit > 0 else []
        return self._parse(entries, FeedbackRecord)

    def save_preset(self, from_location: str, to_location: str, band: str,
                    name: Optional[str] = None) -> Preset:
        """Save a path preset; both endpoints are required."""
        from_location = (from_location or '').strip()
        to_location = (to_location or '').strip()
        if not from_location or not to_location:
            raise ValidationError("Both from and to locations are required to save a preset")

        preset = Preset(
            id=uuid.uuid4().hex,
            name=name or f"{from_location} to {to_location} ({band})",
            fromLocation=from_location,
            toLocation=to_location,
            band=band,
            timestamp=datetime.now().isoformat(),
        )
        self.state_store.append(SAVED_PRESETS, preset.model_dump(mode='json'), max_entries=self.max_presets)
        logger.info(f"Saved preset {preset.name}")
        return preset

    def load_presets(self) -> List[Preset]:
        return self._parse(self.state_store.get(SAVED_PRESETS, []), Preset)

    def get_preset(self, preset_id: str) -> Optional[Preset]:
        for preset in self.load_presets():
            if preset.id == preset_id:
                return preset
        return None

    def delete_preset(self, preset_id: str) -> bool:
        presets = self.state_store.get(SAVED_PRESETS, [])
        remaining = [p for p in presets if p.get('id') != preset_id]
        if len(remaining) == len(presets):
            return False
        return self.state_store.set(SAVED_PRESETS, remaining)

    def _parse(self, entries: List[Dict], model):
        parsed = []
        for entry in entries:
            try:
                parsed.append(model.model_validate(entry))
            except SchemaValidationError as e:
                logger.warning(f"Skipping unreadable {model.__name__} entry: {e}")
        return parsed
