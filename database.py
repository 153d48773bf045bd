import sqlite3
import os
import json
import threading
from typing import Any, List, Optional
import logging

logger = logging.getLogger(__name__)

# Durable state keys
LAST_SOLAR_DATA = 'lastSolarData'
LAST_IONOSPHERE_DATA = 'lastIonosphereData'
SOLAR_DATA_HISTORY = 'solarDataHistory'
IONOSPHERE_HISTORY = 'ionosphereHistory'
ANALYSIS_HISTORY = 'analysisHistory'
USER_FEEDBACK = 'userFeedback'
SAVED_PRESETS = 'savedPresets'


class StateStore:
    def __init__(self, db_path: str = None):
        """Initialize SQLite-backed key/value state"""
        if db_path is None:
            # Create data directory if it doesn't exist
            data_dir = os.path.join(os.getcwd(), 'data')
            os.makedirs(data_dir, exist_ok=True)
            self.db_path = os.path.join(data_dir, "hf_propagation.db")
        else:
            self.db_path = db_path
            data_dir = os.path.dirname(db_path)
            if data_dir and db_path != ':memory:':
                os.makedirs(data_dir, exist_ok=True)

        # One shared connection so ':memory:' databases survive between calls
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._lock = threading.Lock()
        self.init_database()

    def init_database(self):
        """Initialize database tables"""
        try:
            with self._lock, self._conn:
                self._conn.execute('''
                    CREATE TABLE IF NOT EXISTS app_state (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    )
                ''')
            logger.info(f"State store initialized successfully at {self.db_path}")

        except Exception as e:
            logger.error(f"Error initializing state store: {e}")
            raise

    def _read(self, key: str) -> Optional[Any]:
        row = self._conn.execute('SELECT value FROM app_state WHERE key = ?', (key,)).fetchone()
        return json.loads(row[0]) if row else None

    def _write(self, key: str, value: Any):
        self._conn.execute('''
            INSERT OR REPLACE INTO app_state (key, value, updated_at)
            VALUES (?, ?, CURRENT_TIMESTAMP)
        ''', (key, json.dumps(value)))

    def get(self, key: str, default: Any = None) -> Any:
        """Get a stored value, or ``default`` when absent or unreadable"""
        try:
            with self._lock:
                value = self._read(key)
            return default if value is None else value

        except (sqlite3.Error, ValueError) as e:
            logger.error(f"Error reading state {key}: {e}")
            return default

    def set(self, key: str, value: Any) -> bool:
        """Replace a stored value"""
        try:
            with self._lock, self._conn:
                self._write(key, value)
            return True

        except (sqlite3.Error, TypeError, ValueError) as e:
            logger.error(f"Error storing state {key}: {e}")
            return False

    def append(self, key: str, entry: Any, max_entries: Optional[int] = None) -> List[Any]:
        """
        Append an entry to a stored list, dropping the oldest entries beyond
        ``max_entries``. The read-append-write happens in one transaction.

        Returns:
            The stored list after the append
        """
        try:
            with self._lock, self._conn:
                entries = self._read(key)
                if not isinstance(entries, list):
                    entries = []
                entries.append(entry)
                if max_entries is not None and len(entries) > max_entries:
                    entries = entries[-max_entries:]
                self._write(key, entries)
            return entries

        except (sqlite3.Error, TypeError, ValueError) as e:
            logger.error(f"Error appending to state {key}: {e}")
            return self.get(key, [])

    def get_stats(self) -> dict:
        """Get state store statistics"""
        try:
            with self._lock:
                total_keys = self._conn.execute('SELECT COUNT(*) FROM app_state').fetchone()[0]

            file_size = 0
            if self.db_path != ':memory:' and os.path.exists(self.db_path):
                file_size = os.path.getsize(self.db_path)

            return {
                'total_keys': total_keys,
                'file_size_mb': round(file_size / (1024 * 1024), 2)
            }

        except sqlite3.Error as e:
            logger.error(f"Error getting state store stats: {e}")
            return {}

    def close(self):
        with self._lock:
            self._conn.close()
        logger.info("State store closed")
