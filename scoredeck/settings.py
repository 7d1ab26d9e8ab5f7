"""Persistent per-key action settings.

Stores one settings record per key position in a single JSON file.
"""

import json
import logging
import os
import threading
from pathlib import Path

logger = logging.getLogger(__name__)


class SettingsStore:
    def __init__(self, path: Path):
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()

    def _load_all(self) -> dict:
        try:
            with open(self.path) as f:
                data = json.load(f)
        except (FileNotFoundError, json.JSONDecodeError):
            return {}
        return data if isinstance(data, dict) else {}

    def load(self, pos: int) -> dict | None:
        """Settings record for a key, or None if nothing is stored."""
        record = self._load_all().get(str(pos))
        return record if isinstance(record, dict) else None

    def save(self, pos: int, record: dict) -> None:
        """Store the record for a key. Write errors are logged, not raised."""
        with self._lock:
            try:
                os.makedirs(self.path.parent, exist_ok=True)
                data = self._load_all()
                data[str(pos)] = record
                with open(self.path, "w") as f:
                    json.dump(data, f, indent=2)
            except OSError:
                logger.warning("Could not save settings to %s", self.path, exc_info=True)
