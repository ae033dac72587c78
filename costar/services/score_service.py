"""
Score Service: solo-mode high score persistence.

Stored as ``<data_path>/scores.json``; a missing or unreadable file
counts as a high score of 0.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

from costar.core.storage import atomic_write_json

logger = logging.getLogger(__name__)


class ScoreService:
    """Reads and records the best solo score."""

    def __init__(self, data_path: Path) -> None:
        self.path = Path(data_path) / "scores.json"
        self._lock = threading.Lock()

    def get_high_score(self) -> int:
        if not self.path.exists():
            return 0
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return int(data.get("high_score", 0))
        except (json.JSONDecodeError, OSError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Unreadable score file, treating high score as 0: {e}")
            return 0

    def save_score(self, score: int) -> bool:
        """
        Record ``score`` if it beats the current high score.

        Returns:
            True if it is a new record.
        """
        with self._lock:
            if score <= self.get_high_score():
                return False
            atomic_write_json(self.path, {"high_score": score})
        logger.info(f"New high score: {score}")
        return True

    def reset(self) -> None:
        with self._lock:
            self.path.unlink(missing_ok=True)
