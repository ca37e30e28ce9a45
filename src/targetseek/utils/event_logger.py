"""JSONL event logger for the control loop timeline.

Each event is one JSON dict per line: state transitions, escape maneuvers, arrival.
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class TransitionEventLogger:
    """Append-only JSONL logger for controller events.

    Usage:
        log = TransitionEventLogger("logs/control_events.jsonl")
        log.log_state_transition("searching", "approaching", "goal_found")
    """

    def __init__(self, path: str | Path = "logs/control_events.jsonl") -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._session_id = f"control_{int(time.time())}"
        logger.info("TransitionEventLogger: writing to %s (session=%s)", self._path, self._session_id)

    @property
    def path(self) -> Path:
        return self._path

    def log(self, event_type: str, data: dict[str, Any] | None = None) -> None:
        """Append one event line to the JSONL file."""
        entry: dict[str, Any] = {
            "timestamp": time.time(),
            "timestamp_mono": time.monotonic(),
            "session": self._session_id,
            "event": event_type,
        }
        if data:
            entry.update(data)
        try:
            with open(self._path, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry, ensure_ascii=False, default=str) + "\n")
        except OSError as e:
            logger.warning("TransitionEventLogger write failed: %s", e)

    def log_state_transition(self, from_state: str, to_state: str, reason: str = "", t: float | None = None) -> None:
        self.log("state_transition", {"from_state": from_state, "to_state": to_state, "reason": reason, "t": t})

    def log_maneuver_start(self, name: str, total_s: float, t: float | None = None) -> None:
        self.log("maneuver_start", {"name": name, "total_s": round(total_s, 3), "t": t})

    def log_maneuver_done(self, name: str, t: float | None = None) -> None:
        self.log("maneuver_done", {"name": name, "t": t})

    def log_arrived(self, goal_blob_area: int, t: float | None = None) -> None:
        self.log("arrived", {"goal_blob_area": goal_blob_area, "t": t})
