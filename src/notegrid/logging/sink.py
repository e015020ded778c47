"""Filesystem NDJSON event sink.

Events are appended as one JSON line per event to ``events.ndjson``
inside the configured log directory.  Writes use
``json.dumps(sort_keys=True)`` for deterministic output.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from notegrid.logging.events import NotegridEvent

_LOG_FILE = "events.ndjson"


class EventSink:
    """Append-only NDJSON log writer."""

    def __init__(self, log_dir: Path, *, fsync: bool = False) -> None:
        self.log_dir = log_dir
        self._fsync = fsync
        self.log_dir.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self.log_dir / _LOG_FILE

    def write(self, event: NotegridEvent) -> None:
        """Append *event* to the log."""
        line = json.dumps(event.model_dump(mode="json"), sort_keys=True, default=str) + "\n"
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(line)
            if self._fsync:
                f.flush()
                os.fsync(f.fileno())

    def read_events(
        self,
        *,
        level: str | None = None,
        event_type: str | None = None,
        limit: int = 200,
    ) -> list[dict[str, Any]]:
        """Read events most-recent-first, with optional filters."""
        events = self._read_ndjson(self.path)
        if level:
            events = [e for e in events if e.get("level") == level]
        if event_type:
            events = [e for e in events if e.get("event_type") == event_type]
        events.reverse()
        return events[:limit]

    @staticmethod
    def _read_ndjson(path: Path) -> list[dict[str, Any]]:
        """Parse an NDJSON file, skipping malformed lines."""
        if not path.exists():
            return []
        events: list[dict[str, Any]] = []
        for line in path.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if not line:
                continue
            try:
                events.append(json.loads(line))
            except json.JSONDecodeError:
                continue
        return events
