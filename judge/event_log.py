"""
Timestamped event log shared by the engine components.

Components take a `session_logger` callable of the form
logger(event, details) and EventLog.log fits that shape.
"""

import threading
from datetime import datetime
from pathlib import Path
from typing import List, Optional


class EventLog:
    """Appends '[timestamp] - EVENT - details' lines to a file and keeps them in memory."""

    def __init__(self, log_path: Optional[Path] = None):
        self.log_path = Path(log_path) if log_path else None
        self.entries: List[str] = []
        self._lock = threading.Lock()

        if self.log_path is not None:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)

    def log(self, event: str, details: str = ""):
        """Append an entry to the log."""
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        log_entry = f"[{timestamp}] - {event}"
        if details:
            log_entry += f" - {details}"

        with self._lock:
            self.entries.append(log_entry)
            if self.log_path is not None:
                with open(self.log_path, 'a', encoding='utf-8') as f:
                    f.write(log_entry + "\n")

    def events(self) -> List[str]:
        """Return the event names logged so far, in order."""
        with self._lock:
            return [entry.split(" - ")[1] for entry in self.entries]
