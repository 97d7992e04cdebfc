"""
Status Logger - keeps a short log history and echoes it to the console.

Playback workers, the event pump and the CLI all log through one instance,
so entries are appended under a lock.
"""

import sys
import threading
from datetime import datetime
from typing import List, Optional, TextIO
from dataclasses import dataclass


@dataclass
class LogEntry:
    """A single log entry."""
    timestamp: datetime
    message: str
    level: str = "INFO"

    def __str__(self) -> str:
        time_str = self.timestamp.strftime("%H:%M:%S")
        return f"[{time_str}] {self.level}: {self.message}"


class StatusLogger:
    """
    Maintains a bounded log history and reports script status changes.
    """

    def __init__(self, max_entries: int = 100, stream: Optional[TextIO] = None, echo: bool = True):
        """
        Initialize the logger.

        Args:
            max_entries: Maximum number of log entries to keep in memory
            stream: Where echoed entries are written (stdout when omitted)
            echo: Whether entries are written to the stream at all
        """
        self._log_entries: List[LogEntry] = []
        self._max_entries = max_entries
        self._stream = stream
        self._echo = echo
        self._lock = threading.Lock()
        self._current_status = "Ready"

    def log_info(self, message: str) -> None:
        self._add_entry(message, "INFO")

    def log_warning(self, message: str) -> None:
        self._add_entry(message, "WARNING")

    def log_error(self, message: str) -> None:
        self._add_entry(message, "ERROR")

    def update_status(self, status: str) -> None:
        """
        Update the current status.

        Args:
            status: The new status message
        """
        self._current_status = status
        self.log_info(status)

    def report_script(self, title: str, running: bool) -> None:
        """Status reporter hook: one line per script start/stop."""
        self.log_info(f"{title} {'started' if running else 'stopped'}")

    def get_current_status(self) -> str:
        return self._current_status

    def get_recent_logs(self, count: int = 10) -> List[LogEntry]:
        """
        Get the most recent log entries.

        Args:
            count: Number of recent entries to return

        Returns:
            List of recent log entries
        """
        with self._lock:
            return self._log_entries[-count:]

    def get_all_logs(self) -> List[LogEntry]:
        with self._lock:
            return self._log_entries.copy()

    def _add_entry(self, message: str, level: str) -> None:
        entry = LogEntry(
            timestamp=datetime.now(),
            message=message,
            level=level
        )

        with self._lock:
            self._log_entries.append(entry)

            # Trim old entries if we exceed max
            if len(self._log_entries) > self._max_entries:
                self._log_entries = self._log_entries[-self._max_entries:]

            if self._echo:
                stream = self._stream or sys.stdout
                print(entry, file=stream, flush=True)
