"""Always-on-top overlay listing the scripts that are currently running."""

from __future__ import annotations

import queue
import tkinter as tk
from typing import Dict, List, Optional, Tuple

from models import OverlaySettings


class StatusOverlay:
    """
    Small borderless window that mirrors script start/stop notifications.

    ``report`` may be called from any thread; updates are queued and applied
    on the Tk thread by a periodic poll.
    """

    POLL_MS = 50

    def __init__(self, root: tk.Tk, settings: OverlaySettings) -> None:
        self._root = root
        self._settings = settings
        self._updates: "queue.Queue[Tuple[str, bool]]" = queue.Queue()
        self._titles: Dict[str, bool] = {}
        self._label: Optional[tk.Label] = None
        self._poll_job: Optional[str] = None

    def report(self, title: str, running: bool) -> None:
        """Status reporter hook, safe to call from worker threads."""
        self._updates.put_nowait((title, running))

    def running_titles(self) -> List[str]:
        return [title for title, running in self._titles.items() if running]

    def text(self) -> str:
        return "\n".join(self.running_titles())

    def drain(self) -> bool:
        """Apply queued notifications; True if anything changed."""
        changed = False
        while True:
            try:
                title, running = self._updates.get_nowait()
            except queue.Empty:
                return changed
            # re-inserting moves a restarted script to the end of the list
            self._titles.pop(title, None)
            self._titles[title] = running
            changed = True

    def show(self) -> None:
        """Create the window and start polling for updates."""
        if self._label is not None:
            return
        settings = self._settings
        root = self._root
        root.title("Scripts")
        root.overrideredirect(not settings.border)
        root.attributes("-topmost", True)
        root.attributes("-alpha", settings.alpha)
        root.geometry(f"+{settings.x}+{settings.y}")
        root.configure(bg="black")

        self._label = tk.Label(
            root,
            text="",
            justify=tk.LEFT,
            anchor="nw",
            font=("Arial", settings.font_size, "bold"),
            fg=settings.font_color,
            bg="black",
        )
        self._label.pack(ipadx=4, ipady=2)
        self._poll()

    def mainloop(self) -> None:
        self._root.mainloop()

    def close(self) -> None:
        if self._poll_job is not None:
            try:
                self._root.after_cancel(self._poll_job)
            except Exception:
                pass
            self._poll_job = None
        try:
            self._root.destroy()
        except Exception:
            pass

    def _poll(self) -> None:
        if self.drain() and self._label is not None:
            self._label.configure(text=self.text())
        self._poll_job = self._root.after(self.POLL_MS, self._poll)
