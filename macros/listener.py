"""
Global input capture and the channel feeding the trigger router.

InputListener wraps the pynput keyboard and mouse listeners and converts
their callbacks into InputEvents. The callbacks only hand events over; the
EventPump queue is drained by a single consumer thread.
"""

from __future__ import annotations

import queue
import threading
from typing import Callable, List, Optional

import keymap
from models import InputEvent
from .errors import ListenError

EventCallback = Callable[[InputEvent], None]
LogCallback = Callable[[str], None]


class InputListener:
    """Listens for global keyboard and mouse input."""

    def __init__(self, callback: EventCallback, logger: Optional[LogCallback] = None) -> None:
        self._callback = callback
        self._logger = logger
        self._listeners: List[object] = []
        self._lock = threading.Lock()

    def start(self) -> None:
        """Start both listeners; raises ListenError when capture is unavailable."""
        with self._lock:
            if self._listeners:
                return
            if keymap.keyboard is None or keymap.mouse is None:
                raise ListenError("pynput backend not available; global input capture is disabled")
            try:
                keyboard_listener = keymap.keyboard.Listener(
                    on_press=self._on_key_press, on_release=self._on_key_release
                )
                mouse_listener = keymap.mouse.Listener(
                    on_move=self._on_move, on_click=self._on_click, on_scroll=self._on_scroll
                )
                keyboard_listener.daemon = True
                mouse_listener.daemon = True
                keyboard_listener.start()
                self._listeners.append(keyboard_listener)
                mouse_listener.start()
                self._listeners.append(mouse_listener)
            except Exception as exc:  # pragma: no cover - system specific
                self._stop_listeners()
                raise ListenError(f"Failed to start input listener: {exc}") from exc

    def stop(self) -> None:
        with self._lock:
            self._stop_listeners()

    def join(self) -> None:
        """Block until both listeners have stopped."""
        for listener in list(self._listeners):
            listener.join()  # type: ignore[attr-defined]

    @property
    def running(self) -> bool:
        return any(getattr(l, "running", False) for l in self._listeners)

    # Internal helpers -------------------------------------------------

    def _on_key_press(self, key) -> None:
        self._callback(InputEvent.press(keymap.from_pynput_key(key)))

    def _on_key_release(self, key) -> None:
        self._callback(InputEvent.release(keymap.from_pynput_key(key)))

    def _on_click(self, _x, _y, button, pressed: bool) -> None:
        target = keymap.from_pynput_button(button)
        self._callback(InputEvent.press(target) if pressed else InputEvent.release(target))

    def _on_move(self, x, y) -> None:
        self._callback(InputEvent.move(float(x), float(y)))

    def _on_scroll(self, _x, _y, dx, dy) -> None:
        self._callback(InputEvent.wheel(dx, dy))

    def _stop_listeners(self) -> None:
        listeners = self._listeners
        self._listeners = []
        for listener in listeners:
            try:
                listener.stop()  # type: ignore[attr-defined]
            except Exception as e:
                if self._logger:
                    self._logger(f"Failed to stop input listener: {e}")


class EventPump:
    """Order-preserving queue with exactly one consumer thread."""

    def __init__(self, handler: EventCallback, logger: Optional[LogCallback] = None) -> None:
        self._handler = handler
        self._logger = logger
        self._queue: "queue.Queue[Optional[InputEvent]]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._thread = threading.Thread(target=self._worker, name="event-pump", daemon=True)
        self._thread.start()

    def submit(self, event: InputEvent) -> None:
        """Hand an event over without blocking the caller."""
        self._queue.put_nowait(event)

    def stop(self, timeout: float = 2.0) -> None:
        if not (self._thread and self._thread.is_alive()):
            return
        self._queue.put_nowait(None)
        self._thread.join(timeout=timeout)

    def wait_idle(self) -> None:
        """Block until every submitted event has been handled."""
        self._queue.join()

    def is_running(self) -> bool:
        return bool(self._thread and self._thread.is_alive())

    def _worker(self) -> None:
        while True:
            event = self._queue.get()
            try:
                if event is None:
                    return
                self._handler(event)
            except Exception as e:
                if self._logger:
                    self._logger(f"Event handling failed: {e}")
            finally:
                self._queue.task_done()
