"""
Helpers behind the ``event``, ``point`` and ``record`` commands.

Each tool is an InputEvent handler; the CLI plugs it into an InputListener.
"""

from __future__ import annotations

import json
import time
from typing import Callable, List, Optional, Tuple

import typer

import keymap
from macros.script_model import (
    ClickDown,
    ClickUp,
    KeyDown,
    KeyUp,
    Move,
    Scroll,
    ScriptEvent,
    Sleep,
    events_to_dicts,
)
from models import InputEvent, InputEventType, KeyOrButton

OutputCallback = Callable[[str], None]

# ANSI: erase display, cursor home
CLEAR_SEQUENCE = "\x1b[2J\x1b[1;1H"


def clear_terminal() -> None:
    typer.echo(CLEAR_SEQUENCE, nl=False)


class EventPrinter:
    """Prints the name of every released key or button."""

    def __init__(self, output: OutputCallback = typer.echo) -> None:
        self._output = output

    def __call__(self, event: InputEvent) -> None:
        if event.event_type == InputEventType.KEY_UP and event.target is not None:
            self._output(f"key -> {event.target.name}")
        elif event.event_type == InputEventType.BUTTON_UP and event.target is not None:
            self._output(f"mouse -> {event.target.name}")


class PointTracker:
    """Prints cursor coordinates on one key and clears the terminal on another."""

    def __init__(
        self,
        print_key: KeyOrButton,
        clear_key: KeyOrButton,
        output: OutputCallback = typer.echo,
        clear: Callable[[], None] = clear_terminal,
    ) -> None:
        self._print_key = print_key
        self._clear_key = clear_key
        self._output = output
        self._clear = clear
        self._point: Tuple[float, float] = (0.0, 0.0)

    @property
    def point(self) -> Tuple[float, float]:
        return self._point

    def __call__(self, event: InputEvent) -> None:
        if event.event_type == InputEventType.POINTER_MOVE:
            self._point = (event.x, event.y)
        elif event.is_release and event.target == self._print_key:
            x, y = self._cursor_position()
            self._output(f"{x:g}, {y:g}")
        elif event.is_release and event.target == self._clear_key:
            self._clear()

    def _cursor_position(self) -> Tuple[float, float]:
        # Ask the controller used for playback so coordinates match it
        if keymap.mouse is None:
            return self._point
        try:
            cx, cy = keymap.mouse.Controller().position
            return float(cx), float(cy)
        except Exception:
            return self._point


class Recorder:
    """
    Turns live input into a list of script events.

    Every recorded event is preceded by a Sleep holding the time since the
    previous one. Moving the pointer into the top-left corner finishes the
    recording.
    """

    def __init__(
        self,
        on_finished: Optional[Callable[[List[ScriptEvent]], None]] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._on_finished = on_finished
        self._clock = clock
        self._previous = clock()
        self._point: Tuple[float, float] = (0.0, 0.0)
        self._events: List[ScriptEvent] = []
        self._finished = False

    @property
    def events(self) -> List[ScriptEvent]:
        return list(self._events)

    @property
    def finished(self) -> bool:
        return self._finished

    def __call__(self, event: InputEvent) -> None:
        if self._finished:
            return
        if event.event_type == InputEventType.POINTER_MOVE:
            if event.x + event.y < 1:
                self._finish()
                return
            self._point = (event.x, event.y)
            return

        now = self._clock()
        self._events.append(Sleep(int(round((now - self._previous) * 1000))))
        self._previous = now

        target = event.target
        if event.event_type == InputEventType.KEY_DOWN and target is not None:
            self._events.append(KeyDown(target))
        elif event.event_type == InputEventType.KEY_UP and target is not None:
            self._events.append(KeyUp(target))
        elif event.event_type == InputEventType.BUTTON_DOWN and target is not None:
            self._events.append(Move(*self._point))
            self._events.append(ClickDown(target))
        elif event.event_type == InputEventType.BUTTON_UP and target is not None:
            self._events.append(Move(*self._point))
            self._events.append(ClickUp(target))
        elif event.event_type == InputEventType.WHEEL:
            self._events.append(Scroll(int(event.x), int(event.y)))

    def export(self) -> str:
        """Recorded events as a JSON list ready to paste into a script."""
        return json.dumps(events_to_dicts(self._events), indent=2, ensure_ascii=False)

    def _finish(self) -> None:
        self._finished = True
        if self._on_finished:
            self._on_finished(self.events)


def parse_tool_key(token: str) -> KeyOrButton:
    """Key option parser shared by the CLI tools."""
    try:
        return keymap.parse_trigger(token)
    except ValueError as e:
        raise typer.BadParameter(str(e))
