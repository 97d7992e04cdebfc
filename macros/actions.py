"""
Compiled actions: the flat program produced by the compiler and consumed by
playback.

Kinds of compiled action
------------------------
- PrimitiveAction: one raw input action (press, release, move, wheel)
- SleepAction:     wait for milliseconds
- ExitAction:      terminate the whole process

Primitive actions are carried out by an ActionSink. The default sink drives
the OS through pynput keyboard/mouse controllers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import threading
from typing import Any, Callable, Optional, Tuple, Union

import keymap
from models import KeyOrButton
from .errors import SynthesisError


class PrimitiveKind(Enum):
    PRESS = "press"
    RELEASE = "release"
    MOVE = "move"
    WHEEL = "wheel"


@dataclass(frozen=True)
class PrimitiveAction:
    """One raw input action. For WHEEL, x/y hold the scroll deltas."""

    kind: PrimitiveKind
    target: Optional[KeyOrButton] = None
    x: float = 0.0
    y: float = 0.0

    @staticmethod
    def press(target: KeyOrButton) -> "PrimitiveAction":
        return PrimitiveAction(PrimitiveKind.PRESS, target)

    @staticmethod
    def release(target: KeyOrButton) -> "PrimitiveAction":
        return PrimitiveAction(PrimitiveKind.RELEASE, target)

    @staticmethod
    def move(x: float, y: float) -> "PrimitiveAction":
        return PrimitiveAction(PrimitiveKind.MOVE, None, x, y)

    @staticmethod
    def wheel(dx: int, dy: int) -> "PrimitiveAction":
        return PrimitiveAction(PrimitiveKind.WHEEL, None, dx, dy)

    @property
    def is_pointer_move(self) -> bool:
        return self.kind == PrimitiveKind.MOVE

    def __str__(self) -> str:
        if self.kind in (PrimitiveKind.MOVE, PrimitiveKind.WHEEL):
            return f"{self.kind.value}({self.x:g}, {self.y:g})"
        return f"{self.kind.value}({self.target})"


@dataclass(frozen=True)
class SleepAction:
    milliseconds: int

    def __str__(self) -> str:
        return f"sleep({self.milliseconds})"


@dataclass(frozen=True)
class ExitAction:
    def __str__(self) -> str:
        return "exit"


CompiledAction = Union[PrimitiveAction, SleepAction, ExitAction]
Program = Tuple[CompiledAction, ...]


class ActionSink:
    """Performs primitive actions against the OS."""

    def perform(self, action: PrimitiveAction) -> None:  # pragma: no cover - runtime behavior
        raise NotImplementedError


class PynputActionSink(ActionSink):
    """Action sink backed by pynput controllers, created on first use."""

    def __init__(self) -> None:
        self._keyboard: Optional[Any] = None
        self._mouse: Optional[Any] = None
        self._lock = threading.Lock()

    def perform(self, action: PrimitiveAction) -> None:
        try:
            if action.kind == PrimitiveKind.MOVE:
                self._mouse_controller().position = (int(round(action.x)), int(round(action.y)))
            elif action.kind == PrimitiveKind.WHEEL:
                self._mouse_controller().scroll(int(action.x), int(action.y))
            elif action.target is not None and action.target.is_button:
                button = keymap.to_pynput_button(action.target)
                if action.kind == PrimitiveKind.PRESS:
                    self._mouse_controller().press(button)
                else:
                    self._mouse_controller().release(button)
            elif action.target is not None:
                key = keymap.to_pynput_key(action.target)
                if action.kind == PrimitiveKind.PRESS:
                    self._keyboard_controller().press(key)
                else:
                    self._keyboard_controller().release(key)
            else:
                raise ValueError("press/release without a target")
        except Exception as e:
            raise SynthesisError(f"{action} failed: {e}") from e

    def _keyboard_controller(self) -> Any:
        with self._lock:
            if self._keyboard is None:
                if keymap.keyboard is None:
                    raise RuntimeError("pynput/keyboard backend not available (install pynput)")
                self._keyboard = keymap.keyboard.Controller()
            return self._keyboard

    def _mouse_controller(self) -> Any:
        with self._lock:
            if self._mouse is None:
                if keymap.mouse is None:
                    raise RuntimeError("pynput/mouse backend not available (install pynput)")
                self._mouse = keymap.mouse.Controller()
            return self._mouse


class PlaybackContext:
    """Small helper object handed to one playback run."""

    def __init__(
        self,
        cancel_event: threading.Event,
        logger: Optional[Callable[[str], None]] = None,
    ):
        self._cancel = cancel_event
        self._logger = logger

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def log(self, msg: str) -> None:
        if self._logger:
            self._logger(msg)

    def sleep(self, seconds: float) -> bool:
        """Wait, returning False as soon as playback is cancelled."""
        if seconds <= 0:
            return not self._cancel.is_set()
        return not self._cancel.wait(seconds)

    def sleep_ms(self, ms: int) -> bool:
        return self.sleep(max(ms, 0) / 1000.0)

    def wait_cancelled(self) -> None:
        self._cancel.wait()
