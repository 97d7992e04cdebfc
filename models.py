"""
Domain models shared by the macro runner.

These are plain value objects: identities of keys and mouse buttons, the
input events delivered by the listener, coordinate correction and the
overlay window preferences.
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass
from typing import Tuple, Dict, Any, Optional


class InputKind(Enum):
    """Discriminates keyboard keys from mouse buttons."""
    KEY = "key"
    MOUSE = "mouse"


@dataclass(frozen=True)
class KeyOrButton:
    """
    Identity of a keyboard key or a mouse button.

    Instances are hashable and compare by value so they can be used as
    dictionary keys for trigger bookkeeping.
    """
    kind: InputKind
    name: str

    @staticmethod
    def key(name: str) -> "KeyOrButton":
        return KeyOrButton(InputKind.KEY, name)

    @staticmethod
    def button(name: str) -> "KeyOrButton":
        return KeyOrButton(InputKind.MOUSE, name)

    @property
    def is_key(self) -> bool:
        return self.kind == InputKind.KEY

    @property
    def is_button(self) -> bool:
        return self.kind == InputKind.MOUSE

    def __str__(self) -> str:
        if self.is_button:
            return f"mouse:{self.name}"
        return self.name


class InputEventType(Enum):
    """Kinds of raw input reported by the listener."""
    KEY_DOWN = "key_down"
    KEY_UP = "key_up"
    BUTTON_DOWN = "button_down"
    BUTTON_UP = "button_up"
    POINTER_MOVE = "pointer_move"
    WHEEL = "wheel"


@dataclass(frozen=True)
class InputEvent:
    """
    One occurrence of physical input.

    For WHEEL events ``x`` and ``y`` carry the scroll deltas.
    """
    event_type: InputEventType
    target: Optional[KeyOrButton] = None
    x: float = 0.0
    y: float = 0.0

    @property
    def is_press(self) -> bool:
        return self.event_type in (InputEventType.KEY_DOWN, InputEventType.BUTTON_DOWN)

    @property
    def is_release(self) -> bool:
        return self.event_type in (InputEventType.KEY_UP, InputEventType.BUTTON_UP)

    @staticmethod
    def press(target: KeyOrButton) -> "InputEvent":
        event_type = InputEventType.KEY_DOWN if target.is_key else InputEventType.BUTTON_DOWN
        return InputEvent(event_type, target)

    @staticmethod
    def release(target: KeyOrButton) -> "InputEvent":
        event_type = InputEventType.KEY_UP if target.is_key else InputEventType.BUTTON_UP
        return InputEvent(event_type, target)

    @staticmethod
    def move(x: float, y: float) -> "InputEvent":
        return InputEvent(InputEventType.POINTER_MOVE, None, x, y)

    @staticmethod
    def wheel(dx: float, dy: float) -> "InputEvent":
        return InputEvent(InputEventType.WHEEL, None, dx, dy)


@dataclass(frozen=True)
class CoordinateTransform:
    """
    Maps logical script coordinates to physical screen coordinates.

    physical = (logical + offset) / scale
    """
    offset_x: float = 0.0
    offset_y: float = 0.0
    scale: float = 1.0

    def __post_init__(self):
        if self.scale <= 0:
            raise ValueError("Scale must be positive")

    def correct(self, x: float, y: float) -> Tuple[float, float]:
        return ((x + self.offset_x) / self.scale, (y + self.offset_y) / self.scale)


@dataclass
class OverlaySettings:
    """Preferences for the window listing running scripts."""

    enabled: bool = True
    x: int = 0
    y: int = 0
    font_size: int = 16
    font_color: str = "#ff3030"
    border: bool = False
    alpha: float = 0.85

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "x": self.x,
            "y": self.y,
            "font_size": self.font_size,
            "font_color": self.font_color,
            "border": self.border,
            "alpha": self.alpha,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "OverlaySettings":
        """Create overlay settings from a JSON dictionary."""
        alpha = float(data.get("alpha", 0.85) or 0.85)
        return OverlaySettings(
            enabled=bool(data.get("enabled", True)),
            x=int(data.get("x", 0) or 0),
            y=int(data.get("y", 0) or 0),
            font_size=int(data.get("font_size", 16) or 16),
            font_color=str(data.get("font_color", "#ff3030") or "#ff3030"),
            border=bool(data.get("border", False)),
            alpha=min(max(alpha, 0.1), 1.0),
        )
