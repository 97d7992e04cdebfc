"""
Script data model: declared events and compiled script definitions.

Declared events are what a config file (or the recorder) describes. Each
variant is its own small dataclass; ``ScriptEvent.from_dict`` dispatches on
the JSON ``type`` field.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, List, Optional, Sequence, Tuple, Union

import keymap
from models import KeyOrButton
from .actions import Program
from .errors import ConfigError


@dataclass(frozen=True)
class ScriptEvent:
    """Common base for all declared events."""

    def to_dict(self) -> Dict[str, Any]:  # pragma: no cover - overridden
        raise NotImplementedError

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "ScriptEvent":
        if not isinstance(data, dict):
            raise ConfigError(f"Event must be an object, got: {data!r}")
        event_type = str(data.get("type", "")).strip().lower()
        try:
            if event_type == "click":
                return Click(button=_button(data))
            if event_type == "click_up":
                return ClickUp(button=_button(data))
            if event_type == "click_down":
                return ClickDown(button=_button(data))
            if event_type == "click_on":
                return ClickOn(button=_button(data), x=_number(data, "x"), y=_number(data, "y"))
            if event_type == "click_to":
                return ClickTo(
                    button=_button(data),
                    x=_number(data, "x"),
                    y=_number(data, "y"),
                    x2=_number(data, "x2"),
                    y2=_number(data, "y2"),
                )
            if event_type == "key_up":
                return KeyUp(key=keymap.parse_key(data.get("key")))
            if event_type == "key_down":
                return KeyDown(key=keymap.parse_key(data.get("key")))
            if event_type == "key":
                return KeyTap(key=keymap.parse_key(data.get("key")))
            if event_type == "keys":
                raw_keys = data.get("keys")
                if not isinstance(raw_keys, list) or not raw_keys:
                    raise ConfigError("'keys' requires a non-empty list")
                return Keys(keys=tuple(keymap.parse_key(k) for k in raw_keys))
            if event_type == "move":
                return Move(x=_number(data, "x"), y=_number(data, "y"))
            if event_type == "scroll":
                return Scroll(dx=int(data.get("dx", 0) or 0), dy=int(data.get("dy", 0) or 0))
            if event_type == "sleep":
                return Sleep(milliseconds=_non_negative(data, "ms", 0))
            if event_type == "exit":
                return Exit()
            if event_type == "block":
                return _block_from_dict(data)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid '{event_type}' event: {e}")
        raise ConfigError(f"Unknown event type: {event_type or '<missing>'}")


@dataclass(frozen=True)
class Click(ScriptEvent):
    button: KeyOrButton

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "click", "button": self.button.name}


@dataclass(frozen=True)
class ClickUp(ScriptEvent):
    button: KeyOrButton

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "click_up", "button": self.button.name}


@dataclass(frozen=True)
class ClickDown(ScriptEvent):
    button: KeyOrButton

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "click_down", "button": self.button.name}


@dataclass(frozen=True)
class ClickOn(ScriptEvent):
    button: KeyOrButton
    x: float
    y: float

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "click_on", "button": self.button.name, "x": self.x, "y": self.y}


@dataclass(frozen=True)
class ClickTo(ScriptEvent):
    """Drag from (x, y) to (x2, y2) with the button held."""
    button: KeyOrButton
    x: float
    y: float
    x2: float
    y2: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "click_to",
            "button": self.button.name,
            "x": self.x,
            "y": self.y,
            "x2": self.x2,
            "y2": self.y2,
        }


@dataclass(frozen=True)
class KeyUp(ScriptEvent):
    key: KeyOrButton

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "key_up", "key": self.key.name}


@dataclass(frozen=True)
class KeyDown(ScriptEvent):
    key: KeyOrButton

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "key_down", "key": self.key.name}


@dataclass(frozen=True)
class KeyTap(ScriptEvent):
    key: KeyOrButton

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "key", "key": self.key.name}


@dataclass(frozen=True)
class Keys(ScriptEvent):
    """Press every key in order, then release them in the same order."""
    keys: Tuple[KeyOrButton, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "keys", "keys": [k.name for k in self.keys]}


@dataclass(frozen=True)
class Move(ScriptEvent):
    x: float
    y: float

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "move", "x": self.x, "y": self.y}


@dataclass(frozen=True)
class Scroll(ScriptEvent):
    dx: int
    dy: int

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "scroll", "dx": self.dx, "dy": self.dy}


@dataclass(frozen=True)
class Sleep(ScriptEvent):
    milliseconds: int

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "sleep", "ms": self.milliseconds}


@dataclass(frozen=True)
class Exit(ScriptEvent):
    def to_dict(self) -> Dict[str, Any]:
        return {"type": "exit"}


@dataclass(frozen=True)
class Block(ScriptEvent):
    """
    A reusable sub-sequence, either looked up by name or given inline.

    Expanded ``repeat`` times with ``sleep`` milliseconds between copies.
    """
    block: Union[str, Tuple[ScriptEvent, ...]]
    repeat: int = 1
    sleep: int = 0

    @property
    def is_named(self) -> bool:
        return isinstance(self.block, str)

    def to_dict(self) -> Dict[str, Any]:
        body: Any = self.block if isinstance(self.block, str) else [e.to_dict() for e in self.block]
        return {"type": "block", "repeat": self.repeat, "sleep": self.sleep, "block": body}


@dataclass(frozen=True)
class ScriptDefinition:
    """A loaded script: its trigger chord and compiled program."""

    title: str
    trigger: FrozenSet[KeyOrButton]
    program: Program
    repeat: int = 0  # 0 means toggle: run until fired again
    delay_ms: Optional[int] = None  # None means use the global delay

    @property
    def is_toggle(self) -> bool:
        return self.repeat == 0


def parse_events(raw_events: Any, where: str = "events") -> Tuple[ScriptEvent, ...]:
    """Parse a JSON list of event objects."""
    if raw_events is None:
        return ()
    if not isinstance(raw_events, list):
        raise ConfigError(f"{where} must be a list")
    return tuple(ScriptEvent.from_dict(raw) for raw in raw_events)


def events_to_dicts(events: Sequence[ScriptEvent]) -> List[Dict[str, Any]]:
    return [event.to_dict() for event in events]


def _button(data: Dict[str, Any]) -> KeyOrButton:
    return keymap.parse_button(data.get("button", "left") or "left")


def _number(data: Dict[str, Any], name: str) -> float:
    if name not in data:
        raise ValueError(f"'{name}' is required")
    return float(data[name])


def _non_negative(data: Dict[str, Any], name: str, default: int) -> int:
    value = int(data.get(name, default) or 0)
    if value < 0:
        raise ValueError(f"'{name}' cannot be negative")
    return value


def _block_from_dict(data: Dict[str, Any]) -> Block:
    raw_block = data.get("block")
    body: Union[str, Tuple[ScriptEvent, ...]]
    if isinstance(raw_block, str):
        if not raw_block.strip():
            raise ConfigError("'block' name cannot be empty")
        body = raw_block.strip()
    elif isinstance(raw_block, list):
        body = parse_events(raw_block, where="inline block")
    else:
        raise ConfigError("'block' must be a block name or a list of events")
    return Block(
        block=body,
        repeat=_non_negative(data, "repeat", 1),
        sleep=_non_negative(data, "sleep", 0),
    )
