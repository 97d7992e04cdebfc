"""Loading of macro configuration files."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple

import keymap
from macros.compiler import compile_events, validate_blocks
from macros.errors import ConfigError
from macros.script_model import ScriptDefinition, ScriptEvent, parse_events
from models import CoordinateTransform, OverlaySettings

DEFAULT_DELAY_MS = 20


@dataclass
class MacroConfiguration:
    """Everything the runtime needs, built once at load."""

    delay_ms: int = DEFAULT_DELAY_MS
    transform: CoordinateTransform = field(default_factory=CoordinateTransform)
    overlay: OverlaySettings = field(default_factory=OverlaySettings)
    blocks: Dict[str, Tuple[ScriptEvent, ...]] = field(default_factory=dict)
    scripts: List[ScriptDefinition] = field(default_factory=list)

    def titles(self) -> List[str]:
        return [script.title for script in self.scripts]


class ConfigManager:
    """Reads a JSON macro configuration and compiles its scripts."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> MacroConfiguration:
        """Load and compile the configuration; raises ConfigError on any problem."""
        try:
            content = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read {self._path}: {e}")
        try:
            raw_data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ConfigError(f"{self._path} is not valid JSON: {e}")
        return self.parse(raw_data)

    @staticmethod
    def parse(data: Any) -> MacroConfiguration:
        """Build a configuration from already decoded JSON data."""
        if not isinstance(data, dict):
            raise ConfigError("Config file has invalid structure")

        delay_ms = _int_field(data, "delay", DEFAULT_DELAY_MS)
        transform = _transform_from_dict(data)

        overlay_data = data.get("overlay") or {}
        if not isinstance(overlay_data, dict):
            raise ConfigError("'overlay' must be an object")
        try:
            overlay = OverlaySettings.from_dict(overlay_data)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid overlay settings: {e}")

        raw_blocks = data.get("blocks") or {}
        if not isinstance(raw_blocks, dict):
            raise ConfigError("'blocks' must map block names to event lists")
        blocks = {
            str(name): parse_events(events, where=f"block '{name}'")
            for name, events in raw_blocks.items()
        }
        validate_blocks(blocks, transform)

        raw_scripts = data.get("scripts") or []
        if not isinstance(raw_scripts, list):
            raise ConfigError("'scripts' must be a list")

        scripts: List[ScriptDefinition] = []
        seen_titles = set()
        for index, raw in enumerate(raw_scripts, start=1):
            script = _script_from_dict(raw, index, blocks, transform)
            if script.title in seen_titles:
                raise ConfigError(f"Duplicate script title: '{script.title}'")
            seen_titles.add(script.title)
            scripts.append(script)

        return MacroConfiguration(
            delay_ms=delay_ms,
            transform=transform,
            overlay=overlay,
            blocks=blocks,
            scripts=scripts,
        )


def _int_field(data: Dict[str, Any], name: str, default: int) -> int:
    raw = data.get(name, default)
    if raw is None:
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ConfigError(f"'{name}' must be an integer, got {raw!r}")
    if value < 0:
        raise ConfigError(f"'{name}' cannot be negative")
    return value


def _transform_from_dict(data: Dict[str, Any]) -> CoordinateTransform:
    offset = data.get("offset", [0, 0]) or [0, 0]
    if not isinstance(offset, (list, tuple)) or len(offset) != 2:
        raise ConfigError("'offset' must be a [x, y] pair")
    try:
        return CoordinateTransform(
            offset_x=float(offset[0]),
            offset_y=float(offset[1]),
            scale=float(data.get("scaling", 1.0)),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid coordinate correction: {e}")


def _script_from_dict(
    raw: Any,
    index: int,
    blocks: Dict[str, Tuple[ScriptEvent, ...]],
    transform: CoordinateTransform,
) -> ScriptDefinition:
    if not isinstance(raw, dict):
        raise ConfigError(f"Script #{index} must be an object")

    title = str(raw.get("title", "") or "").strip()
    if not title:
        raise ConfigError(f"Script #{index} has no title")

    raw_trigger = raw.get("trigger")
    if not isinstance(raw_trigger, list) or not raw_trigger:
        raise ConfigError(f"Script '{title}' needs a non-empty trigger list")
    try:
        trigger = frozenset(keymap.parse_trigger(token) for token in raw_trigger)
    except ValueError as e:
        raise ConfigError(f"Script '{title}': {e}")

    repeat = _int_field(raw, "repeat", 0)
    delay_raw = raw.get("delay")
    delay_ms = None if delay_raw is None else _int_field(raw, "delay", 0)

    try:
        events = parse_events(raw.get("events"), where=f"script '{title}' events")
        program = compile_events(events, blocks, transform)
    except ConfigError as e:
        raise type(e)(f"Script '{title}': {e}") from e

    return ScriptDefinition(
        title=title,
        trigger=trigger,
        program=program,
        repeat=repeat,
        delay_ms=delay_ms,
    )
