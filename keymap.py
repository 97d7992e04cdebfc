"""Key and button naming shared by the config layer, listener and action sink."""

from __future__ import annotations

from typing import Any, Dict

from models import KeyOrButton

try:
    from pynput import keyboard, mouse  # type: ignore
except Exception as _e:  # pragma: no cover - environment dependent
    keyboard = None  # type: ignore
    mouse = None  # type: ignore


MOUSE_PREFIX = "mouse:"
KEY_PREFIX = "key:"

_KEY_ALIASES: Dict[str, str] = {
    "ctrl": "ctrl_l",
    "control": "ctrl_l",
    "alt": "alt_l",
    "option": "alt_l",
    "altgr": "alt_gr",
    "shift": "shift_l",
    "win": "cmd",
    "super": "cmd",
    "command": "cmd",
    "escape": "esc",
    "return": "enter",
    "del": "delete",
    "pgup": "page_up",
    "pgdn": "page_down",
}

_BUTTON_ALIASES: Dict[str, str] = {
    "lmb": "left",
    "rmb": "right",
    "mmb": "middle",
    "wheel": "middle",
}


def parse_key(token: str) -> KeyOrButton:
    """Parse a key name such as ``a``, ``F6``, ``ctrl`` or ``<65>``."""
    name = str(token or "").strip()
    if name.lower().startswith(KEY_PREFIX):
        name = name[len(KEY_PREFIX):].strip()
    if not name:
        raise ValueError("Empty key name")

    if len(name) == 1:
        return KeyOrButton.key(name.lower())

    if name.startswith("<") and name.endswith(">"):
        if not name[1:-1].isdigit():
            raise ValueError(f"Invalid virtual key code: {token}")
        return KeyOrButton.key(name)

    lower_name = name.lower()
    resolved = _KEY_ALIASES.get(lower_name, lower_name)
    if keyboard is not None:
        if resolved not in keyboard.Key.__members__:
            raise ValueError(f"Unknown key: {token}")
        # ctrl_l is an alias of ctrl on some backends; listeners report the canonical member
        resolved = keyboard.Key[resolved].name
    return KeyOrButton.key(resolved)


def parse_button(token: str) -> KeyOrButton:
    """Parse a mouse button name such as ``left`` or ``mouse:x1``."""
    name = str(token or "").strip().lower()
    if name.startswith(MOUSE_PREFIX):
        name = name[len(MOUSE_PREFIX):].strip()
    if not name:
        raise ValueError("Empty button name")

    resolved = _BUTTON_ALIASES.get(name, name)
    if mouse is not None and resolved not in mouse.Button.__members__:
        raise ValueError(f"Unknown mouse button: {token}")
    return KeyOrButton.button(resolved)


def parse_trigger(token: str) -> KeyOrButton:
    """Parse a trigger member; buttons carry the ``mouse:`` prefix."""
    if str(token or "").strip().lower().startswith(MOUSE_PREFIX):
        return parse_button(token)
    return parse_key(token)


def from_pynput_key(key: Any) -> KeyOrButton:
    """Convert a pynput ``Key`` or ``KeyCode`` into a KeyOrButton."""
    name = getattr(key, "name", None)
    if name:
        return KeyOrButton.key(name)

    char = getattr(key, "char", None)
    if char:
        # ctrl+letter arrives as a control character
        if len(char) == 1 and 1 <= ord(char) <= 26:
            return KeyOrButton.key(chr(ord(char) + 96))
        if char.isprintable():
            return KeyOrButton.key(char.lower())

    vk = getattr(key, "vk", None)
    if vk is not None:
        return KeyOrButton.key(f"<{vk}>")
    return KeyOrButton.key(str(key))


def from_pynput_button(button: Any) -> KeyOrButton:
    return KeyOrButton.button(getattr(button, "name", str(button)))


def to_pynput_key(target: KeyOrButton) -> Any:
    if keyboard is None:
        raise RuntimeError("pynput/keyboard backend not available")
    name = target.name
    if name.startswith("<") and name.endswith(">"):
        return keyboard.KeyCode.from_vk(int(name[1:-1]))
    if len(name) == 1:
        return keyboard.KeyCode.from_char(name)
    try:
        return keyboard.Key[name]
    except KeyError:
        raise ValueError(f"Unknown key: {name}")


def to_pynput_button(target: KeyOrButton) -> Any:
    if mouse is None:
        raise RuntimeError("pynput/mouse backend not available")
    try:
        return mouse.Button[target.name]
    except KeyError:
        raise ValueError(f"Unknown mouse button: {target.name}")
