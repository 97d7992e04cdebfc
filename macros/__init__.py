"""
Macros package: trigger matching, script compilation and playback.

Key parts
---------
- script_model: declared script events and compiled script definitions
- compiler:     expansion of events and blocks into flat programs
- actions:      compiled actions, the pynput action sink, playback context
- engine:       runtime that starts/cancels playback tasks
- router:       matches live input against trigger chords
- listener:     global input capture and the single-consumer event pump
"""

from .compiler import compile_events
from .engine import ScriptInstance, ScriptRuntime
from .errors import CompileError, ConfigError, ListenError, SynthesisError
from .router import TriggerRouter
from .script_model import ScriptDefinition, ScriptEvent

__all__ = [
    "compile_events",
    "CompileError",
    "ConfigError",
    "ListenError",
    "ScriptDefinition",
    "ScriptEvent",
    "ScriptInstance",
    "ScriptRuntime",
    "SynthesisError",
    "TriggerRouter",
]
