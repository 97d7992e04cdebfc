"""
Trigger router: matches live input against the configured trigger chords.

The router is driven by exactly one consumer thread, so the held flags it
mutates need no locking.
"""

from __future__ import annotations

from typing import Callable, Dict, FrozenSet, List, Sequence

from models import InputEvent, KeyOrButton
from .engine import ScriptInstance

FireCallback = Callable[[ScriptInstance], None]


class TriggerRouter:
    def __init__(self, instances: Sequence[ScriptInstance], fire: FireCallback):
        self._instances = list(instances)
        self._fire = fire
        self._by_member: Dict[KeyOrButton, List[ScriptInstance]] = {}
        for instance in self._instances:
            for member in instance.definition.trigger:
                self._by_member.setdefault(member, []).append(instance)

    @property
    def members(self) -> FrozenSet[KeyOrButton]:
        """Every key/button referenced by any trigger."""
        return frozenset(self._by_member)

    @property
    def instances(self) -> List[ScriptInstance]:
        return list(self._instances)

    def handle(self, event: InputEvent) -> None:
        if event.target is None:
            return
        interested = self._by_member.get(event.target)
        if not interested:
            return

        if event.is_press:
            for instance in interested:
                if instance.press(event.target):
                    self._fire(instance)
        elif event.is_release:
            for instance in interested:
                instance.release(event.target)
