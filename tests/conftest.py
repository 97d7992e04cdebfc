import threading
import time

import pytest

from macros.actions import ActionSink
from macros.errors import SynthesisError
from macros.script_model import ScriptDefinition
from models import KeyOrButton


class RecordingSink(ActionSink):
    """Action sink that remembers every action and can fail on demand."""

    def __init__(self, fail_on=None):
        self.actions = []
        self.fail_on = fail_on
        self._lock = threading.Lock()

    def perform(self, action):
        with self._lock:
            self.actions.append(action)
        if self.fail_on is not None and self.fail_on(action):
            raise SynthesisError(f"{action} failed")

    def count(self):
        with self._lock:
            return len(self.actions)


class StatusRecorder:
    """Collects (title, running) notifications."""

    def __init__(self):
        self.calls = []
        self.stopped = threading.Event()

    def __call__(self, title, running):
        self.calls.append((title, running))
        if not running:
            self.stopped.set()


def wait_until(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


def make_definition(title="script", trigger=("a",), program=(), repeat=0, delay_ms=None):
    return ScriptDefinition(
        title=title,
        trigger=frozenset(KeyOrButton.key(k) for k in trigger),
        program=tuple(program),
        repeat=repeat,
        delay_ms=delay_ms,
    )


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def status():
    return StatusRecorder()
