"""
Script runtime: starts, cancels and drives playback of compiled programs.

Each fire of a script spawns a PlaybackTask running in its own worker
thread. Cancellation is cooperative: a per-task event is checked at every
wait, so an in-flight action finishes and the pending wait is cut short.
"""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from models import KeyOrButton
from .actions import ActionSink, ExitAction, PlaybackContext, PrimitiveAction, Program, SleepAction
from .errors import SynthesisError
from .script_model import ScriptDefinition

# Settle time after a pointer move before the next action
MOVE_SETTLE_SECONDS = 0.0001

StatusCallback = Callable[[str, bool], None]
LogCallback = Callable[[str], None]


def _exit_process() -> None:
    os._exit(0)


def play_program(
    program: Program,
    ctx: PlaybackContext,
    sink: ActionSink,
    delay_seconds: float,
    exit_hook: Callable[[], None] = _exit_process,
) -> bool:
    """
    Play one pass of a program.

    Returns False when playback was cancelled before the pass completed.
    """
    for action in program:
        if isinstance(action, PrimitiveAction):
            try:
                sink.perform(action)
            except SynthesisError as e:
                ctx.log(f"Action skipped: {e}")
            wait = MOVE_SETTLE_SECONDS if action.is_pointer_move else delay_seconds
            if not ctx.sleep(wait):
                return False
        elif isinstance(action, SleepAction):
            if not ctx.sleep_ms(action.milliseconds):
                return False
        elif isinstance(action, ExitAction):
            ctx.log("Exit action reached, terminating")
            exit_hook()
            return False
        else:
            raise TypeError(f"Unsupported compiled action: {action!r}")
    return not ctx.cancelled


class PlaybackTask:
    """One playback run of a script in a daemon worker thread."""

    def __init__(
        self,
        definition: ScriptDefinition,
        sink: ActionSink,
        delay_ms: int,
        on_finished: Optional[Callable[[], None]] = None,
        logger: Optional[LogCallback] = None,
        exit_hook: Callable[[], None] = _exit_process,
    ):
        self._definition = definition
        self._sink = sink
        self._delay_seconds = max(delay_ms, 0) / 1000.0
        self._on_finished = on_finished
        self._logger = logger
        self._exit_hook = exit_hook
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.iterations = 0

    @property
    def title(self) -> str:
        return self._definition.title

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._worker, name=f"playback:{self.title}", daemon=True
        )
        self._thread.start()

    def cancel(self, timeout: Optional[float] = 2.0) -> bool:
        """Signal cancellation and wait for the worker; False if it is still alive."""
        self._stop.set()
        if self._thread and self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)
        return not self.is_running()

    @property
    def cancelled(self) -> bool:
        return self._stop.is_set()

    def is_running(self) -> bool:
        return bool(self._thread and self._thread.is_alive())

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread:
            self._thread.join(timeout=timeout)

    def _log(self, msg: str) -> None:
        if self._logger:
            self._logger(f"[{self.title}] {msg}")

    def _worker(self) -> None:
        ctx = PlaybackContext(self._stop, logger=self._log)
        program = self._definition.program
        repeat = self._definition.repeat
        try:
            if repeat == 0:
                if not program:
                    ctx.wait_cancelled()
                    return
                while play_program(program, ctx, self._sink, self._delay_seconds, self._exit_hook):
                    self.iterations += 1
                return
            for _ in range(repeat):
                if not play_program(program, ctx, self._sink, self._delay_seconds, self._exit_hook):
                    return
                self.iterations += 1
        except Exception as e:  # pragma: no cover - runtime path
            self._log(f"Playback error: {e}")
        if not self._stop.is_set() and self._on_finished:
            self._on_finished()


@dataclass(eq=False)
class ScriptInstance:
    """Mutable runtime state of one script: held trigger flags and its task."""

    definition: ScriptDefinition
    held: Dict[KeyOrButton, bool] = field(default_factory=dict)
    task: Optional[PlaybackTask] = None

    def __post_init__(self):
        if not self.held:
            self.held = {member: False for member in self.definition.trigger}

    @property
    def title(self) -> str:
        return self.definition.title

    @property
    def all_held(self) -> bool:
        return all(self.held.values())

    def press(self, member: KeyOrButton) -> bool:
        """Mark a member held; True when this completes the chord."""
        if member not in self.held or self.held[member]:
            return False
        self.held[member] = True
        return self.all_held

    def release(self, member: KeyOrButton) -> None:
        if member in self.held:
            self.held[member] = False

    def is_running(self) -> bool:
        return bool(self.task and self.task.is_running())


class ScriptRuntime:
    """
    Owns starting and stopping of playback tasks.

    ``fire`` is called from the single router thread only, which is the
    sole writer of each instance's task handle.
    """

    def __init__(
        self,
        sink: ActionSink,
        default_delay_ms: int,
        status_callback: Optional[StatusCallback] = None,
        logger: Optional[LogCallback] = None,
        exit_hook: Callable[[], None] = _exit_process,
        join_timeout: float = 2.0,
    ):
        self._sink = sink
        self._default_delay_ms = default_delay_ms
        self._status_callback = status_callback
        self._logger = logger
        self._exit_hook = exit_hook
        self._join_timeout = join_timeout
        self._instances: List[ScriptInstance] = []

    def fire(self, instance: ScriptInstance) -> None:
        task = instance.task
        instance.task = None
        if task is not None and task.is_running():
            if not task.cancel(self._join_timeout):
                self._log(f"[{instance.title}] previous run did not stop within {self._join_timeout}s")
            if instance.definition.is_toggle:
                self._notify(instance.title, False)
                return

        self._notify(instance.title, True)
        definition = instance.definition
        delay_ms = definition.delay_ms if definition.delay_ms is not None else self._default_delay_ms
        new_task = PlaybackTask(
            definition,
            self._sink,
            delay_ms,
            on_finished=lambda: self._notify(definition.title, False),
            logger=self._logger,
            exit_hook=self._exit_hook,
        )
        instance.task = new_task
        if instance not in self._instances:
            self._instances.append(instance)
        new_task.start()

    def stop_all(self) -> None:
        """Cancel every running task, reporting each as stopped."""
        for instance in self._instances:
            task = instance.task
            instance.task = None
            if task is not None and task.is_running():
                task.cancel(self._join_timeout)
                self._notify(instance.title, False)

    def running_titles(self) -> List[str]:
        return [i.title for i in self._instances if i.is_running()]

    def _notify(self, title: str, running: bool) -> None:
        if self._status_callback:
            self._status_callback(title, running)

    def _log(self, msg: str) -> None:
        if self._logger:
            self._logger(msg)
