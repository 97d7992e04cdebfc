import json

import keymap
from input_tools import CLEAR_SEQUENCE, EventPrinter, PointTracker, Recorder
from macros.script_model import ClickDown, ClickUp, KeyDown, KeyUp, Move, Scroll, Sleep, parse_events
from models import InputEvent, KeyOrButton

A = KeyOrButton.key("a")
ALT_GR = KeyOrButton.key("alt_gr")
ESC = KeyOrButton.key("esc")
LEFT = KeyOrButton.button("left")


class _ManualClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_event_printer_reports_releases_only():
    lines = []
    printer = EventPrinter(output=lines.append)

    printer(InputEvent.press(A))
    printer(InputEvent.release(A))
    printer(InputEvent.release(LEFT))
    printer(InputEvent.move(1, 2))

    assert lines == ["key -> a", "mouse -> left"]


def test_point_tracker_prints_and_clears(monkeypatch):
    monkeypatch.setattr(keymap, "mouse", None)
    lines = []
    cleared = []
    tracker = PointTracker(ALT_GR, ESC, output=lines.append, clear=lambda: cleared.append(True))

    tracker(InputEvent.move(120, 45.5))
    tracker(InputEvent.press(ALT_GR))
    tracker(InputEvent.release(ALT_GR))
    tracker(InputEvent.release(ESC))

    assert lines == ["120, 45.5"]
    assert cleared == [True]


def test_point_tracker_default_clear_writes_ansi_sequence(monkeypatch, capsys):
    monkeypatch.setattr(keymap, "mouse", None)
    tracker = PointTracker(ALT_GR, ESC, output=lambda _line: None)

    tracker(InputEvent.release(ESC))

    assert capsys.readouterr().out == CLEAR_SEQUENCE


def test_recorder_builds_timed_event_list():
    clock = _ManualClock()
    finished = []
    recorder = Recorder(on_finished=finished.append, clock=clock)

    recorder(InputEvent.move(300, 200))
    clock.now = 0.25
    recorder(InputEvent.press(LEFT))
    clock.now = 0.30
    recorder(InputEvent.release(LEFT))
    clock.now = 1.0
    recorder(InputEvent.press(A))
    recorder(InputEvent.release(A))
    recorder(InputEvent.wheel(0, -2))

    assert recorder.events == [
        Sleep(250), Move(300, 200), ClickDown(LEFT),
        Sleep(50), Move(300, 200), ClickUp(LEFT),
        Sleep(700), KeyDown(A),
        Sleep(0), KeyUp(A),
        Sleep(0), Scroll(0, -2),
    ]
    assert finished == []


def test_recorder_finishes_in_top_left_corner():
    finished = []
    recorder = Recorder(on_finished=finished.append, clock=_ManualClock())

    recorder(InputEvent.press(A))
    recorder(InputEvent.move(0.2, 0.3))
    recorder(InputEvent.release(A))

    assert recorder.finished
    assert finished == [[Sleep(0), KeyDown(A)]]
    assert len(recorder.events) == 2


def test_recorder_export_is_loadable_script_json():
    recorder = Recorder(clock=_ManualClock())
    recorder(InputEvent.press(A))

    exported = json.loads(recorder.export())

    assert exported == [{"type": "sleep", "ms": 0}, {"type": "key_down", "key": "a"}]
    assert list(parse_events(exported)) == recorder.events
