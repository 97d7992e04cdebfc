from conftest import make_definition
from macros.engine import ScriptInstance
from macros.router import TriggerRouter
from macros.script_model import ScriptDefinition
from models import InputEvent, KeyOrButton

A = KeyOrButton.key("a")
B = KeyOrButton.key("b")
C = KeyOrButton.key("c")
LEFT = KeyOrButton.button("left")


def _router(*definitions):
    fired = []
    instances = [ScriptInstance(d) for d in definitions]
    router = TriggerRouter(instances, lambda instance: fired.append(instance.title))
    return router, fired


def test_fires_only_when_every_member_is_held():
    router, fired = _router(make_definition("combo", trigger=("a", "b", "c")))

    router.handle(InputEvent.press(A))
    router.handle(InputEvent.press(B))
    assert fired == []

    router.handle(InputEvent.press(C))
    assert fired == ["combo"]


def test_release_never_fires_and_repress_fires_again():
    router, fired = _router(make_definition("combo", trigger=("a", "b")))

    router.handle(InputEvent.press(A))
    router.handle(InputEvent.press(B))
    router.handle(InputEvent.release(B))
    assert fired == ["combo"]

    router.handle(InputEvent.press(B))
    assert fired == ["combo", "combo"]


def test_partial_hold_after_release_does_not_fire():
    router, fired = _router(make_definition("combo", trigger=("a", "b")))

    router.handle(InputEvent.press(A))
    router.handle(InputEvent.release(A))
    router.handle(InputEvent.press(B))

    assert fired == []


def test_auto_repeat_of_held_key_does_not_refire():
    router, fired = _router(make_definition("single", trigger=("a",)))

    router.handle(InputEvent.press(A))
    router.handle(InputEvent.press(A))
    router.handle(InputEvent.press(A))

    assert fired == ["single"]


def test_mouse_buttons_take_part_in_chords():
    router, fired = _router(ScriptDefinition(title="mixed", trigger=frozenset({A, LEFT}), program=()))

    router.handle(InputEvent.press(LEFT))
    router.handle(InputEvent.press(A))

    assert fired == ["mixed"]


def test_shared_member_updates_every_script():
    router, fired = _router(
        make_definition("first", trigger=("a", "b")),
        make_definition("second", trigger=("a", "c")),
    )

    router.handle(InputEvent.press(A))
    router.handle(InputEvent.press(B))
    router.handle(InputEvent.press(C))

    assert fired == ["first", "second"]


def test_unrelated_input_is_ignored():
    router, fired = _router(make_definition("single", trigger=("a",)))

    router.handle(InputEvent.press(KeyOrButton.key("z")))
    router.handle(InputEvent.move(10, 10))
    router.handle(InputEvent.wheel(0, 1))

    assert fired == []
    assert router.members == frozenset({A})
    assert all(not flag for i in router.instances for flag in i.held.values())
