import pytest

from macros.actions import ExitAction, PrimitiveAction, PrimitiveKind, SleepAction
from macros.compiler import compile_events, validate_blocks
from macros.errors import CompileError, ConfigError
from macros.script_model import (
    Block,
    Click,
    ClickDown,
    ClickOn,
    ClickTo,
    ClickUp,
    Exit,
    KeyDown,
    Keys,
    KeyTap,
    KeyUp,
    Move,
    Scroll,
    Sleep,
)
from models import CoordinateTransform, KeyOrButton

A = KeyOrButton.key("a")
B = KeyOrButton.key("b")
LEFT = KeyOrButton.button("left")
IDENTITY = CoordinateTransform()


def test_keys_presses_all_before_releasing():
    program = compile_events([Keys((A, B))], {}, IDENTITY)

    assert program == (
        PrimitiveAction.press(A),
        PrimitiveAction.press(B),
        PrimitiveAction.release(A),
        PrimitiveAction.release(B),
    )


def test_simple_event_expansions():
    program = compile_events(
        [Click(LEFT), ClickDown(LEFT), ClickUp(LEFT), KeyTap(A), KeyDown(B), KeyUp(B), Scroll(0, -3), Exit()],
        {},
        IDENTITY,
    )

    assert program == (
        PrimitiveAction.press(LEFT),
        PrimitiveAction.release(LEFT),
        PrimitiveAction.press(LEFT),
        PrimitiveAction.release(LEFT),
        PrimitiveAction.press(A),
        PrimitiveAction.release(A),
        PrimitiveAction.press(B),
        PrimitiveAction.release(B),
        PrimitiveAction.wheel(0, -3),
        ExitAction(),
    )


def test_click_on_applies_coordinate_correction():
    transform = CoordinateTransform(offset_x=10, offset_y=10, scale=2.0)

    program = compile_events([ClickOn(LEFT, 100, 100)], {}, transform)

    assert program[0] == PrimitiveAction.move(55, 55)
    assert program[1:] == (PrimitiveAction.press(LEFT), PrimitiveAction.release(LEFT))


def test_click_to_drags_with_button_held():
    transform = CoordinateTransform(scale=2.0)

    program = compile_events([ClickTo(LEFT, 10, 20, 30, 40)], {}, transform)

    assert program == (
        PrimitiveAction.move(5, 10),
        PrimitiveAction.press(LEFT),
        PrimitiveAction.move(15, 20),
        PrimitiveAction.release(LEFT),
    )


def test_move_is_corrected():
    transform = CoordinateTransform(offset_x=-20, offset_y=0, scale=1.0)

    assert compile_events([Move(120, 80)], {}, transform) == (PrimitiveAction.move(100, 80),)


def test_named_block_is_repeated_with_sleeps_between_copies():
    blocks = {"X": (KeyTap(A),)}

    program = compile_events([Block(block="X", repeat=3, sleep=50)], blocks, IDENTITY)

    p = (PrimitiveAction.press(A), PrimitiveAction.release(A))
    assert program == p + (SleepAction(50),) + p + (SleepAction(50),) + p


def test_zero_sleeps_are_removed():
    blocks = {"X": (KeyTap(A), Sleep(0))}

    program = compile_events([Sleep(0), Block(block="X", repeat=2, sleep=0), Sleep(5)], blocks, IDENTITY)

    assert SleepAction(0) not in program
    assert program == (
        PrimitiveAction.press(A),
        PrimitiveAction.release(A),
        PrimitiveAction.press(A),
        PrimitiveAction.release(A),
        SleepAction(5),
    )


def test_inline_block():
    program = compile_events([Block(block=(KeyTap(B),), repeat=2, sleep=10)], {}, IDENTITY)

    assert program == (
        PrimitiveAction.press(B),
        PrimitiveAction.release(B),
        SleepAction(10),
        PrimitiveAction.press(B),
        PrimitiveAction.release(B),
    )


def test_block_with_zero_repeat_expands_to_nothing():
    assert compile_events([Block(block=(KeyTap(A),), repeat=0)], {}, IDENTITY) == ()


def test_two_level_block_reference_compiles():
    blocks = {"A": (Block(block="B"), KeyTap(A)), "B": (KeyTap(B),)}

    program = compile_events([Block(block="A")], blocks, IDENTITY)

    assert [a.kind for a in program] == [PrimitiveKind.PRESS, PrimitiveKind.RELEASE] * 2
    assert program[0].target == B and program[2].target == A


def test_direct_self_reference_fails():
    blocks = {"loop": (KeyTap(A), Block(block="loop"))}

    with pytest.raises(CompileError, match="references itself"):
        compile_events([Block(block="loop")], blocks, IDENTITY)


def test_indirect_cycle_fails():
    blocks = {"A": (Block(block="B"),), "B": (Block(block="C"),), "C": (Block(block="A"),)}

    with pytest.raises(CompileError, match="A -> B -> C -> A"):
        compile_events([Block(block="A")], blocks, IDENTITY)


def test_self_reference_inside_inline_block_fails():
    blocks = {"X": (Block(block=(Block(block="X"),)),)}

    with pytest.raises(CompileError):
        validate_blocks(blocks, IDENTITY)


def test_same_block_used_twice_is_not_a_cycle():
    blocks = {"X": (KeyTap(A),), "Y": (Block(block="X"), Block(block="X"))}

    program = compile_events([Block(block="Y")], blocks, IDENTITY)

    assert len(program) == 4


def test_undefined_block_fails_with_config_error_family():
    with pytest.raises(ConfigError, match="Undefined block"):
        compile_events([Block(block="missing")], {}, IDENTITY)


def test_compiled_program_is_immutable_tuple():
    program = compile_events([KeyTap(A)], {}, IDENTITY)

    assert isinstance(program, tuple)
    with pytest.raises(AttributeError):
        program[0].kind = PrimitiveKind.RELEASE
