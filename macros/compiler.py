"""
Script compiler: expands declared events into a flat, immutable program.

Named blocks are resolved against a table supplied once per compile. Block
resolution keeps the chain of names currently being expanded, so a block
that reaches itself again (directly or through other blocks) is rejected.
"""

from __future__ import annotations

from typing import List, Mapping, Sequence, Tuple

from models import CoordinateTransform
from .actions import CompiledAction, ExitAction, PrimitiveAction, Program, SleepAction
from .errors import CompileError
from .script_model import (
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
    ScriptEvent,
    Sleep,
)

BlockTable = Mapping[str, Sequence[ScriptEvent]]


def compile_events(
    events: Sequence[ScriptEvent],
    blocks: BlockTable,
    transform: CoordinateTransform,
) -> Program:
    """Compile declared events into a program with zero-length sleeps removed."""
    actions = _expand(events, blocks, transform, ())
    return tuple(a for a in actions if not (isinstance(a, SleepAction) and a.milliseconds == 0))


def validate_blocks(blocks: BlockTable, transform: CoordinateTransform) -> None:
    """Compile every named block once so broken blocks fail at load time."""
    for name in blocks:
        _expand((Block(block=name),), blocks, transform, ())


def _expand(
    events: Sequence[ScriptEvent],
    blocks: BlockTable,
    transform: CoordinateTransform,
    chain: Tuple[str, ...],
) -> List[CompiledAction]:
    out: List[CompiledAction] = []
    for event in events:
        out.extend(_expand_one(event, blocks, transform, chain))
    return out


def _expand_one(
    event: ScriptEvent,
    blocks: BlockTable,
    transform: CoordinateTransform,
    chain: Tuple[str, ...],
) -> List[CompiledAction]:
    if isinstance(event, Click):
        return [PrimitiveAction.press(event.button), PrimitiveAction.release(event.button)]
    if isinstance(event, ClickDown):
        return [PrimitiveAction.press(event.button)]
    if isinstance(event, ClickUp):
        return [PrimitiveAction.release(event.button)]
    if isinstance(event, ClickOn):
        return [
            PrimitiveAction.move(*transform.correct(event.x, event.y)),
            PrimitiveAction.press(event.button),
            PrimitiveAction.release(event.button),
        ]
    if isinstance(event, ClickTo):
        return [
            PrimitiveAction.move(*transform.correct(event.x, event.y)),
            PrimitiveAction.press(event.button),
            PrimitiveAction.move(*transform.correct(event.x2, event.y2)),
            PrimitiveAction.release(event.button),
        ]
    if isinstance(event, KeyDown):
        return [PrimitiveAction.press(event.key)]
    if isinstance(event, KeyUp):
        return [PrimitiveAction.release(event.key)]
    if isinstance(event, KeyTap):
        return [PrimitiveAction.press(event.key), PrimitiveAction.release(event.key)]
    if isinstance(event, Keys):
        presses: List[CompiledAction] = [PrimitiveAction.press(k) for k in event.keys]
        releases: List[CompiledAction] = [PrimitiveAction.release(k) for k in event.keys]
        return presses + releases
    if isinstance(event, Move):
        return [PrimitiveAction.move(*transform.correct(event.x, event.y))]
    if isinstance(event, Scroll):
        return [PrimitiveAction.wheel(event.dx, event.dy)]
    if isinstance(event, Sleep):
        return [SleepAction(event.milliseconds)]
    if isinstance(event, Exit):
        return [ExitAction()]
    if isinstance(event, Block):
        return _expand_block(event, blocks, transform, chain)
    raise CompileError(f"Unsupported event: {event!r}")


def _expand_block(
    event: Block,
    blocks: BlockTable,
    transform: CoordinateTransform,
    chain: Tuple[str, ...],
) -> List[CompiledAction]:
    if isinstance(event.block, str):
        name = event.block
        if name in chain:
            if chain[-1] == name:
                raise CompileError(f"Block '{name}' references itself")
            cycle = " -> ".join(chain[chain.index(name):] + (name,))
            raise CompileError(f"Cyclic block reference: {cycle}")
        if name not in blocks:
            raise CompileError(f"Undefined block: '{name}'")
        body = _expand(blocks[name], blocks, transform, chain + (name,))
    else:
        body = _expand(event.block, blocks, transform, chain)

    out: List[CompiledAction] = []
    for index in range(event.repeat):
        if index > 0:
            out.append(SleepAction(event.sleep))
        out.extend(body)
    return out
