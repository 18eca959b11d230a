"""Declarative condition evaluation.

Supported leaves:
- eq / ne: strict comparison of a path value with a literal
- gt / gte / lt / lte: numeric comparison of a path value
- truthy / falsy: truth test of a path value
- has / lacks: inventory membership
- present / absent: item still lying in the current room
- is_at: item sitting untaken at a given room or container
- once: one-shot gate, passes until its name is consumed

Combinators: and, or, not.

Evaluation never mutates state. A passing ``once`` reports its gate in
``ConditionResult.once_marks``; the caller commits the marks only when it
actually accepts the branch, so rejected branches leave gates untouched.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from .model import Condition, ConditionOp
from .paths import is_truthy, read_path, strict_equals, to_number
from .registry import ContentRegistry
from .state import GameState

__all__ = ["ConditionResult", "evaluate", "check", "check_all", "commit_marks"]


@dataclass
class ConditionResult:
    passed: bool
    once_marks: List[str] = field(default_factory=list)


def _leaf(passed: bool) -> ConditionResult:
    return ConditionResult(passed)


def _evaluate_and(children: Iterable[Condition], state: GameState, registry: ContentRegistry) -> ConditionResult:
    marks: List[str] = []
    for child in children:
        result = evaluate(child, state, registry)
        if not result.passed:
            # the whole group failed, earlier siblings' marks are void
            return ConditionResult(False)
        marks.extend(result.once_marks)
    return ConditionResult(True, marks)


def _evaluate_or(children: Iterable[Condition], state: GameState, registry: ContentRegistry) -> ConditionResult:
    for child in children:
        result = evaluate(child, state, registry)
        if result.passed:
            return ConditionResult(True, list(result.once_marks))
    return ConditionResult(False)


def _is_present(path: str, state: GameState, registry: ContentRegistry) -> bool:
    room = registry.current_room(state)
    # "items.key" style paths name the item by their last segment
    item_id = path.rsplit(".", 1)[-1] if "." in path else path
    for item in room.items:
        if item.id == item_id:
            return not state.is_taken(item.id)
    return False


def _is_at(item_id: str, location_id: str, state: GameState, registry: ContentRegistry) -> bool:
    room = registry.current_room(state)
    item = next((i for i in room.items if i.id == item_id), None)
    if item is None:
        return False
    if state.is_taken(item_id) or state.has_item(item_id):
        return False
    return (item.location or room.id) == location_id


def evaluate(condition: Condition, state: GameState, registry: ContentRegistry) -> ConditionResult:
    """Evaluate a condition tree against the current state.

    Args:
        condition: The condition to evaluate
        state: Session state (read only here)
        registry: Index over the game definition

    Returns:
        ConditionResult with pass/fail and the once gates that would be
        consumed if the caller accepts this result
    """
    op = condition.op

    if op is ConditionOp.AND:
        return _evaluate_and(condition.children, state, registry)
    elif op is ConditionOp.OR:
        return _evaluate_or(condition.children, state, registry)
    elif op is ConditionOp.NOT:
        inner = evaluate(condition.children[0], state, registry)
        # inverting a once gate must never consume it
        return _leaf(not inner.passed)

    elif op is ConditionOp.ONCE:
        if state.has_once(condition.path):
            return _leaf(False)
        return ConditionResult(True, [condition.path])

    elif op is ConditionOp.TRUTHY:
        return _leaf(is_truthy(read_path(condition.path, state)))
    elif op is ConditionOp.FALSY:
        return _leaf(not is_truthy(read_path(condition.path, state)))

    elif op is ConditionOp.HAS:
        return _leaf(state.has_item(condition.path))
    elif op is ConditionOp.LACKS:
        return _leaf(not state.has_item(condition.path))

    elif op is ConditionOp.EQ:
        return _leaf(strict_equals(read_path(condition.path, state), condition.value))
    elif op is ConditionOp.NE:
        return _leaf(not strict_equals(read_path(condition.path, state), condition.value))

    elif op is ConditionOp.GT:
        return _leaf(to_number(read_path(condition.path, state)) > condition.value)
    elif op is ConditionOp.GTE:
        return _leaf(to_number(read_path(condition.path, state)) >= condition.value)
    elif op is ConditionOp.LT:
        return _leaf(to_number(read_path(condition.path, state)) < condition.value)
    elif op is ConditionOp.LTE:
        return _leaf(to_number(read_path(condition.path, state)) <= condition.value)

    elif op is ConditionOp.PRESENT:
        return _leaf(_is_present(condition.path, state, registry))
    elif op is ConditionOp.ABSENT:
        return _leaf(not _is_present(condition.path, state, registry))

    elif op is ConditionOp.IS_AT:
        return _leaf(_is_at(condition.path, condition.value, state, registry))

    raise ValueError(f"Unknown condition op: {op!r}")


def check(condition: Condition, state: GameState, registry: ContentRegistry) -> bool:
    """Pass/fail only; any once marks are discarded."""
    return evaluate(condition, state, registry).passed


def check_all(
    conditions: Optional[Iterable[Condition]], state: GameState, registry: ContentRegistry
) -> ConditionResult:
    """Implicit AND over a list of conditions. Empty or missing lists pass."""
    if not conditions:
        return ConditionResult(True)
    return _evaluate_and(conditions, state, registry)


def commit_marks(marks: Iterable[str], state: GameState) -> None:
    for gate in marks:
        state.mark_once(gate)
