"""Effect application and trigger cascades.

Effects are plain state mutations applied in declared order with no
rollback. After a list of effects completes, every global trigger is
checked once in declaration order (a single pass, not a fixpoint): a
trigger whose conditions pass fires its effects directly, without starting
a cascade of its own.
"""
from __future__ import annotations
import logging
from typing import Iterable, List, Optional

from .dsl import check_all, commit_marks
from .model import Effect, EffectOp, Text, Trigger
from .paths import read_path, to_number, write_path
from .registry import ContentRegistry
from .state import GameState

__all__ = ["apply_effect", "apply_effects", "process_global_triggers", "apply_room_triggers"]

logger = logging.getLogger(__name__)


def _as_number(value) -> float:
    """Current numeric value of a counter; anything non-numeric counts as 0."""
    number = to_number(value)
    if number != number:  # NaN
        return 0
    return number


def apply_effect(effect: Effect, state: GameState) -> None:
    op = effect.op
    if op is EffectOp.SET:
        write_path(effect.path, effect.value, state)
    elif op is EffectOp.CONSUME:
        write_path(effect.path, False, state)
    elif op is EffectOp.MARK_ONCE:
        state.mark_once(effect.path)
    elif op is EffectOp.ADD_ITEM:
        state.add_item(effect.path)
    elif op is EffectOp.REMOVE_ITEM:
        # the item stays "taken": it never returns to its origin room
        state.remove_item(effect.path)
    elif op is EffectOp.ADD:
        write_path(effect.path, _as_number(read_path(effect.path, state)) + effect.value, state)
    elif op is EffectOp.SUBTRACT:
        write_path(effect.path, _as_number(read_path(effect.path, state)) - effect.value, state)
    else:
        raise ValueError(f"Unknown effect op: {op!r}")


def process_global_triggers(state: GameState, registry: ContentRegistry) -> None:
    for trigger in registry.definition.global_triggers:
        result = check_all(trigger.when, state, registry)
        if not result.passed:
            continue
        logger.debug("Global trigger %s fired", trigger.id or "<anonymous>")
        commit_marks(result.once_marks, state)
        for effect in trigger.effects:
            apply_effect(effect, state)


def apply_effects(effects: Optional[Iterable[Effect]], state: GameState, registry: ContentRegistry) -> None:
    """Apply effects in order, then run the global trigger pass once."""
    if effects is None:
        return
    for effect in effects:
        apply_effect(effect, state)
    process_global_triggers(state, registry)


def apply_room_triggers(
    triggers: Iterable[Trigger], state: GameState, registry: ContentRegistry
) -> List[Text]:
    """Fire the passing triggers of a room.

    Returns:
        The ``message`` of every trigger that fired, in order
    """
    messages: List[Text] = []
    for trigger in triggers:
        result = check_all(trigger.when, state, registry)
        if not result.passed:
            continue
        logger.debug("Room trigger %s fired in '%s'", trigger.id or "<anonymous>", state.current_room_id)
        commit_marks(result.once_marks, state)
        apply_effects(trigger.effects, state, registry)
        if trigger.message:
            messages.append(trigger.message)
    return messages
