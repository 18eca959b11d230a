"""Selection of the use-action that answers "use X [on Y] [N]".

Actions are tried in declared order and the first eligible one wins, so
authors put the most specific actions first.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional

from .dsl import check_all
from .model import Item, UseAction
from .registry import ContentRegistry
from .state import GameState

__all__ = ["UseMatch", "find_use_action", "target_matches", "number_matches"]


@dataclass
class UseMatch:
    action: UseAction
    source: Item
    # once gates to consume if the caller goes ahead with this action
    once_marks: List[str] = field(default_factory=list)


def target_matches(action: UseAction, target: Optional[Item]) -> bool:
    if action.target_id:
        return target is not None and target.id == action.target_id
    # standalone actions only answer when no target was named
    return target is None


def number_matches(action: UseAction, number: Optional[float]) -> bool:
    if number is not None:
        if action.number is not None:
            return action.number == number
        return action.number_any
    return action.number is None and not action.number_any


def find_use_action(
    item: Item,
    target: Optional[Item],
    number: Optional[float],
    state: GameState,
    registry: ContentRegistry,
) -> Optional[UseMatch]:
    for action in item.use_actions:
        if not target_matches(action, target):
            continue
        if not number_matches(action, number):
            continue
        result = check_all(action.requires, state, registry)
        if not result.passed:
            continue
        return UseMatch(action=action, source=item, once_marks=result.once_marks)
    return None
