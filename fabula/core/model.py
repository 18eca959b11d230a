"""Data model definitions for game content.

Pure frozen dataclasses, no loading or validation logic (see ``loader``).
Conditions and effects are tagged unions: one dataclass each, tagged by an
Enum, so evaluators dispatch on ``op`` instead of probing payload keys.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

__all__ = [
    "Scalar",
    "ConditionOp",
    "Condition",
    "EffectOp",
    "Effect",
    "Fragment",
    "DescriptiveText",
    "Text",
    "Trigger",
    "UseAction",
    "Item",
    "DialogueLine",
    "NPC",
    "Exit",
    "Room",
    "Hint",
    "GameDefinition",
]

Scalar = Union[str, int, float, bool]


class ConditionOp(Enum):
    """Condition kinds, as spelled in content JSON."""
    EQ = "eq"
    NE = "ne"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    TRUTHY = "truthy"
    FALSY = "falsy"
    HAS = "has"
    LACKS = "lacks"
    PRESENT = "present"
    ABSENT = "absent"
    ONCE = "once"
    IS_AT = "is_at"
    AND = "and"
    OR = "or"
    NOT = "not"


@dataclass(frozen=True)
class Condition:
    """A node of a condition tree.

    Leaves use ``path`` (and ``value`` for comparisons, the location id for
    ``is_at``). ``and``/``or`` hold their operands in ``children``; ``not``
    holds exactly one child.

    Examples (content form -> model):
        {"truthy": "DOOR_UNLOCKED"} -> Condition(ConditionOp.TRUTHY, path="DOOR_UNLOCKED")
        {"gte": ["score", 3]}       -> Condition(ConditionOp.GTE, path="score", value=3)
    """
    op: ConditionOp
    path: Optional[str] = None
    value: Optional[Scalar] = None
    children: Tuple["Condition", ...] = ()


class EffectOp(Enum):
    """Effect kinds, as spelled in content JSON."""
    SET = "set"
    ADD = "add"
    SUBTRACT = "subtract"
    CONSUME = "consume"
    MARK_ONCE = "markOnce"
    ADD_ITEM = "addItem"
    REMOVE_ITEM = "removeItem"


@dataclass(frozen=True)
class Effect:
    op: EffectOp
    path: str
    value: Optional[Scalar] = None


@dataclass(frozen=True)
class Fragment:
    say: str
    when: Tuple[Condition, ...] = ()
    priority: float = 0
    group: Optional[str] = None


@dataclass(frozen=True)
class DescriptiveText:
    fragments: Tuple[Fragment, ...]
    id: Optional[str] = None


# Either a plain string or a conditional fragment set
Text = Union[str, DescriptiveText]


@dataclass(frozen=True)
class Trigger:
    when: Tuple[Condition, ...]
    effects: Tuple[Effect, ...] = ()
    id: Optional[str] = None
    message: Optional[Text] = None


@dataclass(frozen=True)
class UseAction:
    response: Text
    target_id: Optional[str] = None
    number: Optional[float] = None
    number_any: bool = False
    requires: Tuple[Condition, ...] = ()
    # None when the content declares no effects: no trigger pass runs
    effects: Optional[Tuple[Effect, ...]] = None


@dataclass(frozen=True)
class Item:
    id: str
    name: str
    description: Text
    examine_text: Text
    takeable: bool
    aliases: Tuple[str, ...] = ()
    location: Optional[str] = None  # containing item or room id
    take_when: Tuple[Condition, ...] = ()
    take_blocked_text: Optional[str] = None
    on_take: Optional[Tuple[Effect, ...]] = None
    on_take_text: Optional[Text] = None
    use_actions: Tuple[UseAction, ...] = ()


@dataclass(frozen=True)
class DialogueLine:
    player_line: str
    response: Text
    when: Tuple[Condition, ...] = ()
    effects: Optional[Tuple[Effect, ...]] = None
    # legacy shorthands
    sets_flag: Optional[str] = None
    gives_item: Optional[str] = None


@dataclass(frozen=True)
class NPC:
    id: str
    name: str
    description: str
    dialogue: Tuple[DialogueLine, ...] = ()
    aliases: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Exit:
    target_room_id: str
    aliases: Tuple[str, ...] = ()
    locked: bool = False
    required_item: Optional[str] = None
    requires: Tuple[Condition, ...] = ()
    blocked_message: Optional[Text] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class Room:
    id: str
    name: str
    description: Text
    items: Tuple[Item, ...] = ()
    npcs: Tuple[NPC, ...] = ()
    exits: Tuple[Exit, ...] = ()
    triggers: Tuple[Trigger, ...] = ()


@dataclass(frozen=True)
class Hint:
    id: str
    text: Text
    when: Tuple[Condition, ...] = ()


@dataclass(frozen=True)
class GameDefinition:
    id: str
    name: str
    version: str
    rooms: Tuple[Room, ...]
    starting_room: str
    intro_text: Text
    win_message: Text
    initial_flags: Dict[str, Scalar] = field(default_factory=dict)
    hints: Tuple[Hint, ...] = ()
    global_triggers: Tuple[Trigger, ...] = ()
    description: Optional[str] = None

    def all_items(self) -> List[Item]:
        items: List[Item] = []
        for room in self.rooms:
            items.extend(room.items)
        return items
