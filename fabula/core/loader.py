"""Game definition loading and validation utilities.

Separates construction logic from raw JSON (dict) into model dataclasses.
No I/O performed here; caller is responsible for reading JSON from disk.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional, Tuple

import jsonschema

from .model import (
    NPC,
    Condition,
    ConditionOp,
    DescriptiveText,
    DialogueLine,
    Effect,
    EffectOp,
    Exit,
    Fragment,
    GameDefinition,
    Hint,
    Item,
    Room,
    Text,
    Trigger,
    UseAction,
)
from .schema import GAME_DEFINITION_SCHEMA

__all__ = [
    "DefinitionError",
    "build_definition_from_dict",
    "build_condition",
    "build_effect",
    "build_text",
    "find_schema_issues",
    "find_reference_issues",
    "validate_definition",
]

logger = logging.getLogger(__name__)

_VALIDATOR = jsonschema.Draft7Validator(GAME_DEFINITION_SCHEMA)


class DefinitionError(ValueError):
    """Raised when a game definition cannot be used to build an engine."""
    pass


def build_condition(data: Dict[str, Any]) -> Condition:
    if len(data) != 1:
        raise DefinitionError(f"Invalid game definition: condition must have exactly one key, got {sorted(data)}")
    key, payload = next(iter(data.items()))
    try:
        op = ConditionOp(key)
    except ValueError:
        raise DefinitionError(f"Invalid game definition: unknown condition '{key}'") from None
    if op in (ConditionOp.AND, ConditionOp.OR):
        return Condition(op=op, children=tuple(build_condition(c) for c in payload))
    if op is ConditionOp.NOT:
        return Condition(op=op, children=(build_condition(payload),))
    if isinstance(payload, (list, tuple)):
        path, value = payload
        return Condition(op=op, path=path, value=value)
    return Condition(op=op, path=payload)


def build_effect(data: Dict[str, Any]) -> Effect:
    if len(data) != 1:
        raise DefinitionError(f"Invalid game definition: effect must have exactly one key, got {sorted(data)}")
    key, payload = next(iter(data.items()))
    try:
        op = EffectOp(key)
    except ValueError:
        raise DefinitionError(f"Invalid game definition: unknown effect '{key}'") from None
    if isinstance(payload, (list, tuple)):
        path, value = payload
        return Effect(op=op, path=path, value=value)
    return Effect(op=op, path=payload)


def _conditions(raw: Optional[List[Dict[str, Any]]]) -> Tuple[Condition, ...]:
    return tuple(build_condition(c) for c in raw or [])


def _effects(raw: Optional[List[Dict[str, Any]]]) -> Tuple[Effect, ...]:
    return tuple(build_effect(e) for e in raw or [])


def _declared_effects(raw: Optional[List[Dict[str, Any]]]) -> Optional[Tuple[Effect, ...]]:
    return _effects(raw) if raw is not None else None


def build_text(raw: Any) -> Text:
    if raw is None or isinstance(raw, str):
        return raw
    fragments = tuple(
        Fragment(
            say=f["say"],
            when=_conditions(f.get("when")),
            priority=f.get("priority", 0),
            group=f.get("group") or None,
        )
        for f in raw.get("fragments", [])
    )
    return DescriptiveText(fragments=fragments, id=raw.get("id"))


def _build_trigger(t: Dict[str, Any]) -> Trigger:
    return Trigger(
        when=_conditions(t.get("when")),
        effects=_effects(t.get("effects")),
        id=t.get("id"),
        message=build_text(t.get("message")),
    )


def _build_item(i: Dict[str, Any]) -> Item:
    use_actions = tuple(
        UseAction(
            response=build_text(a["response"]),
            target_id=a.get("targetId"),
            number=a.get("number"),
            number_any=a.get("numberAny", False),
            requires=_conditions(a.get("requires")),
            effects=_declared_effects(a.get("effects")),
        )
        for a in i.get("useActions", [])
    )
    on_take = i.get("onTake")
    return Item(
        id=i["id"],
        name=i["name"],
        description=build_text(i.get("description", "")),
        examine_text=build_text(i.get("examineText", "")),
        takeable=i.get("takeable", False),
        aliases=tuple(i.get("aliases", [])),
        location=i.get("location"),
        take_when=_conditions(i.get("takeWhen")),
        take_blocked_text=i.get("takeBlockedText"),
        on_take=_declared_effects(on_take),
        on_take_text=build_text(i.get("onTakeText")),
        use_actions=use_actions,
    )


def _build_npc(n: Dict[str, Any]) -> NPC:
    dialogue = tuple(
        DialogueLine(
            player_line=d["playerLine"],
            response=build_text(d["response"]),
            when=_conditions(d.get("when")),
            effects=_declared_effects(d.get("effects")),
            sets_flag=d.get("setsFlag"),
            gives_item=d.get("givesItem"),
        )
        for d in n.get("dialogue", [])
    )
    return NPC(
        id=n["id"],
        name=n["name"],
        description=n.get("description", ""),
        dialogue=dialogue,
        aliases=tuple(n.get("aliases", [])),
    )


def _build_exit(e: Dict[str, Any]) -> Exit:
    aliases = list(e.get("aliases", []))
    # Older content names exits by a single direction
    if e.get("direction") and e["direction"] not in aliases:
        aliases.append(e["direction"])
    return Exit(
        target_room_id=e["targetRoomId"],
        aliases=tuple(aliases),
        locked=e.get("locked", False),
        required_item=e.get("requiredItem"),
        requires=_conditions(e.get("requires")),
        blocked_message=build_text(e.get("blockedMessage")),
        description=e.get("description"),
    )


def build_definition_from_dict(data: Dict[str, Any]) -> GameDefinition:
    rooms = tuple(
        Room(
            id=r["id"],
            name=r["name"],
            description=build_text(r.get("description", "")),
            items=tuple(_build_item(i) for i in r.get("items", [])),
            npcs=tuple(_build_npc(n) for n in r.get("npcs", [])),
            exits=tuple(_build_exit(e) for e in r.get("exits", [])),
            triggers=tuple(_build_trigger(t) for t in r.get("triggers", [])),
        )
        for r in data.get("rooms", [])
    )
    hints = tuple(
        Hint(id=h.get("id", ""), text=build_text(h["text"]), when=_conditions(h.get("when")))
        for h in data.get("hints", [])
    )
    return GameDefinition(
        id=data.get("id", ""),
        name=data.get("name", ""),
        version=data.get("version", ""),
        rooms=rooms,
        starting_room=data.get("startingRoom", ""),
        intro_text=build_text(data.get("introText", "")),
        win_message=build_text(data.get("winMessage", "")),
        initial_flags=dict(data.get("initialFlags", {})),
        hints=hints,
        global_triggers=tuple(_build_trigger(t) for t in data.get("globalTriggers", [])),
        description=data.get("description"),
    )


def find_schema_issues(data: Any) -> List[str]:
    issues: List[str] = []
    for err in sorted(_VALIDATOR.iter_errors(data), key=lambda e: [str(p) for p in e.absolute_path]):
        where = "/".join(str(p) for p in err.absolute_path) or "<root>"
        issues.append(f"{where}: {err.message}")
    return issues


def find_reference_issues(definition: GameDefinition) -> List[str]:
    issues: List[str] = []
    room_ids = set()
    for room in definition.rooms:
        if room.id in room_ids:
            issues.append(f'duplicate room id "{room.id}"')
        room_ids.add(room.id)
    item_ids = {item.id for item in definition.all_items()}

    if definition.starting_room not in room_ids:
        issues.append(f'startingRoom "{definition.starting_room}" does not exist')

    for room in definition.rooms:
        for ex in room.exits:
            if ex.target_room_id not in room_ids:
                issues.append(f'exit targetRoomId "{ex.target_room_id}" does not exist in room "{room.id}"')
            if ex.required_item and ex.required_item not in item_ids:
                issues.append(f'exit requiredItem "{ex.required_item}" does not exist in room "{room.id}"')
        for item in room.items:
            if item.location and item.location not in room_ids and item.location not in item_ids:
                issues.append(
                    f'item location "{item.location}" does not exist for item "{item.id}" in room "{room.id}"'
                )
    return issues


def validate_definition(data: Dict[str, Any]) -> GameDefinition:
    """Validate raw content and build the model.

    Raises:
        DefinitionError: listing every schema or reference issue found
    """
    issues = find_schema_issues(data)
    if issues:
        raise DefinitionError("Invalid game definition: " + "; ".join(issues))
    definition = build_definition_from_dict(data)
    issues = find_reference_issues(definition)
    if issues:
        raise DefinitionError("Invalid game definition: " + "; ".join(issues))
    logger.debug("Validated game definition '%s' (%d rooms)", definition.id, len(definition.rooms))
    return definition
