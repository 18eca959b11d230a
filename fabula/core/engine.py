"""Turn orchestration: the player verbs.

``GameEngine`` owns one ``GameState`` for one play session and exposes a
method per verb. Every verb returns the text to show the player. Gameplay
failures (unknown item, blocked exit, no matching action) are ordinary
replies, not exceptions; only an unusable game definition raises.
"""
from __future__ import annotations
import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .dsl import check_all, commit_marks
from .effects import apply_effects, apply_room_triggers, process_global_triggers
from .loader import (
    DefinitionError,
    build_definition_from_dict,
    find_reference_issues,
    validate_definition,
)
from .locator import (
    find_exact,
    find_exit,
    find_item_in_inventory,
    find_item_in_room,
    find_npc,
    find_visible_item_in_room,
)
from .matcher import UseMatch, find_use_action
from .model import NPC, DialogueLine, Exit, GameDefinition, Item, Text
from .registry import ContentRegistry
from .state import GameState
from .text import render_text

__all__ = ["GameEngine"]

logger = logging.getLogger(__name__)

DefinitionSource = Union[GameDefinition, Mapping[str, Any]]


def _load_definition(definition: DefinitionSource, skip_validation: bool) -> GameDefinition:
    if not isinstance(definition, GameDefinition):
        if not skip_validation:
            return validate_definition(definition)
        definition = build_definition_from_dict(definition)
    issues = find_reference_issues(definition)
    if issues and not skip_validation:
        raise DefinitionError("Invalid game definition: " + "; ".join(issues))
    for issue in issues:
        logger.warning("Ignoring content problem in '%s': %s", definition.id, issue)
    return definition


class GameEngine:
    """One play session over one game definition.

    Args:
        definition: raw content (as loaded from JSON) or an already built
            ``GameDefinition``
        skip_validation: skip the schema and reference checks; the starting
            room is checked regardless

    Raises:
        DefinitionError: the definition is invalid or its starting room is
            missing
    """

    def __init__(self, definition: DefinitionSource, skip_validation: bool = False):
        self.definition = _load_definition(definition, skip_validation)
        self.registry = ContentRegistry(self.definition)
        if self.registry.get_room(self.definition.starting_room) is None:
            raise DefinitionError(f'Starting room "{self.definition.starting_room}" not found in rooms')
        self.state = self._initial_state()

    def _initial_state(self) -> GameState:
        return GameState.initial(self.definition.starting_room, self.definition.initial_flags)

    # --- helpers ---
    def _render(self, text: Optional[Text]) -> str:
        return render_text(text, self.state, self.registry)

    def _begin_turn(self, verb: str) -> None:
        # The counter keeps ticking after game over; verbs then only
        # repeat the ending text.
        self.state.turn_count += 1
        logger.debug("turn %d: %s in '%s'", self.state.turn_count, verb, self.state.current_room_id)

    def _ending(self) -> str:
        return self._render(self.definition.win_message)

    def _exit_blocked(self, ex: Exit) -> bool:
        if ex.requires and not check_all(ex.requires, self.state, self.registry).passed:
            return True
        if ex.locked and not (ex.required_item and self.state.has_item(ex.required_item)):
            return True
        return False

    def _exit_label(self, ex: Exit) -> str:
        target = self.registry.get_room(ex.target_room_id)
        name = target.name if target else ex.target_room_id
        return f"{name} (blocked)" if self._exit_blocked(ex) else name

    def describe_current_room(self) -> str:
        room = self.registry.current_room(self.state)
        messages = apply_room_triggers(room.triggers, self.state, self.registry)
        items = self.registry.visible_room_items(room, self.state)

        parts = [f"** {room.name} **", self._render(room.description)]
        parts.extend(self._render(m) for m in messages)
        if items:
            parts.append("You see: " + ", ".join(i.name for i in items))
        if room.npcs:
            parts.append("Present: " + ", ".join(n.name for n in room.npcs))
        exits = [self._exit_label(ex) for ex in room.exits]
        parts.append("Exits: " + (", ".join(exits) if exits else "none"))
        return "\n\n".join(parts)

    def _describe_item(self, item: Item) -> str:
        return f"** {item.name} **\n\n{self._render(item.examine_text)}"

    def _inspect(self, target: str) -> Optional[str]:
        item = find_item_in_room(target, self.state, self.registry) or find_item_in_inventory(
            target, self.state, self.registry
        )
        if item is not None:
            return self._describe_item(item)
        npc = find_npc(target, self.state, self.registry)
        if npc is not None:
            return npc.description
        return None

    def _available_dialogue(self, npc: NPC) -> List[Tuple[DialogueLine, List[str]]]:
        lines = []
        for line in npc.dialogue:
            result = check_all(line.when, self.state, self.registry)
            if result.passed:
                lines.append((line, result.once_marks))
        return lines

    # --- verbs ---
    def start_game(self) -> str:
        self.state = self._initial_state()
        self.state.visit(self.state.current_room_id)
        logger.info("Started '%s' in room '%s'", self.definition.id, self.state.current_room_id)
        intro = self._render(self.definition.intro_text)
        return intro + "\n\n" + self.describe_current_room()

    def look(self, target: Optional[str] = None) -> str:
        self._begin_turn("look")
        if self.state.game_over:
            return self._ending()
        if not target:
            return self.describe_current_room()
        found = self._inspect(target)
        if found is None:
            return f'You don\'t see any "{target}" here.'
        return found

    def examine(self, target: str) -> str:
        self._begin_turn("examine")
        if self.state.game_over:
            return self._ending()
        found = self._inspect(target)
        if found is None:
            return f'You don\'t see any "{target}" to examine.'
        return found

    def go(self, direction: str) -> str:
        self._begin_turn("go")
        if self.state.game_over:
            return self._ending()
        ex = find_exit(direction, self.state, self.registry)
        if ex is None:
            return f"You can't go {direction} from here."
        if self._exit_blocked(ex):
            if ex.blocked_message:
                return self._render(ex.blocked_message)
            return f"You can't go {direction} right now."
        self.state.current_room_id = ex.target_room_id
        self.state.visit(ex.target_room_id)
        return self.describe_current_room()

    def take(self, item_name: str) -> str:
        self._begin_turn("take")
        if self.state.game_over:
            return self._ending()
        item = find_item_in_room(item_name, self.state, self.registry)
        if item is None:
            return f'You don\'t see any "{item_name}" here to take.'
        if not item.takeable:
            return self._render(item.take_blocked_text) or f"You can't take the {item.name}."
        if item.take_when and not check_all(item.take_when, self.state, self.registry).passed:
            return self._render(item.take_blocked_text) or f"You can't take the {item.name} right now."

        self.state.add_item(item.id)
        if item.on_take is not None:
            apply_effects(item.on_take, self.state, self.registry)
        else:
            process_global_triggers(self.state, self.registry)

        if item.on_take_text:
            return self._render(item.on_take_text)
        return f"You pick up the {item.name}."

    def talk(self, npc_name: str) -> str:
        self._begin_turn("talk")
        if self.state.game_over:
            return self._ending()
        npc = find_npc(npc_name, self.state, self.registry)
        if npc is None:
            return f'There\'s no one called "{npc_name}" here to talk to.'
        available = self._available_dialogue(npc)
        if not available:
            return f"{npc.name} has nothing more to say."
        lines = [f"You approach {npc.name}.", "", "What would you like to say?", ""]
        for index, (line, _marks) in enumerate(available, start=1):
            lines.append(f'{index}. "{line.player_line}"')
        lines.append("")
        lines.append(f"(Use: talk {npc_name.lower()} [number] to choose)")
        return "\n".join(lines)

    def talk_option(self, npc_name: str, option: int) -> str:
        self._begin_turn("talk")
        if self.state.game_over:
            return self._ending()
        npc = find_npc(npc_name, self.state, self.registry)
        if npc is None:
            return f'There\'s no one called "{npc_name}" here to talk to.'
        available = self._available_dialogue(npc)
        if option < 1 or option > len(available):
            return f"Invalid dialogue option. Please choose a number from 1-{len(available)}."

        line, marks = available[option - 1]
        was_won = self.state.won
        commit_marks(marks, self.state)
        response = f'You: "{line.player_line}"\n\n{self._render(line.response)}'
        if line.sets_flag:
            self.state.flags[line.sets_flag] = True
        if line.gives_item:
            self.state.add_item(line.gives_item)
        apply_effects(line.effects, self.state, self.registry)

        if not was_won and self.state.won:
            response += f"\n\nYou feel a quiet certainty settle in.\n\nTurns taken: {self.state.turn_count}"
        return response

    def _resolve_actor(self, item_name: str) -> Optional[Item]:
        # exact matches (room before inventory) beat any partial match,
        # partial matches prefer the inventory
        room = self.registry.current_room(self.state)
        visible = self.registry.visible_room_items(room, self.state)
        carried = self.registry.inventory_items(self.state)
        return (
            find_exact(visible, item_name)
            or find_exact(carried, item_name)
            or find_item_in_inventory(item_name, self.state, self.registry)
            or find_visible_item_in_room(item_name, self.state, self.registry)
        )

    def use(self, item_name: str, target_name: Optional[str] = None, number: Optional[float] = None) -> str:
        self._begin_turn("use")
        if self.state.game_over:
            return self._ending()
        item = self._resolve_actor(item_name)
        if item is None:
            return f'You don\'t see any "{item_name}" to use.'
        target = None
        if target_name:
            target = find_visible_item_in_room(target_name, self.state, self.registry) or find_item_in_inventory(
                target_name, self.state, self.registry
            )

        was_won = self.state.won
        match: Optional[UseMatch] = find_use_action(item, target, number, self.state, self.registry)
        if match is None and target is not None:
            match = find_use_action(target, item, number, self.state, self.registry)
        if match is None:
            on_target = f" on {target_name}" if target_name else ""
            return f"You're not sure how to use the {item.name}{on_target}."

        logger.debug("use: action on '%s' selected", match.source.id)
        commit_marks(match.once_marks, self.state)
        apply_effects(match.action.effects, self.state, self.registry)
        apply_room_triggers(self.registry.current_room(self.state).triggers, self.state, self.registry)
        response = self._render(match.action.response)
        if not was_won and self.state.won:
            return self._ending()
        return response

    def inventory(self) -> str:
        if self.state.game_over:
            return self._ending()
        items = self.registry.inventory_items(self.state)
        if not items:
            return "You're not carrying anything."
        return "You are carrying:\n" + "\n".join(f"- {i.name}" for i in items)

    def hint(self) -> str:
        self._begin_turn("hint")
        if self.state.game_over:
            return self._ending()
        # first matching hint wins; content order is the priority
        for hint in self.definition.hints:
            if check_all(hint.when, self.state, self.registry).passed:
                return self._render(hint.text)
        return "No hint comes to mind right now."

    def get_status(self) -> Dict[str, Any]:
        return {
            "room": self.registry.current_room(self.state).name,
            "roomId": self.state.current_room_id,
            "inventory": [i.name for i in self.registry.inventory_items(self.state)],
            "turns": self.state.turn_count,
            "gameOver": self.state.game_over,
            "won": self.state.won,
            "flags": dict(self.state.flags),
        }

    def get_status_message(self) -> str:
        if self.state.game_over:
            return self._ending()
        inventory = [i.name for i in self.registry.inventory_items(self.state)]
        lines = [
            f"Location: {self.registry.current_room(self.state).name}",
            f"Turns: {self.state.turn_count}",
            f"Inventory: {', '.join(inventory) if inventory else 'empty'}",
            f"Won: {'yes' if self.state.won else 'no'}",
        ]
        return "\n".join(lines)

    def is_game_over(self) -> bool:
        return self.state.game_over

    def has_won(self) -> bool:
        return self.state.won

    # --- snapshots ---
    def serialize(self) -> str:
        return json.dumps(self.state.to_dict())

    @classmethod
    def deserialize(
        cls,
        definition: DefinitionSource,
        data: Union[str, Mapping[str, Any]],
        skip_validation: bool = False,
    ) -> "GameEngine":
        engine = cls(definition, skip_validation=skip_validation)
        parsed = json.loads(data) if isinstance(data, str) else data
        engine.state = GameState.from_dict(
            parsed, engine.definition.starting_room, engine.definition.initial_flags
        )
        return engine

    @classmethod
    def create(cls, definition: Mapping[str, Any]) -> "GameEngine":
        """Validate raw content and build an engine from it."""
        return cls(validate_definition(definition), skip_validation=True)
