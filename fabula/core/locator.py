"""Resolution of player wording to game objects.

Matching is case-insensitive against the display name and every alias.
Item lookups take an exact match first and only fall back to a substring
match when nothing matches exactly; NPC lookups are substring only.
"""
from __future__ import annotations
from typing import Iterable, Optional, Sequence, TypeVar, Union

from .model import NPC, Exit, Item
from .registry import ContentRegistry
from .state import GameState

__all__ = [
    "find_exact",
    "find_partial",
    "search_items_by_name",
    "find_item_in_room",
    "find_visible_item_in_room",
    "find_item_in_inventory",
    "find_npc",
    "find_exit",
]

Named = TypeVar("Named", Item, NPC)


def _names(obj: Union[Item, NPC]) -> Iterable[str]:
    yield obj.name.lower()
    for alias in obj.aliases:
        yield alias.lower()


def find_exact(candidates: Sequence[Named], name: str) -> Optional[Named]:
    norm = name.lower()
    for obj in candidates:
        if any(n == norm for n in _names(obj)):
            return obj
    return None


def find_partial(candidates: Sequence[Named], name: str) -> Optional[Named]:
    norm = name.lower()
    for obj in candidates:
        if any(norm in n for n in _names(obj)):
            return obj
    return None


def search_items_by_name(items: Sequence[Item], name: str) -> Optional[Item]:
    """Exact name/alias match first, then substring."""
    return find_exact(items, name) or find_partial(items, name)


def find_item_in_room(name: str, state: GameState, registry: ContentRegistry) -> Optional[Item]:
    """Any untaken item of the current room, contained ones included."""
    room = registry.current_room(state)
    return search_items_by_name(registry.all_room_items(room, state), name)


def find_visible_item_in_room(name: str, state: GameState, registry: ContentRegistry) -> Optional[Item]:
    room = registry.current_room(state)
    return search_items_by_name(registry.visible_room_items(room, state), name)


def find_item_in_inventory(name: str, state: GameState, registry: ContentRegistry) -> Optional[Item]:
    return search_items_by_name(registry.inventory_items(state), name)


def find_npc(name: str, state: GameState, registry: ContentRegistry) -> Optional[NPC]:
    return find_partial(registry.current_room(state).npcs, name)


def find_exit(text: str, state: GameState, registry: ContentRegistry) -> Optional[Exit]:
    """Exit of the current room by alias, else by destination room id or name."""
    room = registry.current_room(state)
    norm = text.strip().lower()
    for ex in room.exits:
        if any(alias.lower() == norm for alias in ex.aliases):
            return ex
    target = registry.find_room_by_name(norm)
    if target is not None:
        for ex in room.exits:
            if ex.target_room_id == target.id:
                return ex
    return None
