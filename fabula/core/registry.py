"""Runtime registry for a loaded game definition.

Acts as an in-memory index for quick lookup without having to traverse
nested room structures repeatedly.
"""
from __future__ import annotations
from typing import Dict, List, Optional
from .model import GameDefinition, Item, Room
from .state import GameState


class ContentRegistry:
    def __init__(self, definition: GameDefinition):
        self.definition = definition
        self.room_index: Dict[str, Room] = {}
        self.item_index: Dict[str, Item] = {}
        for room in definition.rooms:
            self.room_index.setdefault(room.id, room)
            for item in room.items:
                # First declaration wins when an id is reused
                self.item_index.setdefault(item.id, item)

    def get_room(self, room_id: str) -> Optional[Room]:
        return self.room_index.get(room_id)

    def get_item(self, item_id: str) -> Optional[Item]:
        return self.item_index.get(item_id)

    def current_room(self, state: GameState) -> Room:
        room = self.get_room(state.current_room_id)
        if room is None:
            raise KeyError(f"Room not found: {state.current_room_id}")
        return room

    def find_room_by_name(self, text: str) -> Optional[Room]:
        """Room whose id or display name equals ``text`` (case-insensitive)."""
        norm = text.strip().lower()
        for room in self.definition.rooms:
            if room.id.lower() == norm or room.name.lower() == norm:
                return room
        return None

    # --- Item scopes ---
    def visible_room_items(self, room: Room, state: GameState) -> List[Item]:
        """Items lying openly in the room: not taken and not inside something."""
        return [i for i in room.items if not state.is_taken(i.id) and not i.location]

    def all_room_items(self, room: Room, state: GameState) -> List[Item]:
        return [i for i in room.items if not state.is_taken(i.id)]

    def inventory_items(self, state: GameState) -> List[Item]:
        items = []
        for item_id in state.inventory_ids:
            item = self.get_item(item_id)
            if item is not None:
                items.append(item)
        return items
