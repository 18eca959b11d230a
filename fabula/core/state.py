"""Game state container for runtime mutable data.

Separated from the static game definition. Serialized to a flat JSON
snapshot by ``to_dict`` and rebuilt by ``from_dict``; see ``persistence``
for save slots on disk.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .model import Scalar

@dataclass
class GameState:
    current_room_id: str
    inventory_ids: List[str] = field(default_factory=list)  # acquisition order
    # Items removed from their origin room, carried or not
    taken_item_ids: List[str] = field(default_factory=list)
    flags: Dict[str, Scalar] = field(default_factory=dict)
    visited_rooms: List[str] = field(default_factory=list)
    game_over: bool = False
    won: bool = False
    turn_count: int = 0
    # Consumed one-shot gates, in the order they were consumed
    once: List[str] = field(default_factory=list)

    @classmethod
    def initial(cls, starting_room: str, initial_flags: Optional[Mapping[str, Scalar]] = None) -> "GameState":
        return cls(current_room_id=starting_room, flags=dict(initial_flags or {}))

    def has_item(self, item_id: str) -> bool:
        return item_id in self.inventory_ids

    def add_item(self, item_id: str) -> None:
        if item_id not in self.inventory_ids:
            self.inventory_ids.append(item_id)
        if item_id not in self.taken_item_ids:
            self.taken_item_ids.append(item_id)

    def remove_item(self, item_id: str) -> None:
        self.inventory_ids = [i for i in self.inventory_ids if i != item_id]

    def is_taken(self, item_id: str) -> bool:
        return item_id in self.taken_item_ids

    def has_once(self, gate: str) -> bool:
        return gate in self.once

    def mark_once(self, gate: str) -> None:
        if gate not in self.once:
            self.once.append(gate)

    def visit(self, room_id: str) -> None:
        if room_id not in self.visited_rooms:
            self.visited_rooms.append(room_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currentRoomId": self.current_room_id,
            "inventoryIds": list(self.inventory_ids),
            "takenItemIds": list(self.taken_item_ids),
            "flags": dict(self.flags),
            "visitedRooms": list(self.visited_rooms),
            "gameOver": self.game_over,
            "won": self.won,
            "turnCount": self.turn_count,
            "once": list(self.once),
        }

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        starting_room: str,
        initial_flags: Optional[Mapping[str, Scalar]] = None,
    ) -> "GameState":
        """Rebuild a state from a snapshot.

        Missing fields fall back to a fresh game's values, and the snapshot's
        flags are layered over ``initial_flags`` so flags added to a game after
        a save was written still get their defaults.
        """
        flags: Dict[str, Scalar] = dict(initial_flags or {})
        flags.update(data.get("flags") or {})
        return cls(
            current_room_id=data.get("currentRoomId") or starting_room,
            inventory_ids=list(data.get("inventoryIds") or []),
            taken_item_ids=list(data.get("takenItemIds") or []),
            flags=flags,
            visited_rooms=list(data.get("visitedRooms") or []),
            game_over=bool(data.get("gameOver") or False),
            won=bool(data.get("won") or False),
            turn_count=data.get("turnCount") or 0,
            once=list(data.get("once") or []),
        )


__all__ = ["GameState"]
