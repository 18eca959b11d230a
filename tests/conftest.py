import copy

import pytest

from fabula.core.engine import GameEngine
from fabula.core.loader import build_definition_from_dict
from fabula.core.registry import ContentRegistry
from fabula.core.state import GameState

# Small two-room game used across the suite:
# - a key that unlocks the vault door (use door on key / use key on door)
# - coin and gem for the and/or fragments of the hall
# - a sage with three one-shot lines
# - a button that wins the game
SAMPLE_GAME = {
    "id": "sample",
    "name": "Sample",
    "version": "1.0.0",
    "startingRoom": "hall",
    "initialFlags": {"DOOR_UNLOCKED": False},
    "introText": "Welcome.",
    "winMessage": "You win after {turns} turns.",
    "hints": [
        {"id": "h-key", "text": "Pick up the key.", "when": [{"lacks": "key"}]},
        {"id": "h-door", "text": "Use the key on the door.", "when": [{"falsy": "DOOR_UNLOCKED"}]},
    ],
    "rooms": [
        {
            "id": "hall",
            "name": "Great Hall",
            "description": {
                "fragments": [
                    {"say": "A draughty hall."},
                    {"say": "Your pockets jingle.", "when": [{"or": [{"has": "coin"}, {"has": "gem"}]}]},
                    {"say": "You carry a small fortune.", "when": [{"and": [{"has": "coin"}, {"has": "gem"}]}]},
                ]
            },
            "items": [
                {
                    "id": "key",
                    "name": "brass key",
                    "description": "A key.",
                    "examineText": "A small brass key.",
                    "takeable": True,
                    "aliases": ["key"],
                },
                {
                    "id": "door",
                    "name": "vault door",
                    "description": "A door.",
                    "examineText": "A heavy vault door.",
                    "takeable": False,
                    "aliases": ["door"],
                    "useActions": [
                        {
                            "targetId": "key",
                            "response": "The lock clicks open.",
                            "effects": [{"set": ["DOOR_UNLOCKED", True]}],
                        }
                    ],
                },
                {"id": "coin", "name": "gold coin", "description": "", "examineText": "Shiny.", "takeable": True},
                {"id": "gem", "name": "red gem", "description": "", "examineText": "Glowing.", "takeable": True},
                {
                    "id": "button",
                    "name": "red button",
                    "description": "",
                    "examineText": "It says PRESS.",
                    "takeable": False,
                    "useActions": [
                        {
                            "response": "Click.",
                            "effects": [{"set": ["won", True]}, {"set": ["gameOver", True]}],
                        }
                    ],
                },
            ],
            "npcs": [
                {
                    "id": "sage",
                    "name": "Old Sage",
                    "description": "A sage with a long beard.",
                    "aliases": ["sage"],
                    "dialogue": [
                        {"when": [{"once": "talk.sage.1"}], "playerLine": "Hello.", "response": "Greetings."},
                        {"when": [{"once": "talk.sage.2"}], "playerLine": "Any advice?", "response": "Look closer."},
                        {"when": [{"once": "talk.sage.3"}], "playerLine": "Goodbye.", "response": "Farewell."},
                    ],
                }
            ],
            "exits": [
                {
                    "targetRoomId": "vault",
                    "aliases": ["north", "n"],
                    "requires": [{"truthy": "DOOR_UNLOCKED"}],
                    "blockedMessage": "The vault door is shut.",
                }
            ],
        },
        {
            "id": "vault",
            "name": "Vault",
            "description": "A cold vault.",
            "items": [],
            "npcs": [],
            "exits": [{"targetRoomId": "hall", "aliases": ["south", "s"]}],
        },
    ],
}


@pytest.fixture
def sample_game():
    """Fresh copy of the sample definition, safe to mutate per test."""
    return copy.deepcopy(SAMPLE_GAME)


@pytest.fixture
def engine(sample_game):
    eng = GameEngine(sample_game)
    eng.start_game()
    return eng


@pytest.fixture
def context(sample_game):
    """(state, registry) pair for driving components directly."""
    definition = build_definition_from_dict(sample_game)
    registry = ContentRegistry(definition)
    state = GameState.initial(definition.starting_room, definition.initial_flags)
    return state, registry


@pytest.fixture
def make_context():
    """Build a (state, registry) pair from any definition dict."""
    def _make(data):
        definition = build_definition_from_dict(data)
        return GameState.initial(definition.starting_room, definition.initial_flags), ContentRegistry(definition)
    return _make
