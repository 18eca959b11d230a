import json

import pytest

from fabula.core.engine import GameEngine


def unlock(engine):
    engine.take("key")
    return engine.use("door", "key")


# --- scenarios ---
def test_blocked_exit_until_door_unlocked(engine):
    assert engine.go("north") == "The vault door is shut."
    assert engine.take("key") == "You pick up the brass key."
    assert engine.use("door", "key") == "The lock clicks open."
    assert engine.go("north") == "** Vault **\n\nA cold vault.\n\nExits: Great Hall"
    assert engine.state.visited_rooms == ["hall", "vault"]


def test_and_or_fragments(engine):
    assert "Your pockets jingle." not in engine.look()
    engine.take("coin")
    view = engine.look()
    assert "Your pockets jingle." in view
    assert "You carry a small fortune." not in view
    engine.take("gem")
    view = engine.look()
    assert "Your pockets jingle." in view
    assert "You carry a small fortune." in view


def test_dialogue_lines_retire(engine):
    listing = engine.talk("sage")
    assert '1. "Hello."' in listing
    assert '3. "Goodbye."' in listing
    assert listing.endswith("(Use: talk sage [number] to choose)")

    assert engine.talk_option("sage", 1) == 'You: "Hello."\n\nGreetings.'
    listing = engine.talk("sage")
    assert "Hello." not in listing
    assert '1. "Any advice?"' in listing

    engine.talk_option("sage", 1)
    engine.talk_option("sage", 1)
    assert engine.talk("sage") == "Old Sage has nothing more to say."


def test_winning_use_returns_win_message(engine):
    assert engine.use("button") == "You win after 1 turns."
    assert engine.has_won()
    assert engine.is_game_over()


def test_start_game_is_idempotent(sample_game):
    eng = GameEngine(sample_game)
    first = eng.start_game()
    eng.take("key")
    eng.talk_option("sage", 1)
    second = eng.start_game()
    assert first == second
    assert first.startswith("Welcome.\n\n** Great Hall **")
    assert eng.state.inventory_ids == []
    assert eng.state.once == []
    assert eng.state.turn_count == 0


# --- verbs ---
def test_turn_counter(engine):
    engine.look()
    engine.inventory()
    engine.get_status_message()
    engine.hint()
    assert engine.state.turn_count == 2


def test_turns_keep_ticking_after_game_over(engine):
    engine.use("button")
    assert engine.look() == "You win after 2 turns."
    assert engine.go("north") == "You win after 3 turns."
    assert engine.hint() == "You win after 4 turns."
    assert engine.inventory() == "You win after 4 turns."
    assert engine.get_status_message() == "You win after 4 turns."
    assert engine.get_status()["turns"] == 4


def test_look_at_things(engine):
    assert engine.look("key") == "** brass key **\n\nA small brass key."
    assert engine.look("sage") == "A sage with a long beard."
    assert engine.look("banana") == 'You don\'t see any "banana" here.'


def test_examine(engine):
    assert engine.examine("gold") == "** gold coin **\n\nShiny."
    engine.take("coin")
    assert engine.examine("coin") == "** gold coin **\n\nShiny."
    assert engine.examine("banana") == 'You don\'t see any "banana" to examine.'


def test_room_render_lists_items_npcs_and_blocked_exits(engine):
    view = engine.look()
    assert view.startswith("** Great Hall **\n\nA draughty hall.")
    assert "You see: brass key, vault door, gold coin, red gem, red button" in view
    assert "Present: Old Sage" in view
    assert view.endswith("Exits: Vault (blocked)")
    unlock(engine)
    assert engine.look().endswith("Exits: Vault")


def test_go_unknown_direction(engine):
    assert engine.go("west") == "You can't go west from here."


def test_go_blocked_without_message(sample_game):
    del sample_game["rooms"][0]["exits"][0]["blockedMessage"]
    eng = GameEngine(sample_game)
    assert eng.go("n") == "You can't go n right now."


def test_locked_exit_needs_required_item(sample_game):
    exit_ = sample_game["rooms"][0]["exits"][0]
    del exit_["requires"]
    exit_.update({"locked": True, "requiredItem": "key"})
    eng = GameEngine(sample_game)
    assert eng.go("north") == "The vault door is shut."
    eng.take("key")
    assert eng.go("north").startswith("** Vault **")


def test_go_by_room_name(engine):
    unlock(engine)
    assert engine.go("vault").startswith("** Vault **")
    assert engine.go("great hall").startswith("** Great Hall **")


def test_take_failures(engine):
    assert engine.take("door") == "You can't take the vault door."
    assert engine.take("banana") == 'You don\'t see any "banana" here to take.'
    engine.take("key")
    assert engine.take("key") == 'You don\'t see any "key" here to take.'


def test_take_when_and_on_take(sample_game):
    coin = sample_game["rooms"][0]["items"][2]
    coin.update({
        "takeWhen": [{"has": "key"}],
        "takeBlockedText": "The coin is stuck fast.",
        "onTake": [{"add": ["gold", 10]}],
        "onTakeText": "You pry the coin loose.",
    })
    eng = GameEngine(sample_game)
    assert eng.take("coin") == "The coin is stuck fast."
    eng.take("key")
    assert eng.take("coin") == "You pry the coin loose."
    assert eng.state.flags["gold"] == 10


def test_take_runs_global_triggers(sample_game):
    sample_game["globalTriggers"] = [
        {"id": "rich", "when": [{"has": "gem"}, {"once": "rich"}], "effects": [{"set": ["RICH", True]}]}
    ]
    eng = GameEngine(sample_game)
    eng.take("gem")
    assert eng.state.flags["RICH"] is True


def test_talk_unknown_npc(engine):
    assert engine.talk("wizard") == 'There\'s no one called "wizard" here to talk to.'
    assert engine.talk_option("wizard", 1) == 'There\'s no one called "wizard" here to talk to.'


def test_talk_invalid_option(engine):
    assert engine.talk_option("sage", 4) == "Invalid dialogue option. Please choose a number from 1-3."
    assert engine.talk_option("sage", 0) == "Invalid dialogue option. Please choose a number from 1-3."
    assert engine.state.once == []


def test_talk_legacy_fields_and_effects(sample_game):
    sample_game["rooms"][0]["npcs"][0]["dialogue"].append({
        "playerLine": "Can I have that?",
        "response": "Take it.",
        "setsFlag": "GIFTED",
        "givesItem": "gem",
        "effects": [{"add": ["gifts", 1]}],
    })
    eng = GameEngine(sample_game)
    eng.talk_option("sage", 4)
    assert eng.state.flags["GIFTED"] is True
    assert eng.state.inventory_ids == ["gem"]
    assert eng.state.flags["gifts"] == 1


def test_talk_win_flourish(sample_game):
    sample_game["rooms"][0]["npcs"][0]["dialogue"] = [
        {"playerLine": "I give up.", "response": "Then you have won.", "effects": [{"set": ["won", True]}]}
    ]
    eng = GameEngine(sample_game)
    reply = eng.talk_option("sage", 1)
    assert reply.startswith('You: "I give up."\n\nThen you have won.')
    assert reply.endswith("Turns taken: 1")
    assert eng.has_won()


def test_use_swaps_roles(engine):
    engine.take("key")
    assert engine.use("key", "door") == "The lock clicks open."
    assert engine.state.flags["DOOR_UNLOCKED"] is True


def test_use_failures(engine):
    assert engine.use("banana") == 'You don\'t see any "banana" to use.'
    assert engine.use("coin") == "You're not sure how to use the gold coin."
    assert engine.use("door", "coin") == "You're not sure how to use the vault door on coin."


def test_use_prefers_exact_room_match(sample_game):
    # carried "red gem" partially matches "red"; the room has an exact alias
    sample_game["rooms"][0]["items"][4]["aliases"] = ["red"]
    eng = GameEngine(sample_game)
    eng.take("gem")
    assert eng.use("red") == "You win after 2 turns."


def test_use_commits_requires_once(sample_game):
    door = sample_game["rooms"][0]["items"][1]
    door["useActions"][0]["requires"] = [{"once": "unlock"}]
    door["useActions"].append({"targetId": "key", "response": "Already open."})
    eng = GameEngine(sample_game)
    eng.take("key")
    assert eng.use("door", "key") == "The lock clicks open."
    assert eng.use("door", "key") == "Already open."
    assert eng.state.once == ["unlock"]


def test_use_with_number(sample_game):
    sample_game["rooms"][0]["items"].append({
        "id": "dial", "name": "dial", "description": "", "examineText": "", "takeable": False,
        "useActions": [{"number": 7, "response": "Seven.", "effects": [{"set": ["DIAL", 7]}]}],
    })
    eng = GameEngine(sample_game)
    assert eng.use("dial", None, 7) == "Seven."
    assert eng.use("dial", None, 3) == "You're not sure how to use the dial."
    assert eng.state.flags["DIAL"] == 7


def test_room_trigger_message_follows_description(sample_game):
    sample_game["rooms"][1]["triggers"] = [
        {"id": "chill", "when": [{"once": "vault.chill"}], "effects": [{"add": ["chills", 1]}], "message": "A chill."}
    ]
    eng = GameEngine(sample_game)
    unlock(eng)
    assert eng.go("north") == "** Vault **\n\nA cold vault.\n\nA chill.\n\nExits: Great Hall"
    assert eng.look() == "** Vault **\n\nA cold vault.\n\nExits: Great Hall"
    assert eng.state.flags["chills"] == 1


def test_inventory(engine):
    assert engine.inventory() == "You're not carrying anything."
    engine.take("coin")
    engine.take("key")
    assert engine.inventory() == "You are carrying:\n- gold coin\n- brass key"


def test_hints_follow_declared_order(engine):
    assert engine.hint() == "Pick up the key."
    engine.take("key")
    assert engine.hint() == "Use the key on the door."
    engine.use("door", "key")
    assert engine.hint() == "No hint comes to mind right now."


def test_status(engine):
    engine.take("key")
    status = engine.get_status()
    assert status == {
        "room": "Great Hall",
        "roomId": "hall",
        "inventory": ["brass key"],
        "turns": 1,
        "gameOver": False,
        "won": False,
        "flags": {"DOOR_UNLOCKED": False},
    }
    assert engine.get_status_message() == (
        "Location: Great Hall\nTurns: 1\nInventory: brass key\nWon: no"
    )


# --- snapshots ---
def test_serialize_round_trip(engine, sample_game):
    unlock(engine)
    engine.talk_option("sage", 1)
    engine.go("north")
    restored = GameEngine.deserialize(sample_game, engine.serialize())
    assert restored.state == engine.state
    assert restored.look() == engine.look()


def test_deserialize_merges_initial_flags(sample_game):
    sample_game["initialFlags"]["NEW_FLAG"] = 5
    snapshot = {"currentRoomId": "hall", "flags": {"DOOR_UNLOCKED": True}}
    eng = GameEngine.deserialize(sample_game, snapshot)
    assert eng.state.flags == {"DOOR_UNLOCKED": True, "NEW_FLAG": 5}
    assert eng.state.inventory_ids == []
    assert eng.state.turn_count == 0


def test_serialize_uses_flat_wire_names(engine):
    data = json.loads(engine.serialize())
    assert set(data) == {
        "currentRoomId", "inventoryIds", "takenItemIds", "flags",
        "visitedRooms", "gameOver", "won", "turnCount", "once",
    }


def test_create_validates(sample_game):
    eng = GameEngine.create(sample_game)
    assert eng.state.current_room_id == "hall"
    del sample_game["rooms"]
    with pytest.raises(ValueError):
        GameEngine.create(sample_game)


def test_actions_without_effects_skip_global_triggers(sample_game):
    sample_game["initialFlags"]["ARMED"] = True
    sample_game["globalTriggers"] = [{"id": "tick", "when": [{"truthy": "ARMED"}], "effects": [{"add": ["ticks", 1]}]}]
    sample_game["rooms"][0]["items"].append({
        "id": "bell", "name": "bell", "description": "", "examineText": "", "takeable": False,
        "useActions": [{"response": "Ding."}],
    })
    eng = GameEngine(sample_game)
    assert eng.use("bell") == "Ding."
    assert eng.talk_option("sage", 1) == 'You: "Hello."\n\nGreetings.'
    assert "ticks" not in eng.state.flags

    # picking something up always runs the pass
    eng.take("key")
    assert eng.state.flags["ticks"] == 1
