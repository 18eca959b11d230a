"""Minimal CLI loop to play a game definition.

Usage (example):
    python run.py [game_name]
Then type commands:
    look
    go north
    talk keeper 2
    use lamp on oil can
"""
from __future__ import annotations
import difflib
import logging
import sys
from typing import Optional, Tuple

from config import get_log_level
from fabula.core.engine import GameEngine
from fabula.core.persistence import SaveError, list_saves, load_game, save_game
from game.bootstrap import load_engine

PROMPT = "> "

COMMAND_HELP = {
    'look': {'usage': 'look [thing]', 'desc': 'Describe the room, or look at something in it.'},
    'go': {'usage': 'go <direction|room>', 'desc': 'Move through an exit (north, up, door, ...).'},
    'take': {'usage': 'take <item>', 'desc': 'Pick up an item in the room.'},
    'examine': {'usage': 'examine <thing>', 'desc': 'Look closely at an item or person.'},
    'use': {'usage': 'use <item> [on <target>] [number]', 'desc': 'Use an item, optionally on another item or with a number.'},
    'talk': {'usage': 'talk <npc> [number]', 'desc': 'List what you can say to someone, or pick a line.'},
    'inventory': {'usage': 'inventory | inv', 'desc': 'Show what you are carrying.'},
    'hint': {'usage': 'hint', 'desc': 'Ask for a nudge in the right direction.'},
    'status': {'usage': 'status', 'desc': 'Show location, turns and inventory.'},
    'save': {'usage': 'save [slot]', 'desc': 'Save the current game. Default: quicksave.'},
    'load': {'usage': 'load [slot]', 'desc': 'Load a saved game. Default: quicksave.'},
    'saves': {'usage': 'saves', 'desc': 'List available saves.'},
    'help': {'usage': 'help [command]', 'desc': 'List all commands, or show usage of one.'},
    'quit': {'usage': 'quit | exit', 'desc': 'Leave the game.'},
}

TARGET_SEPARATORS = (" on ", " with ")


def help_lines():
    lines = ["Available commands:"]
    max_usage = max(len(info['usage']) for info in COMMAND_HELP.values())
    for name, info in COMMAND_HELP.items():
        lines.append(f" {info['usage'].ljust(max_usage)}  - {info['desc']}")
    return lines


def help_topic(topic: str) -> str:
    info = COMMAND_HELP.get(topic)
    if info:
        return f"Usage: {info['usage']}\n{info['desc']}"
    close = difflib.get_close_matches(topic, COMMAND_HELP.keys(), n=3)
    if close:
        return f"Unknown command '{topic}'. Did you mean: {', '.join(close)}"
    return f"Unknown command '{topic}'."


def _split_number(words: list) -> Tuple[list, Optional[float]]:
    if len(words) > 1:
        try:
            return words[:-1], float(words[-1])
        except ValueError:
            pass
    return words, None


def parse_use(arg: str) -> Tuple[str, Optional[str], Optional[float]]:
    """Split ``use`` arguments into item, optional target and optional number.

    >>> parse_use("lamp on oil can")
    ('lamp', 'oil can', None)
    >>> parse_use("dial 7")
    ('dial', None, 7.0)
    """
    words, number = _split_number(arg.split())
    text = " ".join(words)
    lowered = text.lower()
    for sep in TARGET_SEPARATORS:
        idx = lowered.find(sep)
        if idx != -1:
            return text[:idx].strip(), text[idx + len(sep):].strip() or None, number
    return text, None, number


def parse_talk(arg: str) -> Tuple[str, Optional[int]]:
    words = arg.split()
    if len(words) > 1 and words[-1].isdigit():
        return " ".join(words[:-1]), int(words[-1])
    return arg.strip(), None


def dispatch(engine: GameEngine, cmd: str) -> Optional[str]:
    """Run one player command against ``engine``.

    Returns the reply text, or None when the command is not recognised.
    Session commands (save, load, quit) are handled by ``game_loop``.
    """
    verb, _, arg = cmd.strip().partition(" ")
    verb = verb.lower()
    arg = arg.strip()
    if verb == "look":
        return engine.look(arg or None)
    elif verb == "go":
        if not arg:
            return "Usage: go <direction>"
        return engine.go(arg)
    elif verb in {"take", "examine"} and not arg:
        return f"Usage: {COMMAND_HELP[verb]['usage']}"
    elif verb == "take":
        return engine.take(arg)
    elif verb == "examine":
        return engine.examine(arg)
    elif verb == "use":
        if not arg:
            return f"Usage: {COMMAND_HELP['use']['usage']}"
        item, target, number = parse_use(arg)
        return engine.use(item, target, number)
    elif verb == "talk":
        if not arg:
            return f"Usage: {COMMAND_HELP['talk']['usage']}"
        npc, option = parse_talk(arg)
        if option is None:
            return engine.talk(npc)
        return engine.talk_option(npc, option)
    elif verb in {"inventory", "inv"}:
        return engine.inventory()
    elif verb == "hint":
        return engine.hint()
    elif verb == "status":
        return engine.get_status_message()
    elif verb == "help":
        return "\n".join(help_lines()) if not arg else help_topic(arg)
    return None


def game_loop(name: Optional[str] = None):
    definition, engine = load_engine(name)
    print(engine.start_game())
    print("-- Type 'help' for the list of commands. --")
    while True:
        try:
            cmd = input(PROMPT).strip()
        except EOFError:
            break
        if not cmd:
            continue
        if cmd in {"quit", "exit"}:
            print("Goodbye.")
            break
        verb, _, arg = cmd.partition(" ")
        try:
            if verb == "save":
                path = save_game(engine, arg.strip() or "quicksave")
                print(f"Game saved to {path}")
                continue
            if verb == "load":
                engine = load_game(definition, slot_name=arg.strip() or "quicksave")
                print(engine.look())
                continue
            if verb == "saves":
                saves = list_saves()
                if not saves:
                    print("No saves found.")
                for s in saves:
                    print(f" {s['slot_name']}  {s['date_saved']}  {s['room']} (turn {s['turns']})")
                continue
        except SaveError as e:
            print(f"Error: {e}")
            continue
        res = dispatch(engine, cmd)
        if res is None:
            close = difflib.get_close_matches(verb, COMMAND_HELP.keys(), n=3)
            if close:
                print(f"Unknown command. Did you mean: {', '.join(close)}")
            else:
                print("Unknown command. Type 'help'.")
            continue
        print(res)
        if engine.is_game_over():
            print("-- The End. --")
            break


def main():
    logging.basicConfig(level=get_log_level(), format="%(levelname)s %(name)s: %(message)s")
    game_loop(sys.argv[1] if len(sys.argv) > 1 else None)


if __name__ == "__main__":
    main()
