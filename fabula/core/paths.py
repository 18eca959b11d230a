"""Path addressing into game state.

A path is either one of a few built-in names (current room, win/over
flags, turn counter) or the name of a flag. Built-ins are resolved first;
``flags.X`` and ``X`` address the same flag.

Values follow loose scripting semantics: an unset flag reads as ``None``,
numeric comparisons coerce with ``to_number`` and truth tests use
``is_truthy``.
"""
from __future__ import annotations
import math
import re
from typing import Any, Optional

from .model import Scalar
from .state import GameState

__all__ = ["read_path", "write_path", "flag_key", "to_number", "is_truthy", "strict_equals"]

FLAGS_PREFIX = "flags."
_DECIMAL = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$", re.ASCII)
_RADIX = re.compile(r"^0([xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)$")
_INFINITIES = {"Infinity": math.inf, "+Infinity": math.inf, "-Infinity": -math.inf}


def flag_key(path: str) -> str:
    if path.startswith(FLAGS_PREFIX):
        return path[len(FLAGS_PREFIX):]
    return path


def read_path(path: str, state: GameState) -> Optional[Scalar]:
    if path in ("room", "room.id"):
        return state.current_room_id
    if path == "won":
        return state.won
    if path == "gameOver":
        return state.game_over
    if path == "turnCount":
        return state.turn_count
    # event.* markers are plain flags by convention
    return state.flags.get(flag_key(path))


def write_path(path: str, value: Scalar, state: GameState) -> None:
    if path in ("room", "room.id"):
        state.current_room_id = str(value)
        return
    if path == "won":
        state.won = is_truthy(value)
        return
    if path == "gameOver":
        state.game_over = is_truthy(value)
        return
    state.flags[flag_key(path)] = value


def to_number(value: Any) -> float:
    """Numeric coercion: None -> NaN, bools -> 0/1, numeric strings parsed."""
    if value is None:
        return math.nan
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        if _DECIMAL.match(text):
            return int(text) if text.lstrip("+-").isdigit() else float(text)
        if _RADIX.match(text):
            return int(text, 0)
        if text in _INFINITIES:
            return _INFINITIES[text]
        # Python-only spellings ("1_000", "inf", "nan") are not numbers here
        return math.nan
    return math.nan


def is_truthy(value: Any) -> bool:
    if isinstance(value, float) and math.isnan(value):
        return False
    return bool(value)


def strict_equals(left: Any, right: Any) -> bool:
    """Equality without cross-type coercion: ``True`` never equals ``1``."""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, (int, float)) and isinstance(right, (int, float)):
        return left == right
    if type(left) is not type(right):
        return False
    return left == right
