"""Bootstrap utilities: load a game definition JSON and create an engine."""
from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from config import get_default_game, get_games_dir, get_skip_validation
from fabula.core.engine import GameEngine

logger = logging.getLogger(__name__)


def game_path(name: Optional[str] = None, games_dir: Optional[Path] = None) -> Path:
    directory = Path(games_dir) if games_dir is not None else get_games_dir()
    return directory / f"{name or get_default_game()}.json"


def available_games(games_dir: Optional[Path] = None) -> List[str]:
    directory = Path(games_dir) if games_dir is not None else get_games_dir()
    if not directory.is_dir():
        return []
    return sorted(p.stem for p in directory.glob("*.json"))


def load_definition(name: Optional[str] = None, games_dir: Optional[Path] = None) -> Dict[str, Any]:
    path = game_path(name, games_dir)
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    logger.debug("Read game definition from %s", path)
    return data


def load_engine(name: Optional[str] = None, games_dir: Optional[Path] = None) -> tuple[Dict[str, Any], GameEngine]:
    """Read a game from the games directory and build its engine.

    Returns the raw definition too: save slots need it to restore a session.
    """
    data = load_definition(name, games_dir)
    engine = GameEngine(data, skip_validation=get_skip_validation())
    return data, engine
