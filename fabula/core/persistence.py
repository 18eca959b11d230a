"""Save slots on disk.

A save file holds the flat snapshot of ``GameState.to_dict`` plus a
``_save_metadata`` block. Loading layers the snapshot over a fresh engine
for the same game definition, so older saves keep working after flags are
added to the game. Files are named ``<slot>_<timestamp>.json``; a slot may
hold several saves and loading a slot picks the newest.
"""
from __future__ import annotations
import json
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import jsonschema

from config import get_saves_dir
from .engine import DefinitionSource, GameEngine
from .schema import GAME_STATE_SCHEMA

__all__ = [
    "SAVE_VERSION",
    "SaveError",
    "serialize_engine",
    "deserialize_engine",
    "save_game",
    "load_game",
    "list_saves",
    "delete_save",
]

logger = logging.getLogger(__name__)

# Bump on incompatible snapshot changes; older saves stay loadable.
SAVE_VERSION = 1

METADATA_KEY = "_save_metadata"
_STAMP_FORMAT = "%Y%m%d_%H%M%S_%f"

SAVE_METADATA_SCHEMA = {
    "type": "object",
    "properties": {
        "version": {"type": "integer", "minimum": 0},
        "game_id": {"type": "string"},
    },
}


class SaveError(Exception):
    """A save could not be written, found or read back."""


def _resolve_dir(saves_dir: Optional[Path]) -> Path:
    directory = Path(saves_dir) if saves_dir is not None else get_saves_dir()
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def _slot_files(directory: Path, slot_name: str) -> List[Path]:
    # the glob also catches longer slot names sharing the prefix
    return [p for p in directory.glob(f"{slot_name}_*.json") if _slot_of(p) == slot_name]


def _slot_of(path: Path) -> str:
    # strip the three "_"-joined timestamp parts
    return path.stem.rsplit("_", 3)[0]


def _read_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def serialize_engine(engine: GameEngine) -> Dict[str, Any]:
    snapshot = engine.state.to_dict()
    snapshot[METADATA_KEY] = {
        "version": SAVE_VERSION,
        "timestamp": time.time(),
        "date_saved": datetime.now().isoformat(timespec="seconds"),
        "game_id": engine.definition.id,
        "game_version": engine.definition.version,
    }
    return snapshot


def deserialize_engine(definition: DefinitionSource, data: Dict[str, Any]) -> GameEngine:
    snapshot = {k: v for k, v in data.items() if k != METADATA_KEY}
    metadata = data.get(METADATA_KEY, {})
    try:
        jsonschema.validate(metadata, SAVE_METADATA_SCHEMA)
    except jsonschema.ValidationError as e:
        raise SaveError(f"Corrupted save metadata: {e.message}") from e
    version = metadata.get("version", 0)
    if version > SAVE_VERSION:
        raise SaveError(f"Save version {version} is newer than supported version {SAVE_VERSION}")
    try:
        jsonschema.validate(snapshot, GAME_STATE_SCHEMA)
    except jsonschema.ValidationError as e:
        raise SaveError(f"Corrupted save data: {e.message}") from e
    return GameEngine.deserialize(definition, snapshot)


def save_game(engine: GameEngine, slot_name: str = "quicksave", saves_dir: Optional[Path] = None) -> str:
    """Write the engine state to a new file of ``slot_name``.

    Returns:
        Path of the written file

    Raises:
        SaveError: the file could not be written
    """
    target = _resolve_dir(saves_dir) / f"{slot_name}_{datetime.now().strftime(_STAMP_FORMAT)}.json"
    try:
        target.write_text(
            json.dumps(serialize_engine(engine), indent=2, ensure_ascii=False), encoding="utf-8"
        )
    except OSError as e:
        raise SaveError(f"Failed to save game: {e}") from e
    logger.info("Saved '%s' at turn %d to %s", engine.definition.id, engine.state.turn_count, target)
    return str(target)


def load_game(
    definition: DefinitionSource,
    slot_name: Optional[str] = None,
    filepath: Optional[str] = None,
    saves_dir: Optional[Path] = None,
) -> GameEngine:
    """Restore a session of ``definition`` from disk.

    Args:
        definition: The game the save belongs to
        slot_name: Load the newest save of this slot
        filepath: Load this exact file instead

    Raises:
        SaveError: nothing to load, or the file is unreadable or corrupted
    """
    if filepath:
        source = Path(filepath)
        if not source.exists():
            raise SaveError(f"Save file not found: {source}")
    elif slot_name:
        candidates = _slot_files(_resolve_dir(saves_dir), slot_name)
        if not candidates:
            raise SaveError(f"No saves found for slot '{slot_name}'")
        source = max(candidates, key=lambda p: (p.stat().st_mtime, p.name))
    else:
        raise SaveError("Either slot_name or filepath is required")

    try:
        data = _read_json(source)
    except (OSError, json.JSONDecodeError) as e:
        raise SaveError(f"Failed to load game: {e}") from e
    if not isinstance(data, dict):
        raise SaveError(f"Failed to load game: {source} does not hold a save")
    engine = deserialize_engine(definition, data)
    logger.info("Loaded %s (turn %d)", source, engine.state.turn_count)
    return engine


def list_saves(saves_dir: Optional[Path] = None) -> List[Dict[str, Any]]:
    """Summaries of every save file, newest first."""
    summaries = []
    for path in _resolve_dir(saves_dir).glob("*.json"):
        try:
            data = _read_json(path)
        except (OSError, json.JSONDecodeError):
            logger.warning("Skipping unreadable save %s", path)
            continue
        if not isinstance(data, dict):
            continue
        meta = data.get(METADATA_KEY)
        if not isinstance(meta, dict):
            meta = {}
        summaries.append({
            "slot_name": _slot_of(path),
            "filename": path.name,
            "filepath": str(path),
            "game_id": meta.get("game_id"),
            "version": meta.get("version", 0),
            "timestamp": meta.get("timestamp", path.stat().st_mtime),
            "date_saved": meta.get("date_saved", "?"),
            "room": data.get("currentRoomId", "?"),
            "turns": data.get("turnCount", 0),
        })
    return sorted(summaries, key=lambda s: s["timestamp"], reverse=True)


def delete_save(slot_name: Optional[str] = None, filepath: Optional[str] = None,
                saves_dir: Optional[Path] = None) -> bool:
    """Remove one file, or every file of a slot. True if anything went."""
    if filepath:
        doomed = [Path(filepath)]
    elif slot_name:
        doomed = _slot_files(_resolve_dir(saves_dir), slot_name)
    else:
        raise SaveError("Either slot_name or filepath is required")
    try:
        for path in doomed:
            path.unlink()
    except OSError as e:
        raise SaveError(f"Failed to delete save: {e}") from e
    return bool(doomed)
