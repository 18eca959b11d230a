"""Central configuration for Fabula.

Tunable runtime parameters (logging, save and game directories, validation)
live here. Every value has a sensible default and can be overridden through
environment variables.
"""
from __future__ import annotations
import logging
import os
from pathlib import Path


def _get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    val = raw.strip().lower()
    return val in {"1", "true", "yes", "on"}


def _get_path_env(name: str, default: str) -> Path:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return Path(default)
    return Path(raw.strip())


# ---------------- Logging ----------------
DEFAULT_LOG_LEVEL: str = "WARNING"

ENV_LOG_LEVEL = "FABULA_LOG_LEVEL"


def get_log_level() -> int:
    """Logging level for the CLI.

    Precedence:
    1. Environment variable FABULA_LOG_LEVEL (a level name such as DEBUG)
    2. DEFAULT_LOG_LEVEL
    """
    raw = os.getenv(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL).strip().upper()
    level = logging.getLevelName(raw)
    if isinstance(level, int):
        return level
    # unknown names fall back silently
    return logging.getLevelName(DEFAULT_LOG_LEVEL)


# ---------------- Content & saves ----------------
def get_games_dir() -> Path:
    """Directory holding game definition JSON files. Var: FABULA_GAMES_DIR."""
    return _get_path_env("FABULA_GAMES_DIR", str(Path(__file__).resolve().parent / "assets" / "games"))


def get_default_game() -> str:
    """Game loaded when none is named. Var: FABULA_DEFAULT_GAME (default lighthouse)."""
    return os.getenv("FABULA_DEFAULT_GAME", "lighthouse").strip()


def get_saves_dir() -> Path:
    """Save slot directory. Var: FABULA_SAVES_DIR (default data/saves)."""
    return _get_path_env("FABULA_SAVES_DIR", "data/saves")


def get_skip_validation() -> bool:
    """Skip schema checks when loading content. Var: FABULA_SKIP_VALIDATION (default off)."""
    return _get_bool_env("FABULA_SKIP_VALIDATION", False)


__all__ = [
    "DEFAULT_LOG_LEVEL", "ENV_LOG_LEVEL", "get_log_level",
    "get_games_dir", "get_default_game", "get_saves_dir", "get_skip_validation",
]
