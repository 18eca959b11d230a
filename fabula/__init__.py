"""Fabula: an interpreter for condition-driven interactive fiction."""

from .core.model import Condition, ConditionOp, Effect, EffectOp, GameDefinition
from .core.state import GameState
from .core.loader import DefinitionError, build_definition_from_dict, validate_definition
from .core.dsl import ConditionResult, evaluate, check, check_all
from .core.engine import GameEngine
from .core.persistence import SaveError, save_game, load_game, list_saves, delete_save

__version__ = "0.1.0"

__all__ = [
    'Condition', 'ConditionOp', 'Effect', 'EffectOp', 'GameDefinition',
    'GameState',
    'DefinitionError', 'build_definition_from_dict', 'validate_definition',
    'ConditionResult', 'evaluate', 'check', 'check_all',
    'GameEngine',
    'SaveError', 'save_game', 'load_game', 'list_saves', 'delete_save',
]
