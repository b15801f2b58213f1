"""
Minesweeper rules engine.

Provides the cell state machine, minefield with auto-reveal, game
bookkeeping with JSON save/restore, and a default text UI.
"""
from .errors import (
    ErrorKind,
    MinesweeperError,
    ConfigError,
    CoordinateError,
    TransitionError,
    GameFinishedError,
    InvalidInputError,
    DecodeError,
)
from .cell import Cell, CellState, OperationResult
from .field import (
    Coordinate,
    Field,
    FieldConfig,
    OpenResult,
    BEGINNER,
    INTERMEDIATE,
    EXPERT,
    PRESETS,
)
from .ui import UI, OpType, TextUI
from .game import Game, GameConfig, GameState
from .environment import MinesweeperEnv, make_vec_env

__all__ = [
    "ErrorKind",
    "MinesweeperError",
    "ConfigError",
    "CoordinateError",
    "TransitionError",
    "GameFinishedError",
    "InvalidInputError",
    "DecodeError",
    "Cell",
    "CellState",
    "OperationResult",
    "Coordinate",
    "Field",
    "FieldConfig",
    "OpenResult",
    "BEGINNER",
    "INTERMEDIATE",
    "EXPERT",
    "PRESETS",
    "UI",
    "OpType",
    "TextUI",
    "Game",
    "GameConfig",
    "GameState",
    "MinesweeperEnv",
    "make_vec_env",
]
