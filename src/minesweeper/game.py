"""
Game module for Minesweeper.

Wraps one Field with win/loss bookkeeping, routes player input through
a UI, and saves/restores in-progress games as JSON snapshots.
"""
import json
import logging
from dataclasses import dataclass, field as dataclass_field
from enum import Enum
from pathlib import Path
from typing import Any, BinaryIO, Dict, Optional, Union

import numpy as np

from .cell import CellState
from .errors import ConfigError, DecodeError, GameFinishedError, InvalidInputError
from .field import Coordinate, Field, FieldConfig
from .ui import UI, OpType, RawInput, TextUI

logger = logging.getLogger(__name__)


# ============================================================================
# Constants
# ============================================================================

class GameState(Enum):
    """Possible states of the game, valued by their persisted name."""

    IN_PROGRESS = "InProgress"
    CLEARED = "Cleared"
    LOST = "Lost"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_name(cls, name: Any) -> "GameState":
        """Look up a state by its persisted name."""
        for state in cls:
            if state.value == name:
                return state
        raise DecodeError.unknown_state(name)

    @property
    def is_finished(self) -> bool:
        return self != GameState.IN_PROGRESS


@dataclass
class GameConfig:
    """
    Configuration for a Minesweeper game.

    Attributes:
        field: Field dimensions and mine count.
    """

    field: FieldConfig = dataclass_field(default_factory=FieldConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameConfig":
        """Build a configuration from a mapping such as a parsed JSON file."""
        if not isinstance(data, dict):
            raise ConfigError(f"game config must be an object, got {data!r}")
        unknown = set(data) - {"field"}
        if unknown:
            raise ConfigError(f"unknown game config keys: {sorted(unknown)}")
        field_data = data.get("field", {})
        if not isinstance(field_data, dict):
            raise ConfigError(f'"field" must be an object, got {field_data!r}')
        return cls(field=FieldConfig.from_dict(field_data))

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "GameConfig":
        """Load a configuration from a JSON file."""
        with open(path, encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as error:
                raise ConfigError(f"invalid config file {path}: {error}") from error
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return {"field": self.field.to_dict()}


# ============================================================================
# Game Class
# ============================================================================

class Game:
    """
    A single Minesweeper game.

    The game starts IN_PROGRESS and ends CLEARED once every safe cell is
    opened, or LOST as soon as a mine explodes. A finished game rejects
    further operations.

    Attributes:
        field: The minefield, owned by this game.
        ui: Presentation collaborator used by operate() and render().
        state: Current game state.
        quota: Number of safe cells to open for a win.
        opened: Number of cells opened so far.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        ui: Optional[UI] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        """
        Start a new game.

        Args:
            config: Game configuration (default: 9x9 with 10 mines).
            ui: Presentation collaborator (default: TextUI).
            rng: Random generator for mine placement.

        Raises:
            ConfigError: If the field configuration is invalid.
        """
        config = config or GameConfig()
        try:
            new_field = Field.create(config.field, rng)
        except ConfigError as error:
            raise ConfigError(f"failed to initialize field: {error}") from error
        self._setup(new_field, ui, GameState.IN_PROGRESS, config.field.quota, 0)
        logger.info(
            "New game: %dx%d field, %d mines",
            config.field.width, config.field.height, config.field.mine_count,
        )

    def _setup(
        self,
        new_field: Field,
        ui: Optional[UI],
        state: GameState,
        quota: int,
        opened: int,
    ) -> None:
        self.field = new_field
        self.ui = ui if ui is not None else TextUI()
        self.state = state
        self.quota = quota
        self.opened = opened
        self.ui.bind(self.field)

    @classmethod
    def _assemble(
        cls,
        new_field: Field,
        ui: Optional[UI],
        state: GameState,
        quota: int,
        opened: int,
    ) -> "Game":
        game = cls.__new__(cls)
        game._setup(new_field, ui, state, quota, opened)
        return game

    @classmethod
    def from_field(cls, new_field: Field, ui: Optional[UI] = None) -> "Game":
        """Start a game on a prepared field, e.g. one with fixed mines."""
        quota = new_field.width * new_field.height - new_field.mine_count
        return cls._assemble(new_field, ui, GameState.IN_PROGRESS, quota, 0)

    # ========================================================================
    # Operations
    # ========================================================================

    def operate(self, raw: RawInput) -> GameState:
        """
        Apply a player's raw input.

        The UI turns the input into an operation; see apply() for how
        each operation affects the game.

        Returns:
            The game state after the operation.

        Raises:
            GameFinishedError: If the game is already cleared or lost.
            InvalidInputError: If the UI cannot parse the input.
            CoordinateError, TransitionError: Propagated from the field.
        """
        self._ensure_in_progress()
        try:
            op, coord = self.ui.parse_input(raw)
        except InvalidInputError:
            raise
        except ValueError as error:
            raise InvalidInputError(raw, str(error)) from error
        return self.apply(op, coord)

    def apply(self, op: OpType, coord: Coordinate) -> GameState:
        """
        Apply a parsed operation.

        OPEN counts every newly opened cell, including those opened by
        auto-reveal, and decides win or loss. FLAG and UNFLAG never
        change the game state. Field errors leave the game unchanged.

        Returns:
            The game state after the operation.
        """
        self._ensure_in_progress()
        logger.debug("Applying %s at %s", op, coord)

        if op == OpType.OPEN:
            result = self.field.open(coord)
            self._handle_open_result(result.new_state, 1 + len(result.cascaded))
        elif op == OpType.FLAG:
            self.field.flag(coord)
        elif op == OpType.UNFLAG:
            self.field.unflag(coord)
        else:
            raise RuntimeError(f"invalid operation type: {op!r}")
        return self.state

    def _handle_open_result(self, new_state: CellState, newly_opened: int) -> None:
        if new_state == CellState.EXPLODED:
            self.state = GameState.LOST
            logger.info("Game lost after opening %d of %d cells", self.opened, self.quota)
        elif new_state == CellState.OPENED:
            self.opened += newly_opened
            if self.opened == self.quota:
                self.state = GameState.CLEARED
                logger.info("Game cleared: all %d safe cells opened", self.quota)
        else:
            raise RuntimeError(f"invalid operation result: {new_state!r}")

    def _ensure_in_progress(self) -> None:
        if self.state.is_finished:
            raise GameFinishedError(self.state)

    def render(self) -> str:
        """Render the field through the UI."""
        return self.ui.render(self.field)

    # ========================================================================
    # State Accessors
    # ========================================================================

    @property
    def is_playing(self) -> bool:
        """Check if game is still in progress."""
        return self.state == GameState.IN_PROGRESS

    @property
    def is_won(self) -> bool:
        """Check if game was cleared."""
        return self.state == GameState.CLEARED

    @property
    def is_lost(self) -> bool:
        """Check if game was lost."""
        return self.state == GameState.LOST

    @property
    def remaining(self) -> int:
        """Safe cells still to open."""
        return self.quota - self.opened

    # ========================================================================
    # Save / Restore
    # ========================================================================

    def to_dict(self) -> Dict[str, Any]:
        """Snapshot document of the game."""
        return {
            "field": self.field.to_dict(),
            "state": self.state.value,
            "quota": self.quota,
            "opened": self.opened,
        }

    def dumps(self) -> bytes:
        """Serialize the game as a JSON snapshot."""
        return json.dumps(self.to_dict()).encode("utf-8")

    def save(self, stream: BinaryIO) -> int:
        """
        Write the JSON snapshot to a binary stream.

        Returns:
            Number of bytes written.
        """
        data = self.dumps()
        written = stream.write(data)
        logger.info("Saved game (%s, %d/%d opened)", self.state, self.opened, self.quota)
        return written if written is not None else len(data)

    @classmethod
    def from_dict(cls, doc: Any, ui: Optional[UI] = None) -> "Game":
        """
        Rebuild a game from its snapshot document.

        The persisted values are trusted as-is; the cell grid is not
        checked against quota or opened.

        Raises:
            DecodeError: On a missing key, unknown state name, or a
                field that fails to decode.
        """
        if not isinstance(doc, dict):
            raise DecodeError.malformed(f"snapshot must be an object, got {doc!r}")

        if "state" not in doc:
            raise DecodeError.missing("state")
        state = GameState.from_name(doc["state"])

        counters = {}
        for key in ("quota", "opened"):
            if key not in doc:
                raise DecodeError.missing(key)
            value = doc[key]
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise DecodeError.malformed(
                    f'"{key}" must be a non-negative integer, got {value!r}'
                )
            counters[key] = value

        if "field" not in doc:
            raise DecodeError.missing("field")
        try:
            restored_field = Field.from_dict(doc["field"])
        except DecodeError as error:
            raise DecodeError(error.kind, f"failed to construct field: {error}") from error

        return cls._assemble(
            restored_field, ui, state, counters["quota"], counters["opened"]
        )

    @classmethod
    def loads(cls, data: Union[str, bytes], ui: Optional[UI] = None) -> "Game":
        """Rebuild a game from a JSON snapshot."""
        try:
            doc = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as error:
            raise DecodeError.malformed(f"invalid JSON: {error}") from error
        return cls.from_dict(doc, ui)

    @classmethod
    def restore(cls, stream: BinaryIO, ui: Optional[UI] = None) -> "Game":
        """
        Read a JSON snapshot written by save() from a stream.

        Raises:
            DecodeError: If the snapshot is incomplete or invalid.
        """
        game = cls.loads(stream.read(), ui)
        logger.info("Restored game (%s, %d/%d opened)", game.state, game.opened, game.quota)
        return game
