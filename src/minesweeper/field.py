"""
Field module for Minesweeper game.

Implements the minefield: mine placement, surrounding counts,
coordinate-checked open/flag/unflag, auto-reveal and the field's
snapshot encoding. Game progress is tracked by Game, not here.
"""
import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .cell import Cell, CellState, OperationResult
from .errors import ConfigError, CoordinateError, DecodeError, TransitionError

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration
# ============================================================================

@dataclass
class FieldConfig:
    """
    Configuration for a Minesweeper field.

    Attributes:
        width: Number of columns.
        height: Number of rows.
        mine_count: Total mines to place.
    """

    width: int = 9
    height: int = 9
    mine_count: int = 10

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self.validate()

    def validate(self) -> None:
        """Ensure configuration values are valid."""
        for name in ("width", "height", "mine_count"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"{name} must be an integer, got {value!r}")
        if self.width <= 0:
            raise ConfigError(f"field width must be positive, got {self.width}")
        if self.height <= 0:
            raise ConfigError(f"field height must be positive, got {self.height}")
        if self.mine_count <= 0:
            raise ConfigError(f"mine count must be positive, got {self.mine_count}")
        if self.mine_count >= self.width * self.height:
            raise ConfigError(
                f"too many mines: {self.mine_count} for "
                f"{self.width}x{self.height} field "
                f"(max {self.width * self.height - 1})"
            )

    @property
    def quota(self) -> int:
        """Number of safe cells that must be opened to win."""
        return self.width * self.height - self.mine_count

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldConfig":
        """Build a configuration from a mapping; absent keys keep defaults."""
        unknown = set(data) - {"width", "height", "mine_count"}
        if unknown:
            raise ConfigError(f"unknown field config keys: {sorted(unknown)}")
        return cls(**data)

    def to_dict(self) -> Dict[str, int]:
        return {
            "width": self.width,
            "height": self.height,
            "mine_count": self.mine_count,
        }


# Preset difficulty levels
BEGINNER = FieldConfig(9, 9, 10)
INTERMEDIATE = FieldConfig(16, 16, 40)
EXPERT = FieldConfig(30, 16, 99)

PRESETS = {
    "beginner": BEGINNER,
    "intermediate": INTERMEDIATE,
    "expert": EXPERT,
}


# ============================================================================
# Value Types
# ============================================================================

@dataclass(frozen=True)
class Coordinate:
    """Zero-based location of a cell: x is the column, y is the row."""

    x: int
    y: int

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"


@dataclass(frozen=True)
class OpenResult(OperationResult):
    """
    Outcome of Field.open.

    Attributes:
        new_state: State of the addressed cell.
        cascaded: Cells opened by auto-reveal, in the order opened.
    """

    cascaded: Tuple[Coordinate, ...] = ()


# ============================================================================
# Field Class
# ============================================================================

class Field:
    """
    Minesweeper minefield.

    Owns a row-major grid of cells, ``height`` rows of ``width`` cells.
    Use Field.create to build a freshly mined field, or Field.from_dict
    to rebuild one from a snapshot.
    """

    def __init__(self, width: int, height: int, cells: List[List[Cell]]) -> None:
        if len(cells) != height or any(len(row) != width for row in cells):
            raise ValueError(f"cell grid does not match {width}x{height} field")
        self.width = width
        self.height = height
        self.cells = cells

    def __repr__(self) -> str:
        return (
            f"Field(width={self.width}, height={self.height}, "
            f"mine_count={self.mine_count})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Field):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and self.cells == other.cells
        )

    # ========================================================================
    # Construction (Low-level)
    # ========================================================================

    @classmethod
    def create(
        cls,
        config: FieldConfig,
        rng: Optional[np.random.Generator] = None,
    ) -> "Field":
        """
        Build a field with randomly placed mines.

        Args:
            config: Field dimensions and mine count.
            rng: Random generator for mine placement (seed for
                reproducible fields).

        Returns:
            A field whose cells are all closed.
        """
        config.validate()
        rng = rng if rng is not None else np.random.default_rng()
        mines = cls._place_mines(config, rng)
        cells = [
            [
                Cell(
                    has_mine=bool(mines[row, col]),
                    surrounding_count=cls._count_surrounding_mines(mines, row, col),
                )
                for col in range(config.width)
            ]
            for row in range(config.height)
        ]
        logger.debug(
            "Created %dx%d field with %d mines",
            config.width, config.height, config.mine_count,
        )
        return cls(config.width, config.height, cells)

    @classmethod
    def from_mines(
        cls, width: int, height: int, mines: Sequence[Coordinate]
    ) -> "Field":
        """Build a field with mines at the given coordinates."""
        grid = np.zeros((height, width), dtype=bool)
        for coord in mines:
            if not (0 <= coord.x < width and 0 <= coord.y < height):
                raise CoordinateError("mine", coord, width, height)
            grid[coord.y, coord.x] = True
        cells = [
            [
                Cell(
                    has_mine=bool(grid[row, col]),
                    surrounding_count=cls._count_surrounding_mines(grid, row, col),
                )
                for col in range(width)
            ]
            for row in range(height)
        ]
        return cls(width, height, cells)

    @staticmethod
    def _place_mines(config: FieldConfig, rng: np.random.Generator) -> np.ndarray:
        """Choose mine_count distinct cells uniformly at random."""
        total = config.width * config.height
        positions = rng.choice(total, size=config.mine_count, replace=False)
        mines = np.zeros(total, dtype=bool)
        mines[positions] = True
        return mines.reshape(config.height, config.width)

    @staticmethod
    def _count_surrounding_mines(mines: np.ndarray, row: int, col: int) -> int:
        """Count mines among the in-bound neighbours of a position."""
        height, width = mines.shape
        top, bottom = max(row - 1, 0), min(row + 2, height)
        left, right = max(col - 1, 0), min(col + 2, width)
        count = int(mines[top:bottom, left:right].sum())
        if mines[row, col]:
            count -= 1
        return count

    # ========================================================================
    # Neighbor Utilities (Low-level)
    # ========================================================================

    def neighbours(self, coord: Coordinate) -> List[Coordinate]:
        """
        Get valid neighbouring coordinates.

        Args:
            coord: Center cell.

        Returns:
            Up to 8 in-bound coordinates sharing an edge or corner.
        """
        neighbours = []
        for delta_y in (-1, 0, 1):
            for delta_x in (-1, 0, 1):
                if delta_y == 0 and delta_x == 0:
                    continue
                candidate = Coordinate(coord.x + delta_x, coord.y + delta_y)
                if self.contains(candidate):
                    neighbours.append(candidate)
        return neighbours

    def contains(self, coord: Coordinate) -> bool:
        """Check if coordinate is within field bounds."""
        return 0 <= coord.x < self.width and 0 <= coord.y < self.height

    def coordinates(self) -> Iterator[Coordinate]:
        """Iterate over every coordinate in row-major order."""
        for y in range(self.height):
            for x in range(self.width):
                yield Coordinate(x, y)

    # ========================================================================
    # Field Actions (Mid-level)
    # ========================================================================

    def open(self, coord: Coordinate) -> OpenResult:
        """
        Open the cell at the given coordinate.

        If the opened cell has no surrounding mines, its closed neighbours
        are opened too, spreading through further cells without
        surrounding mines. Flagged cells are never opened by the spread.

        Raises:
            CoordinateError: If coord is outside the field.
            TransitionError: If the cell is not closed.
        """
        cell = self._cell_for("open", coord)
        try:
            result = cell.open()
        except TransitionError as error:
            error.at(coord)
            raise

        if result.new_state == CellState.EXPLODED:
            logger.debug("Cell %s exploded", coord)
            return OpenResult(result.new_state)

        cascaded = self._open_surroundings(coord)
        logger.debug("Opened %s, auto-revealed %d cells", coord, len(cascaded))
        return OpenResult(result.new_state, tuple(cascaded))

    def _open_surroundings(self, origin: Coordinate) -> List[Coordinate]:
        """Auto-reveal outward from an opened cell."""
        opened: List[Coordinate] = []
        pending = deque([origin])
        while pending:
            current = pending.popleft()
            if self.cell_at(current).surrounding_count > 0:
                continue
            for neighbour in self.neighbours(current):
                target = self.cell_at(neighbour)
                # Skips flagged and already processed cells.
                if not target.is_closed or target.has_mine:
                    continue
                target.open()
                opened.append(neighbour)
                pending.append(neighbour)
        return opened

    def flag(self, coord: Coordinate) -> OperationResult:
        """
        Flag the cell at the given coordinate.

        Raises:
            CoordinateError: If coord is outside the field.
            TransitionError: If the cell is not closed.
        """
        cell = self._cell_for("flag", coord)
        try:
            return cell.flag()
        except TransitionError as error:
            error.at(coord)
            raise

    def unflag(self, coord: Coordinate) -> OperationResult:
        """
        Unflag the cell at the given coordinate.

        Raises:
            CoordinateError: If coord is outside the field.
            TransitionError: If the cell is not flagged.
        """
        cell = self._cell_for("unflag", coord)
        try:
            return cell.unflag()
        except TransitionError as error:
            error.at(coord)
            raise

    def _cell_for(self, operation: str, coord: Coordinate) -> Cell:
        if not self.contains(coord):
            raise CoordinateError(operation, coord, self.width, self.height)
        return self.cells[coord.y][coord.x]

    # ========================================================================
    # State Accessors (High-level)
    # ========================================================================

    def cell_at(self, coord: Coordinate) -> Cell:
        """Get cell at coordinate; raises CoordinateError if invalid."""
        return self._cell_for("read", coord)

    @property
    def mine_count(self) -> int:
        return sum(cell.has_mine for row in self.cells for cell in row)

    def count(self, state: CellState) -> int:
        """Count cells currently in the given state."""
        return sum(cell.state == state for row in self.cells for cell in row)

    def to_observation(self) -> np.ndarray:
        """
        Get field state as numpy array for agents.

        Returns:
            2D int8 array of shape (height, width) where:
                -1 = closed
                -2 = flagged
                0-8 = opened with surrounding count
                9 = exploded mine
        """
        obs = np.zeros((self.height, self.width), dtype=np.int8)
        for y, row in enumerate(self.cells):
            for x, cell in enumerate(row):
                obs[y, x] = cell.to_observation()
        return obs

    # ========================================================================
    # Snapshot Encoding
    # ========================================================================

    def to_dict(self) -> Dict[str, Any]:
        """Encode the field as its snapshot document."""
        return {
            "width": self.width,
            "height": self.height,
            "cells": [[cell.to_dict() for cell in row] for row in self.cells],
        }

    @classmethod
    def from_dict(cls, doc: Any) -> "Field":
        """
        Decode a field from its snapshot document.

        Cells keep their persisted state.

        Raises:
            DecodeError: On a missing key, unknown state name, or a
                grid that does not match width and height.
        """
        if not isinstance(doc, dict):
            raise DecodeError.malformed(f"field must be an object, got {doc!r}")
        for key in ("width", "height", "cells"):
            if key not in doc:
                raise DecodeError.missing(key, "field")

        width, height, rows = doc["width"], doc["height"], doc["cells"]
        for key, value in (("width", width), ("height", height)):
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise DecodeError.malformed(
                    f'"{key}" must be a positive integer, got {value!r}'
                )
        if not isinstance(rows, list) or len(rows) != height:
            raise DecodeError.malformed(f'"cells" must be a list of {height} rows')

        cells = []
        for y, row in enumerate(rows):
            if not isinstance(row, list) or len(row) != width:
                raise DecodeError.malformed(f"row {y} must be a list of {width} cells")
            cells.append([Cell.from_dict(entry) for entry in row])
        return cls(width, height, cells)
