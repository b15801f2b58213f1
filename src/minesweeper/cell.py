"""
Cell module for Minesweeper game.

Represents individual cells on the field with their state
(closed/opened/flagged/exploded) and content (mine/number).
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict

from .errors import DecodeError, ErrorKind, TransitionError


# ============================================================================
# Constants
# ============================================================================

class CellState(Enum):
    """Possible states of a cell, valued by their persisted name."""

    CLOSED = "Closed"
    OPENED = "Opened"
    FLAGGED = "Flagged"
    EXPLODED = "Exploded"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_name(cls, name: Any) -> "CellState":
        """Look up a state by its persisted name."""
        for state in cls:
            if state.value == name:
                return state
        raise DecodeError.unknown_state(name)

    @property
    def is_terminal(self) -> bool:
        """Opened and exploded cells accept no further operation."""
        return self in (CellState.OPENED, CellState.EXPLODED)


# Failure kinds for each illegal (operation, state) pair.
_OPEN_ERRORS = {
    CellState.OPENED: ErrorKind.ALREADY_OPENED,
    CellState.FLAGGED: ErrorKind.CANNOT_OPEN_FLAGGED,
    CellState.EXPLODED: ErrorKind.CANNOT_OPEN_EXPLODED,
}

_FLAG_ERRORS = {
    CellState.OPENED: ErrorKind.CANNOT_FLAG_OPENED,
    CellState.FLAGGED: ErrorKind.ALREADY_FLAGGED,
    CellState.EXPLODED: ErrorKind.CANNOT_FLAG_EXPLODED,
}

_UNFLAG_ERRORS = {
    CellState.CLOSED: ErrorKind.NOT_FLAGGED,
    CellState.OPENED: ErrorKind.NOT_FLAGGED,
    CellState.EXPLODED: ErrorKind.NOT_FLAGGED,
}


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a successful cell or field operation."""

    new_state: CellState


# ============================================================================
# Cell Class
# ============================================================================

class Cell:
    """
    Represents a single cell in the Minesweeper grid.

    Only the cell itself changes its state, through open(), flag()
    and unflag(). Mine presence and the surrounding mine count are fixed
    at construction.

    Attributes:
        has_mine: Whether this cell contains a mine.
        surrounding_count: Count of mines in neighboring cells (0-8).
        state: Current state.
    """

    __slots__ = ("_state", "_has_mine", "_surrounding_count")

    def __init__(
        self,
        has_mine: bool = False,
        surrounding_count: int = 0,
        state: CellState = CellState.CLOSED,
    ) -> None:
        if surrounding_count < 0:
            raise ValueError("surrounding_count cannot be negative")
        self._has_mine = bool(has_mine)
        self._surrounding_count = int(surrounding_count)
        self._state = state

    def __repr__(self) -> str:
        return (
            f"Cell(has_mine={self._has_mine}, "
            f"surrounding_count={self._surrounding_count}, "
            f"state={self._state})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Cell):
            return NotImplemented
        return (
            self._state == other._state
            and self._has_mine == other._has_mine
            and self._surrounding_count == other._surrounding_count
        )

    # ========================================================================
    # Queries
    # ========================================================================

    @property
    def state(self) -> CellState:
        return self._state

    @property
    def has_mine(self) -> bool:
        return self._has_mine

    @property
    def surrounding_count(self) -> int:
        return self._surrounding_count

    @property
    def is_closed(self) -> bool:
        """Check if cell is closed."""
        return self._state == CellState.CLOSED

    @property
    def is_opened(self) -> bool:
        """Check if cell is opened."""
        return self._state == CellState.OPENED

    @property
    def is_flagged(self) -> bool:
        """Check if cell is flagged."""
        return self._state == CellState.FLAGGED

    @property
    def is_exploded(self) -> bool:
        """Check if cell is exploded."""
        return self._state == CellState.EXPLODED

    # ========================================================================
    # Operations
    # ========================================================================

    def open(self) -> OperationResult:
        """
        Open this cell.

        Returns:
            OperationResult with EXPLODED if the cell holds a mine,
            otherwise OPENED.

        Raises:
            TransitionError: If the cell is not closed.
        """
        if self._state == CellState.CLOSED:
            self._state = CellState.EXPLODED if self._has_mine else CellState.OPENED
            return OperationResult(self._state)
        raise TransitionError(self._failure(_OPEN_ERRORS), "open", self._state)

    def flag(self) -> OperationResult:
        """
        Flag this cell as a suspected mine.

        Raises:
            TransitionError: If the cell is not closed.
        """
        if self._state == CellState.CLOSED:
            self._state = CellState.FLAGGED
            return OperationResult(self._state)
        raise TransitionError(self._failure(_FLAG_ERRORS), "flag", self._state)

    def unflag(self) -> OperationResult:
        """
        Remove the flag from this cell.

        Raises:
            TransitionError: If the cell is not flagged.
        """
        if self._state == CellState.FLAGGED:
            self._state = CellState.CLOSED
            return OperationResult(self._state)
        raise TransitionError(self._failure(_UNFLAG_ERRORS), "unflag", self._state)

    def _failure(self, table: Dict[CellState, ErrorKind]) -> ErrorKind:
        try:
            return table[self._state]
        except KeyError:
            raise RuntimeError(f"unknown state is set: {self._state!r}") from None

    # ========================================================================
    # Conversion
    # ========================================================================

    def to_observation(self) -> int:
        """
        Convert cell to observation value for agents.

        Returns:
            -1: Closed cell
            -2: Flagged cell
            0-8: Opened cell with surrounding mine count
            9: Exploded mine
        """
        if self._state == CellState.CLOSED:
            return -1
        if self._state == CellState.FLAGGED:
            return -2
        if self._state == CellState.EXPLODED:
            return 9
        if self._state == CellState.OPENED:
            return self._surrounding_count
        raise RuntimeError(f"unknown state is set: {self._state!r}")

    def to_dict(self) -> Dict[str, Any]:
        """Encode the cell as its snapshot document."""
        return {
            "state": self._state.value,
            "has_mine": self._has_mine,
            "surrounding_count": self._surrounding_count,
        }

    @classmethod
    def from_dict(cls, doc: Any) -> "Cell":
        """
        Decode a cell from its snapshot document.

        The persisted state is kept as-is, not reset to CLOSED.

        Raises:
            DecodeError: If a key is missing, the state name is unknown,
                or a value has the wrong type.
        """
        if not isinstance(doc, dict):
            raise DecodeError.malformed(f"cell entry must be an object, got {doc!r}")
        for key in ("state", "has_mine", "surrounding_count"):
            if key not in doc:
                raise DecodeError.missing(key, "cell")

        state = CellState.from_name(doc["state"])
        has_mine = doc["has_mine"]
        if not isinstance(has_mine, bool):
            raise DecodeError.malformed(f'"has_mine" must be a boolean, got {has_mine!r}')
        count = doc["surrounding_count"]
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise DecodeError.malformed(
                f'"surrounding_count" must be a non-negative integer, got {count!r}'
            )
        return cls(has_mine=has_mine, surrounding_count=count, state=state)
