"""
Error types for the Minesweeper rules engine.

Every recoverable failure is a MinesweeperError carrying an ErrorKind,
so callers compare failures by kind instead of by exception identity.
"""
from enum import Enum, auto
from typing import Any, Optional


# ============================================================================
# Error Kinds
# ============================================================================

class ErrorKind(Enum):
    """Fixed set of failure kinds reported by the engine."""

    # Construction
    INVALID_CONFIG = auto()

    # Coordinates
    COORDINATE_OUT_OF_RANGE = auto()

    # Illegal cell transitions
    ALREADY_OPENED = auto()
    CANNOT_OPEN_FLAGGED = auto()
    CANNOT_OPEN_EXPLODED = auto()
    CANNOT_FLAG_OPENED = auto()
    ALREADY_FLAGGED = auto()
    CANNOT_FLAG_EXPLODED = auto()
    NOT_FLAGGED = auto()

    # Game level
    GAME_ALREADY_FINISHED = auto()
    INVALID_INPUT = auto()

    # Serialization
    MISSING_FIELD = auto()
    UNKNOWN_STATE = auto()
    MALFORMED_DOCUMENT = auto()


# ============================================================================
# Exceptions
# ============================================================================

class MinesweeperError(Exception):
    """
    Base class for all recoverable engine failures.

    Attributes:
        kind: What went wrong.
        message: Human readable description.
    """

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __str__(self) -> str:
        return self.message


class ConfigError(MinesweeperError, ValueError):
    """Raised when a field or game configuration is invalid."""

    def __init__(self, message: str) -> None:
        super().__init__(ErrorKind.INVALID_CONFIG, message)


class CoordinateError(MinesweeperError):
    """Raised when an operation addresses a cell outside the field."""

    def __init__(self, operation: str, coord: Any, width: int, height: int) -> None:
        self.operation = operation
        self.coord = coord
        super().__init__(
            ErrorKind.COORDINATE_OUT_OF_RANGE,
            f"cannot {operation} {coord}: outside {width}x{height} field",
        )


class TransitionError(MinesweeperError):
    """
    Raised when a cell operation is illegal from the cell's current state.

    Attributes:
        operation: "open", "flag" or "unflag".
        state: The CellState the cell was in.
        coord: Address of the cell, filled in by Field when known.
    """

    def __init__(self, kind: ErrorKind, operation: str, state: Any) -> None:
        self.operation = operation
        self.state = state
        self.coord: Optional[Any] = None
        super().__init__(kind, f"cannot {operation} a cell in state {state.name}")

    def at(self, coord: Any) -> "TransitionError":
        """Attach the cell coordinate to the error message."""
        self.coord = coord
        self.message = (
            f"cannot {self.operation} cell {coord} in state {self.state.name}"
        )
        self.args = (self.message,)
        return self


class GameFinishedError(MinesweeperError):
    """Raised when operating on a game that is cleared or lost."""

    def __init__(self, state: Any) -> None:
        self.state = state
        super().__init__(
            ErrorKind.GAME_ALREADY_FINISHED,
            f"cannot operate on finished game (state: {state})",
        )


class InvalidInputError(MinesweeperError, ValueError):
    """Raised when user input cannot be parsed into an operation."""

    def __init__(self, raw: Any, reason: str = "unrecognized input") -> None:
        self.raw = raw
        super().__init__(ErrorKind.INVALID_INPUT, f"invalid input {raw!r}: {reason}")


class DecodeError(MinesweeperError, ValueError):
    """Raised when a persisted snapshot cannot be decoded."""

    @classmethod
    def missing(cls, key: str, where: str = "document") -> "DecodeError":
        return cls(ErrorKind.MISSING_FIELD, f'"{key}" field is not given in {where}')

    @classmethod
    def unknown_state(cls, name: Any) -> "DecodeError":
        return cls(ErrorKind.UNKNOWN_STATE, f"unknown state is given: {name!r}")

    @classmethod
    def malformed(cls, reason: str) -> "DecodeError":
        return cls(ErrorKind.MALFORMED_DOCUMENT, f"malformed document: {reason}")
