"""
Presentation layer for Minesweeper.

Defines the UI interface that Game consumes to render a field and to
turn raw user input into an operation, plus the default text UI.
"""
import logging
import string
from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import List, Optional, Tuple, Union

from .cell import CellState
from .errors import InvalidInputError
from .field import Coordinate, Field

logger = logging.getLogger(__name__)


class OpType(Enum):
    """Kinds of operation a player can apply."""

    OPEN = auto()
    FLAG = auto()
    UNFLAG = auto()


RawInput = Union[str, bytes]

# One visible glyph per cell state.
GLYPHS = {
    CellState.CLOSED: " ",
    CellState.OPENED: "-",
    CellState.FLAGGED: "F",
    CellState.EXPLODED: "X",
}

_VERBS = {
    "f": OpType.FLAG,
    "flag": OpType.FLAG,
    "u": OpType.UNFLAG,
    "unflag": OpType.UNFLAG,
}


# ============================================================================
# UI Interface
# ============================================================================

class UI(ABC):
    """
    Abstract presentation collaborator.

    Implementations render a field as text and parse raw player input
    into an (OpType, Coordinate) pair.
    """

    def bind(self, field: Field) -> None:
        """Called by Game once the field it will present is known."""

    @abstractmethod
    def render(self, field: Field) -> str:
        """Return a human readable representation of the field."""

    @abstractmethod
    def parse_input(self, raw: RawInput) -> Tuple[OpType, Coordinate]:
        """
        Convert raw input into an operation.

        Raises:
            InvalidInputError: If the input is malformed.
        """


# ============================================================================
# Text UI
# ============================================================================

def row_label(index: int) -> str:
    """Label for a zero-based row: a, b, ..., z, aa, ab, ..."""
    label = ""
    n = index + 1
    while n > 0:
        n, remainder = divmod(n - 1, 26)
        label = string.ascii_lowercase[remainder] + label
    return label


def glyph_for(state: CellState) -> str:
    try:
        return GLYPHS[state]
    except KeyError:
        raise RuntimeError(f"invalid state: {state!r}") from None


class TextUI(UI):
    """
    Default text UI.

    Columns are labelled 1, 2, 3, ... and rows a, b, ..., z, aa, ab, ...
    Input is ``<column> <row> [f|flag|u|unflag]``; without a verb the
    cell is opened.
    """

    def __init__(self, width: Optional[int] = None, height: Optional[int] = None) -> None:
        self.x_symbols: List[int] = []
        self.y_symbols: List[str] = []
        if width is not None and height is not None:
            self._init_symbols(width, height)

    def _init_symbols(self, width: int, height: int) -> None:
        self.x_symbols = [i + 1 for i in range(width)]
        self.y_symbols = [row_label(i) for i in range(height)]

    def bind(self, field: Field) -> None:
        if len(self.x_symbols) != field.width or len(self.y_symbols) != field.height:
            self._init_symbols(field.width, field.height)

    def render(self, field: Field) -> str:
        self.bind(field)
        label_width = len(self.y_symbols[-1])

        header = " " * label_width + "".join(f" {x}" for x in self.x_symbols)
        lines = [header]
        for label, row in zip(self.y_symbols, field.cells):
            glyphs = "".join(f"|{glyph_for(cell.state)}" for cell in row)
            lines.append(label.ljust(label_width) + glyphs)
        return "\n".join(lines)

    def parse_input(self, raw: RawInput) -> Tuple[OpType, Coordinate]:
        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError:
                raise InvalidInputError(raw, "not valid UTF-8") from None

        tokens = raw.split()
        if len(tokens) not in (2, 3):
            raise InvalidInputError(raw, "expected '<column> <row> [f|u]'")

        try:
            column = int(tokens[0])
        except ValueError:
            raise InvalidInputError(raw, f"column {tokens[0]!r} is not a number") from None
        if column not in self.x_symbols:
            raise InvalidInputError(raw, f"unknown column {column}")
        if tokens[1] not in self.y_symbols:
            raise InvalidInputError(raw, f"unknown row {tokens[1]!r}")

        coord = Coordinate(self.x_symbols.index(column), self.y_symbols.index(tokens[1]))
        if len(tokens) == 2:
            return OpType.OPEN, coord

        op = _VERBS.get(tokens[2].lower())
        if op is None:
            raise InvalidInputError(raw, f"unknown operation {tokens[2]!r}")
        logger.debug("Parsed %r as %s at %s", raw, op.name, coord)
        return op, coord
