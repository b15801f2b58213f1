"""
Pytest configuration and shared fixtures.
"""
import pytest
import sys
from pathlib import Path
from typing import Callable, List, Tuple

import numpy as np

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minesweeper import (
    UI,
    Cell,
    Coordinate,
    Field,
    FieldConfig,
    Game,
    GameConfig,
    OpType,
)


# ============================================================================
# Test Doubles
# ============================================================================

class DummyUI(UI):
    """UI whose behavior is supplied by the test."""

    def __init__(
        self,
        parse: Callable[[object], Tuple[OpType, Coordinate]] = None,
        render: Callable[[Field], str] = None,
    ) -> None:
        self.parse = parse
        self.render_func = render
        self.parsed: List[object] = []

    def render(self, field: Field) -> str:
        return self.render_func(field)

    def parse_input(self, raw):
        self.parsed.append(raw)
        return self.parse(raw)


@pytest.fixture
def dummy_ui():
    """Factory for UI test doubles."""
    return DummyUI


# ============================================================================
# Field Fixtures
# ============================================================================

@pytest.fixture
def corner_mine_field() -> Field:
    """
    A 4x4 field with a single mine in the bottom-right corner.

    Surrounding counts:
        0 0 0 0
        0 0 0 0
        0 0 1 1
        0 0 1 *
    """
    return Field.from_mines(4, 4, [Coordinate(3, 3)])


@pytest.fixture
def walled_field() -> Field:
    """
    A 5x3 field whose middle column is mined top to bottom.

        . . * . .
        . . * . .
        . . * . .
    """
    return Field.from_mines(5, 3, [Coordinate(2, y) for y in range(3)])


@pytest.fixture
def random_field() -> Field:
    """A seeded beginner field."""
    return Field.create(FieldConfig(9, 9, 10), np.random.default_rng(42))


# ============================================================================
# Cell Fixtures
# ============================================================================

@pytest.fixture
def closed_cell() -> Cell:
    """Create a closed safe cell."""
    return Cell()


@pytest.fixture
def mine_cell() -> Cell:
    """Create a cell containing a mine."""
    return Cell(has_mine=True)


# ============================================================================
# Game Fixtures
# ============================================================================

@pytest.fixture
def default_game() -> Game:
    """Create a seeded default 9x9 game with 10 mines."""
    return Game(rng=np.random.default_rng(7))


@pytest.fixture
def corner_mine_game(corner_mine_field: Field) -> Game:
    """Game on the 4x4 corner mine field."""
    return Game.from_field(corner_mine_field)


@pytest.fixture
def small_config() -> GameConfig:
    """Game configuration for a 3x3 field with 1 mine."""
    return GameConfig(FieldConfig(3, 3, 1))
