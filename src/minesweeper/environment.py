"""
Gymnasium environment wrapper for Minesweeper.

Exposes a Game through the standard RL interface.
"""
from typing import Any, Dict, Optional, Tuple, SupportsFloat

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from .errors import MinesweeperError
from .field import Coordinate, FieldConfig
from .game import Game, GameConfig
from .ui import OpType, TextUI


# ============================================================================
# Minesweeper Environment
# ============================================================================

class MinesweeperEnv(gym.Env):
    """
    Gymnasium environment for Minesweeper.

    Observation:
        2D array where:
        - -1 = closed cell
        - -2 = flagged cell
        - 0-8 = opened cell with surrounding mine count
        - 9 = exploded mine

    Actions:
        Discrete action space of size width * height.
        Action i opens the cell at column i % width, row i // width.

    Rewards:
        - +1 for opening a safe cell
        - +10 for clearing the field
        - -10 for hitting a mine
        - -0.1 for an illegal action (cell not closed)
    """

    metadata = {"render_modes": ["human", "ansi"], "render_fps": 4}

    def __init__(
        self,
        config: Optional[FieldConfig] = None,
        render_mode: Optional[str] = None,
    ) -> None:
        """
        Initialize the Minesweeper environment.

        Args:
            config: Field configuration (default: 9x9 with 10 mines).
            render_mode: How to render the environment.
        """
        super().__init__()

        self.config = config or FieldConfig()
        self.render_mode = render_mode
        self.game = Game(GameConfig(self.config), ui=TextUI())

        self.observation_space = spaces.Box(
            low=-2,
            high=9,
            shape=(self.config.height, self.config.width),
            dtype=np.int8,
        )
        self.action_space = spaces.Discrete(self.config.height * self.config.width)

        self._steps = 0

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[np.ndarray, Dict[str, Any]]:
        """
        Start a new game.

        Args:
            seed: Random seed for mine placement.
            options: Additional options (unused).

        Returns:
            Tuple of (observation, info dict).
        """
        super().reset(seed=seed)
        self.game = Game(GameConfig(self.config), ui=TextUI(), rng=self.np_random)
        self._steps = 0
        return self.game.field.to_observation(), self._get_info()

    def step(
        self, action: int
    ) -> Tuple[np.ndarray, SupportsFloat, bool, bool, Dict[str, Any]]:
        """
        Open the cell selected by action.

        Returns:
            Tuple of (observation, reward, terminated, truncated, info).
        """
        coord = self._action_to_coordinate(action)
        self._steps += 1

        reward = self._calculate_reward(coord)
        observation = self.game.field.to_observation()
        terminated = not self.game.is_playing

        return observation, reward, terminated, False, self._get_info()

    def _action_to_coordinate(self, action: int) -> Coordinate:
        """Convert flat action index to a coordinate."""
        return Coordinate(int(action) % self.config.width, int(action) // self.config.width)

    def _calculate_reward(self, coord: Coordinate) -> float:
        try:
            self.game.apply(OpType.OPEN, coord)
        except MinesweeperError:
            return -0.1

        if self.game.is_won:
            return 10.0
        if self.game.is_lost:
            return -10.0
        return 1.0

    def _get_info(self) -> Dict[str, Any]:
        """Get info dictionary for current state."""
        return {
            "steps": self._steps,
            "opened": self.game.opened,
            "quota": self.game.quota,
            "game_state": self.game.state.value,
            "valid_actions": int(self.get_action_mask().sum()),
        }

    def render(self) -> Optional[str]:
        """Render the current field state."""
        if self.render_mode == "ansi":
            return self.game.render()
        if self.render_mode == "human":
            print(self.game.render())
        return None

    def get_action_mask(self) -> np.ndarray:
        """
        Get mask of valid actions.

        Returns:
            Boolean array where True = closed cell.
        """
        return (self.game.field.to_observation() == -1).flatten()


# ============================================================================
# Vectorized Environment Factory
# ============================================================================

def make_vec_env(
    n_envs: int = 4,
    config: Optional[FieldConfig] = None,
) -> gym.vector.VectorEnv:
    """
    Create vectorized environment for parallel rollouts.

    Args:
        n_envs: Number of parallel environments.
        config: Field configuration.

    Returns:
        Vectorized environment.
    """
    def make_env() -> MinesweeperEnv:
        return MinesweeperEnv(config=config)

    return gym.vector.AsyncVectorEnv([make_env for _ in range(n_envs)])
