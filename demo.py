#!/usr/bin/env python3
"""Watch a random policy play Minesweeper."""
import time
import os

import numpy as np

from minesweeper import FieldConfig, MinesweeperEnv
from minesweeper.ui import row_label


def clear_screen():
    os.system('cls' if os.name == 'nt' else 'clear')


def demo(delay: float = 0.3, games: int = 5, size: int = 9, mines: int = 10, seed=None):
    """Run demo games with visualization."""
    config = FieldConfig(width=size, height=size, mine_count=mines)
    env = MinesweeperEnv(config=config, render_mode="ansi")

    print(f"Field: {size}x{size} with {mines} mines ({100*mines/(size*size):.1f}% density)")
    print("Starting in 2 seconds...")
    time.sleep(2)

    wins = 0

    for game in range(games):
        obs, info = env.reset(seed=None if seed is None else seed + game)

        clear_screen()
        print(f"=== Game {game + 1}/{games} ===")
        print(f"Wins so far: {wins}\n")
        print(env.render())
        time.sleep(delay)

        done = False
        step = 0

        while not done:
            mask = env.get_action_mask().astype(np.int8)
            action = env.action_space.sample(mask=mask)
            col, row = action % size, action // size

            obs, reward, terminated, truncated, info = env.step(action)
            done = terminated or truncated
            step += 1

            clear_screen()
            print(f"=== Game {game + 1}/{games} | Step {step} ===")
            print(f"Wins so far: {wins}")
            print(f"Last move: {col + 1} {row_label(row)}\n")
            print(env.render())

            if done:
                if info.get("game_state") == "Cleared":
                    wins += 1
                    print(f"\n*** CLEARED! ***")
                else:
                    print(f"\n*** LOST (hit mine) ***")

            time.sleep(delay)

        time.sleep(1.0)  # Pause between games

    print(f"\n=== Final: {wins}/{games} wins ({100*wins/games:.0f}%) ===")


if __name__ == "__main__":
    import argparse
    parser = argparse.ArgumentParser()
    parser.add_argument("--delay", type=float, default=0.3, help="Delay between moves")
    parser.add_argument("--games", type=int, default=5, help="Number of games")
    parser.add_argument("--size", type=int, default=9, help="Field size (NxN)")
    parser.add_argument("--mines", type=int, default=None, help="Number of mines (default: ~12%% of cells)")
    parser.add_argument("--seed", type=int, default=None, help="Seed for mine placement")
    args = parser.parse_args()

    mines = args.mines if args.mines else max(1, int(args.size * args.size * 0.12))

    demo(delay=args.delay, games=args.games, size=args.size, mines=mines, seed=args.seed)
