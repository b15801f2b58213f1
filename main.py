#!/usr/bin/env python3
"""
Minesweeper - Main entry point.

Usage:
    python main.py play [--preset NAME | --width W --height H --mines N]
    python main.py play --config game.json [--save game.sav]
    python main.py play --load game.sav
    python main.py show game.sav
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from minesweeper import (
    PRESETS,
    FieldConfig,
    Game,
    GameConfig,
    MinesweeperError,
)

logger = logging.getLogger("minesweeper.cli")

HELP_TEXT = """Commands:
  <column> <row>          open a cell, e.g. "3 b"
  <column> <row> f        flag a cell
  <column> <row> u        unflag a cell
  save                    save the game (requires --save or --load)
  quit                    leave the game"""


def build_config(args: argparse.Namespace) -> GameConfig:
    """Build the game configuration from command line options."""
    if args.config:
        return GameConfig.from_file(args.config)
    base = PRESETS[args.preset]
    return GameConfig(FieldConfig(
        width=args.width if args.width is not None else base.width,
        height=args.height if args.height is not None else base.height,
        mine_count=args.mines if args.mines is not None else base.mine_count,
    ))


def save_game(game: Game, path: Optional[Path]) -> None:
    """Write the game snapshot to path."""
    if path is None:
        print("No save file given; start with --save PATH or --load PATH.")
        return
    with open(path, "wb") as f:
        game.save(f)
    print(f"Game saved to {path}")


def play(args: argparse.Namespace) -> int:
    """Run an interactive game on the terminal."""
    save_path = Path(args.save) if args.save else None
    try:
        if args.load:
            with open(args.load, "rb") as f:
                game = Game.restore(f)
            save_path = save_path or Path(args.load)
        else:
            game = Game(build_config(args))
    except (MinesweeperError, OSError) as error:
        print(f"Cannot start game: {error}", file=sys.stderr)
        return 1

    print(HELP_TEXT)
    while game.is_playing:
        print()
        print(game.render())
        print(f"{game.remaining} safe cells left")
        try:
            line = input("> ").strip()
        except EOFError:
            line = "quit"

        if line == "quit":
            return 0
        if line == "save":
            save_game(game, save_path)
            continue
        if line in ("help", "?"):
            print(HELP_TEXT)
            continue

        try:
            game.operate(line)
        except MinesweeperError as error:
            logger.debug("Rejected input %r: %s", line, error.kind.name)
            print(f"Error: {error}")

    print()
    print(game.render())
    print("Cleared!" if game.is_won else "Boom! You lost.")
    return 0


def show(args: argparse.Namespace) -> int:
    """Print a saved game without playing it."""
    try:
        with open(args.snapshot, "rb") as f:
            game = Game.restore(f)
    except (MinesweeperError, OSError) as error:
        print(f"Cannot read snapshot: {error}", file=sys.stderr)
        return 1
    print(game.render())
    print(f"State: {game.state}  Opened: {game.opened}/{game.quota}")
    return 0


def main() -> None:
    """Parse arguments and run the appropriate command."""
    parser = argparse.ArgumentParser(description="Minesweeper - terminal game")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play a game")
    play_parser.add_argument(
        "--preset", choices=sorted(PRESETS), default="beginner",
        help="Field size preset",
    )
    play_parser.add_argument("--width", type=int, help="Number of columns")
    play_parser.add_argument("--height", type=int, help="Number of rows")
    play_parser.add_argument("--mines", type=int, help="Number of mines")
    play_parser.add_argument("--config", help="JSON game configuration file")
    play_parser.add_argument("--load", help="Resume a saved game")
    play_parser.add_argument("--save", help="File to write when saving")

    # Show command
    show_parser = subparsers.add_parser("show", help="Print a saved game")
    show_parser.add_argument("snapshot", help="Saved game file")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    if args.command == "play":
        try:
            sys.exit(play(args))
        except MinesweeperError as error:
            print(f"Error: {error}", file=sys.stderr)
            sys.exit(1)
    elif args.command == "show":
        sys.exit(show(args))
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
