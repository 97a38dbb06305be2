"""Command-line entry point: load the dungeons and play in the terminal."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from cryptcrawl.definition import DungeonError
from cryptcrawl.game import Game
from cryptcrawl.loader import DungeonLoader
from cryptcrawl.ui import run

log = logging.getLogger(__name__)


def get_env(key: str, default: str) -> str:
    """Return the environment variable ``key``, or ``default`` if unset or empty."""
    return os.environ.get(key, "") or default


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="cryptcrawl", description="Explore a dungeon in the terminal."
    )
    parser.add_argument(
        "--dungeon-dir",
        default=get_env("DUNGEON_DIR", "dungeons"),
        help="directory holding dungeon definitions (default: $DUNGEON_DIR or dungeons)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Run the game; return the process exit status."""
    args = _parse_args(argv)

    if get_env("DEBUG", "false") == "true":
        logging.basicConfig(filename="debug.log", level=logging.DEBUG)
        log.debug("Debug logging enabled to debug.log")
    else:
        logging.basicConfig(level=logging.INFO)

    dungeon_dir = Path(args.dungeon_dir)
    try:
        dungeon_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        print(f"Failed to create dungeons directory: {exc}", file=sys.stderr)
        return 1
    try:
        loader = DungeonLoader(dungeon_dir)
    except (DungeonError, OSError) as exc:
        print(f"Failed to initialize dungeon loader: {exc}", file=sys.stderr)
        return 1

    if not sys.stdin.isatty():
        print("no active terminal, bye!", file=sys.stderr)
        return 1

    run(Game(loader=loader))
    return 0


if __name__ == "__main__":
    sys.exit(main())