"""Terminal front end: key bindings, screen layout and the interactive loop."""

from __future__ import annotations

import os
import select
import shutil
import signal
import sys
import termios
import tty
from dataclasses import dataclass, field

from cryptcrawl.game import Game

STATUS_ROWS = 5
VISIBLE_MESSAGES = 3

_MOVES = {
    "up": (0, -1),
    "down": (0, 1),
    "left": (-1, 0),
    "right": (1, 0),
}

_ESCAPE_KEYS = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
}
_CONTROL_KEYS = {" ": "space", "\x03": "ctrl+c", "\r": "enter", "\n": "enter"}


@dataclass(frozen=True)
class KeyBinding:
    """A set of key names that trigger one action, with its help text."""

    keys: tuple[str, ...]
    help_key: str
    help_desc: str


@dataclass(frozen=True)
class KeyMap:
    """The game's key bindings."""

    up: KeyBinding = field(
        default_factory=lambda: KeyBinding(("up", "w", "k"), "↑/w/k", "move up")
    )
    down: KeyBinding = field(
        default_factory=lambda: KeyBinding(("down", "s", "j"), "↓/s/j", "move down")
    )
    left: KeyBinding = field(
        default_factory=lambda: KeyBinding(("left", "a", "h"), "←/a/h", "move left")
    )
    right: KeyBinding = field(
        default_factory=lambda: KeyBinding(("right", "d", "l"), "→/d/l", "move right")
    )
    help: KeyBinding = field(
        default_factory=lambda: KeyBinding(("?",), "?", "toggle help")
    )
    quit: KeyBinding = field(
        default_factory=lambda: KeyBinding(("q", "ctrl+c"), "q/ctrl+c", "quit")
    )
    attack: KeyBinding = field(
        default_factory=lambda: KeyBinding(("space",), "space", "attack")
    )

    def short_help(self) -> list[KeyBinding]:
        """Bindings shown in the one-line help."""
        return [self.help, self.quit]

    def full_help(self) -> list[list[KeyBinding]]:
        """Bindings grouped into columns for the full help."""
        return [
            [self.up, self.down, self.left, self.right],
            [self.attack],
            [self.help, self.quit],
        ]

    def action_for(self, key: str) -> str | None:
        """Return the name of the action bound to ``key``, or None."""
        for action in ("quit", "help", "up", "down", "left", "right", "attack"):
            if key in getattr(self, action).keys:
                return action
        return None


def _render_help(bindings: list[KeyBinding]) -> str:
    return " • ".join(f"{binding.help_key} {binding.help_desc}" for binding in bindings)


class App:
    """Maps key presses onto a game and lays out its screen."""

    def __init__(self, game: Game) -> None:
        self.game = game
        self.keys = KeyMap()
        self.show_help = False
        self.viewport_height = game.height - STATUS_ROWS

    def handle_key(self, key: str) -> bool:
        """Apply ``key`` to the game; return False when the player quits."""
        action = self.keys.action_for(key)
        if action == "quit":
            return False
        playing = not self.game.game_over and not self.game.game_won
        if action == "help":
            self.show_help = not self.show_help
        elif action in _MOVES and playing:
            self.game.move_player(*_MOVES[action])
        elif action == "attack" and playing:
            self.game.attack_nearby_monsters()
        return True

    def resize(self, width: int, height: int) -> None:
        """Adapt the game and the map view to a new screen size."""
        self.game.resize(width, height)
        self.viewport_height = height - STATUS_ROWS

    def _dungeon_view(self) -> str:
        height = max(self.viewport_height, 0)
        lines = self.game.dungeon_to_string().split("\n")[:height]
        lines.extend([""] * (height - len(lines)))
        return "\n".join(lines)

    def view(self) -> str:
        """Return the full screen as text."""
        game = self.game
        if game.game_over:
            return (
                f"\n\n  GAME OVER\n\n  You reached level {game.level} and collected "
                f"{game.gold} gold.\n\n  Press q to quit."
            )
        if game.game_won:
            return (
                f"\n\n  VICTORY!\n\n  You escaped the dungeon with {game.gold} gold!"
                "\n\n  Press q to quit."
            )

        status = (
            f"❤️ {game.player.health}/{game.player.max_health} | "
            f"💰 {game.gold} | 📜 Level {game.level}"
        )
        log = "".join(f"  {message}\n" for message in game.messages[-VISIBLE_MESSAGES:])
        help_view = "\n" + _render_help(self.keys.short_help()) if self.show_help else ""
        return f"{self._dungeon_view()}\n\n{status}\n{log}{help_view}"


def _split_keys(data: str) -> list[str]:
    keys = []
    rest = data
    while rest:
        if rest.startswith("\x1b"):
            chunk = rest[:3]
            keys.append(_ESCAPE_KEYS.get(chunk, "esc"))
            rest = rest[len(chunk):]
        else:
            keys.append(_CONTROL_KEYS.get(rest[0], rest[0]))
            rest = rest[1:]
    return keys


def run(game: Game) -> None:
    """Play ``game`` interactively on the controlling terminal."""
    app = App(game)
    fd = sys.stdin.fileno()
    out = sys.stdout
    saved = termios.tcgetattr(fd)
    resized = True

    def on_resize(signum, frame):
        nonlocal resized
        resized = True

    previous = signal.signal(signal.SIGWINCH, on_resize)
    out.write("\x1b[?1049h\x1b[?25l")
    try:
        tty.setraw(fd)
        running = True
        dirty = True
        while running:
            if resized:
                resized = False
                size = shutil.get_terminal_size()
                app.resize(size.columns, size.lines)
                dirty = True
            if dirty:
                out.write("\x1b[H\x1b[2J" + app.view().replace("\n", "\r\n"))
                out.flush()
                dirty = False
            ready, _, _ = select.select([fd], [], [], 0.1)
            if not ready:
                continue
            data = os.read(fd, 64).decode("utf-8", errors="ignore")
            for key in _split_keys(data):
                dirty = True
                if not app.handle_key(key):
                    running = False
                    break
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)
        signal.signal(signal.SIGWINCH, previous)
        out.write("\x1b[?25h\x1b[?1049l")
        out.flush()