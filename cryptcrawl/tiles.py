"""Dungeon tile types, their symbols and terminal styling."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

_RESET = "\x1b[0m"


class TileType(IntEnum):
    """Kinds of tile a dungeon grid may hold."""

    EMPTY = 0
    WALL = 1
    PLAYER = 2
    MONSTER = 3
    GOLD = 4
    EXIT = 5
    TRAP = 6
    CHEST = 7
    DOOR = 8
    WATER = 9
    LAVA = 10


def _rgb(color: str) -> tuple[int, int, int]:
    hex_digits = color.lstrip("#")
    if len(hex_digits) != 6:
        raise ValueError(f"invalid colour: {color!r}")
    return (
        int(hex_digits[0:2], 16),
        int(hex_digits[2:4], 16),
        int(hex_digits[4:6], 16),
    )


@dataclass(frozen=True)
class Style:
    """Terminal text style built from true-colour ANSI escape codes."""

    foreground: str | None = None
    background: str | None = None
    bold: bool = False

    def render(self, text: str) -> str:
        """Return ``text`` wrapped in the escape codes for this style."""
        codes: list[str] = []
        if self.bold:
            codes.append("1")
        if self.foreground:
            r, g, b = _rgb(self.foreground)
            codes.append(f"38;2;{r};{g};{b}")
        if self.background:
            r, g, b = _rgb(self.background)
            codes.append(f"48;2;{r};{g};{b}")
        if not codes or not text:
            return text
        return f"\x1b[{';'.join(codes)}m{text}{_RESET}"


@dataclass(frozen=True)
class Tile:
    """A tile type together with how it looks and behaves."""

    type: TileType
    symbol: str
    style: Style
    walkable: bool
    description: str

    def render(self) -> str:
        return self.style.render(self.symbol)


TILE_MAP: dict[TileType, Tile] = {
    TileType.EMPTY: Tile(TileType.EMPTY, " ", Style(), True, "An empty floor tile."),
    TileType.WALL: Tile(
        TileType.WALL,
        "#",
        Style(foreground="#666666", background="#333333"),
        False,
        "A solid stone wall.",
    ),
    TileType.PLAYER: Tile(
        TileType.PLAYER, "@", Style(foreground="#00ffff", bold=True), False, "That's you!"
    ),
    TileType.MONSTER: Tile(
        TileType.MONSTER,
        "M",
        Style(foreground="#ff0000", bold=True),
        False,
        "A dangerous monster.",
    ),
    TileType.GOLD: Tile(
        TileType.GOLD, "$", Style(foreground="#ffff00", bold=True), True, "Shiny gold coins."
    ),
    TileType.EXIT: Tile(
        TileType.EXIT,
        "E",
        Style(foreground="#00ff00", bold=True),
        True,
        "An exit to the next level.",
    ),
    TileType.TRAP: Tile(
        TileType.TRAP, "^", Style(foreground="#ff00ff"), True, "A dangerous trap."
    ),
    TileType.CHEST: Tile(
        TileType.CHEST,
        "?",
        Style(foreground="#ffaa00", bold=True),
        True,
        "A mysterious chest.",
    ),
    TileType.DOOR: Tile(TileType.DOOR, "+", Style(foreground="#aa5500"), True, "A door."),
    TileType.WATER: Tile(
        TileType.WATER, "~", Style(foreground="#0000ff"), False, "Deep water."
    ),
    TileType.LAVA: Tile(
        TileType.LAVA,
        "~",
        Style(foreground="#ff5500", background="#aa0000"),
        False,
        "Deadly lava.",
    ),
}


def _find_by_symbol(symbol: str) -> Tile | None:
    return next((tile for tile in TILE_MAP.values() if tile.symbol == symbol), None)


def get_tile_by_symbol(symbol: str) -> Tile:
    """Return the first tile drawn with ``symbol``, or the empty tile."""
    return _find_by_symbol(symbol) or TILE_MAP[TileType.EMPTY]


def get_tile_by_type(tile_type: TileType | int) -> Tile:
    """Return the tile description for ``tile_type``."""
    return TILE_MAP[TileType(tile_type)]


def render_tile(tile_type: TileType | int) -> str:
    """Return the styled symbol of ``tile_type``."""
    return get_tile_by_type(tile_type).render()


def render_symbol(symbol: str) -> str:
    """Return ``symbol`` styled as its tile, or unchanged if no tile uses it."""
    tile = _find_by_symbol(symbol)
    return tile.render() if tile else symbol