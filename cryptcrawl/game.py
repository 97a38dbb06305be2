"""Game state and rules: dungeon generation, movement, combat and visibility."""

from __future__ import annotations

import os
import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from cryptcrawl.definition import DungeonError
from cryptcrawl.tiles import TileType, render_tile

if TYPE_CHECKING:
    from cryptcrawl.loader import DungeonLoader

PLAYER_SYMBOL = "@"
MONSTER_SYMBOL = "M"
WELCOME_MESSAGE = "Welcome to CryptCrawl! Use arrow keys to move."

DEFAULT_WIDTH = 97
DEFAULT_HEIGHT = 30
FINAL_LEVEL = 3
VIEW_RADIUS = 5

_SYMBOL_TILES = {
    "#": TileType.WALL,
    "@": TileType.PLAYER,
    "E": TileType.EXIT,
    "$": TileType.GOLD,
    "?": TileType.CHEST,
    "^": TileType.TRAP,
    "+": TileType.DOOR,
}
_MONSTER_SYMBOLS = frozenset("MSZW")
_BLOCKING = frozenset({TileType.WALL, TileType.WATER, TileType.LAVA})
_MONSTER_WALKABLE = frozenset(
    {TileType.EMPTY, TileType.GOLD, TileType.TRAP, TileType.CHEST, TileType.DOOR}
)


@dataclass
class Position:
    x: int = 0
    y: int = 0


@dataclass
class Entity:
    """The player or a monster."""

    pos: Position = field(default_factory=Position)
    symbol: str = ""
    health: int = 0
    max_health: int = 0
    damage: int = 0
    name: str = ""


@dataclass(frozen=True)
class _Room:
    x: int
    y: int
    w: int
    h: int

    @property
    def center(self) -> tuple[int, int]:
        return self.x + self.w // 2, self.y + self.h // 2

    def overlaps(self, other: _Room) -> bool:
        return (
            self.x <= other.x + other.w + 1
            and self.x + self.w + 1 >= other.x
            and self.y <= other.y + other.h + 1
            and self.y + self.h + 1 >= other.y
        )


def _new_player(x: int, y: int) -> Entity:
    return Entity(Position(x, y), PLAYER_SYMBOL, 10, 10, 2, "Player")


class Game:
    """The state of one game session and the rules that change it."""

    def __init__(
        self,
        loader: DungeonLoader | None = None,
        reveal_map: bool | None = None,
        rng: Any = None,
    ) -> None:
        self.rng = rng if rng is not None else random.Random()
        if reveal_map is None:
            reveal_map = os.environ.get("DEBUG") == "true"
        self.reveal_map = reveal_map
        self.width = DEFAULT_WIDTH
        self.height = DEFAULT_HEIGHT
        self.dungeon: list[list[TileType]] = []
        self.player = Entity()
        self.monsters: list[Entity] = []
        self.messages: list[str] = [WELCOME_MESSAGE]
        self.gold = 0
        self.level = 1
        self.game_over = False
        self.game_won = False

        if loader is None or not self._load_from(loader):
            self.generate_dungeon()

    def _load_from(self, loader: DungeonLoader) -> bool:
        definition = loader.current_dungeon()
        if definition is None:
            return False
        self.add_message(f"Loaded dungeon: {definition.name}")
        self.add_message(definition.description)
        try:
            grid, _ = loader.generate_current_level(self.level - 1)
        except DungeonError:
            return False

        self.dungeon = []
        self.monsters = []
        for y, row in enumerate(grid):
            tiles = []
            for x, char in enumerate(row):
                if char in _SYMBOL_TILES:
                    tile = _SYMBOL_TILES[char]
                elif char in _MONSTER_SYMBOLS:
                    tile = TileType.MONSTER
                    self.monsters.append(
                        Entity(Position(x, y), char, 5, 5, 2, "Monster")
                    )
                elif char == "~":
                    tile = TileType.WATER if self.rng.randrange(2) == 0 else TileType.LAVA
                else:
                    tile = TileType.EMPTY
                if tile is TileType.PLAYER:
                    self.player = _new_player(x, y)
                tiles.append(tile)
            self.dungeon.append(tiles)
        return True

    def generate_dungeon(self) -> None:
        """Fill the grid with randomly placed rooms, corridors, monsters and gold."""
        rng = self.rng
        self.dungeon = [[TileType.WALL] * self.width for _ in range(self.height)]

        rooms: list[_Room] = []
        for _ in range(rng.randrange(5) + 5):
            w = rng.randrange(8) + 5
            h = rng.randrange(5) + 3
            room = _Room(
                rng.randrange(self.width - w - 2) + 1,
                rng.randrange(self.height - h - 2) + 1,
                w,
                h,
            )
            if any(room.overlaps(other) for other in rooms):
                continue
            for y in range(room.y, room.y + room.h):
                for x in range(room.x, room.x + room.w):
                    self.dungeon[y][x] = TileType.EMPTY
            rooms.append(room)

        for first, second in zip(rooms, rooms[1:]):
            (start_x, start_y), (end_x, end_y) = first.center, second.center
            for x in range(min(start_x, end_x), max(start_x, end_x) + 1):
                self.dungeon[start_y][x] = TileType.EMPTY
            for y in range(min(start_y, end_y), max(start_y, end_y) + 1):
                self.dungeon[y][end_x] = TileType.EMPTY

        player_x, player_y = rooms[0].center
        self.player = _new_player(player_x, player_y)
        self.dungeon[player_y][player_x] = TileType.PLAYER

        exit_x, exit_y = rooms[-1].center
        self.dungeon[exit_y][exit_x] = TileType.EXIT

        self.monsters = []
        for room in rooms[1:-1]:
            for _ in range(rng.randrange(3) + 1):
                x = room.x + rng.randrange(room.w)
                y = room.y + rng.randrange(room.h)
                if self.dungeon[y][x] is TileType.EMPTY:
                    health = 3 + self.level
                    self.monsters.append(
                        Entity(
                            Position(x, y),
                            MONSTER_SYMBOL,
                            health,
                            health,
                            1 + self.level // 2,
                            "Monster",
                        )
                    )
                    self.dungeon[y][x] = TileType.MONSTER
            for _ in range(rng.randrange(5) + 1):
                x = room.x + rng.randrange(room.w)
                y = room.y + rng.randrange(room.h)
                if self.dungeon[y][x] is TileType.EMPTY:
                    self.dungeon[y][x] = TileType.GOLD

    def dungeon_to_string(self) -> str:
        """Render the grid, blanking tiles the player cannot see."""
        lines = []
        for y, row in enumerate(self.dungeon):
            cells = (
                render_tile(tile) if self.reveal_map or self.is_visible(x, y) else " "
                for x, tile in enumerate(row)
            )
            lines.append("".join(cells) + "\n")
        return "".join(lines)

    def is_visible(self, x: int, y: int) -> bool:
        """Return whether (x, y) lies within sight of the player."""
        return (
            abs(x - self.player.pos.x) <= VIEW_RADIUS
            and abs(y - self.player.pos.y) <= VIEW_RADIUS
        )

    def _in_bounds(self, x: int, y: int) -> bool:
        return (
            0 <= x < self.width
            and 0 <= y < self.height
            and y < len(self.dungeon)
            and x < len(self.dungeon[y])
        )

    def _monster_index_at(self, x: int, y: int) -> int | None:
        return next(
            (
                index
                for index, monster in enumerate(self.monsters)
                if monster.pos.x == x and monster.pos.y == y
            ),
            None,
        )

    def _strike(self, index: int) -> bool:
        """Let the player hit monster ``index``; return whether it died."""
        monster = self.monsters[index]
        damage = self.player.damage
        monster.health -= damage
        self.add_message(f"You hit the monster for {damage} damage!")
        if monster.health > 0:
            return False
        self.add_message("You killed the monster!")
        self.dungeon[monster.pos.y][monster.pos.x] = TileType.EMPTY
        del self.monsters[index]
        return True

    def _hurt_player(self, damage: int) -> None:
        self.player.health -= damage
        self.add_message(f"The monster hits you for {damage} damage!")
        if self.player.health <= 0:
            self.game_over = True
            self.add_message("You died!")

    def _step_player(self, x: int, y: int) -> None:
        self.dungeon[self.player.pos.y][self.player.pos.x] = TileType.EMPTY
        self.player.pos = Position(x, y)
        self.dungeon[y][x] = TileType.PLAYER

    def _open_chest(self) -> None:
        item = self.rng.randrange(3)
        if item == 0:
            amount = self.rng.randrange(20) + 10
            self.gold += amount
            self.add_message(f"You found {amount} gold in the chest!")
        elif item == 1:
            amount = self.rng.randrange(5) + 3
            self.player.health = min(self.player.health + amount, self.player.max_health)
            self.add_message(f"You found a health potion! +{amount} HP")
        else:
            self.player.damage += 1
            self.add_message("You found a weapon upgrade! +1 damage")

    def move_player(self, dx: int, dy: int) -> None:
        """Move the player one step, resolving whatever is there; then monsters act."""
        new_x = self.player.pos.x + dx
        new_y = self.player.pos.y + dy
        if not self._in_bounds(new_x, new_y):
            return

        tile = self.dungeon[new_y][new_x]
        if tile in _BLOCKING:
            return
        if tile is TileType.MONSTER:
            index = self._monster_index_at(new_x, new_y)
            if index is not None and not self._strike(index):
                self._hurt_player(self.monsters[index].damage)
        elif tile is TileType.GOLD:
            amount = self.rng.randrange(10) + 1
            self.gold += amount
            self.add_message(f"You found {amount} gold!")
            self._step_player(new_x, new_y)
        elif tile is TileType.CHEST:
            self._open_chest()
            self._step_player(new_x, new_y)
        elif tile is TileType.TRAP:
            damage = self.rng.randrange(3) + 1
            self.player.health -= damage
            self.add_message(f"You triggered a trap! -{damage} HP")
            if self.player.health <= 0:
                self.game_over = True
                self.add_message("You died!")
                return
            self._step_player(new_x, new_y)
        elif tile is TileType.EXIT:
            if self.level < FINAL_LEVEL:
                self.level += 1
                self.add_message(f"You descend to level {self.level}...")
                self.generate_dungeon()
            else:
                self.game_won = True
                self.add_message("You escaped the dungeon!")
        elif tile in (TileType.EMPTY, TileType.DOOR):
            self._step_player(new_x, new_y)

        self.move_monsters()

    def move_monsters(self) -> None:
        """Give each living monster a chance to step towards or attack the player."""
        for monster in self.monsters:
            if monster.health <= 0:
                continue
            if self.rng.randrange(2) == 0:
                continue

            old_x, old_y = monster.pos.x, monster.pos.y
            dx = (old_x < self.player.pos.x) - (old_x > self.player.pos.x)
            dy = (old_y < self.player.pos.y) - (old_y > self.player.pos.y)
            if self.rng.randrange(2) == 0 and dx != 0:
                dy = 0
            elif dy != 0:
                dx = 0

            new_x, new_y = old_x + dx, old_y + dy
            if not self._in_bounds(new_x, new_y):
                continue

            tile = self.dungeon[new_y][new_x]
            if tile in _MONSTER_WALKABLE:
                self.dungeon[old_y][old_x] = TileType.EMPTY
                monster.pos = Position(new_x, new_y)
                self.dungeon[new_y][new_x] = TileType.MONSTER
            elif tile is TileType.PLAYER:
                self._hurt_player(monster.damage)

    def attack_nearby_monsters(self) -> None:
        """Strike every monster in the eight cells around the player."""
        attacked = False
        for dy in (-1, 0, 1):
            for dx in (-1, 0, 1):
                if dx == 0 and dy == 0:
                    continue
                x = self.player.pos.x + dx
                y = self.player.pos.y + dy
                if not self._in_bounds(x, y) or self.dungeon[y][x] is not TileType.MONSTER:
                    continue
                attacked = True
                index = self._monster_index_at(x, y)
                if index is not None:
                    self._strike(index)
        if not attacked:
            self.add_message("You swing at the air!")

    def add_message(self, message: str) -> None:
        """Append ``message`` to the message log."""
        self.messages.append(message)

    def resize(self, width: int, height: int) -> None:
        """Set the size used for bounds and for the next generated level."""
        self.width = width
        self.height = height