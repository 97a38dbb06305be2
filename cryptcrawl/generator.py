"""Build a playable grid of characters from a dungeon definition."""

from __future__ import annotations

import random
from typing import Any

from cryptcrawl.definition import (
    DungeonDefinition,
    DungeonError,
    LevelDefinition,
    Position,
    RoomDefinition,
)

_MAX_ATTEMPTS = 100
_FLOOR = "."


def _find_room(level: LevelDefinition, room_id: str) -> RoomDefinition | None:
    return next((room for room in level.rooms if room.id == room_id), None)


def _random_floor_in_room(
    grid: list[list[str]], level: LevelDefinition, room: RoomDefinition, rng: Any
) -> tuple[int, int] | None:
    """Pick a random floor cell inside ``room``, away from its edges."""
    for _ in range(_MAX_ATTEMPTS):
        x = rng.randrange(room.width - 2) + room.x + 1
        y = rng.randrange(room.height - 2) + room.y + 1
        if not (0 <= x < level.width and 0 <= y < level.height):
            continue
        if grid[y][x] == _FLOOR:
            return x, y
    return None


def _random_floor_anywhere(
    grid: list[list[str]], level: LevelDefinition, rng: Any
) -> tuple[int, int] | None:
    for _ in range(_MAX_ATTEMPTS):
        x = rng.randrange(level.width)
        y = rng.randrange(level.height)
        if grid[y][x] == _FLOOR:
            return x, y
    return None


def _spawn_point(
    grid: list[list[str]],
    level: LevelDefinition,
    position: Position | None,
    room_id: str,
    rng: Any,
) -> tuple[int, int] | None:
    """Resolve a spawn's fixed position, room or free placement to a cell."""
    if position is not None:
        return position.x, position.y
    if room_id:
        room = _find_room(level, room_id)
        if room is None:
            return None
        return _random_floor_in_room(grid, level, room, rng)
    return _random_floor_anywhere(grid, level, rng)


def _in_bounds(level: LevelDefinition, x: int, y: int) -> bool:
    return 0 <= x < level.width and 0 <= y < level.height


def _first_symbol(symbol: str, owner: str) -> str:
    if not symbol:
        raise DungeonError(f"{owner} has no symbol")
    return symbol[0]


def _build_grid(level: LevelDefinition) -> list[list[str]]:
    grid = [["#"] * level.width for _ in range(level.height)]
    for row, line in zip(grid, level.layout):
        for x, char in enumerate(line[: level.width]):
            row[x] = char
    return grid


def generate_dungeon_from_definition(
    definition: DungeonDefinition, level: int, rng: Any = None
) -> tuple[list[list[str]], dict[str, Any]]:
    """Generate level ``level`` of ``definition``.

    Returns the character grid and a metadata dictionary describing the level,
    its rooms, and the monsters and items placed in it. Raises DungeonError for
    an invalid level index or a start or exit position outside the grid.
    """
    rng = rng if rng is not None else random
    if not 0 <= level < len(definition.levels):
        raise DungeonError(f"invalid level index: {level}")

    level_def = definition.levels[level]
    grid = _build_grid(level_def)

    monsters: list[dict[str, Any]] = []
    items: list[dict[str, Any]] = []
    metadata: dict[str, Any] = {
        "name": level_def.name,
        "description": level_def.description,
        "rooms": level_def.rooms,
        "startPos": level_def.start_pos,
        "exitPos": level_def.exit_pos,
        "monsters": monsters,
        "items": items,
    }

    monster_templates = {monster.id: monster for monster in definition.monsters}
    for encounter in level_def.encounters:
        template = monster_templates.get(encounter.monster_id)
        if template is None:
            continue
        for _ in range(encounter.count):
            point = _spawn_point(
                grid, level_def, encounter.position, encounter.room_id, rng
            )
            if point is None or not _in_bounds(level_def, *point):
                continue
            x, y = point
            grid[y][x] = _first_symbol(template.symbol, f"monster {template.id!r}")

            monster_level = encounter.min_level
            if encounter.max_level > encounter.min_level:
                monster_level = encounter.min_level + rng.randrange(
                    encounter.max_level - encounter.min_level + 1
                )
            growth = (monster_level - 1) * template.level_scale
            monsters.append(
                {
                    "id": template.id,
                    "name": template.name,
                    "description": template.description,
                    "symbol": template.symbol,
                    "color": template.color,
                    "health": int(template.health * (1.0 + growth)),
                    "damage": int(template.damage * (1.0 + growth * 0.5)),
                    "level": monster_level,
                    "position": {"x": x, "y": y},
                }
            )

    item_templates = {item.id: item for item in definition.items}
    for spawn in level_def.items:
        if rng.random() > spawn.chance:
            continue
        template = item_templates.get(spawn.item_id)
        if template is None:
            continue
        point = _spawn_point(grid, level_def, spawn.position, spawn.room_id, rng)
        if point is None or not _in_bounds(level_def, *point):
            continue
        x, y = point
        grid[y][x] = _first_symbol(template.symbol, f"item {template.id!r}")
        items.append(
            {
                "id": template.id,
                "name": template.name,
                "description": template.description,
                "symbol": template.symbol,
                "color": template.color,
                "type": template.type,
                "value": template.value,
                "position": {"x": x, "y": y},
            }
        )

    for pos, symbol, what in (
        (level_def.start_pos, "@", "start"),
        (level_def.exit_pos, "E", "exit"),
    ):
        if not _in_bounds(level_def, pos.x, pos.y):
            raise DungeonError(f"{what} position ({pos.x}, {pos.y}) is outside the level")
        grid[pos.y][pos.x] = symbol

    return grid, metadata