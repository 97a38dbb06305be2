"""Dungeon definitions: data model, JSON persistence and the built-in example."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")


class DungeonError(Exception):
    """Raised when a dungeon definition cannot be read, parsed or written."""


def _mapping(value: Any, what: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise DungeonError(f"{what}: expected an object")
    return value


def _value(data: dict[str, Any], key: str, kind: type, default: Any) -> Any:
    value = data.get(key)
    if value is None:
        return default
    if kind is float and isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise DungeonError(f"field {key!r}: expected {kind.__name__}")
    return value


def _str(data: dict[str, Any], key: str) -> str:
    return _value(data, key, str, "")


def _int(data: dict[str, Any], key: str) -> int:
    return _value(data, key, int, 0)


def _float(data: dict[str, Any], key: str) -> float:
    return _value(data, key, float, 0.0)


def _list(data: dict[str, Any], key: str) -> list[Any]:
    return _value(data, key, list, [])


def _strings(data: dict[str, Any], key: str) -> list[str]:
    items = _list(data, key)
    if not all(isinstance(item, str) for item in items):
        raise DungeonError(f"field {key!r}: expected a list of strings")
    return list(items)


def _records(
    data: dict[str, Any], key: str, factory: Callable[[dict[str, Any]], T]
) -> list[T]:
    return [factory(_mapping(item, key)) for item in _list(data, key)]


def _position(data: dict[str, Any], key: str) -> Position | None:
    value = data.get(key)
    return None if value is None else Position.from_dict(_mapping(value, key))


@dataclass
class Position:
    x: int = 0
    y: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Position:
        return cls(_int(data, "x"), _int(data, "y"))

    def to_dict(self) -> dict[str, Any]:
        return {"x": self.x, "y": self.y}


@dataclass
class RoomDefinition:
    id: str = ""
    name: str = ""
    description: str = ""
    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0
    doors: list[Position] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RoomDefinition:
        return cls(
            id=_str(data, "id"),
            name=_str(data, "name"),
            description=_str(data, "description"),
            x=_int(data, "x"),
            y=_int(data, "y"),
            width=_int(data, "width"),
            height=_int(data, "height"),
            doors=_records(data, "doors", Position.from_dict),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "doors": [door.to_dict() for door in self.doors],
        }


@dataclass
class EncounterSpawn:
    monster_id: str = ""
    count: int = 0
    min_level: int = 0
    max_level: int = 0
    position: Position | None = None
    room_id: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EncounterSpawn:
        return cls(
            monster_id=_str(data, "monsterId"),
            count=_int(data, "count"),
            min_level=_int(data, "minLevel"),
            max_level=_int(data, "maxLevel"),
            position=_position(data, "position"),
            room_id=_str(data, "roomId"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "monsterId": self.monster_id,
            "count": self.count,
            "minLevel": self.min_level,
            "maxLevel": self.max_level,
            "position": self.position.to_dict() if self.position else None,
            "roomId": self.room_id,
        }


@dataclass
class ItemSpawn:
    item_id: str = ""
    position: Position | None = None
    room_id: str = ""
    chance: float = 0.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ItemSpawn:
        return cls(
            item_id=_str(data, "itemId"),
            position=_position(data, "position"),
            room_id=_str(data, "roomId"),
            chance=_float(data, "chance"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "itemId": self.item_id,
            "position": self.position.to_dict() if self.position else None,
            "roomId": self.room_id,
            "chance": self.chance,
        }


@dataclass
class ItemEffect:
    type: str = ""
    value: int = 0
    duration: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ItemEffect:
        return cls(_str(data, "type"), _int(data, "value"), _int(data, "duration"))

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "value": self.value, "duration": self.duration}


@dataclass
class LootEntry:
    item_id: str = ""
    chance: float = 0.0
    min_count: int = 0
    max_count: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LootEntry:
        return cls(
            item_id=_str(data, "itemId"),
            chance=_float(data, "chance"),
            min_count=_int(data, "minCount"),
            max_count=_int(data, "maxCount"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "itemId": self.item_id,
            "chance": self.chance,
            "minCount": self.min_count,
            "maxCount": self.max_count,
        }


@dataclass
class MonsterTemplate:
    id: str = ""
    name: str = ""
    description: str = ""
    symbol: str = ""
    color: str = ""
    health: int = 0
    damage: int = 0
    level_scale: float = 0.0
    abilities: list[str] = field(default_factory=list)
    loot_table: list[LootEntry] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MonsterTemplate:
        return cls(
            id=_str(data, "id"),
            name=_str(data, "name"),
            description=_str(data, "description"),
            symbol=_str(data, "symbol"),
            color=_str(data, "color"),
            health=_int(data, "health"),
            damage=_int(data, "damage"),
            level_scale=_float(data, "levelScale"),
            abilities=_strings(data, "abilities"),
            loot_table=_records(data, "lootTable", LootEntry.from_dict),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "symbol": self.symbol,
            "color": self.color,
            "health": self.health,
            "damage": self.damage,
            "levelScale": self.level_scale,
            "abilities": list(self.abilities),
            "lootTable": [entry.to_dict() for entry in self.loot_table],
        }


@dataclass
class ItemTemplate:
    id: str = ""
    name: str = ""
    description: str = ""
    symbol: str = ""
    color: str = ""
    type: str = ""
    value: int = 0
    effects: list[ItemEffect] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ItemTemplate:
        return cls(
            id=_str(data, "id"),
            name=_str(data, "name"),
            description=_str(data, "description"),
            symbol=_str(data, "symbol"),
            color=_str(data, "color"),
            type=_str(data, "type"),
            value=_int(data, "value"),
            effects=_records(data, "effects", ItemEffect.from_dict),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "symbol": self.symbol,
            "color": self.color,
            "type": self.type,
            "value": self.value,
            "effects": [effect.to_dict() for effect in self.effects],
        }


@dataclass
class EventAction:
    type: str = ""
    target: str = ""
    value: Any = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EventAction:
        return cls(_str(data, "type"), _str(data, "target"), data.get("value"))

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "target": self.target, "value": self.value}


@dataclass
class EventDefinition:
    id: str = ""
    name: str = ""
    description: str = ""
    trigger: str = ""
    actions: list[EventAction] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EventDefinition:
        return cls(
            id=_str(data, "id"),
            name=_str(data, "name"),
            description=_str(data, "description"),
            trigger=_str(data, "trigger"),
            actions=_records(data, "actions", EventAction.from_dict),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "trigger": self.trigger,
            "actions": [action.to_dict() for action in self.actions],
        }


@dataclass
class LevelDefinition:
    id: str = ""
    name: str = ""
    description: str = ""
    width: int = 0
    height: int = 0
    layout: list[str] = field(default_factory=list)
    rooms: list[RoomDefinition] = field(default_factory=list)
    encounters: list[EncounterSpawn] = field(default_factory=list)
    items: list[ItemSpawn] = field(default_factory=list)
    start_pos: Position = field(default_factory=Position)
    exit_pos: Position = field(default_factory=Position)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LevelDefinition:
        return cls(
            id=_str(data, "id"),
            name=_str(data, "name"),
            description=_str(data, "description"),
            width=_int(data, "width"),
            height=_int(data, "height"),
            layout=_strings(data, "layout"),
            rooms=_records(data, "rooms", RoomDefinition.from_dict),
            encounters=_records(data, "encounters", EncounterSpawn.from_dict),
            items=_records(data, "items", ItemSpawn.from_dict),
            start_pos=_position(data, "startPos") or Position(),
            exit_pos=_position(data, "exitPos") or Position(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "width": self.width,
            "height": self.height,
            "layout": list(self.layout),
            "rooms": [room.to_dict() for room in self.rooms],
            "encounters": [encounter.to_dict() for encounter in self.encounters],
            "items": [item.to_dict() for item in self.items],
            "startPos": self.start_pos.to_dict(),
            "exitPos": self.exit_pos.to_dict(),
        }


@dataclass
class DungeonDefinition:
    """A complete custom dungeon: its levels, monsters, items and events."""

    name: str = ""
    description: str = ""
    author: str = ""
    version: str = ""
    levels: list[LevelDefinition] = field(default_factory=list)
    monsters: list[MonsterTemplate] = field(default_factory=list)
    items: list[ItemTemplate] = field(default_factory=list)
    events: list[EventDefinition] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DungeonDefinition:
        """Build a definition from decoded JSON; raise DungeonError on bad data."""
        data = _mapping(data, "dungeon definition")
        return cls(
            name=_str(data, "name"),
            description=_str(data, "description"),
            author=_str(data, "author"),
            version=_str(data, "version"),
            levels=_records(data, "levels", LevelDefinition.from_dict),
            monsters=_records(data, "monsters", MonsterTemplate.from_dict),
            items=_records(data, "items", ItemTemplate.from_dict),
            events=_records(data, "events", EventDefinition.from_dict),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready form of this definition."""
        return {
            "name": self.name,
            "description": self.description,
            "author": self.author,
            "version": self.version,
            "levels": [level.to_dict() for level in self.levels],
            "monsters": [monster.to_dict() for monster in self.monsters],
            "items": [item.to_dict() for item in self.items],
            "events": [event.to_dict() for event in self.events],
        }


def load_dungeon_definition(path: str | Path) -> DungeonDefinition:
    """Read a dungeon definition from a JSON file."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DungeonError(f"failed to read dungeon definition file: {exc}") from exc
    try:
        return DungeonDefinition.from_dict(json.loads(text))
    except (json.JSONDecodeError, DungeonError) as exc:
        raise DungeonError(f"failed to parse dungeon definition: {exc}") from exc


def load_dungeon_definitions_from_dir(directory: str | Path) -> list[DungeonDefinition]:
    """Load every ``.json`` definition in ``directory``, in file-name order.

    Files that fail to load are logged and skipped.
    """
    directory = Path(directory)
    try:
        entries = sorted(directory.iterdir(), key=lambda entry: entry.name)
    except OSError as exc:
        raise DungeonError(f"failed to read dungeon directory: {exc}") from exc

    definitions = []
    for entry in entries:
        if entry.is_dir() or entry.suffix != ".json":
            continue
        try:
            definitions.append(load_dungeon_definition(entry))
        except DungeonError as exc:
            log.warning("failed to load dungeon definition %s: %s", entry, exc)
    return definitions


def save_dungeon_definition(definition: DungeonDefinition, path: str | Path) -> None:
    """Write ``definition`` as indented JSON, creating parent directories."""
    path = Path(path)
    data = json.dumps(definition.to_dict(), indent=2, ensure_ascii=False)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise DungeonError(f"failed to create directory: {exc}") from exc
    try:
        path.write_text(data, encoding="utf-8")
    except OSError as exc:
        raise DungeonError(f"failed to write dungeon definition file: {exc}") from exc


def create_example_dungeon() -> DungeonDefinition:
    """Return the built-in example dungeon, "The Forgotten Crypt"."""
    entrance_hall = LevelDefinition(
        id="level1",
        name="Entrance Hall",
        description="The entrance to the crypt. Dusty and abandoned.",
        width=20,
        height=10,
        layout=[
            "####################",
            "#........#.........#",
            "#........#.........#",
            "#........+.........#",
            "#........#.........#",
            "#........#.........#",
            "#........#####.....#",
            "#................E.#",
            "#.S................#",
            "####################",
        ],
        rooms=[
            RoomDefinition(
                id="entrance",
                name="Entrance",
                description="The entrance to the crypt.",
                x=1,
                y=1,
                width=8,
                height=6,
                doors=[Position(9, 3)],
            ),
            RoomDefinition(
                id="main_hall",
                name="Main Hall",
                description="The main hall of the crypt.",
                x=10,
                y=1,
                width=9,
                height=8,
                doors=[Position(9, 3)],
            ),
        ],
        encounters=[
            EncounterSpawn(
                monster_id="skeleton", count=2, min_level=1, max_level=1, room_id="main_hall"
            ),
            EncounterSpawn(
                monster_id="zombie",
                count=1,
                min_level=1,
                max_level=2,
                position=Position(15, 5),
            ),
        ],
        items=[
            ItemSpawn(item_id="gold", room_id="entrance", chance=0.8),
            ItemSpawn(item_id="health_potion", position=Position(12, 2), chance=1.0),
            ItemSpawn(item_id="rusty_sword", room_id="main_hall", chance=0.5),
        ],
        start_pos=Position(2, 8),
        exit_pos=Position(17, 7),
    )
    return DungeonDefinition(
        name="The Forgotten Crypt",
        description=(
            "A dark and dangerous crypt filled with undead monsters and ancient treasures."
        ),
        author="CryptCrawl",
        version="1.0.0",
        levels=[entrance_hall],
        monsters=[
            MonsterTemplate(
                id="skeleton",
                name="Skeleton",
                description="A reanimated skeleton wielding a rusty sword.",
                symbol="S",
                color="#ffffff",
                health=5,
                damage=2,
                level_scale=1.5,
                loot_table=[
                    LootEntry("gold", 0.7, 1, 5),
                    LootEntry("bone_shard", 0.3, 1, 3),
                ],
            ),
            MonsterTemplate(
                id="zombie",
                name="Zombie",
                description="A shambling corpse with rotting flesh.",
                symbol="Z",
                color="#00ff00",
                health=8,
                damage=1,
                level_scale=1.2,
                loot_table=[
                    LootEntry("gold", 0.5, 1, 3),
                    LootEntry("rotten_flesh", 0.6, 1, 2),
                ],
            ),
        ],
        items=[
            ItemTemplate(
                id="gold",
                name="Gold",
                description="Shiny gold coins.",
                symbol="$",
                color="#ffff00",
                type="currency",
                value=1,
            ),
            ItemTemplate(
                id="health_potion",
                name="Health Potion",
                description="A potion that restores health.",
                symbol="!",
                color="#ff0000",
                type="consumable",
                value=10,
                effects=[ItemEffect(type="heal", value=5)],
            ),
            ItemTemplate(
                id="rusty_sword",
                name="Rusty Sword",
                description="An old, rusty sword. Still sharp enough to cut.",
                symbol="/",
                color="#aaaaaa",
                type="weapon",
                value=5,
                effects=[ItemEffect(type="damage", value=2)],
            ),
            ItemTemplate(
                id="bone_shard",
                name="Bone Shard",
                description="A sharp shard of bone.",
                symbol="*",
                color="#ffffff",
                type="material",
                value=2,
            ),
            ItemTemplate(
                id="rotten_flesh",
                name="Rotten Flesh",
                description="A piece of rotten flesh. Smells terrible.",
                symbol="%",
                color="#00aa00",
                type="material",
                value=1,
            ),
        ],
        events=[
            EventDefinition(
                id="entrance_event",
                name="Entrance Event",
                description="An event that triggers when the player enters the dungeon.",
                trigger="level_start",
                actions=[
                    EventAction(
                        type="message",
                        value="You enter the forgotten crypt. The air is stale and cold.",
                    ),
                    EventAction(type="sound", value="door_creak"),
                ],
            ),
            EventDefinition(
                id="skeleton_death",
                name="Skeleton Death",
                description="An event that triggers when a skeleton dies.",
                trigger="monster_death",
                actions=[
                    EventAction(type="message", value="The skeleton crumbles to dust!"),
                    EventAction(type="sound", value="bone_crunch"),
                ],
            ),
        ],
    )