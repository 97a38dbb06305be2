import random

import pytest

from cryptcrawl.game import Entity, Game, Position
from cryptcrawl.loader import DungeonLoader
from cryptcrawl.tiles import TileType, render_tile

_CHARS = {
    "#": TileType.WALL,
    ".": TileType.EMPTY,
    "@": TileType.PLAYER,
    "M": TileType.MONSTER,
    "$": TileType.GOLD,
    "?": TileType.CHEST,
    "^": TileType.TRAP,
    "E": TileType.EXIT,
    "+": TileType.DOOR,
    "~": TileType.WATER,
}


class _SeqRng:
    """Returns the given values in order, then zero."""

    def __init__(self, values):
        self._values = iter(values)

    def randrange(self, n):
        value = next(self._values, 0)
        assert 0 <= value < n
        return value


def _arena(game, rows, monster_health=3, monster_damage=1, rng=None):
    game.width = len(rows[0])
    game.height = len(rows)
    game.dungeon = [[_CHARS[char] for char in row] for row in rows]
    game.monsters = []
    for y, row in enumerate(rows):
        for x, char in enumerate(row):
            if char == "@":
                game.player = Entity(Position(x, y), "@", 10, 10, 2, "Player")
            elif char == "M":
                game.monsters.append(
                    Entity(
                        Position(x, y),
                        "M",
                        monster_health,
                        monster_health,
                        monster_damage,
                        "Monster",
                    )
                )
    game.rng = rng if rng is not None else _SeqRng([])
    return game


def _new_game(reveal_map=True):
    return Game(rng=random.Random(1), reveal_map=reveal_map)


def test_initial_game_defaults():
    game = _new_game()
    assert game.width == 97
    assert game.height == 30
    assert game.gold == 0
    assert game.level == 1
    assert game.game_over is False
    assert game.game_won is False
    assert game.messages[0] == "Welcome to CryptCrawl! Use arrow keys to move."
    assert len(game.dungeon) == 30
    assert game.player.health == 10
    assert game.player.damage == 2


def test_reveal_map_follows_debug_env(monkeypatch):
    monkeypatch.setenv("DEBUG", "true")
    assert Game(rng=random.Random(1)).reveal_map is True
    monkeypatch.setenv("DEBUG", "false")
    assert Game(rng=random.Random(1)).reveal_map is False


def test_is_visible():
    game = _new_game()
    px, py = game.player.pos.x, game.player.pos.y
    assert game.is_visible(px, py) is True
    assert game.is_visible(px + 1, py) is True
    assert game.is_visible(px, py + 1) is True
    assert game.is_visible(px + 5, py) is True
    assert game.is_visible(px - 5, py - 5) is True
    assert game.is_visible(px + 6, py) is False
    assert game.is_visible(px, py + 6) is False
    assert game.is_visible(px - 6, py) is False


def test_add_message():
    game = _new_game()
    count = len(game.messages)
    game.add_message("Test message")
    assert len(game.messages) == count + 1
    assert game.messages[-1] == "Test message"


def test_dungeon_to_string_line_count():
    game = _new_game(reveal_map=True)
    result = game.dungeon_to_string()
    assert result.count("\n") == game.height


def test_dungeon_to_string_hides_distant_tiles():
    game = _arena(_new_game(reveal_map=False), ["@############"])
    expected = render_tile(TileType.PLAYER) + render_tile(TileType.WALL) * 5 + " " * 7 + "\n"
    assert game.dungeon_to_string() == expected


def test_dungeon_to_string_reveals_everything():
    game = _arena(_new_game(reveal_map=True), ["@############"])
    expected = render_tile(TileType.PLAYER) + render_tile(TileType.WALL) * 12 + "\n"
    assert game.dungeon_to_string() == expected


@pytest.mark.parametrize("seed", range(5))
def test_generated_dungeon_invariants(seed):
    game = Game(rng=random.Random(seed), reveal_map=True)
    grid = game.dungeon
    assert len(grid) == 30
    assert all(len(row) == 97 for row in grid)
    assert all(tile is TileType.WALL for tile in grid[0])
    assert all(tile is TileType.WALL for tile in grid[-1])
    assert grid[game.player.pos.y][game.player.pos.x] in (TileType.PLAYER, TileType.EXIT)
    assert sum(row.count(TileType.EXIT) for row in grid) == 1
    assert sum(row.count(TileType.MONSTER) for row in grid) == len(game.monsters)
    for monster in game.monsters:
        assert grid[monster.pos.y][monster.pos.x] is TileType.MONSTER
        assert monster.health == 4
        assert monster.damage == 1


def test_move_into_wall_does_nothing():
    game = _arena(_new_game(), ["###", "#@#", "###"])
    count = len(game.messages)
    game.move_player(1, 0)
    assert game.player.pos == Position(1, 1)
    assert len(game.messages) == count


def test_move_out_of_bounds_does_nothing():
    game = _arena(_new_game(), ["@."])
    game.move_player(-1, 0)
    assert game.player.pos == Position(0, 0)


def test_move_onto_empty_floor():
    game = _arena(_new_game(), ["#####", "#@..#", "#####"])
    game.move_player(1, 0)
    assert game.player.pos == Position(2, 1)
    assert game.dungeon[1][1] is TileType.EMPTY
    assert game.dungeon[1][2] is TileType.PLAYER


def test_move_through_door():
    game = _arena(_new_game(), ["@+"])
    game.move_player(1, 0)
    assert game.player.pos == Position(1, 0)
    assert game.dungeon[0][1] is TileType.PLAYER


def test_water_blocks_movement():
    game = _arena(_new_game(), ["@~"])
    game.move_player(1, 0)
    assert game.player.pos == Position(0, 0)


def test_collect_gold():
    game = _arena(_new_game(), ["@$"], rng=_SeqRng([4]))
    game.move_player(1, 0)
    assert game.gold == 5
    assert game.messages[-1] == "You found 5 gold!"
    assert game.player.pos == Position(1, 0)
    assert game.dungeon[0] == [TileType.EMPTY, TileType.PLAYER]


def test_chest_with_gold():
    game = _arena(_new_game(), ["@?"], rng=_SeqRng([0, 5]))
    game.move_player(1, 0)
    assert game.gold == 15
    assert game.messages[-1] == "You found 15 gold in the chest!"
    assert game.player.pos == Position(1, 0)


def test_chest_with_health_potion():
    game = _arena(_new_game(), ["@?"], rng=_SeqRng([1, 2]))
    game.player.health = 4
    game.move_player(1, 0)
    assert game.player.health == 9
    assert game.messages[-1] == "You found a health potion! +5 HP"


def test_health_potion_is_capped():
    game = _arena(_new_game(), ["@?"], rng=_SeqRng([1, 4]))
    game.player.health = 8
    game.move_player(1, 0)
    assert game.player.health == 10


def test_chest_with_weapon_upgrade():
    game = _arena(_new_game(), ["@?"], rng=_SeqRng([2]))
    game.move_player(1, 0)
    assert game.player.damage == 3
    assert game.messages[-1] == "You found a weapon upgrade! +1 damage"


def test_trap_hurts_and_moves_player():
    game = _arena(_new_game(), ["@^"], rng=_SeqRng([2]))
    game.move_player(1, 0)
    assert game.player.health == 7
    assert game.messages[-1] == "You triggered a trap! -3 HP"
    assert game.player.pos == Position(1, 0)


def test_trap_can_kill():
    game = _arena(_new_game(), ["@^"], rng=_SeqRng([1]))
    game.player.health = 2
    game.move_player(1, 0)
    assert game.game_over is True
    assert game.messages[-1] == "You died!"
    assert game.player.pos == Position(0, 0)


def test_bumping_monster_trades_blows():
    game = _arena(_new_game(), ["@M."])
    game.move_player(1, 0)
    assert game.monsters[0].health == 1
    assert game.player.health == 9
    assert game.messages[-2:] == [
        "You hit the monster for 2 damage!",
        "The monster hits you for 1 damage!",
    ]
    assert game.player.pos == Position(0, 0)


def test_bumping_monster_kills_it():
    game = _arena(_new_game(), ["@M."], monster_health=2)
    game.move_player(1, 0)
    assert game.monsters == []
    assert game.dungeon[0][1] is TileType.EMPTY
    assert game.messages[-1] == "You killed the monster!"
    assert game.player.pos == Position(0, 0)


def test_monster_counterattack_can_kill_player():
    game = _arena(_new_game(), ["@M"])
    game.player.health = 1
    game.move_player(1, 0)
    assert game.game_over is True
    assert game.messages[-1] == "You died!"


def test_exit_on_final_level_wins():
    game = _arena(_new_game(), ["@E"])
    game.level = 3
    game.move_player(1, 0)
    assert game.game_won is True
    assert game.messages[-1] == "You escaped the dungeon!"


def test_exit_descends_to_new_level():
    game = _arena(_new_game(), ["@E"], rng=random.Random(5))
    game.resize(97, 30)
    game.move_player(1, 0)
    assert game.level == 2
    assert "You descend to level 2..." in game.messages
    assert len(game.dungeon) == 30
    assert all(monster.max_health == 5 for monster in game.monsters)
    assert all(monster.damage == 2 for monster in game.monsters)


def test_monster_steps_toward_player():
    game = _arena(_new_game(), ["M.@"], rng=_SeqRng([1, 0]))
    game.move_monsters()
    assert game.monsters[0].pos == Position(1, 0)
    assert game.dungeon[0] == [TileType.EMPTY, TileType.MONSTER, TileType.PLAYER]


def test_monster_walks_over_gold():
    game = _arena(_new_game(), ["M$@"], rng=_SeqRng([1, 0]))
    game.move_monsters()
    assert game.dungeon[0] == [TileType.EMPTY, TileType.MONSTER, TileType.PLAYER]


def test_monster_may_stay_put():
    game = _arena(_new_game(), ["M.@"], rng=_SeqRng([0]))
    game.move_monsters()
    assert game.monsters[0].pos == Position(0, 0)


def test_monster_blocked_by_wall():
    game = _arena(_new_game(), ["M#@"], rng=_SeqRng([1, 0]))
    game.move_monsters()
    assert game.monsters[0].pos == Position(0, 0)
    assert game.dungeon[0][1] is TileType.WALL


def test_adjacent_monster_attacks_player():
    game = _arena(_new_game(), ["M@"], rng=_SeqRng([1, 0]))
    game.move_monsters()
    assert game.player.health == 9
    assert game.messages[-1] == "The monster hits you for 1 damage!"


def test_attack_with_nothing_near():
    game = _arena(_new_game(), ["@."])
    game.attack_nearby_monsters()
    assert game.messages[-1] == "You swing at the air!"


def test_attack_kills_diagonal_monster():
    game = _arena(_new_game(), ["@.", ".M"], monster_health=2)
    game.attack_nearby_monsters()
    assert game.monsters == []
    assert game.dungeon[1][1] is TileType.EMPTY
    assert game.messages[-1] == "You killed the monster!"


def test_attack_hits_every_neighbour():
    game = _arena(_new_game(), ["M@M"])
    game.attack_nearby_monsters()
    assert [monster.health for monster in game.monsters] == [1, 1]
    assert game.messages[-2:] == ["You hit the monster for 2 damage!"] * 2


def test_resize():
    game = _new_game()
    game.resize(40, 20)
    assert (game.width, game.height) == (40, 20)


def test_game_from_loader(tmp_path):
    loader = DungeonLoader(tmp_path)
    game = Game(loader, reveal_map=True, rng=random.Random(2))
    assert game.messages[1] == "Loaded dungeon: The Forgotten Crypt"
    assert game.messages[2] == (
        "A dark and dangerous crypt filled with undead monsters and ancient treasures."
    )
    assert len(game.dungeon) == 10
    assert game.player.pos == Position(2, 8)
    assert game.dungeon[8][2] is TileType.PLAYER
    assert game.dungeon[7][17] is TileType.EXIT
    assert game.dungeon[5][15] is TileType.MONSTER
    assert sum(row.count(TileType.MONSTER) for row in game.dungeon) == len(game.monsters)
    assert game.width == 97