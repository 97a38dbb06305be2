# cryptcrawl

A small roguelike dungeon crawler that runs in your terminal. Walk through
crypts, fight monsters, pick up gold, open chests, avoid traps and find the
exit. Reach the exit on level 3 to escape and win.

The interactive screen uses raw terminal input (`termios`, `tty`), so it
runs on POSIX systems.

## Installing

```
pip install .
```

## Playing

```
cryptcrawl
cryptcrawl --dungeon-dir path/to/dungeons
```

The game must be started from an interactive terminal; otherwise it prints
`no active terminal, bye!` and exits with status 1.

Controls:

| Keys              | Action       |
|-------------------|--------------|
| ↑ / w / k         | move up      |
| ↓ / s / j         | move down    |
| ← / a / h         | move left    |
| → / d / l         | move right   |
| space             | attack       |
| ?                 | toggle help  |
| q / ctrl+c        | quit         |

Moving into a monster attacks it; it strikes back if it survives. Space
attacks every monster in the eight squares around you. After each move,
monsters may step toward you or hit you when adjacent. You only see tiles
within five squares of where you stand. Gold piles give 1–10 gold; a chest
holds gold, a health potion or a weapon upgrade; a trap costs 1–3 health.

The first level is taken from the first dungeon definition found in the
dungeon directory. Taking the exit on levels 1 and 2 leads to a randomly
generated level; taking it on level 3 wins the game.

## Configuration

- `--dungeon-dir` – directory holding dungeon definitions. Its default is
  the `DUNGEON_DIR` environment variable, or `dungeons` when that is unset.
  The directory is created if missing. When neither it nor its `examples`
  subdirectory holds any `.json` files, an example dungeon is written to
  `examples/example_dungeon.json` inside it.
- `DEBUG` – set to `true` to reveal the whole map and write a debug log to
  `debug.log`.

## Custom dungeons

A dungeon is a JSON file with a name, description, levels, monster
templates, item templates and events. Each level has a text `layout`,
rooms, encounters (monsters placed at a fixed position, in a room, or
anywhere on the floor), item spawns with a chance, a `startPos` and an
`exitPos`.

When a level is played, its characters become tiles as follows: `#` wall,
`@` player, `E` exit, `$` gold, `?` chest, `^` trap, `+` door, `~` water or
lava (chosen at random), `M`, `S`, `Z` and `W` monsters. Any other
character, including `.`, is empty floor.

From Python you can create, save, load and generate definitions:

```python
from cryptcrawl.definition import (
    create_example_dungeon,
    save_dungeon_definition,
    load_dungeon_definition,
)
from cryptcrawl.generator import generate_dungeon_from_definition

definition = create_example_dungeon()
save_dungeon_definition(definition, "dungeons/my_dungeon.json")

loaded = load_dungeon_definition("dungeons/my_dungeon.json")
grid, metadata = generate_dungeon_from_definition(loaded, 0)
print("\n".join("".join(row) for row in grid))
```

`generate_dungeon_from_definition` takes an optional `rng` (for example a
`random.Random`) for repeatable results. Problems reading, parsing or
generating a definition raise `cryptcrawl.definition.DungeonError`.
`load_dungeon_definitions_from_dir` loads every `.json` file in a
directory, in file-name order, logging and skipping any that fail.

`cryptcrawl.loader.DungeonLoader` gathers every definition in a directory
and lets you step through them with `next_dungeon()` and `prev_dungeon()`,
read the current one with `current_dungeon()`, look one up with
`get_dungeon_by_name()`, re-read the directory with `reload_dungeons()` and
build a level with `generate_current_level()`.

The game rules live in `cryptcrawl.game.Game` and can be driven without a
terminal:

```python
import random
from cryptcrawl.game import Game

game = Game(reveal_map=True, rng=random.Random(1))
game.move_player(1, 0)
game.attack_nearby_monsters()
print(game.dungeon_to_string())
print(game.messages[-3:])
```

`cryptcrawl.ui.App` turns key names (`"up"`, `"w"`, `"space"`, `"?"`, …)
into game actions with `handle_key()` and lays out the screen with
`view()`; `cryptcrawl.ui.run(game)` plays a game on the current terminal.
`cryptcrawl.tiles` holds the tile types (`TileType`), their symbols and
colours, and `render_tile()` / `render_symbol()` for styled output.

## What it does not do

The game is played on the local terminal only; there is no network or
remote-play mode. Monster and item templates, loot tables and events in a
definition are stored and loaded, but only the symbols they place on the
first level's grid take part in play.

## Running the tests

```
pip install .[test]
pytest
```