import json

import pytest

from cryptcrawl.definition import (
    DungeonDefinition,
    DungeonError,
    Position,
    create_example_dungeon,
    load_dungeon_definition,
    load_dungeon_definitions_from_dir,
    save_dungeon_definition,
)


def test_create_example_dungeon():
    definition = create_example_dungeon()
    assert definition.name != ""
    assert len(definition.levels) > 0
    assert len(definition.monsters) > 0
    assert len(definition.items) > 0


def test_example_dungeon_values():
    definition = create_example_dungeon()
    assert definition.name == "The Forgotten Crypt"
    level = definition.levels[0]
    assert (level.width, level.height) == (20, 10)
    assert len(level.layout) == 10
    assert all(len(row) == 20 for row in level.layout)
    assert level.start_pos == Position(2, 8)
    assert level.exit_pos == Position(17, 7)
    assert level.encounters[0].position is None
    assert level.encounters[1].position == Position(15, 5)
    assert [monster.symbol for monster in definition.monsters] == ["S", "Z"]


def test_save_and_load(tmp_path):
    definition = create_example_dungeon()
    path = tmp_path / "test-dungeon.json"
    save_dungeon_definition(definition, path)
    loaded = load_dungeon_definition(path)
    assert loaded.name == definition.name
    assert len(loaded.levels) == len(definition.levels)
    assert len(loaded.monsters) == len(definition.monsters)
    assert len(loaded.items) == len(definition.items)
    assert loaded == definition


def test_saved_json_uses_camel_case_keys(tmp_path):
    path = tmp_path / "d.json"
    save_dungeon_definition(create_example_dungeon(), path)
    data = json.loads(path.read_text(encoding="utf-8"))
    level = data["levels"][0]
    assert level["startPos"] == {"x": 2, "y": 8}
    assert level["encounters"][0]["monsterId"] == "skeleton"
    assert level["encounters"][0]["position"] is None
    assert data["monsters"][0]["levelScale"] == 1.5


def test_save_creates_parent_directories(tmp_path):
    path = tmp_path / "a" / "b" / "d.json"
    save_dungeon_definition(create_example_dungeon(), path)
    assert load_dungeon_definition(path).name == "The Forgotten Crypt"


def test_from_dict_defaults_missing_fields():
    definition = DungeonDefinition.from_dict({"name": "Tiny", "levels": [{"id": "l"}]})
    assert definition.name == "Tiny"
    assert definition.monsters == []
    assert definition.levels[0].start_pos == Position(0, 0)
    assert definition.levels[0].layout == []


def test_from_dict_rejects_wrong_type():
    with pytest.raises(DungeonError):
        DungeonDefinition.from_dict({"name": 5})


def test_from_dict_int_to_float():
    definition = DungeonDefinition.from_dict({"monsters": [{"levelScale": 2}]})
    assert definition.monsters[0].level_scale == 2.0


def test_load_missing_file(tmp_path):
    with pytest.raises(DungeonError, match="failed to read"):
        load_dungeon_definition(tmp_path / "missing.json")


def test_load_invalid_json(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(DungeonError, match="failed to parse"):
        load_dungeon_definition(path)


def test_load_from_dir(tmp_path):
    first = create_example_dungeon()
    first.name = "Dungeon 1"
    save_dungeon_definition(first, tmp_path / "dungeon1.json")
    second = create_example_dungeon()
    second.name = "Dungeon 2"
    save_dungeon_definition(second, tmp_path / "dungeon2.json")
    (tmp_path / "not-a-dungeon.txt").write_text("This is not a dungeon", encoding="utf-8")

    definitions = load_dungeon_definitions_from_dir(tmp_path)
    assert [d.name for d in definitions] == ["Dungeon 1", "Dungeon 2"]


def test_load_from_dir_skips_broken_and_directories(tmp_path):
    save_dungeon_definition(create_example_dungeon(), tmp_path / "good.json")
    (tmp_path / "broken.json").write_text("nope", encoding="utf-8")
    (tmp_path / "sub.json").mkdir()
    definitions = load_dungeon_definitions_from_dir(tmp_path)
    assert len(definitions) == 1
    assert definitions[0].name == "The Forgotten Crypt"


def test_load_from_missing_dir(tmp_path):
    with pytest.raises(DungeonError, match="failed to read dungeon directory"):
        load_dungeon_definitions_from_dir(tmp_path / "nowhere")