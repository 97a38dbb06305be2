"""Loading and navigating the dungeon definitions in a directory."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from cryptcrawl.definition import (
    DungeonDefinition,
    DungeonError,
    create_example_dungeon,
    load_dungeon_definitions_from_dir,
    save_dungeon_definition,
)
from cryptcrawl.generator import generate_dungeon_from_definition

log = logging.getLogger(__name__)

EXAMPLES_DIR = "examples"
EXAMPLE_FILE = "example_dungeon.json"


def _has_json_files(directory: Path) -> bool:
    return any(
        not entry.is_dir() and entry.suffix == ".json" for entry in directory.iterdir()
    )


class DungeonLoader:
    """Holds the dungeon definitions of a directory and which one is current."""

    def __init__(self, base_path: str | Path) -> None:
        self.base_path = Path(base_path)
        examples_dir = self.base_path / EXAMPLES_DIR
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise DungeonError(f"failed to create dungeons directory: {exc}") from exc
        try:
            examples_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise DungeonError(f"failed to create examples directory: {exc}") from exc

        try:
            has_dungeons = _has_json_files(self.base_path)
        except OSError as exc:
            raise DungeonError(f"failed to read dungeons directory: {exc}") from exc

        if not has_dungeons:
            try:
                has_examples = _has_json_files(examples_dir)
            except OSError as exc:
                raise DungeonError(f"failed to read examples directory: {exc}") from exc
            if not has_examples:
                example_path = examples_dir / EXAMPLE_FILE
                save_dungeon_definition(create_example_dungeon(), example_path)
                log.info("Created example dungeon at %s", example_path)

        self.dungeons: list[DungeonDefinition] = self._load_all()
        self.current_index = 0

    def _load_all(self) -> list[DungeonDefinition]:
        dungeons = load_dungeon_definitions_from_dir(self.base_path)
        if not dungeons:
            dungeons = load_dungeon_definitions_from_dir(self.base_path / EXAMPLES_DIR)
        if not dungeons:
            raise DungeonError("no dungeon definitions found")
        return dungeons

    def current_dungeon(self) -> DungeonDefinition | None:
        """Return the current definition, or None if the index is out of range."""
        if 0 <= self.current_index < len(self.dungeons):
            return self.dungeons[self.current_index]
        return None

    def next_dungeon(self) -> DungeonDefinition | None:
        """Advance to the next definition, wrapping round, and return it."""
        self.current_index = (self.current_index + 1) % len(self.dungeons)
        return self.current_dungeon()

    def prev_dungeon(self) -> DungeonDefinition | None:
        """Step back to the previous definition, wrapping round, and return it."""
        self.current_index = (self.current_index - 1) % len(self.dungeons)
        return self.current_dungeon()

    def get_dungeon_by_name(self, name: str) -> DungeonDefinition | None:
        """Return the first definition called ``name``, or None."""
        return next((dungeon for dungeon in self.dungeons if dungeon.name == name), None)

    def reload_dungeons(self) -> None:
        """Reload every definition from disk and reset to the first one."""
        self.dungeons = self._load_all()
        self.current_index = 0

    def generate_current_level(
        self, level: int
    ) -> tuple[list[list[str]], dict[str, Any]]:
        """Generate ``level`` of the current definition."""
        dungeon = self.current_dungeon()
        if dungeon is None:
            raise DungeonError("no current dungeon")
        return generate_dungeon_from_definition(dungeon, level)