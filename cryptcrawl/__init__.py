"""A terminal dungeon crawler with custom JSON dungeon definitions."""

__version__ = "0.1.0"

__all__ = ["__version__"]