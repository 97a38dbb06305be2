[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cryptcrawl"
version = "0.1.0"
description = "A terminal dungeon crawler with custom JSON dungeon definitions"
requires-python = ">=3.10"
keywords = ["roguelike", "dungeon", "game", "terminal"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Role-Playing",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
cryptcrawl = "cryptcrawl.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["cryptcrawl"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
