[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "vnbackend"
version = "0.1.0"
description = "Backend core for a visual novel editor: storage for chapters, nodes, characters, players and media, plus auth, payload and config helpers"
requires-python = ">=3.10"
keywords = ["visual-novel", "backend", "storage", "jwt", "game-editor"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
    "Typing :: Typed",
]
dependencies = [
    "pyjwt>=2.4",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[tool.hatch.build.targets.wheel]
packages = ["vnbackend"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
