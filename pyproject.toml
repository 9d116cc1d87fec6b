[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "barmods"
version = "0.1.0"
description = "Status bar module logic: sway IPC, bar visibility, binding mode, scratchpad, workspaces, keyboard layouts, temperature and tray bookkeeping"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "sway",
    "wayland",
    "status-bar",
    "ipc",
    "workspaces",
    "keyboard-layout",
    "tray",
    "statusnotifier",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: No Input/Output (Daemon)",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Desktop Environment :: Window Managers :: Applets",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["barmods"]

[tool.hatch.build.targets.sdist]
include = ["barmods", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
