[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "vtterm"
version = "0.1.0"
description = "Terminal emulator core: screen buffer with scrollback, pseudo-terminal shell, preferences and colour schemes"
requires-python = ">=3.10"
keywords = [
    "terminal",
    "terminal-emulator",
    "pty",
    "scrollback",
    "xterm",
    "colour-scheme",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Terminals :: Terminal Emulators/X Terminals",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "psutil",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["vtterm"]

[tool.hatch.build.targets.sdist]
include = [
    "vtterm",
    "tests",
    "pyproject.toml",
]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP", "SIM"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
check_untyped_defs = true
