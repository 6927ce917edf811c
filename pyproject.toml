[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "chronoplay"
version = "0.1.0"
description = "A small headless entity-component playground driven by emitting timers, timer sequences and time multipliers."
requires-python = ">=3.10"
dependencies = []
keywords = ["game", "simulation", "timers", "ecs", "interpolation"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Games/Entertainment :: Simulation",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
chronoplay = "chronoplay.app:main"

[tool.hatch.build.targets.wheel]
packages = ["chronoplay"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
