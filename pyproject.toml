[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "evento"
version = "0.1.0"
description = "Core of an event scheduling client: view navigation, toast messages, background tasks, response caching and tray notifications."
requires-python = ">=3.10"
dependencies = []
keywords = ["events", "scheduling", "calendar", "notifications", "cache", "asyncio"]
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
    "Topic :: Office/Business :: Scheduling",
    "Framework :: AsyncIO",
]

[project.optional-dependencies]
test = ["pytest", "pytest-asyncio"]

[tool.hatch.build.targets.wheel]
packages = ["evento"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
