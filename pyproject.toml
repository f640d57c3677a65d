[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kongdeck"
version = "0.1.0"
description = "Diff and sync engine for Kong gateway configuration, driven through a pluggable Admin API client"
requires-python = ">=3.10"
dependencies = []
keywords = ["kong", "api-gateway", "declarative", "configuration", "diff", "sync"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["kongdeck"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
