[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ctxdaemon"
version = "0.1.0"
description = "Building blocks for a local code-indexing daemon: structured errors, trace correlation, background-sync helpers, converge decisions, RPC helpers and CLI request building."
requires-python = ">=3.10"
dependencies = []
keywords = ["code-search", "indexing", "daemon", "error-handling", "correlation", "cli"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ctxdaemon"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
