[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tryhard"
version = "0.5.1"
description = "Easily retry asyncio operations with configurable backoff"
requires-python = ">=3.10"
dependencies = []
keywords = ["asyncio", "retry", "backoff", "async"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Framework :: AsyncIO",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["tryhard"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
