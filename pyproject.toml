[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lighter-sdk"
version = "0.1.1"
description = "Order and transaction request types and an asyncio WebSocket streaming client for the Lighter exchange."
requires-python = ">=3.10"
keywords = ["lighter", "exchange", "trading", "crypto", "websocket", "order-book"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: Office/Business :: Financial :: Investment",
]
dependencies = [
    "websockets",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["lighter_sdk"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
