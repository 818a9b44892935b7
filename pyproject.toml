[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tcpmcast"
version = "0.1.0"
description = "Core of a user-space TCP fan-out server: ARP replies, handshake tracking, retransmission timers and per-client header tables."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "tcp",
    "arp",
    "multicast",
    "networking",
    "time-wheel",
    "ring-buffer",
    "raw-socket",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
tcpmcast = "tcpmcast.listener:main"

[tool.hatch.build.targets.wheel]
packages = ["tcpmcast"]

[tool.hatch.build.targets.sdist]
include = ["tcpmcast", "tests", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
check_untyped_defs = true
