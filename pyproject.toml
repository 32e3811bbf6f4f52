[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "blinkmac"
version = "0.1.0"
description = "Protocol logic for a slotted MAC: schedules, packets, beacon scanning, transmit queue and gateway association"
requires-python = ">=3.10"
dependencies = []
keywords = ["mac", "tsch", "wireless", "scheduler", "beacon", "gateway", "low-power", "radio"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["blinkmac"]

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
