[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "maple2"
version = "0.1.0"
description = "Apple II floppy disk images: WOZ and DSK reading and writing, nibble codecs and track analysis"
requires-python = ">=3.10"
keywords = ["apple2", "emulator", "woz", "dsk", "floppy", "disk-image", "nibble"]
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
    "Topic :: System :: Emulators",
]
dependencies = [
    "platformdirs",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["maple2"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
