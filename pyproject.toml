[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "iblessing"
version = "0.1.0"
description = "Objective-C Mach-O analysis helpers: method chains, type encodings, ARM64 register state, dyld bind decoding, a sparse memory model and IDA script generators"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "mach-o",
    "objective-c",
    "arm64",
    "reverse-engineering",
    "ida",
    "dyld",
    "xref",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Information Technology",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security",
    "Topic :: Software Development :: Disassemblers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["iblessing"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
