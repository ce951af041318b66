[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "evmlens"
version = "0.1.2"
description = "Colorful EVM bytecode disassembler with bytecode statistics"
requires-python = ">=3.10"
keywords = ["ethereum", "evm", "bytecode", "disassembler", "blockchain"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Disassemblers",
]
dependencies = [
    "requests",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[project.scripts]
evm-lens = "evmlens.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["evmlens"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
