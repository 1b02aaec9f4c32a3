[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rasm"
version = "0.1.0"
description = "Two-pass assembler for RASM programs, producing binary images with string and sprite tables"
requires-python = ">=3.10"
dependencies = []
keywords = ["assembler", "virtual-machine", "bytecode", "sprites", "allocator"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Assemblers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
rasm = "rasm.assembler:main"

[tool.hatch.build.targets.wheel]
packages = ["rasm"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
