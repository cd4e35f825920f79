[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tdpkit"
version = "0.1.0"
description = "Building blocks for table-driven parsers: an arena allocator, arena-backed slices, SCC sorting, running statistics and debug helpers."
requires-python = ">=3.10"
dependencies = []
keywords = ["arena", "allocator", "tarjan", "scc", "statistics", "protobuf", "debugging"]
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
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["tdpkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
