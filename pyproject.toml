[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "harbol"
version = "0.1.0"
description = "Byte-buffer allocators, a bounded array, a growable byte buffer and a key-value config format"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "allocator",
    "arena",
    "region",
    "memory-pool",
    "object-pool",
    "bytebuffer",
    "config",
    "parser",
]
classifiers = [
    "Development Status :: 4 - Beta",
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
packages = ["harbol"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
