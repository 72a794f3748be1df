[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lazyco"
version = "0.1.0"
description = "Lazy awaitable tasks, synchronous waiting, thread-pool scheduling, ring-buffer sequencers and awaitable file writes."
requires-python = ">=3.10"
dependencies = []
keywords = ["coroutines", "async", "task", "thread-pool", "sequencer", "ring-buffer"]
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
packages = ["lazyco"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
