[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "navylib"
version = "0.1.0"
description = "Kernel building blocks in plain Python: log formatting, bitmap page allocator, ELF segment layout, round-robin scheduling, LISON parsing and a small bytecode VM"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "kernel",
    "operating-system",
    "scheduler",
    "elf",
    "bitmap",
    "memory-manager",
    "lison",
    "marshal",
    "bytecode",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Operating System Kernels",
    "Topic :: Software Development :: Interpreters",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
navy-lison = "navylib.cli:lison_main"
navy-marshal = "navylib.cli:marshal_main"

[tool.hatch.build.targets.wheel]
packages = ["navylib"]

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
