"""Kernel building blocks in Python: formatting, page allocation, ELF layout, scheduling, LISON and a bytecode VM."""

__version__ = "0.1.0"