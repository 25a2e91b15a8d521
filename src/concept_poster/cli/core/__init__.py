"""Shared CLI helpers: console output and runtime wiring."""

from .console import console, print_error
from .runtime import build_publisher_deps, build_repository, build_store

__all__ = [
    "build_publisher_deps",
    "build_repository",
    "build_store",
    "console",
    "print_error",
]
