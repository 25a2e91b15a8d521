"""Shared core types."""

from .types import Failure, Result, Success

__all__ = ["Failure", "Result", "Success"]
