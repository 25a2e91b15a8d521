"""Command line interface.

Feature packages:
- core/: Console helpers and wiring shared by commands
- post/: Post one video of a concept
- schedule/: One scheduler pass over all concepts
- instagram/: Direct Instagram uploads and replay of recorded attempts

Usage:
    concept-poster --help
    concept-poster post <concept-id>
    concept-poster check-schedules
"""

from .app import app, main

__all__ = ["app", "main"]
