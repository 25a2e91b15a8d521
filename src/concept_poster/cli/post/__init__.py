"""Post feature - publish one video of a concept."""

from .commands import post
from .params import PostParams, parse_platforms
from .service import PostService

__all__ = [
    "post",
    "PostParams",
    "PostService",
    "parse_platforms",
]
