"""Choosing which queued video to post."""

from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Optional, Sequence

from ..concepts import VideoFile
from ..constants import SelectionPolicy

_FAR_FUTURE = datetime.max.replace(tzinfo=timezone.utc)


def _created_at(video: VideoFile) -> datetime:
    if not video.created_time:
        return _FAR_FUTURE
    try:
        parsed = datetime.fromisoformat(video.created_time.replace("Z", "+00:00"))
    except ValueError:
        return _FAR_FUTURE
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def select_video(
    videos: Sequence[VideoFile],
    policy: SelectionPolicy = SelectionPolicy.OLDEST,
    rng: Optional[random.Random] = None,
) -> Optional[VideoFile]:
    """Pick one video, or None for an empty queue.

    OLDEST picks the earliest createdTime (videos without one go last,
    ties keep store order). RANDOM picks uniformly.
    """
    if not videos:
        return None
    if policy is SelectionPolicy.RANDOM:
        return (rng or random).choice(list(videos))
    return min(videos, key=_created_at)
