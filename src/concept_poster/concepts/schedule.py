"""Posting-time helpers.

`postingTimes` ("HH:MM" strings) is the source of truth; the legacy
`schedule` cron field is derived from the first time.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional

from .models import ConceptConfig

DEFAULT_TIME = "08:00"
TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


def normalize_time_string(value: Optional[str]) -> Optional[str]:
    """Return "HH:MM" for a valid time, None otherwise.

    >>> normalize_time_string(" 7:05 ")
    '07:05'
    """
    if not value:
        return None
    match = TIME_PATTERN.match(value.strip())
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return None
    return f"{hour:02d}:{minute:02d}"


def cron_from_time(time: str) -> str:
    """Daily cron expression "M H * * *"; invalid input gives 08:00."""
    normalized = normalize_time_string(time)
    if not normalized:
        return "0 8 * * *"
    hour, minute = (int(part) for part in normalized.split(":"))
    return f"{minute} {hour} * * *"


def times_from_schedule(schedule: Optional[str]) -> list[str]:
    """Derive a single posting time from a legacy cron expression."""
    if not schedule:
        return []
    parts = schedule.split()
    if len(parts) < 2:
        return []
    try:
        minute = int(parts[0])
        hour = int(parts[1])
    except ValueError:
        return []
    return [normalize_time_string(f"{hour:02d}:{minute:02d}") or DEFAULT_TIME]


def normalize_posting_times(times: Iterable[str]) -> list[str]:
    """Drop invalid entries, dedupe and sort chronologically."""
    valid = {t for t in (normalize_time_string(x) for x in times) if t}
    return sorted(valid)


def ensure_posting_times(config: ConceptConfig) -> list[str]:
    """Posting times, else times derived from the schedule, else 08:00."""
    times = normalize_posting_times(config.posting_times or [])
    if times:
        return times
    derived = normalize_posting_times(times_from_schedule(config.schedule))
    if derived:
        return derived
    return [DEFAULT_TIME]


def with_normalized_posting_times(config: ConceptConfig) -> ConceptConfig:
    """Copy of the config with normalized times and a matching cron field."""
    times = ensure_posting_times(config)
    return config.model_copy(update={
        "posting_times": times,
        "schedule": cron_from_time(times[0]),
    })
