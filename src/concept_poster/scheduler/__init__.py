"""Posting-time checks that trigger one posting worker per due concept."""

from .scheduler import (
    DUE_WINDOW,
    ScheduleChecker,
    ScheduledJob,
    ScheduleSummary,
    WorkerRunner,
    find_due_time,
    mask_name,
    most_recent_occurrence,
    run_worker_process,
)

__all__ = [
    "DUE_WINDOW",
    "ScheduleChecker",
    "ScheduleSummary",
    "ScheduledJob",
    "WorkerRunner",
    "find_due_time",
    "mask_name",
    "most_recent_occurrence",
    "run_worker_process",
]
