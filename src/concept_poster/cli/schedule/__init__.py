"""Schedule feature - hourly check of concept posting times."""

from .commands import check_schedules
from .display import show_schedule_summary

__all__ = [
    "check_schedules",
    "show_schedule_summary",
]
