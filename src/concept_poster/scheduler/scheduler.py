"""Schedule check: runs one posting worker per due concept.

A pass lists every concept under the root folder, works out whether one of
its posting times fell inside the last 59 minutes (in the configured UTC
offset), and for each due concept runs `python -m concept_poster post <id>`
to completion before looking at the next one.
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Iterable, Optional

from ..concepts import ConceptRepository, ensure_posting_times
from ..storage import StoreError

_logger = logging.getLogger("scheduler")

# Hourly trigger; 59 keeps a time on the hour boundary from firing twice
DUE_WINDOW = timedelta(minutes=59)

# concept_id -> worker exit code
WorkerRunner = Callable[[str], Awaitable[int]]


def most_recent_occurrence(time: str, reference: datetime, utc_offset_hours: float) -> datetime:
    """Latest UTC instant <= reference at which local "HH:MM" occurred."""
    hour, minute = (int(part) for part in time.split(":"))
    offset = timedelta(hours=utc_offset_hours)
    local_now = reference + offset
    candidate = local_now.replace(hour=hour, minute=minute, second=0, microsecond=0) - offset
    if candidate > reference:
        candidate -= timedelta(days=1)
    return candidate


def find_due_time(
    times: Iterable[str],
    now: datetime,
    utc_offset_hours: float,
    window: timedelta = DUE_WINDOW,
) -> Optional[str]:
    """First posting time whose latest occurrence is within `window` of now."""
    start = now - window
    for time in times:
        occurrence = most_recent_occurrence(time, now, utc_offset_hours)
        if start <= occurrence <= now:
            return time
    return None


def mask_name(name: str, enabled: bool) -> str:
    """Hide concept names in public CI logs ("ab***")."""
    if not enabled or len(name) <= 2:
        return name
    return f"{name[:2]}***"


async def run_worker_process(concept_id: str) -> int:
    """Run the posting command for one concept in a child process."""
    env = {**os.environ, "CONCEPT_ID": concept_id}
    process = await asyncio.create_subprocess_exec(
        sys.executable, "-m", "concept_poster", "post", concept_id,
        env=env,
    )
    return await process.wait()


@dataclass
class ScheduledJob:
    concept_id: str
    name: str
    time: str
    executed_at: datetime
    exit_code: Optional[int] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.exit_code == 0


@dataclass
class ScheduleSummary:
    """Outcome of one schedule pass."""

    started_at: datetime
    checked: int = 0
    skipped: list[str] = field(default_factory=list)
    jobs: list[ScheduledJob] = field(default_factory=list)

    @property
    def failed_jobs(self) -> list[ScheduledJob]:
        return [job for job in self.jobs if not job.success]

    @property
    def success(self) -> bool:
        return not self.failed_jobs


class ScheduleChecker:
    """One pass over all concepts.

    Usage:
        checker = ScheduleChecker(repository, utc_offset_hours=9)
        summary = await checker.run()
    """

    def __init__(
        self,
        repository: ConceptRepository,
        runner: WorkerRunner = run_worker_process,
        utc_offset_hours: float = 9.0,
        mask_names: bool = False,
    ):
        self._repository = repository
        self._runner = runner
        self._utc_offset_hours = utc_offset_hours
        self._mask_names = mask_names

    def _display(self, name: str) -> str:
        return mask_name(name, self._mask_names)

    async def run(self, now: Optional[datetime] = None) -> ScheduleSummary:
        """Check every concept and run the due ones.

        A failing worker is recorded and the pass moves on to the next
        concept; callers decide the exit status from the summary.

        Raises:
            StoreError: Root folder missing or store unreachable.
        """
        now = now or datetime.now(timezone.utc)
        local = now + timedelta(hours=self._utc_offset_hours)
        _logger.info(
            f"Starting schedule check at {local:%Y-%m-%d %H:%M:%S} (UTC{self._utc_offset_hours:+g})"
        )
        summary = ScheduleSummary(started_at=now)

        root = await self._repository.find_root()
        if root is None:
            raise StoreError(f"Root folder '{self._repository.root_folder_name}' not found")

        concepts = await self._repository.list_concepts()
        _logger.debug(f"Found {len(concepts)} concept folders")

        for folder in concepts:
            summary.checked += 1
            config = await self._repository.load_config(folder.id)
            if config is None:
                _logger.info(f"- Skipping concept '{self._display(folder.name)}': config.json not found")
                summary.skipped.append(folder.id)
                continue

            display = self._display(config.name or folder.name)
            times = ensure_posting_times(config)
            _logger.info(f"- Checking concept '{display}': times {', '.join(times)}")

            due = find_due_time(times, now, self._utc_offset_hours)
            if due is None:
                continue

            _logger.info(f"  -> Executing job for concept '{display}' at {due}")
            job = ScheduledJob(concept_id=folder.id, name=display, time=due, executed_at=now)
            summary.jobs.append(job)
            try:
                job.exit_code = await self._runner(folder.id)
            except OSError as e:
                job.error = str(e)
                _logger.error(f"  -> Failed to start worker for '{display}': {e}")
                continue

            if job.success:
                _logger.info(f"  -> Worker for '{display}' completed successfully")
            else:
                _logger.error(f"  -> Worker for '{display}' failed with code {job.exit_code}")

        self._log_summary(summary)
        return summary

    def _log_summary(self, summary: ScheduleSummary) -> None:
        _logger.info("--- Execution Summary ---")
        if not summary.jobs:
            _logger.info("No concepts were scheduled to run in the last hour")
        for job in summary.jobs:
            state = "ok" if job.success else f"failed ({job.error or job.exit_code})"
            _logger.info(f"{job.name} @ {job.time}: {state}")
        _logger.info(f"Finished schedule check at {datetime.now(timezone.utc).isoformat()}")
