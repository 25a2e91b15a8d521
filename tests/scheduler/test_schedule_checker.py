"""Tests for due-time detection and the schedule pass."""

import json
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from concept_poster.scheduler import (
    ScheduleChecker,
    find_due_time,
    mask_name,
    most_recent_occurrence,
)
from concept_poster.storage import JSON_MIME, StoreError


def _utc(hour: int, minute: int = 0, day: int = 10) -> datetime:
    return datetime(2024, 6, day, hour, minute, tzinfo=timezone.utc)


class TestMostRecentOccurrence:
    """Tests for most_recent_occurrence function."""

    def test_same_day(self):
        # 00:30 UTC is 09:30 at UTC+9
        assert most_recent_occurrence("09:00", _utc(0, 30), 9) == _utc(0, 0)

    def test_previous_day(self):
        # 08:00 at UTC+9 has not happened yet at 22:30 UTC (07:30 local)
        assert most_recent_occurrence("08:00", _utc(22, 30), 9) == _utc(23, 0, day=9)

    def test_negative_offset(self):
        assert most_recent_occurrence("18:00", _utc(23, 15), -5) == _utc(23, 0)


class TestFindDueTime:
    """Tests for find_due_time function."""

    def test_due_within_window(self):
        assert find_due_time(["09:00", "21:00"], _utc(0, 30), 9) == "09:00"
        assert find_due_time(["09:00", "21:00"], _utc(12, 10), 9) == "21:00"

    def test_window_edges(self):
        assert find_due_time(["09:00"], _utc(0, 0), 9) == "09:00"
        assert find_due_time(["09:00"], _utc(0, 59), 9) == "09:00"
        assert find_due_time(["09:00"], _utc(1, 0), 9) is None

    def test_across_midnight(self):
        # 15:20 UTC is 00:20 local; 23:45 local was 35 minutes earlier
        assert find_due_time(["23:45"], _utc(15, 20), 9) == "23:45"

    def test_nothing_due(self):
        assert find_due_time(["09:00", "21:00"], _utc(5, 0), 9) is None


class TestMaskName:
    """Tests for mask_name function."""

    def test_masks_when_enabled(self):
        assert mask_name("Cats", True) == "Ca***"

    def test_short_names_unchanged(self):
        assert mask_name("Ab", True) == "Ab"

    def test_disabled(self):
        assert mask_name("Cats", False) == "Cats"


async def _add_concept(seeded, name, config):
    folder = await seeded.store.create_folder(name, seeded.root.id)
    if config is not None:
        await seeded.store.create_file("config.json", folder.id, json.dumps(config).encode(), JSON_MIME)
    return folder


class TestScheduleChecker:
    """Tests for ScheduleChecker."""

    @pytest.mark.asyncio
    async def test_runs_due_concepts_only(self, seeded_concept):
        dogs = await _add_concept(seeded_concept, "dogs", {"name": "Dogs", "postingTimes": ["15:00"]})
        runner = AsyncMock(return_value=0)
        checker = ScheduleChecker(seeded_concept.repository, runner=runner, utc_offset_hours=9)

        summary = await checker.run(now=_utc(0, 30))

        runner.assert_awaited_once_with(seeded_concept.concept.id)
        assert summary.checked == 2
        assert [(job.concept_id, job.time) for job in summary.jobs] == [(seeded_concept.concept.id, "09:00")]
        assert dogs.id not in [job.concept_id for job in summary.jobs]
        assert summary.success

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_the_pass(self, seeded_concept):
        dogs = await _add_concept(seeded_concept, "dogs", {"name": "Dogs", "postingTimes": ["09:15"]})
        runner = AsyncMock(side_effect=[1, 0])
        checker = ScheduleChecker(seeded_concept.repository, runner=runner, utc_offset_hours=9)

        summary = await checker.run(now=_utc(0, 30))

        assert runner.await_count == 2
        assert [job.exit_code for job in summary.jobs] == [1, 0]
        assert [job.concept_id for job in summary.failed_jobs] == [seeded_concept.concept.id]
        assert summary.jobs[1].concept_id == dogs.id
        assert not summary.success

    @pytest.mark.asyncio
    async def test_worker_start_error_is_recorded(self, seeded_concept):
        runner = AsyncMock(side_effect=FileNotFoundError("python not found"))
        checker = ScheduleChecker(seeded_concept.repository, runner=runner, utc_offset_hours=9)

        summary = await checker.run(now=_utc(0, 30))

        (job,) = summary.jobs
        assert job.exit_code is None
        assert job.error == "python not found"
        assert not summary.success

    @pytest.mark.asyncio
    async def test_concept_without_config_is_skipped(self, seeded_concept):
        empty = await _add_concept(seeded_concept, "empty", None)
        runner = AsyncMock(return_value=0)
        checker = ScheduleChecker(seeded_concept.repository, runner=runner, utc_offset_hours=9)

        summary = await checker.run(now=_utc(5, 0))

        assert summary.skipped == [empty.id]
        assert summary.jobs == []
        runner.assert_not_awaited()
        assert summary.success

    @pytest.mark.asyncio
    async def test_legacy_schedule_only(self, seeded_concept):
        await _add_concept(seeded_concept, "legacy", {"name": "Legacy", "schedule": "0 14 * * *"})
        runner = AsyncMock(return_value=0)
        checker = ScheduleChecker(seeded_concept.repository, runner=runner, utc_offset_hours=9)

        summary = await checker.run(now=_utc(5, 20))

        assert [(job.name, job.time) for job in summary.jobs] == [("Legacy", "14:00")]

    @pytest.mark.asyncio
    async def test_names_are_masked(self, seeded_concept):
        runner = AsyncMock(return_value=0)
        checker = ScheduleChecker(seeded_concept.repository, runner=runner, utc_offset_hours=9, mask_names=True)

        summary = await checker.run(now=_utc(0, 30))

        assert summary.jobs[0].name == "Ca***"

    @pytest.mark.asyncio
    async def test_missing_root(self, seeded_concept):
        seeded_concept.repository.root_folder_name = "nowhere"
        checker = ScheduleChecker(seeded_concept.repository, runner=AsyncMock())

        with pytest.raises(StoreError):
            await checker.run(now=_utc(0, 30))

    @pytest.mark.asyncio
    async def test_default_offset_is_nine_hours(self, seeded_concept):
        runner = AsyncMock(return_value=0)
        checker = ScheduleChecker(seeded_concept.repository, runner=runner)

        summary = await checker.run(now=_utc(12, 0) + timedelta(minutes=5))

        assert [job.time for job in summary.jobs] == ["21:00"]
