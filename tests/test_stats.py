"""Tests for taskpulse/stats.py — completion stats, due-today, memoization."""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from taskpulse.models import Task
from taskpulse.stats import StatsCache, aggregate, deadline_date, is_due_today


def test_empty_tasks(now):
    stats = aggregate([], now)
    assert stats.completed_count == 0
    assert stats.completed_percentage == 0
    assert stats.due_today_count == 0
    assert stats.due_today_names == ()


def test_single_task_due_today(now):
    tasks = [Task(id="1", name="Ship it", deadline="2026-10-17T15:30:00")]
    stats = aggregate(tasks, now)
    assert stats.due_today_count == 1
    assert stats.due_today_names == ("Ship it",)
    assert stats.completed_percentage == 0


def test_half_done(now):
    tasks = [Task(id=str(i), name=f"T{i}", done=i < 2) for i in range(4)]
    stats = aggregate(tasks, now)
    assert stats.completed_count == 2
    assert stats.completed_percentage == 50


def test_sample(now, sample_tasks):
    stats = aggregate(sample_tasks, now)
    assert stats.completed_count == 2
    assert stats.completed_percentage == 50
    # Buy milk is due today but already done
    assert stats.due_today_names == ("Write report",)


@pytest.mark.parametrize("done_count,total", [(0, 1), (1, 1), (1, 3), (2, 3), (7, 9), (0, 5)])
def test_percentage_bounds(now, done_count, total):
    tasks = [Task(id=str(i), name=str(i), done=i < done_count) for i in range(total)]
    stats = aggregate(tasks, now)
    assert 0 <= stats.completed_percentage <= 100
    assert stats.completed_count <= total
    assert (stats.completed_percentage == 0) == (stats.completed_count == 0)


def test_all_done_is_exactly_100(now):
    tasks = [Task(id=str(i), name=str(i), done=True) for i in range(3)]
    assert aggregate(tasks, now).completed_percentage == 100


def test_done_task_never_due_today(now):
    tasks = [Task(id="1", name="Done already", done=True, deadline="2026-10-17T08:00:00")]
    assert aggregate(tasks, now).due_today_count == 0


def test_due_today_keeps_input_order(now):
    tasks = [
        Task(id="1", name="Zeta", deadline="2026-10-17T23:00:00"),
        Task(id="2", name="Alpha", deadline="2026-10-17T01:00:00"),
        Task(id="3", name="Later", deadline="2026-10-20"),
        Task(id="4", name="Mid", deadline=date(2026, 10, 17)),
    ]
    assert aggregate(tasks, now).due_today_names == ("Zeta", "Alpha", "Mid")


@pytest.mark.parametrize("bad", ["tomorrow-ish", "2026-13-45", "", "   ", 12345, ["2026-10-17"]])
def test_malformed_deadline_is_excluded(now, bad):
    tasks = [Task(id="1", name="Odd", deadline=bad)]
    stats = aggregate(tasks, now)
    assert stats.due_today_count == 0


def test_deadline_date_accepts_z_suffix():
    assert deadline_date("2026-10-17T23:30:00Z", timezone.utc) == date(2026, 10, 17)


def test_aware_deadline_converted_to_local_zone():
    # 23:30 UTC on the 16th is already the 17th in Tokyo
    tokyo = ZoneInfo("Asia/Tokyo")
    assert deadline_date("2026-10-16T23:30:00+00:00", tokyo) == date(2026, 10, 17)
    now = datetime(2026, 10, 17, 9, 0, tzinfo=tokyo)
    task = Task(id="1", name="Early", deadline="2026-10-16T23:30:00+00:00")
    assert is_due_today(task, now.date(), now.tzinfo) is True


def test_naive_deadline_taken_as_local():
    la = ZoneInfo("America/Los_Angeles")
    assert deadline_date("2026-10-17T23:59:00", la) == date(2026, 10, 17)


def test_deadline_date_passthrough_types():
    assert deadline_date(date(2026, 1, 2)) == date(2026, 1, 2)
    assert deadline_date(datetime(2026, 1, 2, 18, 0)) == date(2026, 1, 2)
    assert deadline_date(None) is None


def test_cache_reuses_result_for_same_collection(now, sample_tasks):
    cache = StatsCache()
    first = cache.get(sample_tasks, now)
    second = cache.get(sample_tasks, now + timedelta(minutes=5))
    assert first is second
    assert cache.hits == 1
    assert cache.misses == 1


def test_cache_recomputes_on_new_collection(now, sample_tasks):
    cache = StatsCache()
    cache.get(sample_tasks, now)
    changed = sample_tasks + (Task(id="t5", name="New", done=True),)
    stats = cache.get(changed, now)
    assert stats.completed_count == 3
    assert cache.misses == 2


def test_cache_recomputes_after_midnight(now):
    tasks = (Task(id="1", name="Tomorrow", deadline="2026-10-18T09:00:00"),)
    cache = StatsCache()
    assert cache.get(tasks, now).due_today_count == 0
    assert cache.get(tasks, now + timedelta(days=1)).due_today_count == 1


def test_cache_invalidate(now, sample_tasks):
    cache = StatsCache()
    cache.get(sample_tasks, now)
    cache.invalidate()
    cache.get(sample_tasks, now)
    assert cache.misses == 2
