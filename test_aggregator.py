#!/usr/bin/env python3
"""
Tests for summing intervals per project and task
"""

from datetime import date, time

from aggregator import Aggregator, aggregate, sum_by_project
from entry import SummaryEntry, TimeEntry

DAY = date(2014, 8, 18)


def _interval(project, task, minutes):
    return TimeEntry(project=project, task=task, date=DAY, start=time(9, 0), end=time(10, 0), minutes=minutes)


def test_sums_per_project_and_task_in_first_seen_order():
    summaries = aggregate(
        [
            _interval("P1", "T0", 30),
            _interval("P0", "T0", 60),
            _interval("P1", "T0", 15),
            _interval("P0", "T1", 45),
        ]
    )

    assert summaries == [
        SummaryEntry(project="P1", task="T0", date=DAY, minutes=45),
        SummaryEntry(project="P0", task="T0", date=DAY, minutes=60),
        SummaryEntry(project="P0", task="T1", date=DAY, minutes=45),
    ]


def test_home_and_lunch_are_dropped_case_insensitively():
    summaries = aggregate(
        [
            _interval("Lunch", "", 30),
            _interval("LUNCH", "", 30),
            _interval("home", "", 600),
            _interval("P0", "T0", 60),
        ]
    )

    assert [(s.project, s.minutes) for s in summaries] == [("P0", 60)]


def test_grouping_is_case_sensitive():
    summaries = aggregate([_interval("P0", "T0", 10), _interval("p0", "T0", 20), _interval("P0", "t0", 30)])

    assert len(summaries) == 3


def test_day_with_only_breaks_yields_nothing():
    assert aggregate([_interval("Lunch", "", 30)]) == []
    assert aggregate([]) == []


def test_zero_minute_intervals_still_produce_a_summary():
    assert aggregate([_interval("P0", "T0", 0)]) == [SummaryEntry(project="P0", task="T0", date=DAY, minutes=0)]


def test_excluded_projects_from_environment(monkeypatch):
    monkeypatch.setenv("EXCLUDED_PROJECTS", "Coffee, home")

    summaries = Aggregator().aggregate([_interval("coffee", "", 10), _interval("Lunch", "", 30), _interval("Home", "", 5)])

    assert [s.project for s in summaries] == ["Lunch"]


def test_explicit_exclusions_override_environment(monkeypatch):
    monkeypatch.setenv("EXCLUDED_PROJECTS", "P0")

    summaries = Aggregator(excluded_projects=[]).aggregate([_interval("P0", "T0", 10)])

    assert [s.project for s in summaries] == ["P0"]


def test_sum_by_project():
    summaries = [
        SummaryEntry(project="P0", task="T0", date=DAY, minutes=300),
        SummaryEntry(project="P1", task="T0", date=DAY, minutes=90),
        SummaryEntry(project="P0", task="T1", date=DAY, minutes=60),
    ]

    assert sum_by_project(summaries) == [("P0", 360), ("P1", 90)]
