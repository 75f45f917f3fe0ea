"""
Timeline processor for validated time-log entries
"""

from datetime import datetime
from typing import Dict, Iterable, List

from entry import (
    PREFERRED_DATE_FORMAT,
    PREFERRED_TIME_FORMAT,
    MalformedInput,
    NormalizedEntry,
    TimeEntry,
)


def to_time_entry(entry: NormalizedEntry) -> TimeEntry:
    """Parse the canonical date and start strings of a normalized entry."""
    try:
        day = datetime.strptime(entry.date, PREFERRED_DATE_FORMAT).date()
        start = datetime.strptime(entry.start, PREFERRED_TIME_FORMAT).time()
    except (TypeError, ValueError) as err:
        raise MalformedInput(f"Invalid datetime: {entry.date!r} {entry.start!r}") from err

    return TimeEntry(project=entry.project, task=entry.task, date=day, start=start)


class TimelineProcessor:
    """Pair consecutive check-ins of a day into timed intervals"""

    def group_by_day(self, entries: Iterable[NormalizedEntry]) -> Dict[str, List[TimeEntry]]:
        days: Dict[str, List[TimeEntry]] = {}
        for entry in entries:
            days.setdefault(entry.date, []).append(to_time_entry(entry))
        return days

    def calculate_minutes(self, day: List[TimeEntry]) -> List[TimeEntry]:
        """Close each check-in with the next one.

        The last check-in of the day only marks where the previous interval
        ends, so it never appears in the result.
        """
        if len(day) < 2:
            return []

        # sorted() is stable, check-ins with the same start keep input order.
        ordered = sorted(day, key=lambda item: item.start)

        intervals: List[TimeEntry] = []
        for current, following in zip(ordered, ordered[1:]):
            elapsed = following.started_at - current.started_at
            intervals.append(
                current.model_copy(
                    update={
                        "end": following.start,
                        "minutes": elapsed.total_seconds() / 60,
                    }
                )
            )
        return intervals

    def extract_days(self, entries: Iterable[NormalizedEntry]) -> List[List[TimeEntry]]:
        return [self.calculate_minutes(day) for day in self.group_by_day(entries).values()]

    def extract(self, entries: Iterable[NormalizedEntry]) -> List[TimeEntry]:
        return [interval for day in self.extract_days(entries) for interval in day]


_default_processor = TimelineProcessor()


def extract_days(entries: Iterable[NormalizedEntry]) -> List[List[TimeEntry]]:
    return _default_processor.extract_days(entries)


def extract(entries: Iterable[NormalizedEntry]) -> List[TimeEntry]:
    return _default_processor.extract(entries)
