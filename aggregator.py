import os
from typing import Dict, Iterable, List, Optional, Tuple

from entry import SummaryEntry, TimeEntry

DEFAULT_EXCLUDED_PROJECTS = "home,lunch"


def _excluded_from_env() -> List[str]:
    raw = os.getenv("EXCLUDED_PROJECTS", DEFAULT_EXCLUDED_PROJECTS)
    return [name.strip() for name in raw.split(",") if name.strip()]


class Aggregator:
    """Sum one day's intervals per project and task"""

    def __init__(self, excluded_projects: Optional[Iterable[str]] = None):
        names = excluded_projects if excluded_projects is not None else _excluded_from_env()
        self.excluded_projects = {name.lower() for name in names}

    def is_excluded(self, project: str) -> bool:
        return project.lower() in self.excluded_projects

    def aggregate(self, intervals: Iterable[TimeEntry]) -> List[SummaryEntry]:
        totals: Dict[Tuple[str, str], SummaryEntry] = {}
        for interval in intervals:
            # Breaks and the end-of-day marker are not billable.
            if self.is_excluded(interval.project):
                continue

            key = (interval.project, interval.task)
            minutes = interval.minutes or 0.0
            existing = totals.get(key)
            if existing is None:
                totals[key] = SummaryEntry(
                    project=interval.project,
                    task=interval.task,
                    date=interval.date,
                    minutes=minutes,
                )
            else:
                totals[key] = existing.model_copy(update={"minutes": existing.minutes + minutes})
        return list(totals.values())


def aggregate(intervals: Iterable[TimeEntry]) -> List[SummaryEntry]:
    return Aggregator().aggregate(intervals)


def sum_by_project(summaries: Iterable[SummaryEntry]) -> List[Tuple[str, float]]:
    """Fold summaries into per-project totals, keeping first-seen order."""
    totals: Dict[str, float] = {}
    for summary in summaries:
        totals[summary.project] = totals.get(summary.project, 0.0) + summary.minutes
    return list(totals.items())
