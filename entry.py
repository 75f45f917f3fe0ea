from datetime import date, datetime, time
from typing import List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

PREFERRED_DATE_FORMAT = "%Y-%m-%d"
PREFERRED_TIME_FORMAT = "%H:%M"


class MalformedInput(ValueError):
    """A normalized entry carried a date or time that does not parse."""


class RawEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: str = Field("", description="Date as typed by the user.")
    project: str = Field("", description="Project name as typed by the user.")
    task: str = Field("", description="Task name as typed by the user.")
    start: str = Field("", description="Clock time as typed by the user.")

    @field_validator("date", "project", "task", "start", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return "" if value is None else value

    def is_blank(self) -> bool:
        return not any((self.date, self.project, self.task, self.start))


class NormalizedEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: str = Field(
        ...,
        description="Date in YYYY-MM-DD format.",
        pattern=r"^\d{4}-\d{2}-\d{2}$",
    )
    project: str = Field(..., min_length=1, description="Project name.")
    task: str = Field("", description="Task name, may be empty.")
    start: str = Field(
        ...,
        description="Start time in HH:MM format (24-hour).",
        pattern=r"^\d{2}:\d{2}$",
    )

    @model_validator(mode="after")
    def check_parses(self) -> "NormalizedEntry":
        datetime.strptime(self.date, PREFERRED_DATE_FORMAT)
        datetime.strptime(self.start, PREFERRED_TIME_FORMAT)
        return self


class Valid(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: NormalizedEntry

    @property
    def is_valid(self) -> bool:
        return True

    @property
    def errors(self) -> Tuple[str, ...]:
        return ()


class Invalid(BaseModel):
    """Keeps the entry exactly as typed so the row can be shown again."""

    model_config = ConfigDict(frozen=True)

    value: RawEntry
    errors: Tuple[str, ...] = Field(..., min_length=1)

    @property
    def is_valid(self) -> bool:
        return False


ValidationResult = Union[Valid, Invalid]


class TimeEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    project: str
    task: str = ""
    date: date
    start: time
    end: Optional[time] = None
    minutes: Optional[float] = Field(None, ge=0)

    @property
    def started_at(self) -> datetime:
        return datetime.combine(self.date, self.start)


class SummaryEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    project: str
    task: str = ""
    date: date
    minutes: float = Field(..., ge=0)


class SummaryList(BaseModel):
    entries: List[SummaryEntry]
