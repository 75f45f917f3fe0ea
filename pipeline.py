"""
Validation, pairing and aggregation of time-log batches
"""

import os
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Mapping, Optional, Sequence, Union

from rich.console import Console

from aggregator import Aggregator
from entry import NormalizedEntry, RawEntry, SummaryEntry, ValidationResult
from store import EntryStore
from timeline_processor import TimelineProcessor
from validator import RawEntryValidator

console = Console()

MIN_ENTRIES_FOR_SUMMARY = 2
TRUTHY = {"1", "true", "yes", "on"}

RawRow = Union[RawEntry, Mapping[str, Optional[str]]]
ValidatedConsumer = Callable[[List[ValidationResult]], None]
SummaryConsumer = Callable[[List[SummaryEntry]], None]


@dataclass(frozen=True)
class SubmitEntries:
    entries: Sequence[RawRow]


@dataclass(frozen=True)
class LoadEntries:
    pass


@dataclass(frozen=True)
class ClearEntries:
    pass


Message = Union[SubmitEntries, LoadEntries, ClearEntries]


@dataclass
class PipelineResult:
    validated: List[ValidationResult]
    summaries: Optional[List[SummaryEntry]] = None

    @property
    def all_valid(self) -> bool:
        return all(result.is_valid for result in self.validated)


def debug_enabled() -> bool:
    return os.getenv("MONTGOMERY_DEBUG", "").strip().lower() in TRUTHY


def _coerce(row: RawRow) -> RawEntry:
    if isinstance(row, RawEntry):
        return row
    return RawEntry.model_validate(dict(row))


def validate_batch(
    raw_entries: Iterable[RawRow], validator: Optional[RawEntryValidator] = None
) -> List[ValidationResult]:
    """Validate every non-blank row, keeping input order."""
    validator = validator or RawEntryValidator()
    rows = (_coerce(row) for row in raw_entries)
    return [validator.validate(row) for row in rows if not row.is_blank()]


def summarize(
    entries: Iterable[NormalizedEntry],
    processor: Optional[TimelineProcessor] = None,
    aggregator: Optional[Aggregator] = None,
) -> List[SummaryEntry]:
    processor = processor or TimelineProcessor()
    aggregator = aggregator or Aggregator()
    summaries: List[SummaryEntry] = []
    for day in processor.extract_days(entries):
        summaries.extend(aggregator.aggregate(day))
    return summaries


def should_summarize(validated: Sequence[ValidationResult]) -> bool:
    """One bad row holds back the summaries of the whole batch."""
    if len(validated) < MIN_ENTRIES_FOR_SUMMARY:
        return False
    return all(result.is_valid for result in validated)


def run(
    raw_entries: Iterable[RawRow],
    validator: Optional[RawEntryValidator] = None,
    processor: Optional[TimelineProcessor] = None,
    aggregator: Optional[Aggregator] = None,
) -> PipelineResult:
    validated = validate_batch(raw_entries, validator)
    if not should_summarize(validated):
        return PipelineResult(validated=validated)
    summaries = summarize([result.value for result in validated], processor, aggregator)
    return PipelineResult(validated=validated, summaries=summaries)


@dataclass
class Pipeline:
    """Route input messages through the pipeline to the store and consumers."""

    store: EntryStore
    validated_consumers: Sequence[ValidatedConsumer] = field(default_factory=list)
    summary_consumers: Sequence[SummaryConsumer] = field(default_factory=list)
    validator: RawEntryValidator = field(default_factory=RawEntryValidator)
    processor: TimelineProcessor = field(default_factory=TimelineProcessor)
    aggregator: Aggregator = field(default_factory=Aggregator)
    verbose: bool = field(default_factory=debug_enabled)

    def handle(self, message: Message) -> PipelineResult:
        if isinstance(message, SubmitEntries):
            return self._submit(message.entries)
        if isinstance(message, LoadEntries):
            return self._load()
        if isinstance(message, ClearEntries):
            return self._clear()
        raise TypeError(f"Unsupported message: {message!r}")

    def _debug(self, text: str) -> None:
        if self.verbose:
            console.print(f"[dim]{text}[/dim]")

    def _submit(self, entries: Sequence[RawRow]) -> PipelineResult:
        result = run(entries, self.validator, self.processor, self.aggregator)
        invalid = sum(1 for item in result.validated if not item.is_valid)
        self._debug(f"Validated {len(result.validated)} row(s), {invalid} with errors")

        if result.all_valid:
            self.store.save([item.value for item in result.validated])
            self._debug(f"Saved {len(result.validated)} entries under '{self.store.key}'")

        for consumer in self.validated_consumers:
            consumer(result.validated)

        if result.summaries is None:
            self._debug("Summaries withheld: batch needs at least two rows and no errors")
            return result

        self._debug(f"Summarized into {len(result.summaries)} project/task total(s)")
        for consumer in self.summary_consumers:
            consumer(result.summaries)
        return result

    def _load(self) -> PipelineResult:
        entries = self.store.load()
        if not entries:
            self._debug("No stored entries")
            return PipelineResult(validated=[])
        self._debug(f"Loaded {len(entries)} stored entries")
        return self._submit(entries)

    def _clear(self) -> PipelineResult:
        self.store.clear()
        for consumer in self.validated_consumers:
            consumer([])
        return PipelineResult(validated=[])
