"""
Terminal renderers for validation results and time summaries
"""

from datetime import date
from typing import List, Optional, Sequence, Tuple

from rich.console import Console
from rich.table import Table
from rich.text import Text

from aggregator import sum_by_project
from entry import PREFERRED_DATE_FORMAT, SummaryEntry, ValidationResult

console = Console()

CHART_WIDTH = 40


def display_hours(minutes: float) -> str:
    """Minutes as hours, truncated (not rounded) to two decimals."""
    # Sub-minute rounding errors are tolerable.
    text = f"{minutes / 60.0:.6f}".rstrip("0").rstrip(".")
    point = text.find(".")
    return text if point == -1 else text[: point + 3]


def display_minutes(minutes: float) -> str:
    return f"{minutes:g}"


def sort_summaries(summaries: Sequence[SummaryEntry]) -> List[SummaryEntry]:
    return sorted(summaries, key=lambda s: (s.date, s.project, s.task))


def _format_date(value: date) -> str:
    return value.strftime(PREFERRED_DATE_FORMAT)


def build_validation_table(results: Sequence[ValidationResult]) -> Table:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Date", style="green")
    table.add_column("Project", style="blue")
    table.add_column("Task", style="cyan")
    table.add_column("Start", style="green")
    table.add_column("Errors", style="red")

    for i, result in enumerate(results):
        row = result.value
        table.add_row(
            str(i + 1),
            Text(row.date),
            Text(row.project),
            Text(row.task),
            Text(row.start),
            ", ".join(result.errors) if not result.is_valid else Text("ok", style="green"),
        )
    return table


def render_validation(results: Sequence[ValidationResult], out: Optional[Console] = None) -> None:
    out = out or console
    if not results:
        out.print("[yellow]No entries[/yellow]")
        return
    out.print(build_validation_table(results))
    invalid = [r for r in results if not r.is_valid]
    if invalid:
        out.print(f"[red]{len(invalid)} row(s) need fixing before durations can be calculated.[/red]")
    elif len(results) < 2:
        out.print("[dim]Add a closing entry to calculate durations.[/dim]")


def build_summary_table(summaries: Sequence[SummaryEntry], unit: str = "hours") -> Table:
    to_text = display_hours if unit == "hours" else display_minutes
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Date", style="green")
    table.add_column("Project", style="blue")
    table.add_column("Task", style="cyan")
    table.add_column(unit.capitalize(), style="yellow", justify="right")

    for summary in sort_summaries(summaries):
        table.add_row(_format_date(summary.date), Text(summary.project), Text(summary.task), to_text(summary.minutes))
    return table


def render_summary_table(
    summaries: Sequence[SummaryEntry], out: Optional[Console] = None, unit: str = "hours"
) -> None:
    if not summaries:
        return
    (out or console).print(build_summary_table(summaries, unit))


class ColorGenerator:
    """Cycle through a fixed palette, starting from its second colour."""

    PALETTE: Tuple[Tuple[int, int, int], ...] = (
        (0x66, 0, 0),
        (0x44, 0x44, 0),
        (0, 0x66, 0),
        (0, 0x44, 0x44),
        (0, 0, 0x66),
    )

    def __init__(self):
        self.idx = 0

    def next(self) -> Tuple[int, int, int]:
        self.idx += 1
        if self.idx >= len(self.PALETTE):
            self.idx = 0
        return self.PALETTE[self.idx]

    @staticmethod
    def highlight(color: Tuple[int, int, int]) -> Tuple[int, int, int]:
        return tuple(min(channel + 50, 255) for channel in color)

    @staticmethod
    def to_style(color: Tuple[int, int, int]) -> str:
        red, green, blue = color
        return f"rgb({red},{green},{blue})"


def build_project_chart(summaries: Sequence[SummaryEntry], width: int = CHART_WIDTH) -> Table:
    colors = ColorGenerator()
    totals = sum_by_project(summaries)
    grand_total = sum(minutes for _, minutes in totals)

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Project", style="blue")
    table.add_column("Share", justify="left")
    table.add_column("%", justify="right")
    table.add_column("Hours", style="yellow", justify="right")

    for project, minutes in totals:
        color = colors.next()
        share = minutes / grand_total if grand_total else 0.0
        bar = Text("█" * round(share * width), style=ColorGenerator.to_style(ColorGenerator.highlight(color)))
        table.add_row(
            Text(project, style=ColorGenerator.to_style(color)),
            bar,
            f"{share * 100:.0f}",
            display_hours(minutes),
        )
    return table


def render_project_chart(summaries: Sequence[SummaryEntry], out: Optional[Console] = None) -> None:
    if not summaries:
        return
    (out or console).print(build_project_chart(summaries))


def summaries_as_tsv(summaries: Sequence[SummaryEntry]) -> str:
    lines = ["date\tproject\ttask\thours"]
    for summary in sort_summaries(summaries):
        lines.append(
            "\t".join([_format_date(summary.date), summary.project, summary.task, display_hours(summary.minutes)])
        )
    return "\n".join(lines)
