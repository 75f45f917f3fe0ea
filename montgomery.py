#!/usr/bin/env python3
"""
Montgomery time logger CLI

Check in with a project and task whenever you switch work. Each check-in runs
until the next one on the same day; the last check-in of a day (for example
"Home") only closes the day. The last cleanly validated batch of check-ins is
kept under ~/.montgomery and replayed on every run.
"""

import json
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional

import click
import pyperclip
from dotenv import load_dotenv
from prompt_toolkit import PromptSession
from prompt_toolkit.application import run_in_terminal
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.key_binding import KeyBindings
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from entry import PREFERRED_DATE_FORMAT, RawEntry, SummaryEntry, SummaryList
from pipeline import ClearEntries, LoadEntries, Pipeline, PipelineResult, SubmitEntries, debug_enabled, run
from report import render_project_chart, render_summary_table, render_validation, summaries_as_tsv
from store import EntryStore

load_dotenv()

console = Console()
CTRL_T_TRIGGER = "__CTRL_T__"
ROW_FIELDS = ("date", "project", "task", "start")


def _today() -> str:
    return date.today().strftime(PREFERRED_DATE_FORMAT)


def _build_pipeline(unit: str, verbose: bool) -> Pipeline:
    return Pipeline(
        store=EntryStore(),
        validated_consumers=[lambda results: render_validation(results, console)],
        summary_consumers=[
            lambda summaries: render_summary_table(summaries, console, unit),
            lambda summaries: render_project_chart(summaries, console),
        ],
        verbose=verbose or debug_enabled(),
    )


def _finish(result: PipelineResult) -> None:
    if not result.all_valid:
        raise click.ClickException("Entries were not saved. Fix the rows marked above and submit again.")
    console.print(f"[green]Saved {len(result.validated)} entries.[/green]")


def _read_batch(path: Path) -> List[RawEntry]:
    try:
        with path.open("r", encoding="utf-8") as fh:
            payload = json.load(fh)
    except (json.JSONDecodeError, UnicodeDecodeError) as err:
        raise click.ClickException(f"{path} is not valid JSON: {err}") from err
    if not isinstance(payload, list) or not all(isinstance(row, dict) for row in payload):
        raise click.ClickException(f"{path} must contain a JSON list of entry objects.")

    rows: List[RawEntry] = []
    for i, row in enumerate(payload, start=1):
        try:
            rows.append(RawEntry.model_validate(row))
        except ValidationError as err:
            fields = ", ".join(str(error["loc"][0]) for error in err.errors() if error["loc"])
            raise click.ClickException(f"{path} row {i}: fields must be text ({fields}).") from err
    return rows


def _prompt_rows(today: str, summaries: Optional[List[SummaryEntry]]) -> List[Dict[str, str]]:
    """Ask for check-ins field by field. Returns the rows typed so far."""

    console.print("[bold green]Enter check-ins[/bold green]")
    instructions_parts = ["Empty project and start = done", "Ctrl+T = submit now"]
    if summaries:
        instructions_parts.append("Ctrl+Y = copy summary")
    toolbar_html = HTML(f"<style fg='ansigray'>{' • '.join(instructions_parts)}</style>")

    session = PromptSession()
    bindings = KeyBindings()

    @bindings.add("c-t")
    def _trigger(event):
        event.app.exit(result=CTRL_T_TRIGGER)

    @bindings.add("c-y")
    def _copy(event):
        def _notify(message: str, style: str) -> None:
            console.print(f"[{style}]{message}[/{style}]")

        if not summaries:
            run_in_terminal(lambda: _notify("No summary available to copy.", "yellow"))
            return

        def _copy_and_notify() -> None:
            try:
                pyperclip.copy(summaries_as_tsv(summaries))
                _notify("Copied summary to system clipboard.", "green")
            except pyperclip.PyperclipException as err:  # pragma: no cover - environment dependent
                _notify(f"Unable to copy summary: {err}", "yellow")

        run_in_terminal(_copy_and_notify)

    rows: List[Dict[str, str]] = []
    while True:
        row: Dict[str, str] = {}
        for field_name in ROW_FIELDS:
            answer = session.prompt(
                HTML(f"<ansigray>{field_name:>7}> </ansigray>"),
                default=today if field_name == "date" else "",
                key_bindings=bindings,
                bottom_toolbar=lambda: toolbar_html,
            )
            if answer == CTRL_T_TRIGGER:
                if any(row.values()):
                    rows.append(row)
                return rows
            row[field_name] = answer.strip()

        if not row["project"] and not row["start"]:
            return rows
        rows.append(row)
        console.print(f"[dim]{escape(' '.join(row[name] for name in ('date', 'start', 'project', 'task')))}[/dim]")


def unit_option(func):
    return click.option(
        "--hours/--minutes",
        "hours",
        default=True,
        help="Show summary durations in hours (truncated to two decimals) or minutes.",
    )(func)


@click.group(invoke_without_command=True)
@click.option("--verbose", is_flag=True, help="Print pipeline debug output.")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """Turn time-log check-ins into per-day project/task durations."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    if ctx.invoked_subcommand is None:
        ctx.invoke(show)


@main.command()
@unit_option
@click.option("--json", "as_json", is_flag=True, help="Print summaries as JSON instead of tables.")
@click.pass_context
def show(ctx: click.Context, hours: bool = True, as_json: bool = False) -> None:
    """Show the stored check-ins and their summaries."""
    if as_json:
        result = run(EntryStore().load())
        click.echo(SummaryList(entries=result.summaries or []).model_dump_json(indent=2))
        return

    pipeline = _build_pipeline("hours" if hours else "minutes", ctx.obj.get("verbose", False))
    result = pipeline.handle(LoadEntries())
    if not result.validated:
        console.print("[yellow]No stored entries. Add one with 'montgomery log'.[/yellow]")


@main.command()
@click.argument("project")
@click.argument("task", required=False, default="")
@click.option("--start", "-s", required=True, help="Clock time: HH:mm, HHmm or hh:mm am/pm.")
@click.option("--date", "-d", "entry_date", default=None, help="Date as YYYY-MM-DD. Defaults to today.")
@unit_option
@click.pass_context
def log(ctx: click.Context, project: str, task: str, start: str, entry_date: Optional[str], hours: bool) -> None:
    """Append a check-in to the stored batch."""
    pipeline = _build_pipeline("hours" if hours else "minutes", ctx.obj.get("verbose", False))
    batch = pipeline.store.load()
    batch.append(RawEntry(date=entry_date or _today(), project=project, task=task, start=start))
    _finish(pipeline.handle(SubmitEntries(batch)))


@main.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@unit_option
@click.pass_context
def import_batch(ctx: click.Context, path: Path, hours: bool) -> None:
    """Replace the stored batch with the check-ins in a JSON file."""
    pipeline = _build_pipeline("hours" if hours else "minutes", ctx.obj.get("verbose", False))
    _finish(pipeline.handle(SubmitEntries(_read_batch(path))))


@main.command()
@unit_option
@click.pass_context
def enter(ctx: click.Context, hours: bool) -> None:
    """Type check-ins interactively and append them to the stored batch."""
    pipeline = _build_pipeline("hours" if hours else "minutes", ctx.obj.get("verbose", False))
    batch = pipeline.store.load()
    rows = _prompt_rows(_today(), run(batch).summaries)
    if not rows:
        console.print("No new check-ins.")
        return
    _finish(pipeline.handle(SubmitEntries([*batch, *rows])))


@main.command()
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_context
def clear(ctx: click.Context, yes: bool) -> None:
    """Forget all stored check-ins."""
    if not yes and not click.confirm("Delete all stored check-ins?", default=False):
        console.print("Nothing cleared.")
        return
    pipeline = Pipeline(store=EntryStore(), verbose=ctx.obj.get("verbose", False))
    pipeline.handle(ClearEntries())
    console.print("[green]Stored check-ins cleared.[/green]")


if __name__ == "__main__":
    main()
