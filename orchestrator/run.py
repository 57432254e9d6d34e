# -*- coding: utf-8 -*-
import asyncio
import typing as t
from datetime import timedelta

import click
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from assistant.client import Assistant
from orchestrator.reminders import generate_reminders
from orchestrator.utils import console, err_console, load_snapshot, parse_instant, save_snapshot
from secretary_server.config import Settings, configure_logging
from secretary_server.formatting import format_datetime
from secretary_server.models import Meeting, Task
from secretary_server.scheduling import (
    DEFAULT_MEETING_DURATION_MINUTES,
    find_conflicts,
    select_reminder_eligible_tasks,
    utc_now,
)


def truncate_title(title: str, max_length: int = 45) -> str:
    """Truncate title to max_length characters, adding ellipsis if needed."""
    if len(title) <= max_length:
        return title
    return title[:max_length-3] + "..."


def create_meeting_table(meetings: list[Meeting], title: str) -> Table:
    """Create a table of meetings with their time spans."""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("ID", style="cyan", width=4)
    table.add_column("Title", style="white")
    table.add_column("Start → End", style="yellow")
    table.add_column("Status", style="green")

    for meeting in meetings:
        end = meeting.meeting_date + timedelta(minutes=meeting.duration or DEFAULT_MEETING_DURATION_MINUTES)
        table.add_row(
            str(meeting.id),
            truncate_title(meeting.title),
            f"{format_datetime(meeting.meeting_date)} → {format_datetime(end)}",
            meeting.status,
        )
    return table


def create_task_table(tasks: list[Task], title: str) -> Table:
    """Create a table of tasks with deadline and last reminder."""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("ID", style="cyan", width=4)
    table.add_column("Title", style="white")
    table.add_column("Deadline", style="yellow")
    table.add_column("Status", style="green")
    table.add_column("Last reminder", style="dim")

    for task in tasks:
        table.add_row(
            str(task.id),
            truncate_title(task.title),
            format_datetime(task.deadline),
            task.status,
            format_datetime(task.last_reminder_sent),
        )
    return table


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--log-level", default=None, help="Logging level (defaults to SECRETARY_LOG_LEVEL or INFO).")
@click.pass_context
def main(ctx: click.Context, log_level: t.Optional[str]) -> None:
    """AI secretary tools working on a JSON snapshot of meetings and tasks."""
    settings = Settings.from_env()
    configure_logging(log_level or settings.log_level)
    ctx.obj = settings


@main.command()
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False))
def show(snapshot: str) -> None:
    """Show the meetings and tasks in SNAPSHOT."""
    store = load_snapshot(snapshot)
    meetings = store.meetings.list()
    tasks = store.tasks.list()
    if meetings:
        console.print(create_meeting_table(meetings, "📅 Meetings"))
    if tasks:
        console.print(create_task_table(tasks, "✅ Tasks"))
    if not meetings and not tasks:
        console.print("[yellow]Snapshot is empty.[/yellow]")


@main.command()
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False))
@click.option("--start", "start", required=True, help="Start of the proposed meeting (ISO 8601).")
@click.option("--duration", type=click.IntRange(min=1), default=None, help="Length in minutes (default 60).")
@click.option("--exclude", "exclude_id", type=int, default=None, help="Meeting id to leave out of the check.")
def conflicts(snapshot: str, start: str, duration: t.Optional[int], exclude_id: t.Optional[int]) -> None:
    """Check a proposed meeting slot against the meetings in SNAPSHOT."""
    store = load_snapshot(snapshot)
    candidate = parse_instant(start)
    found = find_conflicts(candidate, duration, exclude_id, store.meetings.list())

    if not found:
        console.print(f"[bold green]✅ No conflicts for {format_datetime(candidate)}.[/bold green]")
        return
    console.print(create_meeting_table(found, f"⚠️  {len(found)} conflicting meeting(s)"))


@main.command()
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False))
@click.option("--now", "now_value", default=None, help="Reference time (ISO 8601, default: current time).")
@click.option("--generate", is_flag=True, help="Draft reminder emails with the assistant instead of only listing.")
@click.option("--max-concurrent", type=click.IntRange(min=1), default=None, help="Limit drafts in flight at once.")
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None,
              help="Write the updated snapshot here after generating.")
@click.pass_obj
def reminders(
        settings: Settings,
        snapshot: str,
        now_value: t.Optional[str],
        generate: bool,
        max_concurrent: t.Optional[int],
        output: t.Optional[str],
) -> None:
    """List, or with --generate draft, reminders for tasks in SNAPSHOT."""
    store = load_snapshot(snapshot)
    now = parse_instant(now_value) or utc_now()
    eligible = select_reminder_eligible_tasks(now, store.tasks.list())

    if not generate:
        if not eligible:
            console.print(f"[green]No tasks need a reminder at {format_datetime(now)}.[/green]")
            return
        console.print(create_task_table(eligible, f"⏰ Reminder-eligible tasks at {format_datetime(now)}"))
        return

    console.print(
        Panel.fit(
            f"[bold blue]⏰ Reminder run[/bold blue]\n"
            f"Drafting reminders for [bold]{len(eligible)}[/bold] task(s)",
            border_style="blue",
        )
    )
    try:
        assistant = Assistant.from_settings(settings)
    except RuntimeError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)
    with console.status("[bold green]Drafting reminder emails..."):
        run = asyncio.run(
            generate_reminders(
                store,
                assistant,
                now=now,
                default_recipient=settings.default_recipient_email,
                max_concurrent=max_concurrent or settings.max_concurrent_reminders,
            )
        )

    stats_text = Text()
    stats_text.append("Reminders drafted: ", style="white")
    stats_text.append(f"{run.reminders_generated}", style="bold green")
    stats_text.append("\n")
    stats_text.append("Failed: ", style="white")
    stats_text.append(f"{len(run.failed)}", style="bold red" if run.failed else "bold green")
    console.print(Panel(stats_text, title="📊 Statistics", border_style="green"))

    for failure in run.failed:
        console.print(f"   [red]✗[/red] Task {failure.task_id}: {failure.error}")
    for item in store.review_items.list():
        console.print(Panel(item.content, title=f"✉️  Draft for task {item.reference_id}", border_style="dim"))

    if output:
        save_snapshot(store, output)
        console.print(f"[dim]Updated snapshot written to {output}[/dim]")


if __name__ == "__main__":
    main()
