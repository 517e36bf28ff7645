"""Command-line interface for care_stats."""

import asyncio
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .config import ConfigModel, get_config, load_config
from .models import DateRange, Period, StatisticsData, Task
from .services.statistics import (
    compute_legacy_statistics,
    compute_statistics,
    weekly_completion_data,
)
from .services.summary import generate_enriched_summary
from .task_loader import TaskLoadError, load_tasks
from .utils.datetime import end_of_day, ensure_aware, now_local, now_utc, start_of_day


console = Console()

PERIOD_CHOICES = [p.value.lower() for p in Period]


def read_tasks(tasks_file: str) -> List[Task]:
    """Load tasks or exit with an error message."""
    try:
        return load_tasks(tasks_file)
    except TaskLoadError as e:
        console.print(f"[red]❌ {escape(str(e))}[/red]")
        sys.exit(1)


def resolve_period(period: Optional[str], config: ConfigModel) -> Period:
    return Period.parse(period) if period else config.default_period


def current_time(config: ConfigModel) -> datetime:
    """Return the current time in the timezone statistics days are counted in."""
    return now_local() if config.use_local_time else now_utc()


def build_custom_range(period: Period, start, end, local: bool = False) -> Optional[DateRange]:
    """Validate --start/--end against the chosen period.

    Naive dates are read as local dates when ``local`` is set, otherwise as UTC.
    """
    if period != Period.CUSTOM:
        if start or end:
            raise click.UsageError("--start/--end are only valid with --period custom")
        return None
    if not start or not end:
        raise click.UsageError("--period custom requires both --start and --end")
    if start > end:
        raise click.UsageError("--start must not be after --end")
    aware = (lambda dt: dt.astimezone()) if local else ensure_aware
    return DateRange(start=start_of_day(aware(start)), end=end_of_day(aware(end)))


def _trend_text(change: int) -> str:
    if change > 0:
        return f"[green]▲ {change}%[/green]"
    if change < 0:
        return f"[red]▼ {abs(change)}%[/red]"
    return "[dim]• 0%[/dim]"


def render_statistics(stats: StatisticsData, period: Period, use_emoji: bool = True) -> None:
    """Print a statistics report to the console."""
    title = f"📊 {period.value} Statistics" if use_emoji else f"{period.value} Statistics"
    summary = (
        f"[bold]{stats.completion_score}%[/bold] completion  {_trend_text(stats.change_from_last_period)}"
        f" vs last period\n"
        f"Completed {stats.total_completed}/{stats.total_tasks} tasks · "
        f"{stats.total_minutes} min total · {stats.average_session_minutes} min/session\n"
        f"Current streak {stats.current_streak} · Longest streak {stats.longest_streak}"
    )
    console.print(Panel(summary, title=title, expand=False))

    categories = Table(title="Categories")
    categories.add_column("Category")
    categories.add_column("Completed", justify="right")
    categories.add_column("Skipped", justify="right")
    categories.add_column("Rate", justify="right")
    for category in stats.categories:
        label = f"{category.icon} {category.label}" if use_emoji else category.label
        categories.add_row(label, str(category.count), str(category.skipped), f"{category.rate}%")
    console.print(categories)

    activity = Table(title="Activity")
    activity.add_column("Date")
    activity.add_column("")
    activity.add_column("Completion", justify="right")
    activity.add_column("Tasks", justify="right")
    for point in stats.daily_activity:
        activity.add_row(point.date, point.day, f"{point.percentage}%",
                         f"{point.tasks_completed}/{point.total_tasks}")
    console.print(activity)

    if stats.highlights:
        console.print("[bold]Highlights[/bold]")
        for highlight in stats.highlights:
            icon = f"{highlight.icon} " if use_emoji else ""
            console.print(f"  {icon}[bold]{highlight.title}[/bold] - {highlight.description}")

    console.print(f"\n[italic]{stats.insight}[/italic]")


@click.group()
@click.option("--config", type=click.Path(), help="Path to config file")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.pass_context
def main(ctx, config, verbose):
    """care-stats - activity statistics for caregiving tasks."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    cfg = load_config(Path(config)) if config else get_config()
    level = logging.DEBUG if verbose else getattr(logging, str(cfg.log_level).upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


@main.command()
@click.argument("tasks_file", type=click.Path())
@click.option("--period", "-p", type=click.Choice(PERIOD_CHOICES, case_sensitive=False),
              help="Statistics period (defaults to the configured period)")
@click.option("--start", type=click.DateTime(formats=["%Y-%m-%d"]), help="Custom period start (YYYY-MM-DD)")
@click.option("--end", type=click.DateTime(formats=["%Y-%m-%d"]), help="Custom period end (YYYY-MM-DD)")
@click.option("--format", "-f", "output_format", type=click.Choice(["text", "json"]),
              default="text", help="Output format")
def report(tasks_file, period, start, end, output_format):
    """Show completion statistics for a task export."""
    config = get_config()
    selected = resolve_period(period, config)
    custom_range = build_custom_range(selected, start, end, local=config.use_local_time)
    tasks = read_tasks(tasks_file)

    stats = compute_statistics(tasks, selected, custom_range, now=current_time(config))

    if output_format == "json":
        click.echo(json.dumps(stats.to_dict(), indent=2, ensure_ascii=False))
    else:
        render_statistics(stats, selected, use_emoji=config.use_emoji)


@main.command()
@click.argument("tasks_file", type=click.Path())
@click.option("--period", "-p", type=click.Choice(PERIOD_CHOICES, case_sensitive=False),
              help="Statistics period (defaults to the configured period)")
def summary(tasks_file, period):
    """Print a caregiver-friendly summary of the statistics."""
    config = get_config()
    selected = resolve_period(period, config)
    if selected == Period.CUSTOM:
        raise click.UsageError("summary does not support the custom period; use report")
    tasks = read_tasks(tasks_file)

    stats = compute_statistics(tasks, selected, now=current_time(config))
    text = asyncio.run(generate_enriched_summary(stats, selected, config=config))
    console.print(Panel(text, title=f"{selected.value} Summary", expand=False))


@main.command()
@click.argument("tasks_file", type=click.Path())
@click.option("--format", "-f", "output_format", type=click.Choice(["text", "json"]),
              default="text", help="Output format")
def legacy(tasks_file, output_format):
    """Show the simple completion and automation counts."""
    tasks = read_tasks(tasks_file)
    stats = compute_legacy_statistics(tasks)

    if output_format == "json":
        click.echo(json.dumps(stats.to_dict(), indent=2))
        return

    table = Table(title="Task Statistics")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Total tasks", str(stats.total_tasks))
    table.add_row("Completed", str(stats.completed_tasks))
    table.add_row("Pending", str(stats.pending_tasks))
    table.add_row("Completion rate", f"{stats.completion_rate:.1f}%")
    table.add_row("Automated", str(stats.automated_tasks))
    table.add_row("Manual", str(stats.manual_tasks))
    for cadence, count in stats.tasks_by_repeat.items():
        table.add_row(f"Repeat: {cadence}", str(count))
    console.print(table)


@main.command()
@click.argument("tasks_file", type=click.Path())
def weekly(tasks_file):
    """Show completed/total counts for each day of the week series."""
    config = get_config()
    tasks = read_tasks(tasks_file)

    table = Table(title="Weekly Completion")
    table.add_column("Day")
    table.add_column("Completed", justify="right")
    table.add_column("Total", justify="right")
    for row in weekly_completion_data(tasks, now=current_time(config)):
        table.add_row(str(row["day"]), str(row["completed"]), str(row["total"]))
    console.print(table)


if __name__ == "__main__":
    main()
