"""Command-line interface for the work time tracker."""

from __future__ import annotations

import logging
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

import typer

from .config import TrackerSettings
from .errors import TrackerError
from .notifications import DesktopNotificationGateway
from .paths import resolve_db_path, resolve_log_path
from .reporting import HistoryPrinter, format_duration
from .storage import blob_store
from .ticker import InertTicker
from .tracker import ActivityStateMachine

app = typer.Typer(help="Local work and break time tracker.")

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

DB_OPTION = typer.Option(
    None,
    "--db",
    path_type=Path,
    help="Location of the tracker SQLite database.",
)


@app.callback(no_args_is_help=True)
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logs."),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file", path_type=Path, help="Append logs to this file."
    ),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )
    target = resolve_log_path(log_file).resolve()
    root = logging.getLogger()
    if any(
        isinstance(handler, logging.FileHandler) and Path(handler.baseFilename) == target
        for handler in root.handlers
    ):
        return
    handler = logging.FileHandler(target, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)


@contextmanager
def open_tracker(
    db_path: Optional[Path],
    *,
    notify: bool = True,
    watch: bool = False,
    tick_seconds: float = 1.0,
) -> Iterator[ActivityStateMachine]:
    """Open the store and build a tracker; one-shot commands never tick."""
    settings = TrackerSettings.from_values(
        tick_seconds=tick_seconds, notifications_enabled=notify
    )
    with blob_store(resolve_db_path(db_path)) as store:
        notifier = DesktopNotificationGateway(
            granted=settings.notifications_enabled, store=store
        )
        tracker = ActivityStateMachine(
            store,
            notifier,
            settings,
            ticker=None if watch else InertTicker(),
        )
        try:
            yield tracker
        except TrackerError as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(code=1) from exc
        finally:
            tracker.shutdown()


def _parse_id(value: str) -> uuid.UUID:
    try:
        return uuid.UUID(value)
    except ValueError as exc:
        raise typer.BadParameter(f"Not a valid id: {value}") from exc


@app.command()
def start(db_path: Optional[Path] = DB_OPTION) -> None:
    """Start working (begins a new day when idle)."""
    with open_tracker(db_path) as tracker:
        tracker.start_work()
        if tracker.current_quote:
            typer.echo(tracker.current_quote)
        typer.echo("Working.")


@app.command()
def pause(db_path: Optional[Path] = DB_OPTION) -> None:
    """Start a pause."""
    with open_tracker(db_path) as tracker:
        tracker.start_pause()
        typer.echo("Pausing.")


@app.command()
def resume(db_path: Optional[Path] = DB_OPTION) -> None:
    """Resume work after a pause."""
    with open_tracker(db_path) as tracker:
        tracker.resume_work()
        typer.echo("Working.")


@app.command()
def finish(db_path: Optional[Path] = DB_OPTION) -> None:
    """Finish the day and move it to the history."""
    with open_tracker(db_path) as tracker:
        day = tracker.finish_day()
        if day is None:
            typer.echo("Nothing to finish.")
            return
        typer.echo(
            f"Day finished. Work {format_duration(day.work_duration)}, "
            f"pause {format_duration(day.pause_duration)}."
        )


@app.command()
def reset(db_path: Optional[Path] = DB_OPTION) -> None:
    """Discard the running day without saving it to the history."""
    with open_tracker(db_path) as tracker:
        tracker.reset()
        typer.echo("Current day discarded.")


@app.command()
def status(db_path: Optional[Path] = DB_OPTION) -> None:
    """Show the running day."""
    with open_tracker(db_path) as tracker:
        HistoryPrinter().print_status(tracker.snapshot())
        remaining = tracker.remaining_work_until_break
        if remaining > 0:
            typer.echo(f"Work left until a break is due: {format_duration(remaining)}")
        required = tracker.required_break_seconds
        if required:
            typer.echo(f"Required break today: {format_duration(required)}")


@app.command()
def accelerate(
    enabled: bool = typer.Option(
        True, "--on/--off", help="Run the clock accelerated for testing."
    ),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Toggle accelerated test mode."""
    with open_tracker(db_path) as tracker:
        tracker.set_accelerated(enabled)
        typer.echo(f"Acceleration factor: {tracker.acceleration_factor:g}x")


@app.command()
def history(db_path: Optional[Path] = DB_OPTION) -> None:
    """List completed days."""
    with open_tracker(db_path) as tracker:
        HistoryPrinter().print_history(tracker.completed_days)


@app.command("edit-day")
def edit_day(
    day_id: str = typer.Argument(..., help="Id of the completed day."),
    work_minutes: float = typer.Option(..., "--work", min=0.0, help="Total work minutes."),
    pause_minutes: float = typer.Option(0.0, "--pause", min=0.0, help="Total pause minutes."),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Overwrite a day's totals. Original start and end times are lost."""
    with open_tracker(db_path) as tracker:
        day = tracker.update_day(_parse_id(day_id), work_minutes, pause_minutes)
        typer.echo(
            f"Updated. Work {format_duration(day.work_duration)}, "
            f"pause {format_duration(day.pause_duration)}."
        )


@app.command("edit-segment")
def edit_segment(
    day_id: str = typer.Argument(..., help="Id of the completed day."),
    segment_id: str = typer.Argument(..., help="Id of the segment."),
    start_time: datetime = typer.Option(..., "--start", help="New start time."),
    end_time: datetime = typer.Option(..., "--end", help="New end time."),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Change the start and end of one recorded segment."""
    if end_time < start_time:
        raise typer.BadParameter("--end must not be before --start")
    with open_tracker(db_path) as tracker:
        tracker.update_segment(
            _parse_id(day_id), _parse_id(segment_id), start_time, end_time
        )
        typer.echo("Segment updated.")


@app.command("delete-day")
def delete_day(
    day_id: str = typer.Argument(..., help="Id of the completed day."),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Remove a day from the history."""
    with open_tracker(db_path) as tracker:
        tracker.delete_day(_parse_id(day_id))
        typer.echo("Day deleted.")


@app.command()
def export(
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", path_type=Path, help="Write CSV here instead of stdout."
    ),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Export the history as CSV."""
    with open_tracker(db_path) as tracker:
        csv_text = tracker.export_csv()
    if output is None:
        typer.echo(csv_text, nl=False)
        return
    output.write_text(csv_text, encoding="utf-8")
    typer.echo(f"Exported to {output}")


@app.command()
def notifications(
    clear: bool = typer.Option(False, "--clear", help="Mark all as read and reset the badge."),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """List delivered break reminders, newest first."""
    with open_tracker(db_path) as tracker:
        delivered = tracker.delivered_notifications()
        if not delivered:
            typer.echo("No notifications.")
        for item in delivered:
            typer.echo(f"{item.delivered_at:%Y-%m-%d %H:%M:%S}  {item.title}")
            typer.echo(f"    {item.body}")
        if clear:
            tracker.mark_notifications_read()


@app.command("test-push")
def test_push(db_path: Optional[Path] = DB_OPTION) -> None:
    """Send a test notification."""
    with open_tracker(db_path) as tracker:
        tracker.send_test_notification()
        typer.echo("Test notification sent.")


@app.command()
def logs(
    clear: bool = typer.Option(False, "--clear", help="Delete the log file."),
) -> None:
    """Show (or clear) the application log."""
    log_path = resolve_log_path()
    if clear:
        for handler in logging.getLogger().handlers:
            if isinstance(handler, logging.FileHandler):
                handler.close()
        log_path.unlink(missing_ok=True)
        typer.echo("Log cleared.")
        return
    if not log_path.exists():
        typer.echo("No logs found.")
        return
    typer.echo(log_path.read_text(encoding="utf-8"), nl=False)


@app.command()
def watch(
    tick_seconds: float = typer.Option(
        1.0, "--interval", min=0.1, help="Seconds between break-rule checks."
    ),
    notify: bool = typer.Option(
        True, "--notify/--no-notify", help="Show desktop notifications."
    ),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Keep running and send break reminders while a day is in progress."""
    stop_event = threading.Event()
    with open_tracker(db_path, notify=notify, watch=True, tick_seconds=tick_seconds) as tracker:
        tracker.request_notification_permission()
        logger.info("Watching %s", resolve_db_path(db_path))
        try:
            # Other commands write to the store from their own processes.
            while not stop_event.wait(tick_seconds):
                tracker.reload()
        except KeyboardInterrupt:
            logger.info("Watcher interrupted.")
