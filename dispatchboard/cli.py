"""Typer based command line entry points for the dispatch board."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

import typer

from dispatchboard.config import BoardSettings, load_settings
from dispatchboard.core.errors import DispatchBoardError
from dispatchboard.core.logger import get_logger
from dispatchboard.core.poller import BoardSnapshot, DispatchPoller, local_now
from dispatchboard.services.alerts import AlertTrigger, SilentPlayer, TerminalBellPlayer
from dispatchboard_persist.stores.base_store import StoreError
from dispatchboard_persist.stores.dispatch_store import DispatchStore

app = typer.Typer(help="Dispatch confirmation board.")

URGENCY_COLORS = {
    "success": typer.colors.GREEN,
    "error": typer.colors.RED,
    "warning": typer.colors.YELLOW,
    "none": None,
}

TABLE_HEADERS = ("時間", "類型", "車號", "駕駛", "電話", "航班", "地址", "乘客", "行李", "狀態")


def _settings(ctx: typer.Context) -> BoardSettings:
    return ctx.obj["settings"]


def _open_store(ctx: typer.Context) -> DispatchStore:
    try:
        return _settings(ctx).open_store()
    except DispatchBoardError as exc:
        typer.secho(f"Unable to open dispatch store: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=2) from exc


def _poller(ctx: typer.Context, store: DispatchStore, trigger: AlertTrigger) -> DispatchPoller:
    settings = _settings(ctx)
    return DispatchPoller(
        store,
        trigger,
        interval_ms=settings.poll_interval_ms,
        approaching_seconds=settings.approaching_seconds,
        clock=local_now,
    )


def _print_table(snapshot: BoardSnapshot) -> None:
    typer.echo(f"現在時間：{snapshot.now.strftime('%Y-%m-%d %H:%M:%S')}")
    if not snapshot.rows:
        typer.echo("請上傳派車資料檔案")
        return
    typer.echo(" | ".join(TABLE_HEADERS))
    for row in snapshot.rows:
        record = row.record
        cells = (
            record.time,
            record.type,
            record.car_number,
            record.driver_name,
            record.driver_phone,
            record.flight_number,
            record.address,
            str(record.passengers),
            str(record.luggage),
            f"{row.view.display} [{record.id}]",
        )
        typer.secho(" | ".join(cells), fg=URGENCY_COLORS[row.view.urgency])


@app.callback()
def main_callback(
    ctx: typer.Context,
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        help="Set global logging level (e.g. DEBUG/INFO/WARNING).",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        help="YAML settings file (defaults to $DISPATCHBOARD_CONFIG).",
    ),
) -> None:
    """Configure settings and logging before executing commands."""

    level_value = getattr(logging, log_level.upper(), None)
    if not isinstance(level_value, int):
        raise typer.BadParameter(f"Unknown log level: {log_level}")

    try:
        settings = load_settings(config)
    except DispatchBoardError as exc:
        typer.secho(f"Invalid configuration: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=2) from exc

    get_logger(settings.root / "logs", level=level_value)
    ctx.obj = {"settings": settings}


@app.command("load")
def load_command(
    ctx: typer.Context,
    file: Path = typer.Argument(..., dir_okay=False, help="Dispatch spreadsheet (.xlsx/.xls/.csv)"),
    sheet: Optional[str] = typer.Option(None, "--sheet", help="Sheet name, taken literally (e.g. \"2024\")."),
    sheet_index: Optional[int] = typer.Option(None, "--sheet-index", min=0, help="Zero-based sheet position (default: 0)."),
) -> None:
    """Replace the board with the records of a dispatch spreadsheet."""

    if sheet is not None and sheet_index is not None:
        raise typer.BadParameter("Use either --sheet or --sheet-index, not both")
    sheet_ref: str | int = sheet if sheet is not None else (sheet_index or 0)
    store = _open_store(ctx)
    try:
        state = store.load_file(file, sheet=sheet_ref)
    except (DispatchBoardError, StoreError, FileNotFoundError) as exc:
        get_logger().error("cli.load failed file=%s", file, exc_info=True)
        typer.secho(f"Load failed: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc
    typer.echo(f"Loaded {len(state.records)} dispatch records")


@app.command("confirm")
def confirm_command(
    ctx: typer.Context,
    record_id: str = typer.Argument(..., help="Dispatch record id (編號)"),
) -> None:
    """Mark every record with the given id as confirmed."""

    store = _open_store(ctx)
    try:
        matched = store.confirm(record_id)
    except StoreError as exc:
        typer.secho(f"Confirm failed: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc
    if matched == 0:
        typer.secho(f"No dispatch record with id {record_id}", fg=typer.colors.YELLOW)
        raise typer.Exit(code=1)
    typer.echo(f"Confirmed {matched} record(s) with id {record_id}")


@app.command("show")
def show_command(ctx: typer.Context) -> None:
    """Print the board once with derived statuses."""

    store = _open_store(ctx)
    poller = _poller(ctx, store, AlertTrigger(SilentPlayer()))
    _print_table(poller.snapshot(local_now()))


@app.command("watch")
def watch_command(
    ctx: typer.Context,
    ticks: int = typer.Option(0, "--ticks", min=0, help="Stop after N ticks (0 = run until interrupted)."),
    sound: bool = typer.Option(False, "--sound/--no-sound", help="Ring the terminal bell while records are overdue."),
) -> None:
    """Re-evaluate the board every poll interval, alerting on overdue records."""

    store = _open_store(ctx)
    settings = _settings(ctx)
    player = TerminalBellPlayer(interval_sec=settings.bell_interval_ms / 1000) if sound else SilentPlayer()
    trigger = AlertTrigger(player)
    if sound and not trigger.enable_sound():
        typer.secho("Alert sound unavailable; continuing without sound", fg=typer.colors.YELLOW)
    poller = _poller(ctx, store, trigger)

    def _report(snapshot: BoardSnapshot) -> None:
        overdue = ", ".join(sorted(snapshot.overdue)) or "-"
        typer.echo(
            f"{snapshot.now.strftime('%H:%M:%S')} records={len(snapshot.rows)} overdue={overdue}"
            + (" ALERT" if snapshot.alarming else "")
        )

    poller.add_listener(_report)
    count = 0
    try:
        while ticks == 0 or count < ticks:
            if count:
                time.sleep(settings.poll_interval_ms / 1000)
            poller.tick()
            count += 1
    except KeyboardInterrupt:
        typer.echo("Stopped")
    finally:
        trigger.update(())


@app.command("gui")
def gui_command(ctx: typer.Context) -> None:
    """Open the desktop board."""

    from dispatchboard.app_gui.main_gui import main as gui_main

    gui_main(_settings(ctx))


if __name__ == "__main__":
    app()
