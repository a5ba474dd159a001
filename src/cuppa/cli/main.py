"""CLI entry point for cuppa.

Uses Click to expose the ``cuppa`` command group. Every invocation resumes
the persisted brew first, so a countdown started by one command is picked
up by the next.
"""

from __future__ import annotations

import asyncio
import logging.config
import sys
from pathlib import Path
from typing import Callable, TypeVar

import click

import cuppa
from cuppa.core.alarm import JsonAlarmStore
from cuppa.core.controller import BrewController
from cuppa.core.engine import Session, TimerEngine, format_timer
from cuppa.core.gate import Confirmation, ConfirmationGate, Prompt
from cuppa.core.notifications import build_notifier
from cuppa.core.presets import JsonPresetStore, PresetConfigError
from cuppa.core.ticker import PeriodicTicker
from cuppa.settings import settings

T = TypeVar("T")


def _configure_logging(level: str) -> None:
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s - %(levelname)s - %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "handlers": {
                "default": {
                    "formatter": "default",
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                },
            },
            "loggers": {
                "cuppa": {"handlers": ["default"], "level": level.upper()},
            },
        }
    )


def _run(action: Callable[[], T]) -> T:
    """Execute *action*, converting ``PresetConfigError`` to a CLI error.

    On ``PresetConfigError`` the message is printed to stderr and the
    process exits with code 1.
    """
    try:
        return action()
    except PresetConfigError as exc:
        click.echo(str(exc), err=True)
        sys.exit(1)


def _confirm_prompt(assume_yes: bool) -> Prompt:
    """Build a gate prompt that asks on the terminal without blocking the loop."""

    async def prompt(confirmation: Confirmation) -> bool | None:
        if assume_yes:
            return True
        try:
            return await asyncio.to_thread(
                click.confirm, " ".join(confirmation.message), default=False
            )
        except click.Abort:
            return None

    return prompt


def _build(config_dir: Path, assume_yes: bool = False) -> BrewController:
    """Wire stores, notifier, engine and gate for *config_dir*."""
    presets = JsonPresetStore(config_dir)
    engine = TimerEngine(
        presets,
        JsonAlarmStore(config_dir),
        build_notifier(settings.notify_command, config_dir),
        PeriodicTicker(settings.tick_interval_seconds),
        cancel_on_replace=settings.cancel_on_replace,
    )
    return BrewController(engine, ConfirmationGate(_confirm_prompt(assume_yes)), presets)


def _describe(session: Session) -> str:
    return f"{session.preset.name}: {format_timer(session.remaining_seconds)} remaining"


@click.group()
@click.version_option(version=cuppa.__version__, prog_name="cuppa")
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding presets.json and the active alarm.",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr.")
@click.pass_context
def cli(ctx: click.Context, config_dir: Path | None, verbose: bool) -> None:
    """cuppa: a tea brewing timer that survives restarts."""
    _configure_logging("DEBUG" if verbose else settings.log_level)
    ctx.obj = config_dir if config_dir is not None else settings.config_dir


@cli.command()
@click.pass_obj
def presets(config_dir: Path) -> None:
    """List the configured presets; the brewing one is starred."""
    controller = _run(lambda: _build(config_dir))
    session = controller.engine.resume()
    for preset in controller.presets:
        marker = "*" if session.preset is not None and session.preset.id == preset.id else " "
        click.echo(
            f"{marker} {preset.id:<12} {preset.name:<16} "
            f"{format_timer(preset.brew_seconds):>6}  {preset.temp_display}"
        )


@cli.command()
@click.argument("preset_id")
@click.option("--yes", "-y", is_flag=True, help="Replace a running timer without asking.")
@click.pass_obj
def start(config_dir: Path, preset_id: str, yes: bool) -> None:
    """Start brewing PRESET_ID."""
    controller = _run(lambda: _build(config_dir, assume_yes=yes))
    if preset_id not in {preset.id for preset in controller.presets}:
        click.echo(f"Unknown preset: {preset_id}", err=True)
        sys.exit(1)

    async def run() -> bool:
        controller.engine.resume()
        try:
            return await controller.request_start(preset_id)
        finally:
            controller.engine.close()

    started = asyncio.run(run())
    session = controller.engine.session
    if started:
        click.echo(f"Brewing {_describe(session)}")
    elif session.active and session.preset.id == preset_id:
        click.echo(f"{session.preset.name} is already brewing")
    else:
        click.echo(f"Kept brewing {_describe(session)}")


@cli.command()
@click.pass_obj
def status(config_dir: Path) -> None:
    """Show the active timer."""
    controller = _run(lambda: _build(config_dir))
    session = controller.engine.resume()
    if not session.active:
        click.echo("No active timer")
        sys.exit(1)
    click.echo(_describe(session))


@cli.command()
@click.option("--yes", "-y", is_flag=True, help="Cancel without asking.")
@click.pass_obj
def cancel(config_dir: Path, yes: bool) -> None:
    """Cancel the active timer."""
    controller = _run(lambda: _build(config_dir, assume_yes=yes))

    async def run() -> bool:
        controller.engine.resume()
        try:
            return await controller.request_cancel()
        finally:
            controller.engine.close()

    if asyncio.run(run()):
        click.echo("Timer cancelled")
    elif controller.engine.session.active:
        click.echo(f"Kept brewing {_describe(controller.engine.session)}")
    else:
        click.echo("No active timer")


@cli.command()
@click.pass_obj
def watch(config_dir: Path) -> None:
    """Follow the active timer until the tea is ready."""
    controller = _run(lambda: _build(config_dir))
    engine = controller.engine

    async def run() -> str | None:
        done = asyncio.Event()

        def show(session: Session) -> None:
            if session.active:
                click.echo(f"\r{_describe(session)} ", nl=False)
            else:
                done.set()

        engine.subscribe(show)
        session = engine.resume()
        if not session.active:
            return None
        try:
            await done.wait()
        finally:
            engine.close()
        return session.preset.name

    try:
        name = asyncio.run(run())
    except KeyboardInterrupt:
        # The alarm stays persisted; a later command resumes it.
        click.echo("")
        return
    if name is None:
        click.echo("No active timer")
        sys.exit(1)
    click.echo(f"\n{name} is now ready!")
