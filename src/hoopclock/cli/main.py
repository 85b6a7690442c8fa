"""CLI entry point for hoopclock.

Uses Click to expose the ``hoopclock`` command group.  Each clock command
runs one countdown in the foreground, redrawing the display line as it
changes and sounding the buzzer on expiry.
"""

from __future__ import annotations

import logging
import shlex
import sys
from typing import Callable

import click

import hoopclock
from hoopclock.core.buzzer import Buzzer
from hoopclock.core.session import GameMode, GameSession
from hoopclock.core.ticker import Ticker
from hoopclock.core.timer import SHOT_CLOCK, CountdownTimer, TimerSnapshot, format_mmss

_INTERRUPTED = 130
_BUZZER_GRACE_SECONDS = 1.0
_GAME_SECONDS_RANGE = click.IntRange(1, 19 * 60 + 59)
_SHOT_SECONDS_RANGE = click.IntRange(1, 35)

_sound_option = click.option(
    "--sound",
    envvar="HOOPCLOCK_SOUND",
    type=click.Path(dir_okay=False),
    default=None,
    help="WAV file played when the clock expires.",
)
_player_option = click.option(
    "--player",
    envvar="HOOPCLOCK_PLAYER",
    default="aplay -q",
    show_default=True,
    help="Command used to play the buzzer sound.",
)


def _make_buzzer(sound: str | None, player: str) -> Buzzer:
    return Buzzer(sound, player=shlex.split(player))


def _renderer(label: str, render: Callable[[float], str]) -> Callable[[TimerSnapshot], None]:
    """Return an observer that redraws the clock line only when its text changes."""
    last = ""

    def draw(snapshot: TimerSnapshot) -> None:
        nonlocal last
        text = render(snapshot.remaining)
        if text == last:
            return
        last = text
        click.echo(f"\r{label} {text}", nl=False)

    return draw


def _run_clock(timer: CountdownTimer, buzzer: Buzzer) -> None:
    """Run *timer* to expiry in the foreground.  Ctrl-C stops it and exits 130."""
    profile = timer.get_profile()
    notifier = timer.get_notifier()
    notifier.subscribe(buzzer.play)
    ticker = Ticker(timer)
    ticker.add_observer(_renderer(profile.name.upper(), profile.render))

    exit_code = 0
    timer.start()
    try:
        ticker.run()
    except KeyboardInterrupt:
        timer.stop()
        click.echo(f"\nStopped at {timer.display()}")
        exit_code = _INTERRUPTED
    else:
        click.echo("\nTime!")
    finally:
        notifier.join(timeout=_BUZZER_GRACE_SECONDS)
        notifier.close()
    if exit_code:
        sys.exit(exit_code)


@click.group()
@click.version_option(version=hoopclock.__version__, prog_name="hoopclock")
@click.option("-v", "--verbose", is_flag=True, help="Log clock events to stderr.")
def cli(verbose: bool) -> None:
    """hoopclock: a basketball game clock and shot clock for the terminal."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
def modes() -> None:
    """List the game mode presets."""
    for mode in GameMode:
        click.echo(
            f"{mode.name.lower():<7} {mode.label:<16} "
            f"quarter {format_mmss(mode.quarter_seconds)}  "
            f"overtime {format_mmss(mode.overtime_seconds)}"
        )


@cli.command()
@click.option(
    "--mode",
    envvar="HOOPCLOCK_MODE",
    type=click.Choice([mode.name.lower() for mode in GameMode], case_sensitive=False),
    default="pro",
    show_default=True,
    help="Preset that sets the quarter and overtime lengths.",
)
@click.option("--seconds", type=_GAME_SECONDS_RANGE, default=None, help="Run from this many seconds instead.")
@click.option("--overtime", is_flag=True, help="Run an overtime period.")
@_sound_option
@_player_option
def game(mode: str, seconds: int | None, overtime: bool, sound: str | None, player: str) -> None:
    """Run the game clock for one quarter."""
    if overtime and seconds is not None:
        raise click.UsageError("--overtime and --seconds cannot be combined")
    session = GameSession(GameMode.from_name(mode))
    if overtime:
        session.apply_overtime()
    elif seconds is not None:
        session.edit_game_clock(*divmod(seconds, 60))
    click.echo(f"{session.mode.label}: {session.game_clock.display()}")
    _run_clock(session.game_clock, _make_buzzer(sound, player))


@cli.command()
@click.argument("seconds", type=_SHOT_SECONDS_RANGE, default=24)
@_sound_option
@_player_option
def shot(seconds: int, sound: str | None, player: str) -> None:
    """Run the shot clock from SECONDS (default 24)."""
    _run_clock(CountdownTimer(SHOT_CLOCK, seconds), _make_buzzer(sound, player))


@cli.command()
@_sound_option
@_player_option
def buzz(sound: str | None, player: str) -> None:
    """Sound the buzzer by hand."""
    if not _make_buzzer(sound, player).play():
        click.echo("Buzzer unavailable: configure --sound with a WAV file", err=True)
        sys.exit(1)
    click.echo("Buzz!")
