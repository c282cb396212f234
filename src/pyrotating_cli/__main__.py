"""Command-line interface for PyRotating.

This module provides a CLI for writing demo records through the rotating
hooks, forcing a rollover, inspecting backups and managing user defaults.
"""

import logging
import os
import time
from pathlib import Path
from typing import Optional

import click

from pyrotating import (
    NullWriter,
    RotatingSettings,
    RotationScheduler,
    StreamHook,
    TimedRotatingFileHook,
    get_formatter,
)
from pyrotating.rotation import RotationUnit, list_backups, select_expired

UNIT_CHOICE = click.Choice([unit.value for unit in RotationUnit], case_sensitive=False)


class RotatingCLI:
    """Command-line interface for rotating log files.

    This class holds the options shared by every command and implements the
    commands themselves.
    """

    def __init__(
        self,
        log_dir: Optional[str] = None,
        debug_mode: Optional[bool] = None,
        settings: Optional[RotatingSettings] = None,
    ):
        """Initialize the CLI.

        Args:
        ----
            log_dir: Directory for log files given by name only
            debug_mode: Whether to report rotation diagnostics on stderr
            settings: User defaults; loaded from the config file if None

        """
        self.settings = settings if settings is not None else RotatingSettings()
        self.log_dir = log_dir
        self.debug_mode = debug_mode or self.settings.get_debug_mode()

    def rotation_config(self, name, interval=None, multiplier=None, backup_count=None):
        """Build the rotation settings for ``name`` from defaults and overrides."""
        config = self.settings.to_rotation_config(name, self.log_dir)
        changes = {"debug": self.debug_mode}
        if interval is not None:
            changes["unit"] = RotationUnit.parse(interval)
        if multiplier is not None:
            changes["multiplier"] = multiplier
        if backup_count is not None:
            changes["backup_count"] = backup_count
        return config.replace(**changes)

    def demo_logger(self, name: str) -> logging.Logger:
        """Return a logger whose own output is discarded."""
        demo = logging.getLogger(f"pyrot.demo.{name}")
        demo.propagate = False
        demo.setLevel(logging.DEBUG)
        for handler in list(demo.handlers):
            demo.removeHandler(handler)
            handler.close()
        demo.addHandler(logging.StreamHandler(NullWriter()))
        return demo

    def write(self, name, count, period, fmt, interval, multiplier, backup_count):
        """Write demo records to a timed rotating file."""
        try:
            config = self.rotation_config(name, interval, multiplier, backup_count)
            Path(config.filename).parent.mkdir(parents=True, exist_ok=True)
            display_path = click.format_filename(config.filename)
            hook = TimedRotatingFileHook.from_config(
                config, formatter=get_formatter(fmt)
            )
        except (OSError, ValueError) as e:
            click.echo(click.style(f"✗ Error: {e}", fg="red"), err=True)
            return

        demo = self.demo_logger("write")
        demo.addHandler(hook)
        click.echo(click.style(f"Writing {count} records to {display_path}", fg="blue"))
        try:
            for i in range(count):
                demo.info("This is a test.", extra={"test1": "test1", "seq": i})
                if period and i + 1 < count:
                    time.sleep(period)
        except KeyboardInterrupt:
            click.echo(click.style("\nInterrupted", fg="yellow"))
            return
        finally:
            demo.removeHandler(hook)
            hook.close()
        click.echo(click.style("✓ Done", fg="green"))

    def stream(self, count, period, fmt):
        """Write demo records to standard error."""
        hook = StreamHook(formatter=get_formatter(fmt), debug=self.debug_mode)
        demo = self.demo_logger("stream")
        demo.addHandler(hook)
        try:
            for i in range(count):
                demo.info("This is a test.", extra={"test1": "test1", "seq": i})
                if period and i + 1 < count:
                    time.sleep(period)
        except KeyboardInterrupt:
            click.echo(click.style("\nInterrupted", fg="yellow"))
        finally:
            demo.removeHandler(hook)
            hook.close()

    def rotate(self, name, interval, backup_count):
        """Roll a log file over now."""
        try:
            config = self.rotation_config(name, interval, backup_count=backup_count)
            if not os.path.isfile(config.filename):
                click.echo(click.style("✗ Nothing was rotated", fg="yellow"))
                return
            scheduler = RotationScheduler(config)
        except (OSError, ValueError) as e:
            click.echo(click.style(f"✗ Error: {e}", fg="red"), err=True)
            return
        try:
            backup = scheduler.rotate()
        finally:
            scheduler.close()

        if backup is None:
            click.echo(click.style("✗ Nothing was rotated", fg="yellow"))
        else:
            click.echo(click.style(f"✓ Rotated to {backup}", fg="green"))

    def backups(self, name, interval, backup_count):
        """List backups and those the retention policy would delete."""
        try:
            config = self.rotation_config(name, interval, backup_count=backup_count)
            paths = list_backups(config.filename, config.unit)
        except (OSError, ValueError) as e:
            click.echo(click.style(f"✗ Error: {e}", fg="red"), err=True)
            return

        if not paths:
            click.echo(click.style("No backups found", fg="yellow"))
            return
        expired = set(select_expired(paths, config.backup_count))
        click.echo(
            click.style(
                f"Backups of {config.filename} (keeping {config.backup_count or 'all'}):",
                fg="blue",
            )
        )
        for path in paths:
            if path in expired:
                click.echo(click.style(f"  • {path} (expired)", fg="yellow"))
            else:
                click.echo(f"  • {path}")

    def show_config(self):
        """Show the current defaults."""
        click.echo(click.style(f"Config file: {self.settings.config_file}", fg="blue"))
        click.echo(f"  Log directory: {self.settings.get_log_dir()}")
        click.echo(
            f"  Interval: {self.settings.get_multiplier()} "
            f"{self.settings.get_unit().value}(s)"
        )
        click.echo(f"  Backup count: {self.settings.get_backup_count()}")
        click.echo(f"  Debug mode: {self.settings.get_debug_mode()}")


@click.group()
@click.option("--log-dir", help="Directory for log files given by name")
@click.option("--debug", is_flag=True, help="Report rotation diagnostics on stderr")
@click.option(
    "--config-file",
    envvar="PYROTATING_CONFIG",
    type=click.Path(dir_okay=False),
    help="Path of the JSON file with saved defaults",
)
@click.pass_context
def cli(ctx, log_dir, debug, config_file):
    """PyRotating CLI - time-based rotating log files."""
    ctx.obj = RotatingCLI(
        log_dir,
        debug_mode=debug,
        settings=RotatingSettings(config_file),
    )


@cli.command()
@click.argument("name")
@click.option("--count", default=10, show_default=True, help="Records to write")
@click.option("--period", default=0.0, show_default=True, help="Seconds between records")
@click.option("--format", "fmt", type=click.Choice(["text", "json"]), default="text")
@click.option("--interval", type=UNIT_CHOICE, help="Rotation unit")
@click.option("--multiplier", type=click.IntRange(min=1), help="Units per interval")
@click.option("--backup-count", type=click.IntRange(min=0), help="Backups to keep")
@click.pass_obj
def write(cli: RotatingCLI, name, count, period, fmt, interval, multiplier, backup_count):
    """Write demo records to a rotating log file."""
    cli.write(name, count, period, fmt, interval, multiplier, backup_count)


@cli.command()
@click.option("--count", default=10, show_default=True, help="Records to write")
@click.option("--period", default=0.0, show_default=True, help="Seconds between records")
@click.option("--format", "fmt", type=click.Choice(["text", "json"]), default="text")
@click.pass_obj
def stream(cli: RotatingCLI, count, period, fmt):
    """Write demo records to standard error."""
    cli.stream(count, period, fmt)


@cli.command()
@click.argument("name")
@click.option("--interval", type=UNIT_CHOICE, help="Rotation unit")
@click.option("--backup-count", type=click.IntRange(min=0), help="Backups to keep")
@click.pass_obj
def rotate(cli: RotatingCLI, name, interval, backup_count):
    """Roll a log file over now."""
    cli.rotate(name, interval, backup_count)


@cli.command()
@click.argument("name")
@click.option("--interval", type=UNIT_CHOICE, help="Rotation unit")
@click.option("--backup-count", type=click.IntRange(min=0), help="Backups to keep")
@click.pass_obj
def backups(cli: RotatingCLI, name, interval, backup_count):
    """List the backups of a log file."""
    cli.backups(name, interval, backup_count)


@cli.group()
def config():
    """Show or change the saved defaults."""


@config.command("show")
@click.pass_obj
def config_show(cli: RotatingCLI):
    """Show the saved defaults."""
    cli.show_config()


@config.command("set-log-dir")
@click.argument("log_dir", type=click.Path(file_okay=False))
@click.pass_obj
def config_set_log_dir(cli: RotatingCLI, log_dir):
    """Set the default log directory."""
    cli.settings.set_log_dir(log_dir)
    click.echo(click.style(f"✓ Log directory set to {log_dir}", fg="green"))


@config.command("set-interval")
@click.argument("unit", type=UNIT_CHOICE)
@click.argument("multiplier", type=click.IntRange(min=1), default=1)
@click.pass_obj
def config_set_interval(cli: RotatingCLI, unit, multiplier):
    """Set the default rotation interval."""
    cli.settings.set_interval(unit, multiplier)
    click.echo(click.style(f"✓ Interval set to {multiplier} {unit}(s)", fg="green"))


@config.command("set-backup-count")
@click.argument("backup_count", type=click.IntRange(min=0))
@click.pass_obj
def config_set_backup_count(cli: RotatingCLI, backup_count):
    """Set the default number of backups kept."""
    cli.settings.set_backup_count(backup_count)
    click.echo(click.style(f"✓ Backup count set to {backup_count}", fg="green"))


@config.command("set-debug")
@click.argument("enabled", type=click.BOOL)
@click.pass_obj
def config_set_debug(cli: RotatingCLI, enabled):
    """Turn rotation diagnostics on or off by default."""
    cli.settings.set_debug_mode(enabled)
    click.echo(click.style(f"✓ Debug mode set to {enabled}", fg="green"))


if __name__ == "__main__":
    cli()
