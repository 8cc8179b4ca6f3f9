"""
Command-line interface for edfdecode.

Provides commands for inspecting EDF/EDF+ headers, signals and annotations,
and for managing configuration.
"""

import json
import logging
import math

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from pathlib import Path
from typing import Any

import click

from edfdecode.config import (
    get_config_path,
    get_decode_options,
    load_config,
    set_config_value,
    unset_config_value,
)
from edfdecode.logging_config import setup_logging
from edfdecode.parsers.base import EDFError
from edfdecode.parsers.edf import read_edf
from edfdecode.parsers.types import Recording

logger = logging.getLogger(__name__)

try:
    __version__ = get_version("edfdecode")
except PackageNotFoundError:
    __version__ = "dev"


def load_recording(path: str) -> Recording:
    """Decode a file with configured options, mapping errors for click."""
    try:
        options = get_decode_options()
    except ValueError as e:
        raise click.ClickException(
            f"Invalid decode settings in {get_config_path()}: {e}"
        ) from e
    try:
        return read_edf(Path(path), **options)
    except EDFError as e:
        raise click.ClickException(f"Failed to decode {Path(path).name}: {e}") from e


def format_millis(value: float | None) -> str:
    """Render a millisecond value as seconds for display."""
    if value is None:
        return "-"
    if math.isnan(value):
        return "invalid"
    return f"{value / 1000:g}s"


def version_callback(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    """Show version."""
    if not value or ctx.resilient_parsing:
        return
    click.echo(f"edfdecode, version {__version__}")
    ctx.exit()


@click.group()
@click.option(
    "--version",
    is_flag=True,
    callback=version_callback,
    expose_value=False,
    is_eager=True,
    help="Show version",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def cli(verbose: bool) -> None:
    """edfdecode: EDF/EDF+ inspection tool"""
    setup_logging(verbose=verbose, console_format="%(levelname)s: %(message)s")


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def info(path: str) -> None:
    """Show header information for an EDF/EDF+ file."""
    recording = load_recording(path)
    header = recording.header

    start = recording.start_datetime
    kind = "EDF+" if header.is_edf_plus else "EDF"
    if header.is_discontinuous:
        kind += " (discontinuous)"

    click.echo(f"\nFile: {Path(path).name} [{kind}]\n")
    click.echo(f"  Version: {header.version}")
    click.echo(f"  Patient: {header.patient_id}")
    click.echo(f"  Recording: {header.recording_id}")
    click.echo(f"  Start: {start.isoformat() if start else 'invalid'}")
    click.echo(f"  Duration: {format_millis(recording.duration_ms)}")
    click.echo(
        f"  Records: {header.record_count} x {format_millis(header.record_duration * 1000)}"
    )
    click.echo(f"  Annotations: {len(recording.annotations)}")

    click.echo(f"\n  {'#':>3}  {'Label':<16}  {'Dim':<8}  {'Samples/record':>14}")
    click.echo("  " + "-" * 47)
    for signal in recording.signals:
        marker = " *" if signal.is_reserved else ""
        click.echo(
            f"  {signal.index:>3}  {signal.label:<16}  {signal.physical_dimension:<8}  "
            f"{str(signal.sample_count):>14}{marker}"
        )
    if any(signal.is_reserved for signal in recording.signals):
        click.echo("\n  * reserved channel, not emitted as a signal")
    click.echo()


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def signals(path: str, as_json: bool) -> None:
    """List the signals decoded from an EDF/EDF+ file."""
    recording = load_recording(path)

    if as_json:
        payload = recording.to_dict()
        click.echo(_to_json(payload["signals"]))
        return

    if not recording.columns:
        click.echo("No signals found")
        return

    for column in recording.columns:
        metadata = column.metadata
        click.echo(f"{column.name}")
        click.echo(f"  Transducer: {metadata['transducer_type']}")
        click.echo(
            f"  Physical: {metadata['physical_minimum']} .. "
            f"{metadata['physical_maximum']} {metadata['physical_dimension']}"
        )
        click.echo(
            f"  Digital: {metadata['digital_minimum']} .. {metadata['digital_maximum']}"
        )
        click.echo(f"  Prefiltering: {metadata['prefiltering']}")
        click.echo(f"  Samples: {len(column)} ({metadata['sample_count']}/record)")


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def annotations(path: str, as_json: bool) -> None:
    """List the EDF+ annotations of a file."""
    recording = load_recording(path)

    if as_json:
        payload = [annotation.to_dict() for annotation in recording.annotations]
        click.echo(_to_json(payload))
        return

    if not recording.annotations:
        click.echo("No annotations found")
        return

    for annotation in recording.annotations:
        click.echo(
            f"{format_millis(annotation.onset_ms):>12}  "
            f"{format_millis(annotation.duration_ms):>10}  "
            f"{annotation.note or ''}"
        )


def _to_json(payload: Any) -> str:
    """Dump JSON with invalid-number sentinels rendered as null."""

    def clean(value: Any) -> Any:
        if isinstance(value, float) and math.isnan(value):
            return None
        if isinstance(value, dict):
            return {key: clean(item) for key, item in value.items()}
        if isinstance(value, list):
            return [clean(item) for item in value]
        return value

    return json.dumps(clean(payload), indent=2)


@cli.group()
def config() -> None:
    """Configuration management commands."""
    pass


@config.command("show")
def show_config_cmd() -> None:
    """Show all configuration settings."""
    config_path = get_config_path()
    if not config_path.exists():
        click.echo(f"No config file: {config_path}")
        return

    click.echo(f"Config file: {config_path}\n")
    config_data = load_config()
    if not config_data:
        click.echo("Configuration is empty.")
        return

    click.echo("Settings:")
    for section, values in config_data.items():
        if not isinstance(values, dict):
            continue
        click.echo(f"  [{section}]")
        for key, value in values.items():
            click.echo(f"    {key} = {json.dumps(value)}")


@config.command("set")
@click.argument("key")
@click.argument("value")
def set_config_cmd(key: str, value: str) -> None:
    """Set a config value, e.g. decode.header_encoding latin-1."""
    try:
        set_config_value(key, _coerce_value(value))
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="KEY") from e
    click.echo(f"✓ {key} = {value}")
    click.echo(f"  Config: {get_config_path()}")


@config.command("unset")
@click.argument("key")
def unset_config_cmd(key: str) -> None:
    """Remove a config value."""
    try:
        removed = unset_config_value(key)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="KEY") from e
    if removed:
        click.echo(f"✓ Removed {key}")
    else:
        click.echo(f"{key} was not set.")


def _coerce_value(value: str) -> Any:
    """Store true/false and integers with their TOML types."""
    lowered = value.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    try:
        return int(value)
    except ValueError:
        return value


def main() -> None:
    cli()
