"""serialmon CLI - command-line interface for serial monitor sessions."""

from __future__ import annotations

import asyncio
import json

import click

from serialmon.config import MonitorSettings, load_settings
from serialmon.exceptions import ConfigError
from serialmon.utils.logging import setup_logging


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--json-output", is_flag=True, help="Output in JSON format")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None, help="TOML settings file")
@click.pass_context
def cli(ctx: click.Context, debug: bool, json_output: bool, config_path: str | None) -> None:
    """serialmon - serial port monitor."""
    ctx.ensure_object(dict)
    setup_logging(level="DEBUG" if debug else "INFO", json_output=json_output)
    try:
        settings = load_settings(config_path)
    except ConfigError as exc:
        raise click.ClickException(f"{exc}: {exc.detail}") from exc
    ctx.obj["settings"] = settings
    ctx.obj["json_output"] = json_output or settings.json_logs
    setup_logging(level="DEBUG" if debug else settings.log_level, json_output=ctx.obj["json_output"])


def _make_driver(settings: MonitorSettings):
    from serialmon.driver.pyserial_driver import PySerialDriver

    return PySerialDriver(
        encoding=settings.encoding,
        read_timeout=settings.read_timeout,
        write_timeout=settings.write_timeout,
    )


@cli.command()
@click.pass_context
def ports(ctx: click.Context) -> None:
    """List available serial ports."""
    from serialmon.session.selector import sort_records

    records = sort_records(_make_driver(ctx.obj["settings"]).enumerate())

    if ctx.obj.get("json_output"):
        click.echo(json.dumps([r.model_dump() for r in records], indent=2))
        return
    if not records:
        click.echo("No serial port is available.")
        return
    click.echo(f"{'Port':<24}  {'VID':<4}  {'PID':<4}  Manufacturer")
    click.echo("-" * 60)
    for r in records:
        click.echo(f"{r.identifier:<24}  {r.vendor_id:<4}  {r.product_id:<4}  {r.manufacturer}")


@cli.command()
@click.option("--port", "-p", default=None, help="Serial port to select and open (e.g. /dev/ttyUSB0 or COM3)")
@click.option("--baud", "-b", type=int, default=None, help="Initial baud rate")
@click.pass_context
def monitor(ctx: click.Context, port: str | None, baud: int | None) -> None:
    """Run an interactive serial monitor session.

    Type 'help' at the prompt for the list of commands.
    """
    from serialmon.cli.console import run_monitor

    settings: MonitorSettings = ctx.obj["settings"]
    if baud is not None:
        if baud <= 0:
            raise click.BadParameter("baud rate must be positive", param_hint="--baud")
        settings = settings.model_copy(update={"default_baud_rate": baud})

    asyncio.run(run_monitor(_make_driver(settings), settings, port))


@cli.command()
@click.option("--host", default="127.0.0.1", help="Bind address")
@click.option("--port", type=int, default=8000, help="HTTP port")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int) -> None:
    """Start the HTTP API server."""
    import uvicorn
    from serialmon.api.app import create_app

    settings: MonitorSettings = ctx.obj["settings"]
    app = create_app(driver=_make_driver(settings), settings=settings)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    cli()
