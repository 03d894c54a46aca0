"""Interactive console loop for the ``monitor`` command."""

from __future__ import annotations

import asyncio

import click

from serialmon.config import MonitorSettings
from serialmon.context import FileDeviceContext
from serialmon.driver.base import SerialDriver
from serialmon.host.console import ConsoleHost
from serialmon.models import Command, list_baud_rates
from serialmon.session.controller import SessionController

COMMANDS: dict[str, Command] = {
    "select": Command.SELECT_PORT,
    "open": Command.OPEN,
    "close": Command.CLOSE,
    "baud": Command.CHANGE_BAUD_RATE,
    "send": Command.SEND_MESSAGE,
}

HELP_TEXT = f"""\
Commands:
  select [PORT]   choose the serial port
  open            open the selected port
  close [PORT]    close the monitor
  baud [RATE]     change the baud rate ({', '.join(str(r) for r in list_baud_rates())})
  send [TEXT]     send a line of text
  status          show the status line
  help            show this help
  quit            close the session and exit"""


def parse_line(line: str) -> tuple[str, list[str]]:
    """Split a console line into a command word and at most one argument."""
    name, _, arg = line.strip().partition(" ")
    arg = arg.strip()
    return name.lower(), [arg] if arg else []


async def run_monitor(driver: SerialDriver, settings: MonitorSettings, port: str | None = None) -> None:
    host = ConsoleHost()
    context = FileDeviceContext(settings.context_path)

    async with SessionController(driver, host, context, settings) as session:
        if port:
            await session.select_port(port)
            await session.open()

        while True:
            click.echo(host.render_status())
            try:
                line = await asyncio.to_thread(
                    click.prompt, "serialmon", default="", show_default=False, prompt_suffix="> ",
                )
            except click.Abort:
                break

            name, args = parse_line(line)
            if not name or name == "status":
                continue
            if name in ("quit", "exit"):
                break
            if name == "help":
                click.echo(HELP_TEXT)
                continue

            command = COMMANDS.get(name)
            if command is None:
                click.echo(f"Unknown command: {name!r}. Type 'help' for the list of commands.")
                continue
            await session.dispatch(command, *args)
