"""Interactive terminal host built on click."""

from __future__ import annotations

import asyncio
from typing import Callable, Sequence, TypeVar

import click

from serialmon.host.base import HostSurface
from serialmon.models import Indicator, IndicatorState, Notification, NotifyKind, SERIAL_MONITOR

T = TypeVar("T")

_NOTIFY_COLORS = {
    NotifyKind.INFO: "cyan",
    NotifyKind.WARNING: "yellow",
}


class ConsoleHost(HostSurface):
    """Renders pickers as numbered lists and indicators as a status line."""

    def __init__(self) -> None:
        self.indicators: dict[Indicator, IndicatorState] = {}

    async def show_choice(
        self,
        items: Sequence[T],
        label_of: Callable[[T], str] = str,
        description_of: Callable[[T], str] | None = None,
    ) -> T | None:
        if not items:
            return None
        for i, item in enumerate(items, start=1):
            line = f"  [{i}] {label_of(item)}"
            description = description_of(item) if description_of else ""
            if description:
                line += f"  ({description})"
            click.echo(line)

        answer = await asyncio.to_thread(
            click.prompt, "Choose (blank to cancel)", default="", show_default=False,
        )
        answer = answer.strip()
        if not answer:
            return None
        if not answer.isdigit() or not 1 <= int(answer) <= len(items):
            click.echo(f"Invalid choice: {answer!r}")
            return None
        return items[int(answer) - 1]

    async def show_prompt(self, prompt: str = "") -> str | None:
        answer = await asyncio.to_thread(
            click.prompt, prompt or "Message", default="", show_default=False,
        )
        return answer or None

    def update_indicator(self, indicator: Indicator, state: IndicatorState) -> None:
        self.indicators[indicator] = state

    def render_status(self) -> str:
        parts = [
            f"[{state.text}]"
            for indicator in Indicator
            if (state := self.indicators.get(indicator)) is not None and state.visible
        ]
        return " ".join(parts)

    def write_output(self, text: str) -> None:
        click.echo(text, nl=False)

    def notify(self, notification: Notification) -> None:
        message = f"{SERIAL_MONITOR}: {notification.message}"
        if notification.detail and notification.detail not in notification.message:
            message += f" ({notification.detail})"
        click.secho(message, fg=_NOTIFY_COLORS.get(notification.kind), err=True)
