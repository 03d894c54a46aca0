"""Non-interactive host that buffers everything for later retrieval."""

from __future__ import annotations

import threading
from collections import deque
from typing import Callable, Sequence, TypeVar

from serialmon.host.base import HostSurface
from serialmon.models import Indicator, IndicatorState, Notification

T = TypeVar("T")


class HeadlessHost(HostSurface):
    """Host for API use: pickers and prompts always decline."""

    def __init__(self, max_notifications: int = 50, max_output_chunks: int = 1000) -> None:
        self._lock = threading.Lock()
        self.indicators: dict[Indicator, IndicatorState] = {}
        self._notifications: deque[Notification] = deque(maxlen=max_notifications)
        self._output: deque[str] = deque(maxlen=max_output_chunks)

    async def show_choice(
        self,
        items: Sequence[T],
        label_of: Callable[[T], str] = str,
        description_of: Callable[[T], str] | None = None,
    ) -> T | None:
        return None

    async def show_prompt(self, prompt: str = "") -> str | None:
        return None

    def update_indicator(self, indicator: Indicator, state: IndicatorState) -> None:
        self.indicators[indicator] = state

    def write_output(self, text: str) -> None:
        with self._lock:
            self._output.append(text)

    def notify(self, notification: Notification) -> None:
        with self._lock:
            self._notifications.append(notification)

    @property
    def notifications(self) -> list[Notification]:
        with self._lock:
            return list(self._notifications)

    def drain_notifications(self) -> list[Notification]:
        with self._lock:
            items = list(self._notifications)
            self._notifications.clear()
        return items

    def drain_output(self) -> str:
        with self._lock:
            text = "".join(self._output)
            self._output.clear()
        return text
