"""Host UI surface contract used by the session."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Sequence, TypeVar

from serialmon.models import Indicator, IndicatorState, Notification, NotifyKind

T = TypeVar("T")


class HostSurface(ABC):
    """Picker, prompt, status indicators, output sink and notifications."""

    @abstractmethod
    async def show_choice(
        self,
        items: Sequence[T],
        label_of: Callable[[T], str] = str,
        description_of: Callable[[T], str] | None = None,
    ) -> T | None:
        """Let the user pick one item. Returns None when declined."""

    @abstractmethod
    async def show_prompt(self, prompt: str = "") -> str | None:
        """Ask for one line of text. Returns None when declined."""

    @abstractmethod
    def update_indicator(self, indicator: Indicator, state: IndicatorState) -> None:
        """Render the new state of a status indicator."""

    @abstractmethod
    def write_output(self, text: str) -> None:
        """Append text to the output sink. May be called from any thread."""

    @abstractmethod
    def notify(self, notification: Notification) -> None:
        """Show a transient message."""

    def info(self, message: str) -> None:
        self.notify(Notification(kind=NotifyKind.INFO, message=message))

    def warning(self, message: str, error: Exception | None = None) -> None:
        detail = getattr(error, "detail", None) or (str(error) if error is not None else None)
        self.notify(Notification(kind=NotifyKind.WARNING, message=message, detail=detail, error=error))
