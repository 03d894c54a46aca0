"""Host surfaces: where pickers, prompts, indicators and output are rendered."""

from serialmon.host.base import HostSurface
from serialmon.host.console import ConsoleHost
from serialmon.host.headless import HeadlessHost

__all__ = [
    "ConsoleHost",
    "HeadlessHost",
    "HostSurface",
]
