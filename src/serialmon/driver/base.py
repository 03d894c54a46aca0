"""Abstract serial driver contract.

A driver enumerates ports and creates connections. A connection is the
handle a session owns: bound to one port and one baud rate at a time,
opened and stopped any number of times, and rebound in place when the
selected port changes. All I/O methods are coroutines; implementations
raise :class:`~serialmon.exceptions.DriverError` when the device rejects
an operation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

from serialmon.models import PortRecord

OutputSink = Callable[[str], None]


class SerialConnection(ABC):
    """A driver-level connection bound to a port and baud rate."""

    def __init__(self, port: str | None, baud_rate: int, sink: OutputSink) -> None:
        self._port = port
        self._baud_rate = baud_rate
        self._sink = sink

    @property
    def current_port(self) -> str | None:
        return self._port

    @property
    def baud_rate(self) -> int:
        return self._baud_rate

    @property
    @abstractmethod
    def is_active(self) -> bool:
        """True while the port is open and incoming data is streamed to the sink."""

    @abstractmethod
    async def open(self) -> None:
        """Open the bound port and start streaming incoming data."""

    @abstractmethod
    async def stop(self) -> None:
        """Stop streaming and close the port. A no-op when not active."""

    @abstractmethod
    async def change_port(self, port: str | None) -> None:
        """Rebind to another port, stopping first if currently active."""

    @abstractmethod
    async def change_baud_rate(self, baud_rate: int) -> None:
        """Apply a new baud rate, immediately if the port is open."""

    @abstractmethod
    async def write(self, data: bytes) -> None:
        """Write bytes to the open port."""


class SerialDriver(ABC):
    """Factory for connections plus port enumeration."""

    @abstractmethod
    def enumerate(self) -> list[PortRecord]:
        """List available ports. No ordering guarantee."""

    @abstractmethod
    def create_connection(self, port: str | None, baud_rate: int, sink: OutputSink) -> SerialConnection:
        """Create an unopened connection bound to ``port`` at ``baud_rate``."""
