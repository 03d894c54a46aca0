"""Port selection: enumerate, pick, and commit to the device context."""

from __future__ import annotations

import asyncio
from typing import Callable

from serialmon.context import DeviceContext
from serialmon.driver.base import SerialDriver
from serialmon.exceptions import InvalidInputError
from serialmon.host.base import HostSurface
from serialmon.models import PortRecord
from serialmon.session.status import SessionIdentity
from serialmon.utils.logging import get_logger

logger = get_logger(__name__)

NO_PORT_AVAILABLE = "No serial port is available."


def sort_records(records: list[PortRecord]) -> list[PortRecord]:
    """Order records by label: case-sensitive, stable for equal labels."""
    return sorted(records, key=lambda r: r.label)


class PortSelector:
    """Chooses the session's port and writes it through the device context."""

    def __init__(
        self,
        driver: SerialDriver,
        host: HostSurface,
        context: DeviceContext,
        identity: SessionIdentity,
        on_commit: Callable[[], None] | None = None,
    ) -> None:
        self._driver = driver
        self._host = host
        self._context = context
        self._identity = identity
        self._on_commit = on_commit

    async def list(self) -> list[PortRecord]:
        """Enumerate ports afresh. Reports to the user when there are none."""
        records = await asyncio.to_thread(self._driver.enumerate)
        logger.debug("serial_ports_listed", count=len(records))
        if not records:
            self._host.info(NO_PORT_AVAILABLE)
        return records

    async def choose(self, records: list[PortRecord]) -> PortRecord | None:
        return await self._host.show_choice(
            sort_records(records),
            label_of=lambda r: r.label,
            description_of=lambda r: r.description,
        )

    def commit(self, label: str) -> None:
        """Persist the label, then adopt whatever the context now holds."""
        self._context.port = label
        self._identity.current_port = self._context.port
        logger.info("serial_port_selected", port=self._identity.current_port)
        if self._on_commit is not None:
            self._on_commit()

    async def select(self, label: str | None = None) -> bool:
        """Run list, choose and commit. Returns True if a port was committed.

        With an explicit ``label`` the picker is skipped, but the label must
        name one of the enumerated ports.

        Raises:
            InvalidInputError: If ``label`` is not among the available ports.
        """
        records = await self.list()
        if not records:
            return False

        if label is not None:
            if not any(r.label == label for r in records):
                raise InvalidInputError(f"Serial port {label} is not available.")
            self.commit(label)
            return True

        chosen = await self.choose(records)
        if chosen is None or not chosen.label:
            logger.debug("serial_port_selection_cancelled")
            return False
        self.commit(chosen.label)
        return True
