"""Serial session state machine.

The controller owns the session identity (selected port and baud rate) and
the single driver connection. The connection state is never stored; it is
derived from whether a connection exists, whether it is active, and
whether it is bound to the selected port:

    NO_HANDLE            no connection created yet
    HANDLE_BOUND_CLOSED  connection exists but is not streaming the selected port
    HANDLE_BOUND_OPEN    connection is active on the selected port

Operations are serialized through one asyncio lock. After every
transition the three status indicators are recomputed from scratch and
pushed to the host.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

from serialmon.config import MonitorSettings
from serialmon.context import DeviceContext
from serialmon.driver.base import SerialConnection, SerialDriver
from serialmon.exceptions import (
    DriverError,
    InvalidInputError,
    SerialMonError,
    SessionNotOpenError,
    SessionNotStartedError,
)
from serialmon.host.base import HostSurface
from serialmon.models import PORT_PLACEHOLDER, Command, ConnectionState, StatusSnapshot, list_baud_rates
from serialmon.session.selector import PortSelector
from serialmon.session.status import SessionIdentity, project_status
from serialmon.utils.logging import get_logger

logger = get_logger(__name__)

SEND_BEFORE_OPEN = "Please open a serial port before sending messages."
FAILED_SEND = "Failed to send message to serial port."
NOT_STARTED = "Serial Monitor has not been started."
INVALID_BAUD_RATE = "Invalid baud rate, keep baud rate unchanged."


def parse_baud_rate(candidate: str | int) -> int | None:
    """Parse a baud rate, returning None unless it is a positive integer."""
    try:
        rate = int(str(candidate).strip(), 10)
    except ValueError:
        return None
    return rate if rate > 0 else None


class SessionController:
    """Mediates select, open, close, baud-rate change and send for one session."""

    def __init__(
        self,
        driver: SerialDriver,
        host: HostSurface,
        context: DeviceContext,
        settings: MonitorSettings | None = None,
    ) -> None:
        self._driver = driver
        self._host = host
        self._settings = settings or MonitorSettings()
        self._identity = SessionIdentity(
            current_port=context.port,
            current_baud_rate=self._settings.default_baud_rate,
        )
        self._connection: SerialConnection | None = None
        self._lock = asyncio.Lock()
        self._selector = PortSelector(driver, host, context, self._identity, on_commit=self.refresh_status)
        self.refresh_status()

    @property
    def identity(self) -> SessionIdentity:
        return self._identity

    @property
    def connection(self) -> SerialConnection | None:
        return self._connection

    @property
    def selector(self) -> PortSelector:
        return self._selector

    @property
    def state(self) -> ConnectionState:
        conn = self._connection
        if conn is None:
            return ConnectionState.NO_HANDLE
        if conn.is_active and conn.current_port == self._identity.current_port:
            return ConnectionState.HANDLE_BOUND_OPEN
        return ConnectionState.HANDLE_BOUND_CLOSED

    @property
    def status(self) -> StatusSnapshot:
        return project_status(self._identity, self.state)

    def refresh_status(self) -> StatusSnapshot:
        """Recompute all indicators and push them to the host."""
        snapshot = self.status
        for indicator, state in snapshot.items():
            self._host.update_indicator(indicator, state)
        return snapshot

    # --- Operations ---

    async def select_port(self, label: str | None = None) -> None:
        """Pick a port (interactively unless ``label`` is given) and commit it."""
        async with self._lock:
            try:
                await self._selector.select(label)
            except SerialMonError as exc:
                logger.warning("serial_port_selection_failed", port=label, error=str(exc))
                self._host.warning(str(exc), exc)

    async def open(self) -> None:
        """Open the selected port, rebinding or creating the connection as needed."""
        async with self._lock:
            port = self._identity.current_port
            conn = self._connection
            try:
                if conn is not None:
                    if conn.current_port != port:
                        await conn.change_port(port)
                    elif conn.is_active:
                        logger.info("serial_monitor_already_open", port=port)
                        self._host.warning(f"Serial monitor is already opened for {port}")
                        return
                else:
                    conn = self._driver.create_connection(
                        port, self._identity.current_baud_rate, self._host.write_output,
                    )
                    self._connection = conn
                    logger.debug("serial_connection_created", port=port)
                await conn.open()
            except DriverError as exc:
                logger.warning("serial_open_failed", port=port, error=str(exc), detail=exc.detail)
                self._host.warning(
                    f"Failed to open serial port {port or PORT_PLACEHOLDER} due to error: {exc.detail or exc}", exc,
                )
                self.refresh_status()
                return

            logger.info("serial_monitor_opened", port=port, baud_rate=conn.baud_rate)
            self.refresh_status()

    async def close(self, target_port: str | None = None) -> None:
        """Stop the connection.

        A ``target_port`` other than the selected port is ignored. Driver
        stop failures propagate to the caller.

        Raises:
            DriverError: If the driver fails to stop the connection.
        """
        async with self._lock:
            conn = self._connection
            if conn is None:
                if not target_port:
                    exc = SessionNotStartedError(NOT_STARTED)
                    logger.warning("serial_close_before_start")
                    self._host.warning(str(exc), exc)
                return

            if target_port and target_port != self._identity.current_port:
                logger.debug("serial_close_ignored", target_port=target_port, port=self._identity.current_port)
                return

            await conn.stop()
            logger.info("serial_monitor_closed", port=conn.current_port)
            self.refresh_status()

    async def change_baud_rate(self, candidate: str | int) -> None:
        """Apply a new baud rate once the driver accepts it."""
        rate = parse_baud_rate(candidate)
        if rate is None:
            exc = InvalidInputError(INVALID_BAUD_RATE, detail=f"value: {candidate!r}")
            logger.warning("serial_baud_rate_invalid", value=str(candidate))
            self._host.warning(str(exc), exc)
            return

        async with self._lock:
            conn = self._connection
            if conn is None:
                exc = SessionNotStartedError(NOT_STARTED)
                logger.warning("serial_baud_rate_before_start", baud_rate=rate)
                self._host.warning(str(exc), exc)
                return

            try:
                await conn.change_baud_rate(rate)
            except DriverError as exc:
                logger.warning("serial_baud_rate_change_failed", baud_rate=rate, error=str(exc))
                self._host.warning(f"Failed to change baud rate to {rate}.", exc)
                return

            self._identity.current_baud_rate = rate
            logger.info("serial_baud_rate_updated", baud_rate=rate)
            self.refresh_status()

    async def send_message(self, text: str) -> None:
        """Write ``text`` plus the configured line ending to the open port."""
        async with self._lock:
            if self.state is not ConnectionState.HANDLE_BOUND_OPEN:
                self._warn_not_open()
                return

            try:
                data = (text + self._settings.line_ending).encode(self._settings.encoding)
            except UnicodeEncodeError as err:
                exc = InvalidInputError(FAILED_SEND, detail=str(err))
                logger.warning("serial_send_encode_failed", error=str(err))
                self._host.warning(str(exc), exc)
                return

            try:
                await self._connection.write(data)
            except DriverError as exc:
                logger.warning("serial_send_failed", port=self._identity.current_port, error=str(exc))
                self._host.warning(FAILED_SEND, exc)
                return
            logger.debug("serial_message_sent", port=self._identity.current_port, size=len(data))

    def _warn_not_open(self) -> None:
        exc = SessionNotOpenError(SEND_BEFORE_OPEN)
        logger.warning("serial_send_before_open")
        self._host.warning(str(exc), exc)

    # --- Interactive variants ---

    async def prompt_baud_rate(self) -> None:
        """Offer the standard baud rates and apply the chosen one."""
        chosen = await self._host.show_choice([str(rate) for rate in list_baud_rates()])
        if not chosen:
            logger.warning("serial_baud_rate_not_selected")
            return
        await self.change_baud_rate(chosen)

    async def prompt_message(self) -> None:
        """Ask for a line of text and send it. Refuses before the port is open."""
        if self.state is not ConnectionState.HANDLE_BOUND_OPEN:
            self._warn_not_open()
            return
        text = await self._host.show_prompt("Message")
        if text is None:
            logger.debug("serial_send_cancelled")
            return
        await self.send_message(text)

    async def dispatch(self, command: Command, *args: str) -> None:
        """Run a host command. No error escapes to the host."""
        handlers: dict[Command, Callable[..., Awaitable[None]]] = {
            Command.SELECT_PORT: self.select_port,
            Command.OPEN: self.open,
            Command.CLOSE: self.close,
            Command.CHANGE_BAUD_RATE: self.change_baud_rate if args else self.prompt_baud_rate,
            Command.SEND_MESSAGE: self.send_message if args else self.prompt_message,
        }
        try:
            await handlers[command](*args)
        except SerialMonError as exc:
            logger.warning("serial_command_failed", command=str(command), error=str(exc), detail=exc.detail)
            self._host.warning(str(exc), exc)

    # --- Lifecycle ---

    async def dispose(self) -> None:
        """Stop an active connection. Always completes."""
        async with self._lock:
            conn = self._connection
            if conn is None or not conn.is_active:
                return
            try:
                await conn.stop()
            except DriverError:
                logger.warning("serial_dispose_stop_failed", port=conn.current_port, exc_info=True)
            self.refresh_status()
            logger.info("serial_session_disposed", port=conn.current_port)

    async def __aenter__(self) -> SessionController:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.dispose()
