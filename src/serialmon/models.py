"""Pydantic models and enums shared by the session, hosts and API."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field
from pydantic.json_schema import SkipJsonSchema

SERIAL_MONITOR = "Serial Monitor"
DEFAULT_BAUD_RATE = 9600
PORT_PLACEHOLDER = "<Select Serial Port>"

_BAUD_RATES: tuple[int, ...] = (
    300, 1200, 2400, 4800, 9600, 19200, 38400, 57600, 74880, 115200, 230400, 250000,
)


def list_baud_rates() -> list[int]:
    """Standard baud rates offered to the user, in ascending order."""
    return list(_BAUD_RATES)


class Command(StrEnum):
    """Host commands that indicators can be bound to."""
    SELECT_PORT = "serialmon.selectSerialPort"
    OPEN = "serialmon.openSerialMonitor"
    CLOSE = "serialmon.closeSerialMonitor"
    CHANGE_BAUD_RATE = "serialmon.changeBaudRate"
    SEND_MESSAGE = "serialmon.sendMessageToSerialPort"


class ConnectionState(StrEnum):
    """Connection state derived from the handle and its active flag."""
    NO_HANDLE = "no_handle"
    HANDLE_BOUND_CLOSED = "handle_bound_closed"
    HANDLE_BOUND_OPEN = "handle_bound_open"


class Indicator(StrEnum):
    """The three status indicators kept in sync with the session."""
    PORT = "port"
    OPEN = "open"
    BAUD_RATE = "baud_rate"


class NotifyKind(StrEnum):
    INFO = "info"
    WARNING = "warning"


class PortRecord(BaseModel):
    """A serial port reported by the driver's enumerator."""

    identifier: str = Field(description="Port name, e.g. COM3 or /dev/ttyUSB0")
    manufacturer: str = ""
    vendor_id: str = ""
    product_id: str = ""

    @property
    def label(self) -> str:
        return self.identifier

    @property
    def description(self) -> str:
        return self.manufacturer


class IndicatorState(BaseModel):
    """Rendered state of one status indicator."""
    model_config = {"frozen": True}

    text: str
    tooltip: str = ""
    command: Command | None = None
    visible: bool = True


class StatusSnapshot(BaseModel):
    """All three indicators, as computed by the status projection."""
    model_config = {"frozen": True}

    port: IndicatorState
    open: IndicatorState
    baud_rate: IndicatorState

    def items(self) -> list[tuple[Indicator, IndicatorState]]:
        return [
            (Indicator.PORT, self.port),
            (Indicator.OPEN, self.open),
            (Indicator.BAUD_RATE, self.baud_rate),
        ]


class Notification(BaseModel):
    """A transient message shown to the user."""
    model_config = {"arbitrary_types_allowed": True}

    kind: NotifyKind
    message: str
    detail: str | None = None
    error: SkipJsonSchema[Exception | None] = Field(default=None, exclude=True)


class SessionStatus(BaseModel):
    """Session summary returned by the HTTP API."""

    port: str | None = None
    baud_rate: int = DEFAULT_BAUD_RATE
    state: ConnectionState = ConnectionState.NO_HANDLE
    indicators: StatusSnapshot
    notifications: list[Notification] = Field(default_factory=list)
