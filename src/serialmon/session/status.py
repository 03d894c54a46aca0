"""Session identity and the status projection derived from it."""

from __future__ import annotations

from dataclasses import dataclass

from serialmon.models import (
    DEFAULT_BAUD_RATE,
    PORT_PLACEHOLDER,
    Command,
    ConnectionState,
    IndicatorState,
    StatusSnapshot,
)


@dataclass
class SessionIdentity:
    """Selected port and baud rate for the lifetime of a session."""

    current_port: str | None = None
    current_baud_rate: int = DEFAULT_BAUD_RATE


def project_status(identity: SessionIdentity, state: ConnectionState) -> StatusSnapshot:
    """Compute the three status indicators. Pure and idempotent."""
    is_open = state is ConnectionState.HANDLE_BOUND_OPEN

    port = IndicatorState(
        text=identity.current_port or PORT_PLACEHOLDER,
        tooltip="Select Serial Port",
        command=Command.SELECT_PORT,
    )
    if is_open:
        open_ = IndicatorState(text="Close", tooltip="Close Serial Monitor", command=Command.CLOSE)
    else:
        open_ = IndicatorState(text="Open", tooltip="Open Serial Monitor", command=Command.OPEN)
    baud_rate = IndicatorState(
        text=str(identity.current_baud_rate),
        tooltip="Baud Rate",
        command=Command.CHANGE_BAUD_RATE,
        visible=is_open,
    )
    return StatusSnapshot(port=port, open=open_, baud_rate=baud_rate)
