"""serialmon - serial port monitor sessions.

Select a port, open and close a monitoring session, change the baud rate
mid-session and send messages, with status indicators kept in sync.
"""

from serialmon.models import Command, ConnectionState, PortRecord, StatusSnapshot, list_baud_rates
from serialmon.session import PortSelector, SessionController, SessionIdentity, project_status

__all__ = [
    "Command",
    "ConnectionState",
    "PortRecord",
    "PortSelector",
    "SessionController",
    "SessionIdentity",
    "StatusSnapshot",
    "list_baud_rates",
    "project_status",
]

__version__ = "0.1.0"
