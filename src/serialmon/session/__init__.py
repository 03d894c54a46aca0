"""Serial session: port selection, state machine and status projection."""

from serialmon.session.controller import SessionController, parse_baud_rate
from serialmon.session.selector import PortSelector, sort_records
from serialmon.session.status import SessionIdentity, project_status

__all__ = [
    "PortSelector",
    "SessionController",
    "SessionIdentity",
    "parse_baud_rate",
    "project_status",
    "sort_records",
]
