"""API routes for the serial monitor session."""

from __future__ import annotations

from fastapi import APIRouter, Query, Request
from pydantic import BaseModel

from serialmon.host.headless import HeadlessHost
from serialmon.models import Command, PortRecord, SessionStatus
from serialmon.session.controller import SessionController
from serialmon.session.selector import sort_records

router = APIRouter(prefix="/api/serial", tags=["serial"])


class SendRequest(BaseModel):
    text: str


def _session(request: Request) -> SessionController:
    return request.app.state.session


def _status(request: Request) -> SessionStatus:
    session = _session(request)
    host: HeadlessHost = request.app.state.host
    return SessionStatus(
        port=session.identity.current_port,
        baud_rate=session.identity.current_baud_rate,
        state=session.state,
        indicators=session.status,
        notifications=host.drain_notifications(),
    )


@router.get("/ports")
async def list_ports(request: Request) -> list[PortRecord]:
    """Enumerate available serial ports, sorted by name."""
    records = await _session(request).selector.list()
    return sort_records(records)


@router.get("/status")
async def get_status(request: Request) -> SessionStatus:
    """Current session status and notifications raised since the last call."""
    return _status(request)


@router.post("/select")
async def select_port(request: Request, port: str = Query(..., description="Serial port name")) -> SessionStatus:
    """Select the session's serial port."""
    await _session(request).select_port(port)
    return _status(request)


@router.post("/open")
async def open_port(request: Request) -> SessionStatus:
    """Open the selected serial port."""
    await _session(request).open()
    return _status(request)


@router.post("/close")
async def close_port(request: Request, port: str | None = Query(None, description="Only close if this port is selected")) -> SessionStatus:
    """Close the serial monitor."""
    await _session(request).dispatch(Command.CLOSE, *([port] if port else []))
    return _status(request)


@router.post("/baud")
async def change_baud_rate(request: Request, rate: str = Query(..., description="New baud rate")) -> SessionStatus:
    """Change the baud rate of the session."""
    await _session(request).change_baud_rate(rate)
    return _status(request)


@router.post("/send")
async def send_message(request: Request, body: SendRequest) -> SessionStatus:
    """Send a line of text to the open port."""
    await _session(request).send_message(body.text)
    return _status(request)


@router.get("/output")
async def read_output(request: Request) -> dict:
    """Return and clear device output received since the last call."""
    host: HeadlessHost = request.app.state.host
    return {"output": host.drain_output()}
