"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from typing import Callable, Sequence

import pytest

from serialmon.config import MonitorSettings
from serialmon.context import MemoryDeviceContext
from serialmon.driver.base import OutputSink, SerialConnection, SerialDriver
from serialmon.exceptions import DriverError
from serialmon.host.base import HostSurface
from serialmon.models import Indicator, IndicatorState, Notification, PortRecord
from serialmon.session.controller import SessionController


class FakeConnection(SerialConnection):
    """In-memory connection that obeys the failure flags of its driver."""

    def __init__(self, port: str | None, baud_rate: int, sink: OutputSink, driver: FakeDriver) -> None:
        super().__init__(port, baud_rate, sink)
        self._driver = driver
        self._active = False
        self.open_calls = 0
        self.stop_calls = 0
        self.rebinds: list[str | None] = []
        self.writes: list[bytes] = []

    @property
    def is_active(self) -> bool:
        return self._active

    async def open(self) -> None:
        self.open_calls += 1
        if not self._port:
            raise DriverError("No serial port selected", detail="port is empty")
        if self._driver.fail_open:
            raise DriverError(f"Failed to open {self._port}", detail="Access denied")
        self._active = True

    async def stop(self) -> None:
        self.stop_calls += 1
        if self._driver.fail_stop:
            raise DriverError(f"Failed to close {self._port}", detail="Device busy")
        self._active = False

    async def change_port(self, port: str | None) -> None:
        self.rebinds.append(port)
        self._active = False
        self._port = port

    async def change_baud_rate(self, baud_rate: int) -> None:
        if self._driver.fail_baud:
            raise DriverError(f"Failed to change baud rate to {baud_rate}", detail="Unsupported rate")
        self._baud_rate = baud_rate

    async def write(self, data: bytes) -> None:
        if self._driver.fail_write:
            raise DriverError(f"Failed to write to {self._port}", detail="Write timeout")
        self.writes.append(data)

    def emit(self, text: str) -> None:
        self._sink(text)


class FakeDriver(SerialDriver):
    """Driver double with scripted ports and per-operation failure flags."""

    def __init__(self, records: list[PortRecord] | None = None) -> None:
        self.records = records if records is not None else []
        self.created: list[FakeConnection] = []
        self.fail_open = False
        self.fail_stop = False
        self.fail_baud = False
        self.fail_write = False

    def enumerate(self) -> list[PortRecord]:
        return list(self.records)

    def create_connection(self, port: str | None, baud_rate: int, sink: OutputSink) -> FakeConnection:
        conn = FakeConnection(port, baud_rate, sink, self)
        self.created.append(conn)
        return conn


class RecordingHost(HostSurface):
    """Host double that answers pickers from a script and records everything."""

    def __init__(self) -> None:
        self.choice_answers: list[str | None] = []
        self.prompt_answers: list[str | None] = []
        self.choices_shown: list[list[str]] = []
        self.indicators: dict[Indicator, IndicatorState] = {}
        self.indicator_updates = 0
        self.notifications: list[Notification] = []
        self.output: list[str] = []

    async def show_choice(
        self,
        items: Sequence,
        label_of: Callable = str,
        description_of: Callable | None = None,
    ):
        labels = [label_of(item) for item in items]
        self.choices_shown.append(labels)
        answer = self.choice_answers.pop(0) if self.choice_answers else None
        if answer is None:
            return None
        return items[labels.index(answer)]

    async def show_prompt(self, prompt: str = "") -> str | None:
        return self.prompt_answers.pop(0) if self.prompt_answers else None

    def update_indicator(self, indicator: Indicator, state: IndicatorState) -> None:
        self.indicators[indicator] = state
        self.indicator_updates += 1

    def write_output(self, text: str) -> None:
        self.output.append(text)

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    @property
    def last(self) -> Notification:
        return self.notifications[-1]


@pytest.fixture
def port_records() -> list[PortRecord]:
    """Ports in deliberately unsorted order."""
    return [
        PortRecord(identifier="COM3", manufacturer="FTDI", vendor_id="0403", product_id="6001"),
        PortRecord(identifier="COM1", manufacturer="(Standard port types)"),
        PortRecord(identifier="/dev/ttyUSB0", manufacturer="Silicon Labs", vendor_id="10c4", product_id="ea60"),
    ]


@pytest.fixture
def driver(port_records: list[PortRecord]) -> FakeDriver:
    return FakeDriver(port_records)


@pytest.fixture
def host() -> RecordingHost:
    return RecordingHost()


@pytest.fixture
def context() -> MemoryDeviceContext:
    return MemoryDeviceContext("COM3")


@pytest.fixture
def settings(tmp_path) -> MonitorSettings:
    return MonitorSettings(context_path=tmp_path / "context.json")


@pytest.fixture
def session(driver: FakeDriver, host: RecordingHost, context: MemoryDeviceContext, settings: MonitorSettings) -> SessionController:
    return SessionController(driver, host, context, settings)
