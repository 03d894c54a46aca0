"""Serial driver backed by pyserial.

Blocking pyserial calls run in worker threads via ``asyncio.to_thread``.
Each open connection owns a daemon reader thread that forwards incoming
bytes to the output sink until the connection is stopped.
"""

from __future__ import annotations

import asyncio
import threading

import serial
from serial.tools.list_ports import comports

from serialmon.driver.base import OutputSink, SerialConnection, SerialDriver
from serialmon.exceptions import DriverError
from serialmon.models import PortRecord
from serialmon.utils.logging import get_logger

logger = get_logger(__name__)

_READER_JOIN_TIMEOUT = 2.0


def _hex_id(value: int | None) -> str:
    return f"{value:04x}" if value is not None else ""


class PySerialConnection(SerialConnection):
    """Connection to a local serial port through ``serial.Serial``."""

    def __init__(
        self,
        port: str | None,
        baud_rate: int,
        sink: OutputSink,
        *,
        encoding: str = "utf-8",
        read_timeout: float = 0.1,
        write_timeout: float = 1.0,
    ) -> None:
        super().__init__(port, baud_rate, sink)
        self._encoding = encoding
        self._read_timeout = read_timeout
        self._write_timeout = write_timeout
        self._serial: serial.Serial | None = None
        self._reader: threading.Thread | None = None
        self._stop_event = threading.Event()

    @property
    def is_active(self) -> bool:
        return self._serial is not None and self._serial.is_open

    async def open(self) -> None:
        if self.is_active:
            return
        if not self._port:
            raise DriverError("No serial port selected", detail="port is empty")
        await asyncio.to_thread(self._open_blocking)
        logger.info("serial_port_opened", port=self._port, baud_rate=self._baud_rate)

    def _open_blocking(self) -> None:
        try:
            self._serial = serial.Serial(
                port=self._port,
                baudrate=self._baud_rate,
                timeout=self._read_timeout,
                write_timeout=self._write_timeout,
            )
        except (serial.SerialException, OSError, ValueError, OverflowError) as exc:
            self._serial = None
            raise DriverError(f"Failed to open {self._port}", detail=str(exc)) from exc

        self._stop_event.clear()
        self._reader = threading.Thread(
            target=self._read_loop,
            name=f"serialmon-reader-{self._port}",
            daemon=True,
        )
        self._reader.start()

    async def stop(self) -> None:
        if self._serial is None:
            return
        await asyncio.to_thread(self._stop_blocking)
        logger.info("serial_port_closed", port=self._port)

    def _stop_blocking(self) -> None:
        self._stop_event.set()
        if self._reader is not None:
            self._reader.join(timeout=_READER_JOIN_TIMEOUT)
            if self._reader.is_alive():
                logger.warning("serial_reader_still_running", port=self._port)
            self._reader = None
        ser, self._serial = self._serial, None
        try:
            ser.close()
        except (serial.SerialException, OSError) as exc:
            raise DriverError(f"Failed to close {self._port}", detail=str(exc)) from exc

    async def change_port(self, port: str | None) -> None:
        if port == self._port:
            return
        if self.is_active:
            await self.stop()
        logger.info("serial_port_rebound", old_port=self._port, new_port=port)
        self._port = port

    async def change_baud_rate(self, baud_rate: int) -> None:
        if baud_rate <= 0:
            raise DriverError(f"Invalid baud rate {baud_rate}", detail="baud rate must be positive")
        if self.is_active:
            await asyncio.to_thread(self._apply_baud_rate, baud_rate)
        self._baud_rate = baud_rate
        logger.info("serial_baud_rate_changed", port=self._port, baud_rate=baud_rate)

    def _apply_baud_rate(self, baud_rate: int) -> None:
        ser = self._serial
        try:
            ser.baudrate = baud_rate
        except (serial.SerialException, OSError, ValueError, OverflowError) as exc:
            # pyserial keeps the rejected value; put the previous one back.
            try:
                ser.baudrate = self._baud_rate
            except (serial.SerialException, OSError, ValueError, OverflowError):
                logger.warning("serial_baud_rate_restore_failed", port=self._port, exc_info=True)
            raise DriverError(f"Failed to change baud rate to {baud_rate}", detail=str(exc)) from exc

    async def write(self, data: bytes) -> None:
        if not self.is_active:
            raise DriverError(f"Serial port {self._port} is not open")
        await asyncio.to_thread(self._write_blocking, data)

    def _write_blocking(self, data: bytes) -> None:
        try:
            self._serial.write(data)
            self._serial.flush()
        except (serial.SerialException, OSError) as exc:
            raise DriverError(f"Failed to write to {self._port}", detail=str(exc)) from exc

    def _read_loop(self) -> None:
        ser = self._serial
        while not self._stop_event.is_set():
            try:
                chunk = ser.read(ser.in_waiting or 1)
            except (serial.SerialException, OSError, TypeError):
                if not self._stop_event.is_set():
                    logger.warning("serial_read_failed", port=self._port, exc_info=True)
                    self._close_after_read_failure(ser)
                break
            if not chunk:
                continue
            try:
                self._sink(chunk.decode(self._encoding, errors="replace"))
            except Exception:
                logger.warning("serial_sink_failed", port=self._port, exc_info=True)

    def _close_after_read_failure(self, ser: serial.Serial) -> None:
        # The port is unusable once reads fail; closing it makes is_active report False.
        try:
            ser.close()
        except (serial.SerialException, OSError):
            logger.warning("serial_close_failed", port=self._port, exc_info=True)


class PySerialDriver(SerialDriver):
    """Driver for local serial ports enumerated by ``serial.tools.list_ports``."""

    def __init__(self, *, encoding: str = "utf-8", read_timeout: float = 0.1, write_timeout: float = 1.0) -> None:
        self._encoding = encoding
        self._read_timeout = read_timeout
        self._write_timeout = write_timeout

    def enumerate(self) -> list[PortRecord]:
        return [
            PortRecord(
                identifier=p.device,
                manufacturer=p.manufacturer or "",
                vendor_id=_hex_id(p.vid),
                product_id=_hex_id(p.pid),
            )
            for p in comports()
        ]

    def create_connection(self, port: str | None, baud_rate: int, sink: OutputSink) -> PySerialConnection:
        return PySerialConnection(
            port,
            baud_rate,
            sink,
            encoding=self._encoding,
            read_timeout=self._read_timeout,
            write_timeout=self._write_timeout,
        )
