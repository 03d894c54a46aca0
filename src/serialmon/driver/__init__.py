"""Serial driver contract and implementations."""

from serialmon.driver.base import OutputSink, SerialConnection, SerialDriver
from serialmon.driver.pyserial_driver import PySerialConnection, PySerialDriver

__all__ = [
    "OutputSink",
    "PySerialConnection",
    "PySerialDriver",
    "SerialConnection",
    "SerialDriver",
]
