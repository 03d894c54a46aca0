"""Device context: the last-selected port, persisted across sessions."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, ValidationError

from serialmon.exceptions import ContextError
from serialmon.utils.logging import get_logger

logger = get_logger(__name__)


class DeviceContext(Protocol):
    """Holds the last-selected port. Writes may normalize the value."""

    @property
    def port(self) -> str | None: ...

    @port.setter
    def port(self, value: str | None) -> None: ...


def _normalize(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


class MemoryDeviceContext:
    """Device context kept in memory only."""

    def __init__(self, port: str | None = None) -> None:
        self._port = _normalize(port)

    @property
    def port(self) -> str | None:
        return self._port

    @port.setter
    def port(self, value: str | None) -> None:
        self._port = _normalize(value)


class _ContextData(BaseModel):
    port: str | None = None


class FileDeviceContext:
    """Device context backed by a small JSON file.

    The file is re-read on every access so that changes made by other
    processes are picked up. A missing or unreadable file means no port.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> _ContextData:
        try:
            return _ContextData.model_validate_json(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return _ContextData()
        except (OSError, ValidationError):
            logger.warning("device_context_unreadable", path=str(self._path), exc_info=True)
            return _ContextData()

    @property
    def port(self) -> str | None:
        return self._read().port

    @port.setter
    def port(self, value: str | None) -> None:
        data = self._read()
        data.port = _normalize(value)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(data.model_dump_json(indent=2), encoding="utf-8")
        except OSError as exc:
            raise ContextError(f"Failed to save device context to {self._path}", detail=str(exc)) from exc
        logger.debug("device_context_written", path=str(self._path), port=data.port)
