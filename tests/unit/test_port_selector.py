"""Unit tests for port listing, ordering and commit."""

from __future__ import annotations

import asyncio

import pytest

from serialmon.context import MemoryDeviceContext
from serialmon.exceptions import InvalidInputError
from serialmon.models import PortRecord
from serialmon.session.selector import NO_PORT_AVAILABLE, PortSelector, sort_records
from serialmon.session.status import SessionIdentity


class UppercaseContext(MemoryDeviceContext):
    """Context that normalizes port names on write."""

    @property
    def port(self) -> str | None:
        return self._port

    @port.setter
    def port(self, value: str | None) -> None:
        self._port = value.upper() if value else None


@pytest.fixture
def identity() -> SessionIdentity:
    return SessionIdentity()


@pytest.fixture
def selector(driver, host, context, identity) -> PortSelector:
    return PortSelector(driver, host, context, identity)


class TestSortRecords:
    def test_sorted_by_label(self, port_records):
        labels = [r.label for r in sort_records(port_records)]
        assert labels == ["/dev/ttyUSB0", "COM1", "COM3"]

    def test_case_sensitive_order(self):
        records = [PortRecord(identifier="com2"), PortRecord(identifier="COM9")]
        assert [r.label for r in sort_records(records)] == ["COM9", "com2"]

    def test_stable_for_equal_labels(self):
        a = PortRecord(identifier="COM1", manufacturer="first")
        b = PortRecord(identifier="COM1", manufacturer="second")
        assert [r.manufacturer for r in sort_records([a, b])] == ["first", "second"]
        assert [r.manufacturer for r in sort_records([b, a])] == ["second", "first"]

    def test_same_input_same_order(self, port_records):
        assert sort_records(port_records) == sort_records(list(port_records))


class TestList:
    def test_list_is_fresh_each_call(self, selector, driver):
        first = asyncio.run(selector.list())
        driver.records = driver.records[:1]
        second = asyncio.run(selector.list())

        assert len(first) == 3
        assert len(second) == 1

    def test_empty_list_reports_no_device(self, selector, driver, host):
        driver.records = []

        assert asyncio.run(selector.list()) == []
        assert host.last.message == NO_PORT_AVAILABLE


class TestSelect:
    def test_choice_is_presented_sorted(self, selector, host):
        asyncio.run(selector.select())
        assert host.choices_shown == [["/dev/ttyUSB0", "COM1", "COM3"]]

    def test_commit_writes_context_and_identity(self, selector, host, context, identity):
        host.choice_answers.append("COM1")

        assert asyncio.run(selector.select()) is True
        assert context.port == "COM1"
        assert identity.current_port == "COM1"

    def test_declined_choice_changes_nothing(self, selector, context, identity):
        assert asyncio.run(selector.select()) is False
        assert context.port == "COM3"
        assert identity.current_port is None

    def test_identity_reads_back_normalized_context(self, driver, host, identity):
        context = UppercaseContext()
        selector = PortSelector(driver, host, context, identity)

        selector.commit("com7")

        assert identity.current_port == "COM7"

    def test_commit_triggers_callback(self, driver, host, context, identity):
        calls = []
        selector = PortSelector(driver, host, context, identity, on_commit=lambda: calls.append(identity.current_port))

        selector.commit("COM1")

        assert calls == ["COM1"]

    def test_explicit_label_skips_picker(self, selector, host, identity):
        assert asyncio.run(selector.select("/dev/ttyUSB0")) is True
        assert host.choices_shown == []
        assert identity.current_port == "/dev/ttyUSB0"

    def test_explicit_unknown_label_raises(self, selector, identity):
        with pytest.raises(InvalidInputError, match="COM42"):
            asyncio.run(selector.select("COM42"))
        assert identity.current_port is None
