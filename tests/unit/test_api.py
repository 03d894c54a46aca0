"""Unit tests for the HTTP API routes."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from serialmon.api.app import create_app


@pytest.fixture
def client(driver, settings, context):
    app = create_app(driver=driver, settings=settings, context=context)
    with TestClient(app) as client:
        yield client


class TestSessionRoutes:
    def test_list_ports_sorted(self, client):
        resp = client.get("/api/serial/ports")
        assert resp.status_code == 200
        assert [p["identifier"] for p in resp.json()] == ["/dev/ttyUSB0", "COM1", "COM3"]

    def test_initial_status(self, client):
        body = client.get("/api/serial/status").json()
        assert body["port"] == "COM3"
        assert body["baud_rate"] == 9600
        assert body["state"] == "no_handle"
        assert body["indicators"]["open"]["command"] == "serialmon.openSerialMonitor"
        assert body["indicators"]["baud_rate"]["visible"] is False

    def test_open_send_close(self, client, driver):
        body = client.post("/api/serial/open").json()
        assert body["state"] == "handle_bound_open"
        assert body["indicators"]["open"]["text"] == "Close"

        body = client.post("/api/serial/send", json={"text": "hi"}).json()
        assert body["notifications"] == []
        assert driver.created[0].writes == [b"hi\r\n"]

        body = client.post("/api/serial/close").json()
        assert body["state"] == "handle_bound_closed"

    def test_close_before_open_reports_warning(self, client):
        body = client.post("/api/serial/close").json()
        assert body["notifications"][0]["kind"] == "warning"
        assert body["notifications"][0]["message"] == "Serial Monitor has not been started."
        assert "error" not in body["notifications"][0]

    def test_close_failure_reports_warning(self, client, driver):
        client.post("/api/serial/open")
        driver.fail_stop = True

        resp = client.post("/api/serial/close")

        assert resp.status_code == 200
        assert resp.json()["notifications"][0]["detail"] == "Device busy"

    def test_invalid_baud_rate(self, client):
        client.post("/api/serial/open")
        body = client.post("/api/serial/baud", params={"rate": "abc"}).json()
        assert body["baud_rate"] == 9600
        assert body["notifications"][0]["message"] == "Invalid baud rate, keep baud rate unchanged."

    def test_change_baud_rate(self, client):
        client.post("/api/serial/open")
        body = client.post("/api/serial/baud", params={"rate": "19200"}).json()
        assert body["baud_rate"] == 19200
        assert body["indicators"]["baud_rate"]["text"] == "19200"

    def test_select_port(self, client, context):
        body = client.post("/api/serial/select", params={"port": "COM1"}).json()
        assert body["port"] == "COM1"
        assert context.port == "COM1"

    def test_output_is_drained(self, client, driver):
        client.post("/api/serial/open")
        driver.created[0].emit("line 1\n")
        driver.created[0].emit("line 2\n")

        assert client.get("/api/serial/output").json() == {"output": "line 1\nline 2\n"}
        assert client.get("/api/serial/output").json() == {"output": ""}

    def test_notifications_are_drained(self, client):
        client.post("/api/serial/send", json={"text": "hi"})
        assert client.get("/api/serial/status").json()["notifications"] == []


class TestLifespan:
    def test_shutdown_stops_open_connection(self, driver, settings, context):
        app = create_app(driver=driver, settings=settings, context=context)
        with TestClient(app) as client:
            client.post("/api/serial/open")

        assert driver.created[0].stop_calls == 1
        assert driver.created[0].is_active is False
