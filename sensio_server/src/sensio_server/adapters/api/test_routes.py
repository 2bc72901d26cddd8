from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient
from sensio_core.application.cache import ReadingCache
from sensio_core.application.dispatch import ToolDispatcher
from sensio_core.application.query_readings import QueryContext
from sensio_core.domain.models import format_timestamp

from sensio_server.adapters.access.allowlist import AllowlistDirectory
from sensio_server.adapters.api.main import create_app
from sensio_server.utils.factories import RawSensorDataFactory, SensioApiRecordFactory


class StubSource:
    def __init__(self, records):
        self.records = records

    def fetch(self, device_serials, start=None, end=None):
        return [r for r in self.records if r.device_serial in device_serials]


def make_client(records=(), allowed=("SA1", "SA2")):
    ctx = QueryContext(
        source=StubSource(list(records)),
        directory=AllowlistDirectory(allowed),
        cache=ReadingCache(latest_ttl=15, history_ttl=300),
    )
    return TestClient(create_app(ToolDispatcher(ctx, caller_id="local")))


def test_ping_and_tool_list():
    client = make_client()
    assert client.get("/ping").json() == {"status": "ok"}
    assert "sensio_get_latest" in client.get("/tools").json()["tools"]


def test_list_device_serials_over_http():
    response = make_client().post("/tools/sensio_list_device_serials", json={"arguments": {}})
    assert response.status_code == 200
    assert response.json()["devices"] == [
        {"device_serial": "SA1", "name": "SA1"},
        {"device_serial": "SA2", "name": "SA2"},
    ]


def test_latest_over_http():
    record = SensioApiRecordFactory(
        device_serial="SA1",
        sensor_data=RawSensorDataFactory(sensor_date_time="2025-03-13T10:00:00Z", co2=812.0),
    )
    response = make_client([record]).post(
        "/tools/sensio_get_latest", json={"arguments": {"device_serials": ["SA1"]}}
    )
    assert response.status_code == 200
    (reading,) = response.json()["readings"]
    assert reading["device_serial"] == "SA1"
    assert reading["sensor"]["co2_ppm"] == 812.0
    assert reading["timestamp"] == "2025-03-13T10:00:00.000Z"


def test_denied_device_is_bad_request():
    response = make_client().post(
        "/tools/sensio_get_latest", json={"arguments": {"device_serials": ["SA9"]}}
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Access denied to device serials: SA9"}


def test_window_too_wide_is_bad_request():
    end = datetime(2025, 3, 13, tzinfo=timezone.utc)
    arguments = {
        "device_serials": ["SA1"],
        "start": format_timestamp(end - timedelta(days=31)),
        "end": format_timestamp(end),
    }
    response = make_client().post("/tools/sensio_get_history", json={"arguments": arguments})
    assert response.status_code == 400
    assert response.json() == {"error": "Time window exceeds maximum of 30 days"}


def test_unknown_tool_is_not_found():
    response = make_client().post("/tools/sensio_nope", json={"arguments": {}})
    assert response.status_code == 404
    assert response.json() == {"error": "Unknown tool: sensio_nope"}
