import json
import logging

import httpx
import pytest
from sensio_core.domain.errors import UpstreamError

from sensio_server.adapters.supabase.directory import SupabaseDeviceDirectory
from sensio_server.adapters.supabase.proxy import SupabaseProxySource
from sensio_server.utils.factories import ProxyDeviceRecordFactory, as_json

BASE_URL = "https://project.supabase.test/"


def mock_client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


# ───────── proxy source ─────────
def test_proxy_fetch_unwraps_devices_list():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"devices": [as_json(ProxyDeviceRecordFactory(device_serial="SA7"))]})

    source = SupabaseProxySource(base_url=BASE_URL, client=mock_client(handler))
    records = source.fetch(["SA7"])

    assert seen["url"] == "https://project.supabase.test/functions/v1/fetch-sensio-air-data"
    assert seen["body"] == {"deviceSerials": ["SA7"]}
    assert records[0].device_serial == "SA7"
    assert records[0].sensor.co2 == 700


def test_proxy_error_status():
    source = SupabaseProxySource(base_url=BASE_URL, client=mock_client(lambda r: httpx.Response(500)))
    with pytest.raises(UpstreamError, match="Supabase function request failed: 500"):
        source.fetch(["SA7"])


def test_proxy_missing_devices_key():
    source = SupabaseProxySource(base_url=BASE_URL, client=mock_client(lambda r: httpx.Response(200, json={})))
    with pytest.raises(UpstreamError, match="unexpected payload"):
        source.fetch(["SA7"])


# ───────── directory ─────────
def test_directory_queries_user_devices_with_service_key():
    seen = {}

    def handler(request):
        seen["params"] = dict(request.url.params)
        seen["apikey"] = request.headers["apikey"]
        return httpx.Response(
            200,
            json=[
                {"device_serial": "SA1", "device_name": "Bedroom"},
                {"device_serial": "SA2", "device_name": None},
            ],
        )

    directory = SupabaseDeviceDirectory(base_url=BASE_URL, service_key="svc", client=mock_client(handler))
    devices = directory.list_devices("user-1")

    assert seen["params"] == {"user_id": "eq.user-1", "select": "device_serial,device_name"}
    assert seen["apikey"] == "svc"
    assert [(d.device_serial, d.name) for d in devices] == [("SA1", "Bedroom"), ("SA2", "SA2")]
    assert directory.denied_serials("user-1", ["SA1", "SA3"]) == ["SA3"]
    assert not directory.is_unrestricted()


def test_directory_failure_is_upstream_error():
    directory = SupabaseDeviceDirectory(
        base_url=BASE_URL, service_key="svc", client=mock_client(lambda r: httpx.Response(401))
    )
    with pytest.raises(UpstreamError, match="401"):
        directory.denied_serials("user-1", ["SA1"])


def test_directory_failures_are_logged(caplog):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    directory = SupabaseDeviceDirectory(base_url=BASE_URL, service_key="svc", client=mock_client(handler))
    with caplog.at_level(logging.ERROR, logger="sensio_server.adapters.supabase.directory"):
        with pytest.raises(UpstreamError, match="unreachable"):
            directory.list_devices("user-1")
    assert "Supabase unreachable" in caplog.text
