import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import httpx
from sensio_core.domain.errors import UpstreamError
from sensio_core.domain.models import format_timestamp
from sensio_core.domain.ports import IndoorDataSource
from sensio_core.domain.raw_records import ProxyDeviceRecord

from sensio_server.adapters.sensio.client import parse_records, read_json, status_error

logger = logging.getLogger(__name__)

FUNCTION_PATH = "/functions/v1/fetch-sensio-air-data"


def service_headers(service_key: str) -> Dict[str, str]:
    if not service_key:
        return {}
    return {"apikey": service_key, "Authorization": f"Bearer {service_key}"}


class SupabaseProxySource(IndoorDataSource):
    """Fetches readings through the database proxy edge function."""

    def __init__(
        self,
        *,
        base_url: str,
        service_key: str = "",
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ):
        self.url = f"{base_url.rstrip('/')}{FUNCTION_PATH}"
        self.service_key = service_key
        self._client = client or httpx.Client(timeout=timeout)

        logger.info("Initializing Supabase proxy source: url=%s", self.url)

    def fetch(
        self,
        device_serials: Sequence[str],
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[ProxyDeviceRecord]:
        body: Dict[str, Any] = {"deviceSerials": list(device_serials)}
        if start:
            body["startDate"] = format_timestamp(start)
        if end:
            body["endDate"] = format_timestamp(end)

        try:
            response = self._client.post(self.url, json=body, headers=service_headers(self.service_key))
        except httpx.HTTPError as exc:
            logger.error("Supabase function unreachable: %s", exc)
            raise UpstreamError(f"Supabase function unreachable: {exc}") from exc

        if response.is_error:
            logger.error("Supabase function returned %s", response.status_code)
            raise status_error("Supabase function", response)

        payload = read_json(response, "Supabase function")
        devices = payload.get("devices") if isinstance(payload, dict) else None
        return parse_records(devices, ProxyDeviceRecord, "Supabase function")

    def close(self) -> None:
        self._client.close()
