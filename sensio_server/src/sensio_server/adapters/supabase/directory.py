import logging
from typing import List, Optional, Sequence

import httpx
from sensio_core.domain.errors import UpstreamError
from sensio_core.domain.models import DeviceInfo
from sensio_core.domain.ports import DeviceDirectory

from sensio_server.adapters.sensio.client import read_json, status_error
from sensio_server.adapters.supabase.proxy import service_headers

logger = logging.getLogger(__name__)


class SupabaseDeviceDirectory(DeviceDirectory):
    """Device ownership read from the ``user_devices`` table over PostgREST."""

    def __init__(
        self,
        *,
        base_url: str,
        service_key: str,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.service_key = service_key
        self._client = client or httpx.Client(timeout=timeout)

    def list_devices(self, caller_id: str) -> List[DeviceInfo]:
        try:
            response = self._client.get(
                f"{self.base_url}/rest/v1/user_devices",
                params={"user_id": f"eq.{caller_id}", "select": "device_serial,device_name"},
                headers=service_headers(self.service_key),
            )
        except httpx.HTTPError as exc:
            logger.error("Supabase unreachable: %s", exc)
            raise UpstreamError(f"Supabase unreachable: {exc}") from exc

        if response.is_error:
            logger.error("Supabase returned %s", response.status_code)
            raise status_error("Supabase", response)

        rows = read_json(response, "Supabase")
        return [
            DeviceInfo(
                device_serial=row["device_serial"],
                name=row.get("device_name") or row["device_serial"],
                user_id=caller_id,
            )
            for row in rows
        ]

    def denied_serials(self, caller_id: str, device_serials: Sequence[str]) -> List[str]:
        owned = {d.device_serial for d in self.list_devices(caller_id)}
        return [s for s in device_serials if s not in owned]

    def is_unrestricted(self) -> bool:
        return False

    def close(self) -> None:
        self._client.close()
