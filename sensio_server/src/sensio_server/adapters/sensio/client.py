import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import httpx
from pydantic import ValidationError
from sensio_core.domain.errors import UpstreamError
from sensio_core.domain.models import format_timestamp
from sensio_core.domain.ports import IndoorDataSource
from sensio_core.domain.raw_records import SensioApiRecord

logger = logging.getLogger(__name__)


def parse_records(payload: Any, model, source: str) -> List[Any]:
    """Validate a JSON array of upstream records, failing the whole batch on a bad entry."""
    if not isinstance(payload, list):
        raise UpstreamError(f"{source} returned an unexpected payload")
    try:
        return [model.model_validate(item) for item in payload]
    except ValidationError as exc:
        raise UpstreamError(f"{source} returned a malformed record: {exc.error_count()} errors") from exc


def read_json(response: httpx.Response, source: str) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise UpstreamError(f"{source} returned invalid JSON") from exc


def status_error(source: str, response: httpx.Response) -> UpstreamError:
    return UpstreamError(
        f"{source} request failed: {response.status_code} {response.reason_phrase}",
        status=response.status_code,
    )


class SensioApiClient(IndoorDataSource):
    """Fetches indoor readings from the vendor ``indoor_data`` endpoint."""

    def __init__(
        self,
        *,
        api_url: str,
        api_key: str,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self._client = client or httpx.Client(timeout=timeout)

        logger.info("Initializing Sensio API client: url=%s", api_url)

    def fetch(
        self,
        device_serials: Sequence[str],
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[SensioApiRecord]:
        body: Dict[str, Any] = {"device_serials": list(device_serials), "format": "json2"}
        if start:
            body["start"] = format_timestamp(start)
        if end:
            body["end"] = format_timestamp(end)

        logger.debug("POST %s for %s", self.api_url, ", ".join(device_serials))
        try:
            response = self._client.post(
                self.api_url,
                json=body,
                headers={"Authorization": f"Api-Key {self.api_key}"},
            )
        except httpx.HTTPError as exc:
            logger.error("Sensio API unreachable: %s", exc)
            raise UpstreamError(f"Sensio API unreachable: {exc}") from exc

        if response.is_error:
            logger.error("Sensio API returned %s", response.status_code)
            raise status_error("Sensio API", response)

        return parse_records(read_json(response, "Sensio API"), SensioApiRecord, "Sensio API")

    def close(self) -> None:
        self._client.close()
