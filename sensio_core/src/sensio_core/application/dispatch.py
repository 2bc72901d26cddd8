import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from sensio_core.application.query_readings import (
    QueryContext,
    get_history,
    get_latest,
    get_particle_breakdown,
    list_device_serials,
)
from sensio_core.application.requests import (
    HistoryRequest,
    LatestRequest,
    ParticleBreakdownRequest,
    parse_request,
)
from sensio_core.domain.errors import SensioError, UnknownToolError

log = logging.getLogger(__name__)

LIST_DEVICE_SERIALS = "sensio_list_device_serials"
GET_LATEST = "sensio_get_latest"
GET_HISTORY = "sensio_get_history"
GET_PARTICLE_BREAKDOWN = "sensio_get_particle_breakdown"

TOOL_NAMES = (LIST_DEVICE_SERIALS, GET_LATEST, GET_HISTORY, GET_PARTICLE_BREAKDOWN)

Arguments = Optional[Mapping[str, Any]]


@dataclass
class ToolResult:
    payload: Dict[str, Any]
    is_error: bool = False


class ToolDispatcher:
    """
    Routes a tool call by name and wraps the outcome in the response envelope.

    Every failure becomes ``{"error": message}`` with ``is_error`` set; no
    exception escapes ``call``.
    """

    def __init__(
        self,
        ctx: QueryContext,
        caller_id: str,
        default_top_k: int = 5,
        default_resolution: str = "15m",
    ):
        self.ctx = ctx
        self.caller_id = caller_id
        self.default_top_k = default_top_k
        self.default_resolution = default_resolution
        self._handlers: Dict[str, Callable[[Arguments, str], Dict[str, Any]]] = {
            LIST_DEVICE_SERIALS: self._list_device_serials,
            GET_LATEST: self._get_latest,
            GET_HISTORY: self._get_history,
            GET_PARTICLE_BREAKDOWN: self._get_particle_breakdown,
        }

    def call(self, name: str, arguments: Arguments = None, caller_id: Optional[str] = None) -> ToolResult:
        caller = caller_id or self.caller_id
        try:
            handler = self._handlers.get(name)
            if handler is None:
                raise UnknownToolError(name)
            return ToolResult(payload=handler(arguments, caller))
        except SensioError as exc:
            log.info("Tool %s failed: %s", name, exc)
            return ToolResult(payload={"error": str(exc)}, is_error=True)
        except Exception as exc:
            log.exception("Unexpected failure in tool %s", name)
            return ToolResult(payload={"error": str(exc) or exc.__class__.__name__}, is_error=True)

    def _list_device_serials(self, arguments: Arguments, caller: str) -> Dict[str, Any]:
        return list_device_serials(caller, self.ctx)

    def _get_latest(self, arguments: Arguments, caller: str) -> Dict[str, Any]:
        request = parse_request(LatestRequest, arguments)
        return get_latest(request, caller, self.ctx)

    def _get_history(self, arguments: Arguments, caller: str) -> Dict[str, Any]:
        request = parse_request(
            HistoryRequest, arguments, defaults={"resolution": self.default_resolution}
        )
        return get_history(request, caller, self.ctx)

    def _get_particle_breakdown(self, arguments: Arguments, caller: str) -> Dict[str, Any]:
        request = parse_request(
            ParticleBreakdownRequest, arguments, defaults={"top_k": self.default_top_k}
        )
        return get_particle_breakdown(request, caller, self.ctx)
