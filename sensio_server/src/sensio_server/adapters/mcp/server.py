"""MCP server for Sensio indoor air-quality data.

Tools:
- sensio_list_device_serials(): devices the configured user may query
- sensio_get_latest(): latest reading per device
- sensio_get_history(): downsampled time series for a window
- sensio_get_particle_breakdown(): top particle classes for a window
"""

import json
import logging
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from sensio_core.application.dispatch import (
    GET_HISTORY,
    GET_LATEST,
    GET_PARTICLE_BREAKDOWN,
    LIST_DEVICE_SERIALS,
    ToolDispatcher,
)

log = logging.getLogger(__name__)

SERVER_NAME = "sensio-air-mcp"


def _unwrap(dispatcher: ToolDispatcher, name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
    result = dispatcher.call(name, arguments)
    if result.is_error:
        # surfaces to the client as an error result carrying the {"error": ...} JSON
        raise ToolError(json.dumps(result.payload, indent=2))
    return result.payload


def build_server(dispatcher: ToolDispatcher) -> FastMCP:
    mcp = FastMCP(name=SERVER_NAME)

    @mcp.tool(name=LIST_DEVICE_SERIALS)
    def list_device_serials() -> dict:
        """List all device serials available to the configured user.

        Returns device serial numbers and friendly names.
        """
        return _unwrap(dispatcher, LIST_DEVICE_SERIALS, {})

    @mcp.tool(name=GET_LATEST)
    def get_latest(device_serials: List[str]) -> dict:
        """Get the latest indoor air quality readings for one or more devices.

        Args:
            device_serials: Device serial numbers, e.g. ["SA123", "SA456"].

        Returns current status, sensor data, air quality indices, and allergen levels.
        """
        return _unwrap(dispatcher, GET_LATEST, {"device_serials": device_serials})

    @mcp.tool(name=GET_HISTORY)
    def get_history(
        device_serials: List[str],
        start: str,
        end: str,
        resolution: Optional[str] = None,
    ) -> dict:
        """Get historical indoor air quality data for a time window.

        Args:
            device_serials: Device serial numbers.
            start: Start timestamp in ISO 8601 format (e.g. "2025-03-13T00:00:00Z").
            end: End timestamp in ISO 8601 format.
            resolution: One of 1m, 5m, 15m, 30m, 1h, 6h, 1d. Defaults to 15m.

        Returns time-series data averaged per resolution bucket.
        """
        return _unwrap(
            dispatcher,
            GET_HISTORY,
            {"device_serials": device_serials, "start": start, "end": end, "resolution": resolution},
        )

    @mcp.tool(name=GET_PARTICLE_BREAKDOWN)
    def get_particle_breakdown(
        device_serial: str,
        start: str,
        end: str,
        top_k: Optional[int] = None,
    ) -> dict:
        """Get a particle class breakdown for allergen analysis.

        Args:
            device_serial: Single device serial number.
            start: Start timestamp in ISO 8601 format.
            end: End timestamp in ISO 8601 format.
            top_k: Number of top particle classes to return (1-20, default 5).

        Shows the top contributing particle types (mold species, pollen types, etc.).
        """
        return _unwrap(
            dispatcher,
            GET_PARTICLE_BREAKDOWN,
            {"device_serial": device_serial, "start": start, "end": end, "top_k": top_k},
        )

    return mcp


# Tools are sync and block the event loop on their upstream call, so calls
# are served one at a time.
def run_stdio(dispatcher: ToolDispatcher) -> None:
    log.info("Sensio MCP server running on stdio")
    build_server(dispatcher).run(transport="stdio")
