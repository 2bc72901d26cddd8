from .dispatch import ToolDispatcher, ToolResult
from .query_readings import (
    QueryContext,
    get_history,
    get_latest,
    get_particle_breakdown,
    list_device_serials,
)

__all__ = [
    "ToolDispatcher",
    "ToolResult",
    "QueryContext",
    "get_history",
    "get_latest",
    "get_particle_breakdown",
    "list_device_serials",
]
