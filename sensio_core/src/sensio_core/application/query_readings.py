# sensio_core/application/query_readings.py

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, List, Sequence

from sensio_core.application.cache import ReadingCache, history_key, latest_key
from sensio_core.application.requests import (
    HistoryRequest,
    LatestRequest,
    ParticleBreakdownRequest,
)
from sensio_core.domain.downsample import downsample
from sensio_core.domain.errors import AccessDeniedError, TimeWindowError
from sensio_core.domain.normalize import (
    last_in_time,
    latest_per_device,
    normalize_reading,
    particle_classes,
    to_history_point,
)
from sensio_core.domain.particles import aggregate_classes, top_k
from sensio_core.domain.ports import DeviceDirectory, IndoorDataSource
from sensio_core.domain.raw_records import RawRecord

log = logging.getLogger(__name__)


@dataclass
class QueryContext:
    source: IndoorDataSource
    directory: DeviceDirectory
    cache: ReadingCache
    max_window_days: int = 30


def ensure_access(directory: DeviceDirectory, caller_id: str, device_serials: Sequence[str]) -> None:
    denied = directory.denied_serials(caller_id, device_serials)
    if denied:
        log.warning("Caller %s denied access to %s", caller_id, ", ".join(denied))
        raise AccessDeniedError(denied)


def list_device_serials(caller_id: str, ctx: QueryContext) -> Dict[str, Any]:
    devices = ctx.directory.list_devices(caller_id)
    result: Dict[str, Any] = {"devices": [d.to_dict() for d in devices]}
    if not devices and ctx.directory.is_unrestricted():
        result["message"] = "No devices configured. Set ALLOWED_DEVICE_SERIALS environment variable."
    return result


def get_latest(request: LatestRequest, caller_id: str, ctx: QueryContext) -> Dict[str, Any]:
    serials = request.device_serials
    ensure_access(ctx.directory, caller_id, serials)

    key = latest_key(serials)
    cached = ctx.cache.get_latest(key)
    if cached is not None:
        return cached

    records = ctx.source.fetch(serials)
    log.info("Fetched %s latest records for %s", len(records), key)

    readings = [normalize_reading(r).to_dict() for r in latest_per_device(records)]
    result = {"readings": readings}
    ctx.cache.set_latest(key, result)
    return result


def _group_by_device(records: List[RawRecord]) -> Dict[str, List[RawRecord]]:
    groups: Dict[str, List[RawRecord]] = {}
    for record in records:
        groups.setdefault(record.device_serial, []).append(record)
    return groups


def get_history(request: HistoryRequest, caller_id: str, ctx: QueryContext) -> Dict[str, Any]:
    serials = request.device_serials
    ensure_access(ctx.directory, caller_id, serials)

    if request.end - request.start > timedelta(days=ctx.max_window_days):
        raise TimeWindowError(ctx.max_window_days)

    key = history_key(serials, request.start, request.end, request.resolution)
    cached = ctx.cache.get_history(key)
    if cached is not None:
        return cached

    records = ctx.source.fetch(serials, request.start, request.end)
    log.info("Fetched %s history records for %s", len(records), key)

    series = []
    for serial, device_records in _group_by_device(records).items():
        points = downsample((to_history_point(r) for r in device_records), request.resolution)
        series.append({"device_serial": serial, "points": [p.to_dict() for p in points]})

    result = {"series": series}
    ctx.cache.set_history(key, result)
    return result


def get_particle_breakdown(
    request: ParticleBreakdownRequest, caller_id: str, ctx: QueryContext
) -> Dict[str, Any]:
    serial = request.device_serial
    ensure_access(ctx.directory, caller_id, [serial])

    records = ctx.source.fetch([serial], request.start, request.end)
    log.info("Fetched %s records for particle breakdown of %s", len(records), serial)

    counts: Dict[str, float] = {}
    for record in records:
        aggregate_classes(particle_classes(record), counts)

    last = last_in_time(records)
    return {
        "device_serial": serial,
        "top_classes": [c.to_dict() for c in top_k(counts, request.top_k)],
        "raw": particle_classes(last) if last is not None else {},
    }
