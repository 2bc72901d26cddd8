import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from sensio_core.domain.models import HISTORY_FIELDS, HistoryPoint

log = logging.getLogger(__name__)

_MINUTE_MS = 60 * 1000

RESOLUTION_MS: Dict[str, int] = {
    "1m": _MINUTE_MS,
    "5m": 5 * _MINUTE_MS,
    "15m": 15 * _MINUTE_MS,
    "30m": 30 * _MINUTE_MS,
    "1h": 60 * _MINUTE_MS,
    "6h": 6 * 60 * _MINUTE_MS,
    "1d": 24 * 60 * _MINUTE_MS,
}

DEFAULT_RESOLUTION = "15m"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def bucket_width_ms(resolution: str) -> int:
    """Width for ``resolution``; unknown values fall back to 15 minutes."""
    return RESOLUTION_MS.get(resolution, RESOLUTION_MS[DEFAULT_RESOLUTION])


def _epoch_ms(ts: datetime) -> int:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return (ts - _EPOCH) // timedelta(milliseconds=1)


def _mean(values: Iterable[Optional[float]]) -> Optional[float]:
    present = [v for v in values if v is not None]
    if not present:
        return None
    return sum(present) / len(present)


def downsample(points: Iterable[HistoryPoint], resolution: str) -> List[HistoryPoint]:
    """
    Bucket points into fixed-width windows and average each field.

    The bucket boundary is ``floor(epoch_ms / width) * width``. Each field is
    the mean of the non-null values in the bucket, or ``None`` if all were
    null. One point per non-empty bucket, ascending by bucket start.
    """
    width = bucket_width_ms(resolution)
    buckets: Dict[int, List[HistoryPoint]] = {}
    skipped = 0
    for point in points:
        if point.t is None:
            skipped += 1
            continue
        key = (_epoch_ms(point.t) // width) * width
        buckets.setdefault(key, []).append(point)

    if skipped:
        log.debug("Skipped %s points without a timestamp", skipped)

    result = []
    for key in sorted(buckets):
        members = buckets[key]
        averaged = {name: _mean(getattr(p, name) for p in members) for name in HISTORY_FIELDS}
        result.append(HistoryPoint(t=_EPOCH + timedelta(milliseconds=key), **averaged))
    return result
