"""
Reading normalizer.

Turns either upstream record variant into the canonical reading / history
point shapes. Absent fields degrade to ``None``; nothing here raises.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from pydantic import TypeAdapter, ValidationError

from sensio_core.domain.models import (
    AllergenBlock,
    HistoryPoint,
    IndexValue,
    IndicesBlock,
    NormalizedReading,
    SensorBlock,
)
from sensio_core.domain.raw_records import (
    ProxyDeviceRecord,
    RawIndex,
    RawParticleIndices,
    RawRecord,
    SensioApiRecord,
)

log = logging.getLogger(__name__)

_DATETIME = TypeAdapter(datetime)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 string into an aware UTC datetime, or ``None``."""
    if not value:
        return None
    try:
        ts = _DATETIME.validate_python(value)
    except ValidationError:
        log.debug("Unparseable timestamp %r", value)
        return None
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


@dataclass
class _Fields:
    """The variant-independent view of one raw record."""

    device_serial: str
    timestamp: Optional[datetime]
    online: bool
    time_since_last_reading: Optional[str]
    sensor: SensorBlock
    indices: IndicesBlock
    allergens: AllergenBlock
    classes: Dict[str, object] = field(default_factory=dict)


def _index(raw: Optional[RawIndex]) -> Optional[IndexValue]:
    if raw is None:
        return None
    return IndexValue(index=raw.index, verbal=raw.verbal, color=raw.color)


def _allergens(raw: Optional[RawParticleIndices]) -> AllergenBlock:
    if raw is None:
        return AllergenBlock()
    return AllergenBlock(
        pollen=_index(raw.pollen),
        mites=_index(raw.mites),
        dander=_index(raw.dander),
        mold=_index(raw.mold),
        allergen=_index(raw.allergen),
    )


def _from_vendor(raw: SensioApiRecord) -> _Fields:
    data = raw.sensor_data
    idx = raw.sensor_indices
    timestamp = parse_timestamp(data.sensor_date_time if data else None)
    if timestamp is None:
        timestamp = parse_timestamp(raw.request_date_time)
    return _Fields(
        device_serial=raw.device_serial,
        timestamp=timestamp,
        online=raw.is_device_online,
        time_since_last_reading=raw.time_since_last_reading,
        sensor=SensorBlock(
            temperature_c=data.temperature if data else None,
            humidity_pct=data.humidity if data else None,
            co2_ppm=data.co2 if data else None,
            voc=data.voc if data else None,
        ),
        indices=IndicesBlock(
            co2=_index(idx.co2) if idx else None,
            voc=_index(idx.voc) if idx else None,
            pollution=_index(idx.pollution) if idx else None,
        ),
        allergens=_allergens(raw.ml_particle_indices),
        classes=raw.ml_particle_classes or {},
    )


def _from_proxy(raw: ProxyDeviceRecord) -> _Fields:
    sensor = raw.sensor
    idx = raw.indices
    particles = raw.particles
    return _Fields(
        device_serial=raw.device_serial,
        timestamp=parse_timestamp(sensor.date_time if sensor else None),
        online=raw.is_device_online,
        time_since_last_reading=raw.time_since_last_reading,
        sensor=SensorBlock(
            temperature_c=sensor.temperature if sensor else None,
            humidity_pct=sensor.humidity if sensor else None,
            co2_ppm=sensor.co2 if sensor else None,
            voc=sensor.voc if sensor else None,
        ),
        indices=IndicesBlock(
            co2=_index(idx.co2) if idx else None,
            voc=_index(idx.voc) if idx else None,
            pollution=_index(idx.pollution) if idx else None,
        ),
        allergens=_allergens(particles.indices if particles else None),
        classes=(particles.classes if particles else None) or {},
    )


def _fields(raw: RawRecord) -> _Fields:
    if isinstance(raw, ProxyDeviceRecord):
        return _from_proxy(raw)
    return _from_vendor(raw)


def resolve_timestamp(raw: RawRecord) -> Optional[datetime]:
    return _fields(raw).timestamp


def particle_classes(raw: RawRecord) -> Dict[str, object]:
    return _fields(raw).classes


def normalize_reading(raw: RawRecord) -> NormalizedReading:
    f = _fields(raw)
    return NormalizedReading(
        device_serial=f.device_serial,
        timestamp=f.timestamp,
        online=f.online,
        time_since_last_reading=f.time_since_last_reading,
        sensor=f.sensor,
        indices=f.indices,
        allergens=f.allergens,
    )


def to_history_point(raw: RawRecord) -> HistoryPoint:
    f = _fields(raw)
    allergen = f.allergens.allergen
    return HistoryPoint(
        t=f.timestamp,
        co2_ppm=f.sensor.co2_ppm,
        voc=f.sensor.voc,
        temperature_c=f.sensor.temperature_c,
        humidity_pct=f.sensor.humidity_pct,
        allergen_index=allergen.index if allergen else None,
    )


def _newer_or_equal(candidate: Optional[datetime], current: Optional[datetime]) -> bool:
    # a record without a timestamp never displaces one that has it
    if candidate is None:
        return current is None
    if current is None:
        return True
    return candidate >= current


def latest_per_device(records: Iterable[RawRecord]) -> List[RawRecord]:
    """
    Reduce to one record per device: the most recent by resolved timestamp.

    Equal timestamps go to the record later in input order. Devices are
    returned in order of first appearance.
    """
    latest: Dict[str, RawRecord] = {}
    stamps: Dict[str, Optional[datetime]] = {}
    for record in records:
        ts = resolve_timestamp(record)
        serial = record.device_serial
        if serial not in latest or _newer_or_equal(ts, stamps[serial]):
            latest[serial] = record
            stamps[serial] = ts
    return list(latest.values())


def last_in_time(records: Iterable[RawRecord]) -> Optional[RawRecord]:
    """The chronologically-last record, with the same tie rule as above."""
    last: Optional[RawRecord] = None
    last_ts: Optional[datetime] = None
    for record in records:
        ts = resolve_timestamp(record)
        if last is None or _newer_or_equal(ts, last_ts):
            last, last_ts = record, ts
    return last
