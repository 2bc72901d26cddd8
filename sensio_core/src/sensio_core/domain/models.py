from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def format_timestamp(ts: datetime) -> str:
    """Canonical absolute form: UTC, millisecond precision, trailing ``Z``."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class IndexValue:
    index: float
    verbal: str
    color: str


@dataclass
class SensorBlock:
    temperature_c: Optional[float] = None
    humidity_pct: Optional[float] = None
    co2_ppm: Optional[float] = None
    voc: Optional[float] = None


@dataclass
class IndicesBlock:
    co2: Optional[IndexValue] = None
    voc: Optional[IndexValue] = None
    pollution: Optional[IndexValue] = None


@dataclass
class AllergenBlock:
    pollen: Optional[IndexValue] = None
    mites: Optional[IndexValue] = None
    dander: Optional[IndexValue] = None
    mold: Optional[IndexValue] = None
    allergen: Optional[IndexValue] = None


@dataclass
class NormalizedReading:
    device_serial: str
    timestamp: Optional[datetime]
    online: bool
    time_since_last_reading: Optional[str]
    sensor: SensorBlock = field(default_factory=SensorBlock)
    indices: IndicesBlock = field(default_factory=IndicesBlock)
    allergens: AllergenBlock = field(default_factory=AllergenBlock)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["timestamp"] = format_timestamp(self.timestamp) if self.timestamp else None
        return d


@dataclass
class HistoryPoint:
    t: Optional[datetime]
    co2_ppm: Optional[float] = None
    voc: Optional[float] = None
    temperature_c: Optional[float] = None
    humidity_pct: Optional[float] = None
    allergen_index: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["t"] = format_timestamp(self.t) if self.t else None
        return d


# numeric fields averaged by the downsampler, in output order
HISTORY_FIELDS = ("co2_ppm", "voc", "temperature_c", "humidity_pct", "allergen_index")


@dataclass(frozen=True)
class ParticleClass:
    name: str
    count: float

    def to_dict(self) -> Dict[str, Any]:
        return {"class": self.name, "count": self.count}


@dataclass
class DeviceInfo:
    device_serial: str
    name: str
    user_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"device_serial": self.device_serial, "name": self.name}
