"""
Upstream record shapes.

Two variants are seen in the wild:

* ``SensioApiRecord`` - the vendor ``indoor_data`` endpoint, ``format=json2``.
* ``ProxyDeviceRecord`` - one entry of the ``devices`` list returned by the
  database proxy function.

Both are parsed leniently (unknown keys ignored, every measurement optional)
and are consumed only by the normalizer.
"""

from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class _Lenient(BaseModel):
    model_config = ConfigDict(extra="ignore")


class RawIndex(_Lenient):
    index: float
    verbal: str
    color: str


class RawSensorData(_Lenient):
    sensor_date_time: Optional[str] = None
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    co2: Optional[float] = None
    voc: Optional[float] = None


class RawSensorIndices(_Lenient):
    co2: Optional[RawIndex] = None
    voc: Optional[RawIndex] = None
    pollution: Optional[RawIndex] = None
    temperature: Optional[float] = None
    humidity: Optional[float] = None


class RawParticleIndices(_Lenient):
    pollen: Optional[RawIndex] = None
    mites: Optional[RawIndex] = None
    dander: Optional[RawIndex] = None
    mold: Optional[RawIndex] = None
    allergen: Optional[RawIndex] = None


class SensioApiRecord(_Lenient):
    device_serial: str
    is_device_online: bool = False
    time_since_last_reading: Optional[str] = None
    request_date_time: Optional[str] = None
    sensor_data: Optional[RawSensorData] = None
    sensor_indices: Optional[RawSensorIndices] = None
    ml_particle_indices: Optional[RawParticleIndices] = None
    ml_particle_classes: Optional[Dict[str, Any]] = None


class ProxySensor(_Lenient):
    date_time: Optional[str] = None
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    co2: Optional[float] = None
    voc: Optional[float] = None


class ProxyIndices(_Lenient):
    co2: Optional[RawIndex] = None
    voc: Optional[RawIndex] = None
    pollution: Optional[RawIndex] = None


class ProxyParticles(_Lenient):
    indices: Optional[RawParticleIndices] = None
    classes: Optional[Dict[str, Any]] = None


class ProxyDeviceRecord(_Lenient):
    device_serial: str
    is_device_online: bool = False
    time_since_last_reading: Optional[str] = None
    sensor: Optional[ProxySensor] = None
    indices: Optional[ProxyIndices] = None
    particles: Optional[ProxyParticles] = Field(default=None)


RawRecord = Union[SensioApiRecord, ProxyDeviceRecord]
