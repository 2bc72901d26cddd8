from datetime import datetime, timezone

import factory
from sensio_core.domain.models import format_timestamp
from sensio_core.domain.raw_records import (
    ProxyDeviceRecord,
    ProxySensor,
    RawIndex,
    RawParticleIndices,
    RawSensorData,
    RawSensorIndices,
    SensioApiRecord,
)


class ISOTimestamp(factory.Factory):
    class Meta:
        model = str

    @classmethod
    def _create(cls, *_, **__):
        return format_timestamp(datetime.now(tz=timezone.utc))


class RawIndexFactory(factory.Factory):
    class Meta:
        model = RawIndex

    index = 1
    verbal = "Good"
    color = "#2ecc71"


class RawSensorDataFactory(factory.Factory):
    class Meta:
        model = RawSensorData

    sensor_date_time = ISOTimestamp()
    temperature = 21.0
    humidity = 45.0
    co2 = 600.0
    voc = 120.0


class SensioApiRecordFactory(factory.Factory):
    class Meta:
        model = SensioApiRecord

    device_serial = factory.Sequence(lambda n: f"SA{n}")
    is_device_online = True
    time_since_last_reading = "1 minute"
    request_date_time = ISOTimestamp()
    sensor_data = factory.SubFactory(RawSensorDataFactory)
    sensor_indices = factory.LazyFunction(
        lambda: RawSensorIndices(co2=RawIndexFactory(), voc=RawIndexFactory(), pollution=None)
    )
    ml_particle_indices = factory.LazyFunction(lambda: RawParticleIndices(allergen=RawIndexFactory(index=2)))
    ml_particle_classes = factory.LazyFunction(lambda: {"pollen": {"birch": 2}, "mold": 1})


class ProxyDeviceRecordFactory(factory.Factory):
    class Meta:
        model = ProxyDeviceRecord

    device_serial = factory.Sequence(lambda n: f"SA{n}")
    is_device_online = True
    time_since_last_reading = None
    sensor = factory.LazyFunction(lambda: ProxySensor(date_time=format_timestamp(datetime.now(tz=timezone.utc)), co2=700))


def as_json(record) -> dict:
    """Wire form of a raw record, as an upstream endpoint would send it."""
    return record.model_dump(mode="json")
