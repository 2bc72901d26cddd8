from datetime import datetime, timezone

from sensio_core.domain.models import IndexValue
from sensio_core.domain.normalize import (
    last_in_time,
    latest_per_device,
    normalize_reading,
    parse_timestamp,
    to_history_point,
)
from sensio_core.domain.raw_records import ProxyDeviceRecord, SensioApiRecord

GOOD = {"index": 1, "verbal": "Good", "color": "#00ff00"}


def vendor(serial="SA1", sensor_time="2025-03-13T10:00:00Z", request_time="2025-03-13T10:05:00Z", **extra):
    data = {
        "device_serial": serial,
        "is_device_online": True,
        "time_since_last_reading": "2 minutes",
        "request_date_time": request_time,
        "sensor_data": {
            "sensor_date_time": sensor_time,
            "temperature": 21.5,
            "humidity": 40,
            "co2": 600,
            "voc": 0,
        },
        "sensor_indices": {"co2": GOOD, "voc": None, "pollution": None},
        "ml_particle_indices": {"allergen": {"index": 3, "verbal": "Moderate", "color": "#ffaa00"}},
    }
    data.update(extra)
    return SensioApiRecord.model_validate(data)


def test_parse_timestamp_handles_zulu_and_naive():
    assert parse_timestamp("2025-03-13T10:00:00Z") == datetime(2025, 3, 13, 10, tzinfo=timezone.utc)
    assert parse_timestamp("2025-03-13T10:00:00") == datetime(2025, 3, 13, 10, tzinfo=timezone.utc)
    assert parse_timestamp("not a date") is None
    assert parse_timestamp(None) is None


def test_normalize_prefers_sensor_time():
    reading = normalize_reading(vendor())
    assert reading.timestamp == datetime(2025, 3, 13, 10, tzinfo=timezone.utc)
    assert reading.online is True
    assert reading.time_since_last_reading == "2 minutes"


def test_normalize_falls_back_to_request_time():
    reading = normalize_reading(vendor(sensor_time=None))
    assert reading.timestamp == datetime(2025, 3, 13, 10, 5, tzinfo=timezone.utc)


def test_normalize_copies_indices_verbatim_and_keeps_zero():
    reading = normalize_reading(vendor())
    assert reading.indices.co2 == IndexValue(index=1, verbal="Good", color="#00ff00")
    assert reading.indices.voc is None
    assert reading.sensor.voc == 0
    assert reading.allergens.allergen.verbal == "Moderate"
    assert reading.allergens.pollen is None


def test_normalize_missing_blocks_degrade_to_none():
    raw = SensioApiRecord.model_validate({"device_serial": "SA9"})
    reading = normalize_reading(raw)
    assert reading.timestamp is None
    assert reading.sensor.co2_ppm is None
    assert reading.indices.pollution is None
    assert reading.to_dict()["timestamp"] is None


def test_normalize_proxy_record():
    raw = ProxyDeviceRecord.model_validate(
        {
            "device_serial": "SA2",
            "is_device_online": False,
            "sensor": {"date_time": "2025-03-13T09:00:00Z", "co2": 800, "temperature": 19},
            "indices": {"co2": GOOD},
            "particles": {"indices": {"mold": GOOD}, "classes": {"mold": {"alternaria": 1}}},
        }
    )
    reading = normalize_reading(raw)
    assert reading.device_serial == "SA2"
    assert reading.sensor.co2_ppm == 800
    assert reading.allergens.mold.index == 1
    assert reading.to_dict()["timestamp"] == "2025-03-13T09:00:00.000Z"


def test_to_history_point_flattens_allergen_index():
    point = to_history_point(vendor())
    assert point.co2_ppm == 600
    assert point.allergen_index == 3
    assert point.temperature_c == 21.5


def test_latest_per_device_keeps_most_recent():
    older = vendor("SA1", sensor_time="2025-03-13T08:00:00Z")
    newer = vendor("SA1", sensor_time="2025-03-13T09:00:00Z")
    other = vendor("SA2")
    result = latest_per_device([newer, other, older])
    assert [r.device_serial for r in result] == ["SA1", "SA2"]
    assert result[0] is newer


def test_latest_per_device_tie_goes_to_later_record():
    first = vendor("SA1", time_since_last_reading="first")
    second = vendor("SA1", time_since_last_reading="second")
    (winner,) = latest_per_device([first, second])
    assert winner.time_since_last_reading == "second"


def test_latest_per_device_untimed_record_never_wins():
    timed = vendor("SA1")
    untimed = SensioApiRecord.model_validate({"device_serial": "SA1"})
    assert latest_per_device([timed, untimed]) == [timed]


def test_last_in_time_uses_timestamps_not_position():
    late = vendor("SA1", sensor_time="2025-03-13T12:00:00Z")
    early = vendor("SA1", sensor_time="2025-03-13T06:00:00Z")
    assert last_in_time([late, early]) is late
    assert last_in_time([]) is None
