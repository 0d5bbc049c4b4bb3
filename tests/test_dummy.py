import pytest

from piguard.dummy import (
    BASE_LAT,
    RECORDED_GPS_TRACK,
    generate_dummy_data,
    generate_dummy_sensor,
    generate_dummy_status,
    generate_gps_path,
)

@pytest.mark.parametrize("sensor_type,unit,low,high", [
    ("temperature", "°C", 20, 35),
    ("humidity", "%", 40, 80),
    ("distance", "cm", 0, 100),
    ("voltage", "V", 3.3, 5.0),
    ("pressure", "units", 0, 100),
])
def test_sensor_ranges(sensor_type, unit, low, high):
    reading = generate_dummy_sensor(sensor_type)
    assert reading["unit"] == unit
    assert low <= reading["value"] <= high

def test_status_snapshot_is_consistent():
    status = generate_dummy_status()
    ram = status["ram_details"]
    assert ram["free"] == ram["total"] - ram["used"]
    assert status["cpu"] == f"{status['cpu_details']['usage']}%"
    assert 60 <= status["battery_details"]["level"] <= 99
    assert status["cpu_change"][0] in "+-"

def test_unknown_endpoint():
    assert generate_dummy_data("lidar") is None
    assert generate_dummy_data("camera")["image"]

def test_gps_path_is_smooth():
    path = generate_gps_path(20)
    assert len(path) == 20
    for previous, point in zip(path, path[1:]):
        assert abs(point["latitude"] - previous["latitude"]) < 0.001
        assert abs(point["longitude"] - previous["longitude"]) < 0.001
    assert abs(path[0]["latitude"] - BASE_LAT) < 0.001

def test_recorded_track_has_coordinates():
    assert all(p["latitude"] and p["longitude"] for p in RECORDED_GPS_TRACK)
