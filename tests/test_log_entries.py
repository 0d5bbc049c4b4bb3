from piguard.log_entries import leading_integer, leading_number, parse_log_file

def test_leading_number():
    assert leading_number("45.2%") == 45.2
    assert leading_number("37.5'C") == 37.5
    assert leading_number(" -3") == -3.0
    assert leading_number(12) == 12.0
    assert leading_number("N/A") is None
    assert leading_number("1e400") is None
    assert leading_number(10 ** 400) is None

def test_leading_integer():
    assert leading_integer("1000MB") == 1000
    assert leading_integer("1e3") == 1
    assert leading_integer("1e400") == 1
    assert leading_integer(" -42.9") == -42
    assert leading_integer("N/A") is None

def test_arduino_file_entries():
    content = {
        "Gyro": {"X": 1, "Y": 2, "Z": 3},
        "ServoAngles": {"Neck": 90},
        "Distances": {"Front": 10, "Left": 20, "Right": 30},
        "MotorState": "FORWARD",
        "Timestamp": "2025-03-17T18:57:13",
    }
    entries = parse_log_file(content, "Arduino_Latest.json")
    assert [e.source for e in entries] == ["sensor", "system", "sensor", "motion"]
    assert entries[1].message == "Servo Angles - Neck: 90, Head: N/A"
    assert entries[2].message == "Distances - Front: 10 cm, Left: 20 cm, Right: 30 cm"
    assert entries[3].level == "warning"
    assert all(e.timestamp == "2025-03-17T18:57:13" for e in entries)

def test_pi_temperature_levels():
    def temp_level(value):
        entries = parse_log_file({"CPU Temp": value}, "Pi5_Latest.json")
        return entries[1].level

    assert temp_level("50.0'C") == "info"
    assert temp_level("70.1'C") == "warning"
    assert temp_level("80'C") == "error"

def test_pi_network_defaults():
    entries = parse_log_file({"CPU": "10", "RAM": "200"}, "Pi5_Latest.json")
    assert entries[0].message == "System Status - CPU: 10, RAM: 200"
    assert entries[2].message == "Network Traffic - Upload: 0 KB/s, Download: 0 KB/s"
    assert entries[2].timestamp.endswith("Z")

def test_unknown_files_have_no_entries():
    assert parse_log_file({"CPU": "10"}, "boot.log") == []
    assert parse_log_file(["not", "a", "dict"], "Pi5_Latest.json") == []
