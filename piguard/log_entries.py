import math
import re
from typing import List, Optional

from piguard.database import now_iso
from piguard.models import LogEntry

NUMBER_PREFIX = re.compile(r"\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")
INTEGER_PREFIX = re.compile(r"\s*([-+]?\d+)")

def _value(content: dict, *keys, default="N/A"):
    value = content
    for key in keys:
        if not isinstance(value, dict):
            return default
        value = value.get(key)
    if value is None or value == "":
        return default
    return value

def leading_number(value) -> Optional[float]:
    """Numeric prefix of a value, the way JavaScript's parseFloat reads "45.2%"."""
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    else:
        match = NUMBER_PREFIX.match(str(value))
        if not match:
            return None
        number = float(match.group(1))
    return number if math.isfinite(number) else None

def leading_integer(value) -> Optional[int]:
    """Integer prefix of a value, the way JavaScript's parseInt reads "1000MB"."""
    match = INTEGER_PREFIX.match(str(value))
    return int(match.group(1)) if match else None

def _arduino_entries(content: dict, filename: str, timestamp: str) -> List[LogEntry]:
    motor_state = _value(content, "MotorState", default="Unknown")
    return [
        LogEntry(
            id=f"{filename}-gyro",
            timestamp=timestamp,
            level="info",
            source="sensor",
            message=(
                f"Gyro - X: {_value(content, 'Gyro', 'X')}, "
                f"Y: {_value(content, 'Gyro', 'Y')}, Z: {_value(content, 'Gyro', 'Z')}"
            ),
        ),
        LogEntry(
            id=f"{filename}-servo",
            timestamp=timestamp,
            level="info",
            source="system",
            message=(
                f"Servo Angles - Neck: {_value(content, 'ServoAngles', 'Neck')}, "
                f"Head: {_value(content, 'ServoAngles', 'Head')}"
            ),
        ),
        LogEntry(
            id=f"{filename}-distance",
            timestamp=timestamp,
            level="info",
            source="sensor",
            message=(
                f"Distances - Front: {_value(content, 'Distances', 'Front')} cm, "
                f"Left: {_value(content, 'Distances', 'Left')} cm, "
                f"Right: {_value(content, 'Distances', 'Right')} cm"
            ),
        ),
        LogEntry(
            id=f"{filename}-motor",
            timestamp=timestamp,
            level="info" if motor_state == "STOP" else "warning",
            source="motion",
            message=f"Motor State: {motor_state}",
        ),
    ]

def _pi_entries(content: dict, filename: str, timestamp: str) -> List[LogEntry]:
    cpu_temp = leading_number(_value(content, "CPU Temp", default="0")) or 0.0
    if cpu_temp > 75:
        temp_level = "error"
    elif cpu_temp > 65:
        temp_level = "warning"
    else:
        temp_level = "info"

    return [
        LogEntry(
            id=f"{filename}-cpu-ram",
            timestamp=timestamp,
            level="info",
            source="system",
            message=f"System Status - CPU: {_value(content, 'CPU')}, RAM: {_value(content, 'RAM')}",
        ),
        LogEntry(
            id=f"{filename}-temp",
            timestamp=timestamp,
            level=temp_level,
            source="system",
            message=(
                f"Temperatures - CPU: {_value(content, 'CPU Temp')}, "
                f"GPU: {_value(content, 'GPU Temp')}"
            ),
        ),
        LogEntry(
            id=f"{filename}-network",
            timestamp=timestamp,
            level="info",
            source="network",
            message=(
                f"Network Traffic - Upload: {_value(content, 'Upload (KB/s)', default='0')} KB/s, "
                f"Download: {_value(content, 'Download (KB/s)', default='0')} KB/s"
            ),
        ),
    ]

def parse_log_file(content, filename: str) -> List[LogEntry]:
    """Turn one robot log file into dashboard log entries.

    Arduino dumps yield gyro, servo, distance and motor entries; Pi5 dumps
    yield CPU/RAM, temperature and network entries. Other files yield nothing.
    """
    if not isinstance(content, dict):
        return []

    timestamp = str(content.get("Timestamp") or now_iso())
    if "Arduino" in filename:
        return _arduino_entries(content, filename, timestamp)
    if "Pi5" in filename:
        return _pi_entries(content, filename, timestamp)
    return []
