from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Optional

# Payloads served by the robot API

class RobotFile(BaseModel):
    filename: str
    url: str

class Gyro(BaseModel):
    x: float = Field(alias="X")
    y: float = Field(alias="Y")
    z: float = Field(alias="Z")

class ServoAngles(BaseModel):
    neck: float = Field(alias="Neck")
    head: float = Field(alias="Head")

class Distances(BaseModel):
    front: float = Field(alias="Front")
    left: float = Field(alias="Left")
    right: float = Field(alias="Right")

class ArduinoReading(BaseModel):
    """Latest Arduino sensor dump (``/log/Arduino_Latest.json``)."""
    model_config = ConfigDict(coerce_numbers_to_str=True)

    gyro: Gyro = Field(alias="Gyro")
    servo: ServoAngles = Field(alias="ServoAngles")
    distances: Distances = Field(alias="Distances")
    motor_state: str = Field(alias="MotorState")
    timestamp: str = Field(alias="Timestamp")

class PiSystemReading(BaseModel):
    """Latest Pi system dump (``/log/Pi5_Latest.json``).

    Values are kept as the strings the robot reports ("45.2", "37.5'C", ...).
    """
    model_config = ConfigDict(coerce_numbers_to_str=True)

    cpu: str = Field(alias="CPU", min_length=1)
    ram: str = Field(alias="RAM", min_length=1)
    cpu_temp: str = Field(alias="CPU Temp", min_length=1)
    gpu_temp: str = Field("0", alias="GPU Temp")
    upload_speed: str = Field("0", alias="Upload (KB/s)")
    download_speed: str = Field("0", alias="Download (KB/s)")
    timestamp: Optional[str] = Field(None, alias="Timestamp")

    @field_validator("cpu", "ram", "cpu_temp", mode="before")
    @classmethod
    def reading_present(cls, value):
        # A bare 0 counts as a missing reading; "0" does not
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value == 0:
            raise ValueError("reading is missing")
        return value

# Request bodies

class LogFileRequest(BaseModel):
    logUrl: Optional[str] = None

class RaspberryPiSettings(BaseModel):
    ip: Optional[str] = None
    port: Optional[Any] = None

class DemoModeSettings(BaseModel):
    enabled: Optional[Any] = None

class Credentials(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None

class Registration(Credentials):
    name: Optional[str] = None

class AdminGrant(BaseModel):
    email: Optional[str] = None
    name: Optional[str] = None

class Approval(BaseModel):
    userId: Optional[str] = None

class ResetRequest(BaseModel):
    email: Optional[str] = None

class ResetConfirm(BaseModel):
    token: Optional[str] = None
    password: Optional[str] = None

class LogEntry(BaseModel):
    id: str
    timestamp: str
    level: str  # "info", "warning", "error" or "debug"
    source: str
    message: str
