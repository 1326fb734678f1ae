# telemetry_schema.py
import math
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Angular velocities travel over the wire in rad/s, speeds in m/s.
RPM_PER_RAD_PER_SEC = 60.0 / (2.0 * math.pi)


def rad_per_sec_to_rpm(value: float) -> float:
    return value * RPM_PER_RAD_PER_SEC


def rpm_to_rad_per_sec(value: float) -> float:
    return value / RPM_PER_RAD_PER_SEC


class _Lenient(BaseModel):
    # unknown keys are dropped, null reads as the field default
    model_config = ConfigDict(extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def _null_is_default(cls, v, info):
        if v is None:
            field = cls.model_fields[info.field_name]
            return field.get_default(call_default_factory=True)
        return v


class BasicTelemetry(_Lenient):
    gear: int = 0
    speed: float = 0.0                      # m/s
    engine_rotation_speed: float = 0.0      # rad/s
    max_engine_rotation_speed: float = 0.0  # rad/s
    pit_limiter_engaged: bool = False
    in_pit_lane: bool = False

    @property
    def speed_kmh(self) -> float:
        return self.speed * 3.6

    @property
    def engine_rpm(self) -> float:
        return rad_per_sec_to_rpm(self.engine_rotation_speed)

    @property
    def max_engine_rpm(self) -> float:
        return rad_per_sec_to_rpm(self.max_engine_rotation_speed)


class RacingFlags(_Lenient):
    green: bool = False
    yellow: bool = False
    blue: bool = False
    white: bool = False
    red: bool = False
    black: bool = False
    checkered: bool = False
    meatball: bool = False
    black_white: bool = False
    start_ready: bool = False
    start_set: bool = False
    start_go: bool = False

    def raised(self) -> List[str]:
        return [name for name in type(self).model_fields if getattr(self, name)]

    def is_all_clear(self) -> bool:
        return not self.raised()


class SimState(_Lenient):
    """
    One decoded poll of the sim-state endpoint.
    Every field is optional so older or sparser endpoints still decode:
    a missing key reads as "unknown", never as an error.
    """
    name: str = ""
    vehicle_left: bool = False
    vehicle_right: bool = False
    basic_telemetry: Optional[BasicTelemetry] = None
    # rad/s
    shift_point: Optional[float] = None
    flags: RacingFlags = Field(default_factory=RacingFlags)
    vehicle_unique_id: Optional[str] = None
    ignition_on: bool = False
    starter_on: bool = False

    @property
    def shift_point_rpm(self) -> Optional[float]:
        if self.shift_point is None:
            return None
        return rad_per_sec_to_rpm(self.shift_point)
