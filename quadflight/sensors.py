"""IMU frame decoding, gyro calibration and body-frame axis mapping."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Iterable

from .config import ACCEL_OFFSET_X, ACCEL_OFFSET_Y, ACCEL_OFFSET_Z

# MPU register map
REG_PWR_MGMT_1 = 0x6B
REG_FILTER_CONFIG = 0x1A
REG_GYRO_CONFIG = 0x1B
REG_ACCEL_CONFIG = 0x1C
REG_ACCEL_XOUT = 0x3B
REG_GYRO_XOUT = 0x43

# Register writes that wake the sensor and set DLPF, +/-500 deg/s, +/-4 g.
INIT_SEQUENCE = (
    (REG_PWR_MGMT_1, 0x00),
    (REG_FILTER_CONFIG, 0x04),
    (REG_GYRO_CONFIG, 0x08),
    (REG_ACCEL_CONFIG, 0x08),
)

MOTION_FRAME_SIZE = 14
GYRO_FRAME_SIZE = 6
CALIBRATION_SAMPLES = 2000
CALIBRATION_INTERVAL_MS = 3

GYRO_LSB_PER_DPS = 65.5
DEG_TO_RAD = 0.0174533

_MOTION = struct.Struct(">7h")
_GYRO = struct.Struct(">3h")


def _to_int16(value: int) -> int:
    return (value + 0x8000) % 0x10000 - 0x8000


@dataclass(frozen=True)
class RawSensorData:
    """Raw sensor counts, accelerometer offsets already applied."""

    acc_x: int = 0
    acc_y: int = 0
    acc_z: int = 0
    gyro_x: int = 0
    gyro_y: int = 0
    gyro_z: int = 0


@dataclass(frozen=True)
class GyroBias:
    """Mean gyro reading at rest, in degrees per second."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


@dataclass(frozen=True)
class BodyMeasurement:
    """Accelerometer counts and bias-corrected gyro rates in the body frame."""

    acc_x: float
    acc_y: float
    acc_z: float
    gyro_rate_x: float
    gyro_rate_y: float
    gyro_rate_z: float

    @property
    def gyro_rad_x(self) -> float:
        return self.gyro_rate_x * DEG_TO_RAD

    @property
    def gyro_rad_y(self) -> float:
        return self.gyro_rate_y * DEG_TO_RAD

    @property
    def gyro_rad_z(self) -> float:
        return self.gyro_rate_z * DEG_TO_RAD


@dataclass(frozen=True)
class Attitude:
    """Estimated angles in degrees and body rates in degrees per second."""

    pitch: float
    roll: float
    yaw: float
    gyro_x: float
    gyro_y: float
    gyro_z: float


def decode_motion_frame(frame) -> RawSensorData:
    """Decode a 14-byte accel/temperature/gyro burst read."""
    data = bytes(frame)
    if len(data) != MOTION_FRAME_SIZE:
        raise ValueError(
            f"motion frame must be {MOTION_FRAME_SIZE} bytes, got {len(data)}"
        )
    ax, ay, az, _temperature, gx, gy, gz = _MOTION.unpack(data)
    return RawSensorData(
        acc_x=_to_int16(ax + ACCEL_OFFSET_X),
        acc_y=_to_int16(ay + ACCEL_OFFSET_Y),
        acc_z=_to_int16(az + ACCEL_OFFSET_Z),
        gyro_x=gx,
        gyro_y=gy,
        gyro_z=gz,
    )


def decode_gyro_frame(frame) -> tuple[int, int, int]:
    """Decode a 6-byte gyro read into signed counts (x, y, z)."""
    data = bytes(frame)
    if len(data) != GYRO_FRAME_SIZE:
        raise ValueError(
            f"gyro frame must be {GYRO_FRAME_SIZE} bytes, got {len(data)}"
        )
    return _GYRO.unpack(data)


def calibrate_gyro(frames: Iterable) -> GyroBias:
    """Average gyro frames taken at rest into a bias in degrees per second."""
    sum_x = sum_y = sum_z = 0.0
    count = 0
    for frame in frames:
        gx, gy, gz = decode_gyro_frame(frame)
        sum_x += gx / GYRO_LSB_PER_DPS
        sum_y += gy / GYRO_LSB_PER_DPS
        sum_z += gz / GYRO_LSB_PER_DPS
        count += 1
    if count == 0:
        raise ValueError("gyro calibration needs at least one frame")
    return GyroBias(sum_x / count, sum_y / count, sum_z / count)


def to_body_frame(raw: RawSensorData, bias: GyroBias = GyroBias()) -> BodyMeasurement:
    """Map sensor axes onto the airframe and remove the gyro bias."""
    return BodyMeasurement(
        acc_x=float(-raw.acc_y),
        acc_y=float(-raw.acc_x),
        acc_z=float(raw.acc_z),
        gyro_rate_x=(-raw.gyro_y / GYRO_LSB_PER_DPS) - bias.x,
        gyro_rate_y=(-raw.gyro_x / GYRO_LSB_PER_DPS) - bias.y,
        gyro_rate_z=(raw.gyro_z / GYRO_LSB_PER_DPS) - bias.z,
    )