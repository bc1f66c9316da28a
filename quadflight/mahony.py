"""Mahony complementary filter on a unit quaternion."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass, field

from .config import constrain
from .sensors import Attitude, BodyMeasurement

RAD_TO_DEG = 57.2958

_F32 = struct.Struct("<f")
_I32 = struct.Struct("<i")
_U32 = struct.Struct("<I")
_MAGIC = 0x5F3759DF


def inv_sqrt(x):
    """Approximate ``1 / sqrt(x)`` with the bit-level guess and one Newton step."""
    bits = _I32.unpack(_F32.pack(x))[0]
    guess_bits = (_MAGIC - (bits >> 1)) & 0xFFFFFFFF
    y = _F32.unpack(_U32.pack(guess_bits))[0]
    return y * (1.5 - (0.5 * x * y * y))


@dataclass
class MahonyFilter:
    """Attitude quaternion driven by gyro rates and corrected toward gravity.

    ``two_kp`` and ``two_ki`` are twice the proportional and integral gains.
    Angles are kept in degrees after every update.
    """

    two_kp: float = 0.8
    two_ki: float = 0.002
    q0: float = 1.0
    q1: float = 0.0
    q2: float = 0.0
    q3: float = 0.0
    integral_fb_x: float = 0.0
    integral_fb_y: float = 0.0
    integral_fb_z: float = 0.0
    pitch: float = 0.0
    roll: float = 0.0
    yaw: float = 0.0

    @property
    def quaternion(self):
        return (self.q0, self.q1, self.q2, self.q3)

    def _feedback(self, gx, gy, gz, ax, ay, az, dt):
        recip_norm = inv_sqrt(ax * ax + ay * ay + az * az)
        ax *= recip_norm
        ay *= recip_norm
        az *= recip_norm

        q0, q1, q2, q3 = self.quaternion
        # Estimated direction of gravity (halved).
        halfvx = q1 * q3 - q0 * q2
        halfvy = q0 * q1 + q2 * q3
        halfvz = q0 * q0 - 0.5 + q3 * q3

        # Cross product between measured and estimated gravity.
        halfex = ay * halfvz - az * halfvy
        halfey = az * halfvx - ax * halfvz
        halfez = ax * halfvy - ay * halfvx

        if self.two_ki > 0.0:
            self.integral_fb_x += self.two_ki * halfex * dt
            self.integral_fb_y += self.two_ki * halfey * dt
            self.integral_fb_z += self.two_ki * halfez * dt
            gx += self.integral_fb_x
            gy += self.integral_fb_y
            gz += self.integral_fb_z
        else:
            self.integral_fb_x = self.integral_fb_y = self.integral_fb_z = 0.0

        gx += self.two_kp * halfex
        gy += self.two_kp * halfey
        gz += self.two_kp * halfez
        return gx, gy, gz

    def update(self, gx, gy, gz, ax, ay, az, dt):
        """Advance by ``dt`` seconds with gyro rates in rad/s and any-scale accel.

        Accelerometer feedback is skipped when all three components are zero.
        Returns ``(pitch, roll, yaw)`` in degrees.
        """
        if not (ax == 0.0 and ay == 0.0 and az == 0.0):
            gx, gy, gz = self._feedback(gx, gy, gz, ax, ay, az, dt)

        half_dt = 0.5 * dt
        gx *= half_dt
        gy *= half_dt
        gz *= half_dt

        qa, qb, qc, q3 = self.quaternion
        q0 = qa + (-qb * gx - qc * gy - q3 * gz)
        q1 = qb + (qa * gx + qc * gz - q3 * gy)
        q2 = qc + (qa * gy - qb * gz + q3 * gx)
        q3 = q3 + (qa * gz + qb * gy - qc * gx)

        recip_norm = inv_sqrt(q0 * q0 + q1 * q1 + q2 * q2 + q3 * q3)
        q0 *= recip_norm
        q1 *= recip_norm
        q2 *= recip_norm
        q3 *= recip_norm
        self.q0, self.q1, self.q2, self.q3 = q0, q1, q2, q3

        self.roll = (
            math.atan2(2.0 * (q0 * q1 + q2 * q3), q0 * q0 - q1 * q1 - q2 * q2 + q3 * q3)
            * RAD_TO_DEG
        )
        self.pitch = (
            math.asin(constrain(2.0 * (q0 * q2 - q3 * q1), -1.0, 1.0)) * RAD_TO_DEG
        )
        self.yaw = (
            math.atan2(2.0 * (q0 * q3 + q1 * q2), q0 * q0 + q1 * q1 - q2 * q2 - q3 * q3)
            * RAD_TO_DEG
        )
        return self.pitch, self.roll, self.yaw


@dataclass
class MahonyEstimator:
    """Feeds body-frame measurements through a Mahony filter."""

    filter: MahonyFilter = field(default_factory=MahonyFilter)

    def update(self, measurement: BodyMeasurement, dt) -> Attitude:
        """Advance the estimate; body rates are reported in degrees per second."""
        pitch, roll, yaw = self.filter.update(
            measurement.gyro_rad_x,
            measurement.gyro_rad_y,
            measurement.gyro_rad_z,
            measurement.acc_x,
            measurement.acc_y,
            measurement.acc_z,
            dt,
        )
        return Attitude(
            pitch=pitch,
            roll=roll,
            yaw=yaw,
            gyro_x=measurement.gyro_rate_x,
            gyro_y=measurement.gyro_rate_y,
            gyro_z=measurement.gyro_rate_z,
        )