"""Two-state (angle, gyro bias) Kalman filters for roll and pitch."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from .sensors import Attitude, BodyMeasurement

RAD_TO_DEG = 57.2958


def accel_angles(acc_x, acc_y, acc_z):
    """Return (roll, pitch) in degrees implied by the gravity vector."""
    roll = math.atan2(acc_y, acc_z) * RAD_TO_DEG
    pitch = math.atan2(-acc_x, math.sqrt(acc_y * acc_y + acc_z * acc_z)) * RAD_TO_DEG
    return roll, pitch


def _zero_covariance():
    return [[0.0, 0.0], [0.0, 0.0]]


@dataclass
class AngleKalman:
    """Fuses a gyro rate with an accelerometer angle for one axis."""

    q_angle: float = 0.001
    q_bias: float = 0.003
    r_measure: float = 0.03
    angle: float = 0.0
    bias: float = 0.0
    p: list = field(default_factory=_zero_covariance)

    def update(self, rate, measured_angle, dt):
        """Predict with ``rate`` over ``dt``, correct with ``measured_angle``."""
        p = self.p
        self.angle += dt * (rate - self.bias)
        p[0][0] += dt * (dt * p[1][1] - p[0][1] - p[1][0] + self.q_angle)
        p[0][1] -= dt * p[1][1]
        p[1][0] -= dt * p[1][1]
        p[1][1] += self.q_bias * dt

        s = p[0][0] + self.r_measure
        k0 = p[0][0] / s
        k1 = p[1][0] / s
        innovation = measured_angle - self.angle
        self.angle += k0 * innovation
        self.bias += k1 * innovation

        p00, p01 = p[0][0], p[0][1]
        p[0][0] -= k0 * p00
        p[0][1] -= k0 * p01
        p[1][0] -= k1 * p00
        p[1][1] -= k1 * p01
        return self.angle


@dataclass
class KalmanEstimator:
    """Roll/pitch Kalman filters plus gyro-integrated yaw."""

    roll_filter: AngleKalman = field(default_factory=AngleKalman)
    pitch_filter: AngleKalman = field(default_factory=AngleKalman)
    yaw: float = 0.0

    def update(self, measurement: BodyMeasurement, dt) -> Attitude:
        """Advance the estimate by one body-frame measurement."""
        acc_roll, acc_pitch = accel_angles(
            measurement.acc_x, measurement.acc_y, measurement.acc_z
        )
        roll = self.roll_filter.update(measurement.gyro_rate_x, acc_roll, dt)
        pitch = self.pitch_filter.update(measurement.gyro_rate_y, acc_pitch, dt)
        self.yaw += measurement.gyro_rate_z * dt
        return Attitude(
            pitch=pitch,
            roll=roll,
            yaw=self.yaw,
            gyro_x=measurement.gyro_rate_x,
            gyro_y=measurement.gyro_rate_y,
            gyro_z=measurement.gyro_rate_z,
        )