"""Cascaded angle-to-rate PID controllers for pitch, roll and yaw."""

from __future__ import annotations

from dataclasses import dataclass, field

from .config import Gains, Setpoint, constrain
from .sensors import Attitude

INTEGRAL_LIMIT = 400.0


@dataclass(frozen=True)
class PIDOutput:
    """Controller corrections for each axis."""

    pitch: float = 0.0
    roll: float = 0.0
    yaw: float = 0.0


def _check_dt(dt):
    if dt == 0:
        raise ValueError("dt must be non-zero")


@dataclass
class _AxisErrors:
    pitch: float
    roll: float
    yaw: float


def _rate_errors(gains: Gains, attitude: Attitude, setpoint: Setpoint) -> _AxisErrors:
    desired_pitch_rate = gains.kp_angle * (setpoint.pitch - attitude.pitch)
    desired_roll_rate = gains.kp_angle * (setpoint.roll - attitude.roll)
    return _AxisErrors(
        pitch=desired_pitch_rate - attitude.gyro_y,
        roll=desired_roll_rate - attitude.gyro_x,
        yaw=setpoint.yaw_rate - attitude.gyro_z,
    )


@dataclass
class RatePID:
    """Angle P loop feeding a rate PID whose derivative acts on the gyro.

    Taking the derivative of the measurement avoids kicks when the setpoint
    jumps. ``reset`` clears the integrators but keeps the previous gyro rates.
    """

    gains: Gains = field(default_factory=Gains)
    integral_limit: float = INTEGRAL_LIMIT
    pitch_integral: float = 0.0
    roll_integral: float = 0.0
    yaw_integral: float = 0.0
    prev_gyro_x: float = 0.0
    prev_gyro_y: float = 0.0
    prev_gyro_z: float = 0.0

    def compute(self, attitude: Attitude, setpoint: Setpoint, dt) -> PIDOutput:
        """Return the corrections for one control step of ``dt`` seconds."""
        _check_dt(dt)
        g = self.gains
        lim = self.integral_limit
        err = _rate_errors(g, attitude, setpoint)

        self.pitch_integral = constrain(self.pitch_integral + err.pitch * dt, -lim, lim)
        self.roll_integral = constrain(self.roll_integral + err.roll * dt, -lim, lim)
        self.yaw_integral = constrain(self.yaw_integral + err.yaw * dt, -lim, lim)

        output = PIDOutput(
            pitch=g.kp_rate * err.pitch
            + g.ki_rate * self.pitch_integral
            - g.kd_rate * (attitude.gyro_y - self.prev_gyro_y) / dt,
            roll=g.kp_rate * err.roll
            + g.ki_rate * self.roll_integral
            - g.kd_rate * (attitude.gyro_x - self.prev_gyro_x) / dt,
            yaw=g.kp_yaw_rate * err.yaw
            + g.ki_yaw_rate * self.yaw_integral
            - g.kd_yaw_rate * (attitude.gyro_z - self.prev_gyro_z) / dt,
        )
        self.prev_gyro_x = attitude.gyro_x
        self.prev_gyro_y = attitude.gyro_y
        self.prev_gyro_z = attitude.gyro_z
        return output

    def reset(self) -> None:
        """Zero the integrators."""
        self.pitch_integral = self.roll_integral = self.yaw_integral = 0.0


@dataclass
class ErrorRatePID:
    """Angle P loop feeding a rate PID whose derivative acts on the rate error.

    ``reset`` clears both the integrators and the remembered errors.
    """

    gains: Gains = field(default_factory=Gains)
    integral_limit: float = INTEGRAL_LIMIT
    pitch_integral: float = 0.0
    roll_integral: float = 0.0
    yaw_integral: float = 0.0
    prev_pitch_error: float = 0.0
    prev_roll_error: float = 0.0
    prev_yaw_error: float = 0.0

    def compute(self, attitude: Attitude, setpoint: Setpoint, dt) -> PIDOutput:
        """Return the corrections for one control step of ``dt`` seconds."""
        _check_dt(dt)
        g = self.gains
        lim = self.integral_limit
        err = _rate_errors(g, attitude, setpoint)

        self.pitch_integral = constrain(self.pitch_integral + err.pitch * dt, -lim, lim)
        self.roll_integral = constrain(self.roll_integral + err.roll * dt, -lim, lim)
        self.yaw_integral = constrain(self.yaw_integral + err.yaw * dt, -lim, lim)

        output = PIDOutput(
            pitch=g.kp_rate * err.pitch
            + g.ki_rate * self.pitch_integral
            + g.kd_rate * (err.pitch - self.prev_pitch_error) / dt,
            roll=g.kp_rate * err.roll
            + g.ki_rate * self.roll_integral
            + g.kd_rate * (err.roll - self.prev_roll_error) / dt,
            yaw=g.kp_yaw_rate * err.yaw
            + g.ki_yaw_rate * self.yaw_integral
            + g.kd_yaw_rate * (err.yaw - self.prev_yaw_error) / dt,
        )
        self.prev_pitch_error = err.pitch
        self.prev_roll_error = err.roll
        self.prev_yaw_error = err.yaw
        return output

    def reset(self) -> None:
        """Zero the integrators and the remembered rate errors."""
        self.pitch_integral = self.roll_integral = self.yaw_integral = 0.0
        self.prev_pitch_error = self.prev_roll_error = self.prev_yaw_error = 0.0