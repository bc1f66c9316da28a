"""Hardware constants, tuning gains and shared flight setpoints."""

from __future__ import annotations

from dataclasses import dataclass

# Motor PWM output
MOTOR_FREQ_HZ = 20000
PWM_RESOLUTION_BITS = 10

PIN_MOTOR_FL = 4
PIN_MOTOR_FR = 5
PIN_MOTOR_BL = 3
PIN_MOTOR_BR = 6
MOTOR_PINS = (PIN_MOTOR_FL, PIN_MOTOR_FR, PIN_MOTOR_BL, PIN_MOTOR_BR)

# IMU bus
I2C_SDA = 11
I2C_SCL = 10
I2C_CLOCK_HZ = 400000

MPU_ADDR = 0x68
ACCEL_OFFSET_X = 1000
ACCEL_OFFSET_Y = -700
ACCEL_OFFSET_Z = 1160

# Flight settings
HOVER_THRUST = 511
LOOP_TIME_SEC = 0.004  # 250 Hz
LOOP_PERIOD_MS = 4


@dataclass
class Gains:
    """Cascaded angle/rate controller gains."""

    kp_angle: float = 2.0
    kp_rate: float = 1.0
    ki_rate: float = 0.0
    kd_rate: float = 0.001
    kp_yaw_rate: float = 1.5
    ki_yaw_rate: float = 0.0
    kd_yaw_rate: float = 0.0


@dataclass
class Setpoint:
    """Commanded attitude targets and collective thrust."""

    pitch: float = 0.0
    roll: float = 0.0
    yaw_rate: float = 0.0
    base_thrust: int = 0


def constrain(value, low, high):
    """Clamp ``value`` into ``[low, high]``; below ``low`` wins first."""
    if value < low:
        return low
    if value > high:
        return high
    return value


def map_range(value, in_min, in_max, out_min, out_max):
    """Re-map an integer linearly from one range to another.

    Uses integer arithmetic with division truncated toward zero, and does
    not clamp the result to the output range.
    """
    value, in_min, in_max = int(value), int(in_min), int(in_max)
    out_min, out_max = int(out_min), int(out_max)
    span = in_max - in_min
    if span == 0:
        raise ValueError("input range must not be empty")
    numerator = (value - in_min) * (out_max - out_min)
    quotient = abs(numerator) // abs(span)
    if (numerator < 0) != (span < 0) and numerator != 0:
        quotient = -quotient
    return quotient + out_min