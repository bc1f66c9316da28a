"""Motor mixing for an X quadcopter and the motor output bank."""

from __future__ import annotations

import threading
from dataclasses import astuple, dataclass
from typing import Callable, Optional, Sequence

from .config import (
    MOTOR_PINS,
    PIN_MOTOR_BL,
    PIN_MOTOR_BR,
    PIN_MOTOR_FL,
    PIN_MOTOR_FR,
    constrain,
)
from .pid import PIDOutput

CLAMP_MAX_PWM = 800

MOTOR_MAX_PWM = 1023.0  # 10-bit maximum
MOTOR_MIN_IDLE = 40.0  # keeps the props spinning smoothly

# Rows are FL, FR, BL, BR; columns are thrust, roll, pitch, yaw.
MIX_MATRIX = (
    (1.0, 1.0, 1.0, 1.0),
    (1.0, -1.0, 1.0, -1.0),
    (1.0, 1.0, -1.0, -1.0),
    (1.0, -1.0, -1.0, 1.0),
)


@dataclass(frozen=True)
class MotorOutputs:
    """PWM duty for each motor."""

    fl: int = 0
    fr: int = 0
    bl: int = 0
    br: int = 0

    def as_tuple(self) -> tuple[int, int, int, int]:
        return astuple(self)


def clamp_mix(base_thrust, pid: PIDOutput) -> MotorOutputs:
    """Add the corrections to the base thrust and clip each motor to 0..800."""

    def motor(pitch_sign, roll_sign, yaw_sign):
        raw = int(base_thrust + pitch_sign * pid.pitch + roll_sign * pid.roll + yaw_sign * pid.yaw)
        return constrain(raw, 0, CLAMP_MAX_PWM)

    return MotorOutputs(
        fl=motor(1, 1, 1),
        fr=motor(1, -1, -1),
        bl=motor(-1, 1, -1),
        br=motor(-1, -1, 1),
    )


def matrix_mix(
    base_thrust,
    pid: PIDOutput,
    matrix: Sequence[Sequence[float]] = MIX_MATRIX,
    min_idle: float = MOTOR_MIN_IDLE,
    max_pwm: float = MOTOR_MAX_PWM,
) -> MotorOutputs:
    """Mix through a geometry matrix, keeping every motor in ``[min_idle, max_pwm]``.

    A motor asked to go below idle lifts all motors by the same amount;
    a motor pushed past the maximum scales all motors toward idle, which
    keeps the ratios between them.
    """
    rows = [tuple(row) for row in matrix]
    if len(rows) != 4 or any(len(row) != 4 for row in rows):
        raise ValueError("mix matrix must be 4x4")
    if max_pwm <= min_idle:
        raise ValueError("max_pwm must exceed min_idle")

    vector = (float(base_thrust), pid.roll, pid.pitch, pid.yaw)
    outputs = [sum(weight * value for weight, value in zip(row, vector)) for row in rows]

    lowest = min(outputs)
    highest = max(outputs)
    if lowest < min_idle:
        boost = min_idle - lowest
        outputs = [value + boost for value in outputs]
        highest += boost

    if highest > max_pwm:
        scale = (max_pwm - min_idle) / (highest - min_idle)
        outputs = [(value - min_idle) * scale + min_idle for value in outputs]

    return MotorOutputs(*(int(value) for value in outputs))


class MotorBank:
    """The four motor PWM channels.

    ``writer`` is called as ``writer(pin, duty)`` for every channel written;
    the last duty per pin is kept in ``duties``. All motors are stopped on
    construction.
    """

    def __init__(
        self,
        writer: Optional[Callable[[int, int], None]] = None,
        pins: Sequence[int] = MOTOR_PINS,
    ):
        if len(pins) != 4:
            raise ValueError("a motor bank needs exactly four pins")
        self._writer = writer
        self._lock = threading.Lock()
        self.pins = tuple(pins)
        self.duties: dict[int, int] = dict.fromkeys(self.pins, 0)
        self.kill()

    def _write_all(self, values) -> None:
        with self._lock:
            for pin, duty in zip(self.pins, values):
                self.duties[pin] = duty
                if self._writer is not None:
                    self._writer(pin, duty)

    def write(self, outputs: MotorOutputs) -> None:
        """Send one duty to each motor, in FL, FR, BL, BR order."""
        self._write_all(outputs.as_tuple())

    def kill(self) -> None:
        """Stop every motor."""
        self._write_all((0, 0, 0, 0))

    @property
    def outputs(self) -> MotorOutputs:
        """The duties last written, as motor outputs."""
        with self._lock:
            return MotorOutputs(*(self.duties[pin] for pin in self.pins))


DEFAULT_PIN_ORDER = (PIN_MOTOR_FL, PIN_MOTOR_FR, PIN_MOTOR_BL, PIN_MOTOR_BR)