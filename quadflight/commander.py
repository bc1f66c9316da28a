"""Flight sequencing state machine and the inner control step."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from .config import HOVER_THRUST, Setpoint, map_range
from .kalman import KalmanEstimator
from .mixer import MotorBank, MotorOutputs, clamp_mix
from .pid import PIDOutput, RatePID
from .sensors import Attitude, BodyMeasurement
from .state import FlightState, FlightStatus

logger = logging.getLogger(__name__)

BOOT_DELAY_MS = 8000
COMMANDER_PERIOD_MS = 20
TAKEOFF_DELAY_MS = 3000
RAMP_UP_MS = 1000
FLIGHT_DURATION_MS = 6000


def takeoff_thrust(time_in_air_ms):
    """Base thrust for a scripted hop: ramp to hover, hold, then zero."""
    if time_in_air_ms < RAMP_UP_MS:
        return map_range(time_in_air_ms, 0, RAMP_UP_MS, 0, HOVER_THRUST)
    if time_in_air_ms < FLIGHT_DURATION_MS:
        return HOVER_THRUST
    return 0


class Commander:
    """Steps the flight sequence: standby, armed countdown, scripted flight.

    Call ``tick`` periodically with a millisecond clock.
    """

    def __init__(
        self,
        status: Optional[FlightStatus] = None,
        setpoint: Optional[Setpoint] = None,
        motors: Optional[MotorBank] = None,
    ):
        self.status = status if status is not None else FlightStatus()
        self.setpoint = setpoint if setpoint is not None else Setpoint()
        self.motors = motors if motors is not None else MotorBank()
        self.state_timer_ms = 0

    def tick(self, now_ms) -> FlightState:
        """Run one pass of the state machine and return the resulting state."""
        status = self.status
        if status.emergency_kill and status.state not in (FlightState.KILLED, FlightState.BOOT):
            status.set_state(FlightState.KILLED)
            status.is_flying = False
            status.is_armed = False
            self.setpoint.base_thrust = 0
            logger.warning("FSM: EMERGENCY KILL TRIGGERED!")

        state = status.state
        if state is FlightState.BOOT:
            logger.info("STATUS: STANDBY. Waiting for ARM...")
            status.set_state(FlightState.STANDBY)
        elif state is FlightState.STANDBY:
            if status.is_armed and not status.emergency_kill:
                logger.info("STATUS: ARMED! Taking off in 3s...")
                self.state_timer_ms = now_ms
                status.set_state(FlightState.ARMED_TAKEOFF)
        elif state is FlightState.ARMED_TAKEOFF:
            if now_ms - self.state_timer_ms >= TAKEOFF_DELAY_MS:
                logger.info("STATUS: FLYING!")
                self.state_timer_ms = now_ms
                self.setpoint.pitch = 0.0
                self.setpoint.roll = 0.0
                status.is_flying = True
                status.set_state(FlightState.FLYING)
        elif state is FlightState.FLYING:
            time_in_air = now_ms - self.state_timer_ms
            if time_in_air < FLIGHT_DURATION_MS:
                self.setpoint.base_thrust = takeoff_thrust(time_in_air)
            else:
                logger.info("STATUS: Flight Complete.")
                status.is_flying = False
                self.setpoint.base_thrust = 0
                self.motors.kill()
                status.is_armed = False
                status.set_state(FlightState.BOOT)
        elif state is FlightState.KILLED:
            if not status.emergency_kill:
                logger.info("STATUS: Kill switch cleared.")
                status.set_state(FlightState.BOOT)
        return status.state


Mixer = Callable[[int, PIDOutput], MotorOutputs]


@dataclass
class FlightController:
    """Estimator, attitude controller and mixer run once per control period."""

    status: FlightStatus = field(default_factory=FlightStatus)
    setpoint: Setpoint = field(default_factory=Setpoint)
    motors: MotorBank = field(default_factory=MotorBank)
    estimator: object = field(default_factory=KalmanEstimator)
    pid: object = field(default_factory=RatePID)
    mixer: Mixer = clamp_mix
    attitude: Optional[Attitude] = None

    def step(self, measurement: BodyMeasurement, dt) -> MotorOutputs:
        """Update the estimate and drive the motors; returns what was written.

        While killed or not flying the integrators are cleared and the
        motors are stopped, but the estimate keeps running.
        """
        self.attitude = self.estimator.update(measurement, dt)

        if self.status.emergency_kill or not self.status.is_flying:
            self.pid.reset()
            self.motors.kill()
            return MotorOutputs()

        correction = self.pid.compute(self.attitude, self.setpoint, dt)
        outputs = self.mixer(int(self.setpoint.base_thrust), correction)
        self.motors.write(outputs)
        return outputs