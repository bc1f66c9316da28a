"""Flight state machine states and the shared safety flags."""

from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


class FlightState(enum.Enum):
    """Phases of a flight."""

    BOOT = enum.auto()
    STANDBY = enum.auto()
    ARMED_TAKEOFF = enum.auto()
    FLYING = enum.auto()
    KILLED = enum.auto()


@dataclass
class FlightStatus:
    """Current flight phase plus the flags shared between tasks.

    The emergency kill starts engaged, so nothing spins until armed.
    """

    state: FlightState = FlightState.BOOT
    emergency_kill: bool = True
    is_armed: bool = False
    is_flying: bool = False
    calibrate_done: bool = False
    _lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    def set_state(self, new_state):
        """Move to ``new_state``; return False if already there."""
        new_state = FlightState(new_state)
        with self._lock:
            if self.state is new_state:
                return False
            self.state = new_state
        logger.info("SYSTEM STATE CHANGED TO: %s", new_state.name)
        return True

    def arm(self):
        """Clear the kill switch and arm."""
        with self._lock:
            self.emergency_kill = False
            self.is_armed = True

    def kill(self):
        """Engage the kill switch, disarm and stop flying."""
        with self._lock:
            self.emergency_kill = True
            self.is_armed = False
            self.is_flying = False