"""Background IMU polling that publishes the newest raw sample to readers."""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional

from .sensors import MOTION_FRAME_SIZE, RawSensorData, decode_motion_frame

SENSOR_POLL_PERIOD_SEC = 0.002  # 500 Hz


class LatestSample:
    """Single-slot mailbox holding the most recent raw sensor sample.

    Writers replace the sample and readers take a copy; both sides hold a
    lock only for the duration of the swap, so neither blocks the other for long.
    """

    def __init__(self, initial: RawSensorData = RawSensorData()):
        self._lock = threading.Lock()
        self._sample = initial

    def publish(self, sample: RawSensorData) -> None:
        """Replace the stored sample."""
        with self._lock:
            self._sample = sample

    def read(self) -> RawSensorData:
        """Return the stored sample."""
        with self._lock:
            return self._sample


def poll_sensor(
    read_frame: Callable[[], Optional[bytes]],
    latest: LatestSample,
    period: float = SENSOR_POLL_PERIOD_SEC,
    stop_event: Optional[threading.Event] = None,
) -> int:
    """Read motion frames at a fixed rate and publish each complete one.

    ``read_frame`` returns the bytes obtained from one burst read, or None
    when nothing arrived. Reads yielding fewer than a full frame are
    skipped. Wake-ups are scheduled from the previous deadline, not from
    when the work finished. Runs until ``stop_event`` is set and returns
    the number of samples published.
    """
    if period <= 0:
        raise ValueError("period must be positive")
    if stop_event is None:
        stop_event = threading.Event()

    published = 0
    next_wake = time.monotonic()
    while True:
        next_wake += period
        if stop_event.wait(max(0.0, next_wake - time.monotonic())):
            break
        frame = read_frame()
        if frame is None:
            continue
        data = bytes(frame)
        if len(data) < MOTION_FRAME_SIZE:
            continue
        latest.publish(decode_motion_frame(data[:MOTION_FRAME_SIZE]))
        published += 1
    return published