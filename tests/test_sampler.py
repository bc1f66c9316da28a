import struct
import threading

import pytest

from quadflight.config import ACCEL_OFFSET_X, ACCEL_OFFSET_Y, ACCEL_OFFSET_Z
from quadflight.sampler import LatestSample, poll_sensor
from quadflight.sensors import RawSensorData, decode_motion_frame


def _frame(*values):
    return struct.pack(">7h", *values)


def _scripted_reader(frames, stop_event):
    queue = list(frames)

    def read_frame():
        frame = queue.pop(0)
        if not queue:
            stop_event.set()
        return frame

    return read_frame


def _fields(sample):
    return (sample.acc_x, sample.acc_y, sample.acc_z,
            sample.gyro_x, sample.gyro_y, sample.gyro_z)


def test_latest_sample_starts_zeroed():
    assert LatestSample().read() == RawSensorData()


def test_publish_then_read_round_trip():
    latest = LatestSample()
    sample = RawSensorData(1, 2, 3, 4, 5, 6)
    latest.publish(sample)
    assert latest.read() == sample


def test_publish_keeps_only_newest():
    latest = LatestSample()
    latest.publish(RawSensorData(acc_x=1))
    latest.publish(RawSensorData(acc_x=2))
    assert latest.read().acc_x == 2


def test_concurrent_publish_never_tears():
    latest = LatestSample()
    stop = threading.Event()

    def writer():
        n = 0
        while not stop.is_set():
            latest.publish(RawSensorData(n, n, n, n, n, n))
            n += 1

    thread = threading.Thread(target=writer)
    thread.start()
    try:
        samples = [latest.read() for _ in range(2000)]
    finally:
        stop.set()
        thread.join()

    assert len(samples) == 2000
    torn = [s for s in samples if len(set(_fields(s))) != 1]
    assert torn == []
    final = latest.read()
    assert len(set(_fields(final))) == 1
    assert final.acc_x >= 0


def test_poll_publishes_decoded_frames():
    stop = threading.Event()
    latest = LatestSample()
    frames = [_frame(10, 20, 30, 0, 1, 2, 3), _frame(-5, 6, -7, 99, -8, 9, -10)]
    count = poll_sensor(_scripted_reader(frames, stop), latest, 0.0005, stop)
    assert count == 2
    assert latest.read() == decode_motion_frame(frames[-1])


def test_poll_applies_accelerometer_offsets():
    stop = threading.Event()
    latest = LatestSample()
    poll_sensor(_scripted_reader([bytes(14)], stop), latest, 0.0005, stop)
    sample = latest.read()
    assert (sample.acc_x, sample.acc_y, sample.acc_z) == (
        ACCEL_OFFSET_X,
        ACCEL_OFFSET_Y,
        ACCEL_OFFSET_Z,
    )
    assert (sample.gyro_x, sample.gyro_y, sample.gyro_z) == (0, 0, 0)


def test_poll_skips_missing_and_short_reads():
    stop = threading.Event()
    good = _frame(1, 2, 3, 4, 5, 6, 7)
    latest = LatestSample()
    frames = [good, None, b"\x00" * 13]
    count = poll_sensor(_scripted_reader(frames, stop), latest, 0.0005, stop)
    assert count == 1
    assert latest.read() == decode_motion_frame(good)


def test_poll_uses_first_full_frame_of_longer_read():
    stop = threading.Event()
    good = _frame(1, 2, 3, 4, 5, 6, 7)
    latest = LatestSample()
    poll_sensor(_scripted_reader([good + b"\xff\xff"], stop), latest, 0.0005, stop)
    assert latest.read() == decode_motion_frame(good)


def test_poll_returns_immediately_when_already_stopped():
    stop = threading.Event()
    stop.set()
    calls = []
    count = poll_sensor(lambda: calls.append(1), LatestSample(), 0.001, stop)
    assert count == 0
    assert calls == []


def test_poll_rejects_non_positive_period():
    with pytest.raises(ValueError):
        poll_sensor(lambda: None, LatestSample(), 0.0, threading.Event())