import struct

import pytest

from quadflight.config import ACCEL_OFFSET_X, ACCEL_OFFSET_Y, ACCEL_OFFSET_Z
from quadflight.sensors import (
    BodyMeasurement,
    GyroBias,
    RawSensorData,
    calibrate_gyro,
    decode_gyro_frame,
    decode_motion_frame,
    to_body_frame,
)


def motion_frame(ax, ay, az, temp, gx, gy, gz):
    return struct.pack(">7h", ax, ay, az, temp, gx, gy, gz)


def gyro_frame(gx, gy, gz):
    return struct.pack(">3h", gx, gy, gz)


def test_decode_motion_frame_applies_offsets():
    raw = decode_motion_frame(motion_frame(10, 20, 30, 999, -5, 6, -7))
    assert raw == RawSensorData(
        acc_x=10 + ACCEL_OFFSET_X,
        acc_y=20 + ACCEL_OFFSET_Y,
        acc_z=30 + ACCEL_OFFSET_Z,
        gyro_x=-5,
        gyro_y=6,
        gyro_z=-7,
    )


def test_decode_motion_frame_ignores_temperature():
    a = decode_motion_frame(motion_frame(1, 2, 3, 0, 4, 5, 6))
    b = decode_motion_frame(motion_frame(1, 2, 3, -1234, 4, 5, 6))
    assert a == b


def test_decode_motion_frame_wraps_to_int16():
    raw = decode_motion_frame(motion_frame(32000, 0, 0, 0, 0, 0, 0))
    assert -32768 <= raw.acc_x <= 32767
    assert raw.acc_x == -32536


@pytest.mark.parametrize("size", [0, 13, 15])
def test_decode_motion_frame_rejects_wrong_length(size):
    with pytest.raises(ValueError):
        decode_motion_frame(bytes(size))


def test_decode_gyro_frame_round_trip():
    assert decode_gyro_frame(gyro_frame(-32768, 0, 32767)) == (-32768, 0, 32767)


def test_decode_gyro_frame_rejects_wrong_length():
    with pytest.raises(ValueError):
        decode_gyro_frame(bytes(7))


def test_calibrate_gyro_averages_constant_reading():
    bias = calibrate_gyro([gyro_frame(655, -655, 131)] * 50)
    assert bias.x == pytest.approx(10.0)
    assert bias.y == pytest.approx(-10.0)
    assert bias.z == pytest.approx(2.0)


def test_calibrate_gyro_symmetric_readings_cancel():
    frames = [gyro_frame(131, 262, -393), gyro_frame(-131, -262, 393)] * 10
    bias = calibrate_gyro(frames)
    assert bias == GyroBias(0.0, 0.0, 0.0)


def test_calibrate_gyro_requires_frames():
    with pytest.raises(ValueError):
        calibrate_gyro([])


def test_to_body_frame_maps_axes():
    raw = RawSensorData(acc_x=1, acc_y=2, acc_z=3, gyro_x=655, gyro_y=131, gyro_z=-655)
    body = to_body_frame(raw)
    assert (body.acc_x, body.acc_y, body.acc_z) == (-2.0, -1.0, 3.0)
    assert body.gyro_rate_x == pytest.approx(-2.0)
    assert body.gyro_rate_y == pytest.approx(-10.0)
    assert body.gyro_rate_z == pytest.approx(-10.0)


def test_to_body_frame_subtracts_bias():
    raw = RawSensorData(gyro_x=655, gyro_y=131, gyro_z=-655)
    plain = to_body_frame(raw)
    biased = to_body_frame(raw, GyroBias(1.0, 2.0, 3.0))
    assert biased.gyro_rate_x == pytest.approx(plain.gyro_rate_x - 1.0)
    assert biased.gyro_rate_y == pytest.approx(plain.gyro_rate_y - 2.0)
    assert biased.gyro_rate_z == pytest.approx(plain.gyro_rate_z - 3.0)


def test_calibrated_bias_zeroes_resting_rates():
    frame = gyro_frame(100, -200, 300)
    bias = calibrate_gyro([frame] * 5)
    raw = decode_motion_frame(motion_frame(0, 0, 0, 0, 100, -200, 300))
    # the body mapping swaps and negates axes, so apply the bias in body axes
    body_bias = GyroBias(-bias.y, -bias.x, bias.z)
    body = to_body_frame(raw, body_bias)
    assert body.gyro_rate_x == pytest.approx(0.0)
    assert body.gyro_rate_y == pytest.approx(0.0)
    assert body.gyro_rate_z == pytest.approx(0.0)


def test_radian_rates():
    body = BodyMeasurement(0.0, 0.0, 1.0, 180.0, -90.0, 0.0)
    assert body.gyro_rad_x == pytest.approx(3.14159, rel=1e-4)
    assert body.gyro_rad_y == pytest.approx(-1.570795, rel=1e-4)
    assert body.gyro_rad_z == 0.0