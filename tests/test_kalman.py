import pytest

from quadflight.kalman import AngleKalman, KalmanEstimator, accel_angles
from quadflight.sensors import BodyMeasurement


def test_accel_angles_level():
    assert accel_angles(0.0, 0.0, 1.0) == (0.0, 0.0)


def test_accel_angles_roll_on_side():
    roll, pitch = accel_angles(0.0, 1.0, 0.0)
    assert roll == pytest.approx(90.0, rel=1e-4)
    assert pitch == pytest.approx(0.0)


def test_accel_angles_pitch_nose_up():
    roll, pitch = accel_angles(-1.0, 0.0, 0.0)
    assert pitch == pytest.approx(90.0, rel=1e-4)


def test_accel_angles_roll_is_antisymmetric():
    r1, p1 = accel_angles(0.3, 0.5, 0.8)
    r2, p2 = accel_angles(-0.3, -0.5, 0.8)
    assert r1 == pytest.approx(-r2)
    assert p1 == pytest.approx(-p2)


def test_first_update_moves_toward_measurement():
    kf = AngleKalman()
    angle = kf.update(0.0, 10.0, 0.004)
    assert 0.0 < angle < 10.0
    assert kf.angle == angle


def test_converges_to_constant_measurement():
    kf = AngleKalman()
    for _ in range(2000):
        kf.update(0.0, 10.0, 0.1)
    assert kf.angle == pytest.approx(10.0, abs=0.5)


def test_trusts_gyro_when_measurement_noise_is_huge():
    kf = AngleKalman(r_measure=1e12)
    angle = kf.update(50.0, 0.0, 0.01)
    assert angle == pytest.approx(0.5, rel=1e-6)


def test_covariance_stays_symmetric():
    kf = AngleKalman()
    for step in range(300):
        kf.update(float(step % 7), float(step % 5), 0.004)
    assert kf.p[0][1] == pytest.approx(kf.p[1][0])
    assert kf.p[0][0] > 0.0
    assert kf.p[1][1] > 0.0


def test_estimator_level_stays_level():
    est = KalmanEstimator()
    level = BodyMeasurement(0.0, 0.0, 8192.0, 0.0, 0.0, 0.0)
    for _ in range(100):
        att = est.update(level, 0.004)
    assert att.roll == 0.0
    assert att.pitch == 0.0
    assert att.yaw == 0.0


def test_estimator_integrates_yaw_and_passes_rates():
    est = KalmanEstimator()
    m = BodyMeasurement(0.0, 0.0, 1.0, 1.5, -2.5, 10.0)
    est.update(m, 0.1)
    att = est.update(m, 0.1)
    assert att.yaw == pytest.approx(2.0)
    assert (att.gyro_x, att.gyro_y, att.gyro_z) == (1.5, -2.5, 10.0)


def test_estimator_tilt_drives_roll_only():
    est = KalmanEstimator()
    tilted = BodyMeasurement(0.0, 1.0, 1.0, 0.0, 0.0, 0.0)
    for _ in range(2000):
        att = est.update(tilted, 0.1)
    assert att.roll == pytest.approx(45.0, abs=0.5)
    assert att.pitch == pytest.approx(0.0, abs=1e-9)


def test_estimators_keep_separate_state():
    a = KalmanEstimator()
    b = KalmanEstimator()
    a.update(BodyMeasurement(0.0, 1.0, 1.0, 0.0, 0.0, 0.0), 0.1)
    assert b.roll_filter.angle == 0.0
    assert b.roll_filter.p == [[0.0, 0.0], [0.0, 0.0]]
    assert a.roll_filter.angle > 0.0