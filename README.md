# quadflight

Flight logic for a small four-motor (X configuration) quadcopter, in plain
Python with no third-party dependencies. Every layer of the control stack is
an ordinary object or function, so each part can be driven from recorded
sensor data, a simulator or a test.

## What is inside

| Module | Purpose |
| --- | --- |
| `quadflight.config` | Hardware and flight constants (motor pins, IMU address, accelerometer offsets, `HOVER_THRUST`), controller gains (`Gains`), attitude targets and base thrust (`Setpoint`), and the `constrain` and `map_range` helpers. |
| `quadflight.state` | The flight phases (`FlightState`) and the shared flags (`FlightStatus`) with `arm()`, `kill()` and `set_state()`. |
| `quadflight.sensors` | Decoding of IMU burst reads (`decode_motion_frame`, `decode_gyro_frame`), gyro bias calibration (`calibrate_gyro`) and axis mapping to the airframe (`to_body_frame`). Also the `RawSensorData`, `GyroBias`, `BodyMeasurement` and `Attitude` records. |
| `quadflight.kalman` | A two-state angle/bias Kalman filter for one axis (`AngleKalman`), accelerometer tilt angles (`accel_angles`) and a roll/pitch/yaw estimator (`KalmanEstimator`). |
| `quadflight.mahony` | A quaternion Mahony complementary filter (`MahonyFilter`), its body-frame wrapper (`MahonyEstimator`) and the fast inverse square root (`inv_sqrt`). |
| `quadflight.sampler` | A lock-protected latest-sample slot (`LatestSample`) and a fixed-rate polling loop (`poll_sensor`) that keeps sensor reads apart from the control loop. |
| `quadflight.pid` | Cascaded angle-to-rate PID controllers returning `PIDOutput`: `RatePID` (derivative on the gyro rate) and `ErrorRatePID` (derivative on the rate error). |
| `quadflight.mixer` | Motor mixing: `clamp_mix` (each motor clipped to 0..800) and `matrix_mix` (geometry matrix with idle boost and desaturation), plus `MotorOutputs` and the motor channel bank `MotorBank`. |
| `quadflight.commander` | The scripted flight sequence (`Commander`, `takeoff_thrust`) and the per-cycle estimate/control/mix step (`FlightController`). |
| `quadflight.comms` | The HTTP control page with ARM and EMERGENCY KILL buttons (`handle_request`, `make_server`, `main`). |

## Installing

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## The control web page

```
quadflight-server --host 127.0.0.1 --port 8080
```

Both options are optional; the defaults are `--host 0.0.0.0` and
`--port 80` (binding port 80 usually needs elevated rights). The server
answers:

- `GET /` with the control page,
- `POST /arm` by clearing the kill switch and arming (`Armed`),
- `POST /kill` by engaging the kill switch, disarming, stopping flight and
  setting every motor channel to zero (`Killed`),
- anything else with a 404.

`handle_request(status, motors, method, path)` does the same dispatch without
a network, returning a `Response` with status code, content type and body.

## How the pieces fit

1. `decode_motion_frame` turns a 14-byte accelerometer/temperature/gyro read
   into `RawSensorData`, adding the accelerometer offsets. At start-up,
   `calibrate_gyro` averages 6-byte gyro reads taken at rest into a
   `GyroBias`.
2. `to_body_frame` remaps the sensor axes onto the airframe and removes the
   gyro bias, giving a `BodyMeasurement` (rates in degrees per second, with
   radian properties for the Mahony filter).
3. `KalmanEstimator.update` or `MahonyEstimator.update` turns each measurement
   into an `Attitude`: pitch, roll and yaw in degrees plus body rates.
4. `RatePID.compute` (or `ErrorRatePID.compute`) compares the attitude with a
   `Setpoint` and returns a `PIDOutput`; integrators are clamped to ±400.
5. `clamp_mix` or `matrix_mix` combines base thrust and correction into
   `MotorOutputs`, which `MotorBank.write` sends to the four channels in
   FL, FR, BL, BR order.
6. `Commander.tick(now_ms)` runs the flight sequence: standby until armed, a
   three-second arming delay, a one-second thrust ramp to hover, hover until
   six seconds after lift-off, then motors off and back to boot. An emergency
   kill moves any state other than boot to `KILLED`, where it stays until the
   kill switch is cleared.

`FlightController.step(measurement, dt)` ties steps 3 to 5 together; while the
kill switch is engaged or the craft is not flying it keeps estimating but
resets the PID and stops the motors.

`FlightStatus` starts with the kill switch engaged, so nothing spins until the
craft is explicitly armed.

```python
from quadflight.config import Setpoint, constrain
from quadflight.kalman import KalmanEstimator
from quadflight.mixer import MotorBank, clamp_mix
from quadflight.pid import RatePID
from quadflight.sensors import decode_motion_frame, to_body_frame
from quadflight.state import FlightState, FlightStatus

status = FlightStatus()
status.arm()
status.set_state(FlightState.FLYING)   # True; False if already in that state

measurement = to_body_frame(decode_motion_frame(bytes(14)))
attitude = KalmanEstimator().update(measurement, 0.004)
correction = RatePID().compute(attitude, Setpoint(base_thrust=511), 0.004)

motors = MotorBank(writer=lambda pin, duty: print(pin, duty))
motors.write(clamp_mix(511, correction))
motors.kill()

constrain(950, 0, 800)  # 800
```

## What it does not do

The package has no hardware access. It does not talk to an I2C bus or an IMU,
drive PWM pins, or bring up a wireless access point: sensor frames come from
whatever callable or bytes you supply, and `MotorBank` only calls the
`writer(pin, duty)` you give it (without one it just records the duties).

`quadflight-server` serves only the web control page against its own
`FlightStatus` and `MotorBank`; it does not run the sensor polling, the
estimator, the `Commander` or the `FlightController`. Scheduling those loops
is left to the caller.