"""Quadcopter flight logic: IMU decoding, attitude estimation, PID control, motor mixing, flight sequencing and a web kill switch."""

__version__ = "0.1.0"