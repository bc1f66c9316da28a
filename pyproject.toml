[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "quadflight"
version = "0.1.0"
description = "Quadcopter flight logic: IMU decoding, Kalman and Mahony attitude estimation, cascaded PID, motor mixing, a flight state machine and a web kill switch."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "quadcopter",
    "drone",
    "flight-controller",
    "kalman-filter",
    "mahony-filter",
    "pid",
    "motor-mixing",
    "imu",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
quadflight-server = "quadflight.comms:main"

[tool.hatch.build.targets.wheel]
packages = ["quadflight"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
