[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ppgsense"
version = "0.1.0"
description = "MAX30102 pulse-oximeter driver with heart-rate and SpO2 estimation from PPG samples"
requires-python = ">=3.10"
dependencies = []
keywords = ["max30102", "ppg", "pulse oximeter", "spo2", "heart rate", "fft", "i2c"]
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
    "Topic :: Scientific/Engineering :: Medical Science Apps.",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ppgsense"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
strict = true
