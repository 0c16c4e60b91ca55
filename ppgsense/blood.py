"""Heart-rate and blood-oxygen estimation from MAX30102 samples."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from ppgsense.algorithm import FFT_N, fft, find_max_index
from ppgsense.max30102 import Max30102

_LOG = logging.getLogger(__name__)

_PEAK_SEARCH_BINS = 30
_SAMPLE_RATE = 100.0
_HEART_OFFSET = 20
_NO_BODY_HEART = 66
_SPO2_CEILING = 99.99
_BOX_WIDTH = 8


class BloodState(Enum):
    """Outcome of a measurement."""

    NORMAL = "normal"
    ERROR = "error"


@dataclass(frozen=True)
class BloodReading:
    """Heart rate in beats per minute and oxygen saturation in percent."""

    heart: int
    spo2: float
    state: BloodState = BloodState.NORMAL


def collect_samples(sensor: Max30102) -> tuple[list[int], list[int]]:
    """Read a full window of ``FFT_N`` samples as ``(red, infrared)`` lists.

    Waits for the sensor's data-ready line; samples that are pending once
    the window is full are read and discarded.
    """
    red: list[int] = []
    infrared: list[int] = []
    while len(red) < FFT_N:
        while sensor.data_ready():
            red_value, ir_value = sensor.read_fifo()
            if len(red) < FFT_N:
                _LOG.debug("PPG_RAW,%u,%u,%u", len(red), red_value, ir_value)
                red.append(red_value)
                infrared.append(ir_value)
    return red, infrared


def _smooth(signal: list[float]) -> list[float]:
    """Recursive 1-2-1 smoothing followed by an 8-point box average."""
    weighted = [signal[0]]
    previous = signal[0]
    for current, following in zip(signal[1:-1], signal[2:]):
        previous = (previous + 2 * current + following) / 4.0
        weighted.append(previous)
    weighted.append(signal[-1])

    count = len(weighted) - _BOX_WIDTH
    boxed = [sum(weighted[i : i + _BOX_WIDTH]) / _BOX_WIDTH for i in range(count)]
    return boxed + weighted[count:]


def analyse(red: Sequence[float], ir: Sequence[float]) -> BloodReading:
    """Estimate heart rate and SpO2 from one window of red and infrared samples.

    Both sequences must hold exactly ``FFT_N`` samples. The SpO2 value is
    NaN when the signal carries no AC component.
    """
    if len(red) != FFT_N or len(ir) != FFT_N:
        raise ValueError(
            f"expected {FFT_N} red and infrared samples, got {len(red)} and {len(ir)}"
        )
    dc_red = sum(red) / FFT_N
    dc_ir = sum(ir) / FFT_N

    ir_bins = fft(_smooth([value - dc_ir for value in ir]))
    # Both the peak search and the red AC sum run on the infrared magnitudes.
    magnitudes = [abs(b) for b in ir_bins]

    ac_red = sum(magnitudes[1:])
    ac_ir = sum(b.real for b in ir_bins[1:])

    peak = find_max_index(magnitudes, _PEAK_SEARCH_BINS)
    heart = int(60.0 * ((_SAMPLE_RATE * peak) / FFT_N) + _HEART_OFFSET)

    denominator = ac_red * dc_ir
    ratio = math.nan if denominator == 0 else (ac_ir * dc_red) / denominator
    spo2 = -45.060 * ratio * ratio + 30.354 * ratio + 94.845
    return BloodReading(heart, spo2)


def measure(sensor: Max30102) -> BloodReading:
    """Collect one window from ``sensor`` and report heart rate and SpO2.

    SpO2 is capped at 99.99; when no body is detected the reading has
    SpO2 0 and state :attr:`BloodState.ERROR`.
    """
    reading = analyse(*collect_samples(sensor))
    spo2 = _SPO2_CEILING if reading.spo2 > _SPO2_CEILING else reading.spo2
    if math.isnan(spo2) or reading.heart == _NO_BODY_HEART:
        return BloodReading(reading.heart, 0.0, BloodState.ERROR)
    return BloodReading(reading.heart, spo2)