"""Signal-processing primitives for photoplethysmography analysis.

Table-driven trigonometry, an integer square root, a radix-2 FFT and two
small recursive filters used to condition the raw sensor samples.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

FFT_N = 512
"""Number of points used for a spectrum."""

START_INDEX = 4
"""Bins below this index are treated as low-frequency noise and ignored."""

_PI = math.pi
_ENTRIES = 100
_STEP = _PI / 2 / _ENTRIES
_SIN_TABLE = tuple(math.sin(i * _STEP) for i in range(_ENTRIES + 1))

_UINT32 = 0xFFFFFFFF


def table_floor(x: float) -> float:
    """Round towards minus infinity the way the sensor firmware does.

    Any value with the sign bit set (including whole negative numbers and
    -0.0) is truncated and then lowered by one.
    """
    truncated = float(int(x))
    if math.copysign(1.0, x) < 0:
        return truncated - 1
    return truncated


def table_fmod(x: float, y: float) -> float:
    """Remainder of ``x / y`` built on :func:`table_floor`; ``y == 0`` gives 0."""
    if y == 0.0:
        return 0.0
    result = x - table_floor(x / y) * y
    if (x < 0.0) != (y < 0.0):
        result -= y
    return result


def xsin(x: float) -> float:
    """Sine from a quarter-wave table refined by a fourth-order Taylor step."""
    negative = x < 0
    if negative:
        x = -x
    x = table_fmod(x, 2 * _PI)
    if x > _PI:
        negative = not negative
        x -= _PI
    if x > _PI / 2:
        x = _PI - x
    n = int(x / _STEP)
    dx = x - n * _STEP
    if dx > _STEP / 2:
        n += 1
        dx -= _STEP
    sx = _SIN_TABLE[n]
    cx = _SIN_TABLE[_ENTRIES - n]
    value = (
        sx
        + dx * cx
        - (dx * dx) * sx / 2
        - (dx * dx * dx) * cx / 6
        + (dx * dx * dx * dx) * sx / 24
    )
    return -value if negative else value


def xcos(x: float) -> float:
    """Cosine computed as a phase-shifted :func:`xsin`."""
    return xsin(x + _PI / 2)


def _to_int32(value: int) -> int:
    value &= _UINT32
    return value - (1 << 32) if value & 0x80000000 else value


def isqrt32(a: int) -> int:
    """Bitwise integer square root of a 32-bit value.

    ``a`` is taken as a signed 32-bit integer, so for ``0 <= a < 2**31`` the
    result is ``floor(sqrt(a))``.
    """
    a = _to_int32(a)
    rem = root = 0
    for _ in range(16):
        root = (root << 1) & _UINT32
        rem = ((rem << 2) + (a >> 30)) & _UINT32
        a = _to_int32(a << 2)
        divisor = ((root << 1) + 1) & _UINT32
        if divisor <= rem:
            rem -= divisor
            root += 1
    return root


def _bit_reversed_order(n: int) -> list[int]:
    bits = n.bit_length() - 1
    return [int(format(i, f"0{bits}b")[::-1], 2) for i in range(n)]


def fft(samples: Sequence[complex]) -> list[complex]:
    """Radix-2 decimation-in-time FFT of ``samples``.

    The length must be a power of two of at least 2. Twiddle factors come
    from :func:`xcos` and :func:`xsin`. A new list of complex bins is
    returned in natural order.
    """
    n = len(samples)
    if n < 2 or n & (n - 1):
        raise ValueError(f"FFT length must be a power of two >= 2, got {n}")
    data = [complex(samples[i]) for i in _bit_reversed_order(n)]

    span = 2
    while span <= n:
        half = span // 2
        step = complex(xcos(_PI / half), -xsin(_PI / half))
        factor = complex(1.0, 0.0)
        for offset in range(half):
            for i in range(offset, n, span):
                partner = i + half
                t = data[partner] * factor
                data[partner] = data[i] - t
                data[i] = data[i] + t
            factor *= step
        span *= 2
    return data


def find_max_index(spectrum: Sequence[complex | float], count: int) -> int:
    """Index of the largest real part among bins ``START_INDEX .. count-1``.

    The first of equal maxima wins; if the range is empty ``START_INDEX``
    is returned.
    """
    if len(spectrum) <= START_INDEX:
        raise IndexError("spectrum is shorter than the low-frequency cut-off")
    return max(
        range(START_INDEX, min(count, len(spectrum))),
        key=lambda i: spectrum[i].real,
        default=START_INDEX,
    )


def _to_int16(value: float) -> int:
    wrapped = int(value) & 0xFFFF
    return wrapped - 0x10000 if wrapped & 0x8000 else wrapped


@dataclass
class DCFilter:
    """First-order DC-removal filter with output gain of 5, saturating to int16 width."""

    alpha: float
    state: float = 0.0

    def apply(self, value: int) -> int:
        """Feed one sample and return the filtered value."""
        new_state = value + self.state * self.alpha
        result = _to_int16(5 * (new_state - self.state))
        self.state = new_state
        return result


@dataclass
class ButterworthFilter:
    """First-order low-pass Butterworth filter with unity DC gain."""

    previous: float = 0.0
    current: float = 0.0

    _GAIN = 1.241106190967544882e-2
    _FEEDBACK = 0.97517787618064910582

    def apply(self, value: int) -> int:
        """Feed one sample and return the filtered value, truncated to int."""
        self.previous = self.current
        self.current = self._GAIN * value + self._FEEDBACK * self.previous
        return int(self.previous + self.current)