import math

import pytest

from ppgsense.algorithm import (
    FFT_N,
    START_INDEX,
    ButterworthFilter,
    DCFilter,
    fft,
    find_max_index,
    isqrt32,
    table_floor,
    table_fmod,
    xcos,
    xsin,
)


@pytest.mark.parametrize("x", [0.5, 2.5, 7.9, 1234.25, -0.5, -2.5, -7.9])
def test_table_floor_matches_floor_for_fractions(x):
    assert table_floor(x) == math.floor(x)


@pytest.mark.parametrize("x", [-1.0, -2.0, -10.0])
def test_table_floor_lowers_negative_whole_numbers(x):
    assert table_floor(x) == math.floor(x) - 1


@pytest.mark.parametrize("x", [0.0, 3.0, 42.0])
def test_table_floor_keeps_positive_whole_numbers(x):
    assert table_floor(x) == x


def test_table_fmod_zero_divisor():
    assert table_fmod(5.0, 0.0) == 0.0


@pytest.mark.parametrize("x,y", [(7.5, 2.0), (10.0, 3.0), (20.0, 2 * math.pi), (0.3, 1.0)])
def test_table_fmod_positive_matches_fmod(x, y):
    assert table_fmod(x, y) == pytest.approx(math.fmod(x, y))


@pytest.mark.parametrize("x", [i * 0.173 for i in range(-80, 81)])
def test_xsin_close_to_sin(x):
    assert xsin(x) == pytest.approx(math.sin(x), abs=1e-9)


@pytest.mark.parametrize("x", [i * 0.311 for i in range(-40, 41)])
def test_xcos_close_to_cos(x):
    assert xcos(x) == pytest.approx(math.cos(x), abs=1e-9)


@pytest.mark.parametrize("x", [0.1, 1.0, 2.0, 4.0, 10.0])
def test_xsin_is_odd(x):
    assert xsin(-x) == pytest.approx(-xsin(x))


def test_xsin_quarter_wave_points():
    assert xsin(0.0) == 0.0
    assert xsin(math.pi / 2) == pytest.approx(1.0, abs=1e-12)


def test_fft_impulse_is_flat():
    samples = [1.0] + [0.0] * (FFT_N - 1)
    spectrum = fft(samples)
    assert len(spectrum) == FFT_N
    for value in spectrum:
        assert value.real == pytest.approx(1.0)
        assert value.imag == pytest.approx(0.0, abs=1e-12)


def test_fft_constant_concentrates_in_bin_zero():
    spectrum = fft([3.0] * 16)
    assert spectrum[0] == pytest.approx(3.0 * 16)
    for value in spectrum[1:]:
        assert abs(value) == pytest.approx(0.0, abs=1e-9)


def test_fft_cosine_peaks_at_its_bin():
    n, k = 64, 5
    samples = [math.cos(2 * math.pi * k * i / n) for i in range(n)]
    spectrum = fft(samples)
    for bin_index, value in enumerate(spectrum):
        expected = n / 2 if bin_index in (k, n - k) else 0.0
        assert abs(value) == pytest.approx(expected, abs=1e-6)


def test_fft_parseval():
    samples = [math.sin(i * 0.37) + 0.5 * math.cos(i * 1.3) for i in range(128)]
    spectrum = fft(samples)
    energy_time = sum(x * x for x in samples)
    energy_freq = sum(abs(v) ** 2 for v in spectrum) / len(samples)
    assert energy_freq == pytest.approx(energy_time, rel=1e-9)


def test_fft_is_linear_and_leaves_input_alone():
    a = [float(i % 5) for i in range(32)]
    b = [float((i * 3) % 7) for i in range(32)]
    a_copy = list(a)
    combined = fft([x + 2 * y for x, y in zip(a, b)])
    fa, fb = fft(a), fft(b)
    assert a == a_copy
    for c, x, y in zip(combined, fa, fb):
        assert c == pytest.approx(x + 2 * y, abs=1e-9)


@pytest.mark.parametrize("length", [0, 1, 3, 100])
def test_fft_rejects_bad_length(length):
    with pytest.raises(ValueError):
        fft([0.0] * length)


def test_find_max_index_ignores_low_bins():
    spectrum = [1000.0, 900.0, 800.0, 700.0, 1.0, 2.0, 9.0, 3.0]
    assert find_max_index(spectrum, len(spectrum)) == 6


def test_find_max_index_respects_count():
    spectrum = [0.0] * 10
    spectrum[5] = 3.0
    spectrum[8] = 7.0
    assert find_max_index(spectrum, 7) == 5
    assert find_max_index(spectrum, 10) == 8


def test_find_max_index_first_tie_wins_and_uses_real_part():
    spectrum = [complex(0, 0)] * 10
    spectrum[6] = complex(4, 100)
    spectrum[7] = complex(4, 0)
    assert find_max_index(spectrum, 10) == 6


def test_find_max_index_empty_range_gives_start():
    assert find_max_index([5.0] * 8, START_INDEX) == START_INDEX


def test_find_max_index_short_spectrum():
    with pytest.raises(IndexError):
        find_max_index([1.0, 2.0], 2)


def test_dc_filter_first_sample_is_scaled():
    flt = DCFilter(alpha=0.95)
    assert flt.apply(100) == 500


def test_dc_filter_removes_constant_offset():
    flt = DCFilter(alpha=0.9)
    outputs = [flt.apply(1000) for _ in range(400)]
    assert abs(outputs[-1]) <= 1
    assert all(abs(later) <= abs(earlier) for earlier, later in zip(outputs, outputs[1:]))


def test_dc_filter_output_fits_int16():
    flt = DCFilter(alpha=0.5)
    for value in (20000, -20000, 32767, 100000):
        assert -32768 <= flt.apply(value) <= 32767


def test_butterworth_zero_input():
    flt = ButterworthFilter()
    assert [flt.apply(0) for _ in range(5)] == [0] * 5


def test_butterworth_unity_dc_gain():
    flt = ButterworthFilter()
    output = 0
    for _ in range(2000):
        output = flt.apply(1000)
    assert abs(output - 1000) <= 1


def test_butterworth_step_response_rises_monotonically():
    flt = ButterworthFilter()
    outputs = [flt.apply(1000) for _ in range(200)]
    assert all(b >= a for a, b in zip(outputs, outputs[1:]))
    assert outputs[-1] <= 1000