# ppgsense

ppgsense reads photoplethysmography (PPG) samples from a MAX30102
pulse-oximeter sensor. From those samples it estimates heart rate and
blood-oxygen saturation (SpO2).

## Modules

### `ppgsense.algorithm`

Signal-processing building blocks:

- `xsin` and `xcos`: table-driven sine and cosine.
- `table_floor` and `table_fmod`: the floor and remainder helpers that
  `xsin` and `xcos` rely on.
- `isqrt32`: a bitwise integer square root of a 32-bit value.
- `fft`: a radix-2 FFT. Its input length must be a power of two and at least 2.
  Otherwise it raises `ValueError`. It returns a new list of complex bins.
- `find_max_index(spectrum, count)`: returns the index of the largest real
  part among bins `START_INDEX` (4) up to `count - 1`.
- `DCFilter(alpha)` and `ButterworthFilter()`: streaming filters. Each one
  takes one sample per call to `apply`.
- `FFT_N`: the window size, 512.

### `ppgsense.max30102`

The sensor driver.

A `Max30102` object needs three things:

- an I2C bus: any object with the two methods of the `I2CBus` protocol,
  `write(address, data)` and `write_read(address, register, length)`.
- the device address. `DEFAULT_ADDRESS` is `0x57`.
- an interrupt-pin callable that returns the current level of the sensor's
  interrupt line. The line is active-low, so `data_ready()` is true while the
  callable returns 0.

It provides these methods:

- `reset()`
- `configure()`: resets the sensor, then programs it for SpO2 sampling.
- `read_fifo()`: returns `(red, infrared)`.
- `read_temperature()`: returns degrees Celsius. It raises `Max30102Error`
  unless the interrupt line is asserted.

When the bus raises `OSError`, or a read returns the wrong number of bytes, the
driver raises `Max30102Error`.

`decode_fifo_sample` turns six raw FIFO bytes into a `(red, infrared)` pair.
Values at or below 10000 are reported as 0. `Register` lists the register
addresses.

### `ppgsense.blood`

Estimation:

- `collect_samples(sensor)` waits on the data-ready line and returns a full
  window of 512 red and 512 infrared samples. Each raw sample is logged at
  DEBUG level on the `ppgsense.blood` logger.
- `analyse(red, ir)` turns one window into a `BloodReading` with these fields:
  - `heart`: beats per minute.
  - `spo2`: percent. It is NaN when the signal has no AC component.
  - `state`
- `measure(sensor)` combines the two steps above, then adjusts the result:
  - SpO2 is capped at 99.99.
  - If no body is detected, the reading gets SpO2 0 and state
    `BloodState.ERROR`.

## Installation

```
pip install ppgsense
```

## Usage

```python
from ppgsense.max30102 import Max30102, DEFAULT_ADDRESS
from ppgsense.blood import measure


class MyBus:
    def write(self, address, data):
        ...  # send `data` to the device at `address`

    def write_read(self, address, register, length):
        ...  # write `register`, then return `length` bytes read back


def interrupt_level():
    ...  # return 0 or 1, the current level of the interrupt line


sensor = Max30102(MyBus(), DEFAULT_ADDRESS, interrupt_level)
sensor.configure()

reading = measure(sensor)
print(reading.heart, reading.spo2, reading.state)
```

If you already have sample data, pass it to `analyse` directly. Each sequence
must hold exactly 512 samples; otherwise `analyse` raises `ValueError`.

```python
from ppgsense.blood import analyse

reading = analyse(red_samples, ir_samples)
```

## What it does not do

ppgsense does not open or drive an I2C bus, and it does not read GPIO pins. You
supply both, through the bus object and the interrupt callable. It has no
command-line program and no continuous monitoring loop: call `measure` as often
as you need readings. It does not store or display results.

## Running the tests

```
pip install "ppgsense[test]"
pytest
```