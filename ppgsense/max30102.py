"""Driver for the MAX30102 pulse-oximetry and heart-rate sensor.

The sensor is reached through any object that satisfies :class:`I2CBus`;
its interrupt line is read through a callable that returns the pin level.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import IntEnum
from typing import Protocol, runtime_checkable

_LOG = logging.getLogger(__name__)

DEFAULT_ADDRESS = 0x57
"""Bus address the MAX30102 answers on."""

_RESET_COMMAND = 0x40
_SAMPLE_FLOOR = 10000
_FIFO_SAMPLE_SIZE = 6
_TEMPERATURE_STEP = 0.0625


class Register(IntEnum):
    """Register addresses of the MAX30102."""

    INTR_STATUS_1 = 0x00
    INTR_STATUS_2 = 0x01
    INTR_ENABLE_1 = 0x02
    INTR_ENABLE_2 = 0x03
    FIFO_WR_PTR = 0x04
    OVF_COUNTER = 0x05
    FIFO_RD_PTR = 0x06
    FIFO_DATA = 0x07
    FIFO_CONFIG = 0x08
    MODE_CONFIG = 0x09
    SPO2_CONFIG = 0x0A
    LED1_PA = 0x0C
    LED2_PA = 0x0D
    PILOT_PA = 0x10
    MULTI_LED_CTRL1 = 0x11
    MULTI_LED_CTRL2 = 0x12
    TEMP_INTR = 0x1F
    TEMP_FRAC = 0x20
    TEMP_CONFIG = 0x21
    PROX_INT_THRESH = 0x30
    REV_ID = 0xFE
    PART_ID = 0xFF


_CONFIG_SEQUENCE: tuple[tuple[Register, int], ...] = (
    (Register.INTR_ENABLE_1, 0xC0),
    (Register.INTR_ENABLE_2, 0x02),
    (Register.FIFO_WR_PTR, 0x00),
    (Register.OVF_COUNTER, 0x00),
    (Register.FIFO_RD_PTR, 0x00),
    (Register.FIFO_CONFIG, 0x0F),
    (Register.MODE_CONFIG, 0x03),
    (Register.SPO2_CONFIG, 0x27),
    (Register.LED1_PA, 0x32),
    (Register.LED2_PA, 0x32),
    (Register.PILOT_PA, 0x7F),
    (Register.TEMP_CONFIG, 0x01),
)


class Max30102Error(Exception):
    """Raised when the sensor cannot be reached or is in the wrong state."""


@runtime_checkable
class I2CBus(Protocol):
    """Minimal I2C master interface the driver talks through."""

    def write(self, address: int, data: bytes) -> None:
        """Send ``data`` to the device at ``address``; raise ``OSError`` on failure."""

    def write_read(self, address: int, register: int, length: int) -> bytes:
        """Write ``register`` then read ``length`` bytes back; raise ``OSError`` on failure."""


def _fifo_channel(high: int, middle: int, low: int) -> int:
    # Samples are accumulated in 16 bits, so the top bits of the first byte
    # fall off exactly as they do on the device.
    total = ((high << 14) & 0xFFFF) + ((middle << 6) & 0xFFFF) + (low >> 2)
    total &= 0xFFFF
    return 0 if total <= _SAMPLE_FLOOR else total


def decode_fifo_sample(data: bytes) -> tuple[int, int]:
    """Turn six FIFO bytes into a ``(red, infrared)`` pair.

    Values at or below 10000 are treated as no signal and reported as 0.
    """
    if len(data) != _FIFO_SAMPLE_SIZE:
        raise ValueError(
            f"a FIFO sample is {_FIFO_SAMPLE_SIZE} bytes, got {len(data)}"
        )
    red = _fifo_channel(data[0], data[1], data[2])
    infrared = _fifo_channel(data[3], data[4], data[5])
    return red, infrared


class Max30102:
    """A MAX30102 sensor on an I2C bus with an active-low interrupt line."""

    def __init__(
        self,
        bus: I2CBus,
        address: int,
        interrupt_pin: Callable[[], int],
    ) -> None:
        self.bus = bus
        self.address = address
        self.interrupt_pin = interrupt_pin

    def __repr__(self) -> str:
        return f"{type(self).__name__}(address=0x{self.address:02X})"

    def data_ready(self) -> bool:
        """True while the interrupt line is pulled low by the sensor."""
        return not self.interrupt_pin()

    def _write(self, register: int, value: int) -> None:
        _LOG.debug(
            "write 0x%02X to register 0x%02X of device 0x%02X",
            value,
            register,
            self.address,
        )
        try:
            self.bus.write(self.address, bytes((register, value)))
        except OSError as exc:
            raise Max30102Error(
                f"writing register 0x{register:02X} failed"
            ) from exc

    def _read(self, register: int, length: int = 1) -> bytes:
        try:
            data = bytes(self.bus.write_read(self.address, register, length))
        except OSError as exc:
            raise Max30102Error(
                f"reading register 0x{register:02X} failed"
            ) from exc
        if len(data) != length:
            raise Max30102Error(
                f"register 0x{register:02X} returned {len(data)} bytes, "
                f"expected {length}"
            )
        return data

    def reset(self) -> None:
        """Issue a soft reset."""
        self._write(Register.MODE_CONFIG, _RESET_COMMAND)

    def configure(self) -> None:
        """Reset the sensor and program it for SpO2 sampling."""
        self.reset()
        for register, value in _CONFIG_SEQUENCE:
            self._write(register, value)

    def _clear_interrupts(self) -> None:
        self._read(Register.INTR_STATUS_1)
        self._read(Register.INTR_STATUS_2)

    def read_fifo(self) -> tuple[int, int]:
        """Read one sample from the FIFO as ``(red, infrared)``."""
        self._clear_interrupts()
        return decode_fifo_sample(self._read(Register.FIFO_DATA, _FIFO_SAMPLE_SIZE))

    def read_temperature(self) -> float:
        """Read the die temperature in degrees Celsius.

        Raises :class:`Max30102Error` if the interrupt line is not asserted.
        """
        if not self.data_ready():
            raise Max30102Error("interrupt line is not asserted")
        self._clear_interrupts()
        integer = self._read(Register.TEMP_INTR)[0]
        fraction = self._read(Register.TEMP_FRAC)[0]
        return integer + fraction * _TEMPERATURE_STEP