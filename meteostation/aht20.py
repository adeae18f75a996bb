"""Driver for the AHT20 temperature and humidity sensor."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Protocol

I2C_ADDRESS = 0x38
CMD_INIT = 0xBE
CMD_TRIGGER = 0xAC
CMD_RESET = 0xBA
STATUS_BUSY = 0x80
STATUS_CALIBRATED = 0x08

_POLL_ATTEMPTS = 10
_FULL_SCALE = 1048576.0


class I2CBus(Protocol):
    def write(self, address: int, data: bytes, nostop: bool = False) -> object: ...

    def read(self, address: int, length: int) -> bytes: ...


class AHT20Error(Exception):
    """The sensor did not produce a measurement."""


@dataclass(frozen=True)
class AHT20Reading:
    """Temperature in degrees Celsius and relative humidity in percent."""

    temperature: float
    humidity: float


def decode_measurement(buffer: bytes) -> AHT20Reading:
    """Decode the six bytes the sensor returns after a measurement."""
    if len(buffer) != 6:
        raise ValueError(f"expected 6 bytes, got {len(buffer)}")
    raw_humidity = (buffer[1] << 12) | (buffer[2] << 4) | (buffer[3] >> 4)
    raw_temp = ((buffer[3] & 0x0F) << 16) | (buffer[4] << 8) | buffer[5]
    return AHT20Reading(
        temperature=raw_temp * 200.0 / _FULL_SCALE - 50.0,
        humidity=raw_humidity * 100.0 / _FULL_SCALE,
    )


class AHT20:
    """An AHT20 sensor on an I2C bus."""

    def __init__(self, bus: I2CBus, sleep: Callable[[float], object] = time.sleep) -> None:
        self.bus = bus
        self.sleep = sleep

    def _status(self) -> int:
        return self.bus.read(I2C_ADDRESS, 1)[0]

    def init(self) -> bool:
        """Send the initialisation command; return whether the sensor reports calibration."""
        self.bus.write(I2C_ADDRESS, bytes((CMD_INIT, 0x08, 0x00)))
        self.sleep(0.05)
        for _ in range(_POLL_ATTEMPTS):
            if self._status() & STATUS_CALIBRATED:
                return True
            self.sleep(0.01)
        return False

    def read(self) -> AHT20Reading:
        """Trigger a measurement and return it; raise AHT20Error on failure."""
        self.bus.write(I2C_ADDRESS, bytes((CMD_TRIGGER, 0x33, 0x00)))
        status = STATUS_BUSY
        for _ in range(_POLL_ATTEMPTS):
            status = self._status()
            if not status & STATUS_BUSY:
                break
            self.sleep(0.01)
        if status & STATUS_BUSY:
            raise AHT20Error("sensor still busy")
        buffer = self.bus.read(I2C_ADDRESS, 6)
        if len(buffer) != 6:
            raise AHT20Error(f"short read: {len(buffer)} bytes")
        return decode_measurement(buffer)

    def reset(self) -> None:
        """Soft-reset the sensor and initialise it again."""
        self.bus.write(I2C_ADDRESS, bytes((CMD_RESET,)))
        self.sleep(0.02)
        self.init()

    def check(self) -> bool:
        """Return whether the sensor answers on the bus."""
        try:
            return len(self.bus.read(I2C_ADDRESS, 1)) == 1
        except OSError:
            return False