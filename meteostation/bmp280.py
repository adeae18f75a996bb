"""Driver and fixed-point compensation for the BMP280 pressure sensor."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Protocol

ADDRESS = 0x77

REG_CONFIG = 0xF5
REG_CTRL_MEAS = 0xF4
REG_RESET = 0xE0

REG_TEMP_XLSB = 0xFC
REG_TEMP_LSB = 0xFB
REG_TEMP_MSB = 0xFA

REG_PRESSURE_XLSB = 0xF9
REG_PRESSURE_LSB = 0xF8
REG_PRESSURE_MSB = 0xF7

REG_DIG_T1_LSB = 0x88

NUM_CALIB_PARAMS = 24

_CALIB_FORMAT = "<HhhHhhhhhhhh"


class I2CBus(Protocol):
    def write(self, address: int, data: bytes, nostop: bool = False) -> object: ...

    def read(self, address: int, length: int) -> bytes: ...


def _i32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def _u32(value: int) -> int:
    return value & 0xFFFFFFFF


@dataclass(frozen=True)
class CalibrationParams:
    """Factory trimming values stored in the sensor."""

    dig_t1: int
    dig_t2: int
    dig_t3: int
    dig_p1: int
    dig_p2: int
    dig_p3: int
    dig_p4: int
    dig_p5: int
    dig_p6: int
    dig_p7: int
    dig_p8: int
    dig_p9: int

    @classmethod
    def from_bytes(cls, data: bytes) -> CalibrationParams:
        """Decode the 24 little-endian calibration bytes."""
        if len(data) != NUM_CALIB_PARAMS:
            raise ValueError(f"expected {NUM_CALIB_PARAMS} bytes, got {len(data)}")
        return cls(*struct.unpack(_CALIB_FORMAT, bytes(data)))


def fine_temperature(raw_temp: int, params: CalibrationParams) -> int:
    """Return the fine-resolution temperature shared by both compensations."""
    var1 = _i32(((raw_temp >> 3) - (params.dig_t1 << 1)) * params.dig_t2) >> 11
    delta = (raw_temp >> 4) - params.dig_t1
    var2 = _i32((_i32(delta * delta) >> 12) * params.dig_t3) >> 14
    return _i32(var1 + var2)


def convert_temp(raw_temp: int, params: CalibrationParams) -> int:
    """Return the temperature in hundredths of a degree Celsius."""
    t_fine = fine_temperature(raw_temp, params)
    return _i32(t_fine * 5 + 128) >> 8


def convert_pressure(raw_pressure: int, raw_temp: int, params: CalibrationParams) -> int:
    """Return the pressure in pascals, using 32-bit fixed-point arithmetic."""
    t_fine = fine_temperature(raw_temp, params)

    var1 = (t_fine >> 1) - 64000
    square = _i32((var1 >> 2) * (var1 >> 2))
    var2 = _i32((square >> 11) * params.dig_p6)
    var2 = _i32(var2 + _i32(_i32(var1 * params.dig_p5) << 1))
    var2 = _i32((var2 >> 2) + _i32(params.dig_p4 << 16))
    part_a = _i32(params.dig_p3 * (square >> 13)) >> 3
    part_b = _i32(params.dig_p2 * var1) >> 1
    var1 = _i32(part_a + part_b) >> 18
    var1 = _i32((32768 + var1) * params.dig_p1) >> 15
    if var1 == 0:
        return 0

    converted = _u32(_u32(_u32(1048576 - raw_pressure) - (var2 >> 12)) * 3125)
    divisor = _u32(var1)
    if converted < 0x80000000:
        converted = _u32(converted << 1) // divisor
    else:
        converted = _u32((converted // divisor) * 2)

    var1 = _i32(
        params.dig_p9 * _i32(_u32((converted >> 3) * (converted >> 3)) >> 13)
    ) >> 12
    var2 = _i32(_i32(converted >> 2) * params.dig_p8) >> 13
    converted = _u32(_i32(converted) + ((var1 + var2 + params.dig_p7) >> 4))
    return _i32(converted)


def decode_raw(buffer: bytes) -> tuple[int, int]:
    """Split the six data registers into ``(raw_temp, raw_pressure)``."""
    if len(buffer) != 6:
        raise ValueError(f"expected 6 bytes, got {len(buffer)}")
    pressure = (buffer[0] << 12) | (buffer[1] << 4) | (buffer[2] >> 4)
    temp = (buffer[3] << 12) | (buffer[4] << 4) | (buffer[5] >> 4)
    return temp, pressure


class BMP280:
    """A BMP280 sensor on an I2C bus."""

    def __init__(self, bus: I2CBus) -> None:
        self.bus = bus

    def init(self) -> None:
        """Configure filtering, oversampling and normal mode."""
        config = ((0x04 << 5) | (0x05 << 2)) & 0xFC
        self.bus.write(ADDRESS, bytes((REG_CONFIG, config)))
        ctrl_meas = (0x01 << 5) | (0x03 << 2) | 0x03
        self.bus.write(ADDRESS, bytes((REG_CTRL_MEAS, ctrl_meas)))

    def read_raw(self) -> tuple[int, int]:
        """Read the uncompensated ``(raw_temp, raw_pressure)``."""
        self.bus.write(ADDRESS, bytes((REG_PRESSURE_MSB,)), nostop=True)
        return decode_raw(self.bus.read(ADDRESS, 6))

    def reset(self) -> None:
        """Issue a soft reset."""
        self.bus.write(ADDRESS, bytes((REG_RESET, 0xB6)))

    def calibration_params(self) -> CalibrationParams:
        """Read the factory calibration values."""
        self.bus.write(ADDRESS, bytes((REG_DIG_T1_LSB,)), nostop=True)
        return CalibrationParams.from_bytes(self.bus.read(ADDRESS, NUM_CALIB_PARAMS))