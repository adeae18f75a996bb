import pytest

from meteostation.aht20 import (
    AHT20,
    AHT20Error,
    AHT20Reading,
    CMD_INIT,
    CMD_RESET,
    CMD_TRIGGER,
    I2C_ADDRESS,
    decode_measurement,
)


class FakeBus:
    def __init__(self, responses=(), fail=False):
        self.responses = list(responses)
        self.writes = []
        self.reads = []
        self.fail = fail

    def write(self, address, data, nostop=False):
        self.writes.append((address, bytes(data)))
        return len(data)

    def read(self, address, length):
        if self.fail:
            raise OSError("no device")
        self.reads.append((address, length))
        return self.responses.pop(0)


def make_buffer(raw_humidity, raw_temp):
    return bytes(
        (
            0x1C,
            (raw_humidity >> 12) & 0xFF,
            (raw_humidity >> 4) & 0xFF,
            ((raw_humidity & 0x0F) << 4) | ((raw_temp >> 16) & 0x0F),
            (raw_temp >> 8) & 0xFF,
            raw_temp & 0xFF,
        )
    )


def test_decode_zero_temperature_is_minus_fifty():
    reading = decode_measurement(make_buffer(0, 0))
    assert reading.temperature == -50.0
    assert reading.humidity == 0.0


@pytest.mark.parametrize("raw_h,raw_t", [(1, 2), (0x12345, 0x6789A), (0xFFFFF, 0xFFFFF)])
def test_decode_recovers_raw_values(raw_h, raw_t):
    reading = decode_measurement(make_buffer(raw_h, raw_t))
    assert round(reading.humidity * 1048576 / 100) == raw_h
    assert round((reading.temperature + 50.0) * 1048576 / 200) == raw_t


def test_decode_half_scale_humidity():
    reading = decode_measurement(make_buffer(0x80000, 0x80000))
    assert reading.humidity == pytest.approx(50.0)
    assert reading.temperature == pytest.approx(50.0)


def test_decode_rejects_wrong_length():
    with pytest.raises(ValueError):
        decode_measurement(b"\x00\x00\x00")


def test_init_sends_command_and_reports_calibration():
    bus = FakeBus([b"\x08"])
    sleeps = []
    assert AHT20(bus, sleeps.append).init() is True
    assert bus.writes == [(I2C_ADDRESS, bytes((CMD_INIT, 0x08, 0x00)))]
    assert sleeps == [0.05]


def test_init_gives_up_after_ten_polls():
    bus = FakeBus([b"\x00"] * 10)
    assert AHT20(bus, lambda s: None).init() is False
    assert len(bus.reads) == 10


def test_read_returns_decoded_measurement():
    buffer = make_buffer(0x40000, 0x60000)
    bus = FakeBus([b"\x80", b"\x1C", buffer])
    reading = AHT20(bus, lambda s: None).read()
    assert reading == decode_measurement(buffer)
    assert bus.writes[0] == (I2C_ADDRESS, bytes((CMD_TRIGGER, 0x33, 0x00)))
    assert bus.reads[-1] == (I2C_ADDRESS, 6)


def test_read_raises_while_busy():
    bus = FakeBus([b"\x80"] * 10)
    with pytest.raises(AHT20Error):
        AHT20(bus, lambda s: None).read()


def test_read_raises_on_short_read():
    bus = FakeBus([b"\x00", b"\x00\x00"])
    with pytest.raises(AHT20Error):
        AHT20(bus, lambda s: None).read()


def test_reset_writes_reset_then_init():
    bus = FakeBus([b"\x08"])
    AHT20(bus, lambda s: None).reset()
    assert [data[0] for _, data in bus.writes] == [CMD_RESET, CMD_INIT]


def test_check_reports_presence():
    assert AHT20(FakeBus([b"\x00"]), lambda s: None).check() is True
    assert AHT20(FakeBus([b""]), lambda s: None).check() is False
    assert AHT20(FakeBus(fail=True), lambda s: None).check() is False


def test_reading_is_immutable():
    reading = AHT20Reading(temperature=1.0, humidity=2.0)
    with pytest.raises(AttributeError):
        reading.temperature = 3.0
    assert (reading.temperature, reading.humidity) == (1.0, 2.0)
    assert reading == AHT20Reading(temperature=1.0, humidity=2.0)