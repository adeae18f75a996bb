"""Main measurement loop: read sensors, raise alerts and refresh the display."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Protocol

from .aht20 import AHT20Error, AHT20Reading
from .alerts import AlertLevel, Readings, Settings, alert_level
from .bmp280 import CalibrationParams, convert_pressure, convert_temp
from .display import SSD1306
from .led_matrix import LedMatrix

logger = logging.getLogger(__name__)

LOOP_INTERVAL = 0.5

# Per level: indicator (red, green, blue), matrix colour (r, g, b) and
# beeps as (count, duration_ms, pause_ms); None means the buzzer stays off.
_ALERT_OUTPUTS: dict[
    AlertLevel,
    tuple[tuple[bool, bool, bool], tuple[int, int, int], Optional[tuple[int, int, int]]],
] = {
    AlertLevel.OK: ((False, True, False), (0, 16, 0), None),
    AlertLevel.ATTENTION: ((True, True, False), (16, 16, 0), (2, 200, 300)),
    AlertLevel.CRITICAL: ((True, False, False), (32, 0, 0), (4, 150, 200)),
}


class PressureSensor(Protocol):
    def read_raw(self) -> tuple[int, int]: ...

    def calibration_params(self) -> CalibrationParams: ...


class HumiditySensor(Protocol):
    def read(self) -> AHT20Reading: ...


def display_strings(
    bmp_temperature: float, aht_temperature: float, humidity: float, pressure: float
) -> tuple[str, str, str, str]:
    """Format the four values shown on the display."""
    return (
        f"{bmp_temperature:.1f}C",
        f"{aht_temperature:.1f}C",
        f"{humidity:.1f}%",
        f"{pressure:.1f}h",
    )


class Station:
    """Ties the sensors, the alert outputs and the display together.

    ``readings`` and ``settings`` are updated in place so that a web server
    holding the same objects always sees current values.
    """

    def __init__(
        self,
        bmp: PressureSensor,
        aht: HumiditySensor,
        display: SSD1306,
        matrix: LedMatrix,
        indicator: Callable[[bool, bool, bool], object],
        buzzer: Callable[[bool], object],
        settings: Settings | None = None,
        sleep: Callable[[float], object] = time.sleep,
    ) -> None:
        self.bmp = bmp
        self.aht = aht
        self.display = display
        self.matrix = matrix
        self.indicator = indicator
        self.buzzer = buzzer
        self.settings = settings if settings is not None else Settings()
        self.sleep = sleep
        self.readings = Readings()
        self.bmp_temperature = 0.0
        self.aht_reading = AHT20Reading(temperature=0.0, humidity=0.0)
        self._calibration: CalibrationParams | None = None

    @property
    def calibration(self) -> CalibrationParams:
        """The pressure sensor's calibration, read once on first use."""
        if self._calibration is None:
            self._calibration = self.bmp.calibration_params()
        return self._calibration

    def measure(self) -> Readings:
        """Read both sensors and update the shared readings.

        If the humidity sensor fails, the humidity keeps its previous value
        and the temperature average uses its last good temperature.
        """
        params = self.calibration
        raw_temp, raw_pressure = self.bmp.read_raw()
        self.bmp_temperature = convert_temp(raw_temp, params) / 100.0
        self.readings.pressure = (
            convert_pressure(raw_pressure, raw_temp, params) / 100.0
            + self.settings.offset_pres
        )
        try:
            reading = self.aht.read()
        except AHT20Error as error:
            logger.error("AHT20 read failed: %s", error)
        else:
            logger.debug(
                "AHT20 temperature %.2f C, humidity %.2f %%",
                reading.temperature,
                reading.humidity,
            )
            self.aht_reading = reading
            self.readings.humidity = reading.humidity + self.settings.offset_umi

        self.readings.temperature = (
            (self.bmp_temperature + self.aht_reading.temperature) / 2.0
            + self.settings.offset_temp
        )
        return self.readings

    def _beep(self, count: int, duration_ms: int, pause_ms: int) -> None:
        for _ in range(count):
            self.buzzer(True)
            self.sleep(duration_ms / 1000)
            self.buzzer(False)
            self.sleep(pause_ms / 1000)

    def check_alerts(self) -> AlertLevel:
        """Drive the RGB LED, buzzer and matrix for the current alert level."""
        level = alert_level(self.readings, self.settings)
        (red, green, blue), colour, beeps = _ALERT_OUTPUTS[level]
        self.indicator(red, green, blue)
        if beeps is None:
            self.buzzer(False)
        else:
            self._beep(*beeps)
        self.matrix.show(*colour, int(level))
        return level

    def draw(self) -> None:
        """Redraw the status screen and send it to the display."""
        bmp_text, aht_text, humidity_text, pressure_text = display_strings(
            self.bmp_temperature,
            self.aht_reading.temperature,
            self.aht_reading.humidity,
            self.readings.pressure,
        )
        screen = self.display
        screen.fill(False)
        screen.rect(3, 3, 122, 60, True, False)
        screen.line(3, 25, 123, 25, True)
        screen.line(3, 37, 123, 37, True)
        screen.draw_string("CEPEDI   TIC37", 8, 6)
        screen.draw_string("EMBARCATECH", 20, 16)
        screen.draw_string("BMP280  AHT20", 10, 28)
        screen.line(63, 25, 63, 60, True)
        screen.draw_string(bmp_text, 14, 41)
        screen.draw_string(pressure_text, 10, 52)
        screen.draw_string(aht_text, 73, 41)
        screen.draw_string(humidity_text, 73, 52)
        screen.send_data()

    def step(self) -> AlertLevel:
        """Run one cycle of the loop and return the alert level reached."""
        self.measure()
        level = self.check_alerts()
        self.draw()
        self.sleep(LOOP_INTERVAL)
        return level

    def run(self, iterations: int | None = None) -> None:
        """Run the loop ``iterations`` times, or forever when None."""
        if iterations is None:
            while True:
                self.step()
        for _ in range(iterations):
            self.step()