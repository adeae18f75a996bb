# meteostation

The logic of a small weather station as a plain Python library. It decodes
temperature and pressure from a BMP280 and temperature and humidity from an
AHT20, draws the values into a 128×64 SSD1306 frame buffer, signals an alert
level through a 5×5 WS2812 LED matrix, an RGB indicator and a buzzer, and
serves a web dashboard where the alert limits and sensor offsets can be
changed.

All hardware access goes through objects you pass in, so every part runs on
a desktop or in tests with fakes:

* the display bus needs `write(address, data)`;
* the sensor buses need `write(address, data, nostop=False)` and
  `read(address, length) -> bytes`;
* the LED matrix takes a callable that pushes one 32-bit word;
* the station takes an `indicator(red, green, blue)` callable, a
  `buzzer(on)` callable and a `sleep(seconds)` function.

The package has no dependencies outside the standard library.

## Modules

| Module | Purpose |
| --- | --- |
| `meteostation.font` | 8×8 bitmap font; `glyph(char)` returns the eight column bytes of a character (bit 0 is the top row). Characters outside `' '`…`'~'` come back blank. |
| `meteostation.display` | `SSD1306`: frame buffer with `pixel`, `get_pixel`, `fill`, `rect`, `line`, `hline`, `vline`, `draw_char`, `draw_string`, plus `config`, `command` and `send_data` for the bus. `Command` holds the controller opcodes. Pixels outside the screen raise `IndexError`. |
| `meteostation.led_matrix` | `urgb_u32` packs a colour into a GRB word, `pattern_words` gives the 25 words of a pattern, `LedMatrix.show` pushes them. Patterns: 0 square, 1 exclamation mark, 2 cross. |
| `meteostation.aht20` | `AHT20` driver (`init`, `read`, `reset`, `check`), `decode_measurement` and the `AHT20Reading` result. A failed measurement raises `AHT20Error`. |
| `meteostation.bmp280` | `BMP280` driver (`init`, `read_raw`, `reset`, `calibration_params`), `CalibrationParams.from_bytes`, `decode_raw` and the 32-bit fixed-point `fine_temperature`, `convert_temp` and `convert_pressure`. |
| `meteostation.alerts` | `Settings`, `Readings`, `classify`, `alert_level` and the `AlertLevel` enum. |
| `meteostation.web` | `RequestAssembler`, `render_index`, `render_data`, `parse_limits`, `handle_request` and the asyncio `WeatherServer`. |
| `meteostation.station` | `Station`, one measurement loop tying sensors, display and alerts together, and `display_strings`. |

## Alert levels

Each quantity is checked against its range `[min, max]`, with a warning
margin of 10 % of the range inside each edge:

* outside the range: `AlertLevel.CRITICAL`;
* inside, but within the margin: `AlertLevel.ATTENTION`;
* otherwise: `AlertLevel.OK`.

`alert_level` returns the worst of temperature, humidity and pressure. The
default `Settings` are 10–40 °C, 30–80 % and 900–1020 hPa, with all offsets
at zero.

```python
from meteostation.alerts import Readings, Settings, alert_level

print(alert_level(Readings(temperature=25.0, humidity=55.0, pressure=960.0), Settings()))
```

`Station.check_alerts` turns the level into outputs:

| Level | Indicator | Buzzer | Matrix |
| --- | --- | --- | --- |
| OK | green | off | green square |
| ATTENTION | red + green | 2 beeps of 200 ms, 300 ms apart | yellow exclamation mark |
| CRITICAL | red | 4 beeps of 150 ms, 200 ms apart | red cross |

## Sensor decoding

The decoding functions work on raw bytes, without any bus:

```python
from meteostation.aht20 import decode_measurement

reading = decode_measurement(bytes([0x1C, 0x80, 0x00, 0x08, 0x00, 0x00]))
print(reading.temperature, reading.humidity)  # 50.0 50.0
```

`CalibrationParams.from_bytes` takes the 24 little-endian calibration bytes
of the BMP280. `convert_temp` returns hundredths of a degree Celsius and
`convert_pressure` returns pascals.

## The station loop

`Station(bmp, aht, display, matrix, indicator, buzzer, settings, sleep)`
reads the BMP280 calibration once, then each `step()`:

1. `measure()`: pressure in hPa plus the pressure offset; humidity from the
   AHT20 plus the humidity offset; temperature as the mean of both sensors
   plus the temperature offset. If the AHT20 fails, the error is logged and
   its last good values are kept.
2. `check_alerts()`: drives indicator, buzzer and matrix.
3. `draw()`: redraws the status screen and sends it to the display.
4. sleeps 0.5 s.

`run(iterations)` repeats `step()`, forever when `iterations` is `None`.
`station.readings` and `station.settings` are updated in place.

## Web dashboard

`WeatherServer` answers one request per connection:

* `GET /`: the HTML dashboard, with the current limits and offsets in its
  form and live charts of the last 20 samples (the page loads Chart.js from
  a CDN);
* `GET /data`: the readings as JSON, for example
  `{"temp":23.50,"umi":55.10,"pres":1009.30}`;
* `POST /set-limits`: a form-encoded body with any of `tempMin`, `tempMax`,
  `umiMin`, `umiMax`, `presMin`, `presMax`, `offSetTemp`, `offSetUmi`,
  `offSetPres`; commas are accepted as decimal separators, and missing or
  unreadable values keep their current setting.

A request that would reach 2048 bytes is dropped, and other paths get the
connection closed without a response.

```python
import asyncio

from meteostation.alerts import Readings, Settings
from meteostation.web import WeatherServer


async def main() -> None:
    server = await WeatherServer(Readings(), Settings()).serve("0.0.0.0", 8080)
    async with server:
        await server.serve_forever()


asyncio.run(main())
```

Share the same `Settings` and `Readings` objects with a `Station` (assign
`station.readings` to the server's) so the dashboard shows what the station
measures and the station obeys the limits set in the browser.

## What the package does not do

* It has no command-line program; you assemble a `Station` and a
  `WeatherServer` yourself.
* It contains no I²C, GPIO, PWM or LED-strip drivers and does not join a
  wireless network: those are the objects you pass in.
* The server has no error pages and speaks only the three routes above.

## Running the tests

Install the `test` extra and run `pytest` from the project directory.