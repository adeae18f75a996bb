import pytest

from meteostation.display import Command, SSD1306
from meteostation.font import glyph


class RecordingBus:
    def __init__(self):
        self.writes = []

    def write(self, address, data):
        self.writes.append((address, bytes(data)))


@pytest.fixture
def bus():
    return RecordingBus()


@pytest.fixture
def display(bus):
    return SSD1306(bus, 128, 64, False, 0x3C)


def lit_pixels(display):
    return {
        (x, y)
        for x in range(display.width)
        for y in range(display.height)
        if display.get_pixel(x, y)
    }


def test_new_buffer_has_data_prefix_and_is_blank(display):
    buf = display.buffer
    assert len(buf) == 8 * 128 + 1
    assert buf[0] == 0x40
    assert not any(buf[1:])


def test_command_write_format(display, bus):
    display.command(Command.SET_DISP | 0x01)
    assert bus.writes == [(0x3C, bytes((0x80, 0xAF)))]
    assert display.buffer == bytes([0x40]) + bytes(8 * 128)
    assert lit_pixels(display) == set()


def test_config_sequence(display, bus):
    display.config()
    payloads = [data for _, data in bus.writes]
    assert all(len(p) == 2 and p[0] == 0x80 for p in payloads)
    assert payloads[0] == bytes((0x80, 0xAE))
    assert payloads[-1] == bytes((0x80, 0xAF))
    commands = [p[1] for p in payloads]
    mux = commands.index(Command.SET_MUX_RATIO)
    assert commands[mux + 1] == 63
    pump = commands.index(Command.SET_CHARGE_PUMP)
    assert commands[pump + 1] == 0x14
    assert display.buffer[0] == 0x40
    assert lit_pixels(display) == set()


def test_send_data_addresses_full_screen(display, bus):
    display.pixel(0, 0, True)
    display.send_data()
    commands = [data[1] for _, data in bus.writes[:6]]
    assert commands == [Command.SET_COL_ADDR, 0, 127, Command.SET_PAGE_ADDR, 0, 7]
    address, frame = bus.writes[-1]
    assert address == 0x3C
    assert frame == display.buffer
    assert frame[1] == 0x01


def test_pixel_set_and_clear_round_trip(display):
    display.pixel(10, 20, True)
    assert display.get_pixel(10, 20)
    assert lit_pixels(display) == {(10, 20)}
    display.pixel(10, 20, False)
    assert not display.get_pixel(10, 20)
    assert not any(display.buffer[1:])


def test_column_layout_is_vertical(display):
    display.pixel(1, 0, True)
    buf = display.buffer
    assert [i for i, b in enumerate(buf) if i and b] == [9]


@pytest.mark.parametrize("x, y", [(128, 0), (0, 64), (-1, 0), (0, -1)])
def test_pixel_out_of_range(display, x, y):
    with pytest.raises(IndexError):
        display.pixel(x, y, True)


def test_fill_sets_and_clears_everything(display):
    display.fill(True)
    assert all(b == 0xFF for b in display.buffer[1:])
    display.fill(False)
    assert not any(display.buffer[1:])


def test_rect_outline(display):
    display.rect(3, 3, 10, 6, True, False)
    lit = lit_pixels(display)
    assert {(3, 3), (12, 3), (3, 8), (12, 8)} <= lit
    assert (5, 5) not in lit
    assert all(x in (3, 12) or y in (3, 8) for x, y in lit)


def test_rect_filled(display):
    display.rect(3, 3, 10, 6, True, True)
    expected = {(x, y) for x in range(3, 13) for y in range(3, 9)}
    assert lit_pixels(display) == expected


def test_line_diagonal(display):
    display.line(0, 0, 5, 5, True)
    assert lit_pixels(display) == {(i, i) for i in range(6)}


def test_line_horizontal_matches_hline(bus):
    a = SSD1306(bus, 128, 64, False, 0x3C)
    b = SSD1306(bus, 128, 64, False, 0x3C)
    a.line(3, 25, 123, 25, True)
    b.hline(3, 123, 25, True)
    assert a.buffer == b.buffer


def test_line_reverse_direction(display):
    display.line(63, 60, 63, 25, True)
    assert lit_pixels(display) == {(63, y) for y in range(25, 61)}


def test_vline_inclusive(display):
    display.vline(7, 2, 9, True)
    assert lit_pixels(display) == {(7, y) for y in range(2, 10)}


def test_draw_char_matches_font(display):
    display.draw_char("A", 20, 16)
    columns = glyph("A")
    for i in range(8):
        for j in range(8):
            assert display.get_pixel(20 + i, 16 + j) == bool(columns[i] >> j & 1)


def test_draw_string_places_characters_side_by_side(bus, display):
    display.draw_string("AB", 10, 20)
    single = SSD1306(bus, 128, 64, False, 0x3C)
    single.draw_char("A", 10, 20)
    single.draw_char("B", 18, 20)
    assert display.buffer == single.buffer


def test_draw_string_wraps_at_right_edge(bus, display):
    display.draw_string("AB", 112, 0)
    expected = SSD1306(bus, 128, 64, False, 0x3C)
    expected.draw_char("A", 112, 0)
    expected.draw_char("B", 0, 8)
    assert display.buffer == expected.buffer


def test_draw_string_stops_at_bottom(bus, display):
    display.draw_string("AB", 0, 56)
    expected = SSD1306(bus, 128, 64, False, 0x3C)
    expected.draw_char("A", 0, 56)
    assert display.buffer == expected.buffer