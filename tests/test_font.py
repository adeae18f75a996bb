import pytest

from meteostation.font import glyph


def test_letter_a_columns():
    assert glyph("A") == bytes((0x7C, 0x7E, 0x13, 0x11, 0x13, 0x7E, 0x7C, 0x00))


def test_space_is_blank():
    assert glyph(" ") == bytes(8)


def test_tilde_is_last_glyph():
    assert glyph("~") == bytes((0x02, 0x03, 0x01, 0x03, 0x02, 0x03, 0x01, 0x00))


@pytest.mark.parametrize("char", ["\n", "\x7f", "é", "\x00"])
def test_unprintable_renders_as_space(char):
    assert glyph(char) == glyph(" ")


def test_every_printable_glyph_has_eight_columns():
    sizes = {len(glyph(chr(code))) for code in range(0x20, 0x7F)}
    assert sizes == {8}


def test_printable_non_space_glyphs_are_not_blank():
    blank = [chr(c) for c in range(0x21, 0x7F) if glyph(chr(c)) == bytes(8)]
    assert blank == []


def test_distinct_letters_have_distinct_glyphs():
    letters = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    assert len({glyph(c) for c in letters}) == len(letters)


@pytest.mark.parametrize("bad", ["", "ab"])
def test_rejects_non_single_character(bad):
    with pytest.raises(ValueError):
        glyph(bad)