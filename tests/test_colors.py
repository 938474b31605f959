import pytest

from vtterm.colors import (
    AnsiColorScheme,
    ColorScheme,
    RGBColor,
    XColorsTable,
    hash_color_name,
)


def test_hash_joins_grey_and_gray():
    assert hash_color_name("grey") == hash_color_name("gray")


def test_hash_ignores_spaces_and_case():
    assert hash_color_name("dark red") == hash_color_name("DarkRed")


def test_hash_of_empty_name_is_zero():
    assert hash_color_name("") == 0


def test_hash_stays_32_bit():
    assert 0 <= hash_color_name("a very long color name indeed") < 2**32


def test_sharp_hex_color():
    assert XColorsTable().look_up_color("#ff8000") == RGBColor(255, 128, 0)


def test_rgb_prefix_matches_sharp_form():
    table = XColorsTable()
    assert table.look_up_color("rgb:ff/80/00") == table.look_up_color("#ff8000")


def test_sixteen_bit_forms_are_shifted():
    table = XColorsTable()
    expected = table.look_up_color("#ff8000")
    assert table.look_up_color("#ffff80800000") == expected
    assert table.look_up_color("rgb:ffff/8080/0000") == expected


def test_cmyk_white_and_cmy_black():
    table = XColorsTable()
    assert table.look_up_color("cmyk:0/0/0/0") == RGBColor(255, 255, 255)
    assert table.look_up_color("cmy:1/1/1") == RGBColor(0, 0, 0)


def test_full_key_equals_full_cmy():
    table = XColorsTable()
    assert table.look_up_color("cmyk:0/0/0/1") == table.look_up_color("cmy:1.0/1.0/1.0")


def test_named_lookup_is_case_insensitive():
    red = RGBColor(250, 1, 2)
    table = XColorsTable.from_names({"red": red, "blue": RGBColor(0, 0, 9)})
    assert table.look_up_color("RED") is red


def test_rgb_text_table():
    table = XColorsTable.from_rgb_text("! comment\n  1   2   3\t\tslate grey\n")
    assert len(table) == 1
    assert table.look_up_color("SlateGray") == RGBColor(1, 2, 3)


def test_unknown_name_raises():
    table = XColorsTable.from_names({"red": RGBColor(255, 0, 0)})
    with pytest.raises(LookupError):
        table.look_up_color("chartreuse")


def test_empty_table_raises():
    with pytest.raises(LookupError):
        XColorsTable().look_up_color("red")


def test_cmyk_out_of_range_falls_through():
    with pytest.raises(LookupError):
        XColorsTable().look_up_color("cmyk:2/0/0/0")


def test_wrong_length_hex_is_not_numeric():
    with pytest.raises(LookupError):
        XColorsTable().look_up_color("#ff80")


def test_scheme_equality_ignores_name():
    first = ColorScheme(name="one", text_fore_color=RGBColor(1, 2, 3))
    second = ColorScheme(name="two", text_fore_color=RGBColor(1, 2, 3))
    assert first == second


def test_scheme_equality_compares_ansi_colors():
    first = ColorScheme(ansi_colors=AnsiColorScheme(red=RGBColor(9, 0, 0)))
    second = ColorScheme()
    assert not first == second