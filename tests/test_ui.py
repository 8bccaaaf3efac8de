import io

import pytest

from immichgo.ui import confirm_yes_no, format_bytes


@pytest.mark.parametrize("size", [0, 1, 512, 1023])
def test_small_sizes_are_plain_bytes(size):
    assert format_bytes(size) == f"{size} B"


def test_one_kilobyte():
    assert format_bytes(1024) == "1.0 KB"


def test_gigabytes():
    assert format_bytes(5 * 1024**3) == "5.0 GB"


def test_gigabyte_is_the_largest_unit():
    assert format_bytes(1024**4) == "1024.0 GB"


@pytest.mark.parametrize(
    "size, suffix",
    [(2048, "KB"), (3 * 1024**2, "MB"), (7 * 1024**3, "GB")],
)
def test_suffix_matches_magnitude(size, suffix):
    assert format_bytes(size).endswith(" " + suffix)


def test_confirm_accepts_yes():
    out = io.StringIO()
    assert confirm_yes_no("Continue?", "n", io.StringIO("y"), out) == "y"
    assert out.getvalue() == "Continue? [n]/y: "


def test_confirm_is_case_insensitive():
    assert confirm_yes_no("Go?", "y", io.StringIO("N"), io.StringIO()) == "n"


def test_confirm_reprompts_on_other_input():
    out = io.StringIO()
    assert confirm_yes_no("Continue?", "Y", io.StringIO("x\ny"), out) == "y"
    assert out.getvalue().count("Continue? [y]/n: ") == 3


def test_confirm_end_of_input_gives_default():
    assert confirm_yes_no("Delete?", "N", io.StringIO(""), io.StringIO()) == "n"