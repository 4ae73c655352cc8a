import pytest
from rootstep.numfmt import (
    round_decimal_places,
    round_significant,
    equal_to_places,
    equal_to_significant,
    is_numeral,
)

def test_bankers_rounding_to_integer():
    assert round_decimal_places("12.5", 0) == "12"
    assert round_decimal_places("13.5", 0) == "14"

def test_half_goes_to_even_digit():
    assert round_decimal_places("0.34725", 4) == "0.3472"
    assert round_decimal_places("0.34735", 4) == "0.3474"
    assert round_decimal_places("0.34375", 4) == "0.3438"

def test_only_next_digit_decides():
    assert round_decimal_places("0.3472501", 4) == "0.3472"
    assert round_decimal_places("0.3472601", 4) == "0.3473"

def test_carry_through_nines_trims_zeros():
    assert round_decimal_places("1.99999", 3) == "2"
    assert round_decimal_places("0.0996", 2) == "0.1"

def test_short_numerals_unchanged():
    assert round_decimal_places("5", 2) == "5"
    assert round_decimal_places("0.12", 3) == "0.12"
    assert round_decimal_places("-0.5", 1) == "-0.5"

def test_negative_zero_is_zero():
    assert round_decimal_places("-0.0004", 3) == "0"

def test_round_decimal_places_idempotent():
    for s in ("0.347296", "-1.23456789", "12.5", "3.14159"):
        once = round_decimal_places(s, 3)
        assert round_decimal_places(once, 3) == once

def test_significant_digits():
    assert round_significant("0.00123456", 3) == "0.00123"
    assert round_significant("-2.675", 3) == "-2.68"
    assert round_significant("0.347296", 3) == "0.347"

def test_significant_cut_inside_integer_part():
    assert round_significant("12345.6", 3) == "12300"

def test_significant_unchanged_cases():
    assert round_significant("0.5", 3) == "0.5"
    assert round_significant("3.14159", 0) == "3.14159"
    assert round_significant("0", 2) == "0"

def test_malformed_numerals_rejected():
    with pytest.raises(ValueError):
        round_decimal_places("abc", 2)
    with pytest.raises(ValueError):
        round_significant("1.2.3", 2)
    with pytest.raises(ValueError):
        round_decimal_places("1.5", -1)
    assert not is_numeral("1e-3")
    assert is_numeral("-.5")

def test_equal_to_places():
    assert equal_to_places("0.3474", "0.3472", 3)
    assert not equal_to_places("0.3474", "0.3482", 3)
    assert not equal_to_places("0.34", "0.345", 3)
    assert not equal_to_places("1", "1.000", 2)

def test_equal_to_significant():
    assert equal_to_significant("0.0012345", "0.0012349", 4)
    assert equal_to_significant("-1.5", "1.5", 2)
    assert not equal_to_significant("0.1", "0.1", 2)
    assert not equal_to_significant("1.146", "1.147", 4)

def test_significant_comparison_ignores_magnitude():
    assert equal_to_significant("0.0512", "0.512", 3)
