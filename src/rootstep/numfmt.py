# -----------------------------------------------------------------------------
# Number formatting on decimal strings
# Purpose:
#   Round decimal numerals to N decimal places or N significant digits and
#   compare two numerals to N places/digits, without ever going through binary
#   floating point. The engine uses these as its rounding schedule and as the
#   termination oracle, so results must be display-faithful.
# Rounding rule:
#   Banker's rounding decided by the single digit after the cut: on a 5 the
#   retained digit is made even, above 5 it is bumped (with carry through 9s).
# -----------------------------------------------------------------------------

from __future__ import annotations
import re
from decimal import Decimal, localcontext, ROUND_DOWN, ROUND_HALF_EVEN

# optional sign, digits with at most one '.', at least one digit overall
_NUMERAL = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)$")


def is_numeral(s: str) -> bool:
    return bool(s) and bool(_NUMERAL.match(s))


def _check(s: str) -> str:
    if not isinstance(s, str) or not _NUMERAL.match(s):
        raise ValueError(f"Not a decimal numeral: {s!r}")
    return s


def _split(s: str) -> tuple[str, str, str]:
    """Split a numeral into (sign, integer digits, fractional digits)."""
    sign = ""
    if s[0] in "+-":
        sign, s = s[0], s[1:]
    whole, _, frac = s.partition(".")
    return sign, whole, frac


def _round_at(value: Decimal, places: int) -> Decimal:
    """
    Round `value` to `places` decimal places (negative places round inside the
    integer part). The value is first truncated to one extra digit so only that
    digit decides the rounding, then ROUND_HALF_EVEN resolves it.
    """
    digits = len(value.as_tuple().digits)
    with localcontext() as ctx:
        ctx.prec = digits + abs(places) + 4
        truncated = value.quantize(Decimal(1).scaleb(-(places + 1)), rounding=ROUND_DOWN)
        return truncated.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_EVEN)


def _tidy(text: str) -> str:
    # trim trailing fractional zeros and a lone '.', and drop the sign of zero
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text.lstrip("+-").strip("0") == "":
        return "0"
    return text


def round_decimal_places(s: str, n: int) -> str:
    """
    Round the numeral `s` to `n` decimal places.

    Numerals without a fractional part, or with at most `n` fractional digits,
    come back unchanged. n=0 rounds to an integer:
        round_decimal_places("12.5", 0) -> "12"
        round_decimal_places("13.5", 0) -> "14"
    """
    _check(s)
    if n < 0:
        raise ValueError("n must be >= 0")
    _, _, frac = _split(s)
    if "." not in s or len(frac) <= n:
        return s
    return _tidy(format(_round_at(Decimal(s), n), "f"))


def round_significant(s: str, n: int) -> str:
    """
    Round the numeral `s` to `n` significant digits, counted from the first
    non-zero digit. When the cut falls inside the integer part the remaining
    integer digits become zeros ("12345.6", 3 -> "12300").
    """
    _check(s)
    if n < 0:
        raise ValueError("n must be >= 0")
    if n == 0:
        return s
    _, whole, frac = _split(s)
    significant = (whole + frac).lstrip("0")
    if len(significant) <= n:
        return s
    value = Decimal(s)
    places = n - 1 - value.adjusted()
    return _tidy(format(_round_at(value, places), "f"))


def equal_to_places(s1: str, s2: str, n: int) -> bool:
    """
    True when both numerals have a '.', at least `n` fractional digits each,
    and their first `n` fractional digits are identical.
    """
    if "." not in s1 or "." not in s2:
        return False
    frac1 = s1.partition(".")[2]
    frac2 = s2.partition(".")[2]
    if len(frac1) < n or len(frac2) < n:
        return False
    return frac1[:n] == frac2[:n]


def _significant_digits(s: str) -> str:
    return s.lstrip("+-").replace(".", "").lstrip("0")


def equal_to_significant(s1: str, s2: str, n: int) -> bool:
    """
    True when the first `n` significant digits of both numerals match
    (sign and decimal point ignored, leading zeros skipped).

    Magnitude is not compared: "0.0512" and "0.512" agree to 3 digits.
    """
    d1 = _significant_digits(s1)
    d2 = _significant_digits(s2)
    if len(d1) < n or len(d2) < n:
        return False
    return d1[:n] == d2[:n]
