# -----------------------------------------------------------------------------
# Expression evaluator (SymPy-backed)
# Purpose:
#   Parse one user-supplied function body f(x) and evaluate it at points given
#   as decimal strings. Also hosts the numeric helpers the methods need
#   (bisection midpoint, secant update), done in exact rational arithmetic and
#   rendered back to plain decimal strings.
# Contracts:
#   value_as_string -> "" on failure, value_as_double -> NaN, value_sign -> '*'.
#   Every failure writes one diagnostic line into the trace log.
# Syntax:
#   + - * / ^ (or **), parentheses, implicit products (3x, 2 sin(x), (x+1)(x-1)),
#   constants e and pi, e^x for exp(x), and the functions in _FUNCTIONS.
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
import math
import re
from decimal import Decimal, localcontext
from tokenize import TokenError
from typing import Any, Dict

import sympy as sp
from sympy.core.function import AppliedUndef
from sympy.parsing.sympy_parser import (
    parse_expr,
    standard_transformations,
    implicit_multiplication_application,
    convert_xor,
    rationalize,
)

from .errors import ExprParseError
from .numfmt import is_numeral
from .tracer import Trace

logger = logging.getLogger(__name__)

X = sp.Symbol("x", real=True)

# Significant digits used when rendering a rational result as a decimal string
RENDER_DIGITS = 15
# Working precision for evalf; the result is reduced to a float afterwards
EVAL_DIGITS = 30

_FUNCTIONS: Dict[str, Any] = {
    "sin": sp.sin, "cos": sp.cos, "tan": sp.tan,
    "asin": sp.asin, "acos": sp.acos, "atan": sp.atan,
    "sinh": sp.sinh, "cosh": sp.cosh, "tanh": sp.tanh,
    "log": sp.log, "ln": sp.log, "exp": sp.exp,
    "sqrt": sp.sqrt, "abs": sp.Abs,
}
_CONSTANTS: Dict[str, Any] = {"e": sp.E, "E": sp.E, "pi": sp.pi}

# decimal literals in f(x) stay exact (0.1 -> 1/10)
_TRANSFORMS = standard_transformations + (rationalize, implicit_multiplication_application, convert_xor)

# digit glued to a name or '(' ("3x", "2(x+1)"), but not an exponent ("1e-3")
_GLUED_PRODUCT = re.compile(r"(\d)(?=(?![eE][+-]?\d)[A-Za-z_(])")

_PARSE_ERRORS = (sp.SympifyError, SyntaxError, TokenError, TypeError, ValueError, AttributeError)
_EVAL_ERRORS = (TypeError, ValueError, ArithmeticError, AttributeError)


def preprocess_expression(source: str) -> str:
    """
    Normalize user input before handing it to the SymPy parser.
    Only inserts '*' where a number is glued to a name or parenthesis:
      3x       -> 3*x
      2(x+1)   -> 2*(x+1)
    Everything else (2 sin(x), x(x+1), ^) is left to the parser transforms.
    """
    return _GLUED_PRODUCT.sub(r"\1*", source.strip())


def _parse(source: str, allow_x: bool) -> sp.Expr:
    """Parse `source` with the whitelisted namespace; raise ValueError on unknown names."""
    local: Dict[str, Any] = {**_FUNCTIONS, **_CONSTANTS}
    if allow_x:
        local["x"] = X
    expr = parse_expr(preprocess_expression(source), local_dict=local, transformations=_TRANSFORMS)
    if not isinstance(expr, sp.Expr):
        raise ValueError(f"not an expression: {source!r}")
    unknown = sorted(str(s) for s in expr.free_symbols if s != X)
    if not allow_x and X in expr.free_symbols:
        unknown.insert(0, "x")
    if unknown:
        raise ValueError(f"unknown name(s): {', '.join(unknown)}")
    undefined = sorted(str(f.func) for f in expr.atoms(AppliedUndef))
    if undefined:
        raise ValueError(f"unknown function(s): {', '.join(undefined)}")
    return expr


def _exact(s: str) -> sp.Rational:
    """Exact rational value of a decimal numeral."""
    if not is_numeral(s):
        raise ValueError(f"not a decimal numeral: {s!r}")
    return sp.Rational(s)


def render_rational(value: sp.Rational, digits: int = RENDER_DIGITS) -> str:
    """
    Plain decimal string for an exact rational: integers verbatim, everything
    else to `digits` significant digits in fixed-point notation (never 1e-07).
    """
    if value.q == 1:
        return str(value.p)
    with localcontext() as ctx:
        ctx.prec = digits
        text = format(Decimal(value.p) / Decimal(value.q), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


class Evaluator:
    """
    Parsed handle for one f(x). Use as a context manager so the parsed form is
    released on every exit path:

        with Evaluator("x^3 - 3x + 1", trace) as ev:
            ev.parse()
            ev.value_sign("0.5")   # '-'
    """

    def __init__(self, source: str, trace: Trace | None = None):
        self.source = source
        self.trace = trace if trace is not None else Trace()
        self._expr: sp.Expr | None = None

    def __enter__(self) -> "Evaluator":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._expr = None

    def _diag(self, message: str) -> None:
        self.trace.log(message)
        logger.debug("%s", message)

    @property
    def expr(self) -> sp.Expr:
        if self._expr is None:
            raise RuntimeError("Expression not parsed; call parse() first.")
        return self._expr

    def parse(self) -> sp.Expr:
        """Load f(x). Raises ExprParseError with the parser message logged."""
        if not self.source or not self.source.strip():
            self._diag("parse error: empty function")
            raise ExprParseError("Invalid function input: empty expression.")
        try:
            self._expr = _parse(self.source, allow_x=True)
        except _PARSE_ERRORS as e:
            self._diag(f"parse error in '{self.source}': {e}")
            raise ExprParseError(f"Invalid function input: {self.source!r}") from e
        self._diag(f"f(x) := {self._expr}")
        return self._expr

    # ---------------- points ----------------

    def _point(self, x: str) -> sp.Expr:
        # decimal numerals stay exact; anything else must be a real constant
        if is_numeral(x):
            return sp.Rational(x)
        value = _parse(x, allow_x=False)
        if not value.is_number or value.is_real is False:
            raise ValueError(f"not a real constant: {x!r}")
        return value

    def numeral(self, x: str) -> str:
        """`x` itself when it is a decimal numeral, else its value as one ("" on failure)."""
        if is_numeral(x):
            return x
        try:
            value = self._point(x).evalf(EVAL_DIGITS)
            rendered = render_rational(sp.Rational(str(value)))
        except _PARSE_ERRORS + _EVAL_ERRORS as e:
            self._diag(f"invalid point '{x}': {e}")
            return ""
        self._diag(f"point {x} = {rendered}")
        return rendered

    # ---------------- evaluation ----------------

    def value_as_double(self, x: str) -> float:
        """f(x) as a float; NaN when the point or the value is unusable."""
        try:
            point = self._point(x)
            # substitute first so exact roots evaluate to exactly 0
            value = complex(self.expr.xreplace({X: point}).evalf(EVAL_DIGITS))
        except _PARSE_ERRORS + _EVAL_ERRORS as e:
            self._diag(f"evaluation failed at x = {x}: {e}")
            return math.nan
        if value.imag != 0 or not math.isfinite(value.real):
            self._diag(f"f({x}) is not a finite real number: {value}")
            return math.nan
        return value.real

    def value_as_string(self, x: str) -> str:
        """f(x) as "4" for integral values, else fixed point ("0.347296"); "" on failure."""
        val = self.value_as_double(x)
        if math.isnan(val):
            return ""
        # fixed-point keeps tiny values readable (no 6e-09)
        if math.floor(val) == val:
            return str(int(val))
        return f"{val:f}"

    def value_sign(self, x: str) -> str:
        val = self.value_as_double(x)
        if math.isnan(val):
            return "*"
        if val < 0:
            return "-"
        return "+"

    # ---------------- method arithmetic ----------------

    def midpoint(self, a: str, b: str) -> str:
        """(a + b) / 2 as a decimal string; "" on failure."""
        try:
            return render_rational((_exact(a) + _exact(b)) / 2)
        except _EVAL_ERRORS as e:
            self._diag(f"midpoint of {a} and {b} failed: {e}")
            return ""

    def secant_update(self, x_prev: str, fx_prev: str, x_n: str, fx_n: str) -> str:
        """(x_prev*fx_n - x_n*fx_prev) / (fx_n - fx_prev) as a decimal string; "" on failure."""
        try:
            xp, fp, xn, fn = (_exact(v) for v in (x_prev, fx_prev, x_n, fx_n))
            denominator = fn - fp
            if denominator == 0:
                raise ZeroDivisionError(f"f(x_n) - f(x_prev) = {fn} - {fp} is zero")
            return render_rational((xp * fn - xn * fp) / denominator)
        except _EVAL_ERRORS as e:
            self._diag(f"secant update failed: {e}")
            return ""
