# -----------------------------------------------------------------------------
# Errors: failure reasons surfaced by the iteration engine
# Purpose:
#   One exception class per failure reason. The engine raises them internally;
#   the public entry points catch them and return a failed MethodResult that
#   carries the reason tag, the message and the partial trace.
# -----------------------------------------------------------------------------

from __future__ import annotations
from enum import Enum


class ErrorReason(str, Enum):
    EXPR_PARSE = "expr_parse"
    INPUT = "input"
    PRECONDITION = "precondition"
    STEP_LIMIT = "step_limit"


class RootFindingError(Exception):
    reason: ErrorReason = ErrorReason.INPUT


class ExprParseError(RootFindingError):
    # f(x) could not be parsed; the trace log holds the parser message
    reason = ErrorReason.EXPR_PARSE


class InputError(RootFindingError):
    # NaN / non-finite evaluation, failed midpoint or secant update, bad point
    reason = ErrorReason.INPUT


class PreconditionError(RootFindingError):
    # bisection only: f(a) and f(b) share a sign
    reason = ErrorReason.PRECONDITION


class StepLimitExceeded(RootFindingError):
    reason = ErrorReason.STEP_LIMIT
