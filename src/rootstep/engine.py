# -----------------------------------------------------------------------------
# Engine: step-by-step root finding for f(x) = 0
# Responsibilities:
#   • Own one Evaluator per run (parsed f(x), released on every exit path)
#   • Drive a method's step generator, appending each record to the Trace
#   • Apply the termination policy after every step; bound the trace length
#   • Funnel RootFindingError subclasses into a failed MethodResult that keeps
#     the partial trace and the diagnostic log
# Methods:
#   Each method is a generator of step records. State advances only when the
#   driver asks for the next step, so bracket updates / shifts happen lazily.
#   New methods register themselves in METHODS.
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Type, Union

from .errors import (
    ErrorReason,
    RootFindingError,
    ExprParseError,
    InputError,
    PreconditionError,
    StepLimitExceeded,
)
from .expression import Evaluator
from .policy import PolicyKind, TerminationPolicy
from .tracer import Step, Trace
from .types import BisectionStep, SecantStep

logger = logging.getLogger(__name__)

STEPS_MAX = 100


@dataclass
class MethodResult:
    # Structured outcome handed to the caller (who owns it from here on)
    ok: bool
    method: str
    fx: str
    inputs: tuple
    policy: TerminationPolicy
    trace: Trace = field(default_factory=Trace)
    error: str | None = None
    error_kind: ErrorReason | None = None

    @property
    def steps(self):
        return self.trace.steps

    @property
    def root(self) -> str | None:
        """Final iterate (c or x_next of the last step), if any step was taken."""
        last = self.trace.last
        return last.iterate if last is not None else None

    def raise_for_error(self) -> None:
        if self.ok:
            return
        exc_type = _ERROR_TYPES.get(self.error_kind, RootFindingError)
        raise exc_type(self.error or "root finding failed")

    def to_dict(self) -> Dict[str, object]:
        return {
            "ok": self.ok,
            "method": self.method,
            "fx": self.fx,
            "inputs": list(self.inputs),
            "policy": {"kind": self.policy.kind.value, "n": self.policy.n},
            "root": self.root,
            "steps": [s.to_dict() for s in self.trace],
            "log": self.trace.log_text,
            "error": self.error,
            "error_kind": self.error_kind.value if self.error_kind else None,
        }


_ERROR_TYPES: Dict[ErrorReason, Type[RootFindingError]] = {
    cls.reason: cls for cls in (ExprParseError, InputError, PreconditionError, StepLimitExceeded)
}


class IterativeMethod:
    """
    Base for step-producing methods. Subclasses implement `steps()`, a generator
    that yields one record per iteration and raises RootFindingError on failure.
    """
    name = ""
    input_names = ("p1", "p2")

    def __init__(self, evaluator: Evaluator, policy: TerminationPolicy, first: str, second: str):
        self.ev = evaluator
        self.policy = policy
        self.first = first
        self.second = second

    def _numeral(self, value: str, label: str) -> str:
        out = self.ev.numeral(value)
        if not out:
            raise InputError(f"Invalid input for {label}: {value!r}")
        return out

    def _round(self, value: str) -> str:
        return self.policy.round(value)

    def steps(self) -> Iterator[Step]:
        raise NotImplementedError


class Bisection(IterativeMethod):
    name = "bisection"
    input_names = ("interval_lower", "interval_upper")

    def steps(self) -> Iterator[BisectionStep]:
        ev = self.ev
        a = self._numeral(self.first, "interval lower")
        b = self._numeral(self.second, "interval upper")

        # f(a).f(b) < 0 must hold before any step
        sign_fa = ev.value_sign(a)
        sign_fb = ev.value_sign(b)
        if sign_fa == "*" or sign_fb == "*":
            raise InputError("Invalid inputs on interval: f is not defined at an endpoint.")
        if sign_fa == sign_fb:
            ev.trace.log(f"f({a}) and f({b}) are both '{sign_fa}'")
            raise PreconditionError(
                "The interval does not meet the bisection condition f(a).f(b) < 0."
            )

        n = 0
        while True:
            a = self._round(a)
            b = self._round(b)
            c = ev.midpoint(a, b)
            if not c:
                raise InputError(f"Could not compute the midpoint of {a} and {b}.")
            c = self._round(c)
            sign_fc = ev.value_sign(c)
            if sign_fc == "*":
                raise InputError(f"f is not defined at c = {c}.")

            n += 1
            yield BisectionStep(n, a, sign_fa, b, sign_fb, c, sign_fc)

            # keep the half that still brackets the sign change; the replaced
            # endpoint inherits sign_fc
            if sign_fc == sign_fa:
                a = c
            else:
                b, sign_fb = c, sign_fc


class Secant(IterativeMethod):
    name = "secant"
    input_names = ("initial_point1", "initial_point2")

    def _f(self, x: str) -> str:
        fx = self.ev.value_as_string(x)
        if not fx:
            raise InputError(f"Invalid inputs on initial point: f({x}) could not be evaluated.")
        return self._round(fx)

    def steps(self) -> Iterator[SecantStep]:
        ev = self.ev
        x_prev = self._round(self._numeral(self.first, "initial point 1"))
        x_n = self._round(self._numeral(self.second, "initial point 2"))
        fx_prev = self._f(x_prev)
        fx_n = self._f(x_n)

        n = 0
        while True:
            x_next = ev.secant_update(x_prev, fx_prev, x_n, fx_n)
            if not x_next:
                raise InputError(f"Secant update failed at x_(n-1) = {x_prev}, x_n = {x_n}.")
            x_next = self._round(x_next)
            fx_next = self._f(x_next)

            n += 1
            yield SecantStep(n, x_prev, fx_prev, x_n, fx_n, x_next, fx_next)

            x_prev, fx_prev = x_n, fx_n
            x_n, fx_n = x_next, fx_next


METHODS: Dict[str, Type[IterativeMethod]] = {
    Bisection.name: Bisection,
    Secant.name: Secant,
}
_METHOD_NUMBERS = {"1": Bisection.name, "2": Secant.name}


def resolve_method(method: str) -> Type[IterativeMethod]:
    key = str(method).strip().lower()
    key = _METHOD_NUMBERS.get(key, key)
    if key not in METHODS:
        raise ValueError(f"Unknown method {method!r}; expected one of {', '.join(METHODS)} (or 1, 2)")
    return METHODS[key]


def _drive(method: IterativeMethod, trace: Trace, max_steps: int) -> None:
    policy = method.policy
    previous: Optional[str] = None
    for step in method.steps():
        trace.append(step)
        logger.debug("%s step %d: %s", method.name, step.n, "\t".join(step.row()))
        if policy.satisfied(len(trace), step.iterate, previous):
            logger.info("%s stopped after %d steps (%s)", method.name, len(trace), policy.describe())
            return
        if len(trace) >= max_steps:
            raise StepLimitExceeded(
                f"No convergence within {max_steps} steps ({policy.describe()})."
            )
        previous = step.iterate


def run(
    method: Union[str, Type[IterativeMethod]],
    fx: str,
    first: str,
    second: str,
    policy: TerminationPolicy,
    max_steps: int = STEPS_MAX,
) -> MethodResult:
    """
    Run one method to termination.
    Never raises RootFindingError: failures come back as ok=False with the
    reason in error_kind and whatever steps/diagnostics were produced.
    """
    cls = resolve_method(method) if isinstance(method, str) else method
    if max_steps < 1:
        raise ValueError("max_steps must be >= 1")
    trace = Trace()
    result = MethodResult(ok=True, method=cls.name, fx=fx, inputs=(first, second),
                          policy=policy, trace=trace)
    try:
        with Evaluator(fx, trace) as ev:
            ev.parse()
            _drive(cls(ev, policy, first, second), trace, max_steps)
    except RootFindingError as e:
        # Uniform error funnel: typed reason + partial trace
        trace.log(f"[{e.reason.value}] {e}")
        logger.warning("%s failed for %r: %s", cls.name, fx, e)
        result.ok = False
        result.error = str(e)
        result.error_kind = e.reason
    return result


def bisection(
    fx: str,
    interval_lower: str,
    interval_upper: str,
    policy: Union[str, int, PolicyKind],
    n: Union[int, str],
    *,
    max_steps: int = STEPS_MAX,
) -> MethodResult:
    """Bisection on [interval_lower, interval_upper] under the given policy."""
    return run(Bisection, fx, interval_lower, interval_upper, TerminationPolicy.of(policy, n), max_steps)


def secant(
    fx: str,
    initial_point1: str,
    initial_point2: str,
    policy: Union[str, int, PolicyKind],
    n: Union[int, str],
    *,
    max_steps: int = STEPS_MAX,
) -> MethodResult:
    """Secant iteration from two initial points under the given policy."""
    return run(Secant, fx, initial_point1, initial_point2, TerminationPolicy.of(policy, n), max_steps)


def solve(
    method: str,
    fx: str,
    first: str,
    second: str,
    policy: Union[str, int, PolicyKind],
    n: Union[int, str],
    *,
    max_steps: int = STEPS_MAX,
) -> MethodResult:
    """Dispatch by method name or number ('bisection'|'1', 'secant'|'2')."""
    return run(resolve_method(method), fx, first, second, TerminationPolicy.of(policy, n), max_steps)
