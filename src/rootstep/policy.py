# -----------------------------------------------------------------------------
# Termination policy
# Purpose:
#   The three stopping rules a caller can pick, the rounding schedule each one
#   imposes on every value the methods produce, and the stop predicate the
#   driver checks after each emitted step.
# Rounding schedule:
#   DecimalPlaces(n)     -> round to n+1 decimal places
#   SignificantDigits(n) -> round to n+1 significant digits
#   StepCount(n)         -> round to 6 decimal places
#   The extra digit keeps the equality test to n places/digits meaningful.
# -----------------------------------------------------------------------------

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from . import numfmt

STEP_COUNT_PLACES = 6


class PolicyKind(str, Enum):
    DECIMAL_PLACES = "decimal_places"
    SIGNIFICANT_DIGITS = "significant_digits"
    NO_OF_STEPS = "no_of_steps"

    @classmethod
    def parse(cls, value: Union[str, int, "PolicyKind"]) -> "PolicyKind":
        """Accept a PolicyKind, its name ('decimal_places') or its number ('1'..'3')."""
        if isinstance(value, PolicyKind):
            return value
        key = str(value).strip().lower()
        numbered = {"1": cls.DECIMAL_PLACES, "2": cls.SIGNIFICANT_DIGITS, "3": cls.NO_OF_STEPS}
        if key in numbered:
            return numbered[key]
        try:
            return cls(key)
        except ValueError:
            raise ValueError(
                f"Invalid policy {value!r}; expected decimal_places|1, significant_digits|2 or no_of_steps|3"
            ) from None


@dataclass(frozen=True)
class TerminationPolicy:
    kind: PolicyKind
    n: int

    def __post_init__(self):
        if isinstance(self.n, bool) or not isinstance(self.n, int):
            raise ValueError(f"Policy parameter must be an integer, got {self.n!r}")
        if self.kind is PolicyKind.NO_OF_STEPS and self.n < 1:
            raise ValueError("no_of_steps needs n >= 1")
        if self.n < 0:
            raise ValueError("Policy parameter must be >= 0")

    # ---- constructors for the three cases ---------------------------------
    @classmethod
    def decimal_places(cls, n: int) -> "TerminationPolicy":
        return cls(PolicyKind.DECIMAL_PLACES, n)

    @classmethod
    def significant_digits(cls, n: int) -> "TerminationPolicy":
        return cls(PolicyKind.SIGNIFICANT_DIGITS, n)

    @classmethod
    def step_count(cls, n: int) -> "TerminationPolicy":
        return cls(PolicyKind.NO_OF_STEPS, n)

    @classmethod
    def of(cls, kind: Union[str, int, PolicyKind], n: Union[int, str]) -> "TerminationPolicy":
        """Build from boundary input such as ('significant_digits', '5')."""
        try:
            count = int(n)
        except (TypeError, ValueError):
            raise ValueError(f"Policy parameter must be an integer, got {n!r}") from None
        return cls(PolicyKind.parse(kind), count)

    # ---- behaviour ----------------------------------------------------------
    def round(self, value: str) -> str:
        if self.kind is PolicyKind.DECIMAL_PLACES:
            return numfmt.round_decimal_places(value, self.n + 1)
        if self.kind is PolicyKind.SIGNIFICANT_DIGITS:
            return numfmt.round_significant(value, self.n + 1)
        return numfmt.round_decimal_places(value, STEP_COUNT_PLACES)

    def agrees(self, current: str, previous: str) -> bool:
        """Do two successive iterates agree to the precision this policy asks for?"""
        if self.kind is PolicyKind.DECIMAL_PLACES:
            return numfmt.equal_to_places(current, previous, self.n)
        if self.kind is PolicyKind.SIGNIFICANT_DIGITS:
            return numfmt.equal_to_significant(current, previous, self.n)
        # step counting never compares iterates; fall back to 3 places for callers
        return numfmt.equal_to_places(current, previous, 3)

    def satisfied(self, steps_done: int, current: str, previous: Optional[str]) -> bool:
        """
        Stop predicate, checked after a step has been appended.
        Comparison rules need a predecessor, so they never fire on step 1.
        """
        if self.kind is PolicyKind.NO_OF_STEPS:
            return steps_done == self.n
        if previous is None:
            return False
        return self.agrees(current, previous)

    def describe(self) -> str:
        labels = {
            PolicyKind.DECIMAL_PLACES: "correct to {n} decimal places",
            PolicyKind.SIGNIFICANT_DIGITS: "correct to {n} significant digits",
            PolicyKind.NO_OF_STEPS: "{n} steps",
        }
        return labels[self.kind].format(n=self.n)
