# -----------------------------------------------------------------------------
# Types module: step records produced by the methods
# Purpose:
#   Plain value records, one per iteration. They hold decimal strings only
#   (no references back into the engine) so a finished trace can be rendered,
#   serialized or compared without the evaluator around.
# -----------------------------------------------------------------------------

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class BisectionStep:
    """
    One bisection iteration.
    - a, b: bracket endpoints (already rounded for this step)
    - sign_fa, sign_fb, sign_fc: '+' or '-' (zero counts as '+')
    - c: rounded midpoint, the iterate of this step
    """
    n: int
    a: str
    sign_fa: str
    b: str
    sign_fb: str
    c: str
    sign_fc: str

    COLUMNS = ("n", "a", "f(a)", "b", "f(b)", "c", "f(c)")

    @property
    def iterate(self) -> str:
        return self.c

    def row(self) -> Tuple[str, ...]:
        return (str(self.n), self.a, self.sign_fa, self.b, self.sign_fb, self.c, self.sign_fc)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SecantStep:
    """One secant iteration: x_(n-1), x_n, x_(n+1) and f at each, as strings."""
    n: int
    x_prev: str
    fx_prev: str
    x_n: str
    fx_n: str
    x_next: str
    fx_next: str

    COLUMNS = ("n", "x(n-1)", "f(x(n-1))", "x(n)", "f(x(n))", "x(n+1)", "f(x(n+1))")

    @property
    def iterate(self) -> str:
        return self.x_next

    def row(self) -> Tuple[str, ...]:
        return (str(self.n), self.x_prev, self.fx_prev, self.x_n, self.fx_n, self.x_next, self.fx_next)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
