# -----------------------------------------------------------------------------
# Problem sets
# Purpose: Parse a YAML list of root-finding problems (method, f(x), inputs,
# policy, optional expectations) into typed objects, run them through the
# engine and report where a result differs from what was expected.
# -----------------------------------------------------------------------------

from __future__ import annotations
import yaml
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .engine import MethodResult, resolve_method, run, STEPS_MAX
from .errors import ErrorReason
from .numfmt import is_numeral
from .policy import TerminationPolicy

# Domain-specific error for malformed problem documents
class ProblemError(Exception): pass

@dataclass
class Expectation:
    ok: Optional[bool] = None
    error: Optional[ErrorReason] = None
    steps: Optional[int] = None
    root: Optional[str] = None     # compared at the policy's precision

@dataclass
class Problem:
    id: str
    method: str
    fx: str
    inputs: Tuple[str, str]
    policy: TerminationPolicy
    max_steps: int = STEPS_MAX
    expect: Expectation = field(default_factory=Expectation)
    notes: str = ""

    def run(self) -> MethodResult:
        return run(self.method, self.fx, self.inputs[0], self.inputs[1], self.policy, self.max_steps)

    def check(self, result: MethodResult) -> List[str]:
        """Return human-readable mismatches between `result` and the expectation."""
        e = self.expect
        out: List[str] = []
        if e.ok is not None and result.ok != e.ok:
            out.append(f"expected ok={e.ok}, got ok={result.ok} ({result.error})")
        if e.error is not None and result.error_kind != e.error:
            got = result.error_kind.value if result.error_kind else None
            out.append(f"expected error {e.error.value}, got {got}")
        if e.steps is not None and len(result.trace) != e.steps:
            out.append(f"expected {e.steps} steps, got {len(result.trace)}")
        if e.root is not None:
            root = result.root
            if root is None or not self.policy.agrees(root, e.root):
                out.append(f"expected root {e.root}, got {root}")
        return out

@dataclass
class ProblemOutcome:
    problem: Problem
    result: MethodResult
    mismatches: List[str]

    @property
    def passed(self) -> bool:
        return not self.mismatches

@dataclass
class ProblemSet:
    problems: List[Problem]

    @staticmethod
    def _expectation(d: Dict[str, Any]) -> Expectation:
        try:
            error = ErrorReason(d["error"]) if d.get("error") is not None else None
        except ValueError:
            raise ProblemError(f"Unknown error kind: {d['error']!r}") from None
        root = d.get("root")
        if root is not None:
            root = str(root)
            if not is_numeral(root):
                raise ProblemError(f"Expected root must be a decimal numeral: {root!r}")
        ok = d.get("ok")
        steps = d.get("steps")
        return Expectation(
            ok=bool(ok) if ok is not None else None,
            error=error,
            steps=int(steps) if steps is not None else None,
            root=root,
        )

    @staticmethod
    def from_yaml_dict(d: Dict[str, Any]) -> "ProblemSet":
        """
        Build a ProblemSet from a parsed YAML mapping:
          problems:
            - id: bisection_cubic
              method: bisection          # or secant, 1, 2
              fx: "x^3 - 3x + 1"
              inputs: ["0", "1"]         # quote them to keep the exact digits
              policy: decimal_places     # significant_digits, no_of_steps, 1..3
              n: 3
              max_steps: 100             # optional
              expect: {ok: true, root: "0.347", steps: 12}   # optional
        """
        if not isinstance(d, dict) or not isinstance(d.get("problems"), list):
            raise ProblemError("Expected a mapping with a 'problems' list.")
        problems: List[Problem] = []
        seen = set()
        for i, pd in enumerate(d["problems"]):
            if not isinstance(pd, dict):
                raise ProblemError(f"Problem #{i + 1} is not a mapping.")
            pid = str(pd.get("id") or f"problem_{i + 1}")
            if pid in seen:
                raise ProblemError(f"Duplicate problem id: {pid}")
            seen.add(pid)
            try:
                method = resolve_method(str(pd["method"])).name
                inputs = pd["inputs"]
                if not isinstance(inputs, (list, tuple)) or len(inputs) != 2:
                    raise ProblemError(f"{pid}: 'inputs' must hold exactly two values")
                policy = TerminationPolicy.of(pd["policy"], pd["n"])
                problems.append(Problem(
                    id=pid,
                    method=method,
                    fx=str(pd["fx"]),
                    inputs=(str(inputs[0]), str(inputs[1])),
                    policy=policy,
                    max_steps=int(pd.get("max_steps", STEPS_MAX)),
                    expect=ProblemSet._expectation(pd.get("expect") or {}),
                    notes=str(pd.get("notes", "")),
                ))
            except KeyError as e:
                raise ProblemError(f"{pid}: missing field {e.args[0]!r}") from None
            except ValueError as e:
                raise ProblemError(f"{pid}: {e}") from None
        return ProblemSet(problems=problems)

    @staticmethod
    def from_yaml_text(text: str) -> "ProblemSet":
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ProblemError(f"Invalid YAML: {e}") from None
        return ProblemSet.from_yaml_dict(data)

    @staticmethod
    def from_file(path: str) -> "ProblemSet":
        with open(path, "r", encoding="utf-8") as f:
            return ProblemSet.from_yaml_text(f.read())

    def __len__(self) -> int:
        return len(self.problems)

    def get(self, pid: str) -> Problem:
        for p in self.problems:
            if p.id == pid:
                return p
        raise KeyError(pid)

    def run(self) -> Iterator[ProblemOutcome]:
        for p in self.problems:
            result = p.run()
            yield ProblemOutcome(problem=p, result=result, mismatches=p.check(result))

    def list_problems(self) -> List[Dict[str, Any]]:
        """Flattened listing (id, method, fx, inputs, policy) for UIs and the API."""
        return [{
            "id": p.id,
            "method": p.method,
            "fx": p.fx,
            "inputs": list(p.inputs),
            "policy": p.policy.kind.value,
            "n": p.policy.n,
            "notes": p.notes,
        } for p in self.problems]
