# -----------------------------------------------------------------------------
# Command line front end
# Usage:
#   rootstep TOPIC METHOD FX INPUT1 INPUT2 POLICY N [--max-steps K]
#            [--json | --table] [--save-trace] [-v]
#   rootstep --problems FILE [-v]
# TOPIC:  solution_of_nonlinear_equations | 1
# METHOD: bisection | 1, secant | 2
# POLICY: decimal_places | 1, significant_digits | 2, no_of_steps | 3
# Exit codes: 0 ok, 1 run failed / problem mismatch, 2 usage error.
# -----------------------------------------------------------------------------

from __future__ import annotations
import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv

from .engine import METHODS, STEPS_MAX, MethodResult, resolve_method, run
from .policy import PolicyKind, TerminationPolicy
from .problems import ProblemError, ProblemSet
from .render import render_lines, render_table
from .tracing import save_trace

logger = logging.getLogger(__name__)

TOPICS = {"1": "solution_of_nonlinear_equations", "solution_of_nonlinear_equations": "solution_of_nonlinear_equations"}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="rootstep",
        description="Step-by-step bisection and secant iterations for f(x) = 0.",
        epilog=(
            "example: rootstep 1 bisection \"x^3 - 3x + 1\" 0 1 decimal_places 3\n"
            f"methods: {', '.join(METHODS)} (or 1, 2); "
            f"policies: {', '.join(k.value for k in PolicyKind)} (or 1, 2, 3)"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("args", nargs="*", metavar="ARG",
                   help="TOPIC METHOD FX INPUT1 INPUT2 POLICY N")
    p.add_argument("--problems", metavar="FILE", help="run a YAML problem set instead")
    p.add_argument("--max-steps", type=int, default=STEPS_MAX, help=f"step limit (default {STEPS_MAX})")
    out = p.add_mutually_exclusive_group()
    out.add_argument("--json", action="store_true", help="print the result as JSON")
    out.add_argument("--table", action="store_true", help="print an aligned table with a header")
    p.add_argument("--save-trace", action="store_true", help="write the result to TRACE_DIR")
    p.add_argument("-v", "--verbose", action="count", default=0)
    return p


def _print_failure(result: MethodResult) -> None:
    print(f"[ERROR] {result.error}", file=sys.stderr)
    if result.trace.log_text:
        print(result.trace.log_text, end="", file=sys.stderr)


def _run_problems(path: str) -> int:
    try:
        problem_set = ProblemSet.from_file(path)
    except (OSError, ProblemError) as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1
    failed = 0
    for outcome in problem_set.run():
        if outcome.passed:
            print(f"PASS {outcome.problem.id} ({len(outcome.result.trace)} steps, root {outcome.result.root})")
        else:
            failed += 1
            print(f"FAIL {outcome.problem.id}: {'; '.join(outcome.mismatches)}")
    print(f"{len(problem_set) - failed}/{len(problem_set)} passed")
    return 1 if failed else 0


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    parser = build_parser()
    ns = parser.parse_args(argv)

    level = logging.WARNING
    if ns.verbose == 1:
        level = logging.INFO
    elif ns.verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    if ns.problems:
        if ns.args:
            parser.error("--problems takes no positional arguments")
        return _run_problems(ns.problems)

    if len(ns.args) != 7:
        parser.error("expected TOPIC METHOD FX INPUT1 INPUT2 POLICY N")
    topic, method, fx, first, second, policy_name, n = ns.args
    if topic.strip().lower() not in TOPICS:
        parser.error(f"unknown topic {topic!r}; expected solution_of_nonlinear_equations or 1")
    if ns.max_steps < 1:
        parser.error("--max-steps must be >= 1")
    try:
        cls = resolve_method(method)
        policy = TerminationPolicy.of(policy_name, n)
    except ValueError as e:
        parser.error(str(e))

    result = run(cls, fx, first, second, policy, ns.max_steps)
    logger.info("%s on %r: ok=%s, %d steps", result.method, fx, result.ok, len(result.trace))

    if ns.save_trace:
        path = save_trace(result, os.getenv("TRACE_DIR") or None)
        print(f"trace saved to {path}", file=sys.stderr)

    if ns.json:
        print(json.dumps(result.to_dict(), indent=2))
    elif ns.table:
        sys.stdout.write(render_table(result.trace))
    else:
        sys.stdout.write(render_lines(result.trace))

    if not result.ok:
        _print_failure(result)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
