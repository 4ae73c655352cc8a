# --- rootstep: Step-by-step Root Finding API (FastAPI) ------------------------
# Purpose: Expose the bisection and secant engines over HTTP. Every solve
# returns the full step trace (structured, tab-separated and tabular) plus the
# diagnostic log, on success and on failure alike.
# ------------------------------------------------------------------------------

from __future__ import annotations
import os
from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any

from rootstep.engine import METHODS, STEPS_MAX, resolve_method, run
from rootstep.policy import PolicyKind, TerminationPolicy
from rootstep.problems import ProblemSet, ProblemError
from rootstep.render import render_lines, render_table

# Load .env for external configuration (step limit, problem set path)
load_dotenv()
MAX_STEPS = int(os.getenv("ROOTSTEP_MAX_STEPS", str(STEPS_MAX)))
PROBLEMS_PATH = os.getenv("PROBLEMS_PATH", "examples/problems.yaml")

app = FastAPI(title="rootstep API")


class SolveRequest(BaseModel):
    fx: str
    inputs: List[str] = Field(..., min_length=2, max_length=2)
    policy: str = PolicyKind.DECIMAL_PLACES.value
    n: int = 3
    max_steps: Optional[int] = Field(default=None, ge=1)


class SolveResponse(BaseModel):
    ok: bool
    method: str
    steps: List[Dict[str, Any]]
    table: str
    lines: str
    log: str
    root: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None


@app.get("/health")
def health():
    return {"ok": True}


@app.get("/methods")
def methods():
    return {
        "methods": [
            {"name": name, "number": i, "inputs": list(cls.input_names)}
            for i, (name, cls) in enumerate(METHODS.items(), start=1)
        ],
        "policies": [
            {"name": kind.value, "number": i}
            for i, kind in enumerate(PolicyKind, start=1)
        ],
        "max_steps": MAX_STEPS,
    }


@app.post("/solve/{method}", response_model=SolveResponse)
def solve(method: str, req: SolveRequest):
    """
    Run one method to termination.
    - 404: unknown method
    - 422: invalid policy / policy parameter (plus Pydantic body validation)
    Engine failures (parse, input, precondition, step limit) are a normal
    response with ok=false and the partial trace.
    """
    try:
        cls = resolve_method(method)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    try:
        policy = TerminationPolicy.of(req.policy, req.n)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    res = run(cls, req.fx, req.inputs[0], req.inputs[1], policy, req.max_steps or MAX_STEPS)
    return SolveResponse(
        ok=res.ok,
        method=res.method,
        steps=[s.to_dict() for s in res.trace],
        table=render_table(res.trace),
        lines=render_lines(res.trace),
        log=res.trace.log_text,
        root=res.root,
        error=res.error,
        error_kind=res.error_kind.value if res.error_kind else None,
    )


@app.get("/problems")
def problems():
    try:
        problem_set = ProblemSet.from_file(PROBLEMS_PATH)
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail=f"Problem set not found: {PROBLEMS_PATH}")
    except ProblemError as e:
        # 500: the configured problem set itself is malformed
        raise HTTPException(status_code=500, detail=f"Problem set error: {e}")
    return {"path": PROBLEMS_PATH, "problems": problem_set.list_problems()}
