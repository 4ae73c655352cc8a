from __future__ import annotations
import os
import json
import time
from typing import Any, Dict

from .engine import MethodResult

TRACE_DIR = os.getenv("TRACE_DIR", "traces")


def ts() -> str:
    return time.strftime("%Y%m%d_%H%M%SZ", time.gmtime())


def save_trace(result: MethodResult, directory: str | None = None) -> str:
    """Write the result as run_<timestamp>_<method>.json and return the path."""
    directory = directory or TRACE_DIR
    os.makedirs(directory, exist_ok=True)
    data: Dict[str, Any] = {"meta": {"saved_at": ts()}, **result.to_dict()}
    fname = f"run_{ts()}_{result.method}.json"
    fpath = os.path.join(directory, fname)
    with open(fpath, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    return fpath
