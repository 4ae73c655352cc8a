# -----------------------------------------------------------------------------
# Trace model
# Purpose:
#   Append-only collector for the step records of one run plus a free-form
#   diagnostic log that the evaluator and the driver write into. Handed back to
#   the caller on success and on failure (partial steps + diagnostics).
# -----------------------------------------------------------------------------

from __future__ import annotations
from io import StringIO
from typing import Any, Dict, Iterator, List, Union

from .types import BisectionStep, SecantStep

Step = Union[BisectionStep, SecantStep]


class Trace:
    def __init__(self):
        self._steps: List[Step] = []
        self._log = StringIO()

    def append(self, step: Step) -> None:
        self._steps.append(step)

    def log(self, message: str) -> None:
        self._log.write(message.rstrip("\n") + "\n")

    @property
    def steps(self) -> List[Step]:
        return list(self._steps)

    @property
    def log_text(self) -> str:
        return self._log.getvalue()

    @property
    def last(self) -> Step | None:
        return self._steps[-1] if self._steps else None

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[Step]:
        return iter(self._steps)

    def __getitem__(self, index: int) -> Step:
        return self._steps[index]

    def to_dict(self) -> Dict[str, Any]:
        # Plain dicts for JSON serialization
        return {"steps": [s.to_dict() for s in self._steps], "log": self.log_text}
