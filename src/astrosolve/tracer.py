# -----------------------------------------------------------------------------
# Resolution trace
# Purpose:
#   Ordered record of what one resolve request did: which field was picked
#   per variable, what each text parsed to, every unit conversion (or
#   fallback), the solved value and the checks run on it. Exported as plain
#   dicts for the API envelope.
# -----------------------------------------------------------------------------

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class TraceStep:
    # kind: short label ("value_parsed", "unit_fallback", ...); detail: structured payload
    kind: str
    detail: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        # a fresh dict per export
        return {"kind": self.kind, "detail": dict(self.detail)}


class Tracer:
    def __init__(self): self._steps: List[TraceStep] = []
    def __len__(self) -> int: return len(self._steps)
    def add(self, kind: str, detail: Dict[str, Any]): self._steps.append(TraceStep(kind, dict(detail)))
    def kinds(self) -> List[str]: return [s.kind for s in self._steps]

    def of_kind(self, kind: str) -> List[Dict[str, Any]]:
        """Details of every step labelled `kind`, in order."""
        return [dict(s.detail) for s in self._steps if s.kind == kind]

    def steps(self) -> List[Dict[str, Any]]:
        return [s.to_dict() for s in self._steps]
