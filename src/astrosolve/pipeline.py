# -----------------------------------------------------------------------------
# Resolution pipeline: raw user text → solved unknown
# Steps (each one aborts the whole request on failure):
#   1) select one filled input field per variable, in unit-priority order
#   2) require exactly one unknown
#   3) parse each selected text (parsing.parse_value)
#   4) convert to the variable's canonical unit (units.to_base)
#   5) solve (solver.FormulaSolver)
#   6) package: display conversion, relation residual, warnings, trace
# try_resolve() is the request boundary: engine errors become an envelope.
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .catalog import Catalog, load_catalog
from .errors import DomainError, ResolutionError, UnsupportedFormula
from .parsing import has_degree_marker, is_blank, parse_value
from .solver import FormulaSolver, find_unknown
from .tracer import Tracer
from .types import Formula, SolveResult, VariableSpec
from .units import alternative_units, display_conversion, normalize_unit, to_base
from .verify import RESIDUAL_TOLERANCE, relation_residual

logger = logging.getLogger(__name__)

# symbol -> text in the canonical unit, or symbol -> {unit: text}
RawInput = Union[None, str, float, Mapping[str, Any]]


def _json_safe(obj: Any) -> Any:
    # NaN and inf have no JSON form; they come back as null
    if isinstance(obj, float) and not math.isfinite(obj):
        return None
    if isinstance(obj, Mapping):
        return {k: _json_safe(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_json_safe(v) for v in obj]
    return obj


@dataclass
class Resolution:
    # Envelope returned at the request boundary (API layer, UI glue)
    ok: bool
    result: Optional[SolveResult] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None  # exception class name, e.g. "ParseError"
    trace: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return _json_safe({
            "ok": self.ok,
            "result": self.result.to_dict() if self.result else None,
            "error": self.error,
            "error_kind": self.error_kind,
            "trace": self.trace,
        })


def select_input(var: VariableSpec, raw: RawInput) -> Optional[Tuple[str, Any]]:
    """
    Pick the (unit, text) pair to use for `var`, or None when nothing is filled.

    A mapping is scanned in unit-priority order: the variable's alternative
    units first (canonical unit leading), then any other units in the
    caller's order. The first non-blank field wins; the rest are ignored.
    """
    if not isinstance(raw, Mapping):
        return None if is_blank(raw) else (var.unit, raw)

    by_norm: Dict[str, Tuple[str, Any]] = {}
    for unit, text in raw.items():
        by_norm.setdefault(normalize_unit(unit), (unit, text))

    ordered: List[Tuple[str, Any]] = []
    seen = set()
    for unit in alternative_units(var.unit):
        key = normalize_unit(unit)
        if key in by_norm and key not in seen:
            ordered.append(by_norm[key])
            seen.add(key)
    for unit, text in raw.items():
        key = normalize_unit(unit)
        if key not in seen:
            ordered.append((unit, text))
            seen.add(key)

    for unit, text in ordered:
        if not is_blank(text):
            return unit, text
    return None


class Resolver:
    def __init__(self, catalog: Optional[Catalog] = None, solver: Optional[FormulaSolver] = None):
        self.catalog = catalog or load_catalog()
        self.solver = solver or FormulaSolver(self.catalog)

    def _formula(self, formula_id: str) -> Formula:
        formula = self.catalog.get(formula_id)
        if formula is None or not self.solver.supports(formula_id):
            raise UnsupportedFormula(f"No inversion set registered for formula '{formula_id}'")
        return formula

    def _canonical_value(self, formula: Formula, var: VariableSpec, unit: str, text: Any,
                         tracer: Tracer) -> float:
        value = parse_value(text, unit)
        tracer.add("value_parsed", {"symbol": var.symbol, "text": text, "value": value})

        # A degree marker already produced radians, whatever the field's unit
        from_unit = "radians" if has_degree_marker(text) else unit
        converted = to_base(value, from_unit, var.unit, tracer)
        if not math.isfinite(converted):
            raise DomainError(formula.id, var.symbol, f"value overflows in {var.unit}")
        tracer.add("unit_converted", {"symbol": var.symbol, "from": from_unit,
                                      "to": var.unit, "value": converted})
        return converted

    def resolve(self, formula_id: str, raw_inputs: Mapping[str, RawInput],
                tracer: Optional[Tracer] = None) -> SolveResult:
        """
        Resolve one request. Raises the originating ResolutionError on any
        failure; no partial result is produced.
        """
        tracer = Tracer() if tracer is None else tracer
        tracer.add("inputs_raw", {"formula": formula_id,
                                  "inputs": {s: (dict(r) if isinstance(r, Mapping) else r)
                                             for s, r in raw_inputs.items()}})
        formula = self._formula(formula_id)

        ignored = sorted(set(raw_inputs) - set(formula.symbols) - set(formula.constants))
        if ignored:
            tracer.add("inputs_ignored", {"symbols": ignored})

        # 1) one filled field per variable
        selected: Dict[str, Optional[Tuple[str, Any]]] = {}
        for var in formula.variables:
            choice = select_input(var, raw_inputs.get(var.symbol))
            selected[var.symbol] = choice
            if choice is not None:
                tracer.add("input_selected", {"symbol": var.symbol, "unit": choice[0],
                                              "text": choice[1]})

        # 2) exactly one unknown
        unknown = find_unknown(formula, {s: (c[1] if c else None) for s, c in selected.items()})

        # 3) + 4) parse and canonicalize
        known: Dict[str, float] = {}
        for var in formula.variables:
            choice = selected[var.symbol]
            if choice is None:
                continue
            known[var.symbol] = self._canonical_value(formula, var, choice[0], choice[1], tracer)

        # 5) solve
        value = self.solver.solve(formula_id, unknown, known, tracer=tracer)
        unit = formula.variable(unknown).unit

        # 6) package
        warnings = [
            f"No conversion from {d['from']} to {d['to']}; value used as entered"
            for d in tracer.of_kind("unit_fallback")
        ]
        residual = relation_residual(formula, {**known, unknown: value})
        if residual is not None and not math.isfinite(residual):
            # SymPy takes principal roots: a negative ratio under a cube root goes complex
            tracer.add("relation_unchecked", {"reason": "relation is not real at these values"})
            residual = None
        if residual is not None:
            tracer.add("relation_check", {"residual": residual})
            if residual > RESIDUAL_TOLERANCE:
                logger.warning("%s: relation residual %.3g for %s", formula_id, residual, unknown)
                warnings.append(f"Result does not satisfy {formula.equation} "
                                f"(relative residual {residual:.3g})")

        display = display_conversion(value, unit)
        if display is not None:
            tracer.add("display_conversion", {"value": display.value, "unit": display.unit})

        return SolveResult(symbol=unknown, value=value, unit=unit, display=display,
                           residual=residual, warnings=tuple(warnings),
                           trace=tuple(tracer.steps()))

    def try_resolve(self, formula_id: str, raw_inputs: Mapping[str, RawInput]) -> Resolution:
        """Request boundary: engine errors are returned, never raised."""
        tracer = Tracer()
        try:
            result = self.resolve(formula_id, raw_inputs, tracer)
        except ResolutionError as e:
            kind = type(e).__name__
            logger.info("resolution of %s failed: %s: %s", formula_id, kind, e)
            tracer.add("error", {"kind": kind, "message": str(e)})
            return Resolution(ok=False, error=str(e), error_kind=kind, trace=tracer.steps())
        return Resolution(ok=True, result=result, trace=list(result.trace))
