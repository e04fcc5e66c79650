# -----------------------------------------------------------------------------
# Solver: closed-form inversion of one catalog formula
# Responsibilities:
#   • Pick the inversion set registered for a formula id (inversions.py)
#   • Merge the formula's constants into the Known-Value Set
#   • Run the branch for the unknown and reject anything that is not a
#     finite real (DomainError), so NaN/inf never leave this module
#   • find_unknown(): the "exactly one empty variable" guard used upstream
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
import math
from typing import Dict, List, Mapping, Optional

from .catalog import Catalog, load_catalog
from .errors import DomainError, InvalidInputCount, UnsupportedFormula
from .inversions import INVERSIONS, Domain, InversionSet
from .tracer import Tracer
from .types import Formula

logger = logging.getLogger(__name__)


def find_unknown(formula: Formula, values: Mapping[str, Optional[float]]) -> str:
    """
    Return the single variable of `formula` that has no value.
    A symbol counts as empty when it is missing from `values` or maps to None.
    Raises InvalidInputCount for zero or several empty variables.
    """
    empty: List[str] = [s for s in formula.symbols if values.get(s) is None]
    if len(empty) != 1:
        raise InvalidInputCount(empty)
    return empty[0]


class FormulaSolver:
    def __init__(self, catalog: Optional[Catalog] = None,
                 registry: Optional[Mapping[str, InversionSet]] = None):
        self.catalog = catalog or load_catalog()
        self.registry = INVERSIONS if registry is None else registry

    def supports(self, formula_id: str) -> bool:
        return formula_id in self.registry and formula_id in self.catalog

    def _formula(self, formula_id: str) -> Formula:
        formula = self.catalog.get(formula_id)
        if formula is None or formula_id not in self.registry:
            raise UnsupportedFormula(f"No inversion set registered for formula '{formula_id}'")
        return formula

    def solve(self, formula_id: str, unknown: str, known: Mapping[str, float],
              tracer: Optional[Tracer] = None) -> float:
        """
        Solve `formula_id` for `unknown` given the other variables.

        `known` holds canonical-unit values keyed by variable symbol. The
        formula's constants are merged in (catalog values win). The caller
        guarantees every other variable is present and finite.
        """
        formula = self._formula(formula_id)
        values: Dict[str, float] = dict(known)
        values.update(formula.constants)

        domain = Domain(formula_id, unknown)
        branches = self.registry[formula_id](values, domain)
        branch = branches.get(unknown)
        if branch is None or unknown in formula.constants:
            raise UnsupportedFormula(f"{formula_id}: '{unknown}' cannot be solved for")

        # Python arithmetic can still trip over edges the guards don't model
        try:
            result = branch()
        except ZeroDivisionError as e:
            raise DomainError(formula_id, unknown, "division by zero") from e
        except OverflowError as e:
            raise DomainError(formula_id, unknown, "result overflows") from e
        except ValueError as e:
            raise DomainError(formula_id, unknown, str(e)) from e

        if isinstance(result, complex) or not math.isfinite(result):
            raise DomainError(formula_id, unknown, f"non-finite result {result}")

        logger.debug("solved %s for %s = %r", formula_id, unknown, result)
        if tracer is not None:
            tracer.add("solved", {"formula": formula_id, "symbol": unknown, "value": result})
        return float(result)
