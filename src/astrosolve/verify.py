# -----------------------------------------------------------------------------
# Relation check
# Purpose:
#   Substitute a complete value set back into a formula's defining relation
#   ('lhs = rhs', written over ASCII variable keys) and report how far the two
#   sides disagree. The inversions are hand-derived; this catches a branch
#   drifting from the equation it claims to solve.
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
import math
from functools import lru_cache
from typing import Mapping, Optional, Tuple

import sympy
from sympy import Symbol, sympify

from .types import Formula

logger = logging.getLogger(__name__)

RESIDUAL_TOLERANCE = 1e-6

# Functions a relation may use; everything else must be a declared name
_FUNCS = {"pi": sympy.pi, "sqrt": sympy.sqrt, "log": sympy.log,
          "tan": sympy.tan, "atan": sympy.atan}


class RelationError(ValueError): pass


@lru_cache(maxsize=256)
def _parse_relation(relation: str, names: Tuple[str, ...]) -> Tuple[sympy.Expr, sympy.Expr]:
    # Every key becomes a plain Symbol so names like E, N, gamma or factor
    # never resolve to SymPy built-ins.
    lhs, sep, rhs = relation.partition("=")
    if not sep or "=" in rhs:
        raise RelationError(f"Relation must have exactly one '=': {relation}")
    local = dict(_FUNCS)
    local.update({n: Symbol(n) for n in names})
    try:
        return sympify(lhs, locals=local), sympify(rhs, locals=local)
    except (sympy.SympifyError, SyntaxError, TypeError) as e:
        raise RelationError(f"Cannot parse relation '{relation}': {e}") from e


def _number(expr: sympy.Expr, subs) -> float:
    try:
        value = complex(expr.evalf(subs=subs))
    except TypeError:  # zoo / nan do not convert
        return math.nan
    if abs(value.imag) > 1e-12 * max(1.0, abs(value.real)):
        return math.nan
    return value.real


def relation_residual(formula: Formula, values: Mapping[str, float]) -> Optional[float]:
    """
    Relative mismatch |lhs - rhs| / max(|lhs|, |rhs|) of `formula.relation`
    for the given values (keyed by variable symbol; constants are taken from
    the formula). Both sides zero: the absolute difference (0.0).
    Returns None when the formula has no relation. NaN when either side is
    not a real number.
    """
    if not formula.relation:
        return None

    names = tuple(v.key for v in formula.variables) + tuple(formula.constants)
    lhs, rhs = _parse_relation(formula.relation, names)

    subs = {Symbol(v.key): values[v.symbol] for v in formula.variables}
    subs.update({Symbol(c): val for c, val in formula.constants.items()})

    left, right = _number(lhs, subs), _number(rhs, subs)
    scale = max(abs(left), abs(right))
    residual = abs(left - right) if scale == 0 else abs(left - right) / scale
    logger.debug("%s residual %.3g", formula.id, residual)
    return residual
