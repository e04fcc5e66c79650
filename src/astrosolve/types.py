# -----------------------------------------------------------------------------
# Types module: Shared dataclasses for the resolution engine
# Purpose:
#   Structured, immutable representations of formulas, their variables, and
#   catalog constants, plus the result record of one solve.
# -----------------------------------------------------------------------------

from __future__ import annotations
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .units import DisplayConversion, describe_unit, format_number


@dataclass(frozen=True)
class VariableSpec:
    """
    Metadata for one variable of a formula.
    - symbol: display symbol, unique within the formula (e.g. 'H₀', 'γmax')
    - unit: canonical unit the solver works in (e.g. 'meters', 'km/s')
    - key: ASCII identifier used inside the formula's relation text
    """
    symbol: str
    name: str
    unit: str
    description: str = ""
    key: str = ""


@dataclass(frozen=True)
class Constant:
    """
    Physical constant defined at catalog level.
    Example: G = 6.67430e-11 m³/(kg·s²)
    """
    key: str
    value: float
    unit: str
    notes: str = ""


@dataclass(frozen=True)
class Formula:
    """
    One fixed relation of the catalog.
    Example:
        id: "wiens_law"
        equation: "λmax = b/T"
        variables: (λmax [meters], T [Kelvin])
        constants: {"b": 2.898e-3}
        relation: "lam_max = b / T"
    `constants` are merged into every solve and are never solvable.
    `relation` is an ASCII 'lhs = rhs' form over variable keys and constant
    symbols; None for proportionalities.
    """
    id: str
    name: str
    description: str
    equation: str
    variables: Tuple[VariableSpec, ...]
    constants: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))
    category: str = ""
    relation: Optional[str] = None

    def variable(self, symbol: str) -> VariableSpec:
        for v in self.variables:
            if v.symbol == symbol:
                return v
        raise KeyError(symbol)

    @property
    def symbols(self) -> List[str]:
        return [v.symbol for v in self.variables]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id, "name": self.name, "description": self.description,
            "equation": self.equation, "category": self.category,
            "variables": [
                {"symbol": v.symbol, "name": v.name, "unit": v.unit,
                 "description": v.description}
                for v in self.variables
            ],
            "constants": dict(self.constants),
        }


@dataclass(frozen=True)
class SolveResult:
    symbol: str
    value: float
    unit: str
    display: Optional[DisplayConversion] = None
    residual: Optional[float] = None
    warnings: Tuple[str, ...] = ()
    trace: Tuple[Dict[str, Any], ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "value": self.value,
            "unit": self.unit,
            "text": f"{format_number(self.value)} {describe_unit(self.unit)}",
            "display": None if self.display is None else
                {"value": self.display.value, "unit": self.display.unit,
                 "text": self.display.text},
            "residual": self.residual,
            "warnings": list(self.warnings),
        }
