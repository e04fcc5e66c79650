# -----------------------------------------------------------------------------
# Catalog loader & accessor
# Purpose: Parse the YAML formula catalog (categories → formulas) into the
# immutable objects used by the solver and the resolution pipeline.
# - Depends on .types (Formula, VariableSpec, Constant) for typed payloads.
# - load_catalog() caches one Catalog per path; nothing mutates it afterwards.
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from .types import Constant, Formula, VariableSpec

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = os.path.join(os.path.dirname(__file__), "data", "formulas.yaml")


# Domain-specific error to signal malformed catalog inputs, missing fields, etc.
class CatalogError(Exception): pass


def _require(d: Dict[str, Any], key: str, where: str) -> Any:
    if key not in d or d[key] is None:
        raise CatalogError(f"{where}: missing field '{key}'")
    return d[key]


@dataclass(frozen=True)
class Catalog:
    # Physical constants keyed by catalog key (e.g., "G", "sigma")
    constants: Mapping[str, Constant]
    # All formulas, in catalog order
    formulas: Tuple[Formula, ...]

    def __post_init__(self):
        by_id: Dict[str, Formula] = {}
        for f in self.formulas:
            if f.id in by_id:
                raise CatalogError(f"Duplicate formula id: {f.id}")
            by_id[f.id] = f
        object.__setattr__(self, "_by_id", MappingProxyType(by_id))

    @staticmethod
    def _constants_for(fd: Dict[str, Any], consts: Mapping[str, Constant],
                       where: str) -> Dict[str, float]:
        # symbol -> catalog constant key, or symbol -> literal number
        out: Dict[str, float] = {}
        for sym, ref in (fd.get("constants") or {}).items():
            if isinstance(ref, bool):
                raise CatalogError(f"{where}: constant {sym} must be a number or a key")
            if isinstance(ref, (int, float)):
                out[str(sym)] = float(ref)
            elif str(ref) in consts:
                out[str(sym)] = consts[str(ref)].value
            else:
                # YAML 1.1 reads 2.998e8 (unsigned exponent) as a string
                try:
                    out[str(sym)] = float(ref)
                except ValueError:
                    raise CatalogError(f"{where}: unknown constant key '{ref}' for {sym}") from None
        return out

    @staticmethod
    def _variables_for(fd: Dict[str, Any], where: str) -> Tuple[VariableSpec, ...]:
        specs: List[VariableSpec] = []
        seen_sym, seen_key = set(), set()
        for vd in _require(fd, "variables", where):
            sym = str(_require(vd, "symbol", where))
            key = str(vd.get("key") or sym)
            if sym in seen_sym or key in seen_key:
                raise CatalogError(f"{where}: duplicate variable {sym}")
            seen_sym.add(sym)
            seen_key.add(key)
            specs.append(VariableSpec(
                symbol=sym,
                name=str(vd.get("name", sym)),
                unit=str(_require(vd, "unit", f"{where}/{sym}")),
                description=str(vd.get("description", "")),
                key=key,
            ))
        if not specs:
            raise CatalogError(f"{where}: formula has no variables")
        return tuple(specs)

    @staticmethod
    def from_yaml_dict(d: Dict[str, Any]) -> "Catalog":
        """
        Build a Catalog from a pre-parsed YAML dictionary.
        Expected YAML high-level shape:
          constants:
            G: { value: 6.67430e-11, unit: "m³/(kg·s²)", notes: "..." }
          categories:
            Orbital Mechanics:
              formulas:
                - id: kepler_third_law
                  name: ...
                  description: ...
                  equation: "T² = (4π²/GM)a³"     # documentation only
                  relation: "T**2 = 4*pi**2*a**3/(G*M)"
                  variables:
                    - { symbol: T, name: ..., unit: seconds, key: T }
                  constants: { G: G }              # catalog key or literal
        """
        if not isinstance(d, dict):
            raise CatalogError("Catalog root must be a mapping")

        consts: Dict[str, Constant] = {}
        # ---- Parse constants --------------------------------------------------
        for k, c in (d.get("constants") or {}).items():
            where = f"constant {k}"
            try:
                value = float(_require(c, "value", where))
            except (TypeError, ValueError) as e:
                raise CatalogError(f"{where}: value is not a number") from e
            consts[str(k)] = Constant(key=str(k), value=value,
                                      unit=str(c.get("unit", "")),
                                      notes=str(c.get("notes", "")))

        forms: List[Formula] = []
        # ---- Drill into categories → formulas ---------------------------------
        for cat_name, cat in (d.get("categories") or {}).items():
            for fd in (cat or {}).get("formulas", []):
                fid = str(_require(fd, "id", f"category {cat_name}"))
                variables = Catalog._variables_for(fd, fid)
                constants = Catalog._constants_for(fd, consts, fid)
                clash = set(constants) & {v.symbol for v in variables}
                if clash:
                    raise CatalogError(f"{fid}: constants shadow variables: {sorted(clash)}")
                forms.append(Formula(
                    id=fid,
                    name=str(_require(fd, "name", fid)),
                    description=str(fd.get("description", "")),
                    equation=str(_require(fd, "equation", fid)),
                    variables=variables,
                    constants=MappingProxyType(constants),
                    category=str(cat_name),
                    relation=fd.get("relation"),
                ))
        return Catalog(constants=MappingProxyType(consts), formulas=tuple(forms))

    @staticmethod
    def from_yaml_text(text: str) -> "Catalog":
        """
        Convenience: parse raw YAML string into a Catalog.
        Uses yaml.safe_load for security (no arbitrary object constructors).
        """
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise CatalogError(f"Invalid YAML: {e}") from e
        return Catalog.from_yaml_dict(data)

    @staticmethod
    def from_file(path: str) -> "Catalog":
        """
        Convenience: open a YAML file from disk and parse into a Catalog.
        UTF-8 is enforced; the catalog uses symbols like ☉ and γ.
        """
        with open(path, "r", encoding="utf-8") as f:
            return Catalog.from_yaml_text(f.read())

    def get(self, formula_id: str) -> Optional[Formula]:
        return self._by_id.get(formula_id)

    def __contains__(self, formula_id: object) -> bool:
        return formula_id in self._by_id

    def list_formulas(self) -> List[Dict[str, Any]]:
        """Flattened listing of formulas (id, name, category, equation)."""
        return [
            {"id": f.id, "name": f.name, "category": f.category, "equation": f.equation}
            for f in self.formulas
        ]


@lru_cache(maxsize=None)
def load_catalog(path: Optional[str] = None) -> Catalog:
    """Load (once per path) the catalog at `path`, or the packaged one."""
    path = path or DEFAULT_CATALOG_PATH
    catalog = Catalog.from_file(path)
    logger.info("Loaded %d formulas from %s", len(catalog.formulas), path)
    return catalog
