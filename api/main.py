# --- Astro Formula Resolver API (FastAPI) ------------------------------------
# Purpose: Thin HTTP surface over the resolution engine: browse the formula
# catalog, parse single values, and resolve one unknown per request.
# ------------------------------------------------------------------------------

from __future__ import annotations
import logging
import os
from typing import Any, Dict, Optional, Union

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from astrosolve.catalog import load_catalog
from astrosolve.errors import ParseError
from astrosolve.parsing import parse_value
from astrosolve.pipeline import Resolver
from astrosolve.units import alternative_units

# Load .env for external configuration (catalog path, log level)
load_dotenv()
CATALOG_PATH = os.getenv("ASTROSOLVE_CATALOG_PATH") or None
LOG_LEVEL = os.getenv("ASTROSOLVE_LOG_LEVEL", "INFO").upper()

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("astrosolve.api")

app = FastAPI(title="Astro Formula Resolver API")

# Catalog is loaded once and shared read-only by every request
_catalog = load_catalog(CATALOG_PATH)
_resolver = Resolver(_catalog)
logger.info("Serving %d formulas", len(_catalog.formulas))


# ----------------------------- Schemas ----------------------------------------
class ParseRequest(BaseModel):
    # Raw text as typed into one value field, plus that field's unit (hint only).
    text: str
    unit: Optional[str] = None


class ResolveRequest(BaseModel):
    # symbol -> text in the canonical unit, or symbol -> {unit: text}
    formula_id: str
    inputs: Dict[str, Union[str, float, None, Dict[str, Optional[str]]]]


# ----------------------------- Routes -----------------------------------------
@app.get("/health")
def health(): return {"ok": True}

@app.get("/catalog")
def list_catalog():
    """List formulas (id, name, category, equation) in catalog order."""
    return {"count": len(_catalog.formulas), "items": _catalog.list_formulas()}

@app.get("/formulas/{formula_id}")
def get_formula(formula_id: str) -> Dict[str, Any]:
    """Full definition of one formula, with the input units each variable accepts."""
    formula = _catalog.get(formula_id)
    if formula is None:
        raise HTTPException(status_code=404, detail=f"Unknown formula: {formula_id}")
    payload = formula.to_dict()
    for var in payload["variables"]:
        var["alternative_units"] = alternative_units(var["unit"])
    return payload

@app.get("/units/{unit}/alternatives")
def unit_alternatives(unit: str):
    return {"unit": unit, "alternatives": alternative_units(unit)}

@app.post("/parse")
def parse_text(req: ParseRequest):
    """
    Evaluate one value field. Blank/"null" text yields {"value": null}.
    422: the text is not a finite real number.
    """
    try:
        return {"value": parse_value(req.text, req.unit)}
    except ParseError as e:
        raise HTTPException(status_code=422, detail=str(e))

@app.post("/resolve")
def resolve(req: ResolveRequest):
    """
    Core path: select → parse → convert → solve → package.
    Engine errors come back as {"ok": false, "error", "error_kind"} with 200,
    like any other outcome of the request; the trace is always included.
    """
    return _resolver.try_resolve(req.formula_id, req.inputs).to_dict()
