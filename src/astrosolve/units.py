# -----------------------------------------------------------------------------
# Units & Conversion Utilities
# Purpose:
#   Map the units a user may type for a variable onto that variable's
#   canonical unit, and pick a friendlier secondary unit for display.
# Scope:
#   - Fixed catalog of astronomy units (not a dimensional-analysis engine).
#   - Every unit carries (dimension, factor, offset): the affine map onto the
#     reference unit of its dimension, reference = raw * factor + offset.
#     Two units convert into each other through that shared reference.
# Safety:
#   - Unknown or mismatched units never raise: the value passes through
#     unchanged and a warning is logged (and traced when a tracer is given).
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
import math
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .tracer import Tracer

logger = logging.getLogger(__name__)

PC_M = 3.086e16
AU_M = 1.496e11
ARCSEC_RAD = math.pi / 648000.0


@dataclass(frozen=True)
class UnitRule:
    dimension: str
    factor: float
    offset: float = 0.0


@dataclass(frozen=True)
class DisplayConversion:
    value: float
    unit: str

    @property
    def text(self) -> str:
        return f"{format_number(self.value)} {self.unit}"


def normalize_unit(unit: str) -> str:
    """Lookup key for a unit name: lower-cased, all whitespace removed."""
    return re.sub(r"\s+", "", str(unit)).lower()


# Written with natural spellings; keys are normalized once at import.
_UNITS: Dict[str, UnitRule] = {
    # length -> meters
    "meters": UnitRule("length", 1.0),
    "m": UnitRule("length", 1.0),
    "km": UnitRule("length", 1e3),
    "cm": UnitRule("length", 1e-2),
    "mm": UnitRule("length", 1e-3),
    "μm": UnitRule("length", 1e-6),
    "um": UnitRule("length", 1e-6),
    "nm": UnitRule("length", 1e-9),
    "AU": UnitRule("length", AU_M),
    "light-minutes": UnitRule("length", AU_M / 8.317),
    "light-years": UnitRule("length", 9.461e15),
    "ly": UnitRule("length", 9.461e15),
    "parsecs": UnitRule("length", PC_M),
    "pc": UnitRule("length", PC_M),
    "kpc": UnitRule("length", PC_M * 1e3),
    "Mpc": UnitRule("length", PC_M * 1e6),

    # mass -> kg
    "kg": UnitRule("mass", 1.0),
    "kilograms": UnitRule("mass", 1.0),
    "g": UnitRule("mass", 1e-3),
    "grams": UnitRule("mass", 1e-3),
    "M☉": UnitRule("mass", 1.989e30),
    "M_☉": UnitRule("mass", 1.989e30),
    "M_sun": UnitRule("mass", 1.989e30),
    "M_earth": UnitRule("mass", 5.972e24),

    # time -> seconds
    "seconds": UnitRule("time", 1.0),
    "s": UnitRule("time", 1.0),
    "minutes": UnitRule("time", 60.0),
    "hours": UnitRule("time", 3600.0),
    "days": UnitRule("time", 86400.0),
    "years": UnitRule("time", 3.156e7),
    "y": UnitRule("time", 3.156e7),
    "yr": UnitRule("time", 3.156e7),

    # angle -> radians
    "radians": UnitRule("angle", 1.0),
    "rad": UnitRule("angle", 1.0),
    "degrees": UnitRule("angle", math.pi / 180.0),
    "deg": UnitRule("angle", math.pi / 180.0),
    "°": UnitRule("angle", math.pi / 180.0),
    "arcminutes": UnitRule("angle", math.pi / 10800.0),
    "arcmin": UnitRule("angle", math.pi / 10800.0),
    "arcseconds": UnitRule("angle", ARCSEC_RAD),
    "arcsec": UnitRule("angle", ARCSEC_RAD),
    "milliarcseconds": UnitRule("angle", ARCSEC_RAD * 1e-3),
    "mas": UnitRule("angle", ARCSEC_RAD * 1e-3),

    # temperature -> Kelvin (Celsius family is affine)
    "Kelvin": UnitRule("temperature", 1.0),
    "K": UnitRule("temperature", 1.0),
    "°C": UnitRule("temperature", 1.0, 273.15),
    "Celsius": UnitRule("temperature", 1.0, 273.15),
    "C": UnitRule("temperature", 1.0, 273.15),
    "°F": UnitRule("temperature", 5.0 / 9.0, 273.15 - 32.0 * 5.0 / 9.0),
    "Fahrenheit": UnitRule("temperature", 5.0 / 9.0, 273.15 - 32.0 * 5.0 / 9.0),

    # velocity -> m/s
    "m/s": UnitRule("velocity", 1.0),
    "meters per second": UnitRule("velocity", 1.0),
    "km/s": UnitRule("velocity", 1e3),
    "km/h": UnitRule("velocity", 1000.0 / 3600.0),

    # acceleration -> m/s²
    "m/s²": UnitRule("acceleration", 1.0),
    "m/s^2": UnitRule("acceleration", 1.0),
    "cm/s²": UnitRule("acceleration", 1e-2),

    # power -> W
    "W": UnitRule("power", 1.0),
    "Watts": UnitRule("power", 1.0),
    "L☉": UnitRule("power", 3.828e26),
    "L_☉": UnitRule("power", 3.828e26),
    "L_sun": UnitRule("power", 3.828e26),
    "erg/s": UnitRule("power", 1e-7),

    # flux -> W/m²
    "W/m²": UnitRule("flux", 1.0),
    "W/m^2": UnitRule("flux", 1.0),
    "Watts per square meter": UnitRule("flux", 1.0),
    "erg/(s·cm²)": UnitRule("flux", 1e-3),

    # energy -> J
    "J": UnitRule("energy", 1.0),
    "Joules": UnitRule("energy", 1.0),
    "erg": UnitRule("energy", 1e-7),
    "eV": UnitRule("energy", 1.602176634e-19),

    # energy density -> J/m³
    "J/m³": UnitRule("energy_density", 1.0),
    "J/m^3": UnitRule("energy_density", 1.0),
    "erg/cm³": UnitRule("energy_density", 0.1),

    # force -> N
    "N": UnitRule("force", 1.0),
    "Newtons": UnitRule("force", 1.0),
    "dyn": UnitRule("force", 1e-5),

    # frequency -> Hz
    "Hz": UnitRule("frequency", 1.0),
    "Hertz": UnitRule("frequency", 1.0),
    "kHz": UnitRule("frequency", 1e3),
    "MHz": UnitRule("frequency", 1e6),
    "GHz": UnitRule("frequency", 1e9),

    # density -> kg/m³
    "kg/m³": UnitRule("density", 1.0),
    "kg/m^3": UnitRule("density", 1.0),
    "kilograms per cubic meter": UnitRule("density", 1.0),
    "g/cm³": UnitRule("density", 1e3),
    "g/cm^3": UnitRule("density", 1e3),

    # pressure gradient -> Pa/m
    "Pa/m": UnitRule("pressure_gradient", 1.0),
    "atm/m": UnitRule("pressure_gradient", 101325.0),

    # magnetic field -> Tesla (bare "G" would collide with grams)
    "Tesla": UnitRule("magnetic_field", 1.0),
    "T": UnitRule("magnetic_field", 1.0),
    "Gauss": UnitRule("magnetic_field", 1e-4),
    "μG": UnitRule("magnetic_field", 1e-10),

    # Hubble constant -> 1/s
    "km/(s·Mpc)": UnitRule("rate", 1e3 / (PC_M * 1e6)),
    "km/s/Mpc": UnitRule("rate", 1e3 / (PC_M * 1e6)),
    "1/s": UnitRule("rate", 1.0),

    # magnitudes and pure numbers
    "magnitude": UnitRule("magnitude", 1.0),
    "mag": UnitRule("magnitude", 1.0),
    "dimensionless": UnitRule("dimensionless", 1.0),
}

UNIT_TABLE: Dict[str, UnitRule] = {normalize_unit(k): v for k, v in _UNITS.items()}

# Alternative input units per canonical unit (canonical unit itself goes first
# at lookup time). Order here is the unit-priority order of input fields.
_ALTERNATIVES: Dict[str, List[str]] = {
    "meters": ["m", "km", "AU", "pc", "light-years", "ly", "cm", "mm", "μm", "nm"],
    "m": ["meters", "km", "AU", "pc", "light-years", "ly", "cm", "mm", "μm", "nm"],
    "AU": ["km", "meters", "light-minutes"],
    "parsecs": ["pc", "light-years", "ly", "AU", "meters"],
    "pc": ["parsecs", "light-years", "ly", "AU", "meters"],
    "Mpc": ["kpc", "pc", "light-years"],
    "kg": ["kilograms", "g", "M☉", "M_☉", "M_sun", "M_earth"],
    "kilograms": ["kg", "g", "M☉", "M_☉", "M_sun", "M_earth"],
    "M_☉": ["M☉", "M_sun", "kg", "M_earth"],
    "seconds": ["s", "minutes", "hours", "days", "years"],
    "s": ["seconds", "minutes", "hours", "days", "years"],
    "years": ["y", "yr", "seconds", "days"],
    "m/s": ["meters per second", "km/s", "km/h"],
    "km/s": ["m/s", "km/h"],
    "m/s²": ["m/s^2", "cm/s²"],
    "W": ["Watts", "L☉", "L_sun", "erg/s"],
    "L_☉": ["L☉", "L_sun", "W", "erg/s"],
    "W/m²": ["Watts per square meter", "erg/(s·cm²)"],
    "J": ["Joules", "erg", "eV"],
    "J/m³": ["erg/cm³"],
    "N": ["Newtons", "dyn"],
    "Kelvin": ["K", "°C", "Celsius"],
    "K": ["Kelvin", "°C", "Celsius"],
    "Hz": ["Hertz", "kHz", "MHz", "GHz"],
    "kg/m³": ["kilograms per cubic meter", "g/cm³"],
    "Pa/m": ["atm/m"],
    "Tesla": ["T", "Gauss", "μG"],
    "Gauss": ["Tesla", "μG"],
    "km/(s·Mpc)": ["km/s/Mpc", "1/s"],
    "radians": ["rad", "degrees", "deg", "°"],
    "rad": ["radians", "degrees", "deg", "°"],
    "arcseconds": ["arcsec", "milliarcseconds", "arcminutes", "degrees", "radians"],
}
ALTERNATIVE_UNITS: Dict[str, Tuple[str, ...]] = {
    normalize_unit(k): tuple(v) for k, v in _ALTERNATIVES.items()
}

# Display targets per source unit: (target unit, lo, hi), where [lo, hi] is the
# natural range of the *converted* magnitude in the target unit. First fit wins.
_DISPLAY: Dict[str, List[Tuple[str, float, float]]] = {
    "radians": [("degrees", 0.0, 360.0)],
    "rad": [("degrees", 0.0, 360.0)],
    "degrees": [("radians", 0.0, 2 * math.pi)],
    "deg": [("radians", 0.0, 2 * math.pi)],
    "arcseconds": [("milliarcseconds", 1.0, 1000.0), ("arcminutes", 1.0, 60.0),
                   ("degrees", 1.0, 360.0)],
    "meters": [("nm", 1.0, 1000.0), ("μm", 1.0, 1000.0), ("mm", 1.0, 1000.0),
               ("km", 1.0, 1e5), ("AU", 6.68459e-4, 1e4),
               ("light-years", 0.1, 3.26), ("pc", 1.0, 1e12)],
    "m": [("nm", 1.0, 1000.0), ("μm", 1.0, 1000.0), ("mm", 1.0, 1000.0),
          ("km", 1.0, 1e5), ("AU", 6.68459e-4, 1e4),
          ("light-years", 0.1, 3.26), ("pc", 1.0, 1e12)],
    "parsecs": [("AU", 1.0, 1e4), ("light-years", 0.1, 1e6), ("kpc", 1.0, 1000.0),
                ("Mpc", 1.0, 1e6)],
    "pc": [("AU", 1.0, 1e4), ("light-years", 0.1, 1e6), ("kpc", 1.0, 1000.0),
           ("Mpc", 1.0, 1e6)],
    "AU": [("km", 1.496e5, 1.496e11), ("light-minutes", 0.1, 1e4)],
    "seconds": [("minutes", 1.0, 60.0), ("hours", 1.0, 24.0), ("days", 1.0, 366.0),
                ("years", 1.0, 1e12)],
    "s": [("minutes", 1.0, 60.0), ("hours", 1.0, 24.0), ("days", 1.0, 366.0),
          ("years", 1.0, 1e12)],
    "years": [("days", 1.0, 366.0)],
    "kg": [("M☉", 0.03, 1e6), ("M_earth", 1e-4, 1e4), ("g", 1.0, 1000.0)],
    "m/s": [("km/s", 1.0, 1e5), ("km/h", 0.36, 3600.0)],
    "km/s": [("m/s", 1.0, 1000.0)],
    "W": [("L☉", 1e-4, 1e7), ("erg/s", 1e4, 1e7)],
    "W/m²": [("erg/(s·cm²)", 1.0, 1000.0)],
    "J": [("eV", 1.0, 1e9), ("erg", 1.0, 1e7)],
    "J/m³": [("erg/cm³", 1.0, 1e4)],
    "Kelvin": [("°C", -273.15, 1e6)],
    "K": [("°C", -273.15, 1e6)],
    "Hz": [("kHz", 1.0, 1000.0), ("MHz", 1.0, 1000.0), ("GHz", 1.0, 1e6)],
    "kg/m³": [("g/cm³", 1e-3, 1e4)],
    "Pa/m": [("atm/m", 1.0, 1e10)],
    "Tesla": [("Gauss", 1e-6, 1e4)],
    "Gauss": [("μG", 1.0, 1e6)],
}
DISPLAY_TARGETS: Dict[str, Tuple[Tuple[str, float, float], ...]] = {
    normalize_unit(k): tuple(v) for k, v in _DISPLAY.items()
}

# Long names for presentation
_UNIT_NAMES = {
    "m": "meters", "s": "seconds", "kg": "kilograms", "W": "Watts",
    "J": "Joules", "K": "Kelvin", "Hz": "Hertz", "Pa": "Pascals",
    "N": "Newtons", "M☉": "Solar Masses", "M_☉": "Solar Masses",
    "M_earth": "Earth Masses", "L☉": "Solar Luminosities",
    "L_☉": "Solar Luminosities", "AU": "Astronomical Units", "pc": "parsecs",
    "Mpc": "megaparsecs", "km/s": "kilometers per second",
    "m/s": "meters per second", "m/s²": "meters per second squared",
    "W/m²": "Watts per square meter", "kg/m³": "kilograms per cubic meter",
    "magnitude": "magnitude", "mag": "magnitude",
    "dimensionless": "dimensionless", "arcseconds": "arcseconds",
    "arcsec": "arcseconds", "radians": "radians", "rad": "radians",
    "Gauss": "Gauss", "Tesla": "Tesla", "T": "Tesla",
}


def lookup(unit: str) -> Optional[UnitRule]:
    return UNIT_TABLE.get(normalize_unit(unit))


def _same_unit(a: str, b: str) -> bool:
    return a == b or a.strip().lower() == b.strip().lower()


def _convert(value: float, src: UnitRule, dst: UnitRule) -> float:
    return (value * src.factor + src.offset - dst.offset) / dst.factor


def alternative_units(base_unit: str) -> List[str]:
    """
    Units a value for `base_unit` may be typed in: the base unit first,
    then the catalog order, without duplicates.
    """
    out: List[str] = [base_unit]
    for u in ALTERNATIVE_UNITS.get(normalize_unit(base_unit), ()):
        if u not in out:
            out.append(u)
    return out


def to_base(value: float, from_unit: str, base_unit: str,
            tracer: Optional[Tracer] = None) -> float:
    """
    Convert `value` from `from_unit` to `base_unit`.
    Returns the value unchanged (with a logged warning) when either unit is
    not in the table or the two measure different things.
    """
    if _same_unit(from_unit, base_unit):
        return value

    src, dst = lookup(from_unit), lookup(base_unit)
    if src is None or dst is None or src.dimension != dst.dimension:
        logger.warning("No conversion factor found from %s to %s, using value as-is",
                       from_unit, base_unit)
        if tracer is not None:
            tracer.add("unit_fallback", {"from": from_unit, "to": base_unit, "value": value})
        return value

    return _convert(value, src, dst)


def convert(value: float, from_unit: str, to_unit: str) -> Optional[float]:
    """Strict conversion between two catalog units; None when impossible."""
    if _same_unit(from_unit, to_unit):
        return value
    src, dst = lookup(from_unit), lookup(to_unit)
    if src is None or dst is None or src.dimension != dst.dimension:
        return None
    return _convert(value, src, dst)


def display_conversion(value: float, base_unit: str) -> Optional[DisplayConversion]:
    """
    Pick a secondary unit for showing `value` (given in `base_unit`).
    None means "show it as is".
    """
    targets = DISPLAY_TARGETS.get(normalize_unit(base_unit))
    if not targets:
        return None

    for unit, lo, hi in targets:
        converted = convert(value, base_unit, unit)
        if converted is not None and lo <= abs(converted) <= hi:
            return DisplayConversion(value=converted, unit=unit)

    # Nothing in range: very large / very small values still get the first target
    magnitude = abs(value)
    if magnitude >= 1e6 or (0 < magnitude < 1e-3):
        unit = targets[0][0]
        converted = convert(value, base_unit, unit)
        if converted is not None:
            return DisplayConversion(value=converted, unit=unit)
    return None


def format_number(value: float) -> str:
    """Scientific outside [1e-3, 1e6), otherwise fixed with 2/4/6 decimals."""
    if value == 0:
        return "0"
    mag = abs(value)
    if mag >= 1e6 or mag < 1e-3:
        return f"{value:.4e}"
    if mag >= 1000:
        return f"{value:.2f}"
    if mag >= 1:
        return f"{value:.4f}"
    return f"{value:.6f}"


def describe_unit(unit: str) -> str:
    return _UNIT_NAMES.get(unit, unit)
