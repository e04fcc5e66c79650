import math

import pytest

from astrosolve.errors import DomainError, InvalidInputCount, UnderdeterminedRelation, UnsupportedFormula
from astrosolve.inversions import INVERSIONS, Domain
from astrosolve.solver import FormulaSolver, find_unknown
from astrosolve.tracer import Tracer

from samples import SAMPLES, UNSOLVABLE


def _others(sample, symbol):
    return {s: v for s, v in sample.items() if s != symbol}


def test_every_formula_has_an_inversion_set(catalog):
    assert set(INVERSIONS) == {f.id for f in catalog.formulas}
    for f in catalog.formulas:
        branches = INVERSIONS[f.id](dict(f.constants), Domain(f.id, "?"))
        assert set(branches) == set(f.symbols), f.id


def test_samples_cover_the_catalog(catalog):
    for f in catalog.formulas:
        if f.id in UNSOLVABLE:
            continue
        assert set(SAMPLES[f.id]) == set(f.symbols), f.id


@pytest.mark.parametrize("formula_id", sorted(SAMPLES))
def test_round_trip(solver, formula_id):
    # Solve X from the sample, then every other Y back from the solved set.
    sample = SAMPLES[formula_id]
    for x in sample:
        consistent = dict(sample)
        consistent[x] = solver.solve(formula_id, x, _others(sample, x))
        for y in sample:
            if y == x:
                continue
            got = solver.solve(formula_id, y, _others(consistent, y))
            assert got == pytest.approx(consistent[y], rel=1e-9, abs=0.0), (x, y)


def test_kepler_earth_orbit(solver):
    a = solver.solve("kepler_third_law", "a", {"T": 3.156e7, "M": 1.989e30})
    assert a == pytest.approx(1.496e11, rel=0.05)


def test_surface_gravity_earth(solver):
    g = solver.solve("surface_gravity", "g", {"M": 5.972e24, "r": 6.371e6})
    assert g == pytest.approx(9.81, rel=0.05)


def test_chandrasekhar_needs_no_inputs(solver):
    assert solver.solve("chandrasekhar_limit", "M_Ch", {}) == pytest.approx(1.4 * 1.989e30)


def test_solved_step_is_traced(solver):
    t = Tracer()
    value = solver.solve("wiens_law", "T", {"λmax": 5.02e-7}, tracer=t)
    assert t.kinds() == ["solved"]
    assert t.steps()[0]["detail"] == {"formula": "wiens_law", "symbol": "T", "value": value}


def test_caller_cannot_override_constants(solver):
    v = solver.solve("orbital_velocity", "v", {"r": 6.771e6, "M": 5.972e24, "G": 1.0})
    assert v == pytest.approx(7672.6, rel=1e-3)


def test_negative_cube_root_stays_real(solver):
    d = solver.solve("tidal_force", "d", {"F_tidal": -1e18, "M": 5.972e24, "m": 7.35e22, "R": 6.371e6})
    assert d < 0 and math.isfinite(d)


@pytest.mark.parametrize("formula_id, unknown, known, reason", [
    ("escape_velocity", "r", {"v_esc": 0.0, "M": 5.972e24}, "division by zero"),
    ("orbital_velocity", "v", {"r": -6.771e6, "M": 5.972e24}, "square root of negative"),
    ("time_dilation", "Δt'", {"Δt": 1.0, "v": 3.5e8}, "square root of negative"),
    ("distance_modulus", "m", {"M": 0.58, "d": 0.0}, "logarithm of non-positive"),
    ("distance_modulus", "d", {"m": 1e4, "M": 0.0}, "overflows"),
    ("hydrostatic_balance", "r", {"dP_dr": 1e-2, "M": 1e30, "ρ": 1e3}, "square root of negative"),
    ("luminosity", "T", {"L": -3.828e26, "R": 6.957e8}, "complex result"),
    ("power_law_spectrum", "p", {"N": 2.0, "K": 2.0, "E": 1.0}, "division by zero"),
    ("kepler_third_law", "M", {"T": 3.156e7, "a": 1e200}, "overflows"),
])
def test_domain_errors(solver, formula_id, unknown, known, reason):
    with pytest.raises(DomainError) as e:
        solver.solve(formula_id, unknown, known)
    assert e.value.formula_id == formula_id
    assert e.value.symbol == unknown
    if reason:
        assert reason in e.value.reason


def test_length_contraction_at_light_speed_is_zero(solver):
    # v == c is the boundary: zero length, not a domain error
    assert solver.solve("length_contraction", "L'", {"L": 1.0, "v": 2.998e8}) == 0.0


@pytest.mark.parametrize("unknown, known", [("R", {"M": 1.989e30}), ("M", {"R": 7e6})])
def test_white_dwarf_is_underdetermined(solver, unknown, known):
    with pytest.raises(UnderdeterminedRelation, match="no normalization constant"):
        solver.solve("white_dwarf_mass_radius", unknown, known)


def test_unsupported(solver, catalog):
    with pytest.raises(UnsupportedFormula):
        solver.solve("warp_drive", "v", {})
    with pytest.raises(UnsupportedFormula):
        solver.solve("chandrasekhar_limit", "M_sun", {})
    with pytest.raises(UnsupportedFormula):
        solver.solve("wiens_law", "b", {"λmax": 5e-7, "T": 5772})
    empty = FormulaSolver(catalog, registry={})
    assert not empty.supports("wiens_law")
    with pytest.raises(UnsupportedFormula):
        empty.solve("wiens_law", "T", {"λmax": 5.02e-7})


def test_find_unknown(catalog):
    kepler = catalog.get("kepler_third_law")
    assert find_unknown(kepler, {"T": 1.0, "a": None, "M": 2.0}) == "a"
    assert find_unknown(kepler, {"T": 1.0, "M": 2.0}) == "a"

    with pytest.raises(InvalidInputCount) as e:
        find_unknown(kepler, {"T": 1.0, "a": 1.0, "M": 1.0})
    assert e.value.count == 0
    assert "At least one variable" in str(e.value)

    with pytest.raises(InvalidInputCount) as e:
        find_unknown(kepler, {"T": 1.0})
    assert e.value.symbols == ["a", "M"]
    assert str(e.value) == "Only one variable can be unknown. Found 2 empty values: a, M"


def test_zero_is_a_value_not_an_unknown(catalog):
    assert find_unknown(catalog.get("greenhouse_effect"),
                        {"ΔT_GH": 0.0, "T_surface": 288.0}) == "T_eq"
