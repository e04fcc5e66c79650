import math
from dataclasses import replace

import pytest

from astrosolve.verify import RESIDUAL_TOLERANCE, RelationError, relation_residual

from samples import SAMPLES


def test_consistent_values_have_no_residual(catalog):
    f = catalog.get("wiens_law")
    assert relation_residual(f, {"λmax": 2.898e-3 / 5772, "T": 5772}) == pytest.approx(0, abs=1e-12)


def test_inconsistent_values_are_flagged(catalog):
    f = catalog.get("surface_gravity")
    residual = relation_residual(f, {"g": 20.0, "M": 5.972e24, "r": 6.371e6})
    assert residual > 0.5


def test_proportionality_has_no_relation(catalog):
    f = catalog.get("white_dwarf_mass_radius")
    assert relation_residual(f, {"R": 7e6, "M": 1.989e30}) is None


def test_names_never_resolve_to_sympy_builtins(catalog):
    # E, N and gamma are ordinary variables here
    f = catalog.get("power_law_spectrum")
    values = {"N": 2.0 * 3.0 ** -1.2, "K": 2.0, "E": 3.0, "p": 1.2}
    assert relation_residual(f, values) == pytest.approx(0, abs=1e-12)
    f = catalog.get("synchrotron_power")
    assert relation_residual(f, {"P_syn": 4 / 3 * 6.6524587158e-29 * 2.99792458e8 * 4e-3 * 1e8,
                                 "U_B": 4e-3, "γ": 1e4}) == pytest.approx(0, abs=1e-12)


def test_both_sides_zero(catalog):
    f = catalog.get("greenhouse_effect")
    assert relation_residual(f, {"ΔT_GH": 0.0, "T_surface": 0.0, "T_eq": 0.0}) == 0.0


def test_complex_side_is_nan(catalog):
    f = catalog.get("orbital_velocity")
    assert math.isnan(relation_residual(f, {"v": 1.0, "r": -1.0, "M": 1.0}))


def test_malformed_relation(catalog):
    broken = replace(catalog.get("wiens_law"), relation="lam_max == b/T")
    with pytest.raises(RelationError):
        relation_residual(broken, {"λmax": 1.0, "T": 1.0})
    broken = replace(catalog.get("wiens_law"), relation="lam_max = b/(T")
    with pytest.raises(RelationError):
        relation_residual(broken, {"λmax": 1.0, "T": 1.0})


@pytest.mark.parametrize("formula_id", sorted(SAMPLES))
def test_every_inversion_satisfies_its_relation(catalog, solver, formula_id):
    formula = catalog.get(formula_id)
    sample = SAMPLES[formula_id]
    for x in sample:
        values = dict(sample)
        values[x] = solver.solve(formula_id, x, {s: v for s, v in sample.items() if s != x})
        residual = relation_residual(formula, values)
        assert residual is not None and residual < RESIDUAL_TOLERANCE, (x, residual)
