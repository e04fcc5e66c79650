# -----------------------------------------------------------------------------
# Inversion sets: closed-form solutions per formula
# Purpose:
#   For every catalog formula, one pure function that takes the Known-Value
#   Set (constants merged in) plus a Domain guard and returns
#   {symbol: zero-argument branch}. The solver picks the branch for the
#   unknown and calls it; nothing else is evaluated.
# Conventions:
#   - k[...] is read inside the branch only (the unknown is absent from k).
#   - Every root, log, non-trivial power and division by a user value goes
#     through the Domain guard so a NaN/inf becomes a DomainError instead.
#   - Real principal roots: sqrt rejects negatives, cbrt keeps the sign.
# -----------------------------------------------------------------------------

from __future__ import annotations
import math
from typing import Callable, Dict, Mapping

from .errors import DomainError, UnderdeterminedRelation

PI = math.pi
PI2 = math.pi ** 2

Branch = Callable[[], float]
InversionSet = Callable[[Mapping[str, float], "Domain"], Dict[str, Branch]]


class Domain:
    """Real-valued arithmetic that refuses to leave the reals."""

    def __init__(self, formula_id: str, symbol: str):
        self.formula_id = formula_id
        self.symbol = symbol

    def fail(self, reason: str):
        raise DomainError(self.formula_id, self.symbol, reason)

    def div(self, num: float, den: float) -> float:
        if den == 0:
            self.fail("division by zero")
        return num / den

    def sqrt(self, x: float) -> float:
        if x < 0:
            self.fail(f"square root of negative value {x:g}")
        return math.sqrt(x)

    def cbrt(self, x: float) -> float:
        return math.cbrt(x)

    def log10(self, x: float) -> float:
        if x <= 0:
            self.fail(f"logarithm of non-positive value {x:g}")
        return math.log10(x)

    def ln(self, x: float) -> float:
        if x <= 0:
            self.fail(f"logarithm of non-positive value {x:g}")
        return math.log(x)

    def pow(self, base: float, exp: float) -> float:
        if base < 0 and not float(exp).is_integer():
            self.fail(f"complex result for {base:g}^{exp:g}")
        if base == 0 and exp < 0:
            self.fail("division by zero")
        try:
            return math.pow(base, exp)
        except OverflowError:
            self.fail("result overflows")


INVERSIONS: Dict[str, InversionSet] = {}


def inversion(formula_id: str):
    """Register the decorated function as the inversion set of `formula_id`."""
    def register(fn: InversionSet) -> InversionSet:
        INVERSIONS[formula_id] = fn
        return fn
    return register


# ---------------------------- Orbital mechanics ------------------------------

@inversion("kepler_third_law")
def _kepler(k, d):
    return {
        "T": lambda: d.sqrt(d.div(4 * PI2 * k["a"] ** 3, k["G"] * k["M"])),
        "a": lambda: d.cbrt(k["T"] ** 2 * k["G"] * k["M"] / (4 * PI2)),
        "M": lambda: d.div(4 * PI2 * k["a"] ** 3, k["G"] * k["T"] ** 2),
    }


@inversion("kepler_third_law_solar")
def _kepler_solar(k, d):
    return {
        "P": lambda: d.sqrt(k["a"] ** 3),
        "a": lambda: d.cbrt(k["P"] ** 2),
    }


@inversion("orbital_velocity")
def _orbital_velocity(k, d):
    return {
        "v": lambda: d.sqrt(d.div(k["G"] * k["M"], k["r"])),
        "r": lambda: d.div(k["G"] * k["M"], k["v"] ** 2),
        "M": lambda: k["r"] * k["v"] ** 2 / k["G"],
    }


@inversion("escape_velocity")
def _escape_velocity(k, d):
    return {
        "v_esc": lambda: d.sqrt(d.div(2 * k["G"] * k["M"], k["r"])),
        "r": lambda: d.div(2 * k["G"] * k["M"], k["v_esc"] ** 2),
        "M": lambda: k["r"] * k["v_esc"] ** 2 / (2 * k["G"]),
    }


@inversion("tidal_force")
def _tidal_force(k, d):
    G = k["G"]
    return {
        "F_tidal": lambda: d.div(2 * G * k["M"] * k["m"] * k["R"], k["d"] ** 3),
        "d": lambda: d.cbrt(d.div(2 * G * k["M"] * k["m"] * k["R"], k["F_tidal"])),
        "M": lambda: d.div(k["F_tidal"] * k["d"] ** 3, 2 * G * k["m"] * k["R"]),
        "m": lambda: d.div(k["F_tidal"] * k["d"] ** 3, 2 * G * k["M"] * k["R"]),
        "R": lambda: d.div(k["F_tidal"] * k["d"] ** 3, 2 * G * k["M"] * k["m"]),
    }


@inversion("roche_limit")
def _roche_limit(k, d):
    f = k["factor"]
    return {
        "d": lambda: k["R"] * d.cbrt(f * d.div(k["ρ_M"], k["ρ_m"])),
        "R": lambda: d.div(k["d"], d.cbrt(f * d.div(k["ρ_M"], k["ρ_m"]))),
        "ρ_M": lambda: k["ρ_m"] * d.div(k["d"], k["R"]) ** 3 / f,
        "ρ_m": lambda: d.div(f * k["ρ_M"], d.div(k["d"], k["R"]) ** 3),
    }


@inversion("orbital_energy")
def _orbital_energy(k, d):
    G = k["G"]
    return {
        "E": lambda: d.div(-G * k["M"] * k["m"], 2 * k["a"]),
        "a": lambda: d.div(-G * k["M"] * k["m"], 2 * k["E"]),
        "M": lambda: d.div(-2 * k["E"] * k["a"], G * k["m"]),
        "m": lambda: d.div(-2 * k["E"] * k["a"], G * k["M"]),
    }


@inversion("vis_viva")
def _vis_viva(k, d):
    G = k["G"]

    def geometry():
        return d.div(2, k["r"]) - d.div(1, k["a"])

    return {
        "v": lambda: d.sqrt(G * k["M"] * geometry()),
        "M": lambda: d.div(k["v"] ** 2, G * geometry()),
        "r": lambda: d.div(2, d.div(k["v"] ** 2, G * k["M"]) + d.div(1, k["a"])),
        "a": lambda: d.div(1, d.div(2, k["r"]) - d.div(k["v"] ** 2, G * k["M"])),
    }


@inversion("kepler_third_law_binary")
def _kepler_binary(k, d):
    G = k["G"]

    def total_mass():
        return d.div(4 * PI2 * k["a"] ** 3, G * k["P"] ** 2)

    return {
        "P": lambda: d.sqrt(d.div(4 * PI2 * k["a"] ** 3, G * (k["M1"] + k["M2"]))),
        "a": lambda: d.cbrt(G * (k["M1"] + k["M2"]) * k["P"] ** 2 / (4 * PI2)),
        "M1": lambda: total_mass() - k["M2"],
        "M2": lambda: total_mass() - k["M1"],
    }


@inversion("rotational_velocity")
def _rotational_velocity(k, d):
    return {
        "v": lambda: d.div(2 * PI * k["R"], k["P_rot"]),
        "R": lambda: k["v"] * k["P_rot"] / (2 * PI),
        "P_rot": lambda: d.div(2 * PI * k["R"], k["v"]),
    }


# ---------------------- Radiation & stellar properties -----------------------

@inversion("luminosity")
def _luminosity(k, d):
    s = k["sigma"]
    return {
        "L": lambda: 4 * PI * k["R"] ** 2 * s * k["T"] ** 4,
        "R": lambda: d.sqrt(d.div(k["L"], 4 * PI * s * k["T"] ** 4)),
        "T": lambda: d.pow(d.div(k["L"], 4 * PI * k["R"] ** 2 * s), 0.25),
    }


def _inverse_square(flux: str):
    # F = L / (4πd²), shared by the flux and brightness forms
    def build(k, d):
        return {
            flux: lambda: d.div(k["L"], 4 * PI * k["d"] ** 2),
            "L": lambda: 4 * PI * k["d"] ** 2 * k[flux],
            "d": lambda: d.sqrt(d.div(k["L"], 4 * PI * k[flux])),
        }
    return build


inversion("flux_from_luminosity")(_inverse_square("F"))
inversion("inverse_square_law_brightness")(_inverse_square("b"))


@inversion("wiens_law")
def _wien(k, d):
    return {
        "λmax": lambda: d.div(k["b"], k["T"]),
        "T": lambda: d.div(k["b"], k["λmax"]),
    }


@inversion("flux_temperature")
def _flux_temperature(k, d):
    return {
        "F": lambda: k["sigma"] * k["T"] ** 4,
        "T": lambda: d.pow(d.div(k["F"], k["sigma"]), 0.25),
    }


@inversion("distance_modulus")
def _distance_modulus(k, d):
    return {
        "m": lambda: k["M"] + 5 * d.log10(k["d"]) - 5,
        "M": lambda: k["m"] - 5 * d.log10(k["d"]) + 5,
        "d": lambda: d.pow(10, (k["m"] - k["M"] + 5) / 5),
    }


@inversion("magnitude_flux_relation")
def _magnitude_flux(k, d):
    return {
        "m1": lambda: k["m2"] - 2.5 * d.log10(d.div(k["F1"], k["F2"])),
        "m2": lambda: k["m1"] + 2.5 * d.log10(d.div(k["F1"], k["F2"])),
        "F1": lambda: k["F2"] * d.pow(10, (k["m2"] - k["m1"]) / 2.5),
        "F2": lambda: k["F1"] * d.pow(10, (k["m1"] - k["m2"]) / 2.5),
    }


@inversion("stellar_lifetime")
def _stellar_lifetime(k, d):
    return {
        "τ": lambda: k["factor"] * d.pow(d.div(k["M_sun"], k["M"]), k["exponent"]),
        "M": lambda: d.div(k["M_sun"], d.pow(k["τ"] / k["factor"], 1 / k["exponent"])),
    }


@inversion("mass_luminosity_relation")
def _mass_luminosity(k, d):
    return {
        "L": lambda: d.pow(k["M"], k["exponent"]),
        "M": lambda: d.pow(k["L"], 1 / k["exponent"]),
    }


@inversion("hr_color_index")
def _hr_color_index(k, d):
    f = k["factor"]
    return {
        "B_V": lambda: f * d.log10(d.div(k["F_B"], k["F_V"])) + k["C"],
        "F_B": lambda: k["F_V"] * d.pow(10, (k["B_V"] - k["C"]) / f),
        "F_V": lambda: d.div(k["F_B"], d.pow(10, (k["B_V"] - k["C"]) / f)),
        "C": lambda: k["B_V"] - f * d.log10(d.div(k["F_B"], k["F_V"])),
    }


@inversion("hr_absolute_magnitude")
def _hr_absolute_magnitude(k, d):
    return {
        "M_V": lambda: k["factor"] * d.log10(k["L"] / k["L_sun"]) + k["offset"],
        "L": lambda: k["L_sun"] * d.pow(10, (k["M_V"] - k["offset"]) / k["factor"]),
    }


@inversion("chandrasekhar_limit")
def _chandrasekhar(k, d):
    return {"M_Ch": lambda: 1.4 * k["M_sun"]}


@inversion("white_dwarf_mass_radius")
def _white_dwarf(k, d):
    def refuse():
        raise UnderdeterminedRelation(
            f"white_dwarf_mass_radius: R ∝ M^(-1/3) has no normalization constant; "
            f"{d.symbol} cannot be computed from a single data point")
    return {"R": refuse, "M": refuse}


# ---------------------------- Telescopes & optics ----------------------------

@inversion("angular_size")
def _angular_size(k, d):
    return {
        "θ": lambda: d.div(k["d"], k["D"]),
        "d": lambda: k["θ"] * k["D"],
        "D": lambda: d.div(k["d"], k["θ"]),
    }


@inversion("light_gathering_power")
def _light_gathering_power(k, d):
    return {
        "LGP": lambda: d.div(k["D_obj"], k["D_eye"]) ** 2,
        "D_obj": lambda: k["D_eye"] * d.sqrt(k["LGP"]),
        "D_eye": lambda: d.div(k["D_obj"], d.sqrt(k["LGP"])),
    }


def _ratio(ratio: str, num: str, den: str, factor: str = ""):
    # ratio = [factor *] num / den
    def build(k, d):
        f = k[factor] if factor else 1.0
        return {
            ratio: lambda: f * d.div(k[num], k[den]),
            num: lambda: d.div(k[ratio] * k[den], f),
            den: lambda: d.div(f * k[num], k[ratio]),
        }
    return build


inversion("magnification")(_ratio("M", "f_obj", "f_eye"))
inversion("f_ratio")(_ratio("f_ratio", "f", "D"))
inversion("angular_resolution")(_ratio("θ", "λ", "D", factor="factor"))
inversion("albedo")(_ratio("A", "F_reflected", "F_incident"))


# ------------------------- Cosmology & relativity ----------------------------

@inversion("hubble_law")
def _hubble(k, d):
    return {
        "v": lambda: k["H₀"] * k["d"],
        "H₀": lambda: d.div(k["v"], k["d"]),
        "d": lambda: d.div(k["v"], k["H₀"]),
    }


@inversion("critical_density")
def _critical_density(k, d):
    G, f, to_si = k["G"], k["factor"], k["km_s_Mpc"]
    return {
        "ρ_c": lambda: f * (k["H0"] * to_si) ** 2 / (8 * PI * G),
        "H0": lambda: d.sqrt(8 * PI * G * k["ρ_c"] / f) / to_si,
    }


@inversion("schwarzschild_radius")
def _schwarzschild(k, d):
    G, c, f = k["G"], k["c"], k["factor"]
    return {
        "R_s": lambda: f * G * k["M"] / c ** 2,
        "M": lambda: k["R_s"] * c ** 2 / (f * G),
    }


def _lorentz(k, d):
    # √(1 - v²/c²); speeds at or above c have no real frame
    return d.sqrt(1 - (k["v"] / k["c"]) ** 2)


@inversion("time_dilation")
def _time_dilation(k, d):
    return {
        "Δt'": lambda: d.div(k["Δt"], _lorentz(k, d)),
        "Δt": lambda: k["Δt'"] * _lorentz(k, d),
        "v": lambda: k["c"] * d.sqrt(1 - d.div(k["Δt"], k["Δt'"]) ** 2),
    }


@inversion("length_contraction")
def _length_contraction(k, d):
    return {
        "L'": lambda: k["L"] * _lorentz(k, d),
        "L": lambda: d.div(k["L'"], _lorentz(k, d)),
        "v": lambda: k["c"] * d.sqrt(1 - d.div(k["L'"], k["L"]) ** 2),
    }


@inversion("parallax_distance_radians")
def _parallax_radians(k, d):
    return {
        "d": lambda: d.div(k["AU"], math.tan(k["p"])),
        "p": lambda: math.atan(d.div(k["AU"], k["d"])),
    }


@inversion("parallax_distance_arcsec")
def _parallax_arcsec(k, d):
    return {
        "d": lambda: d.div(1, k["p"]),
        "p": lambda: d.div(1, k["d"]),
    }


# ------------------------- Doppler & spectroscopy ----------------------------

@inversion("doppler_shift")
def _doppler(k, d):
    c = k["c"]
    return {
        "λ_obs": lambda: k["λ_rest"] * (1 + k["v"] / c),
        "λ_rest": lambda: d.div(k["λ_obs"], 1 + k["v"] / c),
        "v": lambda: c * d.div(k["λ_obs"] - k["λ_rest"], k["λ_rest"]),
    }


@inversion("doppler_shift_approx")
def _doppler_approx(k, d):
    c = k["c"]
    return {
        "v": lambda: c * d.div(k["Δλ"], k["λ"]),
        "Δλ": lambda: k["v"] * k["λ"] / c,
        "λ": lambda: d.div(c * k["Δλ"], k["v"]),
    }


# ---------------------- Planetary science & exoplanets -----------------------

@inversion("surface_gravity")
def _surface_gravity(k, d):
    G = k["G"]
    return {
        "g": lambda: d.div(G * k["M"], k["r"] ** 2),
        "M": lambda: k["g"] * k["r"] ** 2 / G,
        "r": lambda: d.sqrt(d.div(G * k["M"], k["g"])),
    }


@inversion("average_density")
def _average_density(k, d):
    return {
        "ρ": lambda: d.div(3 * k["M"], 4 * PI * k["R"] ** 3),
        "M": lambda: 4 * PI * k["R"] ** 3 * k["ρ"] / 3,
        "R": lambda: d.cbrt(d.div(3 * k["M"], 4 * PI * k["ρ"])),
    }


@inversion("planetary_equilibrium_temperature")
def _equilibrium_temperature(k, d):
    f = k["factor"]

    def albedo_term():
        return d.pow(1 - k["A"], 0.25)

    def geometry():
        return d.sqrt(d.div(k["R_star"], f * k["a"]))

    def heated():
        # T_eq / (T_star (1-A)^¼) = √(R_star / 2a)
        return d.div(k["T_eq"], k["T_star"] * albedo_term())

    return {
        "T_eq": lambda: k["T_star"] * geometry() * albedo_term(),
        "T_star": lambda: d.div(k["T_eq"], geometry() * albedo_term()),
        "R_star": lambda: f * k["a"] * heated() ** 2,
        "a": lambda: d.div(k["R_star"], f * heated() ** 2),
        "A": lambda: 1 - d.div(k["T_eq"], k["T_star"] * geometry()) ** 4,
    }


@inversion("greenhouse_effect")
def _greenhouse(k, d):
    return {
        "ΔT_GH": lambda: k["T_surface"] - k["T_eq"],
        "T_surface": lambda: k["T_eq"] + k["ΔT_GH"],
        "T_eq": lambda: k["T_surface"] - k["ΔT_GH"],
    }


# ------------------------- High energy astrophysics --------------------------

@inversion("max_gamma_bohm")
def _max_gamma_bohm(k, d):
    num = 6 * PI * k["e"]
    sT = k["sigma_T"]
    return {
        "γmax": lambda: d.sqrt(d.div(num, sT * k["B"] * k["ξ"])),
        "B": lambda: d.div(num, sT * k["γmax"] ** 2 * k["ξ"]),
        "ξ": lambda: d.div(num, sT * k["B"] * k["γmax"] ** 2),
    }


def _cooling(result: str, gamma: str):
    # result = 6π m_e c / (σ_T B² gamma), shared by the break factor and t_syn
    def build(k, d):
        num = 6 * PI * k["m_e"] * k["c"]
        sT = k["sigma_T"]
        return {
            result: lambda: d.div(num, sT * k["B"] ** 2 * k[gamma]),
            "B": lambda: d.sqrt(d.div(num, sT * k[result] * k[gamma])),
            gamma: lambda: d.div(num, sT * k["B"] ** 2 * k[result]),
        }
    return build


inversion("cooling_break_gamma")(_cooling("γb", "t_age"))
inversion("synchrotron_cooling_timescale")(_cooling("t_syn", "γ"))


@inversion("cooling_break_frequency")
def _cooling_break_frequency(k, d):
    e, m_e, c = k["e"], k["m_e"], k["c"]
    return {
        "νb": lambda: 3 * e * k["B"] / (4 * PI * m_e * c) * k["γb"] ** 2,
        "B": lambda: d.div(4 * PI * m_e * c * k["νb"], 3 * e * k["γb"] ** 2),
        "γb": lambda: d.sqrt(d.div(4 * PI * m_e * c * k["νb"], 3 * e * k["B"])),
    }


@inversion("synchrotron_power")
def _synchrotron_power(k, d):
    sT, c = k["sigma_T"], k["c"]
    return {
        "P_syn": lambda: 4 / 3 * sT * c * k["U_B"] * k["γ"] ** 2,
        "U_B": lambda: d.div(3 * k["P_syn"], 4 * sT * c * k["γ"] ** 2),
        "γ": lambda: d.sqrt(d.div(3 * k["P_syn"], 4 * sT * c * k["U_B"])),
    }


@inversion("magnetic_energy_density")
def _magnetic_energy_density(k, d):
    return {
        "U_B": lambda: k["B"] ** 2 / (8 * PI),
        "B": lambda: d.sqrt(8 * PI * k["U_B"]),
    }


@inversion("power_law_spectrum")
def _power_law(k, d):
    return {
        "N": lambda: k["K"] * d.pow(k["E"], -k["p"]),
        "K": lambda: k["N"] * d.pow(k["E"], k["p"]),
        "E": lambda: d.pow(d.div(k["N"], k["K"]), d.div(-1, k["p"])),
        "p": lambda: d.div(-d.ln(d.div(k["N"], k["K"])), d.ln(k["E"])),
    }


@inversion("spectral_index")
def _spectral_index(k, d):
    return {
        "α": lambda: (k["p"] - 1) / 2,
        "p": lambda: 2 * k["α"] + 1,
    }


# ---------------------------- Stellar structure ------------------------------

@inversion("hydrostatic_balance")
def _hydrostatic(k, d):
    G = k["G"]
    return {
        "dP_dr": lambda: d.div(-G * k["M"] * k["ρ"], k["r"] ** 2),
        "M": lambda: d.div(-k["dP_dr"] * k["r"] ** 2, G * k["ρ"]),
        "ρ": lambda: d.div(-k["dP_dr"] * k["r"] ** 2, G * k["M"]),
        "r": lambda: d.sqrt(d.div(-G * k["M"] * k["ρ"], k["dP_dr"])),
    }
