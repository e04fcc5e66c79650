# Representative values per formula (canonical units), roughly physical.
# They need not satisfy the relation exactly: tests solve one symbol from
# the others and then work backwards from that consistent set.

SAMPLES = {
    # Orbital mechanics
    "kepler_third_law": {"T": 3.156e7, "a": 1.496e11, "M": 1.989e30},
    "kepler_third_law_solar": {"P": 11.86, "a": 5.2},
    "orbital_velocity": {"v": 7.8e3, "r": 6.771e6, "M": 5.972e24},
    "escape_velocity": {"v_esc": 1.12e4, "r": 6.371e6, "M": 5.972e24},
    "tidal_force": {"F_tidal": 1e18, "M": 5.972e24, "m": 7.35e22, "R": 6.371e6, "d": 3.844e8},
    "roche_limit": {"d": 1.8e7, "R": 6.371e6, "ρ_M": 5514, "ρ_m": 3344},
    "orbital_energy": {"E": -2.6e33, "M": 1.989e30, "m": 5.972e24, "a": 1.496e11},
    "vis_viva": {"v": 3.3e4, "M": 1.989e30, "r": 1.2e11, "a": 1.496e11},
    "kepler_third_law_binary": {"P": 1.5e9, "a": 3e12, "M1": 2e30, "M2": 1.5e30},
    "rotational_velocity": {"v": 465.1, "R": 6.371e6, "P_rot": 86164},
    # Radiation & stellar properties
    "luminosity": {"L": 3.828e26, "R": 6.957e8, "T": 5772},
    "flux_from_luminosity": {"F": 1361, "L": 3.828e26, "d": 1.496e11},
    "inverse_square_law_brightness": {"b": 1361, "L": 3.828e26, "d": 1.496e11},
    "wiens_law": {"λmax": 5.02e-7, "T": 5772},
    "flux_temperature": {"F": 6.3e7, "T": 5772},
    "distance_modulus": {"m": 0.03, "M": 0.58, "d": 7.68},
    "magnitude_flux_relation": {"m1": 1.0, "m2": 3.5, "F1": 2e-8, "F2": 2e-9},
    "stellar_lifetime": {"τ": 1e10, "M": 1.989e30},
    "mass_luminosity_relation": {"L": 11.3, "M": 2.0},
    "hr_color_index": {"B_V": 0.65, "F_B": 3e-9, "F_V": 4e-9, "C": 0.1},
    "hr_absolute_magnitude": {"M_V": 4.83, "L": 3.828e26},
    "chandrasekhar_limit": {"M_Ch": 2.7846e30},
    # Telescopes & optics
    "angular_size": {"θ": 9.3e-3, "d": 3.474e6, "D": 3.844e8},
    "light_gathering_power": {"LGP": 40000, "D_obj": 0.28, "D_eye": 0.007},
    "magnification": {"M": 50, "f_obj": 1.0, "f_eye": 0.02},
    "f_ratio": {"f_ratio": 10, "f": 2.0, "D": 0.2},
    "angular_resolution": {"θ": 2.4e-6, "λ": 5.5e-7, "D": 0.28},
    # Cosmology & relativity
    "hubble_law": {"v": 7000, "H₀": 70, "d": 100},
    "critical_density": {"ρ_c": 9.2e-27, "H0": 70},
    "schwarzschild_radius": {"R_s": 2954, "M": 1.989e30},
    "time_dilation": {"Δt'": 2.0, "Δt": 1.0, "v": 2.0e8},
    "length_contraction": {"L'": 0.8, "L": 1.0, "v": 1.8e8},
    "parallax_distance_radians": {"d": 3.086e16, "p": 4.848e-6},
    "parallax_distance_arcsec": {"d": 1.3, "p": 0.768},
    # Doppler & spectroscopy
    "doppler_shift": {"λ_obs": 6.57e-7, "λ_rest": 6.563e-7, "v": 3.0e5},
    "doppler_shift_approx": {"v": 3.0e5, "Δλ": 6.6e-10, "λ": 6.563e-7},
    # Planetary science & exoplanets
    "surface_gravity": {"g": 9.81, "M": 5.972e24, "r": 6.371e6},
    "average_density": {"ρ": 5514, "M": 5.972e24, "R": 6.371e6},
    "planetary_equilibrium_temperature": {"T_eq": 255, "T_star": 5772, "R_star": 6.957e8,
                                          "a": 1.496e11, "A": 0.3},
    "greenhouse_effect": {"ΔT_GH": 33, "T_surface": 288, "T_eq": 255},
    "albedo": {"A": 0.3, "F_reflected": 408, "F_incident": 1361},
    # High energy astrophysics
    "max_gamma_bohm": {"γmax": 1e8, "B": 1e-4, "ξ": 1.0},
    "cooling_break_gamma": {"γb": 1e3, "B": 1e-4, "t_age": 3.156e10},
    "cooling_break_frequency": {"νb": 1e9, "B": 1e-4, "γb": 1e3},
    "synchrotron_cooling_timescale": {"t_syn": 1e6, "B": 1.0, "γ": 1e4},
    "synchrotron_power": {"P_syn": 1e-14, "U_B": 4e-3, "γ": 1e4},
    "magnetic_energy_density": {"U_B": 4e-3, "B": 0.3},
    "power_law_spectrum": {"N": 0.5, "K": 2.0, "E": 3.0, "p": 1.2},
    "spectral_index": {"α": 0.75, "p": 2.5},
    # Stellar structure
    "hydrostatic_balance": {"dP_dr": -1e-2, "M": 1e30, "ρ": 1e3, "r": 7e8},
}

# Formulas whose relation cannot be inverted numerically
UNSOLVABLE = {"white_dwarf_mass_radius"}
