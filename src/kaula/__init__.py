# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the terms in COMMERCIAL-LICENSE.md.
# Free for personal, educational, and academic use.
# Commercial use requires a paid license — see COMMERCIAL-LICENSE.md.
"""
Kaula

Semi-analytical tesseral geopotential perturbations for long-term orbit
propagation (STELA model): resonant quad catalog, Kaula inclination and
eccentricity functions, Hansen-series Taylor cache, and the perturbation
gradient in mean equinoctial elements.
"""

from kaula.domain.gravity_field import (
    GravityFieldProvider,
    SphericalHarmonicField,
    UnsupportedFieldDegree,
    load_gravity_field,
)
from kaula.domain.orbital_mechanics import (
    OrbitalConstants,
    EquinoctialOrbit,
    kepler_equation,
)
from kaula.domain.time_systems import (
    EarthRotation,
    FIFTIES_EPOCH,
    from_cnes_julian_date,
    tai_to_utc,
    utc_to_tai,
    utc_to_tai_seconds,
)
from kaula.domain.hansen import (
    eccentricity_function,
    eccentricity_function_derivative,
    hansen_quadrature,
    hansen_series,
)
from kaula.domain.inclination_function import compute_f
from kaula.domain.eccentricity_function import compute_eccentricity_function
from kaula.domain.tesseral_quad import TesseralQuad
from kaula.domain.tesseral_attraction import (
    LagrangeContribution,
    StelaTesseralAttraction,
    TesseralSettings,
    build_quad_catalog,
    resonant_quads,
)

__version__ = "1.3.0"

__all__ = [
    "GravityFieldProvider",
    "SphericalHarmonicField",
    "UnsupportedFieldDegree",
    "load_gravity_field",
    "OrbitalConstants",
    "EquinoctialOrbit",
    "kepler_equation",
    "EarthRotation",
    "FIFTIES_EPOCH",
    "from_cnes_julian_date",
    "tai_to_utc",
    "utc_to_tai",
    "utc_to_tai_seconds",
    "eccentricity_function",
    "eccentricity_function_derivative",
    "hansen_quadrature",
    "hansen_series",
    "compute_f",
    "compute_eccentricity_function",
    "TesseralQuad",
    "LagrangeContribution",
    "StelaTesseralAttraction",
    "TesseralSettings",
    "build_quad_catalog",
    "resonant_quads",
]
