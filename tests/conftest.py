# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the terms in COMMERCIAL-LICENSE.md.
# Free for personal, educational, and academic use.
# Commercial use requires a paid license — see COMMERCIAL-LICENSE.md.
"""Shared fixtures: a 7x7 STELA reference field and a GEO orbit."""

from datetime import datetime, timezone

import pytest

from kaula.domain.gravity_field import SphericalHarmonicField
from kaula.domain.orbital_mechanics import EquinoctialOrbit
from kaula.domain.time_systems import tai_to_utc

STELA_MU = 398600441449820.0
STELA_AE = 6378136.46

# Unnormalized (fc, fs) of the STELA GRGS reference field, tesseral part up
# to degree 7. For even n - m, (C, S) = (fc, fs); for odd n - m,
# (C, S) = (fs, -fc).
STELA_FC_FS = {
    (2, 1): (-1.71041723998733E-09, -2.10257928166259E-10),
    (2, 2): (1.57457394852328E-06, -9.03874613903651E-07),
    (3, 1): (2.19298008521395E-06, 2.67994204424007E-07),
    (3, 2): (2.11430029406192E-07, 3.09057987103261E-07),
    (3, 3): (1.00573583503370E-07, 1.97198191638981E-07),
    (4, 1): (4.48982549284929E-07, -5.08819881050582E-07),
    (4, 2): (7.83515989043412E-08, 1.48150645197125E-07),
    (4, 3): (1.20114164321369E-08, 5.92193052150293E-08),
    (4, 4): (-3.98275086528604E-09, 6.52486696015096E-09),
    (5, 1): (-5.35159907035942E-08, -8.05589565010746E-08),
    (5, 2): (5.23066175268146E-08, 1.05539452567502E-07),
    (5, 3): (-1.49153834399890E-08, -7.09190205479633E-09),
    (5, 4): (-3.87499729475374E-10, -2.29889994258429E-09),
    (5, 5): (4.30452849401142E-10, -1.64806063974034E-09),
    (6, 1): (-2.04969401077996E-08, -5.95498987063517E-08),
    (6, 2): (6.14809278786964E-09, -4.65045896026979E-08),
    (6, 3): (-1.83142783342438E-10, 1.19337231152767E-09),
    (6, 4): (-3.27180887553721E-10, -1.78440986766777E-09),
    (6, 5): (4.32949214597265E-10, -2.15596998175908E-10),
    (6, 6): (2.20166967676734E-12, -5.52898532225177E-11),
    (7, 1): (2.04579232483885E-07, 6.88682995756525E-08),
    (7, 2): (-9.24882109962778E-09, 3.29236456008551E-08),
    (7, 3): (3.51027844109090E-09, -3.07292066161126E-09),
    (7, 4): (2.63595579307789E-10, -5.84435766316767E-10),
    (7, 5): (6.65483718822662E-13, 6.40132886359319E-12),
    (7, 6): (-1.05366085647820E-11, -2.49019995881171E-11),
    (7, 7): (2.88239698529975E-14, 4.49551039511791E-13),
}


def _stela_coefficients() -> dict[tuple[int, int], tuple[float, float]]:
    coefficients: dict[tuple[int, int], tuple[float, float]] = {}
    for (n, m), (fc, fs) in STELA_FC_FS.items():
        if (n - m) % 2 == 0:
            coefficients[(n, m)] = (fc, fs)
        else:
            coefficients[(n, m)] = (fs, -fc)
    return coefficients


@pytest.fixture
def stela_field():
    """Unnormalized 7x7 tesseral field (no zonal terms)."""
    return SphericalHarmonicField.from_coefficients(
        _stela_coefficients(), mu=STELA_MU, ae=STELA_AE, name="stela-grgs-7x7",
    )


@pytest.fixture
def reference_epoch():
    """1997 day 230 (Aug 18), 00:00:35 TAI."""
    return tai_to_utc(datetime(1997, 8, 18, 0, 0, 35))


@pytest.fixture
def geo_orbit(reference_epoch):
    """Circular equatorial orbit at the geostationary radius."""
    return EquinoctialOrbit(
        a=4.21642e7, ex=0.0, ey=0.0, ix=0.0, iy=0.0, mean_longitude=0.0,
        epoch=reference_epoch, mu=STELA_MU,
    )


@pytest.fixture
def utc_epoch():
    return datetime(2024, 1, 1, tzinfo=timezone.utc)
