# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the terms in COMMERCIAL-LICENSE.md.
# Free for personal, educational, and academic use.
# Commercial use requires a paid license — see COMMERCIAL-LICENSE.md.
"""Angular part of the Kaula eccentricity function.

G_npq(e)·exp(i·q·ϖ) = [G_npq(e)/e^|q|] · (ex + i·sign(q)·ey)^|q|

The bracketed magnitude comes from the TesseralQuad Taylor cache; this
module expands the second factor with the binomial theorem:

    Re = e^|q| cos(qϖ) = Σ_j (-1)^j C(|q|, 2j)   ex^(|q|-2j)   ey^(2j)
    Im = e^|q| sin(qϖ) = Σ_j (-1)^j C(|q|, 2j+1) ex^(|q|-2j-1) ey^(2j+1) sign(q)
"""

import math
from typing import Any

import numpy as np


def compute_eccentricity_function(orbit: Any, quad: Any) -> np.ndarray:
    """Binomial expansion of (ex + i·sign(q)·ey)^|q| and its derivatives.

    Args:
        orbit: Equinoctial state exposing ex and ey.
        quad: Quad exposing q.

    Returns:
        [Re, Im, dRe/dex, dRe/dey, dIm/dex, dIm/dey]
    """
    ex = orbit.ex
    ey = orbit.ey
    q = quad.q
    absq = abs(q)
    sign_q = float((q > 0) - (q < 0))

    max0 = absq // 2
    maxm1 = (absq - 1) // 2
    maxm2 = (absq - 2) // 2

    binom = [float(math.comb(absq, i)) for i in range(2 * max0 + 2)]

    eqcos = 0.0
    for j in range(max0 + 1):
        eqcos += (-1.0) ** j * binom[2 * j] * ex ** (absq - 2 * j) * ey ** (2 * j)

    eqsin = 0.0
    for j in range(maxm1 + 1):
        eqsin += (
            sign_q * (-1.0) ** j * binom[2 * j + 1]
            * ex ** (absq - 2 * j - 1) * ey ** (2 * j + 1)
        )

    d_eqcos_ex = 0.0
    for j in range(maxm1 + 1):
        d_eqcos_ex += (
            (-1.0) ** j * binom[2 * j] * ex ** (absq - 2 * j - 1) * ey ** (2 * j) * (absq - 2 * j)
        )

    d_eqcos_ey = 0.0
    for j in range(1, max0 + 1):
        d_eqcos_ey += (
            (-1.0) ** j * binom[2 * j] * ex ** (absq - 2 * j) * ey ** (2 * j - 1) * 2 * j
        )

    d_eqsin_ex = 0.0
    for j in range(maxm2 + 1):
        d_eqsin_ex += (
            sign_q * (-1.0) ** j * binom[2 * j + 1]
            * ex ** (absq - 2 * j - 2) * ey ** (2 * j + 1) * (absq - 2 * j - 1)
        )

    d_eqsin_ey = 0.0
    for j in range(maxm1 + 1):
        d_eqsin_ey += (
            sign_q * (-1.0) ** j * binom[2 * j + 1]
            * ex ** (absq - 2 * j - 1) * ey ** (2 * j) * (2 * j + 1)
        )

    return np.array([eqcos, eqsin, d_eqcos_ex, d_eqcos_ey, d_eqsin_ex, d_eqsin_ey])
