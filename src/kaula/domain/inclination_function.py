# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the terms in COMMERCIAL-LICENSE.md.
# Free for personal, educational, and academic use.
# Commercial use requires a paid license — see COMMERCIAL-LICENSE.md.
"""Kaula inclination function in equinoctial inclination-vector form.

For a quad (n, m, p, q), the product F_nmp(i)·exp(i·m·Ω) term of the Kaula
expansion is written as Fx + i·Fy, a polynomial in (ix, iy) times a power
of (1 - ix² - iy²) = cos²(i/2). With h = m - n + 2p:

    Fx = A (1-ix²-iy²)^(c/2) Σ_k Σ_j B_k H_j t^d_k ix^(|h|-2j) iy^(2j)
    Fy = -A (1-ix²-iy²)^(c/2) Σ_k Σ_j B_k D_j t^d_k ix^(|h|-2j+3) iy^(2j-3)

where t = (ix² + iy²)/(1 - ix² - iy²) = tan²(i/2) and

    A   = (-1)^δ (n+m)! / (2^n p! (n-p)!)
    B_k = (-1)^k C(2n-2p, k) C(2p, n-m-k),  k in [max(0, n-m-2p), min(n-m, 2n-2p)]
    H_j = (-1)^j C(|h|, 2j)
    D_j = (-1)^j sign(h) C(|h|, 2j-3)

Reference: Kaula, "Theory of Satellite Geodesy", Ch. 3.
"""

import math
from typing import Any

import numpy as np


def _binomial(n: int, k: int) -> float:
    """C(n, k), zero outside 0 <= k <= n."""
    if k < 0 or k > n:
        return 0.0
    return float(math.comb(n, k))


def _sign(x: int) -> float:
    if x > 0:
        return 1.0
    if x < 0:
        return -1.0
    return 0.0


def compute_f(orbit: Any, quad: Any) -> np.ndarray:
    """Inclination function and its inclination-vector derivatives.

    Args:
        orbit: Equinoctial state exposing ix and iy.
        quad: Quad exposing n, m and p.

    Returns:
        [Fx, Fy, dFx/dix, dFx/diy, dFy/dix, dFy/diy]

    Raises:
        ValueError: For ix² + iy² >= 1 (retrograde equatorial orbit).
    """
    ix = orbit.ix
    iy = orbit.iy
    n, m, p = quad.n, quad.m, quad.p

    h = m - n + 2 * p
    absh = abs(h)
    alpha = max(0, n - m - 2 * p)
    beta = min(n - m, 2 * n - 2 * p)
    m_prime = absh // 2
    m_second = (absh + 3) // 2

    c = 3 * n - m - 2 * p if h >= 0 else n + m + 2 * p

    d = [0] * (beta + 1)
    for k in range(alpha, beta + 1):
        d[k] = k if h >= 0 else h + k

    if (n - m) % 2 == 0:
        delta = (n - m) // 2
    else:
        delta = (n - m + 1) // 2

    a = (-1.0) ** delta * math.factorial(n + m) / (
        2.0 ** n * math.factorial(p) * math.factorial(n - p)
    )

    cos2 = 1.0 - ix * ix - iy * iy
    if cos2 <= 0.0:
        raise ValueError(
            f"inclination vector ({ix}, {iy}) has no finite tan(i/2); ix² + iy² must be < 1"
        )
    ixiycdiv2 = cos2 ** (c / 2.0)
    ixiycm1div2 = cos2 ** (c / 2.0 - 1.0)
    ixiy = (ix * ix + iy * iy) / cos2

    b = np.zeros(beta + 1)
    for k in range(alpha, beta + 1):
        b[k] = (-1.0) ** k * _binomial(2 * n - 2 * p, k) * _binomial(2 * p, n - m - k)

    h_tab = np.array([(-1.0) ** j * _binomial(absh, 2 * j) for j in range(m_prime + 1)])
    d_tab = np.array(
        [(-1.0) ** j * _sign(h) * _binomial(absh, 2 * j - 3) for j in range(m_second + 1)]
    )

    # t^d and its derivatives; dt/dix = tx (1 + t)
    ixiypd = np.zeros(beta + 1)
    ixiypddix = np.zeros(beta + 1)
    ixiypddiy = np.zeros(beta + 1)
    tx = 2.0 * ix / cos2
    ty = 2.0 * iy / cos2
    for k in range(alpha, beta + 1):
        ixiypd[k] = ixiy ** d[k]
        if d[k] >= 1:
            ixiypddix[k] = d[k] * ixiy ** (d[k] - 1) * tx * (1.0 + ixiy)
            ixiypddiy[k] = d[k] * ixiy ** (d[k] - 1) * ty * (1.0 + ixiy)

    ks = range(alpha, beta + 1)

    # Fx family
    sum_x = 0.0
    sum_x_dix = 0.0
    sum_x_diy = 0.0
    sum_x_pix = 0.0
    sum_x_piy = 0.0
    for k in ks:
        for j in range(m_prime + 1):
            coef = b[k] * h_tab[j]
            mono = ix ** (absh - 2 * j) * iy ** (2 * j)
            sum_x += coef * ixiypd[k] * mono
            sum_x_dix += coef * ixiypddix[k] * mono
            sum_x_diy += coef * ixiypddiy[k] * mono
            if absh - 2 * j >= 1:
                sum_x_pix += (
                    coef * ixiypd[k] * (absh - 2 * j) * ix ** (absh - 2 * j - 1) * iy ** (2 * j)
                )
            if 2 * j >= 1:
                sum_x_piy += (
                    coef * ixiypd[k] * (2 * j) * ix ** (absh - 2 * j) * iy ** (2 * j - 1)
                )

    # Fy family
    sum_y = 0.0
    sum_y_dix = 0.0
    sum_y_diy = 0.0
    sum_y_pix = 0.0
    sum_y_piy = 0.0
    for k in ks:
        for j in range(2, m_second + 1):
            coef = b[k] * d_tab[j]
            mono = ix ** (absh - 2 * j + 3) * iy ** (2 * j - 3)
            sum_y += coef * ixiypd[k] * mono
            sum_y_dix += coef * ixiypddix[k] * mono
            sum_y_diy += coef * ixiypddiy[k] * mono
            if absh - 2 * j + 3 >= 1:
                sum_y_pix += (
                    coef * ixiypd[k] * (absh - 2 * j + 3.0)
                    * ix ** (absh - 2 * j + 2) * iy ** (2 * j - 3)
                )
            if 2 * j - 3 >= 1:
                sum_y_piy += (
                    coef * ixiypd[k] * (2 * j - 3.0)
                    * ix ** (absh - 2 * j + 3) * iy ** (2 * j - 4)
                )

    fx = a * ixiycdiv2 * sum_x
    fy = -a * ixiycdiv2 * sum_y

    # d/dix of (1-ix²-iy²)^(c/2) is (c/2)(1-ix²-iy²)^(c/2-1)(-2ix)
    t1x = a * c / 2.0 * ixiycm1div2 * (-2.0 * ix)
    t1y = a * c / 2.0 * ixiycm1div2 * (-2.0 * iy)
    t23 = a * ixiycdiv2

    dfx_dix = t1x * sum_x + t23 * sum_x_dix + t23 * sum_x_pix
    dfx_diy = t1y * sum_x + t23 * sum_x_diy + t23 * sum_x_piy
    dfy_dix = -t1x * sum_y - t23 * sum_y_dix - t23 * sum_y_pix
    dfy_diy = -t1y * sum_y - t23 * sum_y_diy - t23 * sum_y_piy

    return np.array([fx, fy, dfx_dix, dfx_diy, dfy_dix, dfy_diy])
