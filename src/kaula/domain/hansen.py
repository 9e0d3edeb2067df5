# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the terms in COMMERCIAL-LICENSE.md.
# Free for personal, educational, and academic use.
# Commercial use requires a paid license — see COMMERCIAL-LICENSE.md.
"""Kaula eccentricity functions from Hansen coefficients.

G_npq(e) = X^{-(n+1), n-2p}_{n-2p+q}(e)

With z = exp(iE), β = e / (1 + sqrt(1 - e²)) and y = β / (1 + β²) = e/2:

    r/a        = (1 - βz)(1 - β/z) / (1 + β²)
    exp(if)    = z (1 - β/z) / (1 - βz)
    exp(-ikM)  = z^-k exp(k y (z - 1/z))

so G_npq is the z^q coefficient of

    (1 + β²)^n (1 - βz)^-(2n-2p) (1 - β/z)^-2p exp(k y (z - 1/z)),  k = n-2p+q

Every term carries β^|q| times a power of w = β², which gives the
regular form used by the Taylor cache:

    g(e) = G_npq(e) / e^|q| = ((1 + w)/2)^|q| P(w)

The truncated series is only used up to e = 0.2. Above that, G_npq and
dG_npq/de are integrated over the eccentric anomaly, where dM = (r/a) dE:

    G_npq(e) = 1/2π ∫ (1 - e cos E)^-n cos((n-2p) f - (n-2p+q) M) dE

The integrand is periodic and analytic in a strip of half-width
arccosh(1/e), so the trapezoid rule converges geometrically.

Reference: Giacaglia (1976), "A note on Hansen's coefficients in
satellite theory"; Kaula, "Theory of Satellite Geodesy", Ch. 3.
"""

import math

import numpy as np
from numpy.polynomial import polynomial as P

_SERIES_TERMS: int = 12
"""Highest power of w = β² kept in the series."""

_SERIES_CACHE: dict[tuple[int, int, int, int], np.ndarray] = {}

_SERIES_MAX_ECCENTRICITY: float = 0.2
"""Largest eccentricity evaluated with the truncated series."""

_QUADRATURE_DIGITS: float = 40.0
"""Target decay exp(-N·s) of the trapezoid error, in e-folds."""

_QUADRATURE_MIN_SAMPLES: int = 64


def _rising_binomial(count: int, k: int) -> float:
    """Coefficient of x^k in (1 - x)^-count."""
    if count == 0:
        return 1.0 if k == 0 else 0.0
    return float(math.comb(count + k - 1, k))


def _exp_series_coefficient(kappa: int, power: int, j: int) -> float:
    """Coefficient of β^power z^j in exp(kappa y (z - 1/z)), y = β/(1 + β²)."""
    total = 0.0
    for m in range(abs(j), power + 1, 2):
        if (power - m) % 2:
            continue
        s = (m + j) // 2
        t = (m - j) // 2
        i = (power - m) // 2
        # y^m = β^m (1 + β²)^-m
        if m == 0:
            y_coef = 1.0 if i == 0 else 0.0
        else:
            y_coef = (-1) ** i * math.comb(m + i - 1, i)
        total += (
            float(kappa) ** m * (-1) ** t / (math.factorial(s) * math.factorial(t)) * y_coef
        )
    return total


def hansen_series(n: int, p: int, q: int, terms: int = _SERIES_TERMS) -> np.ndarray:
    """Coefficients c_k of G_npq(e) = β^|q| Σ c_k w^k, w = β².

    Args:
        n: Degree.
        p: Inclination index (0 <= p <= n).
        q: Eccentricity index.
        terms: Highest power of w kept.

    Returns:
        Read-only array of terms + 1 coefficients, (1 + β²)^n factor
        included. Results are cached per (n, p, q, terms).
    """
    if n < 1 or p < 0 or p > n:
        raise ValueError(f"invalid Hansen indices n={n}, p={p}")
    key = (n, p, q, terms)
    cached = _SERIES_CACHE.get(key)
    if cached is not None:
        return cached

    absq = abs(q)
    kappa = n - 2 * p + q
    n_pos = 2 * n - 2 * p
    n_neg = 2 * p
    max_power = absq + 2 * terms

    exp_coef: dict[tuple[int, int], float] = {}
    beta_series = np.zeros(max_power + 1)
    for a in range(max_power + 1):
        coef_a = _rising_binomial(n_pos, a)
        if coef_a == 0.0:
            continue
        for b in range(max_power + 1 - a):
            coef_b = _rising_binomial(n_neg, b)
            if coef_b == 0.0:
                continue
            j = q - a + b
            for c in range(abs(j), max_power + 1 - a - b, 2):
                if (c, j) not in exp_coef:
                    exp_coef[(c, j)] = _exp_series_coefficient(kappa, c, j)
                beta_series[a + b + c] += coef_a * coef_b * exp_coef[(c, j)]

    # Only powers |q|, |q|+2, ... survive; keep them as a series in w
    w_series = beta_series[absq::2][: terms + 1]
    one_plus_w_n = np.array([math.comb(n, k) for k in range(n + 1)], dtype=float)
    series = np.zeros(terms + 1)
    product = P.polymul(w_series, one_plus_w_n)[: terms + 1]
    series[: len(product)] = product
    series.setflags(write=False)
    _SERIES_CACHE[key] = series
    return series


def _beta_squared(e: float) -> float:
    beta = e / (1.0 + math.sqrt(max(0.0, 1.0 - e * e)))
    return beta * beta


def reduced_eccentricity_function(series: np.ndarray, q: int, e: float) -> float:
    """g(e) = G_npq(e) / e^|q| from hansen_series coefficients."""
    w = _beta_squared(e)
    return float(((1.0 + w) / 2.0) ** abs(q) * P.polyval(w, series))


def reduced_eccentricity_derivative(series: np.ndarray, q: int, e: float) -> float:
    """dg/d(e²) from hansen_series coefficients.

    e² = 4w / (1 + w)², so d(e²)/dw = 4(1 - w) / (1 + w)³.
    """
    absq = abs(q)
    w = _beta_squared(e)
    half = (1.0 + w) / 2.0
    value = P.polyval(w, series)
    slope = P.polyval(w, P.polyder(series))
    dg_dw = half ** absq * slope
    if absq > 0:
        dg_dw += 0.5 * absq * half ** (absq - 1) * value
    du_dw = 4.0 * (1.0 - w) / (1.0 + w) ** 3
    return float(dg_dw / du_dw)


def _quadrature_samples(n: int, kappa: int, e: float) -> int:
    """Trapezoid sample count, a power of two, for G_npq at eccentricity e."""
    strip = math.acosh(1.0 / e)
    # exp(i κ M) grows by at most exp(|κ| sqrt(1 - e²)) across the strip
    needed = (_QUADRATURE_DIGITS + abs(kappa) + n) / strip
    samples = _QUADRATURE_MIN_SAMPLES
    while samples < needed:
        samples *= 2
    return samples


def hansen_quadrature(n: int, p: int, q: int, e: float) -> tuple[float, float]:
    """G_npq(e) and dG_npq/de by trapezoid integration over the eccentric anomaly.

    Args:
        n: Degree.
        p: Inclination index (0 <= p <= n).
        q: Eccentricity index.
        e: Eccentricity, 0 < e < 1.

    Raises:
        ValueError: For invalid indices or an eccentricity outside (0, 1).
    """
    if n < 1 or p < 0 or p > n:
        raise ValueError(f"invalid Hansen indices n={n}, p={p}")
    if not 0.0 < e < 1.0:
        raise ValueError(f"eccentricity must be in (0, 1), got {e}")

    j = n - 2 * p
    kappa = n - 2 * p + q
    samples = _quadrature_samples(n, kappa, e)

    ecc_anomaly = 2.0 * np.pi * np.arange(samples) / samples
    cos_e = np.cos(ecc_anomaly)
    sin_e = np.sin(ecc_anomaly)
    one_minus_e2 = 1.0 - e * e
    rho = 1.0 - e * cos_e
    sin_f = math.sqrt(one_minus_e2) * sin_e / rho
    cos_f = (cos_e - e) / rho
    true_anomaly = np.arctan2(sin_f, cos_f)
    mean_anomaly = ecc_anomaly - e * sin_e

    phase = j * true_anomaly - kappa * mean_anomaly
    rho_n = rho ** -n
    value = np.mean(rho_n * np.cos(phase))

    # At fixed E: df/de = sin f / (1 - e²), dM/de = -sin E
    dphase_de = j * sin_f / one_minus_e2 + kappa * sin_e
    slope = np.mean(
        n * cos_e * rho_n / rho * np.cos(phase) - rho_n * np.sin(phase) * dphase_de
    )
    return float(value), float(slope)


def eccentricity_function(n: int, p: int, q: int, e: float) -> float:
    """g(e) = G_npq(e) / e^|q|."""
    if e <= _SERIES_MAX_ECCENTRICITY:
        return reduced_eccentricity_function(hansen_series(n, p, q), q, e)
    value, _ = hansen_quadrature(n, p, q, e)
    return value / e ** abs(q)


def eccentricity_function_derivative(n: int, p: int, q: int, e: float) -> float:
    """dg/d(e²) of g(e) = G_npq(e) / e^|q|."""
    if e <= _SERIES_MAX_ECCENTRICITY:
        return reduced_eccentricity_derivative(hansen_series(n, p, q), q, e)
    absq = abs(q)
    value, slope = hansen_quadrature(n, p, q, e)
    dg_de = (slope - absq * value / e) / e ** absq
    return dg_de / (2.0 * e)
