# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the terms in COMMERCIAL-LICENSE.md.
# Free for personal, educational, and academic use.
# Commercial use requires a paid license — see COMMERCIAL-LICENSE.md.
"""Tesseral quad (n, m, p, q) with its eccentricity-window Taylor cache.

The eccentricity dependence of a quad, g(e) = G_npq(e)/e^|q|, is replaced
inside a window [ec - δe, ec + δe] by its second-order Taylor expansion

    g(e) ≈ t0 + t1 (e - ec) + t2 (e - ec)²

and likewise for k(e) = dg/d(e²). The window is re-centred only when the
eccentricity leaves it, so the Hansen coefficients are not re-evaluated at each
integration step.
"""

import logging
from typing import Any, Callable

import numpy as np

from kaula.domain.gravity_field import GravityFieldProvider, UnsupportedFieldDegree
from kaula.domain.hansen import eccentricity_function, eccentricity_function_derivative

logger = logging.getLogger(__name__)

_MIN_ECCENTRICITY: float = 1e-3
"""Lower bound of the central eccentricity (keeps e = 0 off the window edge)."""

_DELTA_ECCENTRICITY: float = 0.02
"""Half-width of the eccentricity validity window."""

_FD_STEP: float = 1e-3
"""Eccentricity step of the three-point Taylor fit."""


def _taylor_coefficients(func: Callable[[float], float], ec: float) -> np.ndarray:
    """Central finite-difference Taylor coefficients of func around ec."""
    f0 = func(ec)
    fp = func(ec + _FD_STEP)
    fm = func(ec - _FD_STEP)
    return np.array([
        f0,
        (fp - fm) / (2.0 * _FD_STEP),
        (fp - 2.0 * f0 + fm) / (2.0 * _FD_STEP * _FD_STEP),
    ])


class TesseralQuad:
    """One term of the Kaula tesseral expansion.

    Coefficients follow the (n - m) parity of the expansion: for even
    n - m, (fc, fs) = (C_nm, S_nm); for odd n - m, (fc, fs) = (-S_nm, C_nm),
    both unnormalized.
    """

    def __init__(
        self,
        provider: GravityFieldProvider,
        n: int,
        m: int,
        p: int,
        q: int,
        orbit: Any,
    ) -> None:
        if n < 1 or m < 0 or m > n or p < 0 or p > n:
            raise ValueError(f"invalid quad ({n}, {m}, {p}, {q})")
        self._n = n
        self._m = m
        self._p = p
        self._q = q

        c = np.asarray(provider.get_c(n, m, False))
        s = np.asarray(provider.get_s(n, m, False))
        if c.shape[0] <= n or c.shape[1] <= m or s.shape[0] <= n or s.shape[1] <= m:
            raise UnsupportedFieldDegree(n, m, c.shape[0] - 1, c.shape[1] - 1)
        if (n - m) % 2 == 0:
            self._fc = float(c[n, m])
            self._fs = float(s[n, m])
        else:
            self._fc = -float(s[n, m])
            self._fs = float(c[n, m])

        self._delta_eccentricity = _DELTA_ECCENTRICITY
        self._central_eccentricity = max(orbit.eccentricity, _MIN_ECCENTRICITY)
        self._compute_taylor()

    def _compute_taylor(self) -> None:
        n, p, q = self._n, self._p, self._q
        self._taylor = _taylor_coefficients(
            lambda e: eccentricity_function(n, p, q, e),
            self._central_eccentricity,
        )
        self._diff_taylor = _taylor_coefficients(
            lambda e: eccentricity_function_derivative(n, p, q, e),
            self._central_eccentricity,
        )

    def update_eccentricity_interval(self, orbit: Any) -> bool:
        """Re-centre the window if the orbit eccentricity has left it.

        Returns:
            True when the Taylor coefficients were recomputed.
        """
        e = orbit.eccentricity
        if abs(e - self._central_eccentricity) <= self._delta_eccentricity:
            return False
        logger.debug(
            "quad %s: eccentricity %.6g outside window around %.6g, re-centring",
            self.quad, e, self._central_eccentricity,
        )
        self._central_eccentricity = max(e, _MIN_ECCENTRICITY)
        self._compute_taylor()
        return True

    @property
    def n(self) -> int:
        return self._n

    @property
    def m(self) -> int:
        return self._m

    @property
    def p(self) -> int:
        return self._p

    @property
    def q(self) -> int:
        return self._q

    @property
    def quad(self) -> tuple[int, int, int, int]:
        return (self._n, self._m, self._p, self._q)

    @property
    def fc(self) -> float:
        return self._fc

    @property
    def fs(self) -> float:
        return self._fs

    @property
    def central_eccentricity(self) -> float:
        return self._central_eccentricity

    @property
    def delta_eccentricity(self) -> float:
        return self._delta_eccentricity

    @property
    def taylor_coeffs(self) -> np.ndarray:
        """[g(ec), g'(ec), g''(ec)/2] of g(e) = G_npq(e)/e^|q|."""
        return self._taylor.copy()

    @property
    def diff_taylor_coeffs(self) -> np.ndarray:
        """Taylor coefficients of dg/d(e²) around ec."""
        return self._diff_taylor.copy()

    def taylor_value(self, e: float) -> tuple[float, float]:
        """Cached g(e) and dg/d(e²) at eccentricity e."""
        delta_e = e - self._central_eccentricity
        delta_e2 = delta_e * delta_e
        tay = self._taylor[0] + self._taylor[1] * delta_e + self._taylor[2] * delta_e2
        diff_tay = (
            self._diff_taylor[0] + self._diff_taylor[1] * delta_e
            + self._diff_taylor[2] * delta_e2
        )
        return float(tay), float(diff_tay)

    def __repr__(self) -> str:
        return (
            f"TesseralQuad(n={self._n}, m={self._m}, p={self._p}, q={self._q}, "
            f"ec={self._central_eccentricity:.6g})"
        )
