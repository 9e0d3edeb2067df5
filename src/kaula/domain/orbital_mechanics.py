# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the terms in COMMERCIAL-LICENSE.md.
# Free for personal, educational, and academic use.
# Commercial use requires a paid license — see COMMERCIAL-LICENSE.md.
"""Equinoctial orbit state for semi-analytical propagation.

Elements (singularity-free at e = 0 and i = 0):

    a                     semi-major axis (m)
    ex = e cos(ω + Ω)     eccentricity vector
    ey = e sin(ω + Ω)
    ix = sin(i/2) cos(Ω)  inclination vector
    iy = sin(i/2) sin(Ω)
    λ  = M + ω + Ω        mean longitude (rad)
"""

import math
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone

import numpy as np


@dataclass(frozen=True)
class _OrbitalConstants:
    """Physical constants of the STELA Earth model."""

    MU_EARTH: float = 398600441449820.0   # m³/s²
    R_EARTH: float = 6378136.46           # m, equatorial radius
    SECONDS_PER_DAY: float = 86400.0


OrbitalConstants: _OrbitalConstants = _OrbitalConstants()


def kepler_equation(e: float, mean_anomaly: float) -> float:
    """Solve Kepler's equation M = E - e·sin(E) without iteration.

    F. Landis Markley (1995) starter followed by a fifth-order
    correction, without the Padé refinement for e > 0.75.

    Args:
        e: Eccentricity (0 <= e < 1).
        mean_anomaly: Mean anomaly (rad), any range.

    Returns:
        Eccentric anomaly in [0, 2π).
    """
    two_pi = 2.0 * math.pi
    m = math.fmod(mean_anomaly, two_pi)
    if math.fmod(m, math.pi) == 0.0:
        res = m
    else:
        if m < -math.pi:
            m += two_pi
        elif m > math.pi:
            m -= two_pi
        m2 = m * m
        pi_sq = math.pi * math.pi
        one_me = 1.0 - e
        alpha = (3.0 * pi_sq + 1.6 * math.pi * ((math.pi - abs(m)) / (1.0 + e))) / (pi_sq - 6.0)
        d = 3.0 * one_me + alpha * e
        alpha_d = alpha * d
        q = 2.0 * alpha_d * one_me - m2
        q2 = q * q
        r = 3.0 * alpha_d * (d - one_me) * m + m2 * m
        w = (abs(r) + math.sqrt(q * q2 + r * r)) ** (2.0 / 3.0)

        # First-order solution, then Halley-type corrections
        ecc1 = (2.0 * r * w / (w * w + w * q + q2) + m) / d
        e_sin = e * math.sin(ecc1)
        e_cos = e * math.cos(ecc1)
        f = ecc1 - e_sin - m
        f1 = 1.0 - e_cos
        f2 = e_sin
        f3 = 1.0 - f1
        f4 = -f2
        delta3 = -f / (f1 - 0.5 * f * f2 / f1)
        delta4 = -f / (f1 + 0.5 * delta3 * f2 + delta3 * delta3 * f3 / 6.0)
        delta4_sq = delta4 * delta4
        delta5 = -f / (f1 + 0.5 * delta4 * f2 + delta4_sq * f3 / 6.0
                       + delta4_sq * delta4 * f4 / 24.0)
        res = ecc1 + delta5
    if res < 0:
        res += two_pi
    return res


@dataclass(frozen=True)
class EquinoctialOrbit:
    """Mean equinoctial orbit at a UTC epoch.

    The frame is carried as a label only; no frame transformation is
    performed on the elements.
    """

    a: float
    ex: float
    ey: float
    ix: float
    iy: float
    mean_longitude: float
    epoch: datetime
    mu: float = OrbitalConstants.MU_EARTH
    frame: str = "MOD"

    def __post_init__(self) -> None:
        if self.a <= 0:
            raise ValueError(f"semi-major axis must be positive, got {self.a}")
        if math.hypot(self.ex, self.ey) >= 1.0:
            raise ValueError(
                f"eccentricity must be < 1, got {math.hypot(self.ex, self.ey)}"
            )
        # |i| = 1 is the retrograde equatorial orbit, singular in (ix, iy)
        if self.ix * self.ix + self.iy * self.iy >= 1.0:
            raise ValueError(
                f"inclination vector norm must be < 1, got ({self.ix}, {self.iy})"
            )
        if self.epoch.tzinfo is None:
            object.__setattr__(self, "epoch", self.epoch.replace(tzinfo=timezone.utc))

    @classmethod
    def from_keplerian(
        cls,
        a: float,
        e: float,
        i_rad: float,
        raan_rad: float,
        arg_perigee_rad: float,
        mean_anomaly_rad: float,
        epoch: datetime,
        mu: float = OrbitalConstants.MU_EARTH,
        frame: str = "MOD",
    ) -> "EquinoctialOrbit":
        """Build from classical elements (angles in radians)."""
        pomega = arg_perigee_rad + raan_rad
        sin_half_i = math.sin(i_rad / 2.0)
        return cls(
            a=a,
            ex=e * math.cos(pomega),
            ey=e * math.sin(pomega),
            ix=sin_half_i * math.cos(raan_rad),
            iy=sin_half_i * math.sin(raan_rad),
            mean_longitude=mean_anomaly_rad + pomega,
            epoch=epoch,
            mu=mu,
            frame=frame,
        )

    @property
    def eccentricity(self) -> float:
        return math.hypot(self.ex, self.ey)

    @property
    def inclination(self) -> float:
        """Inclination (rad)."""
        return 2.0 * math.asin(min(1.0, math.hypot(self.ix, self.iy)))

    @property
    def mean_motion(self) -> float:
        """Keplerian mean motion (rad/s)."""
        return math.sqrt(self.mu / (self.a * self.a * self.a))

    @property
    def period(self) -> float:
        """Keplerian period (s)."""
        return 2.0 * math.pi / self.mean_motion

    def shifted_by(self, dt: float) -> "EquinoctialOrbit":
        """Keplerian propagation: only the mean longitude drifts."""
        return replace(
            self,
            mean_longitude=self.mean_longitude + self.mean_motion * dt,
            epoch=self.epoch + timedelta(seconds=dt),
        )

    def to_array(self) -> np.ndarray:
        """State vector ordered [a, λ, ex, ey, ix, iy]."""
        return np.array([self.a, self.mean_longitude, self.ex, self.ey, self.ix, self.iy])

    def eccentric_longitude(self) -> float:
        """Eccentric longitude F = E + ω + Ω (rad)."""
        e = self.eccentricity
        pomega = math.atan2(self.ey, self.ex) if e > 0.0 else 0.0
        return kepler_equation(e, self.mean_longitude - pomega) + pomega

    def to_cartesian(self) -> tuple[np.ndarray, np.ndarray]:
        """Position (m) and velocity (m/s) in the orbit's frame.

        Uses the equinoctial basis (p, q) built from the inclination vector.
        """
        ex, ey, ix, iy, a = self.ex, self.ey, self.ix, self.iy, self.a
        i_fact = math.sqrt(max(0.0, 1.0 - ix * ix - iy * iy))
        p = np.array([1.0 - 2.0 * iy * iy, 2.0 * ix * iy, -2.0 * iy * i_fact])
        q = np.array([2.0 * ix * iy, 1.0 - 2.0 * ix * ix, 2.0 * ix * i_fact])

        f = self.eccentric_longitude()
        cos_f, sin_f = math.cos(f), math.sin(f)
        eta = math.sqrt(max(0.0, 1.0 - ex * ex - ey * ey))
        nu = 1.0 / (1.0 + eta)

        x = a * ((1.0 - nu * ey * ey) * cos_f + nu * ex * ey * sin_f - ex)
        y = a * ((1.0 - nu * ex * ex) * sin_f + nu * ex * ey * cos_f - ey)
        r = a * (1.0 - ex * cos_f - ey * sin_f)
        factor = self.mean_motion * a * a / r
        vx = factor * (nu * ex * ey * cos_f - (1.0 - nu * ey * ey) * sin_f)
        vy = factor * ((1.0 - nu * ex * ex) * cos_f - nu * ex * ey * sin_f)

        return x * p + y * q, vx * p + vy * q
