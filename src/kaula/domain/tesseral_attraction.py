# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the terms in COMMERCIAL-LICENSE.md.
# Free for personal, educational, and academic use.
# Commercial use requires a paid license — see COMMERCIAL-LICENSE.md.
"""STELA tesseral attraction: semi-analytical resonant geopotential terms.

The tesseral part of the disturbing potential is expanded (Kaula) as

    R = Σ_nmpq (μ/a)(ae/a)^n F_nmp(i) G_npq(e) S_nmpq(ω, M, Ω, θ)

with the slow angle σ = (n-2p+q)·λ - m·θ (θ is the Earth Rotation Angle).
After averaging, only quads whose σ varies slowly compared to the
integration step survive: the resonance period 2π/|σ̇|, counted in sidereal
days, must exceed the averaging span step × step_count.

compute_perturbation returns the gradient of the retained terms with respect
to the mean equinoctial elements, ordered (a, λ, ex, ey, ix, iy).

Reference: CNES STELA Mathematical Specifications, tesseral perturbations.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Protocol, runtime_checkable

import numpy as np

from kaula.domain.eccentricity_function import compute_eccentricity_function
from kaula.domain.gravity_field import GravityFieldProvider
from kaula.domain.inclination_function import compute_f
from kaula.domain.orbital_mechanics import OrbitalConstants
from kaula.domain.tesseral_quad import TesseralQuad
from kaula.domain.time_systems import EarthRotation

logger = logging.getLogger(__name__)

_TWO_PI: float = 2.0 * math.pi


# --- Types ---

@runtime_checkable
class LagrangeContribution(Protocol):
    """Semi-analytical perturbation expressed through Lagrange equations."""

    @property
    def d_pot(self) -> np.ndarray:
        """Potential gradient from the last compute_perturbation call."""
        ...

    def compute_perturbation(self, orbit: Any) -> np.ndarray:
        ...

    def compute_short_periods(self, orbit: Any) -> np.ndarray:
        ...

    def compute_partial_derivatives(self, orbit: Any) -> np.ndarray:
        ...


@dataclass(frozen=True)
class TesseralSettings:
    """Tesseral development settings.

    order: maximum degree n of the Kaula development.
    q_max: eccentricity index range, q in [-q_max, q_max].
    integration_step: propagation step (s).
    step_count: number of steps spanned by the averaging; quads with a
        resonance period shorter than integration_step * step_count are
        dropped.
    max_order: optional cap on the order m (defaults to n).
    """

    order: int = 7
    q_max: int = 2
    integration_step: float = 86400.0
    step_count: int = 5
    max_order: Optional[int] = None

    def __post_init__(self) -> None:
        if self.order < 2:
            raise ValueError(f"order must be >= 2, got {self.order}")
        if self.q_max < 0:
            raise ValueError(f"q_max must be >= 0, got {self.q_max}")
        if not self.integration_step > 0:
            raise ValueError(f"integration_step must be > 0, got {self.integration_step}")
        if self.step_count < 1:
            raise ValueError(f"step_count must be >= 1, got {self.step_count}")
        if self.max_order is not None and self.max_order < 1:
            raise ValueError(f"max_order must be >= 1, got {self.max_order}")

    @property
    def resonance_threshold(self) -> float:
        """Minimum resonance period, in days."""
        return self.integration_step * self.step_count / OrbitalConstants.SECONDS_PER_DAY


# --- Catalog ---

def resonant_quads(
    orbit: Any,
    settings: TesseralSettings,
    era_rate: float,
) -> Iterator[tuple[int, int, int, int, float]]:
    """Enumerate every (n, m, p, q) with its resonance period ratio.

    Yields (n, m, p, q, pt) in catalog order, where
    pt = θ̇ / |(n-2p+q)·ṅ - m·θ̇| is the period of σ in sidereal days
    (infinite at exact resonance). Filtering against
    settings.resonance_threshold is left to the caller.
    """
    a = orbit.a
    mdot = math.sqrt(orbit.mu / (a * a * a))
    for n in range(2, settings.order + 1):
        m_max = n if settings.max_order is None else min(n, settings.max_order)
        for m in range(1, m_max + 1):
            for p in range(n + 1):
                for q in range(-settings.q_max, settings.q_max + 1):
                    sigmadot = (n - 2 * p + q) * mdot - m * era_rate
                    pt = math.inf if sigmadot == 0.0 else era_rate / abs(sigmadot)
                    yield n, m, p, q, pt


def build_quad_catalog(
    provider: GravityFieldProvider,
    orbit: Any,
    settings: TesseralSettings,
    earth_rotation: Optional[EarthRotation] = None,
) -> list[TesseralQuad]:
    """Build the resonant quad catalog for an orbit.

    Raises:
        UnsupportedFieldDegree: If a resonant quad needs coefficients the
            provider does not have.
    """
    if earth_rotation is None:
        earth_rotation = EarthRotation()
    puser = settings.resonance_threshold
    catalog = [
        TesseralQuad(provider, n, m, p, q, orbit)
        for n, m, p, q, pt in resonant_quads(orbit, settings, earth_rotation.era_rate(orbit.epoch))
        if pt > puser
    ]
    logger.info("Built tesseral catalog: %d quads (order %d)", len(catalog), settings.order)
    return catalog


# --- Engine ---

class StelaTesseralAttraction:
    """Tesseral harmonics contribution for semi-analytical propagation.

    The quad catalog is owned by the instance and mutated in place by
    update_quads/refresh; use one instance per propagated trajectory.
    """

    def __init__(
        self,
        provider: GravityFieldProvider,
        settings: Optional[TesseralSettings] = None,
        earth_rotation: Optional[EarthRotation] = None,
    ) -> None:
        self._provider = provider
        self._settings = settings if settings is not None else TesseralSettings()
        self._earth_rotation = earth_rotation if earth_rotation is not None else EarthRotation()
        self._quads: list[TesseralQuad] = []
        self._d_pot = np.zeros(6)

    @property
    def settings(self) -> TesseralSettings:
        return self._settings

    @property
    def provider(self) -> GravityFieldProvider:
        return self._provider

    @property
    def quads(self) -> tuple[TesseralQuad, ...]:
        """Current catalog, in (n, m, p, q) enumeration order."""
        return tuple(self._quads)

    @property
    def d_pot(self) -> np.ndarray:
        return self._d_pot.copy()

    def update_quads(self, orbit: Any) -> None:
        """Bring the catalog in line with the orbit's resonances.

        Called at the start of each integration step. New resonant quads are
        added, surviving ones get their eccentricity window checked, and
        quads that are no longer resonant are removed.

        The catalog is rebuilt on a working copy and only replaced once the
        enumeration completes; on error the previous catalog is kept. Window
        re-centring of surviving quads is not rolled back.

        Raises:
            UnsupportedFieldDegree: If the provider cannot supply a degree or
                order needed by a resonant quad.
        """
        puser = self._settings.resonance_threshold
        era_rate = self._earth_rotation.era_rate(orbit.epoch)
        previous = self._quads
        self._quads = list(previous)
        try:
            for n, m, p, q, pt in resonant_quads(orbit, self._settings, era_rate):
                self.compute_current_quad(orbit, puser, n, m, p, q, pt)
        except Exception:
            self._quads = previous
            raise
        logger.info("Tesseral catalog updated: %d quads", len(self._quads))

    def _index_of(self, n: int, m: int, p: int, q: int) -> int:
        for i, quad in enumerate(self._quads):
            if quad.quad == (n, m, p, q):
                return i
        return -1

    def compute_current_quad(
        self,
        orbit: Any,
        puser: float,
        n: int,
        m: int,
        p: int,
        q: int,
        pt: float,
    ) -> None:
        """Add, refresh or drop quad (n, m, p, q) given its period ratio pt.

        pt > puser and absent: the quad is created.
        pt > puser and present: its eccentricity window is checked.
        pt <= puser and present: the quad is removed.
        """
        index = self._index_of(n, m, p, q)
        if pt > puser:
            if index == -1:
                self._quads.append(TesseralQuad(self._provider, n, m, p, q, orbit))
                logger.debug("Added tesseral quad %s (pt=%.3g d)", (n, m, p, q), pt)
            else:
                self.refresh(index, orbit)
        elif index != -1:
            del self._quads[index]
            logger.debug("Removed tesseral quad %s (pt=%.3g d)", (n, m, p, q), pt)

    def refresh(self, index: int, orbit: Any) -> bool:
        """Check the eccentricity window of catalog entry index.

        Returns:
            True when the entry's Taylor coefficients were recomputed.
        """
        return self._quads[index].update_eccentricity_interval(orbit)

    def compute_perturbation(self, orbit: Any) -> np.ndarray:
        """Gradient of the tesseral potential, ordered (a, λ, ex, ey, ix, iy).

        The catalog must have been updated for this orbit (update_quads).
        An empty catalog gives a zero vector.
        """
        res = np.zeros(6)
        theta = math.fmod(self._earth_rotation.era(orbit.epoch), _TWO_PI)
        for quad in self._quads:
            f = compute_f(orbit, quad)
            g = compute_eccentricity_function(orbit, quad)
            res += self._quad_contribution(orbit, quad, theta, f, g)
        self._d_pot = res
        return res.copy()

    def _quad_contribution(
        self,
        orbit: Any,
        quad: TesseralQuad,
        theta: float,
        f: np.ndarray,
        g: np.ndarray,
    ) -> np.ndarray:
        mu = orbit.mu
        a = orbit.a
        ex = orbit.ex
        ey = orbit.ey
        n, m, p, q = quad.quad
        fc = quad.fc
        fs = quad.fs

        fx, fy, dfx_dix, dfx_diy, dfy_dix, dfy_diy = (float(v) for v in f)
        eqcos, eqsin, d_eqcos_ex, d_eqcos_ey, d_eqsin_ex, d_eqsin_ey = (float(v) for v in g)

        tay_dev, diff_tay_dev = quad.taylor_value(orbit.eccentricity)

        t16 = mu / (a * a)
        apn = (self._provider.get_ae() / a) ** n

        fxfy1 = fx * eqcos - fy * eqsin
        fxfy2 = fx * eqsin + fy * eqcos

        n2pq = n - 2.0 * p + q
        sigma = n2pq * orbit.mean_longitude - m * theta
        sin_sigma = math.sin(sigma)
        cos_sigma = math.cos(sigma)
        fc_cos = fc * cos_sigma
        fs_sin = fs * sin_sigma
        fc_sin = fc * sin_sigma
        fs_cos = fs * cos_sigma

        fcfs1 = fc_cos + fs_sin
        fcfs2 = fc_sin - fs_cos

        t45 = fxfy1 * fcfs1 + fxfy2 * fcfs2
        t53 = tay_dev * mu
        apnm1 = apn / a
        t86 = apnm1 * t45

        return np.array([
            tay_dev * (-t16 * apn * t45 - t16 * apn * n * t45),
            t53 * apnm1 * (
                fxfy1 * (-fc_sin * n2pq + fs_cos * n2pq)
                + fxfy2 * (fc_cos * n2pq + fs_sin * n2pq)
            ),
            t53 * apnm1 * (
                (fx * d_eqcos_ex - fy * d_eqsin_ex) * fcfs1
                + (fx * d_eqsin_ex + fy * d_eqcos_ex) * fcfs2
            ) + 2.0 * diff_tay_dev * ex * mu * t86,
            t53 * apnm1 * (
                (fx * d_eqcos_ey - fy * d_eqsin_ey) * fcfs1
                + (fx * d_eqsin_ey + fy * d_eqcos_ey) * fcfs2
            ) + 2.0 * diff_tay_dev * ey * mu * t86,
            t53 * apnm1 * (
                (dfx_dix * eqcos - dfy_dix * eqsin) * fcfs1
                + (dfx_dix * eqsin + dfy_dix * eqcos) * fcfs2
            ),
            t53 * apnm1 * (
                (dfx_diy * eqcos - dfy_diy * eqsin) * fcfs1
                + (dfx_diy * eqsin + dfy_diy * eqcos) * fcfs2
            ),
        ])

    def compute_short_periods(self, orbit: Any) -> np.ndarray:
        """Tesseral short-period corrections.

        Not implemented: the tesseral development is averaged only, so this
        always returns zeros.
        """
        return np.zeros(6)

    def compute_partial_derivatives(self, orbit: Any) -> np.ndarray:
        """Partial derivatives of the tesseral perturbation (6x6).

        Not implemented: always returns a zero matrix.
        """
        return np.zeros((6, 6))
