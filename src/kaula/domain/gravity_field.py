# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the terms in COMMERCIAL-LICENSE.md.
# Free for personal, educational, and academic use.
# Commercial use requires a paid license — see COMMERCIAL-LICENSE.md.
"""Spherical harmonic gravity field coefficients.

The semi-analytical engines only need a small capability interface from a
gravity model: the C and S coefficient matrices up to a requested degree and
order, the gravitational parameter and the reference radius. Format-specific
readers (GRGS, SHM, ICGEM) live outside this package and adapt to
GravityFieldProvider.

Unnormalized and fully normalized coefficients are related by

    C_nm = N_nm * C̄_nm,  N_nm = sqrt((2 - δ_m0)(2n+1)(n-m)!/(n+m)!)

Reference: Montenbruck & Gill, "Satellite Orbits", Ch. 3.2
"""

import json
import math
import pathlib
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol, runtime_checkable

import numpy as np


class UnsupportedFieldDegree(ValueError):
    """Requested degree or order is beyond what the gravity field provides."""

    def __init__(self, degree: int, order: int, max_degree: int, max_order: int) -> None:
        self.degree = degree
        self.order = order
        self.max_degree = max_degree
        self.max_order = max_order
        super().__init__(
            f"degree/order ({degree}, {order}) exceeds gravity field "
            f"capability ({max_degree}, {max_order})"
        )


@runtime_checkable
class GravityFieldProvider(Protocol):
    """Potential coefficients provider.

    get_c/get_s return matrices indexed [n][m] covering at least
    degrees 0..n and orders 0..m.
    """

    def get_c(self, n: int, m: int, normalized: bool) -> np.ndarray:
        ...

    def get_s(self, n: int, m: int, normalized: bool) -> np.ndarray:
        ...

    def get_mu(self) -> float:
        ...

    def get_ae(self) -> float:
        ...


def _norm_factor(n: int, m: int) -> float:
    """Fully normalized Legendre normalization factor.

    N_nm = sqrt((2 - delta_{m,0}) * (2n+1) * (n-m)! / (n+m)!)

    Uses math.lgamma for numerical stability at high degree.
    """
    delta = 1.0 if m == 0 else 0.0
    log_ratio = math.lgamma(n - m + 1) - math.lgamma(n + m + 1)
    return math.sqrt((2.0 - delta) * (2 * n + 1) * math.exp(log_ratio))


@dataclass(frozen=True, eq=False)
class SphericalHarmonicField:
    """In-memory gravity field implementing GravityFieldProvider.

    Coefficients are stored unnormalized in (max_degree+1, max_degree+1)
    lower-triangular matrices; normalized values are derived on request.
    Missing (n, m) entries are zero.
    """

    name: str
    mu: float
    ae: float
    max_degree: int
    max_order: int
    c: np.ndarray = field(repr=False)
    s: np.ndarray = field(repr=False)

    @classmethod
    def from_coefficients(
        cls,
        coefficients: Mapping[tuple[int, int], tuple[float, float]],
        mu: float,
        ae: float,
        normalized: bool = False,
        name: str = "custom",
        max_order: int | None = None,
    ) -> "SphericalHarmonicField":
        """Build a field from {(n, m): (C_nm, S_nm)}.

        Args:
            coefficients: Coefficient pairs keyed by (degree, order).
            mu: Gravitational parameter (m³/s²).
            ae: Reference equatorial radius (m).
            normalized: True when the pairs are fully normalized.
            name: Model name.
            max_order: Order cap; defaults to the maximum degree.

        Raises:
            ValueError: If a key has m > n or negative indices, or no
                coefficients are given.
        """
        if not coefficients:
            raise ValueError("coefficients must not be empty")
        for n, m in coefficients:
            if n < 0 or m < 0 or m > n:
                raise ValueError(f"invalid coefficient index ({n}, {m})")

        max_degree = max(n for n, _ in coefficients)
        if max_order is None:
            max_order = max_degree
        c = np.zeros((max_degree + 1, max_degree + 1))
        s = np.zeros((max_degree + 1, max_degree + 1))
        for (n, m), (c_nm, s_nm) in coefficients.items():
            scale = _norm_factor(n, m) if normalized else 1.0
            c[n, m] = c_nm * scale
            s[n, m] = s_nm * scale

        c.setflags(write=False)
        s.setflags(write=False)
        return cls(
            name=name, mu=mu, ae=ae, max_degree=max_degree,
            max_order=min(max_order, max_degree), c=c, s=s,
        )

    def _check(self, n: int, m: int) -> None:
        if n > self.max_degree or m > self.max_order or n < 0 or m < 0:
            raise UnsupportedFieldDegree(n, m, self.max_degree, self.max_order)

    def _block(self, source: np.ndarray, n: int, m: int, normalized: bool) -> np.ndarray:
        self._check(n, m)
        block = np.array(source[: n + 1, : m + 1], dtype=float)
        if normalized:
            for i in range(n + 1):
                for j in range(min(i, m) + 1):
                    block[i, j] /= _norm_factor(i, j)
        return block

    def get_c(self, n: int, m: int, normalized: bool) -> np.ndarray:
        """C coefficients for degrees 0..n and orders 0..m."""
        return self._block(self.c, n, m, normalized)

    def get_s(self, n: int, m: int, normalized: bool) -> np.ndarray:
        """S coefficients for degrees 0..n and orders 0..m."""
        return self._block(self.s, n, m, normalized)

    def get_mu(self) -> float:
        return self.mu

    def get_ae(self) -> float:
        return self.ae


def load_gravity_field(
    path: str | pathlib.Path,
    max_degree: int | None = None,
) -> SphericalHarmonicField:
    """Load spherical harmonic coefficients from a JSON file.

    The JSON format is::

        {"name": "...", "max_degree": N, "gm": ..., "radius": ...,
         "normalized": true, "coefficients": {"n,m": [C_nm, S_nm], ...}}

    "normalized" defaults to true when absent.

    Args:
        path: Path to coefficient JSON file.
        max_degree: Truncation degree. None keeps every coefficient.

    Returns:
        SphericalHarmonicField truncated at max_degree.

    Raises:
        ValueError: If max_degree < 2 or exceeds the data file's max degree.
    """
    path = pathlib.Path(path)
    with open(path) as f:
        raw: dict[str, Any] = json.load(f)

    data_max_degree = raw.get("max_degree")
    coefficients: dict[tuple[int, int], tuple[float, float]] = {}
    for key, (c_nm, s_nm) in raw["coefficients"].items():
        n, m = (int(x) for x in key.split(","))
        coefficients[(n, m)] = (float(c_nm), float(s_nm))
    if data_max_degree is None:
        data_max_degree = max(n for n, _ in coefficients)

    if max_degree is None:
        max_degree = data_max_degree
    if max_degree < 2:
        raise ValueError(f"max_degree must be >= 2, got {max_degree}")
    if max_degree > data_max_degree:
        raise ValueError(
            f"max_degree {max_degree} exceeds data file's max degree "
            f"{data_max_degree}"
        )

    kept = {nm: cs for nm, cs in coefficients.items() if nm[0] <= max_degree}
    return SphericalHarmonicField.from_coefficients(
        kept,
        mu=float(raw["gm"]),
        ae=float(raw["radius"]),
        normalized=bool(raw.get("normalized", True)),
        name=raw.get("name", path.stem),
    )
