# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the terms in COMMERCIAL-LICENSE.md.
# Free for personal, educational, and academic use.
# Commercial use requires a paid license — see COMMERCIAL-LICENSE.md.
"""Tests for the spherical harmonic coefficient provider (gravity_field.py)."""

import ast
import json
import math

import numpy as np
import pytest

from kaula.domain.gravity_field import (
    GravityFieldProvider,
    SphericalHarmonicField,
    UnsupportedFieldDegree,
    _norm_factor,
    load_gravity_field,
)

MU = 398600441449820.0
AE = 6378136.46


@pytest.fixture
def field_json(tmp_path):
    """Normalized 4x4 field in the bundled JSON layout."""
    data = {
        "name": "toy-4x4",
        "max_degree": 4,
        "gm": MU,
        "radius": AE,
        "normalized": True,
        "coefficients": {
            "2,0": [-4.841651e-4, 0.0],
            "2,2": [2.439e-6, -1.400e-6],
            "3,1": [2.030e-6, 2.482e-7],
            "4,4": [-3.989e-7, 3.089e-7],
        },
    }
    path = tmp_path / "toy.json"
    path.write_text(json.dumps(data))
    return path


# ── Normalization ───────────────────────────────────────────────────


class TestNormFactor:

    def test_zonal(self):
        """N_20 = sqrt(5)."""
        assert _norm_factor(2, 0) == pytest.approx(math.sqrt(5.0))

    def test_sectoral(self):
        """N_22 = sqrt(2 * 5 / 24)."""
        assert _norm_factor(2, 2) == pytest.approx(math.sqrt(10.0 / 24.0))

    def test_high_degree_is_finite(self):
        assert 0.0 < _norm_factor(50, 50) < 1.0


# ── SphericalHarmonicField ──────────────────────────────────────────


class TestSphericalHarmonicField:

    def test_protocol(self, stela_field):
        assert isinstance(stela_field, GravityFieldProvider)

    def test_constants(self, stela_field):
        assert stela_field.get_mu() == MU
        assert stela_field.get_ae() == AE
        assert stela_field.max_degree == 7
        assert stela_field.max_order == 7

    def test_block_shape(self, stela_field):
        c = stela_field.get_c(5, 3, False)
        s = stela_field.get_s(5, 3, False)
        assert c.shape == (6, 4)
        assert s.shape == (6, 4)

    def test_missing_terms_are_zero(self, stela_field):
        """The tesseral reference field has no zonal terms."""
        c = stela_field.get_c(7, 7, False)
        np.testing.assert_array_equal(c[:, 0], np.zeros(8))

    def test_normalized_view(self):
        field = SphericalHarmonicField.from_coefficients(
            {(2, 2): (2.439e-6, -1.4e-6)}, mu=MU, ae=AE, normalized=True,
        )
        unnormalized = field.get_c(2, 2, False)[2, 2]
        assert unnormalized == pytest.approx(2.439e-6 * _norm_factor(2, 2))
        assert field.get_c(2, 2, True)[2, 2] == pytest.approx(2.439e-6)
        assert field.get_s(2, 2, True)[2, 2] == pytest.approx(-1.4e-6)

    def test_blocks_are_copies(self, stela_field):
        block = stela_field.get_c(3, 3, False)
        block[3, 3] = 99.0
        assert stela_field.get_c(3, 3, False)[3, 3] != 99.0

    def test_storage_is_read_only(self, stela_field):
        with pytest.raises(ValueError):
            stela_field.c[2, 2] = 1.0

    def test_degree_beyond_field(self, stela_field):
        with pytest.raises(UnsupportedFieldDegree) as exc_info:
            stela_field.get_c(8, 1, False)
        assert isinstance(exc_info.value, ValueError)
        assert exc_info.value.degree == 8
        assert exc_info.value.max_degree == 7
        assert "(8, 1)" in str(exc_info.value)

    def test_order_cap(self):
        field = SphericalHarmonicField.from_coefficients(
            {(3, 3): (1e-7, 2e-7)}, mu=MU, ae=AE, max_order=2,
        )
        assert field.max_order == 2
        field.get_c(3, 2, False)
        with pytest.raises(UnsupportedFieldDegree):
            field.get_s(3, 3, False)

    @pytest.mark.parametrize("coefficients", [
        {},
        {(2, 3): (1.0, 0.0)},
        {(-1, 0): (1.0, 0.0)},
    ])
    def test_rejects_invalid_coefficients(self, coefficients):
        with pytest.raises(ValueError):
            SphericalHarmonicField.from_coefficients(coefficients, mu=MU, ae=AE)


# ── JSON loader ─────────────────────────────────────────────────────


class TestLoadGravityField:

    def test_load(self, field_json):
        field = load_gravity_field(field_json)
        assert field.name == "toy-4x4"
        assert field.max_degree == 4
        assert field.get_mu() == MU
        assert field.get_ae() == AE
        assert field.get_c(4, 4, True)[4, 4] == pytest.approx(-3.989e-7)
        assert field.get_c(2, 0, False)[2, 0] == pytest.approx(-4.841651e-4 * math.sqrt(5.0))

    def test_truncation(self, field_json):
        field = load_gravity_field(field_json, max_degree=3)
        assert field.max_degree == 3
        with pytest.raises(UnsupportedFieldDegree):
            field.get_c(4, 4, False)

    def test_degree_too_low(self, field_json):
        with pytest.raises(ValueError, match=">= 2"):
            load_gravity_field(field_json, max_degree=1)

    def test_degree_too_high(self, field_json):
        with pytest.raises(ValueError, match="exceeds"):
            load_gravity_field(field_json, max_degree=5)

    def test_unnormalized_file(self, tmp_path):
        path = tmp_path / "raw.json"
        path.write_text(json.dumps({
            "gm": MU, "radius": AE, "normalized": False,
            "coefficients": {"2,2": [1.5e-6, -9.0e-7]},
        }))
        field = load_gravity_field(path)
        assert field.name == "raw"
        assert field.get_c(2, 2, False)[2, 2] == 1.5e-6


# ── Domain purity ───────────────────────────────────────────────────


_DOMAIN_MODULES = [
    "eccentricity_function",
    "gravity_field",
    "hansen",
    "inclination_function",
    "orbital_mechanics",
    "tesseral_attraction",
    "tesseral_quad",
    "time_systems",
]


class TestDomainPurity:

    @pytest.mark.parametrize("name", _DOMAIN_MODULES)
    def test_domain_purity(self, name):
        """Domain modules only import from stdlib, numpy and the package."""
        import importlib

        mod = importlib.import_module(f"kaula.domain.{name}")
        with open(mod.__file__, encoding="utf-8") as f:
            tree = ast.parse(f.read())

        allowed_top = {
            "math", "numpy", "dataclasses", "typing", "datetime", "json",
            "pathlib", "logging",
        }
        allowed_internal_prefix = "kaula"

        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    top = alias.name.split(".")[0]
                    assert top in allowed_top or alias.name.startswith(
                        allowed_internal_prefix
                    ), f"Forbidden import: {alias.name}"
            elif isinstance(node, ast.ImportFrom):
                if node.module and node.level == 0:
                    top = node.module.split(".")[0]
                    assert top in allowed_top or node.module.startswith(
                        allowed_internal_prefix
                    ), f"Forbidden import from: {node.module}"
