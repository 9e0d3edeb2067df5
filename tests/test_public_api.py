# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the terms in COMMERCIAL-LICENSE.md.
# Free for personal, educational, and academic use.
# Commercial use requires a paid license — see COMMERCIAL-LICENSE.md.
"""Top-level package exports."""

import kaula


def test_all_names_resolve():
    for name in kaula.__all__:
        assert hasattr(kaula, name), name


def test_engine_exported():
    from kaula.domain.tesseral_attraction import StelaTesseralAttraction

    assert kaula.StelaTesseralAttraction is StelaTesseralAttraction


def test_version():
    assert kaula.__version__ == "1.3.0"
