# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the terms in COMMERCIAL-LICENSE.md.
# Free for personal, educational, and academic use.
# Commercial use requires a paid license — see COMMERCIAL-LICENSE.md.
"""Verify all package and test source files carry the standard 4-line license header."""

from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent
SRC_ROOT = REPO_ROOT / "src" / "kaula"
TESTS_ROOT = REPO_ROOT / "tests"

EXPECTED_HEADER_LINES = [
    "# Copyright (c) 2026 Jeroen Visser. All rights reserved.",
    "# Licensed under the terms in COMMERCIAL-LICENSE.md.",
    "# Free for personal, educational, and academic use.",
    "# Commercial use requires a paid license — see COMMERCIAL-LICENSE.md.",
]


def _collect_py_files():
    """Collect all .py files in the package and the test suite."""
    return sorted(SRC_ROOT.rglob("*.py")) + sorted(TESTS_ROOT.rglob("*.py"))


def test_all_files_have_standard_header():
    """Every .py file under src/kaula/ and tests/ must start with the standard header."""
    files = _collect_py_files()
    assert len(files) > 0, "No .py files found"

    violations = []
    for py_file in files:
        lines = py_file.read_text(encoding="utf-8").splitlines()
        if len(lines) < 4:
            violations.append((py_file, "File has fewer than 4 lines"))
            continue
        for i, expected in enumerate(EXPECTED_HEADER_LINES):
            if lines[i] != expected:
                violations.append((py_file, f"Line {i + 1}: expected {expected!r}, got {lines[i]!r}"))
                break

    if violations:
        msg_parts = [f"\n{len(violations)} file(s) with non-standard headers:"]
        for path, reason in violations:
            msg_parts.append(f"  {path.relative_to(REPO_ROOT)}: {reason}")
        raise AssertionError("\n".join(msg_parts))
