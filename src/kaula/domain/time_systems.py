# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the terms in COMMERCIAL-LICENSE.md.
# Free for personal, educational, and academic use.
# Commercial use requires a paid license — see COMMERCIAL-LICENSE.md.
"""Time scales and Earth rotation for semi-analytical propagation.

Epochs are timezone-aware UTC datetimes. TAI epochs are expressed as
calendar labels (naive, or with the tzinfo ignored) and converted through
the bundled leap second table.

Earth Rotation Angle (IERS Conventions 2003/2010, Eq. 5.15):

    ERA(Tu) = 2π(0.7790572732640 + 1.00273781191135448 * Tu)

where Tu is the UT1 time elapsed since 2000-01-01T12:00:00 UT1, in days.
"""

import json
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

# --------------------------------------------------------------------------- #
# Constants
# --------------------------------------------------------------------------- #

_SECONDS_PER_DAY: float = 86400.0

_TWO_PI: float = 2.0 * math.pi

FIFTIES_EPOCH: datetime = datetime(1950, 1, 1)
"""Origin of the CNES Julian day count (calendar label, any time scale)."""

_ERA_REFERENCE = datetime(2000, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

TT_MINUS_TAI: float = 32.184
"""TT-TAI in seconds."""

_ERA_0_TURNS: float = 0.7790572732640
_ERA_1_TURNS: float = 0.00273781191135448

_ERA_1A: float = _TWO_PI / _SECONDS_PER_DAY
_ERA_1B: float = _ERA_1A * 0.00273781191135448

# --------------------------------------------------------------------------- #
# Leap second table
# --------------------------------------------------------------------------- #

_LEAP_SECOND_TABLE: Optional[list[tuple[datetime, float]]] = None


def _load_leap_seconds() -> list[tuple[datetime, float]]:
    """Load and cache leap second table from bundled JSON."""
    global _LEAP_SECOND_TABLE
    if _LEAP_SECOND_TABLE is not None:
        return _LEAP_SECOND_TABLE

    data_path = Path(__file__).parent.parent / "data" / "tai_utc.json"
    with open(data_path) as f:
        data = json.load(f)

    table: list[tuple[datetime, float]] = []
    for entry in data["entries"]:
        parts = entry["date"].split("-")
        dt = datetime(int(parts[0]), int(parts[1]), int(parts[2]),
                      tzinfo=timezone.utc)
        table.append((dt, float(entry["tai_utc"])))

    _LEAP_SECOND_TABLE = table
    return _LEAP_SECOND_TABLE


def utc_to_tai_seconds(dt: datetime) -> float:
    """Return TAI-UTC offset (delta_AT) for a given UTC datetime.

    Uses binary search on the leap second table.
    Raises ValueError for dates before 1972-01-01.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    table = _load_leap_seconds()

    if dt < table[0][0]:
        raise ValueError(
            f"UTC date {dt.isoformat()} is before 1972-01-01; "
            "leap second table undefined"
        )

    lo, hi = 0, len(table) - 1
    result = table[0][1]
    while lo <= hi:
        mid = (lo + hi) // 2
        if table[mid][0] <= dt:
            result = table[mid][1]
            lo = mid + 1
        else:
            hi = mid - 1

    return result


def utc_to_tai(dt: datetime) -> datetime:
    """TAI calendar label (naive datetime) of a UTC epoch."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    tai = dt + timedelta(seconds=utc_to_tai_seconds(dt))
    return tai.replace(tzinfo=None)


def tai_to_utc(tai: datetime) -> datetime:
    """UTC epoch of a TAI calendar label.

    The offset is looked up at the first UTC estimate, then re-evaluated
    once so epochs just after a leap second use the new offset.
    """
    label = tai.replace(tzinfo=timezone.utc)
    guess = label - timedelta(seconds=utc_to_tai_seconds(label))
    return label - timedelta(seconds=utc_to_tai_seconds(guess))


def from_cnes_julian_date(days: int, seconds: float = 0.0, scale: str = "UTC") -> datetime:
    """UTC epoch from a CNES Julian date (days since 1950-01-01 plus seconds).

    Args:
        days: Whole days since 1950-01-01T00:00.
        seconds: Seconds in the day.
        scale: Time scale of the date, "UTC" or "TAI".

    Raises:
        ValueError: For an unknown scale.
    """
    label = FIFTIES_EPOCH + timedelta(days=days, seconds=seconds)
    if scale == "UTC":
        return label.replace(tzinfo=timezone.utc)
    if scale == "TAI":
        return tai_to_utc(label)
    raise ValueError(f"unsupported time scale {scale!r}; expected 'UTC' or 'TAI'")


# --------------------------------------------------------------------------- #
# Earth rotation
# --------------------------------------------------------------------------- #

@dataclass(frozen=True)
class EarthRotation:
    """Earth Rotation Angle model with a constant TT-UT1 offset.

    UT1 is derived as TAI + (TT - TAI) - (TT - UT1). The default offset,
    67.184 s, puts UT1 exactly 35 s behind TAI as in STELA long-term runs.

    Passed explicitly to the perturbation engines; each propagation can
    carry its own instance.
    """

    tt_minus_ut1: float = 67.184
    """TT-UT1 in seconds."""

    def __post_init__(self) -> None:
        if not math.isfinite(self.tt_minus_ut1):
            raise ValueError(f"tt_minus_ut1 must be finite, got {self.tt_minus_ut1}")

    def ut1_seconds_since_j2000(self, epoch: datetime) -> float:
        """UT1 seconds elapsed since 2000-01-01T12:00:00 UT1."""
        if epoch.tzinfo is None:
            epoch = epoch.replace(tzinfo=timezone.utc)
        # Offset summed first so whole-second epochs stay exact.
        ut1_minus_tai = TT_MINUS_TAI - self.tt_minus_ut1
        utc_seconds = (epoch - _ERA_REFERENCE).total_seconds()
        return utc_seconds + utc_to_tai_seconds(epoch) + ut1_minus_tai

    def era(self, epoch: datetime) -> float:
        """Earth Rotation Angle in radians, normalized to [-pi, pi)."""
        tu = self.ut1_seconds_since_j2000(epoch) / _SECONDS_PER_DAY
        # Whole days dropped before scaling by 2π.
        era = _TWO_PI * ((tu - math.floor(tu)) + _ERA_0_TURNS + _ERA_1_TURNS * tu)
        return era - _TWO_PI * math.floor((era + math.pi) / _TWO_PI)

    def era_rate(self, epoch: Optional[datetime] = None) -> float:
        """ERA time derivative in rad/s (constant in this model)."""
        return _ERA_1A + _ERA_1B
