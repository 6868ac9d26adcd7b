"""Propagation model boundary.

Thin wrapper around the ``sgp4`` package (Vallado's SGP4/SDP4 port).
This is the only module that touches the library; everything else sees
plain tuples and floats.

Units are the model's own: positions in km and velocities in km/s, in the
TEME inertial frame.

References:
    - Vallado, D. et al. (2006). "Revisiting Spacetrack Report #3".
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import NamedTuple, Optional

from sgp4.api import Satrec, jday
from sgp4.propagation import gstime

logger = logging.getLogger(__name__)

MIN_ELEMENT_LINE_LENGTH = 68
"""Columns 1-68 carry data; column 69 is the checksum."""


class PositionVelocity(NamedTuple):
    """Inertial state vector reported by the model."""

    position: tuple[float, float, float]
    velocity: tuple[float, float, float]


def initialize_from_elements(line1: str, line2: str) -> Optional[Satrec]:
    """Build a model state from two element lines.

    Returns:
        The initialized ``Satrec``, or ``None`` if the lines are not
        element lines or the model rejects them.
    """
    if not (line1.startswith("1 ") and line2.startswith("2 ")):
        logger.debug("Not element lines: %r / %r", line1[:10], line2[:10])
        return None
    if min(len(line1), len(line2)) < MIN_ELEMENT_LINE_LENGTH:
        logger.debug("Element lines too short (%d, %d)", len(line1), len(line2))
        return None

    try:
        satrec = Satrec.twoline2rv(line1, line2)
    except ValueError as exc:
        logger.debug("sgp4 rejected element lines: %s", exc)
        return None

    if satrec.error != 0:
        logger.debug("sgp4 initialization error code %d", satrec.error)
        return None

    return satrec


def propagate_at(satrec: Satrec, when: datetime) -> Optional[PositionVelocity]:
    """Advance the model to an absolute UTC time.

    Returns:
        Position/velocity, or ``None`` when the model reports an error
        (e.g. decayed orbit) or a non-finite vector.
    """
    jd, fr = julian_date(when)
    error, position, velocity = satrec.sgp4(jd, fr)
    if error != 0:
        logger.debug("sgp4 error code %d at %s", error, when.isoformat())
        return None
    if not all(math.isfinite(c) for c in (*position, *velocity)):
        return None

    return PositionVelocity(tuple(position), tuple(velocity))


def sidereal_time(when: datetime) -> float:
    """Greenwich mean sidereal time (IAU-82) in radians, in [0, 2π)."""
    jd, fr = julian_date(when)
    return gstime(jd + fr)


def julian_date(when: datetime) -> tuple[float, float]:
    """Split Julian date ``(jd, fraction)`` for a datetime.

    Naive datetimes are taken as UTC.
    """
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    else:
        when = when.astimezone(timezone.utc)

    return jday(
        when.year, when.month, when.day,
        when.hour, when.minute, when.second + when.microsecond / 1e6,
    )
