"""Inertial to geodetic conversion.

Rotates a TEME/ECI position into the Earth-fixed frame by the Greenwich
sidereal angle and solves for WGS84 geodetic latitude, longitude and
height. Latitude is found by fixed-count fixed-point iteration, so the
result is bit-for-bit repeatable for identical inputs.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import NamedTuple, Sequence

from .sgp4_model import sidereal_time

# ── WGS84 ellipsoid ──

WGS84_A_KM = 6378.137
"""Equatorial radius (km)."""

WGS84_B_KM = 6356.7523142
"""Polar radius (km)."""

WGS84_F = (WGS84_A_KM - WGS84_B_KM) / WGS84_A_KM
WGS84_E2 = 2.0 * WGS84_F - WGS84_F**2

LATITUDE_ITERATIONS = 20

KM_TO_M = 1000.0


class GeodeticPosition(NamedTuple):
    latitude_deg: float
    longitude_deg: float
    altitude_m: float


def eci_to_geodetic(
    position_km: Sequence[float],
    gmst_rad: float,
) -> tuple[float, float, float]:
    """Convert an inertial position to geodetic coordinates.

    Args:
        position_km: Inertial position (x, y, z) in km.
        gmst_rad: Greenwich sidereal angle in radians.

    Returns:
        ``(latitude_rad, longitude_rad, height_km)``; longitude is wrapped
        to [-π, π].
    """
    x, y, z = position_km
    r = math.hypot(x, y)

    longitude = math.atan2(y, x) - gmst_rad
    while longitude < -math.pi:
        longitude += 2.0 * math.pi
    while longitude > math.pi:
        longitude -= 2.0 * math.pi

    latitude = math.atan2(z, r)
    c = 1.0
    for _ in range(LATITUDE_ITERATIONS):
        sin_lat = math.sin(latitude)
        c = 1.0 / math.sqrt(1.0 - WGS84_E2 * sin_lat**2)
        latitude = math.atan2(z + WGS84_A_KM * c * WGS84_E2 * sin_lat, r)

    cos_lat = math.cos(latitude)
    if abs(cos_lat) > 1e-10:
        height = r / cos_lat - WGS84_A_KM * c
    else:
        # Over a pole the r/cos form is singular
        height = abs(z) - WGS84_B_KM

    return latitude, longitude, height


def to_geodetic(position_km: Sequence[float], sample_time: datetime) -> GeodeticPosition:
    """Geodetic latitude/longitude (degrees) and altitude (meters).

    Args:
        position_km: Inertial position in km, as reported by the model.
        sample_time: UTC time the position refers to.
    """
    latitude, longitude, height_km = eci_to_geodetic(
        position_km, sidereal_time(sample_time)
    )
    return GeodeticPosition(
        latitude_deg=math.degrees(latitude),
        longitude_deg=math.degrees(longitude),
        altitude_m=height_km * KM_TO_M,
    )
