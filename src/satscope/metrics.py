"""Summary metrics for propagated series.

Scalar speed from model velocity vectors, mean altitude/speed over a
series, and a coarse LEO/MEO/GEO altitude-band label.

An empty series has no mean. Undefined values are ``None`` throughout,
and the ``format_*`` helpers render them as a neutral placeholder.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Optional, Sequence

import pandas as pd

if TYPE_CHECKING:
    from .propagator import PropagatedSeries

logger = logging.getLogger(__name__)

KM_S_TO_M_S = 1000.0

PLACEHOLDER = "–"
"""Shown in place of an undefined statistic."""


class OrbitClass(Enum):
    """Altitude band of an orbit."""
    LEO = "LEO"
    MEO = "MEO"
    GEO = "GEO"


@dataclass(frozen=True)
class OrbitClassThresholds:
    """Altitude band edges in meters.

    Bands are ``[0, meo_min_m)`` → LEO, ``[meo_min_m, geo_min_m)`` → MEO,
    ``[geo_min_m, ∞)`` → GEO.

    Attributes:
        meo_min_m: Lowest MEO altitude (m).
        geo_min_m: Lowest GEO altitude (m).
    """
    meo_min_m: float = 2_000_000.0
    geo_min_m: float = 35_000_000.0

    def __post_init__(self) -> None:
        if not self.meo_min_m < self.geo_min_m:
            raise ValueError(
                f"meo_min_m ({self.meo_min_m}) must be below geo_min_m ({self.geo_min_m})"
            )


DEFAULT_THRESHOLDS = OrbitClassThresholds()


@dataclass(frozen=True)
class SummaryMetrics:
    """Aggregate view of one propagated series.

    Attributes:
        name: Series name.
        sample_count: Number of samples the means were taken over.
        mean_altitude_m: Mean altitude (m), ``None`` when undefined.
        mean_speed_m_s: Mean speed (m/s), ``None`` when undefined.
        orbit_class: Band of the mean altitude, ``None`` when undefined.
    """
    name: str
    sample_count: int
    mean_altitude_m: Optional[float]
    mean_speed_m_s: Optional[float]
    orbit_class: Optional[OrbitClass]

    @property
    def is_defined(self) -> bool:
        return self.sample_count > 0

    def format_altitude(self) -> str:
        return _format_number(self.mean_altitude_m)

    def format_speed(self) -> str:
        return _format_number(self.mean_speed_m_s)

    def format_orbit_class(self) -> str:
        return self.orbit_class.value if self.orbit_class else PLACEHOLDER

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "samples": self.sample_count,
            "mean_altitude_m": self.mean_altitude_m,
            "mean_speed_m_s": self.mean_speed_m_s,
            "orbit_class": self.orbit_class.value if self.orbit_class else None,
        }


def speed_from_velocity(velocity_km_s: Sequence[float]) -> float:
    """Scalar speed in m/s from a velocity vector in km/s."""
    vx, vy, vz = velocity_km_s
    return math.sqrt(vx**2 + vy**2 + vz**2) * KM_S_TO_M_S


def classify_orbit(
    altitude_m: float,
    thresholds: Optional[OrbitClassThresholds] = None,
) -> OrbitClass:
    """Label an altitude as LEO, MEO or GEO.

    Lower band edges are inclusive: exactly 2,000 km is MEO and exactly
    35,000 km is GEO with the default thresholds.
    """
    t = thresholds or DEFAULT_THRESHOLDS
    if altitude_m < t.meo_min_m:
        return OrbitClass.LEO
    if altitude_m < t.geo_min_m:
        return OrbitClass.MEO
    return OrbitClass.GEO


def summarize(
    series: PropagatedSeries,
    thresholds: Optional[OrbitClassThresholds] = None,
) -> SummaryMetrics:
    """Mean altitude, mean speed and orbit class of a series.

    An empty series yields ``None`` for every statistic.
    """
    n = len(series.altitudes)
    if n == 0:
        logger.debug("Series %r is empty; metrics undefined", series.name)
        return SummaryMetrics(
            name=series.name,
            sample_count=0,
            mean_altitude_m=None,
            mean_speed_m_s=None,
            orbit_class=None,
        )

    mean_altitude = math.fsum(series.altitudes) / n
    mean_speed = math.fsum(series.speeds) / n

    return SummaryMetrics(
        name=series.name,
        sample_count=n,
        mean_altitude_m=mean_altitude,
        mean_speed_m_s=mean_speed,
        orbit_class=classify_orbit(mean_altitude, thresholds),
    )


def summarize_many(
    series_list: Iterable[PropagatedSeries],
    thresholds: Optional[OrbitClassThresholds] = None,
) -> pd.DataFrame:
    """Summarize several series into a DataFrame, one row per series.

    Undefined statistics appear as missing values.
    """
    rows = [summarize(s, thresholds).to_dict() for s in series_list]
    return pd.DataFrame(
        rows,
        columns=["name", "samples", "mean_altitude_m", "mean_speed_m_s", "orbit_class"],
    )


def _format_number(value: Optional[float]) -> str:
    if value is None:
        return PLACEHOLDER
    return f"{round(value):,}"
