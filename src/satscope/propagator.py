"""Element-set propagation into time series.

Samples the SGP4 model at a fixed cadence over a window starting at a
reference time, converting each sample into geodetic position and scalar
speed. Samples the model cannot produce (bad elements, decay, numerical
breakdown) are left out, so a series may be shorter than requested, down
to empty.

Records are independent of each other, so ``propagate_many`` maps over
them with a thread pool.
"""
from __future__ import annotations

import logging
import math
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from numbers import Integral
from typing import Iterable, Optional

import pandas as pd
from tqdm import tqdm

from .geodetic import to_geodetic
from .metrics import speed_from_velocity
from .sgp4_model import initialize_from_elements, propagate_at
from .tle_parser import ElementSetRecord

logger = logging.getLogger(__name__)


# Configuration
@dataclass
class PropagationSettings:
    """Sampling window and cadence.

    Attributes:
        window_minutes: Window length after the start time (minutes).
        step_minutes: Sampling step (minutes).
    """
    window_minutes: int = 120
    step_minutes: float = 1

    @classmethod
    def quick_look(cls) -> PropagationSettings:
        """Roughly one low-orbit revolution at one-minute cadence."""
        return cls(window_minutes=100, step_minutes=1)

    @classmethod
    def full_day(cls) -> PropagationSettings:
        """24 hours at five-minute cadence."""
        return cls(window_minutes=1440, step_minutes=5)


# Series
@dataclass(frozen=True)
class PropagatedSeries:
    """One record's trajectory over a time window.

    All five sequences are index-aligned and equally long.

    Attributes:
        name: Name of the source record.
        epochs: Sample times (UTC), strictly increasing.
        latitudes: Geodetic latitude (degrees).
        longitudes: Geodetic longitude (degrees, [-180, 180]).
        altitudes: Altitude above the WGS84 ellipsoid (m).
        speeds: Inertial speed (m/s).
    """
    name: str
    epochs: tuple[datetime, ...] = field(default=())
    latitudes: tuple[float, ...] = field(default=())
    longitudes: tuple[float, ...] = field(default=())
    altitudes: tuple[float, ...] = field(default=())
    speeds: tuple[float, ...] = field(default=())

    def __post_init__(self) -> None:
        lengths = {
            len(self.epochs),
            len(self.latitudes),
            len(self.longitudes),
            len(self.altitudes),
            len(self.speeds),
        }
        if len(lengths) != 1:
            raise ValueError(f"Series sequences differ in length: {sorted(lengths)}")

    def __len__(self) -> int:
        return len(self.epochs)

    @property
    def is_empty(self) -> bool:
        return not self.epochs

    def to_dict(self) -> dict:
        """Plain serializable form, epochs as ISO-8601 strings."""
        return {
            "name": self.name,
            "epochs": [t.isoformat() for t in self.epochs],
            "latitudes": list(self.latitudes),
            "longitudes": list(self.longitudes),
            "altitudes": list(self.altitudes),
            "speeds": list(self.speeds),
        }

    def to_dataframe(self) -> pd.DataFrame:
        """One row per sample."""
        return pd.DataFrame(
            {
                "epoch": pd.to_datetime(list(self.epochs), utc=True),
                "latitude_deg": list(self.latitudes),
                "longitude_deg": list(self.longitudes),
                "altitude_m": list(self.altitudes),
                "speed_m_s": list(self.speeds),
            }
        )


def propagate(
    record: ElementSetRecord,
    window_minutes: int,
    step_minutes: float = 1,
    start: Optional[datetime] = None,
) -> PropagatedSeries:
    """Propagate one record over ``[start, start + window_minutes]``.

    Args:
        record: Element set to propagate.
        window_minutes: Window length (minutes), an integer >= 0. Both
            window endpoints are sampled.
        step_minutes: Sampling step (minutes), > 0.
        start: Reference start time. Defaults to now (UTC); naive
            datetimes are taken as UTC.

    Returns:
        The series of successfully propagated samples. Empty if the
        element lines can't initialize the model or every sample fails.

    Raises:
        ValueError: If the window or step is out of range.
    """
    offsets = _sample_offsets(window_minutes, step_minutes)
    start = _as_utc(start)

    satrec = initialize_from_elements(record.line1, record.line2)
    if satrec is None:
        logger.warning(
            "Record %d (%s): element lines rejected by the model; empty series",
            record.index,
            record.name,
        )
        return PropagatedSeries(name=record.name)

    epochs: list[datetime] = []
    lats: list[float] = []
    lons: list[float] = []
    alts: list[float] = []
    speeds: list[float] = []
    failed = 0

    for minutes in offsets:
        t = start + timedelta(minutes=minutes)
        state = propagate_at(satrec, t)
        if state is None:
            failed += 1
            continue

        geo = to_geodetic(state.position, t)
        epochs.append(t)
        lats.append(geo.latitude_deg)
        lons.append(geo.longitude_deg)
        alts.append(geo.altitude_m)
        speeds.append(speed_from_velocity(state.velocity))

    if failed:
        logger.info(
            "Record %d (%s): %d of %d samples failed to propagate",
            record.index,
            record.name,
            failed,
            len(offsets),
        )

    return PropagatedSeries(
        name=record.name,
        epochs=tuple(epochs),
        latitudes=tuple(lats),
        longitudes=tuple(lons),
        altitudes=tuple(alts),
        speeds=tuple(speeds),
    )


def propagate_many(
    records: Iterable[ElementSetRecord],
    window_minutes: int,
    step_minutes: float = 1,
    start: Optional[datetime] = None,
    max_workers: Optional[int] = None,
    progress: bool = False,
) -> list[PropagatedSeries]:
    """Propagate several records concurrently.

    All records share one start time. Results come back in input order.

    Args:
        records: Records to propagate.
        window_minutes: See :func:`propagate`.
        step_minutes: See :func:`propagate`.
        start: Shared reference start time (default: now, UTC).
        max_workers: Thread pool size. Default matches the stdlib default.
        progress: Show a progress bar.
    """
    records = list(records)
    # Validate once, before any worker starts
    _sample_offsets(window_minutes, step_minutes)
    start = _as_utc(start)
    workers = max_workers or min(32, (os.cpu_count() or 1) + 4)

    def _one(record: ElementSetRecord) -> PropagatedSeries:
        return propagate(record, window_minutes, step_minutes, start)

    with ThreadPoolExecutor(max_workers=workers) as executor:
        results = executor.map(_one, records)
        if progress:
            results = tqdm(results, total=len(records), desc="Propagating")
        return list(results)


# ── Private helpers ──


def _sample_offsets(window_minutes: int, step_minutes: float) -> list[float]:
    """Minute offsets ``0, step, 2·step, …`` up to and including the window."""
    if isinstance(window_minutes, bool) or not isinstance(window_minutes, Integral):
        raise ValueError(f"window_minutes must be an integer, got {window_minutes!r}")
    if window_minutes < 0:
        raise ValueError(f"window_minutes must be >= 0, got {window_minutes}")
    if not step_minutes > 0:
        raise ValueError(f"step_minutes must be > 0, got {step_minutes}")

    # Tolerance keeps e.g. 10 / 0.1 from flooring to 99
    count = math.floor(window_minutes / step_minutes + 1e-9) + 1
    return [i * step_minutes for i in range(count)]


def _as_utc(when: Optional[datetime]) -> datetime:
    if when is None:
        return datetime.now(timezone.utc)
    if when.tzinfo is None:
        return when.replace(tzinfo=timezone.utc)
    return when.astimezone(timezone.utc)
