"""Pairwise Pearson correlation across named numeric series.

Cells involving a zero-variance (constant) series, or one holding a
non-finite value, are undefined and hold ``NaN``; they are never replaced
with a number.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from .propagator import PropagatedSeries

logger = logging.getLogger(__name__)

# Variable name → PropagatedSeries attribute
SERIES_VARIABLES = {
    "altitude": "altitudes",
    "speed": "speeds",
    "latitude": "latitudes",
    "longitude": "longitudes",
}

DEFAULT_VARIABLES = ("altitude", "speed", "latitude")


@dataclass(frozen=True)
class CorrelationMatrix:
    """Square, symmetric Pearson matrix with positional labels.

    Attributes:
        labels: Series names, in the input mapping's order.
        values: ``len(labels) × len(labels)`` array; ``NaN`` marks an
            undefined cell.
    """
    labels: tuple[str, ...]
    values: np.ndarray

    def get(self, row: str, col: str) -> float:
        return float(self.values[self.labels.index(row), self.labels.index(col)])

    def is_defined(self, row: str, col: str) -> bool:
        return not math.isnan(self.get(row, col))

    def to_dataframe(self) -> pd.DataFrame:
        labels = list(self.labels)
        return pd.DataFrame(self.values, index=labels, columns=labels)

    def to_dict(self) -> dict[str, dict[str, Optional[float]]]:
        """Nested mapping ``{row: {col: r}}``; undefined cells are ``None``."""
        return {
            row: {
                col: None if math.isnan(v) else float(v)
                for col, v in zip(self.labels, self.values[i])
            }
            for i, row in enumerate(self.labels)
        }


def pearson(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson correlation coefficient of two equal-length series.

    Returns:
        r in [-1, 1], or ``NaN`` if either series has zero variance or
        holds a non-finite value.

    Raises:
        ValueError: If the series are empty or differ in length.
    """
    xa = np.asarray(x, dtype=np.float64)
    ya = np.asarray(y, dtype=np.float64)
    if xa.size == 0 or ya.size == 0:
        raise ValueError("Cannot correlate an empty series")
    if xa.shape != ya.shape:
        raise ValueError(f"Series lengths differ: {xa.size} vs {ya.size}")

    if _is_undefined(xa) or _is_undefined(ya):
        return math.nan

    dx = _scaled_deviations(xa)
    dy = _scaled_deviations(ya)
    denom = math.sqrt(float(np.dot(dx, dx)) * float(np.dot(dy, dy)))
    if denom == 0.0 or not math.isfinite(denom):
        return math.nan

    r = float(np.dot(dx, dy)) / denom
    # Rounding can push |r| a hair past 1; clip keeps NaN
    return float(np.clip(r, -1.0, 1.0))


def correlate(named_series: Mapping[str, Sequence[float]]) -> CorrelationMatrix:
    """Pearson correlation matrix over named series.

    Rows and columns follow the mapping's iteration order.

    Args:
        named_series: Series name → values. All series must be non-empty
            and of equal length.

    Raises:
        ValueError: If the mapping is empty, a series is empty, or the
            lengths differ.
    """
    if not named_series:
        raise ValueError("No series to correlate")

    labels = tuple(named_series)
    lengths = {name: len(values) for name, values in named_series.items()}
    if len(set(lengths.values())) != 1:
        raise ValueError(f"Series lengths differ: {lengths}")
    if next(iter(lengths.values())) == 0:
        raise ValueError("Cannot correlate empty series")

    arrays = [np.asarray(named_series[label], dtype=np.float64) for label in labels]
    constant = [_is_constant(a) for a in arrays]
    non_finite = [not bool(np.all(np.isfinite(a))) for a in arrays]
    undefined = [flat or bad for flat, bad in zip(constant, non_finite)]

    n = len(labels)
    values = np.empty((n, n), dtype=np.float64)
    for i in range(n):
        values[i, i] = math.nan if undefined[i] else 1.0
        for j in range(i + 1, n):
            values[i, j] = values[j, i] = pearson(arrays[i], arrays[j])

    flat_labels = [label for label, flat in zip(labels, constant) if flat]
    if flat_labels:
        logger.info("Zero-variance series, correlations undefined: %s", ", ".join(flat_labels))
    bad_labels = [label for label, bad in zip(labels, non_finite) if bad]
    if bad_labels:
        logger.warning("Non-finite values, correlations undefined: %s", ", ".join(bad_labels))

    values.setflags(write=False)
    return CorrelationMatrix(labels=labels, values=values)


def correlate_series(
    series: PropagatedSeries,
    variables: Sequence[str] = DEFAULT_VARIABLES,
) -> CorrelationMatrix:
    """Correlation matrix of a propagated series' own variables.

    Args:
        series: A non-empty propagated series.
        variables: Names from ``SERIES_VARIABLES``; labels keep this order.

    Raises:
        ValueError: On an unknown variable name or an empty series.
    """
    unknown = [v for v in variables if v not in SERIES_VARIABLES]
    if unknown:
        raise ValueError(
            f"Unknown variable(s) {unknown}; expected one of {sorted(SERIES_VARIABLES)}"
        )

    return correlate({v: getattr(series, SERIES_VARIABLES[v]) for v in variables})


def _is_constant(values: np.ndarray) -> bool:
    # Exact comparison; mean-centring leaves rounding noise on constant input
    return bool(np.all(values == values[0]))


def _is_undefined(values: np.ndarray) -> bool:
    return _is_constant(values) or not bool(np.all(np.isfinite(values)))


def _scaled_deviations(values: np.ndarray) -> np.ndarray:
    # Unit-scaled before and after centring so dot products neither
    # overflow nor underflow on extreme magnitudes
    values = values / np.max(np.abs(values))
    dev = values - values.mean()
    return dev / np.max(np.abs(dev))
