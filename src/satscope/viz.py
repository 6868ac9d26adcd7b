"""Charts for propagated series.

Ground track, altitude profile, speed profile and correlation heatmap,
rendered with matplotlib. Every function returns the Figure and saves it
when given a path. Empty series and undefined statistics are drawn as a
placeholder message, never as zeros.
"""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import numpy as np
import matplotlib
import matplotlib.pyplot as plt
import matplotlib.dates as mdates

from .correlation import CorrelationMatrix, correlate_series
from .metrics import summarize
from .propagator import PropagatedSeries


plt.rcParams.update({
    "figure.facecolor": "white",
    "axes.facecolor": "#fafafa",
    "axes.grid": True,
    "grid.alpha": 0.3,
    "font.family": "sans-serif",
    "font.size": 10,
})

TRACK_COLOR = "#10b981"
SPEED_COLOR = "#6366f1"
EMPTY_COLOR = "#95a5a6"


def plot_ground_track(
    series: PropagatedSeries,
    title: Optional[str] = None,
    save_path: Optional[str | Path] = None,
    figsize: tuple = (12, 6),
) -> plt.Figure:
    """Sub-satellite track on an equirectangular longitude/latitude grid."""
    fig, ax = plt.subplots(figsize=figsize)
    ax.set_title(title or f"Ground Track — {series.name}")

    if series.is_empty:
        _draw_empty(ax)
    else:
        lons, lats = _break_at_antimeridian(series.longitudes, series.latitudes)
        ax.plot(lons, lats, linewidth=2, color=TRACK_COLOR)
        ax.plot(series.longitudes[0], series.latitudes[0], "o", color=TRACK_COLOR,
                markersize=6, label=f"{series.epochs[0]:%H:%M} UTC")
        ax.legend(loc="lower left", fontsize=8)

    ax.set_xlim(-180, 180)
    ax.set_ylim(-90, 90)
    ax.set_xticks(range(-180, 181, 60))
    ax.set_yticks(range(-90, 91, 30))
    ax.set_xlabel("Longitude (°)")
    ax.set_ylabel("Latitude (°)")
    ax.set_aspect("equal")

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches="tight")

    return fig


def plot_altitude(
    series: PropagatedSeries,
    title: str = "Altitude Profile",
    save_path: Optional[str | Path] = None,
    figsize: tuple = (12, 5),
) -> plt.Figure:
    """Altitude (km) against time."""
    return _plot_profile(
        series,
        [a / 1000.0 for a in series.altitudes],
        ylabel="Altitude (km)",
        color=TRACK_COLOR,
        title=title,
        save_path=save_path,
        figsize=figsize,
    )


def plot_speed(
    series: PropagatedSeries,
    title: str = "Velocity Profile",
    save_path: Optional[str | Path] = None,
    figsize: tuple = (12, 5),
) -> plt.Figure:
    """Inertial speed (m/s) against time."""
    return _plot_profile(
        series,
        list(series.speeds),
        ylabel="Speed (m/s)",
        color=SPEED_COLOR,
        title=title,
        save_path=save_path,
        figsize=figsize,
    )


def plot_correlation(
    matrix: CorrelationMatrix,
    title: str = "Correlation Heatmap",
    save_path: Optional[str | Path] = None,
    figsize: tuple = (6, 5),
) -> plt.Figure:
    """Heatmap of a correlation matrix, undefined cells shown as '–'."""
    fig, ax = plt.subplots(figsize=figsize)
    labels = [label.title() for label in matrix.labels]

    cmap = matplotlib.colormaps["viridis"].copy()
    cmap.set_bad(color="#dddddd")
    image = ax.imshow(np.ma.masked_invalid(matrix.values), cmap=cmap, vmin=-1, vmax=1)
    fig.colorbar(image, ax=ax)

    for i in range(len(labels)):
        for j in range(len(labels)):
            v = matrix.values[i, j]
            text = "–" if np.isnan(v) else f"{v:.2f}"
            ax.text(j, i, text, ha="center", va="center", color="white", fontsize=9)

    ax.set_xticks(range(len(labels)), labels)
    ax.set_yticks(range(len(labels)), labels)
    ax.grid(False)
    ax.set_title(title)

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches="tight")

    return fig


def generate_report(
    series: PropagatedSeries,
    output_dir: str | Path = "data/reports",
) -> Path:
    """Write a markdown summary plus all charts for one series.

    Returns the output directory path.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    metrics = summarize(series)
    summary = (
        f"# Orbit Report — {series.name}\n\n"
        f"- **Samples:** {metrics.sample_count}\n"
        f"- **Mean altitude (m):** {metrics.format_altitude()}\n"
        f"- **Mean speed (m/s):** {metrics.format_speed()}\n"
        f"- **Orbit class:** {metrics.format_orbit_class()}\n"
        f"- **Report generated:** {datetime.now(timezone.utc):%Y-%m-%d %H:%M UTC}\n"
    )
    if not series.is_empty:
        summary += (
            f"- **Window:** {series.epochs[0]:%Y-%m-%d %H:%M} → "
            f"{series.epochs[-1]:%Y-%m-%d %H:%M} UTC\n"
        )

    (output_dir / "report.md").write_text(summary)

    plot_ground_track(series, save_path=output_dir / "ground_track.png")
    plot_altitude(series, save_path=output_dir / "altitude.png")
    plot_speed(series, save_path=output_dir / "speed.png")
    if len(series) >= 2:
        plot_correlation(correlate_series(series), save_path=output_dir / "correlation.png")

    plt.close("all")
    return output_dir


# ── Private helpers ──


def _plot_profile(
    series: PropagatedSeries,
    values: list[float],
    ylabel: str,
    color: str,
    title: str,
    save_path: Optional[str | Path],
    figsize: tuple,
) -> plt.Figure:
    fig, ax = plt.subplots(figsize=figsize)
    ax.set_title(f"{title} — {series.name}")

    if series.is_empty:
        _draw_empty(ax)
    else:
        ax.plot(list(series.epochs), values, linewidth=1.2, color=color)
        ax.xaxis.set_major_formatter(mdates.DateFormatter("%H:%M"))
        fig.autofmt_xdate(rotation=30)

    ax.set_ylabel(ylabel)
    ax.set_xlabel("Time (UTC)")

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches="tight")

    return fig


def _draw_empty(ax) -> None:
    ax.text(0.5, 0.5, "No propagated samples", transform=ax.transAxes,
            ha="center", va="center", fontsize=14, color=EMPTY_COLOR)


def _break_at_antimeridian(lons, lats) -> tuple[np.ndarray, np.ndarray]:
    """Insert NaN gaps where the track wraps from +180° to -180°."""
    lons = np.asarray(lons, dtype=np.float64)
    lats = np.asarray(lats, dtype=np.float64)
    wraps = np.where(np.abs(np.diff(lons)) > 180.0)[0] + 1
    return np.insert(lons, wraps, np.nan), np.insert(lats, wraps, np.nan)
