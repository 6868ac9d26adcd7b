"""satscope — element-set propagation and orbit analytics.

Turn three-line element-set text into time series of ground track,
altitude and speed, then summarize and correlate them.

Modules:
    tle_parser:  Split element-set text into immutable records.
    sgp4_model:  Boundary to the SGP4 propagation library.
    propagator:  Record + time window to a propagated series.
    geodetic:    Inertial position to WGS84 latitude/longitude/altitude.
    metrics:     Mean altitude, mean speed and LEO/MEO/GEO class.
    correlation: Pearson correlation matrix over named series.
    sources:     Element-set files and CelesTrak downloads.
    viz:         Charts and reports for propagated series.
    cli:         Command-line interface.

Example:
    >>> from satscope.tle_parser import parse_element_sets
    >>> from satscope.propagator import propagate
    >>> from satscope.metrics import summarize
    >>>
    >>> records = parse_element_sets(open("data/tle.txt").read())
    >>> series = propagate(records[0], window_minutes=120)
    >>> metrics = summarize(series)
    >>> print(metrics.orbit_class, metrics.format_altitude())
"""

__version__ = "0.1.0"
