#!/usr/bin/env python3
"""
Example: propagate every element set in data/tle.txt and compare them.

Runs offline against the bundled sample catalog. The window starts at the
catalog epoch so the 2008 element sets are still valid.
"""
import sys
sys.path.insert(0, "src")

from datetime import datetime, timezone

from satscope.sources import load_element_file
from satscope.propagator import PropagationSettings, propagate_many
from satscope.metrics import summarize_many
from satscope.correlation import correlate_series
from satscope.viz import generate_report


def main():
    print("=" * 65)
    print("  satscope — Sample Catalog")
    print("=" * 65)

    records = load_element_file("data/tle.txt")
    print(f"\nLoaded {len(records)} element sets")

    settings = PropagationSettings.quick_look()
    start = datetime(2008, 9, 20, 12, 25, 40, tzinfo=timezone.utc)
    series_list = propagate_many(
        records,
        settings.window_minutes,
        settings.step_minutes,
        start=start,
        progress=True,
    )

    print()
    print(summarize_many(series_list).to_string(index=False))

    for series in series_list:
        if len(series) < 2:
            print(f"\n{series.name}: not enough samples to correlate")
            continue
        matrix = correlate_series(series)
        print(f"\n{series.name}")
        print(matrix.to_dataframe().round(2).to_string())

    report_path = generate_report(series_list[0], output_dir="data/reports/sample")
    print(f"\nReport for {series_list[0].name} saved to {report_path}")


if __name__ == "__main__":
    main()
