#!/usr/bin/env python3
"""
Tests for the collaborators around the core: element-set sources,
charts/reports and the command-line interface.
"""
import pandas as pd
import pytest
import requests
from click.testing import CliRunner

from satscope.cli import main
from satscope.propagator import PropagatedSeries, propagate
from satscope.sources import CelestrakClient, check_element_text, load_element_file
from satscope.viz import generate_report, plot_correlation, plot_ground_track
from satscope.correlation import correlate

from conftest import ISS_NAME, GEO_NAME

START = "2008-09-20 12:25:40"


# SOURCES TESTS
class _FakeResponse:
    def __init__(self, text: str, status_code: int = 200):
        self.text = text
        self.status_code = status_code
        self.url = "https://celestrak.test/gp.php?GROUP=stations&FORMAT=tle"

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")


class TestSources:
    def test_load_element_file(self, tle_file):
        records = load_element_file(tle_file)
        assert [r.name for r in records] == [ISS_NAME, GEO_NAME]

    def test_html_payload_rejected(self, tmp_path):
        path = tmp_path / "tle.txt"
        path.write_text("<!DOCTYPE html><HTML><body>Not Found</body></HTML>")
        with pytest.raises(ValueError, match="HTML"):
            load_element_file(path)

    def test_check_element_text_passthrough(self, tle_text):
        assert check_element_text(tle_text) == tle_text

    def test_fetch_group_and_cache(self, tmp_path, tle_text, monkeypatch):
        client = CelestrakClient(cache_dir=tmp_path)
        calls = []

        def fake_get(url, params=None, timeout=None):
            calls.append(params)
            return _FakeResponse(tle_text)

        monkeypatch.setattr(client.session, "get", fake_get)

        records = client.fetch_records("stations")
        assert len(records) == 2
        assert calls == [{"GROUP": "stations", "FORMAT": "tle"}]
        assert (tmp_path / "stations.tle").exists()

        # Second call is served from the cache
        assert client.fetch_group("stations") == tle_text
        assert len(calls) == 1

        client.fetch_group("stations", use_cache=False)
        assert len(calls) == 2

    def test_http_error_becomes_connection_error(self, tmp_path, monkeypatch):
        client = CelestrakClient(cache_dir=tmp_path)
        monkeypatch.setattr(
            client.session, "get", lambda *a, **kw: _FakeResponse("", status_code=503)
        )
        with pytest.raises(ConnectionError, match="stations"):
            client.fetch_group("stations")

    def test_cache_dir_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SATSCOPE_CACHE_DIR", str(tmp_path / "cache"))
        client = CelestrakClient()
        assert client.cache_dir == tmp_path / "cache"
        assert client.cache_dir.is_dir()


# VISUALIZATION TESTS
class TestViz:
    def test_report_files(self, iss_record, epoch, tmp_path):
        series = propagate(iss_record, 30, start=epoch)
        out = generate_report(series, output_dir=tmp_path / "iss")

        for name in ("report.md", "ground_track.png", "altitude.png", "speed.png",
                     "correlation.png"):
            assert (out / name).exists()

        text = (out / "report.md").read_text()
        assert ISS_NAME in text
        assert "LEO" in text

    def test_report_for_empty_series(self, tmp_path):
        out = generate_report(PropagatedSeries(name="LOST"), output_dir=tmp_path)
        text = (out / "report.md").read_text()
        assert "**Orbit class:** –" in text
        assert "**Mean altitude (m):** –" in text
        assert not (out / "correlation.png").exists()

    def test_ground_track_breaks_at_antimeridian(self, iss_record, epoch):
        series = propagate(iss_record, 95, step_minutes=5, start=epoch)
        fig = plot_ground_track(series)
        track = fig.axes[0].lines[0]
        assert len(track.get_xdata()) >= len(series)

    def test_correlation_heatmap_with_undefined_cells(self):
        matrix = correlate({"flat": [1.0, 1.0, 1.0], "ramp": [1.0, 2.0, 3.0]})
        fig = plot_correlation(matrix)
        labels = [t.get_text() for t in fig.axes[0].texts]
        assert labels.count("–") == 3
        assert "1.00" in labels


# CLI TESTS
class TestCLI:
    def test_list(self, tle_file):
        result = CliRunner().invoke(main, ["list", str(tle_file)])
        assert result.exit_code == 0
        assert "ISS" in result.output
        assert "25544" in result.output

    def test_track(self, tle_file):
        result = CliRunner().invoke(
            main, ["track", str(tle_file), "--index", "0", "--minutes", "10", "--start", START]
        )
        assert result.exit_code == 0, result.output
        assert "Samples: 11" in result.output
        assert "LEO" in result.output

    def test_track_by_name_to_csv(self, tle_file, tmp_path):
        out = tmp_path / "geo.csv"
        result = CliRunner().invoke(
            main,
            ["track", str(tle_file), "--name", GEO_NAME, "--minutes", "60",
             "--step", "10", "--start", START, "--output", str(out)],
        )
        assert result.exit_code == 0, result.output
        assert "GEO" in result.output
        df = pd.read_csv(out)
        assert len(df) == 7
        assert "altitude_m" in df.columns

    def test_track_index_out_of_range(self, tle_file):
        result = CliRunner().invoke(main, ["track", str(tle_file), "--index", "5"])
        assert result.exit_code == 1
        assert "out of range" in result.output

    def test_track_unknown_name(self, tle_file):
        result = CliRunner().invoke(main, ["track", str(tle_file), "--name", "NOPE"])
        assert result.exit_code == 1

    def test_track_negative_window(self, tle_file):
        result = CliRunner().invoke(
            main, ["track", str(tle_file), "--minutes", "-3", "--start", START]
        )
        assert result.exit_code == 1
        assert "window_minutes" in result.output

    def test_track_unpropagatable_record(self, tmp_path):
        path = tmp_path / "junk.txt"
        path.write_text("JUNK\nnot an element line\nnor this\n")
        result = CliRunner().invoke(main, ["track", str(path), "--minutes", "5"])
        assert result.exit_code == 0
        assert "Samples: 0" in result.output

    def test_correlate(self, tle_file):
        result = CliRunner().invoke(
            main,
            ["correlate", str(tle_file), "--minutes", "30", "--start", START,
             "--var", "altitude", "--var", "longitude"],
        )
        assert result.exit_code == 0, result.output
        assert "Altitude" in result.output
        assert "Longitude" in result.output
        assert "+1.00" in result.output

    def test_report(self, tle_file, tmp_path):
        out = tmp_path / "report"
        result = CliRunner().invoke(
            main,
            ["report", str(tle_file), "--minutes", "20", "--start", START,
             "--report-dir", str(out)],
        )
        assert result.exit_code == 0, result.output
        assert (out / "report.md").exists()

    def test_fetch(self, tmp_path, tle_text, monkeypatch):
        monkeypatch.setenv("SATSCOPE_CACHE_DIR", str(tmp_path / "cache"))
        monkeypatch.setattr(
            requests.Session, "get", lambda self, *a, **kw: _FakeResponse(tle_text)
        )
        out = tmp_path / "stations.txt"
        result = CliRunner().invoke(main, ["fetch", "stations", "--output", str(out)])
        assert result.exit_code == 0, result.output
        assert load_element_file(out)[0].name == ISS_NAME
