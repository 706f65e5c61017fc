from __future__ import annotations

import json

import pytest
from shapely.geometry import shape

from documents.loaders import read_source
from documents.types import DiagnosticKind
from engine.difference import run_difference
from engine.errors import MalformedJsonError, SourceUnreadableError
from engine.types import DifferenceOptions


def _write(path, geojson) -> str:
    path.write_text(json.dumps(geojson), encoding="utf-8")
    return str(path)


def test_sources_are_subtracted_in_order(geojson_dir, load_geojson):
    options = DifferenceOptions(
        subtrahend_sources=[str(geojson_dir / "polygon-2x2.geojson")],
        diagnostic_sink=lambda d: None,
    )

    result = run_difference(load_geojson("polygon-20x20.geojson"), options)

    assert shape(result.geojson).area == pytest.approx(396.0)
    assert result.diagnostics == []
    assert result.sources_read == options.subtrahend_sources


def test_total_annihilation_yields_empty_feature_collection_and_stops_reading(
    geojson_dir, load_geojson
):
    covering = str(geojson_dir / "polygon-20x20.geojson")
    later = str(geojson_dir / "polygon-2x2.geojson")
    loaded = []

    def loader(source, *, warn=None):
        loaded.append(source)
        return read_source(source, warn=warn)

    result = run_difference(
        load_geojson("polygon-2x2.geojson"),
        DifferenceOptions(subtrahend_sources=[covering, later]),
        loader=loader,
    )

    assert result.geojson == load_geojson("feature-collection-empty.geojson")
    assert loaded == [covering]
    assert result.sources_read == [covering]


def test_no_sources_still_reports_minuend_problems():
    seen = []
    minuend = {"type": "LineString", "coordinates": [[0, 0], [1, 1]]}

    result = run_difference(minuend, DifferenceOptions(diagnostic_sink=seen.append))

    assert result.geojson is minuend
    assert [d.kind for d in result.diagnostics] == [DiagnosticKind.unsupported_geometry_kind]
    assert seen == result.diagnostics


def test_default_sink_logs_warnings(caplog):
    with caplog.at_level("WARNING"):
        run_difference({"type": "Point", "coordinates": [0, 0]})

    assert "Minuend includes simple GeoJSON object of type 'Point'" in caplog.text


def test_schema_warnings_from_sources_are_collected(tmp_path, load_geojson):
    source = _write(
        tmp_path / "no-properties.geojson",
        {"type": "Feature", "geometry": load_geojson("polygon-2x2.geojson")},
    )

    result = run_difference(
        load_geojson("polygon-20x20.geojson"),
        DifferenceOptions(subtrahend_sources=[source], diagnostic_sink=lambda d: None),
    )

    assert shape(result.geojson).area == pytest.approx(396.0)
    kinds = {d.kind for d in result.diagnostics}
    assert kinds == {DiagnosticKind.schema_warning}
    assert all(source in d.message for d in result.diagnostics)


def test_bbox_prefilter_skips_io_without_changing_result(tmp_path, load_geojson):
    near = _write(tmp_path / "near-[8,8,12,12].geojson", load_geojson("polygon-2x2.geojson"))
    far = _write(
        tmp_path / "far-[100,50,101,51].geojson",
        {
            "type": "Polygon",
            "coordinates": [[[100, 50], [101, 50], [101, 51], [100, 51], [100, 50]]],
        },
    )
    undeclared = _write(
        tmp_path / "undeclared.geojson",
        {
            "type": "Polygon",
            "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 1], [0, 0]]],
        },
    )
    sources = [near, far, undeclared]
    minuend = load_geojson("polygon-20x20.geojson")

    plain = run_difference(minuend, DifferenceOptions(subtrahend_sources=sources))
    filtered = run_difference(
        minuend,
        DifferenceOptions(subtrahend_sources=sources, respect_bbox_filenames=True),
    )

    assert plain.sources_read == sources
    assert filtered.sources_read == [near, undeclared]
    assert shape(filtered.geojson).equals(shape(plain.geojson))
    assert shape(filtered.geojson).area == pytest.approx(395.0)


def test_prefilter_removing_every_source_still_runs_once(tmp_path, load_geojson):
    far = _write(tmp_path / "far-[100,50,101,51].geojson", load_geojson("polygon-2x2.geojson"))
    minuend = load_geojson("polygon-20x20.geojson")

    result = run_difference(
        minuend, DifferenceOptions(subtrahend_sources=[far], respect_bbox_filenames=True)
    )

    assert result.geojson is minuend
    assert result.sources_read == []


def test_missing_source_is_fatal(tmp_path, load_geojson):
    with pytest.raises(SourceUnreadableError) as e:
        run_difference(
            load_geojson("polygon-20x20.geojson"),
            DifferenceOptions(subtrahend_sources=[str(tmp_path / "missing.geojson")]),
        )
    assert "missing.geojson" in str(e.value)


def test_malformed_source_is_fatal_and_names_the_source(tmp_path, load_geojson):
    bad = tmp_path / "bad.geojson"
    bad.write_text("{not json", encoding="utf-8")

    with pytest.raises(MalformedJsonError) as e:
        run_difference(
            load_geojson("polygon-20x20.geojson"),
            DifferenceOptions(subtrahend_sources=[str(bad)]),
        )
    assert e.value.source == str(bad)
    assert str(e.value).startswith(f"Unable to parse JSON from {bad}")


def test_null_minuend_passes_through_instead_of_becoming_empty_collection(geojson_dir):
    options = DifferenceOptions(
        subtrahend_sources=[
            str(geojson_dir / "polygon-2x2.geojson"),
            str(geojson_dir / "polygon-20x20.geojson"),
        ],
        diagnostic_sink=lambda d: None,
    )

    result = run_difference(None, options)

    assert result.geojson is None
    assert result.sources_read == options.subtrahend_sources
    assert {d.kind for d in result.diagnostics} == {DiagnosticKind.unrecognized_type}


def test_null_minuend_without_sources_passes_through():
    result = run_difference(None, DifferenceOptions(diagnostic_sink=lambda d: None))

    assert result.geojson is None
    assert [d.kind for d in result.diagnostics] == [DiagnosticKind.unrecognized_type]
