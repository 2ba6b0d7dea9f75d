"""End-to-end tests for the processing pipeline."""

from __future__ import annotations

import threading
from datetime import datetime, timezone

import pytest

from activity_processing import (
    ActivityProcessingError,
    ErrorKind,
    ProcessingOptions,
    preview_activity,
    process_activity_file,
    process_points,
)
from activity_processing.config import PREVIEW_MAX_POINTS
from activity_processing.errors import (
    DecodeError,
    NoValidPointsError,
    ParseTimeoutError,
    UnsupportedFormatError,
)
from activity_processing.parsers import fit as fit_module
from activity_processing.parsers import normalize_extension, supported_extensions
from activity_processing.pipeline import UNTITLED_ACTIVITY


def test_gpx_file_end_to_end(gpx_track: str) -> None:
    result = process_activity_file(gpx_track.encode("utf-8"), "gpx")

    assert result.name == "Morning Ride"
    assert result.geometry.type == "LineString"
    assert len(result.points) == 3
    assert result.stats.distance_meters == pytest.approx(2224, rel=1e-2)
    assert result.stats.duration_seconds == pytest.approx(20.0)
    assert result.stats.elevation_gain_meters == pytest.approx(5.0)
    assert result.stats.elevation_loss_meters == pytest.approx(3.0)
    # Every point carries elevation, so coordinates are [lon, lat, ele].
    assert all(len(coord) == 3 for coord in result.geometry.coordinates)


def test_output_dictionary_shape(gpx_track: str) -> None:
    payload = process_activity_file(gpx_track, ".GPX").to_dict()

    assert set(payload) == {"name", "geometry", "stats", "points"}
    assert payload["geometry"]["type"] == "LineString"
    stats = payload["stats"]
    for key in (
        "distanceMeters",
        "durationSeconds",
        "elevationGainMeters",
        "elevationLossMeters",
        "maxElevation",
        "minElevation",
        "avgSpeedMps",
        "maxSpeedMps",
        "boundingBox",
        "center",
        "startTimeMs",
        "endTimeMs",
    ):
        assert key in stats
    assert set(payload["points"][0]) == {"latitude", "longitude", "elevation", "timestampMs"}


def test_single_waypoint_becomes_multipoint() -> None:
    markup = '<gpx><wpt lat="46.5" lon="7.9"><ele>2050.5</ele></wpt></gpx>'
    result = process_activity_file(markup, "gpx")

    assert result.geometry.type == "MultiPoint"
    assert result.geometry.coordinates == [[7.9, 46.5, 2050.5]]
    assert result.stats.distance_meters == 0.0
    assert result.stats.min_elevation == result.stats.max_elevation == 2050.5


def test_partial_elevation_drops_third_coordinate(point_factory) -> None:
    points = [point_factory(0.0, 0.0, ele=5.0), point_factory(0.0, 0.01)]
    result = process_points(points, "Mixed")
    assert result.geometry.coordinates == [[0.0, 0.0], [0.01, 0.0]]


def test_invalid_points_are_filtered_before_stats(point_factory) -> None:
    points = [
        point_factory(float("nan"), 0.0),
        point_factory(0.0, 0.0),
        point_factory(91.0, 0.0),
        point_factory(0.0, 0.01),
    ]
    result = process_points(points)
    assert result.name == UNTITLED_ACTIVITY
    assert len(result.points) == 2
    assert result.stats.distance_meters == pytest.approx(1111.95, rel=1e-3)


def test_all_invalid_points_raise(point_factory) -> None:
    with pytest.raises(NoValidPointsError) as excinfo:
        process_points([point_factory(100.0, 0.0), point_factory(0.0, 181.0)])
    assert excinfo.value.kind is ErrorKind.NO_VALID_POINTS


def test_simplification_only_affects_geometry(straight_line_points) -> None:
    result = process_points(straight_line_points, "Line")
    assert len(result.geometry.coordinates) == 2
    assert len(result.points) == len(straight_line_points)

    unsimplified = process_points(
        straight_line_points, "Line", ProcessingOptions(simplify=False)
    )
    assert len(unsimplified.geometry.coordinates) == len(straight_line_points)
    assert unsimplified.stats == result.stats


@pytest.mark.parametrize("extension", ["txt", "zip", "", "gpx.bak"])
def test_unsupported_extension_is_rejected_before_parsing(extension: str, monkeypatch) -> None:
    def explode(*_args, **_kwargs):  # pragma: no cover - must not be reached
        raise AssertionError("parser invoked")

    monkeypatch.setattr(fit_module, "read_fit_messages", explode)
    with pytest.raises(UnsupportedFormatError) as excinfo:
        process_activity_file(b"<gpx/>", extension)
    assert excinfo.value.kind is ErrorKind.UNSUPPORTED_FORMAT
    assert "Unsupported file format" in str(excinfo.value)


def test_extension_normalization() -> None:
    assert normalize_extension(".GPX") == "gpx"
    assert normalize_extension("ride.Fit") == "fit"
    assert normalize_extension(" kmz ") == "kmz"
    assert set(supported_extensions()) == {"gpx", "tcx", "kml", "fit", "kmz"}


def test_fit_file_through_pipeline(monkeypatch) -> None:
    start = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)

    def fake_reader(_data: bytes, _cancel: threading.Event):
        return {
            "record": [
                {"position_lat": 0.0, "position_long": 0.0, "timestamp": start},
                {
                    "position_lat": 0.0,
                    "position_long": 0.01,
                    "timestamp": start.replace(second=10),
                },
            ],
            "session": [{"sport": "cycling"}],
        }

    monkeypatch.setattr(fit_module, "read_fit_messages", fake_reader)
    result = process_activity_file(b"\x0e\x10binary", "fit")
    assert result.name == "cycling Activity"
    assert result.stats.avg_speed_mps == pytest.approx(111.2, rel=1e-2)


def test_fit_timeout_surfaces_as_typed_error(monkeypatch) -> None:
    def blocking(_data: bytes, cancel: threading.Event):
        cancel.wait(5.0)
        return {}

    monkeypatch.setattr(fit_module, "read_fit_messages", blocking)
    with pytest.raises(ParseTimeoutError):
        process_activity_file(b"fit", "fit", fit_timeout=0.05)


def test_text_payload_for_binary_format_is_decode_error() -> None:
    with pytest.raises(DecodeError):
        process_activity_file("not bytes", "kmz")


def test_preview_uses_simplified_points(point_factory) -> None:
    points = [point_factory(0.0005 * (i % 2), 0.0001 * i) for i in range(2000)]
    gpx = "<gpx><trk><trkseg>" + "".join(
        f'<trkpt lat="{p.latitude}" lon="{p.longitude}"/>' for p in points
    ) + "</trkseg></trk></gpx>"

    preview = preview_activity(gpx, "gpx")
    full = process_activity_file(gpx, "gpx")

    assert len(preview.geometry.coordinates) <= PREVIEW_MAX_POINTS
    assert len(preview.points) == len(preview.geometry.coordinates)
    assert len(full.points) == 2000
    assert preview.stats == full.stats


def test_every_failure_is_an_activity_processing_error() -> None:
    with pytest.raises(ActivityProcessingError):
        process_activity_file("<gpx>", "gpx")


@pytest.mark.parametrize(
    "payload, extension",
    [
        (b'<?xml version="1.0" encoding="bogus-enc"?><gpx/>', "gpx"),
        ("<kml><Document/></kml>\udcff", "kml"),
        (b"PK\x05\x06" + b"\x00" * 18, "kmz"),
    ],
)
def test_malformed_payloads_fail_with_typed_errors(payload, extension: str) -> None:
    with pytest.raises(ActivityProcessingError):
        process_activity_file(payload, extension)
