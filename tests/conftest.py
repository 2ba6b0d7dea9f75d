"""Global pytest fixtures & helpers.

Adds project root to path and provides reusable track fixtures and sample
documents so parser, statistics and pipeline tests share one vocabulary.
"""
from __future__ import annotations

import io
import os
import struct
import sys
import zipfile
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from activity_processing.models import TrackPoint


# --- Factory helpers -------------------------------------------------
def make_point(
    lat: float,
    lon: float,
    ele: Optional[float] = None,
    t_s: Optional[float] = None,
) -> TrackPoint:
    """Build a point; ``t_s`` is seconds after a fixed epoch base."""

    timestamp = None if t_s is None else 1_700_000_000_000 + int(t_s * 1000)
    return TrackPoint(latitude=lat, longitude=lon, elevation=ele, timestamp_ms=timestamp)


def make_kmz(members: Dict[str, str | bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for name, content in members.items():
            archive.writestr(name, content)
    return buffer.getvalue()


# --- FIT encoding ----------------------------------------------------
# Seconds between the Unix epoch and the FIT epoch (1989-12-31T00:00:00Z).
FIT_EPOCH_OFFSET = 631065600

FIT_CRC_TABLE = (
    0x0000, 0xCC01, 0xD801, 0x1400, 0xF001, 0x3C00, 0x2800, 0xE401,
    0xA001, 0x6C00, 0x7800, 0xB401, 0x5000, 0x9C01, 0x8801, 0x4400,
)

# (latitude, longitude, altitude m, unix seconds) for each record message.
FIT_TRACK: Tuple[Tuple[float, float, float, int], ...] = (
    (51.5000, -0.1200, 100.0, 1_714_550_400),
    (51.5010, -0.1200, 102.0, 1_714_550_410),
    (51.5020, -0.1190, 101.0, 1_714_550_420),
)


def fit_crc(data: bytes, crc: int = 0) -> int:
    for byte in data:
        for nibble in (byte & 0xF, (byte >> 4) & 0xF):
            tmp = FIT_CRC_TABLE[crc & 0xF]
            crc = (crc >> 4) & 0x0FFF
            crc = crc ^ tmp ^ FIT_CRC_TABLE[nibble]
    return crc


def _fit_definition(local: int, global_num: int, fields: Sequence[Tuple[int, int, int]]) -> bytes:
    body = struct.pack("<BBHB", 0, 0, global_num, len(fields))
    for number, size, base_type in fields:
        body += struct.pack("<BBB", number, size, base_type)
    return bytes([0x40 | local]) + body


def _semicircles(degrees: float) -> int:
    return int(round(degrees * 2**31 / 180.0))


def make_fit(track: Sequence[Tuple[float, float, float, int]] = FIT_TRACK, sport: int = 1) -> bytes:
    """Encode a minimal activity: file_id, one record per point, one session.

    ``sport`` uses the FIT profile enum (1 = running, 2 = cycling).
    """

    records = bytearray()
    # file_id: type (enum) = 4 (activity).
    records += _fit_definition(0, 0, [(0, 1, 0x00)])
    records += bytes([0]) + struct.pack("<B", 4)
    # record: timestamp, position_lat, position_long, altitude (scale 5, offset 500).
    records += _fit_definition(1, 20, [(253, 4, 0x86), (0, 4, 0x85), (1, 4, 0x85), (2, 2, 0x84)])
    for lat, lon, altitude, unix_seconds in track:
        records += bytes([1]) + struct.pack(
            "<IiiH",
            unix_seconds - FIT_EPOCH_OFFSET,
            _semicircles(lat),
            _semicircles(lon),
            int(round((altitude + 500.0) * 5)),
        )
    # session: sport (enum).
    records += _fit_definition(2, 18, [(5, 1, 0x00)])
    records += bytes([2]) + struct.pack("<B", sport)

    header = struct.pack("<BBHI4s", 14, 0x20, 2132, len(records), b".FIT")
    header += struct.pack("<H", fit_crc(header))
    body = header + bytes(records)
    return body + struct.pack("<H", fit_crc(body))


GPX_TRACK = """<?xml version="1.0" encoding="UTF-8"?>
<gpx version="1.1" creator="test" xmlns="http://www.topografix.com/GPX/1/1">
  <metadata><name>Morning Ride</name></metadata>
  <trk>
    <name>Track Name</name>
    <trkseg>
      <trkpt lat="0.0" lon="0.0"><ele>10</ele><time>2024-05-01T08:00:00Z</time></trkpt>
      <trkpt lat="0.0" lon="0.01"><ele>15</ele><time>2024-05-01T08:00:10Z</time></trkpt>
      <trkpt lat="0.0" lon="0.02"><ele>12</ele><time>2024-05-01T08:00:20Z</time></trkpt>
    </trkseg>
  </trk>
  <wpt lat="1.0" lon="1.0"><name>Ignored</name></wpt>
</gpx>
"""

TCX_ACTIVITY = """<?xml version="1.0" encoding="UTF-8"?>
<TrainingCenterDatabase xmlns="http://www.garmin.com/xmlschemas/TrainingCenterDatabase/v2">
  <Activities>
    <Activity Sport="Running">
      <Id>2024-05-01T08:00:00Z</Id>
      <Lap StartTime="2024-05-01T08:00:00Z">
        <Track>
          <Trackpoint>
            <Time>2024-05-01T08:00:00Z</Time>
            <Position><LatitudeDegrees>51.5000</LatitudeDegrees><LongitudeDegrees>-0.1200</LongitudeDegrees></Position>
            <AltitudeMeters>20.0</AltitudeMeters>
          </Trackpoint>
          <Trackpoint>
            <Time>2024-05-01T08:00:05Z</Time>
            <HeartRateBpm><Value>120</Value></HeartRateBpm>
          </Trackpoint>
          <Trackpoint>
            <Time>2024-05-01T08:00:10Z</Time>
            <Position><LatitudeDegrees>51.5005</LatitudeDegrees><LongitudeDegrees>-0.1200</LongitudeDegrees></Position>
            <AltitudeMeters>21.5</AltitudeMeters>
          </Trackpoint>
        </Track>
      </Lap>
    </Activity>
  </Activities>
</TrainingCenterDatabase>
"""

KML_LINE = """<?xml version="1.0" encoding="UTF-8"?>
<kml xmlns="http://www.opengis.net/kml/2.2">
  <Document>
    <name>Valley Walk</name>
    <Placemark>
      <name>Walk line</name>
      <LineString>
        <coordinates>
          8.0,47.0,400 8.001,47.001,410
          8.002,47.002,405
        </coordinates>
      </LineString>
    </Placemark>
  </Document>
</kml>
"""


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def straight_line_points() -> List[TrackPoint]:
    """Ten evenly spaced points along the equator, no elevation or time."""

    return [make_point(0.0, i * 0.001) for i in range(10)]


@pytest.fixture
def zigzag_points() -> List[TrackPoint]:
    """A zigzag whose every vertex sits well outside a 0.0001 tolerance."""

    return [make_point(0.001 * (i % 2), 0.001 * i) for i in range(12)]


@pytest.fixture
def timed_points() -> List[TrackPoint]:
    return [
        make_point(0.0, 0.0, t_s=0),
        make_point(0.0, 0.01, t_s=10),
        make_point(0.0, 0.02, t_s=20),
    ]


@pytest.fixture
def point_factory():
    return make_point


@pytest.fixture
def kmz_factory():
    return make_kmz


@pytest.fixture
def fit_activity() -> bytes:
    """A real FIT payload encoded from ``FIT_TRACK`` with a running session."""

    return make_fit()


@pytest.fixture
def fit_track() -> Tuple[Tuple[float, float, float, int], ...]:
    return FIT_TRACK


@pytest.fixture
def fit_factory():
    return make_fit


@pytest.fixture
def gpx_track() -> str:
    return GPX_TRACK


@pytest.fixture
def tcx_activity() -> str:
    return TCX_ACTIVITY


@pytest.fixture
def kml_line() -> str:
    return KML_LINE
