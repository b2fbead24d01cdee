# gpssplit/formats/gpx.py
"""
GPX helpers for GPSsplit

This module is intentionally format-focused:
- GPX namespace handling
- safely reading and writing ElementTree
- turning <trkpt> nodes into GeoPoints and back

Key design principle:
  Keep orchestration (paths, reports, user interaction) in the CLI,
  separate from GPX parsing and serialization (here). The analysis
  core never sees XML.
"""

from __future__ import annotations

import datetime as _dt
from pathlib import Path
from typing import Optional
from xml.etree import ElementTree as ET

from gpssplit.analyze.points import GeoPoint
from gpssplit.analyze.track import Track
from gpssplit.errors import InvalidGpxError
from gpssplit.util.logging import log

# GPX 1.1 default namespace
GPX_NS = {"gpx": "http://www.topografix.com/GPX/1/1"}

CREATOR = "GPSsplit"

ET.register_namespace("", GPX_NS["gpx"])


def qn(tag: str) -> str:
    """
    Build an ElementTree-qualified name for a GPX 1.1 tag.

    ElementTree represents namespaced tags internally as
      "{namespace-uri}tag"
    """
    return f"{{{GPX_NS['gpx']}}}{tag}"


def _doc_ns(root: ET.Element) -> dict[str, str]:
    """
    Namespace map for the document actually being read.

    GPX 1.0 files and hand-written files without xmlns are common enough
    that the reader follows whatever the root element declares.
    """
    if root.tag.startswith("{"):
        return {"gpx": root.tag[1:].split("}", 1)[0]}
    return {}


def _path(ns: dict[str, str], *tags: str) -> str:
    if ns:
        return "/".join(f"gpx:{t}" for t in tags)
    return "/".join(tags)


def _parse_gpx_time(text: str) -> Optional[_dt.datetime]:
    """
    Parse an ISO-8601 timestamp commonly found in GPX <time> nodes.

    Expected examples:
      - "2026-01-02T21:14:44Z"
      - "2026-01-02T21:14:44.123Z"
      - "2026-01-02T21:14:44+00:00"
    """
    if not text:
        return None
    s = text.strip()
    if not s:
        return None

    # ElementTree GPX times commonly use Z for UTC.
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    try:
        dt = _dt.datetime.fromisoformat(s)
    except ValueError:
        return None

    # Ensure tz-aware; if naive, assume UTC (conservative for GPX sources)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=_dt.timezone.utc)

    return dt.astimezone(_dt.timezone.utc)


def _format_gpx_time(dt: _dt.datetime) -> str:
    """
    Format a tz-aware datetime as GPX time (UTC with Z).
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=_dt.timezone.utc)
    dt_utc = dt.astimezone(_dt.timezone.utc)
    # Use seconds resolution for readability and stability.
    return dt_utc.replace(microsecond=0).isoformat().replace("+00:00", "Z")


def _format_number(v: float) -> str:
    return repr(float(v))


def _indent(elem: ET.Element, level: int = 0, indent: str = "  ") -> None:
    """
    In-place pretty-printer for ElementTree output. Controls .text/.tail
    explicitly so repeated writes never accumulate blank lines.
    """
    i = "\n" + level * indent
    j = "\n" + (level - 1) * indent if level > 0 else "\n"

    children = list(elem)
    if children:
        if elem.text is None or not elem.text.strip():
            elem.text = i + indent
        for child in children:
            _indent(child, level + 1, indent=indent)
        if children[-1].tail is None or not children[-1].tail.strip():
            children[-1].tail = i
    if elem.tail is None or not elem.tail.strip():
        elem.tail = j


def read_gpx(path: Path) -> ET.ElementTree:
    """
    Read a GPX file into an ElementTree.

    Raises:
      InvalidGpxError for malformed XML, OSError for I/O problems
    """
    try:
        return ET.parse(path)
    except ET.ParseError as e:
        raise InvalidGpxError(f"Failed to parse GPX: {path} ({e})") from e


def write_gpx(root: ET.Element, out_path: Path, *, pretty: bool = True) -> None:
    """
    Write a GPX XML tree to disk.

    - pretty=True applies indentation for human readability
    - writes UTF-8 with XML declaration
    """
    if pretty:
        _indent(root)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    tree = ET.ElementTree(root)
    tree.write(out_path, encoding="utf-8", xml_declaration=True)


def _float_attr(trkpt: ET.Element, name: str) -> float:
    raw = trkpt.get(name)
    if raw is None:
        raise InvalidGpxError(f"<trkpt> without {name} attribute")
    try:
        return float(raw)
    except ValueError as e:
        raise InvalidGpxError(f"<trkpt> has a non-numeric {name}: {raw!r}") from e


def extract_points(tree: ET.ElementTree) -> list[GeoPoint]:
    """
    Extract ordered points from a GPX tree.

    Every <trk>/<trkseg>/<trkpt> is visited in document order, so
    multi-track and multi-segment recordings come out as one sequence.
    Points without a parseable <time> are skipped.
    """
    root = tree.getroot()
    ns = _doc_ns(root)
    pts: list[GeoPoint] = []

    for trkpt in root.iterfind(_path(ns, "trk", "trkseg", "trkpt"), ns):
        lat = _float_attr(trkpt, "lat")
        lon = _float_attr(trkpt, "lon")

        time = _parse_gpx_time(trkpt.findtext(_path(ns, "time"), default="", namespaces=ns))
        if time is None:
            continue   # skip points without timestamps

        ele_text = trkpt.findtext(_path(ns, "ele"), default="", namespaces=ns).strip()
        try:
            ele = float(ele_text) if ele_text else None
        except ValueError as e:
            raise InvalidGpxError(f"<ele> is not a number: {ele_text!r}") from e

        pts.append(GeoPoint(latitude=lat, longitude=lon, timestamp=time, elevation=ele))

    return pts


def read_track(path: Path) -> Track:
    """Load a GPX file as a single flattened Track."""
    path = Path(path)
    points = extract_points(read_gpx(path))
    log(f"Loaded {len(points)} points from {path}")
    return Track(points)


def build_gpx(track: Track, *, name: Optional[str] = None) -> ET.Element:
    """Build a GPX 1.1 document holding the track as one <trk><trkseg>."""
    root = ET.Element(qn("gpx"), {"version": "1.1", "creator": CREATOR})

    if track.points:
        md = ET.SubElement(root, qn("metadata"))
        if name:
            ET.SubElement(md, qn("name")).text = name
        ET.SubElement(md, qn("time")).text = _format_gpx_time(track.points[0].timestamp)

    trk = ET.SubElement(root, qn("trk"))
    if name:
        ET.SubElement(trk, qn("name")).text = name
    seg = ET.SubElement(trk, qn("trkseg"))

    for p in track.points:
        trkpt = ET.SubElement(
            seg, qn("trkpt"),
            {"lat": _format_number(p.latitude), "lon": _format_number(p.longitude)},
        )
        if p.elevation is not None:
            ET.SubElement(trkpt, qn("ele")).text = _format_number(p.elevation)
        ET.SubElement(trkpt, qn("time")).text = _format_gpx_time(p.timestamp)

    return root


def write_track(
        track: Track, out_path: Path, *,
        name: Optional[str] = None,
        pretty: bool = True,
) -> None:
    """Write a Track to `out_path` as GPX 1.1."""
    out_path = Path(out_path)
    write_gpx(build_gpx(track, name=name), out_path, pretty=pretty)
    log(f"Wrote {len(track)} points to {out_path}")
