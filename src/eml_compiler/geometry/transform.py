"""GeoJSON helpers that turn stored location features into EML coverage geometry.

Features are plain GeoJSON mappings (``{"type": "Feature", "geometry": ...,
"properties": ...}``). Coordinates are longitude/latitude degrees throughout.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Iterable, Iterator, Mapping, Sequence

from pyproj import CRS, Transformer
import shapely
from shapely.geometry import Point, mapping, shape

from eml_compiler.core.logging import get_logger

LOGGER = get_logger(__name__)

WGS84 = "EPSG:4326"
# 16 segments per quarter circle gives a 64-sided ring.
CIRCLE_QUAD_SEGMENTS = 16


def synthesize_polygon(feature: Mapping[str, Any]) -> dict[str, Any]:
    """Replace a point-with-radius feature by a circular polygon.

    ``properties.radius`` is in metres. Any other feature, including a point
    without a radius, is returned unchanged.
    """
    geometry = feature.get("geometry") or {}
    properties = feature.get("properties") or {}
    radius = properties.get("radius")
    if geometry.get("type") != "Point" or not radius:
        return dict(feature)

    lon, lat = geometry["coordinates"][:2]
    circle = _geodesic_circle(float(lon), float(lat), float(radius))
    LOGGER.debug("geometry.circle_synthesized", lon=lon, lat=lat, radius=radius)
    return {
        "type": "Feature",
        "properties": dict(properties),
        "geometry": _as_lists(mapping(circle)),
    }


def bounding_box(features: Iterable[Mapping[str, Any]]) -> list[float]:
    """Return ``[west, south, east, north]`` enclosing every feature."""
    west = south = float("inf")
    east = north = float("-inf")
    count = 0
    for feature in features:
        minx, miny, maxx, maxy = shape(feature["geometry"]).bounds
        west = min(west, minx)
        south = min(south, miny)
        east = max(east, maxx)
        north = max(north, maxy)
        count += 1
    if not count:
        raise ValueError("bounding_box requires at least one feature")
    return [west, south, east, north]


def extract_rings(feature: Mapping[str, Any]) -> list[tuple[float, float]]:
    """Flatten every coordinate of a feature into ``(lon, lat)`` pairs.

    Order follows the GeoJSON structure, so winding order and ring closure are
    preserved.
    """
    return [(position[0], position[1]) for position in _iter_positions(feature.get("geometry") or {})]


def _iter_positions(geometry: Mapping[str, Any]) -> Iterator[Sequence[float]]:
    if geometry.get("type") == "GeometryCollection":
        for member in geometry.get("geometries") or []:
            yield from _iter_positions(member)
        return
    yield from _walk_coordinates(geometry.get("coordinates"))


def _walk_coordinates(coordinates: Any) -> Iterator[Sequence[float]]:
    if not coordinates:
        return
    if isinstance(coordinates[0], (int, float)):
        yield coordinates
        return
    for item in coordinates:
        yield from _walk_coordinates(item)


def _geodesic_circle(lon: float, lat: float, radius: float):
    to_wgs84 = _aeqd_to_wgs84(lon, lat)

    def to_degrees(x, y):
        lons, lats = to_wgs84.transform(x, y)
        # Vertices stay within 180 degrees of the centre longitude.
        return [_unwrap(value, lon) for value in lons], list(lats)

    circle = Point(0.0, 0.0).buffer(radius, quad_segs=CIRCLE_QUAD_SEGMENTS)
    return shapely.transform(circle, to_degrees, interleaved=False)


def _unwrap(value: float, centre: float) -> float:
    return float(value) - 360.0 * round((float(value) - centre) / 360.0)


@lru_cache(maxsize=256)
def _aeqd_to_wgs84(lon: float, lat: float) -> Transformer:
    # Azimuthal equidistant projection centred on the point keeps distances in metres.
    local = CRS.from_proj4(f"+proj=aeqd +lat_0={lat} +lon_0={lon} +x_0=0 +y_0=0 +datum=WGS84 +units=m")
    return Transformer.from_crs(local, WGS84, always_xy=True)


def _as_lists(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: _as_lists(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_as_lists(item) for item in value]
    return value
