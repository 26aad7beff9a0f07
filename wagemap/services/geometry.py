"""
services/geometry.py
──────────────────────────────────────────────────────────────────────────────
Bounding-box math for zoom-to-region requests.

All functions are pure: no I/O, no state.  Geometry is plain GeoJSON, so a
Point, a Polygon ring list and a MultiPolygon are handled by the same walk
over arbitrarily nested coordinate lists.
"""
from __future__ import annotations

import math
from collections.abc import Iterable, Iterator
from typing import Any, Optional

from wagemap.domain.models import BoundingBox, LngLat


def _iter_positions(coords: Any) -> Iterator[tuple[float, float]]:
    """Yield every (lng, lat) position found in a nested coordinate list."""
    if not isinstance(coords, (list, tuple)) or not coords:
        return
    if isinstance(coords[0], (int, float)):
        if len(coords) >= 2:
            yield float(coords[0]), float(coords[1])
        return
    for child in coords:
        yield from _iter_positions(child)


def compute_bounds(geometry: Optional[dict[str, Any]]) -> Optional[BoundingBox]:
    """Return the bounding box of a GeoJSON geometry.

    Returns:
        BoundingBox, or None for a missing geometry, missing coordinates or
        coordinates that contain no finite position.
    """
    if not geometry or not geometry.get("coordinates"):
        return None

    min_lng = min_lat = math.inf
    max_lng = max_lat = -math.inf
    for lng, lat in _iter_positions(geometry["coordinates"]):
        min_lng = min(min_lng, lng)
        min_lat = min(min_lat, lat)
        max_lng = max(max_lng, lng)
        max_lat = max(max_lat, lat)

    if not math.isfinite(min_lng) or not math.isfinite(min_lat):
        return None
    return BoundingBox(min_lng=min_lng, min_lat=min_lat, max_lng=max_lng, max_lat=max_lat)


def merge_bounds(
    a: Optional[BoundingBox],
    b: Optional[BoundingBox],
) -> Optional[BoundingBox]:
    """Union of two boxes; a None operand yields the other unchanged."""
    if a is None:
        return b
    if b is None:
        return a
    return BoundingBox(
        min_lng=min(a.min_lng, b.min_lng),
        min_lat=min(a.min_lat, b.min_lat),
        max_lng=max(a.max_lng, b.max_lng),
        max_lat=max(a.max_lat, b.max_lat),
    )


def union_bounds(geometries: Iterable[Optional[dict[str, Any]]]) -> Optional[BoundingBox]:
    """Bounding box covering every geometry; None if none has coordinates."""
    bounds: Optional[BoundingBox] = None
    for geometry in geometries:
        bounds = merge_bounds(bounds, compute_bounds(geometry))
    return bounds


def centroid_approx(bounds: Optional[BoundingBox]) -> Optional[LngLat]:
    """Midpoint of a box.  Only a fallback anchor for programmatic popups."""
    if bounds is None:
        return None
    return LngLat(
        lng=(bounds.min_lng + bounds.max_lng) / 2,
        lat=(bounds.min_lat + bounds.max_lat) / 2,
    )
