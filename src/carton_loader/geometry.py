"""Geometry utilities for load planning."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from carton_loader.models import Container, Placement

Bounds = tuple[float, float, float, float, float, float]


def boxes_overlap(a: Bounds, b: Bounds) -> bool:
    """
    Axis-aligned bounding box (AABB) overlap test.

    a, b are bounds: (x1, y1, z1, x2, y2, z2)

    Overlap exists only if they overlap on ALL 3 axes with positive volume.
    Touching faces/edges (ax2 == bx1) is NOT considered overlap.
    """
    ax1, ay1, az1, ax2, ay2, az2 = a
    bx1, by1, bz1, bx2, by2, bz2 = b

    return (ax1 < bx2 and ax2 > bx1) and (ay1 < by2 and ay2 > by1) and (az1 < bz2 and az2 > bz1)


def rect_overlap_area(
    a_l: float, a_w: float, a_len: float, a_wid: float,
    b_l: float, b_w: float, b_len: float, b_wid: float,
) -> float:
    """Intersection area of two footprint rectangles given as (origin_l, origin_w, length, width)."""
    overlap_l = min(a_l + a_len, b_l + b_len) - max(a_l, b_l)
    overlap_w = min(a_w + a_wid, b_w + b_wid) - max(a_w, b_w)
    if overlap_l > 0 and overlap_w > 0:
        return overlap_l * overlap_w
    return 0.0


def within_container(placement: "Placement", container: "Container") -> bool:
    x1, y1, z1, x2, y2, z2 = placement.bounds()
    return (
        x1 >= 0 and y1 >= 0 and z1 >= 0
        and x2 <= container.length
        and y2 <= container.width
        and z2 <= container.height
    )


def distance(a: tuple[float, float, float], b: tuple[float, float, float]) -> float:
    return math.sqrt((a[0] - b[0]) ** 2 + (a[1] - b[1]) ** 2 + (a[2] - b[2]) ** 2)
