"""Axis-aligned orientations of a box, with a support/stability heuristic per orientation."""

from __future__ import annotations

import math
from typing import Optional

from carton_loader.models import Orientation

DEFAULT_HEIGHT_FACTOR = 0.5


def orientation_stability(length: float, width: float, height: float, height_factor: float = DEFAULT_HEIGHT_FACTOR) -> float:
    """
    Score how well a box stands on a (length x width) base.

    score = 1/(1 + heightRatio*k) * (0.7 + squareness*0.3)
    heightRatio = height / sqrt(base area), squareness = 1/(1 + |aspect - 1|)
    """
    base_area = length * width
    if base_area <= 0:
        return 0.0

    aspect_ratio = max(length, width) / min(length, width)
    height_ratio = height / math.sqrt(base_area)
    squareness = 1 / (1 + abs(aspect_ratio - 1))

    return (1 / (1 + height_ratio * height_factor)) * (0.7 + squareness * 0.3)


def generate_orientations(
    length: float,
    width: float,
    height: float,
    allow_side_laying: bool = True,
    height_factor: float = DEFAULT_HEIGHT_FACTOR,
) -> list[Orientation]:
    """
    Upright orientations (L/W swapped, H fixed) always come first with a score of 1.0.
    The four side-laid ones follow only when allowed. Container bounds are the caller's concern.
    """
    if length <= 0 and width <= 0 and height <= 0:
        return []

    orientations = [
        Orientation(length=length, width=width, height=height, label="upright", stability_score=1.0),
        Orientation(length=width, width=length, height=height, label="upright-rotated", stability_score=1.0),
    ]

    if allow_side_laying:
        side_laid = [
            (width, height, length, "laid-side-l"),
            (length, height, width, "laid-side-w"),
            (height, length, width, "laid-h-l"),
            (height, width, length, "laid-h-w"),
        ]
        for l, w, h, label in side_laid:
            orientations.append(
                Orientation(
                    length=l,
                    width=w,
                    height=h,
                    label=label,
                    stability_score=orientation_stability(l, w, h, height_factor),
                )
            )

    return orientations


def raw_orientations(
    length: float,
    width: float,
    height: float,
    allow_side_laying: bool = True,
) -> list[tuple[float, float, float, str]]:
    """
    The up-to-six permutations the packer searches, as (l, w, h, code).

    code names the source edge on each axis: LWH, LHW, WLH, WHL, HLW, HWL.
    Duplicate dimension triples (cubes, square bases) keep their first code only.
    """
    candidates = [
        (length, width, height, "LWH"),
        (length, height, width, "LHW"),
        (width, length, height, "WLH"),
        (width, height, length, "WHL"),
        (height, length, width, "HLW"),
        (height, width, length, "HWL"),
    ]
    if not allow_side_laying:
        candidates = [c for c in candidates if c[3] in ("LWH", "WLH")]

    seen: set[tuple[float, float, float]] = set()
    out: list[tuple[float, float, float, str]] = []
    for l, w, h, code in candidates:
        key = (l, w, h)
        if key not in seen:
            seen.add(key)
            out.append((l, w, h, code))
    return out


def fits(dims: tuple[float, float, float], length: float, width: float, height: float) -> bool:
    l, w, h = dims
    return 0 < l <= length and 0 < w <= width and 0 < h <= height


def select_best_orientation(
    orientations: list[Orientation],
    length: float,
    width: float,
    height: float,
) -> Optional[Orientation]:
    """
    Preferred orientation for a container: most whole-grid units, weighted by the
    orientation's stability score and by how much of the height the stack fills.

    score = units * stability * (0.8 + height_efficiency * 0.2); the first
    orientation wins a tie. None when no orientation fits.
    """
    best: Optional[Orientation] = None
    best_score = -math.inf

    for o in orientations:
        if not fits(o.dims, length, width, height):
            continue

        fit_l = math.floor(length / o.length)
        fit_w = math.floor(width / o.width)
        fit_h = math.floor(height / o.height)

        height_efficiency = (fit_h * o.height) / height
        score = fit_l * fit_w * fit_h * (o.stability_score or 1.0) * (0.8 + height_efficiency * 0.2)

        if score > best_score:
            best_score = score
            best = o

    return best
