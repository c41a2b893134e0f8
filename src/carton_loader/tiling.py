"""Single-box tiling: uniform grids and alternating-row (interlocked) layers for one box type."""

from __future__ import annotations

import functools
import math
from typing import Optional

from carton_loader.models import TileResult, TileRow
from carton_loader.orientations import generate_orientations

# Base stability per orientation label; upright is trusted most.
ORIENTATION_BASE_STABILITY: dict[str, float] = {
    "upright": 1.0,
    "upright-rotated": 1.0,
    "laid-side-l": 0.9,
    "laid-side-w": 0.9,
    "laid-h-l": 0.85,
    "laid-h-w": 0.85,
}

INTERLOCK_BONUS = 1.15


def _orientations(length: float, width: float, height: float, allow_side_laying: bool) -> list[tuple[float, float, float, str]]:
    return [(o.length, o.width, o.height, o.label) for o in generate_orientations(length, width, height, allow_side_laying)]


def uniform_pattern(
    box: tuple[float, float, float, str],
    space_l: float,
    space_w: float,
    space_h: float,
    swapped: bool = False,
) -> Optional[TileResult]:
    """rows x columns x layers of one orientation; None when not even one fits."""
    l, w, h, label = box
    count_l = math.floor(space_l / l)
    count_w = math.floor(space_w / w)
    layers = math.floor(space_h / h)
    if count_l <= 0 or count_w <= 0 or layers <= 0:
        return None

    per_layer = count_l * count_w
    aspect_ratio = max(l, w) / min(l, w)
    height_ratio = h / max(l, w)
    stability = (
        ORIENTATION_BASE_STABILITY[label]
        * (1 / (1 + aspect_ratio * 0.1))
        * (1 / (1 + height_ratio * 0.2))
    )

    return TileResult(
        pattern=label + ("-container-swapped" if swapped else ""),
        count_l=count_l,
        count_w=count_w,
        layers=layers,
        per_layer=per_layer,
        total=per_layer * layers,
        box_length=l,
        box_width=w,
        box_height=h,
        used_length=count_l * l,
        used_width=count_w * w,
        used_height=layers * h,
        container_swapped=swapped,
        stability_score=stability,
        volume_efficiency=(count_l * l * count_w * w * layers * h) / (space_l * space_w * space_h),
    )


def interlocked_pattern(
    box: tuple[float, float, float, str],
    space_l: float,
    space_w: float,
    space_h: float,
    swapped: bool = False,
) -> Optional[TileResult]:
    """
    Brick-bond layer: rows stacked along the width axis, every other row turned 90°.
    Square footprints gain nothing from turning and are skipped.
    """
    l, w, h, label = box
    if l == w:
        return None
    layers = math.floor(space_h / h)
    if layers <= 0:
        return None

    rows: list[TileRow] = []
    remaining_w = space_w
    per_layer = 0
    used_l = 0.0
    used_w = 0.0
    row_index = 0

    while remaining_w >= min(l, w):
        rotated = row_index % 2 == 1
        row_l = w if rotated else l
        row_w = l if rotated else w

        if remaining_w < row_w:
            break
        cols = math.floor(space_l / row_l)
        if cols <= 0:
            break

        rows.append(TileRow(rotated=rotated, count_l=cols, box_length=row_l, box_width=row_w))
        per_layer += cols
        used_l = max(used_l, cols * row_l)
        used_w += row_w
        remaining_w -= row_w
        row_index += 1

    if not rows:
        return None

    return TileResult(
        pattern="mixed-" + label + ("-container-swapped" if swapped else ""),
        count_l=None,
        count_w=None,
        layers=layers,
        per_layer=per_layer,
        total=per_layer * layers,
        box_length=l,
        box_width=w,
        box_height=h,
        used_length=used_l,
        used_width=used_w,
        used_height=layers * h,
        pattern_rows=rows,
        container_swapped=swapped,
        stability_score=ORIENTATION_BASE_STABILITY[label] * INTERLOCK_BONUS,
        volume_efficiency=(per_layer * l * w * h * layers) / (space_l * space_w * space_h),
    )


def _compare(a: TileResult, b: TileResult) -> int:
    """More boxes first (a difference of one box is a tie), then stability, then volume efficiency."""
    total_diff = b.total - a.total
    if abs(total_diff) > 1:
        return total_diff

    stability_diff = b.stability_score - a.stability_score
    if abs(stability_diff) > 0.05:
        return -1 if stability_diff < 0 else 1

    efficiency_diff = b.volume_efficiency - a.volume_efficiency
    if efficiency_diff == 0:
        return 0
    return -1 if efficiency_diff < 0 else 1


def best_tile(
    box_l: float,
    box_w: float,
    box_h: float,
    space_l: float,
    space_w: float,
    space_h: float,
    allow_side_laying: bool = True,
    desired_count: Optional[int] = None,
) -> TileResult:
    """
    Best arrangement of a single box type in one container.

    desired_count, when positive, caps effective_total and flags desired_too_high
    when it exceeds what fits.
    """
    if box_l <= 0 or box_w <= 0 or box_h <= 0 or space_l <= 0 or space_w <= 0 or space_h <= 0:
        return TileResult()

    candidates: list[TileResult] = []
    for variant_l, variant_w, swapped in ((space_l, space_w, False), (space_w, space_l, True)):
        for box in _orientations(box_l, box_w, box_h, allow_side_laying):
            uniform = uniform_pattern(box, variant_l, variant_w, space_h, swapped)
            if uniform is not None:
                candidates.append(uniform)
            mixed = interlocked_pattern(box, variant_l, variant_w, space_h, swapped)
            if mixed is not None:
                candidates.append(mixed)

    if not candidates:
        return TileResult()

    candidates.sort(key=functools.cmp_to_key(_compare))
    best = candidates[0]

    effective = best.total
    too_high = False
    if desired_count is not None and desired_count > 0:
        if desired_count > best.total:
            too_high = True
        else:
            effective = desired_count

    return best.model_copy(update={"effective_total": effective, "desired_too_high": too_high})
