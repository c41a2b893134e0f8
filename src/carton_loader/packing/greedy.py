# src/carton_loader/packing/greedy.py

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

from carton_loader.config import DEFAULT_CONFIG, PackingConfig
from carton_loader.models import (
    Container,
    Group,
    GroupResult,
    Orientation,
    PackingResult,
    Placement,
    StabilityReport,
    WeightDistribution,
)
from carton_loader.orientations import fits, generate_orientations, raw_orientations, select_best_orientation
from carton_loader.packing.space import FreeRectangleSet, HeightMap
from carton_loader.stability import analyze_stability, analyze_weight, calculate_support

logger = logging.getLogger(__name__)

# Score weights: floor height dominates position along length, which dominates
# position along width; the volume nudge only separates near-ties.
FLOOR_WEIGHT = 100_000
LENGTH_WEIGHT = 100
VOLUME_BONUS_WEIGHT = 1_000
VOLUME_BONUS_UNIT = 1_000_000


@dataclass
class _GroupState:
    index: int
    group: Group
    orientations: list[tuple[float, float, float, str]]
    remaining: int
    placed: list[int] = field(default_factory=list)
    preferred: Optional[Orientation] = None

    @property
    def volume(self) -> float:
        return self.group.volume

    @property
    def density(self) -> float:
        return self.group.weight / (self.group.volume or 1)


@dataclass
class _Slot:
    """A placement found by the search, before support is known."""

    state: _GroupState
    code: str
    length: float
    width: float
    height: float
    pos_l: float
    pos_w: float
    floor_height: float


def box_volume(length: float, width: float, height: float) -> float:
    return float(length) * float(width) * float(height)


def _group_result(state: _GroupState, placements: list[Placement], config: PackingConfig) -> GroupResult:
    g = state.group
    return GroupResult(
        id=g.id,
        name=g.name,
        color=g.color,
        length=g.length,
        width=g.width,
        height=g.height,
        unit_weight=g.weight,
        requested_quantity=g.quantity,
        placed_quantity=len(state.placed),
        overweight_carton=config.carton_gross_max is not None and g.weight > config.carton_gross_max,
        preferred_orientation=state.preferred.label if state.preferred else None,
        orientation_stability=state.preferred.stability_score if state.preferred else None,
        placements=[placements[k] for k in state.placed],
    )


def empty_result(
    container: Container,
    groups: Sequence[Group],
    config: PackingConfig = DEFAULT_CONFIG,
) -> PackingResult:
    """Well-formed result with nothing placed; every group is still reported."""
    states = [_GroupState(index=i, group=g, orientations=[], remaining=g.quantity) for i, g in enumerate(groups)]
    return PackingResult(
        container_length=container.length,
        container_width=container.width,
        container_height=container.height,
        groups=[_group_result(s, [], config) for s in states],
        stability=StabilityReport(),
        weight_distribution=WeightDistribution(weight_limit=container.weight_limit),
        free_floor_area=max(0.0, container.length) * max(0.0, container.width),
    )


def _prepare(
    groups: Sequence[Group],
    container: Container,
    allow_side_laying: bool,
    config: PackingConfig,
) -> list[_GroupState]:
    states = []
    for i, g in enumerate(groups):
        allow = g.allow_side_laying if g.allow_side_laying is not None else allow_side_laying
        orientations = [
            o for o in raw_orientations(g.length, g.width, g.height, allow)
            if fits(o[:3], container.length, container.width, container.height)
        ]
        preferred = select_best_orientation(
            generate_orientations(g.length, g.width, g.height, allow, config.orientation_height_factor),
            container.length,
            container.width,
            container.height,
        )
        states.append(
            _GroupState(index=i, group=g, orientations=orientations, remaining=g.quantity, preferred=preferred)
        )
    return states


def _active_order(states: list[_GroupState], config: PackingConfig) -> list[_GroupState]:
    """Heaviest-per-volume first (or largest first), then a stable sort by volume, largest first."""
    active = [s for s in states if s.remaining > 0 and s.orientations]
    if config.enable_weight_optimization:
        active.sort(key=lambda s: s.density, reverse=True)
    else:
        active.sort(key=lambda s: s.volume, reverse=True)
    active.sort(key=lambda s: s.volume, reverse=True)
    return active


def _find_best_slot(
    active: list[_GroupState],
    heights: HeightMap,
    cand_l: np.ndarray,
    cand_w: np.ndarray,
    container: Container,
) -> _Slot | None:
    """
    Score every (group, orientation, candidate position) and return the lowest.

    score = floor*1e5 + pos_l*100 + pos_w - volume_bonus*1000. Ties keep the first
    triple seen: groups in order, orientations in order, candidates in order.
    """
    best: _Slot | None = None
    best_score = np.inf
    floors_cache: dict[tuple[float, float], np.ndarray] = {}

    for state in active:
        if state.remaining <= 0:
            continue

        for length, width, height, code in state.orientations:
            inside = (cand_l + length <= container.length) & (cand_w + width <= container.width)
            if not inside.any():
                continue

            key = (length, width)
            floors = floors_cache.get(key)
            if floors is None:
                floors = heights.floor_heights(cand_l, cand_w, length, width)
                floors_cache[key] = floors

            feasible = inside & (floors + height <= container.height)
            if not feasible.any():
                continue

            volume_bonus = box_volume(length, width, height) / VOLUME_BONUS_UNIT
            scores = np.where(
                feasible,
                floors * FLOOR_WEIGHT + cand_l * LENGTH_WEIGHT + cand_w - volume_bonus * VOLUME_BONUS_WEIGHT,
                np.inf,
            )
            k = int(np.argmin(scores))
            if scores[k] < best_score:
                best_score = scores[k]
                best = _Slot(
                    state=state,
                    code=code,
                    length=length,
                    width=width,
                    height=height,
                    pos_l=float(cand_l[k]),
                    pos_w=float(cand_w[k]),
                    floor_height=float(floors[k]),
                )

    return best


def pack_groups(
    groups: Sequence[Group],
    container: Container,
    allow_side_laying: bool = True,
    config: PackingConfig = DEFAULT_CONFIG,
) -> PackingResult:
    """
    Greedy height-mapped packer for one container.

    - Places one box per iteration at the lowest, then back-most, then left-most
      feasible footprint over all groups and orientations
    - Candidate footprints: every height-map cell origin plus the right, far and
      diagonal corners of every box placed so far
    - Weight limit is advisory only; geometry bounds the placement count
    - Stops when nothing fits or after config.max_iterations iterations
    - Deterministic (no randomness)
    """
    if not container.is_valid():
        logger.info("Container %s has a non-positive dimension; nothing packed", container.id)
        return empty_result(container, groups, config)

    states = _prepare(groups, container, allow_side_laying, config)
    active = _active_order(states, config)

    heights = HeightMap(container.length, container.width, config.height_map_resolution)
    floor_space = FreeRectangleSet(container.length, container.width)

    grid = heights.grid_origins()
    seen: set[tuple[float, float]] = set(grid)
    grid_l = np.array([p[0] for p in grid], dtype=np.float64)
    grid_w = np.array([p[1] for p in grid], dtype=np.float64)
    corners_l: list[float] = []
    corners_w: list[float] = []

    slots: list[_Slot] = []
    iterations = 0
    truncated = False

    while any(s.remaining > 0 for s in active):
        if iterations >= config.max_iterations:
            truncated = True
            break
        iterations += 1

        cand_l = np.concatenate([grid_l, np.array(corners_l, dtype=np.float64)])
        cand_w = np.concatenate([grid_w, np.array(corners_w, dtype=np.float64)])

        slot = _find_best_slot(active, heights, cand_l, cand_w, container)
        if slot is None:
            break

        slot.state.placed.append(len(slots))
        slot.state.remaining -= 1
        slots.append(slot)

        heights.raise_to(slot.pos_l, slot.pos_w, slot.length, slot.width, slot.floor_height + slot.height)
        if slot.floor_height == 0:
            floor_space.place(slot.pos_l, slot.pos_w, slot.length, slot.width)

        for corner in (
            (slot.pos_l + slot.length, slot.pos_w),
            (slot.pos_l, slot.pos_w + slot.width),
            (slot.pos_l + slot.length, slot.pos_w + slot.width),
        ):
            if corner not in seen:
                seen.add(corner)
                corners_l.append(corner[0])
                corners_w.append(corner[1])

    if truncated:
        logger.warning("Container %s: iteration ceiling %d reached, stopping early", container.id, config.max_iterations)

    result = _assemble(states, slots, container, config, iterations, truncated, floor_space)
    logger.info(
        "container=%s placed=%d layers=%d volume_utilization=%.1f%% iterations=%d",
        container.id, result.total_boxes, result.total_layers, result.volume_utilization, iterations,
    )
    return result


def _assemble(
    states: list[_GroupState],
    slots: list[_Slot],
    container: Container,
    config: PackingConfig,
    iterations: int,
    truncated: bool,
    floor_space: FreeRectangleSet,
) -> PackingResult:
    placements = [
        Placement(
            group_id=s.state.group.id,
            orientation=s.code,
            length=s.length,
            width=s.width,
            height=s.height,
            pos_l=s.pos_l,
            pos_w=s.pos_w,
            floor_height=s.floor_height,
            x=s.pos_l + s.length / 2,
            y=s.pos_w + s.width / 2,
            z=s.floor_height + s.height / 2,
            volume=box_volume(s.length, s.width, s.height),
            weight=s.state.group.weight,
            support=1.0 if s.floor_height == 0 else 0.0,
        )
        for s in slots
    ]

    if config.enable_stability_check and placements:
        # support needs lower boxes first; map the ordered copies back to placement order
        order = sorted(range(len(placements)), key=lambda k: placements[k].floor_height)
        supported = calculate_support([placements[k] for k in order], config)
        by_index = {k: p for k, p in zip(order, supported)}
        placements = [by_index[k] for k in range(len(placements))]
        stability = analyze_stability(supported, config)
    else:
        stability = StabilityReport()

    total_volume = sum(p.volume for p in placements)
    if placements:
        min_l = min(p.pos_l for p in placements)
        max_l = max(p.pos_l + p.length for p in placements)
        min_w = min(p.pos_w for p in placements)
        max_w = max(p.pos_w + p.width for p in placements)
        used_l = max_l - min_l if max_l > min_l else 0.0
        used_w = max_w - min_w if max_w > min_w else 0.0
        used_h = max(p.top for p in placements)
    else:
        used_l = used_w = used_h = 0.0

    floor_used = sum(p.length * p.width for p in placements if p.floor_height == 0)
    used_box = used_l * used_w * used_h

    return PackingResult(
        container_length=container.length,
        container_width=container.width,
        container_height=container.height,
        total_boxes=len(placements),
        total_layers=len({p.floor_height for p in placements}),
        total_volume=total_volume,
        used_length=used_l,
        used_width=used_w,
        used_height=used_h,
        groups=[_group_result(s, placements, config) for s in states],
        placements=placements,
        stability=stability,
        weight_distribution=analyze_weight(placements, container, config),
        volume_utilization=(total_volume / container.volume) * 100,
        packing_density=total_volume / used_box if placements and used_box > 0 else 0.0,
        free_floor_area=container.length * container.width - floor_used,
        free_floor_rects=floor_space.as_models(),
        iterations=iterations,
        truncated=truncated,
    )
