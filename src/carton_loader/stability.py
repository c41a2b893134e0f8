"""Post-hoc support, stability and weight-distribution analysis of one container's placements."""

from __future__ import annotations

import logging
import math
from typing import Iterable, Sequence

from carton_loader.config import DEFAULT_CONFIG, PackingConfig
from carton_loader.geometry import distance, rect_overlap_area
from carton_loader.models import (
    Container,
    Placement,
    Point3D,
    StabilityIssue,
    StabilityReport,
    WeightDistribution,
)

logger = logging.getLogger(__name__)


def order_by_floor(placements: Iterable[Placement]) -> list[Placement]:
    """New list sorted by floor height only; equal floors keep insertion order."""
    return sorted(placements, key=lambda p: p.floor_height)


def calculate_support(placements: Sequence[Placement], config: PackingConfig = DEFAULT_CONFIG) -> list[Placement]:
    """
    Return copies of the placements, ordered by floor height, with support filled in.

    A box on the container floor has support 1.0. Any other box is supported by the
    top faces of earlier boxes whose top equals its floor height (within epsilon).
    """
    ordered = order_by_floor(placements)
    result: list[Placement] = []

    for i, box in enumerate(ordered):
        if box.floor_height == 0:
            result.append(box.model_copy(update={"support": 1.0}))
            continue

        base_area = box.length * box.width
        supported_area = 0.0
        for below in ordered[:i]:
            if abs(below.floor_height + below.height - box.floor_height) < config.epsilon:
                supported_area += rect_overlap_area(
                    box.pos_l, box.pos_w, box.length, box.width,
                    below.pos_l, below.pos_w, below.length, below.width,
                )

        support = supported_area / base_area if base_area > 0 else 0.0
        # boxes below never overlap each other, so this only trims float noise
        support = min(1.0, max(0.0, support))
        result.append(box.model_copy(update={"support": support}))

    return result


def stability_recommendation(support: float) -> str:
    if support < 0.3:
        return "Critical: Less than 30% support. High risk of falling."
    elif support < 0.5:
        return "Warning: Less than 50% support. May shift during transport."
    elif support < 0.7:
        return "Caution: Marginal support. Consider repositioning."
    return "Acceptable support level."


def overall_recommendation(score: float, issue_count: int) -> str:
    if score > 0.9 and issue_count == 0:
        return "Excellent stability. Load is well-balanced and secure."
    elif score > 0.8 and issue_count <= 2:
        return "Good stability with minor issues. Check highlighted items."
    elif score > 0.7:
        return "Acceptable stability. Some adjustments recommended."
    elif score > 0.5:
        return "Poor stability. Significant adjustments needed."
    return "Critical stability issues. Complete reorganization recommended."


def analyze_stability(placements: Sequence[Placement], config: PackingConfig = DEFAULT_CONFIG) -> StabilityReport:
    """Aggregate already-computed supports into a score, issue list and verdict."""
    if not placements:
        return StabilityReport()

    issues: list[StabilityIssue] = []
    total = 0.0
    for p in placements:
        total += p.support
        if p.support < config.stability_threshold:
            issues.append(
                StabilityIssue(
                    group_id=p.group_id,
                    position=Point3D(x=p.x, y=p.y, z=p.z),
                    support=p.support,
                    recommendation=stability_recommendation(p.support),
                )
            )

    score = total / len(placements)
    if issues:
        logger.debug("%d of %d placements below support threshold %.2f", len(issues), len(placements), config.stability_threshold)

    return StabilityReport(
        score=score,
        issues=issues,
        is_stable=not issues,
        recommendation=overall_recommendation(score, len(issues)),
    )


def center_of_mass(placements: Iterable[Placement]) -> tuple[Point3D, float]:
    """Weight-weighted mean of placement centers, and the total weight."""
    total_weight = 0.0
    wx = wy = wz = 0.0
    for p in placements:
        total_weight += p.weight
        wx += p.x * p.weight
        wy += p.y * p.weight
        wz += p.z * p.weight

    if total_weight <= 0:
        return Point3D(), total_weight
    return Point3D(x=wx / total_weight, y=wy / total_weight, z=wz / total_weight), total_weight


def ideal_center(container: Container) -> Point3D:
    """Centered on the floor, a quarter of the way up."""
    return Point3D(x=container.length / 2, y=container.width / 2, z=container.height * 0.25)


def is_weight_balanced(com: Point3D, container: Container, config: PackingConfig = DEFAULT_CONFIG) -> bool:
    ideal = ideal_center(container)
    deviation = distance((com.x, com.y, com.z), (ideal.x, ideal.y, ideal.z))
    max_deviation = math.sqrt(container.length ** 2 + container.width ** 2) * config.weight_distribution_tolerance
    return deviation <= max_deviation


def analyze_weight(
    placements: Sequence[Placement],
    container: Container,
    config: PackingConfig = DEFAULT_CONFIG,
) -> WeightDistribution:
    """
    Center of mass, balance verdict and weight-limit advisory.

    The weight limit is reported, never enforced: placement count is bounded by geometry.
    """
    if not placements:
        return WeightDistribution(weight_limit=container.weight_limit)

    com, total_weight = center_of_mass(placements)
    ideal = ideal_center(container)
    deviation = distance((com.x, com.y, com.z), (ideal.x, ideal.y, ideal.z))

    limit = container.weight_limit
    overweight = bool(limit) and total_weight > limit
    utilization = (total_weight / limit) * 100.0 if limit else None
    if overweight:
        logger.warning("Container %s over weight limit: %.1f > %.1f", container.id, total_weight, limit)

    return WeightDistribution(
        center_of_mass=com,
        is_balanced=is_weight_balanced(com, container, config),
        deviation=deviation,
        total_weight=total_weight,
        weight_limit=limit,
        overweight=overweight,
        weight_utilization=utilization,
    )
