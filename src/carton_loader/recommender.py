"""Container recommendation: a bounded search for a low-cost combination of container types."""

from __future__ import annotations

import functools
import logging
import math
from dataclasses import dataclass
from typing import Sequence

from carton_loader.config import DEFAULT_CONFIG, PackingConfig
from carton_loader.containers import default_catalog
from carton_loader.models import Container, ContainerType, Group, RecommendationCandidate
from carton_loader.packing.multi_container import pack_containers

logger = logging.getLogger(__name__)

COST_TOLERANCE = 0.01


@dataclass
class TypeCapacity:
    type: ContainerType
    capacity: int

    @property
    def cost_weight(self) -> float:
        return self.type.cost_weight


def _instances(types: Sequence[ContainerType]) -> list[Container]:
    """Concrete containers for a configuration, numbered per type."""
    counts: dict[str, int] = {}
    containers = []
    for t in types:
        n = counts.get(t.label, 0)
        counts[t.label] = n + 1
        containers.append(t.instantiate(n))
    return containers


def evaluate(
    groups: Sequence[Group],
    types: Sequence[ContainerType],
    allow_side_laying: bool = True,
    config: PackingConfig = DEFAULT_CONFIG,
) -> RecommendationCandidate:
    """Pack sequentially into the given configuration and report cost and placed quantity."""
    containers = _instances(types)
    results = pack_containers(groups, containers, allow_side_laying, False, config)
    return RecommendationCandidate(
        containers=containers,
        total_cost=sum(t.cost_weight for t in types),
        total_placed=sum(r.total_boxes for r in results),
    )


def type_capacities(
    groups: Sequence[Group],
    catalog: Sequence[ContainerType],
    allow_side_laying: bool = True,
    config: PackingConfig = DEFAULT_CONFIG,
) -> list[TypeCapacity]:
    """Single-container capacity per complete catalog type, largest first; empty types dropped."""
    capacities = []
    for t in catalog:
        if not t.is_complete():
            continue
        capacity = evaluate(groups, [t], allow_side_laying, config).total_placed
        logger.debug("capacity %s = %d", t.label, capacity)
        if capacity > 0:
            capacities.append(TypeCapacity(type=t, capacity=capacity))

    capacities.sort(key=lambda c: c.capacity, reverse=True)
    return capacities


def compare_candidates(a: RecommendationCandidate, b: RecommendationCandidate) -> int:
    """Lower cost first (within tolerance), then fewer containers, then more placed."""
    cost_diff = a.total_cost - b.total_cost
    if abs(cost_diff) > COST_TOLERANCE:
        return -1 if cost_diff < 0 else 1

    count_diff = len(a.containers) - len(b.containers)
    if count_diff != 0:
        return count_diff

    return b.total_placed - a.total_placed


def rank_candidates(
    groups: Sequence[Group],
    catalog: Sequence[ContainerType] | None = None,
    allow_side_laying: bool = True,
    config: PackingConfig = DEFAULT_CONFIG,
) -> list[RecommendationCandidate]:
    """
    Candidate configurations that place the whole request, best first.

    Tried: each type alone at the smallest count (1..max_containers_per_type) that
    fits everything; every pair of distinct types one-of-each; and one of the
    larger-capacity type plus two of the smaller. Every configuration is re-packed,
    since allow-lists and geometry make capacity non-additive. When nothing fits,
    the single fallback candidate repeats the highest-capacity type.
    """
    catalog = list(catalog) if catalog is not None else default_catalog()
    total = sum(g.quantity for g in groups)
    if not groups or total == 0:
        return []

    capacities = type_capacities(groups, catalog, allow_side_laying, config)
    if not capacities:
        logger.info("No catalog type can hold any of the %d requested units", total)
        return []

    candidates: list[RecommendationCandidate] = []

    for cap in capacities:
        for count in range(1, config.max_containers_per_type + 1):
            candidate = evaluate(groups, [cap.type] * count, allow_side_laying, config)
            if candidate.total_placed >= total:
                candidates.append(candidate)
                break

    for i, first in enumerate(capacities):
        for second in capacities[i + 1:]:
            candidate = evaluate(groups, [first.type, second.type], allow_side_laying, config)
            if candidate.total_placed >= total:
                candidates.append(candidate)

            if first.capacity > second.capacity:
                candidate = evaluate(groups, [first.type, second.type, second.type], allow_side_laying, config)
                if candidate.total_placed >= total:
                    candidates.append(candidate)

    if not candidates:
        largest = capacities[0]
        needed = math.ceil(total / largest.capacity)
        containers = _instances([largest.type] * needed)
        logger.info("No searched combination fits %d units; falling back to %d x %s", total, needed, largest.type.label)
        return [
            RecommendationCandidate(
                containers=containers,
                total_cost=largest.cost_weight * needed,
                # estimate only, the fallback is not re-packed
                total_placed=min(total, largest.capacity * needed),
                fallback=True,
            )
        ]

    candidates.sort(key=functools.cmp_to_key(compare_candidates))
    best = candidates[0]
    logger.info(
        "Best configuration: %s cost=%.2f placed=%d (of %d candidates)",
        " + ".join(best.labels), best.total_cost, best.total_placed, len(candidates),
    )
    return candidates


def recommend_containers(
    groups: Sequence[Group],
    catalog: Sequence[ContainerType] | None = None,
    allow_side_laying: bool = True,
    config: PackingConfig = DEFAULT_CONFIG,
) -> list[Container]:
    """Containers of the best-ranked configuration; empty when no type can hold anything."""
    candidates = rank_candidates(groups, catalog, allow_side_laying, config)
    if not candidates:
        return []
    return candidates[0].containers
