from __future__ import annotations

import logging
from typing import Any, Sequence

from carton_loader.config import DEFAULT_CONFIG, PackingConfig
from carton_loader.models import Container, ContainerPackingResult, Group, PackingResult
from carton_loader.packing.greedy import empty_result, pack_groups

logger = logging.getLogger(__name__)


def spread_allocations(total: int, count: int) -> list[int]:
    """
    Split `total` over `count` containers: floor(total/count) each, and one
    extra for the first total % count containers.
    """
    if count <= 0:
        return []
    base, remainder = divmod(max(0, total), count)
    return [base + 1 if idx < remainder else base for idx in range(count)]


def restrict_to_allowed(groups: Sequence[Group], container: Container) -> list[Group]:
    """Zero the quantity of every group the container's allow-list excludes."""
    if not container.allowed_groups:
        return list(groups)
    allowed = set(container.allowed_groups)
    return [g if g.id in allowed else g.model_copy(update={"quantity": 0}) for g in groups]


def _with_container(result: PackingResult, container: Container, index: int) -> ContainerPackingResult:
    total_weight = sum(g.unit_weight * g.placed_quantity for g in result.groups)
    return ContainerPackingResult(
        **dict(result),
        container_id=container.id,
        container_label=container.label,
        container_index=index,
        total_weight=total_weight,
    )


def summarize(results: Sequence[ContainerPackingResult], groups: Sequence[Group]) -> dict[str, Any]:
    """Totals across containers, shaped for the API response and the CLI printout."""
    requested = sum(g.quantity for g in groups)
    placed = sum(r.total_boxes for r in results)
    placed_by_group: dict[str, int] = {g.id: 0 for g in groups}
    for r in results:
        for gr in r.groups:
            if gr.id in placed_by_group:
                placed_by_group[gr.id] += gr.placed_quantity

    return {
        "containers": len(results),
        "containers_used": sum(1 for r in results if r.total_boxes > 0),
        "total_requested": requested,
        "total_placed": placed,
        "total_unplaced": max(0, requested - placed),
        "total_weight": sum(r.total_weight for r in results),
        "overweight_containers": [r.container_id for r in results if r.weight_distribution.overweight],
        "unplaced_by_group": {
            g.id: max(0, g.quantity - placed_by_group[g.id]) for g in groups if g.quantity > placed_by_group[g.id]
        },
    }


def pack_containers(
    groups: Sequence[Group],
    containers: Sequence[Container],
    allow_side_laying: bool = True,
    spread_across_containers: bool = False,
    config: PackingConfig = DEFAULT_CONFIG,
) -> list[ContainerPackingResult]:
    """
    Pack groups into an ordered list of containers.

    Sequential (default): each container gets everything still remaining that it
    may hold; what does not fit carries forward to the next container.
    Even spread (more than one container): each group's quantity is split up front
    and each container packs only its own share, with no carry-forward.
    """
    if not containers:
        return []

    spread = spread_across_containers and len(containers) > 1
    allocations = [spread_allocations(g.quantity, len(containers)) for g in groups] if spread else None

    # caller-owned groups are never mutated; this is the remaining-quantity copy
    remaining = [g.model_copy() for g in groups]
    results: list[ContainerPackingResult] = []

    for index, container in enumerate(containers):
        if allocations is not None:
            remaining = [g.model_copy(update={"quantity": allocations[i][index]}) for i, g in enumerate(remaining)]

        if sum(g.quantity for g in remaining) == 0:
            result = empty_result(container, remaining, config)
            results.append(_with_container(result, container, index))
            continue

        offered = restrict_to_allowed(remaining, container)
        result = pack_groups(offered, container, allow_side_laying, config)

        if allocations is None:
            remaining = [
                g.model_copy(update={"quantity": max(0, g.quantity - packed.placed_quantity)})
                for g, packed in zip(remaining, result.groups)
            ]

        results.append(_with_container(result, container, index))

    logger.info(
        "Packed %d container(s) (%s): %s",
        len(results),
        "even spread" if spread else "sequential",
        ", ".join(f"{r.container_id}={r.total_boxes}" for r in results),
    )
    return results
