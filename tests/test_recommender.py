from __future__ import annotations

from carton_loader.models import ContainerType, Group
from carton_loader.recommender import (
    compare_candidates,
    rank_candidates,
    recommend_containers,
    type_capacities,
)

# One layer of 100 mm cubes: A holds 10x10 = 100, B holds 10x25 = 250
TYPE_A = ContainerType(label="A", length=1000, width=1000, height=100, weight_limit=10_000, cost_weight=1.0)
TYPE_B = ContainerType(label="B", length=1000, width=2500, height=100, weight_limit=10_000, cost_weight=1.5)


def _cubes(quantity: int) -> list[Group]:
    return [Group(id="cube", length=100, width=100, height=100, weight=1, quantity=quantity)]


def test_type_capacities_largest_first() -> None:
    """Test single-container capacities, largest first."""
    capacities = type_capacities(_cubes(300), [TYPE_A, TYPE_B])

    assert [(c.type.label, c.capacity) for c in capacities] == [("B", 250), ("A", 100)]


def test_prefers_one_large_over_three_small() -> None:
    """Test that one large container beats three small ones on cost."""
    containers = recommend_containers(_cubes(240), [TYPE_A, TYPE_B])

    assert [c.label for c in containers] == ["B"]
    assert containers[0].id == "B#1"


def test_candidates_are_ranked_by_cost() -> None:
    """Test that every candidate places the request and cost ranks them."""
    candidates = rank_candidates(_cubes(240), [TYPE_A, TYPE_B])

    costs = [c.total_cost for c in candidates]
    assert costs == sorted(costs)
    assert candidates[0].labels == ["B"]
    assert all(c.total_placed >= 240 for c in candidates)
    assert ["A", "A", "A"] in [c.labels for c in candidates]


def test_fallback_repeats_largest_type() -> None:
    """Test the fallback when no searched combination fits."""
    candidates = rank_candidates(_cubes(1500), [TYPE_A, TYPE_B])

    assert len(candidates) == 1
    assert candidates[0].fallback is True
    assert candidates[0].labels == ["B"] * 6
    assert [c.id for c in candidates[0].containers][:2] == ["B#1", "B#2"]


def test_oversize_box_recommends_nothing() -> None:
    """Test that a box larger than every type gets no recommendation."""
    groups = [Group(id="big", length=5000, width=5000, height=5000, quantity=1)]

    assert recommend_containers(groups, [TYPE_A, TYPE_B]) == []


def test_empty_request_recommends_nothing() -> None:
    """Test that an empty request gets no recommendation."""
    assert recommend_containers([], [TYPE_A]) == []
    assert recommend_containers(_cubes(0), [TYPE_A]) == []


def test_incomplete_types_are_skipped() -> None:
    """Test that catalog types without full data are ignored."""
    incomplete = ContainerType(label="draft", length=1000, width=1000, height=100)

    assert recommend_containers(_cubes(10), [incomplete]) == []


def test_compare_candidates_tie_breaks() -> None:
    """Test cost tolerance and placed-count tie-breaking."""
    cheap = rank_candidates(_cubes(50), [TYPE_A])[0]
    pricier = cheap.model_copy(update={"total_cost": cheap.total_cost + 0.5})
    near_tie = cheap.model_copy(update={"total_cost": cheap.total_cost + 0.005, "total_placed": cheap.total_placed + 1})

    assert compare_candidates(cheap, pricier) < 0
    # costs within tolerance: more placed wins
    assert compare_candidates(near_tie, cheap) < 0
