from __future__ import annotations

import pytest

from carton_loader.models import Container, Placement, Point3D
from carton_loader.stability import (
    analyze_stability,
    analyze_weight,
    calculate_support,
    center_of_mass,
    is_weight_balanced,
    overall_recommendation,
    stability_recommendation,
)


def _placement(pos_l, pos_w, floor, l, w, h, weight=10.0, group_id="g") -> Placement:
    return Placement(
        group_id=group_id,
        orientation="LWH",
        length=l,
        width=w,
        height=h,
        pos_l=pos_l,
        pos_w=pos_w,
        floor_height=floor,
        x=pos_l + l / 2,
        y=pos_w + w / 2,
        z=floor + h / 2,
        volume=l * w * h,
        weight=weight,
    )


def test_support_of_half_overhanging_box() -> None:
    """Test the support of a box hanging half off its base."""
    base = _placement(0, 0, 0, 100, 100, 100)
    top = _placement(50, 0, 100, 100, 100, 100)

    supported = calculate_support([top, base])

    # returned in floor order; inputs untouched
    assert [p.floor_height for p in supported] == [0, 100]
    assert supported[0].support == 1.0
    assert supported[1].support == pytest.approx(0.5)
    assert top.support == 0.0


def test_support_ignores_boxes_that_do_not_reach_the_floor() -> None:
    """Test that only tops at the floor height give support."""
    low = _placement(0, 0, 0, 100, 100, 50)
    floating = _placement(0, 0, 100, 100, 100, 100)

    supported = calculate_support([low, floating])

    assert supported[1].support == 0.0


def test_support_sums_several_boxes_below() -> None:
    """Test that support adds up over several boxes below."""
    left = _placement(0, 0, 0, 100, 100, 100)
    right = _placement(100, 0, 0, 100, 100, 100)
    bridge = _placement(50, 0, 100, 100, 100, 100)

    supported = calculate_support([left, right, bridge])

    assert supported[2].support == pytest.approx(1.0)


def test_equal_floors_keep_insertion_order() -> None:
    """Test that equal floor heights keep insertion order."""
    a = _placement(0, 0, 0, 100, 100, 100, group_id="a")
    b = _placement(100, 0, 0, 100, 100, 100, group_id="b")
    c = _placement(200, 0, 0, 100, 100, 100, group_id="c")

    assert [p.group_id for p in calculate_support([a, b, c])] == ["a", "b", "c"]


@pytest.mark.parametrize(
    "support, prefix",
    [
        (0.1, "Critical"),
        (0.3, "Warning"),
        (0.5, "Caution"),
        (0.7, "Acceptable"),
    ],
)
def test_stability_recommendation_bands(support: float, prefix: str) -> None:
    """Test per-box recommendation bands."""
    assert stability_recommendation(support).startswith(prefix)


@pytest.mark.parametrize(
    "score, issues, prefix",
    [
        (0.95, 0, "Excellent"),
        (0.95, 1, "Good"),
        (0.85, 2, "Good"),
        (0.85, 3, "Acceptable"),
        (0.75, 0, "Acceptable"),
        (0.6, 0, "Poor"),
        (0.5, 0, "Critical"),
    ],
)
def test_overall_recommendation_bands(score: float, issues: int, prefix: str) -> None:
    """Test overall recommendation bands."""
    assert overall_recommendation(score, issues).startswith(prefix)


def test_analyze_stability_reports_low_support() -> None:
    """Test that low support becomes an issue."""
    supported = calculate_support([
        _placement(0, 0, 0, 100, 100, 100),
        _placement(50, 0, 100, 100, 100, 100, group_id="top"),
    ])

    report = analyze_stability(supported)

    assert report.score == pytest.approx(0.75)
    assert report.is_stable is False
    assert len(report.issues) == 1
    assert report.issues[0].group_id == "top"
    assert report.issues[0].recommendation.startswith("Caution")
    assert report.recommendation.startswith("Acceptable")


def test_analyze_stability_empty() -> None:
    """Test the neutral report for no placements."""
    report = analyze_stability([])

    assert report.score == 1.0
    assert report.issues == []


def test_center_of_mass_is_weighted() -> None:
    """Test the weight-weighted center of mass."""
    com, total = center_of_mass([
        _placement(0, 0, 0, 100, 100, 100, weight=30),
        _placement(300, 0, 0, 100, 100, 100, weight=10),
    ])

    assert total == 40
    assert com.x == pytest.approx((50 * 30 + 350 * 10) / 40)
    assert com.z == pytest.approx(50)


def test_weight_balance() -> None:
    """Test the balance check against the ideal center."""
    container = Container(length=1000, width=1000, height=1000)

    assert is_weight_balanced(Point3D(x=500, y=500, z=250), container)
    assert not is_weight_balanced(Point3D(x=50, y=50, z=50), container)


def test_analyze_weight_without_limit() -> None:
    """Test weight analysis without a weight limit."""
    container = Container(length=1000, width=1000, height=1000)

    dist = analyze_weight([_placement(0, 0, 0, 1000, 1000, 500, weight=100)], container)

    assert dist.total_weight == 100
    assert dist.overweight is False
    assert dist.weight_utilization is None
    assert dist.is_balanced is True
