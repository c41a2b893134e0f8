from __future__ import annotations

import pytest

from carton_loader.orientations import (
    fits,
    generate_orientations,
    orientation_stability,
    raw_orientations,
    select_best_orientation,
)


def test_upright_orientations_come_first_with_full_score() -> None:
    """Test that upright orientations lead with a score of 1.0."""
    orientations = generate_orientations(500, 400, 300)

    assert [o.label for o in orientations] == [
        "upright",
        "upright-rotated",
        "laid-side-l",
        "laid-side-w",
        "laid-h-l",
        "laid-h-w",
    ]
    assert orientations[0].dims == (500, 400, 300)
    assert orientations[1].dims == (400, 500, 300)
    assert orientations[0].stability_score == 1.0
    assert orientations[1].stability_score == 1.0


def test_side_laid_orientations_use_stability_formula() -> None:
    """Test that side-laid orientations are scored by the stability formula."""
    orientations = generate_orientations(500, 400, 300)
    laid_side_l = orientations[2]

    assert laid_side_l.dims == (400, 300, 500)
    assert laid_side_l.stability_score == pytest.approx(orientation_stability(400, 300, 500))
    assert 0 < laid_side_l.stability_score < 1


def test_side_laying_disallowed_keeps_upright_only() -> None:
    """Test that disallowing side-laying keeps only upright orientations."""
    orientations = generate_orientations(500, 400, 300, allow_side_laying=False)

    assert [o.label for o in orientations] == ["upright", "upright-rotated"]


def test_all_zero_dimensions_give_no_orientations() -> None:
    """Test that a box with no size has no orientations."""
    assert generate_orientations(0, 0, 0) == []


def test_orientation_stability_cube() -> None:
    """Test the stability score of a cube and a flat base."""
    # height ratio 1, squareness 1: 1/(1+0.5) * 1.0
    assert orientation_stability(100, 100, 100) == pytest.approx(1 / 1.5)
    assert orientation_stability(0, 100, 100) == 0.0


def test_raw_orientations_order_and_dedup() -> None:
    """Test packer permutation order and duplicate removal."""
    codes = [o[3] for o in raw_orientations(500, 400, 300)]
    assert codes == ["LWH", "LHW", "WLH", "WHL", "HLW", "HWL"]

    # a cube collapses to a single orientation
    assert raw_orientations(100, 100, 100) == [(100, 100, 100, "LWH")]

    # square base: LWH == WLH, LHW == WHL, HLW == HWL
    assert [o[3] for o in raw_orientations(100, 100, 200)] == ["LWH", "LHW", "HLW"]


def test_raw_orientations_without_side_laying() -> None:
    """Test that packer permutations honour the side-laying flag."""
    assert raw_orientations(500, 400, 300, allow_side_laying=False) == [
        (500, 400, 300, "LWH"),
        (400, 500, 300, "WLH"),
    ]


def test_fits() -> None:
    """Test the orientation fit check."""
    assert fits((100, 100, 100), 100, 100, 100)
    assert not fits((101, 100, 100), 100, 100, 100)
    assert not fits((0, 100, 100), 100, 100, 100)


def test_select_best_orientation_weighs_stability() -> None:
    """More units win unless the stability score of the lying orientation drags it below upright."""
    assert select_best_orientation(generate_orientations(100, 100, 300), 1000, 1000, 500).label == "laid-side-l"
    penalised = generate_orientations(100, 100, 300, height_factor=2.0)
    assert select_best_orientation(penalised, 1000, 1000, 500).label == "upright"


def test_select_best_orientation_none_when_nothing_fits() -> None:
    """No orientation fits a box larger than the container."""
    assert select_best_orientation(generate_orientations(2000, 100, 100), 1000, 1000, 1000) is None
