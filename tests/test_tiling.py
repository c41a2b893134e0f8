from __future__ import annotations

import pytest

from carton_loader.tiling import best_tile, interlocked_pattern, uniform_pattern


def test_cube_tiles_upright_grid() -> None:
    """Test that cubes tile as an upright grid."""
    result = best_tile(500, 500, 500, 1000, 1000, 1000)

    assert result.pattern == "upright"
    assert (result.count_l, result.count_w, result.layers) == (2, 2, 2)
    assert result.total == 8
    assert result.effective_total == 8
    assert result.volume_efficiency == pytest.approx(1.0)
    assert result.desired_too_high is False


def test_interlocked_rows_beat_uniform_grid() -> None:
    """300x200 boxes on a 600x500 floor: 4 in a grid, 5 with one turned row."""
    result = best_tile(300, 200, 100, 600, 500, 100)

    assert result.pattern.startswith("mixed-")
    assert result.per_layer == 5
    assert result.total == 5
    assert result.count_l is None
    assert len(result.pattern_rows) == 2
    assert [row.rotated for row in result.pattern_rows] == [False, True]


def test_desired_count_caps_effective_total() -> None:
    """Test that a desired count caps the effective total."""
    result = best_tile(500, 500, 500, 1000, 1000, 1000, desired_count=5)

    assert result.total == 8
    assert result.effective_total == 5
    assert result.desired_too_high is False


def test_desired_count_above_capacity_is_flagged() -> None:
    """Test that a desired count above capacity is flagged."""
    result = best_tile(500, 500, 500, 1000, 1000, 1000, desired_count=20)

    assert result.effective_total == 8
    assert result.desired_too_high is True


def test_invalid_or_oversize_box_gives_empty_result() -> None:
    """Test empty results for invalid and oversize boxes."""
    assert best_tile(0, 500, 500, 1000, 1000, 1000).total == 0
    oversize = best_tile(2000, 2000, 2000, 1000, 1000, 1000)
    assert oversize.pattern == "none"
    assert oversize.total == 0


def test_side_laying_needed_for_tall_box() -> None:
    """Test that a tall box only fits lying down."""
    assert best_tile(200, 200, 400, 1000, 1000, 300, allow_side_laying=False).total == 0
    assert best_tile(200, 200, 400, 1000, 1000, 300, allow_side_laying=True).total > 0


def test_uniform_pattern_none_when_nothing_fits() -> None:
    """Test that a uniform pattern needs at least one box."""
    assert uniform_pattern((600, 100, 100, "upright"), 500, 500, 500) is None


def test_interlocked_pattern_skips_square_footprint() -> None:
    """Test that square footprints skip interlocking."""
    assert interlocked_pattern((100, 100, 50, "upright"), 500, 500, 500) is None


def test_swapped_container_is_labelled() -> None:
    """Test the container-swapped pattern label."""
    result = uniform_pattern((300, 200, 100, "upright"), 500, 600, 100, swapped=True)

    assert result.pattern == "upright-container-swapped"
    assert result.container_swapped is True
