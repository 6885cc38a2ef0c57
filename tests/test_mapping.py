import math

import pytest

from gridslam.mapping import (
    laser_angles,
    occupancy_grid,
    occupancy_value,
    pose_entropy,
    prepare_ranges,
)


def test_entropy_of_single_particle_is_zero():
    assert pose_entropy([3.0]) == pytest.approx(0.0)


def test_entropy_of_uniform_weights_is_log_of_count():
    assert pose_entropy([0.5] * 4) == pytest.approx(math.log(4))


def test_entropy_is_scale_invariant():
    weights = [0.1, 0.3, 0.6]
    assert pose_entropy(weights) == pytest.approx(pose_entropy([w * 7 for w in weights]))


def test_entropy_ignores_zero_weights():
    assert pose_entropy([1.0, 0.0, 1.0]) == pytest.approx(pose_entropy([1.0, 1.0]))


def test_entropy_of_zero_total_is_zero():
    assert pose_entropy([0.0, 0.0]) == 0.0


def test_entropy_bounded_by_uniform():
    assert pose_entropy([0.2, 0.3, 0.5]) < pose_entropy([1.0, 1.0, 1.0])


def test_laser_angles_length_and_start():
    angles = laser_angles(5, -1.0, 1.0, 0.5)
    assert len(angles) == 5
    assert angles[0] == pytest.approx(-1.0)
    assert angles[-1] == pytest.approx(1.0)


def test_laser_angles_increase_by_absolute_increment():
    angles = laser_angles(4, 1.0, -1.0, -0.25)
    steps = [b - a for a, b in zip(angles, angles[1:])]
    assert steps == pytest.approx([0.25] * 3)


def test_laser_angles_independent_of_direction():
    assert laser_angles(7, -0.6, 0.6, 0.2) == pytest.approx(laser_angles(7, 0.6, -0.6, -0.2))


def test_laser_angles_empty_and_invalid():
    assert laser_angles(0, -1.0, 1.0, 0.1) == []
    with pytest.raises(ValueError):
        laser_angles(-1, -1.0, 1.0, 0.1)


def test_prepare_ranges_replaces_short_readings():
    assert prepare_ranges([0.05, 1.0, 2.0], 0.1, 5.0) == [5.0, 1.0, 2.0]


def test_prepare_ranges_reverses():
    assert prepare_ranges([0.05, 1.0, 2.0], 0.1, 5.0, reverse=True) == [2.0, 1.0, 5.0]


def test_prepare_ranges_keeps_reading_equal_to_minimum():
    assert prepare_ranges([0.1], 0.1, 5.0) == [0.1]


def test_occupancy_value_classes():
    assert occupancy_value(-0.5) == -1
    assert occupancy_value(0.9) == 100
    assert occupancy_value(0.1) == 0


def test_occupancy_value_threshold_is_exclusive():
    assert occupancy_value(0.25, 0.25) == 0
    assert occupancy_value(0.3, 0.5) == 0


def test_occupancy_value_rejects_above_one():
    with pytest.raises(ValueError):
        occupancy_value(1.5)


def test_occupancy_grid_is_row_major():
    cells = [[-1.0, 0.0, 0.9], [0.9, 0.0, -1.0]]  # cells[x][y], width 2, height 3
    data = occupancy_grid(cells, 2, 3)
    assert len(data) == 6
    for x in range(2):
        for y in range(3):
            assert data[2 * y + x] == occupancy_value(cells[x][y])


def test_occupancy_grid_empty_and_invalid():
    assert occupancy_grid([], 0, 0) == []
    with pytest.raises(ValueError):
        occupancy_grid([], -1, 2)