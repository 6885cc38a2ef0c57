"""Turning laser scans and particle maps into the inputs and outputs of the mapper."""

from __future__ import annotations

import math
from typing import Iterable, Sequence

UNKNOWN = -1
FREE = 0
OCCUPIED = 100
DEFAULT_OCCUPANCY_THRESHOLD = 0.25


def pose_entropy(weights: Iterable[float]) -> float:
    """Entropy of the normalized particle weights.

    Weights that normalize to zero or less add nothing. A zero total gives 0.
    """
    weights = list(weights)
    total = sum(weights)
    if total == 0:
        return 0.0
    entropy = 0.0
    for weight in weights:
        p = weight / total
        if p > 0.0:
            entropy += p * math.log(p)
    return -entropy


def laser_angles(
    count: int, angle_min: float, angle_max: float, angle_increment: float
) -> list[float]:
    """Beam angles centred on zero and increasing, one per beam.

    The first beam sits at minus half the scan's field of view, and each
    following beam adds the absolute increment.
    """
    if count < 0:
        raise ValueError("beam count cannot be negative")
    start = -abs(angle_min - angle_max) / 2
    step = abs(angle_increment)
    angles = []
    theta = start
    for _ in range(count):
        angles.append(theta)
        theta += step
    return angles


def prepare_ranges(
    ranges: Sequence[float], range_min: float, range_max: float, reverse: bool = False
) -> list[float]:
    """Ranges in the order the mapper expects, short readings set to ``range_max``.

    With ``reverse`` the readings are taken from last to first.
    """
    ordered = reversed(ranges) if reverse else ranges
    return [float(range_max) if r < range_min else float(r) for r in ordered]


def occupancy_value(occupancy: float, threshold: float = DEFAULT_OCCUPANCY_THRESHOLD) -> int:
    """Grid value of a cell: -1 unknown, 100 occupied, 0 free.

    Raises ValueError for an occupancy above 1.
    """
    if occupancy > 1.0:
        raise ValueError(f"occupancy {occupancy:g} exceeds 1")
    if occupancy < 0:
        return UNKNOWN
    if occupancy > threshold:
        return OCCUPIED
    return FREE


def occupancy_grid(
    cells: Sequence[Sequence[float]],
    width: int,
    height: int,
    threshold: float = DEFAULT_OCCUPANCY_THRESHOLD,
) -> list[int]:
    """Row-major grid data from occupancies indexed ``cells[x][y]``.

    The value of cell ``(x, y)`` lands at index ``width * y + x``.
    """
    if width < 0 or height < 0:
        raise ValueError("grid dimensions cannot be negative")
    return [
        occupancy_value(cells[x][y], threshold)
        for y in range(height)
        for x in range(width)
    ]