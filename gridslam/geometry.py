"""Planar poses and the rigid-motion helpers used across the mapper."""

from __future__ import annotations

import math
from dataclasses import dataclass


def normalize_angle(theta: float) -> float:
    """Wrap an angle into the interval [-pi, pi]."""
    return math.atan2(math.sin(theta), math.cos(theta))


@dataclass(frozen=True)
class Pose:
    """A position in the plane together with a heading, in radians."""

    x: float = 0.0
    y: float = 0.0
    theta: float = 0.0

    def __add__(self, other: Pose) -> Pose:
        return Pose(self.x + other.x, self.y + other.y, self.theta + other.theta)

    def __sub__(self, other: Pose) -> Pose:
        return Pose(self.x - other.x, self.y - other.y, self.theta - other.theta)

    def __mul__(self, factor: float) -> Pose:
        return Pose(self.x * factor, self.y * factor, self.theta * factor)

    __rmul__ = __mul__

    def dot(self, other: Pose) -> float:
        """Dot product of the positional parts."""
        return self.x * other.x + self.y * other.y

    @property
    def norm(self) -> float:
        """Euclidean length of the positional part."""
        return math.hypot(self.x, self.y)


def absolute_difference(p1: Pose, p2: Pose) -> Pose:
    """Express ``p1`` in the frame of ``p2``."""
    delta = p1 - p2
    theta = normalize_angle(delta.theta)
    s, c = math.sin(p2.theta), math.cos(p2.theta)
    return Pose(c * delta.x + s * delta.y, -s * delta.x + c * delta.y, theta)


def absolute_sum(p1: Pose, p2: Pose) -> Pose:
    """Compose ``p2``, given relative to ``p1``, onto ``p1``."""
    s, c = math.sin(p1.theta), math.cos(p1.theta)
    return Pose(c * p2.x - s * p2.y, s * p2.x + c * p2.y, p2.theta) + p1