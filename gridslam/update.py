"""Deciding when accumulated odometry warrants processing a new scan."""

from __future__ import annotations

import logging
import math
import sys
from typing import Iterable

from .geometry import Pose, normalize_angle

logger = logging.getLogger(__name__)

DISTANCE_THRESHOLD_CHECK = 20.0


class UpdatePolicy:
    """Accumulates robot motion between scans and says when a scan is due.

    A scan is processed on the first reading, once the travelled distance
    reaches ``linear_threshold``, once the turned angle reaches
    ``angular_threshold``, or, when ``period`` is not negative, once more than
    ``period`` seconds have passed since the last processed scan.
    """

    def __init__(
        self,
        linear_threshold: float = 1.0,
        angular_threshold: float = 0.5,
        period: float = 5.0,
    ) -> None:
        self.linear_threshold = linear_threshold
        self.angular_threshold = angular_threshold
        self.period = period
        self.linear_distance = 0.0
        self.angular_distance = 0.0
        self.count = 0
        self.reading_count = 0
        self.odometry_pose = Pose()
        self.last_processed_pose = Pose()
        self.last_update_time = 0.0

    def _due(self, time: float) -> bool:
        return (
            not self.count
            or self.linear_distance >= self.linear_threshold
            or self.angular_distance >= self.angular_threshold
            or (self.period >= 0.0 and time - self.last_update_time > self.period)
        )

    def update(self, pose: Pose, time: float) -> bool:
        """Account for the odometry ``pose`` read at ``time``.

        Return True when the reading should be processed, in which case the
        accumulated distances are cleared.
        """
        if not self.count:
            self.last_processed_pose = self.odometry_pose = pose

        move = pose - self.odometry_pose
        self.linear_distance += math.hypot(move.x, move.y)
        self.angular_distance += abs(normalize_angle(move.theta))

        if self.linear_distance > DISTANCE_THRESHOLD_CHECK:
            logger.warning(
                "odometry jump: travelled %g exceeds %g (old pose %s, new pose %s)",
                self.linear_distance,
                DISTANCE_THRESHOLD_CHECK,
                self.odometry_pose,
                pose,
            )

        self.odometry_pose = pose

        processed = self._due(time)
        if processed:
            self.last_update_time = time
            self.last_processed_pose = self.odometry_pose
            self.linear_distance = 0.0
            self.angular_distance = 0.0
            self.count += 1
        self.reading_count += 1
        return processed


def best_particle_index(weight_sums: Iterable[float]) -> int:
    """Index of the largest weight sum; the first wins ties, 0 when empty."""
    best = 0
    best_weight = -sys.float_info.max
    for index, weight in enumerate(weight_sums):
        if best_weight < weight:
            best_weight = weight
            best = index
    return best