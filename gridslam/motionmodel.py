"""Odometry motion model with Gaussian noise."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field

from .geometry import Pose, absolute_difference, absolute_sum, normalize_angle

LINEAR_CONDITIONING_COVARIANCE = 0.01
ANGULAR_CONDITIONING_COVARIANCE = 0.001


@dataclass(frozen=True)
class Covariance3:
    """Symmetric 3x3 covariance over (x, y, theta)."""

    xx: float = 0.0
    yy: float = 0.0
    tt: float = 0.0
    xy: float = 0.0
    xt: float = 0.0
    yt: float = 0.0


@dataclass
class MotionModel:
    """Noise parameters of the odometry model and the samplers that use them.

    ``srr`` linear noise from translation, ``srt`` angular noise from
    translation, ``str`` linear noise from rotation, ``stt`` angular noise
    from rotation.
    """

    srr: float = 0.1
    srt: float = 0.2
    str: float = 0.1
    stt: float = 0.2
    rng: random.Random = field(default_factory=random.Random, repr=False, compare=False)

    def _sample(self, sigma: float) -> float:
        if sigma == 0:
            return 0.0
        return self.rng.gauss(0.0, sigma)

    def draw_from_motion(self, p: Pose, linear_move: float, angular_move: float) -> Pose:
        """Sample a pose after moving ``linear_move`` and turning ``angular_move``."""
        lin, ang = abs(linear_move), abs(angular_move)
        lm = linear_move + lin * self._sample(self.srr) + ang * self._sample(self.str)
        am = angular_move + lin * self._sample(self.srt) + ang * self._sample(self.stt)
        heading = p.theta + 0.5 * am
        return Pose(
            p.x + lm * math.cos(heading),
            p.y + lm * math.sin(heading),
            normalize_angle(p.theta + am),
        )

    def draw_from_motion_between(self, p: Pose, pnew: Pose, pold: Pose) -> Pose:
        """Sample a new pose for ``p`` given odometry moving from ``pold`` to ``pnew``."""
        sxy = 0.3 * self.srr
        delta = absolute_difference(pnew, pold)
        dx, dy, dt = abs(delta.x), abs(delta.y), abs(delta.theta)
        x = delta.x + self._sample(self.srr * dx + self.str * dt + sxy * dy)
        y = delta.y + self._sample(self.srr * dy + self.str * dt + sxy * dx)
        theta = delta.theta + self._sample(
            self.stt * dt + self.srt * math.sqrt(delta.x * delta.x + delta.y * delta.y)
        )
        theta = math.fmod(theta, 2 * math.pi)
        if theta > math.pi:
            theta -= 2 * math.pi
        return absolute_sum(p, Pose(x, y, theta))

    def gaussian_approximation(self, pnew: Pose, pold: Pose) -> Covariance3:
        """Approximate the covariance of the motion from ``pold`` to ``pnew``."""
        delta = absolute_difference(pnew, pold)
        linear_move = math.sqrt(delta.x * delta.x + delta.y * delta.y)
        angular_move = abs(delta.x)
        s11 = self.srr * self.srr * linear_move * linear_move
        s22 = self.stt * self.stt * angular_move * angular_move
        s12 = self.str * angular_move * self.srt * linear_move
        s, c = math.sin(pold.theta), math.cos(pold.theta)
        return Covariance3(
            xx=c * c * s11 + LINEAR_CONDITIONING_COVARIANCE,
            yy=s * s * s11 + LINEAR_CONDITIONING_COVARIANCE,
            tt=s22 + ANGULAR_CONDITIONING_COVARIANCE,
            xy=s * c * s11,
            xt=c * s12,
            yt=s * s12,
        )