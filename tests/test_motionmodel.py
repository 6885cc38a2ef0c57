import math
import random
import statistics

import pytest

from gridslam.geometry import Pose, normalize_angle
from gridslam.motionmodel import Covariance3, MotionModel


def _noiseless() -> MotionModel:
    return MotionModel(srr=0.0, srt=0.0, str=0.0, stt=0.0)


def test_draw_from_motion_without_noise_moves_straight():
    result = _noiseless().draw_from_motion(Pose(0.0, 0.0, 0.0), 1.0, 0.0)
    assert result.x == pytest.approx(1.0)
    assert result.y == pytest.approx(0.0)
    assert result.theta == pytest.approx(0.0)


def test_draw_from_motion_keeps_heading_normalized():
    model = MotionModel(rng=random.Random(3))
    for _ in range(200):
        result = model.draw_from_motion(Pose(0.0, 0.0, 3.0), 0.5, 1.0)
        assert -math.pi <= result.theta <= math.pi


def test_between_without_noise_replays_odometry_in_particle_frame():
    model = _noiseless()
    pold = Pose(2.0, 3.0, math.pi / 2)
    pnew = Pose(2.0, 4.0, math.pi / 2)
    result = model.draw_from_motion_between(Pose(0.0, 0.0, 0.0), pnew, pold)
    assert result.x == pytest.approx(1.0)
    assert result.y == pytest.approx(0.0, abs=1e-12)
    assert result.theta == pytest.approx(0.0, abs=1e-12)


def test_between_zero_motion_has_no_noise():
    model = MotionModel(srr=0.5, srt=0.5, str=0.5, stt=0.5, rng=random.Random(7))
    p = Pose(1.0, -1.0, 0.4)
    odom = Pose(5.0, 5.0, 1.0)
    result = model.draw_from_motion_between(p, odom, odom)
    assert result.x == pytest.approx(p.x)
    assert result.y == pytest.approx(p.y)
    assert normalize_angle(result.theta - p.theta) == pytest.approx(0.0)


def test_same_seed_gives_same_samples():
    a = MotionModel(rng=random.Random(42))
    b = MotionModel(rng=random.Random(42))
    pold, pnew = Pose(0.0, 0.0, 0.0), Pose(1.0, 0.5, 0.3)
    samples_a = [a.draw_from_motion_between(Pose(), pnew, pold) for _ in range(5)]
    samples_b = [b.draw_from_motion_between(Pose(), pnew, pold) for _ in range(5)]
    assert samples_a == samples_b


def test_noisy_samples_are_centred_on_odometry():
    model = MotionModel(srr=0.1, srt=0.1, str=0.1, stt=0.1, rng=random.Random(11))
    pold, pnew = Pose(0.0, 0.0, 0.0), Pose(1.0, 0.0, 0.0)
    xs = [model.draw_from_motion_between(Pose(), pnew, pold).x for _ in range(2000)]
    assert statistics.mean(xs) == pytest.approx(1.0, abs=0.02)
    assert statistics.pstdev(xs) > 0.0


def test_gaussian_approximation_of_no_motion_is_conditioning_only():
    cov = MotionModel().gaussian_approximation(Pose(1.0, 1.0, 0.2), Pose(1.0, 1.0, 0.2))
    assert cov == Covariance3(xx=0.01, yy=0.01, tt=0.001, xy=0.0, xt=0.0, yt=0.0)


def test_gaussian_approximation_heading_zero_has_no_y_spread():
    model = MotionModel(srr=0.2, srt=0.1, str=0.1, stt=0.3)
    cov = model.gaussian_approximation(Pose(2.0, 0.0, 0.0), Pose(0.0, 0.0, 0.0))
    assert cov.yy == pytest.approx(0.01)
    assert cov.xy == pytest.approx(0.0)
    assert cov.yt == pytest.approx(0.0)
    assert cov.xx > 0.01
    assert cov.tt > 0.001