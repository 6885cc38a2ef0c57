# gridslam

Building blocks for grid-based particle-filter SLAM, and command-line tools
for the text logs (GFS logs) that a grid SLAM processor writes while it runs.

The package has no dependencies outside the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `gridslam.geometry`: the frozen `Pose` dataclass (`x`, `y`, `theta`) with
  `+`, `-`, scalar `*`, `dot` and `norm`; `normalize_angle` wraps an angle
  into [-pi, pi]; `absolute_difference(p1, p2)` expresses `p1` in the frame
  of `p2`, and `absolute_sum(p1, p2)` composes `p2` onto `p1`.
- `gridslam.motionmodel`: `MotionModel` holds the noise parameters `srr`,
  `srt`, `str`, `stt` (defaults 0.1, 0.2, 0.1, 0.2) and a `random.Random`
  in `rng`. `draw_from_motion(p, linear_move, angular_move)` and
  `draw_from_motion_between(p, pnew, pold)` sample noisy poses;
  `gaussian_approximation(pnew, pold)` returns a `Covariance3`.
- `gridslam.gfsreader`: the record types of a GFS log (`LaserRecord`,
  `OdometryRecord`, `RawOdometryRecord`, `ScanMatchRecord`, `PoseRecord`,
  `ResampleRecord`, `NeffRecord`, `EntropyRecord`, `CommentRecord`),
  `parse_record(line)`, and `RecordList`, a list of records with
  `read`, `log_weight`, `best_index`, `compute_path`, `print_path` and
  `print_last_particles`.
- `gridslam.gfs2rec`: `LegacyRecordList`, which reads a GFS log and writes
  the best trajectory in the older `POS` / `LASER-RANGE` recording format.
- `gridslam.tree`: `TrajectoryNode`, a node of the trajectory tree shared
  between particles, with `reset_tree`, `propagate_weights` (raises
  `ValueError` when leaf or root weights do not sum to one) and
  `copy_trajectories`, which copies the trees while keeping shared ancestors
  shared.
- `gridslam.update`: `UpdatePolicy(linear_threshold=1.0,
  angular_threshold=0.5, period=5.0)`, whose `update(pose, time)` returns
  True when a scan is due (first reading, distance or angle reached, or more
  than `period` seconds elapsed when `period` is not negative); it logs a
  warning when the accumulated distance exceeds 20. `best_particle_index`
  picks the largest weight sum, the first on ties.
- `gridslam.mapping`: `pose_entropy`, `laser_angles` (centred, increasing beam
  angles), `prepare_ranges` (short readings replaced by the maximum range,
  optionally reversed), `occupancy_value` (-1 unknown, 100 occupied, 0 free;
  default threshold 0.25) and `occupancy_grid` (row-major, cell `(x, y)` at
  index `width * y + x`).

## Command-line tools

Each tool prints its usage and exits with status -1 when given fewer than two
arguments or when a file cannot be opened.

Write the trajectory of the best particle of a GFS log as a log file.
`-err` writes only the error lines against the true poses and prints the
average error; `-part` appends a marker for each particle of the last scan
match; `-odom` writes raw odometry instead of the corrected poses; `-neff` is
accepted and has no effect:

```
gfs2log [-err] [-neff] [-part] [-odom] run.gfs run.log
```

Write the effective sample size of every frame, one `frame neff` pair per line:

```
gfs2neff run.gfs run.neff
```

Write the best trajectory in the older recording format (`-neff` is accepted
and has no effect):

```
gfs2rec [-err] [-neff] run.gfs run.rec
```

`gfs2log` and `gfs2rec` print the chosen particle as `best index = N`.

## Library use

Finding the particle with the highest accumulated weight in a log:

```python
from gridslam.gfsreader import RecordList

with open("run.gfs") as stream:
    records = RecordList().read(stream)

best = records.best_index()
```

Sampling a pose from odometry with a fixed seed:

```python
import random

from gridslam.geometry import Pose
from gridslam.motionmodel import MotionModel

model = MotionModel(srr=0.1, srt=0.2, str=0.1, stt=0.2, rng=random.Random(0))
pose = model.draw_from_motion_between(Pose(), Pose(1.0, 0.0, 0.1), Pose())
```

Turning occupancies into grid values:

```python
from gridslam.mapping import occupancy_grid

data = occupancy_grid([[-1.0, 0.1], [0.9, 0.2]], width=2, height=2)
# [-1, 100, 0, 0]
```

## What the package does not do

It contains no scan matcher and no occupancy map storage, so it does not by
itself build maps from laser scans: it provides the motion model, trajectory
tree, update decision and grid conversion that such a mapper uses. It has no
reader for configuration files and no set of mapper parameters with defaults.