"""Reading and rewriting the text logs written by the grid SLAM processor."""

from __future__ import annotations

import copy
import dataclasses
import math
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Iterable, TextIO, TypeVar

from .geometry import Pose, absolute_difference, normalize_angle

_T = TypeVar("_T", int, float)

_S300_HEADER = " 4 -2.351831 4.712389 0.008727 30.0"
_PLS_HEADER = " 0 -1.570796 3.141593 0.017453 81.9"
_LMS_HEADER = " 0 -1.570796 3.141593 0.008726 81.9"
_LASER_HEADERS = {
    540: _S300_HEADER,
    541: _S300_HEADER,
    180: _PLS_HEADER,
    181: _PLS_HEADER,
    360: _LMS_HEADER,
    361: _LMS_HEADER,
}
_URG_BEAMS = (682, 683)
_URG_RESOLUTION = 360.0 / 1024.0 / 180.0 * math.pi


def _general(value: float) -> str:
    return f"{value:g}"


def _divide(numerator: float, denominator: float) -> float:
    if denominator:
        return numerator / denominator
    if numerator == 0 or math.isnan(numerator):
        return math.nan
    return math.copysign(math.inf, numerator)


class _Stream:
    """Text sink that remembers whether floats are written in fixed notation."""

    def __init__(self, out: TextIO) -> None:
        self._out = out
        self.precision: int | None = None

    def write(self, text: str) -> None:
        self._out.write(text)

    def fixed(self, precision: int) -> None:
        self.precision = precision

    def num(self, value: float) -> str:
        if self.precision is None:
            return _general(value)
        return f"{value:.{self.precision}f}"


def _stream(out: TextIO | _Stream) -> _Stream:
    return out if isinstance(out, _Stream) else _Stream(out)


class _Tokens:
    """Sequential numeric reader over whitespace-separated fields.

    As with a formatted input stream, a failed conversion yields zero and
    makes every later read fail too.
    """

    def __init__(self, tokens: Iterable[str]) -> None:
        self._tokens = iter(tokens)
        self.ok = True

    def _take(self, convert: Callable[[str], _T]) -> _T:
        if self.ok:
            token = next(self._tokens, None)
            if token is not None:
                try:
                    return convert(token)
                except ValueError:
                    pass
            self.ok = False
        return convert("0")

    def number(self) -> float:
        return self._take(float)

    def integer(self) -> int:
        return self._take(int)

    def pose(self) -> Pose:
        x = self.number()
        y = self.number()
        theta = self.number()
        return Pose(x, y, theta)


@dataclass
class Record(ABC):
    """One line of a processor log."""

    dim: int = 0
    time: float = 0.0

    @abstractmethod
    def read(self, tokens: Iterable[str]) -> None:
        """Fill the record from the fields that follow its type tag."""

    def write(self, out: TextIO) -> None:
        """Write the record in log form; records without one write nothing."""


@dataclass
class CommentRecord(Record):
    text: str = ""

    def read(self, tokens: Iterable[str]) -> None:
        self.text = " ".join(tokens)

    def write(self, out: TextIO) -> None:
        _stream(out).write(f"#GFS_COMMENT: {self.text}\n")


@dataclass
class PoseRecord(Record):
    true_pos: bool = False
    pose: Pose = field(default_factory=Pose)

    def read(self, tokens: Iterable[str]) -> None:
        stream = _Tokens(tokens)
        self.pose = stream.pose()
        self.time = stream.number()

    def write(self, out: TextIO) -> None:
        s = _stream(out)
        s.write("TRUEPOS " if self.true_pos else "ODOM ")
        s.fixed(6)
        p = self.pose
        s.write(
            f"{s.num(p.x)} {s.num(p.y)} {s.num(p.theta)} 0 0 0 "
            f"{s.num(self.time)} pippo {s.num(self.time)}\n"
        )


@dataclass
class NeffRecord(Record):
    neff: float = 0.0

    def read(self, tokens: Iterable[str]) -> None:
        stream = _Tokens(tokens)
        self.neff = stream.number()
        self.time = stream.number()

    def write(self, out: TextIO) -> None:
        s = _stream(out)
        s.write(f"NEFF {s.num(self.neff)}")
        s.fixed(6)
        s.write(f" {s.num(self.time)} pippo {s.num(self.time)}\n")


@dataclass
class OdometryRecord(Record):
    poses: list[Pose] = field(default_factory=list)

    def read(self, tokens: Iterable[str]) -> None:
        stream = _Tokens(tokens)
        self.dim = stream.integer()
        self.poses = []
        for _ in range(self.dim):
            self.poses.append(stream.pose())
            stream.number()
        self.time = stream.number()


@dataclass
class RawOdometryRecord(Record):
    pose: Pose = field(default_factory=Pose)

    def read(self, tokens: Iterable[str]) -> None:
        stream = _Tokens(tokens)
        self.pose = stream.pose()
        if not stream.ok:
            raise ValueError("truncated ODOM record")
        self.time = stream.number()


@dataclass
class EntropyRecord(Record):
    pose_entropy: float = 0.0
    trajectory_entropy: float = 0.0
    map_entropy: float = 0.0

    def read(self, tokens: Iterable[str]) -> None:
        stream = _Tokens(tokens)
        self.pose_entropy = stream.number()
        self.trajectory_entropy = stream.number()
        self.map_entropy = stream.number()
        self.time = stream.number()

    def write(self, out: TextIO) -> None:
        s = _stream(out)
        s.fixed(6)
        s.write(
            f"ENTROPY {s.num(self.pose_entropy)} {s.num(self.trajectory_entropy)} "
            f"{s.num(self.map_entropy)} {s.num(self.time)} pippo {s.num(self.time)}\n"
        )


@dataclass
class ScanMatchRecord(Record):
    poses: list[Pose] = field(default_factory=list)
    weights: list[float] = field(default_factory=list)

    def read(self, tokens: Iterable[str]) -> None:
        stream = _Tokens(tokens)
        self.dim = stream.integer()
        self.poses = []
        self.weights = []
        for _ in range(self.dim):
            self.poses.append(stream.pose())
            self.weights.append(stream.number())


@dataclass
class LaserRecord(Record):
    readings: list[float] = field(default_factory=list)
    pose: Pose = field(default_factory=Pose)
    weight: float = 0.0

    def read(self, tokens: Iterable[str]) -> None:
        stream = _Tokens(tokens)
        self.dim = stream.integer()
        self.readings = [stream.number() for _ in range(self.dim)]
        self.pose = stream.pose()
        self.time = stream.number()

    def write(self, out: TextIO) -> None:
        s = _stream(out)
        s.write(f"WEIGHT {s.num(self.weight)}\n")
        s.write("ROBOTLASER1 ")
        if self.dim in _URG_BEAMS:
            header = f" 0 -2.094395 4.1887902 {s.num(_URG_RESOLUTION)} 5.5"
        else:
            header = _LASER_HEADERS.get(self.dim, _PLS_HEADER)
        s.write(f"{header} 0.01 0 {self.dim}")
        s.fixed(2)
        s.write("".join(f" {s.num(r)}" for r in self.readings[: self.dim]))
        s.fixed(6)
        p = self.pose
        position = f" {s.num(p.x)} {s.num(p.y)} {s.num(p.theta)}"
        s.write(f" 0{position}{position} 0 0 0.55 0.375 1000000.0")
        s.write(f" {s.num(self.time)} localhost {s.num(self.time)}\n")


@dataclass
class ResampleRecord(Record):
    indexes: list[int] = field(default_factory=list)

    def read(self, tokens: Iterable[str]) -> None:
        stream = _Tokens(tokens)
        self.dim = stream.integer()
        self.indexes = [stream.integer() for _ in range(self.dim)]


_RECORD_TYPES: dict[str, Callable[[], Record]] = {
    "LASER_READING": LaserRecord,
    "ODO_UPDATE": OdometryRecord,
    "ODOM": RawOdometryRecord,
    "SM_UPDATE": ScanMatchRecord,
    "SIMULATOR_POS": lambda: PoseRecord(true_pos=True),
    "RESAMPLE": ResampleRecord,
    "NEFF": NeffRecord,
    "COMMENT": CommentRecord,
    "#COMMENT": CommentRecord,
    "ENTROPY": EntropyRecord,
}


def parse_record(line: str) -> Record | None:
    """Parse one log line; lines of unknown type give None."""
    tokens = line.split()
    if not tokens:
        return None
    factory = _RECORD_TYPES.get(tokens[0])
    if factory is None:
        return None
    record = factory()
    record.read(tokens[1:])
    return record


class RecordList(list):
    """The records of a log, in file order."""

    def __init__(self, records: Iterable[Record] = ()) -> None:
        super().__init__(records)
        self.sample_size = 0

    def read(self, stream: Iterable[str]) -> RecordList:
        """Append every recognised record from the lines of ``stream``."""
        for line in stream:
            record = parse_record(line)
            if record is not None:
                self.append(record)
        return self

    def _before(self, frame: int | None) -> list[Record]:
        return list(self) if frame is None else list(self)[:frame]

    def _last_scan_match(self) -> ScanMatchRecord | None:
        return next((r for r in reversed(self) if isinstance(r, ScanMatchRecord)), None)

    def log_weight(self, index: int, frame: int | None = None) -> float:
        """Accumulated log weight of particle ``index``, following its ancestry
        back from just before position ``frame`` (the end by default)."""
        weight = 0.0
        current = index
        for record in reversed(self._before(frame)):
            if isinstance(record, ScanMatchRecord):
                weight += record.weights[current]
            elif isinstance(record, ResampleRecord):
                current = record.indexes[current]
        return weight

    def best_index(self) -> int:
        """Index of the particle with the highest accumulated log weight."""
        if not self:
            return 0
        scan_match = self._last_scan_match()
        if scan_match is None:
            raise ValueError("log holds no scan-match record")
        self.sample_size = scan_match.dim
        best_weight = -sys.float_info.max
        best = scan_match.dim + 1
        for i in range(scan_match.dim):
            weight = self.log_weight(i)
            if weight > best_weight:
                best, best_weight = i, weight
        return best

    def print_last_particles(self, out: TextIO) -> None:
        """Write a marker for each particle of the last scan match."""
        scan_match = self._last_scan_match()
        if scan_match is None:
            return
        s = _stream(out)
        for pose in scan_match.poses:
            s.write(
                f"MARKER [color=black; circle={s.num(pose.x * 100)},"
                f"{s.num(pose.y * 100)},10] 0 pippo 0\n"
            )

    def compute_path(self, index: int, frame: int | None = None) -> RecordList:
        """Laser records before ``frame`` placed at the poses of particle
        ``index``'s trajectory."""
        current = index
        pose = Pose()
        first = True
        path: list[Record] = []
        for record in reversed(self._before(frame)):
            if isinstance(record, ScanMatchRecord):
                pose = record.poses[current]
                first = False
            elif isinstance(record, LaserRecord) and not first:
                path.append(dataclasses.replace(record, pose=pose))
            elif isinstance(record, ResampleRecord):
                current = record.indexes[current]
        path.reverse()
        return RecordList(path)

    def _trajectory(self, index: int, raw_odom: bool) -> list[Record]:
        current = index
        pose = Pose()
        old_weight = 0.0
        weight = 0.0
        collected: list[Record] = []
        for record in reversed(self):
            if isinstance(record, (NeffRecord, EntropyRecord, PoseRecord, CommentRecord)):
                collected.append(copy.copy(record))
            elif isinstance(record, ScanMatchRecord):
                pose = record.poses[current]
                weight = record.weights[current] - old_weight
                old_weight = record.weights[current]
                if not raw_odom:
                    collected.append(PoseRecord(pose=pose))
            elif isinstance(record, OdometryRecord):
                pose = record.poses[current]
                if not raw_odom:
                    collected.append(PoseRecord(pose=pose, time=record.time))
            elif isinstance(record, RawOdometryRecord):
                if raw_odom:
                    collected.append(PoseRecord(pose=record.pose, time=record.time))
            elif isinstance(record, LaserRecord):
                collected.append(dataclasses.replace(record, pose=pose, weight=weight))
            elif isinstance(record, ResampleRecord):
                collected.append(copy.copy(record))
                current = record.indexes[current]
        collected.reverse()
        return collected

    def print_path(
        self, out: TextIO, index: int, err: bool = False, raw_odom: bool = False
    ) -> None:
        """Write the trajectory of particle ``index`` as a log.

        With ``err`` only the comparison against true poses is written, and the
        average error goes to standard output.
        """
        s = _stream(out)
        started = computed = true_pos_found = pending_truth = False
        true_pose = true_start = real_start = Pose()
        neff = 0.0
        total_error = 0.0
        count = 0
        for record in self._trajectory(index, raw_odom):
            if isinstance(record, NeffRecord):
                neff = _divide(record.neff, self.sample_size)
            started = started or isinstance(record, LaserRecord)
            is_pose = isinstance(record, PoseRecord)
            if started and not true_pos_found and is_pose and record.true_pos:
                true_pos_found = pending_truth = True
                true_pose = record.pose
                s.write("# ")
                record.write(s)
            if started and true_pos_found and not computed and is_pose and not record.true_pos:
                true_start = true_pose
                real_start = record.pose
                s.write("# ")
                record.write(s)
                computed = True
            if computed:
                s.fixed(6)
                if is_pose:
                    if record.true_pos:
                        pending_truth = True
                        true_pose = record.pose
                    elif pending_truth:
                        pending_truth = False
                        real_delta = absolute_difference(record.pose, real_start)
                        true_delta = absolute_difference(true_pose, true_start)
                        ex = real_delta.x - true_delta.x
                        ey = real_delta.y - true_delta.y
                        eth = normalize_angle(real_delta.theta - true_delta.theta)
                        distance = math.sqrt(ex * ex + ey * ey)
                        if not err:
                            s.write("# ERROR ")
                        s.write(
                            " ".join(s.num(v) for v in (neff, ex, ey, eth, distance, abs(eth)))
                            + "\n"
                        )
                        total_error += distance
                        count += 1
            if not err:
                record.write(s)
        if err:
            print(f"average error{_general(_divide(total_error, count))}")