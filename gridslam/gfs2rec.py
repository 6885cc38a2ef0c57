"""Command that turns a processor log into a recorder-style log of the best trajectory."""

from __future__ import annotations

import copy
import dataclasses
import math
import sys
from typing import Callable, Iterable, TextIO

from .geometry import Pose, normalize_angle
from .gfsreader import (
    CommentRecord,
    LaserRecord,
    NeffRecord,
    OdometryRecord,
    PoseRecord,
    Record,
    ResampleRecord,
    ScanMatchRecord,
    _divide,
    _general,
    _Tokens,
)

USAGE = "usage gfs2rec [-err] <infilename> <outfilename>"


def _position(pose: Pose) -> str:
    return (
        f"{_general(pose.x * 100)} {_general(pose.y * 100)} "
        f"{_general(180 / math.pi * pose.theta)}"
    )


class _LegacyPoseRecord(PoseRecord):
    def write(self, out: TextIO) -> None:
        out.write("POS-CORR" if self.true_pos else "POS ")
        out.write(f"0 0: {_position(self.pose)}\n")


class _LegacyNeffRecord(NeffRecord):
    def read(self, tokens: Iterable[str]) -> None:
        self.neff = _Tokens(tokens).number()

    def write(self, out: TextIO) -> None:
        out.write(f"NEFF {_general(self.neff)}\n")


class _LegacyLaserRecord(LaserRecord):
    def write(self, out: TextIO) -> None:
        out.write(f"POS 0 0: {_position(self.pose)}\n")
        readings = "".join(f" {_general(r * 100)}" for r in self.readings[: self.dim])
        out.write(f"LASER-RANGE  0 0 0 {self.dim} 180. : {readings}\n")


_RECORD_TYPES: dict[str, tuple[Callable[[], Record], str]] = {
    "LASER_READING": (_LegacyLaserRecord, "l"),
    "ODO_UPDATE": (OdometryRecord, "o"),
    "SM_UPDATE": (ScanMatchRecord, "m"),
    "SIMULATOR_POS": (lambda: _LegacyPoseRecord(true_pos=True), "t"),
    "RESAMPLE": (ResampleRecord, "r"),
    "NEFF": (_LegacyNeffRecord, "n"),
}


def _parse(line: str) -> tuple[Record, str] | None:
    text = line.rstrip("\n")
    tokens = text.split()
    if not tokens:
        return None
    tag = tokens[0]
    if tag == "COMMENT":
        return CommentRecord(text=text.lstrip()[len(tag):]), "c"
    entry = _RECORD_TYPES.get(tag)
    if entry is None:
        return None
    factory, mark = entry
    record = factory()
    record.read(tokens[1:])
    return record, mark


class LegacyRecordList(list):
    """The records of a log, read and rewritten in the older recorder format."""

    def __init__(self, records: Iterable[Record] = ()) -> None:
        super().__init__(records)
        self.sample_size = 0

    def read(self, stream: Iterable[str]) -> LegacyRecordList:
        """Append every recognised record, echoing a progress mark per record."""
        for line in stream:
            parsed = _parse(line)
            if parsed is None:
                continue
            record, mark = parsed
            sys.stdout.write(mark)
            sys.stdout.flush()
            self.append(record)
        return self

    def log_weight(self, index: int) -> float:
        """Accumulated log weight of particle ``index`` along its ancestry."""
        weight = 0.0
        current = index
        for record in reversed(self):
            if isinstance(record, ScanMatchRecord):
                weight += record.weights[current]
            elif isinstance(record, ResampleRecord):
                current = record.indexes[current]
        return weight

    def best_index(self) -> int:
        """Index of the particle with the highest accumulated log weight."""
        if not self:
            return 0
        scan_match = next((r for r in reversed(self) if isinstance(r, ScanMatchRecord)), None)
        if scan_match is None:
            raise ValueError("log holds no scan-match record")
        self.sample_size = scan_match.dim
        best_weight = -1e200
        best = scan_match.dim + 1
        for i in range(scan_match.dim):
            weight = self.log_weight(i)
            if weight > best_weight:
                best, best_weight = i, weight
        return best

    def _trajectory(self, index: int) -> list[Record]:
        current = index
        pose = Pose()
        collected: list[Record] = []
        for record in reversed(self):
            if isinstance(record, (NeffRecord, PoseRecord, CommentRecord)):
                collected.append(copy.copy(record))
            elif isinstance(record, ScanMatchRecord):
                pose = record.poses[current]
                collected.append(_LegacyPoseRecord(pose=pose))
            elif isinstance(record, OdometryRecord):
                pose = record.poses[current]
                collected.append(_LegacyPoseRecord(pose=pose, time=record.time))
            elif isinstance(record, LaserRecord):
                collected.append(dataclasses.replace(record, pose=pose))
            elif isinstance(record, ResampleRecord):
                current = record.indexes[current]
                collected.append(copy.copy(record))
        collected.reverse()
        return collected

    def print_path(self, out: TextIO, index: int, err: bool = False) -> None:
        """Write the trajectory of particle ``index``.

        With ``err`` only the comparison against true poses is written.
        """
        started = computed = true_pos_found = pending_truth = False
        ox = oy = rxx = rxy = ryx = ryy = rth = 0.0
        true_pose = Pose()
        current_pose = Pose()
        neff = 0.0
        count = 0
        for record in self._trajectory(index):
            if isinstance(record, NeffRecord):
                neff = _divide(record.neff, self.sample_size)
            started = started or isinstance(record, LaserRecord)
            is_pose = isinstance(record, PoseRecord)
            if started and not true_pos_found and is_pose and record.true_pos:
                true_pos_found = pending_truth = True
                true_pose = record.pose
                out.write("# ")
                record.write(out)
            if started and true_pos_found and not computed and is_pose and not record.true_pos:
                pose = record.pose
                rth = true_pose.theta - pose.theta
                s, c = math.sin(rth), math.cos(rth)
                rxx = ryy = c
                rxy, ryx = -s, s
                ox = true_pose.x - (rxx * pose.x + rxy * pose.y)
                oy = true_pose.y - (ryx * pose.x + ryy * pose.y)
                computed = True
                out.write("# ")
                record.write(out)
            if isinstance(record, ResampleRecord):
                out.write(
                    f"MARK-POS 0 0: {_general(current_pose.x * 100)} "
                    f"{_general(current_pose.y * 100)} 0 {count}\n"
                )
                count += 1
            if computed and is_pose:
                if record.true_pos:
                    pending_truth = True
                    true_pose = record.pose
                elif pending_truth:
                    pending_truth = False
                    pose = record.pose
                    ex = true_pose.x - (ox + rxx * pose.x + rxy * pose.y)
                    ey = true_pose.y - (oy + ryx * pose.x + ryy * pose.y)
                    eth = normalize_angle(true_pose.theta - pose.theta - rth)
                    if not err:
                        out.write("# ERROR ")
                    values = (neff, ex, ey, eth, math.sqrt(ex * ex + ey * ey), abs(eth))
                    out.write(" ".join(_general(v) for v in values) + "\n")
            if is_pose:
                current_pose = record.pose
            if not err:
                record.write(out)


def main(argv: list[str] | None = None) -> int:
    """Run the command; return the exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 2:
        print(USAGE)
        return -1

    err = False
    position = 0
    if args[position] == "-err":
        err = True
        position += 1
    if position < len(args) and args[position] == "-neff":
        position += 1

    if position >= len(args):
        print("could read file ")
        return -1
    try:
        handle = open(args[position], encoding="latin-1")
    except OSError:
        print("could read file ")
        return -1
    with handle:
        records = LegacyRecordList().read(handle)
    position += 1

    try:
        best = records.best_index()
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return -1
    print(f"\nbest index = {best}")

    if position >= len(args):
        print("could write file ")
        return -1
    try:
        target = open(args[position], "w", encoding="latin-1")
    except OSError:
        print("could write file ")
        return -1
    with target:
        records.print_path(target, best, err=err)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())