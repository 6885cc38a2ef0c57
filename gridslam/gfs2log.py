"""Command that turns a processor log into a log of the best trajectory."""

from __future__ import annotations

import sys

from .gfsreader import RecordList, _Stream

USAGE = (
    "usage gfs2log [-err] [-neff] [-part] [-odom] <infilename> <outfilename>\n"
    "  -odom : dump raw odometry in ODOM message instead of inpolated corrected one"
)
_FLAGS = ("-err", "-neff", "-part", "-odom")


def main(argv: list[str] | None = None) -> int:
    """Run the command; return the exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 2:
        print(USAGE)
        return -1

    flags = set()
    position = 0
    for flag in _FLAGS:
        if position < len(args) and args[position] == flag:
            flags.add(flag)
            position += 1

    if position >= len(args):
        print("could read file ")
        return -1
    try:
        with open(args[position], encoding="latin-1") as handle:
            records = RecordList().read(handle)
    except OSError:
        print("could read file ")
        return -1
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
        handle = open(args[position], "w", encoding="latin-1")
    except OSError:
        print("could write file ")
        return -1
    with handle:
        out = _Stream(handle)
        records.print_path(out, best, err="-err" in flags, raw_odom="-odom" in flags)
        if "-part" in flags:
            records.print_last_particles(out)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())