"""Command that extracts the effective sample size of each frame from a log."""

from __future__ import annotations

import sys
from typing import Callable, Iterable, Iterator, TypeVar

_T = TypeVar("_T", int, float)

USAGE = "usage gfs2neff <infilename> <nefffilename>"


def _first(tokens: list[str], convert: Callable[[str], _T]) -> _T:
    if tokens:
        try:
            return convert(tokens[0])
        except ValueError:
            pass
    return convert("0")


def extract_neff(lines: Iterable[str]) -> Iterator[tuple[int, float]]:
    """Yield ``(frame, neff)`` for every NEFF line, tagged with the last FRAME."""
    frame = 0
    for line in lines:
        tokens = line.split()
        if not tokens:
            continue
        kind, rest = tokens[0], tokens[1:]
        if kind == "FRAME":
            frame = _first(rest, int)
        elif kind == "NEFF":
            yield frame, _first(rest, float)


def main(argv: list[str] | None = None) -> int:
    """Run the command; return the exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 2:
        print(USAGE)
        return -1
    try:
        source = open(args[0], encoding="latin-1")
    except OSError:
        print("could read file ")
        return -1
    with source:
        try:
            target = open(args[1], "w", encoding="latin-1")
        except OSError:
            print("could write file ")
            return -1
        with target:
            for frame, neff in extract_neff(source):
                target.write(f"{frame} {neff:g}\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())