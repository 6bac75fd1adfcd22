"""Towers of Hanoi recursion benchmark."""

import sys

from ubench.timing import count_line, run_until_alarm

DEFAULT_DISKS = 10


def other_peg(source, target):
    """Return the peg (1-3) that is neither ``source`` nor ``target``."""
    return 6 - (source + target)


class Towers:
    """Disk counts on three pegs, moved recursively."""

    def __init__(self, disks):
        if disks < 1:
            raise ValueError("number of disks must be at least 1")
        self.disks = disks
        self.pegs = [0, disks, 0, 0]
        self.moves = 0

    def move(self, n, source, target):
        """Move ``n`` disks from peg ``source`` to peg ``target``."""
        if n == 1:
            self.pegs[source] -= 1
            self.pegs[target] += 1
            self.moves += 1
            return
        spare = other_peg(source, target)
        self.move(n - 1, source, spare)
        self.move(1, source, target)
        self.move(n - 1, spare, target)

    def solve(self):
        """Move the whole tower from peg 1 to peg 3; return the moves made."""
        before = self.moves
        self.move(self.disks, 1, 3)
        return self.moves - before


def _usage():
    print("Usage: hanoi duration [disks]", file=sys.stderr)
    return 1


def main(argv=None):
    argv = sys.argv[1:] if argv is None else list(argv)
    if not argv:
        return _usage()
    try:
        duration = int(argv[0])
        disks = int(argv[1]) if len(argv) > 1 else DEFAULT_DISKS
        towers = Towers(disks)
        iterations = run_until_alarm(duration, towers.solve)
    except ValueError:
        return _usage()
    print(count_line(iterations, 1, "lps"), file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())