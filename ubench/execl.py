"""Program re-execution benchmark: each run replaces itself until time is up."""

import os
import sys
import time
from dataclasses import dataclass

from ubench.timing import count_line


def _command():
    bindir = os.environ.get("UB_BINDIR")
    if bindir is not None:
        return [os.path.join(bindir, "execl")]
    return [sys.executable, "-m", "ubench.execl"]


@dataclass(frozen=True)
class ExecState:
    """Where a chain of executions stands."""

    command: list
    duration: int
    dur_str: str
    iteration: int
    start_time: int

    def next_argv(self):
        """Argument vector for the next execution in the chain."""
        return [
            *self.command,
            "0",
            self.dur_str,
            str(self.iteration),
            str(self.start_time),
        ]

    def expired(self, now):
        """True once ``duration`` seconds have passed since the start."""
        return now - self.start_time >= self.duration


def parse_args(argv, now):
    """Build the state for this execution from its arguments.

    A positive first argument starts a new chain at ``now``; a zero first
    argument is followed by the duration, the count so far and the start time.
    """
    if not argv:
        raise ValueError("missing duration")
    duration = int(argv[0])
    command = _command()
    if duration > 0:
        return ExecState(command, duration, argv[0], 1, now)
    if len(argv) < 4:
        raise ValueError("continuation needs duration, count and start time")
    return ExecState(command, int(argv[1]), argv[1], int(argv[2]) + 1, int(argv[3]))


def main(argv=None):
    argv = sys.argv[1:] if argv is None else list(argv)
    try:
        state = parse_args(argv, int(time.time()))
    except ValueError:
        print("Usage: execl duration", file=sys.stderr)
        return 1
    if state.expired(int(time.time())):
        print(count_line(state.iteration, 1, "lps"), file=sys.stderr)
        return 0
    next_argv = state.next_argv()
    sys.stdout.flush()
    sys.stderr.flush()
    try:
        os.execv(next_argv[0], next_argv)
    except OSError as exc:
        print(f"Exec failed at iteration {state.iteration}", file=sys.stderr)
        print(f"Reason: {exc.strerror}", file=sys.stderr)
        return 1
    return 1


if __name__ == "__main__":
    sys.exit(main())