"""Process creation benchmark."""

import os
import sys

from ubench.timing import count_line, run_until_alarm


class BadWaitStatus(Exception):
    """A child process ended with a non-zero wait status."""

    def __init__(self, status):
        super().__init__(f"Bad wait status: 0x{status:x}")
        self.status = status


def spawn_once():
    """Fork a child that exits at once, wait for it, and return its pid."""
    pid = os.fork()
    if pid == 0:
        os._exit(0)
    _, status = os.waitpid(pid, 0)
    if status != 0:
        raise BadWaitStatus(status)
    return pid


def run_spawn_test(duration):
    """Fork and reap children for ``duration`` seconds; return the count."""
    return run_until_alarm(duration, spawn_once)


def _usage():
    print("Usage: spawn duration", file=sys.stderr)
    return 1


def main(argv=None):
    argv = sys.argv[1:] if argv is None else list(argv)
    if len(argv) != 1:
        return _usage()
    try:
        iterations = run_spawn_test(int(argv[0]))
    except ValueError:
        return _usage()
    except BadWaitStatus as exc:
        print(exc, file=sys.stderr)
        return 2
    except OSError as exc:
        print(
            f"Fork failed at iteration {getattr(exc, 'iterations', 0)}",
            file=sys.stderr,
        )
        print(f"Reason: {exc.strerror}", file=sys.stderr)
        return 2
    print(count_line(iterations, 1, "lps"), file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())