"""Single-process pipe throughput benchmark."""

import os
import sys

from ubench.timing import count_line, run_until_alarm

BLOCK_SIZE = 512


def pipe_round_trip(read_fd, write_fd, buf):
    """Write ``buf`` into the pipe and read the same amount back."""
    written = os.write(write_fd, buf)
    if written != len(buf):
        print(f"write failed, wrote {written} of {len(buf)}", file=sys.stderr)
    data = os.read(read_fd, len(buf))
    if len(data) != len(buf):
        print(f"read failed, read {len(data)} of {len(buf)}", file=sys.stderr)
    return data


def run_pipe_test(duration):
    """Run pipe round trips for ``duration`` seconds; return the count."""
    read_fd, write_fd = os.pipe()
    buf = bytes(BLOCK_SIZE)
    try:
        return run_until_alarm(
            duration, lambda: pipe_round_trip(read_fd, write_fd, buf)
        )
    finally:
        os.close(read_fd)
        os.close(write_fd)


def _usage():
    print("Usage: pipe duration", file=sys.stderr)
    return 1


def main(argv=None):
    argv = sys.argv[1:] if argv is None else list(argv)
    if len(argv) != 1:
        return _usage()
    try:
        iterations = run_pipe_test(int(argv[0]))
    except ValueError:
        return _usage()
    print(count_line(iterations, 1, "lps"), file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())