"""System call overhead benchmark."""

import enum
import os
import subprocess
import sys

from ubench.timing import count_line, run_until_alarm

DEFAULT_DURATION = 10
TRUE_PROGRAM = "/bin/true"


class SyscallTest(enum.Enum):
    """The kinds of system call loop."""

    MIX = "mix"
    CLOSE = "close"
    GETPID = "getpid"
    EXEC = "exec"


def _select(test):
    if isinstance(test, SyscallTest):
        return test
    for member in SyscallTest:
        if test[:1] == member.value[0]:
            return member
    raise ValueError(f"unknown test {test!r}")


def create_fd():
    """Return the read end of a pipe whose write end is closed."""
    read_fd, write_fd = os.pipe()
    os.close(write_fd)
    return read_fd


def syscall_step(test, fd):
    """Perform one iteration of the given test."""
    test = _select(test)
    if test is SyscallTest.MIX:
        os.close(os.dup(fd))
        os.getpid()
        os.getuid()
        os.umask(0o022)
    elif test is SyscallTest.CLOSE:
        os.close(os.dup(fd))
    elif test is SyscallTest.GETPID:
        os.getpid()
    else:
        subprocess.run([TRUE_PROGRAM], check=False)


def run_syscall_test(duration, test):
    """Run the test loop for ``duration`` seconds; return the count."""
    test = _select(test)
    fd = create_fd() if test in (SyscallTest.MIX, SyscallTest.CLOSE) else -1
    try:
        return run_until_alarm(duration, lambda: syscall_step(test, fd))
    finally:
        if fd >= 0:
            os.close(fd)


def _usage():
    print("Usage: syscall duration [ test ]", file=sys.stderr)
    print("test is one of:", file=sys.stderr)
    print('  "mix" (default), "close", "getpid", "exec"', file=sys.stderr)
    return 1


def main(argv=None):
    argv = sys.argv[1:] if argv is None else list(argv)
    print("exec syscall test")
    try:
        duration = int(argv[0]) if argv else DEFAULT_DURATION
    except ValueError:
        return _usage()
    try:
        test = _select(argv[1] if len(argv) > 1 else SyscallTest.MIX.value)
    except ValueError:
        return 9
    try:
        iterations = run_syscall_test(duration, test)
    except ValueError:
        return _usage()
    except OSError as exc:
        print(f"syscall: {exc}", file=sys.stderr)
        return 1
    print(count_line(iterations, 1, "lps"), file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())