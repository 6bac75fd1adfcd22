"""Repeated command execution benchmark."""

import sys
import subprocess

from ubench.timing import count_line, run_until_alarm

_EXEC_FAILED = 99


class CommandNotExecuted(Exception):
    """The command could not be started."""

    def __init__(self, command):
        super().__init__(f'Command "{command}" didn\'t exec')
        self.command = command


class BadCommandStatus(Exception):
    """The command ended with a non-zero wait status."""

    def __init__(self, status):
        super().__init__(f"Bad wait status: 0x{status:x}")
        self.status = status


def run_command(command):
    """Run ``command`` to completion and return its wait status (0)."""
    command = list(command)
    if not command:
        raise CommandNotExecuted("")
    try:
        completed = subprocess.run(command, check=False)
    except OSError as exc:
        raise CommandNotExecuted(command[0]) from exc
    code = completed.returncode
    if code == _EXEC_FAILED:
        raise CommandNotExecuted(command[0])
    status = code << 8 if code >= 0 else -code
    if status:
        raise BadCommandStatus(status)
    return status


def run_looper(duration, command):
    """Run ``command`` repeatedly for ``duration`` seconds; return the count."""
    command = list(command)
    return run_until_alarm(duration, lambda: run_command(command))


def _usage():
    print("Usage: looper duration command [args..]", file=sys.stderr)
    print("  duration in seconds", file=sys.stderr)
    return 1


def main(argv=None):
    argv = sys.argv[1:] if argv is None else list(argv)
    if not argv:
        return _usage()
    try:
        duration = int(argv[0])
    except ValueError:
        return _usage()
    if duration < 1:
        return _usage()
    try:
        iterations = run_looper(duration, argv[1:])
    except (CommandNotExecuted, BadCommandStatus) as exc:
        print(exc, file=sys.stderr)
        return 2
    print(count_line(iterations, 60, "lpm"), file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())