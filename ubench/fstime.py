"""File system throughput benchmark: write, read and copy rates in KBps."""

import enum
import os
import signal
import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass

from ubench.timing import count_line, time_line, wake_me

SECONDS = 10
MAX_BUFSIZE = 8192
COUNTSIZE = 256
HALFCOUNT = COUNTSIZE // 2
MAX_BLOCKS_LIMIT = 1024 * 1024
MAX_SECONDS = 3600
PRIME_SECONDS = 2

USAGE = (
    "Usage: fstime [-c|-r|-w] [-b <bufsize>] [-m <max_blocks>] [-t <seconds>]"
)


class TestKind(enum.Enum):
    """Which throughput test to run."""

    COPY = "c"
    READ = "r"
    WRITE = "w"


@dataclass
class FsTimeConfig:
    """Settings for one benchmark run."""

    test: TestKind = TestKind.COPY
    bufsize: int = 1024
    max_blocks: int = 2000
    seconds: int = SECONDS
    directory: str | None = None
    settle: bool = True

    @property
    def max_buffs(self):
        """Number of buffers that fit in the test file."""
        return self.max_blocks * 1024 // self.bufsize

    @property
    def count_per_k(self):
        """Countable units per 1024 bytes."""
        return 1024 // COUNTSIZE

    @property
    def count_per_buf(self):
        """Countable units per buffer."""
        return self.bufsize // COUNTSIZE

    def validate(self):
        """Raise ValueError if a setting is out of range; return self."""
        if self.bufsize < COUNTSIZE or self.bufsize > MAX_BUFSIZE:
            raise ValueError(
                f"fstime: buffer size must be in range {COUNTSIZE}-{1024 * 1024}"
            )
        if self.max_blocks < 1 or self.max_blocks > MAX_BLOCKS_LIMIT:
            raise ValueError(
                f"fstime: max blocks must be in range 1-{MAX_BLOCKS_LIMIT}"
            )
        if self.seconds < 1 or self.seconds > MAX_SECONDS:
            raise ValueError(
                f"fstime: time must be in range 1-{MAX_SECONDS} seconds"
            )
        return self


def parse_args(argv):
    """Build a configuration from command-line arguments.

    Raises ValueError on an unknown flag, a stray argument or a missing value.
    """
    config = FsTimeConfig()
    args = iter(argv)
    for arg in args:
        if not arg.startswith("-"):
            raise ValueError(USAGE)
        flag = arg[1:2]
        if flag in ("c", "r", "w"):
            config.test = TestKind(flag)
            continue
        if flag not in ("b", "m", "t", "d"):
            raise ValueError(USAGE)
        value = next(args, None)
        if value is None:
            raise ValueError(USAGE)
        if flag == "d":
            config.directory = value
            continue
        try:
            number = int(value)
        except ValueError:
            raise ValueError(USAGE) from None
        if flag == "b":
            config.bufsize = number
        elif flag == "m":
            config.max_blocks = number
        else:
            config.seconds = number
    return config


def partial_credit(nbytes):
    """Count units for a partial transfer of ``nbytes``, rounded to nearest."""
    return (nbytes + HALFCOUNT) // COUNTSIZE


def copy_read_credit(nbytes, read_score, write_score):
    """Part credit for bytes read but not yet written during a copy."""
    return (
        (nbytes * write_score) // (read_score + write_score) + HALFCOUNT
    ) // COUNTSIZE


def copy_write_credit(written, bufsize, read_score, write_score):
    """Credit for a partial copy write: full for written bytes, part for the rest."""
    unwritten = (bufsize - written) * write_score // (read_score + write_score)
    return (written + unwritten + HALFCOUNT) // COUNTSIZE


def compute_score(counted, elapsed, count_per_k):
    """Throughput in KBps from counted units over ``elapsed`` seconds."""
    return int(counted / (elapsed * count_per_k))


class _Flag:
    def __init__(self):
        self.raised = False

    def set(self):
        self.raised = True


@contextmanager
def _alarm(seconds):
    previous = signal.getsignal(signal.SIGALRM)
    flag = _Flag()
    wake_me(seconds, flag.set)
    try:
        yield flag
    finally:
        signal.setitimer(signal.ITIMER_REAL, 0)
        signal.signal(
            signal.SIGALRM, previous if previous is not None else signal.SIG_DFL
        )


class FsTimer:
    """Two scratch files and the write, read and copy tests run on them."""

    def __init__(self, config):
        self.config = config.validate()
        pid = os.getpid()
        directory = config.directory or "."
        self.paths = (
            os.path.join(directory, f"dummy0-{pid}"),
            os.path.join(directory, f"dummy1-{pid}"),
        )
        self.buf = bytes(i & 0xFF for i in range(config.bufsize))
        self.read_score = 1
        self.write_score = 1
        self.copy_score = 1
        self.last_elapsed = 0.0
        self._src = None
        self._dst = None

    def __enter__(self):
        for path in self.paths:
            os.close(os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600))
        try:
            self._src = os.open(self.paths[0], os.O_RDWR)
            self._dst = os.open(self.paths[1], os.O_RDWR)
        except OSError:
            self._close()
            self.clean_up()
            raise
        return self

    def __exit__(self, *args):
        self._close()
        self.clean_up()
        return False

    def _close(self):
        for fd in (self._src, self._dst):
            if fd is not None:
                os.close(fd)
        self._src = self._dst = None

    def _require_open(self):
        if self._src is None or self._dst is None:
            raise RuntimeError("scratch files are not open")

    def _settle(self, last_pause):
        if not self.config.settle:
            return
        os.sync()
        time.sleep(2)
        os.sync()
        time.sleep(last_pause)

    def _report(self, label, counted, elapsed, score):
        self.last_elapsed = elapsed
        print(f"{label} done: {counted} in {elapsed:.4f}, score {score}")
        print(count_line(score, 0, "KBps"), file=sys.stderr)
        print(time_line(elapsed), file=sys.stderr)

    def write_test(self, seconds):
        """Write the file over and over for ``seconds``; return the KBps score."""
        self._require_open()
        cfg = self.config
        self._settle(2)
        counted = 0
        with _alarm(seconds) as stop:
            start = time.perf_counter()
            while not stop.raised:
                for _ in range(cfg.max_buffs):
                    written = os.write(self._src, self.buf)
                    if written != cfg.bufsize:
                        stop.set()
                        counted += partial_credit(written)
                    else:
                        counted += cfg.count_per_buf
                os.lseek(self._src, 0, os.SEEK_SET)
            elapsed = time.perf_counter() - start
        self.write_score = compute_score(counted, elapsed, cfg.count_per_k)
        self._report("Write", counted, elapsed, self.write_score)
        return self.write_score

    def read_test(self, seconds):
        """Read the file over and over for ``seconds``; return the KBps score."""
        self._require_open()
        cfg = self.config
        self._settle(2)
        os.lseek(self._src, 0, os.SEEK_SET)
        counted = 0
        with _alarm(seconds) as stop:
            start = time.perf_counter()
            while not stop.raised:
                got = len(os.read(self._src, cfg.bufsize))
                if got != cfg.bufsize:
                    os.lseek(self._src, 0, os.SEEK_SET)
                    counted += partial_credit(got)
                else:
                    counted += cfg.count_per_buf
            elapsed = time.perf_counter() - start
        self.read_score = compute_score(counted, elapsed, cfg.count_per_k)
        self._report("Read", counted, elapsed, self.read_score)
        return self.read_score

    def copy_test(self, seconds):
        """Copy the first file into the second for ``seconds``; return the score."""
        self._require_open()
        cfg = self.config
        self._settle(1)
        os.lseek(self._src, 0, os.SEEK_SET)
        counted = 0
        with _alarm(seconds) as stop:
            start = time.perf_counter()
            while not stop.raised:
                data = os.read(self._src, cfg.bufsize)
                if len(data) != cfg.bufsize:
                    os.lseek(self._src, 0, os.SEEK_SET)
                    os.lseek(self._dst, 0, os.SEEK_SET)
                    continue
                written = os.write(self._dst, data)
                if written != cfg.bufsize:
                    counted += copy_write_credit(
                        written, cfg.bufsize, self.read_score, self.write_score
                    )
                    stop.set()
                else:
                    counted += cfg.count_per_buf
            elapsed = time.perf_counter() - start
        self.copy_score = compute_score(counted, elapsed, cfg.count_per_k)
        self._report("Copy", counted, elapsed, self.copy_score)
        return self.copy_score

    def run(self):
        """Run the configured test, priming with shorter passes; return its score."""
        seconds = self.config.seconds
        kind = self.config.test
        if kind is TestKind.WRITE:
            return self.write_test(seconds)
        if kind is TestKind.READ:
            self.write_test(PRIME_SECONDS)
            return self.read_test(seconds)
        self.write_test(PRIME_SECONDS)
        self.read_test(PRIME_SECONDS)
        return self.copy_test(seconds)

    def clean_up(self):
        """Remove the scratch files if they exist."""
        for path in self.paths:
            try:
                os.unlink(path)
            except FileNotFoundError:
                pass


def main(argv=None):
    argv = sys.argv[1:] if argv is None else list(argv)
    try:
        config = parse_args(argv)
    except ValueError:
        print(USAGE, file=sys.stderr)
        return 2
    try:
        config.validate()
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return 3
    if config.directory is not None and not os.path.isdir(config.directory):
        print(f"fstime: chdir: {config.directory}: not a directory", file=sys.stderr)
        return 1
    try:
        with FsTimer(config) as timer:
            timer.run()
    except OSError as exc:
        print(f"fstime: {exc.strerror or exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())