"""Time how long select(2) and poll(2) take over a large set of descriptors."""

import errno
import os
import select
import sys
import time
from dataclasses import dataclass

MAX_ITERATIONS = 1000
DEFAULT_ITERATIONS = 1000
MAX_FDS = 40960

USAGE = "Usage:\ttime-polling [num_iter] [num_to_test] [num_active] [-v]"


@dataclass
class PollingConfig:
    """Settings taken from the command line."""

    max_iter: int = DEFAULT_ITERATIONS
    num_to_test: int = 0
    num_active: int = 1
    verbose: bool = False


@dataclass
class CallbackCounter:
    """Callback run for every ready descriptor; counts how often it fired."""

    count: int = 0

    def __call__(self, fd):
        self.count += 1


def find_first_set_bit(bits, size):
    """Index of the lowest set bit among the first ``size`` bits, else ``size``."""
    masked = bits & ((1 << size) - 1) if size > 0 else 0
    if masked == 0:
        return size
    return (masked & -masked).bit_length() - 1


def find_next_set_bit(bits, size, offset):
    """Index of the next set bit after ``offset``; ``size`` or more if none."""
    offset += 1
    if offset >= size:
        return offset
    return find_first_set_bit(bits >> offset, size - offset) + offset


def iter_set_bits(bits, size, max_fd):
    """Yield the set bit positions up to and including ``max_fd``."""
    fd = find_first_set_bit(bits, size)
    while fd <= max_fd and fd < size:
        yield fd
        fd = find_next_set_bit(bits, size, fd)


def _to_bits(fds):
    bits = 0
    for fd in fds:
        bits |= 1 << fd
    return bits


def allocate_descriptors(limit=None):
    """Duplicate standard output until the descriptor table is full.

    ``limit`` caps the number of descriptors taken. Returns the new
    descriptors in the order they were made; the caller closes them.
    """
    fds = []
    try:
        while limit is None or len(fds) < limit:
            try:
                fd = os.dup(1)
            except OSError as exc:
                if exc.errno == errno.EMFILE:
                    break
                raise
            fds.append(fd)
            if fd >= MAX_FDS:
                raise RuntimeError(
                    f"File descriptor: {fd} larger than max: {MAX_FDS - 1}"
                )
    except BaseException:
        for fd in fds:
            os.close(fd)
        raise
    return fds


def parse_args(argv, total_fds, first_fd):
    """Build a configuration, clamping counts to the descriptors available."""
    argv = list(argv)
    if len(argv) > 4:
        raise ValueError(USAGE)
    available = total_fds - first_fd
    config = PollingConfig(num_to_test=available)
    if argv:
        config.max_iter = int(argv[0])
    if config.max_iter > MAX_ITERATIONS:
        raise ValueError("num_iter too large")
    if config.max_iter < 1:
        raise ValueError("num_iter must be positive")
    if len(argv) > 1:
        config.num_to_test = int(argv[1])
    if len(argv) > 2:
        config.num_active = int(argv[2])
    if len(argv) > 3:
        if argv[3] != "-v":
            raise ValueError(USAGE)
        config.verbose = True
    config.num_to_test = min(config.num_to_test, available)
    config.num_active = min(config.num_active, available)
    return config


def _elapsed_us(start_ns):
    return (time.perf_counter_ns() - start_ns) // 1000


def time_select(input_fds, output_fds, exception_fds, max_fd, num_iter):
    """Time ``num_iter`` zero-timeout selects; return microseconds per pass.

    The descriptor sets are integers used as bitfields.
    """
    size = max_fd + 1
    ins = list(iter_set_bits(input_fds, size, max_fd))
    outs = list(iter_set_bits(output_fds, size, max_fd))
    excs = list(iter_set_bits(exception_fds, size, max_fd))
    callback = CallbackCounter()
    select.select(ins, outs, excs, 0)
    times = []
    for _ in range(num_iter):
        callback.count = 0
        start = time.perf_counter_ns()
        r, w, x = select.select(list(ins), list(outs), list(excs), 0)
        nready = len(r) + len(w) + len(x)
        if nready < 1:
            raise RuntimeError(f"Error: nready: {nready}")
        for ready in (x, r, w):
            for fd in iter_set_bits(_to_bits(ready), size, max_fd):
                callback(fd)
        times.append(_elapsed_us(start))
    return times


def time_poll(events, num_iter):
    """Time ``num_iter`` zero-timeout polls over ``{fd: event mask}``.

    Returns microseconds per pass.
    """
    poller = select.poll()
    for fd, mask in events.items():
        poller.register(fd, mask)
    callback = CallbackCounter()
    poller.poll(0)
    times = []
    for _ in range(num_iter):
        callback.count = 0
        start = time.perf_counter_ns()
        ready = poller.poll(0)
        if len(ready) < 1:
            raise RuntimeError(f"Error: nready: {len(ready)}")
        for fd, revents in ready:
            if revents & select.POLLPRI:
                callback(fd)
            if revents & select.POLLIN:
                callback(fd)
            if revents & select.POLLOUT:
                callback(fd)
        times.append(_elapsed_us(start))
    return times


def format_report(total_fds, num_to_test, max_fd, results, num_iter, verbose):
    """Render the timing table and the score lines.

    ``results`` maps a method name to its list of per-pass times. Returns
    ``(report_text, score_lines)``.
    """
    parts = [
        f"Num fds: {total_fds}, polling descriptors "
        f"{total_fds - num_to_test}-{max_fd}\n",
        "All times in microseconds\n",
        "ITERATION\t",
    ]
    parts.extend(f"{name:<12}" for name in results)
    for count in range(num_iter):
        if verbose:
            parts.append(f"\n{count}\t\t")
            parts.extend(f"{times[count]:<12}" for times in results.values())
    totals = {name: sum(times[:num_iter]) for name, times in results.items()}
    parts.append("\n\naverage\t\t")
    parts.extend(f"{total // num_iter:<12}" for total in totals.values())
    parts.append("\n")
    parts.append("Per fd\t\t")
    score_lines = []
    for total in totals.values():
        parts.append(f"{total / num_iter / num_to_test:<12.2f}")
        rate = 1000000 * num_iter * num_to_test / total if total else float("inf")
        score_lines.append(f"lps\t{rate:.2f}\t{total / 1000000:.1f}")
    parts.append("<- the most important value\n")
    return "".join(parts), score_lines


def main(argv=None):
    argv = sys.argv[1:] if argv is None else list(argv)
    try:
        fds = allocate_descriptors()
    except OSError as exc:
        print(f"Error dup()ing\t{exc.strerror}", file=sys.stderr)
        return 1
    except RuntimeError as exc:
        print(exc, file=sys.stderr)
        return 1
    try:
        if not fds:
            print("Error dup()ing\tno descriptors available", file=sys.stderr)
            return 1
        first_fd = fds[0]
        max_fd = max(fds)
        total_fds = max_fd + 1
        try:
            config = parse_args(argv, total_fds, first_fd)
        except ValueError as exc:
            print(exc, file=sys.stderr)
            return 1
        start_index = total_fds - config.num_to_test
        active_index = total_fds - config.num_active
        tested = range(start_index, total_fds)
        active = range(active_index, total_fds)
        input_bits = _to_bits(tested)
        output_bits = _to_bits(active)
        events = {}
        for fd in tested:
            events[fd] = select.POLLPRI | select.POLLIN
        for fd in active:
            events[fd] = events.get(fd, 0) | select.POLLOUT
        results = {}
        try:
            results["select(2)"] = time_select(
                input_bits, output_bits, input_bits, max_fd, config.max_iter
            )
            if hasattr(select, "poll"):
                results["poll(2)"] = time_poll(events, config.max_iter)
        except (OSError, ValueError) as exc:
            print(f"Error selecting\t{exc}", file=sys.stderr)
            return 2
        except RuntimeError as exc:
            print(exc, file=sys.stderr)
            return 1
        text, score_lines = format_report(
            total_fds,
            config.num_to_test,
            max_fd,
            results,
            config.max_iter,
            config.verbose,
        )
        sys.stdout.write(text)
        for line in score_lines:
            print(line, file=sys.stderr)
        return 0
    finally:
        for fd in fds:
            os.close(fd)


if __name__ == "__main__":
    sys.exit(main())