"""Alarm-driven timing shared by the benchmark programs, and result lines."""

import signal


def wake_me(seconds, func):
    """Arrange for ``func()`` to be called once ``seconds`` from now."""
    signal.signal(signal.SIGALRM, lambda signum, frame: func())
    signal.setitimer(signal.ITIMER_REAL, seconds)


def run_until_alarm(seconds, step):
    """Call ``step()`` repeatedly until ``seconds`` have elapsed.

    Returns the number of completed calls. If ``step`` raises, the exception
    is re-raised with the count so far stored in its ``iterations`` attribute.
    The previous SIGALRM handler is restored afterwards.
    """
    if seconds <= 0:
        raise ValueError("duration must be positive")
    expired = False

    def _stop():
        nonlocal expired
        expired = True

    previous = signal.getsignal(signal.SIGALRM)
    count = 0
    wake_me(seconds, _stop)
    try:
        while not expired:
            step()
            count += 1
    except Exception as exc:
        exc.iterations = count
        raise
    finally:
        signal.setitimer(signal.ITIMER_REAL, 0)
        signal.signal(
            signal.SIGALRM, previous if previous is not None else signal.SIG_DFL
        )
    return count


def count_line(count, timebase, unit):
    """Format the ``COUNT|n|timebase|unit`` result line."""
    value = f"{count:.3f}" if isinstance(count, float) else str(count)
    return f"COUNT|{value}|{timebase}|{unit}"


def time_line(seconds):
    """Format the ``TIME|s`` result line."""
    return f"TIME|{seconds:.1f}"