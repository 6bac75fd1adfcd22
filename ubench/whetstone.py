"""The eight Whetstone loops, timed section by section."""

import enum
import math
import resource
from dataclasses import dataclass

T = 0.49999975
T1 = 0.50000025
T2 = 2.0
N1_MULT = 10


class SectionKind(enum.Enum):
    """Whether a section is rated in MFLOPS or in MOPS."""

    FLOATING = 1
    OPERATIONS = 2


@dataclass(frozen=True)
class SectionResult:
    """Outcome of one timed section."""

    section: int
    title: str
    ops: float
    kind: SectionKind
    checknum: float
    time: float

    def rate(self):
        """Millions of operations per second, or 0 when no time was measured."""
        if self.time > 0:
            return self.ops / (1000000 * self.time)
        return 0.0


def _user_time():
    return resource.getrusage(resource.RUSAGE_SELF).ru_utime


def pa(e, t, t2):
    """Six passes of array arithmetic on the four-element list ``e``, in place."""
    for _ in range(6):
        e[0] = (e[0] + e[1] + e[2] - e[3]) * t
        e[1] = (e[0] + e[1] - e[2] + e[3]) * t
        e[2] = (e[0] - e[1] + e[2] + e[3]) * t
        e[3] = (-e[0] + e[1] + e[2] + e[3]) / t2
    return e


def po(e1, j, k, l):
    """Shuffle three elements of ``e1`` in place."""
    e1[j] = e1[k]
    e1[k] = e1[l]
    e1[l] = e1[j]
    return e1


def p3(y, z, t, t1, t2):
    """One procedure-call step; returns the new ``(x, y, z)``."""
    x = y
    y = z
    x = t * (x + y)
    y = t1 * (x + y)
    z = (x + y) / t2
    return x, y, z


class Whetstone:
    """Runs the Whetstone sections and keeps the totals of the last run."""

    def __init__(self, x100=100, clock=None):
        if x100 < 1:
            raise ValueError("x100 must be at least 1")
        self.x100 = x100
        self.clock = clock if clock is not None else _user_time
        self.results = []

    def check(self):
        """Sum of the check numbers of the last run."""
        return sum(result.checknum for result in self.results)

    def time_used(self):
        """Total seconds charged to the sections of the last run."""
        return sum(result.time for result in self.results)

    def run(self, xtra):
        """Run all eight sections with ``xtra`` outer passes; return their results."""
        if xtra < 1:
            raise ValueError("xtra must be at least 1")
        x100 = self.x100
        clock = self.clock
        t0 = T
        results = []

        def record(section, title, ops, kind, checknum, elapsed):
            results.append(
                SectionResult(section, title, float(ops) * float(xtra), kind,
                              checknum, elapsed)
            )

        n1 = 12 * x100
        n2 = 14 * x100
        n3 = 345 * x100
        n4 = 210 * x100
        n5 = 32 * x100
        n6 = 899 * x100
        n7 = 616 * x100
        n8 = 93 * x100

        # Section 1: array elements
        e1 = [1.0, -1.0, -1.0, -1.0]
        t = t0
        start = clock()
        for _ in range(xtra):
            for _ in range(n1 * N1_MULT):
                e1[0] = (e1[0] + e1[1] + e1[2] - e1[3]) * t
                e1[1] = (e1[0] + e1[1] - e1[2] + e1[3]) * t
                e1[2] = (e1[0] - e1[1] + e1[2] + e1[3]) * t
                e1[3] = (-e1[0] + e1[1] + e1[2] + e1[3]) * t
            t = 1.0 - t
        t = t0
        elapsed = (clock() - start) / N1_MULT
        record(1, "N1 floating point", n1 * 16, SectionKind.FLOATING, e1[3], elapsed)

        # Section 2: array as parameter
        start = clock()
        for _ in range(xtra):
            for _ in range(n2):
                pa(e1, t, T2)
            t = 1.0 - t
        t = t0
        elapsed = clock() - start
        record(2, "N2 floating point", n2 * 96, SectionKind.FLOATING, e1[3], elapsed)

        # Section 3: conditional jumps
        j = 1
        start = clock()
        for _ in range(xtra):
            for _ in range(n3):
                j = 2 if j == 1 else 3
                j = 0 if j > 2 else 1
                j = 1 if j < 1 else 0
        elapsed = clock() - start
        record(3, "N3 if then else  ", n3 * 3, SectionKind.OPERATIONS,
               float(j), elapsed)

        # Section 4: integer arithmetic
        j, k, l = 1, 2, 3
        start = clock()
        for _ in range(xtra):
            for _ in range(n4):
                j = j * (k - j) * (l - k)
                k = l * k - (l - j) * k
                l = (l - k) * (k + j)
                e1[l - 2] = float(j + k + l)
                e1[k - 2] = float(j * k * l)
        elapsed = clock() - start
        record(4, "N4 fixed point   ", n4 * 15, SectionKind.OPERATIONS,
               e1[0] + e1[1], elapsed)

        # Section 5: trigonometric functions
        x = 0.5
        y = 0.5
        start = clock()
        for _ in range(xtra):
            for _ in range(1, n5):
                x = t * math.atan(
                    T2 * math.sin(x) * math.cos(x)
                    / (math.cos(x + y) + math.cos(x - y) - 1.0)
                )
                y = t * math.atan(
                    T2 * math.sin(y) * math.cos(y)
                    / (math.cos(x + y) + math.cos(x - y) - 1.0)
                )
            t = 1.0 - t
        t = t0
        elapsed = clock() - start
        record(5, "N5 sin,cos etc.  ", n5 * 26, SectionKind.OPERATIONS, y, elapsed)

        # Section 6: procedure calls
        x = y = z = 1.0
        start = clock()
        for _ in range(xtra):
            for _ in range(n6):
                x, y, z = p3(y, z, t, T1, T2)
        elapsed = clock() - start
        record(6, "N6 floating point", n6 * 6, SectionKind.FLOATING, z, elapsed)

        # Section 7: array references
        e1[0], e1[1], e1[2] = 1.0, 2.0, 3.0
        start = clock()
        for _ in range(xtra):
            for _ in range(n7):
                po(e1, 0, 1, 2)
        elapsed = clock() - start
        record(7, "N7 assignments   ", n7 * 3, SectionKind.OPERATIONS, e1[2], elapsed)

        # Section 8: standard functions
        x = 0.75
        start = clock()
        for _ in range(xtra):
            for _ in range(n8):
                x = math.sqrt(math.exp(math.log(x) / T1))
        elapsed = clock() - start
        record(8, "N8 exp,sqrt etc. ", n8 * 4, SectionKind.OPERATIONS, x, elapsed)

        self.results = results
        return list(results)