"""Whetstone benchmark driver: calibration, the timed run and its report."""

import sys
from dataclasses import dataclass, field, replace

from ubench.timing import count_line
from ubench.whetstone import SectionKind, Whetstone

DEFAULT_DURATION = 10
CALIBRATION_THRESHOLD = 0.5
CALIBRATION_ROUNDS = 10
PRECISION = "Double"

_HEADER = (
    "Loop content                  Result              MFLOPS "
    "     MOPS   Seconds"
)


def calibrate(bench, duration, threshold, out):
    """Find how many outer passes make a run last about ``duration`` seconds.

    Runs ``bench`` with 1, 5, 25, ... passes until one run takes longer than
    ``threshold`` seconds (at most ten runs), writing a line per run to
    ``out``. Returns ``(xtra, reference)`` where ``reference`` holds the
    section results of the first, single-pass run.
    """
    xtra = 1
    reference = None
    time_used = 0.0
    for _ in range(CALIBRATION_ROUNDS):
        results = bench.run(xtra)
        if reference is None:
            reference = results
        time_used = bench.time_used()
        print(
            f"{time_used:11.2f} Seconds {float(xtra):10.0f}   Passes (x 100)",
            file=out,
        )
        if time_used > threshold:
            break
        xtra *= 5
    if time_used > 0:
        xtra = int(duration * xtra / time_used)
    return max(xtra, 1), reference


def compute_mwips(xtra, x100, time_used):
    """Millions of Whetstone instructions per second, or 0 without a time."""
    if time_used > 0:
        return float(xtra) * float(x100) / (10 * time_used)
    return 0.0


def format_section(result):
    """One row of the results table for a section."""
    line = f"{result.title} {result.checknum:24.17f}    "
    rate = result.rate()
    if result.kind is SectionKind.FLOATING:
        return line + f" {rate:9.3f}          {result.time:9.3f}"
    return line + f"           {rate:9.3f}{result.time:9.3f}"


@dataclass
class WhetstoneReport:
    """The outcome of a full benchmark run."""

    xtra: int
    x100: int
    sections: list = field(default_factory=list)
    time_used: float = 0.0
    mwips: float = 0.0
    check: float = 0.0

    def lines(self):
        """The report as printed lines."""
        rows = [
            "",
            f"Use {self.xtra}  passes (x 100)",
            "",
            f"          {PRECISION} Precision Whetstone Benchmark",
            "",
            _HEADER,
            "",
        ]
        rows.extend(format_section(result) for result in self.sections)
        rows.append("")
        rows.append(f"MWIPS            {self.mwips:39.3f}{self.time_used:19.3f}")
        rows.append("")
        if self.check == 0:
            rows.append("Wrong answer  ")
        return rows


def run_benchmark(duration, out):
    """Calibrate, run for about ``duration`` seconds and write the report."""
    if duration <= 0:
        raise ValueError("duration must be positive")
    bench = Whetstone()
    print("Calibrate", file=out)
    xtra, reference = calibrate(bench, duration, CALIBRATION_THRESHOLD, out)
    results = bench.run(xtra)
    time_used = bench.time_used()
    shown = [
        replace(result, checknum=first.checknum)
        for result, first in zip(results, reference)
    ]
    report = WhetstoneReport(
        xtra=xtra,
        x100=bench.x100,
        sections=shown,
        time_used=time_used,
        mwips=compute_mwips(xtra, bench.x100, time_used),
        check=bench.check(),
    )
    for line in report.lines():
        print(line, file=out)
    return report


def main(argv=None):
    argv = sys.argv[1:] if argv is None else list(argv)
    try:
        duration = int(argv[0]) if argv else DEFAULT_DURATION
        if duration < 1:
            raise ValueError("duration must be positive")
    except ValueError:
        print("Usage: whets [duration]", file=sys.stderr)
        return 1
    report = run_benchmark(duration, sys.stdout)
    print(count_line(float(report.mwips), 0, "MWIPS"), file=sys.stderr)
    print(f"TIME|{report.time_used:.3f}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())