# ubench

A set of small, self-timing system benchmarks for POSIX systems. Most of
them run a tight loop for a fixed time and report how many iterations they
managed, as a machine-readable line on standard error:

```
COUNT|<count>|<timebase>|<unit>
```

`timebase` is `1` for per-second rates, `60` for per-minute rates and `0`
when the count is already a rate (KBps, MWIPS). `ubench-fstime` and
`ubench-whets` also write a `TIME|<seconds>` line with the time actually
measured.

Requires Python 3.10 or later.

## Installing

```
pip install .
```

## Benchmarks

| Command | Measures | Result line |
| --- | --- | --- |
| `ubench-hanoi DURATION [DISKS]` | recursive Towers of Hanoi solves (default 10 disks) | `COUNT\|n\|1\|lps` |
| `ubench-pipe DURATION` | 512-byte write/read round trips through a pipe in one process | `COUNT\|n\|1\|lps` |
| `ubench-spawn DURATION` | fork and wait for a child that exits at once | `COUNT\|n\|1\|lps` |
| `ubench-looper DURATION COMMAND [ARGS...]` | runs a command to completion over and over | `COUNT\|n\|60\|lpm` |
| `ubench-execl DURATION` | the process repeatedly replacing itself with a new execution | `COUNT\|n\|1\|lps` |
| `ubench-syscall [DURATION] [mix\|close\|getpid\|exec]` | tight loops of cheap system calls (default 10 seconds, `mix`) | `COUNT\|n\|1\|lps` |
| `ubench-fstime [-c\|-r\|-w] [-b BUFSIZE] [-m MAX_BLOCKS] [-t SECONDS] [-d DIR]` | file copy, read or write throughput | `COUNT\|n\|0\|KBps`, `TIME\|s` |
| `ubench-polling [NUM_ITER] [NUM_TO_TEST] [NUM_ACTIVE] [-v]` | cost of `select` and `poll` over many descriptors | `lps\t<rate>\t<seconds>` |
| `ubench-whets [DURATION]` | Whetstone floating-point benchmark (default about 10 seconds) | `COUNT\|x\|0\|MWIPS`, `TIME\|s` |

For example:

```
$ ubench-spawn 10
COUNT|31245|1|lps
```

### Notes on individual commands

- `ubench-looper` stops with exit status 2 if the command cannot be started,
  exits with status 99, or ends with any other non-zero status.
- `ubench-execl` re-executes `$UB_BINDIR/execl` when `UB_BINDIR` is set, and
  otherwise `python -m ubench.execl`. Each execution passes on the duration,
  the count so far and the start time.
- `ubench-syscall` prints `exec syscall test` on standard output first. The
  `exec` test runs `/bin/true` once per iteration.
- `ubench-fstime` runs the copy test by default, for 10 seconds, with a
  1024-byte buffer and a file of at most 2000 KiB. The buffer size must be
  256–8192 bytes, the block count 1–1048576 and the time 1–3600 seconds.
  It creates two scratch files, `dummy0-<pid>` and `dummy1-<pid>`, in the
  working directory (or in the one given with `-d`) and removes them when it
  finishes. A read test first runs a 2-second write pass; a copy test first
  runs 2-second write and read passes, whose scores set the credit given
  for partial transfers. A `Write done`/`Read done`/`Copy done` summary goes
  to standard output.
- `ubench-polling` opens as many descriptors as the process limit allows
  (raise the limit first for meaningful numbers), prints a table of
  per-iteration averages and per-descriptor times to standard output, and
  one `lps` line per method to standard error. `NUM_ITER` is at most 1000.
- `ubench-whets` calibrates the number of outer passes with runs of 1, 5,
  25, ... passes until one takes over half a second, then runs all eight
  Whetstone loops for about `DURATION` seconds of user CPU time and prints
  a table of results per loop followed by the MWIPS rating.

## Using the pieces from Python

The benchmark kernels are ordinary functions and classes:

```python
import time

from ubench.hanoi import Towers
from ubench.whetstone import Whetstone
from ubench.whets import compute_mwips
from ubench.fstime import FsTimeConfig, FsTimer, TestKind

towers = Towers(10)
print(towers.solve())            # 1023 moves

bench = Whetstone(100, time.process_time)
bench.run(1)
print(bench.check(), compute_mwips(1, 100, bench.time_used()))

config = FsTimeConfig(test=TestKind.WRITE, seconds=1, settle=False)
with FsTimer(config) as timer:
    print(timer.run())           # KBps
```

`ubench.timing.run_until_alarm(seconds, step)` calls `step` until the time
runs out (using `SIGALRM`) and returns the number of completed calls; the
looping benchmarks are built on it. `count_line` and `time_line` format the
result lines.

## What is not included

There is no driver that runs the whole set and combines the results into a
single index, no graphics benchmark and no Dhrystone integer benchmark.
Each command is run on its own and reports only its own figure.

## Running the tests

```
pip install ".[test]"
pytest
```