"""Self-timing system micro-benchmarks: Hanoi, pipes, process creation,
command and exec loops, system calls, file I/O, polling and Whetstone."""

__version__ = "0.1.0"
__all__ = [
    "execl",
    "fstime",
    "hanoi",
    "looper",
    "pipe",
    "polling",
    "spawn",
    "syscall",
    "timing",
    "whets",
    "whetstone",
]