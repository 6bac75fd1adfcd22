[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ubench"
version = "0.1.0"
description = "Self-timing system micro-benchmarks: process creation, pipes, system calls, file I/O, polling and Whetstone"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "benchmark",
    "whetstone",
    "filesystem",
    "syscall",
    "fork",
    "pipe",
    "poll",
    "select",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Benchmark",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
ubench-hanoi = "ubench.hanoi:main"
ubench-pipe = "ubench.pipe:main"
ubench-spawn = "ubench.spawn:main"
ubench-looper = "ubench.looper:main"
ubench-execl = "ubench.execl:main"
ubench-syscall = "ubench.syscall:main"
ubench-fstime = "ubench.fstime:main"
ubench-polling = "ubench.polling:main"
ubench-whets = "ubench.whets:main"

[tool.hatch.build.targets.wheel]
packages = ["ubench"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"
