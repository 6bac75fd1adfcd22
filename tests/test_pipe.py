import os

from ubench.pipe import main, pipe_round_trip, run_pipe_test


def test_round_trip_returns_written_bytes():
    read_fd, write_fd = os.pipe()
    try:
        assert pipe_round_trip(read_fd, write_fd, b"abc") == b"abc"
    finally:
        os.close(read_fd)
        os.close(write_fd)


def test_round_trip_leaves_pipe_empty():
    read_fd, write_fd = os.pipe()
    try:
        pipe_round_trip(read_fd, write_fd, bytes(512))
        os.set_blocking(read_fd, False)
        try:
            leftover = os.read(read_fd, 1)
        except BlockingIOError:
            leftover = b""
        assert leftover == b""
    finally:
        os.close(read_fd)
        os.close(write_fd)


def test_run_pipe_test_counts():
    assert run_pipe_test(0.05) >= 1


def test_main_requires_one_argument(capsys):
    assert main([]) == 1
    assert main(["1", "2"]) == 1
    assert "Usage" in capsys.readouterr().err