import os

import pytest

from ubench.syscall import SyscallTest, create_fd, main, run_syscall_test, syscall_step


@pytest.fixture
def saved_umask():
    old = os.umask(0o022)
    os.umask(old)
    yield
    os.umask(old)


def test_create_fd_reads_eof():
    fd = create_fd()
    try:
        assert os.read(fd, 1) == b""
    finally:
        os.close(fd)


@pytest.mark.parametrize("test", [SyscallTest.MIX, SyscallTest.CLOSE])
def test_step_keeps_descriptor_usable(test, saved_umask):
    fd = create_fd()
    try:
        syscall_step(test, fd)
        assert os.read(fd, 1) == b""
    finally:
        os.close(fd)


def test_mix_step_sets_umask(saved_umask):
    fd = create_fd()
    try:
        os.umask(0o077)
        syscall_step(SyscallTest.MIX, fd)
        assert os.umask(0o022) == 0o022
    finally:
        os.close(fd)


@pytest.mark.parametrize("name", ["mix", "close", "getpid", "exec"])
def test_run_syscall_test_counts(name, saved_umask):
    assert run_syscall_test(0.05, name) >= 1


def test_selection_by_first_letter():
    assert run_syscall_test(0.02, "gp") >= 1


def test_unknown_test_rejected():
    with pytest.raises(ValueError):
        run_syscall_test(0.05, "zzz")


def test_main_unknown_test_exit_code(capsys):
    assert main(["1", "zzz"]) == 9
    assert "exec syscall test" in capsys.readouterr().out


def test_main_bad_duration(capsys):
    assert main(["0"]) == 1
    assert "Usage" in capsys.readouterr().err