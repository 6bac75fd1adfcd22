import os
import select

import pytest

from ubench.polling import (
    MAX_ITERATIONS,
    CallbackCounter,
    PollingConfig,
    allocate_descriptors,
    find_first_set_bit,
    find_next_set_bit,
    format_report,
    iter_set_bits,
    parse_args,
    time_poll,
    time_select,
)


@pytest.fixture
def pipe_fds():
    r, w = os.pipe()
    yield r, w
    os.close(r)
    os.close(w)


def test_find_first_set_bit_finds_lowest():
    assert find_first_set_bit(0b101000, 16) == 3


def test_find_first_set_bit_none_returns_size():
    assert find_first_set_bit(0, 16) == 16


def test_find_first_set_bit_ignores_bits_beyond_size():
    assert find_first_set_bit(1 << 20, 16) == 16


def test_find_next_set_bit_skips_current():
    bits = (1 << 2) | (1 << 70)
    assert find_next_set_bit(bits, 128, 2) == 70


def test_find_next_set_bit_at_end():
    assert find_next_set_bit(1 << 7, 8, 7) >= 8


def test_iter_set_bits_round_trip():
    fds = {0, 5, 63, 64, 130}
    bits = 0
    for fd in fds:
        bits |= 1 << fd
    assert list(iter_set_bits(bits, 200, 200)) == sorted(fds)


def test_iter_set_bits_stops_at_max_fd():
    bits = (1 << 1) | (1 << 4) | (1 << 9)
    assert list(iter_set_bits(bits, 16, 4)) == [1, 4]


def test_callback_counter_counts_calls():
    counter = CallbackCounter()
    for fd in (3, 4, 5):
        counter(fd)
    assert counter.count == 3


def test_allocate_descriptors_respects_limit():
    fds = allocate_descriptors(3)
    try:
        assert len(fds) == 3
        assert len(set(fds)) == 3
        assert all(fd > 2 for fd in fds)
    finally:
        for fd in fds:
            os.close(fd)


def test_allocate_descriptors_zero_limit():
    assert allocate_descriptors(0) == []


def test_parse_args_defaults():
    config = parse_args([], 20, 3)
    assert config == PollingConfig(
        max_iter=MAX_ITERATIONS, num_to_test=17, num_active=1, verbose=False
    )


def test_parse_args_clamps_counts():
    config = parse_args(["5", "100", "50"], 20, 3)
    assert config.max_iter == 5
    assert config.num_to_test == 17
    assert config.num_active == 17


def test_parse_args_verbose():
    assert parse_args(["2", "4", "1", "-v"], 20, 3).verbose is True


def test_parse_args_bad_flag():
    with pytest.raises(ValueError):
        parse_args(["2", "4", "1", "-x"], 20, 3)


def test_parse_args_too_many():
    with pytest.raises(ValueError):
        parse_args(["1", "2", "3", "-v", "extra"], 20, 3)


def test_parse_args_too_many_iterations():
    with pytest.raises(ValueError):
        parse_args([str(MAX_ITERATIONS + 1)], 20, 3)


def test_parse_args_not_a_number():
    with pytest.raises(ValueError):
        parse_args(["many"], 20, 3)


def test_time_select_writable(pipe_fds):
    r, w = pipe_fds
    times = time_select(0, 1 << w, 0, w, 4)
    assert len(times) == 4
    assert all(t >= 0 for t in times)


def test_time_select_nothing_ready(pipe_fds):
    r, w = pipe_fds
    with pytest.raises(RuntimeError):
        time_select(1 << r, 0, 0, r, 2)


def test_time_poll_writable(pipe_fds):
    r, w = pipe_fds
    times = time_poll({w: select.POLLOUT}, 3)
    assert len(times) == 3
    assert all(t >= 0 for t in times)


def test_time_poll_nothing_ready(pipe_fds):
    r, w = pipe_fds
    with pytest.raises(RuntimeError):
        time_poll({r: select.POLLIN | select.POLLPRI}, 2)


def test_format_report_summary():
    text, scores = format_report(10, 4, 9, {"select(2)": [10, 20, 30]}, 3, False)
    lines = text.splitlines()
    assert lines[0] == "Num fds: 10, polling descriptors 6-9"
    assert lines[1] == "All times in microseconds"
    assert lines[2].startswith("ITERATION\tselect(2)")
    assert text.endswith("<- the most important value\n")
    assert "average\t\t20" in text
    assert len(scores) == 1
    assert scores[0].startswith("lps\t")


def test_format_report_verbose_lists_iterations():
    results = {"select(2)": [1, 2, 3, 4], "poll(2)": [5, 6, 7, 8]}
    text, scores = format_report(10, 2, 9, results, 4, True)
    iteration_lines = [
        line for line in text.splitlines() if line[:1].isdigit() and "\t\t" in line
    ]
    assert len(iteration_lines) == 4
    assert len(scores) == 2


def test_format_report_not_verbose_omits_iterations():
    text, _ = format_report(10, 2, 9, {"poll(2)": [5, 6]}, 2, False)
    assert not any(line.startswith("0\t") for line in text.splitlines())