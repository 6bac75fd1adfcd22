import pytest

from ubench.whetstone import (
    SectionKind,
    SectionResult,
    Whetstone,
    p3,
    pa,
    po,
)


def _stepping_clock():
    now = [0.0]

    def clock():
        now[0] += 1.0
        return now[0]

    return clock


@pytest.fixture(scope="module")
def single_pass():
    bench = Whetstone(100, clock=_stepping_clock())
    return bench, bench.run(1)


def test_results_match_documented_double_precision_values(single_pass):
    _, results = single_pass
    expected = [
        -1.12398255667391900,
        -1.12187079889284400,
        1.0,
        12.0,
        0.49902937281515140,
        0.99999987890802820,
        3.0,
        0.75100163018457870,
    ]
    assert [r.checknum for r in results] == pytest.approx(expected, rel=1e-6)


def test_sections_numbered_and_titled(single_pass):
    _, results = single_pass
    assert [r.section for r in results] == list(range(1, 9))
    assert results[0].title == "N1 floating point"
    assert results[7].title == "N8 exp,sqrt etc. "
    assert all(len(r.title) == 17 for r in results)


def test_section_kinds(single_pass):
    _, results = single_pass
    floating = [r.section for r in results if r.kind is SectionKind.FLOATING]
    assert floating == [1, 2, 6]


def test_check_is_sum_of_checknums(single_pass):
    bench, results = single_pass
    assert bench.check() == pytest.approx(sum(r.checknum for r in results))


def test_time_used_with_stepping_clock(single_pass):
    bench, results = single_pass
    assert results[0].time == pytest.approx(1.0 / 10)
    assert all(r.time == pytest.approx(1.0) for r in results[1:])
    assert bench.time_used() == pytest.approx(sum(r.time for r in results))


def test_ops_scale_with_passes():
    one = Whetstone(1, clock=_stepping_clock()).run(1)
    two = Whetstone(1, clock=_stepping_clock()).run(2)
    for a, b in zip(one, two):
        assert b.ops == pytest.approx(2 * a.ops)


def test_integer_sections_independent_of_passes():
    results = Whetstone(2, clock=_stepping_clock()).run(3)
    assert results[2].checknum == 1.0
    assert results[3].checknum == 12.0
    assert results[6].checknum == 3.0


def test_before_run_totals_are_zero():
    bench = Whetstone(1, clock=_stepping_clock())
    assert bench.check() == 0
    assert bench.time_used() == 0


def test_invalid_arguments():
    with pytest.raises(ValueError):
        Whetstone(0)
    with pytest.raises(ValueError):
        Whetstone(1, clock=_stepping_clock()).run(0)


def test_rate_with_and_without_time():
    r = SectionResult(1, "N1 floating point", 2000000.0, SectionKind.FLOATING, 0.0, 1.0)
    assert r.rate() == pytest.approx(2.0)
    z = SectionResult(1, "N1 floating point", 2000000.0, SectionKind.FLOATING, 0.0, 0.0)
    assert z.rate() == 0.0


def test_po_shuffles_in_place():
    e = [1.0, 2.0, 3.0]
    assert po(e, 0, 1, 2) is e
    assert e == [2.0, 3.0, 2.0]
    po(e, 0, 1, 2)
    assert e == [3.0, 2.0, 3.0]


def test_p3_fixed_point():
    assert p3(1.0, 1.0, 0.5, 0.5, 2.0) == (1.0, 1.0, 1.0)


def test_pa_mutates_and_zero_stays_zero():
    e = [0.0, 0.0, 0.0, 0.0]
    assert pa(e, 0.5, 2.0) is e
    assert e == [0.0, 0.0, 0.0, 0.0]


def test_pa_changes_values():
    e = [1.0, -1.0, -1.0, -1.0]
    before = list(e)
    pa(e, 0.49999975, 2.0)
    assert e != before
    assert len(e) == 4