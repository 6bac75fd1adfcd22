import pytest

from ubench.hanoi import Towers, main, other_peg


@pytest.mark.parametrize("source,target,expected", [(1, 3, 2), (2, 3, 1), (1, 2, 3)])
def test_other_peg(source, target, expected):
    assert other_peg(source, target) == expected


def test_solve_moves_tower_to_third_peg():
    towers = Towers(4)
    towers.solve()
    assert towers.pegs[1:] == [0, 0, 4]


def test_move_count_recurrence():
    for n in range(2, 8):
        assert Towers(n).solve() == 2 * Towers(n - 1).solve() + 1


def test_single_disk_is_one_move():
    assert Towers(1).solve() == 1


def test_disk_total_is_conserved_across_repeats():
    towers = Towers(5)
    for _ in range(3):
        towers.solve()
    assert sum(towers.pegs) == 5


def test_zero_disks_rejected():
    with pytest.raises(ValueError):
        Towers(0)


def test_main_without_arguments(capsys):
    assert main([]) == 1
    assert "Usage" in capsys.readouterr().err


def test_main_bad_duration(capsys):
    assert main(["abc"]) == 1
    assert "Usage" in capsys.readouterr().err