import pytest

from ossim.errors import InvalidConfiguration
from ossim.loader import assign_arrival_times, count_lines, load_processes
from ossim.process import Process, ProcessState


def write(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text)
    return str(path)


def test_count_lines_skips_blank_lines(tmp_path):
    path = write(tmp_path, 'a.asm', "MOV AX, 5\n\nADD AX, BX\n   \nINT 20H\n")
    assert count_lines(path) == 3


def test_empty_program_is_rejected(tmp_path):
    with pytest.raises(InvalidConfiguration):
        count_lines(write(tmp_path, 'empty.asm', "\n\n"))


def test_load_processes_in_order(tmp_path):
    paths = [write(tmp_path, 'one.asm', "A\nB\n"), write(tmp_path, 'two.asm', "A\nB\nC\nD\n")]
    procs = load_processes(paths)
    assert [(p.pid, p.name, p.burst_size, p.load_order) for p in procs] == [
        (1, 'one.asm', 2, 0), (2, 'two.asm', 4, 1)]
    assert all(p.state is ProcessState.NEW for p in procs)


def test_arrivals_default_first_and_random_rest(fixed_random):
    procs = [Process(pid, 2) for pid in (1, 2, 3)]
    assign_arrival_times(procs, fixed_random(ints=[5, 3]))
    assert [p.arrival_time for p in procs] == [1, 5, 3]
    assert all(p.state is ProcessState.WAITING_ASSIGNMENT for p in procs)


def test_manual_arrivals_override(fixed_random):
    procs = [Process(pid, 2) for pid in (1, 2, 3)]
    assign_arrival_times(procs, fixed_random(ints=[2]), manual=[3, None, 0])
    assert [p.arrival_time for p in procs] == [3, 2, 0]


def test_random_arrivals_stay_in_range():
    import random
    procs = [Process(pid, 1) for pid in range(1, 50)]
    assign_arrival_times(procs, random.Random(1))
    assert procs[0].arrival_time == 1
    assert all(1 <= p.arrival_time <= 5 for p in procs)


def test_negative_arrival_rejected():
    with pytest.raises(InvalidConfiguration):
        Process(1, 2).set_arrival(-1)
