import pytest

from ossim.config import SimConfig
from ossim.kernel import Kernel
from ossim.process import Process


class FixedRandom:
    """Stands in for random.Random, replaying fixed values."""

    def __init__(self, choices=(), ints=()):
        self.choices = list(choices)
        self.ints = list(ints)

    def randrange(self, stop):
        value = self.choices.pop(0)
        assert 0 <= value < stop
        return value

    def randint(self, a, b):
        value = self.ints.pop(0)
        assert a <= value <= b
        return value


@pytest.fixture
def fixed_random():
    return FixedRandom


@pytest.fixture
def make_process():
    def make(pid, burst, arrival=None, name=None):
        p = Process(pid, burst, name=name, load_order=pid)
        if arrival is not None:
            p.set_arrival(arrival)
        return p
    return make


@pytest.fixture
def simulate(make_process):
    """Runs named (burst, arrival) processes to completion and returns (processes, kernel)."""

    def run(specs, rng=None, **config):
        config.setdefault("tick_interval", 0)
        kernel = Kernel(SimConfig(**config), rng=rng)
        processes = [make_process(i + 1, burst, arrival, name=name)
                     for i, (name, burst, arrival) in enumerate(specs)]
        kernel.load(processes)
        kernel.run_to_completion()
        return {p.name: p for p in processes}, kernel
    return run
