import os
import random

from ossim.config import ARRIVAL_MAX, ARRIVAL_MIN, FIRST_ARRIVAL
from ossim.errors import InvalidConfiguration
from ossim.process import Process


# Purpose: Burst size of a program file: one position per non-blank line
def count_lines(path):
    with open(path, "r", encoding="utf-8", errors="replace") as fh:
        count = sum(1 for line in fh if line.strip())
    if count == 0:
        raise InvalidConfiguration(f"Program file '{path}' is empty")
    return count


# Purpose: Builds one process per program file, in load order
def load_processes(paths):
    processes = []
    for index, path in enumerate(paths):
        processes.append(Process(index + 1, count_lines(path),
                                 name=os.path.basename(path), load_order=index))
    return processes


# Purpose: Sets arrival times. The first process defaults to FIRST_ARRIVAL unless
# `first` is False; the rest take their `manual` entry or a random 1-5.
def assign_arrival_times(processes, rng=None, manual=None, first=True):
    rng = rng if rng is not None else random.Random()
    manual = list(manual) if manual is not None else []
    for index, process in enumerate(processes):
        value = manual[index] if index < len(manual) else None
        if value is None:
            if index == 0 and first:
                value = FIRST_ARRIVAL
            else:
                value = rng.randint(ARRIVAL_MIN, ARRIVAL_MAX)
        process.set_arrival(value)
    return processes
