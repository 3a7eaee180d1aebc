from enum import Enum

from ossim.errors import InvalidConfiguration


class ProcessState(Enum):
    NEW = "NEW"
    WAITING_ASSIGNMENT = "WAITING_ASSIGNMENT"
    READY = "READY"
    RUNNING = "RUNNING"
    TERMINATED = "TERMINATED"


# Represents a loaded program: one memory position and one tick per source line
class Process:
    def __init__(self, pid, burst_size, name=None, load_order=None):
        if not isinstance(burst_size, int) or isinstance(burst_size, bool) or burst_size < 1:
            raise InvalidConfiguration(f"Process {pid} needs a positive burst size, got {burst_size!r}")
        self.pid = pid
        self.name = name if name is not None else f"P{pid}"
        self.burst_size = burst_size
        self.load_order = load_order if load_order is not None else 0
        self.arrival_time = None
        self.reset()

    # Purpose: Returns the process to its freshly loaded state, keeping its arrival time
    def reset(self):
        self.remaining_burst = self.burst_size
        self.state = ProcessState.NEW if self.arrival_time is None else ProcessState.WAITING_ASSIGNMENT
        self.memory_handle = None
        self.cpu_id = None
        self.slot = None
        self.start_time = None
        self.end_time = None

    def set_arrival(self, arrival_time):
        if not isinstance(arrival_time, int) or isinstance(arrival_time, bool) or arrival_time < 0:
            raise InvalidConfiguration(f"Arrival time for {self.name} must be a non-negative integer")
        if self.state not in (ProcessState.NEW, ProcessState.WAITING_ASSIGNMENT):
            raise InvalidConfiguration(f"{self.name} already started; arrival time is fixed")
        self.arrival_time = arrival_time
        self.state = ProcessState.WAITING_ASSIGNMENT

    @property
    def executed(self):
        return self.burst_size - self.remaining_burst

    @property
    def terminated(self):
        return self.state is ProcessState.TERMINATED

    @property
    def turnaround(self):
        if self.end_time is None:
            return None
        return self.end_time - self.arrival_time

    # Purpose: Time since arrival spent not executing, as seen at the start of tick `now`
    def waiting_time(self, now):
        return max(0, now - self.arrival_time - self.executed)

    # Purpose: Calculates Response Ratio for HRRN
    def response_ratio(self, now):
        return (self.waiting_time(now) + self.burst_size) / self.burst_size

    # Key used by every policy to break ties
    def arrival_key(self):
        return (self.arrival_time, self.load_order)

    def snapshot(self):
        return {
            "pid": self.pid,
            "name": self.name,
            "state": self.state.value,
            "burst_size": self.burst_size,
            "remaining_burst": self.remaining_burst,
            "arrival_time": self.arrival_time,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "cpu": self.cpu_id,
            "slot": self.slot,
            "memory": self.memory_handle.location if self.memory_handle else None,
        }

    def __repr__(self):
        return (f"Process(pid={self.pid}, burst={self.burst_size}, remaining={self.remaining_burst}, "
                f"arrival={self.arrival_time}, state={self.state.value})")
