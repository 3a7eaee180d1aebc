from enum import Enum

from ossim.errors import InvalidConfiguration


class Algorithm(Enum):
    FCFS = "FCFS" # first come, first served
    SJF = "SJF" # shortest job first, non-preemptive
    SRT = "SRT" # shortest remaining time, preemptive
    RR = "RR" # round robin
    HRRN = "HRRN" # highest response ratio next

    @classmethod
    def parse(cls, name):
        if isinstance(name, cls):
            return name
        key = str(name).strip().upper().replace("-", "").replace("_", "")
        try:
            return cls[key]
        except KeyError:
            raise InvalidConfiguration(f"Unknown scheduling algorithm '{name}'") from None

    @property
    def preemptive(self):
        return self in (Algorithm.SRT, Algorithm.RR)


# Represents the selection rule a CPU applies to its occupied slots every tick.
# The policy only picks; the CPU applies the decision.
class SchedulingPolicy:
    def __init__(self, algorithm, quantum):
        self.algorithm = Algorithm.parse(algorithm)
        if not isinstance(quantum, int) or isinstance(quantum, bool) or quantum <= 0:
            raise InvalidConfiguration(f"quantum must be a positive integer, got {quantum!r}")
        self.quantum = quantum
        self._selectors = {
            Algorithm.FCFS: self._select_fcfs,
            Algorithm.SJF: self._select_sjf,
            Algorithm.SRT: self._select_srt,
            Algorithm.RR: self._select_rr,
            Algorithm.HRRN: self._select_hrrn,
        }

    # Purpose: Selects the process to execute during tick `now`, or None to idle.
    # `ready` is the CPU's slot order (rotation order for RR), `running` the
    # process that executed on the previous tick, `slice_used` its ticks so far.
    def select(self, ready, running, slice_used, now):
        eligible = [p for p in ready if not p.terminated and p.arrival_time <= now]
        if not eligible:
            return None
        if running is not None and running not in eligible:
            running = None
        return self._selectors[self.algorithm](eligible, running, slice_used, now)

    # Purpose: Tells the CPU whether the running process must rotate out
    def quantum_expired(self, slice_used):
        return self.algorithm is Algorithm.RR and slice_used >= self.quantum

    def _select_fcfs(self, eligible, running, slice_used, now):
        if running is not None:
            return running
        return min(eligible, key=lambda p: p.arrival_key())

    def _select_sjf(self, eligible, running, slice_used, now):
        if running is not None:
            return running
        return min(eligible, key=lambda p: (p.burst_size,) + p.arrival_key())

    def _select_srt(self, eligible, running, slice_used, now):
        best = min(eligible, key=lambda p: (p.remaining_burst,) + p.arrival_key())
        # equal remaining time keeps the running process
        if running is not None and not best.remaining_burst < running.remaining_burst:
            return running
        return best

    def _select_rr(self, eligible, running, slice_used, now):
        if running is not None and slice_used < self.quantum:
            return running
        return eligible[0]

    def _select_hrrn(self, eligible, running, slice_used, now):
        if running is not None:
            return running
        return min(eligible, key=lambda p: (-p.response_ratio(now),) + p.arrival_key())

    def __repr__(self):
        if self.algorithm is Algorithm.RR:
            return f"SchedulingPolicy(RR, quantum={self.quantum})"
        return f"SchedulingPolicy({self.algorithm.value})"
