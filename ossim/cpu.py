import threading

from ossim.config import SLOTS_PER_CPU
from ossim.errors import InvalidConfiguration, InvariantViolation
from ossim.log import logger
from ossim.process import ProcessState


# Represents a CPU unit holding up to SLOTS_PER_CPU processes and running one per tick
class CPUUnit:
    def __init__(self, cpu_id, policy, metrics=None, slot_count=SLOTS_PER_CPU):
        if not 1 <= slot_count <= SLOTS_PER_CPU:
            raise InvalidConfiguration(f"A CPU unit holds 1 to {SLOTS_PER_CPU} slots, got {slot_count}")
        self.cpu_id = cpu_id
        self.policy = policy
        self.metrics = metrics
        self.slots = [None] * slot_count
        self.order = [] # occupied slots in arrival-to-CPU order; RR rotates it
        self.current = None # process holding the CPU between ticks
        self.slice_used = 0 # ticks the current process has run since dispatch
        self._last = None # process executed on the previous busy tick
        self.lock = threading.Lock()

    @property
    def occupied(self):
        return [p for p in self.slots if p is not None]

    def has_free_slot(self):
        return any(p is None for p in self.slots)

    # Purpose: Puts a process into the first empty slot; False when the CPU is full
    def assign(self, process):
        with self.lock:
            for index, held in enumerate(self.slots):
                if held is None:
                    self.slots[index] = process
                    self.order.append(process)
                    process.slot = index
                    process.cpu_id = self.cpu_id
                    process.state = ProcessState.READY
                    logger.info(f"[CPU {self.cpu_id}] PID {process.pid} assigned to slot {index}")
                    return True
            return False

    # Purpose: Executes one time unit; returns the processes that terminated
    def tick(self, now):
        with self.lock:
            chosen = self.policy.select(self.order, self.current, self.slice_used, now)
            if self.metrics is not None:
                self.metrics.record_tick(self.cpu_id, chosen, now)
            if chosen is None:
                logger.debug(f"[CPU {self.cpu_id}] idle at t={now}")
                return []

            if chosen is not self.current:
                self._switch_to(chosen, now)
            chosen.state = ProcessState.RUNNING
            if chosen.start_time is None:
                chosen.start_time = now

            chosen.remaining_burst -= 1
            self.slice_used += 1
            self._last = chosen

            if chosen.remaining_burst == 0:
                chosen.state = ProcessState.TERMINATED
                chosen.end_time = now
                self._vacate(chosen)
                logger.info(f"[CPU {self.cpu_id}] PID {chosen.pid} terminated at t={now}")
                return [chosen]

            if self.policy.quantum_expired(self.slice_used):
                self.order.remove(chosen)
                self.order.append(chosen)
                chosen.state = ProcessState.READY
                self.current = None
                self.slice_used = 0
                logger.debug(f"[CPU {self.cpu_id}] PID {chosen.pid} quantum expired at t={now}")
            return []

    # Purpose: Switches CPU control to the next process (context switch)
    def _switch_to(self, process, now):
        if self.current is not None:
            self.current.state = ProcessState.READY
            logger.info(f"[CPU {self.cpu_id}] PID {self.current.pid} preempted by PID {process.pid} at t={now}")
        self.current = process
        self.slice_used = 0
        if process is not self._last:
            if self.metrics is not None:
                self.metrics.context_switches += 1
            logger.info(f"[DISPATCH] CPU {self.cpu_id} -> PID {process.pid} ({self.policy.algorithm.value})")

    def _vacate(self, process):
        self.slots[process.slot] = None
        self.order.remove(process)
        process.slot = None
        if self.current is process:
            self.current = None
            self.slice_used = 0

    def check(self):
        with self.lock:
            held = self.occupied
            if len(self.slots) > SLOTS_PER_CPU or len(held) > SLOTS_PER_CPU:
                raise InvariantViolation(f"CPU {self.cpu_id} holds {len(held)} processes in {len(self.slots)} slots")
            if set(map(id, held)) != set(map(id, self.order)) or len(held) != len(self.order):
                raise InvariantViolation(f"CPU {self.cpu_id} rotation order does not match its slots")
            for index, p in enumerate(self.slots):
                if p is None:
                    continue
                if p.slot != index or p.cpu_id != self.cpu_id or p.terminated:
                    raise InvariantViolation(f"CPU {self.cpu_id} slot {index} holds inconsistent {p!r}")

    def snapshot(self):
        with self.lock:
            return {
                "cpu": self.cpu_id,
                "slots": [p.pid if p is not None else None for p in self.slots],
                "running": self.current.pid if self.current is not None else None,
            }

    def __repr__(self):
        return f"CPUUnit({self.cpu_id}, slots={[p.pid if p else None for p in self.slots]})"
