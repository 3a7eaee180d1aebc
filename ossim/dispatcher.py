import random

from ossim.errors import InsufficientMemory, InvalidConfiguration, InvariantViolation, NoAvailableSlot
from ossim.log import logger
from ossim.process import ProcessState


# Represents the dispatcher: owns the CPU units and the queue of unplaced processes
class Dispatcher:
    def __init__(self, cpus, allocator, stats, rng=None):
        if not cpus:
            raise InvalidConfiguration("At least one CPU unit is required")
        self.cpus = list(cpus)
        self.allocator = allocator
        self.stats = stats
        self.rng = rng if rng is not None else random.Random()
        self.waiting_queue = [] # ordered by arrival time, then load order
        self.terminated = []

    # Purpose: Queues a process whose arrival time has been configured
    def admit(self, process):
        if process.state is not ProcessState.WAITING_ASSIGNMENT:
            raise InvalidConfiguration(f"{process.name} has no arrival time configured")
        self.waiting_queue.append(process)
        self.waiting_queue.sort(key=lambda p: p.arrival_key())

    # Purpose: Picks the target CPU, uniformly at random when there are several
    def choose_cpu(self):
        if len(self.cpus) == 1:
            return self.cpus[0]
        return self.cpus[self.rng.randrange(len(self.cpus))]

    # Purpose: Grants memory and a CPU slot; False leaves the process queued for a retry
    def on_arrival(self, process, now):
        try:
            block = self.allocator.place(process)
        except InsufficientMemory as e:
            logger.debug(f"[DISPATCH] t={now} PID {process.pid} waits for memory: {e}")
            return False

        cpu = self.choose_cpu()
        try:
            if not cpu.assign(process):
                raise NoAvailableSlot(cpu.cpu_id)
        except NoAvailableSlot as e:
            # a waiting process holds no memory
            self.allocator.release(block)
            logger.debug(f"[DISPATCH] t={now} PID {process.pid} re-queued: {e}")
            return False

        process.memory_handle = block
        self.waiting_queue.remove(process)
        logger.info(f"[DISPATCH] t={now} PID {process.pid} placed on CPU {cpu.cpu_id} "
                    f"({block.pool} {block.start}-{block.end})")
        return True

    # Purpose: Releases everything a finished process held and records its timing
    def on_termination(self, process):
        block = process.memory_handle
        if block is None:
            raise InvariantViolation(f"PID {process.pid} terminated without a memory block")
        self.allocator.release(block)
        process.memory_handle = None
        self.terminated.append(process)
        return self.stats.record(process)

    # Purpose: Places every arrived process that can be placed, in queue order
    def place_arrivals(self, now):
        placed = []
        for process in list(self.waiting_queue):
            if process.arrival_time > now:
                break
            if self.on_arrival(process, now):
                placed.append(process)
        return placed

    # Purpose: Runs one global tick: placement first, then each CPU in index order
    def tick(self, now):
        self.place_arrivals(now)
        finished = []
        for cpu in self.cpus:
            for process in cpu.tick(now):
                self.on_termination(process)
                finished.append(process)
        return finished

    # Purpose: Verifies every process is in exactly one of queue, slot or terminated
    def check(self, processes):
        queued = set(map(id, self.waiting_queue))
        slotted = {id(p) for cpu in self.cpus for p in cpu.occupied}
        done = set(map(id, self.terminated))
        for cpu in self.cpus:
            cpu.check()
        for p in processes:
            places = (id(p) in queued) + (id(p) in slotted) + (id(p) in done)
            if places != 1:
                raise InvariantViolation(f"PID {p.pid} is tracked in {places} places")
            if id(p) in done:
                if not p.terminated or p.remaining_burst != 0 or p.memory_handle is not None:
                    raise InvariantViolation(f"Terminated PID {p.pid} is inconsistent: {p!r}")
            elif id(p) in slotted and p.memory_handle is None:
                raise InvariantViolation(f"PID {p.pid} occupies a slot without memory")
            elif id(p) in queued and p.memory_handle is not None:
                raise InvariantViolation(f"Queued PID {p.pid} still holds memory")

    def snapshot(self):
        return {
            "waiting": [p.pid for p in self.waiting_queue],
            "cpus": [cpu.snapshot() for cpu in self.cpus],
        }
