import random

from ossim.clock import ClockState, SimulationClock
from ossim.config import MAX_STEPS, SimConfig
from ossim.cpu import CPUUnit
from ossim.dispatcher import Dispatcher
from ossim.errors import InvalidConfiguration, SimulationError
from ossim.loader import assign_arrival_times
from ossim.log import logger
from ossim.memory import MemoryAllocator
from ossim.metrics import StatisticsCollector
from ossim.process import ProcessState
from ossim.scheduler import SchedulingPolicy


# Represents the shared state of one run: the global time and the process registry
class SimulationState:
    def __init__(self, processes=()):
        self.now = 0
        self.processes = list(processes)

    @property
    def finished(self):
        return bool(self.processes) and all(p.terminated for p in self.processes)


# Represents the OS kernel that owns the components of a run and drives it
class Kernel:
    def __init__(self, config=None, rng=None, check_invariants=True):
        self.config = (config if config is not None else SimConfig()).validate()
        self.rng = rng if rng is not None else random.Random()
        self.check_invariants = check_invariants
        self.processes = []
        self._build()

    # Purpose: Creates fresh components for a new run over the loaded processes
    def _build(self):
        cfg = self.config
        self.state = SimulationState(self.processes)
        self.allocator = MemoryAllocator(cfg.primary_size, cfg.secondary_size,
                                         cfg.allocation_strategy, cfg.os_reserved)
        self.stats = StatisticsCollector(expected=len(self.processes))
        self.cpus = [
            CPUUnit(cpu_id, SchedulingPolicy(cfg.scheduling_algorithm, cfg.quantum), self.stats)
            for cpu_id in range(cfg.cpu_count)
        ]
        self.dispatcher = Dispatcher(self.cpus, self.allocator, self.stats, self.rng)
        self.clock = SimulationClock(self.state, self._advance, cfg.tick_interval)
        for process in self.processes:
            process.reset()
            self.dispatcher.admit(process)

    # Purpose: Registers processes for this run; missing arrival times are generated
    def load(self, processes):
        processes = list(processes)
        if self.clock.state is not ClockState.IDLE:
            raise InvalidConfiguration("Processes can only be loaded before the run starts")
        known = {p.pid for p in self.processes}
        limit = self.allocator.max_request()
        for process in processes:
            if process.pid in known:
                raise InvalidConfiguration(f"Duplicate process id {process.pid}")
            known.add(process.pid)
            if process.state not in (ProcessState.NEW, ProcessState.WAITING_ASSIGNMENT):
                raise InvalidConfiguration(
                    f"{process.name} is {process.state.value}; only new processes can be loaded")
            if process.burst_size > limit:
                raise InvalidConfiguration(
                    f"{process.name} needs {process.burst_size} positions; no pool can hold more than {limit}")

        assign_arrival_times([p for p in processes if p.arrival_time is None], self.rng,
                             first=bool(not self.processes and processes and processes[0].arrival_time is None))
        for process in processes:
            process.load_order = len(self.processes)
            self.processes.append(process)
            self.state.processes.append(process)
            self.dispatcher.admit(process)
            logger.info(f"[LOAD] PID {process.pid} ({process.name}) burst={process.burst_size} "
                        f"arrival={process.arrival_time}")
        self.stats.expected = len(self.processes)
        return processes

    def _advance(self, now):
        self.dispatcher.tick(now)
        if self.check_invariants:
            self.verify()

    def _require_processes(self):
        if not self.processes:
            raise InvalidConfiguration("No processes loaded")

    @property
    def now(self):
        return self.state.now

    @property
    def finished(self):
        return self.state.finished

    def step(self):
        self._require_processes()
        return self.clock.step()

    def run(self):
        self._require_processes()
        self.clock.run()

    def halt(self):
        self.clock.halt()

    def stop(self):
        self.clock.stop()

    def wait(self, timeout=None):
        return self.clock.wait(timeout)

    # Purpose: Runs the main simulation loop until all processes terminate
    def run_to_completion(self, max_steps=MAX_STEPS):
        self._require_processes()
        steps = 0
        while self.clock.state is not ClockState.STOPPED:
            if steps >= max_steps:
                raise SimulationError(f"Simulation did not finish within {max_steps} ticks")
            self.clock.step()
            steps += 1
        return self.stats.report()

    # Purpose: Discards the current run and prepares a new one with the same processes
    def reset(self):
        if self.clock.running:
            self.clock.halt()
        self._build()
        logger.info("[LOAD] simulation reset")

    # Purpose: Checks every cross-component invariant; raises InvariantViolation
    def verify(self):
        self.allocator.check()
        self.dispatcher.check(self.processes)

    def snapshot(self):
        with self.clock.tick_lock:
            view = self.dispatcher.snapshot()
            view["time"] = self.state.now
            view["clock"] = self.clock.state.value
            view["processes"] = [p.snapshot() for p in self.processes]
            return view

    def memory_snapshot(self):
        with self.clock.tick_lock:
            return self.allocator.snapshot()

    def statistics(self):
        return {"processes": self.stats.report(), "summary": self.stats.summary()}

    def format_report(self):
        cfg = self.config
        title = cfg.scheduling_algorithm.value
        if title == "RR":
            title = f"RR q={cfg.quantum}"
        return self.stats.format_report(f"{title}, {cfg.cpu_count} CPU, {cfg.allocation_strategy.value}")
