from collections.abc import Mapping
from dataclasses import dataclass, asdict, fields

from ossim.errors import InvalidConfiguration
from ossim.memory import Strategy
from ossim.scheduler import Algorithm

# Memory setup (positions; one per program line)
PRIMARY_MEMORY_SIZE = 256 # primary pool size
SECONDARY_MEMORY_SIZE = 512 # secondary pool size
OS_RESERVED = 0 # positions held by the OS at the start of primary memory

# CPU setup
DEFAULT_CPU_COUNT = 1
SLOTS_PER_CPU = 5 # concurrent process slots per CPU unit
DEFAULT_QUANTUM = 5 # ticks per time slice for round robin

# Clock setup
TICK_INTERVAL = 1.0 # wall seconds per simulated second in automatic mode
MAX_STEPS = 100000 # safety bound for run_to_completion

# Arrival generation
FIRST_ARRIVAL = 1 # arrival time of the first loaded process
ARRIVAL_MIN = 1
ARRIVAL_MAX = 5


# Represents the configuration of a single simulation run
@dataclass
class SimConfig:
    cpu_count: int = DEFAULT_CPU_COUNT
    algorithm: str = "FCFS"
    quantum: int = DEFAULT_QUANTUM
    primary_size: int = PRIMARY_MEMORY_SIZE
    secondary_size: int = SECONDARY_MEMORY_SIZE
    os_reserved: int = OS_RESERVED
    strategy: str = "FIRST_FIT"
    tick_interval: float = TICK_INTERVAL

    # Purpose: Rejects configurations the simulation cannot start with
    def validate(self):
        for name in ("cpu_count", "quantum", "primary_size", "secondary_size", "os_reserved"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise InvalidConfiguration(f"{name} must be an integer, got {value!r}")
        if self.cpu_count < 1:
            raise InvalidConfiguration(f"cpu_count must be at least 1, got {self.cpu_count}")
        if self.quantum <= 0:
            raise InvalidConfiguration(f"quantum must be positive, got {self.quantum}")
        if self.primary_size <= 0 or self.secondary_size <= 0:
            raise InvalidConfiguration("memory pool sizes must be positive")
        if self.os_reserved < 0 or self.os_reserved >= self.primary_size:
            raise InvalidConfiguration(
                f"os_reserved must be in [0, {self.primary_size}), got {self.os_reserved}")
        interval = self.tick_interval
        if not isinstance(interval, (int, float)) or isinstance(interval, bool):
            raise InvalidConfiguration(f"tick_interval must be a number, got {interval!r}")
        if interval < 0:
            raise InvalidConfiguration("tick_interval cannot be negative")
        Algorithm.parse(self.algorithm)
        Strategy.parse(self.strategy)
        return self

    @property
    def scheduling_algorithm(self):
        return Algorithm.parse(self.algorithm)

    @property
    def allocation_strategy(self):
        return Strategy.parse(self.strategy)

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, Mapping):
            raise InvalidConfiguration(f"Configuration must be a mapping, got {type(data).__name__}")
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise InvalidConfiguration(f"Unknown configuration keys: {', '.join(sorted(unknown))}")
        return cls(**data).validate()

    def to_dict(self):
        return asdict(self)
