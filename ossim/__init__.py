from ossim.clock import ClockState, SimulationClock
from ossim.config import SimConfig
from ossim.cpu import CPUUnit
from ossim.dispatcher import Dispatcher
from ossim.errors import (
    InsufficientMemory,
    InvalidConfiguration,
    InvariantViolation,
    NoAvailableSlot,
    SimulationError,
    SimulationStopped,
    StatisticsUnavailable,
)
from ossim.kernel import Kernel, SimulationState
from ossim.loader import assign_arrival_times, load_processes
from ossim.memory import PRIMARY, SECONDARY, MemoryAllocator, MemoryBlock, MemoryPool, Strategy
from ossim.metrics import ProcessReport, StatisticsCollector
from ossim.process import Process, ProcessState
from ossim.scheduler import Algorithm, SchedulingPolicy

__version__ = "1.0.0"
