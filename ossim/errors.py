# Exceptions raised by the simulator core


class SimulationError(Exception):
    pass


# Raised when a pool has no free extent large enough for a request
class InsufficientMemory(SimulationError):
    def __init__(self, pool, requested):
        super().__init__(f"Not enough space in {pool} memory for {requested} positions")
        self.pool = pool
        self.requested = requested


# Raised when every slot of the chosen CPU is occupied
class NoAvailableSlot(SimulationError):
    def __init__(self, cpu_id):
        super().__init__(f"CPU {cpu_id} has no empty slot")
        self.cpu_id = cpu_id


class InvalidConfiguration(SimulationError):
    pass


class InvariantViolation(SimulationError):
    pass


class SimulationStopped(SimulationError):
    pass


class StatisticsUnavailable(SimulationError):
    pass
