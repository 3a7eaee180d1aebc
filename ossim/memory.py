import threading
from enum import Enum

from ossim.errors import InsufficientMemory, InvalidConfiguration, InvariantViolation
from ossim.log import logger

PRIMARY = "primary"
SECONDARY = "secondary"


class Strategy(Enum):
    FIRST_FIT = "FIRST_FIT"
    BEST_FIT = "BEST_FIT"
    WORST_FIT = "WORST_FIT"
    NEXT_FIT = "NEXT_FIT"

    @classmethod
    def parse(cls, name):
        if isinstance(name, cls):
            return name
        key = str(name).strip().upper().replace("-", "_").replace(" ", "_")
        try:
            return cls[key]
        except KeyError:
            raise InvalidConfiguration(f"Unknown allocation strategy '{name}'") from None


# Represents one extent of a pool, either free or owned by a process
class MemoryBlock:
    def __init__(self, pool, start, size, owner=None, free=False, reserved=False):
        self.pool = pool
        self.start = start
        self.size = size
        self.owner = owner # pid of the owning process, if any
        self.free = free
        self.reserved = reserved # OS segment; never released

    @property
    def end(self):
        return self.start + self.size - 1

    @property
    def location(self):
        return (self.pool, self.start, self.end)

    def __repr__(self):
        label = "free" if self.free else "OS" if self.reserved else f"owner={self.owner}"
        return f"MemoryBlock({self.pool} {self.start}-{self.end}, {label})"


# Represents one allocation arena with its own block table and lock
class MemoryPool:
    def __init__(self, name, size, strategy=Strategy.FIRST_FIT, reserved=0):
        if size <= 0:
            raise InvalidConfiguration(f"{name} memory size must be positive, got {size}")
        if reserved < 0 or reserved >= size:
            raise InvalidConfiguration(f"{name} reserved segment must be in [0, {size})")
        self.name = name
        self.size = size
        self.reserved = reserved
        self.strategy = Strategy.parse(strategy)
        self.lock = threading.Lock()
        self.blocks = []
        self._cursor = 0 # NEXT_FIT resumes scanning from this offset
        if reserved:
            self.blocks.append(MemoryBlock(name, 0, reserved, reserved=True))
        self.blocks.append(MemoryBlock(name, reserved, size - reserved, free=True))

    @property
    def usable_size(self):
        return self.size - self.reserved

    @property
    def free(self):
        return sum(b.size for b in self.blocks if b.free)

    @property
    def allocated(self):
        return sum(b.size for b in self.blocks if not b.free)

    # Purpose: Picks the index of the free block to carve from, per strategy
    def _find_candidate(self, size):
        fits = [(i, b) for i, b in enumerate(self.blocks) if b.free and b.size >= size]
        if not fits:
            return -1
        if self.strategy is Strategy.FIRST_FIT:
            return fits[0][0]
        if self.strategy is Strategy.BEST_FIT:
            return min(fits, key=lambda f: f[1].size)[0]
        if self.strategy is Strategy.WORST_FIT:
            return max(fits, key=lambda f: f[1].size)[0]
        # NEXT_FIT: first fit at or after the cursor, wrapping around
        for i, b in fits:
            if b.start >= self._cursor:
                return i
        return fits[0][0]

    # Purpose: Allocates a contiguous block of `size` positions for `owner`
    def allocate(self, owner, size):
        if size <= 0:
            raise InvalidConfiguration(f"Cannot allocate {size} positions")
        with self.lock:
            idx = self._find_candidate(size)
            if idx == -1:
                logger.debug(f"[MEM] {self.name}: no extent for PID {owner} ({size} positions)")
                raise InsufficientMemory(self.name, size)

            hole = self.blocks[idx]
            block = MemoryBlock(self.name, hole.start, size, owner=owner)
            pieces = [block]
            tail = hole.end - block.end
            if tail > 0:
                pieces.append(MemoryBlock(self.name, block.end + 1, tail, free=True))
            self.blocks[idx:idx + 1] = pieces
            self._cursor = (block.end + 1) % self.size

            logger.info(f"[MEM] {self.strategy.value} Alloc PID {owner} -> {self.name} {block.start}-{block.end}")
            return block

    # Purpose: Frees a block and coalesces adjacent free blocks
    def release(self, block):
        with self.lock:
            idx = next((i for i, b in enumerate(self.blocks) if b is block), None)
            if idx is None or block.free:
                raise InvariantViolation(f"{block!r} is not a live block of {self.name} memory")
            if block.reserved:
                raise InvariantViolation(f"Refusing to release the OS segment of {self.name} memory")
            self.blocks[idx] = MemoryBlock(self.name, block.start, block.size, free=True)

            i = 0
            while i < len(self.blocks) - 1:
                cur, nxt = self.blocks[i], self.blocks[i + 1]
                if cur.free and nxt.free and cur.end + 1 == nxt.start:
                    cur.size += nxt.size
                    self.blocks.pop(i + 1)
                else:
                    i += 1
            logger.info(f"[MEM] Freed PID {block.owner} from {self.name} {block.start}-{block.end}")

    # Purpose: Verifies the block table tiles the pool exactly
    def check(self):
        with self.lock:
            offset = 0
            for b in self.blocks:
                if b.start != offset or b.size <= 0:
                    raise InvariantViolation(f"{self.name} memory table is inconsistent at {b!r}")
                offset = b.end + 1
            if offset != self.size or self.allocated + self.free != self.size:
                raise InvariantViolation(
                    f"{self.name} memory accounting broken: {self.allocated} + {self.free} != {self.size}")

    def snapshot(self):
        with self.lock:
            free_blocks = [b.size for b in self.blocks if b.free]
            free = sum(free_blocks)
            largest = max(free_blocks, default=0)
            return {
                "pool": self.name,
                "size": self.size,
                "strategy": self.strategy.value,
                "allocated": self.size - free,
                "free": free,
                "largest_free": largest,
                "free_extents": len(free_blocks),
                "fragmentation": 0.0 if free == 0 else 1 - largest / free,
                "blocks": [
                    {"start": b.start, "end": b.end, "size": b.size,
                     "owner": b.owner, "free": b.free, "reserved": b.reserved}
                    for b in self.blocks
                ],
            }


# Represents primary and secondary memory sharing one placement strategy
class MemoryAllocator:
    def __init__(self, primary_size, secondary_size, strategy=Strategy.FIRST_FIT, os_reserved=0):
        self.strategy = Strategy.parse(strategy)
        self.pools = {
            PRIMARY: MemoryPool(PRIMARY, primary_size, self.strategy, reserved=os_reserved),
            SECONDARY: MemoryPool(SECONDARY, secondary_size, self.strategy),
        }

    def pool(self, name):
        try:
            return self.pools[name]
        except KeyError:
            raise InvalidConfiguration(f"Unknown memory pool '{name}'") from None

    def allocate(self, pool, requested_size, owner=None):
        return self.pool(pool).allocate(owner, requested_size)

    # Purpose: Places a process in primary memory, falling back to secondary
    def place(self, process):
        try:
            return self.allocate(PRIMARY, process.burst_size, process.pid)
        except InsufficientMemory:
            logger.debug(f"[MEM] PID {process.pid} does not fit in primary memory, trying secondary")
        return self.allocate(SECONDARY, process.burst_size, process.pid)

    def release(self, block):
        self.pool(block.pool).release(block)

    # Largest request any pool could ever satisfy
    def max_request(self):
        return max(p.usable_size for p in self.pools.values())

    def check(self):
        for pool in self.pools.values():
            pool.check()

    def snapshot(self):
        return {name: pool.snapshot() for name, pool in self.pools.items()}
