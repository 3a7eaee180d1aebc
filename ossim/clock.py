import threading
from enum import Enum

from ossim.config import TICK_INTERVAL
from ossim.errors import SimulationError, SimulationStopped
from ossim.log import logger


class ClockState(Enum):
    IDLE = "IDLE" # configured, no tick yet
    RUNNING_MANUAL = "RUNNING_MANUAL"
    RUNNING_AUTO = "RUNNING_AUTO"
    STOPPED = "STOPPED" # terminal for this run


# Represents the global simulation clock: one tick is one simulated second.
# `advance(now)` performs all work of tick `now`; the clock only publishes
# `state.now` once that work is complete.
class SimulationClock:
    def __init__(self, state, advance, interval=TICK_INTERVAL):
        self.sim = state
        self._advance = advance
        self.interval = interval
        self.state = ClockState.IDLE
        self.tick_lock = threading.Lock() # held for the whole of every tick
        self._halt = threading.Event()
        self._thread = None
        self._error = None

    @property
    def running(self):
        return self.state is ClockState.RUNNING_AUTO

    def _check_not_stopped(self):
        if self.state is ClockState.STOPPED:
            raise SimulationStopped("The simulation run has stopped; reset to start a new one")

    # caller holds tick_lock
    def _tick(self):
        now = self.sim.now + 1
        self._advance(now)
        self.sim.now = now
        if self.sim.finished:
            self.state = ClockState.STOPPED
            logger.info(f"[CLOCK] all processes terminated at t={now}")

    # Purpose: Advances exactly one tick in manual mode
    def step(self):
        self._check_not_stopped()
        if self.state is ClockState.RUNNING_AUTO:
            raise SimulationError("Halt the automatic run before stepping manually")
        self.state = ClockState.RUNNING_MANUAL
        with self.tick_lock:
            self._tick()
        return self.sim.now

    # Purpose: Starts ticking continuously on a background thread
    def run(self):
        self._check_not_stopped()
        if self.state is ClockState.RUNNING_AUTO:
            return
        self._halt.clear()
        self._error = None
        self.state = ClockState.RUNNING_AUTO
        self._thread = threading.Thread(target=self._loop, name="ossim-clock", daemon=True)
        self._thread.start()
        logger.info(f"[CLOCK] automatic mode, one tick every {self.interval}s")

    def _loop(self):
        try:
            while not self._halt.is_set():
                with self.tick_lock:
                    if self._halt.is_set():
                        return
                    self._tick()
                    if self.state is ClockState.STOPPED:
                        return
                if self._halt.wait(self.interval):
                    return
        except Exception as e:
            logger.error(f"[CLOCK] run aborted at t={self.sim.now}: {e!r}")
            self._error = e
            self.state = ClockState.STOPPED

    # Purpose: Stops automatic mode after the tick in progress; the run stays resumable
    def halt(self):
        self._halt.set()
        self._join()
        if self.state is ClockState.RUNNING_AUTO:
            self.state = ClockState.RUNNING_MANUAL
            logger.info(f"[CLOCK] halted at t={self.sim.now}")
        self._raise_pending()

    # Purpose: Blocks until the automatic run finishes or `timeout` elapses
    def wait(self, timeout=None):
        thread = self._thread
        if thread is not None:
            thread.join(timeout)
            if not thread.is_alive():
                self._thread = None
        self._raise_pending()
        return self.state is ClockState.STOPPED

    # Purpose: Ends the run for good
    def stop(self):
        self._halt.set()
        self._join()
        self.state = ClockState.STOPPED
        self._raise_pending()

    def _join(self):
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()
            self._thread = None

    def _raise_pending(self):
        if self._error is not None:
            error, self._error = self._error, None
            raise error
