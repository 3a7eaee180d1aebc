import time

import pytest

from ossim.clock import ClockState, SimulationClock
from ossim.config import SimConfig
from ossim.errors import SimulationError, SimulationStopped
from ossim.kernel import Kernel, SimulationState


def loaded_kernel(make_process, interval=0, bursts=(3, 2)):
    kernel = Kernel(SimConfig(tick_interval=interval))
    kernel.load([make_process(pid, burst, 1) for pid, burst in enumerate(bursts, start=1)])
    return kernel


def test_clock_publishes_time_after_each_tick():
    seen = []
    state = SimulationState()
    clock = SimulationClock(state, lambda now: seen.append((now, state.now)), interval=0)
    assert clock.state is ClockState.IDLE
    for _ in range(3):
        clock.step()
    assert seen == [(1, 0), (2, 1), (3, 2)]
    assert state.now == 3
    assert clock.state is ClockState.RUNNING_MANUAL


def test_manual_steps_until_stopped(make_process):
    kernel = loaded_kernel(make_process)
    assert kernel.step() == 1
    assert kernel.clock.state is ClockState.RUNNING_MANUAL
    while kernel.clock.state is not ClockState.STOPPED:
        kernel.step()
    assert kernel.now == 5
    assert kernel.finished
    with pytest.raises(SimulationStopped):
        kernel.step()


def test_automatic_run_completes(make_process):
    kernel = loaded_kernel(make_process)
    kernel.run()
    assert kernel.wait(timeout=10)
    assert kernel.clock.state is ClockState.STOPPED
    assert kernel.now == 5
    assert all(p.terminated for p in kernel.processes)


def test_halt_leaves_a_consistent_resumable_state(make_process):
    kernel = loaded_kernel(make_process, interval=30)
    kernel.run()
    time.sleep(0.05)
    kernel.halt()
    assert kernel.clock.state is ClockState.RUNNING_MANUAL
    assert kernel.now in (0, 1)
    kernel.verify()
    before = kernel.now
    kernel.step()
    assert kernel.now == before + 1


def test_step_rejected_while_running_automatically(make_process):
    kernel = loaded_kernel(make_process, interval=30)
    kernel.run()
    try:
        with pytest.raises(SimulationError):
            kernel.step()
    finally:
        kernel.halt()


def test_stop_is_terminal(make_process):
    kernel = loaded_kernel(make_process)
    kernel.step()
    kernel.stop()
    assert kernel.clock.state is ClockState.STOPPED
    with pytest.raises(SimulationStopped):
        kernel.run()
    kernel.reset()
    assert kernel.clock.state is ClockState.IDLE
    assert kernel.now == 0


def test_failure_in_automatic_mode_is_raised_to_the_caller():
    def advance(now):
        if now == 2:
            raise RuntimeError("tick failed")

    state = SimulationState()
    clock = SimulationClock(state, advance, interval=0)
    clock.run()
    with pytest.raises(RuntimeError, match="tick failed"):
        clock.wait(timeout=5)
    assert clock.state is ClockState.STOPPED
    assert state.now == 1
    assert clock.wait(timeout=1)
