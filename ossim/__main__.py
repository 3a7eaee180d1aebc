"""
Command-line driver: load program files, simulate, print the metrics report.

Usage:
python -m ossim prog1.asm prog2.asm --algorithm RR --quantum 2 --cpus 2
"""

import argparse
import json
import random
import sys
from dataclasses import replace

from ossim import log
from ossim.clock import ClockState
from ossim.config import SimConfig
from ossim.errors import SimulationError
from ossim.kernel import Kernel
from ossim.loader import assign_arrival_times, load_processes


def build_parser():
    parser = argparse.ArgumentParser(prog="ossim", description="CPU scheduling and memory allocation simulator")
    parser.add_argument("programs", nargs="+", help="Program files; each non-blank line is one instruction")
    parser.add_argument("--config", help="JSON file with simulation settings")
    parser.add_argument("-a", "--algorithm", help="FCFS, SJF, SRT, RR or HRRN")
    parser.add_argument("-q", "--quantum", type=int, help="Round robin time quantum")
    parser.add_argument("-c", "--cpus", type=int, dest="cpu_count", help="Number of CPU units")
    parser.add_argument("--primary", type=int, dest="primary_size", help="Primary memory size")
    parser.add_argument("--secondary", type=int, dest="secondary_size", help="Secondary memory size")
    parser.add_argument("--reserved", type=int, dest="os_reserved", help="Primary positions reserved for the OS")
    parser.add_argument("-s", "--strategy", help="first-fit, best-fit, worst-fit or next-fit")
    parser.add_argument("--arrival", type=int, nargs="+", help="Arrival times in program order")
    parser.add_argument("--seed", type=int, help="Seed for random arrivals and CPU choice")
    parser.add_argument("--gantt", help="Write a Gantt chart PNG to this path")
    parser.add_argument("--memory-map", help="Write the busiest memory map PNG to this path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every simulation event")
    return parser


def load_config(args):
    config = SimConfig()
    if args.config:
        with open(args.config, "r") as fh:
            config = SimConfig.from_dict(json.load(fh))
    overrides = {name: getattr(args, name)
                 for name in ("algorithm", "quantum", "cpu_count", "primary_size",
                              "secondary_size", "os_reserved", "strategy")
                 if getattr(args, name) is not None}
    # CLI runs never pace ticks against the wall clock
    return replace(config, tick_interval=0, **overrides).validate()


def main(argv=None):
    args = build_parser().parse_args(argv)
    log.setup_logger(args.verbose)

    try:
        config = load_config(args)
        rng = random.Random(args.seed)
        processes = assign_arrival_times(load_processes(args.programs), rng, manual=args.arrival)
        kernel = Kernel(config, rng=rng)
        kernel.load(processes)

        busiest = kernel.memory_snapshot()
        while kernel.clock.state is not ClockState.STOPPED:
            kernel.step()
            memory = kernel.memory_snapshot()
            if sum(p["allocated"] for p in memory.values()) > sum(p["allocated"] for p in busiest.values()):
                busiest = memory
    except (SimulationError, OSError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    print(kernel.format_report())
    if args.gantt or args.memory_map:
        from ossim.plotting import export_gantt_chart, export_memory_map
        if args.gantt:
            export_gantt_chart(kernel.stats, args.gantt, config.scheduling_algorithm.value)
        if args.memory_map:
            export_memory_map(busiest, args.memory_map)
    return 0


if __name__ == "__main__":
    sys.exit(main())
