from dataclasses import dataclass

from ossim.errors import InvariantViolation, StatisticsUnavailable
from ossim.log import logger


# Final timing of one terminated process
@dataclass(frozen=True)
class ProcessReport:
    pid: int
    name: str
    cpu: int
    burst: int
    arrival: int
    start: int
    end: int
    turnaround: int
    response_ratio: float

    # Ticks spent in the system (arrival tick through end tick) minus ticks executing
    @property
    def waiting(self):
        return self.end - self.arrival + 1 - self.burst


# Represents the system performance metrics collected during a run
class StatisticsCollector:
    def __init__(self, expected=0):
        self.expected = expected
        self.records = {}
        self.context_switches = 0
        self.cpu_active_ticks = 0
        self.total_ticks = 0
        self.executions = [] # (pid, cpu, tick) for every busy CPU tick

    # Purpose: Counts one CPU tick, busy or idle
    def record_tick(self, cpu_id, process, now):
        self.total_ticks += 1
        if process is not None:
            self.cpu_active_ticks += 1
            self.executions.append((process.pid, cpu_id, now))

    # Purpose: Records data when a process finishes execution
    def record(self, process):
        if process.pid in self.records:
            raise InvariantViolation(f"PID {process.pid} terminated twice")
        if not process.terminated or process.remaining_burst != 0:
            raise InvariantViolation(f"PID {process.pid} recorded before it terminated")
        if not process.end_time >= process.start_time >= process.arrival_time:
            raise InvariantViolation(
                f"PID {process.pid} has impossible times: arrival={process.arrival_time}, "
                f"start={process.start_time}, end={process.end_time}")
        turnaround = process.end_time - process.arrival_time
        report = ProcessReport(
            pid=process.pid,
            name=process.name,
            cpu=process.cpu_id,
            burst=process.burst_size,
            arrival=process.arrival_time,
            start=process.start_time,
            end=process.end_time,
            turnaround=turnaround,
            response_ratio=turnaround / process.burst_size,
        )
        self.records[process.pid] = report
        logger.info(f"[METRICS] PID {process.pid} turnaround={turnaround} Tr/Ts={report.response_ratio:.2f}")
        return report

    @property
    def complete(self):
        return len(self.records) >= self.expected

    def report(self):
        return tuple(sorted(self.records.values(), key=lambda r: r.pid))

    @property
    def utilization(self):
        return self.cpu_active_ticks / max(1, self.total_ticks)

    # Purpose: Aggregate averages, available once every process has terminated
    def summary(self):
        if not self.complete:
            raise StatisticsUnavailable(
                f"{len(self.records)} of {self.expected} processes have terminated")
        reports = self.report()
        count = len(reports)
        if count == 0:
            return {"processes": 0, "avg_turnaround": 0.0, "avg_response_ratio": 0.0,
                    "avg_waiting": 0.0, "utilization": self.utilization,
                    "context_switches": self.context_switches}
        return {
            "processes": count,
            "avg_turnaround": sum(r.turnaround for r in reports) / count,
            "avg_response_ratio": sum(r.response_ratio for r in reports) / count,
            "avg_waiting": sum(r.waiting for r in reports) / count,
            "utilization": self.utilization,
            "context_switches": self.context_switches,
        }

    # Purpose: Execution slices per process and CPU, contiguous ticks merged
    def gantt(self):
        slices = []
        for pid, cpu, tick in sorted(self.executions, key=lambda e: (e[0], e[1], e[2])):
            last = slices[-1] if slices else None
            if last and last["pid"] == pid and last["cpu"] == cpu and last["end"] == tick - 1:
                last["end"] = tick
            else:
                slices.append({"pid": pid, "cpu": cpu, "start": tick - 1, "end": tick})
        return slices

    # Purpose: Renders a summary table of the collected metrics
    def format_report(self, title):
        lines = [f"METRICS REPORT ({title})",
                 f"{'PID':<6}{'Name':<16}{'CPU':<5}{'Burst':<7}{'Arrival':<9}{'Start':<7}"
                 f"{'End':<7}{'Turnaround':<12}{'Tr/Ts':<8}"]
        for r in self.report():
            lines.append(f"{r.pid:<6}{r.name[:15]:<16}{r.cpu:<5}{r.burst:<7}{r.arrival:<9}{r.start:<7}"
                         f"{r.end:<7}{r.turnaround:<12}{r.response_ratio:<8.2f}")
        summary = self.summary()
        lines.append("")
        lines.append(f"Average Turnaround Time: {summary['avg_turnaround']:.4f}")
        lines.append(f"Average Response Ratio (Tr/Ts): {summary['avg_response_ratio']:.4f}")
        lines.append(f"Average Waiting Time: {summary['avg_waiting']:.4f}")
        lines.append(f"CPU Utilization: {summary['utilization'] * 100:.2f}%")
        lines.append(f"Total Context Switches: {summary['context_switches']}")
        return "\n".join(lines)
