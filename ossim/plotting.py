import matplotlib
matplotlib.use("Agg")  # files only; no display needed
import matplotlib.pyplot as plt
from matplotlib.patches import Patch

from ossim.log import logger

CPU_COLORS = ["tab:blue", "tab:orange", "tab:green", "tab:red", "tab:purple", "tab:brown"]
FREE_COLOR = "#E2E8F0"
OS_COLOR = "dimgray"
UNOWNED_COLOR = "silver"


# Purpose: Generates a PNG Gantt chart, one row per process, coloured by CPU
def export_gantt_chart(stats, path, title="Simulation"):
    slices = stats.gantt()
    if not slices:
        return None

    pids = sorted({s["pid"] for s in slices})
    pid_to_y = {pid: i for i, pid in enumerate(pids)}
    cpus = sorted({s["cpu"] for s in slices})

    fig, ax = plt.subplots(figsize=(10, max(2, len(pids) * 0.8)))
    for s in slices:
        width = s["end"] - s["start"]
        color = CPU_COLORS[s["cpu"] % len(CPU_COLORS)]
        y_center = pid_to_y[s["pid"]]
        ax.broken_barh([(s["start"], width)], (y_center - 0.35, 0.7),
                       facecolors=color, edgecolor="black")
        ax.text(s["start"] + width / 2.0, y_center, f"P{s['pid']}",
                ha="center", va="center", fontsize=7)

    ax.set_yticks(range(len(pids)))
    ax.set_yticklabels([f"PID {p}" for p in pids])
    ax.set_xlabel("Time (ticks)")
    ax.set_title(f"Scheduling Gantt Chart: {title}")
    ax.grid(True, axis="x", linestyle="--", alpha=0.5)
    ax.legend(handles=[Patch(color=CPU_COLORS[c % len(CPU_COLORS)], label=f"CPU {c}") for c in cpus],
              title="CPUs", loc="upper right")

    fig.savefig(path, dpi=150)
    plt.close(fig)
    logger.info(f"[METRICS] Gantt chart saved to '{path}'")
    return path


# Purpose: Draws each pool as a bar of extents: owned, free, or OS reserved
def export_memory_map(snapshot, path):
    pools = list(snapshot.values())
    fig, ax = plt.subplots(figsize=(10, 1 + len(pools) * 0.9))
    owners = sorted({b["owner"] for p in pools for b in p["blocks"] if b["owner"] is not None})
    owner_color = {pid: CPU_COLORS[i % len(CPU_COLORS)] for i, pid in enumerate(owners)}

    for y, pool in enumerate(pools):
        for b in pool["blocks"]:
            if b["free"]:
                color, label = FREE_COLOR, None
            elif b["reserved"]:
                color, label = OS_COLOR, "OS"
            elif b["owner"] is None:
                color, label = UNOWNED_COLOR, None
            else:
                color, label = owner_color[b["owner"]], f"P{b['owner']}"
            ax.broken_barh([(b["start"], b["size"])], (y - 0.35, 0.7),
                           facecolors=color, edgecolor="black")
            if label:
                ax.text(b["start"] + b["size"] / 2.0, y, label, ha="center", va="center", fontsize=7)

    ax.set_yticks(range(len(pools)))
    ax.set_yticklabels([f"{p['pool']} ({p['free']}/{p['size']} free)" for p in pools])
    ax.set_xlabel("Position")
    ax.set_title("Memory Map")

    fig.savefig(path, dpi=150)
    plt.close(fig)
    logger.info(f"[MEM] memory map saved to '{path}'")
    return path
