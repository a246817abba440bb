"""
One-shot container statistics.

A stats read with ``stream=False`` carries both the current counters
(``cpu_stats``) and the previous ones (``precpu_stats``), so a single sample
is enough to compute a CPU percentage.
"""

from typing import Any, Dict

from .model import StatsSample


def cpu_percent(cpu_delta: float, system_delta: float, online_cpus: int) -> float:
    if cpu_delta <= 0 or system_delta <= 0:
        return 0.0
    return (cpu_delta / system_delta) * online_cpus * 100.0


def memory_percent(usage: float, limit: float) -> float:
    if limit <= 0:
        return 0.0
    return usage / limit * 100.0


def sample_from_raw(stats: Dict[str, Any]) -> StatsSample:
    """Pick the counters out of an engine stats document."""
    cpu_stats = stats.get('cpu_stats') or {}
    precpu_stats = stats.get('precpu_stats') or {}
    cpu_usage = cpu_stats.get('cpu_usage') or {}
    precpu_usage = precpu_stats.get('cpu_usage') or {}
    memory_stats = stats.get('memory_stats') or {}

    online_cpus = cpu_stats.get('online_cpus') or len(cpu_usage.get('percpu_usage') or []) or 1

    return StatsSample(
        cpu_total=cpu_usage.get('total_usage', 0),
        precpu_total=precpu_usage.get('total_usage', 0),
        system_total=cpu_stats.get('system_cpu_usage', 0),
        presystem_total=precpu_stats.get('system_cpu_usage', 0),
        online_cpus=online_cpus,
        mem_usage=memory_stats.get('usage', 0),
        mem_limit=memory_stats.get('limit', 0),
    )


def sample_cpu_percent(sample: StatsSample) -> float:
    return cpu_percent(
        sample.cpu_total - sample.precpu_total,
        sample.system_total - sample.presystem_total,
        sample.online_cpus,
    )


def sample_memory_percent(sample: StatsSample) -> float:
    return memory_percent(sample.mem_usage, sample.mem_limit)


def format_stats(sample: StatsSample) -> str:
    return (
        f"CPU Usage: {sample_cpu_percent(sample):.2f}%\n"
        f"Memory Usage: {sample.mem_usage} / {sample.mem_limit} "
        f"({sample_memory_percent(sample):.2f}%)"
    )
