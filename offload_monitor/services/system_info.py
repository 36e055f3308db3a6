"""
Host Metrics - Memory, CPU and runtime identity of the current host.

Every reading degrades on its own: a failing psutil call zeroes the affected
fields and the snapshot is still returned.
"""

import logging
import os
import platform
import sys
import time
from typing import Callable, Tuple

import psutil

from offload_monitor.models.status import SystemSnapshot
from offload_monitor.services.clock import ProcessClock
from offload_monitor.services.offload import current_hostname

logger = logging.getLogger(__name__)

BYTES_PER_GB = 1024 ** 3


def memory_usage_percent(used_gb: float, total_gb: float) -> int:
    """Rounded share of used memory, 0 when the total is unknown."""
    if total_gb <= 0:
        return 0
    return min(max(round(used_gb / total_gb * 100), 0), 100)


def read_memory_gb() -> Tuple[float, float, float]:
    """
    Read host memory.

    Returns:
        (total, free, used) in GB, rounded to two decimals. Free memory is
        what psutil reports as available to new processes.
    """
    try:
        memory = psutil.virtual_memory()
    except (psutil.Error, OSError) as e:
        logger.warning(f"Failed to read memory info: {e}")
        return 0.0, 0.0, 0.0

    total = max(memory.total, 0)
    available = min(max(memory.available, 0), total)
    return (
        round(total / BYTES_PER_GB, 2),
        round(available / BYTES_PER_GB, 2),
        round((total - available) / BYTES_PER_GB, 2),
    )


def read_cpu_count() -> int:
    try:
        count = psutil.cpu_count(logical=True)
    except (psutil.Error, OSError) as e:
        logger.warning(f"Failed to read CPU count: {e}")
        count = None
    return count or os.cpu_count() or 1


def read_host_uptime() -> float:
    try:
        return max(time.time() - psutil.boot_time(), 0.0)
    except (psutil.Error, OSError) as e:
        logger.warning(f"Failed to read host boot time: {e}")
        return 0.0


def collect_system_snapshot(
    clock: ProcessClock,
    hostname_reader: Callable[[], str] = current_hostname,
) -> SystemSnapshot:
    total_gb, free_gb, used_gb = read_memory_gb()

    return SystemSnapshot(
        hostname=hostname_reader(),
        platform_name=sys.platform,
        architecture=platform.machine() or "unknown",
        cpu_core_count=read_cpu_count(),
        total_memory_gb=total_gb,
        free_memory_gb=free_gb,
        used_memory_gb=used_gb,
        memory_usage_percent=memory_usage_percent(used_gb, total_gb),
        process_uptime_seconds=clock.uptime_seconds(),
        host_uptime_seconds=read_host_uptime(),
        started_at=clock.started_at,
        runtime_version=platform.python_version(),
    )
