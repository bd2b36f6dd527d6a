"""Host-level metrics for the mysqld process and the machine it runs on."""

import logging
import time
from typing import Callable, Optional, Tuple

import psutil

from .models import HostMetrics

logger = logging.getLogger("mhc.host")


def find_process(name: str) -> Optional[psutil.Process]:
    """Return the oldest process whose name matches exactly, or None."""
    matches = []
    for proc in psutil.process_iter(["name", "create_time"]):
        try:
            if proc.info["name"] == name:
                matches.append(proc)
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue

    if not matches:
        return None
    return min(matches, key=lambda p: p.info.get("create_time") or 0)


def process_cpu_seconds(proc: psutil.Process) -> Optional[float]:
    """Accumulated user + system CPU time of a process, in seconds."""
    try:
        times = proc.cpu_times()
    except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess) as e:
        logger.debug(f"Cannot read CPU times for PID {proc.pid}: {e}")
        return None
    return times.user + times.system


def sample_process_cpu(
    proc: psutil.Process,
    sample_seconds: float,
    sleep: Callable[[float], None] = time.sleep
) -> Optional[float]:
    """
    Measure CPU time consumed by a process over a sampling window.

    Blocks for sample_seconds between the two readings.

    Returns:
        CPU seconds used during the window, or None if either reading failed
    """
    first = process_cpu_seconds(proc)
    if first is None:
        return None

    logger.info(f"Sampling CPU of PID {proc.pid} for {sample_seconds:g}s")
    sleep(sample_seconds)

    second = process_cpu_seconds(proc)
    if second is None:
        return None
    return max(second - first, 0.0)


def memory_usage() -> Tuple[Optional[int], Optional[int]]:
    """Return (total, available) physical memory in bytes."""
    try:
        memory = psutil.virtual_memory()
    except (OSError, RuntimeError) as e:
        logger.debug(f"Memory counters unavailable: {e}")
        return None, None
    return memory.total, memory.available


def disk_usage(path: str) -> Tuple[Optional[int], Optional[int]]:
    """Return (total, used) bytes of the filesystem holding path."""
    try:
        usage = psutil.disk_usage(path)
    except OSError as e:
        logger.debug(f"Disk usage unavailable for {path}: {e}")
        return None, None
    return usage.total, usage.used


def collect_host_metrics(
    datadir: Optional[str],
    sample_seconds: float = 3,
    process_name: str = "mysqld",
    sleep: Callable[[float], None] = time.sleep
) -> HostMetrics:
    """
    Collect every host reading the system checks need.

    Args:
        datadir: MySQL data directory; its filesystem is measured
        sample_seconds: CPU sampling window
        process_name: Name of the server process to sample
        sleep: Blocking wait used between CPU readings

    Returns:
        HostMetrics with None for every reading that was unavailable
    """
    proc = find_process(process_name)
    cpu_seconds = None
    if proc is None:
        logger.warning(f"{process_name} process not found - CPU check will be skipped")
    else:
        cpu_seconds = sample_process_cpu(proc, sample_seconds, sleep)

    mem_total, mem_available = memory_usage()

    disk_total = disk_used = None
    if datadir:
        disk_total, disk_used = disk_usage(datadir)

    return HostMetrics(
        process_found=proc is not None,
        cpu_seconds=cpu_seconds,
        sample_seconds=sample_seconds,
        cpu_count=psutil.cpu_count() or 1,
        mem_total=mem_total,
        mem_available=mem_available,
        disk_path=datadir,
        disk_total=disk_total,
        disk_used=disk_used,
    )
