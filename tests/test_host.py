"""Tests for host metric sampling with psutil stubbed out."""

from collections import namedtuple
from unittest.mock import MagicMock

import psutil
import pytest

from mysql_health import host

CpuTimes = namedtuple("CpuTimes", "user system")
VirtualMemory = namedtuple("VirtualMemory", "total available")
DiskUsage = namedtuple("DiskUsage", "total used")


def _process(name, create_time, cpu_readings=()):
    proc = MagicMock()
    proc.pid = int(create_time)
    proc.info = {"name": name, "create_time": create_time}
    proc.cpu_times.side_effect = [CpuTimes(user, system) for user, system in cpu_readings]
    return proc


@pytest.fixture
def fake_psutil(monkeypatch):
    processes = []
    monkeypatch.setattr(psutil, "process_iter", lambda attrs=None: iter(processes))
    monkeypatch.setattr(psutil, "virtual_memory", lambda: VirtualMemory(16 * 1024 ** 3, 8 * 1024 ** 3))
    monkeypatch.setattr(psutil, "disk_usage", lambda path: DiskUsage(100 * 1024 ** 3, 40 * 1024 ** 3))
    monkeypatch.setattr(psutil, "cpu_count", lambda: 4)
    return processes


class TestFindProcess:
    def test_oldest_exact_match(self, fake_psutil):
        fake_psutil.extend([
            _process("mysqld_safe", 10),
            _process("mysqld", 300),
            _process("mysqld", 200),
        ])
        assert host.find_process("mysqld").info["create_time"] == 200

    def test_not_found(self, fake_psutil):
        fake_psutil.append(_process("postgres", 10))
        assert host.find_process("mysqld") is None


class TestSampleProcessCpu:
    def test_delta_over_window(self):
        proc = _process("mysqld", 1, [(10.0, 2.0), (13.0, 3.0)])
        sleeps = []
        assert host.sample_process_cpu(proc, 3, sleep=sleeps.append) == 4.0
        assert sleeps == [3]

    def test_never_negative(self):
        proc = _process("mysqld", 1, [(10.0, 2.0), (9.0, 2.0)])
        assert host.sample_process_cpu(proc, 1, sleep=lambda s: None) == 0.0

    def test_process_vanished(self):
        proc = MagicMock()
        proc.cpu_times.side_effect = psutil.NoSuchProcess(1)
        sleeps = []
        assert host.sample_process_cpu(proc, 3, sleep=sleeps.append) is None
        assert sleeps == []


class TestCollectHostMetrics:
    def test_full_reading(self, fake_psutil):
        fake_psutil.append(_process("mysqld", 1, [(1.0, 1.0), (3.0, 2.0)]))
        metrics = host.collect_host_metrics("/var/lib/mysql", sample_seconds=2, sleep=lambda s: None)
        assert metrics.process_found
        assert metrics.cpu_seconds == 3.0
        assert metrics.sample_seconds == 2
        assert metrics.cpu_count == 4
        assert metrics.mem_total == 16 * 1024 ** 3
        assert metrics.mem_available == 8 * 1024 ** 3
        assert metrics.disk_path == "/var/lib/mysql"
        assert metrics.disk_used == 40 * 1024 ** 3

    def test_missing_process_skips_sampling(self, fake_psutil, caplog):
        sleeps = []
        metrics = host.collect_host_metrics("/var/lib/mysql", sleep=sleeps.append)
        assert not metrics.process_found
        assert metrics.cpu_seconds is None
        assert sleeps == []
        assert "process not found" in caplog.text

    def test_no_datadir(self, fake_psutil):
        metrics = host.collect_host_metrics(None, sleep=lambda s: None)
        assert metrics.disk_total is None
        assert metrics.disk_used is None

    def test_unreadable_disk(self, fake_psutil, monkeypatch):
        def fail(path):
            raise PermissionError(path)
        monkeypatch.setattr(psutil, "disk_usage", fail)
        metrics = host.collect_host_metrics("/var/lib/mysql", sleep=lambda s: None)
        assert metrics.disk_total is None
