"""Shared fixtures: snapshot builders with realistic counter values."""

import pytest

from mysql_health.models import HostMetrics, MetricSnapshot


HEALTHY_STATUS = {
    "Uptime": "3600",
    "Connections": "100",
    "Threads_created": "10",
    "Threads_cached": "5",
    "Key_reads": "10",
    "Key_read_requests": "10000",
    "Key_writes": "5",
    "Key_write_requests": "1000",
    "Innodb_buffer_pool_read_requests": "100000",
    "Innodb_buffer_pool_reads": "100",
    "Innodb_os_log_written": "1000",
    "Innodb_buffer_pool_pages_dirty": "10",
    "Innodb_buffer_pool_pages_total": "1000",
    "Max_used_connections": "20",
    "Open_files": "10",
    "Table_open_cache_hits": "990",
    "Table_open_cache_misses": "10",
    "Open_tables": "100",
    "Opened_tables": "120",
    "Open_table_definitions": "90",
    "Opened_table_definitions": "100",
    "Table_locks_immediate": "1000",
    "Table_locks_waited": "1",
    "Sort_merge_passes": "1",
    "Sort_scan": "50",
    "Sort_range": "50",
    "Created_tmp_disk_tables": "5",
    "Created_tmp_tables": "100",
    "Innodb_log_waits": "0",
    "Innodb_log_writes": "1000",
}

HEALTHY_VARIABLES = {
    "max_connections": "100",
    "open_files_limit": "5000",
    "innodb_redo_log_capacity": "60000",
    "innodb_log_files_in_group": "2",
    "innodb_log_file_size": "50331648",
    "datadir": "/var/lib/mysql/",
}

HEALTHY_HOST = HostMetrics(
    process_found=True,
    cpu_seconds=0.3,
    sample_seconds=3,
    cpu_count=4,
    mem_total=16 * 1024 ** 3,
    mem_available=8 * 1024 ** 3,
    disk_path="/var/lib/mysql/",
    disk_total=100 * 1024 ** 3,
    disk_used=40 * 1024 ** 3,
)


@pytest.fixture
def make_snapshot():
    """Build a snapshot from healthy defaults, with overrides and removals."""
    def _make(status=None, variables=None, drop_status=(), drop_variables=(),
              version="8.0.36", host=HEALTHY_HOST):
        merged_status = {**HEALTHY_STATUS, **(status or {})}
        merged_variables = {**HEALTHY_VARIABLES, **(variables or {})}
        for key in drop_status:
            merged_status.pop(key, None)
        for key in drop_variables:
            merged_variables.pop(key, None)
        return MetricSnapshot(
            status=merged_status,
            variables=merged_variables,
            version=version,
            host=host,
        )
    return _make


@pytest.fixture
def snapshot(make_snapshot):
    return make_snapshot()


@pytest.fixture
def empty_snapshot():
    return MetricSnapshot(status={}, variables={}, version="", host=HostMetrics())
