"""
Health check definitions.

Every check is a pure function of a MetricSnapshot returning one CheckResult.
A check whose inputs are missing, or whose denominator is zero, returns a
NOT_APPLICABLE result instead of raising.
"""

import logging
from typing import Callable, List, Optional, Sequence

from .metrics import (
    complement_percentage,
    format_bytes,
    format_minutes,
    format_percent,
    percentage,
)
from .models import Category, CheckInfo, CheckResult, Level, MetricSnapshot
from .parser import parse_number
from .utils import CheckSettings

logger = logging.getLogger("mhc.checks")

# Returns the first column of the first row, or None when the query failed
QueryScalar = Callable[[str], Optional[str]]

TRUNCATED_STATEMENTS_QUERY = (
    "SELECT COUNT(*) FROM performance_schema.events_statements_history "
    "WHERE SQL_TEXT LIKE '%...'"
)

# Server version that introduced innodb_redo_log_capacity
REDO_LOG_CAPACITY_VERSION = (8, 0, 30)


def _missing(snapshot: MetricSnapshot, status: Sequence[str] = (),
             variables: Sequence[str] = ()) -> str:
    """Describe missing inputs, or return an empty string when all are present."""
    missing = snapshot.missing_status(*status) + snapshot.missing_variables(*variables)
    if not missing:
        return ""
    return "missing: " + ", ".join(missing)


def _zero(name: str) -> str:
    return f"{name} is zero"


# =============================================================================
# SYSTEM
# =============================================================================

CPU_UTILIZATION = CheckInfo(
    name="CPU Utilization",
    threshold="<= 80% OK, 80-100% WARN, > 100% CRIT",
    description="Average CPU usage by the mysqld process.",
    detail=(
        "CPU utilization measures how much processing power mysqld is consuming "
        "relative to the available cores. High sustained CPU usage (above 80%) may "
        "indicate poorly optimized queries, missing indexes, or that the server needs "
        "more processing capacity. Values above 100% indicate contention across cores."
    ),
)


def check_cpu_utilization(snapshot: MetricSnapshot) -> CheckResult:
    info = CPU_UTILIZATION
    host = snapshot.host

    if not host.process_found:
        return info.not_applicable("mysqld process not found")
    if host.cpu_seconds is None:
        return info.not_applicable("process CPU time unavailable")
    if not host.sample_seconds:
        return info.not_applicable("sample duration is zero")

    cores_used = host.cpu_seconds / host.sample_seconds
    usage = percentage(cores_used, host.cpu_count or 1)

    if usage <= 80:
        level = Level.OK
    elif usage <= 100:
        level = Level.WARN
    else:
        level = Level.CRIT
    note = f"sampled {host.sample_seconds:g}s over {host.cpu_count or 1} core(s)"
    return info.result(level, format_percent(usage), usage, note)


DISK_SPACE_USAGE = CheckInfo(
    name="Disk Space Usage",
    threshold="< 80% OK, >= 80% WARN",
    description="Percentage of used disk space on the MySQL data directory filesystem.",
    detail=(
        "Monitors the filesystem where MySQL stores its data files. Running out of "
        "disk space can cause MySQL to crash, corrupt data, or refuse writes entirely. "
        "Keep at least 20% free for operations like ALTER TABLE, binary logs, and "
        "temporary files."
    ),
)


def check_disk_space(snapshot: MetricSnapshot) -> CheckResult:
    info = DISK_SPACE_USAGE
    host = snapshot.host

    if not snapshot.variables.get("datadir"):
        return info.not_applicable("missing: datadir")
    if host.disk_total is None or host.disk_used is None:
        return info.not_applicable(f"filesystem usage unavailable for {snapshot.variables['datadir']}")

    usage = percentage(host.disk_used, host.disk_total)
    if usage is None:
        return info.not_applicable(_zero("filesystem size"))

    level = Level.OK if usage < 80 else Level.WARN
    note = f"{format_bytes(host.disk_used)} of {format_bytes(host.disk_total)} on {host.disk_path}"
    return info.result(level, format_percent(usage), usage, note)


MEMORY_UTILIZATION = CheckInfo(
    name="Memory Utilization",
    threshold="< 80% OK, >= 80% WARN",
    description="Current memory usage of the server.",
    detail=(
        "Measures how much of the server's physical RAM is in use. MySQL relies "
        "heavily on memory for the InnoDB buffer pool, thread stacks, sort buffers, and "
        "caches. If memory utilization consistently exceeds 80%, the server may start "
        "swapping to disk, which drastically reduces database performance."
    ),
)


def check_memory(snapshot: MetricSnapshot) -> CheckResult:
    info = MEMORY_UTILIZATION
    host = snapshot.host

    if host.mem_total is None or host.mem_available is None:
        return info.not_applicable("memory counters unavailable")

    usage = percentage(host.mem_total - host.mem_available, host.mem_total)
    if usage is None:
        return info.not_applicable(_zero("total memory"))

    level = Level.OK if usage < 80 else Level.WARN
    return info.result(level, format_percent(usage), usage,
                       f"{format_bytes(host.mem_available)} available")


CONNECTION_UTILIZATION = CheckInfo(
    name="Connection Utilization",
    threshold="< 70% OK, 70-85% WARN, >= 85% CRIT",
    description="Utilization of available database connections.",
    detail=(
        "Shows the peak percentage of max_connections that has been used since the "
        "server started. If this approaches 85-100%, new connections may be refused, "
        "causing application errors. If consistently high, consider increasing "
        "max_connections or investigating connection pooling."
    ),
)


def check_connection_utilization(snapshot: MetricSnapshot) -> CheckResult:
    info = CONNECTION_UTILIZATION
    missing = _missing(snapshot, status=["Max_used_connections"], variables=["max_connections"])
    if missing:
        return info.not_applicable(missing)

    max_used = snapshot.status_number("Max_used_connections")
    max_conn = snapshot.variable_number("max_connections")
    usage = percentage(max_used, max_conn)
    if usage is None:
        return info.not_applicable(_zero("max_connections"))

    if usage < 70:
        level = Level.OK
    elif usage < 85:
        level = Level.WARN
    else:
        level = Level.CRIT
    return info.result(level, format_percent(usage), usage,
                       f"{max_used:.0f} of {max_conn:.0f} connections")


OPEN_FILES_UTILIZATION = CheckInfo(
    name="Open Files Utilization",
    threshold="< 85% OK, >= 85% WARN",
    description="Usage of file descriptors by MySQL.",
    detail=(
        "MySQL opens file descriptors for table data files, log files, and "
        "connections. If the open files count approaches the OS limit, MySQL cannot "
        "open new tables or accept new connections, leading to errors. Ensure the "
        "open_files_limit is high enough for your workload."
    ),
)


def check_open_files(snapshot: MetricSnapshot) -> CheckResult:
    info = OPEN_FILES_UTILIZATION
    missing = _missing(snapshot, status=["Open_files"], variables=["open_files_limit"])
    if missing:
        return info.not_applicable(missing)

    usage = percentage(snapshot.status_number("Open_files"),
                       snapshot.variable_number("open_files_limit"))
    if usage is None:
        return info.not_applicable(_zero("open_files_limit"))

    level = Level.OK if usage < 85 else Level.WARN
    return info.result(level, format_percent(usage), usage)


# =============================================================================
# STORAGE ENGINE (MyISAM / InnoDB)
# =============================================================================

MYISAM_CACHE_HIT_RATE = CheckInfo(
    name="MyISAM Cache Hit Rate",
    threshold="> 95% OK, <= 95% WARN",
    description="Effectiveness of the MyISAM key cache (index access).",
    detail=(
        "Measures what percentage of MyISAM index read requests are served from "
        "the key buffer cache rather than from disk. A rate below 95% means MySQL "
        "frequently reads index blocks from disk, which is significantly slower. "
        "Increase key_buffer_size if this is low and you use MyISAM tables."
    ),
)


def check_myisam_cache_hit_rate(snapshot: MetricSnapshot) -> CheckResult:
    info = MYISAM_CACHE_HIT_RATE
    missing = _missing(snapshot, status=["Key_reads", "Key_read_requests"])
    if missing:
        return info.not_applicable(missing)

    rate = complement_percentage(snapshot.status_number("Key_reads"),
                                 snapshot.status_number("Key_read_requests"))
    if rate is None:
        return info.not_applicable(_zero("Key_read_requests"))

    level = Level.OK if rate > 95 else Level.WARN
    return info.result(level, format_percent(rate), rate)


MYISAM_KEY_WRITE_EFFICIENCY = CheckInfo(
    name="MyISAM Key Write Efficiency",
    threshold="efficiency >= 90% OK, < 90% WARN",
    description="The proportion of key block writes absorbed by the key cache.",
    detail=(
        "Shows what fraction of MyISAM key write requests result in actual "
        "physical disk writes. A low ratio means most writes are absorbed by the "
        "cache before being flushed to disk, which is ideal. High physical write "
        "ratios indicate the key buffer is too small to effectively batch writes."
    ),
)


def check_myisam_key_write_efficiency(snapshot: MetricSnapshot) -> CheckResult:
    info = MYISAM_KEY_WRITE_EFFICIENCY
    missing = _missing(snapshot, status=["Key_writes", "Key_write_requests"])
    if missing:
        return info.not_applicable(missing + " (common on InnoDB-only servers)")

    writes = snapshot.status_number("Key_writes")
    requests = snapshot.status_number("Key_write_requests")
    ratio = percentage(writes, requests)
    if ratio is None:
        return info.not_applicable(_zero("Key_write_requests"))

    efficiency = complement_percentage(writes, requests)
    level = Level.OK if efficiency >= 90 else Level.WARN
    value = f"{format_percent(ratio)} (eff: {format_percent(efficiency)})"
    return info.result(level, value, efficiency)


INNODB_CACHE_HIT_RATE = CheckInfo(
    name="InnoDB Cache Hit Rate",
    threshold="> 90% OK, <= 90% WARN",
    description="How often data is retrieved from the buffer pool instead of disk.",
    detail=(
        "The InnoDB buffer pool is the most critical memory structure in MySQL. "
        "This metric shows the percentage of data page reads served from RAM. A hit "
        "rate below 90% means MySQL is doing excessive disk I/O, which is orders of "
        "magnitude slower. The primary fix is increasing innodb_buffer_pool_size."
    ),
)


def check_innodb_cache_hit_rate(snapshot: MetricSnapshot) -> CheckResult:
    info = INNODB_CACHE_HIT_RATE
    missing = _missing(snapshot, status=["Innodb_buffer_pool_read_requests",
                                         "Innodb_buffer_pool_reads"])
    if missing:
        return info.not_applicable(missing)

    requests = snapshot.status_number("Innodb_buffer_pool_read_requests")
    reads = snapshot.status_number("Innodb_buffer_pool_reads")
    rate = percentage(requests - reads, requests)
    if rate is None:
        return info.not_applicable(_zero("Innodb_buffer_pool_read_requests"))

    level = Level.OK if rate > 90 else Level.WARN
    return info.result(level, format_percent(rate), rate)


def redo_log_capacity(snapshot: MetricSnapshot) -> float:
    """
    Redo log capacity in bytes.

    Servers from 8.0.30 expose a single innodb_redo_log_capacity; older ones
    size the redo log as innodb_log_files_in_group * innodb_log_file_size.
    Returns 0 when neither is available.
    """
    if snapshot.server_version.at_least(*REDO_LOG_CAPACITY_VERSION):
        capacity = snapshot.variable_number("innodb_redo_log_capacity")
        if capacity:
            return capacity

    files_in_group = snapshot.variable_number("innodb_log_files_in_group") or 0.0
    file_size = snapshot.variable_number("innodb_log_file_size") or 0.0
    return files_in_group * file_size


def redo_log_coverage_info(min_minutes: float) -> CheckInfo:
    return CheckInfo(
        name="Redo Log Coverage",
        threshold=f">= {min_minutes:g}min OK, < {min_minutes:g}min WARN (ideal 45-75min)",
        description="Minutes of redo log capacity before a flush is required.",
        detail=(
            "The InnoDB redo log records all changes to data. This check calculates "
            "how many minutes of write activity the redo log can hold before it must be "
            "flushed. Ideally this should be around 60 minutes (45-75 range). Too small "
            "means frequent checkpoint flushes causing I/O spikes; too large means longer "
            "crash recovery times."
        ),
    )


def check_redo_log_coverage(snapshot: MetricSnapshot,
                            settings: Optional[CheckSettings] = None) -> CheckResult:
    settings = settings or CheckSettings()
    info = redo_log_coverage_info(settings.redo_log_min_minutes)
    missing = _missing(snapshot, status=["Uptime", "Innodb_os_log_written"])
    if missing:
        return info.not_applicable(missing)

    uptime = snapshot.status_number("Uptime")
    written = snapshot.status_number("Innodb_os_log_written")
    if written == 0:
        return info.not_applicable(_zero("Innodb_os_log_written"))

    capacity = redo_log_capacity(snapshot)
    if capacity == 0:
        return info.not_applicable("redo log capacity unavailable")

    minutes = (uptime / 60.0) * capacity / written
    level = Level.OK if minutes >= settings.redo_log_min_minutes else Level.WARN
    return info.result(level, format_minutes(minutes), minutes,
                       f"redo capacity {format_bytes(capacity)}")


INNODB_DIRTY_PAGES = CheckInfo(
    name="InnoDB Dirty Pages Ratio",
    threshold="< 75% OK, >= 75% WARN",
    description="Percentage of modified pages in memory not yet written back to disk.",
    detail=(
        "Dirty pages are data pages modified in the buffer pool but not yet flushed "
        "to disk. A high ratio (>= 75%) during normal operations suggests the flushing "
        "mechanism cannot keep up with writes, potentially leading to stalls when the "
        "buffer pool runs out of clean pages. Tune innodb_io_capacity and "
        "innodb_max_dirty_pages_pct."
    ),
)


def check_innodb_dirty_pages(snapshot: MetricSnapshot) -> CheckResult:
    info = INNODB_DIRTY_PAGES
    missing = _missing(snapshot, status=["Innodb_buffer_pool_pages_dirty",
                                         "Innodb_buffer_pool_pages_total"])
    if missing:
        return info.not_applicable(missing)

    ratio = percentage(snapshot.status_number("Innodb_buffer_pool_pages_dirty"),
                       snapshot.status_number("Innodb_buffer_pool_pages_total"))
    if ratio is None:
        return info.not_applicable(_zero("Innodb_buffer_pool_pages_total"))

    level = Level.OK if ratio < 75 else Level.WARN
    return info.result(level, format_percent(ratio), ratio)


# =============================================================================
# CACHE / MEMORY
# =============================================================================

THREAD_CACHE_HIT_RATE = CheckInfo(
    name="Thread Cache Hit Rate",
    threshold="> 50% OK, <= 50% WARN",
    description="The percentage of times a requested thread is found in the cache.",
    detail=(
        "When a client connects, MySQL can reuse a cached thread instead of "
        "creating a new one. Thread creation is expensive (involves memory allocation "
        "and OS thread setup). A hit rate below 50% means more than half of connections "
        "require new thread creation. Increase thread_cache_size to improve this."
    ),
)


def check_thread_cache_hit_rate(snapshot: MetricSnapshot) -> CheckResult:
    info = THREAD_CACHE_HIT_RATE
    missing = _missing(snapshot, status=["Threads_created", "Connections"])
    if missing:
        return info.not_applicable(missing)

    rate = complement_percentage(snapshot.status_number("Threads_created"),
                                 snapshot.status_number("Connections"))
    if rate is None:
        return info.not_applicable(_zero("Connections"))

    level = Level.OK if rate > 50 else Level.WARN
    return info.result(level, format_percent(rate), rate)


THREAD_CACHE_RATIO = CheckInfo(
    name="Thread Cache Ratio",
    threshold="> 10% OK, <= 10% WARN",
    description="The efficiency of the thread cache for reusing threads.",
    detail=(
        "Shows what proportion of all threads ever created are currently sitting "
        "in the cache ready for reuse. A ratio below 10% suggests the thread cache is "
        "undersized relative to the connection pattern. Increasing thread_cache_size "
        "allows MySQL to keep more idle threads ready, reducing connection latency."
    ),
)


def check_thread_cache_ratio(snapshot: MetricSnapshot) -> CheckResult:
    info = THREAD_CACHE_RATIO
    missing = _missing(snapshot, status=["Threads_cached", "Threads_created"])
    if missing:
        return info.not_applicable(missing)

    ratio = percentage(snapshot.status_number("Threads_cached"),
                       snapshot.status_number("Threads_created"))
    if ratio is None:
        return info.not_applicable(_zero("Threads_created"))

    level = Level.OK if ratio > 10 else Level.WARN
    return info.result(level, format_percent(ratio), ratio)


TABLE_CACHE_HIT_RATE = CheckInfo(
    name="Table Cache Hit Rate",
    threshold=">= 90% OK, < 90% WARN",
    description="Efficiency of the table open cache.",
    detail=(
        "Each time MySQL accesses a table, it needs an open file handle. The "
        "table cache stores these handles to avoid repeatedly opening and closing "
        "files. A hit rate below 90% means MySQL frequently re-opens tables from "
        "disk, adding latency. Increase table_open_cache if this is consistently low."
    ),
)


def check_table_cache_hit_rate(snapshot: MetricSnapshot) -> CheckResult:
    info = TABLE_CACHE_HIT_RATE

    # Hit/miss counters (MySQL 5.6.6+) are exact; never mix them with the
    # open/opened approximation.
    if not snapshot.missing_status("Table_open_cache_hits", "Table_open_cache_misses"):
        hits = snapshot.status_number("Table_open_cache_hits")
        misses = snapshot.status_number("Table_open_cache_misses")
        rate = percentage(hits, hits + misses)
        if rate is None:
            return info.not_applicable("Table_open_cache_hits + Table_open_cache_misses is zero")
        note = "from Table_open_cache_hits/misses"
    else:
        missing = _missing(snapshot, status=["Open_tables", "Opened_tables"])
        if missing:
            return info.not_applicable(missing)
        rate = percentage(snapshot.status_number("Open_tables"),
                          snapshot.status_number("Opened_tables"))
        if rate is None:
            return info.not_applicable(_zero("Opened_tables"))
        note = "approximated from Open_tables/Opened_tables"

    level = Level.OK if rate >= 90 else Level.WARN
    return info.result(level, format_percent(rate), rate, note)


TABLE_DEFINITION_CACHE_HIT_RATE = CheckInfo(
    name="Table Definition Cache Hit Rate",
    threshold="> 75% OK, <= 75% WARN",
    description="The efficiency of the table definition cache.",
    detail=(
        "Table definitions (schema metadata like column types, indexes) are "
        "cached to avoid re-parsing .frm files or data dictionary entries. A hit "
        "rate below 75% means MySQL frequently reloads table metadata, adding "
        "overhead to every query. Increase table_definition_cache for databases "
        "with many tables."
    ),
)


def check_table_definition_cache_hit_rate(snapshot: MetricSnapshot) -> CheckResult:
    info = TABLE_DEFINITION_CACHE_HIT_RATE
    missing = _missing(snapshot, status=["Open_table_definitions", "Opened_table_definitions"])
    if missing:
        return info.not_applicable(missing)

    rate = percentage(snapshot.status_number("Open_table_definitions"),
                      snapshot.status_number("Opened_table_definitions"))
    if rate is None:
        return info.not_applicable(_zero("Opened_table_definitions"))

    level = Level.OK if rate > 75 else Level.WARN
    return info.result(level, format_percent(rate), rate)


TABLE_LOCKING_EFFICIENCY = CheckInfo(
    name="Table Locking Efficiency",
    threshold="> 95% OK, <= 95% WARN",
    description="Percentage of table locks acquired without waiting.",
    detail=(
        "Measures how often table lock requests are granted immediately versus "
        "having to wait. Low efficiency (< 95%) indicates lock contention, which "
        "causes queries to queue and increases response times. If using MyISAM tables, "
        "consider migrating to InnoDB which uses row-level locking instead of "
        "table-level locking."
    ),
)


def check_table_locking_efficiency(snapshot: MetricSnapshot) -> CheckResult:
    info = TABLE_LOCKING_EFFICIENCY
    missing = _missing(snapshot, status=["Table_locks_immediate", "Table_locks_waited"])
    if missing:
        return info.not_applicable(missing)

    immediate = snapshot.status_number("Table_locks_immediate")
    waited = snapshot.status_number("Table_locks_waited")
    rate = percentage(immediate, immediate + waited)
    if rate is None:
        return info.not_applicable("no table locks recorded")

    level = Level.OK if rate > 95 else Level.WARN
    return info.result(level, format_percent(rate), rate)


# =============================================================================
# QUERIES / LOGS
# =============================================================================

SORT_MERGE_PASS_RATIO = CheckInfo(
    name="Sort Merge Pass Ratio",
    threshold="< 10% OK, >= 10% WARN",
    description="The effectiveness of sorting operations.",
    detail=(
        "When MySQL cannot complete a sort in memory, it writes temporary data "
        "to disk and performs merge passes. A high ratio means many sorts spill to "
        "disk, significantly slowing query execution. Increase sort_buffer_size to "
        "allow more sorts to complete in memory, and optimize queries to reduce the "
        "amount of data sorted."
    ),
)


def check_sort_merge_pass_ratio(snapshot: MetricSnapshot) -> CheckResult:
    info = SORT_MERGE_PASS_RATIO
    missing = _missing(snapshot, status=["Sort_merge_passes", "Sort_scan", "Sort_range"])
    if missing:
        return info.not_applicable(missing)

    sorts = snapshot.status_number("Sort_scan") + snapshot.status_number("Sort_range")
    ratio = percentage(snapshot.status_number("Sort_merge_passes"), sorts)
    if ratio is None:
        return info.not_applicable("Sort_scan + Sort_range is zero")

    level = Level.OK if ratio < 10 else Level.WARN
    return info.result(level, format_percent(ratio), ratio)


TEMPORARY_DISK_TABLES = CheckInfo(
    name="Temporary Disk Tables",
    threshold="<= 25% OK, > 25% WARN",
    description="The percentage of temporary tables created on disk instead of in memory.",
    detail=(
        "MySQL creates temporary tables for complex queries (GROUP BY, DISTINCT, "
        "UNION). When these exceed tmp_table_size or max_heap_table_size, they spill "
        "to disk. A ratio above 25% indicates significant disk-based temp table usage. "
        "Increase tmp_table_size and max_heap_table_size, and optimize queries to "
        "reduce temporary table sizes."
    ),
)


def check_temporary_disk_tables(snapshot: MetricSnapshot) -> CheckResult:
    info = TEMPORARY_DISK_TABLES
    missing = _missing(snapshot, status=["Created_tmp_disk_tables", "Created_tmp_tables"])
    if missing:
        return info.not_applicable(missing)

    ratio = percentage(snapshot.status_number("Created_tmp_disk_tables"),
                       snapshot.status_number("Created_tmp_tables"))
    if ratio is None:
        return info.not_applicable(_zero("Created_tmp_tables"))

    level = Level.OK if ratio <= 25 else Level.WARN
    return info.result(level, format_percent(ratio), ratio)


FLUSHING_LOG_WAITS = CheckInfo(
    name="Flushing Log Waits",
    threshold="< 5% OK, 5-20% WARN, > 20% CRIT",
    description="The percentage of log writes that had to wait for the log buffer to be flushed.",
    detail=(
        "When InnoDB needs to write to the redo log but the log buffer is full, "
        "it must wait for the buffer to be flushed to disk. A high wait percentage "
        "means the innodb_log_buffer_size is too small for the write workload, causing "
        "write stalls. Values above 20% require immediate attention."
    ),
)


def check_flushing_log_waits(snapshot: MetricSnapshot) -> CheckResult:
    info = FLUSHING_LOG_WAITS
    missing = _missing(snapshot, status=["Innodb_log_waits", "Innodb_log_writes"])
    if missing:
        return info.not_applicable(missing)

    ratio = percentage(snapshot.status_number("Innodb_log_waits"),
                       snapshot.status_number("Innodb_log_writes"))
    if ratio is None:
        return info.not_applicable(_zero("Innodb_log_writes"))

    if ratio < 5:
        level = Level.OK
    elif ratio <= 20:
        level = Level.WARN
    else:
        level = Level.CRIT
    return info.result(level, format_percent(ratio), ratio)


QUERY_CACHE_FRAGMENTATION = CheckInfo(
    name="Query Cache Fragmentation",
    threshold="frag < 10% AND del < 20% OK, else WARN",
    description="Query cache fragmentation and eviction rate.",
    detail=(
        "The query cache stores SELECT results for reuse. Fragmentation means "
        "free memory is scattered in small blocks, reducing cache efficiency. A high "
        "delete rate means queries are being evicted due to low memory before they "
        "can be reused. The query cache was removed in MySQL 8.0, so this check "
        "only applies to older versions."
    ),
)


def check_query_cache_fragmentation(snapshot: MetricSnapshot) -> CheckResult:
    info = QUERY_CACHE_FRAGMENTATION
    missing = _missing(snapshot, status=["Qcache_free_blocks", "Qcache_total_blocks",
                                         "Qcache_lowmem_prunes", "Qcache_inserts"])
    if missing:
        return info.not_applicable(missing)

    fragmentation = percentage(snapshot.status_number("Qcache_free_blocks"),
                               snapshot.status_number("Qcache_total_blocks"))
    if fragmentation is None:
        return info.not_applicable(_zero("Qcache_total_blocks"))

    # No inserts means the query cache is unused; the delete rate does not apply
    delete_rate = percentage(snapshot.status_number("Qcache_lowmem_prunes"),
                             snapshot.status_number("Qcache_inserts"))

    if fragmentation < 10 and (delete_rate is None or delete_rate < 20):
        level = Level.OK
    else:
        level = Level.WARN
    delete_text = "n/a" if delete_rate is None else format_percent(delete_rate)
    value = f"frag={format_percent(fragmentation)} del={delete_text}"
    return info.result(level, value, fragmentation)


QUERY_TRUNCATION = CheckInfo(
    name="Query Truncation",
    threshold="FALSE = OK, TRUE = WARN",
    description="The presence of truncated SQL query statements.",
    detail=(
        "When SQL query text exceeds the performance_schema max length, it gets "
        "truncated with '...'. This prevents full analysis of slow or problematic "
        "queries. If truncation is detected, incrementally increase max_digest_length, "
        "performance_schema_max_sql_text_length, and "
        "performance_schema_max_digest_length to capture complete query text."
    ),
)


def check_query_truncation(snapshot: MetricSnapshot,
                           query_scalar: Optional[QueryScalar] = None) -> CheckResult:
    info = QUERY_TRUNCATION
    if query_scalar is None:
        return info.not_applicable("live query unavailable")

    raw = query_scalar(TRUNCATED_STATEMENTS_QUERY)
    if raw is None:
        return info.not_applicable("performance_schema statement history unavailable")

    count = int(parse_number(raw))
    if count > 0:
        return info.result(Level.WARN, f"TRUE ({count} truncated)", float(count),
                           f"found {count} truncated statement(s)")
    return info.result(Level.OK, "FALSE", 0.0, "no truncated statements found")


# =============================================================================
# CATEGORIES
# =============================================================================

CATEGORY_SYSTEM = "System"
CATEGORY_ENGINE = "Storage Engine (MyISAM / InnoDB)"
CATEGORY_CACHE = "Cache / Memory"
CATEGORY_QUERIES = "Queries / Logs"


def run_system_checks(snapshot: MetricSnapshot) -> List[CheckResult]:
    return [
        check_cpu_utilization(snapshot),
        check_disk_space(snapshot),
        check_memory(snapshot),
        check_connection_utilization(snapshot),
        check_open_files(snapshot),
    ]


def run_engine_checks(snapshot: MetricSnapshot,
                      settings: Optional[CheckSettings] = None) -> List[CheckResult]:
    return [
        check_myisam_cache_hit_rate(snapshot),
        check_myisam_key_write_efficiency(snapshot),
        check_innodb_cache_hit_rate(snapshot),
        check_redo_log_coverage(snapshot, settings),
        check_innodb_dirty_pages(snapshot),
    ]


def run_cache_checks(snapshot: MetricSnapshot) -> List[CheckResult]:
    return [
        check_thread_cache_hit_rate(snapshot),
        check_thread_cache_ratio(snapshot),
        check_table_cache_hit_rate(snapshot),
        check_table_definition_cache_hit_rate(snapshot),
        check_table_locking_efficiency(snapshot),
    ]


def run_query_checks(snapshot: MetricSnapshot,
                     query_scalar: Optional[QueryScalar] = None) -> List[CheckResult]:
    return [
        check_sort_merge_pass_ratio(snapshot),
        check_temporary_disk_tables(snapshot),
        check_flushing_log_waits(snapshot),
        check_query_cache_fragmentation(snapshot),
        check_query_truncation(snapshot, query_scalar),
    ]


def run_all_checks(
    snapshot: MetricSnapshot,
    settings: Optional[CheckSettings] = None,
    query_scalar: Optional[QueryScalar] = None
) -> List[Category]:
    """
    Evaluate every check against a snapshot.

    Args:
        snapshot: Fully loaded metric snapshot
        settings: Threshold settings (defaults when omitted)
        query_scalar: Live query capability for Query Truncation

    Returns:
        Categories in display order, each with its checks in display order
    """
    settings = settings or CheckSettings()
    categories = [
        Category(CATEGORY_SYSTEM, tuple(run_system_checks(snapshot))),
        Category(CATEGORY_ENGINE, tuple(run_engine_checks(snapshot, settings))),
        Category(CATEGORY_CACHE, tuple(run_cache_checks(snapshot))),
        Category(CATEGORY_QUERIES, tuple(run_query_checks(snapshot, query_scalar))),
    ]

    for category in categories:
        for check in category.checks:
            if check.level is Level.NOT_APPLICABLE:
                logger.debug(f"[SKIP] {check.name}: {check.note}")
            else:
                logger.debug(f"[{check.level.label}] {check.name}: {check.value}")

    return categories
