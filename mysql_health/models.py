"""Data models for health check snapshots, results and categories."""

import enum
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Tuple

from .metrics import NOT_AVAILABLE
from .parser import ServerVersion, parse_number


class Level(enum.IntEnum):
    """Check severity. NOT_APPLICABLE never takes part in aggregation."""
    OK = 0
    WARN = 1
    CRIT = 2
    NOT_APPLICABLE = 3

    @property
    def label(self) -> str:
        if self is Level.NOT_APPLICABLE:
            return "SKIP"
        return self.name

    @property
    def counts(self) -> bool:
        return self is not Level.NOT_APPLICABLE


@dataclass(frozen=True)
class HostMetrics:
    """Host-level readings sampled once per run. None means unavailable."""
    process_found: bool = False
    cpu_seconds: Optional[float] = None
    sample_seconds: Optional[float] = None
    cpu_count: Optional[int] = None
    mem_total: Optional[int] = None
    mem_available: Optional[int] = None
    disk_path: Optional[str] = None
    disk_total: Optional[int] = None
    disk_used: Optional[int] = None


@dataclass(frozen=True)
class MetricSnapshot:
    """
    One immutable read of server status, variables, version and host metrics.

    Missing keys are expected (older servers, disabled subsystems); the
    accessors report them as None instead of raising.
    """
    status: Mapping[str, str]
    variables: Mapping[str, str]
    version: str = ""
    host: HostMetrics = field(default_factory=HostMetrics)

    def __post_init__(self):
        object.__setattr__(self, "status", MappingProxyType(dict(self.status)))
        object.__setattr__(self, "variables", MappingProxyType(dict(self.variables)))

    @property
    def server_version(self) -> ServerVersion:
        return ServerVersion.parse(self.version)

    def status_number(self, key: str) -> Optional[float]:
        if key not in self.status:
            return None
        return parse_number(self.status[key])

    def variable_number(self, key: str) -> Optional[float]:
        if key not in self.variables:
            return None
        return parse_number(self.variables[key])

    def missing_status(self, *keys: str) -> List[str]:
        return [key for key in keys if key not in self.status]

    def missing_variables(self, *keys: str) -> List[str]:
        return [key for key in keys if key not in self.variables]


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a single health check."""
    name: str
    level: Level
    value: str
    threshold: str
    description: str = ""
    detail: str = ""
    metric: Optional[float] = None
    note: str = ""

    @property
    def is_issue(self) -> bool:
        return self.level in (Level.WARN, Level.CRIT)


@dataclass(frozen=True)
class CheckInfo:
    """Static text describing a check; builds its results."""
    name: str
    threshold: str
    description: str
    detail: str

    def result(self, level: Level, value: str, metric: Optional[float] = None,
               note: str = "") -> CheckResult:
        return CheckResult(
            name=self.name,
            level=level,
            value=value,
            threshold=self.threshold,
            description=self.description,
            detail=self.detail,
            metric=metric,
            note=note,
        )

    def not_applicable(self, note: str) -> CheckResult:
        return self.result(Level.NOT_APPLICABLE, NOT_AVAILABLE, note=note)


def worst_level(levels: Iterable[Level]) -> Level:
    """Highest severity among levels, ignoring NOT_APPLICABLE; OK when none count."""
    return max((level for level in levels if level.counts), default=Level.OK)


@dataclass(frozen=True)
class Category:
    """A fixed, ordered group of check results."""
    name: str
    checks: Tuple[CheckResult, ...] = ()

    @property
    def worst_level(self) -> Level:
        return worst_level(check.level for check in self.checks)

    @property
    def issues(self) -> List[CheckResult]:
        return [check for check in self.checks if check.is_issue]


def overall_level(categories: Iterable[Category]) -> Level:
    return worst_level(category.worst_level for category in categories)


class HealthCheckError(Exception):
    """Base class for errors that abort the whole run."""


class ConfigError(HealthCheckError):
    """The connection profile could not be read."""


class DatabaseConnectionError(HealthCheckError):
    """The database session could not be established."""


class SnapshotLoadError(HealthCheckError):
    """Status, variables or version could not be loaded."""
