"""MySQL snapshot collector."""

import logging
import time
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from .host import collect_host_metrics
from .models import (
    DatabaseConnectionError,
    MetricSnapshot,
    SnapshotLoadError,
)
from .parser import parse_key_value_rows
from .utils import CheckSettings, ConnectionProfile

logger = logging.getLogger("mhc.collector")

CONNECT_TIMEOUT = 10

# Baseline queries; any failure here is fatal
STATUS_QUERY = "SHOW GLOBAL STATUS"
VARIABLES_QUERY = "SHOW GLOBAL VARIABLES"
VERSION_QUERY = "SELECT VERSION()"


def build_url(profile: ConnectionProfile) -> URL:
    """Build a PyMySQL connection URL; a socket takes precedence over host/port."""
    query = {"unix_socket": profile.socket} if profile.socket else {}
    return URL.create(
        "mysql+pymysql",
        username=profile.user,
        password=profile.password or None,
        host=None if profile.socket else profile.host,
        port=None if profile.socket else profile.port,
        database=profile.database,
        query=query,
    )


def create_mysql_engine(profile: ConnectionProfile) -> Engine:
    return create_engine(
        build_url(profile),
        poolclass=NullPool,
        connect_args={"connect_timeout": CONNECT_TIMEOUT},
    )


class MySQLSession:
    """A single open connection used for the snapshot and the live query."""

    def __init__(self, connection: Connection, label: str):
        self.connection = connection
        self.label = label

    def _load_key_values(self, query: str) -> Dict[str, str]:
        start_time = time.time()
        try:
            rows = self.connection.execute(text(query)).fetchall()
        except SQLAlchemyError as e:
            raise SnapshotLoadError(f"{query}: {e}") from e
        result = parse_key_value_rows(rows)
        logger.debug(f"[{self.label}] {query} -> {len(result)} rows ({time.time() - start_time:.2f}s)")
        return result

    def load_version(self) -> str:
        try:
            version = self.connection.execute(text(VERSION_QUERY)).scalar()
        except SQLAlchemyError as e:
            raise SnapshotLoadError(f"{VERSION_QUERY}: {e}") from e
        return str(version or "")

    def load_snapshot(self, settings: Optional[CheckSettings] = None) -> MetricSnapshot:
        """
        Load status, variables and version, then sample host metrics.

        Raises:
            SnapshotLoadError: Any of the baseline queries failed
        """
        settings = settings or CheckSettings()
        status = self._load_key_values(STATUS_QUERY)
        variables = self._load_key_values(VARIABLES_QUERY)
        version = self.load_version()
        logger.info(f"[{self.label}] MySQL {version}: {len(status)} status counters, {len(variables)} variables")

        host = collect_host_metrics(
            datadir=variables.get("datadir"),
            sample_seconds=settings.sample_seconds,
            process_name=settings.process_name,
        )
        return MetricSnapshot(status=status, variables=variables, version=version, host=host)

    def query_scalar(self, query: str) -> Optional[str]:
        """
        Run a read-only query and return the first column of the first row.

        Returns None when the query fails (feature disabled, access denied).
        """
        try:
            value = self.connection.execute(text(query)).scalar()
        except SQLAlchemyError as e:
            logger.debug(f"[{self.label}] Query failed: {e}")
            return None
        return None if value is None else str(value)


@contextmanager
def mysql_session(profile: ConnectionProfile) -> Iterator[MySQLSession]:
    """
    Open a connection for the duration of a health check run.

    The connection and engine are released on every exit path.

    Raises:
        DatabaseConnectionError: The server could not be reached or refused login
    """
    label = profile.label or profile.display_name
    engine = create_mysql_engine(profile)
    try:
        try:
            connection = engine.connect()
        except SQLAlchemyError as e:
            raise DatabaseConnectionError(f"failed to connect to mysql ({label}): {e}") from e

        logger.info(f"[DB CONNECT] {label}")
        try:
            yield MySQLSession(connection, label)
        finally:
            connection.close()
            logger.info(f"[DB DISCONNECT] {label}")
    finally:
        engine.dispose()
