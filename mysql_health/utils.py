"""Connection profiles, settings and platform helpers."""

import configparser
import logging
import socket
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from .models import ConfigError

logger = logging.getLogger("mhc.config")

DEFAULT_CNF_PATH = "/data/web/.my.cnf"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3306
DEFAULT_DATABASE = "information_schema"
OS_RELEASE_FILE = Path("/etc/os-release")

YAML_SUFFIXES = (".yaml", ".yml")


@dataclass
class ConnectionProfile:
    """Credentials and address of the server to check."""
    user: str
    password: str = ""
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    socket: Optional[str] = None
    database: str = DEFAULT_DATABASE
    label: Optional[str] = None

    @property
    def display_name(self) -> str:
        if self.socket:
            return f"{self.user}@{self.socket}"
        return f"{self.user}@{self.host}:{self.port}"


@dataclass
class CheckSettings:
    """Tunable evaluation settings."""
    sample_seconds: float = 3
    redo_log_min_minutes: float = 45
    process_name: str = "mysqld"


def _parse_port(value, source: str) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ConfigError(f"invalid port {value!r} in {source}")


def parse_mycnf(text: str, source: str = "<string>") -> ConnectionProfile:
    """
    Parse the [client] section of a MySQL option file.

    Args:
        text: Option file contents
        source: File name used in error messages

    Returns:
        ConnectionProfile with defaults for host, port and database
    """
    # Option-file directives (!include, !includedir) are not INI syntax;
    # options before the first group header are ignored. Lines are trimmed
    # so indented options never read as value continuations
    lines = ["[__top__]"]
    lines += [line.strip() for line in text.splitlines() if not line.strip().startswith("!")]

    parser = configparser.ConfigParser(
        allow_no_value=True,
        strict=False,
        interpolation=None,
        comment_prefixes=("#", ";"),
        inline_comment_prefixes=None,
    )
    try:
        parser.read_string("\n".join(lines), source=source)
    except configparser.Error as e:
        raise ConfigError(f"cannot parse {source}: {e}")

    section = next((name for name in parser.sections() if name.lower() == "client"), None)
    values: Dict[str, str] = {}
    if section:
        for key, value in parser.items(section):
            values[key.lower()] = (value or "").strip().strip("\"'")

    if not values.get("user"):
        raise ConfigError(f"no user found in [client] section of {source}")

    return ConnectionProfile(
        user=values["user"],
        password=values.get("password", ""),
        host=values.get("host") or DEFAULT_HOST,
        port=_parse_port(values["port"], source) if values.get("port") else DEFAULT_PORT,
        socket=values.get("socket") or None,
        database=values.get("database") or DEFAULT_DATABASE,
    )


def load_hosts(path: Path) -> List[ConnectionProfile]:
    """Load profiles from a YAML inventory with a top-level `hosts` list."""
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}

    entries = data.get("hosts") if isinstance(data, dict) else None
    if entries is None:
        entries = []
    if not isinstance(data, dict) or not isinstance(entries, list):
        raise ConfigError(f"{path}: expected a mapping with a 'hosts' list")

    hosts = []
    for index, h in enumerate(entries):
        if not isinstance(h, dict):
            raise ConfigError(f"{path}: host entry {index} is not a mapping")
        if not h.get("user"):
            raise ConfigError(f"{path}: host {h.get('id', '?')} has no user")
        hosts.append(ConnectionProfile(
            label=str(h.get("id", "")) or None,
            host=str(h.get("host") or DEFAULT_HOST),
            port=_parse_port(h.get("port", DEFAULT_PORT), str(path)),
            user=str(h["user"]),
            password=str(h.get("password") or ""),
            socket=str(h["socket"]) if h.get("socket") else None,
            database=str(h.get("database") or DEFAULT_DATABASE),
        ))
    return hosts


def load_profile(path: str, host_id: Optional[str] = None) -> ConnectionProfile:
    """
    Load a connection profile from a .my.cnf file or a YAML host inventory.

    Args:
        path: Path to the credentials file
        host_id: Inventory entry to use (YAML only); defaults to the first one

    Raises:
        ConfigError: The file is missing, unreadable or has no usable profile
    """
    config_path = Path(path)
    if not config_path.is_file():
        raise ConfigError(f"cannot open config file {path}")

    try:
        if config_path.suffix.lower() in YAML_SUFFIXES:
            hosts = load_hosts(config_path)
            if not hosts:
                raise ConfigError(f"no hosts defined in {path}")
            if host_id is None:
                profile = hosts[0]
            else:
                profile = next((h for h in hosts if h.label == host_id), None)
                if profile is None:
                    raise ConfigError(f"host {host_id} not found in {path}")
        else:
            profile = parse_mycnf(config_path.read_text(), source=str(config_path))
    except OSError as e:
        raise ConfigError(f"cannot read config file {path}: {e}")
    except yaml.YAMLError as e:
        raise ConfigError(f"cannot parse {path}: {e}")

    logger.debug(f"Loaded profile {profile.display_name} from {path}")
    return profile


def read_os_release(path: Path = OS_RELEASE_FILE) -> Dict[str, str]:
    """Parse /etc/os-release into a dict; empty when the file is unreadable."""
    result = {}
    try:
        text = path.read_text()
    except OSError:
        return result

    for line in text.splitlines():
        if "=" not in line or line.startswith("#"):
            continue
        key, value = line.split("=", 1)
        result[key.strip()] = value.strip().strip('"')
    return result


def is_supported_platform(os_release: Optional[Dict[str, str]] = None) -> bool:
    """True on Debian 12, the platform the host metrics are calibrated for."""
    info = read_os_release() if os_release is None else os_release
    return info.get("ID") == "debian" and info.get("VERSION_ID", "").startswith("12")


def get_hostname() -> str:
    try:
        return socket.gethostname()
    except OSError:
        return "unknown"
