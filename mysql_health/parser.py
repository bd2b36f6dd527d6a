"""Parsers for MySQL status output, numeric counters and version strings."""

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple


NUMBER_PATTERN = re.compile(r"^[0-9]+(\.[0-9]+)?$")
VERSION_PATTERN = re.compile(r"^(\d+)(?:\.(\d+))?(?:\.(\d+))?")


def parse_number(value: Any) -> float:
    """
    Parse a status/variable value as a number.

    Only plain decimal integers or decimals are accepted. Anything else
    (empty strings, ON/OFF enums, negative values, None) yields 0.
    """
    if value is None:
        return 0.0
    text = str(value).strip()
    if not NUMBER_PATTERN.match(text):
        return 0.0
    return float(text)


def parse_key_value_rows(rows: Iterable[Tuple[Any, Any]]) -> Dict[str, str]:
    """
    Parse SHOW GLOBAL STATUS / SHOW GLOBAL VARIABLES rows into a dictionary.

    Keys keep the server's case. NULL values become empty strings so that a
    present key is never confused with a missing one.
    """
    result = {}

    for row in rows:
        if len(row) < 2:
            continue
        name = str(row[0]).strip() if row[0] is not None else ""
        if not name:
            continue
        value = row[1]
        result[name] = "" if value is None else str(value).strip()

    return result


@dataclass(frozen=True, order=True)
class ServerVersion:
    """Numeric major.minor.patch version, ordered field by field."""
    major: int = 0
    minor: int = 0
    patch: int = 0

    @classmethod
    def parse(cls, version: Optional[str]) -> "ServerVersion":
        """
        Parse a server version string like `8.0.36-0ubuntu0.22.04.1`.

        The build suffix after the first `-` is ignored; missing or
        non-numeric parts count as 0.
        """
        if not version:
            return cls()
        base = version.strip().split("-", 1)[0]
        match = VERSION_PATTERN.match(base)
        if not match:
            return cls()
        major, minor, patch = (int(part) if part else 0 for part in match.groups())
        return cls(major, minor, patch)

    def at_least(self, major: int, minor: int = 0, patch: int = 0) -> bool:
        return self >= ServerVersion(major, minor, patch)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"
