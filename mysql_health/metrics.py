"""Derived-value arithmetic shared by the health checks."""

from typing import Optional


NOT_AVAILABLE = "N/A"


def percentage(numerator: float, denominator: float) -> Optional[float]:
    """Return numerator as a percentage of denominator, or None when denominator is 0."""
    if denominator == 0:
        return None
    return numerator * 100.0 / denominator


def complement_percentage(numerator: float, denominator: float) -> Optional[float]:
    """Return 100 minus percentage(numerator, denominator), propagating None."""
    pct = percentage(numerator, denominator)
    if pct is None:
        return None
    return 100.0 - pct


def format_percent(value: Optional[float]) -> str:
    if value is None:
        return NOT_AVAILABLE
    return f"{value:.2f}%"


def format_minutes(value: Optional[float]) -> str:
    if value is None:
        return NOT_AVAILABLE
    return f"{value:.2f} min"


def format_bytes(value: Optional[float]) -> str:
    """Human readable byte size (1024 based), used in check notes."""
    if value is None:
        return NOT_AVAILABLE
    size = float(value)
    for unit in ("B", "KB", "MB", "GB"):
        if abs(size) < 1024:
            return f"{size:.0f}{unit}" if unit == "B" else f"{size:.1f}{unit}"
        size /= 1024
    return f"{size:.1f}TB"
