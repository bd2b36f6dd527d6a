"""Terminal report rendering."""

from typing import Optional, Sequence

from rich.console import Console
from rich.padding import Padding
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from .models import Category, CheckResult, Level, overall_level

LINE_WIDTH = 80
INDENT = " " * 10

LEVEL_STYLES = {
    Level.OK: "green",
    Level.WARN: "yellow",
    Level.CRIT: "red",
    Level.NOT_APPLICABLE: "bright_black",
}


def level_tag(level: Level) -> Text:
    return Text(f"[{level.label}]", style=LEVEL_STYLES[level])


def make_console(no_color: bool = False, file=None) -> Console:
    return Console(
        file=file,
        no_color=no_color,
        highlight=False,
        width=LINE_WIDTH,
    )


def _render_header(console: Console, version: str, hostname: str, config_path: str):
    console.print()
    console.print(Rule(style="cyan", characters="="))
    title = Text("  ")
    title.append("MySQL Health Checks", style="bold")
    server = f"MySQL {version}" if version else "MySQL"
    title.append(" " * max(LINE_WIDTH - len(title) - len(server), 1))
    title.append(server)
    console.print(title)
    console.print(f"  Host: {hostname} | CNF: {config_path}")
    console.print(Rule(style="cyan", characters="="))


def _render_check(console: Console, check: CheckResult):
    line = Text("  ")
    line.append_text(level_tag(check.level))
    line.append(f"  {check.name:<32}{check.value}")
    console.print(line)

    if check.is_issue:
        console.print(Text(f"{INDENT}>> Threshold: {check.threshold}", style=LEVEL_STYLES[check.level]))
    if check.note:
        console.print(Text(f"{INDENT}>> {check.note}", style="bright_black"))

    for paragraph in (check.description, check.detail):
        if paragraph:
            console.print(Padding(Text(paragraph, style="bright_black"), (0, 0, 0, len(INDENT))))
    console.print()


def _render_category(console: Console, category: Category):
    console.print()
    worst = category.worst_level
    header = Text("  ")
    header.append(category.name, style="bold")
    tag = level_tag(worst)
    header.append(" " * max(LINE_WIDTH - len(header) - len(tag), 1))
    header.append_text(tag)
    console.print(header)
    console.print(Text("  " + "-" * (LINE_WIDTH - 2), style="bright_black"))

    for check in category.checks:
        _render_check(console, check)


def _truncate(value: str, width: int) -> str:
    if len(value) > width:
        return value[:width - 1] + "."
    return value


def render_summary(console: Console, categories: Sequence[Category]):
    """Overall verdict plus a table of every WARN/CRIT check."""
    issues = [check for category in categories for check in category.issues]
    overall = overall_level(categories)
    console.print(Rule(style="cyan", characters="="))

    if not issues:
        console.print(Text("  Overall: OK - All checks passed", style="bold green"))
        console.print(Rule(style="cyan", characters="="))
        console.print()
        return

    verdict = Text("  ")
    verdict.append(f"Overall: {overall.label}", style=f"bold {LEVEL_STYLES[overall]}")
    verdict.append(f"  {len(issues)} issue(s) found")
    console.print(verdict)
    console.print(Rule(style="cyan", characters="="))

    table = Table(box=None, show_edge=False, pad_edge=False, header_style="bold")
    table.add_column("Check", width=26, no_wrap=True)
    table.add_column("Value", width=16, no_wrap=True)
    table.add_column("Threshold", width=24, no_wrap=True)
    table.add_column("Status", no_wrap=True)
    for check in issues:
        table.add_row(
            _truncate(check.name, 26),
            _truncate(check.value, 16),
            _truncate(check.threshold, 24),
            level_tag(check.level),
        )
    console.print(table)
    console.print()
    console.print(Rule(style="cyan", characters="="))
    console.print()


def render_report(
    categories: Sequence[Category],
    version: str,
    hostname: str,
    config_path: str,
    console: Optional[Console] = None
):
    """Print the full report: header, every category, then the summary."""
    console = console or make_console()
    _render_header(console, version, hostname, config_path)
    for category in categories:
        _render_category(console, category)
    render_summary(console, categories)
