"""Rich terminal reporter with severity pills and a score summary."""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from apiscan.findings.models import ScanResult
from apiscan.findings.scoring import calculate_score, score_label

_SEVERITY_STYLE = {
    "critical": "bold white on red",
    "high": "bold white on dark_orange",
    "medium": "bold black on yellow",
    "low": "bold black on bright_cyan",
    "info": "bold black on white",
}

_SEVERITY_ICON = {
    "critical": "🔴",
    "high": "🟠",
    "medium": "🟡",
    "low": "🔵",
    "info": "⚪",
}

_SCORE_STYLE = {
    "Excellent": "bold green",
    "Good": "green",
    "Fair": "yellow",
    "Poor": "dark_orange",
    "Critical": "bold red",
}


def _severity_pill(severity: str) -> Text:
    style = _SEVERITY_STYLE.get(severity, "")
    icon = _SEVERITY_ICON.get(severity, "")
    return Text(f" {icon} {severity.upper()} ", style=style)


def render(
    result: ScanResult,
    *,
    show_summary: bool = True,
    console: Optional[Console] = None,
) -> None:
    """Print scan results to the terminal using Rich."""
    console = console or Console()

    if not result.issues:
        console.print()
        console.print("[bold green]✅ No API quality issues found.[/bold green]")
        if show_summary:
            _print_summary(console, result)
        return

    # Issues table
    console.print()
    table = Table(
        title="apiscan Issues",
        show_lines=True,
        title_style="bold",
        border_style="dim",
    )
    table.add_column("Severity", justify="center", width=12)
    table.add_column("Rule", style="cyan", min_width=10)
    table.add_column("File", style="magenta")
    table.add_column("Line", justify="right", style="green")
    table.add_column("Message", min_width=30)

    for issue in result.issues:
        table.add_row(
            _severity_pill(issue.severity),
            issue.rule_id,
            issue.file_path,
            str(issue.line),
            issue.message,
        )

    console.print(table)

    if show_summary:
        _print_summary(console, result)


def _print_summary(console: Console, result: ScanResult) -> None:
    stats = result.stats
    score = calculate_score(stats)
    label = score_label(score)

    console.print()
    console.print(f"[dim]Files:[/dim]         {stats.total_files}")
    console.print(f"[dim]Scanned:[/dim]       {stats.scanned_files}")
    console.print(f"[dim]Skipped:[/dim]       {stats.skipped_files}")
    console.print(f"[dim]Issues:[/dim]        {stats.total_issues}")
    console.print(f"[dim]Suppressed:[/dim]    {len(result.suppressed)}")
    console.print(f"[dim]Duration:[/dim]      {stats.scan_duration_ms:.0f}ms")

    counts = ", ".join(
        f"{category}: {count}" for category, count in stats.issues_by_category.items() if count
    )
    if counts:
        console.print(f"[dim]By category:[/dim]   {counts}")

    console.print()
    style = _SCORE_STYLE.get(label, "bold")
    console.print(f"[{style}]Score: {score}/100 ({label})[/{style}]")
