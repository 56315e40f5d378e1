"""Command-line interface for apiscan."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from apiscan import __version__
from apiscan.config.schema import CATEGORIES, LANGUAGES, SEVERITIES

app = typer.Typer(
    name="apiscan",
    help="Find security, design, and performance issues in API source code.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console(stderr=True)

FORMATS = ("terminal", "json", "sarif")


def _fail(message: str, code: int = 2) -> typer.Exit:
    console.print(f"[bold red]Error:[/bold red] {message}")
    return typer.Exit(code=code)


def _check_choices(option: str, values: List[str], allowed: tuple) -> None:
    bad = [v for v in values if v not in allowed]
    if bad:
        raise _fail(f"Invalid {option}: {', '.join(bad)} (expected: {', '.join(allowed)})")


def _configure_logging(debug: bool) -> None:
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


# ── scan ──────────────────────────────────────────────────────────────────────


@app.command()
def scan(
    paths: Optional[List[Path]] = typer.Argument(None, help="Files or directories to scan (default: current directory)"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .apiscan.toml"),
    format: Optional[str] = typer.Option(None, "--format", "-f", help="Output format: terminal | json | sarif"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write report to file"),
    fail_on: Optional[str] = typer.Option(None, "--fail-on", help="Exit 1 on issues at or above: critical | high | medium | low | info"),
    min_score: Optional[int] = typer.Option(None, "--min-score", min=0, max=100, help="Exit 1 when the score is below this"),
    language: Optional[List[str]] = typer.Option(None, "--language", "-l", help="Only scan this language (repeatable)"),
    category: Optional[List[str]] = typer.Option(None, "--category", help="Only run rules in this category (repeatable)"),
    severity_threshold: Optional[str] = typer.Option(None, "--severity-threshold", help="Skip rules below this severity"),
    enable_rule: Optional[List[str]] = typer.Option(None, "--enable-rule", help="Run only these rule ids (repeatable)"),
    disable_rule: Optional[List[str]] = typer.Option(None, "--disable-rule", help="Never run these rule ids (repeatable)"),
    exclude: Optional[List[str]] = typer.Option(None, "--exclude", "-e", help="Extra exclude pattern (repeatable)"),
    max_file_size: Optional[int] = typer.Option(None, "--max-file-size", min=0, help="Skip files larger than this many bytes"),
    workers: int = typer.Option(1, "--workers", "-w", min=1, help="Scan files on this many threads"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    debug: bool = typer.Option(False, "--debug", help="Debug logging"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be scanned without scanning"),
) -> None:
    """Scan source files for API quality issues."""
    from apiscan.config.loader import ConfigError, load_config
    from apiscan.config.schema import DEFAULT_EXCLUDE_PATTERNS
    from apiscan.intake import SourceError, collect_entries, create_files_from_entries
    from apiscan.output import json_report, sarif, terminal
    from apiscan.rules import RuleLoadError, build_registry
    from apiscan.scanner import ScanEngine

    _configure_logging(debug)
    root = Path.cwd()

    # --- Load config ---
    try:
        cfg = load_config(root, config)
    except ConfigError as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc

    # --- CLI overrides ---
    if format:
        _check_choices("format", [format], FORMATS)
        cfg.output.format = format  # type: ignore[assignment]
    if fail_on:
        _check_choices("fail-on level", [fail_on], SEVERITIES)
        cfg.output.fail_on = fail_on  # type: ignore[assignment]
    if min_score is not None:
        cfg.output.min_score = min_score
    if language:
        _check_choices("language", language, LANGUAGES)
        cfg.scan.languages = list(language)
    if category:
        _check_choices("category", category, CATEGORIES)
        cfg.scan.categories = list(category)
    if severity_threshold:
        _check_choices("severity threshold", [severity_threshold], SEVERITIES)
        cfg.scan.severity_threshold = severity_threshold  # type: ignore[assignment]
    if enable_rule:
        cfg.rules.enable.extend(enable_rule)
    if disable_rule:
        cfg.rules.disable.extend(disable_rule)
    if exclude:
        base = cfg.scan.exclude if cfg.scan.exclude is not None else list(DEFAULT_EXCLUDE_PATTERNS)
        cfg.scan.exclude = base + list(exclude)
    if max_file_size is not None:
        cfg.scan.max_file_size = max_file_size

    options = cfg.to_scan_options()

    # --- Build rules ---
    try:
        registry = build_registry(root)
    except RuleLoadError as exc:
        console.print(f"[bold red]Rule error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc

    if verbose or debug:
        console.print(f"[dim]Rules loaded: {len(registry)}[/dim]")
        console.print(f"[dim]Root: {root}[/dim]")

    # --- Collect files ---
    targets = list(paths) if paths else [root]
    try:
        entries = collect_entries(targets, root)
    except SourceError as exc:
        console.print(f"[bold red]Input error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc

    files = create_files_from_entries(entries, options)
    if not files:
        console.print(
            "[bold red]Error:[/bold red] No supported source files found. Supported: "
            "JavaScript, TypeScript, Python, Go, Java, PHP, Ruby"
        )
        raise typer.Exit(code=2)

    if verbose or debug:
        console.print(f"[dim]Files collected: {len(entries)}, after filters: {len(files)}[/dim]")

    if dry_run:
        console.print(f"[bold]Dry run: {len(files)} files would be scanned[/bold]")
        for f in files:
            console.print(f"  {f.path} [dim]({f.language})[/dim]")
        raise typer.Exit(code=0)

    # --- Run scan ---
    engine = ScanEngine(registry=registry, max_workers=workers)
    result = engine.scan_files(files, options)

    if debug:
        console.print(f"[dim]Scan duration: {result.stats.scan_duration_ms:.0f}ms[/dim]")

    # --- Output ---
    report_text: Optional[str] = None

    if cfg.output.format == "terminal":
        terminal.render(result, show_summary=cfg.output.show_summary, console=Console())
    elif cfg.output.format == "json":
        report_text = json_report.render(result)
        print(report_text)
    elif cfg.output.format == "sarif":
        report_text = sarif.render(result, registry)
        print(report_text)

    # --- Write to file ---
    if output:
        if report_text is None:
            # Terminal format has no file form; write JSON instead.
            report_text = json_report.render(result)
        Path(output).write_text(report_text, encoding="utf-8")
        if verbose:
            console.print(f"[dim]Report written to {output}[/dim]")

    # --- Exit code ---
    if result.issues_at_or_above(cfg.output.fail_on):
        raise typer.Exit(code=1)
    if cfg.output.min_score is not None and result.score < cfg.output.min_score:
        raise typer.Exit(code=1)

    raise typer.Exit(code=0)


# ── rules ─────────────────────────────────────────────────────────────────────


@app.command()
def rules(
    rule_id: Optional[str] = typer.Argument(None, help="Show details for one rule"),
    category: Optional[str] = typer.Option(None, "--category", help="Only list rules in this category"),
) -> None:
    """List the rule catalog, or describe one rule."""
    from apiscan.rules import RuleLoadError, build_registry

    out = Console()
    try:
        registry = build_registry(Path.cwd())
    except RuleLoadError as exc:
        console.print(f"[bold red]Rule error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc

    if rule_id:
        rule = registry.get(rule_id)
        if rule is None:
            console.print(f"[red]✗[/red] Unknown rule: {rule_id}")
            raise typer.Exit(code=1)
        d = rule.definition
        out.print(f"[bold cyan]{d.id}[/bold cyan]  {d.name}")
        out.print(f"[dim]Category:[/dim]  {d.category}")
        out.print(f"[dim]Severity:[/dim]  {d.severity}")
        out.print(f"[dim]Languages:[/dim] {', '.join(sorted(d.languages))}")
        out.print()
        out.print(d.description)
        return

    if category:
        _check_choices("category", [category], CATEGORIES)

    table = Table(title="apiscan Rules", title_style="bold", border_style="dim")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Category", style="magenta")
    table.add_column("Severity")

    for rule in registry.all_rules:
        if category and rule.category != category:
            continue
        table.add_row(rule.id, rule.name, rule.category, rule.severity)

    out.print(table)


# ── init ──────────────────────────────────────────────────────────────────────


@app.command()
def init(
    force: bool = typer.Option(False, "--force", help="Overwrite an existing .apiscan.toml"),
) -> None:
    """Generate a starter .apiscan.toml in the current directory."""
    from apiscan.config.defaults import DEFAULT_TOML
    from apiscan.config.loader import CONFIG_FILENAME

    config_path = Path.cwd() / CONFIG_FILENAME

    if config_path.exists() and not force:
        console.print(f"[yellow]⚠[/yellow]  {CONFIG_FILENAME} already exists at {config_path}")
        raise typer.Exit(code=1)

    config_path.write_text(DEFAULT_TOML, encoding="utf-8")
    console.print(f"[green]✓[/green] Created {config_path}")


# ── version ───────────────────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        print(f"apiscan {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback,
        is_eager=True, help="Show version and exit",
    ),
) -> None:
    """Static analysis for API source code."""
