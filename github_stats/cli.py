"""Command line interface for the GitHub commit statistics collector."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich import box
from rich.table import Table

from .collector import Collector
from .config import CONFIG_FILE, Config, OrgConfig
from .console import Console
from .exceptions import ConfigurationError
from .logs import configure_logging
from .models import CycleReport

app = typer.Typer(help="Collect commit activity statistics from GitHub repositories.")

# stdout carries the metric records; everything for humans goes to stderr
console = Console(stderr=True)

CONFIG_OPTION = typer.Option(CONFIG_FILE, "--config", "-c", help="Path to the TOML config file")
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Log at debug level")


def _load_config(path: Path) -> Config:
    """Load and validate configuration, exiting with a message on failure."""
    try:
        config = Config.load(path)
        config.validate_required_fields()
    except ConfigurationError as exc:
        console.print(f"[danger]Configuration error:[/] {exc}")
        raise typer.Exit(code=2) from exc
    return config


def _emit(report: CycleReport) -> None:
    """Write one JSON record per collected repository to stdout."""
    for stats in report.stats:
        typer.echo(json.dumps(stats.to_dict()))
    sys.stdout.flush()


def render_report(report: CycleReport) -> None:
    """Show a summary table of one cycle on the console."""
    table = Table(
        title=f"Cycle {report.cycle}",
        box=box.SIMPLE_HEAVY,
        title_style="title",
        header_style="label",
    )
    table.add_column("Repository", style="repo")
    table.add_column("Commits", justify="right", style="value")
    table.add_column("Contributors", justify="right", style="value")
    table.add_column("Branches", justify="right", style="value")
    table.add_column("Stale", justify="right", style="value")

    for stats in report.stats:
        results = stats.results
        table.add_row(
            f"{stats.org}/{stats.name}",
            str(results.commits),
            str(results.committers),
            str(results.branches_count),
            str(results.stale_branches_count),
        )
    for name, exc in report.failures.items():
        table.add_row(name, "[danger]failed[/]", "", "", "")
        console.print(f"[danger]✗ {name}:[/] {exc}")

    console.print(table)


@app.command()
def init(
    config_path: Path = CONFIG_OPTION,
    org: str = typer.Option(..., "--org", help="Organization (owner) name"),
    token: str = typer.Option(
        ..., "--token", help="Access token for the organization", prompt=True, hide_input=True
    ),
    repos: List[str] = typer.Option(..., "--repo", "-r", help="Repository name, repeatable"),
    interval: str = typer.Option("1h", "--interval", help="Active interval, e.g. 1h or 30m"),
    api_url: Optional[str] = typer.Option(
        None, "--api-url", help="API root for GitHub Enterprise, e.g. https://ghe.example.com/api/v3"
    ),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing config file"),
) -> None:
    """Write a starter configuration file."""
    if config_path.exists() and not force:
        console.print(f"[warning]{config_path} already exists; use --force to overwrite[/]")
        raise typer.Exit(code=1)

    raw = {
        "collection": {"interval": interval},
        "orgs": [OrgConfig(name=org, token=token, repos=repos).model_dump()],
    }
    if api_url:
        raw["server"] = {"api_url": api_url}

    try:
        config = Config.from_dict(raw)
    except ConfigurationError as exc:
        console.print(f"[danger]Configuration error:[/] {exc}")
        raise typer.Exit(code=2) from exc

    config.dump(config_path)
    console.print(f"[success]✓ Configuration written to[/] {config_path}")


@app.command("show-config")
def show_config(config_path: Path = CONFIG_OPTION) -> None:
    """Display the configuration with tokens masked."""
    try:
        config = Config.load(config_path)
    except ConfigurationError as exc:
        console.print(f"[danger]Configuration error:[/] {exc}")
        raise typer.Exit(code=2) from exc
    typer.echo(json.dumps(config.masked(), indent=2))


@app.command()
def collect(
    config_path: Path = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Do not print the summary table"),
) -> None:
    """Run one collection cycle and print one JSON record per repository."""
    config = _load_config(config_path)
    configure_logging(config.log_file, verbose)
    console.set_quiet(quiet)
    try:
        report = Collector(config).collect_cycle()
        _emit(report)
        render_report(report)
    finally:
        console.set_quiet(False)
    if not report.ok:
        raise typer.Exit(code=1)


@app.command()
def watch(
    config_path: Path = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Run a collection cycle for every line read from stdin.

    Suited to agents such as Telegraf's ``execd`` input, which write a newline
    whenever they want fresh metrics. Stops at end of input.
    """
    config = _load_config(config_path)
    configure_logging(config.log_file, verbose)
    console.set_quiet(True)
    try:
        collector = Collector(config)
        for _ in sys.stdin:
            _emit(collector.collect_cycle())
    finally:
        console.set_quiet(False)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
