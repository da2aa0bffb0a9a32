"""drageecheck CLI entry point."""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

import click

from drageecheck import __version__

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


@click.group()
@click.version_option(version=__version__, prog_name="drageecheck")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Minimal output (errors only).")
@click.pass_context
def main(ctx: click.Context, *, verbose: bool, quiet: bool) -> None:
    """drageecheck - architecture conformance rules for dragee graphs."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet

    level = logging.WARNING
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    logging.basicConfig(level=level, format=_LOG_FORMAT)


@main.command()
@click.argument(
    "graph_path",
    type=click.Path(exists=True, path_type=Path),
)
@click.option(
    "--rules",
    "rules_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Declarative rules file (default: from drageecheck.yml).",
)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["rich", "json", "porcelain"]),
    default=None,
    help="Output format (default: rich if TTY, porcelain if piped).",
)
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Exit 1 if failures at or above --fail-on are found.",
)
@click.option(
    "--fail-on",
    type=click.Choice(["info", "warning", "error"]),
    default=None,
    help="Lowest severity that fails a --strict run (default: from drageecheck.yml or error).",
)
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    default=None,
    help="Evaluate rules on this many threads.",
)
@click.option(
    "--report-dangling",
    is_flag=True,
    default=False,
    help="Report dependencies that are not in the graph as warnings.",
)
@click.option(
    "--project",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Project root holding drageecheck.yml (default: current directory).",
)
def check(
    *,
    graph_path: Path,
    rules_path: Path | None,
    fmt: str | None,
    strict: bool,
    fail_on: str | None,
    workers: int | None,
    report_dangling: bool,
    project: Path | None,
) -> None:
    """Check a dragee snapshot against the architecture rules.

    Exit codes: 0 = clean or failures without --strict,
    1 = failures with --strict, 2 = configuration error.
    """
    from drageecheck.config import load_config
    from drageecheck.graph.asserter import RuleSeverity
    from drageecheck.graph.linter import LintError, format_json, format_porcelain, format_rich
    from drageecheck.graph.linter import lint as run_lint

    project_root = project or Path.cwd()
    config = load_config(project_root)

    # Command-line flags override drageecheck.yml.
    if workers is not None:
        config = replace(config, workers=workers)
    if fail_on is not None:
        config = replace(config, fail_on=RuleSeverity.parse(fail_on))
    if report_dangling:
        config = replace(config, report_dangling=True)
    if rules_path is None and config.rules_file is not None:
        rules_path = project_root / config.rules_file

    if fmt is None:
        fmt = "rich" if sys.stdout.isatty() else "porcelain"

    try:
        result = run_lint(graph_path, rules_path=rules_path, config=config)
    except LintError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    formatters = {
        "rich": format_rich,
        "json": format_json,
        "porcelain": format_porcelain,
    }
    output = formatters[fmt](result)
    if output:
        click.echo(output)

    if strict and result.failures_at_least(config.fail_on):
        sys.exit(1)


@main.command("rules")
@click.option(
    "--rules",
    "rules_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Declarative rules file to include.",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def list_rules(*, rules_path: Path | None, as_json: bool) -> None:
    """List the rules a check would evaluate."""
    from drageecheck.graph.linter import collect_rules
    from drageecheck.graph.profiles import clean_registry

    try:
        rules = collect_rules(clean_registry(), rules_path=rules_path)
    except ValueError as exc:
        click.echo(f"Error: Invalid rules configuration: {exc}", err=True)
        sys.exit(2)

    if as_json:
        data = [
            {
                "label": rule.label,
                "severity": rule.severity.value,
                "description": rule.description,
            }
            for rule in rules
        ]
        click.echo(json.dumps(data, indent=2))
        return

    from rich.console import Console
    from rich.table import Table

    table = Table(title="Rules")
    table.add_column("Label", style="cyan", no_wrap=True)
    table.add_column("Severity")
    table.add_column("Description")
    for rule in rules:
        table.add_row(rule.label, rule.severity.value, rule.description)
    Console().print(table)


@main.command("profiles")
def list_profiles() -> None:
    """List the registered architecture profiles."""
    from rich.console import Console
    from rich.table import Table

    from drageecheck.graph.profiles import clean_registry

    table = Table(title="Profiles")
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Qualified")
    table.add_column("Label")
    for profile in clean_registry():
        table.add_row(profile.key, profile.qualified_key, profile.label)
    Console().print(table)
