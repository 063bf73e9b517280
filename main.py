#!/usr/bin/env python3
"""Runeforge CLI - deterministic technology-stack selection.

Usage:
    # Plan a stack; JSON goes to stdout, progress to stderr
    python main.py plan -f ./blueprint.yaml

    # Reproduce a plan with a fixed seed and write it to a file
    python main.py plan -f ./blueprint.json --seed 7 --out ./stack_plan.json

    # Check a blueprint and print its hash
    python main.py validate -f ./blueprint.yaml

Exit codes: 0 success, 1 input error, 2 output schema failure,
3 no eligible candidate for some topic.
"""

import sys
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from contracts import BlueprintValidationError, ConfigError
from orchestrator import EXIT_INPUT, RunReporter, load_blueprint, run_plan
from rules import load_rules_file
from selector import blueprint_hash
from config import settings


console = Console()
err_console = Console(stderr=True)


@click.group()
@click.version_option("1.0.0", prog_name="runeforge")
def cli():
    """Runeforge: Deterministic Stack Selection.

    Reads a project blueprint and picks one technology per topic from a
    rules table, with scores, reasons, alternatives and reproducible hashes.
    """


@cli.command()
@click.option(
    "--file", "-f", "blueprint_file",
    required=True,
    type=click.Path(dir_okay=False),
    help="Blueprint file (YAML or JSON)"
)
@click.option(
    "--seed", "-s",
    type=int,
    default=None,
    help=f"Tie-break seed (default: {settings.default_seed})"
)
@click.option(
    "--out", "-o",
    default=None,
    type=click.Path(dir_okay=False),
    help="Write the plan here instead of stdout"
)
@click.option(
    "--strict",
    is_flag=True,
    help="Reject unknown blueprint fields"
)
@click.option(
    "--rules", "-r", "rules_path",
    default=None,
    type=click.Path(dir_okay=False),
    help="Rules table YAML (default: bundled rules)"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Print per-topic score tables to stderr"
)
@click.option(
    "--quiet", "-q",
    is_flag=True,
    help="Suppress progress output"
)
def plan(
    blueprint_file: str,
    seed: Optional[int],
    out: Optional[str],
    strict: bool,
    rules_path: Optional[str],
    verbose: bool,
    quiet: bool,
):
    """Select a stack for a blueprint."""
    reporter = RunReporter(console=err_console, verbose=verbose or settings.verbose, quiet=quiet)
    reporter.banner()

    result = run_plan(
        blueprint_file,
        seed=seed,
        out=out,
        rules_path=rules_path,
        strict=True if strict else None,
        reporter=reporter,
    )

    if result.ok and out is None:
        click.echo(result.output_json)
    sys.exit(result.exit_code)


@cli.command()
@click.option(
    "--file", "-f", "blueprint_file",
    required=True,
    type=click.Path(dir_okay=False),
    help="Blueprint file (YAML or JSON)"
)
@click.option(
    "--strict",
    is_flag=True,
    help="Reject unknown blueprint fields"
)
def validate(blueprint_file: str, strict: bool):
    """Validate a blueprint and print its hash."""
    try:
        loaded = load_blueprint(blueprint_file, strict=strict or settings.strict)
    except BlueprintValidationError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        sys.exit(e.exit_code)

    for key in loaded.ignored_keys:
        err_console.print(f"[yellow]Ignoring unknown field:[/yellow] {key}")
    err_console.print(f"[green]Valid blueprint:[/green] {loaded.blueprint.project_name}")
    click.echo(blueprint_hash(loaded.blueprint))


@cli.command()
@click.option(
    "--rules", "-r", "rules_path",
    default=None,
    type=click.Path(dir_okay=False),
    help="Rules table YAML (default: bundled rules)"
)
def topics(rules_path: Optional[str]):
    """List topics and candidates in the rules table."""
    try:
        rules = load_rules_file(rules_path or settings.get_rules_path())
    except ConfigError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        sys.exit(EXIT_INPUT)

    table = Table(title=f"Rules v{rules.version}", header_style="bold")
    table.add_column("Topic")
    table.add_column("Candidates")
    for topic in rules.topics:
        table.add_row(topic, ", ".join(c.name for c in rules.candidates_for(topic)))
    console.print(table)


if __name__ == "__main__":
    cli()
