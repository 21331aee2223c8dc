"""Click CLI entry point for ploteq."""

from __future__ import annotations

import json
from pathlib import Path

import click

from ploteq import __version__
from ploteq.classifier import classify
from ploteq.equation import Equation
from ploteq.errors import PlotEqError
from ploteq.exporter import export_gltf
from ploteq.logging_config import setup_logging, verbosity_to_level
from ploteq.parser import default_output_path, parse_yaml
from ploteq.warning_policy import WarningPolicy


def _build_warning_policy(
    warn_as_error: str | None, suppress_warning: str | None
) -> WarningPolicy | None:
    try:
        return WarningPolicy.from_options(warn_as_error, suppress_warning)
    except ValueError as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.version_option(version=__version__, prog_name="ploteq")
@click.option("-v", "--verbose", count=True, help="Log classification and sampling (-vv for debug).")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write log records to this file.",
)
def main(verbose: int, log_file: Path | None) -> None:
    """ploteq: plot text equations as 3D curves and surfaces."""
    setup_logging(verbosity_to_level(verbose), str(log_file) if log_file else None)


@main.command(name="classify")
@click.argument("expression")
@click.option(
    "-d",
    "--dimension",
    type=click.IntRange(2, 3),
    default=2,
    show_default=True,
    help="2 for curves, 3 for surfaces.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
    help="Output format.",
)
def classify_command(expression: str, dimension: int, output_format: str) -> None:
    """Show how EXPRESSION is interpreted."""
    try:
        result = classify(expression, dimension)
    except PlotEqError as e:
        raise click.ClickException(str(e)) from e

    if output_format == "json":
        payload = {
            "expression": result.expression,
            "dimension": result.dimension,
            "coordinate_system": result.coordinate_system.value,
            "variables_used": result.variables_used.value,
            "independent_vars": list(result.independent_vars),
            "canonical_expression": result.canonical_expression,
        }
        click.echo(json.dumps(payload, indent=2))
        return

    click.echo(f"Expression: {result.expression}")
    click.echo(f"Dimension: {result.dimension}D")
    click.echo(f"Coordinate system: {result.coordinate_system.name}")
    click.echo(f"Variables used: {result.variables_used.name}")
    click.echo(f"Independent variables: {', '.join(result.independent_vars)}")
    click.echo(f"Canonical expression: {result.canonical_expression}")


@main.command()
@click.argument("input_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    default=None,
    help="Output GLB file path. Defaults to input name with .glb extension.",
)
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    default=None,
    help="Threads evaluating rows; overrides the document's workers.",
)
@click.option(
    "--warn-as-error",
    "warn_as_error",
    type=str,
    default=None,
    help="Comma-separated W-codes to treat as errors (e.g. W01,W02).",
)
@click.option(
    "--suppress-warning",
    "suppress_warning",
    type=str,
    default=None,
    help="Comma-separated W-codes to suppress (e.g. W03).",
)
def plot(
    input_file: Path,
    output: Path | None,
    workers: int | None = None,
    warn_as_error: str | None = None,
    suppress_warning: str | None = None,
) -> None:
    """Sample the plot document INPUT_FILE and write a GLB file."""
    policy = _build_warning_policy(warn_as_error, suppress_warning)
    if output is None:
        output = default_output_path(input_file)

    try:
        spec = parse_yaml(input_file)
        if workers is not None:
            spec = spec.model_copy(update={"workers": workers})
        equation = Equation.from_spec(spec, warning_policy=policy)
        if equation.error is not None:
            raise equation.error
        generated = equation.generate()
        export_gltf(generated, output, name=spec.name or "plot")
    except PlotEqError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Wrote {output}")
