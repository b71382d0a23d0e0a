"""CLI entrypoint for edgy."""

import logging
import sys
from pathlib import Path

import click

from . import __version__


@click.group()
@click.version_option(__version__, prog_name="edgy")
@click.option(
    "--knowledge",
    "-k",
    type=click.Path(exists=False, file_okay=False, dir_okay=True, path_type=Path),
    default=None,
    envvar="EDGY_KNOWLEDGE",
    help="Knowledge base directory with rules/, components/ and flows/ (defaults to the bundled one)",
)
@click.option("--verbose", is_flag=True, help="Log analysis progress to stderr")
@click.pass_context
def cli(ctx: click.Context, knowledge: Path | None, verbose: bool) -> None:
    """edgy - Find missing edge-case states in UI designs.

    Reads screens extracted from a design file and reports the error, empty,
    loading and confirmation states they are expected to have but do not.
    """
    ctx.ensure_object(dict)
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if knowledge is not None and not knowledge.is_dir():
        raise click.BadParameter(f"Directory '{knowledge}' does not exist.", param_hint="--knowledge / -k")

    ctx.obj["knowledge"] = knowledge.resolve() if knowledge is not None else None


@cli.command()
@click.argument("input_path", metavar="INPUT", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--output",
    "-o",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write the JSON result to this file",
)
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Output results as JSON",
)
@click.option(
    "--fail-on",
    type=click.Choice(["critical", "warning", "never"]),
    default="critical",
    help="Exit with error if findings at this level or higher exist",
)
@click.pass_context
def analyze(
    ctx: click.Context,
    input_path: Path,
    output_path: Path | None,
    output_json: bool,
    fail_on: str,
) -> None:
    """Analyze an extracted design document.

    Examples:

        edgy analyze screens.json

        edgy analyze screens.json --json --fail-on warning

        edgy analyze screens.json -o results.json
    """
    from .commands.analyze import run_analyze

    try:
        exit_code = run_analyze(ctx.obj["knowledge"], input_path, output_path, output_json, fail_on)
    except (ValueError, OSError) as e:
        raise click.ClickException(str(e)) from e
    sys.exit(exit_code)


@cli.command()
@click.option(
    "--category",
    type=str,
    default=None,
    help="Only list rules in this category (e.g., error-states)",
)
@click.option(
    "--explain",
    "explain_rule",
    type=str,
    default=None,
    metavar="RULE_ID",
    help="Explain a specific rule and exit (e.g., --explain destructive-actions/delete-no-confirmation)",
)
@click.pass_context
def rules(ctx: click.Context, category: str | None, explain_rule: str | None) -> None:
    """List the rule catalog or explain one rule."""
    from .commands.rules import run_rules_explain, run_rules_list

    if explain_rule:
        exit_code = run_rules_explain(ctx.obj["knowledge"], explain_rule)
        sys.exit(exit_code)

    exit_code = run_rules_list(ctx.obj["knowledge"], category)
    sys.exit(exit_code)


if __name__ == "__main__":
    cli()
