"""
ksrepl - kscope Read Loop Command-Line Interface
================================================

Runs the kscope front end over standard input or a source file, one
top-level construct at a time, reporting what was parsed.

Usage Examples
--------------
Interactive session:
    $ ksrepl
    ready> def f(x) x * 2;
    Parsed a function definition.
    ready> f(4)
    Parsed a top-level expr

Check a file and dump the trees:
    $ ksrepl program.ks --ast

Add an operator before parsing:
    $ ksrepl --op '/=40' program.ks

Fail the run when the input has syntax errors:
    $ ksrepl --strict program.ks
"""

import logging
import sys
from typing import Optional, TextIO

import click

from kscope import __version__
from kscope.cli.errors import ExitCode, handle_cli_exception
from kscope.frontend import (
    ASTPrinter,
    DEFAULT_MAX_DEPTH,
    DEFAULT_PRECEDENCE,
    Driver,
    ErrorCollector,
    FrontendOptions,
    KSyntaxError,
    max_depth_limit,
)

logger = logging.getLogger(__name__)

PROMPT = "ready> "


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(name)s: %(message)s" if verbose else "%(message)s",
    )


def parse_operator_options(
    ctx: click.Context,
    param: click.Parameter,
    value: tuple[str, ...],
) -> dict[str, int]:
    """
    Convert repeated ``--op OP=PREC`` options into a precedence table.

    The last '=' separates the operator from its precedence, so '==5'
    registers '=' itself.
    """
    table: dict[str, int] = {}
    for entry in value:
        operator, sep, precedence = entry.rpartition("=")
        if not sep or len(operator) != 1:
            raise click.BadParameter(
                f"'{entry}' is not OP=PREC with a single-character OP",
                ctx=ctx,
                param=param,
            )
        try:
            table[operator] = int(precedence)
        except ValueError:
            raise click.BadParameter(
                f"precedence in '{entry}' is not an integer",
                ctx=ctx,
                param=param,
            ) from None
    return table


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    required=False,
    default="-",
    type=click.File("r", encoding="utf-8"),
)
@click.option(
    "--op", "operators",
    multiple=True,
    metavar="OP=PREC",
    callback=parse_operator_options,
    help="Install or override a binary operator precedence (can be repeated). "
         "Use a precedence of 0 to disable an operator.",
)
@click.option(
    "--max-depth",
    type=click.IntRange(min=1, max=max_depth_limit()),
    default=DEFAULT_MAX_DEPTH,
    show_default=True,
    help="Maximum expression nesting depth",
)
@click.option(
    "--ast",
    is_flag=True,
    help="Print the tree of every parsed construct",
)
@click.option(
    "--prompt/--no-prompt",
    default=None,
    help="Show the 'ready>' prompt (default: only for an interactive stdin)",
)
@click.option(
    "--strict",
    is_flag=True,
    help="Exit with status 1 if any construct failed to parse",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output (debug logging, full diagnostics)",
)
@click.version_option(version=__version__, prog_name="ksrepl")
def main(
    input_file: TextIO,
    operators: dict[str, int],
    max_depth: int,
    ast: bool,
    prompt: Optional[bool],
    strict: bool,
    verbose: bool,
) -> None:
    """
    Parse kscope source one top-level construct at a time.

    INPUT_FILE is the source to read; standard input is used if omitted
    or given as '-'.

    Status lines and diagnostics go to stderr. Syntax errors never stop
    the loop: the offending token is skipped and parsing resumes.

    \b
    Default operators (higher binds tighter):
        <  10
        +  20
        -  30
        *  40
    """
    setup_logging(verbose)

    precedence = dict(DEFAULT_PRECEDENCE)
    precedence.update(operators)

    filename = getattr(input_file, "name", "-")
    if not isinstance(filename, str) or filename in ("-", "<stdin>"):
        filename = "<stdin>"

    if prompt is None:
        prompt = input_file.isatty()

    try:
        errors = _run(input_file, filename, precedence, max_depth, ast, prompt, verbose)
    except Exception as e:
        handle_cli_exception(e, verbose)

    if strict and errors.has_errors():
        count = errors.error_count()
        click.echo(f"{count} construct{'s' if count != 1 else ''} failed to parse", err=True)
        sys.exit(ExitCode.SYNTAX_ERROR)


def _run(
    stream: TextIO,
    filename: str,
    precedence: dict[str, int],
    max_depth: int,
    ast: bool,
    prompt: bool,
    verbose: bool,
) -> ErrorCollector:
    """Drive the parser over `stream`, echoing results; return its errors."""
    options = FrontendOptions(
        precedence=precedence,
        max_depth=max_depth,
        filename=filename,
    )

    def show_prompt() -> None:
        click.echo(PROMPT, nl=False, err=True)

    def report(error: KSyntaxError) -> None:
        click.echo(str(error) if verbose else error.summary(), err=True)

    driver = Driver.from_source(
        stream,
        options,
        prompt=show_prompt if prompt else None,
        report=report,
    )
    printer = ASTPrinter()

    for result in driver.results():
        if not result.ok:
            continue

        click.echo(result.kind.status_message, err=True)
        if ast:
            click.echo(printer.print(result.node))

    errors = driver.parser.errors
    logger.debug(f"Finished {filename}: {errors.error_count()} failed construct(s)")
    return errors


if __name__ == "__main__":
    main()
