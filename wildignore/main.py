# main.py
import logging
import os
import sys
import tempfile
from pathlib import Path

import click

from wildignore.baseline import compare_baseline
from wildignore.errors import BaselineError, CompileError
from wildignore.models import Case
from wildignore.pattern import basename_start, compile_pattern
from wildignore.renderer import Renderer
from wildignore.walker import IgnoreWalker

# Logs go to the system temp dir so they never mix with command output.
log_path = Path(tempfile.gettempdir()) / "wildignore.log"


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        filename=str(log_path),
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


def _case(ignore_case: bool) -> Case:
    return Case.FOLD if ignore_case else Case.SENSITIVE


ignore_case_option = click.option(
    "-i", "--ignore-case", is_flag=True, envvar="WILDIGNORE_IGNORE_CASE",
    help="Compare ASCII letters case-insensitively (like core.ignoreCase).")


@click.group()
@click.option("--debug", is_flag=True, help=f"Write debug logs to {log_path}.")
def cli(debug):
    """
    Match paths against gitignore-style patterns the way git does.
    """
    _configure_logging(debug)


@cli.command("match")
@click.argument("pattern")
@click.argument("paths", nargs=-1, required=True)
@click.option("--dir", "is_dir", is_flag=True, help="Treat every PATH as a directory.")
@ignore_case_option
def match_cmd(pattern, paths, is_dir, ignore_case):
    """
    Test a single PATTERN against each PATH (relative to the ignore file).

    Exits with 0 when at least one path matched, 1 otherwise.
    """
    try:
        compiled = compile_pattern(os.fsencode(pattern))
    except CompileError as e:
        raise click.BadParameter(str(e), param_hint="PATTERN")

    any_match = False
    for path in paths:
        value = os.fsencode(path)
        matched = compiled.matches_path(value, basename_start(value), is_dir, _case(ignore_case))
        any_match = any_match or matched
        click.echo(f"{'match' if matched else 'no match'}\t{path}")
    sys.exit(0 if any_match else 1)


@cli.command("check-ignore")
@click.argument("paths", nargs=-1, required=True)
@click.option("-C", "--root", type=click.Path(exists=True, file_okay=False), default=".",
              help="Directory the paths are relative to.")
@click.option("-v", "--verbose", is_flag=True, help="Show the rule that decided each path.")
@click.option("-n", "--non-matching", is_flag=True, help="Also list paths no rule matched (needs -v).")
@click.option("--excludes-file", type=click.Path(dir_okay=False), envvar="WILDIGNORE_EXCLUDES_FILE",
              default=None, help="Global excludes file, lowest precedence.")
@ignore_case_option
def check_ignore_cmd(paths, root, verbose, non_matching, excludes_file, ignore_case):
    """
    Report which PATHS are ignored, mirroring `git check-ignore`.

    Exits with 0 when at least one path is ignored, 1 otherwise.
    """
    if non_matching and not verbose:
        raise click.UsageError("--non-matching is only valid with --verbose")

    walker = IgnoreWalker(case=_case(ignore_case), exclude_file=excludes_file)
    any_ignored = False
    for path in paths:
        rule = walker.check(root, path)
        ignored = rule is not None and not rule.pattern.is_negative
        any_ignored = any_ignored or ignored
        if verbose:
            if rule is not None:
                click.echo(f"{rule.describe()}\t{path}")
            elif non_matching:
                click.echo(f"::\t{path}")
        elif ignored:
            click.echo(path)
    sys.exit(0 if any_ignored else 1)


@cli.command("tree")
@click.argument("path", type=click.Path(exists=True, file_okay=False), default='.')
@click.option("-a", "--all", "show_hidden", is_flag=True, help="Include hidden files and directories.")
@click.option("--show-ignored", is_flag=True, help="Keep ignored entries in the tree and mark them.")
@click.option("--excludes-file", type=click.Path(dir_okay=False), envvar="WILDIGNORE_EXCLUDES_FILE",
              default=None, help="Global excludes file, lowest precedence.")
@ignore_case_option
def tree_cmd(path, show_hidden, show_ignored, excludes_file, ignore_case):
    """Render the tree under PATH after applying its ignore files."""
    walker = IgnoreWalker(ignore_hidden=not show_hidden, case=_case(ignore_case),
                          include_ignored=show_ignored, exclude_file=excludes_file)
    root = walker.walk(str(Path(path).resolve()))
    click.echo(Renderer([root]).render_tree())


@cli.command("baseline")
@click.argument("match_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("nmatch_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--min-agreement", type=click.FloatRange(0.0, 1.0), default=0.0, show_default=True,
              help="Fail when agreement with git drops below this fraction.")
@ignore_case_option
def baseline_cmd(match_file, nmatch_file, min_agreement, ignore_case):
    """
    Replay captured `git check-ignore` transcripts and report agreement.

    MATCH_FILE holds only git matches, NMATCH_FILE only non-matches.
    """
    try:
        report = compare_baseline([(match_file, True), (nmatch_file, False)], _case(ignore_case))
    except BaselineError as e:
        raise click.ClickException(str(e))

    click.echo(f"agreement: {report.correct}/{report.total} ({report.agreement:.2%})")
    click.echo(f"errors: {report.errors}")
    for record in report.mismatches:
        expected = "match" if record.is_match else "no match"
        click.echo(f"- expected {expected}: {record.pattern.decode('utf-8', 'backslashreplace')} "
                   f"{record.value.decode('utf-8', 'backslashreplace')}")

    if report.agreement < min_agreement:
        click.secho(f"[Agreement below {min_agreement:.2%}]", fg="yellow", err=True)
        sys.exit(1)


if __name__ == "__main__":
    cli()
