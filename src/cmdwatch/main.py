"""CLI entrypoint for cmdwatch."""

from __future__ import annotations

import logging

import rich_click as click

from cmdwatch import __version__
from cmdwatch.backend import CommandRunError, ShellCommandBackend
from cmdwatch.command import build_command_line
from cmdwatch.config import WatchSettings, log_level_from_env
from cmdwatch.interval import INTERVAL
from cmdwatch.loop import WatchLoop

USAGE_EXIT_CODE = 1

click.rich_click.SHOW_ARGUMENTS = True


class WatchUsageError(click.UsageError):
    """Usage error reported with the exit status of the original watch(1)."""

    exit_code = USAGE_EXIT_CODE


class WatchCommand(click.RichCommand):
    """Command that prints usage when called bare and exits 1 on usage errors."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        if not args:
            click.echo(ctx.get_help())
            ctx.exit(USAGE_EXIT_CODE)
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as error:
            error.exit_code = USAGE_EXIT_CODE
            raise


def _show_help(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    click.echo(ctx.get_help())
    ctx.exit(USAGE_EXIT_CODE)


def _show_version(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    click.echo(__version__)
    ctx.exit(USAGE_EXIT_CODE)


@click.command(
    cls=WatchCommand,
    add_help_option=False,
    context_settings={"allow_interspersed_args": False},
)
@click.option("-q", "--quiet", is_flag=True, help="Only output stderr.")
@click.option("-x", "--halt", is_flag=True, help="Halt on failure.")
@click.option(
    "-i",
    "--interval",
    "interval_ms",
    type=INTERVAL,
    default=None,
    metavar="<n>",
    help="Interval in seconds or ms (e.g. 500ms), defaulting to 1.",
)
@click.option(
    "-v",
    "--version",
    is_flag=True,
    expose_value=False,
    is_eager=True,
    callback=_show_version,
    help="Output version number.",
)
@click.option(
    "-h",
    "--help",
    is_flag=True,
    expose_value=False,
    is_eager=True,
    callback=_show_help,
    help="Output this help information.",
)
@click.argument("command", nargs=-1, metavar="<cmd>")
@click.pass_context
def cmdwatch(
    ctx: click.Context,
    quiet: bool,
    halt: bool,
    interval_ms: int | None,
    command: tuple[str, ...],
) -> None:
    """Execute `<cmd>` with `sh -c` repeatedly, sleeping between runs."""

    if not command:
        raise WatchUsageError("<cmd> required", ctx=ctx)

    try:
        settings = WatchSettings.from_env(
            command_line=build_command_line(command),
            interval_ms=interval_ms,
            quiet=True if quiet else None,
            halt_on_failure=True if halt else None,
        )
        settings.validate()
        log_level = log_level_from_env()
    except ValueError as error:
        raise WatchUsageError(str(error), ctx=ctx) from error

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    loop = WatchLoop(settings, ShellCommandBackend(), report_failure=_report_failure)
    try:
        summary = loop.run_loop()
    except CommandRunError as error:
        raise click.ClickException(str(error)) from error

    if summary.exit_code is not None:
        ctx.exit(summary.exit_code)


def _report_failure(exit_code: int) -> None:
    click.secho(f"exit: {exit_code}", fg="bright_black", err=True)
    click.echo(err=True)


if __name__ == "__main__":  # pragma: no cover
    cmdwatch()
