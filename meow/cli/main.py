from pathlib import Path
from typing import Optional

import typer

from meow.cli.commands import (
    container,
    install,
    version,
)
from meow.internal import paths
from meow.internal.config import load_settings
from meow.internal.context import AppContext
from meow.internal.errors import MeowError, ValidationError
from meow.internal.logging import resolve_log_level, setup_logging

cli_app = typer.Typer(
    name="meow",
    help=(
        "The paw-friendly Cheshire Cat AI Command Line Interface.\n\n"
        "Installs the cat and its dependencies, and runs the cat container."
    ),
    no_args_is_help=True,
)


@cli_app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None, "--config", help="Config file (default is $HOME/.meow-cli.yaml)"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose output. Incompatible with --quiet"
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Only output errors. Incompatible with --verbose"
    ),
    json_output: bool = typer.Option(False, "--json", help="Enable JSON formatted log output"),
):
    try:
        if verbose and quiet:
            raise ValidationError("--verbose and --quiet flags are incompatible")

        setup_logging(
            resolve_log_level(verbose=verbose, quiet=quiet),
            log_file_path=paths.get_log_file(),
            json_output=json_output,
        )
        ctx.obj = AppContext(
            settings=load_settings(config),
            verbose=verbose,
            quiet=quiet,
            json_output=json_output,
        )
    except MeowError as e:
        typer.echo(typer.style(f"Error: {e}", fg=typer.colors.RED), err=True)
        raise typer.Exit(1)


cli_app.command("install")(install.install)
cli_app.command("start")(container.start)
cli_app.command("stop")(container.stop)
cli_app.command("remove")(container.remove)
cli_app.command("version")(version.version)


def run() -> None:
    cli_app()


if __name__ == "__main__":
    run()
