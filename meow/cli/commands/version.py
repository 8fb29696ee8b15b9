import importlib.metadata

import typer

UNRELEASED_VERSION = "0.0.0-unstable"


def get_version() -> str:
    try:
        return importlib.metadata.version("meow-cli")
    except importlib.metadata.PackageNotFoundError:
        return UNRELEASED_VERSION


def version():
    """
    Print the version number of meow.
    """
    typer.echo(f"meow version {get_version()}")
