import requests
import typer
from rich.console import Console

from meow.adapters.download import Downloader
from meow.adapters.process import ProcessRunner
from meow.cli.progress import RichProgressSink
from meow.internal.context import AppContext
from meow.internal.errors import MeowError, NetworkError, ProcessError
from meow.kernel.installer import Installer

console = Console()


def failure_details(exc: BaseException) -> dict:
    """Log fields locating where an install failed."""
    details = {}
    if isinstance(exc, NetworkError) and exc.url:
        details["url"] = exc.url
    elif isinstance(exc, requests.RequestException) and exc.request is not None:
        details["url"] = exc.request.url
    if isinstance(exc, ProcessError):
        details["path"] = exc.command
    elif isinstance(exc, OSError) and exc.filename:
        details["path"] = str(exc.filename)
    return details


def install(
    ctx: typer.Context,
    reinstall: bool = typer.Option(False, "--reinstall", help="Download the installer again even if present"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the install steps without performing them"),
):
    """
    Install the cat dependencies (Docker) on the current machine.
    """
    app_ctx: AppContext = ctx.obj

    downloader = Downloader(timeout=app_ctx.settings.download_timeout)
    sink = RichProgressSink(
        "Docker Desktop installer",
        console=console,
        disabled=app_ctx.quiet or app_ctx.json_output,
    )

    with sink:
        installer = Installer(app_ctx, downloader, ProcessRunner(), sink=sink)
        try:
            steps = installer.install(reinstall=reinstall, dry_run=dry_run)
        except (MeowError, OSError) as exc:
            app_ctx.logger.error(
                "Installation failed", operation="install", error=str(exc), **failure_details(exc)
            )
            console.print(f"[red]Installation failed:[/red] {exc}")
            raise typer.Exit(1)

    if app_ctx.quiet:
        return

    if dry_run:
        console.print("[bold]Install steps (dry run):[/bold]")
        for number, step in enumerate(steps, start=1):
            console.print(f"  {number}. {step}")
        return

    console.print("[green]Docker installed successfully.[/green]")
