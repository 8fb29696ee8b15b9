import typer
from rich.console import Console

from meow.adapters.docker_engine import DockerContainerClient
from meow.cli.progress import RichProgressSink
from meow.internal.context import AppContext
from meow.internal.errors import MeowError
from meow.kernel.contracts import ContainerDescriptor

console = Console()


def _descriptor(app_ctx: AppContext) -> ContainerDescriptor:
    settings = app_ctx.settings
    return ContainerDescriptor(
        name=settings.container_name,
        image=settings.image_reference,
        plugins_dir=settings.plugins_dir,
        data_dir=settings.data_dir,
        static_dir=settings.static_dir,
        container_port=settings.container_port,
    )


def _fail(app_ctx: AppContext, operation: str, exc: Exception) -> None:
    app_ctx.logger.error("Container operation failed", operation=operation, error=str(exc))
    console.print(f"[red]{operation.capitalize()} failed:[/red] {exc}")
    raise typer.Exit(1)


def start(
    ctx: typer.Context,
    pull: bool = typer.Option(True, "--pull/--no-pull", help="Pull the cat image before starting"),
):
    """
    Pull the cat image and run the cat container until it stops.
    """
    app_ctx: AppContext = ctx.obj
    descriptor = _descriptor(app_ctx)

    try:
        for host_dir in (descriptor.plugins_dir, descriptor.data_dir, descriptor.static_dir):
            host_dir.mkdir(parents=True, exist_ok=True)

        with DockerContainerClient() as engine:
            if pull:
                app_ctx.logger.info("Pulling image", image=descriptor.image)
                with RichProgressSink(
                    f"Pulling {descriptor.image}",
                    console=console,
                    disabled=app_ctx.quiet or app_ctx.json_output,
                ) as sink:
                    engine.pull_image(descriptor.image, sink=sink)

            if not app_ctx.quiet:
                console.print(
                    f"The cat is running at [cyan]http://localhost[/cyan] "
                    f"(container [bold]{descriptor.name}[/bold]). Press Ctrl+C to detach."
                )
            status_code = engine.start_container(descriptor)
    except (MeowError, OSError) as exc:
        _fail(app_ctx, "start", exc)

    if status_code != 0:
        console.print(f"[yellow]The cat container exited with status {status_code}.[/yellow]")
        raise typer.Exit(1)


def stop(ctx: typer.Context):
    """
    Stop the cat container.
    """
    app_ctx: AppContext = ctx.obj
    name = app_ctx.settings.container_name
    try:
        with DockerContainerClient() as engine:
            engine.stop_container(name)
    except MeowError as exc:
        _fail(app_ctx, "stop", exc)

    if not app_ctx.quiet:
        console.print(f"Container [bold]{name}[/bold] stopped.")


def remove(ctx: typer.Context):
    """
    Remove the cat container. Volumes are kept.
    """
    app_ctx: AppContext = ctx.obj
    name = app_ctx.settings.container_name
    try:
        with DockerContainerClient() as engine:
            engine.remove_container(name, force=True, remove_volumes=False)
    except MeowError as exc:
        _fail(app_ctx, "remove", exc)

    if not app_ctx.quiet:
        console.print(f"Container [bold]{name}[/bold] removed.")
