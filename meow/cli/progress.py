from typing import Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)

from meow.kernel.progress import CountingSink


class RichProgressSink(CountingSink):
    """
    Renders a transfer as a rich progress bar.

    The bar is created lazily on the first on_transfer call, so a fetch that
    is skipped because the artifact already exists draws nothing.
    """

    def __init__(self, description: str, console: Optional[Console] = None, disabled: bool = False):
        super().__init__()
        self.description = description
        self.progress = Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            console=console,
            disable=disabled,
            transient=True,
        )
        self._task_id = None

    def on_transfer(self, total: int, chunk: bytes) -> None:
        super().on_transfer(total, chunk)
        if self._task_id is None:
            self.progress.start()
            # total=None renders an indeterminate bar
            self._task_id = self.progress.add_task(self.description, total=total or None)
        self.progress.update(self._task_id, completed=self.transferred)

    def close(self) -> None:
        if self._task_id is not None:
            self.progress.stop()
            self._task_id = None

    def __enter__(self) -> "RichProgressSink":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
