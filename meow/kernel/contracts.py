from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Protocol

from meow.kernel.progress import ProgressSink


PLUGINS_MOUNT = "/app/cat/plugins"
DATA_MOUNT = "/app/cat/data"
STATIC_MOUNT = "/app/cat/static"
HOST_PORT = 80


@dataclass(frozen=True)
class ContainerDescriptor:
    """
    Declarative parameters used to create the cat container.
    This is a pure data contract with no logic beyond deriving the binds.
    """
    name: str
    image: str
    plugins_dir: Path
    data_dir: Path
    static_dir: Path
    container_port: int = 80

    def __post_init__(self):
        if not self.name:
            raise ValueError("name cannot be empty")
        if not self.image:
            raise ValueError("image cannot be empty")

    @property
    def binds(self) -> dict[str, dict[str, str]]:
        return {
            str(self.plugins_dir): {"bind": PLUGINS_MOUNT, "mode": "rw"},
            str(self.data_dir): {"bind": DATA_MOUNT, "mode": "rw"},
            str(self.static_dir): {"bind": STATIC_MOUNT, "mode": "rw"},
        }

    @property
    def ports(self) -> dict[str, int]:
        return {f"{self.container_port}/tcp": HOST_PORT}


class InstallState(str, Enum):
    NOT_INSTALLED = "not_installed"
    DOWNLOADING = "downloading"
    INSTALLING = "installing"
    INSTALLED = "installed"
    FAILED = "failed"


class ContainerEngine(Protocol):
    """
    The contract for a container engine.
    Commands interact with the engine ONLY through this interface.
    """

    def pull_image(self, reference: str, sink: Optional[ProgressSink] = None) -> None:
        """
        Pull an image ("name:tag"), streaming engine status events to the sink.
        """
        ...

    def start_container(self, descriptor: ContainerDescriptor) -> int:
        """
        Create and start a container, then block until it stops running.
        Returns the container's exit status.
        """
        ...

    def stop_container(self, name: str) -> None:
        ...

    def remove_container(self, name: str, force: bool = True, remove_volumes: bool = False) -> None:
        ...
