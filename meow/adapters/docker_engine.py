"""
ContainerEngine implementation backed by the Docker SDK.
"""
import json
from typing import Optional

import docker
import requests
from docker.errors import DockerException
from docker.utils import parse_repository_tag

from meow.internal.errors import EngineError
from meow.internal.logging import get_logger
from meow.kernel.contracts import ContainerDescriptor, ContainerEngine
from meow.kernel.progress import ProgressSink

_ENGINE_ERRORS = (DockerException, requests.RequestException)


class DockerContainerClient(ContainerEngine):
    """
    Wraps a docker.DockerClient for the cat container lifecycle.

    Use it as a context manager so the engine connection is released exactly
    once, whatever happens inside the block.
    """

    def __init__(self, client: Optional[docker.DockerClient] = None):
        self.logger = get_logger(self.__class__.__name__)
        if client is None:
            try:
                client = docker.from_env()
            except DockerException as e:
                raise EngineError(f"Cannot connect to the Docker engine: {e}") from e
        self.client = client
        self._closed = False

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.client.close()

    def __enter__(self) -> "DockerContainerClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    def pull_image(self, reference: str, sink: Optional[ProgressSink] = None) -> None:
        repository, tag = parse_repository_tag(reference)
        self.logger.debug("Pulling image", image=reference)
        try:
            stream = self.client.api.pull(repository, tag=tag or "latest", stream=True, decode=True)
            # the engine does not announce a size for pulls
            if sink is not None:
                sink.on_transfer(0, b"")
            for event in stream:
                # failures after the HTTP handshake only show up as stream events
                if event.get("error"):
                    raise EngineError(f"Failed to pull {reference}: {event['error']}")
                if sink is not None:
                    sink.on_transfer(0, json.dumps(event).encode("utf-8"))
        except _ENGINE_ERRORS as e:
            raise EngineError(f"Failed to pull {reference}: {e}") from e

    # ------------------------------------------------------------------
    # Containers
    # ------------------------------------------------------------------

    def start_container(self, descriptor: ContainerDescriptor) -> int:
        self.logger.debug(
            "Creating container",
            name=descriptor.name,
            image=descriptor.image,
            binds=list(descriptor.binds),
        )
        try:
            container = self.client.containers.create(
                descriptor.image,
                name=descriptor.name,
                volumes=descriptor.binds,
                ports=descriptor.ports,
                tty=False,
            )
            container.start()
            self.logger.info("Container started", name=descriptor.name)
            result = container.wait(condition="not-running")
        except _ENGINE_ERRORS as e:
            raise EngineError(f"Failed to run container {descriptor.name}: {e}") from e

        error = result.get("Error")
        if error and error.get("Message"):
            raise EngineError(f"Container {descriptor.name} wait failed: {error['Message']}")

        status_code = result.get("StatusCode", 0)
        self.logger.info("Container stopped", name=descriptor.name, status_code=status_code)
        return status_code

    def stop_container(self, name: str) -> None:
        try:
            self.client.containers.get(name).stop()
        except _ENGINE_ERRORS as e:
            raise EngineError(f"Failed to stop container {name}: {e}") from e

    def remove_container(self, name: str, force: bool = True, remove_volumes: bool = False) -> None:
        try:
            self.client.containers.get(name).remove(force=force, v=remove_volumes)
        except _ENGINE_ERRORS as e:
            raise EngineError(f"Failed to remove container {name}: {e}") from e
